import os
from typing import Any

import pytest

from monkey.monkey_environment import Environment

# Start coverage in subprocesses when the CI harness asks for it
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

    # Nukes the teardown assertion that fails in act
    import coverage.collector

    def safe_stop(self: Any) -> None:
        if self in getattr(self, "_collectors", []):
            self._collectors.remove(self)

    coverage.collector.Collector.stop = safe_stop


@pytest.fixture  # type: ignore[misc]
def env() -> Environment:
    return Environment()
