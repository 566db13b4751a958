"""
Variable scopes for the Monkey evaluator.

An `Environment` maps names to runtime values and links to the scope it is
nested in. The REPL keeps one top-level environment across lines; each
function call gets a fresh one enclosed by the function's closure scope.
"""

from __future__ import annotations

from monkey.monkey_object import Object


class Environment:
    """A scope mapping identifiers to values, chained to its enclosing scope.

    Lookups walk outward through `outer`; bindings always land in the scope they
    are made in. A call creates a new environment enclosed by the callee's
    closure environment, which is what makes scoping lexical.
    """

    def __init__(self, outer: Environment | None = None) -> None:
        self.store: dict[str, Object] = {}
        self.outer = outer

    @classmethod
    def enclosed(cls, outer: Environment) -> Environment:
        return cls(outer)

    def get(self, name: str) -> Object | None:
        env: Environment | None = self
        while env is not None:
            if name in env.store:
                return env.store[name]
            env = env.outer
        return None

    def set(self, name: str, value: Object) -> Object:
        self.store[name] = value
        return value

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __repr__(self) -> str:
        names = ", ".join(sorted(self.store))
        return f"Environment([{names}], outer={'yes' if self.outer is not None else 'no'})"
