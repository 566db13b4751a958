"""
Runtime values of the Monkey language.

Every value the evaluator produces is an `Object` with a `type()` name and an
`inspect()` rendering. `ReturnValue` and `Error` are signal objects: they carry
control flow (a pending `return`, a runtime error) up through the evaluator
rather than user-visible data.

Classes:
    - Null, Boolean, Integer, Function: user-visible values
    - ReturnValue, Error: signal values

Singletons:
    NULL, TRUE, FALSE are process-wide and compared by identity. Integers are
    compared by value.

Integers follow signed 64-bit semantics: arithmetic wraps around on overflow
and division truncates toward zero.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from monkey.monkey_ast import BlockStatement, Identifier

if TYPE_CHECKING:  # pragma: no cover
    from monkey.monkey_environment import Environment

NULL_OBJ = "NULL"
BOOLEAN_OBJ = "BOOLEAN"
INTEGER_OBJ = "INTEGER"
RETURN_VALUE_OBJ = "RETURN_VALUE"
ERROR_OBJ = "ERROR"
FUNCTION_OBJ = "FUNCTION"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def wrap_int64(value: int) -> int:
    """Folds an arbitrary Python int into the signed 64-bit range, two's-complement style."""
    return (value - INT64_MIN) % 2**64 + INT64_MIN


def int64_div(left: int, right: int) -> int:
    """Integer division truncating toward zero. `right` must be non-zero."""
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    return wrap_int64(quotient)


class Object:
    """Base of all runtime values."""

    def type(self) -> str:  # pragma: no cover
        raise NotImplementedError

    def inspect(self) -> str:  # pragma: no cover
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.inspect()})"


class Null(Object):
    """Absence of a value. Use the `NULL` singleton."""

    def type(self) -> str:
        return NULL_OBJ

    def inspect(self) -> str:
        return "null"


class Boolean(Object):
    """Use the `TRUE`/`FALSE` singletons via `native_bool_to_boolean`."""

    def __init__(self, value: bool) -> None:
        self.value = value

    def type(self) -> str:
        return BOOLEAN_OBJ

    def inspect(self) -> str:
        return "true" if self.value else "false"


class Integer(Object):
    def __init__(self, value: int) -> None:
        self.value = value

    def type(self) -> str:
        return INTEGER_OBJ

    def inspect(self) -> str:
        return str(self.value)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Integer) and self.value == other.value

    def __hash__(self) -> int:
        return hash((INTEGER_OBJ, self.value))


class ReturnValue(Object):
    """Wraps the value of a `return` statement while it unwinds to the enclosing call."""

    def __init__(self, value: Object) -> None:
        self.value = value

    def type(self) -> str:
        return RETURN_VALUE_OBJ

    def inspect(self) -> str:
        return self.value.inspect()


class Error(Object):
    """A runtime error. Propagates unchanged to the top of the evaluation."""

    def __init__(self, message: str) -> None:
        self.message = message

    def type(self) -> str:
        return ERROR_OBJ

    def inspect(self) -> str:
        return f"ERROR: {self.message}"

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Error) and self.message == other.message

    def __hash__(self) -> int:
        return hash((ERROR_OBJ, self.message))


class Function(Object):
    """A closure: parameters and body from a function literal, plus its defining environment.

    Attributes:
        parameters (list[Identifier]): Parameter names, in order.
        body (BlockStatement): The function body, shared with the defining AST.
        env (Environment): The environment active where the literal was evaluated.
    """

    def __init__(
        self, parameters: list[Identifier], body: BlockStatement, env: Environment
    ) -> None:
        self.parameters = parameters
        self.body = body
        self.env = env

    def type(self) -> str:
        return FUNCTION_OBJ

    def inspect(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"fn({params}) {self.body}"


NULL = Null()
TRUE = Boolean(True)
FALSE = Boolean(False)


def native_bool_to_boolean(value: bool) -> Boolean:
    return TRUE if value else FALSE


def is_truthy(obj: Object) -> bool:
    """Only `false` and `null` are falsy; every other value, including 0, is truthy."""
    return obj is not NULL and obj is not FALSE


def is_error(obj: Object | None) -> bool:
    return isinstance(obj, Error)


def is_signal(obj: Object | None) -> bool:
    """True for the values that stop evaluation: an `Error` or a pending `ReturnValue`."""
    return isinstance(obj, (Error, ReturnValue))
