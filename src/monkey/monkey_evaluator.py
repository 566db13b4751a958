"""
Tree-walking evaluator for the Monkey language.

`Evaluator.eval(node, env)` dispatches on the node's `kind` to an `eval_<kind>`
method, in the same way the node variants are closed over in `monkey_ast`.
Every variant listed in `monkey_ast.NODE_TYPES` has a method here; a node kind
without one is a host bug and raises `NotImplementedError`.

Control flow is data, not host exceptions:
    - `return` produces a `ReturnValue` signal. Blocks stop and hand it upward;
      a call or the program unwraps it.
    - Runtime errors produce an `Error` value.
    - Every composite evaluation (program, block, prefix/infix operands,
      if-condition, let/return values, callee and arguments) stops at either
      signal and propagates it unchanged, so a `return` nested inside an
      expression leaves the enclosing function at once.

Statements that yield nothing (`let`, an empty block) evaluate to `None`.
Constructs that must produce a value (if-expressions, calls) turn that into
`NULL`.

Example:
    >>> from monkey.monkey_parser import Parser
    >>> evaluate(Parser.from_source("let a = 5; a * 2").parse_program()).inspect()
    '10'
"""

from __future__ import annotations

import logging

from monkey.monkey_ast import (
    ASTNode,
    BlockStatement,
    Boolean,
    CallExpression,
    Expression,
    ExpressionStatement,
    FunctionLiteral,
    Identifier,
    IfExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    PrefixExpression,
    Program,
    ReturnStatement,
)
from monkey.monkey_environment import Environment
from monkey.monkey_object import (
    FALSE,
    NULL,
    TRUE,
    Error,
    Function,
    Integer,
    Object,
    ReturnValue,
    int64_div,
    is_signal,
    is_truthy,
    native_bool_to_boolean,
    wrap_int64,
)
from monkey.monkey_object import Boolean as BooleanObject

logger = logging.getLogger(__name__)


class Evaluator:
    """Evaluates AST nodes against an `Environment`.

    The evaluator holds no state of its own; all bindings live in environments.
    """

    def eval(self, node: ASTNode, env: Environment) -> Object | None:
        """Evaluates `node` in `env`.

        Raises:
            NotImplementedError: If no `eval_<kind>` method exists for the node.
        """
        method = getattr(self, f"eval_{node.kind}", None)
        if method is None:
            raise NotImplementedError(
                f"No evaluator method for node kind '{node.kind}' "
                f"(line {node.line}, col {node.col})"
            )
        return method(node, env)

    def eval_expr(self, node: Expression, env: Environment) -> Object:
        result = self.eval(node, env)
        assert result is not None  # expressions always produce a value
        return result

    # Statements

    def eval_program(self, node: Program, env: Environment) -> Object | None:
        result: Object | None = None
        for statement in node.statements:
            result = self.eval(statement, env)
            if isinstance(result, ReturnValue):
                return result.value
            if isinstance(result, Error):
                return result
        return result

    def eval_block(self, node: BlockStatement, env: Environment) -> Object | None:
        result: Object | None = None
        for statement in node.statements:
            result = self.eval(statement, env)
            if is_signal(result):
                return result
        return result

    def eval_expression_statement(
        self, node: ExpressionStatement, env: Environment
    ) -> Object:
        return self.eval_expr(node.expression, env)

    def eval_let(self, node: LetStatement, env: Environment) -> Object | None:
        value = self.eval_expr(node.value, env)
        if is_signal(value):
            return value
        env.set(node.name.value, value)
        return None

    def eval_return(self, node: ReturnStatement, env: Environment) -> Object:
        value = self.eval_expr(node.value, env)
        if is_signal(value):
            return value
        return ReturnValue(value)

    # Literals and names

    def eval_integer(self, node: IntegerLiteral, env: Environment) -> Object:
        return Integer(node.value)

    def eval_boolean(self, node: Boolean, env: Environment) -> Object:
        return native_bool_to_boolean(node.value)

    def eval_identifier(self, node: Identifier, env: Environment) -> Object:
        value = env.get(node.value)
        if value is None:
            return Error(f"identifier not found: {node.value}")
        return value

    def eval_function(self, node: FunctionLiteral, env: Environment) -> Object:
        return Function(node.parameters, node.body, env)

    # Operators

    def eval_prefix(self, node: PrefixExpression, env: Environment) -> Object:
        right = self.eval_expr(node.right, env)
        if is_signal(right):
            return right
        return self.eval_prefix_operator(node.operator, right)

    def eval_prefix_operator(self, operator: str, right: Object) -> Object:
        if operator == "!":
            return FALSE if is_truthy(right) else TRUE
        if operator == "-":
            if not isinstance(right, Integer):
                return Error(f"unknown operator: -{right.type()}")
            return Integer(wrap_int64(-right.value))
        return Error(f"unknown operator: {operator}{right.type()}")

    def eval_infix(self, node: InfixExpression, env: Environment) -> Object:
        left = self.eval_expr(node.left, env)
        if is_signal(left):
            return left
        right = self.eval_expr(node.right, env)
        if is_signal(right):
            return right
        return self.eval_infix_operator(node.operator, left, right)

    def eval_infix_operator(self, operator: str, left: Object, right: Object) -> Object:
        if isinstance(left, Integer) and isinstance(right, Integer):
            return self.eval_integer_infix(operator, left, right)
        if left.type() != right.type():
            return Error(f"type mismatch: {left.type()} {operator} {right.type()}")
        if isinstance(left, BooleanObject) and operator == "==":
            return native_bool_to_boolean(left is right)
        if isinstance(left, BooleanObject) and operator == "!=":
            return native_bool_to_boolean(left is not right)
        return Error(f"unknown operator: {left.type()} {operator} {right.type()}")

    def eval_integer_infix(self, operator: str, left: Integer, right: Integer) -> Object:
        a, b = left.value, right.value
        if operator == "+":
            return Integer(wrap_int64(a + b))
        if operator == "-":
            return Integer(wrap_int64(a - b))
        if operator == "*":
            return Integer(wrap_int64(a * b))
        if operator == "/":
            if b == 0:
                return Error("division by zero")
            return Integer(int64_div(a, b))
        if operator == "<":
            return native_bool_to_boolean(a < b)
        if operator == ">":
            return native_bool_to_boolean(a > b)
        if operator == "==":
            return native_bool_to_boolean(a == b)
        if operator == "!=":
            return native_bool_to_boolean(a != b)
        return Error(f"unknown operator: {left.type()} {operator} {right.type()}")

    # Control flow and calls

    def eval_if(self, node: IfExpression, env: Environment) -> Object:
        condition = self.eval_expr(node.condition, env)
        if is_signal(condition):
            return condition

        result: Object | None
        if is_truthy(condition):
            result = self.eval(node.consequence, env)
        elif node.alternative is not None:
            result = self.eval(node.alternative, env)
        else:
            result = NULL
        return NULL if result is None else result

    def eval_call(self, node: CallExpression, env: Environment) -> Object:
        function = self.eval_expr(node.function, env)
        if is_signal(function):
            return function

        args = self.eval_expressions(node.arguments, env)
        if not isinstance(args, list):
            return args
        return self.apply_function(function, args)

    def eval_expressions(
        self, expressions: list[Expression], env: Environment
    ) -> list[Object] | Object:
        """Evaluates left to right, stopping at the first error or return signal."""
        values: list[Object] = []
        for expression in expressions:
            value = self.eval_expr(expression, env)
            if is_signal(value):
                return value
            values.append(value)
        return values

    def apply_function(self, function: Object, args: list[Object]) -> Object:
        if not isinstance(function, Function):
            return Error(f"not a function: {function.type()}")
        if len(args) != len(function.parameters):
            return Error(
                f"wrong number of arguments: want={len(function.parameters)}, got={len(args)}"
            )

        call_env = Environment.enclosed(function.env)
        for param, arg in zip(function.parameters, args):
            call_env.set(param.value, arg)
        logger.debug("calling %s with %d argument(s)", function.inspect(), len(args))

        result = self.eval(function.body, call_env)
        if isinstance(result, ReturnValue):
            return result.value
        return NULL if result is None else result


def evaluate(node: ASTNode, env: Environment | None = None) -> Object | None:
    """Evaluates `node` in `env`, or in a fresh top-level environment."""
    if env is None:
        env = Environment()
    return Evaluator().eval(node, env)
