"""
Defines the abstract syntax tree (AST) node structure for the Monkey programming language.

Classes:
    ASTNode:
        Base of every node. Retains the token that introduced the node, renders
        the node back to canonical source text via `str()`, and serializes to
        plain dictionaries via `to_dict()`.

    Statement, Expression:
        Marker bases with no behavior of their own.

    Program, LetStatement, ReturnStatement, ExpressionStatement, BlockStatement,
    Identifier, IntegerLiteral, Boolean, PrefixExpression, InfixExpression,
    IfExpression, FunctionLiteral, CallExpression:
        The closed set of node variants produced by the parser. Each carries a
        `kind` tag the evaluator dispatches on.

    ASTDict:
        TypedDict shape of a serialized node, suitable for JSON output or
        structural comparison in tests.

Rendering:
    The canonical rendering fully parenthesizes prefix and infix expressions
    and terminates statements with `;`, so that re-lexing and re-parsing the
    rendering of any tree yields a structurally equal tree.

Example:
    >>> from monkey.monkey_parser import Parser
    >>> str(Parser.from_source("1 + 2 * 3").parse_program())
    '(1 + (2 * 3));'
"""

from typing import Any, TypedDict

from monkey.monkey_lexer import Token


class ASTDict(TypedDict):
    """
    TypedDict representation of an ASTNode used for serialization.

    Fields:
        kind (str): The node variant (e.g., "let", "infix", "call").
        line (int): Line number of the node's introducing token.
        col (int): Column number of the node's introducing token.
        fields (dict[str, Any]): The variant's own fields, with child nodes
            serialized recursively.
    """

    kind: str
    line: int
    col: int
    fields: dict[str, Any]


def _serialize(value: Any) -> Any:
    if isinstance(value, ASTNode):
        return value.to_dict()
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


class ASTNode:
    """
    Represents a node in the abstract syntax tree (AST) for the Monkey language.

    Subclasses declare a `kind` tag and the names of their `fields`; equality,
    `repr()` and `to_dict()` are driven by those declarations.

    Attributes:
        token (Token | None): The token that introduced this node.
        line (int): Source line number of the token, 0 when absent.
        col (int): Source column number of the token, 0 when absent.
    """

    kind: str = "node"
    fields: tuple[str, ...] = ()

    def __init__(self, token: Token | None = None) -> None:
        self.token = token

    @property
    def line(self) -> int:
        return self.token.line if self.token is not None else 0

    @property
    def col(self) -> int:
        return self.token.col if self.token is not None else 0

    def token_literal(self) -> str:
        return self.token.literal if self.token is not None else ""

    def __str__(self) -> str:  # pragma: no cover
        raise NotImplementedError(f"No rendering for node kind '{self.kind}'")

    def __repr__(self) -> str:
        parts = [self.kind]
        for name in self.fields:
            parts.append(f"{name}={getattr(self, name)!r}")
        return f"{type(self).__name__}({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ASTNode):
            return False
        return (
            self.kind == other.kind
            and self.line == other.line
            and self.col == other.col
            and all(getattr(self, f) == getattr(other, f) for f in self.fields)
        )

    def to_dict(self) -> ASTDict:
        return {
            "kind": self.kind,
            "line": self.line,
            "col": self.col,
            "fields": {name: _serialize(getattr(self, name)) for name in self.fields},
        }


class Statement(ASTNode):
    pass


class Expression(ASTNode):
    pass


class Program(ASTNode):
    """Root node: the ordered statements of a source text."""

    kind = "program"
    fields = ("statements",)

    def __init__(self, statements: list[Statement] | None = None) -> None:
        super().__init__(None)
        self.statements: list[Statement] = statements or []

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def __str__(self) -> str:
        return " ".join(str(s) for s in self.statements)


class Identifier(Expression):
    kind = "identifier"
    fields = ("value",)

    def __init__(self, token: Token | None, value: str) -> None:
        super().__init__(token)
        self.value = value

    def __str__(self) -> str:
        return self.value


class LetStatement(Statement):
    """`let <name> = <value>;`"""

    kind = "let"
    fields = ("name", "value")

    def __init__(self, token: Token | None, name: Identifier, value: Expression) -> None:
        super().__init__(token)
        self.name = name
        self.value = value

    def __str__(self) -> str:
        return f"let {self.name} = {self.value};"


class ReturnStatement(Statement):
    """`return <value>;`"""

    kind = "return"
    fields = ("value",)

    def __init__(self, token: Token | None, value: Expression) -> None:
        super().__init__(token)
        self.value = value

    def __str__(self) -> str:
        return f"return {self.value};"


class ExpressionStatement(Statement):
    """A statement consisting solely of one expression, e.g. `x + 10;`."""

    kind = "expression_statement"
    fields = ("expression",)

    def __init__(self, token: Token | None, expression: Expression) -> None:
        super().__init__(token)
        self.expression = expression

    def __str__(self) -> str:
        return f"{self.expression};"


class BlockStatement(Statement):
    """A `{ ... }` enclosed list of statements; the body of `if` and `fn`."""

    kind = "block"
    fields = ("statements",)

    def __init__(self, token: Token | None, statements: list[Statement] | None = None) -> None:
        super().__init__(token)
        self.statements: list[Statement] = statements or []

    def __str__(self) -> str:
        if not self.statements:
            return "{ }"
        return "{ " + " ".join(str(s) for s in self.statements) + " }"


class IntegerLiteral(Expression):
    kind = "integer"
    fields = ("value",)

    def __init__(self, token: Token | None, value: int) -> None:
        super().__init__(token)
        self.value = value

    def __str__(self) -> str:
        return str(self.value)


class Boolean(Expression):
    kind = "boolean"
    fields = ("value",)

    def __init__(self, token: Token | None, value: bool) -> None:
        super().__init__(token)
        self.value = value

    def __str__(self) -> str:
        return "true" if self.value else "false"


class PrefixExpression(Expression):
    """`<operator><right>`, e.g. `!ok` or `-5`."""

    kind = "prefix"
    fields = ("operator", "right")

    def __init__(self, token: Token | None, operator: str, right: Expression) -> None:
        super().__init__(token)
        self.operator = operator
        self.right = right

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


class InfixExpression(Expression):
    """`<left> <operator> <right>`, e.g. `5 * 5`."""

    kind = "infix"
    fields = ("left", "operator", "right")

    def __init__(
        self, token: Token | None, left: Expression, operator: str, right: Expression
    ) -> None:
        super().__init__(token)
        self.left = left
        self.operator = operator
        self.right = right

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


class IfExpression(Expression):
    """`if (<condition>) <consequence> else <alternative>`; the else branch is optional."""

    kind = "if"
    fields = ("condition", "consequence", "alternative")

    def __init__(
        self,
        token: Token | None,
        condition: Expression,
        consequence: BlockStatement,
        alternative: BlockStatement | None = None,
    ) -> None:
        super().__init__(token)
        self.condition = condition
        self.consequence = consequence
        self.alternative = alternative

    def __str__(self) -> str:
        out = f"if ({self.condition}) {self.consequence}"
        if self.alternative is not None:
            out += f" else {self.alternative}"
        return out


class FunctionLiteral(Expression):
    """`fn(<parameters>) <body>`."""

    kind = "function"
    fields = ("parameters", "body")

    def __init__(
        self, token: Token | None, parameters: list[Identifier], body: BlockStatement
    ) -> None:
        super().__init__(token)
        self.parameters = parameters
        self.body = body

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"fn({params}) {self.body}"


class CallExpression(Expression):
    """`<function>(<arguments>)`; the token is the `(`."""

    kind = "call"
    fields = ("function", "arguments")

    def __init__(
        self, token: Token | None, function: Expression, arguments: list[Expression]
    ) -> None:
        super().__init__(token)
        self.function = function
        self.arguments = arguments

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.function}({args})"


NODE_TYPES: tuple[type[ASTNode], ...] = (
    Program,
    LetStatement,
    ReturnStatement,
    ExpressionStatement,
    BlockStatement,
    Identifier,
    IntegerLiteral,
    Boolean,
    PrefixExpression,
    InfixExpression,
    IfExpression,
    FunctionLiteral,
    CallExpression,
)
"""Every concrete node variant; the evaluator must handle each `kind` listed here."""
