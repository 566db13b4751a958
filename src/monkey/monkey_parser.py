"""
Monkey Language Parser

Parses a Monkey token stream into an abstract syntax tree rooted at a `Program`.

Expression parsing is operator-precedence (Pratt) parsing: every token kind that
may start an expression registers a prefix parse function, every binary operator
registers an infix parse function together with a fixed precedence. Statement
parsing is recursive descent on the leading keyword (`let`, `return`, or a bare
expression).

Supported Constructs
--------------------
- Statements: `let x = <expr>;`, `return <expr>;`, `<expr>;` (`;` optional)
- Literals: identifiers, integers, `true`, `false`
- Prefix operators: `!`, `-`
- Infix operators (lowest to highest): `== !=`, `< >`, `+ -`, `* /`, call `(`
- Grouping parentheses, `if (...) { ... } else { ... }`, `fn(a, b) { ... }`

Parser Behavior
---------------
- Never aborts on a malformed statement. The first problem in a statement is
  recorded in `Parser.errors`, tokens are skipped past the statement's `;`
  (or up to the enclosing block's `}`), and parsing resumes.
- Error messages name the offending token's kind, literal and `line:col`.

Entry Points
------------
- `parse_program()`: Parse the whole token stream into a `Program`.
- `parse()`: Same, returning the `(Program, errors)` pair.
- `Parser.from_source()`: Lex and parse a source string in one step.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from monkey.monkey_ast import (
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
    Statement,
)
from monkey.monkey_constants import (
    ASSIGN,
    ASTERISK,
    BANG,
    COMMA,
    ELSE,
    EOF,
    EQ,
    FALSE,
    FUNCTION,
    GT,
    IDENT,
    IF,
    INT,
    LBRACE,
    LET,
    LPAREN,
    LT,
    MINUS,
    NOT_EQ,
    PLUS,
    RBRACE,
    RETURN,
    RPAREN,
    SEMICOLON,
    SLASH,
    TRUE,
)
from monkey.monkey_lexer import Lexer, Token
from monkey.monkey_object import INT64_MAX

logger = logging.getLogger(__name__)

# Precedence levels, lowest to highest
LOWEST = 1
EQUALS = 2
LESSGREATER = 3
SUM = 4
PRODUCT = 5
PREFIX = 6
CALL = 7

precedences: dict[str, int] = {
    EQ: EQUALS,
    NOT_EQ: EQUALS,
    LT: LESSGREATER,
    GT: LESSGREATER,
    PLUS: SUM,
    MINUS: SUM,
    SLASH: PRODUCT,
    ASTERISK: PRODUCT,
    LPAREN: CALL,
}

PrefixParseFn = Callable[[], Expression]
InfixParseFn = Callable[[Expression], Expression]


class ParseError(Exception):
    """Raised by front ends that refuse to run a program with syntax errors.

    The parser itself never raises this; it collects messages in `Parser.errors`.

    Attributes:
        errors (list[str]): The parser's accumulated error messages, in source order.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class Parser:
    """
    Monkey Parser Class

    Pulls tokens one at a time from a lexer (or any iterable of tokens) and builds
    the AST. Holds exactly two tokens of state: the current token and the next one.

    Attributes
    ----------
    cur_token : Token
        The token under examination.
    peek_token : Token
        The token after `cur_token`.
    errors : list[str]
        Syntax errors recorded so far, one per malformed statement.
    prefix_parse_fns : dict[str, PrefixParseFn]
        Token kind to the function parsing an expression that starts with it.
    infix_parse_fns : dict[str, InfixParseFn]
        Token kind to the function parsing a binary expression around it.
    """

    def __init__(self, tokens: Lexer | Iterable[Token]) -> None:
        self._tokens = iter(tokens)
        self._last: Token = Token(EOF, "", 1, 1)
        self._eof: Token | None = None
        self.errors: list[str] = []

        self.prefix_parse_fns: dict[str, PrefixParseFn] = {
            IDENT: self.parse_identifier,
            INT: self.parse_integer_literal,
            TRUE: self.parse_boolean,
            FALSE: self.parse_boolean,
            BANG: self.parse_prefix_expression,
            MINUS: self.parse_prefix_expression,
            LPAREN: self.parse_grouped_expression,
            IF: self.parse_if_expression,
            FUNCTION: self.parse_function_literal,
        }
        self.infix_parse_fns: dict[str, InfixParseFn] = {
            PLUS: self.parse_infix_expression,
            MINUS: self.parse_infix_expression,
            SLASH: self.parse_infix_expression,
            ASTERISK: self.parse_infix_expression,
            EQ: self.parse_infix_expression,
            NOT_EQ: self.parse_infix_expression,
            LT: self.parse_infix_expression,
            GT: self.parse_infix_expression,
            LPAREN: self.parse_call_expression,
        }

        self.cur_token = self._pull()
        self.peek_token = self._pull()

    @classmethod
    def from_source(cls, source: str) -> Parser:
        return cls(Lexer.from_source(source))

    # Token cursor

    def _pull(self) -> Token:
        if self._eof is not None:
            return self._eof
        tok = next(self._tokens, None)
        if tok is None:
            # Source ran out without an EOF token; synthesize one after the last token.
            tok = Token(EOF, "", self._last.line, self._last.col + len(self._last.literal))
        if tok.type == EOF:
            self._eof = tok
        self._last = tok
        return tok

    def next_token(self) -> None:
        self.cur_token = self.peek_token
        self.peek_token = self._pull()

    def cur_token_is(self, type_: str) -> bool:
        return self.cur_token.type == type_

    def peek_token_is(self, type_: str) -> bool:
        return self.peek_token.type == type_

    def expect_peek(self, type_: str) -> None:
        """Advances if the next token has kind `type_`, otherwise raises SyntaxError."""
        if self.peek_token_is(type_):
            self.next_token()
            return
        tok = self.peek_token
        raise SyntaxError(
            f"expected next token to be {type_}, got {tok.type} ({tok.literal!r}) at {tok.position}"
        )

    def peek_precedence(self) -> int:
        return precedences.get(self.peek_token.type, LOWEST)

    def cur_precedence(self) -> int:
        return precedences.get(self.cur_token.type, LOWEST)

    # Program and statements

    def parse_program(self) -> Program:
        """Parse the full token stream; syntax errors are collected in `self.errors`."""
        program = Program(self._parse_statement_list(EOF))
        logger.debug(
            "parsed %d statement(s) with %d error(s)",
            len(program.statements),
            len(self.errors),
        )
        return program

    def parse(self) -> tuple[Program, list[str]]:
        program = self.parse_program()
        return program, list(self.errors)

    def _parse_statement_list(self, terminator: str) -> list[Statement]:
        statements: list[Statement] = []
        while not self.cur_token_is(terminator) and not self.cur_token_is(EOF):
            try:
                statements.append(self.parse_statement())
                self.next_token()
            except SyntaxError as e:
                self.errors.append(str(e))
                logger.debug("syntax error recorded: %s", e)
                self._synchronize(terminator)
        return statements

    def _synchronize(self, terminator: str) -> None:
        """Skips the rest of a malformed statement.

        Stops after the first `;` or unmatched `}` outside nested braces, or on
        `terminator` (the enclosing block's `}`) without consuming it.
        """
        depth = 0
        while not self.cur_token_is(EOF):
            if depth == 0 and self.cur_token_is(terminator):
                return
            if depth == 0 and self.cur_token_is(SEMICOLON):
                self.next_token()
                return
            if self.cur_token_is(LBRACE):
                depth += 1
            elif self.cur_token_is(RBRACE):
                if depth == 0:
                    self.next_token()
                    return
                depth -= 1
            self.next_token()

    def parse_statement(self) -> Statement:
        if self.cur_token_is(LET):
            return self.parse_let_statement()
        if self.cur_token_is(RETURN):
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> LetStatement:
        tok = self.cur_token
        self.expect_peek(IDENT)
        name = Identifier(self.cur_token, self.cur_token.literal)
        self.expect_peek(ASSIGN)
        self.next_token()
        value = self.parse_expression(LOWEST)
        if self.peek_token_is(SEMICOLON):
            self.next_token()
        return LetStatement(tok, name, value)

    def parse_return_statement(self) -> ReturnStatement:
        tok = self.cur_token
        self.next_token()
        value = self.parse_expression(LOWEST)
        if self.peek_token_is(SEMICOLON):
            self.next_token()
        return ReturnStatement(tok, value)

    def parse_expression_statement(self) -> ExpressionStatement:
        tok = self.cur_token
        expression = self.parse_expression(LOWEST)
        if self.peek_token_is(SEMICOLON):
            self.next_token()
        return ExpressionStatement(tok, expression)

    def parse_block_statement(self) -> BlockStatement:
        """Parse `{ ... }`; on return `cur_token` is the closing brace."""
        tok = self.cur_token
        self.next_token()
        statements = self._parse_statement_list(RBRACE)
        if not self.cur_token_is(RBRACE):
            cur = self.cur_token
            raise SyntaxError(
                f"expected RBRACE to close block opened at {tok.position}, got {cur.type} at {cur.position}"
            )
        return BlockStatement(tok, statements)

    # Expressions

    def parse_expression(self, precedence: int) -> Expression:
        tok = self.cur_token
        prefix = self.prefix_parse_fns.get(tok.type)
        if prefix is None:
            raise SyntaxError(
                f"no prefix parse function for {tok.type} ({tok.literal!r}) at {tok.position}"
            )
        left = prefix()

        while not self.peek_token_is(SEMICOLON) and precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:  # pragma: no cover
                return left
            self.next_token()
            left = infix(left)

        return left

    def parse_identifier(self) -> Expression:
        return Identifier(self.cur_token, self.cur_token.literal)

    def parse_integer_literal(self) -> Expression:
        tok = self.cur_token
        value = int(tok.literal)
        if value > INT64_MAX:
            raise SyntaxError(f"could not parse {tok.literal!r} as integer at {tok.position}")
        return IntegerLiteral(tok, value)

    def parse_boolean(self) -> Expression:
        return Boolean(self.cur_token, self.cur_token_is(TRUE))

    def parse_prefix_expression(self) -> Expression:
        tok = self.cur_token
        self.next_token()
        right = self.parse_expression(PREFIX)
        return PrefixExpression(tok, tok.literal, right)

    def parse_infix_expression(self, left: Expression) -> Expression:
        tok = self.cur_token
        precedence = self.cur_precedence()
        self.next_token()
        right = self.parse_expression(precedence)
        return InfixExpression(tok, left, tok.literal, right)

    def parse_grouped_expression(self) -> Expression:
        self.next_token()
        expression = self.parse_expression(LOWEST)
        self.expect_peek(RPAREN)
        return expression

    def parse_if_expression(self) -> Expression:
        tok = self.cur_token
        self.expect_peek(LPAREN)
        self.next_token()
        condition = self.parse_expression(LOWEST)
        self.expect_peek(RPAREN)
        self.expect_peek(LBRACE)
        consequence = self.parse_block_statement()

        alternative = None
        if self.peek_token_is(ELSE):
            self.next_token()
            self.expect_peek(LBRACE)
            alternative = self.parse_block_statement()

        return IfExpression(tok, condition, consequence, alternative)

    def parse_function_literal(self) -> Expression:
        tok = self.cur_token
        self.expect_peek(LPAREN)
        parameters = self.parse_function_parameters()
        self.expect_peek(LBRACE)
        body = self.parse_block_statement()
        return FunctionLiteral(tok, parameters, body)

    def parse_function_parameters(self) -> list[Identifier]:
        identifiers: list[Identifier] = []
        if self.peek_token_is(RPAREN):
            self.next_token()
            return identifiers

        self.expect_peek(IDENT)
        identifiers.append(Identifier(self.cur_token, self.cur_token.literal))
        while self.peek_token_is(COMMA):
            self.next_token()
            self.expect_peek(IDENT)
            identifiers.append(Identifier(self.cur_token, self.cur_token.literal))

        self.expect_peek(RPAREN)
        return identifiers

    def parse_call_expression(self, function: Expression) -> Expression:
        tok = self.cur_token
        arguments = self.parse_expression_list(RPAREN)
        return CallExpression(tok, function, arguments)

    def parse_expression_list(self, end: str) -> list[Expression]:
        args: list[Expression] = []
        if self.peek_token_is(end):
            self.next_token()
            return args

        self.next_token()
        args.append(self.parse_expression(LOWEST))
        while self.peek_token_is(COMMA):
            self.next_token()
            self.next_token()
            args.append(self.parse_expression(LOWEST))

        self.expect_peek(end)
        return args
