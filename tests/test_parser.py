from typing import Any

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from monkey.monkey_ast import (
    BlockStatement,
    Boolean,
    CallExpression,
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
from monkey.monkey_lexer import Lexer, Token, keywords
from monkey.monkey_object import INT64_MAX
from monkey.monkey_parser import ParseError, Parser


def parse(source: str) -> Program:
    parser = Parser(Lexer.from_source(source))
    program = parser.parse_program()
    assert parser.errors == [], f"unexpected parser errors: {parser.errors}"
    return program


def parse_errors(source: str) -> tuple[Program, list[str]]:
    return Parser.from_source(source).parse()


def only_expression(source: str) -> Any:
    program = parse(source)
    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, ExpressionStatement)
    return stmt.expression


def normalize(node: Any) -> Any:
    """Drop source positions so trees from different texts compare structurally."""
    if isinstance(node, list):
        return [normalize(n) for n in node]
    if isinstance(node, dict):
        return {k: normalize(v) for k, v in node.items() if k not in ("line", "col")}
    return node


# Statements


def test_let_statements() -> None:
    program = parse("let x = 5;\nlet y = true;\nlet foobar = y;")
    assert len(program.statements) == 3
    expected = [("x", "5"), ("y", "true"), ("foobar", "y")]
    for stmt, (name, value) in zip(program.statements, expected):
        assert isinstance(stmt, LetStatement)
        assert stmt.token_literal() == "let"
        assert stmt.name.value == name
        assert str(stmt.value) == value


def test_return_statements() -> None:
    program = parse("return 5;\nreturn 10;\nreturn add(15);")
    assert [type(s) for s in program.statements] == [ReturnStatement] * 3
    assert [str(s) for s in program.statements] == [
        "return 5;",
        "return 10;",
        "return add(15);",
    ]


def test_trailing_semicolon_is_optional() -> None:
    assert str(parse("let x = 5")) == "let x = 5;"
    assert str(parse("return x")) == "return x;"
    assert str(parse("x")) == "x;"


def test_statement_positions() -> None:
    program = parse("let x = 5;\n  x;")
    assert (program.statements[0].line, program.statements[0].col) == (1, 1)
    assert (program.statements[1].line, program.statements[1].col) == (2, 3)


# Expressions


def test_identifier_expression() -> None:
    expr = only_expression("foobar;")
    assert isinstance(expr, Identifier)
    assert expr.value == "foobar"
    assert expr.token_literal() == "foobar"


def test_integer_literal_expression() -> None:
    expr = only_expression("5;")
    assert isinstance(expr, IntegerLiteral)
    assert expr.value == 5


def test_integer_literal_max_int64() -> None:
    expr = only_expression("9223372036854775807")
    assert expr.value == 2**63 - 1


def test_integer_literal_range_matches_runtime_range() -> None:
    expr = only_expression(str(INT64_MAX))
    assert expr.value == INT64_MAX
    _, errors = Parser.from_source(str(INT64_MAX + 1)).parse()
    assert errors == [f"could not parse '{INT64_MAX + 1}' as integer at 1:1"]


@pytest.mark.parametrize("source,value", [("true;", True), ("false;", False)])
def test_boolean_expression(source: str, value: bool) -> None:
    expr = only_expression(source)
    assert isinstance(expr, Boolean)
    assert expr.value is value


@pytest.mark.parametrize(
    "source,operator,right",
    [
        ("!5;", "!", "5"),
        ("-15;", "-", "15"),
        ("!foobar;", "!", "foobar"),
        ("-foobar;", "-", "foobar"),
        ("!true;", "!", "true"),
        ("!false;", "!", "false"),
    ],
)
def test_prefix_expressions(source: str, operator: str, right: str) -> None:
    expr = only_expression(source)
    assert isinstance(expr, PrefixExpression)
    assert expr.operator == operator
    assert str(expr.right) == right


@pytest.mark.parametrize(
    "source,left,operator,right",
    [
        ("5 + 5;", "5", "+", "5"),
        ("5 - 5;", "5", "-", "5"),
        ("5 * 5;", "5", "*", "5"),
        ("5 / 5;", "5", "/", "5"),
        ("5 > 5;", "5", ">", "5"),
        ("5 < 5;", "5", "<", "5"),
        ("5 == 5;", "5", "==", "5"),
        ("5 != 5;", "5", "!=", "5"),
        ("alice * bob;", "alice", "*", "bob"),
        ("true == true", "true", "==", "true"),
        ("true != false", "true", "!=", "false"),
    ],
)
def test_infix_expressions(source: str, left: str, operator: str, right: str) -> None:
    expr = only_expression(source)
    assert isinstance(expr, InfixExpression)
    assert str(expr.left) == left
    assert expr.operator == operator
    assert str(expr.right) == right


@pytest.mark.parametrize(
    "source,expected",
    [
        ("-a * b", "((-a) * b);"),
        ("!-a", "(!(-a));"),
        ("a + b + c", "((a + b) + c);"),
        ("a + b - c", "((a + b) - c);"),
        ("a * b * c", "((a * b) * c);"),
        ("a * b / c", "((a * b) / c);"),
        ("a + b / c", "(a + (b / c));"),
        ("a + b * c + d / e - f", "(((a + (b * c)) + (d / e)) - f);"),
        ("3 + 4; -5 * 5", "(3 + 4); ((-5) * 5);"),
        ("5 > 4 == 3 < 4", "((5 > 4) == (3 < 4));"),
        ("5 < 4 != 3 > 4", "((5 < 4) != (3 > 4));"),
        ("3 + 4 * 5 == 3 * 1 + 4 * 5", "((3 + (4 * 5)) == ((3 * 1) + (4 * 5)));"),
        ("true", "true;"),
        ("3 > 5 == false", "((3 > 5) == false);"),
        ("1 + (2 + 3) + 4", "((1 + (2 + 3)) + 4);"),
        ("(5 + 5) * 2", "((5 + 5) * 2);"),
        ("2 / (5 + 5)", "(2 / (5 + 5));"),
        ("-(5 + 5)", "(-(5 + 5));"),
        ("!(true == true)", "(!(true == true));"),
        ("a + add(b * c) + d", "((a + add((b * c))) + d);"),
        (
            "add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))",
            "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)));",
        ),
        ("add(a + b + c * d / f + g)", "add((((a + b) + ((c * d) / f)) + g));"),
        ("f(1)(2)", "f(1)(2);"),
        ("-f(1)", "(-f(1));"),
    ],
)
def test_operator_precedence(source: str, expected: str) -> None:
    assert str(parse(source)) == expected


def test_if_expression() -> None:
    expr = only_expression("if (x < y) { x }")
    assert isinstance(expr, IfExpression)
    assert str(expr.condition) == "(x < y)"
    assert isinstance(expr.consequence, BlockStatement)
    assert str(expr.consequence) == "{ x; }"
    assert expr.alternative is None


def test_if_else_expression() -> None:
    expr = only_expression("if (x < y) { x } else { y }")
    assert isinstance(expr, IfExpression)
    assert str(expr.consequence) == "{ x; }"
    assert expr.alternative is not None
    assert str(expr.alternative) == "{ y; }"


def test_function_literal() -> None:
    expr = only_expression("fn(x, y) { x + y; }")
    assert isinstance(expr, FunctionLiteral)
    assert [p.value for p in expr.parameters] == ["x", "y"]
    assert str(expr.body) == "{ (x + y); }"


@pytest.mark.parametrize(
    "source,params",
    [
        ("fn() {};", []),
        ("fn(x) {};", ["x"]),
        ("fn(x, y, z) {};", ["x", "y", "z"]),
    ],
)
def test_function_parameters(source: str, params: list[str]) -> None:
    expr = only_expression(source)
    assert [p.value for p in expr.parameters] == params


def test_call_expression() -> None:
    expr = only_expression("add(1, 2 * 3, 4 + 5);")
    assert isinstance(expr, CallExpression)
    assert str(expr.function) == "add"
    assert [str(a) for a in expr.arguments] == ["1", "(2 * 3)", "(4 + 5)"]
    assert expr.token_literal() == "("


def test_call_on_function_literal() -> None:
    expr = only_expression("fn(x) { x }(5)")
    assert isinstance(expr, CallExpression)
    assert isinstance(expr.function, FunctionLiteral)


def test_parser_accepts_token_list_without_eof() -> None:
    program, errors = Parser([Token("INT", "5", 1, 1)]).parse()
    assert errors == []
    assert str(program) == "5;"


def test_parser_stops_at_first_eof_token() -> None:
    tokens = [Token("INT", "5", 1, 1), Token("EOF", "", 1, 2), Token("INT", "6", 1, 3)]
    program, errors = Parser(tokens).parse()
    assert errors == []
    assert str(program) == "5;"


def test_empty_source() -> None:
    program, errors = parse_errors("")
    assert program.statements == []
    assert errors == []


# Errors


@pytest.mark.parametrize(
    "source,message",
    [
        ("let = 5;", "expected next token to be IDENT, got ASSIGN ('=') at 1:5"),
        ("let x 5;", "expected next token to be ASSIGN, got INT ('5') at 1:7"),
        ("let 838383;", "expected next token to be IDENT, got INT ('838383') at 1:5"),
        ("}", "no prefix parse function for RBRACE ('}') at 1:1"),
        ("5 + ;", "no prefix parse function for SEMICOLON (';') at 1:5"),
        ("let x = @;", "no prefix parse function for ILLEGAL ('@') at 1:9"),
        ("(1 + 2", "expected next token to be RPAREN, got EOF ('') at 1:7"),
        ("fn(x, 1) { x }", "expected next token to be IDENT, got INT ('1') at 1:7"),
        ("if x { 1 }", "expected next token to be LPAREN, got IDENT ('x') at 1:4"),
        (
            "99999999999999999999",
            "could not parse '99999999999999999999' as integer at 1:1",
        ),
        (
            "if (x) { 1",
            "expected RBRACE to close block opened at 1:8, got EOF at 1:11",
        ),
    ],
)
def test_error_messages(source: str, message: str) -> None:
    _, errors = parse_errors(source)
    assert errors == [message]


def test_resynchronizes_after_malformed_statement() -> None:
    program, errors = parse_errors("let = 5; let y = 10; y;")
    assert len(errors) == 1
    assert str(program) == "let y = 10; y;"


def test_one_error_per_malformed_statement() -> None:
    program, errors = parse_errors("let x 5; let y = 10; if (x { 1; }; y;")
    assert len(errors) == 2
    assert errors[1].startswith("expected next token to be RPAREN, got LBRACE")
    assert str(program) == "let y = 10; y;"


def test_resynchronizes_inside_block() -> None:
    program, errors = parse_errors("let f = fn(x) { x + ; 5 }; f(1);")
    assert errors == ["no prefix parse function for SEMICOLON (';') at 1:21"]
    assert str(program) == "let f = fn(x) { 5; }; f(1);"


def test_stray_closing_brace_is_skipped() -> None:
    program, errors = parse_errors("} 1;")
    assert len(errors) == 1
    assert str(program) == "1;"


def test_errors_are_in_source_order() -> None:
    _, errors = parse_errors("let = 1;\nlet 2;\nlet z = 3;")
    assert [e.rsplit(" at ", 1)[1] for e in errors] == ["1:5", "2:5"]


def test_parse_returns_copy_of_errors() -> None:
    parser = Parser.from_source("let = 1;")
    _, errors = parser.parse()
    errors.clear()
    assert len(parser.errors) == 1


def test_parse_error_carries_messages() -> None:
    err = ParseError("2 syntax error(s)", ["a", "b"])
    assert str(err) == "2 syntax error(s)"
    assert err.errors == ["a", "b"]
    assert ParseError("none").errors == []


# Round-trip: render -> re-lex -> re-parse yields the same tree

names = st.from_regex(r"[a-z_]{1,6}", fullmatch=True).filter(lambda s: s not in keywords)
atoms = st.one_of(
    names,
    st.integers(min_value=0, max_value=2**63 - 1).map(str),
    st.sampled_from(["true", "false"]),
)


@composite
def expressions(draw: Any, depth: int = 3) -> str:
    if depth <= 0:
        return draw(atoms)
    sub = expressions(depth=depth - 1)
    shape = draw(st.integers(min_value=0, max_value=7))
    if shape == 0:
        return draw(atoms)
    if shape == 1:
        return f"{draw(st.sampled_from(['!', '-']))}{draw(sub)}"
    if shape == 2:
        op = draw(st.sampled_from(["+", "-", "*", "/", "<", ">", "==", "!="]))
        return f"{draw(sub)} {op} {draw(sub)}"
    if shape == 3:
        return f"({draw(sub)})"
    if shape == 4:
        args = draw(st.lists(sub, max_size=3))
        callee = draw(st.one_of(names, sub.map(lambda e: f"({e})")))
        return f"{callee}({', '.join(args)})"
    if shape == 5:
        out = f"if ({draw(sub)}) {{ {draw(sub)} }}"
        if draw(st.booleans()):
            out += f" else {{ {draw(sub)} }}"
        return out
    params = draw(st.lists(names, max_size=3))
    return f"fn({', '.join(params)}) {{ {draw(sub)} }}"


@composite
def statements(draw: Any) -> str:
    kind = draw(st.sampled_from(["let", "return", "expr"]))
    expr = draw(expressions())
    if kind == "let":
        return f"let {draw(names)} = {expr};"
    if kind == "return":
        return f"return {expr};"
    return f"{expr};"


@settings(max_examples=200, deadline=None, suppress_health_check=[HealthCheck.too_slow])  # type: ignore[misc]
@given(st.lists(statements(), min_size=1, max_size=4))  # type: ignore[misc]
def test_rendering_round_trips(source_statements: list[str]) -> None:
    original = parse("\n".join(source_statements))
    rendered = str(original)
    reparsed = parse(rendered)
    assert normalize(reparsed.to_dict()) == normalize(original.to_dict())
    assert str(reparsed) == rendered


@given(st.text(max_size=80))  # type: ignore[misc]
def test_parser_never_raises(source: str) -> None:
    program, errors = parse_errors(source)
    assert isinstance(program, Program)
    assert all(isinstance(e, str) for e in errors)
