"""
Tests for expression parsing: literals, precedence, associativity and calls.
"""

import decimal

import pytest

import carbonparse
from carbonparse import ast
import carbontest


@carbontest.params(
    "code kind value",
    integer=("42", "integer", 42),
    zero=("0", "integer", 0),
    float=("3.14", "float", decimal.Decimal("3.14")),
    string=('"Hello, World!"', "string", "Hello, World!"),
    empty_string=('""', "string", ""),
    escapes=(r'"a\"b\\c\n"', "string", 'a"b\\c\n'),
    true=("true", "boolean", True),
    false=("false", "boolean", False),
)
def test_literals(key, code, kind, value):
    result = carbontest.parse_value(code, ast.Literal)
    assert result.kind == kind
    assert result.value == value
    assert type(result.value) is type(value)


def test_identifier():
    result = carbontest.parse_value("count_2", ast.Identifier)
    assert result.name == "count_2"
    assert result.span == (0, 7)


def test_keyword_prefixed_identifier():
    assert carbontest.parse_value("trueish", ast.Identifier).name == "trueish"


@carbontest.params(
    "code op",
    add=("a + b", "+"),
    sub=("a - b", "-"),
    mul=("a * b", "*"),
    div=("a / b", "/"),
    mod=("a % b", "%"),
    eq=("a == b", "=="),
    ne=("a != b", "!="),
    lt=("a < b", "<"),
    le=("a <= b", "<="),
    gt=("a > b", ">"),
    ge=("a >= b", ">="),
)
def test_binary_operators(key, code, op):
    result = carbontest.parse_value(code, ast.BinaryExpr)
    assert result.op == op
    assert result.left.matches(ast.Identifier("a"))
    assert result.right.matches(ast.Identifier("b"))


def test_left_associative():
    result = carbontest.parse_value("1 - 2 - 3", ast.BinaryExpr)
    expected = ast.BinaryExpr(
        "-",
        ast.BinaryExpr("-", ast.Literal("integer", 1), ast.Literal("integer", 2)),
        ast.Literal("integer", 3),
    )
    assert result.matches(expected)


def test_comparison_chains_to_the_left():
    result = carbontest.parse_value("a < b == c", ast.BinaryExpr)
    assert result.op == "=="
    assert result.left.op == "<"


@carbontest.params(
    "code outer inner side",
    mul_after_add=("a + b * c", "+", "*", "right"),
    mul_before_add=("a * b + c", "+", "*", "left"),
    div_after_sub=("a - b / c", "-", "/", "right"),
    add_in_compare=("a + b > c", ">", "+", "left"),
    mul_in_compare=("a == b % c", "==", "%", "right"),
)
def test_precedence(key, code, outer, inner, side):
    result = carbontest.parse_value(code, ast.BinaryExpr)
    assert result.op == outer
    nested = result.left if side == "left" else result.right
    assert isinstance(nested, ast.BinaryExpr)
    assert nested.op == inner


def test_parentheses_override_precedence():
    result = carbontest.parse_value("(a + b) * c", ast.BinaryExpr)
    assert result.op == "*"
    assert result.left.op == "+"


def test_parentheses_are_transparent():
    result = carbontest.parse_value("((x))", ast.Identifier)
    assert result.name == "x"
    assert result.span == (2, 3)


def test_complex_expression():
    result = carbontest.parse_value("(a + b) * c - d / e", ast.BinaryExpr)
    assert result.op == "-"
    assert result.left.op == "*"
    assert result.right.op == "/"


def test_binary_spans():
    code = "1 + 2 * 3"
    result = carbontest.parse_value(code, ast.BinaryExpr)
    assert result.span == (0, 9)
    assert result.right.span == (4, 9)
    assert code[result.right.left.span[0]:result.right.left.span[1]] == "2"


class TestFunctionCall:

    def test_no_args(self):
        result = carbontest.parse_value("now()", ast.FunctionCall)
        assert result.callee == "now"
        assert result.args == []

    def test_args(self):
        result = carbontest.parse_value("calculate(x, y + 1, \"s\")", ast.FunctionCall)
        assert result.callee == "calculate"
        assert len(result.args) == 3
        assert isinstance(result.args[1], ast.BinaryExpr)
        assert result.args[2].matches(ast.Literal("string", "s"))

    def test_nested(self):
        result = carbontest.parse_value("f(g(1), h())", ast.FunctionCall)
        assert [arg.callee for arg in result.args] == ["g", "h"]

    def test_call_in_expression(self):
        result = carbontest.parse_value("f(1) * 2", ast.BinaryExpr)
        assert isinstance(result.left, ast.FunctionCall)

    def test_space_before_paren(self):
        result = carbontest.parse_value("f (1)", ast.FunctionCall)
        assert result.callee == "f"


@carbontest.params(
    "code",
    dangling=("1 +",),
    empty_parens=("()",),
    trailing_comma=("f(1,)",),
    unary_minus=("-1",),
    leading_dot=(".5",),
    double_op=("a + * b",),
    assignment=("a = b",),
)
def test_invalid_expressions(key, code):
    with pytest.raises(carbonparse.ParseError):
        carbonparse.parse_expr(code)


def test_build_ast_is_repeatable():
    tree = carbonparse.parse_expression("f(a, 2) + 3 * (b - 1)")
    first = carbonparse.build_ast(tree)
    second = carbonparse.build_ast(tree)
    assert first is not second
    assert first.matches(second)
    assert [(kind, span) for kind, span, kids in first.walk()] == [
        (kind, span) for kind, span, kids in second.walk()
    ]


def test_build_ast_rejects_unknown_rules():
    node = carbonparse.ParseNode("mystery", 0, 0)
    with pytest.raises(ValueError, match="mystery"):
        carbonparse.build_ast(node)


@carbontest.params(
    "code value",
    raw_carriage_return=('"a\rb"', "a\rb"),
    raw_nul=('"a\0b"', "a\0b"),
    raw_tab=('"a\tb"', "a\tb"),
    nul_then_digit=(r'"\01"', "\x001"),
    all_escapes=(r'"\"\\\n\r\t\0"', '"\\\n\r\t\0'),
    backslash_then_n=(r'"\\n"', "\\n"),
)
def test_string_contents(key, code, value):
    assert carbontest.parse_value(code, ast.Literal).value == value


def test_string_with_raw_carriage_return_in_program():
    program = carbonparse.parse_module('var s: String = "a\rb";')
    assert program.items[0].initializer.value == "a\rb"


def test_binary_span_includes_parentheses():
    code = "(a + b) * c"
    result = carbontest.parse_value(code, ast.BinaryExpr)
    assert result.span == (0, len(code))
    assert result.left.span == (1, 6)
    code = "x - (y)"
    assert carbontest.parse_value(code, ast.BinaryExpr).span == (0, len(code))


@carbontest.params(
    "start code",
    type_name=("type_name", "i32"),
    parameter_list=("parameter_list", "a: i32, b: bool"),
    argument_list=("argument_list", "1, 2"),
)
def test_build_ast_rejects_helper_rules(key, start, code):
    tree = carbonparse.parse(code, start=start)
    with pytest.raises(ValueError, match="has no AST node"):
        carbonparse.build_ast(tree)
