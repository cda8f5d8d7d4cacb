"""
Tests for parse failures and their human readable diagnostics.

Only the furthest failure of a parse is reported, with every label that was
attempted at that offset and a description of what was found there.
"""

import pytest

import carbonparse
import carbontest


def test_missing_function_name():
    error = carbontest.parse_fail("fn () {}")
    assert error.position == 3
    assert error.expected == {"identifier"}
    assert error.found == '"("'
    assert (error.line, error.column) == (1, 4)
    assert error.message == 'expected identifier, found "("'
    assert not error.at_end


def test_trailing_input():
    error = carbontest.parse_fail("var x: i32; }")
    assert error.position == 12
    assert error.found == '"}"'
    assert carbonparse.END_OF_INPUT in error.expected
    assert '"fn"' in error.expected
    assert '"var"' in error.expected


def test_missing_semicolon():
    error = carbontest.parse_fail("var x: i32 = 42")
    assert error.position == 15
    assert error.at_end
    assert '";"' in error.expected


def test_error_on_later_line():
    code = "fn main() {\n    var x: i32 = ;\n}"
    error = carbontest.parse_fail(code)
    assert (error.line, error.column) == (2, 18)
    assert error.line_text == "    var x: i32 = ;"
    assert error.found == '";"'


def test_unterminated_block_comment():
    code = "/* never closes\nvar x: i32;"
    error = carbontest.parse_fail(code)
    assert error.unterminated == "block comment"
    assert error.position == len(code)
    assert error.opened_at == 0
    assert error.found == carbonparse.END_OF_INPUT
    assert '"*/"' in error.expected
    assert error.message.startswith("unterminated block comment starting at line 1, column 1")


def test_unterminated_comment_after_code():
    code = "var x: i32;\n  /* oops"
    error = carbontest.parse_fail(code)
    assert error.unterminated == "block comment"
    assert error.opened_at == 14


def test_unterminated_string():
    code = 'var s: String = "abc;'
    error = carbontest.parse_fail(code)
    assert error.unterminated == "string"
    assert error.opened_at == 16
    assert error.position == len(code)
    assert error.at_end
    assert "unterminated string starting at line 1, column 17" in error.message


def test_string_with_newline_is_unterminated():
    error = carbontest.parse_fail('var s: String = "abc\n";')
    assert error.position == 16
    assert error.unterminated is None
    assert "string" in error.expected


def test_unterminated_block():
    error = carbontest.parse_fail("fn broken() {")
    assert error.unterminated == "block"
    assert error.opened_at is None
    assert error.at_end
    assert '"}"' in error.expected
    assert error.message.startswith("unterminated block: expected one of")


def test_unterminated_parenthesis():
    error = carbontest.parse_fail("(1 + 2", start="expression")
    assert error.unterminated == "parenthesis"
    assert '")"' in error.expected


def test_missing_closer_before_more_text():
    """A missing brace with text after it is not an end of input problem."""
    error = carbontest.parse_fail("fn f() { return 1; fn g() {}")
    assert error.unterminated is None
    assert error.found == '"fn"'


@carbontest.params(
    "text offset line column",
    start=("abc", 0, 1, 1),
    middle=("abc", 2, 1, 3),
    second_line=("ab\ncd", 4, 2, 2),
    line_start=("ab\ncd", 3, 2, 1),
    at_newline=("ab\ncd", 2, 1, 3),
    end=("ab\n", 3, 2, 1),
    past_end=("ab", 10, 1, 3),
)
def test_line_column(key, text, offset, line, column):
    assert carbonparse.line_column(text, offset) == (line, column)


def test_line_text():
    text = "first\r\nsecond\nthird"
    assert carbonparse.line_text(text, 0) == "first"
    assert carbonparse.line_text(text, 9) == "second"
    assert carbonparse.line_text(text, len(text)) == "third"


@carbontest.params(
    "expected found message",
    single=({"identifier"}, '"("', 'expected identifier, found "("'),
    ordered=(
        {carbonparse.END_OF_INPUT, '"var"', "identifier"},
        '"}"',
        'expected one of identifier, "var", end of input, found "}"',
    ),
    no_found=({'";"'}, None, 'expected ";"'),
    nothing=(set(), None, "unexpected input"),
)
def test_expectation(key, expected, found, message):
    assert carbonparse.expectation(expected, found) == message


def test_format_error():
    error = carbontest.parse_fail("fn () {}")
    text = carbonparse.format_error(error, "main.carbon")
    assert text.splitlines() == [
        'error: expected identifier, found "("',
        " --> main.carbon:1:4",
        "  |",
        "1 | fn () {}",
        "  |    ^",
    ]


def test_format_error_keeps_tabs():
    error = carbontest.parse_fail("\tvar 1: i32;")
    text = carbonparse.format_error(error)
    assert text.splitlines()[-1] == "  | \t    ^"
    assert " --> <source>:1:6" in text


def test_format_error_uses_stored_name():
    with pytest.raises(carbonparse.ParseError) as info:
        carbonparse.parse("fn", source_name="demo.carbon")
    assert "demo.carbon:1:3" in carbonparse.format_error(info.value)


def test_format_error_without_location():
    error = carbonparse.ParseError("something broke")
    assert carbonparse.format_error(error) == "error: something broke"
