"""Lexical classification of terminals.

There is no token stream. The parsing engine asks these functions whether a
terminal matches at a given offset and gets back the end offset or None.
Everything here is a pure function of the text, the offset and the terminal.

Whitespace and comments form the implicit separator that the engine skips
before every terminal outside of atomic rules.
"""

__all__ = [
    "is_ident_char",
    "skip",
    "match_literal",
    "match_pattern",
    "describe",
]

import re

_WHITESPACE = " \t\r\n\f\v"
_WORD = re.compile(r"[A-Za-z0-9_]+")
_NUMBER = re.compile(r"[0-9]+(\.[0-9]+)?")
_PUNCT2 = ("->", "==", "!=", "<=", ">=", "//", "/*", "*/")


def is_ident_char(char: str) -> bool:
    """True for characters that may continue an identifier."""
    return char.isascii() and (char.isalnum() or char == "_")


def skip(text: str, pos: int) -> tuple[int, int | None]:
    """Skip whitespace and comments starting at pos.

    Line comments run to the end of the line. Block comments do not nest.
    An unterminated block comment is not consumed: the returned position
    stays on its opening `/*` and the second value is that same offset.

    Returns:
        (position after the separator, start of unterminated comment or None)
    """
    size = len(text)
    while pos < size:
        char = text[pos]
        if char in _WHITESPACE:
            pos += 1
        elif text.startswith("//", pos):
            newline = text.find("\n", pos + 2)
            pos = size if newline < 0 else newline + 1
        elif text.startswith("/*", pos):
            close = text.find("*/", pos + 2)
            if close < 0:
                return pos, pos
            pos = close + 2
        else:
            break
    return pos, None


def match_literal(text: str, pos: int, literal: str) -> int | None:
    """Match literal text at pos.

    Literals ending in an identifier character are keywords: they only match
    a complete token, so `fn` does not match the start of `fname`.
    """
    if not text.startswith(literal, pos):
        return None
    end = pos + len(literal)
    if literal and is_ident_char(literal[-1]):
        if end < len(text) and is_ident_char(text[end]):
            return None
    return end


def match_pattern(text: str, pos: int, pattern: re.Pattern) -> int | None:
    """Match a compiled regular expression anchored at pos."""
    found = pattern.match(text, pos)
    if found is None:
        return None
    return found.end()


def describe(text: str, pos: int) -> str:
    """Describe the lexeme at pos for "found ..." messages."""
    if pos >= len(text):
        return "end of input"
    char = text[pos]
    if char == "\n":
        return "end of line"
    if char in _WHITESPACE:
        return "whitespace"
    if char.isdigit():
        lexeme = _NUMBER.match(text, pos).group()
    elif is_ident_char(char):
        lexeme = _WORD.match(text, pos).group()
    elif text.startswith(_PUNCT2, pos):
        lexeme = text[pos:pos + 2]
    else:
        lexeme = char
    if len(lexeme) > 20:
        lexeme = lexeme[:17] + "..."
    if '"' in lexeme:
        return f"'{lexeme}'"
    return f'"{lexeme}"'
