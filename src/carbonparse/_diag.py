"""Human readable diagnostics for parse failures.

Nothing here writes to a stream. The CLI decides where the text goes.
"""

__all__ = ["line_column", "line_text", "expectation", "format_error"]

import carbonparse


def line_column(text: str, offset: int) -> tuple[int, int]:
    """Convert an offset into a 1-based (line, column) pair.

    Lines are counted by newline characters before the offset. An offset past
    the end of the text is clamped to the end.
    """
    offset = min(max(offset, 0), len(text))
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


def line_text(text: str, offset: int) -> str:
    """Full text of the line containing offset, without the newline."""
    offset = min(max(offset, 0), len(text))
    start = text.rfind("\n", 0, offset) + 1
    end = text.find("\n", offset)
    if end < 0:
        end = len(text)
    return text[start:end].rstrip("\r")


def _label_order(label):
    # rule names, then literals, then end of input
    if label == carbonparse.END_OF_INPUT:
        return 2, label
    if label.startswith('"') or label.startswith("/"):
        return 1, label
    return 0, label


def expectation(expected, found) -> str:
    """Message of the form "expected one of ..., found ..."."""
    labels = sorted(expected, key=_label_order)
    if not labels:
        text = "unexpected input"
    elif len(labels) == 1:
        text = f"expected {labels[0]}"
    else:
        text = "expected one of " + ", ".join(labels)
    if found is None:
        return text
    return f"{text}, found {found}"


def format_error(error, source_name=None) -> str:
    """Render a ParseError with its location and a caret excerpt.

    Args:
        error: (ParseError) Failure to describe
        source_name: (str | None) Display name, overrides the name stored
            in the error

    Returns:
        str: Multi-line diagnostic text, no trailing newline

    Example output::

        error: expected identifier, found "("
         --> main.carbon:1:4
          |
        1 | fn () {}
          |    ^
    """
    name = source_name or error.source_name or "<source>"
    lines = [f"error: {error.message}"]
    if error.line is None:
        return "\n".join(lines)

    gutter = " " * len(str(error.line))
    lines.append(f"{gutter}--> {name}:{error.line}:{error.column}")
    if error.line_text is not None:
        # Keep tabs so the caret lines up with the excerpt
        before = error.line_text[:error.column - 1]
        padding = "".join(c if c == "\t" else " " for c in before)
        lines.append(f"{gutter} |")
        lines.append(f"{error.line} | {error.line_text}")
        lines.append(f"{gutter} | {padding}^")
    return "\n".join(lines)
