"""Error classes and helpers"""

__all__ = ["GrammarError", "ParseError", "END_OF_INPUT"]


END_OF_INPUT = "end of input"


class GrammarError(Exception):
    """Invalid grammar notation or rule table."""


class ParseError(Exception):
    """Exception raised for parsing errors.

    Only the single furthest failure of a parse is reported. The fields are
    meant to be inspected by callers; `carbonparse.format_error` renders them
    for people.

    Args:
        message: (str) Error description
        position: (int | None) Character offset where the error occurred

    Attributes:
        message: (str) Error description
        position: (int | None) Offset of the furthest failure
        expected: (frozenset[str]) Labels that were attempted at the position
        found: (str | None) Description of what sits at the position
        line: (int | None) 1-based line of the position
        column: (int | None) 1-based column of the position
        line_text: (str | None) Text of the offending line, no newline
        source_name: (str | None) Display name of the source
        unterminated: (str | None) Construct left open at end of input
        opened_at: (int | None) Offset where the unterminated construct began
    """

    def __init__(
        self,
        message,
        position=None,
        *,
        expected=(),
        found=None,
        line=None,
        column=None,
        line_text=None,
        source_name=None,
        unterminated=None,
        opened_at=None,
    ):
        self.message = message
        self.position = position
        self.expected = frozenset(expected)
        self.found = found
        self.line = line
        self.column = column
        self.line_text = line_text
        self.source_name = source_name
        self.unterminated = unterminated
        self.opened_at = opened_at
        super().__init__(message)

    @property
    def at_end(self) -> bool:
        """True when the failure was found at the end of the input."""
        return self.found == END_OF_INPUT
