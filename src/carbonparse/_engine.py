"""Packrat parsing engine.

The engine interprets a `Grammar` directly against the source text. Each
match call takes an explicit offset and returns either `(end, nodes)` or
None; failures never raise, so ordered choice simply tries the next
alternative from the same offset. Rule applications are memoized by
(rule index, offset) which keeps backtracking linear in the input size.

Every failed terminal reports a label at the offset where it was tried. Only
the furthest offset survives, and when the whole parse fails it becomes the
single `ParseError` given to the caller.
"""

__all__ = [
    "Parser",
    "parse",
    "parse_program",
    "parse_function_decl",
    "parse_var_decl",
    "parse_expression",
    "parse_type_name",
]

import contextlib
import logging

import carbonparse
from . import _lex
from ._grammar import (
    And,
    Choice,
    Literal,
    Not,
    Optional,
    Pattern,
    Ref,
    Repeat,
    Sequence,
    Special,
)
from ._tree import ParseNode

logger = logging.getLogger(__name__)

# Closing delimiters that mean a construct was left open at end of input
_CLOSERS = {'"}"': "block", '")"': "parenthesis"}


class Parser:
    """Reusable parser bound to a grammar and a start rule.

    A Parser holds no per-parse state; every call to `parse` gets its own
    cursor, memo table and failure record, so one instance may be used from
    several threads at once.

    Args:
        grammar: (Grammar | None) Rule table, defaults to the Carbon grammar
        start: (str) Name of the rule the whole input must match
        memoize: (bool) Cache rule results by offset (packrat parsing)

    Raises:
        carbonparse.GrammarError: If the start rule does not exist
    """

    def __init__(self, grammar=None, start="program", memoize=True):
        self.grammar = grammar if grammar is not None else carbonparse.default_grammar()
        self.start = self.grammar.rule(start)
        self.memoize = memoize

    def parse(self, source, source_name=None) -> ParseNode:
        """Parse a complete source buffer.

        Args:
            source: (str | bytes) Source text, bytes must be UTF-8
            source_name: (str | None) Display name used in diagnostics

        Returns:
            ParseNode: Root node for the start rule

        Raises:
            carbonparse.ParseError: If the input does not match the grammar
        """
        text = _decode(source, source_name)
        run = _Run(self.grammar, text, self.memoize)
        try:
            node = run.parse(self.start)
        except RecursionError as e:
            raise carbonparse.ParseError(
                "Input is nested too deeply to parse",
                0,
                source_name=source_name,
            ) from e
        if node is None:
            error = run.error(source_name)
            logger.debug("Parse of %s failed at %s: %s", source_name or "<source>",
                         error.position, error.message)
            raise error
        logger.debug(
            "Parsed %s (%d chars) as %s, %d memo entries",
            source_name or "<source>",
            len(text),
            self.start.name,
            len(run.memo) if run.memo is not None else 0,
        )
        return node


def _decode(source, source_name):
    """Get text from str or UTF-8 bytes."""
    if isinstance(source, str):
        return source
    try:
        return bytes(source).decode("utf-8")
    except UnicodeDecodeError as e:
        prefix = bytes(source)[:e.start].decode("utf-8")
        line, column = carbonparse.line_column(prefix, len(prefix))
        raise carbonparse.ParseError(
            f"Invalid UTF-8 at byte {e.start}",
            len(prefix),
            found=f"byte 0x{bytes(source)[e.start]:02x}",
            line=line,
            column=column,
            line_text=carbonparse.line_text(prefix, len(prefix)),
            source_name=source_name,
        ) from e


class _Run:
    """Cursor-free state of a single parse: memo table and failure record."""

    def __init__(self, grammar, text, memoize):
        self.grammar = grammar
        self.text = text
        self.size = len(text)
        self.memo = {} if memoize else None

        # Furthest failure seen so far
        self.fail_pos = -1
        self.fail_expected = set()
        self.unterminated = None

        # Failures inside atomic rules and lookaheads are tracked separately
        self.quiet = 0
        self.quiet_pos = -1
        self.quiet_expected = set()

    def parse(self, rule):
        result = self._ref(rule, 0, False)
        if result is None:
            return None
        end, nodes = result
        end = self._skip(end)
        if end != self.size:
            self._fail(end, carbonparse.END_OF_INPUT)
            return None
        if len(nodes) == 1 and nodes[0].rule == rule.name:
            return nodes[0]
        start = nodes[0].start if nodes else 0
        return ParseNode(rule.name, start, nodes[-1].end if nodes else 0, nodes)

    def error(self, source_name):
        """Build the ParseError for the furthest failure."""
        pos = max(self.fail_pos, 0)
        expected = frozenset(self.fail_expected)
        found = _lex.describe(self.text, pos)
        unterminated, opened_at = self.unterminated or (None, None)
        if unterminated is None and pos == self.size:
            for label, construct in _CLOSERS.items():
                if label in expected:
                    unterminated = construct
                    break
        message = carbonparse.expectation(expected, found)
        if opened_at is not None:
            open_line, open_column = carbonparse.line_column(self.text, opened_at)
            message = (
                f"unterminated {unterminated} starting at line {open_line}, "
                f"column {open_column}: {message}"
            )
        elif unterminated:
            message = f"unterminated {unterminated}: {message}"
        line, column = carbonparse.line_column(self.text, pos)
        return carbonparse.ParseError(
            message,
            pos,
            expected=expected,
            found=found,
            line=line,
            column=column,
            line_text=carbonparse.line_text(self.text, pos),
            source_name=source_name,
            unterminated=unterminated,
            opened_at=opened_at,
        )

    def _fail(self, pos, label):
        if self.quiet:
            if pos > self.quiet_pos:
                self.quiet_pos = pos
                self.quiet_expected = {label}
            elif pos == self.quiet_pos:
                self.quiet_expected.add(label)
            return
        if pos > self.fail_pos:
            self.fail_pos = pos
            self.fail_expected = {label}
            self.unterminated = None
        elif pos == self.fail_pos:
            self.fail_expected.add(label)

    def _fail_open(self, construct, opened_at, expected):
        """Record a construct that ran into end of input."""
        for label in expected:
            self._fail(self.size, label)
        if not self.quiet and self.fail_pos == self.size and self.unterminated is None:
            self.unterminated = (construct, opened_at)

    @contextlib.contextmanager
    def _silenced(self):
        """Track failures privately, restoring the outer quiet record after.

        Yields a dict that receives the furthest private failure as
        "pos" and "expected" when the block exits.
        """
        inner = {}
        saved = self.quiet_pos, self.quiet_expected
        self.quiet_pos, self.quiet_expected = -1, set()
        self.quiet += 1
        try:
            yield inner
        finally:
            self.quiet -= 1
            inner["pos"] = self.quiet_pos
            inner["expected"] = self.quiet_expected
            self.quiet_pos, self.quiet_expected = saved

    def _skip(self, pos):
        pos, opened_at = _lex.skip(self.text, pos)
        if opened_at is not None:
            self._fail_open("block comment", opened_at, ('"*/"',))
        return pos

    def _ref(self, rule, pos, atomic):
        if self.memo is None:
            return self._rule(rule, pos, atomic)
        key = (rule.index, pos, atomic, self.quiet > 0)
        try:
            return self.memo[key]
        except KeyError:
            pass
        result = self._rule(rule, pos, atomic)
        self.memo[key] = result
        return result

    def _rule(self, rule, pos, atomic):
        if atomic:
            # Rules used inside an atomic rule belong to its single leaf
            result = self._match(rule.expr, pos, True)
            return None if result is None else (result[0], [])
        if rule.atomic:
            return self._atomic(rule, pos)
        result = self._match(rule.expr, pos, False)
        if result is None:
            return None
        end, kids = result
        if rule.silent:
            return end, kids
        start = kids[0].start if kids else pos
        return end, [ParseNode(rule.name, start, end, kids)]

    def _atomic(self, rule, pos):
        start = self._skip(pos)
        with self._silenced() as inner:
            result = self._match(rule.expr, start, True)
        if result is None:
            if inner["pos"] == self.size and inner["pos"] > start:
                self._fail_open(rule.name, start, inner["expected"])
            else:
                self._fail(start, rule.name)
            return None
        end = result[0]
        return end, [ParseNode(rule.name, start, end, (), self.text[start:end])]

    def _match(self, expr, pos, atomic):
        match expr:
            case Literal(text=literal):
                start = pos if atomic else self._skip(pos)
                end = _lex.match_literal(self.text, start, literal)
                if end is None:
                    self._fail(start, expr.label)
                    return None
                if atomic:
                    return end, []
                return end, [ParseNode(expr.label, start, end, (), literal)]

            case Pattern(regex=regex):
                start = pos if atomic else self._skip(pos)
                end = _lex.match_pattern(self.text, start, regex)
                if end is None:
                    self._fail(start, expr.label)
                    return None
                if atomic:
                    return end, []
                return end, [ParseNode(expr.label, start, end, (), self.text[start:end])]

            case Ref(name=name):
                return self._ref(self.grammar[name], pos, atomic)

            case Special(name="SOI"):
                if pos != 0:
                    self._fail(pos, expr.label)
                    return None
                return 0, ([] if atomic else [ParseNode("SOI", 0, 0, (), "")])

            case Special(name="EOI"):
                start = pos if atomic else self._skip(pos)
                if start != self.size:
                    self._fail(start, expr.label)
                    return None
                return start, ([] if atomic else [ParseNode("EOI", start, start, (), "")])

            case Sequence(items=items):
                kids = []
                for item in items:
                    result = self._match(item, pos, atomic)
                    if result is None:
                        return None
                    pos, nodes = result
                    kids.extend(nodes)
                return pos, kids

            case Choice(alts=alts):
                for alt in alts:
                    result = self._match(alt, pos, atomic)
                    if result is not None:
                        return result
                return None

            case Repeat(item=item, min=low, max=high):
                kids = []
                count = 0
                while high is None or count < high:
                    result = self._match(item, pos, atomic)
                    if result is None:
                        break
                    if result[0] == pos:
                        # Zero width match would repeat forever
                        count = max(count, low)
                        break
                    pos, nodes = result
                    kids.extend(nodes)
                    count += 1
                if count < low:
                    return None
                return pos, kids

            case Optional(item=item):
                result = self._match(item, pos, atomic)
                if result is None:
                    return pos, []
                return result

            case Not(item=item):
                with self._silenced():
                    result = self._match(item, pos, atomic)
                if result is not None:
                    return None
                return pos, []

            case And(item=item):
                with self._silenced():
                    result = self._match(item, pos, atomic)
                if result is None:
                    return None
                return pos, []

        raise carbonparse.GrammarError(f"Unknown grammar expression {expr!r}")


_parsers = {}


def _get_parser(start) -> Parser:
    """Get a cached Parser for a start rule of the default grammar."""
    parser = _parsers.get(start)
    if parser is None:
        parser = Parser(start=start)
        _parsers[start] = parser
    return parser


def parse(source, source_name=None, start="program") -> ParseNode:
    """Parse source into a parse tree.

    Args:
        source: (str | bytes) Source text, bytes must be UTF-8
        source_name: (str | None) Display name used in diagnostics
        start: (str) Grammar rule that must match the whole input

    Returns:
        ParseNode: Root of the parse tree

    Raises:
        carbonparse.ParseError: If the text contains invalid syntax
    """
    return _get_parser(start).parse(source, source_name)


def parse_program(source, source_name=None) -> ParseNode:
    """Parse a complete program."""
    return parse(source, source_name, "program")


def parse_function_decl(source, source_name=None) -> ParseNode:
    """Parse a single function declaration."""
    return parse(source, source_name, "function_decl")


def parse_var_decl(source, source_name=None) -> ParseNode:
    """Parse a single variable declaration."""
    return parse(source, source_name, "var_decl")


def parse_expression(source, source_name=None) -> ParseNode:
    """Parse a single expression."""
    return parse(source, source_name, "expression")


def parse_type_name(source, source_name=None) -> ParseNode:
    return parse(source, source_name, "type_name")
