"""Grammar rule tables.

A grammar is a flat, ordered table of named rules. Each rule owns an
immutable expression tree built from terminals and combinators. Rules refer
to each other only by name through `Ref`, so cyclic grammars never create
cyclic objects; the engine resolves names through the table while matching.

Tables are written in a small PEG notation (see `lark/peg.lark`) and
compiled with `Grammar.from_text`. The shipped Carbon grammar lives in
`carbon.peg` and is shared read-only through `default_grammar()`.
"""

__all__ = [
    "Literal",
    "Pattern",
    "Ref",
    "Special",
    "Sequence",
    "Choice",
    "Repeat",
    "Optional",
    "Not",
    "And",
    "Rule",
    "Grammar",
    "default_grammar",
]

import ast as python_ast
import dataclasses
import logging
import pathlib
import re

import lark

import carbonparse

logger = logging.getLogger(__name__)

SPECIAL_NAMES = ("SOI", "EOI")


@dataclasses.dataclass(frozen=True)
class Literal:
    """Terminal matching exact text."""

    text: str

    @property
    def label(self) -> str:
        return _quote(self.text)

    def __str__(self):
        return _quote(self.text)


@dataclasses.dataclass(frozen=True)
class Pattern:
    """Terminal matching a regular expression (character classes)."""

    source: str
    flags: str = ""
    regex: re.Pattern = dataclasses.field(init=False, compare=False, repr=False)

    def __post_init__(self):
        flags = 0
        for char in self.flags:
            flags |= _REGEX_FLAGS[char]
        try:
            regex = re.compile(self.source, flags)
        except re.error as e:
            raise carbonparse.GrammarError(f"Invalid pattern /{self.source}/: {e}") from e
        object.__setattr__(self, "regex", regex)

    @property
    def label(self) -> str:
        return str(self)

    def __str__(self):
        return "/" + self.source.replace("/", "\\/") + "/" + self.flags


@dataclasses.dataclass(frozen=True)
class Ref:
    """Reference to another rule by name."""

    name: str

    def __str__(self):
        return self.name


@dataclasses.dataclass(frozen=True)
class Special:
    """Zero width start (SOI) or end (EOI) of input."""

    name: str

    @property
    def label(self) -> str:
        return carbonparse.END_OF_INPUT if self.name == "EOI" else "start of input"

    def __str__(self):
        return self.name


@dataclasses.dataclass(frozen=True)
class Sequence:
    items: tuple

    def __str__(self):
        return " ".join(_group(item, (Choice,)) for item in self.items)


@dataclasses.dataclass(frozen=True)
class Choice:
    """Ordered choice, first matching alternative wins."""

    alts: tuple

    def __str__(self):
        return " | ".join(str(alt) for alt in self.alts)


@dataclasses.dataclass(frozen=True)
class Repeat:
    """Greedy repetition between min and max (None for unbounded) times."""

    item: object
    min: int = 0
    max: int | None = None

    def __str__(self):
        inner = _group(self.item, _COMPOUND)
        match (self.min, self.max):
            case (0, None):
                return f"{inner}*"
            case (1, None):
                return f"{inner}+"
            case (low, None):
                return f"{inner}{{{low},}}"
            case (low, high) if low == high:
                return f"{inner}{{{low}}}"
            case (low, high):
                return f"{inner}{{{low},{high}}}"


@dataclasses.dataclass(frozen=True)
class Optional:
    item: object

    def __str__(self):
        return _group(self.item, _COMPOUND) + "?"


@dataclasses.dataclass(frozen=True)
class Not:
    """Negative lookahead, never consumes input."""

    item: object

    def __str__(self):
        return "!" + _group(self.item, (Sequence, Choice))


@dataclasses.dataclass(frozen=True)
class And:
    """Positive lookahead, never consumes input."""

    item: object

    def __str__(self):
        return "&" + _group(self.item, (Sequence, Choice))


_COMPOUND = (Sequence, Choice, Repeat, Optional, Not, And)
_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}


def _quote(text):
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def _group(expr, kinds):
    if isinstance(expr, kinds):
        return f"({expr})"
    return str(expr)


def _children(expr):
    """Direct sub-expressions of an expression."""
    match expr:
        case Sequence(items=items):
            return items
        case Choice(alts=alts):
            return alts
        case Repeat(item=item) | Optional(item=item) | Not(item=item) | And(item=item):
            return (item,)
    return ()


def _walk(expr):
    yield expr
    for kid in _children(expr):
        yield from _walk(kid)


@dataclasses.dataclass(frozen=True)
class Rule:
    """Named entry of a grammar table.

    Attributes:
        name: (str) Rule name, also the kind of the ParseNodes it produces
        index: (int) Stable position in the table, used as the memo key
        expr: Expression matched by the rule
        atomic: (bool) Match without separator skipping, produce a leaf node
    """

    name: str
    index: int
    expr: object
    atomic: bool = False

    @property
    def silent(self) -> bool:
        """Silent rules splice their children into the parent node."""
        return self.name.startswith("_")

    def __str__(self):
        prefix = "@" if self.atomic else ""
        return f"{prefix}{self.name} = {self.expr} ;"


class Grammar:
    """Immutable, ordered table of grammar rules.

    Args:
        rules: Iterable of (name, expr, atomic) definitions in table order

    Raises:
        carbonparse.GrammarError: If the definitions do not form a valid table
    """

    def __init__(self, rules):
        table = []
        by_name = {}
        for name, expr, atomic in rules:
            if name in SPECIAL_NAMES:
                raise carbonparse.GrammarError(f"Rule name '{name}' is reserved")
            if name in by_name:
                raise carbonparse.GrammarError(f"Rule '{name}' is defined more than once")
            rule = Rule(name, len(table), expr, bool(atomic))
            table.append(rule)
            by_name[name] = rule
        self._rules = tuple(table)
        self._by_name = by_name
        self._validate()
        logger.debug("Compiled grammar with %d rules", len(self._rules))

    @classmethod
    def from_text(cls, text):
        """Compile PEG notation into a grammar.

        Args:
            text: (str) Grammar source in PEG notation

        Returns:
            Grammar: The compiled rule table

        Raises:
            carbonparse.GrammarError: If the notation or the table is invalid
        """
        try:
            tree = _lark_parser().parse(text)
            definitions = _RuleBuilder().transform(tree)
        except lark.exceptions.VisitError as e:
            if isinstance(e.orig_exc, carbonparse.GrammarError):
                raise e.orig_exc from None
            raise carbonparse.GrammarError(str(e.orig_exc)) from e.orig_exc
        except lark.exceptions.LarkError as e:
            raise carbonparse.GrammarError(f"Invalid grammar notation: {e}") from e
        return cls(definitions)

    def __getitem__(self, name) -> Rule:
        return self._by_name[name]

    def __contains__(self, name):
        return name in self._by_name

    def __iter__(self):
        return iter(self._rules)

    def __len__(self):
        return len(self._rules)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(rule.name for rule in self._rules)

    def rule(self, name) -> Rule:
        """Look up a rule, raising GrammarError for unknown names."""
        try:
            return self._by_name[name]
        except KeyError:
            raise carbonparse.GrammarError(f"Undefined rule '{name}'") from None

    def to_text(self) -> str:
        """Render the table back into PEG notation."""
        return "\n".join(str(rule) for rule in self._rules) + "\n"

    def _validate(self):
        for rule in self._rules:
            for expr in _walk(rule.expr):
                match expr:
                    case Ref(name=name) if name not in self._by_name:
                        raise carbonparse.GrammarError(
                            f"Rule '{rule.name}' references undefined rule '{name}'"
                        )
                    case Special(name=name) if name not in SPECIAL_NAMES:
                        raise carbonparse.GrammarError(f"Unknown built-in '{name}'")
                    case Repeat(min=low, max=high) if low < 0 or (
                        high is not None and high < low
                    ):
                        raise carbonparse.GrammarError(
                            f"Rule '{rule.name}' has invalid repetition bounds {{{low},{high}}}"
                        )
        nullable = self._nullable_rules()
        self._check_left_recursion(nullable)

    def _nullable_rules(self):
        """Fixpoint of which rules can succeed without consuming input."""
        nullable = dict.fromkeys(self._by_name, False)
        changed = True
        while changed:
            changed = False
            for rule in self._rules:
                if not nullable[rule.name] and _nullable(rule.expr, nullable):
                    nullable[rule.name] = True
                    changed = True
        return nullable

    def _check_left_recursion(self, nullable):
        edges = {
            rule.name: list(dict.fromkeys(_left_refs(rule.expr, nullable)))
            for rule in self._rules
        }
        done = set()

        def visit(name, path):
            if name in path:
                cycle = path[path.index(name):] + [name]
                raise carbonparse.GrammarError(
                    f"Left recursion in rule '{name}': {' -> '.join(cycle)}"
                )
            if name in done:
                return
            path.append(name)
            for target in edges[name]:
                visit(target, path)
            path.pop()
            done.add(name)

        for rule in self._rules:
            visit(rule.name, [])


def _nullable(expr, nullable):
    match expr:
        case Literal(text=text):
            return text == ""
        case Pattern(regex=regex):
            return regex.match("") is not None
        case Ref(name=name):
            return nullable[name]
        case Special():
            return True
        case Sequence(items=items):
            return all(_nullable(item, nullable) for item in items)
        case Choice(alts=alts):
            return any(_nullable(alt, nullable) for alt in alts)
        case Repeat(item=item, min=low):
            return low == 0 or _nullable(item, nullable)
        case Optional() | Not() | And():
            return True
    raise carbonparse.GrammarError(f"Unknown grammar expression {expr!r}")


def _left_refs(expr, nullable):
    """Rules that expr may invoke before consuming any input."""
    match expr:
        case Ref(name=name):
            yield name
        case Sequence(items=items):
            for item in items:
                yield from _left_refs(item, nullable)
                if not _nullable(item, nullable):
                    break
        case _:
            for kid in _children(expr):
                yield from _left_refs(kid, nullable)


@lark.v_args(inline=True)
class _RuleBuilder(lark.Transformer):
    """Convert the Lark tree of PEG notation into rule definitions."""

    def start(self, *rules):
        return list(rules)

    def definition(self, *kids):
        atomic = len(kids) == 3
        name, expr = kids[-2], kids[-1]
        return str(name), expr, atomic

    def choice(self, *alts):
        return alts[0] if len(alts) == 1 else Choice(tuple(alts))

    def sequence(self, *items):
        return items[0] if len(items) == 1 else Sequence(tuple(items))

    def item(self, *kids):
        kids = list(kids)
        predicate = None
        if isinstance(kids[0], lark.Token) and kids[0].type == "PREDICATE":
            predicate = kids.pop(0).value
        expr = kids.pop(0)
        if kids:
            match kids[0]:
                case "?":
                    expr = Optional(expr)
                case "*":
                    expr = Repeat(expr, 0, None)
                case "+":
                    expr = Repeat(expr, 1, None)
                case (low, high):
                    expr = Repeat(expr, low, high)
        if predicate == "!":
            expr = Not(expr)
        elif predicate == "&":
            expr = And(expr)
        return expr

    def quantifier(self, token):
        return token.value

    def exact(self, count):
        return int(count), int(count)

    def at_least(self, low):
        return int(low), None

    def between(self, low, high):
        return int(low), int(high)

    def literal(self, token):
        return Literal(python_ast.literal_eval(token.value))

    def pattern(self, token):
        body, _, flags = token.value[1:].rpartition("/")
        return Pattern(body.replace("\\/", "/"), flags)

    def ref(self, token):
        if token.value in SPECIAL_NAMES:
            return Special(token.value)
        return Ref(token.value)

    def group(self, expr):
        return expr


_parsers = {}
_grammars = {}


def _lark_parser():
    """Get the globally shared Lark parser for PEG notation."""
    parser = _parsers.get("peg")
    if parser is None:
        parser = lark.Lark.open("lark/peg.lark", rel_to=__file__, parser="lalr")
        _parsers["peg"] = parser
    return parser


def default_grammar() -> Grammar:
    """Get the globally shared grammar for the Carbon subset.

    The table is compiled from `carbon.peg` on first use and never changes
    afterwards, so it is safe to share between concurrent parses.
    """
    grammar = _grammars.get("carbon")
    if grammar is None:
        path = pathlib.Path(__file__).parent / "carbon.peg"
        grammar = Grammar.from_text(path.read_text(encoding="utf-8"))
        _grammars["carbon"] = grammar
    return grammar
