"""Parse tree nodes produced by the parsing engine."""

__all__ = ["ParseNode"]


class ParseNode:
    """One matched rule application in a parse tree.

    Leaf nodes come from terminals and atomic rules and keep the text they
    matched in `value`. Interior nodes keep their kids in source order.

    Args:
        rule: (str) Rule name, or the quoted literal for keyword and
            punctuation tokens
        start: (int) Offset of the first character
        end: (int) Offset after the last character
        kids: (list[ParseNode]) Child nodes
        value: (str | None) Matched text for leaf nodes
    """

    __slots__ = ("rule", "start", "end", "kids", "value")

    def __init__(self, rule, start, end, kids=(), value=None):
        self.rule = rule
        self.start = start
        self.end = end
        self.kids = tuple(kids)
        self.value = value

    @property
    def span(self) -> tuple[int, int]:
        return self.start, self.end

    @property
    def is_token(self) -> bool:
        """True for literal and built-in terminals (not named rules)."""
        return self.rule.startswith('"') or self.rule in ("SOI", "EOI")

    def __repr__(self):
        if self.value is not None:
            return f"ParseNode({self.rule} {self.start}..{self.end} {self.value!r})"
        return f"ParseNode({self.rule} {self.start}..{self.end} *{len(self.kids)})"

    def text(self, source: str) -> str:
        """Slice of the source covered by this node."""
        return source[self.start:self.end]

    def walk(self):
        """Depth-first iteration yielding (kind, span, kids)."""
        yield self.rule, self.span, self.kids
        for kid in self.kids:
            yield from kid.walk()

    def find_all(self, rule):
        """All nodes of the given rule, including self."""
        return [node for node in self._nodes() if node.rule == rule]

    def _nodes(self):
        yield self
        for kid in self.kids:
            yield from kid._nodes()

    def pretty(self, show_positions=False, indent="  ") -> str:
        """Format the tree as indented text, one node per line."""
        lines = []
        self._format(lines, 0, show_positions, indent)
        return "\n".join(lines)

    def _format(self, lines, depth, show_positions, indent):
        prefix = indent * depth
        pos = f" @{self.start}..{self.end}" if show_positions else ""
        if self.value is not None:
            value = self.value if len(self.value) < 60 else self.value[:57] + "..."
            lines.append(f"{prefix}{self.rule}: {value!r}{pos}")
        elif not self.kids:
            lines.append(f"{prefix}{self.rule}(){pos}")
        else:
            lines.append(f"{prefix}{self.rule}:{pos}")
            for kid in self.kids:
                kid._format(lines, depth + 1, show_positions, indent)
