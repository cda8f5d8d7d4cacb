"""Ast base node"""

__all__ = ["Node"]


class Node:
    """Base class for all AST nodes."""

    def __init__(self, kids: list["Node"] | None = None):
        """Initialize node with its children.

        The 'kids' attribute holds the child Node objects in source order.
        Other attributes are node-specific (name, op, value, etc.).

        Args:
            kids: List of child nodes
        """
        self.kids = list(kids) if kids else []
        self.span = (None, None)

    def __repr__(self):
        """Compact representation showing type and key attributes."""
        attrs = []
        if self.kids:
            attrs.append(f'*{len(self.kids)}')
        for key, value in self.__dict__.items():
            if key not in ('kids', 'span'):
                attrs.append(f'{key}={value!r}')
        return f"{self.__class__.__name__}({' '.join(attrs)})"

    @property
    def node_kind(self) -> str:
        return self.__class__.__name__

    def walk(self):
        """Depth-first iteration yielding (kind, span, kids)."""
        yield self.node_kind, self.span, tuple(self.kids)
        for kid in self.kids:
            yield from kid.walk()

    def pretty(self, indent=0) -> str:
        """Format the tree structure as indented text."""
        lines = [f"{'  '*indent}{self!r}"]
        for kid in self.kids:
            lines.append(kid.pretty(indent + 1))
        return "\n".join(lines)

    def tree(self, indent=0):
        """Print tree structure."""
        print(self.pretty(indent))

    def find(self, node_type):
        """Find first descendant of given type, including self."""
        if isinstance(self, node_type):
            return self
        for kid in self.kids:
            if result := kid.find(node_type):
                return result
        return None

    def find_all(self, node_type):
        """Find all descendants of given type, including self."""
        results = [self] if isinstance(self, node_type) else []
        for kid in self.kids:
            results.extend(kid.find_all(node_type))
        return results

    def matches(self, other) -> bool:
        """Hierarchical comparison of AST structure.

        Compares node types, attributes (excluding span), and recursively
        compares all children. Useful for testing round-trip parsing.

        Args:
            other: Another Node to compare against

        Returns:
            True if nodes have same type, attributes, and children structure
        """
        if type(other) is not type(self):
            return False

        if len(self.kids) != len(other.kids):
            return False

        mine = {k: v for k, v in self.__dict__.items() if k not in ('kids', 'span')}
        theirs = {k: v for k, v in other.__dict__.items() if k not in ('kids', 'span')}
        if mine != theirs:
            return False

        for self_kid, other_kid in zip(self.kids, other.kids, strict=True):
            if not self_kid.matches(other_kid):
                return False

        return True

    def unparse(self) -> str:
        """Convert back to Carbon source representation."""
        return "???"
