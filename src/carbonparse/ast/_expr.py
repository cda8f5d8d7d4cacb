"""Ast nodes for expressions"""

__all__ = [
    "Literal",
    "Identifier",
    "BinaryExpr",
    "FunctionCall",
]

import decimal
import re

from . import _node

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}
_UNESCAPES = {escape[1]: char for char, escape in _ESCAPES.items()}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def _unescape(body):
    """Decode the escapes of a string literal body, other text is kept as-is."""
    return _ESCAPE_RE.sub(lambda found: _UNESCAPES[found.group(1)], body)


class Literal(_node.Node):
    """Literal value.

    The kind is one of "integer", "float", "string" or "boolean" and the
    value is the matching Python value (int, Decimal, str, bool).
    """

    def __init__(self, kind: str = "integer", value=0):
        self.kind = kind
        self.value = value
        super().__init__()

    def unparse(self) -> str:
        match self.kind:
            case "boolean":
                return "true" if self.value else "false"
            case "string":
                escaped = "".join(_ESCAPES.get(c, c) for c in self.value)
                return f'"{escaped}"'
            case "float":
                # No exponent syntax, always positional
                return format(self.value, "f")
            case _:
                return str(self.value)

    @classmethod
    def from_grammar(cls, node):
        """Create from a leaf ParseNode of rule integer, float, string or boolean."""
        text = node.value
        match node.rule:
            case "integer":
                return cls("integer", int(text))
            case "float":
                return cls("float", decimal.Decimal(text))
            case "boolean":
                return cls("boolean", text == "true")
            case "string":
                return cls("string", _unescape(text[1:-1]))
        raise ValueError(f"Not a literal rule: {node.rule}")


class Identifier(_node.Node):
    """Reference to a name."""

    def __init__(self, name: str = ""):
        self.name = name
        super().__init__()

    def unparse(self) -> str:
        return self.name


class BinaryExpr(_node.Node):
    """Binary operation."""

    def __init__(self, op: str = "?", left=None, right=None):
        self.op = op
        super().__init__([kid for kid in (left, right) if kid is not None])

    @property
    def left(self):
        return self.kids[0]

    @property
    def right(self):
        return self.kids[1]

    def unparse(self) -> str:
        left = self.left.unparse()
        if isinstance(self.left, BinaryExpr):
            left = f"({left})"
        right = self.right.unparse()
        if isinstance(self.right, BinaryExpr):
            right = f"({right})"
        return f'{left} {self.op} {right}'


class FunctionCall(_node.Node):
    """Call of a named function, children are the arguments."""

    def __init__(self, callee: str = "", args: list[_node.Node] | None = None):
        self.callee = callee
        super().__init__(args)

    @property
    def args(self) -> list[_node.Node]:
        return self.kids

    def unparse(self) -> str:
        args = ", ".join(arg.unparse() for arg in self.args)
        return f"{self.callee}({args})"
