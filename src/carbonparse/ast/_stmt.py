"""Ast nodes for statements"""

__all__ = ["ExprStmt", "ReturnStmt"]

from . import _node


class ExprStmt(_node.Node):
    """Expression evaluated for its effect: `expr;`"""

    def __init__(self, expr: _node.Node | None = None):
        super().__init__([expr] if expr is not None else None)

    @property
    def expr(self):
        return self.kids[0]

    def unparse(self) -> str:
        return f"{self.expr.unparse()};"


class ReturnStmt(_node.Node):
    """Return statement with an optional value."""

    def __init__(self, value: _node.Node | None = None):
        super().__init__([value] if value is not None else None)

    @property
    def value(self):
        return self.kids[0] if self.kids else None

    def unparse(self) -> str:
        if self.value is None:
            return "return;"
        return f"return {self.value.unparse()};"
