"""Ast nodes for programs and declarations"""

__all__ = [
    "Program",
    "FunctionDecl",
    "Parameter",
    "VarDecl",
    "Block",
]

from . import _node


class Program(_node.Node):
    """Root of the AST: top level function and variable declarations."""

    @property
    def items(self) -> list[_node.Node]:
        return self.kids

    def unparse(self) -> str:
        return "\n".join(kid.unparse() for kid in self.kids)


class Parameter(_node.Node):
    """Function parameter `name: type`."""

    def __init__(self, name: str = "", type_name: str = ""):
        self.name = name
        self.type_name = type_name
        super().__init__()

    def unparse(self) -> str:
        return f"{self.name}: {self.type_name}"


class Block(_node.Node):
    """Braced statement list."""

    @property
    def statements(self) -> list[_node.Node]:
        return self.kids

    def unparse(self) -> str:
        if not self.kids:
            return "{}"
        body = "\n".join("    " + kid.unparse() for kid in self.kids)
        return "{\n" + body + "\n}"


class FunctionDecl(_node.Node):
    """Function declaration.

    Children are the parameters in order followed by the body Block.
    """

    def __init__(
        self,
        name: str = "",
        parameters: list[Parameter] | None = None,
        return_type: str | None = None,
        body: Block | None = None,
    ):
        self.name = name
        self.return_type = return_type
        super().__init__([*(parameters or []), body or Block()])

    @property
    def parameters(self) -> list[Parameter]:
        return self.kids[:-1]

    @property
    def body(self) -> Block:
        return self.kids[-1]

    def unparse(self) -> str:
        params = ", ".join(param.unparse() for param in self.parameters)
        arrow = f" -> {self.return_type}" if self.return_type else ""
        return f"fn {self.name}({params}){arrow} {self.body.unparse()}"


class VarDecl(_node.Node):
    """Variable declaration, used at top level and as a statement."""

    def __init__(
        self,
        name: str = "",
        type_name: str = "",
        initializer: _node.Node | None = None,
    ):
        self.name = name
        self.type_name = type_name
        super().__init__([initializer] if initializer is not None else None)

    @property
    def initializer(self) -> _node.Node | None:
        return self.kids[0] if self.kids else None

    def unparse(self) -> str:
        init = f" = {self.initializer.unparse()}" if self.initializer else ""
        return f"var {self.name}: {self.type_name}{init};"
