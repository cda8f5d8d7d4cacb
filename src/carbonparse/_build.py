"""Build AST nodes from parse trees.

The parse tree mirrors the grammar and keeps every keyword and punctuation
token. The AST keeps only what has meaning: names, types, operators, literal
values and structure. Children are converted before their parent node is
created and every AST node gets the span of the parse node it came from.
"""

__all__ = ["build_ast", "parse_module", "parse_expr"]

import carbonparse
from carbonparse import ast


def parse_module(source, source_name=None) -> ast.Program:
    """Parse a complete program into an AST.

    Args:
        source: (str | bytes) Program source code
        source_name: (str | None) Display name for error messages

    Returns:
        Program AST node containing all top level declarations

    Raises:
        carbonparse.ParseError: If the text contains invalid syntax
    """
    return build_ast(carbonparse.parse(source, source_name, "program"))


def parse_expr(source, source_name=None) -> ast.Node:
    """Parse a single expression into an AST.

    Raises:
        carbonparse.ParseError: If the text contains invalid syntax
    """
    return build_ast(carbonparse.parse(source, source_name, "expression"))


def build_ast(node) -> ast.Node:
    """Convert a parse tree node into an AST node.

    This is the main dispatcher that handles all grammar rules. It is a pure
    function, building twice from the same tree gives equal ASTs.

    The node must come from a program, declaration, statement or expression
    rule. Trees rooted at helper rules with no AST counterpart
    (`type_name`, `parameter_list`, `argument_list`, operators) are
    rejected; their content is read by the enclosing rule instead.

    Args:
        node: (ParseNode) Parse tree produced by the Carbon grammar

    Returns:
        AST node instance

    Raises:
        ValueError: If the node's rule has no AST counterpart
    """
    kids = node.kids
    match node.rule:
        # Pass-through rules (no node created)
        case "statement" | "expression" | "primary" | "literal":
            return build_ast(kids[0])

        case "paren_expr":
            # "(" expression ")"
            return build_ast(kids[1])

        # === DECLARATIONS ===
        case "program":
            items = [build_ast(kid) for kid in kids if not kid.is_token]
            return _spanned(ast.Program(items), node)

        case "function_decl":
            # "fn" identifier "(" parameter_list? ")" return_type? block
            params = []
            return_type = None
            body = None
            for kid in kids[2:]:
                match kid.rule:
                    case "parameter_list":
                        params = [build_ast(param) for param in kid.kids[::2]]
                    case "return_type":
                        return_type = kid.kids[1].value
                    case "block":
                        body = build_ast(kid)
            decl = ast.FunctionDecl(kids[1].value, params, return_type, body)
            return _spanned(decl, node)

        case "parameter":
            # identifier ":" type_name
            return _spanned(ast.Parameter(kids[0].value, kids[2].value), node)

        case "var_decl":
            # "var" identifier ":" type_name initializer? ";"
            initializer = None
            if kids[4].rule == "initializer":
                initializer = build_ast(kids[4].kids[1])
            decl = ast.VarDecl(kids[1].value, kids[3].value, initializer)
            return _spanned(decl, node)

        # === STATEMENTS ===
        case "block":
            statements = [build_ast(kid) for kid in kids[1:-1]]
            return _spanned(ast.Block(statements), node)

        case "return_stmt":
            # "return" expression? ";"
            value = build_ast(kids[1]) if len(kids) == 3 else None
            return _spanned(ast.ReturnStmt(value), node)

        case "expr_stmt":
            return _spanned(ast.ExprStmt(build_ast(kids[0])), node)

        # === EXPRESSIONS ===
        case "comparison" | "additive" | "multiplicative":
            # operand (op operand)* folds to the left: a - b - c is (a - b) - c
            # Spans come from the operand parse nodes so parentheses are kept
            result = build_ast(kids[0])
            for op, operand in zip(kids[1::2], kids[2::2], strict=True):
                right = build_ast(operand)
                expr = ast.BinaryExpr(op.value, result, right)
                expr.span = (kids[0].start, operand.end)
                result = expr
            return result

        case "function_call":
            # identifier "(" argument_list? ")"
            args = []
            if kids[2].rule == "argument_list":
                args = [build_ast(arg) for arg in kids[2].kids[::2]]
            return _spanned(ast.FunctionCall(kids[0].value, args), node)

        case "integer" | "float" | "string" | "boolean":
            return _spanned(ast.Literal.from_grammar(node), node)

        case "identifier":
            return _spanned(ast.Identifier(node.value), node)

    raise ValueError(f"Grammar rule '{node.rule}' has no AST node")


def _spanned(ast_node, node):
    """Apply the span of a parse node to an AST node."""
    ast_node.span = node.span
    return ast_node
