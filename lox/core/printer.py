"""Debug views of the AST.

`print_ast` renders any node in parenthesized prefix form, e.g. `1 + 2 * 3` becomes `(+ 1 (* 2 3))`. It is meant for
eyes only.

`to_source` renders an expression back into Lox source with every compound expression parenthesized, e.g.
`(1 + (2 * 3))`. Scanning and parsing that text again gives a tree that evaluates to the same value.
"""

import math
from decimal import Decimal

from lox.core import ast
from lox.core.runtime import stringify


def literal(value):
    if isinstance(value, str):
        return f"\"{value}\""
    if isinstance(value, float) and math.isfinite(value) and not value.is_integer():
        # positional only: the scanner has no exponent syntax
        return format(Decimal(repr(value)), "f")
    return stringify(value)


def parenthesize(name, *parts):
    return "(" + " ".join([name] + [part for part in parts if part]) + ")"


def print_ast(node):
    """Prefix form of an expression or statement."""
    if isinstance(node, ast.Literal):
        return literal(node.value)
    if isinstance(node, ast.Grouping):
        return parenthesize("group", print_ast(node.expression))
    if isinstance(node, ast.Unary):
        return parenthesize(node.operator.lexeme, print_ast(node.right))
    if isinstance(node, (ast.Binary, ast.Logical)):
        return parenthesize(node.operator.lexeme, print_ast(node.left), print_ast(node.right))
    if isinstance(node, ast.Ternary):
        return parenthesize("?:", print_ast(node.condition), print_ast(node.then_branch),
                            print_ast(node.else_branch))
    if isinstance(node, ast.Variable):
        return node.name.lexeme
    if isinstance(node, ast.Assign):
        return parenthesize("=", node.name.lexeme, print_ast(node.value))
    if isinstance(node, ast.Call):
        return parenthesize("call", print_ast(node.callee), *(print_ast(arg) for arg in node.arguments))
    if isinstance(node, ast.Get):
        return parenthesize(".", print_ast(node.obj), node.name.lexeme)
    if isinstance(node, ast.Set):
        return parenthesize("=", parenthesize(".", print_ast(node.obj), node.name.lexeme), print_ast(node.value))
    if isinstance(node, ast.This):
        return "this"

    if isinstance(node, ast.Expression):
        return parenthesize(";", print_ast(node.expression))
    if isinstance(node, ast.Print):
        return parenthesize("print", print_ast(node.expression))
    if isinstance(node, ast.Var):
        initializer = print_ast(node.initializer) if node.initializer is not None else None
        return parenthesize("var", node.name.lexeme, initializer)
    if isinstance(node, ast.Block):
        return parenthesize("block", *(print_ast(stmt) for stmt in node.statements))
    if isinstance(node, ast.If):
        else_branch = print_ast(node.else_branch) if node.else_branch is not None else None
        return parenthesize("if", print_ast(node.condition), print_ast(node.then_branch), else_branch)
    if isinstance(node, ast.While):
        increment = print_ast(node.increment) if node.increment is not None else None
        return parenthesize("while", print_ast(node.condition), print_ast(node.body), increment)
    if isinstance(node, ast.Break):
        return "(break)"
    if isinstance(node, ast.Continue):
        return "(continue)"
    if isinstance(node, ast.Return):
        value = print_ast(node.value) if node.value is not None else None
        return parenthesize("return", value)
    if isinstance(node, ast.Function):
        kind = "getter" if node.is_getter else "fun"
        if node.is_static:
            kind = "class " + kind
        params = parenthesize("params", *(param.lexeme for param in node.params)) if not node.is_getter else None
        return parenthesize(kind, node.name.lexeme, params, *(print_ast(stmt) for stmt in node.body))
    if isinstance(node, ast.Class):
        return parenthesize("class", node.name.lexeme, *(print_ast(method) for method in node.methods))

    raise TypeError(f"can't print {node!r}")


def to_source(expr):
    """Fully parenthesized Lox source for an expression built from literals, operators, groupings, variables, calls and
    property accesses.
    """
    if isinstance(expr, ast.Literal):
        return literal(expr.value)
    if isinstance(expr, ast.Grouping):
        return f"({to_source(expr.expression)})"
    if isinstance(expr, ast.Unary):
        return f"({expr.operator.lexeme}{to_source(expr.right)})"
    if isinstance(expr, (ast.Binary, ast.Logical)):
        return f"({to_source(expr.left)} {expr.operator.lexeme} {to_source(expr.right)})"
    if isinstance(expr, ast.Ternary):
        return (f"({to_source(expr.condition)} ? {to_source(expr.then_branch)} : "
                f"{to_source(expr.else_branch)})")
    if isinstance(expr, ast.Variable):
        return expr.name.lexeme
    if isinstance(expr, ast.This):
        return "this"
    if isinstance(expr, ast.Call):
        return f"{to_source(expr.callee)}({', '.join(to_source(arg) for arg in expr.arguments)})"
    if isinstance(expr, ast.Get):
        return f"{to_source(expr.obj)}.{expr.name.lexeme}"

    raise TypeError(f"can't emit {expr!r}")
