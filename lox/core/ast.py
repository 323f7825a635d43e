"""Lox abstract syntax tree. Every node is an immutable record; the passes (resolver, interpreter, printer) dispatch
on the node class themselves, so nodes carry no behavior.

Nodes compare (and hash) by identity: the resolver keys its distance table by node, and two textually identical
references in different places must resolve independently.
"""

from dataclasses import dataclass

from lox.core.tokens import Token


class Expr:
    """Superclass of every expression node."""


class Stmt:
    """Superclass of every statement node."""


node = dataclass(frozen=True, eq=False)


# expressions

@node
class Literal(Expr):
    value: object


@node
class Grouping(Expr):
    expression: Expr


@node
class Unary(Expr):
    operator: Token
    right: Expr


@node
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@node
class Logical(Expr):
    """Short-circuit `and`/`or`."""
    left: Expr
    operator: Token
    right: Expr


@node
class Ternary(Expr):
    condition: Expr
    then_branch: Expr
    else_branch: Expr


@node
class Assign(Expr):
    name: Token
    value: Expr


@node
class Variable(Expr):
    name: Token


@node
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used to attribute runtime errors
    arguments: tuple


@node
class Get(Expr):
    obj: Expr
    name: Token


@node
class Set(Expr):
    obj: Expr
    name: Token
    value: Expr


@node
class This(Expr):
    keyword: Token


# statements

@node
class Expression(Stmt):
    expression: Expr


@node
class Print(Stmt):
    expression: Expr


@node
class Var(Stmt):
    name: Token
    initializer: Expr = None


@node
class Block(Stmt):
    statements: tuple


@node
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt = None


@node
class While(Stmt):
    """`increment` is only set by desugared `for` loops and runs after each iteration, `continue` included."""
    condition: Expr
    body: Stmt
    increment: Expr = None


@node
class Break(Stmt):
    keyword: Token


@node
class Continue(Stmt):
    keyword: Token


@node
class Return(Stmt):
    keyword: Token
    value: Expr = None


@node
class Function(Stmt):
    name: Token
    params: tuple
    body: tuple
    is_static: bool = False
    is_getter: bool = False


@node
class Class(Stmt):
    name: Token
    methods: tuple
