"""Static scope resolution. Walks a whole unit before it runs and records, for every local variable reference, how
many scopes up its declaration lives. The interpreter uses these distances to jump straight to the right environment,
so the scopes opened here must mirror exactly the environments the interpreter creates:

- a Block opens one scope,
- a function call opens one scope holding the parameters and the body's top-level declarations,
- a method sits in one extra scope between its closure and its parameters: `this` for instance methods (the bound
  environment), an empty one for static methods.

Globals are never tracked. A reference that isn't found in any scope is left out of the table and looked up
dynamically in the global environment at runtime.

Compile-time rules enforced along the way: no duplicate declaration in one local scope, no reading a local variable in
its own initializer, no `return` outside a function, no value returned from an initializer, no `this` outside an
instance method.
"""

from enum import Enum, auto

from lox.core import ast
from lox.lang.error import ResolveError, where_of


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    STATIC_METHOD = auto()
    INITIALIZER = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()


class Resolver:
    """Resolves one unit. Errors are appended to self.errors and forwarded to report, if given."""

    def __init__(self, report=None):
        self.report = report
        self.errors = []

        self.scopes = []     # list of {name: whether its initializer has finished}
        self.distances = {}  # node: hops to the declaring scope

        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE
        self.last_name = None  # last name token seen, locates errors that carry no token

    def resolve(self, statements):
        """Resolves every statement of the unit. Returns the distance table."""
        try:
            for stmt in statements:
                self.resolve_stmt(stmt)
        except RecursionError:
            self.scopes = []
            self.error(self.last_name, "expression nested too deeply")
        return self.distances

    def resolve_stmt(self, stmt):
        if isinstance(stmt, ast.Block):
            self.begin_scope()
            for statement in stmt.statements:
                self.resolve_stmt(statement)
            self.end_scope()

        elif isinstance(stmt, ast.Var):
            self.declare(stmt.name)
            if stmt.initializer is not None:
                self.resolve_expr(stmt.initializer)
            self.define(stmt.name)

        elif isinstance(stmt, ast.Function):
            # defined before the body so the function can call itself
            self.declare(stmt.name)
            self.define(stmt.name)
            self.resolve_function(stmt, FunctionType.FUNCTION)

        elif isinstance(stmt, ast.Class):
            self.resolve_class(stmt)

        elif isinstance(stmt, (ast.Expression, ast.Print)):
            self.resolve_expr(stmt.expression)

        elif isinstance(stmt, ast.If):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self.resolve_stmt(stmt.else_branch)

        elif isinstance(stmt, ast.While):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.body)
            if stmt.increment is not None:
                self.resolve_expr(stmt.increment)

        elif isinstance(stmt, ast.Return):
            if self.current_function is FunctionType.NONE:
                self.error(stmt.keyword, "can't return from top-level code")
            if stmt.value is not None:
                if self.current_function is FunctionType.INITIALIZER:
                    self.error(stmt.keyword, "can't return a value from an initializer")
                self.resolve_expr(stmt.value)

        elif isinstance(stmt, (ast.Break, ast.Continue)):
            pass  # checked at runtime

        else:
            raise TypeError(f"unknown statement {stmt!r}")

    def resolve_expr(self, expr):
        if isinstance(expr, ast.Variable):
            if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
                self.error(expr.name, f"can't read local variable '{expr.name.lexeme}' in its own initializer")
            self.resolve_local(expr, expr.name)

        elif isinstance(expr, ast.Assign):
            self.resolve_expr(expr.value)
            self.resolve_local(expr, expr.name)

        elif isinstance(expr, (ast.Binary, ast.Logical)):
            self.resolve_expr(expr.left)
            self.resolve_expr(expr.right)

        elif isinstance(expr, ast.Ternary):
            self.resolve_expr(expr.condition)
            self.resolve_expr(expr.then_branch)
            self.resolve_expr(expr.else_branch)

        elif isinstance(expr, ast.Unary):
            self.resolve_expr(expr.right)

        elif isinstance(expr, ast.Grouping):
            self.resolve_expr(expr.expression)

        elif isinstance(expr, ast.Call):
            self.resolve_expr(expr.callee)
            for argument in expr.arguments:
                self.resolve_expr(argument)

        elif isinstance(expr, ast.Get):
            self.resolve_expr(expr.obj)

        elif isinstance(expr, ast.Set):
            self.resolve_expr(expr.obj)
            self.resolve_expr(expr.value)

        elif isinstance(expr, ast.This):
            if self.current_class is ClassType.NONE:
                self.error(expr.keyword, "can't use 'this' outside of a class")
            elif self.current_function is FunctionType.STATIC_METHOD:
                self.error(expr.keyword, "can't use 'this' in a static method")
            elif not self.resolve_local(expr, expr.keyword):
                # a function nested in a static method: no enclosing scope binds `this`
                self.error(expr.keyword, "can't use 'this' in a static method")

        elif isinstance(expr, ast.Literal):
            pass

        else:
            raise TypeError(f"unknown expression {expr!r}")

    def resolve_class(self, stmt):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        for method in stmt.methods:
            if method.is_static:
                kind = FunctionType.STATIC_METHOD
            elif method.name.lexeme == "init":
                kind = FunctionType.INITIALIZER
            else:
                kind = FunctionType.METHOD

            self.begin_scope()
            if not method.is_static:
                self.scopes[-1]["this"] = True
            self.resolve_function(method, kind)
            self.end_scope()

        self.current_class = enclosing_class

    def resolve_function(self, function, kind):
        enclosing_function = self.current_function
        self.current_function = kind

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        for stmt in function.body:
            self.resolve_stmt(stmt)
        self.end_scope()

        self.current_function = enclosing_function

    def resolve_local(self, expr, name):
        """Records the distance to the innermost scope declaring name. Returns whether one was found."""
        self.last_name = name
        for distance, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.distances[expr] = distance
                return True
        return False

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name):
        self.last_name = name
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error(name, f"already a variable named '{name.lexeme}' in this scope")
        scope[name.lexeme] = False

    def define(self, name):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def error(self, token, msg):
        if token is None:
            error = ResolveError(msg, 0)
        else:
            error = ResolveError(msg, token.line, where_of(token))
        self.errors.append(error)
        if self.report is not None:
            self.report(error.line, error.where, error.msg)


def resolve(statements, report=None):
    """Resolves statements. Returns (distances, errors)."""
    resolver = Resolver(report)
    return resolver.resolve(statements), resolver.errors
