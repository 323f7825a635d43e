"""Tree-walking evaluator. Holds all the state a session needs between units: the global environment, the current
environment and the accumulated resolver distances, so that a REPL can keep defining things across inputs.

Statements produce Completion records (see runtime.py) instead of raising to transfer control; expressions produce
plain Python values:

    nil -> None, booleans -> bool, numbers -> float, strings -> str,
    functions/classes -> LoxFunction/LoxClass, instances -> LoxInstance
"""

import math
import sys

from lox.core import ast
from lox.core.environment import Environment
from lox.core.runtime import NORMAL, Completion, LoxCallable, LoxClass, LoxFunction, LoxInstance, Signal, escaped, \
    stringify
from lox.core.tokens import TokenType
from lox.lang.error import LoxRuntimeError


def is_truthy(value):
    """nil and false are falsy, everything else (0 and "" included) is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    """nil only equals nil. Values of different types are never equal, so true != 1."""
    if left is None:
        return right is None
    return type(left) is type(right) and left == right


def divide(left, right):
    """IEEE 754 division: x/0 is +-inf and 0/0 is nan rather than an error."""
    try:
        return left / right
    except ZeroDivisionError:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)


def check_number(operator, operand):
    if not isinstance(operand, float):
        raise LoxRuntimeError(operator, "operand must be a number")


def check_numbers(operator, left, right):
    if not isinstance(left, float):
        raise LoxRuntimeError(operator, "left operand must be a number")
    if not isinstance(right, float):
        raise LoxRuntimeError(operator, "right operand must be a number")


ARITHMETIC = {
    TokenType.MINUS: lambda left, right: left - right,
    TokenType.STAR: lambda left, right: left * right,
    TokenType.SLASH: divide,
    TokenType.GREATER: lambda left, right: left > right,
    TokenType.GREATER_EQUAL: lambda left, right: left >= right,
    TokenType.LESS: lambda left, right: left < right,
    TokenType.LESS_EQUAL: lambda left, right: left <= right,
}


class Interpreter:

    def __init__(self, out=None):
        self.out = out if out is not None else sys.stdout

        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}  # resolver distances, accumulated over every unit run so far

    def interpret(self, statements, distances=None):
        """Runs a resolved unit. Returns the LoxRuntimeError that aborted it, or None. The environment is left as the
        unit's statements left it, so the next unit sees every global defined before the error.
        """
        if distances:
            self.locals.update(distances)

        try:
            for stmt in statements:
                completion = self.execute(stmt)
                if completion.signal in (Signal.BREAK, Signal.CONTINUE):
                    raise escaped(completion)
        except LoxRuntimeError as error:
            self.environment = self.globals
            return error
        return None

    # statements

    def execute(self, stmt):
        """Executes stmt and returns how it completed."""
        if isinstance(stmt, ast.Expression):
            self.evaluate(stmt.expression)

        elif isinstance(stmt, ast.Print):
            print(stringify(self.evaluate(stmt.expression)), file=self.out)

        elif isinstance(stmt, ast.Var):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)

        elif isinstance(stmt, ast.Block):
            return self.execute_block(stmt.statements, Environment(self.environment))

        elif isinstance(stmt, ast.If):
            if is_truthy(self.evaluate(stmt.condition)):
                return self.execute(stmt.then_branch)
            if stmt.else_branch is not None:
                return self.execute(stmt.else_branch)

        elif isinstance(stmt, ast.While):
            return self.execute_while(stmt)

        elif isinstance(stmt, ast.Break):
            return Completion(Signal.BREAK, token=stmt.keyword)

        elif isinstance(stmt, ast.Continue):
            return Completion(Signal.CONTINUE, token=stmt.keyword)

        elif isinstance(stmt, ast.Return):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            return Completion(Signal.RETURN, value, stmt.keyword)

        elif isinstance(stmt, ast.Function):
            self.environment.define(stmt.name.lexeme, LoxFunction(stmt, self.environment))

        elif isinstance(stmt, ast.Class):
            self.execute_class(stmt)

        else:
            raise TypeError(f"unknown statement {stmt!r}")

        return NORMAL

    def execute_block(self, statements, environment):
        """Runs statements in environment, stopping at the first abrupt completion. Always restores the previous
        environment.
        """
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                completion = self.execute(stmt)
                if completion.abrupt:
                    return completion
            return NORMAL
        finally:
            self.environment = previous

    def execute_while(self, stmt):
        while is_truthy(self.evaluate(stmt.condition)):
            completion = self.execute(stmt.body)
            if completion.signal is Signal.BREAK:
                break
            if completion.signal is Signal.RETURN:
                return completion

            # CONTINUE ends up here too: it skips the rest of the body, never the increment
            if stmt.increment is not None:
                self.evaluate(stmt.increment)

        return NORMAL

    def execute_class(self, stmt):
        # static methods have no receiver; they close over an empty scope standing where `this` would be
        static_scope = Environment(self.environment)

        methods = {}
        for method in stmt.methods:
            if method.is_static:
                methods[method.name.lexeme] = LoxFunction(method, static_scope)
            else:
                is_initializer = method.name.lexeme == "init"
                methods[method.name.lexeme] = LoxFunction(method, self.environment, is_initializer)

        self.environment.define(stmt.name.lexeme, LoxClass(stmt.name.lexeme, methods))

    # expressions

    def evaluate(self, expr):
        if isinstance(expr, ast.Literal):
            return expr.value

        if isinstance(expr, ast.Grouping):
            return self.evaluate(expr.expression)

        if isinstance(expr, ast.Variable):
            return self.look_up(expr.name, expr)

        if isinstance(expr, ast.Assign):
            value = self.evaluate(expr.value)
            distance = self.locals.get(expr)
            if distance is None:
                self.globals.assign(expr.name, value)
            else:
                self.environment.assign_at(distance, expr.name, value)
            return value

        if isinstance(expr, ast.Unary):
            return self.evaluate_unary(expr)

        if isinstance(expr, ast.Binary):
            return self.evaluate_binary(expr)

        if isinstance(expr, ast.Logical):
            left = self.evaluate(expr.left)
            if expr.operator.type == TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)

        if isinstance(expr, ast.Ternary):
            if is_truthy(self.evaluate(expr.condition)):
                return self.evaluate(expr.then_branch)
            return self.evaluate(expr.else_branch)

        if isinstance(expr, ast.Call):
            return self.evaluate_call(expr)

        if isinstance(expr, ast.Get):
            obj = self.evaluate(expr.obj)
            if isinstance(obj, (LoxInstance, LoxClass)):
                try:
                    return obj.get(expr.name, self)
                except RecursionError:
                    # getters run without a call expression
                    raise LoxRuntimeError(expr.name, "stack overflow") from None
            raise LoxRuntimeError(expr.name, "only instances have properties")

        if isinstance(expr, ast.Set):
            obj = self.evaluate(expr.obj)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(expr.name, "only instances have fields")
            value = self.evaluate(expr.value)
            obj.set(expr.name, value)
            return value

        if isinstance(expr, ast.This):
            return self.look_up(expr.keyword, expr)

        raise TypeError(f"unknown expression {expr!r}")

    def evaluate_unary(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.type == TokenType.BANG:
            return not is_truthy(right)

        check_number(expr.operator, right)
        return -right

    def evaluate_binary(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator

        if operator.type == TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if operator.type == TokenType.BANG_EQUAL:
            return not is_equal(left, right)
        if operator.type == TokenType.PLUS and isinstance(left, str) and isinstance(right, str):
            return left + right

        check_numbers(operator, left, right)
        if operator.type == TokenType.PLUS:
            return left + right
        return ARITHMETIC[operator.type](left, right)

    def evaluate_call(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "can only call functions and classes")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(expr.paren, f"expected {callee.arity()} arguments but got {len(arguments)}")

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "stack overflow") from None

    def look_up(self, name, expr):
        distance = self.locals.get(expr)
        if distance is None:
            return self.globals.get(name)
        return self.environment.get_at(distance, name.lexeme)
