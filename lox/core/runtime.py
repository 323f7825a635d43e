"""Runtime object model: callables, classes, instances, and the completion records statements produce.

Control transfer (`return`, `break`, `continue`) is not done with Python exceptions. Every statement execution returns
a Completion, and callers check it after each nested statement: loops consume BREAK/CONTINUE, calls consume RETURN.
A BREAK or CONTINUE that reaches a call boundary or the top level is a runtime error.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto

from lox.core.environment import Environment
from lox.core.tokens import Token
from lox.lang.error import LoxRuntimeError


class Signal(Enum):
    NORMAL = auto()
    BREAK = auto()
    CONTINUE = auto()
    RETURN = auto()


@dataclass(frozen=True)
class Completion:
    """How a statement finished. `value` is only meaningful for RETURN, `token` is the statement's keyword."""
    signal: Signal
    value: object = None
    token: Token = None

    @property
    def abrupt(self):
        return self.signal is not Signal.NORMAL


NORMAL = Completion(Signal.NORMAL)


def escaped(completion):
    """Error for a break/continue that left every loop behind."""
    return LoxRuntimeError(completion.token, f"'{completion.token.lexeme}' outside of a loop")


class LoxCallable(ABC):
    """Anything a call expression can invoke."""

    @abstractmethod
    def arity(self):
        """Number of arguments the callable expects."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Invokes the callable. Argument count has already been checked against arity."""


class LoxFunction(LoxCallable):
    """A function declaration paired with the environment it closed over. The closure is shared, not copied, by every
    call, which is what lets closures keep mutable state.
    """

    def __init__(self, declaration, closure, is_initializer=False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self):
        return self.declaration.name.lexeme

    @property
    def is_static(self):
        return self.declaration.is_static

    @property
    def is_getter(self):
        return self.declaration.is_getter

    def bind(self, instance):
        """Returns a copy of this method whose closure maps `this` to instance."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        completion = interpreter.execute_block(self.declaration.body, environment)
        if completion.signal in (Signal.BREAK, Signal.CONTINUE):
            raise escaped(completion)

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if completion.signal is Signal.RETURN:
            return completion.value
        return None

    def __str__(self):
        return f"<fn {self.name}>"

    def __repr__(self):
        return f"LoxFunction({self.name})"


class LoxClass(LoxCallable):
    """A class: a name and its methods, static ones included. Calling it constructs an instance."""

    def __init__(self, name, methods):
        self.name = name
        self.methods = methods

    def find_method(self, name):
        """Instance method called name, or None."""
        method = self.methods.get(name)
        if method is None or method.is_static:
            return None
        return method

    def get(self, name, interpreter):
        """Property read on the class itself: only static methods are visible, and they are never bound."""
        method = self.methods.get(name.lexeme)
        if method is None or not method.is_static:
            raise LoxRuntimeError(name, f"undefined property '{name.lexeme}'")

        if method.is_getter:
            return method.call(interpreter, [])
        return method

    def arity(self):
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter, arguments):
        """Creates an instance and runs `init` on it, if defined. Whatever `init` returns, the instance is the result."""
        instance = LoxInstance(self)

        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)

        return instance

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"LoxClass({self.name})"


class LoxInstance:
    """An instance: a back-reference to its class plus fields created lazily on first assignment."""

    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name, interpreter):
        """Fields shadow methods. Methods are bound to this instance on every access; getters run right away."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is None:
            raise LoxRuntimeError(name, f"undefined property '{name.lexeme}'")

        bound = method.bind(self)
        if method.is_getter:
            return bound.call(interpreter, [])
        return bound

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return self.klass.name

    def __repr__(self):
        return f"LoxInstance({self.klass.name})"


def stringify(value):
    """Lox representation of a runtime value, as `print` shows it."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return f"{value:.0f}"
        return repr(value)
    return str(value)
