"""Scope chains. An Environment maps names to values and links to the scope that encloses it; the link never changes
once set. Closures hold on to (and share) the environment they were created in.
"""

from lox.lang.error import LoxRuntimeError


class Environment:

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, value):
        """Binds name in this scope only, replacing any existing binding."""
        self.values[name] = value

    def get(self, name):
        """Looks name (a token) up through the chain."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                return environment.values[name.lexeme]
            environment = environment.enclosing

        raise LoxRuntimeError(name, f"undefined variable '{name.lexeme}'")

    def assign(self, name, value):
        """Rebinds name (a token) in the nearest scope defining it. Never creates a binding."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                environment.values[name.lexeme] = value
                return
            environment = environment.enclosing

        raise LoxRuntimeError(name, f"undefined variable '{name.lexeme}'")

    def ancestor(self, distance):
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance, name):
        """Reads name from the scope exactly distance hops up. The resolver guarantees it is there."""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance, name, value):
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self):
        return f"Environment({self.values}, enclosing={self.enclosing is not None})"
