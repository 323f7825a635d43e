"""Lox tree-walking interpreter, host-facing entry points.

Program flow, one source unit at a time:
    1. Scanner (core/lexical.py): source text -> tokens. Reports every lexical error and keeps going.
    2. Parser (core/parser.py): tokens -> statements, by recursive descent. Resynchronizes after each syntax error.
    3. Resolver (core/resolver.py): statements -> distance table (node: scope hops). Enforces static rules. Runs over
       the whole unit before anything executes.
    4. Interpreter (core/interpreter.py): executes the statements against its persistent global environment.

Every error goes through one sink, a callable taking (line, where, message). If any compile-time error happened (steps
1-3), the unit doesn't run; lexical errors also stop the unit before parsing.
"""

from lox.core.interpreter import Interpreter
from lox.core.lexical import scan
from lox.core.parser import parse
from lox.core.resolver import resolve


__all__ = ["scan", "parse", "resolve", "interpret", "run"]


def interpret(statements, distances, interpreter=None, report=None):
    """Runs resolved statements. Returns the runtime error that aborted the unit, or None."""
    if interpreter is None:
        interpreter = Interpreter()

    error = interpreter.interpret(statements, distances)
    if error is not None and report is not None:
        report(error.line, error.where, error.msg)
    return error


def run(source, interpreter=None, report=None):
    """Scans, parses, resolves and runs source. Returns the list of errors encountered (compile-time errors, or the
    single runtime error that aborted the run).
    """
    tokens, errors = scan(source, report)
    if errors:
        return errors

    statements, errors = parse(tokens, report)
    if errors:
        return errors

    distances, errors = resolve(statements, report)
    if errors:
        return errors

    error = interpret(statements, distances, interpreter, report)
    return [error] if error is not None else []
