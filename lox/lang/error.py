"""Error handling for the Lox language. Every stage of the pipeline reports through the same sink shape,
(line, where, message), where `where` is a short location context such as "at 'x'" or "at end".

Lexical, syntactic and resolver errors are reported and collected so that one pass can surface all of them. Runtime
errors are raised as LoxRuntimeError and abort the current unit. If another type of error makes it all the way to
ErrorHandler, it is assumed to be an internal issue.
"""

import sys

from termcolor import colored


class LoxError(Exception):
    """Base for every error the Lox pipeline can report. Keeps the (line, where, message) triple around so that
    stages can both report and collect their errors.
    """

    def __init__(self, msg, line, where=""):
        super().__init__(msg)
        self.msg = msg
        self.line = line
        self.where = where

    def __str__(self):
        location = f" {self.where}" if self.where else ""
        return f"[line {self.line}] error{location}: {self.msg}"


class ScanError(LoxError):
    """Unexpected character, unterminated string or unterminated block comment."""


class ParseError(LoxError):
    """Malformed construct. Raised inside the parser to unwind to the statement boundary."""


class ResolveError(LoxError):
    """Static rule violation: duplicate declaration, illegal `this`/`return`, self-referential initializer."""


class LoxRuntimeError(LoxError):
    """Runtime failure carrying the offending token."""

    def __init__(self, token, msg):
        super().__init__(msg, token.line, where_of(token))
        self.token = token


def where_of(token):
    """Location context of token, as shown in error messages."""
    if token.lexeme == "":
        return "at end"
    return f"at '{token.lexeme}'"


class ErrorHandler:
    """Error sink for a session. Prints colored diagnostics and remembers what kind of errors happened so that the
    driver can map them to exit codes. Also a context manager that turns stray Python errors into reported ones.
    """
    ERROR = "red"

    EXIT_COMPILE = 65
    EXIT_RUNTIME = 70

    def __init__(self, fatal=True, color=True, stream=None):
        self.fatal = fatal
        self.color = color
        self.stream = stream if stream is not None else sys.stderr

        self.path = None
        self.lines = []

        self.had_error = False
        self.had_runtime_error = False

    def register_file(self, path):
        """Registers path used as prefix of every message."""
        self.path = path

    def register_source(self, source):
        """Registers the source unit being run, used to show the offending line."""
        self.lines = source.split("\n")

    def reset(self):
        """Forgets previous errors. Called between independent units in the shell."""
        self.had_error = False
        self.had_runtime_error = False

    @property
    def exit_code(self):
        if self.had_error:
            return ErrorHandler.EXIT_COMPILE
        if self.had_runtime_error:
            return ErrorHandler.EXIT_RUNTIME
        return 0

    def _paint(self, text, color=None, attrs=None):
        return colored(text, color, attrs=attrs, no_color=not self.color)

    def _emit(self, text):
        print(text, file=self.stream)

    def diagnose(self, line, where, color=ERROR):
        """Returns the offending source line with the lexeme in `where` highlighted, or None if it can't be found."""
        if not 0 < line <= len(self.lines) or not where.startswith("at '"):
            return None

        text = self.lines[line - 1]
        lexeme = where[len("at '"):-1]
        start = text.find(lexeme)
        if not lexeme or start == -1:
            return None

        end = start + len(lexeme)
        diagnosis = "  " + text[:start] + self._paint(text[start:end], color, attrs=["bold"]) + text[end:] + "\n"
        diagnosis += "  " + " " * start + self._paint("^" + "~" * (end - start - 1), color, attrs=["bold"])
        return diagnosis

    def _header(self, line, kind, color, where=""):
        if self.path and line:
            prefix = f"{self.path}:{line}: "
        elif self.path:
            prefix = f"{self.path}: "
        else:
            prefix = f"[line {line}] "
        location = f" {where}" if where else ""
        return self._paint(prefix, attrs=["bold"]) + self._paint(kind, color, attrs=["bold"]) + f"{location}: "

    def report(self, line, where, message):
        """Reports a compile-time (lexical, syntactic or static) error. Never stops the current stage."""
        self.had_error = True
        self._emit(self._header(line, "error", ErrorHandler.ERROR, where) + message)

        diagnosis = self.diagnose(line, where)
        if diagnosis:
            self._emit(diagnosis)

    def throw(self, error):
        """Reports a runtime, session or internal error. Exits right away if this handler is fatal."""
        if isinstance(error, LoxRuntimeError):
            self.had_runtime_error = True
            self._emit(self._header(error.line, "runtime error", ErrorHandler.ERROR) + error.msg)
            diagnosis = self.diagnose(error.line, error.where)
            if diagnosis:
                self._emit(diagnosis)
        elif isinstance(error, LoxError):
            self.had_error = True
            self._emit(self._header(error.line, "error", ErrorHandler.ERROR) + error.msg)
        else:
            self.had_runtime_error = True
            tag = self._paint("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
            self._emit(tag + self._paint("error: ", ErrorHandler.ERROR, attrs=["bold"]) + str(error))

        if self.fatal:
            sys.exit(self.exit_code)

    def check(self):
        """Exits with the mapped exit code if anything was reported and this handler is fatal. Returns whether the
        unit is clean.
        """
        if self.fatal and self.exit_code:
            sys.exit(self.exit_code)
        return not self.exit_code

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self._emit(self._paint("error: ", ErrorHandler.ERROR, attrs=["bold"]) + "keyboard interrupt")
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(RuntimeError("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, LoxError):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(RuntimeError(f"unknown error: '{exc_type.__name__}: {exc_val}'"))
            do_exit = True

        return not do_exit
