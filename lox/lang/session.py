"""Session control for Lox. A session owns one interpreter, so globals and resolved distances persist across every
unit added to it: a whole file in file mode, one (possibly multi-line) input in command-line mode.
"""

from lox.core import ast
from lox.core.interpreter import Interpreter
from lox.core.lexical import scan
from lox.core.parser import parse
from lox.core.printer import print_ast
from lox.core.resolver import resolve
from lox.lang.error import LoxError


class Session:
    """Governs a Lox session. Units are checked when added and executed when run, in order."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, out=None, show_tokens=False, show_ast=False):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.show_tokens = show_tokens
        self.show_ast = show_ast

        self.interpreter = Interpreter(out)
        self.to_exec = []  # list of (statements, distances) units waiting to run

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    source = file.read()
            except (OSError, UnicodeDecodeError):
                raise LoxError(f"'{path}' could not be opened", 0)

            self.add(source)

        elif not cmd_line:
            raise LoxError(f"'{Session.SH_FILE}' is a reserved filename", 0)

    @property
    def out(self):
        return self.interpreter.out

    def add(self, source):
        """Scans, parses and resolves source, then queues it. Returns whether it was free of compile-time errors. In
        command-line mode, a unit made of one expression statement is turned into a print so its value is echoed.
        """
        self.error_handler.register_source(source)
        report = self.error_handler.report

        tokens, errors = scan(source, report)
        if self.show_tokens:
            for token in tokens:
                print(token, file=self.out)
        if errors:
            return self.error_handler.check()

        statements, errors = parse(tokens, report)
        if self.show_ast:
            for stmt in statements:
                print(print_ast(stmt), file=self.out)
        if errors:
            return self.error_handler.check()

        distances, errors = resolve(statements, report)
        if errors:
            return self.error_handler.check()

        if self.cmd_line and len(statements) == 1 and isinstance(statements[0], ast.Expression):
            statements = [ast.Print(statements[0].expression)]

        self.to_exec.append((statements, distances))
        return True

    def run(self):
        """Runs every queued unit. The first runtime error drops the rest of the queue and is thrown."""
        while self.to_exec:
            statements, distances = self.to_exec.pop(0)

            error = self.interpreter.interpret(statements, distances)
            if error is not None:
                self.to_exec = []
                self.error_handler.throw(error)
