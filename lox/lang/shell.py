"""Handles interactive/command-line mode for the Lox interpreter. Uses cmd as backend."""

import cmd

from lox.core.lexical import scan
from lox.core.tokens import TokenType


OPENERS = {TokenType.LEFT_BRACE: TokenType.RIGHT_BRACE, TokenType.LEFT_PAREN: TokenType.RIGHT_PAREN}


class Shell(cmd.Cmd):
    """Lox interpreter shell."""
    intro = "Lox interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sess = sess
        self._tmp_line = ""

    @staticmethod
    def is_incomplete(source):
        """Whether or not source has more opening braces/parentheses than closing ones."""
        tokens, __ = scan(source)
        balance = 0
        for token in tokens:
            if token.type in OPENERS:
                balance += 1
            elif token.type in OPENERS.values():
                balance -= 1
        return balance > 0

    def default(self, line):
        """Executes arbitrary Lox source. Input keeps accumulating while braces or parentheses are left open."""
        source = self._tmp_line + line + "\n"

        if Shell.is_incomplete(source):
            self._tmp_line = source
            self.prompt = self.secondary_prompt
            return

        self._tmp_line = ""
        self.prompt = self._tmp_prompt

        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.sess.error_handler.reset()
            if self.sess.add(source):
                self.sess.run()

    def onecmd(self, line):
        """Continuation lines are always Lox source, even if they start with a command name."""
        if self._tmp_line:
            return self.default(line)
        return super().onecmd(line)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the Lox interpreter!\n\n"
              "Lox is a small dynamically-typed scripting language with closures and classes.\n"
              "Each input is run as soon as its braces and parentheses are balanced, and\n"
              "everything defined stays around for later inputs.\n\n"
              "Try it out by typing 'var greeting = \"hi\";', then 'greeting + \" there\"'.\n"
              "Type 'exit' or press Ctrl-D to leave.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
