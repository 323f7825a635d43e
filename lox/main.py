"""Runs the Lox interpreter on a file, or in command-line mode if no file is given. Called from the lox executable
script.

Exit codes follow sysexits: 65 if the source has compile-time errors, 70 if it stopped on a runtime error.
"""

import argparse
import sys

from lox.lang.error import ErrorHandler
from lox.lang.session import Session
from lox.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="lox", description="Tree-walking interpreter for the Lox language.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--tokens", action="store_true", help="print the tokens of each unit before running it")
    parser.add_argument("--ast", action="store_true", help="print the parsed statements of each unit in prefix form")
    parser.add_argument("--no-color", action="store_true", help="don't color error messages")
    return parser


def main(argv=None):
    """Runs lox interpreter. Returns the exit code; fatal errors exit directly."""
    args = build_parser().parse_args(argv)

    with ErrorHandler(color=not args.no_color) as error_handler:
        options = {"show_tokens": args.tokens, "show_ast": args.ast}

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, **options)
            sess.run()
        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, **options)).cmdloop()
            error_handler.reset()  # errors in the shell don't outlive their input

    return error_handler.exit_code


if __name__ == "__main__":
    sys.exit(main())
