"""Lexical analysis for Lox. Turns source text into a flat list of tokens in a single left-to-right pass.

Roughly, the lexical grammar is

```
NUMBER     ::= DIGIT+ ( "." DIGIT+ )?          ; always stored as float
STRING     ::= "\"" <any char except "\"">* "\""  ; no escapes, may span lines
IDENTIFIER ::= ALPHA ( ALPHA | DIGIT )*       ; ALPHA is [a-zA-Z_]
comment    ::= "//" <char>* "\n" | "/*" <char>* "*/"   ; block comments don't nest
```

Scanning never stops on an error: every unexpected character, unterminated string or unterminated block comment is
reported and scanning carries on, so a single pass surfaces every lexical error in the source.
"""

from lox.core.tokens import KEYWORDS, Token, TokenType
from lox.lang.error import ScanError


SINGLE = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "-": TokenType.MINUS,
    "+": TokenType.PLUS,
    ";": TokenType.SEMICOLON,
    "*": TokenType.STAR,
    "?": TokenType.QUESTION,
    ":": TokenType.COLON,
}

# char: (type if followed by "=", type otherwise)
DOUBLE = {
    "!": (TokenType.BANG_EQUAL, TokenType.BANG),
    "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    "<": (TokenType.LESS_EQUAL, TokenType.LESS),
    ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
}

WHITESPACE = " \r\t"


def is_digit(char):
    return "0" <= char <= "9"


def is_alpha(char):
    return "a" <= char <= "z" or "A" <= char <= "Z" or char == "_"


def is_alphanumeric(char):
    return is_alpha(char) or is_digit(char)


class Scanner:
    """Scans one source unit. Errors are appended to self.errors and forwarded to report, if given."""

    def __init__(self, source, report=None):
        self.source = source
        self.report = report

        self.tokens = []
        self.errors = []

        self.start = 0
        self.current = 0
        self.line = 1

    def scan_tokens(self):
        """Returns the token list, always terminated by an EOF token."""
        while not self.at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self):
        char = self.advance()

        if char in SINGLE:
            self.add_token(SINGLE[char])
        elif char in DOUBLE:
            matched, single = DOUBLE[char]
            self.add_token(matched if self.match("=") else single)
        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.at_end():
                    self.advance()
            elif self.match("*"):
                self.block_comment()
            else:
                self.add_token(TokenType.SLASH)
        elif char == "\n":
            self.line += 1
        elif char in WHITESPACE:
            pass
        elif char == "\"":
            self.string()
        elif is_digit(char):
            self.number()
        elif is_alpha(char):
            self.identifier()
        else:
            self.error(f"unexpected character '{char}'")

    def block_comment(self):
        """Skips a /* ... */ comment. Nested openers are plain text."""
        line = self.line
        while not (self.peek() == "*" and self.peek_next() == "/"):
            if self.at_end():
                self.error("unterminated block comment", line)
                return
            if self.advance() == "\n":
                self.line += 1

        self.current += 2

    def string(self):
        line = self.line
        while self.peek() != "\"":
            if self.at_end():
                self.error("unterminated string", line)
                return
            if self.advance() == "\n":
                self.line += 1

        self.advance()  # closing "
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while is_digit(self.peek()):
            self.advance()

        # a trailing "." is left for the next token (method call on a number, or an error)
        if self.peek() == "." and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        while is_alphanumeric(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def add_token(self, token_type, literal=None):
        text = self.source[self.start:self.current]
        self.tokens.append(Token(token_type, text, literal, self.line))

    def error(self, msg, line=None):
        """Records a lexical error. Never raises."""
        error = ScanError(msg, self.line if line is None else line)
        self.errors.append(error)
        if self.report is not None:
            self.report(error.line, error.where, error.msg)

    def match(self, expected):
        if self.at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def advance(self):
        char = self.source[self.current]
        self.current += 1
        return char

    def peek(self):
        return "" if self.at_end() else self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return ""
        return self.source[self.current + 1]

    def at_end(self):
        return self.current >= len(self.source)


def scan(source, report=None):
    """Scans source. Returns (tokens, errors)."""
    scanner = Scanner(source, report)
    return scanner.scan_tokens(), scanner.errors
