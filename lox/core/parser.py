"""Recursive-descent parser for Lox. Turns the token list into a list of statements.

Formally, the grammar (lowest precedence first) is

```
program     ::= declaration* EOF
declaration ::= "class" IDENTIFIER "{" method* "}"
              | "fun" function
              | "var" IDENTIFIER ( "=" expression )? ";"
              | statement
method      ::= "class"? IDENTIFIER ( "(" parameters? ")" )? block   ; no parameter list: getter
function    ::= IDENTIFIER "(" parameters? ")" block
statement   ::= exprStmt | printStmt | block | ifStmt | whileStmt | forStmt
              | "break" ";" | "continue" ";" | "return" expression? ";"

expression  ::= assignment
assignment  ::= ( call "." )? IDENTIFIER "=" assignment | ternary
ternary     ::= logic_or ( "?" expression ":" ternary )?
logic_or    ::= logic_and ( "or" logic_and )*
logic_and   ::= equality ( "and" equality )*
equality    ::= comparison ( ( "!=" | "==" ) comparison )*
comparison  ::= term ( ( ">" | ">=" | "<" | "<=" ) term )*
term        ::= factor ( ( "-" | "+" ) factor )*
factor      ::= unary ( ( "/" | "*" ) unary )*
unary       ::= ( "!" | "-" ) unary | call
call        ::= primary ( "(" arguments? ")" | "." IDENTIFIER )*
primary     ::= NUMBER | STRING | "true" | "false" | "nil" | "this" | IDENTIFIER | "(" expression ")"
```

Bodies of if/while/for recurse into `statement`, one level below `declaration`, so `if (a) var b;` is rejected by the
grammar itself. `for` loops have no node of their own: they are desugared into a While inside a Block.

On a syntax error the parser reports it, skips to the next statement boundary and keeps going ("panic mode"), so a
single run reports every independent syntax error.
"""

from lox.core import ast
from lox.core.tokens import TokenType
from lox.lang.error import ParseError, where_of


MAX_ARGUMENTS = 255

# tokens that start a new statement, used when resynchronizing
BOUNDARIES = {
    TokenType.CLASS,
    TokenType.FUN,
    TokenType.VAR,
    TokenType.FOR,
    TokenType.IF,
    TokenType.WHILE,
    TokenType.PRINT,
    TokenType.RETURN,
    TokenType.BREAK,
    TokenType.CONTINUE,
}

# binary operators that can't start an expression
BINARY_ONLY = (
    TokenType.BANG_EQUAL,
    TokenType.EQUAL_EQUAL,
    TokenType.GREATER,
    TokenType.GREATER_EQUAL,
    TokenType.LESS,
    TokenType.LESS_EQUAL,
    TokenType.PLUS,
    TokenType.SLASH,
    TokenType.STAR,
)


class Parser:
    """Parses one token list. Errors are appended to self.errors and forwarded to report, if given."""

    def __init__(self, tokens, report=None):
        self.tokens = tokens
        self.report = report
        self.errors = []
        self.current = 0

    def parse(self):
        """Returns every statement that parsed cleanly, in order."""
        statements = []
        try:
            while not self.at_end():
                stmt = self.declaration()
                if stmt is not None:
                    statements.append(stmt)
        except RecursionError:
            # the rest of the unit is dropped
            self.error(self.peek(), "expression nested too deeply")
        return statements

    # declarations

    def declaration(self):
        try:
            if self.match(TokenType.CLASS):
                return self.class_declaration()
            if self.match(TokenType.FUN):
                return self.function("function")
            if self.match(TokenType.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "expected class name")
        self.consume(TokenType.LEFT_BRACE, "expected '{' before class body")

        methods = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.at_end():
            if self.match(TokenType.CLASS):
                methods.append(self.function("static method"))
            else:
                methods.append(self.function("method"))

        self.consume(TokenType.RIGHT_BRACE, "expected '}' after class body")
        return ast.Class(name, tuple(methods))

    def function(self, kind):
        """Parses the rest of a function or method declaration. Only methods may omit the parameter list, which makes
        them getters.
        """
        name = self.consume(TokenType.IDENTIFIER, f"expected {kind} name")

        params = []
        is_getter = False
        if kind == "function" or self.check(TokenType.LEFT_PAREN):
            self.consume(TokenType.LEFT_PAREN, f"expected '(' after {kind} name")
            if not self.check(TokenType.RIGHT_PAREN):
                params.append(self.consume(TokenType.IDENTIFIER, "expected parameter name"))
                while self.match(TokenType.COMMA):
                    if len(params) >= MAX_ARGUMENTS:
                        self.error(self.peek(), f"can't have more than {MAX_ARGUMENTS} parameters")
                    params.append(self.consume(TokenType.IDENTIFIER, "expected parameter name"))
            self.consume(TokenType.RIGHT_PAREN, "expected ')' after parameters")
        else:
            is_getter = True

        self.consume(TokenType.LEFT_BRACE, f"expected '{{' before {kind} body")
        body = self.block()
        return ast.Function(name, tuple(params), tuple(body), kind == "static method", is_getter)

    def var_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "expected variable name")

        initializer = None
        if self.match(TokenType.EQUAL):
            initializer = self.expression()

        self.consume(TokenType.SEMICOLON, "expected ';' after variable declaration")
        return ast.Var(name, initializer)

    # statements

    def statement(self):
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.LEFT_BRACE):
            return ast.Block(tuple(self.block()))
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.BREAK):
            keyword = self.previous()
            self.consume(TokenType.SEMICOLON, "expected ';' after 'break'")
            return ast.Break(keyword)
        if self.match(TokenType.CONTINUE):
            keyword = self.previous()
            self.consume(TokenType.SEMICOLON, "expected ';' after 'continue'")
            return ast.Continue(keyword)
        if self.match(TokenType.RETURN):
            return self.return_statement()
        return self.expression_statement()

    def print_statement(self):
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "expected ';' after value")
        return ast.Print(value)

    def block(self):
        """Parses declarations up to the closing brace. The opening brace has already been consumed."""
        brace = self.previous()
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)

        if self.at_end():
            raise self.error(brace, "unclosed '{'")
        self.advance()
        return statements

    def if_statement(self):
        self.consume(TokenType.LEFT_PAREN, "expected '(' after 'if'")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "expected ')' after if condition")

        then_branch = self.statement()
        else_branch = None
        if self.match(TokenType.ELSE):
            else_branch = self.statement()

        return ast.If(condition, then_branch, else_branch)

    def while_statement(self):
        self.consume(TokenType.LEFT_PAREN, "expected '(' after 'while'")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "expected ')' after while condition")
        return ast.While(condition, self.statement())

    def for_statement(self):
        """Desugars `for (init; cond; incr) body` into `{ init; while (cond) body }`, incr riding on the While."""
        self.consume(TokenType.LEFT_PAREN, "expected '(' after 'for'")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "expected ';' after loop condition")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "expected ')' after for clauses")

        body = self.statement()

        if condition is None:
            condition = ast.Literal(True)
        loop = ast.While(condition, body, increment)

        if initializer is None:
            return loop
        return ast.Block((initializer, loop))

    def return_statement(self):
        keyword = self.previous()
        value = None
        if not self.check(TokenType.SEMICOLON):
            value = self.expression()

        self.consume(TokenType.SEMICOLON, "expected ';' after return value")
        return ast.Return(keyword, value)

    def expression_statement(self):
        expr = self.expression()
        self.consume(TokenType.SEMICOLON, "expected ';' after expression")
        return ast.Expression(expr)

    # expressions

    def expression(self):
        if self.match(TokenType.VAR):
            raise self.error(self.previous(), "declaration not allowed here")
        return self.assignment()

    def assignment(self):
        expr = self.ternary()

        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, ast.Variable):
                return ast.Assign(expr.name, value)
            if isinstance(expr, ast.Get):
                return ast.Set(expr.obj, expr.name, value)

            raise self.error(equals, "invalid assignment target")

        return expr

    def ternary(self):
        condition = self.logic_or()

        if self.match(TokenType.QUESTION):
            then_branch = self.expression()
            self.consume(TokenType.COLON, "expected ':' after then branch of conditional expression")
            else_branch = self.ternary()
            return ast.Ternary(condition, then_branch, else_branch)

        return condition

    def logic_or(self):
        expr = self.logic_and()
        while self.match(TokenType.OR):
            operator = self.previous()
            expr = ast.Logical(expr, operator, self.logic_and())
        return expr

    def logic_and(self):
        expr = self.equality()
        while self.match(TokenType.AND):
            operator = self.previous()
            expr = ast.Logical(expr, operator, self.equality())
        return expr

    def binary(self, operand, *operators):
        """Left-associative binary level: operand (operator operand)*."""
        expr = operand()
        while self.match(*operators):
            operator = self.previous()
            expr = ast.Binary(expr, operator, operand())
        return expr

    def equality(self):
        return self.binary(self.comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def comparison(self):
        return self.binary(
            self.term, TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL)

    def term(self):
        return self.binary(self.factor, TokenType.MINUS, TokenType.PLUS)

    def factor(self):
        return self.binary(self.unary, TokenType.SLASH, TokenType.STAR)

    def unary(self):
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            return ast.Unary(operator, self.unary())
        return self.call()

    def call(self):
        expr = self.primary()
        while True:
            if self.match(TokenType.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(TokenType.DOT):
                name = self.consume(TokenType.IDENTIFIER, "expected property name after '.'")
                expr = ast.Get(expr, name)
            else:
                return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check(TokenType.RIGHT_PAREN):
            arguments.append(self.expression())
            while self.match(TokenType.COMMA):
                if len(arguments) >= MAX_ARGUMENTS:
                    self.error(self.peek(), f"can't have more than {MAX_ARGUMENTS} arguments")
                arguments.append(self.expression())

        paren = self.consume(TokenType.RIGHT_PAREN, "expected ')' after arguments")
        return ast.Call(callee, paren, tuple(arguments))

    def primary(self):
        if self.match(TokenType.FALSE):
            return ast.Literal(False)
        if self.match(TokenType.TRUE):
            return ast.Literal(True)
        if self.match(TokenType.NIL):
            return ast.Literal(None)
        if self.match(TokenType.NUMBER, TokenType.STRING):
            return ast.Literal(self.previous().literal)
        if self.match(TokenType.THIS):
            return ast.This(self.previous())
        if self.match(TokenType.IDENTIFIER):
            return ast.Variable(self.previous())
        if self.match(TokenType.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "expected ')' after expression")
            return ast.Grouping(expr)
        if self.match(*BINARY_ONLY):
            raise self.error(self.previous(), "missing left operand")

        raise self.error(self.peek(), "expected expression")

    # helpers

    def synchronize(self):
        """Discards tokens until a statement boundary: just past a ';' or right before a statement keyword."""
        self.advance()
        while not self.at_end():
            if self.previous().type == TokenType.SEMICOLON:
                return
            if self.peek().type in BOUNDARIES:
                return
            self.advance()

    def error(self, token, msg):
        """Reports msg at token and returns (doesn't raise) the ParseError, so callers choose whether to unwind."""
        error = ParseError(msg, token.line, where_of(token))
        self.errors.append(error)
        if self.report is not None:
            self.report(error.line, error.where, error.msg)
        return error

    def consume(self, token_type, msg):
        if self.check(token_type):
            return self.advance()
        raise self.error(self.peek(), msg)

    def match(self, *token_types):
        for token_type in token_types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def check(self, token_type):
        if self.at_end():
            return token_type == TokenType.EOF
        return self.peek().type == token_type

    def advance(self):
        if not self.at_end():
            self.current += 1
        return self.previous()

    def at_end(self):
        return self.peek().type == TokenType.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]


def parse(tokens, report=None):
    """Parses tokens. Returns (statements, errors)."""
    parser = Parser(tokens, report)
    return parser.parse(), parser.errors
