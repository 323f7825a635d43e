import unittest

from lox.core import ast
from lox.core.interpreter import Interpreter
from lox.core.lexical import scan
from lox.core.parser import parse
from lox.core.printer import print_ast, to_source
from lox.core.tokens import Token, TokenType


def parse_expr(source):
    tokens, errors = scan(source + ";")
    assert not errors, errors
    statements, errors = parse(tokens)
    assert not errors, errors
    return statements[0].expression


class PrintAstTestCase(unittest.TestCase):

    def test_hand_built_tree(self):
        expr = ast.Binary(
            ast.Unary(Token(TokenType.MINUS, "-", None, 1), ast.Literal(123.0)),
            Token(TokenType.STAR, "*", None, 1),
            ast.Grouping(ast.Literal(45.67)))
        self.assertEqual("(* (- 123) (group 45.67))", print_ast(expr))

    def test_literals(self):
        cases = {
            "nil": "nil",
            "true": "true",
            "false": "false",
            "1.5": "1.5",
            "\"text\"": "\"text\"",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, print_ast(parse_expr(case)), case)

    def test_methods(self):
        tokens, __ = scan("class A { get { return 1; } class make(x) { return x; } }")
        statements, __ = parse(tokens)
        self.assertEqual("(class A (getter get (return 1)) (class fun make (params x) (return x)))",
                         print_ast(statements[0]))

    def test_unknown_node(self):
        with self.assertRaises(TypeError):
            print_ast(object())


class ToSourceTestCase(unittest.TestCase):

    def test_fully_parenthesized(self):
        cases = {
            "1 + 2 * 3": "(1 + (2 * 3))",
            "-(1 - 2)": "(-((1 - 2)))",
            "a.b(c, 1)": "a.b(c, 1)",
            "x ? y : z": "(x ? y : z)",
            "a or b and !c": "(a or (b and (!c)))",
            "0.0000001": "0.0000001",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, to_source(parse_expr(case)), case)

    def test_round_trip_evaluates_the_same(self):
        cases = [
            "1 + 2 * 3",
            "(1 + 2) * 3",
            "-4 / 2 - -1",
            "10 - 4 - 3",
            "1 < 2 == !false",
            "\"a\" + \"b\" + \"c\"",
            "nil == false",
            "1 > 2 ? \"big\" : \"small\"",
            "false or nil and 3",
            "2 * (3 + 4) / 7 >= 2",
            "0.0000001 + 1",
            "123456789012345678901234.5 - 0.25",
        ]
        interpreter = Interpreter()
        for case in cases:
            original = parse_expr(case)
            reparsed = parse_expr(to_source(original))
            self.assertEqual(interpreter.evaluate(original), interpreter.evaluate(reparsed), case)

    def test_statements_are_not_emitted(self):
        with self.assertRaises(TypeError):
            to_source(ast.Print(ast.Literal(1.0)))


if __name__ == '__main__':
    unittest.main()
