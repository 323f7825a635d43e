import unittest

from lox.core import ast
from lox.core.lexical import scan
from lox.core.parser import Parser
from lox.core.printer import print_ast
from lox.core.tokens import TokenType


def parse_source(source):
    tokens, errors = scan(source)
    assert not errors, errors
    parser = Parser(tokens)
    return parser.parse(), parser.errors


def parse_expr(source):
    """Prefix form of the single expression statement in source."""
    statements, errors = parse_source(source)
    assert not errors, errors
    assert len(statements) == 1 and isinstance(statements[0], ast.Expression), statements
    return print_ast(statements[0].expression)


class PrecedenceTestCase(unittest.TestCase):

    def test_factor_binds_tighter_than_term(self):
        statements, errors = parse_source("1+2*3;")
        self.assertEqual([], errors)

        expr = statements[0].expression
        self.assertIsInstance(expr, ast.Binary)
        self.assertEqual(TokenType.PLUS, expr.operator.type)
        self.assertIsInstance(expr.left, ast.Literal)
        self.assertEqual(1.0, expr.left.value)

        right = expr.right
        self.assertIsInstance(right, ast.Binary)
        self.assertEqual(TokenType.STAR, right.operator.type)
        self.assertEqual((2.0, 3.0), (right.left.value, right.right.value))

    def test_ladder(self):
        cases = {
            "1 - 2 - 3;": "(- (- 1 2) 3)",
            "1 / 2 * 3;": "(* (/ 1 2) 3)",
            "-1 * 2;": "(* (- 1) 2)",
            "!!true;": "(! (! true))",
            "1 < 2 == 3 >= 4;": "(== (< 1 2) (>= 3 4))",
            "a or b and c;": "(or a (and b c))",
            "a and b or c;": "(or (and a b) c)",
            "a or b or c;": "(or (or a b) c)",
            "a == b ? c : d;": "(?: (== a b) c d)",
            "a ? b : c ? d : e;": "(?: a b (?: c d e))",
            "a = b = 1;": "(= a (= b 1))",
            "a = b ? 1 : 2;": "(= a (?: b 1 2))",
            "(1 + 2) * 3;": "(* (group (+ 1 2)) 3)",
            "f(1)(2);": "(call (call f 1) 2)",
            "a.b.c();": "(call (. (. a b) c))",
            "-a.b;": "(- (. a b))",
            "\"s\" + nil;": "(+ \"s\" nil)",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, parse_expr(case), case)

    def test_assignment_targets(self):
        cases = {
            "a = 1;": "(= a 1)",
            "obj.field = 1;": "(= (. obj field) 1)",
            "a.b.c = this;": "(= (. (. a b) c) this)",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, parse_expr(case), case)

        statements, __ = parse_source("obj.field = 1;")
        self.assertIsInstance(statements[0].expression, ast.Set)

    def test_invalid_assignment_target(self):
        should_fail = ["1 = 2;", "(a) = 2;", "a + b = c;", "f() = 1;", "-a = 1;"]
        for case in should_fail:
            statements, errors = parse_source(case)
            self.assertEqual([], statements, case)
            self.assertEqual(["invalid assignment target"], [error.msg for error in errors], case)
            self.assertEqual("at '='", errors[0].where, case)


class StatementTestCase(unittest.TestCase):

    def test_statements(self):
        cases = {
            "print 1;": "(print 1)",
            "var a;": "(var a)",
            "var a = 1;": "(var a 1)",
            "{ var a = 1; print a; }": "(block (var a 1) (print a))",
            "if (a) print 1; else print 2;": "(if a (print 1) (print 2))",
            "if (a) if (b) print 1; else print 2;": "(if a (if b (print 1) (print 2)))",
            "while (a) { break; continue; }": "(while a (block (break) (continue)))",
            "fun f(a, b) { return a + b; }": "(fun f (params a b) (return (+ a b)))",
            "fun g() { return; }": "(fun g (params) (return))",
        }
        for case, expected in cases.items():
            statements, errors = parse_source(case)
            self.assertEqual([], errors, case)
            self.assertEqual([expected], [print_ast(stmt) for stmt in statements], case)

    def test_class(self):
        source = "class Circle { init(r) { this.r = r; } area { return this.r; } class unit() { return 1; } }"
        statements, errors = parse_source(source)
        self.assertEqual([], errors)

        klass = statements[0]
        self.assertIsInstance(klass, ast.Class)
        self.assertEqual(["init", "area", "unit"], [method.name.lexeme for method in klass.methods])
        self.assertEqual([False, True, False], [method.is_getter for method in klass.methods])
        self.assertEqual([False, False, True], [method.is_static for method in klass.methods])
        self.assertEqual(["r"], [param.lexeme for param in klass.methods[0].params])

    def test_for_desugars_to_while(self):
        statements, errors = parse_source("for (var i = 0; i < 3; i = i + 1) print i;")
        self.assertEqual([], errors)
        self.assertEqual(["(block (var i 0) (while (< i 3) (print i) (= i (+ i 1))))"],
                         [print_ast(stmt) for stmt in statements])

        cases = {
            "for (;;) print 1;": "(while true (print 1))",
            "for (a = 0; ;) print 1;": "(block (; (= a 0)) (while true (print 1)))",
            "for (; a;) print 1;": "(while a (print 1))",
        }
        for case, expected in cases.items():
            statements, errors = parse_source(case)
            self.assertEqual([], errors, case)
            self.assertEqual([expected], [print_ast(stmt) for stmt in statements], case)

        loop = statements[0]
        self.assertIsInstance(loop, ast.While)
        self.assertIsNone(loop.increment)

    def test_declarations_not_allowed_as_branches(self):
        should_fail = ["if (a) var b = 1;", "while (a) fun f() {}", "if (a) class C {}", "print var;"]
        for case in should_fail:
            statements, errors = parse_source(case)
            self.assertTrue(errors, case)

        cases = {
            "if (a) var b = 1;": ("declaration not allowed here", "at 'var'"),
            "print var;": ("declaration not allowed here", "at 'var'"),
            "while (a) fun f() {}": ("expected expression", "at 'fun'"),
        }
        for case, expected in cases.items():
            __, errors = parse_source(case)
            self.assertEqual(expected, (errors[0].msg, errors[0].where), case)

    def test_getters_only_in_classes(self):
        statements, errors = parse_source("fun f { 1; }")
        self.assertFalse(any(isinstance(stmt, ast.Function) for stmt in statements))
        self.assertEqual("expected '(' after function name", errors[0].msg)
        self.assertEqual("at '{'", errors[0].where)


class RecoveryTestCase(unittest.TestCase):

    def test_multiple_errors_in_one_pass(self):
        source = "var a = ;\nprint 1;\nvar = 2;\nprint 2;\n1 = 2;\nprint 3;"
        statements, errors = parse_source(source)

        self.assertEqual(["(print 1)", "(print 2)", "(print 3)"], [print_ast(stmt) for stmt in statements])
        self.assertEqual([1, 3, 5], [error.line for error in errors])
        self.assertEqual(
            ["expected expression", "expected variable name", "invalid assignment target"],
            [error.msg for error in errors])

    def test_resync_at_statement_keyword(self):
        statements, errors = parse_source("print (1 + ; var b = 2; print b;")
        self.assertEqual(1, len(errors))
        self.assertEqual(["(var b 2)", "(print b)"], [print_ast(stmt) for stmt in statements])

    def test_error_inside_block(self):
        statements, errors = parse_source("{ var a = 1; a + ; print a; } print 2;")
        self.assertEqual(["expected expression"], [error.msg for error in errors])
        self.assertEqual(["(block (var a 1) (print a))", "(print 2)"], [print_ast(stmt) for stmt in statements])

    def test_unclosed_block(self):
        statements, errors = parse_source("{ print 1;")
        self.assertEqual([], statements)
        self.assertEqual(["unclosed '{'"], [error.msg for error in errors])

    def test_end_of_input(self):
        statements, errors = parse_source("print 1")
        self.assertEqual([], statements)
        self.assertEqual("at end", errors[0].where)

    def test_missing_left_operand(self):
        statements, errors = parse_source("* 3; print 1;")
        self.assertEqual(["missing left operand"], [error.msg for error in errors])
        self.assertEqual(["(print 1)"], [print_ast(stmt) for stmt in statements])

    def test_resync_at_loop_control(self):
        cases = {
            "while (a) { print 1 + * 2 break; }": "(while a (block (break)))",
            "while (a) { print 1 + * 2 continue; }": "(while a (block (continue)))",
        }
        for case, expected in cases.items():
            statements, errors = parse_source(case)
            self.assertEqual(["missing left operand"], [error.msg for error in errors], case)
            self.assertEqual([expected], [print_ast(stmt) for stmt in statements], case)

    def test_nesting_too_deep(self):
        depth = 500
        statements, errors = parse_source("print " + "(" * depth + "1" + ")" * depth + "; print 2;")
        self.assertEqual([], statements)
        self.assertEqual(["expression nested too deeply"], [error.msg for error in errors])

        statements, errors = parse_source("print " + "(" * 20 + "1" + ")" * 20 + ";")
        self.assertEqual([], errors)
        self.assertEqual(1, len(statements))

    def test_errors_are_reported(self):
        reported = []
        tokens, __ = scan("print ;")
        Parser(tokens, lambda *args: reported.append(args)).parse()
        self.assertEqual([(1, "at ';'", "expected expression")], reported)


if __name__ == '__main__':
    unittest.main()
