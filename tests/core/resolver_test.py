import unittest

from lox.core import ast
from lox.core.lexical import scan
from lox.core.parser import parse
from lox.core.resolver import Resolver, resolve


def resolve_source(source):
    tokens, errors = scan(source)
    assert not errors, errors
    statements, errors = parse(tokens)
    assert not errors, errors
    distances, errors = resolve(statements)
    return statements, distances, errors


def messages(source):
    __, __, errors = resolve_source(source)
    return [error.msg for error in errors]


class DistanceTestCase(unittest.TestCase):

    def test_globals_are_not_tracked(self):
        statements, distances, errors = resolve_source("var a = 1; print a; a = 2;")
        self.assertEqual([], errors)
        self.assertEqual({}, distances)

    def test_block_distances(self):
        statements, distances, errors = resolve_source("{ var a = 1; { print a; } print a; }")
        self.assertEqual([], errors)

        outer = statements[0]
        inner_print = outer.statements[1].statements[0]
        outer_print = outer.statements[2]
        self.assertEqual(1, distances[inner_print.expression])
        self.assertEqual(0, distances[outer_print.expression])

    def test_closure_distances(self):
        source = "fun make() { var n = 0; fun inc() { n = n + 1; return n; } return inc; }"
        statements, distances, errors = resolve_source(source)
        self.assertEqual([], errors)

        inc = statements[0].body[1]
        assign = inc.body[0].expression
        self.assertIsInstance(assign, ast.Assign)
        self.assertEqual(1, distances[assign])
        self.assertEqual(1, distances[assign.value.left])
        self.assertEqual(1, distances[inc.body[1].value])

        returned = statements[0].body[2].value
        self.assertEqual(0, distances[returned])

    def test_parameters(self):
        statements, distances, errors = resolve_source("fun f(a) { { print a; } }")
        self.assertEqual([], errors)
        print_stmt = statements[0].body[0].statements[0]
        self.assertEqual(1, distances[print_stmt.expression])

    def test_this_distances(self):
        source = "class A { m() { print this; fun f() { print this; } } }"
        statements, distances, errors = resolve_source(source)
        self.assertEqual([], errors)

        method = statements[0].methods[0]
        self.assertEqual(1, distances[method.body[0].expression])
        nested = method.body[1]
        self.assertEqual(2, distances[nested.body[0].expression])

    def test_shadowing_resolves_innermost(self):
        source = "{ var a = 1; { var a = 2; print a; } }"
        statements, distances, errors = resolve_source(source)
        self.assertEqual([], errors)
        print_stmt = statements[0].statements[1].statements[1]
        self.assertEqual(0, distances[print_stmt.expression])

    def test_recursive_function(self):
        statements, distances, errors = resolve_source("{ fun f(n) { return f(n); } }")
        self.assertEqual([], errors)
        call = statements[0].statements[0].body[0].value
        self.assertEqual(1, distances[call.callee])


class StaticRulesTestCase(unittest.TestCase):

    def test_should_fail(self):
        should_fail = {
            "{ var a = a; }": ["can't read local variable 'a' in its own initializer"],
            "{ var a = 1; { var a = a; } }": ["can't read local variable 'a' in its own initializer"],
            "{ var a = 1; var a = 2; }": ["already a variable named 'a' in this scope"],
            "fun f(a, a) {}": ["already a variable named 'a' in this scope"],
            "fun f(a) { var a; }": ["already a variable named 'a' in this scope"],
            "return 1;": ["can't return from top-level code"],
            "class A { init() { return 1; } }": ["can't return a value from an initializer"],
            "print this;": ["can't use 'this' outside of a class"],
            "fun f() { return this; }": ["can't use 'this' outside of a class"],
            "class A { class s() { return this; } }": ["can't use 'this' in a static method"],
            "class A { class s() { fun f() { return this; } } }": ["can't use 'this' in a static method"],
        }
        for case, expected in should_fail.items():
            self.assertEqual(expected, messages(case), case)

    def test_should_pass(self):
        should_pass = [
            "var a = 1; var a = 2;",
            "var a = a;",
            "{ var a = 1; { var b = a; var a = b; } }",
            "class A { init() { return; } }",
            "class A { m { return this; } class s() { return 1; } }",
            "fun f() { return; }",
            "while (true) { break; }",
            "{ fun f() {} fun g() { return f(); } }",
        ]
        for case in should_pass:
            self.assertEqual([], messages(case), case)

    def test_every_error_is_collected(self):
        __, __, errors = resolve_source("return 1;\n{ var a = 1; var a = 2; }\nprint this;")
        self.assertEqual([1, 2, 3], [error.line for error in errors])
        self.assertEqual(["at 'return'", "at 'a'", "at 'this'"], [error.where for error in errors])

    def test_nesting_too_deep(self):
        expr = ast.Literal(1.0)
        for __ in range(5000):
            expr = ast.Grouping(expr)

        reported = []
        resolver = Resolver(lambda *args: reported.append(args))
        resolver.resolve([ast.Print(expr)])
        self.assertEqual([(0, "", "expression nested too deeply")], reported)
        self.assertEqual([], resolver.scopes)

    def test_report(self):
        reported = []
        tokens, __ = scan("return;")
        statements, __ = parse(tokens)
        Resolver(lambda *args: reported.append(args)).resolve(statements)
        self.assertEqual([(1, "at 'return'", "can't return from top-level code")], reported)


if __name__ == '__main__':
    unittest.main()
