import unittest

from exprc.lang.error import SyntacticError
from exprc.lang.lexical import TokenKind, tokenize
from exprc.lang.syntax import Parser, parse
from exprc.lang.tree import NodeKind


def parse_source(source):
    return parse(tokenize(source))


def first_expression(source, function=0):
    """Returns the first expression in the body of the function-th function of source."""
    body = parse_source(source).children[function].children[2]
    return body.children[1].children[0]


class ParseTestCase(unittest.TestCase):

    def test_parse(self):
        should_fail = [
            "",
            "f(){}",
            "f(){ 1 }",
            "f(){ 1; } 2",
            "f(){ 1 +; }",
            "(){ 1; }",
            "f(x y){ 1; }",
            "f(x,){ 1; }",
            "f(){ g(1,); }",
            "f(){ if (1) { 2; }; }",
            "f(){ if 1 { 2; } { 3; }; }",
            "f(){ (1; }",
            "f(){ !1; }",
            "f(){ 1 && 2; }",
        ]
        for case in should_fail:
            self.assertRaises(SyntacticError, parse_source, case)

        should_pass = [
            "f(){1;}",
            "f x y { x; y; }",
            "main(){ write(5); }",
            "f(a, b){ a; } g(){ f(1, 2); }",
            "f(){ if (!1 && 2) { 1; } { 2; }; }",
            "f(){ {1; 2;}; }",
            "f(){ g(); }",
            "f(){ g(1, 2 + 3, h(4)); }",
            "f(){ ((1)); }",
            "f(){ 1 == 2; 1 != 2; 1 < 2; 1 > 2; 1 % 2; }",
            "f(){ {1;} + (2) * g(3) - if (1) {2;} {3;}; }",
        ]
        for case in should_pass:
            tree = parse_source(case)
            self.assertEqual(NodeKind.GENERIC, tree.kind, case)
            self.assertTrue(tree.children, case)

    def test_program(self):
        tree = parse_source("f(){ 1; } g(x){ x; } h a b { a; }")
        self.assertEqual([NodeKind.FUNCTION] * 3, [node.kind for node in tree.children])
        self.assertEqual(["f", "g", "h"], [node.children[0].text for node in tree.children])

    def test_params(self):
        cases = {
            "f(){ 1; }": [],
            "f { 1; }": [],
            "f(a){ 1; }": ["a"],
            "f(a, b, c){ 1; }": ["a", "b", "c"],
            "f a b c { 1; }": ["a", "b", "c"],
        }
        for case, expected in cases.items():
            params = parse_source(case).children[0].children[1]
            idents = [node.text for node in params.children if node.token.kind is TokenKind.IDENT]
            self.assertEqual(expected, idents, case)

    def test_body(self):
        body = parse_source("f(){ 1; x; g(); }").children[0].children[2]
        self.assertEqual(NodeKind.BODY, body.kind)

        exprs = body.children[1].without(TokenKind.SEMICOLON)
        self.assertEqual([NodeKind.BASIC_VALUE, NodeKind.BASIC_VALUE, NodeKind.FUNCTION_CALL],
                         [expr.kind for expr in exprs])

    def test_right_associative(self):
        expr = first_expression("f(){ 10 - 3 - 2; }")
        self.assertEqual(NodeKind.BINARY_OPERATOR, expr.kind)

        left, operator, right = expr.children
        self.assertEqual("10", left.text)
        self.assertEqual("-", operator.text)
        self.assertEqual(NodeKind.BINARY_OPERATOR, right.kind)
        self.assertEqual(["3", "-", "2"], [node.text for node in right.children])

    def test_long_chain(self):
        expr = first_expression("f(){ " + " - ".join(str(i) for i in range(3000)) + "; }")
        values = []
        while expr.kind is NodeKind.BINARY_OPERATOR:
            left, operator, expr = expr.children
            self.assertEqual("-", operator.text)
            values.append(left.text)
        values.append(expr.text)
        self.assertEqual([str(i) for i in range(3000)], values)

    def test_primary_order(self):
        cases = {
            "f(){ {1;}; }": NodeKind.BODY,
            "f(){ (1); }": NodeKind.GROUP,
            "f(){ g(1); }": NodeKind.FUNCTION_CALL,
            "f(){ if (1) {1;} {2;}; }": NodeKind.CONDITIONAL_EXPRESSION,
            "f(){ 1; }": NodeKind.BASIC_VALUE,
            "f(){ g; }": NodeKind.BASIC_VALUE,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, first_expression(case).kind, case)

    def test_function_call(self):
        call = first_expression("f(){ g(1, x, 2 * 3); }")
        name, __, params_call, __ = call.children
        self.assertEqual("g", name.text)
        self.assertEqual(5, len(params_call.children))

        args = params_call.without(TokenKind.COMMA)
        self.assertEqual([NodeKind.BASIC_VALUE, NodeKind.BASIC_VALUE, NodeKind.BINARY_OPERATOR],
                         [arg.kind for arg in args])

        self.assertEqual((), first_expression("f(){ g(); }").children[2].children)

    def test_condition(self):
        cases = {
            "f(){ if (1) {1;} {2;}; }": [NodeKind.BASIC_VALUE],
            "f(){ if (!1) {1;} {2;}; }": [NodeKind.GENERIC, NodeKind.BASIC_VALUE],
            "f(){ if (1 || 2) {1;} {2;}; }": [NodeKind.BASIC_VALUE, NodeKind.GENERIC, NodeKind.BASIC_VALUE],
            "f(){ if (!1 < 2 && g()) {1;} {2;}; }": [
                NodeKind.GENERIC, NodeKind.BINARY_OPERATOR, NodeKind.GENERIC, NodeKind.FUNCTION_CALL,
            ],
        }
        for case, expected in cases.items():
            conditional = first_expression(case)
            self.assertEqual(6, len(conditional.children), case)

            condition = conditional.children[2]
            self.assertEqual(NodeKind.CONDITION, condition.kind, case)
            self.assertEqual(expected, [node.kind for node in condition.children], case)

    def test_error(self):
        source = "f(){ 1 }"
        with self.assertRaises(SyntacticError) as cm:
            parse_source(source)
        self.assertEqual(source.index("}"), cm.exception.pos)
        self.assertIn("unexpected '}'", cm.exception.plain)
        self.assertIn("';'", cm.exception.plain)
        self.assertEqual(3, cm.exception.status)

        with self.assertRaises(SyntacticError) as cm:
            parse_source("f(){ 1;")
        self.assertIn("unexpected end of input", cm.exception.plain)

        with self.assertRaises(SyntacticError) as cm:
            parse_source("")
        self.assertIn("at least one function", cm.exception.plain)

        source = "f(){ 1; } 2"
        with self.assertRaises(SyntacticError) as cm:
            parse_source(source)
        self.assertEqual(source.index("2"), cm.exception.pos)


class ParserTestCase(unittest.TestCase):

    def test_analyse(self):
        self.assertIsNone(Parser(tokenize("f(){}")).analyse())
        self.assertIsNotNone(Parser(tokenize("f(){1;}")).analyse())

    def test_failed_rule_restores_position(self):
        parser = Parser(tokenize("g(1, ) x"))
        match, pos = parser.function_call(0)
        self.assertIsNone(match)
        self.assertEqual(0, pos)

        match, pos = parser.primary(0)
        self.assertEqual("g", match[0].text)
        self.assertEqual(1, pos)

    def test_memo(self):
        parser = Parser(tokenize("f(){ 1 + 2; }"))
        parser.analyse()
        self.assertIn(("expression", 4), parser.memo)

    def test_tree_is_reusable(self):
        tree = parse_source("f(x){ x + 1; }")
        self.assertEqual(tree.display(), tree.display())
        self.assertIn("Function(nodes=[", tree.display())
        self.assertIn("BasicValue('x')", tree.display())


if __name__ == '__main__':
    unittest.main()
