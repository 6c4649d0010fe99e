"""Syntax analysis for the exprc language: parses a token list into a single syntax tree.

The grammar can be defined as follows:

```
<program>                ::= <function>+
<function>               ::= <identifier> <params> <body>
<params>                 ::= "(" (<identifier> ("," <identifier>)*)? ")"  ; parenthesized form is tried first
                           | <identifier>*
<body>                   ::= "{" (<expression> ";")+ "}"
<expression>             ::= <primary> <binary_operation>*              ; folded from the right: a - b - c = a - (b - c)
<primary>                ::= <body> | <group> | <function_call> | <conditional_expression>
                           | <numeric-literal> | <identifier>
<group>                  ::= "(" <expression> ")"
<function_call>          ::= <identifier> "(" <params_call> ")"
<params_call>            ::= (<expression> ("," <expression>)*)?
<binary_operation>       ::= <binary_operator> <primary>
<binary_operator>        ::= "*" | "/" | "+" | "-" | "%" | "==" | "!=" | "<" | ">"
<conditional_expression> ::= "if" "(" <condition> ")" <body> <body>
<condition>              ::= "!"? <expression> <logical_operation>?
<logical_operation>      ::= <logical_operator> <expression>
<logical_operator>       ::= "&&" | "||"
```

Alternatives are tried in the order listed and the first that matches is taken. Each rule is a method taking a token
position and returning (match, new position); see exprc.grammar.combinators.

Tree shapes produced (terminals are kept, so separators must be skipped by consumers):
- program: Generic(function, ...)
- function: Function(identifier, Generic(params...), body)
- body: Body('{', Generic(expression, ';', ...), '}')
- expression: the primary itself, or BinaryOperator(primary, operator, expression), nested to the right
- group: Group('(', expression, ')')
- function_call: FunctionCall(identifier, '(', Generic(expression, ',', ...), ')')
- conditional_expression: ConditionalExpression('if', '(', condition, ')', body, body)
- condition: Condition('!'?, expression, (operator, expression)?)
"""

from exprc.grammar.combinators import build, first_of, optional, packrat, repeat, sequence, terminal
from exprc.lang.error import SyntacticError
from exprc.lang.lexical import TokenKind
from exprc.lang.tree import Node, NodeKind


BINARY_OPERATORS = [
    TokenKind.TIMES, TokenKind.SLASH, TokenKind.PLUS, TokenKind.MINUS, TokenKind.MOD,
    TokenKind.EQL, TokenKind.NEQ, TokenKind.LSS, TokenKind.GTR,
]
LOGICAL_OPERATORS = [TokenKind.AND, TokenKind.OR]


class Parser:
    """Backtracking recursive-descent parser over a list of tokens. Rule results are memoized per position."""

    def __init__(self, tokens):
        self.tokens = list(tokens)
        self.memo = {}

        self.furthest = 0     # furthest position a terminal failed at
        self.expected = []    # token kinds expected at self.furthest

    def expect(self, pos, kind):
        """Records that kind was expected at pos. Called by terminals on failure."""
        if pos > self.furthest:
            self.furthest = pos
            self.expected = []
        if pos == self.furthest and kind not in self.expected:
            self.expected.append(kind)

    def t(self, kind):
        """Terminal rule for kind."""
        return terminal(self, kind)

    def analyse(self):
        """Returns the syntax tree of the whole token list, or None if it is not a valid program."""
        match, __ = self.program(0)
        return match[0] if match else None

    def program(self, pos):
        match, end = build(NodeKind.GENERIC, repeat(self.function, minimum=1))(pos)
        if match is None or end != len(self.tokens):
            if match is not None:
                # functions parsed, but trailing tokens remain: report the token after the last function
                self.expect(end, TokenKind.IDENT)
            return None, pos
        return match, end

    @packrat
    def function(self, pos):
        return build(NodeKind.FUNCTION, sequence(self.t(TokenKind.IDENT), self.params, self.body))(pos)

    @packrat
    def params(self, pos):
        ident, comma = self.t(TokenKind.IDENT), self.t(TokenKind.COMMA)
        parenthesized = sequence(
            self.t(TokenKind.LPAREN),
            optional(sequence(ident, repeat(sequence(comma, ident)))),
            self.t(TokenKind.RPAREN),
        )
        return build(NodeKind.GENERIC, first_of(parenthesized, repeat(ident)))(pos)

    @packrat
    def body(self, pos):
        rule = sequence(self.t(TokenKind.LBRACE), self.body_inner, self.t(TokenKind.RBRACE))
        return build(NodeKind.BODY, rule)(pos)

    @packrat
    def body_inner(self, pos):
        statement = sequence(self.expression, self.t(TokenKind.SEMICOLON))
        return build(NodeKind.GENERIC, repeat(statement, minimum=1))(pos)

    @packrat
    def expression(self, pos):
        match, cur = sequence(self.primary, repeat(self.binary_operation))(pos)
        if match is None:
            return None, pos

        # match is (primary, operator, primary, ...): fold it from the right
        operands = list(match)
        node = operands.pop()
        while operands:
            operator = operands.pop()
            node = Node(NodeKind.BINARY_OPERATOR, (operands.pop(), operator, node))
        return (node,), cur

    @packrat
    def primary(self, pos):
        return first_of(
            self.body,
            self.group,
            self.function_call,
            self.conditional_expression,
            self.t(TokenKind.NUMBER),
            self.t(TokenKind.IDENT),
        )(pos)

    @packrat
    def group(self, pos):
        rule = sequence(self.t(TokenKind.LPAREN), self.expression, self.t(TokenKind.RPAREN))
        return build(NodeKind.GROUP, rule)(pos)

    @packrat
    def function_call(self, pos):
        rule = sequence(self.t(TokenKind.IDENT), self.t(TokenKind.LPAREN), self.params_call, self.t(TokenKind.RPAREN))
        return build(NodeKind.FUNCTION_CALL, rule)(pos)

    @packrat
    def params_call(self, pos):
        rest = repeat(sequence(self.t(TokenKind.COMMA), self.expression))
        return build(NodeKind.GENERIC, optional(sequence(self.expression, rest)))(pos)

    def binary_operation(self, pos):
        return sequence(self.binary_operator, self.primary)(pos)

    def binary_operator(self, pos):
        return first_of(*(self.t(kind) for kind in BINARY_OPERATORS))(pos)

    @packrat
    def conditional_expression(self, pos):
        rule = sequence(
            self.t(TokenKind.IF),
            self.t(TokenKind.LPAREN),
            self.condition,
            self.t(TokenKind.RPAREN),
            self.body,
            self.body,
        )
        return build(NodeKind.CONDITIONAL_EXPRESSION, rule)(pos)

    @packrat
    def condition(self, pos):
        rule = sequence(optional(self.t(TokenKind.NOT)), self.expression, optional(self.logical_operation))
        return build(NodeKind.CONDITION, rule)(pos)

    def logical_operation(self, pos):
        return sequence(self.logical_operator, self.expression)(pos)

    def logical_operator(self, pos):
        return first_of(*(self.t(kind) for kind in LOGICAL_OPERATORS))(pos)

    def error(self):
        """Returns a SyntacticError describing where parsing got furthest."""
        expected = ", ".join(f"'{kind.value}'" if kind.fixed else kind.value for kind in self.expected)
        expected = expected.replace("{", "{{").replace("}", "}}")  # msg is a format template

        if not self.tokens:
            return SyntacticError("program must contain at least one function", diagnosis=False)

        if self.furthest >= len(self.tokens):
            last = self.tokens[-1]
            msg = "unexpected end of input"
            if expected:
                msg += f", expected {expected}"
            return SyntacticError(msg, pos=last.pos + len(last.text))

        token = self.tokens[self.furthest]
        msg = "unexpected '{}'"
        if expected:
            msg += f", expected {expected}"
        return SyntacticError(msg, token.text, pos=token.pos, length=len(token.text))


def parse(tokens):
    """Returns the syntax tree of tokens. Raises a SyntacticError if tokens are not a valid program."""
    parser = Parser(tokens)
    tree = parser.analyse()
    if tree is None:
        raise parser.error()
    return tree
