"""Code generation for the exprc language: walks a syntax tree produced by exprc.lang.syntax, checks it, and emits an
equivalent C++ program.

Every value is a `number` (uint64_t). Expressions map onto C++ expressions:
- numeric literal 5              -> (number)5
- identifier x                   -> x  (must be a parameter of the enclosing function)
- a - b                          -> (a - b)  (the tree is right-recursive, so a - b - c -> (a - (b - c)))
- { e1; e2; }                    -> (e1, e2)  (comma operator: the value of a body is its last expression)
- if (!c && d) { a; } { b; }     -> ((!c && d) ? (a) : (b))
- f(a, b)                        -> f(a, b)

Functions are registered in source order before their body is compiled, so a function can call itself and the
functions above it but not the ones below it. Semantic errors do not stop the walk: every error in the program is
collected, and output is only returned if there were none.
"""

from exprc.lang.error import GenericException, SemanticError
from exprc.lang.lexical import TokenKind
from exprc.lang.tree import NodeKind


NUMBER = "number"    # C++ numeric type, reserved
ENTRY_POINT = "main"

BUILTINS = {"read": 0, "write": 1}

PRELUDE = (
    "#include <cstdint>\n"
    "#include <iostream>\n"
    "\n"
    f"typedef uint64_t {NUMBER};\n"
    "\n"
    f"{NUMBER} read(){{{NUMBER} x; std::cin >> x; return x;}}\n"
    f"{NUMBER} write({NUMBER} x){{std::cout << x; return x;}}\n"
)


class CompileContext:
    """Mutable state of one compilation run. A fresh context must be used for every run."""

    def __init__(self):
        self.functions = dict(BUILTINS)  # dict of function name: number of params
        self.variables = set()           # params of the function being compiled
        self.units = []                  # list of (function name, emitted C++)
        self.errors = []
        self.warnings = []

    def error(self, msg, exprs, node):
        """Records a semantic error located at node."""
        length = len(node.text) if node.is_terminal else 1
        self.errors.append(SemanticError(msg, exprs, pos=node.pos, length=length))

    @property
    def output(self):
        """Whole program emitted so far."""
        return PRELUDE + "".join(f"{text}\n" for __, text in self.units)


class Compiler:
    """Compiles syntax trees into C++ source."""

    def __init__(self):
        self.emitters = {
            NodeKind.BASIC_VALUE: self.value,
            NodeKind.BODY: self.body,
            NodeKind.GROUP: self.group,
            NodeKind.FUNCTION_CALL: self.function_call,
            NodeKind.CONDITIONAL_EXPRESSION: self.conditional_expression,
            NodeKind.BINARY_OPERATOR: self.binary_operator,
        }

    def compile(self, tree, ctx=None):
        """Returns the C++ translation of program tree. Raises a SemanticError listing every error found if tree does
        not compile, in which case nothing is returned. ctx is created if not given.
        """
        if ctx is None:
            ctx = CompileContext()

        res = True
        for node in tree.children:
            res &= self.function(node, ctx)

        if ENTRY_POINT not in (name for name, __ in ctx.units):
            ctx.warnings.append(GenericException("program has no '{}' function", ENTRY_POINT, diagnosis=False))

        if not res:
            count = len(ctx.errors)
            raise SemanticError("compilation failed with {} semantic error" + ("s" if count > 1 else ""), str(count),
                                causes=ctx.errors, output=ctx.output, diagnosis=False)
        return ctx.output

    def declare_function(self, name_node, arity, ctx):
        name = name_node.text
        if name == NUMBER:
            ctx.error("function name '{}' is reserved", name, name_node)
        elif name in ctx.functions:
            ctx.error("function '{}' is already declared", name, name_node)
        else:
            ctx.functions[name] = arity

    def declare_variable(self, name_node, ctx):
        name = name_node.text
        if name == NUMBER:
            ctx.error("parameter name '{}' is reserved", name, name_node)
        elif name in ctx.variables:
            ctx.error("duplicate parameter '{}'", name, name_node)
        elif name in ctx.functions:
            ctx.error("parameter '{}' is already declared as a function", name, name_node)
        else:
            ctx.variables.add(name)

    def function(self, node, ctx):
        """Compiles a Function node into ctx.units. Returns whether or not it compiled without errors."""
        errors = len(ctx.errors)
        name_node, params_node, body_node = node.children
        name = name_node.text
        params = [child for child in params_node.children if child.token.kind is TokenKind.IDENT]

        ctx.variables = set()
        self.declare_function(name_node, len(params), ctx)
        for param in params:
            self.declare_variable(param, ctx)

        body = self.body(body_node, ctx)
        signature = ", ".join(f"{NUMBER} {param.text}" for param in params)

        if name == ENTRY_POINT:
            text = f"int {name}({signature}){{return ({body}, 0);}}"
        else:
            text = f"{NUMBER} {name}({signature}){{return {body};}}"
        ctx.units.append((name, text))

        ctx.variables = set()
        return len(ctx.errors) == errors

    def expression(self, node, ctx):
        try:
            emitter = self.emitters[node.kind]
        except KeyError:
            raise GenericException(f"cannot compile {node.kind.value} node as an expression", internal=True)
        return emitter(node, ctx)

    def value(self, node, ctx):
        """Identifier or numeric literal."""
        if node.token.kind is TokenKind.NUMBER:
            return f"({NUMBER}){node.text}"

        if node.text not in ctx.variables:
            if node.text in ctx.functions:
                ctx.error("'{}' is a function, not a variable", node.text, node)
            else:
                ctx.error("undeclared variable '{}'", node.text, node)
        return node.text

    def body(self, node, ctx):
        __, inner, __ = node.children
        exprs = inner.without(TokenKind.SEMICOLON)
        return "(" + ", ".join(self.expression(expr, ctx) for expr in exprs) + ")"

    def group(self, node, ctx):
        __, expr, __ = node.children
        return f"({self.expression(expr, ctx)})"

    def function_call(self, node, ctx):
        name_node, __, params_call, __ = node.children
        name = name_node.text
        args = [self.expression(arg, ctx) for arg in params_call.without(TokenKind.COMMA)]

        if name not in ctx.functions:
            if name in ctx.variables:
                ctx.error("'{}' is a variable, not a function", name, name_node)
            else:
                ctx.error("call to undeclared function '{}'", name, name_node)
        elif len(args) != ctx.functions[name]:
            msg = "function '{}' expects {} argument(s), got {}"
            ctx.error(msg, (name, str(ctx.functions[name]), str(len(args))), name_node)

        return f"{name}({', '.join(args)})"

    def binary_operator(self, node, ctx):
        """Follows the right spine of a chain in a loop, so long chains do not recurse once per operator."""
        heads = []
        while node.kind is NodeKind.BINARY_OPERATOR:
            left, operator, node = node.children
            heads.append(f"({self.expression(left, ctx)} {operator.text} ")
        return "".join(heads) + self.expression(node, ctx) + ")" * len(heads)

    def conditional_expression(self, node, ctx):
        __, __, condition, __, if_body, else_body = node.children
        return f"(({self.condition(condition, ctx)}) ? {self.body(if_body, ctx)} : {self.body(else_body, ctx)})"

    def condition(self, node, ctx):
        """Negation, if any, binds to the first expression only, as in C++."""
        children = list(node.children)
        negated = children[0].is_terminal and children[0].token.kind is TokenKind.NOT
        if negated:
            children.pop(0)

        first, *rest = children
        text = ("!" if negated else "") + self.expression(first, ctx)
        if rest:
            operator, right = rest
            text += f" {operator.text} {self.expression(right, ctx)}"
        return text


def compile_tree(tree, ctx=None):
    """Returns the C++ translation of tree. See Compiler.compile."""
    return Compiler().compile(tree, ctx)
