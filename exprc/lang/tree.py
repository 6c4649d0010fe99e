"""Abstract syntax tree produced by exprc.lang.syntax and consumed by exprc.lang.codegen.

Nodes are immutable: a parent holds a tuple of its children, and the tree is only ever traversed read-only, so it can
be walked again (for display or diagnostics) after compilation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from exprc.lang.lexical import Token, TokenKind


class NodeKind(Enum):
    GENERIC = "Generic"
    FUNCTION = "Function"
    BODY = "Body"
    GROUP = "Group"
    FUNCTION_CALL = "FunctionCall"
    CONDITIONAL_EXPRESSION = "ConditionalExpression"
    BINARY_OPERATOR = "BinaryOperator"
    CONDITION = "Condition"
    BASIC_VALUE = "BasicValue"


@dataclass(frozen=True)
class Node:
    """A node of the syntax tree. Terminal (leaf) nodes carry the token they were matched from; only identifier and
    numeric literal leaves are BASIC_VALUE nodes, other terminals are GENERIC.
    """
    kind: NodeKind
    children: Tuple["Node", ...] = ()
    token: Optional[Token] = None

    @classmethod
    def leaf(cls, token):
        kind = NodeKind.BASIC_VALUE if token.kind in (TokenKind.IDENT, TokenKind.NUMBER) else NodeKind.GENERIC
        return cls(kind, (), token)

    @property
    def is_terminal(self):
        return self.token is not None

    @property
    def text(self):
        """Text of this node's token. Only valid for terminals."""
        return self.token.text

    @property
    def pos(self):
        """Source offset of the first token under this node, or -1 if there is none."""
        if self.token is not None:
            return self.token.pos
        for child in self.children:
            if child.pos >= 0:
                return child.pos
        return -1

    def without(self, kind):
        """Returns children that are not terminals of token kind kind. Used to drop separators such as ','."""
        return [child for child in self.children if not (child.is_terminal and child.token.kind is kind)]

    def display(self, indents=0):
        """Recursively displays the tree with readable format.

        Format:
        <Kind>(nodes=[
            <Kind>('<text>'),  # <-- terminal
            ...
        ])
        """
        if self.is_terminal:
            return f"{'    ' * indents}{self.kind.value}('{self.text}')"

        result = f"{'    ' * indents}{self.kind.value}("
        if self.children:
            result += "nodes=["
            for node in self.children:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __str__(self):
        return self.display()
