"""Lexical analysis for the exprc language: converts raw source text into an ordered list of typed tokens.

Tokens can be loosely defined as follows:

```
<symbol>     ::= "(" | ")" | "{" | "}" | "*" | "/" | "+" | "-" | "%"
               | "&&" | "||" | "==" | "!=" | "<" | ">" | ";" | "," | "!"
<keyword>    ::= "if"
<identifier> ::= <alpha>+
<number>     ::= <digit>+
```

Whitespace is skipped before every token. Token kinds are tried in the fixed order of TokenKind and the first one
that matches wins, so keyword matching is purely literal: "iffy" is the keyword "if" followed by the identifier "fy".
"""

from dataclasses import dataclass, field
from enum import Enum

from exprc.lang.error import LexicalError


class TokenKind(Enum):
    """Closed set of token kinds, in matching priority order. Fixed kinds have their literal text as value."""
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    TIMES = "*"
    SLASH = "/"
    PLUS = "+"
    MINUS = "-"
    MOD = "%"
    AND = "&&"
    OR = "||"
    EQL = "=="
    NEQ = "!="
    LSS = "<"
    GTR = ">"
    SEMICOLON = ";"
    COMMA = ","
    NOT = "!"
    IF = "if"
    IDENT = "identifier"
    NUMBER = "numeric-literal"

    @property
    def fixed(self):
        """Whether or not tokens of this kind always carry the kind's literal text."""
        return self not in (TokenKind.IDENT, TokenKind.NUMBER)


CLASSES = {
    TokenKind.IDENT: str.isalpha,
    TokenKind.NUMBER: str.isdigit,
}
WHITESPACE = " \t\n\r\f\v"  # C isspace in the default locale


@dataclass(frozen=True)
class Token:
    """A single token. pos is the offset of text in the source and is only used for error messages."""
    text: str
    kind: TokenKind
    pos: int = field(default=-1, compare=False)

    def __repr__(self):
        return f"Token({self.kind.name}, '{self.text}')"


def _isascii(predicate):
    """Restricts predicate to ASCII characters, as C's isalpha/isdigit do in the default locale."""
    return lambda char: char.isascii() and predicate(char)


class Lexer:
    """Scans a source string one token at a time. Call analyse to tokenize the whole source."""

    def __init__(self, source):
        self.source = source
        self.pos = 0
        self.tokens = []

    def skip_whitespace(self):
        while self.pos < len(self.source) and self.source[self.pos] in WHITESPACE:
            self.pos += 1

    def eof(self):
        """Whether or not only whitespace remains."""
        self.skip_whitespace()
        return self.pos >= len(self.source)

    def match(self, kind):
        """Returns a Token of kind at the current position (and advances past it), or None if kind doesn't match."""
        self.skip_whitespace()

        if kind.fixed:
            if self.source.startswith(kind.value, self.pos):
                token = Token(kind.value, kind, self.pos)
                self.pos += len(kind.value)
                return token
            return None

        is_member = _isascii(CLASSES[kind])
        end = self.pos
        while end < len(self.source) and is_member(self.source[end]):
            end += 1

        if end == self.pos:
            return None

        token = Token(self.source[self.pos:end], kind, self.pos)
        self.pos = end
        return token

    def next(self):
        """Returns the next token, trying each TokenKind in priority order. Returns None if nothing matches."""
        for kind in TokenKind:
            token = self.match(kind)
            if token is not None:
                return token
        return None

    def analyse(self):
        """Tokenizes the rest of the source into self.tokens. Returns whether or not the whole source was consumed."""
        token = self.next()
        while token is not None:
            self.tokens.append(token)
            token = self.next()
        return self.eof()


def tokenize(source):
    """Returns the list of tokens in source. Raises a LexicalError if source contains an unrecognized character."""
    lexer = Lexer(source)
    if not lexer.analyse():
        char = source[lexer.pos]
        raise LexicalError("unrecognized character '{}'", char, pos=lexer.pos)
    return lexer.tokens


def render(tokens, sep=""):
    """Joins the text of tokens. With sep="", this recovers the tokenized source minus its whitespace."""
    return sep.join(token.text for token in tokens)
