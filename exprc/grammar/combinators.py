"""Backtracking recursive-descent parsing combinators.

A rule is any callable taking a token position and returning (match, new position). A match is a tuple of Nodes on
success or None on failure; a failed rule always returns the position it was given, so callers never have to restore
the cursor themselves. Matches splice into each other: sequence concatenates the matches of its rules, and only build
wraps a match into a single Node. This keeps separators and repetitions flat, e.g. "a, b, c" matched by

    sequence(expression, repeat(sequence(comma, expression)))

is the flat match (a, ',', b, ',', c).
"""

import functools

from exprc.lang.tree import Node


def terminal(parser, kind):
    """Rule matching one token of kind. parser must have a tokens list and an expect(pos, kind) method, which is
    called on failure so that the parser can report the furthest position it reached.
    """

    def rule(pos):
        if pos < len(parser.tokens) and parser.tokens[pos].kind is kind:
            return (Node.leaf(parser.tokens[pos]),), pos + 1
        parser.expect(pos, kind)
        return None, pos

    return rule


def sequence(*rules):
    """All-of: matches every rule in order, or fails as a whole."""

    def rule(pos):
        match = ()
        cur = pos
        for sub_rule in rules:
            sub_match, cur = sub_rule(cur)
            if sub_match is None:
                return None, pos
            match += sub_match
        return match, cur

    return rule


def first_of(*rules):
    """Alternative: returns the match of the first rule that succeeds."""

    def rule(pos):
        for sub_rule in rules:
            match, cur = sub_rule(pos)
            if match is not None:
                return match, cur
        return None, pos

    return rule


def optional(sub_rule):
    """Matches sub_rule or nothing. Never fails."""

    def rule(pos):
        match, cur = sub_rule(pos)
        if match is None:
            return (), pos
        return match, cur

    return rule


def repeat(sub_rule, minimum=0):
    """Greedily matches sub_rule as many times as possible. Fails if it matched fewer than minimum times."""

    def rule(pos):
        match = ()
        count = 0
        cur = pos
        while True:
            sub_match, nxt = sub_rule(cur)
            if sub_match is None or nxt == cur:
                break
            match += sub_match
            count += 1
            cur = nxt

        if count < minimum:
            return None, pos
        return match, cur

    return rule


def build(kind, sub_rule):
    """Wraps the match of sub_rule into a single Node of kind."""

    def rule(pos):
        match, cur = sub_rule(pos)
        if match is None:
            return None, pos
        return (Node(kind, match),), cur

    return rule


def packrat(method):
    """Memoizes a parser method rule by (rule name, position) in the parser's memo dict. Results can be shared since
    Nodes are immutable.
    """
    name = method.__name__

    @functools.wraps(method)
    def rule(self, pos):
        key = (name, pos)
        if key not in self.memo:
            self.memo[key] = method(self, pos)
        return self.memo[key]

    return rule
