"""Expression parser for BBC BASIC.

Expressions are parsed by precedence climbing over a single table keyed
by operator text, so keyword operators (DIV, MOD, AND, OR, EOR) go
through exactly the same path as the symbol operators. `TokenCursor`
holds the peek/consume/match helpers shared with the statement parser.
"""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

from .ast import BinaryOp, Call, FnCall, Literal, Node, UnaryOp, Variable
from .errors import SyntaxFault
from .lexer import (
    INT, REAL, STRING, IDENT, KEYWORD, OPERATOR, SEPARATOR, Token, tokenize,
)


BINARY_PRECEDENCE = {
    '^': 6,
    '*': 5, '/': 5, 'DIV': 5, 'MOD': 5,
    '+': 4, '-': 4,
    '=': 3, '<>': 3, '<': 3, '>': 3, '<=': 3, '>=': 3,
    'AND': 2,
    'OR': 1, 'EOR': 1,
}
RIGHT_ASSOCIATIVE = {'^'}
UNARY_PRECEDENCE = 6
UNARY_OPS = ('-', '+', 'NOT')

# Comparison operators written as two separate tokens
SPLIT_OPERATORS = {('<', '='): '<=', ('<', '>'): '<>', ('>', '='): '>='}


class TokenCursor:
    """Position over a token list with the usual peek/consume/match helpers."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Optional[Token]:
        index = self.pos + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def error(self, message: str, token: Optional[Token] = None) -> SyntaxFault:
        if token is None:
            token = self.peek()
        if token is None and self.tokens:
            last = self.tokens[-1]
            column = last.column + len(last.text or str(last.value))
        else:
            column = token.column if token is not None else 1
        return SyntaxFault(message, column=column)

    def match(self, expected: Union[str, List[str]]) -> bool:
        """True when the next token has the given type, or the given text.

        Text comparison only applies to keywords, operators and separators
        so that a string literal such as ":" never looks like a separator.
        """
        token = self.peek()
        if token is None:
            return False
        options = expected if isinstance(expected, list) else [expected]
        if token.type in options:
            return True
        return token.type in (KEYWORD, OPERATOR, SEPARATOR) and token.value in options

    def consume(self, expected: Union[str, List[str]]) -> Token:
        token = self.peek()
        if token is None:
            raise self.error(f"Missing {expected}")
        if not self.match(expected):
            raise self.error(f"Expected {expected}, got {token.value}", token)
        self.pos += 1
        return token


class ExpressionParser(TokenCursor):

    def parse_expression(self) -> Node:
        return self.parse_binary(1)

    def peek_operator(self) -> Tuple[Optional[str], int]:
        """Return the binary operator at the cursor and how many tokens it spans."""
        token = self.peek()
        if token is None:
            return None, 0
        if token.type == OPERATOR:
            following = self.peek(1)
            if following is not None and following.type == OPERATOR:
                combined = SPLIT_OPERATORS.get((token.value, following.value))
                if combined is not None:
                    return combined, 2
            return token.value, 1
        if token.type == KEYWORD and token.value in BINARY_PRECEDENCE:
            return token.value, 1
        return None, 0

    def parse_binary(self, min_precedence: int) -> Node:
        left = self.parse_unary()
        while True:
            op, width = self.peek_operator()
            if op is None or BINARY_PRECEDENCE[op] < min_precedence:
                return left
            self.pos += width
            precedence = BINARY_PRECEDENCE[op]
            next_min = precedence if op in RIGHT_ASSOCIATIVE else precedence + 1
            right = self.parse_binary(next_min)
            left = BinaryOp(op, left, right)

    def parse_unary(self) -> Node:
        if self.match(list(UNARY_OPS)):
            op = self.consume(list(UNARY_OPS)).value
            # the operand may still take a '^', nothing looser
            operand = self.parse_binary(UNARY_PRECEDENCE)
            return UnaryOp(op, operand)
        return self.parse_primary()

    def parse_arguments(self) -> Tuple[Node, ...]:
        self.consume('(')
        args: List[Node] = []
        if not self.match(')'):
            args.append(self.parse_expression())
            while self.match(','):
                self.consume(',')
                args.append(self.parse_expression())
        self.consume(')')
        return tuple(args)

    def parse_primary(self) -> Node:
        token = self.peek()
        if token is None:
            raise self.error("Missing expression")
        if token.type == INT:
            self.pos += 1
            return Literal(token.value, 'Integer')
        if token.type == REAL:
            self.pos += 1
            return Literal(token.value, 'Real')
        if token.type == STRING:
            self.pos += 1
            return Literal(token.value, 'String')
        if token.type == IDENT:
            self.pos += 1
            if self.match('('):
                return Call(token.value, self.parse_arguments())
            return Variable(token.value)
        if self.match('('):
            self.consume('(')
            expr = self.parse_expression()
            self.consume(')')
            return expr
        if self.match('TRUE'):
            self.pos += 1
            return Literal(-1, 'Integer')
        if self.match('FALSE'):
            self.pos += 1
            return Literal(0, 'Integer')
        if self.match('FN'):
            self.pos += 1
            name = self.consume(IDENT).value
            args: Tuple[Node, ...] = ()
            if self.match('('):
                args = self.parse_arguments()
            return FnCall(name, args)
        raise self.error(f"Unexpected {token.value}", token)


def parse_expression_text(text: str) -> Node:
    """Parse a complete expression given as source text (used by EVAL)."""
    parser = ExpressionParser(tokenize(text))
    expr = parser.parse_expression()
    if not parser.at_end():
        raise parser.error("Unexpected text after expression")
    return expr
