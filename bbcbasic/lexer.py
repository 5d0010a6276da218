"""Tokenizer for one line of BBC BASIC source.

The lexer works on a single program line with its line number already
removed. It recognizes keywords (case-insensitive), operators, numeric
and string literals, identifiers with an optional type sigil and the
statement separators. Everything after REM or an apostrophe is ignored.

Two BASIC conventions shape the token stream:

* Integers that follow GOTO, GOSUB, THEN, ELSE or RESTORE (and the
  comma-separated integers after them) are line-number literals.
* After DATA the rest of the line is split on commas into literal items
  rather than tokenized as an expression.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional
import re

from .errors import SyntaxFault
from .types import INT_MIN, INT_MAX


KEYWORD = 'KEYWORD'
OPERATOR = 'OPERATOR'
LINENO = 'LINENO'
INT = 'INT'
REAL = 'REAL'
STRING = 'STRING'
IDENT = 'IDENT'
SEPARATOR = 'SEPARATOR'


KEYWORDS = frozenset({
    # statements
    'PRINT', 'INPUT', 'LET', 'IF', 'THEN', 'ELSE', 'FOR', 'TO', 'STEP',
    'NEXT', 'REPEAT', 'UNTIL', 'WHILE', 'ENDWHILE', 'GOTO', 'GOSUB',
    'RETURN', 'ON', 'ERROR', 'OFF', 'DEF', 'PROC', 'FN', 'ENDPROC',
    'LOCAL', 'DIM', 'DATA', 'READ', 'RESTORE', 'END', 'STOP', 'QUIT',
    'REM', 'CLS', 'REPORT',
    # operators and print helpers
    'AND', 'OR', 'EOR', 'NOT', 'DIV', 'MOD', 'TAB', 'SPC',
    'TRUE', 'FALSE',
})

# Keywords after which a bare integer names a program line
LINE_KEYWORDS = frozenset({'GOTO', 'GOSUB', 'THEN', 'ELSE', 'RESTORE'})

TWO_CHAR_OPS = ('<=', '>=', '<>')
SINGLE_OPS = '+-*/^=<>'
SEPARATORS = ':,;()'

NUMBER_RE = re.compile(r'(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?')
DATA_NUMBER_RE = re.compile(r'[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')


@dataclass
class Token:
    type: str
    value: Any
    column: int = field(default=0, compare=False)
    # Source slice the token was read from, when it matters for output
    text: str = field(default='', compare=False)

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r})"


def is_keyword(token: Optional[Token], *names: str) -> bool:
    return token is not None and token.type == KEYWORD and token.value in names


def number_token(text: str, column: int) -> Token:
    """Build an INT or REAL token from numeric source text.

    A number is Integer unless it has a decimal point or exponent, or is
    too large for 32 bits.
    """
    if '.' in text or 'e' in text or 'E' in text:
        return Token(REAL, float(text), column, text)
    value = int(text)
    if value < INT_MIN or value > INT_MAX:
        return Token(REAL, float(value), column, text)
    return Token(INT, value, column, text)


def split_data_items(text: str, column: int) -> List[Token]:
    """Split the remainder of a DATA statement into literal tokens.

    Items are separated by commas outside double quotes. A quoted item is
    a STRING, a numeric item becomes INT or REAL, and anything else is an
    unquoted STRING with surrounding blanks removed.
    """
    tokens: List[Token] = []
    items: List[tuple] = []
    current: List[str] = []
    in_quote = False
    start = 0
    for offset, ch in enumerate(text):
        if ch == '"':
            in_quote = not in_quote
        if ch == ',' and not in_quote:
            items.append((start, ''.join(current)))
            current = []
            start = offset + 1
            continue
        current.append(ch)
    if in_quote:
        raise SyntaxFault('Missing "', column=column + start)
    items.append((start, ''.join(current)))

    for index, (offset, raw) in enumerate(items):
        if index:
            tokens.append(Token(SEPARATOR, ',', column + offset - 1, ','))
        item = raw.strip()
        item_col = column + offset + (len(raw) - len(raw.lstrip()))
        if item.startswith('"') and item.endswith('"') and len(item) >= 2:
            tokens.append(Token(STRING, item[1:-1].replace('""', '"'), item_col, item))
        elif DATA_NUMBER_RE.match(item):
            sign = -1 if item.startswith('-') else 1
            token = number_token(item.lstrip('+-'), item_col)
            token.value = sign * token.value
            token.text = item
            tokens.append(token)
        else:
            tokens.append(Token(STRING, item, item_col, item))
    return tokens


def tokenize(text: str) -> List[Token]:
    """Convert one line of source (without its line number) into tokens.

    Raises SyntaxFault with the 1-based column for an unterminated string
    or a character that cannot start any token.
    """
    tokens: List[Token] = []
    i = 0
    length = len(text)
    line_numbers = False

    while i < length:
        c = text[i]
        col = i + 1
        if c in ' \t\r\n':
            i += 1
            continue
        if c == "'":
            break

        # Words: keywords and identifiers
        if c.isalpha() or c == '_':
            start = i
            while i < length and (text[i].isalnum() or text[i] == '_'):
                i += 1
            if i < length and text[i] in '%$':
                i += 1
            word = text[start:i]
            upper = word.upper()
            if upper in KEYWORDS:
                if upper == 'REM':
                    break
                tokens.append(Token(KEYWORD, upper, col, word))
                line_numbers = upper in LINE_KEYWORDS
                if upper == 'DATA':
                    tokens.extend(split_data_items(text[i:], i + 1))
                    break
                continue
            # PROCname and FNname split BBC style
            prefix = next((p for p in ('PROC', 'FN') if word.startswith(p) and len(word) > len(p)), None)
            if prefix is not None and (word[len(prefix)].isalpha() or word[len(prefix)] == '_'):
                tokens.append(Token(KEYWORD, prefix, col, prefix))
                tokens.append(Token(IDENT, word[len(prefix):], col + len(prefix), word[len(prefix):]))
            else:
                tokens.append(Token(IDENT, word, col, word))
            line_numbers = False
            continue

        # Numbers
        if c.isdigit() or (c == '.' and i + 1 < length and text[i + 1].isdigit()):
            m = NUMBER_RE.match(text, i)
            number = m.group(0)
            i = m.end()
            if line_numbers and number.isdigit():
                tokens.append(Token(LINENO, int(number), col, number))
                continue
            tokens.append(number_token(number, col))
            line_numbers = False
            continue

        # Hexadecimal integer literal
        if c == '&':
            start = i
            i += 1
            while i < length and text[i] in '0123456789abcdefABCDEF':
                i += 1
            if i == start + 1:
                raise SyntaxFault('Bad hex', column=col)
            value = int(text[start + 1:i], 16) & 0xFFFFFFFF
            if value > INT_MAX:
                value -= 2 ** 32
            tokens.append(Token(INT, value, col, text[start:i]))
            line_numbers = False
            continue

        # Strings
        if c == '"':
            i += 1
            chars: List[str] = []
            while True:
                if i >= length:
                    raise SyntaxFault('Missing "', column=col)
                if text[i] == '"':
                    if i + 1 < length and text[i + 1] == '"':
                        chars.append('"')
                        i += 2
                        continue
                    i += 1
                    break
                chars.append(text[i])
                i += 1
            tokens.append(Token(STRING, ''.join(chars), col, text[col - 1:i]))
            line_numbers = False
            continue

        # Operators
        pair = text[i:i + 2]
        if pair in TWO_CHAR_OPS:
            tokens.append(Token(OPERATOR, pair, col, pair))
            i += 2
            line_numbers = False
            continue
        if c in SINGLE_OPS:
            tokens.append(Token(OPERATOR, c, col, c))
            i += 1
            line_numbers = False
            continue
        if c in SEPARATORS:
            tokens.append(Token(SEPARATOR, c, col, c))
            i += 1
            # ON x GOTO 10,20,30 keeps reading line numbers after commas
            if not (c == ',' and tokens[-2:-1] and tokens[-2].type == LINENO):
                line_numbers = False
            continue

        raise SyntaxFault(f'Unexpected character {c!r}', column=col)
    return tokens


def token_text(token: Token) -> str:
    """Render a single token back to source text."""
    if token.type == STRING:
        return '"' + token.value.replace('"', '""') + '"'
    if token.text:
        return token.text
    if token.type == REAL:
        return repr(token.value)
    return str(token.value)


def detokenize(tokens: List[Token]) -> str:
    """Rebuild source text that tokenizes back to an equal token list."""
    parts: List[str] = []
    previous: Optional[Token] = None
    for token in tokens:
        text = token_text(token)
        # commas attach to the preceding token
        if previous is not None and not (token.type == SEPARATOR and token.value == ','):
            parts.append(' ')
        parts.append(text)
        previous = token
    return ''.join(parts)
