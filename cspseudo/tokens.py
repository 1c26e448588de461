"""Token definitions and the token stream used by the parser.

A token records its text, its kind and the source offset of the character
immediately after it. The lexer fills these in as it emits tokens, so a
token's span is always ``[offset - len(text), offset)``.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

from .errors import CSPError


class TokenType(Enum):
    # Keywords
    PROCEDURE = 'PROCEDURE'
    FOR = 'FOR'
    EACH = 'EACH'
    IN = 'IN'
    IF = 'IF'
    ELSE = 'ELSE'
    RETURN = 'RETURN'
    MOD = 'MOD'
    NOT = 'NOT'
    AND = 'AND'
    OR = 'OR'
    REPEAT = 'REPEAT'
    TIMES = 'TIMES'
    UNTIL = 'UNTIL'

    # Literals and names
    NUMBER = 'number'
    STRING = 'string'
    BOOL = 'boolean'
    ID = 'identifier'

    # Operators
    ASSIGN = '←'
    EQUAL = '='
    NOT_EQUAL = '≠'
    LESS_THAN = '<'
    GREATER_THAN = '>'
    LESS_THAN_OR_EQUAL = '≤'
    GREATER_THAN_OR_EQUAL = '≥'
    ADD = '+'
    SUBTRACT = '-'
    MULTIPLY = '*'
    DIVIDE = '/'

    # Punctuation
    OPEN_PAREN = '('
    CLOSE_PAREN = ')'
    OPEN_BRACKET = '['
    CLOSE_BRACKET = ']'
    OPEN_BLOCK = '{'
    CLOSE_BLOCK = '}'
    COMMA = ','

    # Structure
    NL = 'newline'
    COMMENT = 'comment'
    EOF = 'end of input'

    def describe(self) -> str:
        if self in (TokenType.NUMBER, TokenType.STRING, TokenType.BOOL,
                    TokenType.ID, TokenType.NL, TokenType.COMMENT, TokenType.EOF):
            return self.value
        return f'"{self.value}"'


WORD_TOKENS: Dict[str, TokenType] = {
    'PROCEDURE': TokenType.PROCEDURE,
    'FOR': TokenType.FOR,
    'EACH': TokenType.EACH,
    'IN': TokenType.IN,
    'IF': TokenType.IF,
    'ELSE': TokenType.ELSE,
    'RETURN': TokenType.RETURN,
    'MOD': TokenType.MOD,
    'NOT': TokenType.NOT,
    'AND': TokenType.AND,
    'OR': TokenType.OR,
    'REPEAT': TokenType.REPEAT,
    'TIMES': TokenType.TIMES,
    'UNTIL': TokenType.UNTIL,
    'true': TokenType.BOOL,
    'false': TokenType.BOOL,
    # ASCII stand-ins for symbols that are hard to type
    'ass': TokenType.ASSIGN,
    'neq': TokenType.NOT_EQUAL,
    'lteq': TokenType.LESS_THAN_OR_EQUAL,
    'gteq': TokenType.GREATER_THAN_OR_EQUAL,
}

OPERATOR_TOKENS: Dict[str, TokenType] = {
    '←': TokenType.ASSIGN,
    '=': TokenType.EQUAL,
    '≠': TokenType.NOT_EQUAL,
    '!=': TokenType.NOT_EQUAL,
    '<': TokenType.LESS_THAN,
    '>': TokenType.GREATER_THAN,
    '≤': TokenType.LESS_THAN_OR_EQUAL,
    '<=': TokenType.LESS_THAN_OR_EQUAL,
    '≥': TokenType.GREATER_THAN_OR_EQUAL,
    '>=': TokenType.GREATER_THAN_OR_EQUAL,
    '+': TokenType.ADD,
    '-': TokenType.SUBTRACT,
    '*': TokenType.MULTIPLY,
    '/': TokenType.DIVIDE,
    '(': TokenType.OPEN_PAREN,
    ')': TokenType.CLOSE_PAREN,
    '[': TokenType.OPEN_BRACKET,
    ']': TokenType.CLOSE_BRACKET,
    '{': TokenType.OPEN_BLOCK,
    '}': TokenType.CLOSE_BLOCK,
    ',': TokenType.COMMA,
    '//': TokenType.COMMENT,
}

INSIGNIFICANT = (TokenType.NL, TokenType.COMMENT)

# The parser never rewinds more than two reads in a row.
MAX_REWIND = 4


@dataclass(frozen=True)
class Token:
    text: str
    kind: TokenType
    offset: int

    @property
    def start(self) -> int:
        return self.offset - len(self.text)

    @property
    def end(self) -> int:
        return self.offset

    def loc_range(self) -> Tuple[int, int]:
        return (self.start, self.end)

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.text!r}, {self.offset})"


class TokenStream:
    """Single-cursor reader over the lexer output.

    Every read (``next`` or ``next_sig``) remembers where the cursor was
    before it, so ``back`` always undoes exactly one read, however many
    newlines and comments that read skipped over. Only the last
    ``MAX_REWIND`` reads are remembered.
    """

    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].kind != TokenType.EOF:
            raise ValueError('token list must end with an EOF token')
        self.tokens = tokens
        self.pos = 0
        self._reads: deque = deque(maxlen=MAX_REWIND)

    def _advance(self) -> Token:
        if self.pos >= len(self.tokens):
            return self.tokens[-1]
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def next(self) -> Token:
        self._reads.append(self.pos)
        return self._advance()

    def back(self) -> None:
        if not self._reads:
            raise IndexError('no earlier read to rewind to')
        self.pos = self._reads.pop()

    def next_sig(self) -> Token:
        self._reads.append(self.pos)
        token = self._advance()
        while token.kind in INSIGNIFICANT:
            token = self._advance()
        return token

    def jump_to_sig(self) -> Token:
        i = self.pos
        while i < len(self.tokens) and self.tokens[i].kind in INSIGNIFICANT:
            i += 1
        if i >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[i]

    def take_sig_of_type(self, kind: TokenType) -> Token:
        token = self.next_sig()
        if token.kind != kind:
            raise CSPError.invalid_token(kind, token)
        return token
