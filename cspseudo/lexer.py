"""Lexer for CSP pseudocode.

The lexer is a single-pass state machine. It looks at one character at a
time and, when a token ends on a character that belongs to the next token,
re-examines that character instead of consuming it. Operators are matched
by maximal munch against ``OPERATOR_TOKENS``.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import List

from .errors import CSPError
from .tokens import OPERATOR_TOKENS, WORD_TOKENS, Token, TokenType


class LexState(Enum):
    NONE = auto()
    WORD = auto()
    NUMBER = auto()
    OPERATOR = auto()
    COMMENT = auto()
    STRING = auto()


def is_alpha(c: str) -> bool:
    return ('a' <= c <= 'z') or ('A' <= c <= 'Z') or c == '_'


def is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def is_alphanumeric(c: str) -> bool:
    return is_alpha(c) or is_digit(c)


def is_partial_operator(value: str) -> bool:
    return any(op.startswith(value) for op in OPERATOR_TOKENS)


def state_for(c: str, following: str) -> LexState:
    if is_alpha(c):
        return LexState.WORD
    if is_digit(c) or (c == '.' and is_digit(following)):
        return LexState.NUMBER
    if c == '"':
        return LexState.STRING
    return LexState.OPERATOR


def lex(text: str) -> List[Token]:
    """Convert source text into a list of tokens ending with EOF.

    Newlines are kept as ``NL`` tokens and comments as ``COMMENT`` tokens;
    the token stream decides which tokens are significant. A trailing
    newline is appended internally so the last token is always flushed,
    but it never produces a token of its own.
    """
    source = text + '\n'
    tokens: List[Token] = []
    state = LexState.NONE
    value = ''
    start = 0
    i = 0

    def send(kind: TokenType, end: int) -> None:
        nonlocal state, value
        tokens.append(Token(value, kind, end))
        value = ''
        state = LexState.NONE

    while i < len(source):
        c = source[i]

        if state == LexState.NONE:
            if c.isspace():
                if c == '\n' and i < len(text):
                    tokens.append(Token('\n', TokenType.NL, i + 1))
                i += 1
                continue
            state = state_for(c, source[i + 1:i + 2])
            start = i

        if state == LexState.WORD:
            if is_alphanumeric(c):
                value += c
                i += 1
            else:
                send(WORD_TOKENS.get(value, TokenType.ID), i)
        elif state == LexState.STRING:
            value += c
            i += 1
            if c == '"' and len(value) > 1:
                send(TokenType.STRING, i)
        elif state == LexState.NUMBER:
            if is_digit(c) or (c == '.' and '.' not in value):
                value += c
                i += 1
            else:
                send(TokenType.NUMBER, i)
        elif state == LexState.COMMENT:
            if c != '\n':
                value += c
                i += 1
            else:
                send(TokenType.COMMENT, i)
        elif state == LexState.OPERATOR:
            if is_partial_operator(value + c):
                value += c
                i += 1
                continue
            if not value:
                raise CSPError.unrecognized_character(i, c)
            kind = OPERATOR_TOKENS.get(value)
            if kind is None:
                raise CSPError.unrecognized_character(start, value)
            if kind == TokenType.COMMENT:
                state = LexState.COMMENT
            else:
                send(kind, i)

    if state == LexState.STRING:
        raise CSPError.unterminated_string(start, len(text))

    tokens.append(Token('', TokenType.EOF, len(text)))
    return tokens
