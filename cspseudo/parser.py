"""Recursive-descent parser for CSP pseudocode.

Each statement form has its own ``parse_*`` method and statements are
picked by their first significant token. Line breaks and comments are
invisible to the grammar because every read goes through
``TokenStream.next_sig``.

Binary operators share a single precedence level and group to the right:
once a left operand and an operator have been read, the right operand is a
whole new expression. ``a - b - c`` is therefore ``a - (b - c)``. Programs
rely on this, so it must not be "fixed" into conventional precedence.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .ast import (
    Action, Assign, Binary, Block, Call, Conditional, Container, Expression,
    ExpressionStatement, For, Identifier, ListLiteral, Literal, MakeProc,
    Program, RepeatN, RepeatUntil, Return, Unary,
)
from .errors import CSPError
from .lexer import lex
from .tokens import Token, TokenStream, TokenType

BINARY_OPERATIONS = frozenset({
    TokenType.ADD, TokenType.SUBTRACT, TokenType.DIVIDE, TokenType.MULTIPLY,
    TokenType.AND, TokenType.OR, TokenType.GREATER_THAN, TokenType.LESS_THAN,
    TokenType.EQUAL, TokenType.NOT_EQUAL, TokenType.LESS_THAN_OR_EQUAL,
    TokenType.GREATER_THAN_OR_EQUAL, TokenType.MOD,
})

LITERALS = frozenset({TokenType.NUMBER, TokenType.STRING, TokenType.BOOL})


class Parser:
    def __init__(self, ts: TokenStream):
        self.ts = ts

    def parse_program(self) -> Program:
        return Program(self.parse_block(root=True))

    # Statements

    def parse_block(self, root: bool = False) -> Block:
        """Parse statements until a closing brace (or EOF for the root block).

        The opening brace of a nested block has already been consumed by
        the caller.
        """
        ts = self.ts
        steps: List[Action] = []
        while True:
            if ts.jump_to_sig().kind == TokenType.EOF:
                if not root:
                    raise CSPError.invalid_token(TokenType.CLOSE_BLOCK, ts.next_sig())
                break
            t = ts.next_sig()
            if t.kind == TokenType.CLOSE_BLOCK and not root:
                break
            if t.kind == TokenType.PROCEDURE:
                steps.append(self.parse_procedure())
            elif t.kind == TokenType.IF:
                steps.append(self.parse_conditional(t))
            elif t.kind == TokenType.REPEAT:
                steps.append(self.parse_repeat(t))
            elif t.kind == TokenType.FOR:
                steps.append(self.parse_for(t))
            elif t.kind == TokenType.RETURN:
                steps.append(self.parse_return(t))
            elif t.kind == TokenType.ID:
                steps.append(self.parse_id_lead_line())
            else:
                raise CSPError.invalid_line(t)
        return tuple(steps)

    def parse_procedure(self) -> MakeProc:
        ts = self.ts
        name = ts.take_sig_of_type(TokenType.ID)
        ts.take_sig_of_type(TokenType.OPEN_PAREN)
        params: List[Token] = []
        while True:
            t = ts.next_sig()
            if t.kind == TokenType.CLOSE_PAREN:
                break
            if t.kind != TokenType.ID:
                raise CSPError.invalid_token(TokenType.ID, t)
            params.append(t)
            following = ts.next_sig()
            if following.kind == TokenType.CLOSE_PAREN:
                break
            if following.kind != TokenType.COMMA:
                raise CSPError.invalid_token(TokenType.CLOSE_PAREN, following)
        ts.take_sig_of_type(TokenType.OPEN_BLOCK)
        body = self.parse_block()
        return MakeProc(name, tuple(params), body)

    def parse_conditional(self, token: Token) -> Conditional:
        ts = self.ts
        ts.take_sig_of_type(TokenType.OPEN_PAREN)
        condition = self.parse_expression()
        ts.take_sig_of_type(TokenType.CLOSE_PAREN)
        ts.take_sig_of_type(TokenType.OPEN_BLOCK)
        block = self.parse_block()

        else_block: Optional[Block] = None
        if ts.next_sig().kind == TokenType.ELSE:
            ts.take_sig_of_type(TokenType.OPEN_BLOCK)
            else_block = self.parse_block()
        else:
            ts.back()
        return Conditional(token, condition, block, else_block)

    def parse_repeat(self, token: Token) -> Action:
        # REPEAT UNTIL (cond) { } versus REPEAT n TIMES { }
        if self.ts.next_sig().kind == TokenType.UNTIL:
            return self.parse_repeat_until(token)
        self.ts.back()
        return self.parse_repeat_n(token)

    def parse_repeat_n(self, token: Token) -> RepeatN:
        count = self.parse_expression()
        self.ts.take_sig_of_type(TokenType.TIMES)
        self.ts.take_sig_of_type(TokenType.OPEN_BLOCK)
        return RepeatN(token, count, self.parse_block())

    def parse_repeat_until(self, token: Token) -> RepeatUntil:
        condition = self.parse_expression()
        self.ts.take_sig_of_type(TokenType.OPEN_BLOCK)
        return RepeatUntil(token, condition, self.parse_block())

    def parse_for(self, token: Token) -> For:
        ts = self.ts
        ts.take_sig_of_type(TokenType.EACH)
        item = ts.take_sig_of_type(TokenType.ID)
        ts.take_sig_of_type(TokenType.IN)
        list_expression = self.parse_expression()
        ts.take_sig_of_type(TokenType.OPEN_BLOCK)
        return For(token, item, list_expression, self.parse_block())

    def parse_return(self, token: Token) -> Return:
        return Return(token, self.parse_expression())

    def parse_assign(self) -> Assign:
        target = self.ts.take_sig_of_type(TokenType.ID)
        self.ts.take_sig_of_type(TokenType.ASSIGN)
        return Assign(target, self.parse_expression())

    def parse_id_lead_line(self) -> Action:
        # The identifier has been read; peek at what follows it, then
        # rewind over both reads so the chosen rule sees the whole line.
        t = self.ts.next_sig()
        self.ts.back()
        self.ts.back()
        if t.kind == TokenType.ASSIGN:
            return self.parse_assign()
        return ExpressionStatement(self.parse_expression())

    # Expressions

    def parse_expression_list(self, closer: TokenType) -> Tuple[Tuple[Expression, ...], Token]:
        ts = self.ts
        items: List[Expression] = []
        while True:
            t = ts.next_sig()
            if t.kind == closer:
                return tuple(items), t
            ts.back()

            items.append(self.parse_expression())

            comma_or_close = ts.next_sig()
            if comma_or_close.kind == TokenType.COMMA:
                continue
            if comma_or_close.kind == closer:
                return tuple(items), comma_or_close
            raise CSPError.invalid_token(closer, comma_or_close)

    def parse_expression(self) -> Expression:
        ts = self.ts
        exp: Optional[Expression] = None
        while True:
            t = ts.next_sig()
            if exp is None:
                if t.kind in LITERALS:
                    exp = Literal(t)
                elif t.kind == TokenType.ID:
                    exp = Identifier(t)
                elif t.kind == TokenType.OPEN_PAREN:
                    inner = self.parse_expression()
                    close = ts.take_sig_of_type(TokenType.CLOSE_PAREN)
                    exp = Container(inner, t, close)
                elif t.kind == TokenType.OPEN_BRACKET:
                    items, close = self.parse_expression_list(TokenType.CLOSE_BRACKET)
                    exp = ListLiteral(items, t, close)
                elif t.kind in (TokenType.SUBTRACT, TokenType.NOT):
                    return Unary(t, self.parse_expression())
                else:
                    break
            elif t.kind in BINARY_OPERATIONS:
                exp = Binary(exp, t, self.parse_expression())
            elif t.kind == TokenType.OPEN_PAREN and isinstance(exp, Identifier):
                args, close = self.parse_expression_list(TokenType.CLOSE_PAREN)
                exp = Call(exp.token, args, close)
            else:
                ts.back()
                break

        if exp is None:
            ts.back()
            raise CSPError.expected_expression(ts.next_sig())
        return exp


def parse_tokens(tokens: List[Token]) -> Program:
    return Parser(TokenStream(tokens)).parse_program()


def parse_program(source: str) -> Program:
    """Lex and parse source text into a ``Program``.

    Lexical and syntax errors are raised as ``CSPError``.
    """
    return parse_tokens(lex(source))
