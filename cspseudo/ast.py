"""Abstract Syntax Tree (AST) definitions for CSP pseudocode.

Statements are ``Action`` nodes and expressions are ``Expression`` nodes.
Nodes are frozen dataclasses; blocks and argument lists are stored as
tuples so a tree never changes once the parser has built it. Every node
keeps the tokens it was built from, which is what ``loc_range`` uses to
point diagnostics at the source.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .tokens import Token


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""

    def loc_range(self) -> Tuple[int, int]:
        raise NotImplementedError(f"loc_range: unexpected node type {type(self).__name__}")


###############################################################################
# Expressions
###############################################################################


@dataclass(frozen=True)
class Expression(Node):
    pass


@dataclass(frozen=True)
class Literal(Expression):
    token: Token

    def loc_range(self) -> Tuple[int, int]:
        return self.token.loc_range()


@dataclass(frozen=True)
class Identifier(Expression):
    token: Token

    def loc_range(self) -> Tuple[int, int]:
        return self.token.loc_range()


@dataclass(frozen=True)
class Unary(Expression):
    token: Token
    operand: Expression

    def loc_range(self) -> Tuple[int, int]:
        return (self.token.start, self.operand.loc_range()[1])


@dataclass(frozen=True)
class Binary(Expression):
    left: Expression
    token: Token
    right: Expression

    def loc_range(self) -> Tuple[int, int]:
        return (self.left.loc_range()[0], self.right.loc_range()[1])


@dataclass(frozen=True)
class Container(Expression):
    """A parenthesized expression; evaluates to its inner expression."""
    inner: Expression
    open: Token
    close: Token

    def loc_range(self) -> Tuple[int, int]:
        return (self.open.start, self.close.end)


@dataclass(frozen=True)
class ListLiteral(Expression):
    items: Tuple[Expression, ...]
    open: Token
    close: Token

    def loc_range(self) -> Tuple[int, int]:
        return (self.open.start, self.close.end)


@dataclass(frozen=True)
class Call(Expression):
    callee: Token
    args: Tuple[Expression, ...]
    close: Token

    def loc_range(self) -> Tuple[int, int]:
        return (self.callee.start, self.close.end)


###############################################################################
# Actions
###############################################################################


@dataclass(frozen=True)
class Action(Node):
    pass


Block = Tuple[Action, ...]


@dataclass(frozen=True)
class MakeProc(Action):
    name: Token
    params: Tuple[Token, ...]
    body: Block

    def loc_range(self) -> Tuple[int, int]:
        return self.name.loc_range()


@dataclass(frozen=True)
class Assign(Action):
    target: Token
    expression: Expression

    def loc_range(self) -> Tuple[int, int]:
        return (self.target.start, self.expression.loc_range()[1])


@dataclass(frozen=True)
class Conditional(Action):
    token: Token
    condition: Expression
    block: Block
    else_block: Optional[Block]

    def loc_range(self) -> Tuple[int, int]:
        return (self.token.start, self.condition.loc_range()[1])


@dataclass(frozen=True)
class RepeatN(Action):
    token: Token
    count: Expression
    block: Block

    def loc_range(self) -> Tuple[int, int]:
        return (self.token.start, self.count.loc_range()[1])


@dataclass(frozen=True)
class RepeatUntil(Action):
    token: Token
    condition: Expression
    block: Block

    def loc_range(self) -> Tuple[int, int]:
        return (self.token.start, self.condition.loc_range()[1])


@dataclass(frozen=True)
class For(Action):
    token: Token
    item: Token
    list_expression: Expression
    block: Block

    def loc_range(self) -> Tuple[int, int]:
        return (self.token.start, self.list_expression.loc_range()[1])


@dataclass(frozen=True)
class Return(Action):
    token: Token
    value: Expression

    def loc_range(self) -> Tuple[int, int]:
        return (self.token.start, self.value.loc_range()[1])


@dataclass(frozen=True)
class ExpressionStatement(Action):
    expression: Expression

    def loc_range(self) -> Tuple[int, int]:
        return self.expression.loc_range()


@dataclass(frozen=True)
class Program(Node):
    body: Block

    def loc_range(self) -> Tuple[int, int]:
        if not self.body:
            return (0, 0)
        return (self.body[0].loc_range()[0], self.body[-1].loc_range()[1])
