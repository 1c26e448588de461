"""JSON serialization/deserialization for the CSP pseudocode AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding. Tokens are kept in full (text,
kind and offset) so that a tree loaded back from JSON still produces
diagnostics that point at the source text.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    Assign,
    Binary,
    Call,
    Conditional,
    Container,
    ExpressionStatement,
    For,
    Identifier,
    ListLiteral,
    Literal,
    MakeProc,
    Program,
    RepeatN,
    RepeatUntil,
    Return,
    Unary,
)
from .tokens import Token, TokenType


def token_to_obj(t: Token) -> Dict[str, Any]:
    return {"text": t.text, "kind": t.kind.name, "offset": t.offset}


def token_from_obj(o: Dict[str, Any]) -> Token:
    return Token(o["text"], TokenType[o["kind"]], int(o["offset"]))


def _block_to_obj(block: Any) -> Any:
    if block is None:
        return None
    return [ast_to_obj(a) for a in block]


def _block_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    return tuple(ast_from_obj(a) for a in obj)


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    if isinstance(node, Token):
        return token_to_obj(node)

    # Actions
    if isinstance(node, Program):
        return {"type": "Program", "body": _block_to_obj(node.body)}
    if isinstance(node, MakeProc):
        return {
            "type": "MakeProc",
            "name": token_to_obj(node.name),
            "params": [token_to_obj(p) for p in node.params],
            "body": _block_to_obj(node.body),
        }
    if isinstance(node, Assign):
        return {"type": "Assign", "target": token_to_obj(node.target), "expression": ast_to_obj(node.expression)}
    if isinstance(node, Conditional):
        return {
            "type": "Conditional",
            "token": token_to_obj(node.token),
            "condition": ast_to_obj(node.condition),
            "block": _block_to_obj(node.block),
            "else_block": _block_to_obj(node.else_block),
        }
    if isinstance(node, RepeatN):
        return {
            "type": "RepeatN",
            "token": token_to_obj(node.token),
            "count": ast_to_obj(node.count),
            "block": _block_to_obj(node.block),
        }
    if isinstance(node, RepeatUntil):
        return {
            "type": "RepeatUntil",
            "token": token_to_obj(node.token),
            "condition": ast_to_obj(node.condition),
            "block": _block_to_obj(node.block),
        }
    if isinstance(node, For):
        return {
            "type": "For",
            "token": token_to_obj(node.token),
            "item": token_to_obj(node.item),
            "list_expression": ast_to_obj(node.list_expression),
            "block": _block_to_obj(node.block),
        }
    if isinstance(node, Return):
        return {"type": "Return", "token": token_to_obj(node.token), "value": ast_to_obj(node.value)}
    if isinstance(node, ExpressionStatement):
        return {"type": "ExpressionStatement", "expression": ast_to_obj(node.expression)}

    # Expressions
    if isinstance(node, Literal):
        return {"type": "Literal", "token": token_to_obj(node.token)}
    if isinstance(node, Identifier):
        return {"type": "Identifier", "token": token_to_obj(node.token)}
    if isinstance(node, Unary):
        return {"type": "Unary", "token": token_to_obj(node.token), "operand": ast_to_obj(node.operand)}
    if isinstance(node, Binary):
        return {
            "type": "Binary",
            "left": ast_to_obj(node.left),
            "token": token_to_obj(node.token),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, Container):
        return {
            "type": "Container",
            "inner": ast_to_obj(node.inner),
            "open": token_to_obj(node.open),
            "close": token_to_obj(node.close),
        }
    if isinstance(node, ListLiteral):
        return {
            "type": "ListLiteral",
            "items": [ast_to_obj(i) for i in node.items],
            "open": token_to_obj(node.open),
            "close": token_to_obj(node.close),
        }
    if isinstance(node, Call):
        return {
            "type": "Call",
            "callee": token_to_obj(node.callee),
            "args": [ast_to_obj(a) for a in node.args],
            "close": token_to_obj(node.close),
        }

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(body=_block_from_obj(obj["body"]))
    if t == "MakeProc":
        return MakeProc(
            name=token_from_obj(obj["name"]),
            params=tuple(token_from_obj(p) for p in obj["params"]),
            body=_block_from_obj(obj["body"]),
        )
    if t == "Assign":
        return Assign(target=token_from_obj(obj["target"]), expression=ast_from_obj(obj["expression"]))
    if t == "Conditional":
        return Conditional(
            token=token_from_obj(obj["token"]),
            condition=ast_from_obj(obj["condition"]),
            block=_block_from_obj(obj["block"]),
            else_block=_block_from_obj(obj.get("else_block")),
        )
    if t == "RepeatN":
        return RepeatN(
            token=token_from_obj(obj["token"]),
            count=ast_from_obj(obj["count"]),
            block=_block_from_obj(obj["block"]),
        )
    if t == "RepeatUntil":
        return RepeatUntil(
            token=token_from_obj(obj["token"]),
            condition=ast_from_obj(obj["condition"]),
            block=_block_from_obj(obj["block"]),
        )
    if t == "For":
        return For(
            token=token_from_obj(obj["token"]),
            item=token_from_obj(obj["item"]),
            list_expression=ast_from_obj(obj["list_expression"]),
            block=_block_from_obj(obj["block"]),
        )
    if t == "Return":
        return Return(token=token_from_obj(obj["token"]), value=ast_from_obj(obj["value"]))
    if t == "ExpressionStatement":
        return ExpressionStatement(expression=ast_from_obj(obj["expression"]))
    if t == "Literal":
        return Literal(token=token_from_obj(obj["token"]))
    if t == "Identifier":
        return Identifier(token=token_from_obj(obj["token"]))
    if t == "Unary":
        return Unary(token=token_from_obj(obj["token"]), operand=ast_from_obj(obj["operand"]))
    if t == "Binary":
        return Binary(
            left=ast_from_obj(obj["left"]),
            token=token_from_obj(obj["token"]),
            right=ast_from_obj(obj["right"]),
        )
    if t == "Container":
        return Container(
            inner=ast_from_obj(obj["inner"]),
            open=token_from_obj(obj["open"]),
            close=token_from_obj(obj["close"]),
        )
    if t == "ListLiteral":
        return ListLiteral(
            items=tuple(ast_from_obj(i) for i in obj["items"]),
            open=token_from_obj(obj["open"]),
            close=token_from_obj(obj["close"]),
        )
    if t == "Call":
        return Call(
            callee=token_from_obj(obj["callee"]),
            args=tuple(ast_from_obj(a) for a in obj["args"]),
            close=token_from_obj(obj["close"]),
        )

    raise ValueError(f"Unknown AST node type: {t}")
