from dataclasses import dataclass
from typing import Any, Optional, Tuple

from cspseudo.ast import Block
from cspseudo.tokens import Token


@dataclass
class BuiltinFunction:
    """A host-provided procedure.

    ``fn`` receives the evaluated arguments and the ``Call`` node (for
    anchoring diagnostics) and returns a value or ``None``. An ``arity``
    of ``None`` accepts any number of arguments.
    """
    name: str
    arity: Optional[int]
    fn: Any

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"


@dataclass(frozen=True)
class Procedure:
    """A user-defined procedure.

    It holds no environment. A call always runs in a fresh child of the
    global environment supplied by the caller.
    """
    name: Token
    params: Tuple[Token, ...]
    body: Block

    def __repr__(self) -> str:
        return f"<procedure {self.name.text}>"
