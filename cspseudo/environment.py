from typing import Any, Dict, Optional

from cspseudo.errors import CSPError


class Environment:
    """A scope mapping names to values or callables, chained to its parent."""
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def child(self) -> 'Environment':
        return Environment(parent=self)

    def define(self, name: str, binding: Any):
        """Bind ``name`` in this scope only."""
        self.values[name] = binding

    def declare_or_assign(self, name: str, value: Any):
        """Assign ``value`` to ``name``.

        First every ancestor scope that already binds ``name`` is updated,
        except the root scope. Then ``name`` is bound here as well, whether
        or not an ancestor matched. An assignment inside a branch therefore
        changes the enclosing (non-global) variable and also shadows it
        locally.
        """
        env = self.parent
        while env is not None:
            if not env.is_root and name in env.values:
                env.values[name] = value
            env = env.parent
        self.values[name] = value

    def lookup(self, token: Any) -> Any:
        """Resolve an identifier token through this scope and its ancestors."""
        env: Optional[Environment] = self
        while env is not None:
            if token.text in env.values:
                return env.values[token.text]
            env = env.parent
        raise CSPError.unresolved_name(token)

    def get(self, name: str) -> Any:
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.parent
        raise KeyError(name)
