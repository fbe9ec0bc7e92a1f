from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional, Set
from .errors import ObjectNotDeclared


class Signal(Enum):
    RETURN = auto()
    BREAK = auto()
    CONTINUE = auto()


@dataclass(frozen=True)
class Unwinder:
    """Non-local control transfer produced by return, break and continue.

    Statement execution yields None on normal completion and an Unwinder
    otherwise. Whoever can handle the signal consumes it; everyone else hands
    it upwards unchanged.
    """
    signal: Signal
    value: Any = None


class Environment:
    def __init__(self, parent=None, values: Optional[Dict[str, Any]] = None):
        self.values: Dict[str, Any] = dict(values) if values else {}
        self.parent: Optional[Environment] = parent
        self.imported: Set[str] = set()

    def ancestor(self, level: int) -> "Environment":
        scope = self
        for _ in range(level):
            if scope.parent is None:
                raise ObjectNotDeclared(f"no scope {level} levels up")
            scope = scope.parent
        return scope

    def declare(self, name: str, value: Any):
        self.values[name] = value

    def resolve(self, name: str, level: int = 0) -> Any:
        scope = self.ancestor(level)
        if name not in scope.values:
            raise ObjectNotDeclared(name)
        return scope.values[name]

    def assign(self, name: str, value: Any, level: int = 0):
        scope = self.ancestor(level)
        if name not in scope.values:
            raise ObjectNotDeclared(name)
        scope.values[name] = value

    def adopt(self, name: str, value: Any):
        """Declares a name the parser never saw, such as an imported export."""
        self.values[name] = value
        self.imported.add(name)

    def locate(self, name: str, level: int) -> "Environment":
        """Finds the scope of a name the parser could not resolve.

        Such names live with the builtins `level` scopes up. Failing that they
        were imported into an enclosing scope, or are globals declared after
        the code using them was parsed.
        """
        builtins = self.ancestor(level)
        if name in builtins.values:
            return builtins
        scope = self
        while scope is not builtins:
            if name in scope.imported:
                return scope
            scope = scope.parent
        if level > 0:
            scope = self.ancestor(level - 1)
            if name in scope.values:
                return scope
        raise ObjectNotDeclared(name)
    def __repr__(self):
        return f"Environment({sorted(self.values)!r})"
