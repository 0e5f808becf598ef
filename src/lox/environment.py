"""Runtime variable frames."""
from __future__ import annotations

from typing import Any, Dict, Optional

from .errors import LoxRuntimeError
from .token import Token


#one frame of bindings; closures keep their defining frame alive by reference
class Environment:
    def __init__(self, enclosing: Optional["Environment"] = None) -> None:
        self.enclosing = enclosing
        self.values: Dict[str, Any] = {}

    #redefinition silently replaces, matching top-level `var` semantics
    def define(self, name: str, value: Any) -> None:
        self.values[name] = value

    #walks the whole chain; used for globals, where no hop count is recorded
    def get(self, name: Token) -> Any:
        environment: Optional[Environment] = self
        while environment is not None:
            if name.lexeme in environment.values:
                return environment.values[name.lexeme]
            environment = environment.enclosing
        raise _undefined(name)

    def assign(self, name: Token, value: Any) -> None:
        environment: Optional[Environment] = self
        while environment is not None:
            if name.lexeme in environment.values:
                environment.values[name.lexeme] = value
                return
            environment = environment.enclosing
        raise _undefined(name)

    def ancestor(self, distance: int) -> "Environment":
        environment = self
        for _ in range(distance):
            assert environment.enclosing is not None, "resolver depth exceeds frame chain"
            environment = environment.enclosing
        return environment

    def get_at(self, distance: int, name: str) -> Any:
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Token, value: Any) -> None:
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Environment({sorted(self.values)}, enclosing={self.enclosing is not None})"


def _undefined(name: Token) -> LoxRuntimeError:
    return LoxRuntimeError(f"Undefined variable '{name.lexeme}'", name.span)


__all__ = ["Environment"]
