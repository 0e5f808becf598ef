"""Runtime value model: callables, classes, instances and their printing rules."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from . import ast
from .environment import Environment
from .errors import LoxRuntimeError, ReturnUnwind
from .token import Token, format_number

if TYPE_CHECKING:
    from .interpreter import Interpreter


#user-defined function or method; `closure` is the frame it was declared in
@dataclass(slots=True, eq=False)
class LoxFunction:
    declaration: ast.FunctionDecl
    closure: Environment
    is_initializer: bool = False

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def arity(self) -> int:
        return len(self.declaration.params)

    #wraps the closure in a frame holding `this`, so every access yields a fresh bound method
    def bind(self, instance: "LoxInstance") -> "LoxFunction":
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)
        try:
            interpreter.execute_block(self.declaration.body, environment)
        except ReturnUnwind as unwind:
            if self.is_initializer:
                return self.closure.get_at(0, "this")
            return unwind.value
        if self.is_initializer:
            return self.closure.get_at(0, "this")
        return None


#host-provided callable such as `clock`
@dataclass(slots=True, eq=False)
class NativeFunction:
    name: str
    parameter_count: int
    function: Callable[..., Any]

    def arity(self) -> int:
        return self.parameter_count

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        return self.function(*arguments)


#immutable once built; method lookup falls back to the superclass chain
@dataclass(slots=True, eq=False)
class LoxClass:
    name: str
    superclass: Optional["LoxClass"]
    methods: Dict[str, LoxFunction] = field(default_factory=dict)

    def find_method(self, name: str) -> Optional[LoxFunction]:
        klass: Optional[LoxClass] = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> "LoxInstance":
        instance = LoxInstance(interpreter.next_instance_id(), self)
        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance


#instances compare by identity; the id only makes them easy to tell apart when tracing
@dataclass(slots=True, eq=False)
class LoxInstance:
    id: int
    klass: LoxClass
    fields: Dict[str, Any] = field(default_factory=dict)

    def get(self, name: Token) -> Any:
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)
        raise LoxRuntimeError(f"Undefined property '{name.lexeme}'", name.span)

    def set(self, name: Token, value: Any) -> None:
        self.fields[name.lexeme] = value


LoxCallable = (LoxFunction, NativeFunction, LoxClass)


#how `print` and the REPL show a value
def stringify(value: Any) -> str:
    match value:
        case None:
            return "nil"
        case bool():
            return "true" if value else "false"
        case float():
            return format_number(value)
        case str():
            return f'"{value}"'
        case LoxFunction():
            return f'"fun {value.name}"'
        case NativeFunction():
            return f'"native fun {value.name}"'
        case LoxClass():
            return f'"class {value.name}"'
        case LoxInstance():
            return f'"instance of {value.klass.name}"'
    raise AssertionError(f"unexpected runtime value {value!r}")


def is_truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


#no coercion between kinds, so `true == 1` is false even though Python says otherwise
def is_equal(left: Any, right: Any) -> bool:
    if type(left) is not type(right):
        return False
    if isinstance(left, (bool, float, str)) or left is None:
        return left == right
    return left is right


__all__ = [
    "LoxCallable",
    "LoxClass",
    "LoxFunction",
    "LoxInstance",
    "NativeFunction",
    "is_equal",
    "is_truthy",
    "stringify",
]
