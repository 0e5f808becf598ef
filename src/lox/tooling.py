"""Editor support: go-to-definition and member completion at a cursor position.

This is a deliberately small scope walk of its own, separate from
`lox.resolver`. It only knows what can be read off the tree: the names
declared in each scope, the classes (with their methods and the fields
assigned through `this`), and the class of variables initialised by calling
a class directly.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional

from . import ast
from .errors import SourceLocation
from .pipeline import build_ast
from .reporter import CollectingReporter
from .token import Token


class CompletionKind(Enum):
    METHOD = auto()
    PROPERTY = auto()


@dataclass(frozen=True, slots=True)
class Completion:
    name: str
    kind: CompletionKind


#what the walk knows about a class declared in the file
@dataclass(slots=True)
class _ClassInfo:
    name: Token
    superclass: Optional[str] = None
    methods: Dict[str, Token] = field(default_factory=dict)
    fields: Dict[str, Token] = field(default_factory=dict)


@dataclass(slots=True)
class _Scope:
    identifiers: Dict[str, Token] = field(default_factory=dict)
    #variable name -> class name, for `var x = SomeClass(...)`
    types: Dict[str, str] = field(default_factory=dict)
    classes: Dict[str, _ClassInfo] = field(default_factory=dict)


#walks the tree once, collecting definitions and completions for one position
class _PositionWalker:
    def __init__(self, position: SourceLocation) -> None:
        self.position = position
        self.scopes: List[_Scope] = [_Scope()]
        self.definitions: List[Token] = []
        self.completions: List[Completion] = []
        self.current_class: Optional[str] = None

    def walk(self, statements: List[ast.Stmt]) -> None:
        for stmt in statements:
            self._walk_stmt(stmt)

    def _walk_stmt(self, stmt: ast.Stmt) -> None:
        if isinstance(stmt, ast.Block):
            self.scopes.append(_Scope())
            self.walk(stmt.statements)
            self.scopes.pop()
        elif isinstance(stmt, ast.Class):
            self._walk_class(stmt)
        elif isinstance(stmt, (ast.Expression, ast.Print)):
            self._walk_expr(stmt.expression)
        elif isinstance(stmt, ast.Function):
            self.scopes[-1].identifiers[stmt.function.name.lexeme] = stmt.function.name
            self._walk_function(stmt.function)
        elif isinstance(stmt, ast.If):
            self._walk_expr(stmt.condition)
            self._walk_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self._walk_stmt(stmt.else_branch)
        elif isinstance(stmt, ast.Return):
            if stmt.value is not None:
                self._walk_expr(stmt.value)
        elif isinstance(stmt, ast.Var):
            self._walk_var(stmt)
        elif isinstance(stmt, ast.While):
            self._walk_expr(stmt.condition)
            self._walk_stmt(stmt.body)

    def _walk_class(self, stmt: ast.Class) -> None:
        superclass = stmt.superclass.name.lexeme if stmt.superclass is not None else None
        info = _ClassInfo(name=stmt.name, superclass=superclass)
        self.scopes[-1].classes[stmt.name.lexeme] = info

        enclosing_class = self.current_class
        self.current_class = stmt.name.lexeme
        if stmt.superclass is not None:
            self._walk_expr(stmt.superclass)

        #methods are registered up front so calls between them resolve in any order
        for method in stmt.methods:
            info.methods[method.function.name.lexeme] = method.function.name
        self.scopes.append(_Scope())
        for method in stmt.methods:
            self._walk_function(method.function)
        self.scopes.pop()
        self.current_class = enclosing_class

    def _walk_function(self, function: ast.FunctionDecl) -> None:
        scope = _Scope()
        for param in function.params:
            scope.identifiers[param.lexeme] = param
        self.scopes.append(scope)
        self.walk(function.body)
        self.scopes.pop()

    def _walk_var(self, stmt: ast.Var) -> None:
        self.scopes[-1].identifiers[stmt.name.lexeme] = stmt.name
        initializer = stmt.initializer
        if initializer is None:
            return
        if isinstance(initializer, ast.Call) and isinstance(initializer.callee, ast.Variable):
            class_name = initializer.callee.name.lexeme
            if self._find_class(class_name) is not None:
                self.scopes[-1].types[stmt.name.lexeme] = class_name
        self._walk_expr(initializer)

    def _walk_expr(self, expr: ast.Expr) -> None:
        if isinstance(expr, ast.Assign):
            self._walk_expr(expr.value)
            self._name_at_position(expr.name)
        elif isinstance(expr, (ast.Binary, ast.Logical)):
            self._walk_expr(expr.left)
            self._walk_expr(expr.right)
        elif isinstance(expr, ast.Call):
            self._walk_expr(expr.callee)
            for argument in expr.arguments:
                self._walk_expr(argument)
        elif isinstance(expr, ast.Get):
            self._walk_member(expr.object, expr.name)
        elif isinstance(expr, ast.Grouping):
            self._walk_expr(expr.expression)
        elif isinstance(expr, ast.Set):
            if isinstance(expr.object, ast.This) and self.current_class is not None:
                info = self._find_class(self.current_class)
                if info is not None:
                    info.fields.setdefault(expr.name.lexeme, expr.name)
            self._walk_member(expr.object, expr.name)
            self._walk_expr(expr.value)
        elif isinstance(expr, ast.Super):
            self._walk_super(expr)
        elif isinstance(expr, ast.Unary):
            self._walk_expr(expr.right)
        elif isinstance(expr, ast.Variable):
            self._name_at_position(expr.name)

    #`object.name` under the cursor: jump to the member, or list the candidates
    def _walk_member(self, target: ast.Expr, name: Token) -> None:
        if not self._is_at_position(name):
            self._walk_expr(target)
            return
        info = self._class_of(target)
        if info is None:
            return
        member = self._find_member(info, name.lexeme)
        if member is not None:
            self.definitions.append(member)
        self._complete(info, name)

    def _walk_super(self, expr: ast.Super) -> None:
        if not self._is_at_position(expr.method) or self.current_class is None:
            return
        info = self._find_class(self.current_class)
        if info is None or info.superclass is None:
            return
        superclass = self._find_class(info.superclass)
        if superclass is None:
            return
        method = self._find_method(superclass, expr.method.lexeme)
        if method is not None:
            self.definitions.append(method)
        self._complete(superclass, expr.method)

    def _name_at_position(self, name: Token) -> None:
        if not self._is_at_position(name):
            return
        token = self._find(name.lexeme)
        if token is not None:
            self.definitions.append(token)

    #the typed prefix is whatever of the name lies before the cursor
    def _complete(self, info: _ClassInfo, name: Token) -> None:
        prefix = name.lexeme
        if name.start.line == self.position.line:
            prefix = name.lexeme[: max(0, self.position.column - name.start.column)]

        methods = set()
        properties = set()
        for klass in self._class_chain(info):
            methods.update(method for method in klass.methods if method.startswith(prefix))
            properties.update(field_name for field_name in klass.fields if field_name.startswith(prefix))
        properties -= methods

        self.completions.extend(Completion(method, CompletionKind.METHOD) for method in sorted(methods))
        self.completions.extend(Completion(prop, CompletionKind.PROPERTY) for prop in sorted(properties))

    #only the shapes the walk can type statically: a typed variable, `Class()`, and `this`
    def _class_of(self, target: ast.Expr) -> Optional[_ClassInfo]:
        if isinstance(target, ast.Variable):
            class_name = self._find_type(target.name.lexeme)
            return self._find_class(class_name) if class_name is not None else None
        if isinstance(target, ast.Call) and isinstance(target.callee, ast.Variable):
            return self._find_class(target.callee.name.lexeme)
        if isinstance(target, ast.This) and self.current_class is not None:
            return self._find_class(self.current_class)
        return None

    def _class_chain(self, info: _ClassInfo) -> Iterator[_ClassInfo]:
        seen = set()
        klass: Optional[_ClassInfo] = info
        while klass is not None and klass.name.lexeme not in seen:
            seen.add(klass.name.lexeme)
            yield klass
            klass = self._find_class(klass.superclass) if klass.superclass is not None else None

    def _find_method(self, info: _ClassInfo, name: str) -> Optional[Token]:
        for klass in self._class_chain(info):
            if name in klass.methods:
                return klass.methods[name]
        return None

    #methods win over fields of the same name, as they do at runtime for unset fields
    def _find_member(self, info: _ClassInfo, name: str) -> Optional[Token]:
        method = self._find_method(info, name)
        if method is not None:
            return method
        for klass in self._class_chain(info):
            if name in klass.fields:
                return klass.fields[name]
        return None

    def _find(self, name: str) -> Optional[Token]:
        for scope in reversed(self.scopes):
            if name in scope.identifiers:
                return scope.identifiers[name]
            if name in scope.classes:
                return scope.classes[name].name
        return None

    def _find_class(self, name: str) -> Optional[_ClassInfo]:
        for scope in reversed(self.scopes):
            if name in scope.classes:
                return scope.classes[name]
        return None

    def _find_type(self, name: str) -> Optional[str]:
        for scope in reversed(self.scopes):
            if name in scope.types:
                return scope.types[name]
        return None

    def _is_at_position(self, token: Token) -> bool:
        return token.start <= self.position <= token.end


def _walk(position: SourceLocation, source: str) -> _PositionWalker:
    #problems in the file are the editor's concern; half-typed `obj.` still parses
    statements = build_ast(CollectingReporter(), source, allow_invalid_call=True)
    walker = _PositionWalker(position)
    walker.walk(statements)
    return walker


def provide_definition(position: SourceLocation, source: str) -> List[Token]:
    """Return the declaring token(s) of the name under `position`."""

    return _walk(position, source).definitions


def provide_completions(position: SourceLocation, source: str) -> List[Completion]:
    """Return the members that can complete the property name under `position`.

    Methods come first, then properties; each group is sorted by name.
    """

    return _walk(position, source).completions


__all__ = ["Completion", "CompletionKind", "provide_completions", "provide_definition"]
