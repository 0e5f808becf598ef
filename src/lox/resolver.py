"""Static scope resolution for Lox ASTs."""
from __future__ import annotations

from enum import Enum, auto
from typing import Dict, List, Optional

from . import ast
from .reporter import Reporter
from .token import Token


#tracks what kind of function body the walk is inside, for `return` checks
class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALISER = auto()
    METHOD = auto()


#tracks the enclosing class, for `super` checks
class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


#computes, per expression id, how many frames to climb to reach the declaration
class Resolver:
    def __init__(self, reporter: Reporter) -> None:
        self._reporter = reporter
        #innermost last; the global scope is never pushed, so "not found" means global
        self._scopes: List[Dict[str, bool]] = []
        self._depths: Dict[int, int] = {}
        self._current_function = FunctionType.NONE
        self._current_class = ClassType.NONE

    def resolve(self, statements: List[ast.Stmt]) -> Dict[int, int]:
        self._resolve_stmts(statements)
        return self._depths

    def _resolve_stmts(self, statements: List[ast.Stmt]) -> None:
        for stmt in statements:
            self._resolve_stmt(stmt)

    #dispatches to the appropriate resolver based on statement type
    def _resolve_stmt(self, stmt: ast.Stmt) -> None:
        if isinstance(stmt, ast.Block):
            self._push_scope()
            self._resolve_stmts(stmt.statements)
            self._pop_scope()
        elif isinstance(stmt, ast.Class):
            self._resolve_class(stmt)
        elif isinstance(stmt, ast.Expression):
            self._resolve_expr(stmt.expression)
        elif isinstance(stmt, ast.Function):
            #defined before the body so the function can recurse
            self._declare(stmt.function.name)
            self._define(stmt.function.name.lexeme)
            self._resolve_function(stmt.function, FunctionType.FUNCTION)
        elif isinstance(stmt, ast.If):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self._resolve_stmt(stmt.else_branch)
        elif isinstance(stmt, ast.Print):
            self._resolve_expr(stmt.expression)
        elif isinstance(stmt, ast.Return):
            self._resolve_return(stmt)
        elif isinstance(stmt, ast.Var):
            self._declare(stmt.name)
            if stmt.initializer is not None:
                self._resolve_expr(stmt.initializer)
            self._define(stmt.name.lexeme)
        elif isinstance(stmt, ast.While):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.body)
        else:
            raise AssertionError(f"unexpected statement {stmt!r}")

    #the interpreter builds the same frames: `super` one hop above `this`, `this` one above the method
    def _resolve_class(self, stmt: ast.Class) -> None:
        enclosing_class = self._current_class
        self._current_class = ClassType.CLASS

        self._declare(stmt.name)
        self._define(stmt.name.lexeme)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self._error(stmt.superclass.name, "A class cannot inherit from itself")
            self._current_class = ClassType.SUBCLASS
            self._resolve_expr(stmt.superclass)
            self._push_scope()
            self._scopes[-1]["super"] = True

        self._push_scope()
        self._scopes[-1]["this"] = True
        for method in stmt.methods:
            declaration = method.function
            if declaration.name.lexeme == "init":
                kind = FunctionType.INITIALISER
            else:
                kind = FunctionType.METHOD
            self._resolve_function(declaration, kind)
        self._pop_scope()

        if stmt.superclass is not None:
            self._pop_scope()

        self._current_class = enclosing_class

    def _resolve_return(self, stmt: ast.Return) -> None:
        if self._current_function is FunctionType.NONE:
            self._error(stmt.keyword, "Cannot return from top-level code")
        if stmt.value is not None:
            if self._current_function is FunctionType.INITIALISER:
                self._error(stmt.keyword, "Cannot return a value from an initialiser")
            self._resolve_expr(stmt.value)

    #parameters live in a fresh scope that also holds the body's top-level locals
    def _resolve_function(self, function: ast.FunctionDecl, kind: FunctionType) -> None:
        enclosing_function = self._current_function
        self._current_function = kind

        self._push_scope()
        for param in function.params:
            self._declare(param)
            self._define(param.lexeme)
        self._resolve_stmts(function.body)
        self._pop_scope()

        self._current_function = enclosing_function

    def _resolve_expr(self, expr: ast.Expr) -> None:
        if isinstance(expr, ast.Assign):
            self._resolve_expr(expr.value)
            self._resolve_local(expr, expr.name)
        elif isinstance(expr, (ast.Binary, ast.Logical)):
            self._resolve_expr(expr.left)
            self._resolve_expr(expr.right)
        elif isinstance(expr, ast.Call):
            self._resolve_expr(expr.callee)
            for argument in expr.arguments:
                self._resolve_expr(argument)
        elif isinstance(expr, ast.Get):
            self._resolve_expr(expr.object)
        elif isinstance(expr, ast.Grouping):
            self._resolve_expr(expr.expression)
        elif isinstance(expr, ast.Literal):
            return
        elif isinstance(expr, ast.Set):
            self._resolve_expr(expr.value)
            self._resolve_expr(expr.object)
        elif isinstance(expr, ast.Super):
            if self._current_class is ClassType.NONE:
                self._error(expr.keyword, "Cannot use 'super' outside of a class")
            elif self._current_class is not ClassType.SUBCLASS:
                self._error(expr.keyword, "Cannot use 'super' in a class with no superclass")
            self._resolve_local(expr, expr.keyword)
        elif isinstance(expr, ast.This):
            #outside a class nothing binds `this`; the interpreter reports it when evaluated
            self._resolve_local(expr, expr.keyword)
        elif isinstance(expr, ast.Unary):
            self._resolve_expr(expr.right)
        elif isinstance(expr, ast.Variable):
            if self._scopes and self._scopes[-1].get(expr.name.lexeme) is False:
                self._error(expr.name, "Cannot read local variable in its own initialiser")
            self._resolve_local(expr, expr.name)
        else:
            raise AssertionError(f"unexpected expression {expr!r}")

    #manages the scope stack whenever we enter or leave a block
    def _push_scope(self) -> None:
        self._scopes.append({})

    def _pop_scope(self) -> None:
        self._scopes.pop()

    #marks a name as declared but not yet usable
    def _declare(self, name: Token) -> None:
        if not self._scopes:
            return
        scope = self._scopes[-1]
        if name.lexeme in scope:
            self._error(name, f"Already a variable with the name '{name.lexeme}' is in scope")
        scope[name.lexeme] = False

    def _define(self, name: str) -> None:
        if not self._scopes:
            return
        self._scopes[-1][name] = True

    #nested lookup walking from innermost scope outwards; globals get no entry
    def _resolve_local(self, expr: ast.Expr, name: Token) -> None:
        depth = self.find_depth(name.lexeme)
        if depth is not None:
            self._depths[expr.id] = depth

    def find_depth(self, name: str) -> Optional[int]:
        for depth, scope in enumerate(reversed(self._scopes)):
            if name in scope:
                return depth
        return None

    def _error(self, token: Token, message: str) -> None:
        self._reporter.add_diagnostic(token.start, token.end, message)


def resolve(reporter: Reporter, statements: List[ast.Stmt]) -> Dict[int, int]:
    return Resolver(reporter).resolve(statements)


__all__ = ["ClassType", "FunctionType", "Resolver", "resolve"]
