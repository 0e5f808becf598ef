"""Tree-walking evaluator for resolved Lox programs."""
from __future__ import annotations

import itertools
import math
import sys
from typing import Any, Dict, List, Optional

from . import ast
from .environment import Environment
from .errors import LoxRuntimeError, ReturnUnwind, SourceSpan
from .natives import define_natives
from .printer import print_stmt
from .reporter import Reporter
from .token import Token, TokenType
from .values import (
    LoxCallable,
    LoxClass,
    LoxFunction,
    LoxInstance,
    is_equal,
    is_truthy,
    stringify,
)

#each Lox call costs about five Python frames, so this allows Lox recursion around 2000 deep
RECURSION_LIMIT = 10_000
STACK_OVERFLOW = "Stack overflow"


#executes statements against a chain of frames rooted at the globals
class Interpreter:
    def __init__(self, reporter: Reporter, trace: bool = False) -> None:
        self.reporter = reporter
        self.trace = trace
        self.globals = Environment()
        define_natives(self.globals)
        self.environment = self.globals
        #expression id -> hop count; grows for the whole session, ids never repeat so old entries never collide
        self.locals: Dict[int, int] = {}
        self._instance_ids = itertools.count(1)

    def resolve(self, depths: Dict[int, int]) -> None:
        self.locals.update(depths)

    #a failing statement is reported and skipped; the next one still runs
    def interpret(self, statements: List[ast.Stmt]) -> None:
        previous_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(previous_limit, RECURSION_LIMIT))
        try:
            for statement in statements:
                self._interpret_statement(statement)
        finally:
            sys.setrecursionlimit(previous_limit)

    def _interpret_statement(self, statement: ast.Stmt) -> None:
        if self.trace:
            self._log(print_stmt(statement).splitlines()[0])
        try:
            self.execute(statement)
        except LoxRuntimeError as error:
            self._report(error.span, error.message)
        except RecursionError:
            self.environment = self.globals
            self._report(statement.span, STACK_OVERFLOW)
        except ReturnUnwind:
            #only reachable when the resolver already reported a top-level return
            self.environment = self.globals

    def _report(self, span: SourceSpan, message: str) -> None:
        self.reporter.add_diagnostic(span.start, span.end, message)
        self.reporter.add_message(message)

    def next_instance_id(self) -> int:
        return next(self._instance_ids)

    # Statements ----------------------------------------------------------------

    def execute(self, stmt: ast.Stmt) -> None:
        if isinstance(stmt, ast.Expression):
            self.evaluate(stmt.expression)
        elif isinstance(stmt, ast.Print):
            value = self.evaluate(stmt.expression)
            self.reporter.add_message(f"[print] {stringify(value)}")
        elif isinstance(stmt, ast.Var):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)
        elif isinstance(stmt, ast.Block):
            self.execute_block(stmt.statements, Environment(self.environment))
        elif isinstance(stmt, ast.Function):
            function = LoxFunction(stmt.function, self.environment)
            self.environment.define(stmt.function.name.lexeme, function)
        elif isinstance(stmt, ast.Class):
            self._execute_class(stmt)
        elif isinstance(stmt, ast.If):
            if is_truthy(self.evaluate(stmt.condition)):
                self.execute(stmt.then_branch)
            elif stmt.else_branch is not None:
                self.execute(stmt.else_branch)
        elif isinstance(stmt, ast.Return):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            raise ReturnUnwind(value)
        elif isinstance(stmt, ast.While):
            while is_truthy(self.evaluate(stmt.condition)):
                self.execute(stmt.body)
        else:
            raise AssertionError(f"unexpected statement {stmt!r}")

    #runs statements in `environment`, restoring the previous frame however the block exits
    def execute_block(self, statements: List[ast.Stmt], environment: Environment) -> None:
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                self.execute(statement)
        finally:
            self.environment = previous

    #methods close over a `this` frame, wrapped in a `super` frame when there is a superclass
    def _execute_class(self, stmt: ast.Class) -> None:
        superclass: Optional[LoxClass] = None
        if stmt.superclass is not None:
            value = self.evaluate(stmt.superclass)
            if not isinstance(value, LoxClass):
                raise LoxRuntimeError("Superclass must be a class", stmt.superclass.span)
            superclass = value

        self.environment.define(stmt.name.lexeme, None)

        enclosing = self.environment
        if superclass is not None:
            self.environment = Environment(self.environment)
            self.environment.define("super", superclass)

        methods: Dict[str, LoxFunction] = {}
        for method in stmt.methods:
            declaration = method.function
            is_initializer = declaration.name.lexeme == "init"
            methods[declaration.name.lexeme] = LoxFunction(declaration, self.environment, is_initializer)

        self.environment = enclosing
        klass = LoxClass(stmt.name.lexeme, superclass, methods)
        self.environment.assign(stmt.name, klass)

    # Expressions ---------------------------------------------------------------

    def evaluate(self, expr: ast.Expr) -> Any:
        if isinstance(expr, ast.Literal):
            return expr.value.literal
        if isinstance(expr, ast.Grouping):
            return self.evaluate(expr.expression)
        if isinstance(expr, ast.Unary):
            return self._unary(expr)
        if isinstance(expr, ast.Binary):
            return self._binary(expr)
        if isinstance(expr, ast.Logical):
            left = self.evaluate(expr.left)
            if expr.operator.type is TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)
        if isinstance(expr, ast.Variable):
            return self._look_up_variable(expr.name, expr)
        if isinstance(expr, ast.Assign):
            value = self.evaluate(expr.value)
            distance = self.locals.get(expr.id)
            if distance is not None:
                self.environment.assign_at(distance, expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value
        if isinstance(expr, ast.Call):
            return self._call(expr)
        if isinstance(expr, ast.Get):
            target = self.evaluate(expr.object)
            if not isinstance(target, LoxInstance):
                raise LoxRuntimeError("Only instances have fields", expr.span)
            return target.get(expr.name)
        if isinstance(expr, ast.Set):
            target = self.evaluate(expr.object)
            if not isinstance(target, LoxInstance):
                raise LoxRuntimeError("Only instances have fields", expr.span)
            value = self.evaluate(expr.value)
            target.set(expr.name, value)
            return value
        if isinstance(expr, ast.This):
            return self._this(expr)
        if isinstance(expr, ast.Super):
            return self._super(expr)
        raise AssertionError(f"unexpected expression {expr!r}")

    def _unary(self, expr: ast.Unary) -> Any:
        right = self.evaluate(expr.right)
        if expr.operator.type is TokenType.MINUS:
            _check_number_operands(expr.span, right)
            return -right
        if expr.operator.type is TokenType.BANG:
            return not is_truthy(right)
        raise AssertionError(f"unexpected unary operator {expr.operator!r}")

    def _binary(self, expr: ast.Binary) -> Any:
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator.type

        match operator:
            case TokenType.PLUS:
                if isinstance(left, float) and isinstance(right, float):
                    return left + right
                if isinstance(left, str) and isinstance(right, str):
                    return left + right
                raise LoxRuntimeError("Operands must be two numbers or two strings", expr.span)
            case TokenType.EQUAL_EQUAL:
                return is_equal(left, right)
            case TokenType.BANG_EQUAL:
                return not is_equal(left, right)

        _check_number_operands(expr.span, left, right)
        match operator:
            case TokenType.MINUS:
                return left - right
            case TokenType.STAR:
                return left * right
            case TokenType.SLASH:
                return _divide(left, right)
            case TokenType.GREATER:
                return left > right
            case TokenType.GREATER_EQUAL:
                return left >= right
            case TokenType.LESS:
                return left < right
            case TokenType.LESS_EQUAL:
                return left <= right
        raise AssertionError(f"unexpected binary operator {expr.operator!r}")

    #arity is checked before anything is created, so a bad class call leaves no instance behind
    def _call(self, expr: ast.Call) -> Any:
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError("Can only call functions and classes", expr.span)
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(f"Expected {callee.arity()} arguments but got {len(arguments)}", expr.span)
        return callee.call(self, arguments)

    def _this(self, expr: ast.This) -> Any:
        distance = self.locals.get(expr.id)
        if distance is None:
            raise LoxRuntimeError("Cannot use 'this' outside of a class", expr.keyword.span)
        return self.environment.get_at(distance, "this")

    #`this` always lives one frame nearer than the `super` binding
    def _super(self, expr: ast.Super) -> Any:
        distance = self.locals.get(expr.id)
        if distance is None:
            raise LoxRuntimeError("Cannot use 'super' outside of a class", expr.keyword.span)
        superclass = self.environment.get_at(distance, "super")
        instance = self.environment.get_at(distance - 1, "this")
        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(f"Undefined property '{expr.method.lexeme}'", expr.method.span)
        return method.bind(instance)

    def _look_up_variable(self, name: Token, expr: ast.Expr) -> Any:
        distance = self.locals.get(expr.id)
        if distance is not None:
            #a local read before its declaration ran, as in `{ var a = a; }`
            try:
                return self.environment.get_at(distance, name.lexeme)
            except KeyError:
                raise LoxRuntimeError(f"Undefined variable '{name.lexeme}'", name.span) from None
        return self.globals.get(name)

    def _log(self, message: str) -> None:
        print(f"[trace] {message}")


def _check_number_operands(span: SourceSpan, *operands: Any) -> None:
    for operand in operands:
        if not isinstance(operand, float):
            raise LoxRuntimeError("Operand should be a number", span)


#Python raises on division by zero; Lox numbers follow IEEE 754 instead
def _divide(left: float, right: float) -> float:
    if right != 0.0:
        return left / right
    if left == 0.0 or math.isnan(left):
        return math.nan
    return math.copysign(math.inf, left) * math.copysign(1.0, right)


__all__ = ["Interpreter", "RECURSION_LIMIT", "STACK_OVERFLOW"]
