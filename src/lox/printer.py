"""Renders the AST as s-expressions for debugging and as Lox source."""
from __future__ import annotations

from typing import List

from . import ast
from .token import TokenType, format_number

_INDENT = "    "


def print_stmt(stmt: ast.Stmt, indent: int = 0) -> str:
    """Render a statement as an indented s-expression ending in a newline."""

    pad = _INDENT * indent
    if isinstance(stmt, ast.Block):
        return f"{pad}(block\n" + _print_body(stmt.statements, indent) + f"{pad})\n"
    if isinstance(stmt, ast.Class):
        superclass = f" < {print_expr(stmt.superclass)}" if stmt.superclass is not None else ""
        methods = _print_body(stmt.methods, indent)
        return f"{pad}(class {stmt.name.lexeme}{superclass}\n" + methods + f"{pad})\n"
    if isinstance(stmt, ast.Expression):
        return f"{pad}{_parenthesize(';', stmt.expression)}\n"
    if isinstance(stmt, ast.Function):
        function = stmt.function
        params = " ".join(param.lexeme for param in function.params)
        body = _print_body(function.body, indent)
        return f"{pad}(fun {function.name.lexeme}({params})\n" + body + f"{pad})\n"
    if isinstance(stmt, ast.If):
        keyword = "if-else" if stmt.else_branch is not None else "if"
        result = f"{pad}({keyword} {print_expr(stmt.condition)}\n"
        result += print_stmt(stmt.then_branch, indent + 1)
        if stmt.else_branch is not None:
            result += print_stmt(stmt.else_branch, indent + 1)
        return result + f"{pad})\n"
    if isinstance(stmt, ast.Print):
        return f"{pad}{_parenthesize('print', stmt.expression)}\n"
    if isinstance(stmt, ast.Return):
        if stmt.value is None:
            return f"{pad}(return)\n"
        return f"{pad}{_parenthesize('return', stmt.value)}\n"
    if isinstance(stmt, ast.Var):
        initializer = f" = {print_expr(stmt.initializer)}" if stmt.initializer is not None else ""
        return f"{pad}(var {stmt.name.lexeme}{initializer})\n"
    if isinstance(stmt, ast.While):
        return f"{pad}(while {print_expr(stmt.condition)}\n" + print_stmt(stmt.body, indent + 1) + f"{pad})\n"
    raise AssertionError(f"unexpected statement {stmt!r}")


def print_expr(expr: ast.Expr) -> str:
    """Render an expression as a single-line s-expression."""

    if isinstance(expr, ast.Assign):
        return f"(= {expr.name.lexeme} {print_expr(expr.value)})"
    if isinstance(expr, (ast.Binary, ast.Logical)):
        return _parenthesize(expr.operator.lexeme, expr.left, expr.right)
    if isinstance(expr, ast.Call):
        arguments = "".join(f" {print_expr(argument)}" for argument in expr.arguments)
        return f"(call {print_expr(expr.callee)}{arguments})"
    if isinstance(expr, ast.Get):
        return f"({print_expr(expr.object)}.{expr.name.lexeme})"
    if isinstance(expr, ast.Grouping):
        return _parenthesize("group", expr.expression)
    if isinstance(expr, ast.Literal):
        return _print_literal(expr)
    if isinstance(expr, ast.Set):
        return f"(= {print_expr(expr.object)} {expr.name.lexeme} {print_expr(expr.value)})"
    if isinstance(expr, ast.Super):
        return f"(super {expr.method.lexeme})"
    if isinstance(expr, ast.This):
        return "this"
    if isinstance(expr, ast.Unary):
        return _parenthesize(expr.operator.lexeme, expr.right)
    if isinstance(expr, ast.Variable):
        return expr.name.lexeme
    raise AssertionError(f"unexpected expression {expr!r}")


#emits Lox source; groupings in the tree carry every parenthesis the reparse needs
def unparse_expr(expr: ast.Expr) -> str:
    if isinstance(expr, ast.Assign):
        return f"{expr.name.lexeme} = {unparse_expr(expr.value)}"
    if isinstance(expr, (ast.Binary, ast.Logical)):
        return f"{unparse_expr(expr.left)} {expr.operator.lexeme} {unparse_expr(expr.right)}"
    if isinstance(expr, ast.Call):
        arguments = ", ".join(unparse_expr(argument) for argument in expr.arguments)
        return f"{unparse_expr(expr.callee)}({arguments})"
    if isinstance(expr, ast.Get):
        return f"{unparse_expr(expr.object)}.{expr.name.lexeme}"
    if isinstance(expr, ast.Grouping):
        return f"({unparse_expr(expr.expression)})"
    if isinstance(expr, ast.Literal):
        return expr.value.lexeme
    if isinstance(expr, ast.Set):
        return f"{unparse_expr(expr.object)}.{expr.name.lexeme} = {unparse_expr(expr.value)}"
    if isinstance(expr, ast.Super):
        return f"super.{expr.method.lexeme}"
    if isinstance(expr, ast.This):
        return "this"
    if isinstance(expr, ast.Unary):
        return f"{expr.operator.lexeme}{unparse_expr(expr.right)}"
    if isinstance(expr, ast.Variable):
        return expr.name.lexeme
    raise AssertionError(f"unexpected expression {expr!r}")


def _print_literal(expr: ast.Literal) -> str:
    token = expr.value
    if token.type is TokenType.NUMBER:
        assert isinstance(token.literal, float)
        return format_number(token.literal)
    if token.type is TokenType.STRING:
        return f'"{token.literal}"'
    return token.lexeme


def _print_body(statements: List[ast.Stmt], indent: int) -> str:
    return "".join(print_stmt(statement, indent + 1) for statement in statements)


def _parenthesize(name: str, *exprs: ast.Expr) -> str:
    parts = "".join(f" {print_expr(expr)}" for expr in exprs)
    return f"({name}{parts})"


__all__ = ["print_expr", "print_stmt", "unparse_expr"]
