"""Abstract syntax tree definitions for Lox."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import SourceSpan
from .token import Token


#notes that every AST node tracks a span for diagnostics
@dataclass(slots=True)
class Node:
    span: SourceSpan


# Expressions ------------------------------------------------------------------


#every expression carries the id the resolver keys its hop counts on;
#equality ignores it so two parses of the same text compare equal
@dataclass(slots=True)
class Expr(Node):
    id: int = field(kw_only=True, compare=False)


#`name = value`; the target is resolved like a variable read
@dataclass(slots=True)
class Assign(Expr):
    name: Token
    value: Expr


#arithmetic, comparison and equality operators
@dataclass(slots=True)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


#the closing paren is kept so call errors can point at the call site
@dataclass(slots=True)
class Call(Expr):
    callee: Expr
    paren: Token
    arguments: List[Expr] = field(default_factory=list)


#property access `object.name`
@dataclass(slots=True)
class Get(Expr):
    object: Expr
    name: Token


@dataclass(slots=True)
class Grouping(Expr):
    expression: Expr


#the token holds the decoded literal; its type tells nil apart from a missing value
@dataclass(slots=True)
class Literal(Expr):
    value: Token


#`and`/`or` short-circuit so they are kept apart from `Binary`
@dataclass(slots=True)
class Logical(Expr):
    left: Expr
    operator: Token
    right: Expr


#property assignment `object.name = value`
@dataclass(slots=True)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass(slots=True)
class Super(Expr):
    keyword: Token
    method: Token


@dataclass(slots=True)
class This(Expr):
    keyword: Token


@dataclass(slots=True)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(slots=True)
class Variable(Expr):
    name: Token


# Statements -------------------------------------------------------------------


#common base for all statements allowing polymorphic handling
@dataclass(slots=True)
class Stmt(Node):
    pass


#declaration shared read-only by every closure created from it
@dataclass(slots=True)
class FunctionDecl(Node):
    name: Token
    params: List[Token] = field(default_factory=list)
    body: List[Stmt] = field(default_factory=list)


#expression statements preserve results solely for side effects
@dataclass(slots=True)
class Expression(Stmt):
    expression: Expr


#represents `print` commands in the language
@dataclass(slots=True)
class Print(Stmt):
    expression: Expr


#`var name;` leaves the variable nil
@dataclass(slots=True)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr] = None


#container for zero or more statements with its own scope
@dataclass(slots=True)
class Block(Stmt):
    statements: List[Stmt] = field(default_factory=list)


@dataclass(slots=True)
class Function(Stmt):
    function: FunctionDecl


#methods are plain function declarations; the superclass is always a variable
@dataclass(slots=True)
class Class(Stmt):
    name: Token
    superclass: Optional[Variable] = None
    methods: List[Function] = field(default_factory=list)


#classic `if` syntax with optional `else` branch
@dataclass(slots=True)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt] = None


#the keyword is kept so misplaced returns can be reported
@dataclass(slots=True)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr] = None


#`while` loops hold the condition and body statement; `for` desugars into this
@dataclass(slots=True)
class While(Stmt):
    condition: Expr
    body: Stmt
