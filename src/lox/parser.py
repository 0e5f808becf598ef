"""Parser that turns Lox tokens into an AST."""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from . import ast
from .errors import START_OF_FILE, ParseError, SourceLocation, SourceSpan
from .reporter import Reporter
from .token import Token, TokenType

MAX_ARGUMENTS = 255

#tokens that begin a statement; recovery stops in front of these
_STATEMENT_STARTS = frozenset(
    {
        TokenType.CLASS,
        TokenType.FUN,
        TokenType.VAR,
        TokenType.FOR,
        TokenType.IF,
        TokenType.WHILE,
        TokenType.PRINT,
        TokenType.RETURN,
    }
)


#navigates the token stream via recursive descent
@dataclass(slots=True)
class Parser:
    tokens: List[Token]
    reporter: Reporter
    ids: Optional[Iterator[int]] = None
    #keeps `obj.` with no name and an expression statement with no `;`, for editors
    allow_invalid_call: bool = False
    _current: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self._current = 0
        if self.ids is None:
            self.ids = itertools.count(1)

    #failed declarations are reported, skipped and left out of the result
    def parse(self) -> List[ast.Stmt]:
        statements: List[ast.Stmt] = []
        while not self._is_at_end():
            try:
                statements.append(self._declaration())
            except ParseError:
                self._synchronize()
        return statements

    #minimal grammar entry point: a single expression and nothing after it
    def parse_expression(self) -> Optional[ast.Expr]:
        try:
            expr = self._expression()
            if not self._is_at_end():
                self._advance()
                raise self._error("Expect end of expression")
            return expr
        except ParseError:
            return None

    # Declarations ---------------------------------------------------------------

    def _declaration(self) -> ast.Stmt:
        if self._match(TokenType.CLASS):
            return self._class_declaration()
        if self._match(TokenType.FUN):
            keyword = self._previous()
            function = self._function("function")
            return ast.Function(span=keyword.span.merge(function.span), function=function)
        if self._match(TokenType.VAR):
            return self._var_declaration()
        return self._statement()

    #methods are function declarations without the `fun` keyword
    def _class_declaration(self) -> ast.Class:
        keyword = self._previous()
        name = self._consume(TokenType.IDENTIFIER, "Expect class name")

        superclass = None
        if self._match(TokenType.LESS):
            superclass_name = self._consume(TokenType.IDENTIFIER, "Expect superclass name")
            superclass = ast.Variable(span=superclass_name.span, name=superclass_name, id=self._next_id())

        self._consume(TokenType.LEFT_BRACE, "Expect '{' before class body")
        methods: List[ast.Function] = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            method = self._function("method")
            methods.append(ast.Function(span=method.span, function=method))
        close_brace = self._consume(TokenType.RIGHT_BRACE, "Expect '}' after class body")
        return ast.Class(
            span=keyword.span.merge(close_brace.span),
            name=name,
            superclass=superclass,
            methods=methods,
        )

    #parses the signature and delegates to block parsing for the body
    def _function(self, kind: str) -> ast.FunctionDecl:
        name = self._consume(TokenType.IDENTIFIER, f"Expect {kind} name")
        self._consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name")
        params: List[Token] = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self._report(f"Cannot have more than {MAX_ARGUMENTS} parameters")
                params.append(self._consume(TokenType.IDENTIFIER, "Expect parameter name"))
                if not self._match(TokenType.COMMA):
                    break
        self._consume(TokenType.RIGHT_PAREN, f"Expect ')' after {kind} parameters")
        self._consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body")
        body = self._block_from_open_brace(self._previous())
        return ast.FunctionDecl(span=name.span.merge(body.span), name=name, params=params, body=body.statements)

    def _var_declaration(self) -> ast.Var:
        keyword = self._previous()
        name = self._consume(TokenType.IDENTIFIER, "Expect a variable name")
        initializer = None
        if self._match(TokenType.EQUAL):
            initializer = self._expression()
        semicolon = self._consume(TokenType.SEMICOLON, "Expect ';' after variable declaration")
        return ast.Var(span=keyword.span.merge(semicolon.span), name=name, initializer=initializer)

    # Statements ----------------------------------------------------------------

    #directs statements based on leading token kind
    def _statement(self) -> ast.Stmt:
        if self._match(TokenType.FOR):
            return self._for_stmt()
        if self._match(TokenType.IF):
            return self._if_stmt()
        if self._match(TokenType.PRINT):
            return self._print_stmt()
        if self._match(TokenType.RETURN):
            return self._return_stmt()
        if self._match(TokenType.WHILE):
            return self._while_stmt()
        if self._match(TokenType.LEFT_BRACE):
            return self._block_from_open_brace(open_brace=self._previous())
        return self._expr_stmt()

    #allows nested blocks by reusing the token captured earlier
    def _block_from_open_brace(self, open_brace: Token) -> ast.Block:
        statements: List[ast.Stmt] = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            statements.append(self._declaration())
        close_brace = self._consume(TokenType.RIGHT_BRACE, "Expect '}' after block")
        return ast.Block(span=open_brace.span.merge(close_brace.span), statements=statements)

    def _print_stmt(self) -> ast.Print:
        keyword = self._previous()
        value = self._expression()
        semicolon = self._consume(TokenType.SEMICOLON, "Expect ';' after value")
        return ast.Print(span=keyword.span.merge(semicolon.span), expression=value)

    #if/else nests arbitrary statements for branches
    def _if_stmt(self) -> ast.If:
        keyword = self._previous()
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after 'if' condition")
        then_branch = self._statement()
        else_branch = None
        span = keyword.span.merge(then_branch.span)
        if self._match(TokenType.ELSE):
            else_branch = self._statement()
            span = span.merge(else_branch.span)
        return ast.If(span=span, condition=condition, then_branch=then_branch, else_branch=else_branch)

    def _while_stmt(self) -> ast.While:
        keyword = self._previous()
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after 'while' condition")
        body = self._statement()
        return ast.While(span=keyword.span.merge(body.span), condition=condition, body=body)

    #`for` has no node of its own: it becomes an optional initializer block around a while
    def _for_stmt(self) -> ast.Stmt:
        keyword = self._previous()
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'")

        initializer: Optional[ast.Stmt]
        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._match(TokenType.VAR):
            initializer = self._var_declaration()
        else:
            initializer = self._expr_stmt()

        if self._check(TokenType.SEMICOLON):
            location = self._nearby_location()
            true_token = Token(TokenType.TRUE, "true", location, location, True)
            condition: ast.Expr = ast.Literal(span=true_token.span, value=true_token, id=self._next_id())
        else:
            condition = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after 'for' loop condition")

        increment = None
        if not self._check(TokenType.RIGHT_PAREN):
            increment = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after 'for' clauses")

        body = self._statement()
        span = keyword.span.merge(body.span)
        if increment is not None:
            step = ast.Expression(span=increment.span, expression=increment)
            body = ast.Block(span=span, statements=[body, step])
        body = ast.While(span=span, condition=condition, body=body)
        if initializer is not None:
            body = ast.Block(span=span, statements=[initializer, body])
        return body

    #the value is optional; a bare `return;` yields nil
    def _return_stmt(self) -> ast.Return:
        keyword = self._previous()
        value = None
        if not self._check(TokenType.SEMICOLON):
            value = self._expression()
        semicolon = self._consume(TokenType.SEMICOLON, "Expect ';' after return value")
        return ast.Return(span=keyword.span.merge(semicolon.span), keyword=keyword, value=value)

    #plain expressions become expression statements
    def _expr_stmt(self) -> ast.Expression:
        expr = self._expression()
        if self.allow_invalid_call and not self._check(TokenType.SEMICOLON):
            self._report("Expect ';' after expression")
            return ast.Expression(span=expr.span, expression=expr)
        semicolon = self._consume(TokenType.SEMICOLON, "Expect ';' after expression")
        return ast.Expression(span=expr.span.merge(semicolon.span), expression=expr)

    # Expressions ---------------------------------------------------------------

    def _expression(self) -> ast.Expr:
        return self._assignment()

    #assignment is right-associative and validates the left side
    def _assignment(self) -> ast.Expr:
        expr = self._or()
        if self._match(TokenType.EQUAL):
            value = self._assignment()
            span = expr.span.merge(value.span)
            if isinstance(expr, ast.Variable):
                return ast.Assign(span=span, name=expr.name, value=value, id=self._next_id())
            if isinstance(expr, ast.Get):
                return ast.Set(span=span, object=expr.object, name=expr.name, value=value, id=self._next_id())
            self._report("Invalid assignment target")
        return expr

    def _or(self) -> ast.Expr:
        expr = self._and()
        while self._match(TokenType.OR):
            operator = self._previous()
            right = self._and()
            expr = ast.Logical(span=expr.span.merge(right.span), left=expr, operator=operator, right=right, id=self._next_id())
        return expr

    def _and(self) -> ast.Expr:
        expr = self._equality()
        while self._match(TokenType.AND):
            operator = self._previous()
            right = self._equality()
            expr = ast.Logical(span=expr.span.merge(right.span), left=expr, operator=operator, right=right, id=self._next_id())
        return expr

    def _equality(self) -> ast.Expr:
        return self._binary_level(self._comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def _comparison(self) -> ast.Expr:
        return self._binary_level(
            self._term,
            TokenType.GREATER,
            TokenType.GREATER_EQUAL,
            TokenType.LESS,
            TokenType.LESS_EQUAL,
        )

    def _term(self) -> ast.Expr:
        return self._binary_level(self._factor, TokenType.MINUS, TokenType.PLUS)

    def _factor(self) -> ast.Expr:
        return self._binary_level(self._unary, TokenType.SLASH, TokenType.STAR)

    #left-associative loop shared by every binary precedence level
    def _binary_level(self, operand, *operators: TokenType) -> ast.Expr:
        expr = operand()
        while self._match(*operators):
            operator = self._previous()
            right = operand()
            expr = ast.Binary(span=expr.span.merge(right.span), left=expr, operator=operator, right=right, id=self._next_id())
        return expr

    def _unary(self) -> ast.Expr:
        if self._match(TokenType.BANG, TokenType.MINUS):
            operator = self._previous()
            right = self._unary()
            return ast.Unary(span=operator.span.merge(right.span), operator=operator, right=right, id=self._next_id())
        return self._call()

    #calls and property accesses chain left to right
    def _call(self) -> ast.Expr:
        expr = self._primary()
        while True:
            if self._match(TokenType.LEFT_PAREN):
                expr = self._finish_call(expr)
            elif self._match(TokenType.DOT):
                name = self._member_name(self._previous(), "Expect property name after '.'")
                expr = ast.Get(span=expr.span.merge(name.span), object=expr, name=name, id=self._next_id())
            else:
                break
        return expr

    def _finish_call(self, callee: ast.Expr) -> ast.Expr:
        arguments: List[ast.Expr] = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self._report(f"Cannot have more than {MAX_ARGUMENTS} arguments")
                arguments.append(self._expression())
                if not self._match(TokenType.COMMA):
                    break
        paren = self._consume(TokenType.RIGHT_PAREN, "Expect ')' after function arguments")
        return ast.Call(span=callee.span.merge(paren.span), callee=callee, paren=paren, arguments=arguments, id=self._next_id())

    #primary expressions include literals, identifiers, `this`, `super` and groupings
    def _primary(self) -> ast.Expr:
        if self._match(TokenType.FALSE, TokenType.TRUE, TokenType.NIL, TokenType.NUMBER, TokenType.STRING):
            token = self._previous()
            return ast.Literal(span=token.span, value=token, id=self._next_id())
        if self._match(TokenType.SUPER):
            keyword = self._previous()
            dot = self._consume(TokenType.DOT, "Expect '.' after 'super'")
            method = self._member_name(dot, "Expect superclass method name")
            return ast.Super(span=keyword.span.merge(method.span), keyword=keyword, method=method, id=self._next_id())
        if self._match(TokenType.THIS):
            token = self._previous()
            return ast.This(span=token.span, keyword=token, id=self._next_id())
        if self._match(TokenType.IDENTIFIER):
            token = self._previous()
            return ast.Variable(span=token.span, name=token, id=self._next_id())
        if self._match(TokenType.LEFT_PAREN):
            open_paren = self._previous()
            expr = self._expression()
            close_paren = self._consume(TokenType.RIGHT_PAREN, "Expect ')' after expression")
            return ast.Grouping(span=open_paren.span.merge(close_paren.span), expression=expr, id=self._next_id())
        raise self._error("Expect expression")

    #the name after a `.`; in tolerant mode a missing one becomes an empty name right after the dot
    def _member_name(self, dot: Token, message: str) -> Token:
        if self._check(TokenType.IDENTIFIER) or not self.allow_invalid_call:
            return self._consume(TokenType.IDENTIFIER, message)
        self._report(message)
        return Token(TokenType.IDENTIFIER, "", dot.end, dot.end)

    # Utilities ----------------------------------------------------------------

    def _next_id(self) -> int:
        assert self.ids is not None
        return next(self.ids)

    #helper for multi-token lookahead checks
    def _match(self, *types: TokenType) -> bool:
        for token_type in types:
            if self._check(token_type):
                self._advance()
                return True
        return False

    #convenience to assert the upcoming token type
    def _consume(self, token_type: TokenType, message: str) -> Token:
        if self._check(token_type):
            return self._advance()
        raise self._error(message)

    #safely checks the current token without consuming it
    def _check(self, token_type: TokenType) -> bool:
        if self._is_at_end():
            return False
        return self._peek().type is token_type

    #moves the cursor forward returning the previous token
    def _advance(self) -> Token:
        if not self._is_at_end():
            self._current += 1
        return self._previous()

    #EOF tokens guard termination
    def _is_at_end(self) -> bool:
        return self._peek().type is TokenType.EOF

    def _peek(self) -> Token:
        return self.tokens[self._current]

    def _previous(self) -> Token:
        return self.tokens[self._current - 1]

    #last consumed token, then the pending one, then the top of the file
    def _nearby_location(self) -> SourceLocation:
        if self._current > 0:
            return self._previous().start
        if self.tokens:
            return self._peek().start
        return START_OF_FILE

    #reports without aborting the production
    def _report(self, message: str) -> SourceLocation:
        location = self._nearby_location()
        self.reporter.add_diagnostic(location, location, message)
        return location

    def _error(self, message: str) -> ParseError:
        location = self._report(message)
        return ParseError(message, SourceSpan(start=location, end=location))

    #skips to the next statement boundary after a failed declaration
    def _synchronize(self) -> None:
        self._advance()
        while not self._is_at_end():
            if self._previous().type is TokenType.SEMICOLON:
                return
            if self._peek().type in _STATEMENT_STARTS:
                return
            self._advance()


def parse(reporter: Reporter, tokens: List[Token], ids: Optional[Iterator[int]] = None) -> List[ast.Stmt]:
    return Parser(tokens, reporter, ids).parse()


def parse_expression(reporter: Reporter, tokens: List[Token], ids: Optional[Iterator[int]] = None) -> Optional[ast.Expr]:
    return Parser(tokens, reporter, ids).parse_expression()


#diagnostics are still reported; the half-typed member access stays in the tree
def parse_allow_invalid_call(reporter: Reporter, tokens: List[Token], ids: Optional[Iterator[int]] = None) -> List[ast.Stmt]:
    return Parser(tokens, reporter, ids, allow_invalid_call=True).parse()


__all__ = ["Parser", "parse", "parse_allow_invalid_call", "parse_expression"]
