import logging
from typing import List, Optional, Set
from .tokens import Token, TokenType
from .lexer import Lexer, PeekingLexer
from . import ast_nodes as ast

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

# Tokens that end a statement, used to resynchronise after a syntax error.
TERMINATORS = (TokenType.SEMICOLON, TokenType.RBRACE, TokenType.EOF)


class ParseError(Exception):
    def __init__(self, message, line):
        super().__init__(f"syntax error on line {line}: {message}")
        self.message = message
        self.line = line


class ParseErrorGroup(ParseError):
    """Raised when a source contains more than one malformed statement."""

    def __init__(self, errors: List[ParseError]):
        super().__init__(f"{len(errors)} errors", errors[0].line)
        self.errors = errors

    def __str__(self):
        return "\n".join(str(e) for e in self.errors)


class Scopes:
    """Stack of declared names, one frame per lexical scope.

    The two bottom frames stand for the builtins and the global scope and are
    never popped. Frames above them are reused rather than reallocated once the
    stack has grown to a given depth.
    """

    def __init__(self, frames: Optional[List[Set[str]]] = None):
        self.frames: List[Set[str]] = frames if frames is not None else [set(), set()]
        self.pointer = len(self.frames) - 1

    @property
    def depth(self) -> int:
        return self.pointer

    @property
    def global_frame(self) -> Set[str]:
        return self.frames[1]

    def begin(self):
        if self.pointer == len(self.frames) - 1:
            self.frames.append(set())
        self.pointer += 1
        # Whatever is left in a reused frame belongs to a scope that has ended.
        self.frames[self.pointer].clear()

    def end(self):
        if self.pointer > 1:
            self.pointer -= 1

    def unwind(self, depth: int):
        self.pointer = depth

    def declare(self, name: str) -> bool:
        frame = self.frames[self.pointer]
        if name in frame:
            return False
        frame.add(name)
        return True

    def resolve(self, name: str):
        """Returns (level, resolved) for a name used in the current scope."""
        for hops in range(self.pointer + 1):
            if name in self.frames[self.pointer - hops]:
                return hops, True
        # Unknown names are assumed to live with the builtins.
        return self.pointer, False


class Parser:
    def __init__(self, lexer: PeekingLexer):
        self.lexer = lexer
        self.scopes = Scopes()
        self.last: Optional[Token] = None

    def parse(self) -> List[ast.Statement]:
        body = []
        errors = []
        while True:
            try:
                stmt = self.next()
            except ParseError as e:
                errors.append(e)
                continue
            if stmt is None:
                break
            body.append(stmt)
        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise ParseErrorGroup(errors)
        return body

    def next(self) -> Optional[ast.Statement]:
        """Parses the next top level statement, None once the source is exhausted."""
        if self.peek().type == TokenType.EOF:
            return None
        depth = self.scopes.depth
        self.last = None
        try:
            return self.declaration()
        except ParseError as e:
            logger.debug("Recovering from %s", e)
            self.scopes.unwind(depth)
            self.synchronize()
            raise

    def synchronize(self):
        # Skip the rest of the broken statement unless its terminator was
        # what triggered the error.
        if self.last is not None and self.last.type in TERMINATORS:
            return
        while True:
            token = self.lexer.next()
            if token.type in TERMINATORS:
                return

    def declaration(self) -> ast.Statement:
        if self.check(TokenType.VAR):
            return self.variable()
        return self.statement()

    def variable(self) -> ast.Declaration:
        self.consume(TokenType.VAR)
        name = self.consume(TokenType.IDENTIFIER, message="Expected variable name").lexeme
        self.declare(name)
        if self.match(TokenType.SEMICOLON):
            return ast.Declaration(name)
        self.consume(TokenType.EQ, message="Expected '=' or ';' after variable name")
        initializer = self.expression()
        self.consume(TokenType.SEMICOLON, message="Expected ';' after variable declaration")
        return ast.Declaration(name, initializer)

    def statement(self) -> ast.Statement:
        token = self.peek()
        if token.type == TokenType.LBRACE:
            self.scopes.begin()
            try:
                return self.block()
            finally:
                self.scopes.end()
        if token.type == TokenType.IF:
            return self.if_stmt()
        if token.type == TokenType.WHILE:
            return self.while_stmt()
        if token.type == TokenType.FUNCTION:
            return self.function_def()
        if token.type == TokenType.RETURN:
            return self.return_stmt()
        if self.match(TokenType.SEMICOLON):
            return ast.Noop()
        if self.match(TokenType.BREAK):
            self.consume(TokenType.SEMICOLON, message="Expected ';' after break")
            return ast.Break()
        if self.match(TokenType.CONTINUE):
            self.consume(TokenType.SEMICOLON, message="Expected ';' after continue")
            return ast.Continue()
        if token.type == TokenType.IMPORT:
            return self.import_stmt()
        if token.type == TokenType.EXPORT:
            return self.export_stmt()

        expr = self.expression()
        self.consume(TokenType.SEMICOLON, message="Expected ';' after expression")
        return ast.ExpressionStatement(expr)

    def block(self) -> ast.Block:
        self.consume(TokenType.LBRACE, message="Expected '{'")
        body = []
        while not self.match(TokenType.RBRACE):
            if self.check(TokenType.EOF):
                self.fail("Expected '}' before end of input")
            body.append(self.declaration())
        return ast.Block(body)

    def if_stmt(self) -> ast.If:
        self.consume(TokenType.IF)
        condition = self.logical()
        then = self.statement()
        otherwise = None
        if self.match(TokenType.ELSE):
            otherwise = self.statement()
        return ast.If(condition, then, otherwise)

    def while_stmt(self) -> ast.While:
        self.consume(TokenType.WHILE)
        condition = self.logical()
        self.scopes.begin()
        try:
            body = self.block()
        finally:
            self.scopes.end()
        return ast.While(condition, body)

    def function_def(self) -> ast.Function:
        self.consume(TokenType.FUNCTION)
        # Declared in the enclosing scope before the body is parsed so that the
        # function can call itself.
        name = self.consume(TokenType.IDENTIFIER, message="Expected function name").lexeme
        self.declare(name)
        self.scopes.begin()
        try:
            params = self.parameters()
            for param in params:
                self.declare(param)
            body = self.block()
        finally:
            self.scopes.end()
        return ast.Function(name, params, body)

    def return_stmt(self) -> ast.Return:
        self.consume(TokenType.RETURN)
        if self.match(TokenType.SEMICOLON):
            return ast.Return()
        value = self.expression()
        self.consume(TokenType.SEMICOLON, message="Expected ';' after return value")
        return ast.Return(value)

    def import_stmt(self) -> ast.Import:
        self.consume(TokenType.IMPORT)
        token = self.advance()
        if token.type == TokenType.STRING:
            source = ast.StringLiteral(token.lexeme)
        elif token.type == TokenType.IDENTIFIER:
            source = self.variable_ref(token.lexeme)
        else:
            self.fail(f"{token.lexeme!r} is not a valid import source")
        self.consume(TokenType.SEMICOLON, message="Expected ';' after import")
        return ast.Import(source)

    def export_stmt(self) -> ast.Export:
        self.consume(TokenType.EXPORT)
        value = self.expression()
        if self.match(TokenType.AS):
            name = self.consume(TokenType.IDENTIFIER, message="Expected export name after 'as'").lexeme
        elif isinstance(value, ast.Variable):
            name = value.name
        else:
            self.fail("Unnamed export of a value that is not a variable")
        self.consume(TokenType.SEMICOLON, message="Expected ';' after export")
        return ast.Export(name, value)

    # Expressions, lowest precedence first.

    def expression(self) -> ast.Expression:
        return self.assignment()

    def assignment(self) -> ast.Expression:
        expr = self.logical()
        if not self.match(TokenType.EQ):
            return expr
        if isinstance(expr, ast.Variable):
            value = self.assignment()
            level, resolved = self.scopes.resolve(expr.name)
            return ast.Assignment(expr.name, value, level, resolved)
        if isinstance(expr, ast.GetProp):
            return ast.SetProp(expr, self.assignment())
        if isinstance(expr, ast.GetIndex):
            return ast.SetIndex(expr, self.assignment())
        self.fail("Invalid left hand side of assignment")

    def logical(self) -> ast.Expression:
        expr = self.equality()
        while self.check(TokenType.AND, TokenType.OR):
            op = self.advance()
            expr = ast.Logical(op, expr, self.equality())
        return expr

    def equality(self) -> ast.Expression:
        expr = self.comparison()
        while self.check(TokenType.EQEQ, TokenType.NEQ):
            op = self.advance()
            expr = ast.Infix(op, expr, self.comparison())
        return expr

    def comparison(self) -> ast.Expression:
        expr = self.term()
        while self.check(TokenType.LT, TokenType.LTE, TokenType.GT, TokenType.GTE):
            op = self.advance()
            expr = ast.Infix(op, expr, self.term())
        return expr

    def term(self) -> ast.Expression:
        expr = self.factor()
        while self.check(TokenType.MINUS, TokenType.PLUS):
            op = self.advance()
            expr = ast.Infix(op, expr, self.factor())
        return expr

    def factor(self) -> ast.Expression:
        expr = self.prefix()
        while self.check(TokenType.STAR, TokenType.SLASH):
            op = self.advance()
            expr = ast.Infix(op, expr, self.prefix())
        return expr

    def prefix(self) -> ast.Expression:
        if self.check(TokenType.BANG, TokenType.MINUS):
            op = self.advance()
            return ast.Prefix(op, self.prefix())
        return self.call()

    def call(self) -> ast.Expression:
        expr = self.primary()
        while True:
            if self.match(TokenType.LPAREN):
                args = self.expressions(TokenType.RPAREN)
                expr = ast.Call(expr, args)
            elif self.match(TokenType.LBRACKET):
                index = self.expression()
                self.consume(TokenType.RBRACKET, message="Expected ']' after index")
                expr = ast.GetIndex(expr, index)
            elif self.match(TokenType.DOT):
                prop = self.consume(TokenType.IDENTIFIER, TokenType.STRING, message="Expected property name after '.'")
                expr = ast.GetProp(expr, prop.lexeme)
            else:
                return expr

    def primary(self) -> ast.Expression:
        token = self.peek()
        if token.type == TokenType.IDENTIFIER:
            self.advance()
            return self.variable_ref(token.lexeme)
        if token.type == TokenType.STRING:
            self.advance()
            return ast.StringLiteral(token.lexeme)
        if token.type == TokenType.INTEGER:
            self.advance()
            try:
                return ast.IntegerLiteral(int(token.lexeme))
            except ValueError:
                self.fail(f"Invalid integer literal: {token.lexeme}")
        if token.type == TokenType.FLOAT:
            self.advance()
            try:
                return ast.FloatLiteral(float(token.lexeme))
            except ValueError:
                self.fail(f"Invalid float literal: {token.lexeme}")
        if token.type == TokenType.BOOLEAN:
            self.advance()
            return ast.BooleanLiteral(token.lexeme == 'true')
        if token.type == TokenType.NIL:
            self.advance()
            return ast.NilLiteral()
        if token.type == TokenType.LPAREN:
            self.advance()
            expr = self.expression()
            self.consume(TokenType.RPAREN, message="Expected ')' after expression")
            return ast.Grouping(expr)
        if token.type == TokenType.LBRACKET:
            self.advance()
            return ast.ListLiteral(self.expressions(TokenType.RBRACKET))
        if token.type == TokenType.OBJECT:
            self.advance()
            return ast.ObjectLiteral(self.properties())
        if token.type == TokenType.FUNCTION:
            return self.method()

        self.advance()
        self.fail(f"Unexpected token: {token.lexeme!r}")

    def variable_ref(self, name: str) -> ast.Variable:
        level, resolved = self.scopes.resolve(name)
        return ast.Variable(name, level, resolved)

    def method(self) -> ast.Method:
        self.consume(TokenType.FUNCTION)
        params = self.parameters()
        # Methods get a scope stack of their own in which only `this` and the
        # globals are visible, restored once the body has been parsed.
        previous = self.scopes
        self.scopes = Scopes([set(), previous.global_frame, {"this"}])
        try:
            self.scopes.begin()
            for param in params:
                self.declare(param)
            body = self.block()
        finally:
            self.scopes = previous
        return ast.Method(params, body)

    def properties(self):
        self.consume(TokenType.LBRACE, message="Expected '{' after Object")
        props = {}
        if self.match(TokenType.RBRACE):
            return props
        while True:
            key = self.consume(TokenType.IDENTIFIER, TokenType.STRING, message="Expected property name")
            self.consume(TokenType.COLON, message="Expected ':' after property name")
            props[key.lexeme] = self.expression()
            if not self.match(TokenType.COMMA):
                break
        self.consume(TokenType.RBRACE, message="Expected '}' after object properties")
        return props

    def parameters(self) -> List[str]:
        self.consume(TokenType.LPAREN, message="Expected '(' before parameters")
        params = []
        if self.match(TokenType.RPAREN):
            return params
        while True:
            params.append(self.consume(TokenType.IDENTIFIER, message="Expected parameter name").lexeme)
            if not self.match(TokenType.COMMA):
                break
        self.consume(TokenType.RPAREN, message="Expected ')' after parameters")
        return params

    def expressions(self, closer: TokenType) -> List[ast.Expression]:
        items = []
        if self.match(closer):
            return items
        while True:
            items.append(self.expression())
            if not self.match(TokenType.COMMA):
                break
        self.consume(closer, message=f"Expected {closer.name.lower()} after items")
        return items

    # Helper methods
    def declare(self, name: str):
        if not self.scopes.declare(name):
            self.fail(f"{name} is already declared in this scope")

    def fail(self, message):
        raise ParseError(message, self.lexer.line())

    def peek(self) -> Token:
        return self.lexer.peek()

    def advance(self) -> Token:
        self.last = self.lexer.next()
        return self.last

    def check(self, *types) -> bool:
        return self.peek().type in types

    def match(self, *types) -> bool:
        if self.check(*types):
            self.advance()
            return True
        return False

    def consume(self, *types, message="Unexpected token") -> Token:
        token = self.advance()
        if token.type in types:
            return token
        self.fail(f"{message}, found {token.lexeme!r}")


def parse(source) -> List[ast.Statement]:
    """Parses a whole program from a string, bytes or readable stream."""
    return Parser(PeekingLexer(Lexer(source))).parse()


def parse_file(path) -> List[ast.Statement]:
    with open(path, 'r', encoding='utf-8') as f:
        return parse(f)
