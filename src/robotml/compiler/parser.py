"""
RobotML Parser.

A recursive descent parser that transforms a token stream into an Abstract
Syntax Tree. Newlines are insignificant; statements are delimited by their
keywords. References are left unresolved; see `robotml.compiler.linker`.

Expression precedence, lowest first:

    or  <  and  <  comparison  <  cast (`in`)  <  + -  <  * / %  <  unary -
"""

from typing import Optional

from robotml.compiler.ast_nodes import (
    ArithmeticOperator,
    BinaryOperation,
    Block,
    BooleanExpr,
    BooleanLiteral,
    Cast,
    Clock,
    Comment,
    Comparator,
    Expression,
    Forward,
    FunctionCall,
    FunctionDef,
    LogicalExpr,
    LogicalOperator,
    Loop,
    Movement,
    MovementDirection,
    NumberLiteral,
    Parameter,
    ParenExpr,
    Program,
    Return,
    Rotation,
    Speed,
    Statement,
    Variable,
    VariableAssign,
    VariableDecl,
)
from robotml.compiler.tokens import MOVEMENT_KEYWORDS, Token, TokenType
from robotml.compiler.types import RobotType
from robotml.utils.errors import ParserError


COMPARISON_TOKENS: dict[TokenType, Comparator] = {
    TokenType.LT: Comparator.LT,
    TokenType.LE: Comparator.LE,
    TokenType.GT: Comparator.GT,
    TokenType.GE: Comparator.GE,
    TokenType.EQ: Comparator.EQ,
    TokenType.NE: Comparator.NE,
}

ADDITIVE_TOKENS: dict[TokenType, ArithmeticOperator] = {
    TokenType.PLUS: ArithmeticOperator.ADD,
    TokenType.MINUS: ArithmeticOperator.SUB,
}

MULTIPLICATIVE_TOKENS: dict[TokenType, ArithmeticOperator] = {
    TokenType.STAR: ArithmeticOperator.MUL,
    TokenType.SLASH: ArithmeticOperator.DIV,
    TokenType.PERCENT: ArithmeticOperator.MOD,
}

# Tokens that may start an expression
EXPRESSION_START = frozenset(
    {
        TokenType.NUMBER,
        TokenType.TRUE,
        TokenType.FALSE,
        TokenType.IDENTIFIER,
        TokenType.LPAREN,
        TokenType.MINUS,
    }
)


class Parser:
    """
    Recursive descent parser for RobotML.

    Comment tokens are collected as they are passed over and emitted as
    Comment statements before the next statement of the enclosing block.
    Comments outside any block are dropped.

    Usage:
        parser = Parser(tokens)
        program = parser.parse()
    """

    def __init__(self, tokens: list[Token], source: str = "") -> None:
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer (ending with EOF)
            source: Optional source code, used to quote the line in errors
        """
        self.tokens = tokens
        self.pos = 0
        self._source_lines: list[str] = source.splitlines() if source else []
        self._pending_comments: list[Comment] = []
        self._collect_comments()

    @property
    def _current(self) -> Token:
        if self.pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[self.pos]

    def _is_at_end(self) -> bool:
        return self._current.type == TokenType.EOF

    def _check(self, *types: TokenType) -> bool:
        """Check if the current token is one of the given types."""
        return self._current.type in types

    def _advance(self) -> Token:
        """Consume and return the current token, then step over comments."""
        token = self._current
        if not self._is_at_end():
            self.pos += 1
        self._collect_comments()
        return token

    def _match(self, *types: TokenType) -> bool:
        """Consume current token if it matches one of the given types."""
        if self._check(*types):
            self._advance()
            return True
        return False

    def _expect(self, token_type: TokenType, message: str) -> Token:
        """Consume current token if it matches, else raise error."""
        if self._check(token_type):
            return self._advance()
        raise self._error(message)

    def _collect_comments(self) -> None:
        while self.pos < len(self.tokens) and self.tokens[self.pos].type == TokenType.COMMENT:
            token = self.tokens[self.pos]
            self._pending_comments.append(Comment(token.value, location=token.location))
            self.pos += 1

    def _error(self, message: str) -> ParserError:
        """Create a parser error at the current token."""
        token = self._current
        found = "end of file" if token.type == TokenType.EOF else repr(token.value)
        line_text = None
        if 1 <= token.location.line <= len(self._source_lines):
            line_text = self._source_lines[token.location.line - 1]
        return ParserError(f"{message}, found {found}", token.location, line_text)

    # -------------------------------------------------------------------------
    # Program Parsing
    # -------------------------------------------------------------------------

    def parse(self) -> Program:
        """
        Parse the entire program.

        Returns:
            The root Program AST node.
        """
        location = self._current.location
        functions: list[FunctionDef] = []
        while not self._is_at_end():
            self._pending_comments.clear()
            functions.append(self._parse_function())
        return Program(functions, location=location)

    def _parse_type(self) -> RobotType:
        if not self._current.is_type_keyword:
            raise self._error("Expected a type (void, number, boolean, cm, mm)")
        return RobotType(self._advance().value)

    def _parse_function(self) -> FunctionDef:
        """
        Parse a function definition.

        Syntax:
            let number name(number a, cm b) { ... }
            name() { ... }
        """
        location = self._current.location
        return_type = RobotType.VOID
        if self._match(TokenType.LET):
            if self._current.is_type_keyword:
                return_type = self._parse_type()

        name = self._expect(TokenType.IDENTIFIER, "Expected function name").value
        self._expect(TokenType.LPAREN, f"Expected '(' after function name '{name}'")

        params: list[Parameter] = []
        if not self._check(TokenType.RPAREN):
            params.append(self._parse_parameter())
            while self._match(TokenType.COMMA):
                params.append(self._parse_parameter())
        self._expect(TokenType.RPAREN, "Expected ')' after parameters")

        body = self._parse_block()
        return FunctionDef(name, return_type, params, body, location=location)

    def _parse_parameter(self) -> Parameter:
        location = self._current.location
        param_type = self._parse_type()
        name = self._expect(TokenType.IDENTIFIER, "Expected parameter name").value
        return Parameter(name, param_type, location=location)

    def _parse_block(self) -> Block:
        location = self._current.location
        self._pending_comments.clear()
        self._expect(TokenType.LBRACE, "Expected '{'")

        statements: list[Statement] = []
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            statements.extend(self._take_comments())
            statements.append(self._parse_statement())
            statements.extend(self._take_comments())

        statements.extend(self._take_comments())
        self._expect(TokenType.RBRACE, "Expected '}' to close block")
        return Block(statements, location=location)

    def _take_comments(self) -> list[Comment]:
        comments = self._pending_comments
        self._pending_comments = []
        return comments

    # -------------------------------------------------------------------------
    # Statement Parsing
    # -------------------------------------------------------------------------

    def _parse_statement(self) -> Statement:
        token = self._current

        if token.type == TokenType.VAR:
            return self._parse_variable_decl()
        if token.type == TokenType.RETURN:
            return self._parse_return()
        if token.type == TokenType.LOOP:
            self._advance()
            condition = self._parse_expression()
            return Loop(condition, self._parse_block(), location=token.location)
        if token.type in MOVEMENT_KEYWORDS:
            return self._parse_movement()
        if token.type == TokenType.CLOCK:
            self._advance()
            sign = None
            if self._check(TokenType.PLUS, TokenType.MINUS):
                sign = self._advance().value
            return Clock(self._parse_expression(), sign, location=token.location)
        if token.type == TokenType.ROTATE:
            self._advance()
            return Rotation(self._parse_expression(), location=token.location)
        if token.type == TokenType.SPEED:
            self._advance()
            return Speed(self._parse_expression(), location=token.location)
        if token.type == TokenType.IDENTIFIER:
            if self._peek_type() == TokenType.ASSIGN:
                target = Variable(self._advance().value, location=token.location)
                self._advance()  # =
                return VariableAssign(target, self._parse_expression(), location=token.location)
            if self._peek_type() == TokenType.LPAREN:
                return self._parse_call()

        raise self._error("Expected a statement")

    def _peek_type(self) -> TokenType:
        """Type of the next non-comment token after the current one."""
        pos = self.pos + 1
        while pos < len(self.tokens) and self.tokens[pos].type == TokenType.COMMENT:
            pos += 1
        if pos >= len(self.tokens):
            return TokenType.EOF
        return self.tokens[pos].type

    def _parse_variable_decl(self) -> VariableDecl:
        """
        Parse a variable declaration.

        Syntax:
            var cm distance = 30
            var boolean done
        """
        location = self._advance().location  # var
        var_type = self._parse_type()
        name = self._expect(TokenType.IDENTIFIER, "Expected variable name").value
        init: Optional[Expression] = None
        if self._match(TokenType.ASSIGN):
            init = self._parse_expression()
        return VariableDecl(name, var_type, init, location=location)

    def _parse_return(self) -> Return:
        keyword = self._advance()
        value: Optional[Expression] = None
        # A value must start on the same line as `return`
        if self._current.type in EXPRESSION_START and (
            self._current.location.line == keyword.location.line
        ):
            value = self._parse_expression()
        return Return(value, location=keyword.location)

    def _parse_movement(self) -> Statement:
        """
        Parse a movement command.

        `Forward 100 cm` (a literal directly followed by a unit) is the
        legacy form; everything else is a Movement with an expression value.
        """
        keyword = self._advance()
        direction = MovementDirection(keyword.value)

        if (
            keyword.type == TokenType.FORWARD
            and self._check(TokenType.NUMBER)
            and self._peek_type() in (TokenType.TYPE_CM, TokenType.TYPE_MM)
        ):
            distance = self._advance().value
            unit = RobotType(self._advance().value)
            return Forward(distance, unit, location=keyword.location)

        return Movement(direction, self._parse_expression(), location=keyword.location)

    def _parse_call(self) -> FunctionCall:
        token = self._advance()
        self._expect(TokenType.LPAREN, "Expected '('")
        args: list[Expression] = []
        if not self._check(TokenType.RPAREN):
            args.append(self._parse_expression())
            while self._match(TokenType.COMMA):
                args.append(self._parse_expression())
        self._expect(TokenType.RPAREN, f"Expected ')' after arguments to '{token.value}'")
        return FunctionCall(token.value, args, location=token.location)

    # -------------------------------------------------------------------------
    # Expression Parsing
    # -------------------------------------------------------------------------

    def _parse_expression(self) -> Expression:
        return self._parse_or()

    def _parse_or(self) -> Expression:
        left = self._parse_and()
        while self._check(TokenType.OR):
            location = self._advance().location
            left = LogicalExpr(left, LogicalOperator.OR, self._parse_and(), location=location)
        return left

    def _parse_and(self) -> Expression:
        left = self._parse_comparison()
        while self._check(TokenType.AND):
            location = self._advance().location
            left = LogicalExpr(left, LogicalOperator.AND, self._parse_comparison(), location=location)
        return left

    def _parse_comparison(self) -> Expression:
        left = self._parse_cast()
        if self._current.type in COMPARISON_TOKENS:
            token = self._advance()
            right = self._parse_cast()
            return BooleanExpr(left, COMPARISON_TOKENS[token.type], right, location=token.location)
        return left

    def _parse_cast(self) -> Expression:
        value = self._parse_additive()
        if self._check(TokenType.IN):
            location = self._advance().location
            return Cast(value, self._parse_type(), location=location)
        return value

    def _parse_additive(self) -> Expression:
        left = self._parse_multiplicative()
        while self._current.type in ADDITIVE_TOKENS:
            token = self._advance()
            right = self._parse_multiplicative()
            left = BinaryOperation(left, ADDITIVE_TOKENS[token.type], right, location=token.location)
        return left

    def _parse_multiplicative(self) -> Expression:
        left = self._parse_unary()
        while self._current.type in MULTIPLICATIVE_TOKENS:
            token = self._advance()
            right = self._parse_unary()
            left = BinaryOperation(
                left, MULTIPLICATIVE_TOKENS[token.type], right, location=token.location
            )
        return left

    def _parse_unary(self) -> Expression:
        if self._check(TokenType.MINUS):
            location = self._advance().location
            if not self._check(TokenType.NUMBER):
                raise self._error("Unary '-' is only allowed before a number literal")
            return NumberLiteral(self._advance().value, "-", location=location)
        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        token = self._current

        if token.type == TokenType.NUMBER:
            self._advance()
            return NumberLiteral(token.value, location=token.location)
        if token.type in (TokenType.TRUE, TokenType.FALSE):
            self._advance()
            return BooleanLiteral(token.type == TokenType.TRUE, location=token.location)
        if token.type == TokenType.IDENTIFIER:
            if self._peek_type() == TokenType.LPAREN:
                return self._parse_call()
            self._advance()
            return Variable(token.value, location=token.location)
        if token.type == TokenType.LPAREN:
            self._advance()
            inner = self._parse_expression()
            self._expect(TokenType.RPAREN, "Expected ')' after expression")
            return ParenExpr(inner, location=token.location)

        raise self._error("Expected an expression")


def parse(tokens: list[Token], source: str = "") -> Program:
    """
    Convenience function to parse tokens into an AST.

    Args:
        tokens: List of tokens from the lexer
        source: Optional source code for error context

    Returns:
        The root Program AST node
    """
    return Parser(tokens, source).parse()
