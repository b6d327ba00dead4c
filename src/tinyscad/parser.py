"""Recursive-descent parser producing the tinyscad syntax tree."""

from __future__ import annotations

import logging
from types import MappingProxyType

from tinyscad.errors import (
    ExpectedIdentifier,
    ExpectedSymbol,
    UnexpectedToken,
    UnterminatedBlock,
)
from tinyscad.lexer import Token, TokenKind, tokenize
from tinyscad.syntax import (
    ArrayLiteral,
    Assignment,
    BinaryOp,
    Block,
    CallStatement,
    Expression,
    ForLoop,
    Invocation,
    Literal,
    Program,
    Statement,
    UnaryMinus,
    VariableRef,
)

logger = logging.getLogger(__name__)


def parse_program(source: str) -> Program:
    """Tokenize and parse template source into a :class:`Program`.

    Raises:
        LexError: On invalid characters or unterminated comments.
        ParseError: On any grammar violation. No partial tree is returned.
    """
    tokens = tokenize(source)
    program = Parser(tokens).parse_program()
    logger.debug(
        "Parsed %d tokens into %d top-level statements", len(tokens), len(program.statements)
    )
    return program


class Parser:
    """Parser over a token list terminated by an EOF token."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.index = 0

    def parse_program(self) -> Program:
        statements = []
        while not self._is(TokenKind.EOF):
            statements.append(self.parse_statement())
        return Program(tuple(statements))

    # --- Statements ---

    def parse_statement(self) -> Statement:
        if self._is_identifier("for"):
            return self.parse_for()
        if self._is(TokenKind.IDENTIFIER) and self._is_symbol("=", offset=1):
            return self.parse_assignment()

        invocation = self.parse_invocation()
        if invocation.block is None:
            self._consume_symbol(";")
        else:
            self._match_symbol(";")
        return CallStatement(invocation)

    def parse_assignment(self) -> Assignment:
        name = self._consume_identifier()
        self._consume_symbol("=")
        expression = self.parse_expression()
        self._consume_symbol(";")
        return Assignment(name, expression)

    def parse_for(self) -> ForLoop:
        self._consume_identifier("for")
        self._consume_symbol("(")
        variable = self._consume_identifier()
        self._consume_symbol("=")
        self._consume_symbol("[")

        start = self.parse_expression()
        self._consume_symbol(":")
        end = self.parse_expression()
        step = None
        # [start:step:end]
        if self._match_symbol(":"):
            step = end
            end = self.parse_expression()

        self._consume_symbol("]")
        self._consume_symbol(")")
        body = self.parse_block()
        return ForLoop(variable=variable, start=start, end=end, body=body, step=step)

    def parse_block(self) -> Block:
        self._consume_symbol("{")
        statements = []
        while not self._match_symbol("}"):
            if self._is(TokenKind.EOF):
                token = self._peek()
                raise UnterminatedBlock(token.line, token.column)
            statements.append(self.parse_statement())
        return Block(tuple(statements))

    def parse_invocation(self) -> Invocation:
        head = self._peek()
        name = self._consume_identifier()
        self._consume_symbol("(")
        positional, named = self.parse_args()
        self._consume_symbol(")")
        block = self.parse_block() if self._is_symbol("{") else None
        return Invocation(
            name=name,
            positional=positional,
            named=named,
            block=block,
            line=head.line,
            column=head.column,
        )

    def parse_args(self) -> tuple[tuple[Expression, ...], MappingProxyType]:
        positional: list[Expression] = []
        named: dict[str, Expression] = {}
        if self._is_symbol(")"):
            return (), MappingProxyType(named)

        while True:
            if self._is(TokenKind.IDENTIFIER) and self._is_symbol("=", offset=1):
                key = self._consume_identifier()
                self._consume_symbol("=")
                named[key] = self.parse_expression()
            else:
                positional.append(self.parse_expression())
            if not self._match_symbol(","):
                break

        return tuple(positional), MappingProxyType(named)

    # --- Expressions ---

    def parse_expression(self) -> Expression:
        return self._parse_additive()

    def _parse_additive(self) -> Expression:
        node = self._parse_multiplicative()
        while self._is_symbol("+") or self._is_symbol("-"):
            op = self._consume_symbol().text
            node = BinaryOp(op, node, self._parse_multiplicative())
        return node

    def _parse_multiplicative(self) -> Expression:
        node = self._parse_unary()
        while self._is_symbol("*") or self._is_symbol("/"):
            op = self._consume_symbol().text
            node = BinaryOp(op, node, self._parse_unary())
        return node

    def _parse_unary(self) -> Expression:
        if self._match_symbol("-"):
            return UnaryMinus(self._parse_unary())
        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        if self._match_symbol("("):
            expression = self.parse_expression()
            self._consume_symbol(")")
            return expression

        if self._is_symbol("["):
            return self._parse_array()

        token = self._peek()
        if token.kind is TokenKind.NUMBER:
            self.index += 1
            return Literal(token.value)

        if token.kind is TokenKind.IDENTIFIER:
            self.index += 1
            if token.text == "true":
                return Literal(True)
            if token.text == "false":
                return Literal(False)
            return VariableRef(token.text)

        raise UnexpectedToken(token.text, token.line, token.column)

    def _parse_array(self) -> ArrayLiteral:
        self._consume_symbol("[")
        items: list[Expression] = []
        if not self._match_symbol("]"):
            items.append(self.parse_expression())
            while self._match_symbol(","):
                items.append(self.parse_expression())
            self._consume_symbol("]")
        return ArrayLiteral(tuple(items))

    # --- Token helpers ---

    def _peek(self, offset: int = 0) -> Token:
        pos = self.index + offset
        if pos < len(self.tokens):
            return self.tokens[pos]
        return self.tokens[-1]

    def _is(self, kind: TokenKind, offset: int = 0) -> bool:
        return self._peek(offset).kind is kind

    def _is_identifier(self, text: str) -> bool:
        token = self._peek()
        return token.kind is TokenKind.IDENTIFIER and token.text == text

    def _is_symbol(self, text: str, offset: int = 0) -> bool:
        token = self._peek(offset)
        return token.kind is TokenKind.SYMBOL and token.text == text

    def _match_symbol(self, text: str) -> bool:
        if self._is_symbol(text):
            self.index += 1
            return True
        return False

    def _consume_symbol(self, text: str | None = None) -> Token:
        token = self._peek()
        if token.kind is not TokenKind.SYMBOL or (text is not None and token.text != text):
            raise ExpectedSymbol(text, token.text, token.line, token.column)
        self.index += 1
        return token

    def _consume_identifier(self, text: str | None = None) -> str:
        token = self._peek()
        if token.kind is not TokenKind.IDENTIFIER or (text is not None and token.text != text):
            raise ExpectedIdentifier(text, token.text, token.line, token.column)
        self.index += 1
        return token.text
