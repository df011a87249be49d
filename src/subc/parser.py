"""
subc Backtracking Recursive Descent Parser
==========================================

This module implements the parser for the subc language subset. It takes
the token sequence from the lexer and builds the source AST.

Grammar
-------
program     ::= function                  (and nothing after it)
function    ::= 'int' IDENTIFIER '(' 'void' ')' '{' statement '}'
statement   ::= return_stmt
return_stmt ::= 'return' expression ';'
expression  ::= CONSTANT

Backtracking
------------
Each production is a ``_try_*`` method taking an immutable ParserState
and returning either a Match (the new node plus the state after it) or
None. A failed attempt never touches the caller's state, so trying the
next alternative simply reuses the state the caller already holds.
Alternatives are tried in order through ``_first_match``; today every
nonterminal has exactly one, so any failure surfaces as a ParseError.

While attempting productions the parser remembers the furthest token any
terminal match reached and what was expected there. That record is only
used to word the error message.

Example Usage
-------------
>>> from subc.lexer import lex
>>> from subc.parser import parse
>>> ast = parse(lex(b'int main(void) { return 2; }'))
>>> ast.function.name.name
'main'
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, NamedTuple, Optional, Sequence

from subc.ast import (
    ASTNode,
    ProgramNode,
    FunctionNode,
    Identifier,
    ReturnStatement,
    ConstantExpression,
    IntegerConstant,
)
from subc.errors import (
    ParseError,
    UnexpectedTokenError,
    UnexpectedEndOfInputError,
    TrailingTokensError,
)
from subc.lexer import SPELLINGS, Token, TokenType

logger = logging.getLogger(__name__)


# =============================================================================
# Parser State
# =============================================================================

@dataclass(frozen=True)
class ParserState:
    """
    Position in the token sequence.

    Attributes:
        position: Index of the next token to consume
    """
    position: int = 0

    def advance(self, count: int = 1) -> "ParserState":
        """Return the state count tokens further on."""
        return ParserState(self.position + count)


class Match(NamedTuple):
    """Successful production: the node built and the state after it."""
    node: ASTNode
    state: ParserState


Production = Callable[[ParserState], Optional[Match]]


def describe(token_type: TokenType) -> str:
    """Describe a token type for 'expected ...' messages."""
    if token_type in SPELLINGS:
        return f"'{SPELLINGS[token_type]}'"
    if token_type == TokenType.IDENTIFIER:
        return "identifier"
    return "integer constant"


# =============================================================================
# Parser
# =============================================================================

class Parser:
    """
    Backtracking recursive descent parser.

    Usage:
        parser = Parser(tokens, "test.c")
        program = parser.parse()

    Attributes:
        tokens: Tokens to parse
        filename: Source filename for error reporting
        source_lines: Original source lines for error context
    """

    def __init__(
        self,
        tokens: Sequence[Token],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        self.tokens = tuple(tokens)
        self.filename = filename
        self.source_lines = source_lines or []

        # Furthest position a terminal match failed at, and what was
        # expected there
        self._furthest = -1
        self._expected: list[str] = []

    def parse(self) -> ProgramNode:
        """
        Parse the whole token sequence into a program.

        Returns:
            The root ProgramNode

        Raises:
            ParseError: If no program can be derived, or tokens remain
                        after it
        """
        self._furthest = -1
        self._expected = []

        match = self._try_program(ParserState())
        if match is None:
            raise self._failure()

        end = match.state.position
        if end < len(self.tokens):
            token = self.tokens[end]
            raise TrailingTokensError(
                token.lexeme,
                token.location,
                self._get_source_line(token),
            )

        program = match.node
        logger.debug(f"Parsed {self.filename}: function '{program.function.name.name}'")
        return program

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _peek(self, state: ParserState) -> Optional[Token]:
        """Return the token at state, or None past the end."""
        if state.position >= len(self.tokens):
            return None
        return self.tokens[state.position]

    def _expect(
        self, state: ParserState, token_type: TokenType
    ) -> Optional[tuple[Token, ParserState]]:
        """
        Match a single terminal.

        Returns:
            The token and the state after it, or None if the token at
            state is missing or of another type
        """
        token = self._peek(state)
        if token is not None and token.type == token_type:
            return token, state.advance()
        self._record_failure(state, describe(token_type))
        return None

    def _expect_sequence(
        self, state: ParserState, *token_types: TokenType
    ) -> Optional[ParserState]:
        """Match several terminals in a row; return the state after them."""
        for token_type in token_types:
            step = self._expect(state, token_type)
            if step is None:
                return None
            _, state = step
        return state

    def _first_match(
        self, state: ParserState, *productions: Production
    ) -> Optional[Match]:
        """Try alternatives in order from the same state."""
        for production in productions:
            match = production(state)
            if match is not None:
                return match
        return None

    # =========================================================================
    # Productions
    # =========================================================================

    def _try_program(self, state: ParserState) -> Optional[Match]:
        """program ::= function"""
        match = self._try_function(state)
        if match is None:
            return None
        function = match.node
        return Match(ProgramNode(function, location=function.location), match.state)

    def _try_function(self, state: ParserState) -> Optional[Match]:
        """function ::= 'int' IDENTIFIER '(' 'void' ')' '{' statement '}'"""
        start = self._peek(state)

        after_type = self._expect_sequence(state, TokenType.INT)
        if after_type is None:
            return None

        name = self._try_identifier(after_type)
        if name is None:
            return None

        before_body = self._expect_sequence(
            name.state,
            TokenType.LPAREN,
            TokenType.VOID,
            TokenType.RPAREN,
            TokenType.LBRACE,
        )
        if before_body is None:
            return None

        body = self._try_statement(before_body)
        if body is None:
            return None

        end = self._expect_sequence(body.state, TokenType.RBRACE)
        if end is None:
            return None

        function = FunctionNode(name.node, body.node, location=start.location)
        return Match(function, end)

    def _try_statement(self, state: ParserState) -> Optional[Match]:
        """statement ::= return_stmt"""
        return self._first_match(state, self._try_return_statement)

    def _try_return_statement(self, state: ParserState) -> Optional[Match]:
        """return_stmt ::= 'return' expression ';'"""
        step = self._expect(state, TokenType.RETURN)
        if step is None:
            return None
        keyword, after_keyword = step

        expression = self._try_expression(after_keyword)
        if expression is None:
            return None

        end = self._expect_sequence(expression.state, TokenType.SEMICOLON)
        if end is None:
            return None

        return Match(ReturnStatement(expression.node, location=keyword.location), end)

    def _try_expression(self, state: ParserState) -> Optional[Match]:
        """expression ::= CONSTANT"""
        return self._first_match(state, self._try_constant_expression)

    def _try_constant_expression(self, state: ParserState) -> Optional[Match]:
        constant = self._try_integer_constant(state)
        if constant is None:
            return None
        node = ConstantExpression(constant.node, location=constant.node.location)
        return Match(node, constant.state)

    def _try_identifier(self, state: ParserState) -> Optional[Match]:
        step = self._expect(state, TokenType.IDENTIFIER)
        if step is None:
            return None
        token, after = step
        return Match(Identifier(token.text, location=token.location), after)

    def _try_integer_constant(self, state: ParserState) -> Optional[Match]:
        step = self._expect(state, TokenType.CONSTANT)
        if step is None:
            return None
        token, after = step
        return Match(IntegerConstant(token.text, location=token.location), after)

    # =========================================================================
    # Error Reporting
    # =========================================================================

    def _record_failure(self, state: ParserState, expected: str) -> None:
        """Remember what was expected at the furthest failing position."""
        if state.position > self._furthest:
            self._furthest = state.position
            self._expected = [expected]
        elif state.position == self._furthest and expected not in self._expected:
            self._expected.append(expected)

    def _failure(self) -> ParseError:
        """Build the error describing the furthest failed match."""
        expected = " or ".join(self._expected) or None

        if self._furthest >= len(self.tokens):
            if not self.tokens or self.tokens[-1].location is None:
                return UnexpectedEndOfInputError(expected)
            last = self.tokens[-1]
            # Point just past the final token
            location = replace(
                last.location, column=last.location.column + len(last.lexeme)
            )
            return UnexpectedEndOfInputError(
                expected, location, self._get_source_line(last)
            )

        token = self.tokens[self._furthest]
        return UnexpectedTokenError(
            token.lexeme,
            expected=expected,
            location=token.location,
            source_line=self._get_source_line(token),
        )

    def _get_source_line(self, token: Token) -> Optional[str]:
        """Get source line for error reporting."""
        if token.location is None:
            return None
        line = token.location.line
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None


# =============================================================================
# Convenience Functions
# =============================================================================

def parse(
    tokens: Sequence[Token],
    filename: str = "<input>",
    source_lines: Optional[list[str]] = None,
) -> ProgramNode:
    """
    Parse a token sequence into a program.

    Args:
        tokens: Tokens from the lexer
        filename: Source filename for error messages
        source_lines: Original source lines for error context

    Returns:
        The root ProgramNode

    Raises:
        ParseError: If parsing fails
    """
    return Parser(tokens, filename, source_lines).parse()
