"""
subc Lexer (Tokenizer)
======================

This module implements the lexer for the C subset accepted by subc.
It converts a raw source buffer into an ordered tuple of tokens for the
parser.

Token Categories
----------------
- Keywords: int, void, return
- Identifiers: [A-Za-z_][A-Za-z0-9_]*
- Constants: [0-9]+ (decimal only, no suffixes)
- Delimiters: ( ) { } ;

Word Boundaries
---------------
Keywords, identifiers and constants must be followed by end of input or
a word-boundary character (anything other than an ASCII letter, digit or
underscore). A keyword spelling followed by a word character is scanned
as an identifier instead (``integer``, ``voids``, ``return_value``);
an identifier or constant followed by a word character is malformed
(``1a``).

The input is expected to be preprocessed already: there is no comment,
directive or macro handling here.

Example Usage
-------------
>>> from subc.lexer import lex
>>> for token in lex(b'int main(void) { return 2; }', "test.c"):
...     print(token)
Token(INT, 1:1)
Token(IDENTIFIER, 'main', 1:5)
Token(LPAREN, 1:9)
Token(VOID, 1:10)
Token(RPAREN, 1:14)
Token(LBRACE, 1:16)
Token(RETURN, 1:18)
Token(CONSTANT, '2', 1:25)
Token(SEMICOLON, 1:26)
Token(RBRACE, 1:28)
"""

import logging
import string
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Optional

from subc.errors import (
    SourceLocation,
    InvalidCharacterError,
    MalformedTokenError,
    InvalidOctalConstantError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Token types for the subc language subset.

    Keywords are distinguished from identifiers so the parser can match
    them by type alone.
    """

    # === Identifiers and Literals ===
    IDENTIFIER = auto()     # Function names
    CONSTANT = auto()       # Decimal integer literals

    # === Keywords ===
    INT = auto()            # int
    VOID = auto()           # void
    RETURN = auto()         # return

    # === Delimiters ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACE = auto()         # {
    RBRACE = auto()         # }
    SEMICOLON = auto()      # ;


# Keyword spellings, tried one at a time by the lexer
KEYWORDS: dict[str, TokenType] = {
    "int": TokenType.INT,
    "void": TokenType.VOID,
    "return": TokenType.RETURN,
}

# Single-character delimiters
DELIMITERS: dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ";": TokenType.SEMICOLON,
}

# Fixed spellings, used for diagnostics and debug dumps
SPELLINGS: dict[TokenType, str] = {
    **{token_type: text for text, token_type in KEYWORDS.items()},
    **{token_type: text for text, token_type in DELIMITERS.items()},
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from the source buffer.

    Attributes:
        type: The TokenType classification
        text: Source text for IDENTIFIER and CONSTANT tokens, None otherwise
        location: Where the token starts (excluded from equality)
    """
    type: TokenType
    text: Optional[str] = None
    location: Optional[SourceLocation] = field(default=None, compare=False)

    def __repr__(self) -> str:
        """Format token for debugging output."""
        position = ""
        if self.location is not None:
            position = f", {self.location.line}:{self.location.column}"
        if self.text is not None:
            return f"Token({self.type.name}, {self.text!r}{position})"
        return f"Token({self.type.name}{position})"

    @property
    def lexeme(self) -> str:
        """Return the source spelling of this token."""
        if self.text is not None:
            return self.text
        return SPELLINGS[self.type]


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes a preprocessed source buffer.

    Usage:
        lexer = Lexer(buffer, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source text being tokenized
        filename: Name of the source file (for error reporting)
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters + "_"

    # Characters that can continue an identifier; everything else is a
    # word boundary
    WORD_CHARS = string.ascii_letters + string.digits + "_"

    WHITESPACE = " \t\n\r"

    def __init__(self, source: bytes | str, filename: str = "<input>"):
        """
        Initialize the lexer with a source buffer.

        Args:
            source: Source buffer. Bytes are decoded as Latin-1 so every
                    byte maps to exactly one character.
            filename: Name of the source file (for error messages)
        """
        if isinstance(source, (bytes, bytearray)):
            source = bytes(source).decode("latin-1")
        self.source = source
        self.filename = filename

        # Current position in source
        self._pos = 0
        self._line = 1
        self._column = 1

        # Track line start position for error reporting
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source buffer.

        Yields:
            Token objects in source order

        Raises:
            LexError: If a character or run cannot be tokenized
        """
        while True:
            self._skip_whitespace()
            if self._at_end():
                return
            yield self._scan_token()

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of source."""
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """
        Consume and return the current character, advancing position.

        Updates line and column tracking for error reporting.
        """
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _is_boundary(self, char: str) -> bool:
        """Return True if char ends a word (end of input counts)."""
        return char == "" or char not in self.WORD_CHARS

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _skip_whitespace(self) -> None:
        """Skip spaces, tabs, line feeds and carriage returns."""
        while not self._at_end() and self._peek() in self.WHITESPACE:
            self._advance()

    def _scan_token(self) -> Token:
        """Scan the next token from source."""
        location = self._location()
        char = self._peek()

        if char in DELIMITERS:
            self._advance()
            return Token(DELIMITERS[char], location=location)

        keyword = self._try_keyword()
        if keyword is not None:
            return Token(keyword, location=location)

        if char in self.IDENT_START:
            text = self._scan_run(self.WORD_CHARS, "identifier", location)
            return Token(TokenType.IDENTIFIER, text, location)

        if char in string.digits:
            text = self._scan_run(string.digits, "constant", location)
            if text.startswith("0") and not set(text) <= set(string.octdigits):
                raise InvalidOctalConstantError(text, location, self._get_current_line())
            return Token(TokenType.CONSTANT, text, location)

        raise InvalidCharacterError(char, location, self._get_current_line())

    def _try_keyword(self) -> Optional[TokenType]:
        """
        Match a keyword at the cursor.

        Each spelling is checked on its own, with its own boundary test,
        and nothing is consumed unless one matches outright.
        """
        for spelling, token_type in KEYWORDS.items():
            if not self.source.startswith(spelling, self._pos):
                continue
            if not self._is_boundary(self._peek(len(spelling))):
                continue
            for _ in spelling:
                self._advance()
            return token_type
        return None

    def _scan_run(self, chars: str, kind: str, location: SourceLocation) -> str:
        """
        Consume the longest run of characters from chars.

        Raises:
            MalformedTokenError: If the run is followed by a word character
        """
        start = self._pos
        while self._peek() and self._peek() in chars:
            self._advance()

        text = self.source[start:self._pos]
        following = self._peek()
        if not self._is_boundary(following):
            raise MalformedTokenError(
                kind, text, following, location, self._get_current_line()
            )
        return text

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self._line, self._column)

    def _get_current_line(self) -> str:
        """Get the current line of source text for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end].rstrip("\r")


# =============================================================================
# Convenience Functions
# =============================================================================

def lex(buffer: bytes | str, filename: str = "<input>") -> tuple[Token, ...]:
    """
    Tokenize a source buffer.

    Args:
        buffer: Preprocessed source (bytes or text)
        filename: Source filename for error messages

    Returns:
        Tokens in source order

    Raises:
        LexError: If the buffer contains an invalid character or a
                  malformed identifier/constant
    """
    tokens = tuple(Lexer(buffer, filename).tokenize())
    logger.debug(f"Lexed {filename}: {len(tokens)} tokens")
    return tokens
