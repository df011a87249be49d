"""
subc Error Hierarchy
====================

This module defines the exception hierarchy for the subc compiler.
All exceptions inherit from SubCError, allowing callers to catch every
compiler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
SubCError (base)
├── CompileError - any fatal error raised by a pipeline stage
│   ├── LexError - lexical analysis errors
│   │   ├── InvalidCharacterError - character matching no token class
│   │   ├── MalformedTokenError - run not followed by a word boundary
│   │   └── InvalidOctalConstantError - digit 8 or 9 after a leading zero
│   ├── ParseError - syntactic analysis errors
│   │   ├── UnexpectedTokenError - token does not fit the grammar
│   │   ├── UnexpectedEndOfInputError - input ended mid-production
│   │   └── TrailingTokensError - tokens left after the program
│   └── CodeGenError - lowering and emission errors
│       └── UnsupportedNodeError - node kind with no handler
└── UnknownTargetError - target name not in the target table

Error Message Format
--------------------
Every compile error renders as a single diagnostic line naming the
stage that failed:

    return.c:1:25: parse error: unexpected token '}'

The offending source line, a caret and an optional hint are available
separately through CompileError.context():

    int main(void){return 2}
                            ^
    hint: expected ';'
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class SubCError(Exception):
    """
    Base exception for all subc errors.

        try:
            compile_c(source)
        except SubCError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for buffer input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Compile Errors
# =============================================================================

class CompileError(SubCError):
    """
    Base exception for errors raised by a pipeline stage.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text at the error location (optional)
    """

    # Stage name used in the diagnostic prefix
    stage = "compile"

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the single-line diagnostic: location, stage and message."""
        if self.location:
            return f"{self.location}: {self.stage} error: {self.message}"
        return f"{self.stage} error: {self.message}"

    def context(self) -> str:
        """
        Render the source line with a caret under the error column,
        followed by the hint when one is available.

        Returns an empty string when there is nothing to show.
        """
        parts = []

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Lexer Errors
# =============================================================================

class LexError(CompileError):
    """
    Error during lexical analysis.

    Examples:
        - Character that starts no token ('#', '+', '/')
        - Digit run running straight into a letter ('1a')
    """
    stage = "lex"


class InvalidCharacterError(LexError):
    """
    Character that matches no token class.

    The message carries both the character and its code so that
    unprintable bytes remain identifiable.
    """

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character {char!r} (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
        )


class MalformedTokenError(LexError):
    """
    Identifier or constant not followed by a word-boundary character.

    Example:
        return 1a;      // '1' is immediately followed by 'a'
    """

    def __init__(
        self,
        kind: str,
        text: str,
        following: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.kind = kind
        self.text = text
        self.following = following
        super().__init__(
            f"malformed {kind} {text!r}: followed by {following!r}",
            location=location,
            hint=f"separate the {kind} from {following!r} with whitespace or punctuation",
            source_line=source_line,
        )


class InvalidOctalConstantError(LexError):
    """
    Constant with a leading zero containing the digit 8 or 9.

    Example:
        return 09;      // leading zero makes this octal
    """

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            f"invalid digit in octal constant {text!r}",
            location=location,
            hint="a leading zero makes a constant octal (digits 0-7)",
            source_line=source_line,
        )


# =============================================================================
# Parser Errors
# =============================================================================

class ParseError(CompileError):
    """
    Error during syntactic analysis.

    Raised when no program can be derived from the token sequence, or
    when tokens remain after the program.
    """
    stage = "parse"


class UnexpectedTokenError(ParseError):
    """
    Token that does not fit any production reaching it.
    """

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token {found!r}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnexpectedEndOfInputError(ParseError):
    """
    Input ended before the program was complete.
    """

    def __init__(
        self,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        message = "unexpected end of input"
        if expected:
            message = f"{message}, expected {expected}"
        super().__init__(message, location=location, source_line=source_line)


class TrailingTokensError(ParseError):
    """
    Tokens left over after the single supported function.

    Example:
        int main(void){return 2;} int x;
    """

    def __init__(
        self,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        super().__init__(
            f"unexpected token {found!r} after end of program",
            location=location,
            hint="only a single function definition is supported",
            source_line=source_line,
        )


# =============================================================================
# Code Generation Errors
# =============================================================================

class CodeGenError(CompileError):
    """
    Error during lowering or emission.

    The parser only produces grammar-conformant trees, so these guard
    against trees built by hand or by future grammar additions.
    """
    stage = "codegen"


class UnsupportedNodeError(CodeGenError):
    """
    Node kind with no lowering or emission handler.
    """

    def __init__(self, node: object, phase: str):
        self.node = node
        self.phase = phase
        super().__init__(
            f"{phase} does not handle {type(node).__name__} nodes",
            location=getattr(node, "location", None),
        )


# =============================================================================
# Configuration Errors
# =============================================================================

class UnknownTargetError(SubCError):
    """
    Target name that is not in the target table.
    """

    def __init__(self, name: str, known: list[str]):
        self.name = name
        self.known = known
        choices = ", ".join(known)
        super().__init__(f"unknown target '{name}' (choose from {choices})")
