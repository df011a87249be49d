"""
subc Compiler Main Module
=========================

This module provides the main compiler interface. It orchestrates the
complete compilation process:

    Source -> Lex -> Parse -> Lower -> Emit -> Assembly

Usage
-----
Command line:
    $ subcc return_2.c -o return_2.s

Programmatic:
    >>> from subc import compile_c
    >>> asm = compile_c('int main(void) { return 2; }', target="linux")

The input must already be preprocessed, and the output is meant for the
system assembler; neither tool is run from here.

Compilation Pipeline
--------------------
1. **Lexical Analysis**: Convert the source buffer to tokens
2. **Parsing**: Build the source AST
3. **Lowering**: Build the machine AST
4. **Emission**: Render assembly text

Each stage runs to completion before the next starts. The first error
aborts the compilation; nothing is written unless every stage succeeds.

Configuration
-------------
CompilerOptions can be built directly or from environment variables
(all optional):

    SUBC_TARGET   target name (linux, darwin); host target if unset
    SUBC_DEBUG    "1", "true" or "yes" to enable debug dumps
"""

import logging
import os
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Optional

from subc.asm_ast import AsmProgram, AsmPrinter
from subc.ast import ProgramNode, ASTPrinter
from subc.codegen import lower
from subc.emitter import emit
from subc.lexer import Token, lex
from subc.parser import parse
from subc.targets import Target, get_target, host_target

logger = logging.getLogger(__name__)


class Stage(IntEnum):
    """Pipeline stages, in execution order."""
    LEX = 1
    PARSE = 2
    CODEGEN = 3
    EMIT = 4


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        target: Target name (linux, darwin). None means the host target.
        stop_after: Last stage to run. Anything before EMIT produces no
                    assembly text.
        debug: Log token, AST and machine AST dumps at DEBUG level
    """
    target: Optional[str] = None
    stop_after: Stage = Stage.EMIT
    debug: bool = False

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Environment variables (all optional):
            SUBC_TARGET: target name
            SUBC_DEBUG: enable debug dumps ("1", "true", "yes")
        """
        debug = os.environ.get("SUBC_DEBUG", "").lower() in ("1", "true", "yes")
        return cls(target=os.environ.get("SUBC_TARGET") or None, debug=debug)

    def resolve_target(self) -> Target:
        """
        Return the Target these options select.

        Raises:
            UnknownTargetError: If target names no known target
        """
        if self.target is None:
            return host_target()
        return get_target(self.target)


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        stage: Last stage that completed
        stop_after: Stage the compilation was asked to stop after
        tokens: Tokens from the lexer
        ast: Source AST (if parsing ran)
        asm: Machine AST (if lowering ran)
        assembly: Generated assembly text (if emission ran)
        target: Target the assembly was emitted for
    """
    filename: str = ""
    stage: Optional[Stage] = None
    stop_after: Stage = Stage.EMIT
    tokens: tuple[Token, ...] = field(default_factory=tuple)
    ast: Optional[ProgramNode] = None
    asm: Optional[AsmProgram] = None
    assembly: str = ""
    target: Optional[Target] = None

    @property
    def success(self) -> bool:
        """True when every requested stage has completed."""
        return self.stage == self.stop_after


class Compiler:
    """
    Compiler driver for the subc language subset.

    Example:
        compiler = Compiler(CompilerOptions(target="linux"))
        result = compiler.compile_source(b"int main(void) { return 2; }")
        print(result.assembly)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(
        self, source: bytes | str, filename: str = "<input>"
    ) -> CompilerResult:
        """
        Compile a source buffer, stopping after options.stop_after.

        Args:
            source: Preprocessed C source (bytes or text)
            filename: Source filename for error messages

        Returns:
            CompilerResult holding every stage's output up to the stop

        Raises:
            CompileError: From whichever stage fails first
            UnknownTargetError: If the configured target is unknown
        """
        stop_after = self.options.stop_after
        target = self.options.resolve_target()
        result = CompilerResult(
            filename=filename, stop_after=stop_after, target=target
        )

        # Stage 1: Lexical analysis
        result.tokens = lex(source, filename)
        result.stage = Stage.LEX
        if self.options.debug:
            self._dump("tokens", "\n".join(repr(t) for t in result.tokens))
        if stop_after == Stage.LEX:
            return result

        # Stage 2: Parsing
        result.ast = parse(result.tokens, filename, self._source_lines(source))
        result.stage = Stage.PARSE
        if self.options.debug:
            self._dump("AST", ASTPrinter().print(result.ast))
        if stop_after == Stage.PARSE:
            return result

        # Stage 3: Lowering
        result.asm = lower(result.ast)
        result.stage = Stage.CODEGEN
        if self.options.debug:
            self._dump("machine AST", AsmPrinter().print(result.asm))
        if stop_after == Stage.CODEGEN:
            return result

        # Stage 4: Emission
        result.assembly = emit(result.asm, target)
        result.stage = Stage.EMIT
        logger.debug(f"Emitted {len(result.assembly)} bytes of {target.triple} assembly")
        return result

    def compile_file(self, filepath: str | Path) -> CompilerResult:
        """
        Compile a source file.

        Raises:
            CompileError: If compilation fails
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")
        return self.compile_source(path.read_bytes(), str(filepath))

    def _source_lines(self, source: bytes | str) -> list[str]:
        if isinstance(source, (bytes, bytearray)):
            source = bytes(source).decode("latin-1")
        return source.splitlines()

    def _dump(self, title: str, text: str) -> None:
        logger.debug(f"--- {title} ---\n{text}")


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_c(
    source: bytes | str,
    filename: str = "<input>",
    target: Optional[str] = None,
) -> str:
    """
    Compile C source to x86-64 assembly text.

    This is the primary high-level interface.

    Args:
        source: Preprocessed C source
        filename: Source filename for error messages
        target: Target name (host target if None)

    Returns:
        Generated assembly text

    Raises:
        CompileError: If compilation fails

    Example:
        >>> print(compile_c('int main(void) { return 42; }', target="linux"))
                .globl  main
        main:
                movl    $42, %eax
                ret
        <BLANKLINE>
        <BLANKLINE>
    """
    compiler = Compiler(CompilerOptions(target=target))
    return compiler.compile_source(source, filename).assembly


def compile_file(
    filepath: str | Path,
    output_path: Optional[str | Path] = None,
    target: Optional[str] = None,
) -> str:
    """
    Compile a C source file to assembly.

    The output file, if requested, is written only after every stage has
    succeeded.

    Args:
        filepath: Path to the preprocessed C source
        output_path: Optional path to write the assembly to
        target: Target name (host target if None)

    Returns:
        Generated assembly text

    Raises:
        CompileError: If compilation fails
        FileNotFoundError: If source file not found
    """
    compiler = Compiler(CompilerOptions(target=target))
    result = compiler.compile_file(filepath)

    if output_path:
        Path(output_path).write_text(result.assembly, encoding="utf-8")

    return result.assembly
