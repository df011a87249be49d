"""
subc - Subset-of-C Compiler Front End
=====================================

This package translates a restricted subset of C into x86-64 assembly
text (AT&T syntax). It implements the front three stages of a compiler:

- A lexer (tokenizer) for the C subset
- A backtracking recursive descent parser producing a source AST
- Lowering to a machine-level AST and emission of assembly text

Pipeline
--------
    Preprocessed C -> Lexer -> Parser -> AST -> Lowering -> Machine AST
                   -> Emitter -> Assembly

Preprocessing happens before subc runs and assembling/linking after it;
subc never invokes either tool.

Usage
-----
>>> from subc import compile_c
>>> asm_output = compile_c('int main(void) { return 2; }')

Language Subset
---------------
Exactly one function, ``int <name>(void)``, whose body is a single
``return`` of a decimal integer constant.
"""

# =============================================================================
# Version Information
# =============================================================================

__version__ = "0.1.0"

# =============================================================================
# Public API Imports
# =============================================================================

from subc.compiler import (
    Compiler,
    CompilerOptions,
    CompilerResult,
    Stage,
    compile_c,
    compile_file,
)
from subc.errors import (
    SubCError,
    SourceLocation,
    CompileError,
    LexError,
    InvalidCharacterError,
    MalformedTokenError,
    InvalidOctalConstantError,
    ParseError,
    UnexpectedTokenError,
    UnexpectedEndOfInputError,
    TrailingTokensError,
    CodeGenError,
    UnsupportedNodeError,
    UnknownTargetError,
)
from subc.lexer import Lexer, Token, TokenType, lex
from subc.parser import Parser, ParserState, parse
from subc.codegen import CodeGenerator, lower
from subc.emitter import AssemblyEmitter, emit
from subc.targets import Target, TARGETS, get_target, host_target
from subc.ast import (
    ASTNode,
    ProgramNode,
    FunctionNode,
    ReturnStatement,
    ConstantExpression,
    Identifier,
    IntegerConstant,
    ASTPrinter,
)
from subc.asm_ast import (
    AsmProgram,
    AsmFunction,
    Mov,
    Ret,
    Immediate,
    Register,
    RETURN_REGISTER,
    AsmPrinter,
)

__all__ = [
    # Version
    "__version__",
    # Main API
    "Compiler",
    "CompilerOptions",
    "CompilerResult",
    "Stage",
    "compile_c",
    "compile_file",
    # Errors
    "SubCError",
    "SourceLocation",
    "CompileError",
    "LexError",
    "InvalidCharacterError",
    "MalformedTokenError",
    "InvalidOctalConstantError",
    "ParseError",
    "UnexpectedTokenError",
    "UnexpectedEndOfInputError",
    "TrailingTokensError",
    "CodeGenError",
    "UnsupportedNodeError",
    "UnknownTargetError",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "lex",
    # Parser
    "Parser",
    "ParserState",
    "parse",
    # Lowering and emission
    "CodeGenerator",
    "lower",
    "AssemblyEmitter",
    "emit",
    # Targets
    "Target",
    "TARGETS",
    "get_target",
    "host_target",
    # Source AST
    "ASTNode",
    "ProgramNode",
    "FunctionNode",
    "ReturnStatement",
    "ConstantExpression",
    "Identifier",
    "IntegerConstant",
    "ASTPrinter",
    # Machine AST
    "AsmProgram",
    "AsmFunction",
    "Mov",
    "Ret",
    "Immediate",
    "Register",
    "RETURN_REGISTER",
    "AsmPrinter",
]
