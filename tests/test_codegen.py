"""
Code Generation Test Suite
==========================

Tests for lowering (source AST -> machine AST) and emission (machine
AST -> assembly text).

Test Organization
-----------------
- TestLowering: machine AST shape
- TestEmitter: exact assembly text per target
- TestUnsupportedNodes: exhaustiveness guards
- TestAsmPrinter: debug dump of the machine AST
"""

import doctest
from dataclasses import dataclass

import pytest
import subc.codegen
import subc.compiler
import subc.emitter
from subc.ast import (
    ProgramNode,
    FunctionNode,
    Identifier,
    ReturnStatement,
    ConstantExpression,
    IntegerConstant,
)
from subc.asm_ast import (
    AsmProgram,
    AsmFunction,
    AsmPrinter,
    Immediate,
    Register,
    Mov,
    Ret,
    RETURN_REGISTER,
)
from subc.codegen import CodeGenerator, lower
from subc.emitter import AssemblyEmitter, emit
from subc.errors import CodeGenError, UnsupportedNodeError
from subc.targets import LINUX, DARWIN


def return_program(text: str, name: str = "main") -> ProgramNode:
    """Build the AST for 'int <name>(void) { return <text>; }' by hand."""
    return ProgramNode(
        FunctionNode(
            Identifier(name),
            ReturnStatement(ConstantExpression(IntegerConstant(text))),
        )
    )


# =============================================================================
# Lowering Tests
# =============================================================================

class TestLowering:
    """Tests for the source AST to machine AST transform."""

    def test_return_lowers_to_mov_and_ret(self):
        asm = lower(return_program("2"))
        assert asm == AsmProgram(
            AsmFunction(
                "main",
                (Mov(Immediate(2), Register("eax")), Ret()),
            )
        )

    def test_return_register_is_eax(self):
        assert RETURN_REGISTER == Register("eax")

    def test_function_name_copied(self):
        asm = lower(return_program("0", name="entry_point"))
        assert asm.function.name == "entry_point"

    def test_immediate_is_numeric(self):
        asm = lower(return_program("1000000"))
        mov = asm.function.instructions[0]
        assert mov.source == Immediate(1000000)

    def test_instructions_are_a_tuple(self):
        asm = lower(return_program("1"))
        assert isinstance(asm.function.instructions, tuple)

    def test_statement_lowers_to_list(self):
        """A single statement yields several instructions."""
        gen = CodeGenerator()
        stmt = ReturnStatement(ConstantExpression(IntegerConstant("5")))
        assert gen._lower_statement(stmt) == [Mov(Immediate(5), RETURN_REGISTER), Ret()]


# =============================================================================
# Emitter Tests
# =============================================================================

class TestEmitter:
    """Tests for exact assembly text."""

    def test_linux_output(self):
        text = emit(lower(return_program("2")), LINUX)
        assert text == (
            "        .globl  main\n"
            "main:\n"
            "        movl    $2, %eax\n"
            "        ret\n"
            "\n"
        )

    def test_darwin_prefixes_symbols(self):
        text = emit(lower(return_program("2")), DARWIN)
        assert text == (
            "        .globl  _main\n"
            "_main:\n"
            "        movl    $2, %eax\n"
            "        ret\n"
            "\n"
        )

    def test_prefix_applied_to_any_name(self):
        text = emit(lower(return_program("3", name="answer")), DARWIN)
        assert ".globl  _answer" in text
        assert "_answer:" in text

    @pytest.mark.parametrize("value", ["0", "1", "42", "1000000"])
    def test_immediate_text_matches_literal(self, value):
        text = emit(lower(return_program(value)), LINUX)
        assert f"movl    ${value}, %eax" in text

    def test_mov_precedes_ret(self):
        lines = emit(lower(return_program("7")), LINUX).splitlines()
        assert lines.index("        movl    $7, %eax") < lines.index("        ret")

    def test_emitter_renders_operands(self):
        emitter = AssemblyEmitter(LINUX)
        assert emitter.visit(Immediate(9)) == "$9"
        assert emitter.visit(Register("eax")) == "%eax"

    def test_default_target_is_host(self):
        emitter = AssemblyEmitter()
        assert emitter.target in (LINUX, DARWIN)

    def test_deterministic(self):
        asm = lower(return_program("2"))
        assert emit(asm, LINUX) == emit(asm, LINUX)

    @pytest.mark.parametrize("module", [subc.emitter, subc.codegen, subc.compiler])
    def test_docstring_examples(self, module):
        """Usage examples in the module docs match real output."""
        failures, tried = doctest.testmod(module)
        assert tried > 0
        assert failures == 0


# =============================================================================
# Unsupported Node Tests
# =============================================================================

@dataclass(frozen=True)
class Nop:
    """Instruction the emitter does not know about."""
    pass


@dataclass(frozen=True)
class IfStatement:
    """Statement the lowering does not know about."""
    pass


class TestUnsupportedNodes:
    """Unknown node kinds fail loudly instead of producing output."""

    def test_lowering_rejects_unknown_statement(self):
        program = ProgramNode(FunctionNode(Identifier("main"), IfStatement()))
        with pytest.raises(UnsupportedNodeError) as exc_info:
            lower(program)
        assert "IfStatement" in str(exc_info.value)
        assert "codegen error" in str(exc_info.value)

    def test_lowering_rejects_non_program(self):
        with pytest.raises(CodeGenError):
            lower(Identifier("main"))

    def test_emitter_rejects_unknown_instruction(self):
        program = AsmProgram(AsmFunction("main", (Nop(),)))
        with pytest.raises(UnsupportedNodeError) as exc_info:
            emit(program, LINUX)
        assert exc_info.value.phase == "emission"


# =============================================================================
# Machine AST Printer Tests
# =============================================================================

class TestAsmPrinter:

    def test_print_program(self):
        asm = lower(return_program("2"))
        assert AsmPrinter().print(asm) == (
            "AsmProgram\n"
            "  AsmFunction main\n"
            "    Mov Imm(2) -> Reg(eax)\n"
            "    Ret"
        )
