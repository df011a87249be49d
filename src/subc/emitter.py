"""
subc Assembly Emitter
=====================

This module renders the machine-level AST as x86-64 assembly text in
AT&T syntax, ready for the system assembler.

Generated Assembly Format
-------------------------
- Directives and instructions indented eight spaces
- Mnemonics padded to eight columns
- Immediates prefixed with '$', registers with '%'
- Global symbols carry the target's symbol prefix

Example output (linux target):

        .globl  main
    main:
        movl    $2, %eax
        ret

Each function ends with a blank line. Rendering is deterministic: the
same tree and target always give byte-identical text.

Usage
-----
>>> from subc.compiler import compile_c
>>> print(compile_c('int main(void) { return 2; }', target="darwin"))
        .globl  _main
_main:
        movl    $2, %eax
        ret
<BLANKLINE>
<BLANKLINE>
"""

from typing import Optional

from subc.ast import ASTVisitor
from subc.asm_ast import (
    AsmProgram,
    AsmFunction,
    Immediate,
    Register,
    Mov,
    Ret,
)
from subc.errors import UnsupportedNodeError
from subc.targets import Target, host_target


class AssemblyEmitter(ASTVisitor):
    """
    Renders a machine-level program as assembly text.

    Each visit method returns text; any node without a visit method is
    rejected with UnsupportedNodeError.

    Attributes:
        target: Conventions applied to symbols
    """

    def __init__(self, target: Optional[Target] = None):
        self.target = target or host_target()

    def emit(self, program: AsmProgram) -> str:
        """Render a whole program."""
        return self.visit(program)

    def generic_visit(self, node):
        raise UnsupportedNodeError(node, "emission")

    # =========================================================================
    # Structure
    # =========================================================================

    def visit_AsmProgram(self, node: AsmProgram) -> str:
        return self.visit(node.function)

    def visit_AsmFunction(self, node: AsmFunction) -> str:
        symbol = self.target.symbol(node.name)
        lines = [
            self._format_instruction(".globl", symbol),
            f"{symbol}:",
        ]
        lines.extend(self.visit(instruction) for instruction in node.instructions)
        return "\n".join(lines) + "\n\n"

    # =========================================================================
    # Instructions
    # =========================================================================

    def visit_Mov(self, node: Mov) -> str:
        operands = f"{self.visit(node.source)}, {self.visit(node.destination)}"
        return self._format_instruction("movl", operands)

    def visit_Ret(self, node: Ret) -> str:
        return self._format_instruction("ret")

    # =========================================================================
    # Operands
    # =========================================================================

    def visit_Immediate(self, node: Immediate) -> str:
        return f"${node.value}"

    def visit_Register(self, node: Register) -> str:
        return f"%{node.name}"

    def _format_instruction(self, mnemonic: str, operand: str = "") -> str:
        """Format an instruction or directive with optional operand."""
        if operand:
            return f"        {mnemonic:<8}{operand}"
        return f"        {mnemonic}"


# =============================================================================
# Convenience Functions
# =============================================================================

def emit(program: AsmProgram, target: Optional[Target] = None) -> str:
    """
    Render a machine-level program as assembly text.

    Args:
        program: The lowered program
        target: Symbol conventions to apply (host target if None)

    Raises:
        UnsupportedNodeError: If the tree contains an unknown node kind
    """
    return AssemblyEmitter(target).emit(program)
