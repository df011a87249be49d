"""
subc Machine-Level AST
======================

This module defines the machine-level tree produced by lowering and
consumed by the emitter. It mirrors the source AST one level down: a
function holds an ordered tuple of instructions instead of a statement.

Node Hierarchy
--------------
AsmProgram
└── AsmFunction(name, instructions)
    └── Instruction = Mov | Ret
        └── Operand = Immediate | Register

Register Usage
--------------
| Register | Usage                                        |
|----------|----------------------------------------------|
| EAX      | 32-bit integer return value (System V AMD64) |

Darwin x86-64 follows the same convention, so RETURN_REGISTER does not
vary by target.
"""

from dataclasses import dataclass
from typing import Union

from subc.ast import ASTVisitor


# =============================================================================
# Operands
# =============================================================================

@dataclass(frozen=True)
class Immediate:
    """
    Immediate integer operand.

    Attributes:
        value: The integer value
    """
    value: int


@dataclass(frozen=True)
class Register:
    """
    Register operand.

    Attributes:
        name: Register name without the AT&T '%' sigil ("eax")
    """
    name: str


Operand = Union[Immediate, Register]

# Register holding a function's int result on return
RETURN_REGISTER = Register("eax")


# =============================================================================
# Instructions
# =============================================================================

@dataclass(frozen=True)
class Mov:
    """
    32-bit move.

    Attributes:
        source: Operand read
        destination: Operand written
    """
    source: Operand
    destination: Operand


@dataclass(frozen=True)
class Ret:
    """Return to the caller."""
    pass


Instruction = Union[Mov, Ret]


# =============================================================================
# Program Structure
# =============================================================================

@dataclass(frozen=True)
class AsmFunction:
    """
    Function at the machine level.

    Attributes:
        name: Function name, without any target symbol prefix
        instructions: Body in execution order
    """
    name: str
    instructions: tuple[Instruction, ...]


@dataclass(frozen=True)
class AsmProgram:
    """
    Root of the machine-level tree.

    Attributes:
        function: The single function
    """
    function: AsmFunction


# =============================================================================
# Machine AST Printer
# =============================================================================

class AsmPrinter(ASTVisitor):
    """
    Pretty printer for machine AST debugging.

    Output for ``int main(void) { return 2; }``:

        AsmProgram
          AsmFunction main
            Mov Imm(2) -> Reg(eax)
            Ret
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: AsmProgram) -> str:
        """Print the tree and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def visit_AsmProgram(self, node: AsmProgram):
        self._emit("AsmProgram")
        self.indent_level += 1
        self.visit(node.function)
        self.indent_level -= 1

    def visit_AsmFunction(self, node: AsmFunction):
        self._emit(f"AsmFunction {node.name}")
        self.indent_level += 1
        for instruction in node.instructions:
            self.visit(instruction)
        self.indent_level -= 1

    def visit_Mov(self, node: Mov):
        self._emit(f"Mov {self._operand_str(node.source)} -> {self._operand_str(node.destination)}")

    def visit_Ret(self, node: Ret):
        self._emit("Ret")

    def _operand_str(self, operand: Operand) -> str:
        if isinstance(operand, Immediate):
            return f"Imm({operand.value})"
        if isinstance(operand, Register):
            return f"Reg({operand.name})"
        return f"<{type(operand).__name__}>"
