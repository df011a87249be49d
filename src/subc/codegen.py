"""
subc Code Generator (Lowering)
==============================

This module lowers the source AST into the machine-level AST defined in
subc.asm_ast. It is a depth-first transform:

    ProgramNode   -> AsmProgram
    FunctionNode  -> AsmFunction (name copied, body lowered to a list)
    ReturnStatement(ConstantExpression(v))
                  -> [Mov(Immediate(v), RETURN_REGISTER), Ret()]

A single statement may lower to several instructions, so statements go
through ``_lower_statement`` which always returns a list. Expressions
lower to an operand.

Usage
-----
>>> from subc.lexer import lex
>>> from subc.parser import parse
>>> from subc.codegen import lower
>>> lower(parse(lex(b'int main(void) { return 2; }')))
AsmProgram(function=AsmFunction(name='main', instructions=(Mov(source=Immediate(value=2), destination=Register(name='eax')), Ret())))
"""

import logging

from subc.ast import (
    ProgramNode,
    FunctionNode,
    ReturnStatement,
    ConstantExpression,
    Statement,
    Expression,
)
from subc.asm_ast import (
    AsmProgram,
    AsmFunction,
    Instruction,
    Operand,
    Immediate,
    Mov,
    Ret,
    RETURN_REGISTER,
)
from subc.errors import UnsupportedNodeError

logger = logging.getLogger(__name__)


class CodeGenerator:
    """
    Lowers a source AST to the machine AST.

    Every ``_lower_*`` method ends with an UnsupportedNodeError branch
    covering node kinds the grammar cannot currently produce.
    """

    def generate(self, program: ProgramNode) -> AsmProgram:
        """
        Lower a whole program.

        Args:
            program: The root AST node

        Returns:
            The machine-level program

        Raises:
            UnsupportedNodeError: If the tree contains an unknown node kind
        """
        if not isinstance(program, ProgramNode):
            raise UnsupportedNodeError(program, "lowering")
        return AsmProgram(self._lower_function(program.function))

    def _lower_function(self, func: FunctionNode) -> AsmFunction:
        if not isinstance(func, FunctionNode):
            raise UnsupportedNodeError(func, "lowering")

        instructions = self._lower_statement(func.body)
        logger.debug(f"Lowered function '{func.name.name}': {len(instructions)} instructions")
        return AsmFunction(func.name.name, tuple(instructions))

    def _lower_statement(self, stmt: Statement) -> list[Instruction]:
        """Lower one statement to its instruction sequence."""
        if isinstance(stmt, ReturnStatement):
            value = self._lower_expression(stmt.expression)
            return [Mov(value, RETURN_REGISTER), Ret()]

        raise UnsupportedNodeError(stmt, "lowering")

    def _lower_expression(self, expr: Expression) -> Operand:
        """Lower an expression to the operand holding its value."""
        if isinstance(expr, ConstantExpression):
            return Immediate(expr.constant.value)

        raise UnsupportedNodeError(expr, "lowering")


# =============================================================================
# Convenience Functions
# =============================================================================

def lower(program: ProgramNode) -> AsmProgram:
    """
    Lower a source AST to the machine AST.

    Raises:
        UnsupportedNodeError: If the tree contains an unknown node kind
    """
    return CodeGenerator().generate(program)
