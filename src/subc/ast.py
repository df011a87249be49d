"""
subc Abstract Syntax Tree (AST) Definitions
===========================================

This module defines the source-level AST produced by the parser, plus the
visitor base class and the debug printer shared by both tree levels.

Node Hierarchy
--------------
ProgramNode - root node, exactly one function
└── FunctionNode - int <name>(void) { <statement> }
    ├── Identifier - function name
    └── ReturnStatement - return <expression>;
        └── ConstantExpression - wraps an integer constant
            └── IntegerConstant - decimal literal text

Design Notes
------------
- All nodes are frozen dataclasses: pure data, no behaviour
- The tree is a strict chain; nodes own their children exclusively
- Each node stores its source location for error reporting, excluded
  from equality so trees built by hand compare equal to parsed ones
- Rendering lives in visitors (ASTPrinter here, the emitter elsewhere)
"""

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Optional

from subc.errors import SourceLocation


# =============================================================================
# AST Node Base Class
# =============================================================================

class ASTNode:
    """
    Base class for all source AST nodes.

    Subclasses are frozen dataclasses whose last field is
    ``location: Optional[SourceLocation]``.
    """

    def __repr__(self) -> str:
        location = getattr(self, "location", None)
        if location is None:
            return self.__class__.__name__
        return f"{self.__class__.__name__}@{location.line}:{location.column}"


# =============================================================================
# Leaf Nodes
# =============================================================================

@dataclass(frozen=True, repr=False)
class Identifier(ASTNode):
    """
    Name of a declared entity.

    Attributes:
        name: The identifier text
    """
    name: str
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True, repr=False)
class IntegerConstant(ASTNode):
    """
    Integer literal.

    The literal text is kept as written; the numeric value is derived.
    As in C, a leading zero makes the literal octal ("010" is 8). The
    lexer rejects octal literals containing 8 or 9.

    Attributes:
        text: Digit run from the source
    """
    text: str
    location: Optional[SourceLocation] = field(default=None, compare=False)

    @property
    def value(self) -> int:
        """Return the numeric value of the literal."""
        if len(self.text) > 1 and self.text.startswith("0"):
            return int(self.text, 8)
        return int(self.text, 10)


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True, repr=False)
class ConstantExpression(ASTNode):
    """
    Expression consisting of a single integer constant.

    Attributes:
        constant: The wrapped literal
    """
    constant: IntegerConstant
    location: Optional[SourceLocation] = field(default=None, compare=False)


# Every expression form the grammar can produce
Expression = ConstantExpression


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(frozen=True, repr=False)
class ReturnStatement(ASTNode):
    """
    Return statement.

    Attributes:
        expression: The returned value
    """
    expression: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False)


# Every statement form the grammar can produce
Statement = ReturnStatement


# =============================================================================
# Declaration and Program Nodes
# =============================================================================

@dataclass(frozen=True, repr=False)
class FunctionNode(ASTNode):
    """
    Function definition.

    Only ``int <name>(void)`` is accepted, so the return type and
    parameter list are fixed markers rather than parsed types.

    Attributes:
        name: Function name
        body: The single body statement
        return_type: Always "int"
        parameters: Always "void"
    """
    name: Identifier
    body: Statement
    return_type: str = "int"
    parameters: str = "void"
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True, repr=False)
class ProgramNode(ASTNode):
    """
    Root node of the AST.

    Attributes:
        function: The single function definition
    """
    function: FunctionNode
    location: Optional[SourceLocation] = field(default=None, compare=False)


# =============================================================================
# Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for tree visitors.

    Dispatches on the node's class name, so the same base serves the
    source AST here and the machine AST in subc.asm_ast.

    Usage:
        class MyVisitor(ASTVisitor):
            def visit_FunctionNode(self, node):
                # Handle function definitions
                pass

        visitor = MyVisitor()
        visitor.visit(program)
    """

    def visit(self, node: Any) -> Any:
        """
        Visit a node by dispatching to the appropriate method.

        Args:
            node: The tree node to visit

        Returns:
            The result of the visit method (varies by node type)
        """
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: Any) -> None:
        """
        Default visit method for unhandled node types.

        Visits all children of the node.
        """
        if not is_dataclass(node):
            return
        for node_field in fields(node):
            value = getattr(node, node_field.name)
            if isinstance(value, (list, tuple)):
                for item in value:
                    if is_dataclass(item):
                        self.visit(item)
            elif is_dataclass(value) and not isinstance(value, SourceLocation):
                self.visit(value)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(ast))

    Output for ``int main(void) { return 2; }``:

        Program
          Function int main(void)
            Return
              Constant 2
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        """Emit a line with current indentation."""
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _indent(self) -> None:
        self.indent_level += 1

    def _dedent(self) -> None:
        self.indent_level = max(0, self.indent_level - 1)

    def visit_ProgramNode(self, node: ProgramNode):
        self._emit("Program")
        self._indent()
        self.visit(node.function)
        self._dedent()

    def visit_FunctionNode(self, node: FunctionNode):
        self._emit(f"Function {node.return_type} {node.name.name}({node.parameters})")
        self._indent()
        self.visit(node.body)
        self._dedent()

    def visit_ReturnStatement(self, node: ReturnStatement):
        self._emit("Return")
        self._indent()
        self.visit(node.expression)
        self._dedent()

    def visit_ConstantExpression(self, node: ConstantExpression):
        self._emit(f"Constant {node.constant.text}")
