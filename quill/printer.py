"""
Printers for Quill syntax trees.

TreeDumper renders the structural notation used by ``quill dump``, e.g.
``Binary(+, Const(1), Binary(*, Const(2), Const(3)))``. SourcePrinter renders a
tree back to Quill source that parses to the same tree: binary operations are
fully parenthesized so precedence never has to be reconstructed.
"""

from typing import Dict, List

from .analyzer.symbol_table import Variable
from .parser.ast_nodes import (
    ASTNode, ASTVisitor, Expr, Command,
    Const, Binary, Unary, Function, VariableRef, Indexed,
    ListLiteral, SingleElement, SpreadElement, IfElement, ForElement,
    MapLiteral, MapEntry, Block, Assign, Print, Assert, If, While, DoWhile, For,
)

_ESCAPES = {
    '\n': '\\n',
    '\t': '\\t',
    '\r': '\\r',
    '\\': '\\\\',
    '"': '\\"',
}

# Operands that need no parentheses next to a unary operator
_ATOMS = (Const, VariableRef, Indexed, Function, ListLiteral, MapLiteral)


def quote(text: str) -> str:
    """Render a string value as a Quill text literal."""
    return '"' + ''.join(_ESCAPES.get(ch, ch) for ch in text) + '"'


def render_constant(value) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return quote(value)
    return str(value)


class TreeDumper(ASTVisitor):
    """Single-line structural rendering of a node and its children."""

    def dump(self, node: ASTNode) -> str:
        return self.visit(node)

    def _call(self, name: str, *parts) -> str:
        return f"{name}({', '.join(parts)})"

    # Expressions

    def visit_Const(self, node: Const) -> str:
        return self._call("Const", render_constant(node.value))

    def visit_Binary(self, node: Binary) -> str:
        return self._call("Binary", node.op.symbol, self.visit(node.left), self.visit(node.right))

    def visit_Unary(self, node: Unary) -> str:
        return self._call("Unary", node.op.value, self.visit(node.operand))

    def visit_Function(self, node: Function) -> str:
        return self._call("Function", node.op.value, self.visit(node.arg))

    def visit_VariableRef(self, node: VariableRef) -> str:
        return self._call("VariableRef", node.name)

    def visit_Indexed(self, node: Indexed) -> str:
        return self._call("Indexed", self.visit(node.base), self.visit(node.index))

    def visit_ListLiteral(self, node: ListLiteral) -> str:
        return self._call("List", *(self.visit(element) for element in node.elements))

    def visit_SingleElement(self, node: SingleElement) -> str:
        return self._call("Single", self.visit(node.expr))

    def visit_SpreadElement(self, node: SpreadElement) -> str:
        return self._call("Spread", self.visit(node.expr))

    def visit_IfElement(self, node: IfElement) -> str:
        parts = [self.visit(node.condition), self.visit(node.then_element)]
        if node.else_element is not None:
            parts.append(self.visit(node.else_element))
        return self._call("IfElement", *parts)

    def visit_ForElement(self, node: ForElement) -> str:
        return self._call("ForElement", node.variable.name,
                          self.visit(node.iterable), self.visit(node.element))

    def visit_MapLiteral(self, node: MapLiteral) -> str:
        return self._call("Map", *(self.visit(entry) for entry in node.entries))

    def visit_MapEntry(self, node: MapEntry) -> str:
        return self._call("Entry", self.visit(node.key), self.visit(node.value))

    # Commands

    def visit_Block(self, node: Block) -> str:
        commands = [self.visit(command) for command in node.commands]
        if node.is_declaration:
            declared = ', '.join(str(variable) for variable in node.declarations)
            return f"Block[{declared}]({', '.join(commands)})"
        return f"Block[{', '.join(commands)}]"

    def visit_Assign(self, node: Assign) -> str:
        if node.target is None:
            return self._call("Assign", self.visit(node.value))
        return self._call("Assign", self.visit(node.target), self.visit(node.value))

    def visit_Print(self, node: Print) -> str:
        if node.expr is None:
            return "Print()"
        return self._call("Print", self.visit(node.expr))

    def visit_Assert(self, node: Assert) -> str:
        parts = [self.visit(node.condition)]
        if node.message is not None:
            parts.append(self.visit(node.message))
        return self._call("Assert", *parts)

    def visit_If(self, node: If) -> str:
        parts = [self.visit(node.condition), self.visit(node.then_branch)]
        if node.else_branch is not None:
            parts.append(self.visit(node.else_branch))
        return self._call("If", *parts)

    def visit_While(self, node: While) -> str:
        return self._call("While", self.visit(node.condition), self.visit(node.body))

    def visit_DoWhile(self, node: DoWhile) -> str:
        return self._call("DoWhile", self.visit(node.body), self.visit(node.condition))

    def visit_For(self, node: For) -> str:
        return self._call("For", node.variable.name, self.visit(node.iterable), self.visit(node.body))


class SourcePrinter(ASTVisitor):
    """
    Renders a tree as Quill source.

    Statements go one per line, indented by ``indent`` spaces per nesting
    level. Bodies that are blocks are braced; single-command bodies stay on
    the line of their header.
    """

    def __init__(self, indent: int = 4):
        self.indent = indent
        self.level = 0

    def format(self, program: Block) -> str:
        """Render a top-level Block as a complete program."""
        if program.is_declaration:
            return self.visit(program) + "\n"
        lines = [self.visit(command) for command in program.commands]
        return "".join(line + "\n" for line in lines)

    def _expr(self, node: Expr) -> str:
        """Render an expression in a delimited position, dropping redundant outer parentheses."""
        text = self.visit(node)
        if isinstance(node, Binary):
            return text[1:-1]
        return text

    def _pad(self) -> str:
        return " " * (self.indent * self.level)

    def _body(self, body: Command) -> str:
        if isinstance(body, Block) and not body.is_declaration:
            if not body.commands:
                return "{}"
            self.level += 1
            try:
                lines = [self._pad() + self.visit(command) for command in body.commands]
            finally:
                self.level -= 1
            return "{\n" + "\n".join(lines) + "\n" + self._pad() + "}"
        return self.visit(body)

    # Commands

    def visit_Block(self, node: Block) -> str:
        if not node.is_declaration:
            return self._body(node)

        initializers: Dict[int, Expr] = {}
        for command in node.commands:
            if isinstance(command, Assign) and isinstance(command.target, VariableRef):
                initializers[id(command.target.variable)] = command.value

        first: Variable = node.declarations[0]
        prefix = "final var " if first.constant else "var "
        if first.nullable:
            prefix += "?"

        names: List[str] = []
        for variable in node.declarations:
            value = initializers.get(id(variable))
            if value is None:
                names.append(variable.name)
            else:
                names.append(f"{variable.name} = {self._expr(value)}")
        return prefix + ", ".join(names) + ";"

    def visit_Assign(self, node: Assign) -> str:
        value = self._expr(node.value)
        if node.target is not None:
            return f"{self.visit(node.target)} = {value};"
        # A leading '{' at statement level would not read back as a map
        if value.startswith("{"):
            value = f"({value})"
        return value + ";"

    def visit_Print(self, node: Print) -> str:
        if node.expr is None:
            return "print();"
        return f"print({self._expr(node.expr)});"

    def visit_Assert(self, node: Assert) -> str:
        if node.message is None:
            return f"assert({self._expr(node.condition)});"
        return f"assert({self._expr(node.condition)}, {self._expr(node.message)});"

    def visit_If(self, node: If) -> str:
        text = f"if ({self._expr(node.condition)}) {self._body(node.then_branch)}"
        if node.else_branch is not None:
            text += f" else {self._body(node.else_branch)}"
        return text

    def visit_While(self, node: While) -> str:
        return f"while ({self._expr(node.condition)}) {self._body(node.body)}"

    def visit_DoWhile(self, node: DoWhile) -> str:
        return f"do {self._body(node.body)} while ({self._expr(node.condition)});"

    def visit_For(self, node: For) -> str:
        return f"for ({node.variable.name} in {self._expr(node.iterable)}) {self._body(node.body)}"

    # Expressions

    def visit_Const(self, node: Const) -> str:
        return render_constant(node.value)

    def visit_Binary(self, node: Binary) -> str:
        return f"({self.visit(node.left)} {node.op.symbol} {self.visit(node.right)})"

    def visit_Unary(self, node: Unary) -> str:
        operand = self.visit(node.operand)
        if node.op.is_postfix:
            if not isinstance(node.operand, _ATOMS + (Binary,)):
                operand = f"({operand})"
            return operand + node.op.symbol

        inner = node.operand
        bare = isinstance(inner, _ATOMS + (Binary,)) or (
            isinstance(inner, Unary) and inner.op.is_postfix)
        if not bare:
            operand = f"({operand})"
        return node.op.symbol + operand

    def visit_Function(self, node: Function) -> str:
        return f"{node.op.value}({self._expr(node.arg)})"

    def visit_VariableRef(self, node: VariableRef) -> str:
        return node.name

    def visit_Indexed(self, node: Indexed) -> str:
        return f"{self.visit(node.base)}[{self._expr(node.index)}]"

    def visit_ListLiteral(self, node: ListLiteral) -> str:
        return "[" + ", ".join(self.visit(element) for element in node.elements) + "]"

    def visit_SingleElement(self, node: SingleElement) -> str:
        return self._expr(node.expr)

    def visit_SpreadElement(self, node: SpreadElement) -> str:
        return "..." + self._expr(node.expr)

    def visit_IfElement(self, node: IfElement) -> str:
        text = f"if ({self._expr(node.condition)}) {self.visit(node.then_element)}"
        if node.else_element is not None:
            text += f" else {self.visit(node.else_element)}"
        return text

    def visit_ForElement(self, node: ForElement) -> str:
        return f"for ({node.variable.name} in {self._expr(node.iterable)}) {self.visit(node.element)}"

    def visit_MapLiteral(self, node: MapLiteral) -> str:
        return "{" + ", ".join(self.visit(entry) for entry in node.entries) + "}"

    def visit_MapEntry(self, node: MapEntry) -> str:
        return f"{self._expr(node.key)}: {self._expr(node.value)}"


def dump(node: ASTNode) -> str:
    """Structural one-line rendering of a node."""
    return TreeDumper().dump(node)


def format_source(program: Block, indent: int = 4) -> str:
    """Render a parsed program back to Quill source."""
    return SourcePrinter(indent).format(program)
