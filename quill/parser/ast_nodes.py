"""
Abstract Syntax Tree node definitions for Quill.

Two closed families of nodes: commands (statements) and expressions. Every
node carries the source line of the token that introduced it and is frozen
after construction; child sequences are tuples. Variable references point at
the Variable records owned by the symbol table rather than at names, so the
evaluator never has to resolve a name again.
"""

from abc import ABC
from typing import Any, ClassVar, List, Optional, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum

from ..analyzer.symbol_table import Variable


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    # Commands
    BLOCK = "Block"
    ASSIGN = "Assign"
    PRINT = "Print"
    ASSERT = "Assert"
    IF = "If"
    WHILE = "While"
    DO_WHILE = "DoWhile"
    FOR = "For"

    # Expressions
    CONST = "Const"
    BINARY = "Binary"
    UNARY = "Unary"
    FUNCTION = "Function"
    VARIABLE_REF = "VariableRef"
    INDEXED = "Indexed"
    LIST_LITERAL = "List"
    MAP_LITERAL = "Map"

    # List elements and map entries
    SINGLE_ELEMENT = "Single"
    SPREAD_ELEMENT = "Spread"
    IF_ELEMENT = "IfElement"
    FOR_ELEMENT = "ForElement"
    MAP_ENTRY = "Entry"


class BinaryOperator(Enum):
    """Binary operators, valued by their source symbol."""
    AND = "&&"
    OR = "||"
    IF_NULL = "??"
    LOWER_THAN = "<"
    GREATER_THAN = ">"
    LOWER_EQUAL = "<="
    GREATER_EQUAL = ">="
    EQUAL = "=="
    NOT_EQUAL = "!="
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"

    @property
    def symbol(self) -> str:
        return self.value


class UnaryOperator(Enum):
    """Prefix and postfix unary operators."""
    NOT = "not"
    NEG = "neg"
    PRE_INC = "pre_inc"
    PRE_DEC = "pre_dec"
    POST_INC = "post_inc"
    POST_DEC = "post_dec"

    @property
    def symbol(self) -> str:
        return _UNARY_SYMBOLS[self]

    @property
    def is_postfix(self) -> bool:
        return self in (UnaryOperator.POST_INC, UnaryOperator.POST_DEC)


_UNARY_SYMBOLS = {
    UnaryOperator.NOT: "!",
    UnaryOperator.NEG: "-",
    UnaryOperator.PRE_INC: "++",
    UnaryOperator.PRE_DEC: "--",
    UnaryOperator.POST_INC: "++",
    UnaryOperator.POST_DEC: "--",
}


class FunctionOperator(Enum):
    """Built-in functions, valued by their keyword."""
    READ = "read"
    RANDOM = "random"
    LENGTH = "length"
    KEYS = "keys"
    VALUES = "values"
    TOBOOL = "tobool"
    TOINT = "toint"
    TOSTR = "tostr"


class ASTVisitor:
    """
    Visitor interface for traversing AST nodes.

    ``visit`` dispatches to ``visit_<ClassName>``.
    """

    def visit(self, node: 'ASTNode') -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", None)
        if method is None:
            raise NotImplementedError(f"{type(self).__name__} cannot visit {type(node).__name__}")
        return method(node)


@dataclass(frozen=True, eq=False)
class ASTNode(ABC):
    """Base class for all AST nodes."""
    node_type: ClassVar[ASTNodeType]

    line: int

    def accept(self, visitor: ASTVisitor) -> Any:
        """Accept a visitor (visitor pattern)."""
        return visitor.visit(self)

    def children(self) -> List['ASTNode']:
        """Get all child nodes."""
        return []

    def walk(self):
        """Yield this node and all of its descendants, depth first."""
        yield self
        for child in self.children():
            yield from child.walk()

    def __str__(self) -> str:
        return f"{self.node_type.value}@{self.line}"


# ============================================================================
# Expressions
# ============================================================================

@dataclass(frozen=True, eq=False)
class Expr(ASTNode):
    """Base class for expressions."""


@dataclass(frozen=True, eq=False)
class SetExpr(Expr):
    """Expressions that may appear on the left of '='."""


@dataclass(frozen=True, eq=False)
class Const(Expr):
    """Literal constant: None (null), bool, int or str."""
    node_type = ASTNodeType.CONST

    value: Union[None, bool, int, str]


@dataclass(frozen=True, eq=False)
class Binary(Expr):
    """Binary operation."""
    node_type = ASTNodeType.BINARY

    left: Expr
    op: BinaryOperator
    right: Expr

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]


@dataclass(frozen=True, eq=False)
class Unary(Expr):
    """Prefix or postfix unary operation."""
    node_type = ASTNodeType.UNARY

    operand: Expr
    op: UnaryOperator

    def children(self) -> List[ASTNode]:
        return [self.operand]


@dataclass(frozen=True, eq=False)
class Function(Expr):
    """Call of a built-in single-argument function."""
    node_type = ASTNodeType.FUNCTION

    op: FunctionOperator
    arg: Expr

    def children(self) -> List[ASTNode]:
        return [self.arg]


@dataclass(frozen=True, eq=False)
class VariableRef(SetExpr):
    """Use of a declared variable; shares the symbol table's record."""
    node_type = ASTNodeType.VARIABLE_REF

    variable: Variable

    @property
    def name(self) -> str:
        return self.variable.name


@dataclass(frozen=True, eq=False)
class Indexed(SetExpr):
    """Subscript access ``base[index]``."""
    node_type = ASTNodeType.INDEXED

    base: Expr
    index: Expr

    def children(self) -> List[ASTNode]:
        return [self.base, self.index]


@dataclass(frozen=True, eq=False)
class ListElement(ASTNode):
    """Base class for the clauses of a list literal."""


@dataclass(frozen=True, eq=False)
class SingleElement(ListElement):
    """A plain expression element."""
    node_type = ASTNodeType.SINGLE_ELEMENT

    expr: Expr

    def children(self) -> List[ASTNode]:
        return [self.expr]


@dataclass(frozen=True, eq=False)
class SpreadElement(ListElement):
    """``...expr``: splices the elements of another list."""
    node_type = ASTNodeType.SPREAD_ELEMENT

    expr: Expr

    def children(self) -> List[ASTNode]:
        return [self.expr]


@dataclass(frozen=True, eq=False)
class IfElement(ListElement):
    """``if (cond) element [else element]``."""
    node_type = ASTNodeType.IF_ELEMENT

    condition: Expr
    then_element: ListElement
    else_element: Optional[ListElement] = None

    def children(self) -> List[ASTNode]:
        children = [self.condition, self.then_element]
        if self.else_element:
            children.append(self.else_element)
        return children


@dataclass(frozen=True, eq=False)
class ForElement(ListElement):
    """``for (name in iterable) element``."""
    node_type = ASTNodeType.FOR_ELEMENT

    variable: Variable
    iterable: Expr
    element: ListElement

    def children(self) -> List[ASTNode]:
        return [self.iterable, self.element]


@dataclass(frozen=True, eq=False)
class ListLiteral(Expr):
    """List literal built from element clauses."""
    node_type = ASTNodeType.LIST_LITERAL

    elements: Tuple[ListElement, ...] = ()

    def children(self) -> List[ASTNode]:
        return list(self.elements)


@dataclass(frozen=True, eq=False)
class MapEntry(ASTNode):
    """One ``key: value`` pair of a map literal."""
    node_type = ASTNodeType.MAP_ENTRY

    key: Expr
    value: Expr

    def children(self) -> List[ASTNode]:
        return [self.key, self.value]


@dataclass(frozen=True, eq=False)
class MapLiteral(Expr):
    """Map literal."""
    node_type = ASTNodeType.MAP_LITERAL

    entries: Tuple[MapEntry, ...] = ()

    def children(self) -> List[ASTNode]:
        return list(self.entries)


# ============================================================================
# Commands
# ============================================================================

@dataclass(frozen=True, eq=False)
class Command(ASTNode):
    """Base class for commands."""


@dataclass(frozen=True, eq=False)
class Block(Command):
    """
    Ordered sequence of commands.

    A block produced by a declaration lists the declared variables in
    ``declarations``; ordinary blocks leave it empty.
    """
    node_type = ASTNodeType.BLOCK

    commands: Tuple[Command, ...] = ()
    declarations: Tuple[Variable, ...] = field(default=())

    @property
    def is_declaration(self) -> bool:
        return bool(self.declarations)

    def children(self) -> List[ASTNode]:
        return list(self.commands)


@dataclass(frozen=True, eq=False)
class Assign(Command):
    """
    Assignment, or a bare expression statement when ``target`` is None.
    """
    node_type = ASTNodeType.ASSIGN

    value: Expr
    target: Optional[SetExpr] = None

    def children(self) -> List[ASTNode]:
        if self.target is None:
            return [self.value]
        return [self.target, self.value]


@dataclass(frozen=True, eq=False)
class Print(Command):
    """Print statement; ``expr`` is None for ``print();``."""
    node_type = ASTNodeType.PRINT

    expr: Optional[Expr] = None

    def children(self) -> List[ASTNode]:
        return [self.expr] if self.expr is not None else []


@dataclass(frozen=True, eq=False)
class Assert(Command):
    """Assertion with an optional message expression."""
    node_type = ASTNodeType.ASSERT

    condition: Expr
    message: Optional[Expr] = None

    def children(self) -> List[ASTNode]:
        children = [self.condition]
        if self.message is not None:
            children.append(self.message)
        return children


@dataclass(frozen=True, eq=False)
class If(Command):
    """If statement with optional else branch."""
    node_type = ASTNodeType.IF

    condition: Expr
    then_branch: Command
    else_branch: Optional[Command] = None

    def children(self) -> List[ASTNode]:
        children = [self.condition, self.then_branch]
        if self.else_branch is not None:
            children.append(self.else_branch)
        return children


@dataclass(frozen=True, eq=False)
class While(Command):
    """While loop."""
    node_type = ASTNodeType.WHILE

    condition: Expr
    body: Command

    def children(self) -> List[ASTNode]:
        return [self.condition, self.body]


@dataclass(frozen=True, eq=False)
class DoWhile(Command):
    """Do-while loop; the body runs before the first test."""
    node_type = ASTNodeType.DO_WHILE

    body: Command
    condition: Expr

    def children(self) -> List[ASTNode]:
        return [self.body, self.condition]


@dataclass(frozen=True, eq=False)
class For(Command):
    """For-each loop over the elements of ``iterable``."""
    node_type = ASTNodeType.FOR

    variable: Variable
    iterable: Expr
    body: Command

    def children(self) -> List[ASTNode]:
        return [self.iterable, self.body]
