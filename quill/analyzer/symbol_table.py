"""
Symbol table and scope management for Quill.

The parser declares every variable here and resolves every name use against
it, so each VariableRef in the tree points at the one Variable record owned by
the table. Two modes are supported:

- FLAT: a single program-wide table. A name declared anywhere, including a
  loop variable, stays visible (and blocks redeclaration) for the rest of the
  program.
- LEXICAL: a stack of frames. Bodies, for-each loops and comprehension
  elements open frames; redeclaration is only rejected within one frame and
  lookups walk outward.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional
from dataclasses import dataclass, field
from enum import Enum

from ..config import ScopeMode
from ..lexer.tokens import SourceLocation
from .errors import create_duplicate_declaration_error, create_undeclared_name_error

logger = logging.getLogger(__name__)


class VariableKind(Enum):
    """Nullability of a variable."""
    SAFE = "safe"        # never holds null
    UNSAFE = "unsafe"    # declared with '?', may hold null


@dataclass(eq=False)
class Variable:
    """
    A declared variable.

    ``value`` is the storage slot written by the evaluator; the parser leaves
    it empty. Equality is identity: two declarations of the same name are
    different variables.
    """
    name: str
    line: int
    constant: bool = False
    nullable: bool = False
    value: Optional[Any] = None

    @property
    def kind(self) -> VariableKind:
        return VariableKind.UNSAFE if self.nullable else VariableKind.SAFE

    def __str__(self) -> str:
        prefix = "final " if self.constant else ""
        marker = "?" if self.nullable else ""
        return f"{prefix}var {marker}{self.name}"

    def __repr__(self) -> str:
        return (f"Variable({self.name!r}, line={self.line}, constant={self.constant}, "
                f"kind={self.kind.value})")


class ScopeKind(Enum):
    """Types of scopes."""
    GLOBAL = "global"
    BLOCK = "block"
    LOOP = "loop"
    COMPREHENSION = "comprehension"


@dataclass
class Scope:
    """Represents one frame of declarations."""
    kind: ScopeKind
    variables: Dict[str, Variable] = field(default_factory=dict)
    parent: Optional['Scope'] = None

    @property
    def depth(self) -> int:
        return 0 if self.parent is None else self.parent.depth + 1

    def lookup_local(self, name: str) -> Optional[Variable]:
        """Look up a name only in this frame."""
        return self.variables.get(name)

    def lookup(self, name: str) -> Optional[Variable]:
        """Look up a name in this frame and then in enclosing frames."""
        scope = self
        while scope is not None:
            if name in scope.variables:
                return scope.variables[name]
            scope = scope.parent
        return None

    def __str__(self) -> str:
        return f"Scope({self.kind.value}, {len(self.variables)} variables)"


class SymbolTable:
    """
    Maps identifier text to Variable records for the lifetime of one parse.
    """

    def __init__(self, mode: ScopeMode = ScopeMode.FLAT, filename: str = "<string>"):
        self.mode = mode
        self.filename = filename
        self.global_scope = Scope(ScopeKind.GLOBAL)
        self.current_scope = self.global_scope
        self._declared: List[Variable] = []

    def declare(self, name: str, constant: bool = False, nullable: bool = False,
                line: int = 0, location: Optional[SourceLocation] = None) -> Variable:
        """
        Declare ``name`` in the current scope and return its new Variable.

        Raises:
            DuplicateDeclarationError: if the name already exists in this scope
        """
        location = location or self._location(line)
        existing = self.current_scope.lookup_local(name)
        if existing is not None:
            raise create_duplicate_declaration_error(name, location, previous_line=existing.line)

        variable = Variable(name, line, constant=constant, nullable=nullable)
        self.current_scope.variables[name] = variable
        self._declared.append(variable)
        logger.debug("declared %r at line %d (depth %d)", variable, line, self.current_scope.depth)
        return variable

    def resolve(self, name: str, line: int = 0,
                location: Optional[SourceLocation] = None) -> Variable:
        """
        Return the Variable that ``name`` refers to at this point.

        Raises:
            UndeclaredNameError: if no visible scope declares the name
        """
        variable = self.current_scope.lookup(name)
        if variable is None:
            raise create_undeclared_name_error(name, location or self._location(line))
        return variable

    def lookup(self, name: str) -> Optional[Variable]:
        """Resolve without raising."""
        return self.current_scope.lookup(name)

    def enter_scope(self, kind: ScopeKind) -> Scope:
        """Open a new frame; in flat mode the single table stays current."""
        if self.mode == ScopeMode.LEXICAL:
            self.current_scope = Scope(kind, parent=self.current_scope)
            logger.debug("entered %s", self.current_scope)
        return self.current_scope

    def exit_scope(self) -> Optional[Scope]:
        """Close the current frame and return it (None in flat mode)."""
        if self.mode != ScopeMode.LEXICAL or self.current_scope.parent is None:
            return None
        old_scope = self.current_scope
        self.current_scope = old_scope.parent
        logger.debug("left %s", old_scope)
        return old_scope

    @contextmanager
    def scope(self, kind: ScopeKind) -> Iterator[Scope]:
        """Context manager pairing enter_scope with exit_scope."""
        entered = self.enter_scope(kind)
        try:
            yield entered
        finally:
            self.exit_scope()

    @property
    def declared(self) -> List[Variable]:
        """Every variable declared so far, in declaration order."""
        return list(self._declared)

    def _location(self, line: int) -> SourceLocation:
        return SourceLocation(self.filename, line, 1, 0)

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def __len__(self) -> int:
        return len(self._declared)

    def __str__(self) -> str:
        return f"SymbolTable({self.mode.value}, current: {self.current_scope})"
