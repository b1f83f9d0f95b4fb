"""
Quill Analyzer Package

Name resolution support used during parsing:
- Symbol table with flat or lexical scoping
- Variable records shared by every use site
- Duplicate-declaration and undeclared-name diagnostics
"""

from .symbol_table import SymbolTable, Variable, VariableKind, Scope, ScopeKind
from .errors import SemanticError, DuplicateDeclarationError, UndeclaredNameError

__all__ = [
    # Symbol management
    "SymbolTable", "Variable", "VariableKind", "Scope", "ScopeKind",

    # Error handling
    "SemanticError", "DuplicateDeclarationError", "UndeclaredNameError",
]
