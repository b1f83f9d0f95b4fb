"""
Semantic error handling for Quill.

Covers the name-resolution failures detected while the parser maintains the
symbol table: declaring a name twice and using a name that was never declared.

"""

from typing import Optional

from ..lexer.tokens import SourceLocation
from ..lexer.errors import QuillError


class SemanticError(QuillError):
    """
    Exception raised when a program is syntactically valid but breaks a
    name-resolution rule.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        name: Optional[str] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None
    ):
        super().__init__(message, location, code=code, help_text=help_text)
        self.name = name


class DuplicateDeclarationError(SemanticError):
    """A name is declared while already present in the same scope."""


class UndeclaredNameError(SemanticError):
    """A name is used without a preceding declaration."""


# Semantic error codes for categorization
SEMANTIC_ERROR_CODES = {
    "S001": "Duplicate declaration",
    "S002": "Undeclared name",
}


def create_duplicate_declaration_error(name: str, location: SourceLocation,
                                       previous_line: Optional[int] = None) -> DuplicateDeclarationError:
    """Create an error for a name that is already declared."""
    help_text = f"'{name}' is already declared"
    if previous_line is not None:
        help_text += f" on line {previous_line}"

    return DuplicateDeclarationError(
        message=f"Duplicate declaration [{name}]",
        location=location,
        name=name,
        code="S001",
        help_text=help_text + "."
    )


def create_undeclared_name_error(name: str, location: SourceLocation) -> UndeclaredNameError:
    """Create an error for a use of a name that was never declared."""
    return UndeclaredNameError(
        message=f"Undeclared name [{name}]",
        location=location,
        name=name,
        code="S002",
        help_text=f"Declare '{name}' with 'var' or 'final var' before using it."
    )
