"""
Quill Language Front End

A recursive descent parser for Quill, a small dynamically typed scripting
language with nullable variables, lists, maps and list comprehensions.

Architecture:
    quill/
    ├── lexer/           # Tokenization and lexical analysis
    ├── analyzer/        # Symbol table and name-resolution errors
    ├── parser/          # Syntax analysis and AST generation
    ├── config.py        # Parser configuration
    ├── printer.py       # Tree dump and source re-rendering
    └── cli.py           # `quill` command line

License: MIT
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config import ParserConfiguration, ScopeMode
from .lexer import Lexer, TokenStream, QuillError
from .parser import Parser, parse_string, parse_file
from .analyzer import SymbolTable, Variable

__all__ = [
    # Core classes
    "Lexer",
    "TokenStream",
    "Parser",
    "SymbolTable",
    "Variable",
    "ParserConfiguration",
    "ScopeMode",
    "QuillError",

    # Convenience functions
    "parse_string",
    "parse_file",

    # Version info
    "__version__",
]
