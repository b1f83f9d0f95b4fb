"""
Quill Lexer Package

Implements the lexical analyzer (tokenizer) for the Quill language.
Tokens are produced on demand so the parser never holds more than one
unit of lookahead.

Key Features:
- Pull-model token source (next_token / line)
- Keywords, operators and literal decoding
- Malformed input surfaced as INVALID_TOKEN / UNEXPECTED_EOF tokens
- Source location tracking for diagnostics
"""

from .tokens import Token, TokenType, SourceLocation
from .lexer import Lexer, TokenStream, tokenize_string, tokenize_file, read_source
from .errors import Diagnostic, QuillError, LexerError

__all__ = [
    "Lexer",
    "TokenStream",
    "Token",
    "TokenType",
    "SourceLocation",
    "Diagnostic",
    "QuillError",
    "LexerError",
    "tokenize_string",
    "tokenize_file",
    "read_source",
]
