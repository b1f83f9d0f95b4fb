"""
Token definitions for the Quill lexer.

This module defines all token types supported by Quill, including:
- Keywords (declarations, statements and built-in functions)
- Operators and punctuation
- Literals (numbers, text, names)
- Special tokens reported to the parser for malformed input

"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any


class TokenType(Enum):
    """
    Enumeration of all token types in Quill.

    Organized by category for clarity and maintainability.
    """

    # ========================================================================
    # Special Tokens
    # ========================================================================
    INVALID_TOKEN = auto()          # Unrecognized character
    UNEXPECTED_EOF = auto()         # Input ended inside a literal or comment
    END_OF_FILE = auto()            # End of input

    # ========================================================================
    # Keywords
    # ========================================================================

    # Declarations
    FINAL = auto()                  # final
    VAR = auto()                    # var

    # Statements
    PRINT = auto()                  # print
    ASSERT = auto()                 # assert
    IF = auto()                     # if
    ELSE = auto()                   # else
    WHILE = auto()                  # while
    DO = auto()                     # do
    FOR = auto()                    # for
    IN = auto()                     # in

    # Constants
    NULL = auto()                   # null
    FALSE = auto()                  # false
    TRUE = auto()                   # true

    # Built-in functions
    READ = auto()                   # read
    RANDOM = auto()                 # random
    LENGTH = auto()                 # length
    KEYS = auto()                   # keys
    VALUES = auto()                 # values
    TOBOOL = auto()                 # tobool
    TOINT = auto()                  # toint
    TOSTR = auto()                  # tostr

    # ========================================================================
    # Operators
    # ========================================================================
    NULLABLE = auto()               # ?
    IF_NULL = auto()                # ??
    SPREAD = auto()                 # ...
    ASSIGN = auto()                 # =

    # Logical
    AND = auto()                    # &&
    OR = auto()                     # ||
    NOT = auto()                    # !

    # Relational
    EQUAL = auto()                  # ==
    NOT_EQUAL = auto()              # !=
    LOWER_THAN = auto()             # <
    GREATER_THAN = auto()           # >
    LOWER_EQUAL = auto()            # <=
    GREATER_EQUAL = auto()          # >=

    # Arithmetic
    ADD = auto()                    # +
    SUB = auto()                    # -
    MUL = auto()                    # *
    DIV = auto()                    # /
    MOD = auto()                    # %
    INC = auto()                    # ++
    DEC = auto()                    # --

    # ========================================================================
    # Punctuation and Delimiters
    # ========================================================================
    OPEN_PAR = auto()               # (
    CLOSE_PAR = auto()              # )
    OPEN_BRA = auto()               # [
    CLOSE_BRA = auto()              # ]
    OPEN_CUR = auto()               # {
    CLOSE_CUR = auto()              # }
    SEMICOLON = auto()              # ;
    COMMA = auto()                  # ,
    COLON = auto()                  # :

    # ========================================================================
    # Literals
    # ========================================================================
    NAME = auto()                   # identifiers
    NUMBER = auto()                 # 42
    TEXT = auto()                   # "hello"


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Used for error reporting and for the line numbers carried by AST nodes.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of file

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical unit in the Quill language.

    Contains the token type, lexeme (raw text), decoded value for
    literals, and the source location.
    """
    type: TokenType
    lexeme: str                     # Raw text from source
    value: Any                      # Decoded value (int for NUMBER, str for TEXT)
    location: SourceLocation

    @property
    def line(self) -> int:
        return self.location.line

    def __str__(self) -> str:
        if self.value is not None and self.value != self.lexeme:
            return f"{self.type.name}({self.lexeme!r} -> {self.value!r})"
        return f"{self.type.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return (f"Token({self.type.name}, {self.lexeme!r}, "
                f"{self.value!r}, {self.location!r})")

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a reserved word."""
        return self.lexeme in KEYWORDS

    @property
    def is_error(self) -> bool:
        """Check if the lexer reported this token as malformed."""
        return self.type in (TokenType.INVALID_TOKEN, TokenType.UNEXPECTED_EOF)


# Reserved words; everything else matching the identifier pattern is a NAME
KEYWORDS = {
    "final": TokenType.FINAL,
    "var": TokenType.VAR,
    "print": TokenType.PRINT,
    "assert": TokenType.ASSERT,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "do": TokenType.DO,
    "for": TokenType.FOR,
    "in": TokenType.IN,
    "null": TokenType.NULL,
    "false": TokenType.FALSE,
    "true": TokenType.TRUE,
    "read": TokenType.READ,
    "random": TokenType.RANDOM,
    "length": TokenType.LENGTH,
    "keys": TokenType.KEYS,
    "values": TokenType.VALUES,
    "tobool": TokenType.TOBOOL,
    "toint": TokenType.TOINT,
    "tostr": TokenType.TOSTR,
}

# Longest operators are tried first by the lexer
OPERATORS = {
    "...": TokenType.SPREAD,
    "??": TokenType.IF_NULL,
    "&&": TokenType.AND,
    "||": TokenType.OR,
    "==": TokenType.EQUAL,
    "!=": TokenType.NOT_EQUAL,
    "<=": TokenType.LOWER_EQUAL,
    ">=": TokenType.GREATER_EQUAL,
    "++": TokenType.INC,
    "--": TokenType.DEC,
    "?": TokenType.NULLABLE,
    "=": TokenType.ASSIGN,
    "!": TokenType.NOT,
    "<": TokenType.LOWER_THAN,
    ">": TokenType.GREATER_THAN,
    "+": TokenType.ADD,
    "-": TokenType.SUB,
    "*": TokenType.MUL,
    "/": TokenType.DIV,
    "%": TokenType.MOD,
    "(": TokenType.OPEN_PAR,
    ")": TokenType.CLOSE_PAR,
    "[": TokenType.OPEN_BRA,
    "]": TokenType.CLOSE_BRA,
    "{": TokenType.OPEN_CUR,
    "}": TokenType.CLOSE_CUR,
    ";": TokenType.SEMICOLON,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
}

ESCAPE_SEQUENCES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '\\': '\\',
    '"': '"',
}
