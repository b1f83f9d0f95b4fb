"""
Error handling for the Quill parser.

Each grammar violation maps to one exception class so callers can tell the
categories apart; the factory functions build them with a consistent message,
code and help text. The parser raises the first error it finds and stops.

"""

from typing import Optional, Union

from ..lexer.tokens import Token, TokenType, SourceLocation
from ..lexer.errors import QuillError


class ParseError(QuillError):
    """
    Exception raised when the parser encounters a syntax error.

    Contains the offending token, when there is one.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        token: Optional[Token] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None
    ):
        super().__init__(message, location, code=code, help_text=help_text)
        self.token = token


class UnexpectedTokenError(ParseError):
    """The current token matches no grammar alternative or expected terminal."""


class UnexpectedEndOfInputError(ParseError):
    """Input ended while a construct was still open."""


class LexicalError(ParseError):
    """The lexer reported a malformed token."""


class InvalidAssignmentTargetError(ParseError):
    """The left-hand side of '=' is not a variable or indexed access."""


class NestingTooDeepError(ParseError):
    """Expressions or bodies nest deeper than the interpreter stack allows."""


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P002": "Unexpected end of input",
    "P003": "Invalid lexeme",
    "P004": "Invalid assignment target",
    "P005": "Expression nested too deeply",
}

# Source spelling for the punctuation the parser expects by name
EXPECTED_SPELLINGS = {
    TokenType.SEMICOLON: "';'",
    TokenType.OPEN_PAR: "'('",
    TokenType.CLOSE_PAR: "')'",
    TokenType.OPEN_BRA: "'['",
    TokenType.CLOSE_BRA: "']'",
    TokenType.OPEN_CUR: "'{'",
    TokenType.CLOSE_CUR: "'}'",
    TokenType.COLON: "':'",
    TokenType.COMMA: "','",
    TokenType.ASSIGN: "'='",
    TokenType.NAME: "a name",
    TokenType.END_OF_FILE: "end of input",
}


def describe_expected(expected: Union[TokenType, str, None]) -> Optional[str]:
    if expected is None:
        return None
    if isinstance(expected, TokenType):
        return EXPECTED_SPELLINGS.get(expected, f"'{expected.name.lower()}'")
    return expected


# Helper functions for creating common parser errors

def create_unexpected_token_error(found: Token,
                                  expected: Union[TokenType, str, None] = None) -> UnexpectedTokenError:
    """Create an error for a token that does not fit the grammar here."""
    expected_str = describe_expected(expected)
    help_text = f"Expected {expected_str} here." if expected_str else None

    return UnexpectedTokenError(
        message=f"Unexpected lexeme [{found.lexeme}]",
        location=found.location,
        token=found,
        code="P001",
        help_text=help_text
    )


def create_unexpected_eof_error(found: Token,
                                expected: Union[TokenType, str, None] = None) -> UnexpectedEndOfInputError:
    """Create an error for input that ends too early."""
    expected_str = describe_expected(expected)
    help_text = f"Expected {expected_str} before the end of input." if expected_str else None

    return UnexpectedEndOfInputError(
        message="Unexpected end of file",
        location=found.location,
        token=found,
        code="P002",
        help_text=help_text
    )


def create_lexical_error(found: Token) -> LexicalError:
    """Create an error for a malformed token handed over by the lexer."""
    return LexicalError(
        message=f"Invalid lexeme [{found.lexeme}]",
        location=found.location,
        token=found,
        code="P003",
        help_text=f"{found.lexeme!r} is not a valid Quill token."
    )


def create_invalid_assignment_target_error(location: SourceLocation,
                                           token: Optional[Token] = None) -> InvalidAssignmentTargetError:
    """Create an error for '=' after an expression that cannot be assigned."""
    return InvalidAssignmentTargetError(
        message="Invalid assignment target",
        location=location,
        token=token,
        code="P004",
        help_text="Only a variable or an indexed access such as 'a[0]' can be assigned."
    )


def create_nesting_too_deep_error(found: Token) -> NestingTooDeepError:
    """Create an error for input nested past the recursion limit."""
    return NestingTooDeepError(
        message="Expression nested too deeply",
        location=found.location,
        token=found,
        code="P005",
        help_text="Split the expression into smaller parts using intermediate variables."
    )
