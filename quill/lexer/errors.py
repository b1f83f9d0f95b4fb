"""
Error handling for the Quill lexer.

Defines the Diagnostic record shared by every front-end error, the common
QuillError base class, and the errors raised by the batch tokenizing helpers.

"""

from typing import Optional
from dataclasses import dataclass
from .tokens import SourceLocation, Token, TokenType


@dataclass
class Diagnostic:
    """A single front-end diagnostic (error or warning)."""
    message: str
    location: SourceLocation
    severity: str  # "error", "warning"
    code: Optional[str] = None
    help_text: Optional[str] = None

    def summary(self) -> str:
        """The one-line form printed by the command line: ``NN: message``."""
        return f"{self.location.line:02d}: {self.message}"

    def __str__(self) -> str:
        severity_prefix = self.severity.upper()
        code = f"[{self.code}] " if self.code else ""
        result = f"{severity_prefix}: {code}{self.message}\n"
        result += f"  --> {self.location}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        return result


class QuillError(Exception):
    """
    Base class for every error raised by the Quill front end.

    The first error stops the run; no partial result is ever returned.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        code: Optional[str] = None,
        help_text: Optional[str] = None
    ):
        super().__init__(message)
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text
        )

    @property
    def line(self) -> int:
        return self.diagnostic.location.line

    @property
    def code(self) -> Optional[str]:
        return self.diagnostic.code

    def summary(self) -> str:
        return self.diagnostic.summary()

    def __str__(self) -> str:
        return str(self.diagnostic)


class LexerError(QuillError):
    """
    Raised by ``tokenize_string``/``tokenize_file`` when the source contains
    a malformed token.

    The streaming interface never raises this; it hands the malformed token
    to the parser instead.
    """

    def __init__(self, message: str, location: SourceLocation, token: Optional[Token] = None,
                 code: Optional[str] = None, help_text: Optional[str] = None):
        super().__init__(message, location, code=code, help_text=help_text)
        self.token = token


# Common error codes for categorization
LEXER_ERROR_CODES = {
    "L001": "Invalid character",
    "L002": "Unterminated literal or comment",
    "L003": "Source is not valid UTF-8",
}


def create_lexer_error(token: Token) -> LexerError:
    """Create the error matching a malformed token produced by the lexer."""
    if token.type == TokenType.UNEXPECTED_EOF:
        return LexerError(
            message="Unexpected end of file",
            location=token.location,
            token=token,
            code="L002",
            help_text="A text literal or block comment was never closed."
        )

    return LexerError(
        message=f"Invalid lexeme [{token.lexeme}]",
        location=token.location,
        token=token,
        code="L001",
        help_text=f"The character {token.lexeme!r} is not valid in Quill source code."
    )


def create_decode_error(filename: str, data: bytes, error: UnicodeDecodeError) -> LexerError:
    """Create the error for a source file whose bytes are not valid UTF-8."""
    line = data.count(b"\n", 0, error.start) + 1
    column = error.start - (data.rfind(b"\n", 0, error.start) + 1) + 1
    lexeme = "".join(f"\\x{byte:02x}" for byte in data[error.start:error.end])

    return LexerError(
        message=f"Invalid lexeme [{lexeme}]",
        location=SourceLocation(filename, line, column, error.start),
        code="L003",
        help_text="Quill source files must be encoded as UTF-8."
    )
