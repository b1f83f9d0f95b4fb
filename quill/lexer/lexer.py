"""
Quill Lexer - turns source text into lexical units on demand.

The parser pulls one token at a time through next_token(); nothing is
buffered ahead. Malformed input is not raised here: it comes back as an
INVALID_TOKEN or UNEXPECTED_EOF token and the parser decides how to report it.
"""

import re
from typing import Iterable, List, Optional

from .tokens import Token, TokenType, SourceLocation, KEYWORDS, OPERATORS, ESCAPE_SEQUENCES
from .errors import create_lexer_error, create_decode_error


class Lexer:
    """
    Quill lexical analyzer.

    Implements the token source used by the parser: ``next_token()`` returns
    the next unit and ``line`` is the line the scanner is currently on.
    """

    def __init__(self, source: str, filename: str = "<unknown>"):
        """
        Initialize the lexer with source code.

        Args:
            source: Source code string
            filename: Name of source file for error reporting
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1

        self._compile_patterns()

    def _compile_patterns(self):
        """Compile regex patterns used by the lexer."""
        self.number_pattern = re.compile(r'\d+')
        self.identifier_pattern = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')

    def next_token(self) -> Token:
        """Scan and return the next token; END_OF_FILE once input is exhausted."""
        if not self._skip_whitespace_and_comments():
            return self._make_token(TokenType.UNEXPECTED_EOF, "", self.line, self.column, self.pos)

        if self.pos >= len(self.source):
            return self._make_token(TokenType.END_OF_FILE, "", self.line, self.column, self.pos)

        start_pos = self.pos
        start_line = self.line
        start_column = self.column
        current_char = self.source[self.pos]

        if self.number_pattern.match(current_char):
            return self._tokenize_number(start_line, start_column, start_pos)

        if self.identifier_pattern.match(current_char):
            return self._tokenize_name_or_keyword(start_line, start_column, start_pos)

        if current_char == '"':
            return self._tokenize_text(start_line, start_column, start_pos)

        # Operators and punctuation (longer operators first)
        for op_len in (3, 2, 1):
            potential_op = self.source[self.pos:self.pos + op_len]
            if len(potential_op) == op_len and potential_op in OPERATORS:
                self._advance_by(op_len)
                return self._make_token(OPERATORS[potential_op], potential_op,
                                        start_line, start_column, start_pos)

        self._advance()
        return self._make_token(TokenType.INVALID_TOKEN, current_char,
                                start_line, start_column, start_pos)

    def tokenize(self) -> List[Token]:
        """
        Tokenize the remaining source.

        Returns:
            List of tokens including the END_OF_FILE token. Malformed tokens
            are included as they are; the list stops after the first one.
        """
        tokens: List[Token] = []
        while True:
            token = self.next_token()
            tokens.append(token)
            if token.type == TokenType.END_OF_FILE or token.is_error:
                return tokens

    def _make_token(self, token_type: TokenType, lexeme: str, line: int, column: int,
                    offset: int, value=None) -> Token:
        return Token(token_type, lexeme, value, SourceLocation(self.filename, line, column, offset))

    def _tokenize_number(self, line: int, column: int, offset: int) -> Token:
        """Tokenize a decimal integer literal."""
        match = self.number_pattern.match(self.source, self.pos)
        lexeme = match.group(0)
        self._advance_by(len(lexeme))
        return self._make_token(TokenType.NUMBER, lexeme, line, column, offset, value=int(lexeme))

    def _tokenize_name_or_keyword(self, line: int, column: int, offset: int) -> Token:
        """Tokenize an identifier or reserved word."""
        match = self.identifier_pattern.match(self.source, self.pos)
        lexeme = match.group(0)
        self._advance_by(len(lexeme))

        token_type = KEYWORDS.get(lexeme, TokenType.NAME)
        return self._make_token(token_type, lexeme, line, column, offset)

    def _tokenize_text(self, line: int, column: int, offset: int) -> Token:
        """Tokenize a double-quoted text literal."""
        self._advance()  # Skip opening quote

        value_parts = []
        while self.pos < len(self.source) and self.source[self.pos] != '"':
            if self.source[self.pos] == '\\' and self.pos + 1 < len(self.source):
                self._advance()
                escape_char = self.source[self.pos]
                value_parts.append(ESCAPE_SEQUENCES.get(escape_char, escape_char))
                self._advance()
            else:
                value_parts.append(self.source[self.pos])
                self._advance()

        if self.pos >= len(self.source):
            return self._make_token(TokenType.UNEXPECTED_EOF, self.source[offset:],
                                    line, column, offset)

        self._advance()  # Skip closing quote

        lexeme = self.source[offset:self.pos]
        return self._make_token(TokenType.TEXT, lexeme, line, column, offset,
                                value=''.join(value_parts))

    def _skip_whitespace_and_comments(self) -> bool:
        """Skip whitespace and comments; False if a block comment is never closed."""
        while self.pos < len(self.source):
            if self.source[self.pos].isspace():
                self._advance()
                continue

            if self.source.startswith('//', self.pos):
                while self.pos < len(self.source) and self.source[self.pos] != '\n':
                    self._advance()
                continue

            if self.source.startswith('/*', self.pos):
                end = self.source.find('*/', self.pos + 2)
                if end < 0:
                    self._advance_by(len(self.source) - self.pos)
                    return False
                self._advance_by(end + 2 - self.pos)
                continue

            break

        return True

    def _advance(self):
        """Advance position by one character, updating line/column."""
        if self.pos < len(self.source):
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _advance_by(self, count: int):
        for _ in range(count):
            self._advance()


class TokenStream:
    """
    Serves a prepared token sequence through the lexer interface.

    Lets a grammar layer be exercised on a synthetic token sequence. Once the
    sequence is used up it keeps answering END_OF_FILE.
    """

    def __init__(self, tokens: Iterable[Token], filename: str = "<tokens>"):
        self._tokens = iter(tokens)
        self.filename = filename
        self.line = 1
        self._eof: Optional[Token] = None

    def next_token(self) -> Token:
        token = next(self._tokens, None)
        if token is None:
            if self._eof is None:
                self._eof = Token(TokenType.END_OF_FILE, "", None,
                                  SourceLocation(self.filename, self.line, 1, 0))
            return self._eof
        self.line = token.line
        return token


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting

    Returns:
        List of tokens ending with END_OF_FILE

    Raises:
        LexerError: If the source contains a malformed token
    """
    tokens = Lexer(source, filename).tokenize()

    if tokens[-1].is_error:
        raise create_lexer_error(tokens[-1])

    return tokens


def read_source(filepath: str) -> str:
    """
    Read a UTF-8 source file.

    Raises:
        LexerError: If the file is not valid UTF-8
        IOError: If file cannot be read
    """
    with open(filepath, 'rb') as f:
        data = f.read()

    try:
        source = data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise create_decode_error(filepath, data, e) from None

    # Same newline translation as reading in text mode
    return source.replace('\r\n', '\n').replace('\r', '\n')


def tokenize_file(filepath: str) -> List[Token]:
    """
    Convenience function to tokenize a source file.

    Raises:
        LexerError: If the source contains a malformed token
        IOError: If file cannot be read
    """
    return tokenize_string(read_source(filepath), filepath)
