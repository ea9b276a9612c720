"""
Forth Lexer - Tokenizes Forth source code into tokens.

Handles:
- Whitespace-separated words
- ( ... ) comments, which may nest and span lines
- The definition delimiters : and ;
- The print directive .
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional, List

from ..errors import LexError


class TokenType(Enum):
    """Forth token types."""
    WORD = auto()        # any other whitespace-delimited text
    COLON = auto()       # : (start of a definition)
    SEMICOLON = auto()   # ; (end of a definition)
    DOT = auto()         # . (pop and print)

    # End of file
    EOF = auto()


@dataclass
class Token:
    """Represents a single token."""
    type: TokenType
    value: Optional[str]
    line: int
    column: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


PUNCTUATION = {
    ':': TokenType.COLON,
    ';': TokenType.SEMICOLON,
    '.': TokenType.DOT,
}


class Lexer:
    """Tokenizes Forth source code."""

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def error(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        """Raise a lexer error with location information."""
        raise LexError(message, self.filename,
                       self.line if line is None else line,
                       self.column if column is None else column)

    def peek(self, offset: int = 0) -> Optional[str]:
        """Peek at character at current position + offset."""
        pos = self.pos + offset
        if pos < len(self.source):
            return self.source[pos]
        return None

    def advance(self) -> Optional[str]:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return None

        ch = self.source[self.pos]
        self.pos += 1

        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        return ch

    def skip_whitespace(self):
        """Skip whitespace characters."""
        while self.peek() and self.peek().isspace():
            self.advance()

    def skip_comment(self):
        """Skip a ( ... ) comment, including nested parentheses.

        Comments may contain anything, including ; and :, so a stack-effect
        note like ( n -- n ) inside a definition is harmless.
        """
        line, col = self.line, self.column
        self.advance()  # (
        depth = 1

        while depth > 0 and self.peek() is not None:
            ch = self.advance()
            if ch == '(':
                depth += 1
            elif ch == ')':
                depth -= 1

        if depth != 0:
            self.error("Unterminated comment", line, col)

    def read_word(self) -> str:
        """Read characters up to the next whitespace or parenthesis."""
        chars = []
        while self.peek() is not None and not self.peek().isspace() and self.peek() not in '()':
            chars.append(self.advance())
        return ''.join(chars)

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source."""
        while True:
            self.skip_whitespace()
            ch = self.peek()
            if ch is None:
                break

            line = self.line
            col = self.column

            if ch == '(':
                self.skip_comment()
            elif ch == ')':
                self.error("Unbalanced ')' outside a comment")
            else:
                value = self.read_word()
                token_type = PUNCTUATION.get(value, TokenType.WORD)
                self.tokens.append(Token(token_type, value, line, col))

        # Add EOF token
        self.tokens.append(Token(TokenType.EOF, None, self.line, self.column))
        return self.tokens


def tokenize(source: str, filename: str = "<input>") -> List[Token]:
    """Convenience function to tokenize Forth source code."""
    lexer = Lexer(source, filename)
    return lexer.tokenize()
