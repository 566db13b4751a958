"""
Lexical analyzer for the Monkey programming language.

This module converts raw source text into a lazy stream of tokens:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with kind, literal, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips whitespace (space, tab, carriage return, newline)
    - Resolves identifiers against the fixed keyword table
    - Recognizes integer literals as maximal digit runs
    - Matches `==` and `!=` with one character of lookahead, falling back
      to the single-character token
    - Produces an `ILLEGAL` token for unrecognized characters instead of raising

Example:
    >>> lexer = Lexer(CharacterStream("let x = 5;"))
    >>> lexer.next_token()
    Token(LET, let)

Exports:
    - CharacterStream
    - Token
    - Lexer
    - keywords
"""

from collections.abc import Iterator
from typing import Any

from monkey.monkey_constants import (
    EOF,
    IDENT,
    ILLEGAL,
    INT,
    MAX_OPERATOR_LENGTH,
    keywords,
    operator_tokens,
)


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            Exception: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise Exception(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` from the current position, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def current(self) -> str | None:
        return self.source[self.position] if self.position < len(self.source) else None

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token in the Monkey language.

    Tokens are immutable once produced.

    Attributes:
        type (str): The token kind (e.g. 'IDENT', 'INT', 'EOF').
        literal (str): The source substring the token was read from.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    __slots__ = ("type", "literal", "line", "col")

    def __init__(self, type_: str, literal: str, line: int = 0, col: int = 0):
        object.__setattr__(self, "type", type_)
        object.__setattr__(self, "literal", literal)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "col", col)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Token is immutable; cannot set {name!r}")

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.literal})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.literal == other.literal
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.literal, self.line, self.col))

    @property
    def position(self) -> str:
        """The token's location rendered as `line:col` for diagnostics."""
        return f"{self.line}:{self.col}"


def is_letter(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch == "_")


def is_digit(ch: str) -> bool:
    return ch.isascii() and ch.isdigit()


class Lexer:
    """Lexical analyzer for the Monkey language.

    The Lexer takes a CharacterStream and converts it into a stream of Token
    objects, one per `next_token()` call. Iterating a Lexer yields tokens up to
    and including the first `EOF`.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    @classmethod
    def from_source(cls, source: str) -> "Lexer":
        return cls(CharacterStream(source))

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == EOF:
                return

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        while not self.stream.end_of_file() and self.peek() in " \t\r\n":
            self.advance()

    def match_operator(self) -> Token | None:
        """Matches the longest operator spelling starting at the current position.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        line, col = self.stream.line, self.stream.column
        max_token = None
        candidate = ""

        for i in range(MAX_OPERATOR_LENGTH):
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in operator_tokens:
                max_token = candidate

        if max_token:
            for _ in range(len(max_token)):
                self.advance()
            return Token(operator_tokens[max_token], max_token, line, col)

        return None

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Once the source is exhausted every call returns an `EOF` token.
        """
        self.skip_whitespace()

        line, col = self.stream.line, self.stream.column
        if self.stream.end_of_file():
            return Token(EOF, "", line, col)

        ch = self.peek()

        # 1. Identifier or keyword
        if is_letter(ch):
            ident = ""
            while not self.stream.end_of_file() and is_letter(self.peek()):
                ident += self.advance()
            return Token(keywords.get(ident, IDENT), ident, line, col)

        # 2. Integer
        if is_digit(ch):
            num = ""
            while not self.stream.end_of_file() and is_digit(self.peek()):
                num += self.advance()
            return Token(INT, num, line, col)

        # 3. Operator or delimiter
        token = self.match_operator()
        if token:
            return token

        # 4. Unknown character
        return Token(ILLEGAL, self.advance(), line, col)


__all__ = ["CharacterStream", "Lexer", "Token", "keywords"]
