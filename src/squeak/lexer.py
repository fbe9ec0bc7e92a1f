import codecs
import io
from typing import Callable, List, Optional
from .tokens import Token, TokenType, KEYWORDS, SYMBOLS, EQUALS_PAIRS, DOUBLED

# Default number of characters requested from the source reader per refill.
LEXER_BUFFER_LENGTH = 512


class Lexer:
    """Scans Squeak source code into tokens.

    The source may be a string, a bytes object or any readable stream. Streams
    are consumed lazily through an internal buffer that is refilled whenever it
    runs dry, so a lexer never holds more than one buffer of unread source.
    Unknown characters become ILLEGAL tokens rather than errors, and an
    exhausted source keeps yielding EOF. Errors raised by the underlying reader
    are propagated untouched.
    """

    def __init__(self, source, buffer_length: int = LEXER_BUFFER_LENGTH):
        if source is None:
            raise TypeError("invalid source reader: None")
        if buffer_length < 1:
            raise ValueError(f"illegal buffer size: {buffer_length}")
        if isinstance(source, str):
            source = io.StringIO(source)
        elif isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        self.source = source
        self.buffer_length = buffer_length
        self.buffer = ''
        self.cursor = 0
        self.line = 1
        self.exhausted = False
        self.decoder = codecs.getincrementaldecoder('utf-8')()

    def tokenize(self) -> List[Token]:
        tokens = []
        while True:
            token = self.next()
            tokens.append(token)
            if token.type == TokenType.EOF:
                return tokens

    def next(self) -> Token:
        self.skip_ignored()
        char = self.peek()
        if char == '':
            return Token(TokenType.EOF)
        if char.isdigit():
            return self.read_number()
        if char.isalpha() or char == '_':
            return self.read_word()
        if char == '"':
            return self.read_string()
        return self.read_symbol()

    def fill(self) -> bool:
        while self.cursor >= len(self.buffer):
            if self.exhausted:
                return False
            chunk = self.source.read(self.buffer_length)
            if isinstance(chunk, (bytes, bytearray)):
                chunk = self.decoder.decode(chunk, final=not chunk)
                if not chunk and self.decoder.getstate()[0]:
                    # Only part of a multi-byte character has arrived so far.
                    continue
            if not chunk:
                self.exhausted = True
                return False
            self.buffer = chunk
            self.cursor = 0
        return True

    def peek(self) -> str:
        if not self.fill():
            return ''
        return self.buffer[self.cursor]

    def advance(self) -> str:
        char = self.peek()
        if char == '':
            return char
        self.cursor += 1
        if char == '\n':
            self.line += 1
        return char

    def read_while(self, predicate: Callable[[str], bool]) -> str:
        chars = []
        while True:
            char = self.peek()
            if char == '' or not predicate(char):
                return ''.join(chars)
            chars.append(self.advance())

    def skip_ignored(self):
        while True:
            char = self.peek()
            if char == '#':
                self.read_while(lambda c: c != '\n')
            elif char != '' and char.isspace():
                self.advance()
            else:
                return

    def read_number(self) -> Token:
        integer = self.read_while(str.isdigit)
        if self.peek() != '.':
            return Token(TokenType.INTEGER, integer)
        self.advance()
        # The fraction may be empty, "120." is a legal float.
        fraction = self.read_while(str.isdigit)
        return Token(TokenType.FLOAT, f"{integer}.{fraction}")

    def read_word(self) -> Token:
        word = self.read_while(lambda c: c.isalnum() or c == '_')
        return Token(KEYWORDS.get(word, TokenType.IDENTIFIER), word)

    def read_string(self) -> Token:
        self.advance()
        value = self.read_while(lambda c: c != '"')
        if self.peek() != '"':
            return Token(TokenType.ILLEGAL, '"' + value)
        self.advance()
        return Token(TokenType.STRING, value)

    def read_symbol(self) -> Token:
        char = self.advance()

        if char in SYMBOLS:
            return Token(SYMBOLS[char], char)

        if char in EQUALS_PAIRS:
            single, double = EQUALS_PAIRS[char]
            if self.peek() == '=':
                self.advance()
                return Token(double, char + '=')
            return Token(single, char)

        if char in DOUBLED:
            following = self.advance()
            if following == char:
                return Token(DOUBLED[char], char * 2)
            return Token(TokenType.ILLEGAL, char + following)

        return Token(TokenType.ILLEGAL, char)


class PeekingLexer:
    """Adds single token lookahead on top of a Lexer."""

    def __init__(self, lexer: Lexer):
        if lexer is None:
            raise TypeError("invalid source lexer: None")
        self.lexer = lexer
        self.peeked: Optional[Token] = None
        self.peeked_line = lexer.line

    def line(self) -> int:
        # The line of the peeked token, if any, otherwise wherever the lexer is.
        if self.peeked is None:
            return self.lexer.line
        return self.peeked_line

    def peek(self) -> Token:
        if self.peeked is None:
            self.peeked = self.lexer.next()
            self.peeked_line = self.lexer.line
        return self.peeked

    def discard(self):
        self.peeked = None

    def next(self) -> Token:
        if self.peeked is None:
            return self.lexer.next()
        token = self.peeked
        self.peeked = None
        return token
