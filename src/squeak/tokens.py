from enum import Enum, auto
from dataclasses import dataclass

class TokenType(Enum):
    # Special
    EOF = auto()
    ILLEGAL = auto()

    # Identifiers & Literals
    IDENTIFIER = auto()
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()
    BOOLEAN = auto()

    # Keywords
    IF = auto()
    ELSE = auto()
    AND = auto()        # and, &&
    OR = auto()         # or, ||
    WHILE = auto()
    RETURN = auto()
    BREAK = auto()
    CONTINUE = auto()
    FUNCTION = auto()
    VAR = auto()
    NIL = auto()
    IMPORT = auto()
    AS = auto()
    EXPORT = auto()
    OBJECT = auto()

    # Operators
    PLUS = auto()       # +
    MINUS = auto()      # -
    STAR = auto()       # *
    SLASH = auto()      # /
    BANG = auto()       # !
    EQ = auto()         # =
    EQEQ = auto()       # ==
    NEQ = auto()        # !=
    LT = auto()         # <
    GT = auto()         # >
    LTE = auto()        # <=
    GTE = auto()        # >=
    LPAREN = auto()     # (
    RPAREN = auto()     # )
    LBRACE = auto()     # {
    RBRACE = auto()     # }
    LBRACKET = auto()   # [
    RBRACKET = auto()   # ]
    COMMA = auto()      # ,
    COLON = auto()      # :
    SEMICOLON = auto()  # ;
    DOT = auto()        # .


KEYWORDS = {
    'if': TokenType.IF,
    'else': TokenType.ELSE,
    'and': TokenType.AND,
    'or': TokenType.OR,
    'while': TokenType.WHILE,
    'return': TokenType.RETURN,
    'break': TokenType.BREAK,
    'continue': TokenType.CONTINUE,
    'function': TokenType.FUNCTION,
    'var': TokenType.VAR,
    'nil': TokenType.NIL,
    'import': TokenType.IMPORT,
    'as': TokenType.AS,
    'export': TokenType.EXPORT,
    'Object': TokenType.OBJECT,
    'true': TokenType.BOOLEAN,
    'false': TokenType.BOOLEAN,
}

SYMBOLS = {
    ';': TokenType.SEMICOLON,
    ':': TokenType.COLON,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.STAR,
    '/': TokenType.SLASH,
}

# Operators that become a different token when directly followed by '='.
EQUALS_PAIRS = {
    '=': (TokenType.EQ, TokenType.EQEQ),
    '!': (TokenType.BANG, TokenType.NEQ),
    '<': (TokenType.LT, TokenType.LTE),
    '>': (TokenType.GT, TokenType.GTE),
}

# Operators that are only legal when the character is doubled.
DOUBLED = {
    '&': TokenType.AND,
    '|': TokenType.OR,
}

@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str = ''

    def __repr__(self):
        return f"Token({self.type.name}, {self.lexeme!r})"
