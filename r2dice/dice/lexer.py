"""
Tokenizer for R2 dice expressions.

Letters are keywords (d, s, f, k, kl, adv, dis, t, r, w, e, x, iron) and
are matched case-insensitively; identifiers only appear after '@' (variables)
or '#' (flags). Whitespace separates tokens and is otherwise ignored.
"""

import re
from dataclasses import dataclass
from typing import List

from .errors import DiceSyntaxError

# Token types
INT = 'INT'
VAR = 'VAR'
FLAG = 'FLAG'
GYGAX = 'GYGAX'
ASSIGN = 'ASSIGN'
WORD = 'WORD'
SYMBOL = 'SYMBOL'
EOF = 'EOF'

# Longest number literal accepted; dice limits are far below this
MAX_NUMBER_DIGITS = 15

# A--B right after a keyword letter is a suffix number followed by
# subtraction of a negative (2d6--3), not a Gygax range
TOKEN_PATTERN = re.compile(
    r"""
    (?P<WS>\s+)
    | (?P<GYGAX>(?<![A-Za-z])\d+--\d+)
    | (?P<INT>\d+)
    | (?P<VAR>@[A-Za-z_]\w*)
    | (?P<FLAG>\#[A-Za-z_][\w-]*)
    | (?P<ASSIGN>:=)
    | (?P<WORD>adv|dis|iron|kl|[dsfktrwex])
    | (?P<SYMBOL>[-+*/%()\[\]:;!?])
    """,
    re.IGNORECASE | re.VERBOSE,
)


@dataclass(frozen=True)
class Token:
    """A lexical token; `position` is its offset in the source text."""
    type: str
    text: str
    position: int

    def is_word(self, *words: str) -> bool:
        return self.type == WORD and self.text in words

    def is_symbol(self, *symbols: str) -> bool:
        return self.type == SYMBOL and self.text in symbols

    def __str__(self) -> str:
        return 'end of input' if self.type == EOF else repr(self.text)


def tokenize(text: str) -> List[Token]:
    """
    Split an expression into tokens, ending with an EOF token.

    Keywords are lower-cased; variable and flag tokens carry their name
    without the sigil.

    Raises:
        DiceSyntaxError: On a character that starts no token, or a number
            longer than MAX_NUMBER_DIGITS
    """
    tokens = []
    position = 0
    while position < len(text):
        match = TOKEN_PATTERN.match(text, position)
        if match is None:
            raise DiceSyntaxError(position, f"Unexpected character {text[position]!r}")

        kind = match.lastgroup
        value = match.group()
        if kind == WORD:
            tokens.append(Token(WORD, value.lower(), position))
        elif kind in (VAR, FLAG):
            tokens.append(Token(kind, value[1:], position))
        elif kind in (INT, GYGAX):
            if any(len(digits) > MAX_NUMBER_DIGITS for digits in value.split('--')):
                raise DiceSyntaxError(position, f"Number is longer than {MAX_NUMBER_DIGITS} digits")
            tokens.append(Token(kind, value, position))
        elif kind != 'WS':
            tokens.append(Token(kind, value, position))
        position = match.end()

    tokens.append(Token(EOF, '', len(text)))
    return tokens
