import re
from dataclasses import dataclass
from enum import Enum
from typing import List

from sqlparse import tokens as T
from sqlparse.lexer import tokenize as lex

from .keywords import KEYWORDS


class TokenKind(Enum):
    WORD = "word"
    NUMBER = "number"
    STRING = "string"
    PARENTHESIS = "parenthesis"
    PUNCTUATION = "punctuation"
    KEYWORD = "keyword"


@dataclass(frozen=True)
class Token:
    value: str
    kind: TokenKind
    position: int

    @property
    def end(self) -> int:
        return self.position + len(self.value)

    @property
    def upper(self) -> str:
        return self.value.upper()


PARENTHESES = ("(", ")")
PUNCTUATION = (",", ";", ".")


def classify_word(value: str) -> TokenKind:
    if value.upper() in KEYWORDS:
        return TokenKind.KEYWORD
    return TokenKind.WORD


def tokenize(text: str) -> List[Token]:
    """
    Split SQL text into classified tokens. Whitespace is not emitted.

    The sqlparse lexer does the splitting; its token types are folded into
    TokenKind and keywords are decided against KEYWORDS, not sqlparse's own
    (much larger) list. Multi-word lexemes such as "GROUP BY" come back as one
    token per word.

    Args:
        text (str): SQL to tokenize.

    Returns:
        List[Token]: tokens in input order, each with its offset in `text`.
    """
    result = []
    position = 0

    for ttype, value in lex(text):
        start = position
        position += len(value)

        if ttype in T.Whitespace:
            continue

        if ttype is T.Error and value in ("'", '"'):
            # Unterminated literal: it runs to the end of the input
            result.append(Token(text[start:].rstrip(), TokenKind.STRING, start))
            break

        if ttype in T.String:
            result.append(Token(value, TokenKind.STRING, start))
        elif ttype in T.Number:
            result.append(Token(value, TokenKind.NUMBER, start))
        elif value in PARENTHESES:
            result.append(Token(value, TokenKind.PARENTHESIS, start))
        elif value in PUNCTUATION:
            result.append(Token(value, TokenKind.PUNCTUATION, start))
        elif ttype in T.Comment:
            stripped = value.strip()
            result.append(Token(stripped, TokenKind.WORD, start + value.index(stripped)))
        else:
            for match in re.finditer(r"\S+", value):
                word = match.group(0)
                result.append(Token(word, classify_word(word), start + match.start()))

    return result


def join_tokens(tokens: List[Token]) -> str:
    """
    Rebuild text from tokens, putting a single space wherever the source had
    whitespace between two tokens.
    """
    parts = []
    prev_end = None

    for token in tokens:
        if prev_end is not None and token.position > prev_end:
            parts.append(" ")
        parts.append(token.value)
        prev_end = token.end

    return "".join(parts)
