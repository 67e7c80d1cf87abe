import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .keywords import (
    BARE_SET_OPERATORS,
    COMPOUND_CLAUSE_KEYWORDS,
    SINGLE_CLAUSE_KEYWORDS,
    is_field_container,
)
from .scanning import extract_placeholders, is_comment_placeholder, restore_placeholders
from .tokenizer import Token, TokenKind, join_tokens, tokenize

# Clause kind of the tokens that precede the first clause keyword
PREAMBLE = ""

SUBQUERY_OPENERS = ("SELECT", "WITH")


@dataclass
class ClauseSegment:
    clause_kind: str
    raw_content: str
    is_field_container: bool
    nesting_level: int = 0
    tokens: List[Token] = field(default_factory=list, repr=False)
    # One segment list per parenthesized SELECT/WITH group inside raw_content
    subqueries: List[List["ClauseSegment"]] = field(default_factory=list, repr=False)

    def as_dict(self) -> dict:
        return {
            "type": self.clause_kind,
            "content": self.raw_content,
            "is_field_container": self.is_field_container,
            "level": self.nesting_level,
            "subqueries": [[s.as_dict() for s in sub] for sub in self.subqueries],
        }


@dataclass
class ParseResult:
    original: str
    cleaned: str
    clauses: List[ClauseSegment]
    has_subqueries: bool


def detect_clause_keyword(tokens: List[Token], index: int) -> Tuple[Optional[str], int]:
    """
    Decide whether tokens[index] opens a clause.

    Compound keywords are matched before the bare set operators, so
    "UNION ALL" wins over "UNION".

    Returns:
        (clause_kind, token_count) or (None, 0) when it is not a boundary.
    """
    if index >= len(tokens):
        return None, 0

    token = tokens[index]
    if token.kind is not TokenKind.KEYWORD:
        return None, 0

    upper_token = token.upper
    next_token = tokens[index + 1] if index + 1 < len(tokens) else None

    if upper_token in SINGLE_CLAUSE_KEYWORDS:
        return upper_token, 1

    expected_next = COMPOUND_CLAUSE_KEYWORDS.get(upper_token)
    if expected_next and next_token is not None and next_token.upper == expected_next:
        return f"{upper_token} {expected_next}", 2

    if upper_token in BARE_SET_OPERATORS:
        return upper_token, 1

    return None, 0


def _close_segment(kind: str, tokens: List[Token], nesting_level: int) -> ClauseSegment:
    return ClauseSegment(
        clause_kind=kind,
        raw_content=join_tokens(tokens),
        is_field_container=is_field_container(kind),
        nesting_level=nesting_level,
        tokens=tokens,
        subqueries=find_subqueries(tokens, nesting_level + 1),
    )


def segment(tokens: List[Token], nesting_level: int = 0) -> List[ClauseSegment]:
    """
    Partition a token stream into clause segments.

    Only keywords at parenthesis depth 0 open a new segment; anything inside
    parentheses stays content of the enclosing segment. Parenthesized groups
    that start with SELECT or WITH are segmented again into
    ClauseSegment.subqueries.

    Returns:
        The segments in source order, or [] when no clause keyword was found.
    """
    segments = []
    preamble = []
    current_kind = None
    current_tokens = []
    paren_depth = 0
    i = 0

    while i < len(tokens):
        token = tokens[i]

        if token.kind is TokenKind.PARENTHESIS:
            if token.value == "(":
                paren_depth += 1
            else:
                paren_depth -= 1

        if paren_depth == 0:
            kind, token_count = detect_clause_keyword(tokens, i)
            if kind is not None:
                if current_kind is not None:
                    segments.append(_close_segment(current_kind, current_tokens, nesting_level))
                current_kind = kind
                current_tokens = []
                i += token_count
                continue

        if current_kind is None:
            preamble.append(token)
        else:
            current_tokens.append(token)
        i += 1

    if current_kind is not None:
        segments.append(_close_segment(current_kind, current_tokens, nesting_level))

    if segments and preamble:
        segments.insert(0, _close_segment(PREAMBLE, preamble, nesting_level))

    return segments


def find_subqueries(tokens: List[Token], nesting_level: int) -> List[List[ClauseSegment]]:
    """Segment every parenthesized group of `tokens` that opens with SELECT or WITH."""
    subqueries = []
    i = 0

    while i < len(tokens):
        token = tokens[i]
        opens_subquery = (
            token.kind is TokenKind.PARENTHESIS
            and token.value == "("
            and i + 1 < len(tokens)
            and tokens[i + 1].upper in SUBQUERY_OPENERS
        )
        if not opens_subquery:
            i += 1
            continue

        close = _matching_paren(tokens, i)
        inner = tokens[i + 1:close]
        nested = segment(inner, nesting_level)
        if nested:
            subqueries.append(nested)
        i = close + 1

    return subqueries


def _matching_paren(tokens: List[Token], open_index: int) -> int:
    depth = 0
    for j in range(open_index, len(tokens)):
        token = tokens[j]
        if token.kind is not TokenKind.PARENTHESIS:
            continue
        depth += 1 if token.value == "(" else -1
        if depth == 0:
            return j
    return len(tokens)


def has_subqueries(clauses: List[ClauseSegment]) -> bool:
    return any(clause.subqueries for clause in clauses)


def count_subqueries(clauses: List[ClauseSegment]) -> int:
    """Count subqueries at every nesting level."""
    total = 0
    for clause in clauses:
        for sub in clause.subqueries:
            total += 1 + count_subqueries(sub)
    return total


# ------------------ Query cleanup ------------------
def clean_query(query: str) -> str:
    """
    Remove comments and normalize whitespace, leaving string literals as they are.

    - `--` and `/* */` comments are dropped
    - runs of spaces and tabs become one space
    - blank lines are collapsed and the result is trimmed
    """
    sql, placeholders = extract_placeholders(query)

    comments = [key for key in placeholders if is_comment_placeholder(key)]
    for key in comments:
        sql = sql.replace(key, " ")
        del placeholders[key]

    sql = re.sub(r"[ \t]+", " ", sql)
    sql = re.sub(r" ?\n\s*", "\n", sql)

    return restore_placeholders(sql, placeholders).strip()


def parse_query(query: str) -> ParseResult:
    cleaned = clean_query(query)
    clauses = segment(tokenize(cleaned))
    return ParseResult(
        original=query,
        cleaned=cleaned,
        clauses=clauses,
        has_subqueries=has_subqueries(clauses),
    )
