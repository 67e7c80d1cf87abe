"""
Character level scanning shared by the field extractor, the parenthesis check
and the condition splitter.

Quote rule: a ' or " that is not preceded by a backslash opens a literal, and
only the same character closes it. Parentheses are counted outside literals.
"""

import re
from typing import Dict, Iterator, List, Optional, Tuple

QUOTE_CHARS = ("'", '"')


def scan(text: str) -> Iterator[Tuple[int, str, int, Optional[str]]]:
    """
    Walk `text` one character at a time.

    Yields:
        (index, char, depth, quote_char) where depth and quote_char reflect the
        state after `char` was consumed. quote_char is None outside a literal.
    """
    depth = 0
    quote_char = None

    for i, ch in enumerate(text):
        prev_ch = text[i - 1] if i > 0 else ""

        if ch in QUOTE_CHARS and prev_ch != "\\":
            if quote_char is None:
                quote_char = ch
            elif ch == quote_char:
                quote_char = None
        elif quote_char is None:
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1

        yield i, ch, depth, quote_char


def paren_balance(text: str) -> int:
    """Return the final parenthesis depth of `text`, 0 when balanced."""
    depth = 0
    for _, _, depth, _ in scan(text):
        pass
    return depth


def split_top_level(text: str, separator: str = ",") -> List[str]:
    """
    Split `text` on `separator` wherever it sits at depth 0 outside a literal.
    Pieces are returned untrimmed, empty pieces included.
    """
    pieces = []
    buffer = []

    for _, ch, depth, quote_char in scan(text):
        if ch == separator and depth == 0 and quote_char is None:
            pieces.append("".join(buffer))
            buffer = []
            continue
        buffer.append(ch)

    pieces.append("".join(buffer))
    return pieces


# ------------------ Placeholder extraction and restoration ------------------
PLACEHOLDER_PATTERNS = [
    (r"'(?:''|\\.|[^'\\])*'", "SINGLE_QUOTED_STRING"),
    (r'"(?:""|\\.|[^"\\])*"', "DOUBLE_QUOTED_STRING"),
    (r"--[^\n]*", "SQL_COMMENT"),
    (r"/\*.*?\*/", "SQL_BLOCK_COMMENT"),
]


def extract_placeholders(sql: str) -> Tuple[str, Dict[str, str]]:
    """
    Replace literals and comments with unique whitespace-free keys so the rest
    of the text can be rewritten safely.

    Returns:
        (sql_with_placeholders, replacements) where replacements maps each key
        to the original text.
    """
    replacements = {}
    placeholder_counter = 1

    combined_pattern = "|".join(f"({p})" for p, _ in PLACEHOLDER_PATTERNS)
    regex = re.compile(combined_pattern, re.DOTALL)

    def replace_match(match):
        nonlocal placeholder_counter
        idx = match.lastindex - 1
        label = PLACEHOLDER_PATTERNS[idx][1]
        key = f"__PLACEHOLDER_{label}_{placeholder_counter:04d}__"
        replacements[key] = match.group(0)
        placeholder_counter += 1
        return key

    sql_with_placeholders = regex.sub(replace_match, sql)
    return sql_with_placeholders, replacements


def restore_placeholders(sql: str, replacements: Dict[str, str]) -> str:
    """Restore placeholders back to their original content."""
    for key, original in replacements.items():
        sql = sql.replace(key, original)
    return sql


def is_comment_placeholder(key: str) -> bool:
    return "_SQL_COMMENT_" in key or "_SQL_BLOCK_COMMENT_" in key
