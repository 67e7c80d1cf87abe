import json
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Tuple

from .keywords import DEFAULT_FUNCTIONS, NON_FIELD_KEYWORDS, SELECT_MODIFIERS
from .scanning import scan, split_top_level

FUNCTIONS_PATH = Path(__file__).resolve().parent / "resources" / "functions.json"

FUNCTION_CATEGORIES = ["aggregate", "window", "string", "date"]

IDENTIFIER_PART = r'(?:[a-zA-Z_][a-zA-Z0-9_$]*|"[^"]+")'

FIELD_PATTERNS = [
    # column, table.column, schema.table.column, t.*, *
    re.compile(
        rf"^(?:\*|{IDENTIFIER_PART}(?:\.{IDENTIFIER_PART})*(?:\.\*)?)"
        r"(?:\s+AS\s+[a-zA-Z_][a-zA-Z0-9_]*)?$",
        re.IGNORECASE,
    ),
    # CASE WHEN ... END
    re.compile(r"^CASE\s+", re.IGNORECASE),
    # Arithmetic next to an identifier
    re.compile(r"^[a-zA-Z_][a-zA-Z0-9_.\s]*[+\-*/%]", re.IGNORECASE),
    re.compile(r"[+\-*/%][a-zA-Z_][a-zA-Z0-9_.\s]*", re.IGNORECASE),
    # Constants with an alias
    re.compile(r"""^(['"].*['"]|\d+(\.\d+)?)\s+AS\s+[a-zA-Z_]""", re.IGNORECASE),
    # Subquery as a field
    re.compile(r"^\s*\(\s*SELECT\s+", re.IGNORECASE),
]

SORT_SUFFIX = re.compile(r"\s+(?:ASC|DESC)(?:\s+NULLS\s+(?:FIRST|LAST))?$|\s+NULLS\s+(?:FIRST|LAST)$", re.IGNORECASE)


@lru_cache(maxsize=1)
def load_function_names() -> Dict[str, Tuple[str, ...]]:
    """
    Load the recognized function names per category.

    Reads resources/functions.json (refreshed by scripts/fetch_functions.py) and
    falls back to DEFAULT_FUNCTIONS for categories the file does not carry.
    """
    functions = {category: list(names) for category, names in DEFAULT_FUNCTIONS.items()}

    if FUNCTIONS_PATH.exists():
        data = json.loads(FUNCTIONS_PATH.read_text(encoding="utf-8"))
        for category in FUNCTION_CATEGORIES:
            if data.get(category):
                functions[category] = sorted(set(functions[category]) | {n.upper() for n in data[category]})

    return {category: tuple(names) for category, names in functions.items()}


@lru_cache(maxsize=1)
def function_call_pattern() -> "re.Pattern":
    names = sorted({name for names in load_function_names().values() for name in names}, key=len, reverse=True)
    return re.compile(r"^(" + "|".join(re.escape(n) for n in names) + r")\s*\(", re.IGNORECASE)


def extract_fields(content: str) -> List[str]:
    """
    Split clause content into fields on commas at depth 0 outside literals.

    Commas inside function calls or quoted literals stay in the field. Empty and
    whitespace-only fields are dropped.
    """
    return [piece.strip() for piece in split_top_level(content, ",") if piece.strip()]


def starts_with_non_field_keyword(field_str: str) -> bool:
    upper_field = " ".join(field_str.upper().split())
    return any(upper_field == kw or upper_field.startswith(kw + " ") for kw in NON_FIELD_KEYWORDS)


def has_balanced_parentheses(field_str: str) -> bool:
    """At least one (...) outside literals, never closed before it was opened."""
    depth = 0
    opened = False
    for _, ch, depth, quote_char in scan(field_str):
        if depth < 0:
            return False
        if ch == "(" and quote_char is None:
            opened = True
    return opened and depth == 0


def has_valid_field_pattern(field_str: str) -> bool:
    """
    Check the field against the accepted shapes:
    identifier, known function call, CASE, arithmetic, aliased literal,
    subquery, or anything with a balanced (...).
    """
    candidate = SORT_SUFFIX.sub("", field_str.strip())

    if function_call_pattern().match(candidate):
        return True

    if any(pattern.search(candidate) for pattern in FIELD_PATTERNS):
        return True

    return has_balanced_parentheses(candidate)


def is_actual_field(field_str: str) -> bool:
    """Tell a real field apart from a stray SQL keyword fragment."""
    stripped = field_str.strip()
    if not stripped:
        return False
    if starts_with_non_field_keyword(stripped):
        return False
    return has_valid_field_pattern(stripped)


def clean_fields(fields: List[str], verbose: bool = False) -> List[str]:
    clean = []
    for field in fields:
        trimmed = field.strip()
        if not trimmed:
            continue
        if is_actual_field(trimmed):
            clean.append(trimmed)
        elif verbose:
            print(f"[DEBUG] Dropped unrecognized field: {trimmed}")
    return clean


def split_select_modifier(content: str) -> Tuple[str, str]:
    """
    Separate a leading DISTINCT / ALL from a SELECT list.

    Returns:
        (modifier, rest); modifier is "" when there is none.
    """
    stripped = content.strip()
    for modifier in SELECT_MODIFIERS:
        match = re.match(rf"^{modifier}\b\s*", stripped, re.IGNORECASE)
        if match:
            return stripped[:len(modifier)].upper(), stripped[match.end():]
    return "", stripped
