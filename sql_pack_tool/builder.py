from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .config import FormattingConfig
from .keywords import CLAUSE_ORDER, CONDITION_CLAUSES, MAJOR_CLAUSES, SET_OPERATORS, SIMPLE_CLAUSES
from .scanning import scan
from .segmenter import PREAMBLE, ClauseSegment

LOGICAL_OPERATORS = ("AND", "OR")


@dataclass
class FieldBlock:
    """Formatted body of a field-container clause and the keyword line above it."""
    header: str
    text: str


def build_query(
    clauses: List[ClauseSegment],
    field_blocks: Dict[int, FieldBlock],
    config: FormattingConfig,
) -> str:
    """
    Reassemble clauses into the final query text.

    Args:
        clauses (List[ClauseSegment]): Top-level segments in source order.
        field_blocks (Dict[int, FieldBlock]): Packed field blocks keyed by the
            index of their clause in `clauses`.
        config (FormattingConfig): Indentation and blank line settings.
    """
    if not clauses:
        return ""

    lines = []
    previous_kind = None

    for index, clause in enumerate(clauses):
        if config.add_blank_lines and index > 0 and should_add_blank_line(previous_kind, clause.clause_kind):
            lines.append("")

        lines.extend(build_clause_lines(clause, field_blocks.get(index), config.indent))
        previous_kind = clause.clause_kind

    return "\n".join(lines)


def build_clause_lines(clause: ClauseSegment, block: Optional[FieldBlock], indent: str) -> List[str]:
    if clause.is_field_container and block is not None and block.text:
        return [block.header] + block.text.split("\n")

    keyword = clause.clause_kind
    content = clause.raw_content.strip()

    if keyword == PREAMBLE:
        return [content] if content else []

    if not content:
        return [keyword]

    if is_simple_clause(keyword, content):
        return [f"{keyword} {content}"]

    return [keyword] + format_complex_clause(content, indent)


def should_add_blank_line(previous_kind: Optional[str], current_kind: str) -> bool:
    return (
        current_kind in MAJOR_CLAUSES
        and previous_kind is not None
        and previous_kind != current_kind
    )


def has_logical_operator(content: str) -> bool:
    upper = f" {content.upper()} "
    return any(f" {op} " in upper for op in LOGICAL_OPERATORS)


def is_simple_clause(clause_kind: str, content: str) -> bool:
    """Whether the clause fits on the keyword line."""
    if clause_kind in SIMPLE_CLAUSES:
        return True

    if clause_kind in CONDITION_CLAUSES:
        return len(content) <= 100 and "(" not in content and not has_logical_operator(content)

    if clause_kind in SET_OPERATORS:
        return len(content) <= 50

    return False


def format_complex_clause(content: str, indent: str) -> List[str]:
    if not has_logical_operator(content):
        return [indent + content]

    lines = []
    for operator, condition in split_by_logical_operators(content):
        if operator:
            lines.append(f"{indent}{operator} {condition}")
        else:
            lines.append(indent + condition)
    return lines


def split_by_logical_operators(content: str) -> List[Tuple[str, str]]:
    """
    Split conditions on AND / OR found at depth 0 outside literals.

    Returns:
        List of (operator, condition); the operator is the one that preceded the
        condition, "" for the first one.
    """
    conditions = []
    states = list(scan(content))
    operator = ""
    buffer = []
    i = 0

    while i < len(states):
        _, ch, depth, quote_char = states[i]

        if quote_char is None and depth == 0 and ch == " ":
            matched = None
            for op in LOGICAL_OPERATORS:
                candidate = f" {op} "
                if content[i:i + len(candidate)].upper() == candidate:
                    matched = op
                    break

            if matched:
                conditions.append((operator, "".join(buffer).strip()))
                operator = matched
                buffer = []
                i += len(matched) + 2
                continue

        buffer.append(ch)
        i += 1

    if "".join(buffer).strip():
        conditions.append((operator, "".join(buffer).strip()))

    return conditions


def validate_clauses(clauses: List[ClauseSegment]) -> List[str]:
    """
    Structural warnings for a clause sequence. They never stop formatting.

    - clauses out of the SELECT/FROM/WHERE/GROUP BY/HAVING/ORDER BY/LIMIT order
      (the order starts over after a set operator)
    - no SELECT clause at all
    """
    warnings = []
    last_valid_index = -1

    for clause in clauses:
        kind = clause.clause_kind
        if kind in SET_OPERATORS:
            last_valid_index = -1
            continue

        if kind not in CLAUSE_ORDER:
            continue

        current_index = CLAUSE_ORDER.index(kind)
        if current_index < last_valid_index:
            warnings.append(f"Clause {kind} is out of order in the query")
        last_valid_index = current_index

    if not any(clause.clause_kind == "SELECT" for clause in clauses):
        warnings.append("The query does not contain a SELECT clause")

    return warnings
