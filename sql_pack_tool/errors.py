"""
Result and error types returned by the formatter.

Callers branch on `result.success`; the three fatal conditions never escape
format_sql as exceptions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Union

from .config import FormattingConfig


class ErrorKind(Enum):
    EMPTY_INPUT = "EmptyInput"
    NO_CLAUSES_FOUND = "NoClausesFound"
    UNBALANCED_PARENTHESES = "UnbalancedParentheses"


class SqlPackError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass
class ClauseStats:
    original_fields: int
    formatted_lines: int
    fields_per_line: float


@dataclass
class FormatStats:
    field_count: int
    line_count: int
    char_count: int
    reduction_percent: int
    original_line_count: int
    clause_count: int
    has_subqueries: bool
    subquery_count: int
    clause_breakdown: Dict[str, ClauseStats]
    max_chars_used: int
    is_spreadsheet: bool
    compression_ratio: int
    average_line_length: int


@dataclass
class FormatSuccess:
    text: str
    stats: FormatStats
    config: FormattingConfig
    warnings: List[str] = field(default_factory=list)
    clauses: list = field(default_factory=list, repr=False)

    success = True

    @property
    def line_count(self) -> int:
        return self.stats.line_count

    @property
    def char_count(self) -> int:
        return self.stats.char_count

    @property
    def original_line_count(self) -> int:
        return self.stats.original_line_count

    @property
    def reduction_percent(self) -> int:
        return self.stats.reduction_percent

    def as_dict(self) -> dict:
        return {
            "success": True,
            "text": self.text,
            "line_count": self.line_count,
            "char_count": self.char_count,
            "original_line_count": self.original_line_count,
            "reduction_percent": self.reduction_percent,
            "stats": _stats_dict(self.stats),
            "warnings": list(self.warnings),
            "config": self.config.as_dict(),
        }


@dataclass
class SpreadsheetSuccess:
    rows: List[str]
    stats: FormatStats
    warnings: List[str] = field(default_factory=list)

    success = True

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def as_dict(self) -> dict:
        return {
            "success": True,
            "rows": list(self.rows),
            "row_count": self.row_count,
            "stats": _stats_dict(self.stats),
            "warnings": list(self.warnings),
        }


@dataclass
class FormatFailure:
    error_kind: ErrorKind
    message: str

    success = False

    @classmethod
    def from_error(cls, error: SqlPackError) -> "FormatFailure":
        return cls(error_kind=error.kind, message=error.message)

    def as_dict(self) -> dict:
        return {"success": False, "error_kind": self.error_kind.value, "message": self.message}


FormatResult = Union[FormatSuccess, FormatFailure]
SpreadsheetResult = Union[SpreadsheetSuccess, FormatFailure]


@dataclass
class ValidationReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _stats_dict(stats: FormatStats) -> dict:
    data = dict(vars(stats))
    data["clause_breakdown"] = {key: dict(vars(value)) for key, value in stats.clause_breakdown.items()}
    return data
