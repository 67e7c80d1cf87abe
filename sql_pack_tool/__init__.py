"""
Horizontal field packing for SQL queries.

    from sql_pack_tool import format_sql
    result = format_sql("SELECT a, b, c FROM t")
    if result.success:
        print(result.text)
"""

from .config import FormattingConfig, load_config
from .errors import (
    ErrorKind,
    FormatFailure,
    FormatResult,
    FormatSuccess,
    SpreadsheetSuccess,
    SqlPackError,
    ValidationReport,
)
from .fields import extract_fields
from .formatter import format_sql, optimize_formatting, prepare_for_spreadsheet, validate_query
from .overflow import split_for_hard_limit
from .packer import PackedLine, PackingMode, pack
from .segmenter import ClauseSegment, parse_query, segment
from .tokenizer import Token, TokenKind, tokenize

__version__ = "2.0.0"

__all__ = [
    "ClauseSegment",
    "ErrorKind",
    "FormatFailure",
    "FormatResult",
    "FormatSuccess",
    "FormattingConfig",
    "PackedLine",
    "PackingMode",
    "SpreadsheetSuccess",
    "SqlPackError",
    "Token",
    "TokenKind",
    "ValidationReport",
    "extract_fields",
    "format_sql",
    "load_config",
    "optimize_formatting",
    "pack",
    "parse_query",
    "prepare_for_spreadsheet",
    "segment",
    "split_for_hard_limit",
    "tokenize",
    "validate_query",
]
