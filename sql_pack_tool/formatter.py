"""
Formatting pipeline: parse, pack the field lists, reassemble, measure.

    format_sql               -> FormatSuccess | FormatFailure
    prepare_for_spreadsheet  -> SpreadsheetSuccess | FormatFailure
    optimize_formatting      -> best FormatSuccess over several line budgets
    validate_query           -> ValidationReport (errors and warnings, no formatting)
"""

import re
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from .builder import FieldBlock, build_query, validate_clauses
from .config import FormattingConfig
from .errors import (
    ClauseStats,
    ErrorKind,
    FormatFailure,
    FormatResult,
    FormatStats,
    FormatSuccess,
    SpreadsheetResult,
    SpreadsheetSuccess,
    SqlPackError,
    ValidationReport,
)
from .fields import clean_fields, extract_fields, split_select_modifier
from .lint import lint_sql
from .overflow import split_for_hard_limit
from .packer import format_fields
from .scanning import paren_balance
from .segmenter import ClauseSegment, ParseResult, count_subqueries, parse_query

# max_chars_per_line multipliers tried by optimize_formatting
OPTIMIZER_MULTIPLIERS = (0.8, 1.0, 1.2, 1.5)

LONG_QUERY_CHARS = 50000
MANY_SUBQUERIES = 10


def check_input(query) -> str:
    if not isinstance(query, str):
        raise SqlPackError(ErrorKind.EMPTY_INPUT, "The query must be a text string")
    trimmed = query.strip()
    if not trimmed:
        raise SqlPackError(ErrorKind.EMPTY_INPUT, "The query cannot be empty")
    return trimmed


def check_parentheses(sql: str) -> None:
    balance = paren_balance(sql)
    if balance != 0:
        raise SqlPackError(
            ErrorKind.UNBALANCED_PARENTHESES,
            f"Unbalanced parentheses in the query ({balance:+d})",
        )


def format_sql(
    query: str,
    config: Optional[FormattingConfig] = None,
    for_spreadsheet: bool = False,
    verbose: bool = False,
) -> FormatResult:
    """
    Format a SQL query, packing SELECT / GROUP BY / ORDER BY fields horizontally.

    Args:
        query (str): The SQL statement.
        config (FormattingConfig, optional): Budgets and layout; defaults apply when None.
        for_spreadsheet (bool): Pack against hard_cell_char_limit instead of max_chars_per_line.
        verbose (bool): Print debug information.

    Returns:
        FormatSuccess, or FormatFailure for empty input, unbalanced parentheses
        or a query without recognizable clauses.
    """
    config = config or FormattingConfig()

    try:
        trimmed = check_input(query)
        parse_result = parse_query(trimmed)
        check_parentheses(parse_result.cleaned)
        if not parse_result.clauses:
            raise SqlPackError(ErrorKind.NO_CLAUSES_FOUND, "Could not identify any SQL clauses")
    except SqlPackError as error:
        if verbose:
            print(f"[ERROR] {error.kind.value}: {error.message}")
        return FormatFailure.from_error(error)

    if verbose:
        print(f"[DEBUG] Found {len(parse_result.clauses)} clauses: "
              f"{[c.clause_kind for c in parse_result.clauses]}")

    warnings = validate_clauses(parse_result.clauses)

    field_blocks, field_counts, field_warnings = format_clause_fields(
        parse_result.clauses, config, for_spreadsheet, verbose
    )
    warnings.extend(field_warnings)

    if config.lint_dialect:
        warnings.extend(str(w) for w in lint_sql(trimmed, dialect=config.lint_dialect))

    formatted_query = build_query(parse_result.clauses, field_blocks, config)
    stats = calculate_stats(parse_result, formatted_query, field_blocks, field_counts, config, for_spreadsheet)

    if verbose:
        for warning in warnings:
            print(f"[WARNING] {warning}")

    return FormatSuccess(
        text=formatted_query,
        stats=stats,
        config=config,
        warnings=warnings,
        clauses=parse_result.clauses,
    )


def format_clause_fields(
    clauses: List[ClauseSegment],
    config: FormattingConfig,
    for_spreadsheet: bool = False,
    verbose: bool = False,
) -> Tuple[Dict[int, FieldBlock], Dict[int, int], List[str]]:
    """
    Pack the fields of every field-container clause.

    A clause whose fields cannot be formatted keeps its original content and
    adds a warning; the other clauses are not affected.

    Returns:
        (field_blocks, field_counts, warnings), the first two keyed by clause index.
    """
    field_blocks = {}
    field_counts = {}
    warnings = []

    for index, clause in enumerate(clauses):
        if not clause.is_field_container or not clause.raw_content:
            continue

        header = clause.clause_kind
        content = clause.raw_content
        if clause.clause_kind == "SELECT":
            modifier, content = split_select_modifier(content)
            if modifier:
                header = f"SELECT {modifier}"

        try:
            fields = extract_fields(content)
            field_counts[index] = len(fields)
            valid_fields = clean_fields(fields, verbose=verbose)
            if valid_fields:
                field_blocks[index] = FieldBlock(header, format_fields(valid_fields, config, for_spreadsheet))
        except Exception as error:
            warnings.append(f"Could not format the fields of {clause.clause_kind}: {error}")
            field_blocks[index] = FieldBlock(clause.clause_kind, config.indent + clause.raw_content)

    return field_blocks, field_counts, warnings


def calculate_stats(
    parse_result: ParseResult,
    formatted_query: str,
    field_blocks: Dict[int, FieldBlock],
    field_counts: Dict[int, int],
    config: FormattingConfig,
    for_spreadsheet: bool = False,
) -> FormatStats:
    original_lines = len(parse_result.original.split("\n"))
    formatted_lines = len([line for line in formatted_query.split("\n") if line.strip()])

    line_reduction = round((original_lines - formatted_lines) / original_lines * 100) if original_lines > 0 else 0

    clause_breakdown = {}
    for index, block in sorted(field_blocks.items()):
        kind = parse_result.clauses[index].clause_kind
        key = kind
        suffix = 2
        while key in clause_breakdown:
            key = f"{kind} ({suffix})"
            suffix += 1

        block_lines = len(block.text.split("\n"))
        original_fields = field_counts.get(index, 0)
        clause_breakdown[key] = ClauseStats(
            original_fields=original_fields,
            formatted_lines=block_lines,
            fields_per_line=round(original_fields / block_lines, 1) if block_lines > 0 else 0,
        )

    return FormatStats(
        field_count=sum(field_counts.values()),
        line_count=formatted_lines,
        char_count=len(formatted_query),
        reduction_percent=max(0, line_reduction),
        original_line_count=original_lines,
        clause_count=len(parse_result.clauses),
        has_subqueries=parse_result.has_subqueries,
        subquery_count=count_subqueries(parse_result.clauses),
        clause_breakdown=clause_breakdown,
        max_chars_used=config.budget(for_spreadsheet),
        is_spreadsheet=for_spreadsheet,
        compression_ratio=round(formatted_lines / original_lines * 100) if original_lines > 0 else 100,
        average_line_length=round(len(formatted_query) / formatted_lines) if formatted_lines > 0 else 0,
    )


def prepare_for_spreadsheet(
    query: str,
    config: Optional[FormattingConfig] = None,
    verbose: bool = False,
) -> SpreadsheetResult:
    """
    Format against the spreadsheet budget and return one row per non-blank line.

    Lines longer than hard_cell_char_limit are spread over several rows.
    """
    config = config or FormattingConfig()
    result = format_sql(query, config, for_spreadsheet=True, verbose=verbose)
    if not result.success:
        return result

    rows = []
    for line in result.text.split("\n"):
        if not line.strip():
            continue
        if len(line) > config.hard_cell_char_limit:
            indent = line[:len(line) - len(line.lstrip())]
            chunks = split_for_hard_limit(line, config.hard_cell_char_limit, indent)
            if verbose:
                print(f"[DEBUG] Split a {len(line)} character line into {len(chunks)} rows")
            rows.extend(chunks)
        else:
            rows.append(line)

    return SpreadsheetSuccess(rows=rows, stats=result.stats, warnings=result.warnings)


def score_result(result: FormatSuccess, target_reduction: float) -> float:
    reduction_score = min(result.stats.reduction_percent / target_reduction, 1) * 60
    average = result.stats.average_line_length
    readability_score = min(100 / average, 1) * 40 if average > 0 else 0
    return reduction_score + readability_score


def optimize_formatting(
    query: str,
    config: Optional[FormattingConfig] = None,
    target_reduction: float = 80,
    verbose: bool = False,
) -> FormatResult:
    """
    Format with several line budgets and keep the best scoring result.

    Each trial runs with its own copy of `config`; the caller's value is never
    changed. The winning result's `config` shows the budget that produced it.
    """
    config = config or FormattingConfig()
    best_result = None
    best_score = -1.0

    # Linting does not depend on the budget; only the winner is linted
    trial_base = replace(config, lint_dialect=None)

    for multiplier in OPTIMIZER_MULTIPLIERS:
        trial_config = trial_base.with_overrides(
            max_chars_per_line=max(1, int(config.max_chars_per_line * multiplier))
        )
        result = format_sql(query, trial_config)
        if not result.success:
            continue

        score = score_result(result, target_reduction)
        if verbose:
            print(f"[DEBUG] max_chars_per_line={trial_config.max_chars_per_line} score={score:.1f}")

        if score > best_score:
            best_score = score
            best_result = result

    if best_result is None:
        return format_sql(query, config, verbose=verbose)

    if config.lint_dialect:
        best_result.config = replace(best_result.config, lint_dialect=config.lint_dialect)
        best_result.warnings.extend(str(w) for w in lint_sql(query.strip(), dialect=config.lint_dialect))

    return best_result


def validate_query(query, lint_dialect: Optional[str] = None) -> ValidationReport:
    """
    Check a query before formatting it.

    Errors: not text, empty, no SELECT, unbalanced parentheses.
    Warnings: very long query, many SELECTs, and sqlfluff violations when
    `lint_dialect` is given.
    """
    report = ValidationReport()

    if not isinstance(query, str):
        report.errors.append("The query must be a text string")
        return report

    trimmed = query.strip()
    if not trimmed:
        report.errors.append("The query cannot be empty")
        return report

    if "SELECT" not in trimmed.upper():
        report.errors.append("The query must contain at least one SELECT clause")

    if paren_balance(trimmed) != 0:
        report.errors.append("Unbalanced parentheses in the query")

    if len(trimmed) > LONG_QUERY_CHARS:
        report.warnings.append("The query is very long, processing may be slow")

    if len(re.findall(r"\bSELECT\b", trimmed, re.IGNORECASE)) > MANY_SUBQUERIES:
        report.warnings.append("The query has many subqueries, formatting may be complex")

    if lint_dialect:
        report.warnings.extend(str(w) for w in lint_sql(trimmed, dialect=lint_dialect))

    return report
