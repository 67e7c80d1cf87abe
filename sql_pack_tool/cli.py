import argparse
import gc
import json
import shutil
import sys
from pathlib import Path
from typing import List, Optional

from .config import FormattingConfig, find_config, load_config
from .formatter import format_sql, optimize_formatting, prepare_for_spreadsheet
from .segmenter import clean_query

AUDIT_FOLDER = Path("sql_pack_tool_audit")


def write_stage(audit_path: Path, stage: int, name: str, content: str, debug: bool) -> int:
    if debug:
        (audit_path / f"{stage:02d}_{name}.sql").write_text(content, encoding="utf-8")
    return stage + 1


# ------------------ Write JSON ------------------
def write_json_pretty(data, filepath: Path):
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=4, ensure_ascii=False)


def run_formatter(sql: str, config: FormattingConfig, spreadsheet: bool, optimize: bool, verbose: bool):
    if spreadsheet:
        return prepare_for_spreadsheet(sql, config, verbose=verbose)
    if optimize:
        return optimize_formatting(sql, config, verbose=verbose)
    return format_sql(sql, config, verbose=verbose)


def report_warnings(result, source: str):
    for warning in getattr(result, "warnings", []):
        print(f"[WARNING] {source}: {warning}", file=sys.stderr)


def process_sql_file(
    filepath: Path,
    config: FormattingConfig,
    spreadsheet: bool = False,
    optimize: bool = False,
    debug: bool = False,
    verbose: bool = False,
    audit_folder: Path = AUDIT_FOLDER,
) -> bool:
    """
    Format one .sql file.

    The file is rewritten with the formatted SQL; in spreadsheet mode the rows
    go to <name>_rows.json next to it instead. With debug, nothing is rewritten
    and every stage is written to the audit folder.

    Returns:
        True when the file was formatted.
    """
    if not filepath.exists() or filepath.suffix.lower() != ".sql":
        print(f"Skipping invalid file: {filepath}")
        return False

    audit_path = audit_folder / filepath.stem
    if debug:
        if audit_path.exists():
            shutil.rmtree(audit_path)
        audit_path.mkdir(parents=True, exist_ok=True)

    stage = 1
    sql = filepath.read_text(encoding="utf-8")
    stage = write_stage(audit_path, stage, "original", sql, debug)
    stage = write_stage(audit_path, stage, "cleaned", clean_query(sql), debug)

    result = run_formatter(sql, config, spreadsheet, optimize, verbose)

    if not result.success:
        print(f"[ERROR] {filepath}: {result.error_kind.value}: {result.message}", file=sys.stderr)
        if debug:
            write_json_pretty(result.as_dict(), audit_path / f"{stage:02d}_error.json")
        return False

    report_warnings(result, str(filepath))

    if debug:
        if spreadsheet:
            write_json_pretty(result.rows, audit_path / f"{stage:02d}_rows.json")
            stage += 1
        else:
            clauses = [clause.as_dict() for clause in result.clauses]
            write_json_pretty(clauses, audit_path / f"{stage:02d}_clauses.json")
            stage += 1
            stage = write_stage(audit_path, stage, "formatted", result.text, debug)
        write_json_pretty(result.as_dict(), audit_path / f"{stage:02d}_result.json")
        print(f"DEBUG MODE: Output saved to {audit_path}")
        return True

    if spreadsheet:
        rows_path = filepath.with_name(f"{filepath.stem}_rows.json")
        write_json_pretty(result.rows, rows_path)
        print(f"File {filepath} exported to {rows_path} ({result.row_count} rows).")
    else:
        filepath.write_text(result.text + "\n", encoding="utf-8")
        print(f"File {filepath} formatted and replaced successfully "
              f"({result.original_line_count} -> {result.line_count} lines).")
    return True


def process_stdin(config: FormattingConfig, spreadsheet: bool, optimize: bool, verbose: bool) -> bool:
    sql = sys.stdin.read()
    result = run_formatter(sql, config, spreadsheet, optimize, verbose)

    if not result.success:
        print(f"[ERROR] {result.error_kind.value}: {result.message}", file=sys.stderr)
        return False

    report_warnings(result, "<stdin>")
    if spreadsheet:
        print("\n".join(result.rows))
    else:
        print(result.text)
    return True


def build_config(args, path: Optional[Path]) -> FormattingConfig:
    config = FormattingConfig()

    config_path = Path(args.config) if args.config else (find_config(path) if path else None)
    if config_path:
        config = load_config(config_path, config)
        if args.verbose:
            print(f"[DEBUG] Loaded config from {config_path}")

    return config.with_overrides(
        max_chars_per_line=args.max_chars,
        hard_cell_char_limit=args.cell_limit,
        indent_size=args.indent,
        aggressive_packing=False if args.conservative else None,
        add_blank_lines=False if args.no_blank_lines else None,
        lint_dialect=args.lint,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SQL field packing formatter")
    parser.add_argument("path", help="Path to SQL file or folder, or - for stdin")
    parser.add_argument("--spreadsheet", action="store_true", help="Pack for spreadsheet cells and export rows")
    parser.add_argument("--optimize", action="store_true", help="Try several line budgets and keep the best")
    parser.add_argument("--max-chars", type=int, help="Character budget per line")
    parser.add_argument("--cell-limit", type=int, help="Character budget per spreadsheet cell")
    parser.add_argument("--indent", type=int, help="Indentation size in spaces")
    parser.add_argument("--conservative", action="store_true", help="Use the configured field separator")
    parser.add_argument("--no-blank-lines", action="store_true", help="No blank line between clauses")
    parser.add_argument("--lint", metavar="DIALECT", help="Add sqlfluff lint warnings for this dialect")
    parser.add_argument("--config", help="Path to a .sqlpack config file")
    parser.add_argument("--audit-folder", default=str(AUDIT_FOLDER), help="Where debug stages are written")
    parser.add_argument("--debug", action="store_true", help="Write stages to the audit folder, keep files as they are")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose debug logging")
    return parser


# ------------------ Main entrypoint ------------------
def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.path == "-":
        try:
            config = build_config(args, None)
        except (ValueError, FileNotFoundError) as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 2
        return 0 if process_stdin(config, args.spreadsheet, args.optimize, args.verbose) else 1

    path = Path(args.path).resolve()
    if not path.exists():
        print(f"ERROR: Path does not exist: {path}")
        return 2

    try:
        config = build_config(args, path)
    except (ValueError, FileNotFoundError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    sql_files = []
    if path.is_file() and path.suffix.lower() == ".sql":
        sql_files = [path]
    elif path.is_dir():
        sql_files = sorted(path.rglob("*.sql"))

    if not sql_files:
        print("No .sql files found to process.")
        return 1

    failures = 0
    for sql_file in sql_files:
        if not process_sql_file(
            sql_file,
            config,
            spreadsheet=args.spreadsheet,
            optimize=args.optimize,
            debug=args.debug,
            verbose=args.verbose,
            audit_folder=Path(args.audit_folder),
        ):
            failures += 1

    gc.collect()
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
