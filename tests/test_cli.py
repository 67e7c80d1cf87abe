"""
Command line tests. Files are written to tmp_path and formatted in place.
"""
import io
import json

import pytest

from sql_pack_tool.cli import build_parser, main

QUERY = "SELECT a, b FROM t WHERE x = 1"
FORMATTED = "SELECT\n    a,    b\n\nFROM t\n\nWHERE x = 1"


@pytest.fixture
def sql_file(tmp_path):
    path = tmp_path / "query.sql"
    path.write_text(QUERY, encoding="utf-8")
    return path


def test_file_is_rewritten(sql_file, capsys):
    assert main([str(sql_file)]) == 0

    assert sql_file.read_text(encoding="utf-8") == FORMATTED + "\n"
    assert "formatted and replaced successfully" in capsys.readouterr().out


def test_folder_is_processed_recursively(tmp_path):
    nested = tmp_path / "nested"
    nested.mkdir()
    first = tmp_path / "one.sql"
    second = nested / "two.sql"
    first.write_text(QUERY, encoding="utf-8")
    second.write_text("SELECT c FROM u", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("SELECT z", encoding="utf-8")

    assert main([str(tmp_path)]) == 0
    assert first.read_text(encoding="utf-8") == FORMATTED + "\n"
    assert second.read_text(encoding="utf-8") == "SELECT\n    c\n\nFROM u\n"
    assert (tmp_path / "notes.txt").read_text(encoding="utf-8") == "SELECT z"


def test_options_override_defaults(sql_file):
    assert main([str(sql_file), "--no-blank-lines", "--indent", "2"]) == 0

    assert sql_file.read_text(encoding="utf-8") == "SELECT\n  a,    b\nFROM t\nWHERE x = 1\n"


def test_config_file_is_found(sql_file, tmp_path):
    (tmp_path / ".sqlpack").write_text("[sql_pack_tool]\nadd_blank_lines = false\n", encoding="utf-8")

    assert main([str(sql_file)]) == 0
    assert sql_file.read_text(encoding="utf-8") == "SELECT\n    a,    b\nFROM t\nWHERE x = 1\n"


def test_debug_writes_audit_stages(sql_file, tmp_path):
    audit = tmp_path / "audit"

    assert main([str(sql_file), "--debug", "--audit-folder", str(audit)]) == 0

    assert sql_file.read_text(encoding="utf-8") == QUERY
    stages = sorted(p.name for p in (audit / "query").iterdir())
    assert stages == [
        "01_original.sql",
        "02_cleaned.sql",
        "03_clauses.json",
        "04_formatted.sql",
        "05_result.json",
    ]
    clauses = json.loads((audit / "query" / "03_clauses.json").read_text(encoding="utf-8"))
    assert [c["type"] for c in clauses] == ["SELECT", "FROM", "WHERE"]
    assert (audit / "query" / "04_formatted.sql").read_text(encoding="utf-8") == FORMATTED


def test_spreadsheet_rows_are_exported(sql_file):
    assert main([str(sql_file), "--spreadsheet"]) == 0

    rows = json.loads(sql_file.with_name("query_rows.json").read_text(encoding="utf-8"))
    assert rows == ["SELECT", "    a,    b", "FROM t", "WHERE x = 1"]
    assert sql_file.read_text(encoding="utf-8") == QUERY


def test_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(QUERY))

    assert main(["-"]) == 0
    assert capsys.readouterr().out == FORMATTED + "\n"


def test_formatting_error(tmp_path, capsys):
    path = tmp_path / "bad.sql"
    path.write_text("hello world", encoding="utf-8")

    assert main([str(path)]) == 1
    assert "[ERROR]" in capsys.readouterr().err
    assert path.read_text(encoding="utf-8") == "hello world"


def test_warnings_go_to_stderr(tmp_path, capsys):
    path = tmp_path / "order.sql"
    path.write_text("SELECT a FROM t ORDER BY a WHERE x = 1", encoding="utf-8")

    assert main([str(path)]) == 0
    assert "[WARNING]" in capsys.readouterr().err


def test_missing_path(tmp_path):
    assert main([str(tmp_path / "missing.sql")]) == 2


def test_missing_config_file(sql_file, tmp_path):
    assert main([str(sql_file), "--config", str(tmp_path / "nope.ini")]) == 2


def test_invalid_option_value(sql_file):
    assert main([str(sql_file), "--max-chars", "0"]) == 2


def test_unknown_lint_dialect(sql_file, capsys):
    assert main([str(sql_file), "--lint", "not_a_dialect"]) == 2

    assert "Unknown lint dialect" in capsys.readouterr().err
    assert sql_file.read_text(encoding="utf-8") == QUERY


def test_parser_defaults():
    args = build_parser().parse_args(["x.sql"])

    assert not args.spreadsheet
    assert not args.optimize
    assert args.max_chars is None
    assert args.lint is None
