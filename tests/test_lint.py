"""
sqlfluff integration. These run the real linter.
"""
from sql_pack_tool.config import FormattingConfig
from sql_pack_tool.formatter import format_sql, validate_query
from sql_pack_tool.lint import LintWarning, lint_sql


def test_capitalisation_violation():
    warnings = lint_sql("select a FROM t\n", rules=["CP01"])

    assert warnings
    assert all(isinstance(w, LintWarning) for w in warnings)
    assert {w.code for w in warnings} == {"CP01"}
    assert warnings[0].line_no == 1


def test_clean_sql_has_no_violations():
    assert lint_sql("SELECT a FROM t", rules=["CP01"]) == []


def test_warning_text():
    warning = LintWarning(code="CP01", line_no=3, description="Keywords must be consistently upper case.")

    assert str(warning) == "L3: CP01 :: Keywords must be consistently upper case."
    assert str(LintWarning("PRS", None, "x")) == "L?: PRS :: x"


def test_validate_query_adds_lint_warnings():
    report = validate_query("select a FROM t", lint_dialect="ansi")

    assert report.is_valid
    assert any("CP01" in w for w in report.warnings)


def test_format_sql_adds_lint_warnings():
    result = format_sql("select a FROM t", FormattingConfig(lint_dialect="ansi"))

    assert result.success
    assert any("CP01" in w for w in result.warnings)
    assert format_sql("select a FROM t").warnings == []
