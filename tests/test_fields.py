import pytest

from sql_pack_tool.fields import (
    clean_fields,
    extract_fields,
    is_actual_field,
    load_function_names,
    split_select_modifier,
)


class TestExtractFields:

    def test_top_level_commas_only(self):
        assert extract_fields("a, SUM(b, c), 'x,y' AS z, , d") == ["a", "SUM(b, c)", "'x,y' AS z", "d"]

    def test_nested_parentheses(self):
        assert extract_fields("COALESCE(a, (b, c)), d") == ["COALESCE(a, (b, c))", "d"]

    def test_escaped_quote(self):
        assert extract_fields(r"'it\'s, fine' AS x, y") == [r"'it\'s, fine' AS x", "y"]

    def test_empty(self):
        assert extract_fields("") == []
        assert extract_fields(" , ,") == []


@pytest.mark.parametrize("field", [
    "id",
    "t.id AS x",
    "schema.t.col",
    '"Col Name" AS c',
    "*",
    "t.*",
    "SUM(amount) AS total",
    "count(*)",
    "my_func(x)",
    "my_udf(')') AS x",
    "my_udf('(') AS x",
    "ROW_NUMBER() OVER (PARTITION BY a ORDER BY b)",
    "CASE WHEN a > 0 THEN 1 ELSE 0 END AS flag",
    "price * qty AS total",
    "'x' AS y",
    "42 AS answer",
    "(SELECT MAX(b) FROM u) AS m",
    "a DESC",
    "b ASC NULLS LAST",
])
def test_accepted_fields(field):
    assert is_actual_field(field)


@pytest.mark.parametrize("field", [
    "",
    "FROM t",
    "AND x = 1",
    "DISTINCT a",
    "NULL",
    "'x'",
    "a b c",
    "f')'(",
    "')' || x)",
])
def test_rejected_fields(field):
    assert not is_actual_field(field)


def test_clean_fields_drops_fragments(capsys):
    fields = ["id", "FROM t", "  name  ", ""]

    assert clean_fields(fields) == ["id", "name"]
    assert capsys.readouterr().out == ""

    clean_fields(fields, verbose=True)
    assert "[DEBUG] Dropped unrecognized field: FROM t" in capsys.readouterr().out


@pytest.mark.parametrize("content, expected", [
    ("DISTINCT a, b", ("DISTINCT", "a, b")),
    ("distinct a", ("DISTINCT", "a")),
    ("ALL a", ("ALL", "a")),
    ("a, b", ("", "a, b")),
    ("distinct_count, b", ("", "distinct_count, b")),
])
def test_split_select_modifier(content, expected):
    assert split_select_modifier(content) == expected


def test_function_names_include_defaults_and_resource():
    names = load_function_names()

    assert "SUM" in names["aggregate"]
    assert "ROW_NUMBER" in names["window"]
    assert set(names) == {"aggregate", "window", "string", "date"}


def test_parentheses_inside_literals_are_ignored():
    fields = extract_fields("my_udf(')') AS x, a, other_udf('(', b) AS y")

    assert clean_fields(fields) == ["my_udf(')') AS x", "a", "other_udf('(', b) AS y"]
