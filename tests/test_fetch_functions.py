import json

from sql_pack_tool.scripts import fetch_functions
from sql_pack_tool.scripts.fetch_functions import group_functions, map_category, scrape_functions

HTML = """
<html><body>
<table>
  <tr><th>Function Name</th><th>Summary</th><th>Category</th></tr>
  <tr><td>A</td><td></td><td></td></tr>
  <tr><td>APPROX_TOP_K</td><td>Uses Space-Saving.</td><td>Aggregate functions</td></tr>
  <tr><td>CONTAINS</td><td>Returns true if found.</td><td>String &amp; binary functions</td></tr>
  <tr><td>DATEADD</td><td>Adds a value.</td><td>Date &amp; time functions</td></tr>
  <tr><td>NTILE</td><td>Divides an ordered set.</td><td>Window functions</td></tr>
  <tr><td>PARSE_JSON</td><td>Parses text.</td><td>Semi-structured and structured data functions</td></tr>
  <tr><td>[ NOT ] LIKE</td><td>Pattern match.</td><td>String &amp; binary functions</td></tr>
</table>
</body></html>
"""


class FakeResponse:
    text = HTML

    def raise_for_status(self):
        pass


def test_scrape_skips_letter_rows():
    funcs = scrape_functions(HTML)

    assert [f["name"] for f in funcs] == [
        "APPROX_TOP_K", "CONTAINS", "DATEADD", "NTILE", "PARSE_JSON", "[ NOT ] LIKE",
    ]
    assert funcs[1]["category"] == "String & binary functions"


def test_map_category():
    assert map_category("Aggregate functions , Window functions") == "window"
    assert map_category("Date & time functions") == "date"
    assert map_category("Geospatial functions") is None


def test_group_functions_merges_base():
    grouped = group_functions(scrape_functions(HTML), base={"aggregate": ["SUM"]})

    assert grouped == {
        "aggregate": ["APPROX_TOP_K", "SUM"],
        "window": ["NTILE"],
        "string": ["CONTAINS"],
        "date": ["DATEADD"],
    }


def test_main_writes_json(tmp_path, monkeypatch, capsys):
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        return FakeResponse()

    monkeypatch.setattr(fetch_functions.requests, "get", fake_get)
    output = tmp_path / "functions.json"

    fetch_functions.main(["--output", str(output)])

    assert calls == [fetch_functions.URL]
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["window"] == ["NTILE"]
    assert "Output saved to" in capsys.readouterr().out


def test_dry_run_writes_nothing(tmp_path, monkeypatch):
    monkeypatch.setattr(fetch_functions.requests, "get", lambda url, timeout: FakeResponse())
    output = tmp_path / "functions.json"

    fetch_functions.main(["--output", str(output), "--dry-run"])

    assert not output.exists()
