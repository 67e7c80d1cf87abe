"""
Refresh resources/functions.json from the Snowflake function reference.

    python -m sql_pack_tool.scripts.fetch_functions [--output PATH] [--dry-run]
"""

import argparse
import json
from pathlib import Path
from typing import Dict, List, Optional

import requests
from bs4 import BeautifulSoup

from sql_pack_tool.fields import FUNCTION_CATEGORIES, FUNCTIONS_PATH

URL = "https://docs.snowflake.com/en/sql-reference/functions-all"

# Substring of the documentation category -> field filter category
CATEGORY_MAP = [
    ("window", "window"),
    ("aggregate", "aggregate"),
    ("string", "string"),
    ("date", "date"),
]


def scrape_functions(html: str) -> List[Dict[str, str]]:
    soup = BeautifulSoup(html, "html.parser")

    table = soup.find("table")
    if not table:
        raise RuntimeError("Could not find functions table in the page")

    rows = table.find_all("tr")
    headers = [th.get_text(strip=True) for th in rows[0].find_all("th")]

    name_idx = headers.index("Function Name")
    summary_idx = headers.index("Summary")
    category_idx = headers.index("Category")

    funcs = []
    for tr in rows[1:]:
        tds = tr.find_all("td")
        if len(tds) < 3:
            continue
        name = tds[name_idx].get_text(strip=True)
        summary = tds[summary_idx].get_text(strip=True)
        category = tds[category_idx].get_text(strip=True)
        # Alphabet header rows only carry a name
        if not summary and not category:
            continue
        funcs.append({
            "name": name.upper(),
            "summary": summary,
            "category": category,
        })

    return funcs


def map_category(category: str) -> Optional[str]:
    lowered = category.lower()
    for needle, target in CATEGORY_MAP:
        if needle in lowered:
            return target
    return None


def group_functions(funcs: List[Dict[str, str]], base: Optional[Dict[str, List[str]]] = None) -> Dict[str, List[str]]:
    """Merge scraped functions into `base`, keeping only identifier-like names."""
    grouped = {category: set((base or {}).get(category, [])) for category in FUNCTION_CATEGORIES}

    for func in funcs:
        target = map_category(func["category"])
        name = func["name"].split("(")[0].strip()
        if target and name.replace("_", "").isalnum():
            grouped[target].add(name)

    return {category: sorted(names) for category, names in grouped.items()}


def fetch_functions(url: str = URL, timeout: int = 30) -> List[Dict[str, str]]:
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    return scrape_functions(resp.text)


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Refresh the recognized SQL function list")
    parser.add_argument("--output", default=str(FUNCTIONS_PATH), help="Path of the functions.json to write")
    parser.add_argument("--url", default=URL, help="Function reference page to scrape")
    parser.add_argument("--dry-run", action="store_true", help="Print the counts without writing")
    args = parser.parse_args(argv)

    output_path = Path(args.output)
    base = {}
    if output_path.exists():
        base = json.loads(output_path.read_text(encoding="utf-8"))

    funcs = fetch_functions(args.url)
    grouped = group_functions(funcs, base)

    for category, names in grouped.items():
        print(f"{category}: {len(names)} functions")

    if args.dry_run:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(grouped, f, indent=4)
        f.write("\n")
    print(f"Fetched {len(funcs)} functions. Output saved to {output_path}")


if __name__ == "__main__":
    main()
