from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet, List, Optional

from sqlfluff.core import Linter, dialect_readout

DEFAULT_DIALECT = "ansi"


@lru_cache(maxsize=1)
def available_dialects() -> FrozenSet[str]:
    """Dialect labels sqlfluff accepts (ansi, bigquery, snowflake, ...)."""
    return frozenset(dialect.label for dialect in dialect_readout())


@dataclass(frozen=True)
class LintWarning:
    code: str
    line_no: Optional[int]
    description: str

    def __str__(self) -> str:
        where = f"L{self.line_no}" if self.line_no else "L?"
        return f"{where}: {self.code} :: {self.description}"


def lint_sql(sql: str, dialect: str = DEFAULT_DIALECT, rules: Optional[List[str]] = None) -> List[LintWarning]:
    """
    Lint a SQL string with sqlfluff and return its violations as warnings.

    Args:
        sql (str): SQL to lint.
        dialect (str): sqlfluff dialect name (ansi, snowflake, postgres, ...).
        rules (List[str], optional): Restrict linting to these rule codes.

    Returns:
        List[LintWarning]: One entry per violation, parse errors included.
    """
    linter = Linter(dialect=dialect, rules=rules)
    linted = linter.lint_string(sql if sql.endswith("\n") else sql + "\n")

    warnings = []
    for violation in linted.get_violations():
        warnings.append(LintWarning(
            code=violation.rule_code(),
            line_no=violation.line_no,
            description=violation.desc(),
        ))
    return warnings
