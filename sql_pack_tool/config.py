"""
Formatting configuration.

A FormattingConfig is immutable: each formatting call (and each optimizer trial)
gets its own value, built from the defaults, an optional ini file and command
line overrides.
"""

import configparser
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Optional, Union

from .lint import available_dialects

# Hard ceiling of a spreadsheet cell; the default budget stays below it
SPREADSHEET_CELL_CEILING = 32767

DEFAULT_MAX_CHARS_PER_LINE = 30000
DEFAULT_HARD_CELL_CHAR_LIMIT = 32500
DEFAULT_INDENT_SIZE = 4
DEFAULT_FIELD_SEPARATOR = "    "

CONFIG_SECTION = "sql_pack_tool"
DEFAULT_CONFIG_FILENAME = ".sqlpack"


@dataclass(frozen=True)
class FormattingConfig:
    max_chars_per_line: int = DEFAULT_MAX_CHARS_PER_LINE
    hard_cell_char_limit: int = DEFAULT_HARD_CELL_CHAR_LIMIT
    indent_size: int = DEFAULT_INDENT_SIZE
    field_separator: str = DEFAULT_FIELD_SEPARATOR
    aggressive_packing: bool = True
    add_blank_lines: bool = True
    lint_dialect: Optional[str] = None

    def __post_init__(self):
        if self.max_chars_per_line <= 0:
            raise ValueError(f"max_chars_per_line must be positive, got {self.max_chars_per_line}")
        if self.hard_cell_char_limit <= 0:
            raise ValueError(f"hard_cell_char_limit must be positive, got {self.hard_cell_char_limit}")
        if self.hard_cell_char_limit > SPREADSHEET_CELL_CEILING:
            raise ValueError(
                f"hard_cell_char_limit {self.hard_cell_char_limit} exceeds the "
                f"spreadsheet cell ceiling of {SPREADSHEET_CELL_CEILING}"
            )
        if self.indent_size < 0:
            raise ValueError(f"indent_size cannot be negative, got {self.indent_size}")
        if not self.field_separator:
            raise ValueError("field_separator cannot be empty")
        if self.lint_dialect is not None and self.lint_dialect not in available_dialects():
            raise ValueError(
                f"Unknown lint dialect '{self.lint_dialect}', expected one of: "
                f"{', '.join(sorted(available_dialects()))}"
            )

    @property
    def indent(self) -> str:
        return " " * self.indent_size

    def budget(self, for_spreadsheet: bool = False) -> int:
        """Character budget of a packed line."""
        return self.hard_cell_char_limit if for_spreadsheet else self.max_chars_per_line

    def with_overrides(self, **changes) -> "FormattingConfig":
        """Return a copy with the given fields replaced; None values are ignored."""
        changes = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **changes)

    def as_dict(self) -> dict:
        return asdict(self)


def load_config(path: Union[str, Path], base: Optional[FormattingConfig] = None) -> FormattingConfig:
    """
    Read the [sql_pack_tool] section of an ini file on top of `base`.

    Example:
        [sql_pack_tool]
        max_chars_per_line = 120
        aggressive_packing = false
        field_separator = "  "

    Raises:
        FileNotFoundError: when `path` does not exist.
        ValueError: on unknown keys or invalid values.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    parser = configparser.ConfigParser()
    parser.read(path, encoding="utf-8")

    config = base or FormattingConfig()
    if not parser.has_section(CONFIG_SECTION):
        return config

    section = parser[CONFIG_SECTION]
    changes = {}
    for key in section:
        if key in ("max_chars_per_line", "hard_cell_char_limit", "indent_size"):
            changes[key] = section.getint(key)
        elif key in ("aggressive_packing", "add_blank_lines"):
            changes[key] = section.getboolean(key)
        elif key == "field_separator":
            # Quotes keep leading/trailing spaces, which ini values would lose
            changes[key] = section.get(key).strip('"')
        elif key == "lint_dialect":
            changes[key] = section.get(key) or None
        else:
            raise ValueError(f"Unknown option '{key}' in [{CONFIG_SECTION}] of {path}")

    return config.with_overrides(**changes)


def find_config(start: Path) -> Optional[Path]:
    """Look for a .sqlpack file in `start` and its parents."""
    start = start.resolve()
    directory = start if start.is_dir() else start.parent
    for candidate_dir in [directory, *directory.parents]:
        candidate = candidate_dir / DEFAULT_CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
