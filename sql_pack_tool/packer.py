"""
Greedy horizontal packing of field lists.

Fields are laid out left to right, as many per line as the character budget
allows. The budget is a soft target: a field longer than the budget still gets
a line of its own and is never cut.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from .config import FormattingConfig

# Separator used by aggressive packing, whatever the configured one is
MIN_SEPARATOR = "    "


class PackingMode(Enum):
    AGGRESSIVE = "aggressive"
    CONSERVATIVE = "conservative"


@dataclass(frozen=True)
class PackedLine:
    fields: Tuple[str, ...]
    text: str

    def __len__(self) -> int:
        return len(self.text)


def should_add_comma(field: str, is_last: bool) -> bool:
    """Every field but the last one gets a comma, never a second one."""
    if is_last:
        return False
    return not field.strip().endswith(",")


def ensure_comma_ending(line: str, needs_comma: bool) -> str:
    if not needs_comma:
        return line
    if not line.strip().endswith(","):
        return line + ","
    return line


def pack(
    fields: List[str],
    max_chars: int,
    indent: str,
    mode: PackingMode = PackingMode.AGGRESSIVE,
    separator: str = MIN_SEPARATOR,
) -> List[PackedLine]:
    """
    Arrange fields into as few lines as fit within `max_chars` (indent included).

    Args:
        fields (List[str]): Fields in output order.
        max_chars (int): Character budget of a line, indentation included.
        indent (str): Indentation each line will be rendered with.
        mode (PackingMode): AGGRESSIVE ignores `separator` and uses MIN_SEPARATOR.
        separator (str): Text placed between two fields of a line.

    Returns:
        List[PackedLine]: Lines in order; every field appears exactly once.
    """
    if not fields:
        return []

    if mode is PackingMode.AGGRESSIVE:
        separator = MIN_SEPARATOR

    available_chars = max_chars - len(indent)
    lines = []
    current_fields = []
    current_line = ""

    for i, raw_field in enumerate(fields):
        field = raw_field.strip()
        is_last = i == len(fields) - 1
        field_with_comma = field + "," if should_add_comma(field, is_last) else field

        if current_line == "":
            proposed_line = field_with_comma
        else:
            proposed_line = current_line + separator + field_with_comma

        if len(proposed_line) <= available_chars or current_line == "":
            current_line = proposed_line
            current_fields.append(field_with_comma)
        else:
            # Line is full, the field opens the next one
            current_line = ensure_comma_ending(current_line, True)
            lines.append(PackedLine(tuple(current_fields), current_line))
            current_line = field_with_comma
            current_fields = [field_with_comma]

    lines.append(PackedLine(tuple(current_fields), current_line))
    return lines


def render_lines(lines: List[PackedLine], indent: str) -> str:
    return "\n".join(indent + line.text for line in lines)


def format_fields(fields: List[str], config: FormattingConfig, for_spreadsheet: bool = False) -> str:
    """
    Pack and render fields with the budget and strategy from `config`.

    Returns:
        The indented block, or "" when there are no fields.
    """
    if not fields:
        return ""

    mode = PackingMode.AGGRESSIVE if config.aggressive_packing else PackingMode.CONSERVATIVE
    lines = pack(
        fields,
        config.budget(for_spreadsheet),
        config.indent,
        mode=mode,
        separator=config.field_separator,
    )
    return render_lines(lines, config.indent)
