import re
from typing import List

SPAN_SPLIT = re.compile(r"(\s+|,\s*)")


def split_for_hard_limit(line: str, hard_limit: int, indent: str) -> List[str]:
    """
    Break a line that is longer than a hard limit (a spreadsheet cell) into chunks.

    The trimmed line is cut into words and separators; words are added to the
    current chunk while it stays within `hard_limit`. Only the first chunk gets
    `indent`. A word that alone exceeds the limit becomes its own chunk, uncut.

    Args:
        line (str): The formatted line.
        hard_limit (int): Maximum chunk length.
        indent (str): Indentation of the first chunk.

    Returns:
        List[str]: Chunks whose concatenation (minus the indent) is the trimmed line.
    """
    chunks = []
    current_chunk = ""
    is_first_chunk = True

    for span in SPAN_SPLIT.split(line.strip()):
        if not span:
            continue

        test_chunk = current_chunk + span
        test_length = len(indent) + len(test_chunk) if is_first_chunk else len(test_chunk)

        if test_length <= hard_limit:
            current_chunk = test_chunk
            continue

        if current_chunk:
            chunks.append(indent + current_chunk if is_first_chunk else current_chunk)
            is_first_chunk = False
        current_chunk = span

    if current_chunk:
        chunks.append(indent + current_chunk if is_first_chunk else current_chunk)

    return chunks or [line]
