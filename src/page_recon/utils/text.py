"""
Paragraph joining, hyphenation repair and whitespace normalization.
"""

import re
from typing import Iterable

# word-, line break, word
_HYPHEN_BREAK_RE = re.compile(r"(\w+)-[ \t]*\n\s*(\w+)")
_SPACES_RE = re.compile(r"[ \t\f\v]+")
_BLANK_LINES_RE = re.compile(r"\n\s*\n(\s*\n)+")


def repair_hyphenation(text: str) -> str:
    """
    Remove end-of-line hyphens that split a word across a line break.

    ``"algo-\\nrithm"`` becomes ``"algorithm"``. Hyphens that are not
    followed by a line break are left alone.
    """
    return _HYPHEN_BREAK_RE.sub(r"\1\2", text)


def collapse_spaces(text: str) -> str:
    """Collapse runs of spaces and tabs into one space."""
    return _SPACES_RE.sub(" ", text)


def join_lines(lines: Iterable[str]) -> str:
    """
    Join the lines of one paragraph into a single string.

    Lines are joined on line breaks first so that hyphenation repair only
    sees real line ends, then remaining breaks become single spaces.
    """
    raw = "\n".join(line.strip() for line in lines if line and line.strip())
    raw = repair_hyphenation(raw)
    raw = raw.replace("\n", " ")
    return collapse_spaces(raw).strip()


def normalize_page_text(text: str) -> str:
    """
    Final cleanup of linearized page text.

    Collapses spaces within lines and repairs doubled blank lines, such as
    those produced around figure placeholders, into one blank line.
    """
    lines = [collapse_spaces(line).strip() for line in text.split("\n")]
    cleaned = "\n".join(lines)
    cleaned = _BLANK_LINES_RE.sub("\n\n", cleaned)
    return cleaned.strip()
