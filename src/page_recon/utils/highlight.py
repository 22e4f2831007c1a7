"""
Fuzzy relocation of text fragments for search/highlight consumers.

The normalization rule is shared with the viewer and must not change:
keep ASCII letters, digits and CJK unified ideographs (U+4E00..U+9FA5),
lowercase them, and compare the first ``anchor_length`` characters.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

_KEEP_CHAR_RE = re.compile(r"[a-zA-Z0-9一-龥]")
_DROP_CHARS_RE = re.compile(r"[^a-zA-Z0-9一-龥]")

DEFAULT_ANCHOR_LENGTH = 50


@dataclass(frozen=True)
class AnchorMatch:
    """Character span of a located fragment in the original page text."""
    start: int
    end: int  # exclusive
    anchor: str
    skipped: int = 0  # leading anchor characters dropped on the retry


def normalize_for_anchor(text: str) -> str:
    """Strip everything except letters, digits and CJK, then lowercase."""
    return _DROP_CHARS_RE.sub("", text).lower()


def make_anchor(fragment: str, length: int = DEFAULT_ANCHOR_LENGTH) -> str:
    return normalize_for_anchor(fragment)[:length]


def _normalized_with_mapping(text: str) -> Tuple[str, List[int]]:
    chars = []
    mapping = []
    for index, char in enumerate(text):
        if _KEEP_CHAR_RE.match(char):
            chars.append(char.lower())
            mapping.append(index)
    return "".join(chars), mapping


def locate_anchor(
    page_text: str,
    fragment: str,
    anchor_length: int = DEFAULT_ANCHOR_LENGTH,
    min_length: int = 2,
    retry_skip: int = 5
) -> Optional[AnchorMatch]:
    """
    Find a fragment in page text using the normalized anchor.

    If the full anchor is not found and it is longer than 10 characters,
    the search is retried without its first ``retry_skip`` characters
    (the most common place for extraction noise).

    Returns:
        AnchorMatch with offsets into ``page_text``, or None
    """
    anchor = make_anchor(fragment, anchor_length)
    if len(anchor) < min_length:
        return None

    normalized, mapping = _normalized_with_mapping(page_text)

    key = anchor
    skipped = 0
    start = normalized.find(key)
    if start == -1 and len(anchor) > 10:
        key = anchor[retry_skip:]
        skipped = retry_skip
        start = normalized.find(key)
    if start == -1:
        return None

    end = min(start + len(key) - 1, len(mapping) - 1)
    return AnchorMatch(
        start=mapping[start],
        end=mapping[end] + 1,
        anchor=key,
        skipped=skipped
    )
