"""
Token normalization and coalescing.

Provides:
- RawRun: a positioned text run as emitted by the rendering engine
- Token: a run in page-local, top-left-origin coordinates
- Header/footer band filtering
- Coalescing of per-glyph fragments into word/phrase tokens
"""

import logging
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional

from ..config import LayoutConfig

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class RawRun:
    """A text run in the rendering engine's native (bottom-left origin) space."""
    text: str
    x: float
    y: float
    width: float
    height: float
    has_eol: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> 'RawRun':
        return cls(
            text=str(data.get("text", "")),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            width=float(data.get("width", 0.0)),
            height=float(data.get("height", 0.0)),
            has_eol=bool(data.get("has_eol", data.get("explicit_break", False))),
        )


@dataclass(frozen=True)
class Token:
    """
    A positioned unit of text in page-local coordinates.

    Origin is the top-left corner of the page, y grows downward and
    ``y`` is the run's baseline.
    """
    text: str
    x: float
    y: float
    width: float
    height: float
    explicit_break: bool = False

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2


# ============================================================================
# Token Normalizer
# ============================================================================

def normalize_tokens(
    runs: Iterable[RawRun],
    page_height: float,
    config: Optional[LayoutConfig] = None
) -> List[Token]:
    """
    Flip runs into top-left coordinates and drop empty and header/footer runs.

    Args:
        runs: Raw runs from the rendering engine
        page_height: Viewport height at scale 1.0
        config: Layout thresholds

    Returns:
        Filtered tokens, in input order
    """
    config = config or LayoutConfig()
    top = config.header_fraction * page_height
    bottom = config.footer_fraction * page_height

    tokens = []
    dropped_bands = 0
    for run in runs:
        text = run.text.strip()
        if not text:
            continue

        y = page_height - run.y
        if y < top or y > bottom:
            dropped_bands += 1
            continue

        tokens.append(Token(
            text=text,
            x=run.x,
            y=y,
            width=max(run.width, 0.0),
            height=max(run.height, 0.0),
            explicit_break=run.has_eol
        ))

    if dropped_bands:
        logger.debug(f"Dropped {dropped_bands} runs in header/footer bands")
    return tokens


# ============================================================================
# Token Coalescer
# ============================================================================

def _same_line(a: Token, b: Token) -> bool:
    return abs(a.y - b.y) < max(a.height, b.height) / 2


def _reading_sort(tokens: List[Token]) -> List[Token]:
    """Sort by (y, x), treating tokens within half a height as one row."""
    ordered = sorted(tokens, key=lambda t: (t.y, t.x))
    rows: List[List[Token]] = []
    for token in ordered:
        if rows and _same_line(rows[-1][0], token):
            rows[-1].append(token)
        else:
            rows.append([token])
    return [t for row in rows for t in sorted(row, key=lambda t: t.x)]


def coalesce_tokens(
    tokens: List[Token],
    config: Optional[LayoutConfig] = None
) -> List[Token]:
    """
    Merge adjacent, tightly spaced fragments into word/phrase tokens.

    The rendering engine often emits one run per glyph or syllable. A token
    is merged into the accumulator when it sits on the same line and its
    left edge is within ``height * coalesce_gap_ratio`` of the
    accumulator's right edge.
    """
    config = config or LayoutConfig()
    if not tokens:
        return []

    merged = []
    current = None
    for token in _reading_sort(tokens):
        if current is None:
            current = token
            continue

        gap = token.x - current.right
        adjacent = (
            not current.explicit_break
            and _same_line(current, token)
            and gap < current.height * config.coalesce_gap_ratio
        )
        if not adjacent:
            merged.append(current)
            current = token
            continue

        joiner = " " if gap > current.height * config.word_space_ratio else ""
        current = replace(
            current,
            text=current.text + joiner + token.text,
            width=max(current.right, token.right) - current.x,
            height=max(current.height, token.height),
            explicit_break=token.explicit_break
        )

    merged.append(current)
    logger.debug(f"Coalesced {len(tokens)} fragments into {len(merged)} tokens")
    return merged
