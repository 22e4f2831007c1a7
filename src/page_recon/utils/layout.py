"""
Layout module for page reconstruction.

Provides:
- Line and Column data classes
- Multi-column detection from a horizontal occupancy histogram
- Column partitioning (left column linearized before the right one)
- Line assembly by vertical proximity
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from ..config import LayoutConfig
from .tokens import Token

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class Line:
    """Tokens sharing one vertical band, sorted left to right."""
    tokens: Tuple[Token, ...]

    @property
    def y(self) -> float:
        return self.tokens[0].y

    @property
    def bottom(self) -> float:
        return max(t.y for t in self.tokens)

    @property
    def height(self) -> float:
        return max(t.height for t in self.tokens)

    @property
    def gaps(self) -> List[float]:
        """Horizontal gaps between consecutive tokens."""
        return [
            nxt.x - cur.right
            for cur, nxt in zip(self.tokens, self.tokens[1:])
        ]

    @property
    def text(self) -> str:
        return " ".join(t.text for t in self.tokens)


@dataclass(frozen=True)
class Column:
    """One reading-order stream of lines."""
    index: int
    lines: Tuple[Line, ...]

    @property
    def tokens(self) -> List[Token]:
        return [t for line in self.lines for t in line.tokens]


@dataclass
class ColumnLayout:
    """Result of column detection."""
    num_columns: int
    left_count: int
    right_count: int
    center_count: int
    histogram: List[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.left_count + self.right_count + self.center_count


# ============================================================================
# Column Segmenter
# ============================================================================

def detect_columns(
    tokens: List[Token],
    page_width: float,
    config: Optional[LayoutConfig] = None
) -> ColumnLayout:
    """
    Decide between a single- and a dual-column page.

    Two columns are declared only if both the left and the right side hold
    more than ``column_balance_fraction`` of all tokens. Heavy center mass
    keeps the page single-column.
    """
    config = config or LayoutConfig()
    if not tokens or page_width <= 0:
        return ColumnLayout(num_columns=1, left_count=0, right_count=0, center_count=0)

    centers = np.array([t.center_x for t in tokens], dtype=float)
    left = int(np.count_nonzero(centers < config.left_column_bound * page_width))
    right = int(np.count_nonzero(centers > config.right_column_bound * page_width))
    center = len(tokens) - left - right

    histogram, _ = np.histogram(
        np.clip(centers, 0, page_width),
        bins=config.histogram_bins,
        range=(0, page_width)
    )

    threshold = config.column_balance_fraction * len(tokens)
    two_columns = (
        not config.force_single_column
        and left > threshold
        and right > threshold
    )

    layout = ColumnLayout(
        num_columns=2 if two_columns else 1,
        left_count=left,
        right_count=right,
        center_count=center,
        histogram=histogram.tolist()
    )
    logger.debug(
        f"Column histogram left={left} right={right} center={center} "
        f"-> {layout.num_columns} column(s)"
    )
    return layout


def assign_column(
    token: Token,
    page_width: float,
    num_columns: int = 2,
    config: Optional[LayoutConfig] = None
) -> int:
    """Column index of a token: 0 = left (or only) column, 1 = right."""
    if num_columns < 2:
        return 0
    config = config or LayoutConfig()
    return 0 if token.center_x < config.column_split * page_width else 1


def partition_columns(
    tokens: List[Token],
    page_width: float,
    num_columns: int,
    config: Optional[LayoutConfig] = None
) -> List[List[Token]]:
    """Stable partition of tokens into per-column lists."""
    buckets: List[List[Token]] = [[] for _ in range(max(num_columns, 1))]
    for token in tokens:
        buckets[assign_column(token, page_width, num_columns, config)].append(token)
    return buckets


# ============================================================================
# Line Assembler
# ============================================================================

class LineBuilder:
    """
    Streaming reducer that groups y-sorted tokens into lines.

    ``push`` returns the line that was closed by the incoming token, or
    ``None`` while the token continues the current line.
    """

    def __init__(self, line_tolerance: Optional[float] = 4.0):
        self.line_tolerance = line_tolerance
        self._current: List[Token] = []
        self._line_y = 0.0

    def _tolerance(self, token: Token) -> float:
        if self.line_tolerance is None:
            return token.height * 0.5
        return self.line_tolerance

    def push(self, token: Token) -> Optional[Line]:
        if not self._current:
            self._current = [token]
            self._line_y = token.y
            return None

        if abs(token.y - self._line_y) > self._tolerance(token):
            closed = self.flush()
            self._current = [token]
            self._line_y = token.y
            return closed

        self._current.append(token)
        return None

    def flush(self) -> Optional[Line]:
        if not self._current:
            return None
        line = Line(tokens=tuple(sorted(self._current, key=lambda t: t.x)))
        self._current = []
        return line


def assemble_lines(
    tokens: List[Token],
    config: Optional[LayoutConfig] = None
) -> List[Line]:
    """Bucket a column's tokens into lines, top to bottom."""
    config = config or LayoutConfig()
    builder = LineBuilder(config.line_tolerance)
    lines = []
    for token in sorted(tokens, key=lambda t: (t.y, t.x)):
        closed = builder.push(token)
        if closed is not None:
            lines.append(closed)
    last = builder.flush()
    if last is not None:
        lines.append(last)
    return lines


def segment_columns(
    tokens: List[Token],
    page_width: float,
    config: Optional[LayoutConfig] = None
) -> Tuple[List[Column], ColumnLayout]:
    """
    Split a page's tokens into columns of assembled lines.

    Returns:
        Tuple of (columns in reading order, column detection details)
    """
    config = config or LayoutConfig()
    layout = detect_columns(tokens, page_width, config)
    buckets = partition_columns(tokens, page_width, layout.num_columns, config)

    columns = []
    for index, bucket in enumerate(buckets):
        lines = assemble_lines(bucket, config)
        lines.sort(key=lambda line: line.y)
        columns.append(Column(index=index, lines=tuple(lines)))
    return columns, layout
