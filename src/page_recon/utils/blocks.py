"""
Block classification for page reconstruction.

Turns each column's line stream into typed blocks:
- paragraphs (lines joined, hyphenation repaired)
- headings (short standalone lines, keyword/numbering/size heuristics)
- table rows (wide inter-token gaps, rendered as ``| a | b |`` cells)
- figure placeholders (large vertical gaps on pages with visual content)
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ..config import LayoutConfig
from .layout import Column, Line
from .text import join_lines
from .visual import VisualSignal

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes and Enums
# ============================================================================

class BlockType(Enum):
    """Types of output blocks."""
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    TABLE_ROW = "table_row"
    FIGURE_PLACEHOLDER = "figure_placeholder"


@dataclass(frozen=True)
class Block:
    """A typed, merged unit of output text."""
    block_type: BlockType
    text: str
    source_lines: range
    column_index: int = 0

    def to_dict(self) -> dict:
        return {
            "type": self.block_type.value,
            "text": self.text,
            "source_lines": [self.source_lines.start, self.source_lines.stop],
            "column_index": self.column_index,
        }


# ============================================================================
# Line-level Heuristics
# ============================================================================

# "3.2", "IV."; not years ("2019 IEEE") and not author initials ("C. Smith")
_SECTION_NUMBER_RE = re.compile(
    r"^(?![A-Z]\.\s+[A-Z][a-z]+(\s|,|$))(\d{1,2}(\.\d{1,2})*\.?|[IVXLC]+\.)\s+[A-Z]"
)
_LEADING_NUMBER_RE = re.compile(r"^(\d{1,2}(\.\d{1,2})*\.?|[IVXLC]+\.)\s+")
_SENTENCE_END = (".", ",", ";", "!", "?")


def is_table_row(line: Line, config: Optional[LayoutConfig] = None) -> bool:
    """A line with enough tokens and at least one wide horizontal gap."""
    config = config or LayoutConfig()
    gaps = line.gaps
    if len(line.tokens) < config.table_min_tokens or not gaps:
        return False
    return max(gaps) > config.table_gap_threshold


def render_table_row(line: Line) -> str:
    return "| " + " | ".join(t.text for t in line.tokens) + " |"


def looks_like_heading(
    line: Line,
    text: str,
    median_height: float = 0.0,
    config: Optional[LayoutConfig] = None
) -> bool:
    """Keyword, section-number and font-size test for a standalone line."""
    config = config or LayoutConfig()
    words = text.split()
    if not words or len(words) > config.heading_max_words:
        return False

    bare = _LEADING_NUMBER_RE.sub("", text).strip(" .:").lower()
    if bare in config.heading_keywords:
        return True

    if text.endswith(_SENTENCE_END):
        return False
    if _SECTION_NUMBER_RE.match(text) and any(c.isalpha() for c in bare):
        return True
    if median_height > 0 and line.height >= median_height * config.heading_size_ratio:
        return True
    return False


# ============================================================================
# Paragraph Builder
# ============================================================================

class ParagraphBuilder:
    """
    Reducer accumulating consecutive lines of one paragraph.

    ``push`` returns the block flushed by a paragraph boundary, or ``None``
    while the line continues the current paragraph.
    """

    def __init__(
        self,
        column_index: int = 0,
        median_height: float = 0.0,
        config: Optional[LayoutConfig] = None
    ):
        self.column_index = column_index
        self.median_height = median_height
        self.config = config or LayoutConfig()
        self._lines: List[Line] = []
        self._start = 0

    def push(self, line: Line, index: int, new_paragraph: bool = False) -> Optional[Block]:
        flushed = self.flush() if new_paragraph else None
        if not self._lines:
            self._start = index
        self._lines.append(line)
        return flushed

    def flush(self) -> Optional[Block]:
        if not self._lines:
            return None
        lines, self._lines = self._lines, []

        text = join_lines(line.text for line in lines)
        if not text:
            return None

        block_type = BlockType.PARAGRAPH
        if len(lines) == 1 and looks_like_heading(
            lines[0], text, self.median_height, self.config
        ):
            block_type = BlockType.HEADING

        return Block(
            block_type=block_type,
            text=text,
            source_lines=range(self._start, self._start + len(lines)),
            column_index=self.column_index
        )


# ============================================================================
# Block Classifier
# ============================================================================

def _line_height(line: Line, previous: Line, config: LayoutConfig) -> float:
    return line.height or previous.height or config.default_line_height


def classify_column(
    column: Column,
    signal: VisualSignal,
    line_offset: int = 0,
    median_height: float = 0.0,
    config: Optional[LayoutConfig] = None
) -> List[Block]:
    """
    Classify one column's lines into blocks.

    Args:
        column: Column with lines sorted top to bottom
        signal: Page-level visual signal gating figure placeholders
        line_offset: Index of the column's first line within the page
        median_height: Median token height on the page
        config: Layout thresholds

    Returns:
        Blocks in reading order
    """
    config = config or LayoutConfig()
    visual_gate = signal.has_image_paint or (
        config.vector_paths_gate_placeholders and signal.has_vector_path
    )

    blocks: List[Block] = []
    builder = ParagraphBuilder(column.index, median_height, config)

    def emit(block: Optional[Block]):
        if block is not None:
            blocks.append(block)

    previous: Optional[Line] = None
    for offset, line in enumerate(column.lines):
        index = line_offset + offset
        new_paragraph = False

        if previous is not None:
            height = _line_height(line, previous, config)
            gap = line.y - previous.bottom
            if gap > height * config.visual_gap_multiplier and visual_gate:
                emit(builder.flush())
                logger.debug(f"Figure placeholder before line {index} (gap={gap:.1f})")
                blocks.append(Block(
                    block_type=BlockType.FIGURE_PLACEHOLDER,
                    text=config.placeholder_text,
                    source_lines=range(index, index),
                    column_index=column.index
                ))
                new_paragraph = True
            elif gap > height * config.paragraph_gap_multiplier:
                new_paragraph = True

        if is_table_row(line, config):
            emit(builder.flush())
            blocks.append(Block(
                block_type=BlockType.TABLE_ROW,
                text=render_table_row(line),
                source_lines=range(index, index + 1),
                column_index=column.index
            ))
        else:
            emit(builder.push(line, index, new_paragraph))

        previous = line

    emit(builder.flush())
    return blocks


def classify_blocks(
    columns: Sequence[Column],
    signal: Optional[VisualSignal] = None,
    median_height: float = 0.0,
    config: Optional[LayoutConfig] = None
) -> Tuple[Block, ...]:
    """Classify every column in reading order and concatenate the blocks."""
    signal = signal or VisualSignal()
    blocks: List[Block] = []
    line_offset = 0
    for column in columns:
        blocks.extend(classify_column(column, signal, line_offset, median_height, config))
        line_offset += len(column.lines)
    return tuple(blocks)
