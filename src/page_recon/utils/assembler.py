"""
Document assembler module for page reconstruction.

Provides:
- Page and document result models
- The per-page reconstruction pipeline
- Document orchestration with a page cap
- Metrics calculation
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..config import ExportConfig, LayoutConfig, PipelineConfig, JSON_SCHEMA_VERSION
from .blocks import Block, BlockType, classify_blocks
from .highlight import AnchorMatch, locate_anchor
from .io import PageSource
from .layout import segment_columns
from .text import normalize_page_text
from .tokens import RawRun, Token, coalesce_tokens, normalize_tokens
from .visual import OperatorCode, VisualSignal, detect_visual_signal

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class PageResult:
    """Reconstructed page: blocks in reading order."""
    page_number: int
    width: float
    height: float
    blocks: Tuple[Block, ...] = ()
    num_columns: int = 1
    signal: VisualSignal = field(default_factory=VisualSignal)

    @property
    def is_empty(self) -> bool:
        return not self.blocks

    def blocks_of(self, block_type: BlockType) -> List[Block]:
        return [b for b in self.blocks if b.block_type == block_type]

    def to_text(self) -> str:
        """Linearized page text, blocks separated by blank lines."""
        return normalize_page_text("\n\n".join(b.text for b in self.blocks))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_number": self.page_number,
            "width": self.width,
            "height": self.height,
            "num_columns": self.num_columns,
            "visual_signal": self.signal.to_dict(),
            "blocks": [b.to_dict() for b in self.blocks]
        }


@dataclass
class DocumentMetrics:
    """Metrics about document processing."""
    pages_processed: int = 0
    pages_total: int = 0
    empty_pages: int = 0
    two_column_pages: int = 0

    paragraphs: int = 0
    headings: int = 0
    table_rows: int = 0
    figure_placeholders: int = 0

    processing_time_seconds: float = 0.0

    @property
    def blocks_total(self) -> int:
        return self.paragraphs + self.headings + self.table_rows + self.figure_placeholders

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pages_processed": self.pages_processed,
            "pages_total": self.pages_total,
            "empty_pages": self.empty_pages,
            "two_column_pages": self.two_column_pages,
            "blocks": {
                "total": self.blocks_total,
                "paragraphs": self.paragraphs,
                "headings": self.headings,
                "table_rows": self.table_rows,
                "figure_placeholders": self.figure_placeholders
            },
            "processing_time_seconds": round(self.processing_time_seconds, 2)
        }


@dataclass
class Document:
    """Complete reconstructed document."""
    task_id: str
    source_file: str
    pages: List[PageResult] = field(default_factory=list)
    metrics: Optional[DocumentMetrics] = None
    truncated: bool = False
    created_at: str = ""
    schema_version: str = JSON_SCHEMA_VERSION

    def __post_init__(self):
        if not self.task_id:
            self.task_id = str(uuid.uuid4())
        if not self.created_at:
            self.created_at = datetime.now().isoformat()

    def to_text(self, page_marker: str = "--- Page {page_number} ---") -> str:
        """Linearize the document, one marked section per page."""
        parts = []
        for page in self.pages:
            marker = page_marker.format(page_number=page.page_number)
            parts.append(f"{marker}\n{page.to_text()}\n\n")
        return "".join(parts)

    def find_fragment(
        self,
        fragment: str,
        config: Optional[ExportConfig] = None
    ) -> Optional[Tuple[int, AnchorMatch]]:
        """
        Locate a text fragment for highlighting.

        Returns:
            (page_number, match) for the first page containing the fragment's
            anchor, or None. Offsets refer to that page's linearized text.
        """
        config = config or ExportConfig()
        for page in self.pages:
            match = locate_anchor(
                page.to_text(),
                fragment,
                anchor_length=config.anchor_length,
                min_length=config.anchor_min_length,
                retry_skip=config.anchor_retry_skip
            )
            if match is not None:
                return page.page_number, match
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "schema_version": self.schema_version,
            "source_file": self.source_file,
            "created_at": self.created_at,
            "truncated": self.truncated,
            "pages": [p.to_dict() for p in self.pages],
            "metrics": self.metrics.to_dict() if self.metrics else {}
        }


# ============================================================================
# Page Reconstruction
# ============================================================================

def _median_height(tokens: Sequence[Token]) -> float:
    heights = np.array([t.height for t in tokens if t.height > 0], dtype=float)
    return float(np.median(heights)) if heights.size else 0.0


def reconstruct_page(
    runs: Iterable[RawRun],
    page_width: float,
    page_height: float,
    operators: Optional[Iterable[OperatorCode]] = None,
    config: Optional[LayoutConfig] = None,
    page_number: int = 1
) -> PageResult:
    """
    Reconstruct one page's runs into ordered, typed blocks.

    Pure and stateless: the same input always yields the same result, and
    independent pages may be reconstructed concurrently.

    Args:
        runs: Raw runs in the rendering engine's native space
        page_width: Viewport width at scale 1.0
        page_height: Viewport height at scale 1.0
        operators: Drawing-operator summary, or None if unavailable
        config: Layout thresholds
        page_number: Page number (1-indexed)

    Returns:
        PageResult; empty when no text survives normalization
    """
    config = config or LayoutConfig()
    signal = detect_visual_signal(operators)

    tokens = normalize_tokens(runs, page_height, config)
    if not tokens:
        logger.info(f"Page {page_number}: no text after normalization")
        return PageResult(page_number, page_width, page_height, signal=signal)

    tokens = coalesce_tokens(tokens, config)
    columns, column_layout = segment_columns(tokens, page_width, config)
    blocks = classify_blocks(columns, signal, _median_height(tokens), config)

    logger.info(
        f"Page {page_number}: {len(tokens)} tokens, "
        f"{column_layout.num_columns} column(s), {len(blocks)} blocks"
    )
    return PageResult(
        page_number=page_number,
        width=page_width,
        height=page_height,
        blocks=blocks,
        num_columns=column_layout.num_columns,
        signal=signal
    )


# ============================================================================
# Document Assembler
# ============================================================================

class DocumentAssembler:
    """
    Orchestrates reconstruction over the pages of a document.

    Pages are requested from the source sequentially and processing stops
    after ``config.max_pages`` pages.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def process_page(self, source: PageSource) -> PageResult:
        """Fetch one page from its source and reconstruct it."""
        width, height = source.get_viewport()
        return reconstruct_page(
            source.get_positioned_text(),
            width,
            height,
            operators=source.get_drawing_operators(),
            config=self.config.layout,
            page_number=source.page_number
        )

    def process_document(
        self,
        sources: Iterable[PageSource],
        source_file: str,
        pages_total: Optional[int] = None
    ) -> Document:
        """
        Process pages until the sources run out or the page cap is reached.

        Args:
            sources: Page sources in document order
            source_file: Original source file path
            pages_total: Page count of the full document, if known

        Returns:
            Document with one PageResult per processed page
        """
        start_time = time.time()
        max_pages = self.config.max_pages

        doc = Document(task_id=str(uuid.uuid4()), source_file=source_file)

        for source in sources:
            if max_pages is not None and len(doc.pages) >= max_pages:
                doc.truncated = True
                logger.warning(f"Page cap reached, stopping after {max_pages} pages")
                break
            doc.pages.append(self.process_page(source))

        elapsed = time.time() - start_time
        doc.metrics = self._calculate_metrics(doc, elapsed, pages_total)
        return doc

    def _calculate_metrics(
        self,
        doc: Document,
        processing_time: float,
        pages_total: Optional[int]
    ) -> DocumentMetrics:
        """Calculate document-wide metrics."""
        metrics = DocumentMetrics()
        metrics.processing_time_seconds = processing_time
        metrics.pages_processed = len(doc.pages)
        metrics.pages_total = pages_total if pages_total is not None else len(doc.pages)

        for page in doc.pages:
            if page.is_empty:
                metrics.empty_pages += 1
            if page.num_columns == 2:
                metrics.two_column_pages += 1

            metrics.paragraphs += len(page.blocks_of(BlockType.PARAGRAPH))
            metrics.headings += len(page.blocks_of(BlockType.HEADING))
            metrics.table_rows += len(page.blocks_of(BlockType.TABLE_ROW))
            metrics.figure_placeholders += len(page.blocks_of(BlockType.FIGURE_PLACEHOLDER))

        return metrics
