"""
Export module for page reconstruction.

Provides:
- Linearized text export (one ``--- Page N ---`` section per page)
- Parsing of linearized text back into pages
- Markdown export
- JSON export
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..config import ExportConfig
from .assembler import Document
from .blocks import Block, BlockType
from .io import save_json

logger = logging.getLogger(__name__)

DEFAULT_PAGE_MARKER = "--- Page {page_number} ---"


# ============================================================================
# Text Exporter
# ============================================================================

class TextExporter:
    """Export document as linearized text with page markers."""

    def __init__(self, page_marker: str = DEFAULT_PAGE_MARKER):
        self.page_marker = page_marker

    def export(self, document: Document, output_path: Union[str, Path]) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(document.to_text(self.page_marker))

        logger.info(f"Exported text to: {output_path}")
        return output_path


def _page_marker_pattern(page_marker: str) -> "re.Pattern":
    """Regex matching a page marker format, capturing the page number."""
    prefix, _, suffix = page_marker.partition("{page_number}")
    return re.compile(re.escape(prefix) + r"(\d+)" + re.escape(suffix))


def split_linearized_pages(
    text: str,
    page_marker: str = DEFAULT_PAGE_MARKER
) -> Dict[int, str]:
    """
    Split linearized document text on its page markers.

    Args:
        text: Output of ``Document.to_text``
        page_marker: Marker format the text was written with

    Returns:
        Mapping of page number to that page's text
    """
    parts = _page_marker_pattern(page_marker).split(text)
    pages = {}
    # parts[0] is whatever precedes the first marker
    for i in range(1, len(parts) - 1, 2):
        pages[int(parts[i])] = parts[i + 1].strip()
    return pages


# ============================================================================
# Markdown Exporter
# ============================================================================

class MarkdownExporter:
    """Export document to Markdown format."""

    def __init__(
        self,
        heading_level: int = 2,
        include_page_breaks: bool = True
    ):
        self.heading_level = heading_level
        self.include_page_breaks = include_page_breaks

    def export(
        self,
        document: Document,
        output_path: Union[str, Path]
    ) -> Path:
        """
        Export document to Markdown file.

        Args:
            document: Document object
            output_path: Output file path

        Returns:
            Path to the generated Markdown file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(self.generate_markdown(document))

        logger.info(f"Exported Markdown to: {output_path}")
        return output_path

    def generate_markdown(self, document: Document) -> str:
        """Generate Markdown from document structure."""
        lines = []

        for page in document.pages:
            if self.include_page_breaks and len(document.pages) > 1:
                lines.append("")
                lines.append("---")
                lines.append(f"*Page {page.page_number}*")
                lines.append("")

            previous: Optional[Block] = None
            for block in page.blocks:
                # Consecutive table rows form one Markdown table
                if previous is not None and not (
                    previous.block_type == BlockType.TABLE_ROW
                    and block.block_type == BlockType.TABLE_ROW
                ):
                    lines.append("")
                md = self._block_to_markdown(block)
                if md:
                    lines.append(md)
                # The first row of a table run doubles as its header
                if block.block_type == BlockType.TABLE_ROW and (
                    previous is None or previous.block_type != BlockType.TABLE_ROW
                ):
                    lines.append(self._table_separator(block.text))
                previous = block
            lines.append("")

        return "\n".join(lines).strip() + "\n"

    def _block_to_markdown(self, block: Block) -> str:
        """Convert a block to Markdown."""
        if block.block_type == BlockType.HEADING:
            return f"{'#' * self.heading_level} {block.text}"

        elif block.block_type == BlockType.TABLE_ROW:
            return block.text

        elif block.block_type == BlockType.FIGURE_PLACEHOLDER:
            return f"*{block.text}*"

        return block.text

    def _table_separator(self, row: str) -> str:
        cells = row.strip().strip("|").split("|")
        return "|" + "|".join(" --- " for _ in cells) + "|"


# ============================================================================
# Combined Exporter
# ============================================================================

class DocumentExporter:
    """Export a document to one or more formats."""

    FORMATS = ("text", "markdown", "json")

    def __init__(
        self,
        output_dir: Union[str, Path],
        base_name: str = "document",
        config: Optional[ExportConfig] = None
    ):
        self.output_dir = Path(output_dir)
        self.base_name = base_name
        self.config = config or ExportConfig()

    def export(self, document: Document, formats: List[str]) -> Dict[str, Path]:
        """
        Export document to the requested formats.

        Args:
            document: Document to export
            formats: Format names; "all" selects every format

        Returns:
            Mapping of format name to written path
        """
        if "all" in formats:
            formats = list(self.FORMATS)

        results = {}
        for fmt in formats:
            if fmt == "text":
                results[fmt] = TextExporter(self.config.page_marker).export(
                    document, self.output_dir / f"{self.base_name}.txt"
                )
            elif fmt == "markdown":
                results[fmt] = MarkdownExporter(
                    heading_level=self.config.markdown_heading_level,
                    include_page_breaks=self.config.markdown_page_breaks
                ).export(document, self.output_dir / f"{self.base_name}.md")
            elif fmt == "json":
                results[fmt] = save_json(
                    document.to_dict(), self.output_dir / f"{self.base_name}.json"
                )
            else:
                raise ValueError(f"Unsupported export format: {fmt}")

        return results
