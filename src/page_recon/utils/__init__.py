"""
Utility modules for the page reconstruction pipeline.
"""

from .tokens import RawRun, Token, normalize_tokens, coalesce_tokens
from .layout import Line, Column, LineBuilder, assign_column, segment_columns
from .visual import VisualSignal, detect_visual_signal
from .blocks import Block, BlockType, ParagraphBuilder, classify_blocks
from .text import join_lines, repair_hyphenation, normalize_page_text
from .highlight import normalize_for_anchor, make_anchor, locate_anchor
from .assembler import DocumentAssembler, Document, PageResult, reconstruct_page
from .io import load_pdf, load_runs_json, save_json, ensure_dir
from .export import MarkdownExporter, TextExporter, DocumentExporter, split_linearized_pages

__all__ = [
    # Tokens
    "RawRun", "Token", "normalize_tokens", "coalesce_tokens",
    # Layout
    "Line", "Column", "LineBuilder", "assign_column", "segment_columns",
    # Visual
    "VisualSignal", "detect_visual_signal",
    # Blocks
    "Block", "BlockType", "ParagraphBuilder", "classify_blocks",
    # Text
    "join_lines", "repair_hyphenation", "normalize_page_text",
    # Highlight
    "normalize_for_anchor", "make_anchor", "locate_anchor",
    # Assembly
    "DocumentAssembler", "Document", "PageResult", "reconstruct_page",
    # IO
    "load_pdf", "load_runs_json", "save_json", "ensure_dir",
    # Export
    "MarkdownExporter", "TextExporter", "DocumentExporter", "split_linearized_pages",
]
