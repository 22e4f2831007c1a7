"""
Page Reconstruction Pipeline
============================

Reconstructs positioned text runs from rendered document pages into human
reading order with logical structure, for translation, summarization and
search consumers that need linear, well-ordered text.

Main components:
- Token normalization and coalescing
- Single/dual column segmentation
- Line assembly
- Visual region signal from drawing operators
- Block classification (paragraphs, headings, table rows, figure placeholders)
- Paragraph joining and hyphenation repair
"""

__version__ = "1.0.0"
__author__ = "Page Reconstruction Team"
