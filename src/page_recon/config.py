"""
Configuration and constants for the page reconstruction pipeline.

This module provides:
- Global logging configuration
- Layout heuristic thresholds (one place for every magic number)
- Export settings
- Environment overrides
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple
import logging

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("page_recon")


# ============================================================================
# Page Cap
# ============================================================================

# Documents longer than this are truncated by the document-level caller.
DEFAULT_MAX_PAGES = 20


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass(frozen=True)
class LayoutConfig:
    """Heuristic thresholds for layout reconstruction."""
    # Token normalizer: header/footer bands as fractions of page height
    header_fraction: float = 0.05
    footer_fraction: float = 0.95
    # Token coalescer
    coalesce_gap_ratio: float = 0.5  # merge when gap < height * ratio
    word_space_ratio: float = 0.15  # insert a space when gap > height * ratio
    # Column segmenter
    left_column_bound: float = 0.45
    right_column_bound: float = 0.55
    column_split: float = 0.5
    column_balance_fraction: float = 0.30
    histogram_bins: int = 20
    # Line assembler: None = per-token height * 0.5
    line_tolerance: Optional[float] = 4.0
    # Block classifier
    paragraph_gap_multiplier: float = 1.5
    visual_gap_multiplier: float = 4.0
    table_gap_threshold: float = 20.0
    table_min_tokens: int = 3
    default_line_height: float = 10.0
    # Placeholders also fire on vector-only pages (table borders, rules)
    vector_paths_gate_placeholders: bool = True
    placeholder_text: str = "[Visual content detected here]"
    # Heading heuristic
    heading_max_words: int = 12
    heading_size_ratio: float = 1.2
    heading_keywords: Tuple[str, ...] = (
        "abstract", "introduction", "related work", "background",
        "method", "methods", "methodology", "experiments", "results",
        "discussion", "conclusion", "conclusions", "references",
        "acknowledgments", "acknowledgements", "appendix",
    )
    # Disable column detection entirely
    force_single_column: bool = False


@dataclass
class ExportConfig:
    """Export configuration."""
    page_marker: str = "--- Page {page_number} ---"
    markdown_page_breaks: bool = True
    markdown_heading_level: int = 2
    # Highlight anchors
    anchor_length: int = 50
    anchor_min_length: int = 2
    anchor_retry_skip: int = 5


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    # Global settings
    debug_mode: bool = False
    max_pages: Optional[int] = DEFAULT_MAX_PAGES  # None = process all pages


# ============================================================================
# Default Configuration Instance
# ============================================================================

def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    max_pages = os.environ.get("PAGE_RECON_MAX_PAGES", "").strip()
    if max_pages:
        try:
            value = int(max_pages)
        except ValueError:
            logger.warning(f"Ignoring invalid PAGE_RECON_MAX_PAGES: {max_pages!r}")
        else:
            config.max_pages = value if value > 0 else None

    if os.environ.get("PAGE_RECON_DEBUG", "").lower() == "true":
        config.debug_mode = True

    return config


# ============================================================================
# JSON Schema Version
# ============================================================================

JSON_SCHEMA_VERSION = "1.0"
