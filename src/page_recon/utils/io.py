"""
I/O utilities for the page reconstruction pipeline.

Handles:
- PDF loading through PyMuPDF (the rendering-engine adapter)
- Pre-extracted runs stored as JSON
- JSON serialization
- Directory management
"""

import json
import logging
from dataclasses import dataclass, asdict, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, List, Optional, Protocol, Tuple, Union

import numpy as np

from .tokens import RawRun
from .visual import OperatorCode

logger = logging.getLogger(__name__)


# ============================================================================
# Page Source Contract
# ============================================================================

class PageSource(Protocol):
    """What the reconstruction core needs from the rendering engine."""
    page_number: int

    def get_positioned_text(self) -> List[RawRun]:
        ...

    def get_viewport(self) -> Tuple[float, float]:
        ...

    def get_drawing_operators(self) -> Optional[List[OperatorCode]]:
        ...


# ============================================================================
# PyMuPDF Adapter
# ============================================================================

# PyMuPDF drawing item/path types mapped to PDF content-stream operators
_DRAWING_ITEM_OPS = {"l": "l", "c": "c", "re": "re", "qu": "l"}
_DRAWING_PAINT_OPS = {"f": "f", "s": "S", "fs": "B"}


class PdfPageSource:
    """
    One PDF page exposed through the page source contract.

    Span positions are reported in PDF user space (bottom-left origin),
    the native space the token normalizer expects.
    """

    def __init__(self, page: Any, page_number: int):
        self._page = page
        self.page_number = page_number

    def get_viewport(self) -> Tuple[float, float]:
        rect = self._page.rect
        return float(rect.width), float(rect.height)

    def get_positioned_text(self) -> List[RawRun]:
        rect = self._page.rect
        page_height = float(rect.height)
        runs = []
        raw = self._page.get_text("dict")
        for block in raw.get("blocks", []):
            if block.get("type", 0) != 0:
                continue
            for line in block.get("lines", []):
                spans = line.get("spans", []) or []
                for i, span in enumerate(spans):
                    x0, y0, x1, y1 = span["bbox"]
                    baseline = span.get("origin", (x0, y1))[1]
                    runs.append(RawRun(
                        text=span.get("text", ""),
                        x=x0 - rect.x0,
                        y=page_height - (baseline - rect.y0),
                        width=max(x1 - x0, 0.0),
                        height=float(span.get("size") or (y1 - y0)),
                        has_eol=(i == len(spans) - 1)
                    ))
        return runs

    def get_drawing_operators(self) -> Optional[List[OperatorCode]]:
        ops: List[OperatorCode] = []
        for _ in self._page.get_image_info():
            ops.append("Do")
        for path in self._page.get_drawings():
            for item in path.get("items", []):
                op = _DRAWING_ITEM_OPS.get(item[0])
                if op:
                    ops.append(op)
            paint = _DRAWING_PAINT_OPS.get(path.get("type"))
            if paint:
                ops.append(paint)
        return ops


class PdfDocumentSource:
    """An open PDF; use as a context manager to close it deterministically."""

    def __init__(self, doc: Any, path: Path):
        self._doc = doc
        self.path = path

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def page(self, page_number: int) -> PdfPageSource:
        """Get a page by 1-indexed page number."""
        if not 1 <= page_number <= self.page_count:
            raise IndexError(
                f"Page {page_number} out of range (document has {self.page_count} pages)"
            )
        return PdfPageSource(self._doc[page_number - 1], page_number)

    def pages(self) -> Iterator[PdfPageSource]:
        for page_number in range(1, self.page_count + 1):
            yield self.page(page_number)

    def close(self):
        self._doc.close()

    def __enter__(self) -> 'PdfDocumentSource':
        return self

    def __exit__(self, *exc):
        self.close()


def load_pdf(pdf_path: Union[str, Path]) -> PdfDocumentSource:
    """
    Open a PDF for text-run extraction using PyMuPDF.

    Args:
        pdf_path: Path to the PDF file

    Returns:
        PdfDocumentSource wrapping the open document

    Raises:
        FileNotFoundError: If PDF file doesn't exist
        ImportError: If PyMuPDF is not installed
        RuntimeError: If the PDF is corrupt or encrypted
    """
    pdf_path = Path(pdf_path)
    if not pdf_path.exists():
        raise FileNotFoundError(f"PDF file not found: {pdf_path}")

    try:
        import fitz
    except ImportError:
        raise ImportError(
            "PyMuPDF is required for PDF input. Install with: pip install pymupdf"
        )

    try:
        doc = fitz.open(str(pdf_path))
    except Exception as e:
        raise RuntimeError(f"Failed to open PDF: {e}")

    if doc.needs_pass:
        doc.close()
        raise RuntimeError(f"PDF is encrypted: {pdf_path}")

    logger.info(f"Opened PDF: {pdf_path} ({doc.page_count} pages)")
    return PdfDocumentSource(doc, pdf_path)


# ============================================================================
# Pre-extracted Runs (JSON)
# ============================================================================

@dataclass
class JsonPageSource:
    """A page whose runs were extracted ahead of time."""
    page_number: int
    width: float
    height: float
    runs: List[RawRun] = field(default_factory=list)
    operators: Optional[List[OperatorCode]] = None

    def get_positioned_text(self) -> List[RawRun]:
        return list(self.runs)

    def get_viewport(self) -> Tuple[float, float]:
        return self.width, self.height

    def get_drawing_operators(self) -> Optional[List[OperatorCode]]:
        return self.operators

    @classmethod
    def from_dict(cls, data: dict, default_number: int = 1) -> 'JsonPageSource':
        return cls(
            page_number=int(data.get("page_number", default_number)),
            width=float(data["width"]),
            height=float(data["height"]),
            runs=[RawRun.from_dict(r) for r in data.get("runs", [])],
            operators=data.get("operators")
        )


def load_runs_json(json_path: Union[str, Path]) -> List[JsonPageSource]:
    """
    Load pre-extracted pages from a JSON file.

    Accepts either ``{"pages": [...]}`` or a bare list of pages; each page
    has ``width``, ``height``, ``runs`` and optionally ``operators``.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file does not describe pages
    """
    data = load_json(json_path)
    pages = data.get("pages") if isinstance(data, dict) else data
    if not isinstance(pages, list):
        raise ValueError(f"No pages found in runs file: {json_path}")

    try:
        return [JsonPageSource.from_dict(p, i) for i, p in enumerate(pages, 1)]
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed page in runs file {json_path}: {e}")


# ============================================================================
# JSON Serialization
# ============================================================================

class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy scalars, enums, ranges and dataclasses."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, range):
            return [obj.start, obj.stop]
        if hasattr(obj, 'to_dict'):
            return obj.to_dict()
        if hasattr(obj, '__dataclass_fields__'):
            return asdict(obj)
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(
    data: Any,
    output_path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False
) -> Path:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize (dict, list, dataclass, etc.)
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing
        ensure_ascii: If True, escape non-ASCII characters

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, cls=EnhancedJSONEncoder)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path


def load_json(json_path: Union[str, Path]) -> Any:
    """Load data from a JSON file."""
    json_path = Path(json_path)
    if not json_path.exists():
        raise FileNotFoundError(f"JSON file not found: {json_path}")

    with open(json_path, 'r', encoding='utf-8') as f:
        return json.load(f)


# ============================================================================
# Directory Management
# ============================================================================

def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


# ============================================================================
# File Type Detection
# ============================================================================

def detect_input_type(input_path: Union[str, Path]) -> str:
    """
    Detect the type of input file.

    Returns:
        One of: 'pdf', 'json', 'unknown'
    """
    input_path = Path(input_path)
    if not input_path.is_file():
        return 'unknown'

    suffix = input_path.suffix.lower()
    if suffix == '.pdf':
        return 'pdf'
    elif suffix == '.json':
        return 'json'
    return 'unknown'
