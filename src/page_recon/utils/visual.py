"""
Visual region detection from drawing operators.

The signal is page-level only: it says whether a page paints images or
constructs vector paths, not where. Localizing regions from the operator
stream is not attempted.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

logger = logging.getLogger(__name__)

OperatorCode = Union[int, str]

# pdf.js OPS codes
PDFJS_IMAGE_OPS = frozenset({
    82,  # paintJpegXObject
    83,  # paintImageMaskXObject
    84,  # paintImageMaskXObjectGroup
    85,  # paintImageXObject
    86,  # paintInlineImageXObject
    87,  # paintInlineImageXObjectGroup
    88,  # paintImageXObjectRepeat
    89,  # paintImageMaskXObjectRepeat
    90,  # paintSolidColorImageMask
})
PDFJS_PATH_OPS = frozenset(range(13, 25)) | {91}  # moveTo..fillStroke, constructPath

# PDF content-stream operator names
PDF_IMAGE_OPS = frozenset({"Do", "BI", "ID", "EI"})
PDF_PATH_OPS = frozenset({
    "m", "l", "c", "v", "y", "h", "re",
    "S", "s", "f", "F", "f*", "B", "B*", "b", "b*",
})


@dataclass(frozen=True)
class VisualSignal:
    """Page-level hint that non-text content is present."""
    has_image_paint: bool = False
    has_vector_path: bool = False

    @property
    def any(self) -> bool:
        return self.has_image_paint or self.has_vector_path

    def to_dict(self) -> dict:
        return {
            "has_image_paint": self.has_image_paint,
            "has_vector_path": self.has_vector_path,
        }


def _is_image_op(code: OperatorCode) -> bool:
    if isinstance(code, str):
        return code in PDF_IMAGE_OPS
    return code in PDFJS_IMAGE_OPS


def _is_path_op(code: OperatorCode) -> bool:
    if isinstance(code, str):
        return code in PDF_PATH_OPS
    return code in PDFJS_PATH_OPS


def detect_visual_signal(
    operators: Optional[Iterable[OperatorCode]]
) -> VisualSignal:
    """
    Derive the page's VisualSignal from its drawing-operator summary.

    Args:
        operators: Operator codes (pdf.js numeric codes or PDF operator
            names). ``None`` means the summary is unavailable.

    Returns:
        VisualSignal; all-false when no summary is given
    """
    if operators is None:
        return VisualSignal()

    has_image = False
    has_path = False
    for code in operators:
        if not has_image and _is_image_op(code):
            has_image = True
        elif not has_path and _is_path_op(code):
            has_path = True
        if has_image and has_path:
            break

    signal = VisualSignal(has_image_paint=has_image, has_vector_path=has_path)
    logger.debug(f"Visual signal: {signal.to_dict()}")
    return signal
