"""
Geometry of the custom-rendered annotations.

Annotations store rectangles with a top-left origin; everything here returns
shapes in PDF user space (origin at the bottom-left of the page). The
compositor maps them to PyMuPDF page space when drawing.
"""
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..annotations.models import Rect

Point = Tuple[float, float]

SQUIGGLY_PERIOD = 6.0
LINE_HEIGHT_FACTOR = 1.2
TEXT_PADDING = 4.0


@dataclass(frozen=True)
class PdfRect:
    """Rectangle in PDF user space; ``y`` is the bottom edge."""
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class QuadSegment:
    """Quadratic Bezier segment in PDF user space."""
    start: Point
    control: Point
    end: Point

    def to_cubic(self) -> Tuple[Point, Point, Point, Point]:
        """Return the equivalent cubic Bezier as (p0, c1, c2, p3)."""
        (x0, y0), (qx, qy), (x1, y1) = self.start, self.control, self.end
        c1 = (x0 + 2.0 / 3.0 * (qx - x0), y0 + 2.0 / 3.0 * (qy - y0))
        c2 = (x1 + 2.0 / 3.0 * (qx - x1), y1 + 2.0 / 3.0 * (qy - y1))
        return self.start, c1, c2, self.end


@dataclass(frozen=True)
class TextLine:
    text: str
    x: float
    baseline: float


def to_pdf_rect(rect: Rect, page_height: float) -> PdfRect:
    """Flip a top-left rectangle: ``y' = pageHeight - y - height``."""
    return PdfRect(rect.x, page_height - rect.y - rect.height, rect.width, rect.height)


def underline_bar(segment: Rect, page_height: float, stroke_width: float) -> PdfRect:
    """Bar along the bottom edge of a segment."""
    bottom = page_height - segment.y - segment.height
    return PdfRect(segment.x, bottom, segment.width, stroke_width)


def strikeout_bar(segment: Rect, page_height: float, stroke_width: float) -> PdfRect:
    """Bar centred on the mid-height of a segment."""
    bottom = page_height - segment.y - segment.height
    mid = bottom + segment.height / 2
    return PdfRect(segment.x, mid - stroke_width / 2, segment.width, stroke_width)


def squiggly_cycles(width: float, period: float = SQUIGGLY_PERIOD) -> int:
    return int(math.ceil(width / period))


def squiggly_wave(segment: Rect, page_height: float, amplitude: float,
                  period: float = SQUIGGLY_PERIOD) -> List[QuadSegment]:
    """
    Wave under a segment, two quadratic curves per period.

    The wave starts at the left edge, ``amplitude`` below the segment
    bottom; the first curve of each period bends up towards the bottom edge
    and the second, whose control point is the reflection of the first,
    bends down by the same amount.
    """
    bottom = page_height - segment.y - segment.height
    base = bottom - amplitude
    half = period / 2

    curves: List[QuadSegment] = []
    x = segment.x
    for _ in range(squiggly_cycles(segment.width, period)):
        curves.append(QuadSegment((x, base), (x + period / 4, base + amplitude), (x + half, base)))
        curves.append(QuadSegment((x + half, base), (x + 3 * period / 4, base - amplitude), (x + period, base)))
        x += period
    return curves


def free_text_layout(rect: Rect, page_height: float, contents: str, font_size: float,
                     line_height_factor: float = LINE_HEIGHT_FACTOR,
                     padding: float = TEXT_PADDING) -> List[TextLine]:
    """
    Lay out free text lines top-down inside the annotation rectangle.

    The first baseline sits one font size below the top edge and each
    following line drops by ``line_height_factor * font_size``.
    """
    box = to_pdf_rect(rect, page_height)
    line_height = font_size * line_height_factor
    baseline = box.y + box.height - font_size

    lines: List[TextLine] = []
    for text in contents.split("\n"):
        lines.append(TextLine(text, box.x + padding, baseline))
        baseline -= line_height
    return lines


def background_rect(rect: Rect, page_height: float,
                    background_color: Optional[str]) -> Optional[PdfRect]:
    """Return the fill rectangle, or None when the background is transparent."""
    if not background_color or background_color == "transparent":
        return None
    return to_pdf_rect(rect, page_height)
