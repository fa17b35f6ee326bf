from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple
import uuid

from ..fonts.models import CustomFontRef, FontReference, StandardFontRef, font_ref_from_dict


class AnnotationSubtype(Enum):
    FREE_TEXT = "freetext"
    UNDERLINE = "underline"
    STRIKEOUT = "strikeout"
    SQUIGGLY = "squiggly"
    HIGHLIGHT = "highlight"
    INK = "ink"
    SQUARE = "square"
    CIRCLE = "circle"
    LINE = "line"
    STAMP = "stamp"


@dataclass(frozen=True)
class Rect:
    """Rectangle with its origin at the top-left of the page."""
    x: float
    y: float
    width: float
    height: float

    def to_list(self):
        return [self.x, self.y, self.width, self.height]

    @staticmethod
    def from_list(values) -> "Rect":
        x, y, width, height = values
        return Rect(float(x), float(y), float(width), float(height))


@dataclass(frozen=True)
class Annotation:
    """Represents a single annotation on a PDF page."""
    page_index: int  # 0-based page index
    subtype: AnnotationSubtype
    rect: Rect
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    color: Optional[str] = None  # "#RRGGBB" or "#RGB"
    opacity: float = 1.0
    stroke_width: Optional[float] = None

    # Text markup (underline, strikeout, squiggly, highlight)
    segment_rects: Tuple[Rect, ...] = ()

    # Free text
    contents: str = ""
    font: FontReference = field(default_factory=StandardFontRef)
    font_size: float = 12.0
    font_color: Optional[str] = None
    background_color: Optional[str] = None  # None or "transparent" means no fill

    # Ink, line and shapes
    points: Tuple[Tuple[float, float], ...] = ()

    @property
    def uses_custom_font(self) -> bool:
        return isinstance(self.font, CustomFontRef)

    def with_changes(self, **changes) -> "Annotation":
        return replace(self, **changes)

    def to_dict(self):
        """Convert annotation to dictionary for JSON serialization."""
        data = {
            'id': self.id,
            'page_index': self.page_index,
            'type': self.subtype.value,
            'rect': self.rect.to_list(),
            'opacity': self.opacity,
        }

        if self.color is not None:
            data['color'] = self.color
        if self.stroke_width is not None:
            data['stroke_width'] = self.stroke_width
        if self.segment_rects:
            data['segment_rects'] = [r.to_list() for r in self.segment_rects]
        if self.points:
            data['points'] = [[x, y] for x, y in self.points]

        if self.subtype == AnnotationSubtype.FREE_TEXT:
            data['contents'] = self.contents
            data['font'] = self.font.to_dict()
            data['font_size'] = self.font_size
            if self.font_color is not None:
                data['font_color'] = self.font_color
            if self.background_color is not None:
                data['background_color'] = self.background_color

        return data

    @staticmethod
    def from_dict(data):
        """Create annotation from dictionary."""
        kwargs = {}
        if 'id' in data:
            kwargs['id'] = str(data['id'])
        if 'font' in data:
            kwargs['font'] = font_ref_from_dict(data['font'])

        return Annotation(
            page_index=data['page_index'],
            subtype=AnnotationSubtype(data['type']),
            rect=Rect.from_list(data['rect']),
            color=data.get('color'),
            opacity=data.get('opacity', 1.0),
            stroke_width=data.get('stroke_width'),
            segment_rects=tuple(Rect.from_list(r) for r in data.get('segment_rects', [])),
            contents=data.get('contents', ''),
            font_size=data.get('font_size', 12.0),
            font_color=data.get('font_color'),
            background_color=data.get('background_color'),
            points=tuple(tuple(p) for p in data.get('points', [])),
            **kwargs
        )