import logging

import fitz  # PyMuPDF

from ..annotations.models import Annotation, AnnotationSubtype, Rect
from ..colors import parse_hex_color
from ..fonts.models import StandardFont, StandardFontRef

logger = logging.getLogger(__name__)

# add_freetext_annot only knows these Base14 families
_FREETEXT_FONTS = {
    "co": "Cour",
    "he": "Helv",
    "ti": "TiRo",
    "sy": "Symb",
    "za": "ZaDb",
}

# PyMuPDF only accepts a border on these
_BORDERED = (
    AnnotationSubtype.INK,
    AnnotationSubtype.LINE,
    AnnotationSubtype.SQUARE,
    AnnotationSubtype.CIRCLE,
)


def _fitz_rect(rect: Rect) -> fitz.Rect:
    return fitz.Rect(rect.x, rect.y, rect.x + rect.width, rect.y + rect.height)


def freetext_fontname(annotation: Annotation) -> str:
    """Base14 font name for a free text annotation; local fonts fall back to Helvetica."""
    font = annotation.font
    if isinstance(font, StandardFontRef):
        return _FREETEXT_FONTS.get(font.font.value[:2], "Helv")
    return _FREETEXT_FONTS[StandardFont.HELVETICA.value[:2]]


class NativeAnnotationWriter:
    """Writes annotations as regular PDF annotation objects."""

    def add_annotation(self, page: fitz.Page, annotation: Annotation) -> None:
        """Add a single annotation to a PDF page."""
        subtype = annotation.subtype
        color = parse_hex_color(annotation.color) if annotation.color else None

        if subtype in (AnnotationSubtype.HIGHLIGHT, AnnotationSubtype.UNDERLINE,
                       AnnotationSubtype.STRIKEOUT, AnnotationSubtype.SQUIGGLY):
            rects = [_fitz_rect(r) for r in annotation.segment_rects] or [_fitz_rect(annotation.rect)]
            if subtype == AnnotationSubtype.HIGHLIGHT:
                annot = page.add_highlight_annot(rects)
            elif subtype == AnnotationSubtype.UNDERLINE:
                annot = page.add_underline_annot(rects)
            elif subtype == AnnotationSubtype.STRIKEOUT:
                annot = page.add_strikeout_annot(rects)
            else:
                annot = page.add_squiggly_annot(rects)
            if color:
                annot.set_colors(stroke=color)

        elif subtype == AnnotationSubtype.FREE_TEXT:
            text_color = parse_hex_color(annotation.font_color or "#000000")
            fill_color = None
            if annotation.background_color and annotation.background_color != "transparent":
                fill_color = parse_hex_color(annotation.background_color)
            annot = page.add_freetext_annot(
                _fitz_rect(annotation.rect),
                annotation.contents,
                fontsize=annotation.font_size,
                fontname=freetext_fontname(annotation),
                text_color=text_color,
                fill_color=fill_color,
            )

        elif subtype == AnnotationSubtype.INK:
            if len(annotation.points) < 2:
                return
            annot = page.add_ink_annot([[(float(x), float(y)) for x, y in annotation.points]])
            if color:
                annot.set_colors(stroke=color)

        elif subtype == AnnotationSubtype.LINE:
            if len(annotation.points) < 2:
                return
            start, end = annotation.points[0], annotation.points[-1]
            annot = page.add_line_annot(fitz.Point(*start), fitz.Point(*end))
            if color:
                annot.set_colors(stroke=color)

        elif subtype in (AnnotationSubtype.SQUARE, AnnotationSubtype.CIRCLE):
            rect = _fitz_rect(annotation.rect)
            if subtype == AnnotationSubtype.SQUARE:
                annot = page.add_rect_annot(rect)
            else:
                annot = page.add_circle_annot(rect)
            if color:
                annot.set_colors(stroke=color)

        elif subtype == AnnotationSubtype.STAMP:
            annot = page.add_stamp_annot(_fitz_rect(annotation.rect), stamp=0)

        else:
            logger.warning("Unsupported annotation type: %s", subtype.value)
            return

        if annotation.stroke_width is not None and subtype in _BORDERED:
            annot.set_border(width=annotation.stroke_width)
        annot.set_opacity(annotation.opacity)
        annot.set_info(title=annotation.id)
        annot.update()
