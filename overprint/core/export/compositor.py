"""
Draws custom-rendered annotations onto a base PDF with PyMuPDF.
"""
import logging
from typing import Mapping, Optional, Sequence

import fitz  # PyMuPDF

from ...config import ExportConfig
from ..annotations.models import Annotation, AnnotationSubtype
from ..colors import parse_hex_color
from ..fonts.embedding import FontEmbeddingCache
from ..fonts.models import CustomFontRef
from .geometry import (
    PdfRect,
    background_rect,
    free_text_layout,
    squiggly_wave,
    strikeout_bar,
    underline_bar,
)

logger = logging.getLogger(__name__)

DEFAULT_FONT_COLOR = "#000000"
DEFAULT_MARKUP_COLOR = "#FFFF00"
DEFAULT_STROKE_WIDTH = 1.0


def _page_rect(rect: PdfRect, page_height: float) -> fitz.Rect:
    """Map a PDF user space rectangle to PyMuPDF's top-left page space."""
    return fitz.Rect(rect.x, page_height - rect.y - rect.height,
                     rect.x + rect.width, page_height - rect.y)


def _page_point(point, page_height: float) -> fitz.Point:
    return fitz.Point(point[0], page_height - point[1])


class OverlayCompositor:
    """Renders free text with local fonts and exact-width text markup."""

    def __init__(self, config: Optional[ExportConfig] = None):
        self.config = config or ExportConfig()

    def composite(self, base_pdf: bytes, annotations: Sequence[Annotation],
                  font_data: Mapping[str, bytes],
                  embedding_cache: Optional[FontEmbeddingCache] = None) -> bytes:
        """
        Draw annotations onto a copy of the base document.

        Args:
            base_pdf: PDF bytes exported by the primary engine
            annotations: Custom-render annotations, drawn in order
            font_data: Postscript name -> font program bytes
            embedding_cache: Font handle cache for this export; a fresh one
                is used when omitted

        Returns:
            The composited PDF bytes
        """
        cache = embedding_cache if embedding_cache is not None else FontEmbeddingCache()
        logger.debug("Compositing %d custom annotations", len(annotations))

        doc = fitz.open(stream=base_pdf, filetype="pdf")
        try:
            for ann in annotations:
                if ann.page_index < 0 or ann.page_index >= doc.page_count:
                    logger.warning("Invalid page index %d for annotation %s",
                                   ann.page_index, ann.id)
                    continue

                page = doc[ann.page_index]
                try:
                    self._draw_annotation(page, ann, font_data, cache)
                except (ValueError, RuntimeError) as e:
                    logger.warning("Failed to render annotation %s on page %d: %s",
                                   ann.id, ann.page_index, e)

            return doc.tobytes(garbage=4, deflate=True)
        finally:
            doc.close()

    def _draw_annotation(self, page: fitz.Page, ann: Annotation,
                         font_data: Mapping[str, bytes], cache: FontEmbeddingCache) -> None:
        if ann.subtype == AnnotationSubtype.FREE_TEXT:
            self._draw_free_text(page, ann, font_data, cache)
        elif ann.subtype == AnnotationSubtype.UNDERLINE:
            self._draw_bars(page, ann, underline_bar)
        elif ann.subtype == AnnotationSubtype.STRIKEOUT:
            self._draw_bars(page, ann, strikeout_bar)
        elif ann.subtype == AnnotationSubtype.SQUIGGLY:
            self._draw_squiggly(page, ann)
        else:
            logger.warning("No custom renderer for %s annotation %s",
                           ann.subtype.value, ann.id)

    def _draw_free_text(self, page: fitz.Page, ann: Annotation,
                        font_data: Mapping[str, bytes], cache: FontEmbeddingCache) -> None:
        font_ref = ann.font
        if not isinstance(font_ref, CustomFontRef):
            # Standard fonts are rendered by the primary engine
            return

        data = font_data.get(font_ref.postscript_name)
        if data is None:
            logger.warning("Custom font data not found for: %s (%s)",
                           font_ref.full_name, font_ref.postscript_name)
            return

        font = cache.embed(font_ref.postscript_name, data)
        if font is None:
            return

        if not ann.contents:
            return

        page_height = page.rect.height
        color = parse_hex_color(ann.font_color or DEFAULT_FONT_COLOR)

        background = background_rect(ann.rect, page_height, ann.background_color)
        if background is not None:
            shape = page.new_shape()
            shape.draw_rect(_page_rect(background, page_height))
            shape.finish(color=None, fill=parse_hex_color(ann.background_color),
                         fill_opacity=ann.opacity)
            shape.commit()

        writer = fitz.TextWriter(page.rect)
        written = False
        for line in free_text_layout(ann.rect, page_height, ann.contents, ann.font_size,
                                     self.config.line_height_factor, self.config.text_padding):
            if not line.text:
                continue
            writer.append(_page_point((line.x, line.baseline), page_height), line.text,
                          font=font, fontsize=ann.font_size)
            written = True

        if written:
            writer.write_text(page, color=color, opacity=ann.opacity)

    def _draw_bars(self, page: fitz.Page, ann: Annotation, bar_for) -> None:
        if not ann.segment_rects:
            return

        page_height = page.rect.height
        color = parse_hex_color(ann.color or DEFAULT_MARKUP_COLOR)
        stroke_width = ann.stroke_width or DEFAULT_STROKE_WIDTH

        shape = page.new_shape()
        for segment in ann.segment_rects:
            bar = bar_for(segment, page_height, stroke_width)
            shape.draw_rect(_page_rect(bar, page_height))
            shape.finish(color=None, fill=color, fill_opacity=ann.opacity)
        shape.commit()

    def _draw_squiggly(self, page: fitz.Page, ann: Annotation) -> None:
        if not ann.segment_rects:
            return

        page_height = page.rect.height
        color = parse_hex_color(ann.color or DEFAULT_MARKUP_COLOR)
        stroke_width = ann.stroke_width or DEFAULT_STROKE_WIDTH

        shape = page.new_shape()
        for segment in ann.segment_rects:
            for curve in squiggly_wave(segment, page_height, stroke_width,
                                       self.config.squiggly_period):
                p0, c1, c2, p3 = curve.to_cubic()
                shape.draw_bezier(_page_point(p0, page_height), _page_point(c1, page_height),
                                  _page_point(c2, page_height), _page_point(p3, page_height))
            # Stroke only; the wave is never filled
            shape.finish(color=color, fill=None, width=stroke_width,
                         stroke_opacity=ann.opacity, closePath=False)
        shape.commit()
