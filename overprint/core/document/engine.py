"""
The primary document engine: holds the live annotation set of a PDF and
produces the base export by writing those annotations natively.
"""
import asyncio
import logging
from typing import Iterable, List, Optional, Protocol

import fitz  # PyMuPDF

from ..annotations.manager import AnnotationManager
from ..annotations.models import Annotation
from .native_writer import NativeAnnotationWriter

logger = logging.getLogger(__name__)


class DocumentEngine(Protocol):
    """What the export orchestrator needs from the engine owning a document."""

    def query_annotations(self) -> List[Annotation]:
        ...

    def delete_annotation(self, page_index: int, annotation_id: str) -> None:
        ...

    def import_annotations(self, annotations: Iterable[Annotation]) -> None:
        ...

    async def export_base_document(self) -> bytes:
        ...


class PdfDocumentEngine:
    """PyMuPDF-backed engine for one PDF and its annotations."""

    def __init__(self, source_pdf: bytes, annotations: Optional[Iterable[Annotation]] = None,
                 writer: Optional[NativeAnnotationWriter] = None):
        self.source_pdf = source_pdf
        self.manager = AnnotationManager(annotations)
        self.writer = writer or NativeAnnotationWriter()

    @classmethod
    def from_file(cls, pdf_path: str,
                  annotations: Optional[Iterable[Annotation]] = None) -> "PdfDocumentEngine":
        with open(pdf_path, 'rb') as f:
            return cls(f.read(), annotations)

    def query_annotations(self) -> List[Annotation]:
        return list(self.manager.annotations)

    def delete_annotation(self, page_index: int, annotation_id: str) -> None:
        if self.manager.remove_annotation(page_index, annotation_id) is None:
            logger.warning("Annotation %s not found on page %d", annotation_id, page_index)

    def import_annotations(self, annotations: Iterable[Annotation]) -> None:
        self.manager.import_annotations(annotations)

    async def export_base_document(self) -> bytes:
        """Render the current annotation set onto a copy of the source PDF."""
        snapshot = list(self.manager.annotations)
        return await asyncio.to_thread(self._render, snapshot)

    def _render(self, annotations: List[Annotation]) -> bytes:
        doc = fitz.open(stream=self.source_pdf, filetype="pdf")
        try:
            for ann in annotations:
                if ann.page_index < 0 or ann.page_index >= doc.page_count:
                    logger.warning("Skipping annotation %s on missing page %d",
                                   ann.id, ann.page_index)
                    continue
                try:
                    self.writer.add_annotation(doc[ann.page_index], ann)
                except (ValueError, RuntimeError) as e:
                    logger.warning("Failed to add annotation on page %d: %s", ann.page_index, e)

            return doc.tobytes(garbage=4, deflate=True)
        finally:
            doc.close()
