"""
Primary document engine backed by PyMuPDF.
"""
from .engine import DocumentEngine, PdfDocumentEngine
from .native_writer import NativeAnnotationWriter

__all__ = ["DocumentEngine", "PdfDocumentEngine", "NativeAnnotationWriter"]
