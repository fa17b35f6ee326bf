import asyncio
from pathlib import Path
from typing import List

import fitz  # PyMuPDF
import pytest

from overprint.core.annotations.manager import AnnotationManager
from overprint.core.annotations.models import Annotation, AnnotationSubtype, Rect
from overprint.core.errors import AccessDenied
from overprint.core.fonts.models import CustomFontRef, StandardFontRef
from overprint.core.fonts.source import PlatformFont


class FakeFontSource:
    """Font source serving a fixed list of fonts."""

    def __init__(self, fonts: List[PlatformFont], supported: bool = True, deny: bool = False,
                 error: Exception = None):
        self.fonts = list(fonts)
        self._supported = supported
        self.deny = deny
        self.error = error
        self.queries = 0
        self.enumerations = 0

    def supported(self) -> bool:
        return self._supported

    async def query(self) -> List[PlatformFont]:
        self.queries += 1
        if self.deny:
            raise AccessDenied("Font access was denied by the user")
        return await self._list()

    async def enumerate(self) -> List[PlatformFont]:
        self.enumerations += 1
        return await self._list()

    async def _list(self) -> List[PlatformFont]:
        if self.error is not None:
            raise self.error
        return list(self.fonts)


class FakeEngine:
    """In-memory primary engine recording every call."""

    def __init__(self, annotations, base_pdf: bytes = b"%PDF-base", fail_export: bool = False,
                 fail_import: bool = False):
        self.manager = AnnotationManager(annotations)
        self.base_pdf = base_pdf
        self.fail_export = fail_export
        self.fail_import = fail_import
        self.deleted = []
        self.imported = []
        self.exported_with = None

    def query_annotations(self):
        return list(self.manager.annotations)

    def delete_annotation(self, page_index, annotation_id):
        self.deleted.append((page_index, annotation_id))
        self.manager.remove_annotation(page_index, annotation_id)

    def import_annotations(self, annotations):
        annotations = list(annotations)
        if self.fail_import:
            raise RuntimeError("engine rejected import")
        self.imported.extend(annotations)
        self.manager.import_annotations(annotations)

    async def export_base_document(self):
        self.exported_with = {ann.id for ann in self.manager.annotations}
        await asyncio.sleep(0)
        if self.fail_export:
            raise RuntimeError("engine crashed")
        return self.base_pdf

    def ids(self):
        return {ann.id for ann in self.manager.annotations}


def make_pdf(pages: int = 1, width: float = 600, height: float = 800) -> bytes:
    doc = fitz.open()
    for _ in range(pages):
        doc.new_page(width=width, height=height)
    data = doc.tobytes()
    doc.close()
    return data


def write_font_file(directory: Path, name: str, data: bytes = b"\x00\x01\x00\x00fake") -> str:
    path = directory / name
    path.write_bytes(data)
    return str(path)


def underline(ann_id="u1", page_index=0, stroke_width=2.0):
    return Annotation(
        id=ann_id,
        page_index=page_index,
        subtype=AnnotationSubtype.UNDERLINE,
        rect=Rect(10, 20, 100, 4),
        color="#FF0000",
        stroke_width=stroke_width,
        segment_rects=(Rect(10, 20, 100, 4),),
    )


def free_text(ann_id="t1", font=None, contents="Hello", page_index=0):
    return Annotation(
        id=ann_id,
        page_index=page_index,
        subtype=AnnotationSubtype.FREE_TEXT,
        rect=Rect(50, 100, 200, 60),
        contents=contents,
        font=font if font is not None else StandardFontRef(),
        font_size=12.0,
        font_color="#000",
    )


def custom_font(name="Demo-Regular"):
    return CustomFontRef(postscript_name=name, family="Demo", full_name="Demo Regular")


@pytest.fixture
def blank_pdf() -> bytes:
    return make_pdf()
