"""
Export orchestration.

The primary engine renders most annotations itself but cannot draw free
text in local fonts or text markup with exact stroke widths. An export
therefore removes those annotations from the engine, takes the engine's
base export, draws the removed annotations on top with the overlay
compositor and finally puts them back into the engine. Reimporting happens
on every path out of the export, so the engine's annotation set after an
export, successful or not, is the one it had before.

The engine offers no acknowledgement that a deletion has been applied.
Unless it exposes an awaitable ``wait_for_pending()``, a fixed settle delay
is observed after removal; a slower engine can still include a removed
annotation in the base export.
"""
import asyncio
import logging
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Sequence, Set

from PyQt5.QtCore import QObject, pyqtSignal

from ...config import ExportConfig
from ..annotations.models import Annotation, AnnotationSubtype
from ..document.engine import DocumentEngine
from ..errors import (
    BaseExportFailure,
    CompositingFailure,
    DocumentNotFound,
    ExportInProgress,
)
from ..fonts.embedding import FontEmbeddingCache
from ..fonts.models import CustomFontRef
from ..signals import subscribe
from .classification import classify
from .compositor import OverlayCompositor
from .transaction import ExportTransaction

logger = logging.getLogger(__name__)


class ExportState(Enum):
    IDLE = "idle"
    CLASSIFYING = "classifying"
    REMOVING = "removing"
    BASE_EXPORTING = "base_exporting"
    COMPOSITING = "compositing"
    REIMPORTING = "reimporting"
    DONE = "done"
    FAILED = "failed"


class ExportOrchestrator(QObject):
    """Runs exports for the documents it knows about."""

    state_changed = pyqtSignal(object)  # ExportState

    def __init__(self, documents: Mapping[str, DocumentEngine], fonts,
                 compositor: Optional[OverlayCompositor] = None,
                 config: Optional[ExportConfig] = None,
                 embedding_cache_factory: Callable[[], FontEmbeddingCache] = FontEmbeddingCache):
        """
        Args:
            documents: Document id -> engine owning that document
            fonts: Font directory (or anything with ``get_loaded_font``)
                whose loaded fonts are embedded
            compositor: Overlay compositor; built from ``config`` if omitted
            config: Export settings
            embedding_cache_factory: Creates the per-export font cache
        """
        super().__init__()
        self.config = config or ExportConfig()
        self._documents = documents
        self._fonts = fonts
        self._compositor = compositor or OverlayCompositor(self.config)
        self._embedding_cache_factory = embedding_cache_factory
        self._in_flight: Set[str] = set()
        self.state = ExportState.IDLE

    def on_state_changed(self, listener: Callable[[ExportState], None]) -> Callable[[], None]:
        return subscribe(self.state_changed, listener)

    def _set_state(self, state: ExportState) -> None:
        self.state = state
        logger.debug("Export state: %s", state.value)
        self.state_changed.emit(state)

    def is_exporting(self, document_id: str) -> bool:
        return document_id in self._in_flight

    async def export(self, document_id: str) -> bytes:
        """
        Export a document with all annotations rendered faithfully.

        Args:
            document_id: Id of a registered document

        Returns:
            Final PDF bytes

        Raises:
            DocumentNotFound: If no engine is registered for the id
            ExportInProgress: If this document is already being exported
            BaseExportFailure: If the engine failed to export
            CompositingFailure: If drawing the custom annotations failed
        """
        engine = self._documents.get(document_id)
        if engine is None:
            raise DocumentNotFound(f"Unknown document: {document_id}")
        if document_id in self._in_flight:
            raise ExportInProgress(f"Document {document_id} is already being exported")

        self._in_flight.add(document_id)
        try:
            result = await self._run(engine)
        except BaseException:
            self._set_state(ExportState.FAILED)
            raise
        finally:
            self._in_flight.discard(document_id)

        self._set_state(ExportState.DONE)
        return result

    async def _run(self, engine: DocumentEngine) -> bytes:
        self._set_state(ExportState.CLASSIFYING)
        custom, native = classify(engine.query_annotations())
        logger.info("Exporting %d annotations (%d custom render)",
                    len(custom) + len(native), len(custom))

        self._set_state(ExportState.REMOVING)
        with ExportTransaction(engine, custom,
                               on_restore=lambda: self._set_state(ExportState.REIMPORTING)) as transaction:
            if transaction.removed:
                await self._settle(engine)

            self._set_state(ExportState.BASE_EXPORTING)
            try:
                base_pdf = await engine.export_base_document()
            except Exception as e:
                raise BaseExportFailure(f"Base export failed: {e}") from e
            logger.debug("Base PDF exported, size: %d", len(base_pdf))

            if not custom:
                return base_pdf

            self._set_state(ExportState.COMPOSITING)
            font_data = self._collect_font_data(custom)
            try:
                result = await asyncio.to_thread(
                    self._compositor.composite, base_pdf, custom, font_data,
                    self._embedding_cache_factory())
            except Exception as e:
                raise CompositingFailure(f"Compositing failed: {e}") from e
            transaction.composite_succeeded = True
            return result

    async def _settle(self, engine: DocumentEngine) -> None:
        wait_for_pending = getattr(engine, "wait_for_pending", None)
        if callable(wait_for_pending):
            await wait_for_pending()
            return
        await asyncio.sleep(self.config.settle_delay)

    def _collect_font_data(self, annotations: Sequence[Annotation]) -> Dict[str, bytes]:
        """Font bytes for every custom font the annotations use and that is loaded."""
        font_data: Dict[str, bytes] = {}
        for ann in annotations:
            if ann.subtype != AnnotationSubtype.FREE_TEXT or not isinstance(ann.font, CustomFontRef):
                continue
            name = ann.font.postscript_name
            if name in font_data:
                continue
            loaded = self._fonts.get_loaded_font(name)
            if loaded is None:
                logger.warning("Font %s is not loaded, skipping text of annotation %s",
                               name, ann.id)
                continue
            font_data[name] = loaded.data
        return font_data
