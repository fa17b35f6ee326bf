import asyncio
import logging
import os
import shutil
import tempfile

from PyQt5.QtCore import QThread, pyqtSignal

from ..errors import OverprintError
from .orchestrator import ExportOrchestrator, ExportState

logger = logging.getLogger(__name__)

_STATE_MESSAGES = {
    ExportState.CLASSIFYING: "Classifying annotations...",
    ExportState.REMOVING: "Preparing annotations...",
    ExportState.BASE_EXPORTING: "Exporting document...",
    ExportState.COMPOSITING: "Rendering custom annotations...",
    ExportState.REIMPORTING: "Restoring annotations...",
}


class ExportWorker(QThread):
    """Worker thread that exports a document without freezing the UI."""

    # Signals
    finished = pyqtSignal(bool, str)  # success, message
    progress = pyqtSignal(str)  # status message

    def __init__(self, orchestrator: ExportOrchestrator, document_id: str, output_pdf: str):
        super().__init__()
        self.orchestrator = orchestrator
        self.document_id = document_id
        self.output_pdf = output_pdf
        self.temp_path = None

    def run(self):
        """Run the export and write the result through a temp file."""
        unsubscribe = self.orchestrator.on_state_changed(self._on_state_changed)
        try:
            pdf_bytes = asyncio.run(self.orchestrator.export(self.document_id))

            self.progress.emit("Finalizing...")
            output_dir = os.path.dirname(os.path.abspath(self.output_pdf))
            temp_fd, self.temp_path = tempfile.mkstemp(suffix='.pdf', dir=output_dir)
            with os.fdopen(temp_fd, 'wb') as f:
                f.write(pdf_bytes)
            shutil.move(self.temp_path, self.output_pdf)
            self.temp_path = None

            self.finished.emit(True, "Document exported successfully!")
        except (OverprintError, OSError) as e:
            logger.error("Export of %s failed: %s", self.document_id, e)
            if self.temp_path and os.path.exists(self.temp_path):
                os.remove(self.temp_path)
            self.finished.emit(False, f"Error during export: {e}")
        finally:
            unsubscribe()

    def _on_state_changed(self, state: ExportState):
        message = _STATE_MESSAGES.get(state)
        if message:
            self.progress.emit(message)
