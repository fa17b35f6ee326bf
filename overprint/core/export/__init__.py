"""
Export pipeline: classification, overlay compositing and orchestration.
"""
from .classification import classify, requires_custom_render
from .compositor import OverlayCompositor
from .orchestrator import ExportOrchestrator, ExportState
from .transaction import ExportTransaction

__all__ = [
    "ExportOrchestrator",
    "ExportState",
    "ExportTransaction",
    "OverlayCompositor",
    "classify",
    "requires_custom_render",
]
