"""
Live annotation set of a document.
"""
from typing import Iterable, List, Optional

from .models import Annotation


class AnnotationManager:
    """Holds the annotations of one PDF document, keyed by annotation id."""

    def __init__(self, annotations: Optional[Iterable[Annotation]] = None):
        self.annotations: List[Annotation] = []
        self.import_annotations(annotations or [])

    def import_annotations(self, annotations: Iterable[Annotation]) -> None:
        """Insert whole records, replacing any existing one with the same id."""
        for annotation in annotations:
            for i, existing in enumerate(self.annotations):
                if existing.id == annotation.id:
                    self.annotations[i] = annotation
                    break
            else:
                self.annotations.append(annotation)

    def remove_annotation(self, page_index: int, annotation_id: str) -> Optional[Annotation]:
        """
        Remove an annotation by page and id.

        Args:
            page_index: 0-based page index
            annotation_id: Id of the annotation

        Returns:
            The removed annotation, or None if it was not found
        """
        for i, ann in enumerate(self.annotations):
            if ann.id == annotation_id and ann.page_index == page_index:
                del self.annotations[i]
                return ann
        return None
