"""
Reading and writing annotation sets as JSON files.
"""
import json
import logging
import os
from typing import List, Optional, Tuple

from .models import Annotation

logger = logging.getLogger(__name__)


class AnnotationPersistence:
    """Saves and loads annotations to/from JSON files next to a PDF."""

    @staticmethod
    def default_json_path(pdf_path: str) -> str:
        """Return ``<pdf>.annotations.json`` for a PDF path."""
        return f"{os.path.splitext(pdf_path)[0]}.annotations.json"

    def save_to_json(self, annotations: List[Annotation], pdf_path: str,
                     file_path: Optional[str] = None) -> bool:
        """
        Save annotations to a JSON file.

        Args:
            annotations: List of annotations to save
            pdf_path: Path to the associated PDF
            file_path: Optional custom path for the JSON file

        Returns:
            True if save was successful, False otherwise
        """
        if file_path is None:
            file_path = self.default_json_path(pdf_path)

        data = {
            'pdf_path': pdf_path,
            'annotations': [ann.to_dict() for ann in annotations]
        }

        try:
            directory = os.path.dirname(file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            return True
        except OSError as e:
            logger.error("Failed to save annotations to %s: %s", file_path, e)
            return False

    def load_from_json(self, file_path: str,
                       pdf_path: Optional[str] = None) -> Tuple[List[Annotation], bool]:
        """
        Load annotations from a JSON file.

        Args:
            file_path: Path of the JSON file
            pdf_path: Expected PDF path, only used to warn on mismatch

        Returns:
            Tuple of (list of annotations, success flag)
        """
        if not os.path.exists(file_path):
            return [], False

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load annotations from %s: %s", file_path, e)
            return [], False

        stored_pdf_path = data.get('pdf_path')
        if pdf_path and stored_pdf_path and stored_pdf_path != pdf_path:
            logger.warning("JSON file is for different PDF: %s", stored_pdf_path)

        try:
            annotations = [Annotation.from_dict(ann_data)
                           for ann_data in data.get('annotations', [])]
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Malformed annotation in %s: %s", file_path, e)
            return [], False
        return annotations, True
