"""
Per-export cache of embeddable font handles.
"""
import logging
from typing import Callable, Dict, Optional

import fitz  # PyMuPDF

from ..errors import FontDecodeFailure

logger = logging.getLogger(__name__)


def _load_font(data: bytes) -> fitz.Font:
    if not data:
        # An empty buffer makes PyMuPDF fall back to Helvetica
        raise ValueError("empty font buffer")
    return fitz.Font(fontbuffer=data)


class FontEmbeddingCache:
    """
    Turns font binaries into ``fitz.Font`` handles, at most once per name.

    PyMuPDF embeds a Font into the document the first time text is written
    with it, so one handle per postscript name means one embedded font
    program per export. A name that failed to decode is remembered and not
    retried.
    """

    def __init__(self, factory: Optional[Callable[[bytes], fitz.Font]] = None):
        self._factory = factory or _load_font
        self._handles: Dict[str, fitz.Font] = {}
        self._failures: Dict[str, FontDecodeFailure] = {}
        self.embed_count = 0

    def embed(self, postscript_name: str, data: bytes) -> Optional[fitz.Font]:
        """
        Return the handle for a font, creating it on first use.

        Args:
            postscript_name: Identity of the font
            data: Raw font program

        Returns:
            The font handle, or None if the binary could not be decoded
        """
        if postscript_name in self._handles:
            return self._handles[postscript_name]
        if postscript_name in self._failures:
            return None

        self.embed_count += 1
        try:
            handle = self._factory(data)
        except Exception as e:  # MuPDF reports bad font data with its own error types
            failure = FontDecodeFailure(postscript_name, str(e))
            self._failures[postscript_name] = failure
            logger.error("Failed to embed font %s: %s", postscript_name, e)
            return None

        self._handles[postscript_name] = handle
        return handle

    def failure(self, postscript_name: str) -> Optional[FontDecodeFailure]:
        return self._failures.get(postscript_name)

    def __contains__(self, postscript_name: str) -> bool:
        return postscript_name in self._handles
