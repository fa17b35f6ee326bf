"""
Session store for font binaries that have been loaded.
"""
from typing import Dict, Iterator, Optional

from .models import LoadedFontBinary


class LoadedFontStore:
    """Holds loaded fonts by postscript name for the lifetime of a session."""

    def __init__(self):
        self._fonts: Dict[str, LoadedFontBinary] = {}

    def set(self, font: LoadedFontBinary) -> None:
        self._fonts[font.postscript_name] = font

    def get(self, postscript_name: str) -> Optional[LoadedFontBinary]:
        return self._fonts.get(postscript_name)

    def has(self, postscript_name: str) -> bool:
        return postscript_name in self._fonts

    def data_map(self) -> Dict[str, bytes]:
        """Return postscript name -> raw font bytes for every stored font."""
        return {name: font.data for name, font in self._fonts.items()}

    def clear(self) -> None:
        self._fonts.clear()

    def __len__(self) -> int:
        return len(self._fonts)

    def __iter__(self) -> Iterator[LoadedFontBinary]:
        return iter(list(self._fonts.values()))
