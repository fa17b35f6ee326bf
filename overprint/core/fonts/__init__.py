"""
Local font discovery, loading and embedding.
"""
from .directory import (
    FontDirectory,
    detect_font_format,
    disambiguate,
    find_best_match,
    group_by_family,
)
from .embedding import FontEmbeddingCache
from .models import (
    CustomFontRef,
    FontFormat,
    FontReference,
    LoadedFontBinary,
    LocalFontDescriptor,
    StandardFont,
    StandardFontRef,
)
from .source import FontconfigSource, FontSource, PlatformFont
from .store import LoadedFontStore
from .style import parse_font_style

__all__ = [
    "FontDirectory",
    "FontEmbeddingCache",
    "FontSource",
    "FontconfigSource",
    "PlatformFont",
    "LoadedFontStore",
    "LocalFontDescriptor",
    "LoadedFontBinary",
    "FontFormat",
    "FontReference",
    "StandardFont",
    "StandardFontRef",
    "CustomFontRef",
    "detect_font_format",
    "disambiguate",
    "find_best_match",
    "group_by_family",
    "parse_font_style",
]
