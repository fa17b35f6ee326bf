"""
Directory of fonts installed on the local machine.

Discovery goes through a FontSource (fontconfig by default). Each discovery
pass yields a fresh snapshot of LocalFontDescriptor objects in which
duplicate postscript names have been made unique; loading a font reads its
binary and keeps it in the session's LoadedFontStore so that exports can
embed it later.
"""
import logging
import re
import subprocess
from typing import Callable, Dict, List, Optional, Sequence

from PyQt5.QtCore import QObject, pyqtSignal

from ..errors import AccessDenied, UnsupportedPlatform
from ..signals import subscribe
from .models import FontFormat, LoadedFontBinary, LocalFontDescriptor
from .source import FontSource, PlatformFont
from .store import LoadedFontStore
from .style import DEFAULT_WEIGHT, parse_font_style

logger = logging.getLogger(__name__)

DEFAULT_VARIANT_MARKER = "Variable"

_DUPLICATE_NAME = re.compile(r"^(?P<raw>.*)#(?P<index>\d+)$")


def detect_font_format(data: bytes) -> FontFormat:
    """
    Detect the font program type from its first bytes.

    Only PostScript Type 1 ("%!") is told apart; TrueType, OpenType (CFF or
    glyf), WOFF and anything unrecognised are all reported as TRUETYPE.
    """
    if len(data) >= 2 and data[0] == 0x25 and data[1] == 0x21:
        return FontFormat.TYPE1
    return FontFormat.TRUETYPE


def disambiguate(fonts: Sequence[PlatformFont],
                 marker: str = DEFAULT_VARIANT_MARKER) -> List[LocalFontDescriptor]:
    """
    Build descriptors with unique postscript names from one discovery pass.

    The first font with a given postscript name keeps it. The k-th one
    (k >= 2) becomes ``"<name>#<k-1>"`` and its family is labelled
    ``"<family> (Variant <k-1>)"``, or ``"<family> (<marker>)"`` when the
    full name contains ``marker``.
    """
    seen: Dict[str, int] = {}
    descriptors: List[LocalFontDescriptor] = []

    for font in fonts:
        raw = font.postscript_name
        count = seen.get(raw, 0) + 1
        seen[raw] = count

        postscript_name = raw
        family = font.family
        if count > 1:
            postscript_name = f"{raw}#{count - 1}"
            if marker and marker in font.full_name:
                family = f"{font.family} ({marker})"
            else:
                family = f"{font.family} (Variant {count - 1})"

        weight, italic = parse_font_style(font.style, font.full_name)
        descriptors.append(LocalFontDescriptor(
            family=family,
            full_name=font.full_name,
            postscript_name=postscript_name,
            style=font.style,
            weight=weight,
            italic=italic,
            raw_postscript_name=raw,
            path=font.path,
            face_index=font.face_index,
        ))

    return descriptors


def resolve_index(fonts: Sequence[PlatformFont], postscript_name: str) -> Optional[int]:
    """
    Find the position of ``postscript_name`` within a discovery pass.

    ``"<raw>#<n>"`` picks the n-th font (0-based) whose raw name is ``raw``,
    in discovery order. Other names, or a suffix whose base is not present
    at all, match exactly.
    """
    match = _DUPLICATE_NAME.match(postscript_name)
    if match:
        raw = match.group("raw")
        occurrences = [i for i, font in enumerate(fonts) if font.postscript_name == raw]
        if occurrences:
            index = int(match.group("index"))
            return occurrences[index] if index < len(occurrences) else None

    for i, font in enumerate(fonts):
        if font.postscript_name == postscript_name:
            return i
    return None


def group_by_family(descriptors: Sequence[LocalFontDescriptor]) -> Dict[str, List[LocalFontDescriptor]]:
    """Group descriptors by family, keeping discovery order in each group."""
    grouped: Dict[str, List[LocalFontDescriptor]] = {}
    for descriptor in descriptors:
        grouped.setdefault(descriptor.family, []).append(descriptor)
    return grouped


def find_best_match(variants: Sequence[LocalFontDescriptor], weight: int,
                    italic: bool) -> Optional[LocalFontDescriptor]:
    """
    Pick the variant of a family closest to the requested weight and slant.

    Exact weight and slant first, then the same slant within 100 weight
    units, then whatever comes first.
    """
    for variant in variants:
        if variant.weight == weight and variant.italic == italic:
            return variant

    for variant in variants:
        if variant.italic == italic and abs((variant.weight or DEFAULT_WEIGHT) - weight) < 100:
            return variant

    return variants[0] if variants else None


class FontDirectory(QObject):
    """Discovers, deduplicates and loads local fonts."""

    access_granted = pyqtSignal(object)  # list of descriptors
    access_denied = pyqtSignal(object)  # exception
    font_loaded = pyqtSignal(object)  # LoadedFontBinary
    font_load_error = pyqtSignal(str, object)  # postscript name, exception

    def __init__(self, source: FontSource, store: Optional[LoadedFontStore] = None,
                 variant_marker: str = DEFAULT_VARIANT_MARKER):
        super().__init__()
        self._source = source
        self.store = store if store is not None else LoadedFontStore()
        self.variant_marker = variant_marker

        self._local_fonts: List[LocalFontDescriptor] = []
        self._has_permission = False
        self._is_loading = False

        if not source.supported():
            logger.warning("Local font access is not supported on this platform")

    # Capability probes and queries

    def is_supported(self) -> bool:
        return self._source.supported()

    @property
    def has_permission(self) -> bool:
        return self._has_permission

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def get_local_fonts(self) -> List[LocalFontDescriptor]:
        return list(self._local_fonts)

    def get_loaded_font(self, postscript_name: str) -> Optional[LoadedFontBinary]:
        return self.store.get(postscript_name)

    def is_font_loaded(self, postscript_name: str) -> bool:
        return self.store.has(postscript_name)

    def group_fonts_by_family(self) -> Dict[str, List[LocalFontDescriptor]]:
        return group_by_family(self._local_fonts)

    def _ensure_supported(self) -> None:
        if not self.is_supported():
            raise UnsupportedPlatform("Local font access is not supported on this platform")

    # Operations

    async def request_access(self) -> List[LocalFontDescriptor]:
        """
        Ask for access to local fonts and enumerate them.

        Returns:
            The new discovery snapshot

        Raises:
            UnsupportedPlatform: If no font source is available
            AccessDenied: If the user refused access
        """
        if not self.is_supported():
            error = UnsupportedPlatform("Local font access is not supported on this platform")
            self.access_denied.emit(error)
            raise error

        self._is_loading = True
        try:
            platform_fonts = await self._source.query()
        except AccessDenied as error:
            self._has_permission = False
            self.access_denied.emit(error)
            logger.error("Font access denied: %s", error)
            raise
        except (OSError, subprocess.CalledProcessError) as error:
            logger.error("Font discovery failed: %s", error)
            raise
        finally:
            self._is_loading = False

        fonts = disambiguate(platform_fonts, self.variant_marker)
        self._local_fonts = fonts
        self._has_permission = True
        self.access_granted.emit(list(fonts))
        logger.info("Loaded %d local fonts", len(fonts))
        return list(fonts)

    request_font_access = request_access

    async def load(self, postscript_name: str) -> Optional[LoadedFontBinary]:
        """
        Load the binary of a font by its (possibly disambiguated) name.

        Args:
            postscript_name: Name as exposed in a discovery snapshot

        Access is requested first if it has not been granted yet; after that
        the platform is enumerated without prompting again.

        Returns:
            The loaded font, or None when the platform no longer has it or
            reading it failed

        Raises:
            AccessDenied: If access had not been granted and the user
                refused it now
        """
        self._ensure_supported()

        existing = self.store.get(postscript_name)
        if existing is not None:
            return existing

        if not self._has_permission:
            await self.request_access()

        try:
            platform_fonts = await self._source.enumerate()
            index = resolve_index(platform_fonts, postscript_name)
            if index is None:
                logger.debug("Font %s is no longer installed", postscript_name)
                return None
            data = await platform_fonts[index].blob()
        except (OSError, subprocess.CalledProcessError) as error:
            self.font_load_error.emit(postscript_name, error)
            logger.error("Failed to load font %s: %s", postscript_name, error)
            return None

        descriptor = disambiguate(platform_fonts, self.variant_marker)[index]
        if descriptor.face_index:
            logger.warning("Font %s is face %d of collection %s; its first face will be embedded",
                           postscript_name, descriptor.face_index, descriptor.path)
        font = LoadedFontBinary.from_descriptor(descriptor, data, detect_font_format(data))

        self.store.set(font)
        self.font_loaded.emit(font)
        logger.debug("Loaded font: %s", font.full_name)
        return font

    load_font = load

    def clear_loaded_fonts(self) -> None:
        self.store.clear()

    # Subscriptions

    def on_access_granted(self, listener: Callable[[list], None]) -> Callable[[], None]:
        return subscribe(self.access_granted, listener)

    def on_access_denied(self, listener: Callable[[Exception], None]) -> Callable[[], None]:
        return subscribe(self.access_denied, listener)

    def on_font_loaded(self, listener: Callable[[LoadedFontBinary], None]) -> Callable[[], None]:
        return subscribe(self.font_loaded, listener)

    def on_font_load_error(self, listener: Callable[[str, Exception], None]) -> Callable[[], None]:
        return subscribe(self.font_load_error, listener)
