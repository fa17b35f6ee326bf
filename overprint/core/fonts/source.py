"""
Platform font sources the font directory enumerates fonts from.
"""
import asyncio
import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Protocol

from ..errors import AccessDenied, UnsupportedPlatform

logger = logging.getLogger(__name__)

# %{...} fields may hold several comma separated values; only the first is used
_FC_LIST_FORMAT = "%{file}|%{index}|%{family}|%{style}|%{fullname}|%{postscriptname}\n"


@dataclass(frozen=True)
class PlatformFont:
    """One font as reported by the platform, before deduplication."""
    family: str
    full_name: str
    postscript_name: str
    style: str
    path: str

    # Face within a collection file (.ttc/.otc); 0 for single-face files
    face_index: int = 0

    async def blob(self) -> bytes:
        """
        Read the font program from disk.

        For a collection this is the whole file, so only face 0 can be
        embedded from it.
        """
        return await asyncio.to_thread(Path(self.path).read_bytes)


class FontSource(Protocol):
    """What the font directory needs from the platform."""

    def supported(self) -> bool:
        ...

    async def query(self) -> List[PlatformFont]:
        """Ask for permission, then enumerate; raises AccessDenied on refusal."""
        ...

    async def enumerate(self) -> List[PlatformFont]:
        """Enumerate installed fonts without prompting, once access is granted."""
        ...


def _first(value: str) -> str:
    parts = [part.strip() for part in value.split(",") if part.strip()]
    return parts[0] if parts else ""


def _face_index(value: str) -> int:
    try:
        return int(_first(value) or 0)
    except ValueError:
        return 0


def parse_fc_list(output: str) -> List[PlatformFont]:
    """
    Parse ``fc-list`` output produced with the overprint format string.

    Args:
        output: Raw stdout of fc-list

    Returns:
        Fonts in the order fc-list reported them
    """
    fonts: List[PlatformFont] = []
    for line in output.splitlines():
        parts = line.split("|")
        if len(parts) != 6:
            continue
        file_part, index_part, family_part, style_part, full_part, ps_part = parts
        family = _first(family_part)
        if not file_part or not family:
            continue
        style = _first(style_part) or "Regular"
        full_name = _first(full_part) or f"{family} {style}"
        postscript_name = ps_part.strip() or full_name.replace(" ", "-")
        fonts.append(PlatformFont(
            family=family,
            full_name=full_name,
            postscript_name=postscript_name,
            style=style,
            path=file_part,
            face_index=_face_index(index_part),
        ))
    return fonts


class FontconfigSource:
    """
    Enumerate fonts through fontconfig's ``fc-list``.

    ``confirm`` plays the role of the permission prompt: ``query`` calls it
    and a falsy answer raises AccessDenied. ``enumerate`` never prompts.
    """

    def __init__(self, confirm: Optional[Callable[[], bool]] = None,
                 executable: str = "fc-list"):
        self.confirm = confirm
        self.executable = executable

    def supported(self) -> bool:
        return shutil.which(self.executable) is not None

    async def query(self) -> List[PlatformFont]:
        if not self.supported():
            raise UnsupportedPlatform(f"{self.executable} is not available")

        if self.confirm is not None and not self.confirm():
            raise AccessDenied("Font access was denied by the user")

        return await self.enumerate()

    async def enumerate(self) -> List[PlatformFont]:
        if not self.supported():
            raise UnsupportedPlatform(f"{self.executable} is not available")

        proc = await asyncio.to_thread(
            subprocess.run,
            [self.executable, "-f", _FC_LIST_FORMAT],
            check=True,
            capture_output=True,
            text=True,
        )
        fonts = parse_fc_list(proc.stdout)
        logger.debug("fc-list reported %d fonts", len(fonts))
        return fonts
