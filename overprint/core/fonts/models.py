"""
Data types describing local fonts and font references held by annotations.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class FontFormat(Enum):
    """Font program type, numbered like the FPDF_FONT_* constants."""
    TYPE1 = 1
    TRUETYPE = 2


class StandardFont(Enum):
    """The 14 standard PDF fonts, keyed by their PyMuPDF short names."""
    COURIER = "cour"
    COURIER_BOLD = "cobo"
    COURIER_OBLIQUE = "coit"
    COURIER_BOLD_OBLIQUE = "cobi"
    HELVETICA = "helv"
    HELVETICA_BOLD = "hebo"
    HELVETICA_OBLIQUE = "heit"
    HELVETICA_BOLD_OBLIQUE = "hebi"
    TIMES_ROMAN = "tiro"
    TIMES_BOLD = "tibo"
    TIMES_ITALIC = "tiit"
    TIMES_BOLD_ITALIC = "tibi"
    SYMBOL = "symb"
    ZAPF_DINGBATS = "zadb"


@dataclass(frozen=True)
class LocalFontDescriptor:
    """A font reported by the platform during one discovery pass."""
    family: str
    full_name: str
    postscript_name: str  # Unique within one snapshot
    style: str
    weight: int = 400
    italic: bool = False

    # Name as reported by the platform, before duplicates were renamed
    raw_postscript_name: Optional[str] = None
    path: Optional[str] = None
    face_index: int = 0


@dataclass(frozen=True)
class LoadedFontBinary:
    """A local font together with its raw font program."""
    family: str
    full_name: str
    postscript_name: str
    style: str
    data: bytes
    font_format: FontFormat
    weight: int = 400
    italic: bool = False
    face_index: int = 0

    @classmethod
    def from_descriptor(cls, descriptor: LocalFontDescriptor, data: bytes,
                        font_format: FontFormat) -> "LoadedFontBinary":
        return cls(
            family=descriptor.family,
            full_name=descriptor.full_name,
            postscript_name=descriptor.postscript_name,
            style=descriptor.style,
            data=data,
            font_format=font_format,
            weight=descriptor.weight,
            italic=descriptor.italic,
            face_index=descriptor.face_index,
        )


@dataclass(frozen=True)
class StandardFontRef:
    """Reference to one of the standard 14 fonts."""
    font: StandardFont = StandardFont.HELVETICA

    def to_dict(self):
        return {'type': 'standard', 'font': self.font.value}


@dataclass(frozen=True)
class CustomFontRef:
    """Reference to a local font by its postscript name."""
    postscript_name: str
    family: str = ""
    full_name: str = ""
    style: str = ""

    def to_dict(self):
        return {
            'type': 'custom',
            'postscript_name': self.postscript_name,
            'family': self.family,
            'full_name': self.full_name,
            'style': self.style,
        }


FontReference = Union[StandardFontRef, CustomFontRef]


def font_ref_from_dict(data) -> FontReference:
    """Rebuild a font reference from its ``to_dict`` form."""
    if data.get('type') == 'custom':
        return CustomFontRef(
            postscript_name=data['postscript_name'],
            family=data.get('family', ''),
            full_name=data.get('full_name', ''),
            style=data.get('style', ''),
        )
    return StandardFontRef(StandardFont(data.get('font', StandardFont.HELVETICA.value)))
