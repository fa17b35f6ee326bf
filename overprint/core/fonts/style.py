"""
Weight and italic inference from the style strings fonts report.
"""
from typing import Tuple

# Checked in order, first hit wins. "light" precedes "bold", so a name
# containing both resolves to 300.
_WEIGHT_RULES = (
    (("thin", "hairline"), 100),
    (("extra light", "extralight", "ultra light"), 200),
    (("light",), 300),
    (("semi bold", "semibold", "demi bold"), 600),
    (("extra bold", "extrabold", "ultra bold"), 800),
    (("bold",), 700),
    (("black", "heavy"), 900),
    (("medium",), 500),
)

DEFAULT_WEIGHT = 400


def parse_font_style(style: str, full_name: str) -> Tuple[int, bool]:
    """
    Infer the numeric weight and italic flag of a font.

    Args:
        style: Style string reported by the platform (e.g. "Bold Italic")
        full_name: Full font name (e.g. "Foo Bold Italic")

    Returns:
        Tuple of (weight, italic)
    """
    text = f"{style or ''} {full_name or ''}".lower()

    weight = DEFAULT_WEIGHT
    for needles, value in _WEIGHT_RULES:
        if any(needle in text for needle in needles):
            weight = value
            break

    italic = "italic" in text or "oblique" in text
    return weight, italic
