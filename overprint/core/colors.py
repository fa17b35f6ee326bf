from typing import Tuple

RGB = Tuple[float, float, float]


def parse_hex_color(color: str) -> RGB:
    """
    Parse "#RRGGBB" or "#RGB" into 0-1 components.

    Args:
        color: Hex color string, leading "#" optional

    Returns:
        (r, g, b) tuple with each component in [0, 1]
    """
    hex_value = color.strip().lstrip("#")
    if len(hex_value) == 3:
        hex_value = "".join(ch * 2 for ch in hex_value)
    if len(hex_value) != 6:
        raise ValueError(f"Invalid hex color: {color!r}")

    r = int(hex_value[0:2], 16) / 255
    g = int(hex_value[2:4], 16) / 255
    b = int(hex_value[4:6], 16) / 255
    return r, g, b
