"""
Color space conversions between hex strings, RGB and HSV.

Conventions:
- RGB channels are integers in [0, 255]
- HSV hue is in degrees [0, 360), saturation and value are percentages [0, 100]
- Hex strings are emitted uppercase with a leading "#"

None of these functions raise on malformed input; hex parsing returns None so
that half-typed values coming from a color field can be passed straight through.
"""

import math
import re
from dataclasses import dataclass
from typing import Optional

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


@dataclass(frozen=True)
class RGBColor:
    """8-bit RGB triple. Callers clamp channels before constructing."""
    r: int
    g: int
    b: int

    def as_tuple(self):
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class HSVColor:
    """HSV color: h in degrees, s and v in percent."""
    h: float
    s: float
    v: float


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with .5 going up, independent of float banker's rounding."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def clamp_channel(value: float) -> int:
    """Round and clamp an arbitrary number into a valid 8-bit channel."""
    return int(max(0, min(255, round_half_up(value))))


def hex_to_rgb(hex_color: str) -> Optional[RGBColor]:
    """
    Parse a 6-digit hex color.

    Args:
        hex_color: "#RRGGBB" or "RRGGBB", case-insensitive

    Returns:
        RGBColor, or None when the string is not exactly six hex digits
    """
    if not isinstance(hex_color, str):
        return None
    match = _HEX_RE.match(hex_color.strip())
    if match is None:
        return None
    r, g, b = (int(part, 16) for part in match.groups())
    return RGBColor(r, g, b)


def rgb_to_hex(rgb: RGBColor) -> str:
    """Format an RGB color as "#RRGGBB" (uppercase, zero padded)."""
    return f"#{rgb.r:02X}{rgb.g:02X}{rgb.b:02X}"


def normalize_hex(hex_color: str) -> Optional[str]:
    """Canonicalize a hex string to "#RRGGBB" uppercase, or None if invalid."""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return None
    return rgb_to_hex(rgb)


def rgb_to_hsv(rgb: RGBColor) -> HSVColor:
    """
    Convert RGB to HSV.

    Hue is rounded to a whole degree and wrapped into [0, 360); saturation and
    value are rounded to two decimals. Achromatic colors get hue 0 and pure
    black gets saturation 0.

    Args:
        rgb: RGB color with channels in [0, 255]

    Returns:
        HSVColor with h in [0, 360), s and v in [0, 100]
    """
    r = rgb.r / 255
    g = rgb.g / 255
    b = rgb.b / 255

    c_max = max(r, g, b)
    c_min = min(r, g, b)
    delta = c_max - c_min

    h = 0.0
    if delta != 0:
        if c_max == r:
            h = 60 * math.fmod((g - b) / delta, 6)
        elif c_max == g:
            h = 60 * ((b - r) / delta + 2)
        else:
            h = 60 * ((r - g) / delta + 4)
        if h < 0:
            h += 360

    s = 0.0 if c_max == 0 else (delta / c_max) * 100
    v = c_max * 100

    hue = int(round_half_up(h)) % 360
    return HSVColor(h=hue, s=round_half_up(s, 2), v=round_half_up(v, 2))


def hsv_to_rgb(hsv: HSVColor) -> RGBColor:
    """
    Convert HSV to RGB using the six 60-degree sector formula.

    Args:
        hsv: HSV color; hue outside [0, 360) is wrapped

    Returns:
        RGBColor with each channel rounded to the nearest integer
    """
    h = hsv.h % 360
    s = hsv.s / 100
    v = hsv.v / 100

    c = v * s
    x = c * (1 - abs(math.fmod(h / 60, 2) - 1))
    m = v - c

    if h < 60:
        r, g, b = c, x, 0.0
    elif h < 120:
        r, g, b = x, c, 0.0
    elif h < 180:
        r, g, b = 0.0, c, x
    elif h < 240:
        r, g, b = 0.0, x, c
    elif h < 300:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x

    return RGBColor(
        clamp_channel((r + m) * 255),
        clamp_channel((g + m) * 255),
        clamp_channel((b + m) * 255),
    )


def hex_to_hsv(hex_color: str) -> Optional[HSVColor]:
    """Shortcut for rgb_to_hsv(hex_to_rgb(hex)); None for invalid hex."""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return None
    return rgb_to_hsv(rgb)
