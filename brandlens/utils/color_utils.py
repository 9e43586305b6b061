"""Color-space helpers shared by the extractors, pattern engine and aggregator.

All functions are pure. Hex colors are handled in the normalized
``#rrggbb`` lowercase form; anything that cannot be parsed is treated as
"no color" rather than raising.
"""

import math
import re
from typing import Optional

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_RGB_FUNC_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})", re.IGNORECASE
)

# Luminance band outside of which a color is structural (text/background)
NEAR_BLACK_LUMINANCE = 30
NEAR_WHITE_LUMINANCE = 225


def normalize_hex(value) -> Optional[str]:
    """Normalize a hex color to ``#rrggbb`` lowercase.

    Accepts 3-, 6- and 8-digit forms with or without the leading ``#``.
    The alpha channel of 8-digit colors is dropped. Returns None when the
    value is not a hex color.
    """
    if not isinstance(value, str):
        return None
    match = _HEX_RE.match(value.strip())
    if not match:
        return None
    digits = match.group(1).lower()
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits[:6]}"


def css_color_to_hex(value) -> Optional[str]:
    """Convert a hex or ``rgb()/rgba()`` CSS color to normalized hex."""
    hex_color = normalize_hex(value)
    if hex_color or not isinstance(value, str):
        return hex_color
    match = _RGB_FUNC_RE.match(value.strip())
    if match:
        r, g, b = (int(match.group(i)) for i in range(1, 4))
        return rgb_to_hex(r, g, b)
    return None


def hex_to_rgb(hex_color) -> Optional[tuple[int, int, int]]:
    hex_color = normalize_hex(hex_color)
    if hex_color is None:
        return None
    return (
        int(hex_color[1:3], 16),
        int(hex_color[3:5], 16),
        int(hex_color[5:7], 16),
    )


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Convert channel values to hex, clamping each channel to 0-255."""
    channels = (max(0, min(255, int(round(c)))) for c in (r, g, b))
    return "#" + "".join(f"{c:02x}" for c in channels)


def luminance(hex_color) -> Optional[float]:
    """Perceived luminance on the 0-255 scale (Rec. 601 weights)."""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return None
    r, g, b = rgb
    return 0.299 * r + 0.587 * g + 0.114 * b


def is_near_white_or_black(
    hex_color,
    low: float = NEAR_BLACK_LUMINANCE,
    high: float = NEAR_WHITE_LUMINANCE,
) -> bool:
    """True for structural colors. Unparseable colors count as structural."""
    lum = luminance(hex_color)
    if lum is None:
        return True
    return lum < low or lum > high


def hue(hex_color) -> int:
    """Hue in whole degrees (0-359). Grays and invalid colors return 0."""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return 0
    r, g, b = (c / 255 for c in rgb)
    high = max(r, g, b)
    low = min(r, g, b)
    if high == low:
        return 0

    d = high - low
    if high == r:
        h = ((g - b) / d + (6 if g < b else 0)) / 6
    elif high == g:
        h = ((b - r) / d + 2) / 6
    else:
        h = ((r - g) / d + 4) / 6
    return round_half_up(h * 360) % 360


def hue_distance(h1: float, h2: float) -> float:
    """Circular distance between two hues in degrees."""
    diff = abs(h1 - h2) % 360
    return min(diff, 360 - diff)


def color_distance(hex1, hex2) -> float:
    """Euclidean distance in RGB space; infinite when either is invalid."""
    rgb1 = hex_to_rgb(hex1)
    rgb2 = hex_to_rgb(hex2)
    if rgb1 is None or rgb2 is None:
        return math.inf
    return math.sqrt(sum((a - b) ** 2 for a, b in zip(rgb1, rgb2)))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def round_to_places(value: float, places: int = 2) -> float:
    """Half-up rounding to a fixed number of decimals."""
    scale = 10 ** places
    return round_half_up(value * scale) / scale


def round_to_step(value: float, step: int) -> int:
    """Round to the nearest multiple of ``step`` (half-up)."""
    return round_half_up(value / step) * step
