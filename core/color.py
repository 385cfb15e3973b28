"""
color.py
---------
WCAG colour math for the optimization analyzer.

    relative luminance  L = 0.2126 R + 0.7152 G + 0.0722 B   (linearised sRGB)
    contrast ratio        = (L1 + 0.05) / (L2 + 0.05),  L1 >= L2

The ratio is symmetric and always lies in [1, 21]. Unparseable colours
never raise: they are treated as having no contrast at all (ratio 1.0).
"""

import logging
import re
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

MIN_CONTRAST = 1.0
MAX_CONTRAST = 21.0

_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def parse_hex_color(value) -> Optional[Tuple[int, int, int]]:
    """Parses '#RGB' or '#RRGGBB' (leading '#' optional). Returns None if invalid."""
    if not isinstance(value, str):
        return None
    match = _HEX_PATTERN.match(value.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))


def _linearise(channel: int) -> float:
    c = channel / 255
    return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(rgb: Tuple[int, int, int]) -> float:
    r, g, b = (_linearise(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(color1, color2) -> float:
    """
    WCAG contrast ratio between two hex colours.

    Returns:
        Float in [1, 21]. 1.0 when either colour cannot be parsed.
    """
    rgb1 = parse_hex_color(color1)
    rgb2 = parse_hex_color(color2)
    if rgb1 is None or rgb2 is None:
        logger.warning(f"Unparseable colour pair ({color1!r}, {color2!r}); treating contrast as {MIN_CONTRAST}")
        return MIN_CONTRAST

    l1, l2 = sorted((relative_luminance(rgb1), relative_luminance(rgb2)), reverse=True)
    ratio = (l1 + 0.05) / (l2 + 0.05)
    return min(max(ratio, MIN_CONTRAST), MAX_CONTRAST)
