"""
Utility functions: unit conversion, colour parsing, ICC profile
"""

import math
import numbers
import re
from typing import Tuple, Union

from PIL.ImageCms import createProfile, ImageCmsProfile

from .errors import InvalidArgument

MM_PER_INCH = 25.4

# Build the sRGB ICC profile once (bytes), for embedding in saved images
_srgb_profile = ImageCmsProfile(createProfile('sRGB'))
SRGB_ICC_BYTES = _srgb_profile.tobytes()

_HEX_COLOR = re.compile(r'^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')


def _check_dpi(dpi: float) -> None:
    if isinstance(dpi, bool) or not isinstance(dpi, numbers.Real) \
            or not math.isfinite(dpi) or dpi <= 0:
        raise InvalidArgument(f"DPI must be a positive number, got {dpi!r}")


def mm_to_pixels(mm: float, dpi: float = 300) -> int:
    """Convert millimeters to whole pixels at the given DPI.

    Rounds half up, so 0.5px becomes 1px.

    Raises:
        InvalidArgument: If dpi <= 0 or mm is negative / not finite.
    """
    _check_dpi(dpi)
    if not math.isfinite(mm) or mm < 0:
        raise InvalidArgument(f"Length must be a non-negative number of mm, got {mm!r}")
    return int(math.floor(mm / MM_PER_INCH * dpi + 0.5))


def pixels_to_mm(px: float, dpi: float = 300) -> float:
    """Convert pixels to millimeters at the given DPI."""
    _check_dpi(dpi)
    return px * MM_PER_INCH / dpi


def parse_hex_color(value: str) -> Tuple[int, int, int]:
    """Parse '#RRGGBB' or '#RGB' into an (r, g, b) tuple."""
    match = _HEX_COLOR.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidArgument(f"Invalid hex colour: {value!r}")
    digits = match.group(1)
    if len(digits) == 3:
        digits = ''.join(c * 2 for c in digits)
    return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))


def to_hex_color(rgb: Tuple[int, int, int]) -> str:
    return '#{:02X}{:02X}{:02X}'.format(*rgb)


def to_rgb(color: Union[str, Tuple[int, int, int]]) -> Tuple[int, int, int]:
    """Accept a hex string or an (r, g, b) tuple."""
    if isinstance(color, str):
        return parse_hex_color(color)
    if len(color) != 3 or not all(0 <= int(c) <= 255 for c in color):
        raise InvalidArgument(f"Invalid RGB colour: {color!r}")
    return tuple(int(c) for c in color)
