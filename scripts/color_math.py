#!/usr/bin/env python3
"""
Color helpers - hex/RGB/HSL conversion, luminance remapping, spectrum order.

A poem carries one base color. Readable background and text colors are
derived from it by keeping hue and saturation and replacing lightness, and
the poem listing is ordered by hue so the collection reads as a rainbow.
"""

import math
import re
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")

HEX_PATTERN = re.compile(r"^[0-9a-fA-F]{6}$")

# Hues above this sort just before pure red instead of after violet
HUE_WRAP_THRESHOLD = 0.9


class InvalidColorFormat(ValueError):
    """Raised when a color string is not six hex digits."""


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Parse '#rrggbb' or 'rrggbb' into three 0-255 integers."""
    if not isinstance(hex_color, str):
        raise InvalidColorFormat(f"Color must be a string, got {type(hex_color).__name__}")

    clean = hex_color[1:] if hex_color.startswith("#") else hex_color
    if not HEX_PATTERN.match(clean):
        raise InvalidColorFormat(f"Invalid hex color: {hex_color!r}")

    return int(clean[0:2], 16), int(clean[2:4], 16), int(clean[4:6], 16)


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Format channels as a lowercase '#rrggbb' string."""
    return "#{:02x}{:02x}{:02x}".format(_clamp_channel(r), _clamp_channel(g), _clamp_channel(b))


def rgb_to_hsl(r: int, g: int, b: int) -> Tuple[float, float, float]:
    """
    Convert 0-255 channels to (hue, saturation, lightness), each in [0, 1].

    Hue is 0 for achromatic colors.
    """
    rf, gf, bf = r / 255, g / 255, b / 255
    high = max(rf, gf, bf)
    low = min(rf, gf, bf)
    lightness = (high + low) / 2

    if high == low:
        return 0.0, 0.0, lightness

    d = high - low
    saturation = d / (2 - high - low) if lightness > 0.5 else d / (high + low)

    if high == rf:
        hue = (gf - bf) / d
    elif high == gf:
        hue = (bf - rf) / d + 2
    else:
        hue = (rf - gf) / d + 4

    hue /= 6
    if hue < 0:
        hue += 1

    return hue, saturation, lightness


def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[int, int, int]:
    """Convert (hue, saturation, lightness) back to 0-255 channels."""
    if s == 0:
        r = g = b = l
    else:
        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        r = _hue_to_channel(p, q, h + 1 / 3)
        g = _hue_to_channel(p, q, h)
        b = _hue_to_channel(p, q, h - 1 / 3)

    return _round_channel(r), _round_channel(g), _round_channel(b)


def hex_to_hsl(hex_color: str) -> Tuple[float, float, float]:
    """Convert a hex color straight to HSL."""
    return rgb_to_hsl(*hex_to_rgb(hex_color))


def adjust_luminance(hex_color: str, target_luminance: float) -> str:
    """
    Return hex_color with its lightness replaced by target_luminance.

    Hue and saturation are kept, so grays stay gray. 0.98 gives a near-white
    tint of the color, 0.02 a near-black shade.
    """
    if not 0 <= target_luminance <= 1:
        raise ValueError(f"Target luminance must be within [0, 1], got {target_luminance}")

    hue, saturation, _ = hex_to_hsl(hex_color)
    return rgb_to_hex(*hsl_to_rgb(hue, saturation, target_luminance))


def spectrum_key(hex_color: str) -> float:
    """Hue shifted so magenta-reds (hue > 0.9) land just below 0."""
    hue = hex_to_hsl(hex_color)[0]
    return hue - 1 if hue > HUE_WRAP_THRESHOLD else hue


def sort_by_spectrum(items: Iterable[T], color_of: Callable[[T], Optional[str]]) -> List[T]:
    """
    Order items red -> orange -> yellow -> green -> blue -> violet.

    Items whose color_of() is empty are left out. Equal hues keep their
    input order.
    """
    colored = [item for item in items if color_of(item)]
    return sorted(colored, key=lambda item: spectrum_key(color_of(item)))


def sort_poems_by_spectrum(poems: Iterable[T]) -> List[T]:
    """Spectrum order for poem records, keyed on their base color."""
    return sort_by_spectrum(poems, lambda poem: poem.color.hex if poem.color else None)


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def _round_channel(value: float) -> int:
    # Half-up rounding, not Python's round-half-even
    return _clamp_channel(int(math.floor(value * 255 + 0.5)))


def _clamp_channel(value: int) -> int:
    return max(0, min(255, int(value)))
