"""Colour helpers: hex parsing, luma, and sRGB -> CIE L*a*b* conversion.

The Lab conversion uses the sRGB gamma curve, the sRGB -> XYZ matrix and the
D65 reference white. Both a scalar form (palette building, single lookups) and
a vectorised numpy form (whole-image matching) are provided; they produce the
same numbers.
"""

import re

import numpy as np

RGB = tuple[int, int, int]
Lab = tuple[float, float, float]

OUTLINE_LUMA = 35.0

_HEX_RE = re.compile(r'^#?([0-9a-fA-F]{6})$')

_SRGB_TO_XYZ = np.array(
    [
        [0.4124, 0.3576, 0.1805],
        [0.2126, 0.7152, 0.0722],
        [0.0193, 0.1192, 0.9505],
    ],
    dtype=np.float64,
)
_D65 = np.array([95.047, 100.0, 108.883], dtype=np.float64)


def normalise_hex(value: str) -> str:
    """Return `value` as '#RRGGBB' upper case. Raises ValueError if not 6 hex digits."""
    m = _HEX_RE.match(value.strip()) if isinstance(value, str) else None
    if not m:
        raise ValueError(f'Not a 6-digit hex colour: {value!r}')
    return '#' + m.group(1).upper()


def hex_to_rgb(value: str) -> RGB:
    h = normalise_hex(value)
    return (int(h[1:3], 16), int(h[3:5], 16), int(h[5:7], 16))


def luma(rgb: RGB) -> float:
    """Rec. 601 luma, 0-255."""
    r, g, b = rgb
    return 0.299 * r + 0.587 * g + 0.114 * b


def is_outline_rgb(rgb: RGB) -> bool:
    """Dark enough to count as a structural outline."""
    return luma(rgb) < OUTLINE_LUMA


def _linearise(c: float) -> float:
    c = c / 255.0
    if c > 0.04045:
        return ((c + 0.055) / 1.055) ** 2.4
    return c / 12.92


def _lab_f(t: float) -> float:
    if t > 0.008856:
        return t ** (1.0 / 3.0)
    return 7.787 * t + 16.0 / 116.0


def rgb_to_lab(rgb: RGB) -> Lab:
    """Convert one sRGB triple (0-255 per channel) to CIE L*a*b*."""
    r, g, b = (_linearise(int(c)) * 100.0 for c in rgb)

    x = r * 0.4124 + g * 0.3576 + b * 0.1805
    y = r * 0.2126 + g * 0.7152 + b * 0.0722
    z = r * 0.0193 + g * 0.1192 + b * 0.9505

    fx = _lab_f(x / 95.047)
    fy = _lab_f(y / 100.0)
    fz = _lab_f(z / 108.883)

    return (116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz))


def rgb_array_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Vectorised rgb_to_lab. Input shape (..., 3), any integer or float dtype."""
    c = np.asarray(rgb, dtype=np.float64) / 255.0
    linear = np.where(c > 0.04045, ((c + 0.055) / 1.055) ** 2.4, c / 12.92) * 100.0
    xyz = linear @ _SRGB_TO_XYZ.T / _D65
    f = np.where(xyz > 0.008856, np.cbrt(xyz), 7.787 * xyz + 16.0 / 116.0)
    L = 116.0 * f[..., 1] - 16.0
    a = 500.0 * (f[..., 0] - f[..., 1])
    b = 200.0 * (f[..., 1] - f[..., 2])
    return np.stack([L, a, b], axis=-1)
