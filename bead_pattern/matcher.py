"""Nearest-palette-colour lookup under a pluggable ColourMetric.

Palette coordinates come from Palette.space(), computed once per metric and
shared by every matcher built on that palette. Lookups are a linear scan
over the palette (argmin over a distance row), so ties go to the first entry
in table order.
"""

import numpy as np

from bead_pattern import registry
from bead_pattern.core.colour import RGB
from bead_pattern.core.palette import Palette
from bead_pattern.core.types import ColourMetric, PaletteColor

# Unique colours matched per chunk, bounds the (N, P) distance matrix size
_CHUNK = 4096


class PaletteMatcher:
    def __init__(self, palette: Palette, metric: str | ColourMetric = 'cielab'):
        self.palette = palette
        self.metric = registry.get(metric) if isinstance(metric, str) else metric
        self._palette_space = palette.space(self.metric)

    def nearest_indices(self, rgb: np.ndarray) -> np.ndarray:
        """Palette index of the nearest colour for each row of an (N, 3) RGB array."""
        rgb = np.asarray(rgb).reshape(-1, 3)
        out = np.empty(len(rgb), dtype=np.intp)
        for start in range(0, len(rgb), _CHUNK):
            chunk = self.metric.to_space(rgb[start : start + _CHUNK])
            out[start : start + _CHUNK] = np.argmin(self.metric.pairwise(chunk, self._palette_space), axis=1)
        return out

    def nearest(self, rgb: RGB) -> tuple[PaletteColor, float]:
        """Return (palette colour, distance) for one RGB triple."""
        target = self.metric.to_space(np.array([rgb], dtype=np.uint8))
        dists = self.metric.pairwise(target, self._palette_space)[0]
        idx = int(np.argmin(dists))
        return self.palette[idx], float(dists[idx])

    def label_image(self, rgb: np.ndarray) -> np.ndarray:
        """Map an (h, w, 3) RGB image to an (h, w) array of palette indices.

        Each distinct colour is matched once; results are identical to
        matching every pixel independently.
        """
        h, w = rgb.shape[:2]
        flat = rgb.reshape(-1, 3).astype(np.uint32)
        keys = (flat[:, 0] << 16) | (flat[:, 1] << 8) | flat[:, 2]
        uniq, inverse = np.unique(keys, return_inverse=True)
        uniq_rgb = np.stack([(uniq >> 16) & 0xFF, (uniq >> 8) & 0xFF, uniq & 0xFF], axis=-1).astype(np.uint8)
        labels = self.nearest_indices(uniq_rgb)
        return labels[inverse.reshape(-1)].reshape(h, w)
