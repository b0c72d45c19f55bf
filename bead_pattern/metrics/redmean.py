"""Weighted "Redmean" RGB distance.

A low-cost approximation of perceptual distance that scales the red and blue
channel weights by the mean red level of the two colours:

    r̄ = (R1 + R2) / 2
    d = (2 + r̄/256)·ΔR² + 4·ΔG² + (2 + (255 - r̄)/256)·ΔB²

Example:
    bead-pattern convert photo.png --metric redmean
"""

import numpy as np

from bead_pattern.core.types import ColourMetric

metric = ColourMetric(
    name='redmean',
    help='Redmean-weighted RGB distance (cheap perceptual approximation).',
)


@metric.space
def to_rgb(rgb: np.ndarray) -> np.ndarray:
    return rgb.astype(np.float64)


@metric.distance
def redmean(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    rmean = (a[:, None, 0] + b[None, :, 0]) / 2.0
    dr = a[:, None, 0] - b[None, :, 0]
    dg = a[:, None, 1] - b[None, :, 1]
    db = a[:, None, 2] - b[None, :, 2]
    return (2.0 + rmean / 256.0) * dr * dr + 4.0 * dg * dg + (2.0 + (255.0 - rmean) / 256.0) * db * db
