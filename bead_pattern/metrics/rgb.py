"""Plain squared Euclidean distance between RGB triples.

Cheap, but not perceptual: greens look further apart than blues at the same
distance. Useful as a baseline when comparing metrics.

Example:
    bead-pattern convert photo.png --metric rgb
"""

import numpy as np

from bead_pattern.core.types import ColourMetric

metric = ColourMetric(
    name='rgb',
    help='Plain RGB Euclidean distance (baseline).',
)


@metric.space
def to_rgb(rgb: np.ndarray) -> np.ndarray:
    return rgb.astype(np.float64)
