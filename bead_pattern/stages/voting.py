"""Block voting: one source rectangle per output cell, one elected colour per rectangle.

Every source pixel inside the cell's rectangle (trimmed by 20% per side to
avoid anti-aliased edges) is matched to the palette and votes for its colour.
The winner is chosen in strict priority order:

  1. more than 60% transparent samples (alpha < 128)  -> TRANSPARENT
  2. largest feature colour above 15% of valid samples,
     ignoring the background colour                     -> that colour
  3. outline votes above 20% of valid samples,
     unless the background is the outline colour        -> outline token
  4. otherwise the most-voted colour (first seen wins ties)

Cells are independent of each other; only the palette and the background
token are shared, both read-only.
"""

import math
from collections import Counter

import numpy as np

from bead_pattern.core.palette import Palette
from bead_pattern.core.types import TRANSPARENT, RawImageBuffer
from bead_pattern.matcher import PaletteMatcher

ALPHA_CUTOFF = 128
EDGE_PAD = 0.2
TRANSPARENT_SHARE = 0.60
FEATURE_SHARE = 0.15
OUTLINE_SHARE = 0.20


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def grid_dimensions(width: int, height: int, size: int) -> tuple[int, int]:
    """Output (width, height): the longer source side maps to `size`, aspect ratio kept."""
    if size <= 0:
        raise ValueError(f'Requested grid size must be positive, got {size}')
    aspect = width / height
    if aspect > 1:
        return size, max(1, _round_half_up(size / aspect))
    return max(1, _round_half_up(size * aspect)), size


def _span(index: int, block: float, limit: int) -> tuple[int, int]:
    """Padded [start, end) source span for one cell along one axis."""
    start = math.floor(index * block)
    end = math.floor(min(limit, (index + 1) * block))
    # Sub-pixel blocks collapse to nothing; use the nearest source pixel instead
    end = max(end, start + 1)
    pad = math.floor((end - start) * EDGE_PAD)
    return start + pad, end - pad


def block_bounds(x: int, y: int, source: tuple[int, int], target: tuple[int, int]) -> tuple[int, int, int, int]:
    """Sampling rectangle (x0, y0, x1, y1) for output cell (x, y)."""
    src_w, src_h = source
    dst_w, dst_h = target
    x0, x1 = _span(x, src_w / dst_w, src_w)
    y0, y1 = _span(y, src_h / dst_h, src_h)
    return x0, y0, x1, y1


def _ordered_votes(labels: np.ndarray) -> dict[int, int]:
    """Count palette indices, keyed in first-seen (row-major) order."""
    if labels.size == 0:
        return {}
    uniq, first, counts = np.unique(labels, return_index=True, return_counts=True)
    return {int(uniq[i]): int(counts[i]) for i in np.argsort(first, kind='stable')}


def detect_background(labels: np.ndarray, alpha: np.ndarray, palette: Palette) -> str:
    """Most common matched colour among the four corners (TL, TR, BL, BR; first seen wins ties)."""
    h, w = labels.shape
    tokens = []
    for x, y in ((0, 0), (w - 1, 0), (0, h - 1), (w - 1, h - 1)):
        if alpha[y, x] < ALPHA_CUTOFF:
            tokens.append(TRANSPARENT)
        else:
            tokens.append(palette[int(labels[y, x])].hex)
    return Counter(tokens).most_common(1)[0][0]


def elect(labels: np.ndarray, alpha: np.ndarray, palette: Palette, background: str) -> str:
    """Elect the colour of one cell from its block of palette labels and alpha values."""
    total = labels.size
    opaque = alpha >= ALPHA_CUTOFF
    transparent = total - int(np.count_nonzero(opaque))
    if transparent > total * TRANSPARENT_SHARE:
        return TRANSPARENT

    valid = (total - transparent) or 1
    votes = _ordered_votes(labels[opaque])

    feature_winner = None
    best = 0
    for idx, count in votes.items():
        colour = palette[idx]
        if colour.feature and colour.hex != background and count / valid > FEATURE_SHARE and count > best:
            feature_winner = colour.hex
            best = count
    if feature_winner:
        return feature_winner

    outline_votes = sum(count for idx, count in votes.items() if palette[idx].outline)
    if outline_votes / valid > OUTLINE_SHARE and background != palette.outline.hex:
        return palette.outline.hex

    if not votes:
        return TRANSPARENT
    return palette[max(votes, key=votes.__getitem__)].hex


def vote_grid(buffer: RawImageBuffer, matcher: PaletteMatcher, size: int) -> tuple[int, int, list[str], str]:
    """Run block voting over the whole image.

    Returns (grid width, grid height, row-major cells, background token).
    """
    palette = matcher.palette
    rgba = buffer.as_array()
    labels = matcher.label_image(rgba[..., :3])
    alpha = rgba[..., 3]

    target = grid_dimensions(buffer.width, buffer.height, size)
    source = (buffer.width, buffer.height)
    background = detect_background(labels, alpha, palette)

    cells = []
    for y in range(target[1]):
        for x in range(target[0]):
            x0, y0, x1, y1 = block_bounds(x, y, source, target)
            cells.append(elect(labels[y0:y1, x0:x1], alpha[y0:y1, x0:x1], palette, background))
    return target[0], target[1], cells, background
