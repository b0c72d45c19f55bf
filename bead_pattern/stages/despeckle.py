"""Remove one-cell colour artifacts left by quantisation.

A single forward pass over interior cells (the border is left alone). A cell
that is not an outline or feature colour, and whose non-transparent
orthogonal neighbours all differ from it, takes the plurality neighbour
colour, unless that colour is an outline colour. Updates are visible to later
cells in the same pass.
"""

from bead_pattern.core.palette import Palette
from bead_pattern.core.types import TRANSPARENT


def _plurality(neighbours: list[str]) -> str:
    """First colour to reach the highest count, scanning left, right, up, down."""
    counts: dict[str, int] = {}
    best = neighbours[0]
    best_count = 0
    for token in neighbours:
        counts[token] = counts.get(token, 0) + 1
        if counts[token] > best_count:
            best_count = counts[token]
            best = token
    return best


def despeckle(cells: list[str], width: int, height: int, palette: Palette) -> list[str]:
    out = list(cells)
    for y in range(1, height - 1):
        for x in range(1, width - 1):
            i = y * width + x
            token = out[i]
            if token == TRANSPARENT or palette.is_outline(token) or palette.is_feature(token):
                continue

            neighbours = [n for n in (out[i - 1], out[i + 1], out[i - width], out[i + width]) if n != TRANSPARENT]
            if not neighbours or token in neighbours:
                continue

            replacement = _plurality(neighbours)
            if not palette.is_outline(replacement):
                out[i] = replacement
    return out
