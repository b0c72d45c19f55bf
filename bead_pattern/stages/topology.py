"""Background segmentation that does not leak through broken outlines.

Corner colour alone misclassifies enclosed areas that happen to share the
background colour, because a single-cell diagonal gap in an outline lets a
flood fill run straight into the interior. The fix is two-pass:

  seal     dilate every outline cell onto its 8 neighbours in a throwaway
           copy of the grid, closing one-cell gaps.
  segment  breadth-first 4-connected flood fill from every border cell of the
           sealed copy. Outline cells, and feature cells that are not the
           background colour, are walls.

The resulting mask is applied to the unsealed grid, so outlines are never
thickened in the output.
"""

from collections import deque

from bead_pattern.core.palette import Palette
from bead_pattern.core.types import TRANSPARENT


def seal_outlines(cells: list[str], width: int, height: int, palette: Palette) -> list[str]:
    """Copy of `cells` with every outline cell dilated to its 8 neighbours."""
    sealed = list(cells)
    token = palette.outline.hex
    for y in range(height):
        for x in range(width):
            if not palette.is_outline(cells[y * width + x]):
                continue
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    nx, ny = x + dx, y + dy
                    if 0 <= nx < width and 0 <= ny < height:
                        sealed[ny * width + nx] = token
    return sealed


def background_mask(cells: list[str], width: int, height: int, palette: Palette, background: str) -> list[bool]:
    """True for every cell reachable from the grid border without crossing a wall."""

    def is_wall(token: str) -> bool:
        return palette.is_outline(token) or (palette.is_feature(token) and token != background)

    mask = [False] * len(cells)
    queue: deque[int] = deque()

    def visit(i: int) -> None:
        if not mask[i] and not is_wall(cells[i]):
            mask[i] = True
            queue.append(i)

    for x in range(width):
        visit(x)
        visit((height - 1) * width + x)
    for y in range(1, height - 1):
        visit(y * width)
        visit(y * width + width - 1)

    while queue:
        i = queue.popleft()
        x, y = i % width, i // width
        if x > 0:
            visit(i - 1)
        if x < width - 1:
            visit(i + 1)
        if y > 0:
            visit(i - width)
        if y < height - 1:
            visit(i + width)
    return mask


def remove_background(cells: list[str], width: int, height: int, palette: Palette, background: str) -> list[str]:
    """Cut exterior background to TRANSPARENT and fill enclosed holes.

    Enclosed cells that are TRANSPARENT or the background colour become the
    palette's neutral fill; every other enclosed cell keeps its voted colour.
    """
    sealed = seal_outlines(cells, width, height, palette)
    mask = background_mask(sealed, width, height, palette, background)
    fill = palette.fill.hex

    out = []
    for token, is_bg in zip(cells, mask):
        if is_bg:
            out.append(TRANSPARENT)
        elif token == TRANSPARENT or token == background:
            out.append(fill)
        else:
            out.append(token)
    return out
