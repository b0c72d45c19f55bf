"""Image -> bead grid pipeline.

    RawImageBuffer
      -> block voting            (per cell, independent)
      -> seal + segment          (whole grid)
      -> background rewrite
      -> despeckle               (whole grid)
      -> usage inventory

Synchronous and free of I/O: decoding happens before run() is called.
"""

from collections import Counter

from bead_pattern.core.palette import DEFAULT_PALETTE, Palette
from bead_pattern.core.types import TRANSPARENT, ColourMetric, Grid, PaletteUsage, PatternResult, RawImageBuffer
from bead_pattern.matcher import PaletteMatcher
from bead_pattern.stages.despeckle import despeckle
from bead_pattern.stages.topology import remove_background
from bead_pattern.stages.voting import vote_grid


def summarise(grid: Grid, palette: Palette) -> list[PaletteUsage]:
    """One entry per used colour, by descending count; ties keep row-major first-seen order."""
    counts = Counter(c for c in grid.cells if c != TRANSPARENT)
    usage = []
    for hex_val, count in sorted(counts.items(), key=lambda item: -item[1]):
        colour = palette.get(hex_val)
        usage.append(PaletteUsage(hex=hex_val, rgb=colour.rgb, name=colour.name, count=count))
    return usage


class PatternPipeline:
    """Reusable pipeline bound to one palette and one colour metric."""

    def __init__(self, palette: Palette = DEFAULT_PALETTE, metric: str | ColourMetric = 'cielab'):
        self.palette = palette
        self.matcher = PaletteMatcher(palette, metric)

    def run(self, buffer: RawImageBuffer, size: int) -> PatternResult:
        width, height, raw, background = vote_grid(buffer, self.matcher, size)
        cells = remove_background(raw, width, height, self.palette, background)
        cells = despeckle(cells, width, height, self.palette)

        grid = Grid(width=width, height=height, cells=cells)
        return PatternResult(grid=grid, palette=summarise(grid, self.palette), background=background)


def convert(
    buffer: RawImageBuffer,
    size: int,
    palette: Palette | None = None,
    metric: str | ColourMetric = 'cielab',
) -> PatternResult:
    """One-shot conversion. Build a PatternPipeline to reuse the matcher across images."""
    return PatternPipeline(palette or DEFAULT_PALETTE, metric).run(buffer, size)
