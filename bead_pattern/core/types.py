"""Shared types for bead-pattern: PaletteColor, RawImageBuffer, Grid, PaletteUsage, PatternResult, ColourMetric."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

import numpy as np
from PIL import Image

from bead_pattern.core.colour import RGB, Lab

TRANSPARENT = 'TRANSPARENT'


@dataclass(frozen=True)
class PaletteColor:
    """One bead colour. Built once by Palette, never mutated."""

    hex: str  # '#RRGGBB'
    name: str
    rgb: RGB
    lab: Lab
    luma: float = 0.0  # Rec. 601, 0-255
    feature: bool = False  # protected detail colour (eyes, ears, highlights)
    outline: bool = False  # luma < 35


@dataclass(frozen=True)
class RawImageBuffer:
    """A decoded RGBA image owned by the caller. The pipeline only reads it."""

    width: int
    height: int
    samples: bytes  # row-major RGBA, 4 bytes per pixel

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f'Image dimensions must be positive, got {self.width}x{self.height}')
        expected = self.width * self.height * 4
        if len(self.samples) != expected:
            raise ValueError(f'Expected {expected} RGBA bytes for {self.width}x{self.height}, got {len(self.samples)}')

    @classmethod
    def from_image(cls, image: Image.Image) -> RawImageBuffer:
        rgba = image.convert('RGBA')
        return cls(width=rgba.width, height=rgba.height, samples=rgba.tobytes())

    @classmethod
    def from_array(cls, arr: np.ndarray) -> RawImageBuffer:
        """Build from an (h, w, 4) uint8 array."""
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f'Expected an (h, w, 4) array, got shape {arr.shape}')
        h, w = arr.shape[:2]
        return cls(width=w, height=h, samples=np.ascontiguousarray(arr, dtype=np.uint8).tobytes())

    def as_array(self) -> np.ndarray:
        """Read-only (h, w, 4) uint8 view of the samples."""
        return np.frombuffer(self.samples, dtype=np.uint8).reshape(self.height, self.width, 4)


@dataclass
class Grid:
    """Row-major bead grid. Each cell is a palette hex or TRANSPARENT."""

    width: int
    height: int
    cells: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.cells) != self.width * self.height:
            raise ValueError(f'Grid {self.width}x{self.height} needs {self.width * self.height} cells, got {len(self.cells)}')

    def cell(self, x: int, y: int) -> str:
        return self.cells[y * self.width + x]

    def rows(self) -> Iterator[list[str]]:
        for y in range(self.height):
            yield self.cells[y * self.width : (y + 1) * self.width]


@dataclass(frozen=True)
class PaletteUsage:
    """How many cells of the final grid use one palette colour."""

    hex: str
    rgb: RGB
    name: str
    count: int


@dataclass
class PatternResult:
    """Pipeline output: the final grid plus its colour inventory."""

    grid: Grid
    palette: list[PaletteUsage] = field(default_factory=list)
    background: str = TRANSPARENT  # detected corner reference token

    @property
    def total(self) -> int:
        return sum(u.count for u in self.palette)


def _squared_euclidean(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    diff = a[:, None, :] - b[None, :, :]
    return np.einsum('npk,npk->np', diff, diff)


class ColourMetric:
    """A self-registering colour-distance strategy.

    Usage in a metric module:

        metric = ColourMetric(name='rgb', help='Plain RGB Euclidean distance')

        @metric.space
        def to_space(rgb):
            return rgb.astype(np.float64)

    A module may also register `@metric.distance` for a pairwise distance that
    is not squared Euclidean in the transformed space.
    """

    def __init__(self, name: str, help: str = ''):
        self.name = name
        self.help = help
        self._space_fn: Callable | None = None
        self._distance_fn: Callable = _squared_euclidean

    def space(self, fn: Callable) -> Callable:
        """Decorator to register the RGB -> metric-space transform."""
        self._space_fn = fn
        return fn

    def distance(self, fn: Callable) -> Callable:
        """Decorator to register a pairwise distance (N, k) x (P, k) -> (N, P)."""
        self._distance_fn = fn
        return fn

    def to_space(self, rgb: np.ndarray) -> np.ndarray:
        if self._space_fn is None:
            raise RuntimeError(f'Metric {self.name} has no space function')
        return np.asarray(self._space_fn(np.asarray(rgb)), dtype=np.float64)

    def pairwise(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        return self._distance_fn(a, b)

    def __repr__(self) -> str:
        return f'ColourMetric({self.name!r})'
