"""Public interface for bead-pattern: turn an image into a bead grid and colour inventory."""

from __future__ import annotations

from .core.decode import DecodeFailure, decode_image
from .core.palette import DEFAULT_PALETTE, EmptyPaletteConfig, Palette, PaletteConfigError, load_palette
from .core.types import TRANSPARENT, Grid, PaletteColor, PaletteUsage, PatternResult, RawImageBuffer
from .matcher import PaletteMatcher
from .pipeline import PatternPipeline, convert
from .stages.voting import grid_dimensions

__all__ = [
    'DEFAULT_PALETTE',
    'DecodeFailure',
    'EmptyPaletteConfig',
    'Grid',
    'Palette',
    'PaletteColor',
    'PaletteConfigError',
    'PaletteMatcher',
    'PaletteUsage',
    'PatternPipeline',
    'PatternResult',
    'RawImageBuffer',
    'TRANSPARENT',
    'convert',
    'decode_image',
    'grid_dimensions',
    'load_palette',
]
