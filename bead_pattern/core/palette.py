"""Bead palette: the reference Perler/Hama/Artkal colour table and the immutable Palette index.

The table maps to real physical bead colours. Each entry carries an explicit
`feature` flag marking detail colours (pinks, reds, black, white) that the
pipeline protects from background removal and despeckling.

Palette.from_entries() normalises hex values, drops duplicate hexes (first
wins) and precomputes RGB, Lab, luma and the outline flag for every entry once.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

import numpy as np

from bead_pattern.core.colour import hex_to_rgb, is_outline_rgb, luma, normalise_hex, rgb_to_lab
from bead_pattern.core.types import ColourMetric, PaletteColor


class PaletteConfigError(ValueError):
    """The palette table is malformed."""


class EmptyPaletteConfig(PaletteConfigError):
    """The palette table has no entries."""


PERLER_PALETTE: list[dict[str, Any]] = [
    {'hex': '#000000', 'name': 'Black', 'feature': True},
    {'hex': '#FFFFFF', 'name': 'White', 'feature': True},
    {'hex': '#888888', 'name': 'Grey'},
    {'hex': '#C0C0C0', 'name': 'Light Grey'},
    {'hex': '#555555', 'name': 'Dark Grey'},
    {'hex': '#E4E4E4', 'name': 'Clear'},
    {'hex': '#A05F35', 'name': 'Brown'},
    {'hex': '#D4A467', 'name': 'Light Brown'},
    {'hex': '#683F23', 'name': 'Dark Brown'},
    {'hex': '#CFA876', 'name': 'Tan'},
    {'hex': '#F0E68C', 'name': 'Sand'},
    {'hex': '#ECCDB1', 'name': 'Flesh'},
    {'hex': '#FFDAB9', 'name': 'Peach'},
    {'hex': '#FF0000', 'name': 'Red', 'feature': True},
    {'hex': '#8B0000', 'name': 'Dark Red', 'feature': True},
    {'hex': '#FA8072', 'name': 'Salmon'},
    {'hex': '#FF69B4', 'name': 'Hot Pink', 'feature': True},
    {'hex': '#FFC0CB', 'name': 'Pink', 'feature': True},
    {'hex': '#F7A8B8', 'name': 'Light Pink', 'feature': True},
    {'hex': '#E05395', 'name': 'Raspberry'},
    {'hex': '#800080', 'name': 'Purple'},
    {'hex': '#DDA0DD', 'name': 'Plum'},
    {'hex': '#9370DB', 'name': 'Pastel Lavender'},
    {'hex': '#4B0082', 'name': 'Indigo'},
    {'hex': '#0000FF', 'name': 'Blue'},
    {'hex': '#00008B', 'name': 'Dark Blue'},
    {'hex': '#87CEEB', 'name': 'Light Blue'},
    {'hex': '#4169E1', 'name': 'Royal Blue'},
    {'hex': '#00FFFF', 'name': 'Cyan'},
    {'hex': '#40E0D0', 'name': 'Turquoise'},
    {'hex': '#008080', 'name': 'Teal'},
    {'hex': '#008000', 'name': 'Green'},
    {'hex': '#006400', 'name': 'Dark Green'},
    {'hex': '#90EE90', 'name': 'Light Green'},
    {'hex': '#32CD32', 'name': 'Lime Green'},
    {'hex': '#556B2F', 'name': 'Olive'},
    {'hex': '#FFFF00', 'name': 'Yellow'},
    {'hex': '#F0E632', 'name': 'Pastel Yellow'},
    {'hex': '#FFA500', 'name': 'Orange'},
    {'hex': '#FF8C00', 'name': 'Dark Orange'},
    {'hex': '#FFA07A', 'name': 'Light Salmon'},
    {'hex': '#F5F5DC', 'name': 'Cream'},
    {'hex': '#E6E6FA', 'name': 'Lavender'},
    {'hex': '#98FB98', 'name': 'Pale Green'},
]


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


class Palette:
    """Ordered, immutable, hex-deduplicated set of bead colours.

    Table order is the tie-break order for matching. Build with
    Palette.from_entries() or load_palette(); share one instance by reference.
    """

    def __init__(self, colours: Iterable[PaletteColor]):
        self._colours = tuple(colours)
        if not self._colours:
            raise EmptyPaletteConfig('Palette has no colours')
        self._by_hex = {c.hex: c for c in self._colours}
        if len(self._by_hex) != len(self._colours):
            raise PaletteConfigError('Palette contains duplicate hex values')

        self.rgb_array = _readonly(np.array([c.rgb for c in self._colours], dtype=np.uint8))
        self.lab_array = _readonly(np.array([c.lab for c in self._colours], dtype=np.float64))

        lumas = [c.luma for c in self._colours]
        self.outline = self._by_hex.get('#000000') or self._colours[lumas.index(min(lumas))]
        self.fill = self._by_hex.get('#FFFFFF') or self._colours[lumas.index(max(lumas))]
        self._spaces: dict[ColourMetric, np.ndarray] = {}

    @classmethod
    def from_entries(cls, entries: Iterable[Mapping[str, Any]]) -> Palette:
        """Build from {'hex', 'name', 'feature'?} mappings. Later duplicate hexes are dropped."""
        colours: list[PaletteColor] = []
        seen: set[str] = set()
        for i, entry in enumerate(entries):
            if not isinstance(entry, Mapping):
                raise PaletteConfigError(f'Palette entry {i} is not an object: {entry!r}')
            try:
                hex_val = normalise_hex(entry.get('hex', ''))
            except ValueError as exc:
                raise PaletteConfigError(f'Palette entry {i}: {exc}') from exc
            name = entry.get('name')
            if not isinstance(name, str) or not name.strip():
                raise PaletteConfigError(f'Palette entry {i} ({hex_val}) has no name')
            if hex_val in seen:
                continue
            seen.add(hex_val)
            rgb = hex_to_rgb(hex_val)
            colours.append(
                PaletteColor(
                    hex=hex_val,
                    name=name.strip(),
                    rgb=rgb,
                    lab=rgb_to_lab(rgb),
                    luma=luma(rgb),
                    feature=bool(entry.get('feature', False)),
                    outline=is_outline_rgb(rgb),
                )
            )
        return cls(colours)

    def __len__(self) -> int:
        return len(self._colours)

    def __iter__(self) -> Iterator[PaletteColor]:
        return iter(self._colours)

    def __getitem__(self, index: int) -> PaletteColor:
        return self._colours[index]

    def __contains__(self, hex_val: object) -> bool:
        return hex_val in self._by_hex

    def get(self, hex_val: str) -> PaletteColor | None:
        return self._by_hex.get(hex_val)

    def index_of(self, hex_val: str) -> int:
        return self._colours.index(self._by_hex[hex_val])

    def is_outline(self, token: str) -> bool:
        c = self._by_hex.get(token)
        return c is not None and c.outline

    def is_feature(self, token: str) -> bool:
        c = self._by_hex.get(token)
        return c is not None and c.feature

    def space(self, metric: ColourMetric) -> np.ndarray:
        """Palette coordinates in `metric`'s space, computed once per metric and shared."""
        if metric.name == 'cielab':
            # Lab is precomputed per entry at build time
            return self.lab_array
        cached = self._spaces.get(metric)
        if cached is None:
            cached = self._spaces[metric] = _readonly(metric.to_space(self.rgb_array))
        return cached


def load_palette(path: str | Path) -> Palette:
    """Load a palette from a JSON list of {"hex", "name", "feature"?} objects."""
    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise PaletteConfigError(f'{path}: invalid JSON ({exc})') from exc
    except OSError as exc:
        raise PaletteConfigError(f'{path}: cannot read palette ({exc.strerror or exc})') from exc
    if not isinstance(data, list):
        raise PaletteConfigError(f'{path}: expected a JSON list of colours')
    if not data:
        raise EmptyPaletteConfig(f'{path}: palette is empty')
    return Palette.from_entries(data)


DEFAULT_PALETTE = Palette.from_entries(PERLER_PALETTE)
