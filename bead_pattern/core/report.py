"""Report builder — text, JSON and character-chart output for bead-pattern results."""

import json
import os
import string
from typing import Any

from bead_pattern.core.config import DEFAULT_BEAD_MM
from bead_pattern.core.types import TRANSPARENT, PatternResult

# Chart symbols, assigned to colours in inventory order
_SYMBOLS = string.ascii_uppercase + string.ascii_lowercase + string.digits + '#@%&*+=?!$'


def finished_size_cm(result: PatternResult, bead_mm: float = DEFAULT_BEAD_MM) -> tuple[float, float]:
    """Physical (width, height) of the fused piece in cm, one decimal."""
    return (round(result.grid.width * bead_mm / 10, 1), round(result.grid.height * bead_mm / 10, 1))


def format_text(result: PatternResult, source: str | None = None, bead_mm: float = DEFAULT_BEAD_MM) -> str:
    """Format the inventory as human-readable text."""
    grid = result.grid
    w_cm, h_cm = finished_size_cm(result, bead_mm)
    header = f'bead-pattern: {grid.width}×{grid.height} grid'
    if source:
        header += f' — {os.path.basename(source)}'

    lines = [header, '']
    lines.append(f'  finished size: {w_cm:.1f}cm × {h_cm:.1f}cm ({bead_mm}mm beads)')
    lines.append(f'  beads: {result.total} in {len(result.palette)} colours')
    lines.append('')

    if result.palette:
        width = max(len(u.name) for u in result.palette)
        for usage in result.palette:
            lines.append(f'  {usage.name:<{width}}  {usage.hex}  x{usage.count}')
    else:
        lines.append('  (no beads — every cell is transparent)')
    return '\n'.join(lines)


def format_json(result: PatternResult, source: str | None = None, bead_mm: float = DEFAULT_BEAD_MM) -> str:
    """Format inventory and grid as JSON. Transparent cells are null."""
    w_cm, h_cm = finished_size_cm(result, bead_mm)
    obj: dict[str, Any] = {}
    if source:
        obj['image'] = source
    obj['grid'] = {
        'width': result.grid.width,
        'height': result.grid.height,
        'rows': [[None if c == TRANSPARENT else c for c in row] for row in result.grid.rows()],
    }
    obj['background'] = None if result.background == TRANSPARENT else result.background
    obj['finished_size_cm'] = {'width': w_cm, 'height': h_cm, 'bead_mm': bead_mm}
    obj['palette'] = [
        {'name': u.name, 'hex': u.hex, 'rgb': list(u.rgb), 'count': u.count} for u in result.palette
    ]
    obj['total'] = result.total
    return json.dumps(obj, indent=2)


def format_grid(result: PatternResult) -> str:
    """Character chart: one symbol per colour, '.' for transparent, legend underneath."""
    symbols = {u.hex: _SYMBOLS[i % len(_SYMBOLS)] for i, u in enumerate(result.palette)}
    lines = [''.join(symbols.get(c, '.') for c in row) for row in result.grid.rows()]
    lines.append('')
    for usage in result.palette:
        lines.append(f'  {symbols[usage.hex]} = {usage.name} ({usage.hex})')
    return '\n'.join(lines)
