"""Configuration for bead-pattern: .env loading and Settings.

Resolution order (first wins):
  1. Command-line options (applied by the CLI on top of Settings).
  2. Existing OS environment variables (never overwritten).
  3. .env file at --env-file, or the nearest .env walking up from cwd.

The walk stops at the first directory holding .git (dir or worktree file), so a
.env from outside the repository is never picked up.

Variables:
  BEAD_PATTERN_SIZE      longest grid side in beads (default 32)
  BEAD_PATTERN_METRIC    colour metric name (default cielab)
  BEAD_PATTERN_PALETTE   path to a JSON palette (default: built-in table)
  BEAD_PATTERN_BEAD_MM   bead pitch in mm for finished-size reports (default 2.6)
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

DEFAULT_SIZE = 32
DEFAULT_METRIC = 'cielab'
DEFAULT_BEAD_MM = 2.6  # mini beads


class ConfigError(ValueError):
    """A configuration value could not be interpreted."""


def find_dotenv(start: Path) -> Path | None:
    """Return the nearest .env at or above `start`, or None at a .git boundary / fs root."""
    for directory in (start.resolve(), *start.resolve().parents):
        candidate = directory / '.env'
        if candidate.is_file():
            return candidate
        if (directory / '.git').exists():
            return None
    return None


def read_dotenv(path: Path) -> dict[str, str]:
    """Parse KEY=value lines. Blank lines, comments and lines without '=' are skipped."""
    values: dict[str, str] = {}
    for raw in path.read_text(encoding='utf-8').splitlines():
        line = raw.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        if line.startswith('export '):
            line = line[len('export ') :]
        key, _, value = line.partition('=')
        key = key.strip()
        if key:
            values[key] = value.strip().strip('"').strip("'")
    return values


def load_env(env_file: str | None = None) -> Path | None:
    """Copy .env values into os.environ for keys not already set. Returns the file used."""
    if env_file:
        path: Path | None = Path(env_file)
        if not path.is_file():
            return None
    else:
        path = find_dotenv(Path.cwd())
        if path is None:
            return None

    for key, value in read_dotenv(path).items():
        os.environ.setdefault(key, value)
    return path


@dataclass(frozen=True)
class Settings:
    size: int = DEFAULT_SIZE
    metric: str = DEFAULT_METRIC
    palette_path: str | None = None
    bead_mm: float = DEFAULT_BEAD_MM

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> 'Settings':
        env = os.environ if environ is None else environ

        size = _parse(env, 'BEAD_PATTERN_SIZE', int, DEFAULT_SIZE)
        if size <= 0:
            raise ConfigError(f'BEAD_PATTERN_SIZE must be positive, got {size}')
        bead_mm = _parse(env, 'BEAD_PATTERN_BEAD_MM', float, DEFAULT_BEAD_MM)
        if bead_mm <= 0:
            raise ConfigError(f'BEAD_PATTERN_BEAD_MM must be positive, got {bead_mm}')

        return cls(
            size=size,
            metric=env.get('BEAD_PATTERN_METRIC') or DEFAULT_METRIC,
            palette_path=env.get('BEAD_PATTERN_PALETTE') or None,
            bead_mm=bead_mm,
        )


def _parse(env: Mapping[str, str], key: str, kind: type, default):
    raw = env.get(key)
    if raw is None or raw.strip() == '':
        return default
    try:
        return kind(raw.strip())
    except ValueError as exc:
        raise ConfigError(f'{key}={raw!r} is not a valid {kind.__name__}') from exc
