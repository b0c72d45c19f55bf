"""bead-pattern — Turn an image into a bead (Perler/Hama) pattern with a colour inventory.

Usage: bead-pattern convert <image> [options]

Colour metrics are auto-discovered from bead_pattern/metrics/.
Each metric module's docstring is its documentation.
Run `bead-pattern help <metric>` for full module docs.

Environment variables / .env loading:
  OS environment variables are always used first.
  If a variable is not set, bead-pattern looks for a .env file starting from
  the current directory and walking up, stopping at the nearest .git boundary.
  Use --env-file to override the .env location explicitly.
"""

import argparse
import os
import sys
from collections.abc import Sequence

from bead_pattern import registry
from bead_pattern.core.config import ConfigError, Settings, load_env
from bead_pattern.core.decode import DecodeFailure, decode_image
from bead_pattern.core.palette import DEFAULT_PALETTE, Palette, PaletteConfigError, load_palette
from bead_pattern.core.report import format_grid, format_json, format_text
from bead_pattern.pipeline import PatternPipeline


def _short_doc(name: str) -> str:
    mod = registry.load_metric_module(name)
    doc = (mod.__doc__ or '').strip()
    return doc.splitlines()[0] if doc else registry.get(name).help


def _build_parser() -> argparse.ArgumentParser:
    epilog = (
        'Examples:\n'
        '  bead-pattern convert cat.png\n'
        '  bead-pattern convert cat.png --size 48 --chart\n'
        '  bead-pattern convert cat.png --metric redmean --json\n'
        '  bead-pattern convert cat.png --palette hama.json\n'
        '  bead-pattern palette\n'
        '  bead-pattern metrics\n'
        '  bead-pattern help cielab\n'
        '\n'
        'Settings env vars (set in .env or environment):\n'
        '  BEAD_PATTERN_SIZE     longest grid side in beads (default 32)\n'
        '  BEAD_PATTERN_METRIC   colour metric (default cielab)\n'
        '  BEAD_PATTERN_PALETTE  JSON palette file (default: built-in table)\n'
        '  BEAD_PATTERN_BEAD_MM  bead pitch in mm (default 2.6)\n'
    )
    parser = argparse.ArgumentParser(
        prog='bead-pattern',
        description='Turn an image into a bead pattern with a colour inventory.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    sub = parser.add_subparsers(dest='command', help='Command to run')

    p = sub.add_parser('convert', help='Convert an image into a bead grid')
    p.add_argument('image', help='Path to source PNG/JPG/GIF/WebP')
    p.add_argument('-s', '--size', type=int, default=None, help='Longest grid side in beads')
    p.add_argument('-m', '--metric', default=None, help='Colour metric (see `bead-pattern metrics`)')
    p.add_argument('-P', '--palette', default=None, help='JSON palette file')
    p.add_argument('-b', '--bead-mm', type=float, default=None, help='Bead pitch in mm for finished size')
    p.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')
    p.add_argument('-c', '--chart', action='store_true', help='Append a character chart of the grid')

    pal = sub.add_parser('palette', help='List the configured bead palette')
    pal.add_argument('-P', '--palette', default=None, help='JSON palette file')

    sub.add_parser('metrics', help='List available colour metrics')

    help_parser = sub.add_parser('help', help='Print full docs for a colour metric')
    help_parser.add_argument('metric', nargs='?', help='Metric name')

    return parser


def _fail(message: str) -> None:
    print(f'Error: {message}', file=sys.stderr)
    sys.exit(1)


def _resolve_palette(path: str | None) -> Palette:
    return load_palette(path) if path else DEFAULT_PALETTE


def _print_help(name: str | None) -> None:
    """Print full module docstring for a metric."""
    metrics = registry.all_metrics()

    if name is None:
        print('Available metrics:\n')
        for metric_name in sorted(metrics):
            print(f'  {metric_name:<10} {_short_doc(metric_name)}')
        print('\nRun: bead-pattern help <metric> for full docs.')
        return

    if name not in metrics:
        _fail(f'Unknown metric: {name}. Available: {", ".join(sorted(metrics))}')

    print((registry.load_metric_module(name).__doc__ or '').strip() or f'(No module docs for {name!r})')


def _print_palette(palette: Palette) -> None:
    for colour in palette:
        flags = ' '.join(f for f, on in (('feature', colour.feature), ('outline', colour.outline)) if on)
        print(f'  {colour.hex}  {colour.name:<16} {flags}'.rstrip())
    print(f'\n{len(palette)} colours (outline token {palette.outline.hex}, fill {palette.fill.hex})')


def _convert(args: argparse.Namespace, settings: Settings) -> None:
    if not os.path.isfile(args.image):
        _fail(f'image not found: {args.image}')

    size = args.size if args.size is not None else settings.size
    metric = args.metric or settings.metric
    bead_mm = args.bead_mm if args.bead_mm is not None else settings.bead_mm
    palette = _resolve_palette(args.palette or settings.palette_path)

    print(f'bead-pattern: metric={metric} palette={len(palette)} colours size={size}', file=sys.stderr)

    buffer = decode_image(args.image)
    result = PatternPipeline(palette, metric).run(buffer, size)

    if args.json:
        print(format_json(result, source=args.image, bead_mm=bead_mm))
    else:
        print(format_text(result, source=args.image, bead_mm=bead_mm))
        if args.chart:
            print()
            print(format_grid(result))


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    # .env fills gaps only, OS env vars win
    env_path = load_env(env_file=args.env_file)
    if env_path:
        print(f'bead-pattern: loaded {env_path}', file=sys.stderr)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == 'help':
            _print_help(args.metric)
        elif args.command == 'metrics':
            _print_help(None)
        elif args.command == 'palette':
            _print_palette(_resolve_palette(args.palette or Settings.from_env().palette_path))
        else:
            _convert(args, Settings.from_env())
    except KeyError as exc:
        # Unknown metric
        _fail(exc.args[0])
    except (ConfigError, PaletteConfigError, DecodeFailure, ValueError) as exc:
        _fail(str(exc))


if __name__ == '__main__':
    main()
