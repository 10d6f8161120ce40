"""
Argument parsing for the CLI interface.

Provides functions to create and configure the argument parser for the
depict command-line interface.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any

from ..config import DEFAULT_HASH_ALGORITHM, DEFAULT_RADIUS, HASH_ALGORITHMS, RADIUS_PRESETS
from ..user_config import get_user_config

logger = logging.getLogger(__name__)


def parse_radius(value: Any) -> int:
    """
    Convert a radius preset name or integer string into a distance.

    Raises:
        argparse.ArgumentTypeError: If value is neither a preset nor a
            non-negative integer

    Examples:
        >>> parse_radius('medium')
        8
        >>> parse_radius('12')
        12
    """
    if isinstance(value, int) and not isinstance(value, bool):
        radius = value
    else:
        text = str(value).strip().lower()
        if text in RADIUS_PRESETS:
            return RADIUS_PRESETS[text]
        try:
            radius = int(text)
        except ValueError:
            raise argparse.ArgumentTypeError(
                f"invalid radius {value!r}: use a non-negative integer or one of "
                f"{', '.join(RADIUS_PRESETS)}"
            ) from None

    if radius < 0:
        raise argparse.ArgumentTypeError(f"radius must be non-negative, got {radius}")
    return radius


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Defaults come from the user configuration (file and environment).

    Returns:
        Configured ArgumentParser instance
    """
    user_config = get_user_config()
    presets = ', '.join(f"{name}={value}" for name, value in RADIUS_PRESETS.items())

    try:
        default_radius = parse_radius(user_config.default_radius)
    except argparse.ArgumentTypeError as e:
        logger.warning(f"Ignoring configured radius: {e}")
        default_radius = DEFAULT_RADIUS

    # argparse does not check choices against the default
    default_algorithm = user_config.hash_algorithm
    if default_algorithm not in HASH_ALGORITHMS:
        logger.warning(
            f"Ignoring configured hash algorithm {default_algorithm!r}: "
            f"use one of {', '.join(HASH_ALGORITHMS)}"
        )
        default_algorithm = DEFAULT_HASH_ALGORITHM

    parser = argparse.ArgumentParser(
        prog='depict',
        description='Index images by perceptual hash and report near-duplicates',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  %(prog)s /path/to/photos
      Index new images into /path/to/photos/depict.db and list similar images

  %(prog)s /path/to/photos --radius low
      Stricter matching

  %(prog)s /path/to/photos --check new.jpg
      Report indexed images similar to new.jpg without indexing it

  %(prog)s /path/to/photos --export similar.csv --export-format csv
      Export the similarity report

Radius presets: {presets}
        """
    )

    parser.add_argument(
        'directory',
        type=Path,
        help='Directory containing the images to index'
    )

    parser.add_argument(
        '-r', '--radius',
        type=parse_radius,
        default=default_radius,
        help='Maximum hash distance for two images to count as similar '
             '(preset name or integer). Default: medium'
    )

    parser.add_argument(
        '--recursive',
        action='store_true',
        help='Also index images in subdirectories'
    )

    parser.add_argument(
        '--db',
        type=Path,
        default=None,
        help=f'Database file. Default: <directory>/{user_config.db_filename}'
    )

    parser.add_argument(
        '--check',
        type=Path,
        action='append',
        default=[],
        metavar='FILE',
        help='Report indexed images similar to FILE (repeatable)'
    )

    # Hashing options
    parser.add_argument(
        '--hash-size',
        type=_positive_int,
        default=user_config.hash_size,
        help=f'Perceptual hash size. Default: {user_config.hash_size}'
    )

    parser.add_argument(
        '--algorithm',
        choices=HASH_ALGORITHMS,
        default=default_algorithm,
        help=f'Perceptual hash algorithm. Default: {default_algorithm}'
    )

    # Performance options
    parser.add_argument(
        '-w', '--workers',
        type=_positive_int,
        default=user_config.default_workers,
        help=f'Number of parallel workers. Default: {user_config.default_workers}'
    )

    # Export options
    parser.add_argument(
        '-e', '--export',
        type=Path,
        help='Export the similarity report to file'
    )

    parser.add_argument(
        '--export-format',
        choices=['txt', 'csv', 'json'],
        default='txt',
        help='Export format. Default: txt'
    )

    # Output options
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )

    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable progress bars (useful for piping output)'
    )

    return parser


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: List of argument strings (default: sys.argv)

    Returns:
        Parsed arguments as Namespace object

    Examples:
        >>> args = parse_arguments(['/path/to/photos', '--radius', 'low'])
        >>> args.radius
        4
    """
    parser = create_parser()
    return parser.parse_args(argv)


__all__ = [
    'create_parser',
    'parse_arguments',
    'parse_radius',
]
