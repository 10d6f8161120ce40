"""
Export functionality for DePict.

Writes the similarity mapping produced by the all-pairs sweep to TXT, CSV
or JSON files.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import TextIO

EXPORT_FORMATS = ('txt', 'csv', 'json')


def _export_txt(similars: dict[str, list[str]], radius: int, file_handle: TextIO) -> None:
    file_handle.write(f"SIMILAR IMAGES (radius={radius})\n")
    file_handle.write("=" * 70 + "\n")
    for name, others in similars.items():
        file_handle.write(f"\n{name} is similar to:\n")
        for other in others:
            file_handle.write(f" - {other}\n")


def _export_csv(similars: dict[str, list[str]], radius: int, file_handle: TextIO) -> None:
    """One row per recorded pair: image, similar, radius."""
    writer = csv.writer(file_handle)
    writer.writerow(['image', 'similar', 'radius'])
    for name, others in similars.items():
        for other in others:
            writer.writerow([name, other, radius])


def _export_json(similars: dict[str, list[str]], radius: int, file_handle: TextIO) -> None:
    json.dump({'radius': radius, 'similars': similars}, file_handle, indent=2)
    file_handle.write("\n")


def export_results(
    similars: dict[str, list[str]],
    radius: int,
    output_path: Path,
    export_format: str = 'txt',
) -> None:
    """
    Export a similarity mapping to a file.

    Args:
        similars: Mapping of image name -> similar image names
        radius: Radius the mapping was computed with
        output_path: Path to output file
        export_format: 'txt', 'csv' or 'json'. Default: 'txt'

    Raises:
        ValueError: If export_format is not supported
        OSError: If file cannot be written
    """
    if export_format not in EXPORT_FORMATS:
        raise ValueError(
            f"Unsupported export format: {export_format}. Use one of {', '.join(EXPORT_FORMATS)}."
        )

    with open(output_path, 'w', encoding='utf-8', newline='') as f:
        if export_format == 'txt':
            _export_txt(similars, radius, f)
        elif export_format == 'csv':
            _export_csv(similars, radius, f)
        else:
            _export_json(similars, radius, f)


__all__ = ['EXPORT_FORMATS', 'export_results']
