"""
File discovery module for the scanner package.

Enumerates candidate images in a directory. Names are returned relative to
the scanned directory because they are the identity stored in the tree,
and the database lives inside that directory.
"""

from __future__ import annotations

from pathlib import Path

from ..config import ACCEPTED_EXTENSIONS, HEIF_EXTENSIONS
from .dependencies import HAS_HEIF_SUPPORT


def has_valid_extension(filename: str) -> bool:
    """Check whether a file name carries an accepted image extension."""
    extensions = ACCEPTED_EXTENSIONS | HEIF_EXTENSIONS if HAS_HEIF_SUPPORT else ACCEPTED_EXTENSIONS
    return Path(filename).suffix.lower() in extensions


def find_image_files(root_path: str | Path, recursive: bool = False) -> list[str]:
    """
    Find all image files in the given directory.

    Args:
        root_path: Directory path to search for images
        recursive: If True, search subdirectories too

    Returns:
        Sorted list of POSIX-style paths relative to root_path

    Raises:
        NotADirectoryError: If root_path is not a directory
    """
    root = Path(root_path)
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    iterator = root.rglob('*') if recursive else root.iterdir()

    names = []
    for filepath in iterator:
        if filepath.is_file() and has_valid_extension(filepath.name):
            names.append(filepath.relative_to(root).as_posix())

    return sorted(names)


__all__ = ['find_image_files', 'has_valid_extension']
