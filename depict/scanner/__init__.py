"""
Scanner package for DePict.

Discovers images, fingerprints them and feeds the BK-tree.

Public API:
- find_image_files: Discover image files in a directory
- has_valid_extension: Check a file name against accepted extensions
- calculate_perceptual_hash: Calculate the perceptual hash of an image
- fingerprint: Build an ImageInfo for an image in a directory
- populate_tree: Fingerprint images in parallel and add them to a tree
- lookup: Report stored images similar to a given one
- has_heif_support: Check if HEIC/HEIF support is available
"""

from __future__ import annotations

from .file_discovery import find_image_files, has_valid_extension
from .hashing import calculate_perceptual_hash, fingerprint
from .parallel import PopulateStats, populate_tree
from .matching import lookup

from .dependencies import HAS_HEIF_SUPPORT


def has_heif_support() -> bool:
    """Check if HEIC/HEIF support is available."""
    return HAS_HEIF_SUPPORT


__all__ = [
    # File discovery
    'find_image_files',
    'has_valid_extension',
    # Hashing
    'calculate_perceptual_hash',
    'fingerprint',
    # Population
    'PopulateStats',
    'populate_tree',
    # Matching
    'lookup',
    # Feature detection
    'has_heif_support',
]
