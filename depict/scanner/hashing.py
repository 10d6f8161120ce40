"""
Hashing module for the scanner package.

Provides perceptual fingerprints for images.
"""

from __future__ import annotations

from pathlib import Path

from ..config import DEFAULT_HASH_ALGORITHM, DEFAULT_HASH_SIZE
from ..errors import HashComputationError
from ..models import ImageInfo
from .dependencies import Image, imagehash, _logger

_HASH_FUNCTIONS = {
    'phash': imagehash.phash,
    'dhash': imagehash.dhash,
    'average': imagehash.average_hash,
    'whash': imagehash.whash,
}


def calculate_perceptual_hash(
    filepath: str | Path,
    hash_size: int = DEFAULT_HASH_SIZE,
    algorithm: str = DEFAULT_HASH_ALGORITHM,
) -> imagehash.ImageHash:
    """
    Calculate perceptual hash of an image.

    Args:
        filepath: Path to the image
        hash_size: Size of the hash (16 gives a 256-bit hash)
        algorithm: One of 'phash', 'dhash', 'average', 'whash'

    Returns:
        The perceptual hash

    Raises:
        ValueError: If algorithm is unknown
        HashComputationError: If the image cannot be loaded or hashed
    """
    try:
        hash_func = _HASH_FUNCTIONS[algorithm]
    except KeyError:
        raise ValueError(
            f"Unknown hash algorithm: {algorithm}. Use one of {', '.join(_HASH_FUNCTIONS)}."
        ) from None

    try:
        with Image.open(filepath) as img:
            # Force load to detect truncated/corrupt images early
            img.load()

            if img.mode not in ('RGB', 'L'):
                img = img.convert('RGB')

            phash = hash_func(img, hash_size=hash_size)
    except Exception as e:
        raise HashComputationError(f"Failed to compute hash for {filepath}: {e}") from e

    _logger.debug(f"Computed {algorithm} for {filepath}: {phash}")
    return phash


def fingerprint(
    directory: str | Path,
    name: str,
    hash_size: int = DEFAULT_HASH_SIZE,
    algorithm: str = DEFAULT_HASH_ALGORITHM,
) -> ImageInfo:
    """Fingerprint the image called name inside directory."""
    phash = calculate_perceptual_hash(Path(directory) / name, hash_size, algorithm)
    return ImageInfo(hash=phash, name=name)


__all__ = ['calculate_perceptual_hash', 'fingerprint']
