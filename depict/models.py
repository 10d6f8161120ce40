"""
Data models for DePict.

Contains the item contract consumed by the BK-tree and the dataclass
used for fingerprinted images.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import imagehash


@runtime_checkable
class DistanceMetric(Protocol):
    """
    Anything that can be stored in a BKTree.

    Implementations must return a non-negative integer from distance_from,
    with distance_from(self) == 0. Search pruning is only correct when the
    distance satisfies the triangle inequality.
    """

    name: str

    def distance_from(self, other) -> int:
        ...


@dataclass
class ImageInfo:
    """
    A fingerprinted image.

    Attributes:
        hash: Perceptual hash of the image contents
        name: Identity of the image within a tree (file name relative
              to the scanned directory)
    """
    hash: imagehash.ImageHash
    name: str

    def distance_from(self, other: 'ImageInfo') -> int:
        """Hamming distance between the two perceptual hashes."""
        return int(self.hash - other.hash)

    def __str__(self) -> str:
        return f"{self.name}  {self.hash}"

    def to_dict(self) -> dict:
        """Convert to the compact dictionary stored in the database."""
        return {
            'h': str(self.hash),
            'n': self.name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ImageInfo':
        """
        Create ImageInfo from its stored dictionary.

        Raises:
            KeyError: If 'h' or 'n' is missing
            TypeError: If either field is not a string
            ValueError: If 'h' is not a valid hex hash
        """
        for key in ('h', 'n'):
            if not isinstance(data[key], str):
                raise TypeError(f"'{key}' must be a string, got {type(data[key]).__name__}")
        return cls(
            hash=imagehash.hex_to_hash(data['h']),
            name=data['n'],
        )


__all__ = ['DistanceMetric', 'ImageInfo']
