"""
DePict - Image Deduplication
============================
Finds near-duplicate images by indexing their perceptual hashes in a BK-tree.

Features:
- BK-tree index with distance-bounded search
- All-pairs similarity sweep with configurable radius
- Persistent JSON database inside the scanned directory
- Incremental re-runs (already indexed images are skipped)
- Parallel fingerprinting

Author: Zach
"""

__version__ = "1.0.0"
__author__ = "Zedidence"

from .models import DistanceMetric, ImageInfo
from .bktree import BKTree, BKTreeNode
from .errors import DepictError, TreeCorruptedError, HashComputationError
from .storage import load_snapshot, load_tree, save_tree
from .config import ACCEPTED_EXTENSIONS, RADIUS_PRESETS, DEFAULT_RADIUS, DB_FILENAME
from .scanner import (
    find_image_files,
    calculate_perceptual_hash,
    fingerprint,
    populate_tree,
    PopulateStats,
    lookup,
)

__all__ = [
    "DistanceMetric",
    "ImageInfo",
    "BKTree",
    "BKTreeNode",
    "DepictError",
    "TreeCorruptedError",
    "HashComputationError",
    "load_snapshot",
    "load_tree",
    "save_tree",
    "ACCEPTED_EXTENSIONS",
    "RADIUS_PRESETS",
    "DEFAULT_RADIUS",
    "DB_FILENAME",
    "find_image_files",
    "calculate_perceptual_hash",
    "fingerprint",
    "populate_tree",
    "PopulateStats",
    "lookup",
]
