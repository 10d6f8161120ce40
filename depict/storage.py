"""
Persistence of BK-tree snapshots.

Trees are stored as JSON in the scanned directory (depict.db by default):

    {"algorithm": "phash", "hash_size": 16,
     "nodes": [{"item": {"h": ..., "n": ...}, "parent": null, "dist": null},
               {"item": {...}, "parent": 0, "dist": 12}, ...]}

Nodes are listed breadth-first with parents before children, so the file
nests only a few levels deep however unbalanced the tree is. Any other
top-level field is returned as metadata. Snapshots in the nested
{"root": {"item": ..., "children": {...}}} shape are still accepted.

A missing file loads as an empty tree; anything that cannot be parsed back
into nodes raises TreeCorruptedError and nothing is partially loaded.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable

from .bktree import BKTree
from .errors import TreeCorruptedError
from .models import DistanceMetric, ImageInfo

logger = logging.getLogger(__name__)

_STRUCTURE_FIELDS = ('nodes', 'root')


def load_snapshot(
    path: str | Path,
    item_factory: Callable[[dict], DistanceMetric] = ImageInfo.from_dict,
) -> tuple[BKTree, dict[str, Any]]:
    """
    Load a tree and the metadata saved alongside it.

    Args:
        path: Database file location
        item_factory: Builds an item from its stored dictionary

    Returns:
        (tree, metadata); an empty tree and {} if path does not exist

    Raises:
        TreeCorruptedError: If the file is not a valid snapshot
        OSError: If the file exists but cannot be read
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug(f"No database at {path}, starting with an empty tree")
        return BKTree(), {}
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise TreeCorruptedError(f"not a valid snapshot: {e}", path) from e
    except RecursionError as e:
        raise TreeCorruptedError("snapshot is nested too deeply to decode", path) from e

    try:
        if isinstance(data, dict) and 'nodes' in data:
            tree = BKTree.from_records(data['nodes'], item_factory)
        else:
            tree = BKTree.from_dict(data, item_factory)
    except TreeCorruptedError as e:
        raise TreeCorruptedError(str(e), path) from e

    metadata = {key: value for key, value in data.items() if key not in _STRUCTURE_FIELDS}
    logger.debug(f"Loaded {len(tree):,} items from {path}")
    return tree, metadata


def load_tree(
    path: str | Path,
    item_factory: Callable[[dict], DistanceMetric] = ImageInfo.from_dict,
) -> BKTree:
    """Load a tree from disk, discarding metadata. See load_snapshot."""
    tree, _ = load_snapshot(path, item_factory)
    return tree


def save_tree(tree: BKTree, path: str | Path, **metadata: Any) -> None:
    """
    Write a tree snapshot to disk.

    The snapshot is written to a temporary file next to path and moved into
    place, so an interrupted save never leaves a truncated database.

    Args:
        tree: Tree to save
        path: Database file location
        **metadata: Extra JSON-serializable top-level fields
            (e.g. algorithm, hash_size)

    Raises:
        ValueError: If a metadata key collides with the node structure
        OSError: If the file cannot be written
    """
    path = Path(path)
    for key in _STRUCTURE_FIELDS:
        if key in metadata:
            raise ValueError(f"metadata key {key!r} is reserved")

    snapshot = dict(metadata)
    snapshot['nodes'] = tree.to_records()
    payload = json.dumps(snapshot, separators=(',', ':'))

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(payload)
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise

    logger.debug(f"Saved {len(tree):,} items to {path}")


__all__ = ['load_snapshot', 'load_tree', 'save_tree']
