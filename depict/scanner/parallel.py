"""
Parallel processing module for the scanner package.

Populates a shared BK-tree from a directory using a thread pool, with
progress tracking and callback support.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Callable, Any

from ..bktree import BKTree
from ..config import DEFAULT_HASH_ALGORITHM, DEFAULT_HASH_SIZE, DEFAULT_WORKERS
from ..errors import HashComputationError
from .dependencies import HAS_TQDM, _tqdm_class
from .hashing import fingerprint

_logger = logging.getLogger(__name__)

ADDED = 'added'
SKIPPED = 'skipped'


@dataclass
class PopulateStats:
    """Outcome of a populate_tree run."""
    total: int = 0
    added: int = 0
    skipped: int = 0
    errors: int = 0

    @property
    def skip_rate(self) -> float:
        """Percentage of files already present in the tree."""
        if self.total == 0:
            return 0.0
        return (self.skipped / self.total) * 100


def _index_one(
    tree: BKTree,
    directory: Path,
    name: str,
    hash_size: int,
    algorithm: str,
) -> str:
    # Cheap pre-check so re-runs don't hash files that are already indexed
    if tree.search_by_name(name) is not None:
        return SKIPPED
    info = fingerprint(directory, name, hash_size, algorithm)
    # Another worker may have inserted the same name while we were hashing
    return ADDED if tree.add_if_absent(info) else SKIPPED


def populate_tree(
    tree: BKTree,
    directory: str | Path,
    names: list[str],
    max_workers: int = DEFAULT_WORKERS,
    hash_size: int = DEFAULT_HASH_SIZE,
    algorithm: str = DEFAULT_HASH_ALGORITHM,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    show_progress: bool = True,
    logger: Optional[logging.Logger] = None,
) -> PopulateStats:
    """
    Fingerprint images and add them to the tree, one task per file.

    Files whose name is already in the tree are skipped, so running twice
    over an unchanged directory adds nothing. Files that cannot be hashed
    are logged and counted; they never abort the run.

    Args:
        tree: Tree to populate (shared between workers)
        directory: Directory the names are relative to
        names: Image names as returned by find_image_files
        max_workers: Number of parallel workers
        hash_size: Perceptual hash size
        algorithm: Perceptual hash algorithm
        progress_callback: Optional callback(current, total) for progress updates
        show_progress: Whether to show tqdm progress bar
        logger: Optional logger for status messages

    Returns:
        PopulateStats for the run
    """
    logger = logger or _logger
    stats = PopulateStats(total=len(names))
    if not names:
        return stats

    directory = Path(directory)

    pbar: Optional[Any] = None
    if HAS_TQDM and show_progress and _tqdm_class is not None:
        pbar = _tqdm_class(
            total=len(names),
            desc="Indexing images",
            unit="img",
            ncols=80,
        )

    last_callback_time = time.time()
    callback_interval = 1.0  # seconds

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(_index_one, tree, directory, name, hash_size, algorithm): name
            for name in names
        }

        for i, future in enumerate(as_completed(futures)):
            name = futures[future]
            try:
                outcome = future.result()
            except HashComputationError as e:
                stats.errors += 1
                logger.warning(f"Skipping {name}: {e}")
            else:
                if outcome == ADDED:
                    stats.added += 1
                else:
                    stats.skipped += 1

            if pbar is not None:
                pbar.update(1)

            if progress_callback:
                current_time = time.time()
                if current_time - last_callback_time >= callback_interval or i == len(names) - 1:
                    progress_callback(i + 1, len(names))
                    last_callback_time = current_time

    if pbar is not None:
        pbar.close()

    logger.debug(
        f"Populated tree: {stats.added:,} added, {stats.skipped:,} skipped, {stats.errors:,} errors"
    )
    return stats


__all__ = ['PopulateStats', 'populate_tree']
