"""
Similarity lookups against a populated tree.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..bktree import BKTree
from ..models import DistanceMetric

_logger = logging.getLogger(__name__)


def lookup(
    tree: BKTree,
    item: DistanceMetric,
    radius: int,
    logger: Optional[logging.Logger] = None,
) -> list:
    """
    Warn about every stored item similar to item.

    Returns:
        The matching items, in tree traversal order
    """
    logger = logger or _logger
    found = tree.search(item, radius)
    for match in found:
        logger.warning(f"{item.name} is similar to {match.name}")
    return found


__all__ = ['lookup']
