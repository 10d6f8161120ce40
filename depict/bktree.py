"""
BK-tree index for items living in a discrete metric space.

The BK-tree (Burkhard & Keller, 1973) stores each item in a node whose
children are keyed by their exact distance to that node. Range queries use
the triangle inequality to skip subtrees: if a node is at distance d from
the query, a child stored under key k can only hold matches within radius r
when d - r <= k <= d + r.

Performance:
- add: O(depth) distance computations
- search: visits a pruned subset of the tree (no global bound)
- search_by_name: O(n), no pruning possible
- search_similars: O(n * cost(search)), O(n^2) in the worst case

The tree is not rebalanced; insertion order determines its shape.

Usage:
    tree = BKTree()
    for info in infos:
        tree.add(info)

    for match in tree.search(query, radius=8):
        print(match.name)

to_dict/from_dict give the nested node shape; to_records/from_records give
a flat, parent-indexed list that storage uses so arbitrarily deep trees
(e.g. long chains of identical hashes) serialize without recursion.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Any, Callable, Iterator, Optional

from .errors import TreeCorruptedError
from .models import DistanceMetric, ImageInfo

logger = logging.getLogger(__name__)


class BKTreeNode:
    """A stored item and its children keyed by distance to the item."""

    __slots__ = ('item', 'children')

    def __init__(self, item: DistanceMetric):
        self.item = item
        self.children: dict[int, BKTreeNode] = {}

    def __repr__(self) -> str:
        return f"BKTreeNode({self.item.name!r}, children={sorted(self.children)})"


class BKTree:
    """
    Thread-safe BK-tree.

    A single lock guards every public operation, so concurrent add calls
    cannot race on the same child slot. Nodes are never exposed; all access
    goes through add/add_if_absent/search/search_by_name/search_similars.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._root: Optional[BKTreeNode] = None
        self._count = 0

    def __len__(self) -> int:
        return self._count

    @property
    def is_empty(self) -> bool:
        return self._root is None

    def _iter_nodes(self) -> Iterator[BKTreeNode]:
        """Breadth-first walk over every node, children in insertion order."""
        if self._root is None:
            return
        candidates = deque([self._root])
        while candidates:
            node = candidates.popleft()
            yield node
            candidates.extend(node.children.values())

    def _insert(self, item: DistanceMetric) -> None:
        node = BKTreeNode(item)
        self._count += 1
        if self._root is None:
            self._root = node
            return

        current = self._root
        while True:
            dist = current.item.distance_from(item)
            target = current.children.get(dist)
            if target is None:
                current.children[dist] = node
                return
            current = target

    def _find_by_name(self, name: str) -> Optional[DistanceMetric]:
        for node in self._iter_nodes():
            if node.item.name == name:
                return node.item
        return None

    def _search(self, query: DistanceMetric, radius: int) -> list:
        results = []
        if self._root is None:
            return results

        candidates = deque([self._root])
        while candidates:
            cand = candidates.popleft()
            dist = cand.item.distance_from(query)

            if dist <= radius and cand.item.name != query.name:
                results.append(cand.item)

            # Triangle inequality: matches can only live under keys in [low, high]
            low, high = dist - radius, dist + radius
            for key, child in cand.children.items():
                if low <= key <= high:
                    candidates.append(child)

        return results

    def add(self, item: DistanceMetric) -> None:
        """
        Insert an item, creating exactly one new node.

        Duplicate names are not checked; use add_if_absent for that.
        """
        with self._lock:
            self._insert(item)

    def add_if_absent(self, item: DistanceMetric) -> bool:
        """
        Insert an item unless one with the same name is already stored.

        The name check and the insert happen under the same lock.

        Returns:
            True if the item was inserted, False if the name was present
        """
        with self._lock:
            if self._find_by_name(item.name) is not None:
                return False
            self._insert(item)
            return True

    def search(self, query: DistanceMetric, radius: int) -> list:
        """
        Find every stored item within radius of query.

        Items named like the query are excluded, even at distance 0.

        Args:
            query: Item to compare against (need not be stored)
            radius: Maximum distance, inclusive

        Returns:
            Matching items in breadth-first traversal order (not sorted)
        """
        if radius < 0:
            raise ValueError(f"radius must be non-negative, got {radius}")
        with self._lock:
            return self._search(query, radius)

    def search_by_name(self, name: str) -> Optional[DistanceMetric]:
        """Return the first stored item called name in BFS order, or None."""
        with self._lock:
            return self._find_by_name(name)

    def search_similars(self, radius: int) -> dict[str, list[str]]:
        """
        Run a range search from every stored item.

        A match is recorded under the current item's name unless the match's
        own name is already a key of the result. The output therefore depends
        on traversal order and is not a symmetric clustering: for two items
        a and b at distance 0 (a inserted first) the result is {'a': ['b']}.

        Args:
            radius: Maximum distance, inclusive

        Returns:
            Mapping of item name -> names of similar items
        """
        if radius < 0:
            raise ValueError(f"radius must be non-negative, got {radius}")

        results: dict[str, list[str]] = {}
        with self._lock:
            for node in self._iter_nodes():
                for match in self._search(node.item, radius):
                    # Avoid duplicates
                    if match.name not in results:
                        results.setdefault(node.item.name, []).append(match.name)
        return results

    def items(self) -> list:
        """All stored items in breadth-first order."""
        with self._lock:
            return [node.item for node in self._iter_nodes()]

    def get_stats(self) -> dict:
        """Get statistics about the tree shape."""
        with self._lock:
            if self._root is None:
                return {'total_items': 0, 'depth': 0, 'max_children': 0, 'leaves': 0}

            depth = 0
            max_children = 0
            leaves = 0
            level = [self._root]
            while level:
                depth += 1
                next_level = []
                for node in level:
                    max_children = max(max_children, len(node.children))
                    if not node.children:
                        leaves += 1
                    next_level.extend(node.children.values())
                level = next_level

            return {
                'total_items': self._count,
                'depth': depth,
                'max_children': max_children,
                'leaves': leaves,
            }

    def to_dict(self) -> dict:
        """
        Export the full node structure.

        Shape: {'root': None | {'item': {...}, 'children': {'<dist>': node}}}.
        Child keys are strings so the result is JSON-serializable.
        """
        with self._lock:
            if self._root is None:
                return {'root': None}

            root_data = {'item': self._root.item.to_dict(), 'children': {}}
            stack = [(self._root, root_data)]
            while stack:
                node, data = stack.pop()
                for dist, child in node.children.items():
                    child_data = {'item': child.item.to_dict(), 'children': {}}
                    data['children'][str(dist)] = child_data
                    stack.append((child, child_data))
            return {'root': root_data}

    @classmethod
    def from_dict(
        cls,
        data: Any,
        item_factory: Callable[[dict], DistanceMetric] = ImageInfo.from_dict,
    ) -> 'BKTree':
        """
        Rebuild a tree from to_dict() output.

        Child keys are trusted as stored; distances are not recomputed.

        Raises:
            TreeCorruptedError: If data does not have the node shape
        """
        tree = cls()
        if not isinstance(data, dict) or 'root' not in data:
            raise TreeCorruptedError("snapshot must be an object with a 'root' field")
        if data['root'] is None:
            return tree

        tree._root = _node_from_dict(data['root'], item_factory)
        tree._count = 1
        stack = [(tree._root, data['root'])]
        while stack:
            node, node_data = stack.pop()
            for key, child_data in node_data['children'].items():
                dist = _parse_distance(key)
                if dist in node.children:
                    raise TreeCorruptedError(f"duplicate child distance {dist} under {node.item.name!r}")
                child = _node_from_dict(child_data, item_factory)
                node.children[dist] = child
                tree._count += 1
                stack.append((child, child_data))

        logger.debug(f"Rebuilt BK-tree with {tree._count:,} nodes")
        return tree

    def to_records(self) -> list:
        """
        Export the tree as a flat list of nodes in breadth-first order.

        Each record is {'item': {...}, 'parent': index, 'dist': key}. The
        root record comes first with parent and dist set to None, and every
        parent precedes its children. Unlike to_dict, the nesting depth of
        the result does not grow with the depth of the tree.
        """
        with self._lock:
            if self._root is None:
                return []

            records = [{'item': self._root.item.to_dict(), 'parent': None, 'dist': None}]
            candidates = deque([(self._root, 0)])
            while candidates:
                node, index = candidates.popleft()
                for dist, child in node.children.items():
                    candidates.append((child, len(records)))
                    records.append({'item': child.item.to_dict(), 'parent': index, 'dist': dist})
            return records

    @classmethod
    def from_records(
        cls,
        records: Any,
        item_factory: Callable[[dict], DistanceMetric] = ImageInfo.from_dict,
    ) -> 'BKTree':
        """
        Rebuild a tree from to_records() output.

        Raises:
            TreeCorruptedError: If records are not a valid node list
        """
        tree = cls()
        if not isinstance(records, list):
            raise TreeCorruptedError(f"node list must be an array, got {type(records).__name__}")

        nodes: list[BKTreeNode] = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise TreeCorruptedError(f"node {index} must be an object, got {type(record).__name__}")
            node = BKTreeNode(_item_from_dict(record.get('item'), item_factory))
            parent_index = record.get('parent')

            if index == 0:
                if parent_index is not None:
                    raise TreeCorruptedError("first node must be the root")
                tree._root = node
            else:
                if not _is_int(parent_index) or not 0 <= parent_index < index:
                    raise TreeCorruptedError(f"node {index} has invalid parent {parent_index!r}")
                dist = record.get('dist')
                if not _is_int(dist) or dist < 0:
                    raise TreeCorruptedError(f"node {index} has invalid distance {dist!r}")
                parent = nodes[parent_index]
                if dist in parent.children:
                    raise TreeCorruptedError(
                        f"duplicate child distance {dist} under {parent.item.name!r}"
                    )
                parent.children[dist] = node
            nodes.append(node)

        tree._count = len(nodes)
        logger.debug(f"Rebuilt BK-tree with {tree._count:,} nodes")
        return tree


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_distance(key: Any) -> int:
    try:
        dist = int(key)
    except (TypeError, ValueError):
        raise TreeCorruptedError(f"child key {key!r} is not an integer distance") from None
    if dist < 0:
        raise TreeCorruptedError(f"child key {key!r} is negative")
    return dist


def _node_from_dict(
    node_data: Any,
    item_factory: Callable[[dict], DistanceMetric],
) -> BKTreeNode:
    if not isinstance(node_data, dict):
        raise TreeCorruptedError(f"node must be an object, got {type(node_data).__name__}")
    if not isinstance(node_data.get('children', {}), dict):
        raise TreeCorruptedError("node 'children' must be an object")
    node_data.setdefault('children', {})
    return BKTreeNode(_item_from_dict(node_data.get('item'), item_factory))


def _item_from_dict(
    item_data: Any,
    item_factory: Callable[[dict], DistanceMetric],
) -> DistanceMetric:
    if not isinstance(item_data, dict):
        raise TreeCorruptedError("node is missing its 'item' object")
    try:
        return item_factory(item_data)
    except (KeyError, TypeError, ValueError) as e:
        raise TreeCorruptedError(f"invalid item {item_data!r}: {e}") from e


__all__ = ['BKTree', 'BKTreeNode']
