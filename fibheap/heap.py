"""Mutable Fibonacci heap keyed by caller-supplied tags.

The heap supports O(1) amortized insert, find-min and decrease-key, and
O(log n) amortized extract-min and delete. Every entry is identified by a
unique, hashable tag, which is how callers address entries for key updates
and removal.

All public operations, including read-only queries, run under a single
exclusive lock (see HeapConfig.synchronized).
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
    Type,
    Union,
    override,
)

from fibheap.arena import Arena, Chain, Node, NodeId
from fibheap.common import (
    EMPTY,
    MISSING,
    Impossible,
    NEG_INF,
    Iterating,
    Key,
    Missing,
    Sized,
    check_key,
)
from fibheap.config import HeapConfig
from fibheap.debug import HeapStats, check_invariants, dump_state, heap_stats
from fibheap.errors import (
    DuplicateTag,
    KeyNotLarger,
    KeyNotSmaller,
    TagNotFound,
)
from fibheap.mutex import Mutex, lock_both

__all__ = ["FibHeap", "HeapState"]


logger = logging.getLogger(__name__)


class HeapState[T]:
    """The forest, tag index and degree table behind a FibHeap.

    Methods here perform no argument validation and take no locks; FibHeap
    does both before calling in.
    """

    def __init__(self) -> None:
        self.arena: Arena[T] = Arena()
        self.roots = Chain()
        self.index: Dict[T, NodeId] = {}
        self.degrees: Dict[int, NodeId] = {}
        self.min: Optional[NodeId] = None
        self.count = 0

    def node(self, nid: NodeId) -> Node[T]:
        return self.arena[nid]

    def min_node(self) -> Optional[Node[T]]:
        return None if self.min is None else self.arena[self.min]

    def insert(self, tag: T, key: Key, value: Any) -> None:
        becomes_min = self.min is None or self.arena[self.min].key > key
        nid = self.arena.alloc(tag, key, value)
        self.arena.push_back(self.roots, nid)
        self.index[tag] = nid
        self.count += 1
        if becomes_min:
            self.min = nid

    def extract_min(self) -> Node[T]:
        """Remove the minimum node. The heap must not be empty."""
        arena = self.arena
        min_id = self.min
        if min_id is None:
            raise Impossible("extract from an empty heap")
        min_node = arena[min_id]

        for child in list(arena.walk(min_node.children)):
            arena.unlink(min_node.children, child)
            child_node = arena[child]
            child_node.parent = None
            child_node.marked = False
            arena.push_back(self.roots, child)
        min_node.degree = 0

        arena.unlink(self.roots, min_id)
        self.degrees.pop(min_node.position, None)
        del self.index[min_node.tag]
        self.count -= 1
        arena.release(min_id)

        if self.count == 0:
            self.min = None
        else:
            self.consolidate()

        return min_node

    def consolidate(self) -> None:
        """Link equal-degree roots until every degree has at most one root."""
        arena = self.arena
        degrees = self.degrees
        before = self.roots.length

        for nid in arena.walk(self.roots):
            degrees.pop(arena[nid].position, None)

        cursor = self.roots.head
        while cursor is not None:
            tree = arena[cursor]
            occupant = degrees.get(tree.degree)
            if occupant is None:
                degrees[tree.degree] = cursor
                tree.position = tree.degree
                cursor = tree.next
                continue
            if occupant == cursor:
                cursor = tree.next
                continue

            while (occupant := degrees.get(arena[cursor].degree)) is not None:
                del degrees[arena[cursor].degree]
                if arena[cursor].key <= arena[occupant].key:
                    arena.unlink(self.roots, occupant)
                    self.link(cursor, occupant)
                else:
                    arena.unlink(self.roots, cursor)
                    self.link(occupant, cursor)
                    cursor = occupant
            tree = arena[cursor]
            degrees[tree.degree] = cursor
            tree.position = tree.degree

        self.reset_min()
        logger.debug("Consolidated %d roots into %d", before, self.roots.length)

    def link(self, parent: NodeId, child: NodeId) -> None:
        """Make a root the last child of another root."""
        child_node = self.arena[child]
        parent_node = self.arena[parent]
        child_node.marked = False
        child_node.parent = parent
        self.arena.push_back(parent_node.children, child)
        parent_node.degree += 1

    def reset_min(self) -> None:
        """Point min at the first root holding the smallest key."""
        arena = self.arena
        best = self.roots.head
        if best is not None:
            for nid in arena.walk(self.roots):
                if arena[nid].key < arena[best].key:
                    best = nid
        self.min = best

    def decrease_key(self, nid: NodeId, key: Key) -> None:
        """Lower a node's key, restoring heap order with cuts."""
        node = self.arena[nid]
        node.key = key
        if node.parent is not None:
            parent = node.parent
            if key < self.arena[parent].key:
                self.cut(nid)
                self.cascading_cut(parent)

        if self.min is None:
            raise Impossible("decrease in an empty heap")
        if node.parent is None and key < self.arena[self.min].key:
            self.min = nid

    def increase_key(self, nid: NodeId, key: Key) -> None:
        """Raise a node's key, cutting every child that now outranks it.

        Unlike decrease_key this is not O(1) amortized: it performs one cut
        per violating child, plus a root scan when the node was the minimum.
        """
        arena = self.arena
        node = arena[nid]
        node.key = key

        for child in arena.walk(node.children):
            if arena[child].key < key:
                self.cut(child)
                self.cascading_cut(nid)

        if self.min == nid:
            self.reset_min()

    def cut(self, nid: NodeId) -> None:
        """Detach a node from its parent and append it to the roots."""
        node = self.arena[nid]
        if node.parent is None:
            raise Impossible(f"cut of root {nid}")
        parent_node = self.arena[node.parent]
        self.arena.unlink(parent_node.children, nid)
        parent_node.degree -= 1
        node.parent = None
        node.marked = False
        self.arena.push_back(self.roots, nid)

    def cascading_cut(self, nid: NodeId) -> None:
        """Mark a node on its first child loss, cut it on the second."""
        while True:
            node = self.arena[nid]
            if node.parent is None:
                return
            if not node.marked:
                node.marked = True
                return
            parent = node.parent
            self.cut(nid)
            nid = parent

    def delete(self, nid: NodeId) -> Node[T]:
        """Remove an arbitrary node by forcing it to the top and extracting it.

        The returned node carries its key from before the removal.
        """
        key = self.arena[nid].key
        self.decrease_key(nid, NEG_INF)
        if self.min != nid:
            raise Impossible("sentinel key did not reach the minimum")
        node = self.extract_min()
        node.key = key
        return node

    def entries(self) -> Iterator[Node[T]]:
        """Iterate over all nodes, depth first in chain order."""
        stack: List[Iterator[NodeId]] = [self.arena.walk(self.roots)]
        while stack:
            nid = next(stack[-1], None)
            if nid is None:
                stack.pop()
                continue
            node = self.arena[nid]
            yield node
            if not node.children.null():
                stack.append(self.arena.walk(node.children))


class FibHeap[T](Sized, Iterating[Tuple[T, Key]]):
    """A mutable Fibonacci min-heap of tagged entries.

    Example:
        >>> heap = FibHeap.mk([("a", 5), ("b", 3), ("c", 9)])
        >>> heap.minimum()
        ('b', 3)
        >>> heap.decrease_key("c", 1)
        >>> heap.extract_min()
        ('c', 1)
    """

    def __init__(self, config: Optional[HeapConfig] = None):
        self._config = config if config is not None else HeapConfig.default()
        self._state: Mutex[HeapState[T]] = Mutex(
            HeapState(), synchronized=self._config.synchronized
        )

    @staticmethod
    def empty(
        _ty: Optional[Type[T]] = None, config: Optional[HeapConfig] = None
    ) -> FibHeap[T]:
        """Create an empty heap.

        Args:
            _ty: Optional type hint for tags (unused).
            config: Optional configuration.

        Returns:
            A new empty heap.
        """
        return FibHeap(config)

    @staticmethod
    def mk(
        pairs: Iterable[Tuple[T, Key]], config: Optional[HeapConfig] = None
    ) -> FibHeap[T]:
        """Create a heap from (tag, key) pairs.

        Raises:
            DuplicateTag: If a tag repeats.
            ReservedKey: If a key is negative infinity.
        """
        heap: FibHeap[T] = FibHeap(config)
        for tag, key in pairs:
            heap.insert(tag, key)
        return heap

    @property
    def config(self) -> HeapConfig:
        return self._config

    @override
    def size(self) -> int:
        with self._state as st:
            return st.count

    def count(self) -> int:
        """Return the number of live entries."""
        return self.size()

    def __contains__(self, tag: object) -> bool:
        with self._state as st:
            return tag in st.index

    def insert(self, tag: T, key: Key, value: Any = None) -> None:
        """Add a new entry.

        Time Complexity: O(1)

        Args:
            tag: Unique identity of the entry.
            key: Priority of the entry.
            value: Optional payload stored with the entry.

        Raises:
            DuplicateTag: If the tag is already present.
            ReservedKey: If the key is negative infinity.
            InvalidKey: If the key is NaN.
        """
        check_key(key)
        with self._state as st:
            if tag in st.index:
                logger.debug("Rejecting insert of duplicate tag %r", tag)
                raise DuplicateTag(tag)
            st.insert(tag, key, value)

    def minimum(self) -> Tuple[Optional[T], Key]:
        """Return the minimum (tag, key), or (None, -inf) if the heap is empty."""
        found = self.find_min()
        return EMPTY if found is None else found

    def find_min(self) -> Optional[Tuple[T, Key]]:
        """Return the minimum (tag, key), or None if the heap is empty.

        Time Complexity: O(1)
        """
        with self._state as st:
            node = st.min_node()
            return None if node is None else (node.tag, node.key)

    def extract_min(self) -> Tuple[Optional[T], Key]:
        """Remove and return the minimum (tag, key), or (None, -inf) if empty.

        Time Complexity: O(log n) amortized
        """
        found = self.pop_min()
        return EMPTY if found is None else found

    def pop_min(self) -> Optional[Tuple[T, Key]]:
        """Remove and return the minimum (tag, key), or None if empty."""
        found = self.extract_min_item()
        return None if found is None else (found[0], found[1])

    def extract_min_item(self) -> Optional[Tuple[T, Key, Any]]:
        """Remove and return the minimum (tag, key, value), or None if empty."""
        with self._state as st:
            if st.count == 0:
                return None
            node = st.extract_min()
            return (node.tag, node.key, node.value)

    def decrease_key(
        self, tag: T, key: Key, value: Union[Any, Missing] = MISSING
    ) -> None:
        """Lower the key of an entry.

        Time Complexity: O(1) amortized

        Args:
            tag: The entry to update.
            key: The new key, strictly smaller than the current one.
            value: Replacement payload; the payload is kept when omitted.

        Raises:
            ReservedKey: If the key is negative infinity.
            InvalidKey: If the key is NaN.
            TagNotFound: If no entry has the tag.
            KeyNotSmaller: If the key is not strictly smaller than the current key.
        """
        check_key(key)
        with self._state as st:
            nid = _find(st, tag)
            node = st.node(nid)
            if key >= node.key:
                logger.debug(
                    "Rejecting decrease of %r from %r to %r", tag, node.key, key
                )
                raise KeyNotSmaller(tag, node.key, key)
            if not isinstance(value, Missing):
                node.value = value
            st.decrease_key(nid, key)

    def increase_key(
        self, tag: T, key: Key, value: Union[Any, Missing] = MISSING
    ) -> None:
        """Raise the key of an entry.

        Time Complexity: O(c + r) where c is the number of children that must
        be cut and r the number of roots; this is weaker than decrease_key.

        Args:
            tag: The entry to update.
            key: The new key, strictly larger than the current one.
            value: Replacement payload; the payload is kept when omitted.

        Raises:
            ReservedKey: If the key is negative infinity.
            InvalidKey: If the key is NaN.
            TagNotFound: If no entry has the tag.
            KeyNotLarger: If the key is not strictly larger than the current key.
        """
        check_key(key)
        with self._state as st:
            nid = _find(st, tag)
            node = st.node(nid)
            if key <= node.key:
                logger.debug(
                    "Rejecting increase of %r from %r to %r", tag, node.key, key
                )
                raise KeyNotLarger(tag, node.key, key)
            if not isinstance(value, Missing):
                node.value = value
            st.increase_key(nid, key)

    def delete(self, tag: T) -> None:
        """Remove an entry.

        Time Complexity: O(log n) amortized

        Raises:
            TagNotFound: If no entry has the tag.
        """
        with self._state as st:
            nid = _find(st, tag)
            st.delete(nid)
            logger.debug("Deleted %r", tag)

    def get_key(self, tag: T) -> Key:
        """Return the key of an entry, or -inf if the tag is absent."""
        key = self.lookup(tag)
        return NEG_INF if key is None else key

    def lookup(self, tag: T) -> Optional[Key]:
        """Return the key of an entry, or None if the tag is absent."""
        with self._state as st:
            nid = st.index.get(tag)
            return None if nid is None else st.node(nid).key

    def get_value(self, tag: T) -> Any:
        """Return the payload of an entry.

        Raises:
            TagNotFound: If no entry has the tag.
        """
        with self._state as st:
            return st.node(_find(st, tag)).value

    def extract(self, tag: T) -> Optional[Tuple[T, Key]]:
        """Remove an entry, returning its (tag, key), or None if absent.

        Time Complexity: O(log n) amortized
        """
        with self._state as st:
            nid = st.index.get(tag)
            if nid is None:
                return None
            node = st.delete(nid)
            return (node.tag, node.key)

    def extract_by_tag(self, tag: T) -> Tuple[T, Key]:
        """Remove an entry, returning (tag, key), or (tag, -inf) if absent."""
        found = self.extract(tag)
        return (tag, NEG_INF) if found is None else found

    def extract_key(self, tag: T) -> Key:
        """Remove an entry, returning its key, or -inf if absent."""
        found = self.extract(tag)
        return NEG_INF if found is None else found[1]

    def union(self, other: FibHeap[T]) -> None:
        """Insert every entry of another heap into this one.

        The other heap is left unchanged. Either all entries are inserted or,
        if any tag is already present here, none are.

        Time Complexity: O(m) for m entries in the other heap

        Raises:
            DuplicateTag: If the heaps share a tag.
        """
        if other is self:
            with self._state as st:
                if st.count > 0:
                    logger.debug("Rejecting union of a heap with itself")
                    raise DuplicateTag(None, heap=self)
            return

        with ExitStack() as stack:
            st, ost = lock_both(stack, self._state, other._state)
            for tag in ost.index:
                if tag in st.index:
                    logger.debug("Rejecting union: tag %r present in both heaps", tag)
                    raise DuplicateTag(tag, heap=other)
            for tag, nid in ost.index.items():
                node = ost.node(nid)
                st.insert(tag, node.key, node.value)
            logger.debug("Merged %d entries; heap now holds %d", ost.count, st.count)

    def __ior__(self, other: FibHeap[T]) -> FibHeap[T]:
        """Alias for union()."""
        self.union(other)
        return self

    @override
    def iter(self) -> Iterator[Tuple[T, Key]]:
        """Iterate over a snapshot of (tag, key) pairs.

        Entries come in depth-first forest order, not in priority order; use
        drain() for sorted extraction.
        """
        with self._state as st:
            snapshot = [(node.tag, node.key) for node in st.entries()]
        return iter(snapshot)

    def drain(self) -> Iterator[Tuple[T, Key]]:
        """Extract entries in non-decreasing key order until the heap is empty."""
        while (found := self.pop_min()) is not None:
            yield found

    def dump(self) -> str:
        """Render the forest and summary counts as deterministic text."""
        with self._state as st:
            return dump_state(st, self._config.key_format)

    def stats(self) -> HeapStats:
        with self._state as st:
            return heap_stats(st)

    def validate(self) -> None:
        """Check every structural invariant.

        Raises:
            Impossible: On the first violated invariant.
        """
        with self._state as st:
            check_invariants(st)

    def __repr__(self) -> str:
        return f"<FibHeap at {id(self):#x}>"


def _find[T](st: HeapState[T], tag: T) -> NodeId:
    nid = st.index.get(tag)
    if nid is None:
        logger.debug("Tag %r not found", tag)
        raise TagNotFound(tag)
    return nid
