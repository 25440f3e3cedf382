"""Diagnostics for heap state: text dump, summary counts and invariant checks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Set

from fibheap.arena import Chain, NodeId
from fibheap.common import NEG_INF, Impossible

if TYPE_CHECKING:
    from fibheap.heap import HeapState

__all__ = ["HeapStats", "check_invariants", "dump_state", "heap_stats"]


@dataclass(frozen=True)
class HeapStats:
    """Summary counts of a heap's forest.

    Attributes:
        count: Number of live entries.
        roots: Number of trees in the root list.
        marked: Number of marked nodes.
        max_degree: Largest degree of any node.
    """

    count: int
    roots: int
    marked: int
    max_degree: int


def heap_stats(st: HeapState) -> HeapStats:
    marked = 0
    max_degree = 0
    for node in st.entries():
        if node.marked:
            marked += 1
        max_degree = max(max_degree, node.degree)
    return HeapStats(
        count=st.count,
        roots=st.roots.length,
        marked=marked,
        max_degree=max_degree,
    )


def dump_state(st: HeapState, key_format: str = "f") -> str:
    """Render the forest depth first as bracketed keys, with summary lines."""
    node = st.min_node()
    if node is None:
        return "Heap is empty.\n"
    parts = [
        f"Total number: {st.count}, Root Size: {st.roots.length}, Index size: {len(st.index)},\n",
        f"Current min: key({format(node.key, key_format)}), tag({node.tag}),\n",
        "Heap detail:\n",
    ]
    _probe(st, st.roots, key_format, parts)
    parts.append("\n")
    return "".join(parts)


def _probe(st: HeapState, chain: Chain, key_format: str, parts: List[str]) -> None:
    parts.append("< ")
    for nid in st.arena.walk(chain):
        node = st.arena[nid]
        parts.append(f"{format(node.key, key_format)} ")
        if not node.children.null():
            _probe(st, node.children, key_format, parts)
    parts.append("> ")


def check_invariants(st: HeapState) -> None:
    """Walk the whole forest and verify the structural invariants.

    Raises:
        Impossible: Describing the first violation found.
    """
    arena = st.arena
    seen: Set[NodeId] = set()
    best: Optional[NodeId] = None

    _check_chain(st, st.roots, None, seen)
    for nid in arena.walk(st.roots):
        node = arena[nid]
        if node.marked:
            raise Impossible(f"root {node.tag!r} is marked")
        if best is None or node.key < arena[best].key:
            best = nid

    if len(seen) != st.count:
        raise Impossible(f"reachable nodes {len(seen)} != count {st.count}")
    if len(st.index) != st.count:
        raise Impossible(f"index size {len(st.index)} != count {st.count}")
    if arena.live() != st.count:
        raise Impossible(f"arena holds {arena.live()} nodes, count is {st.count}")
    for tag, nid in st.index.items():
        if nid not in seen or arena[nid].tag != tag:
            raise Impossible(f"index entry {tag!r} does not match the forest")

    if st.min is None:
        if st.count != 0:
            raise Impossible("min is unset in a non-empty heap")
        return
    min_node = arena[st.min]
    if min_node.parent is not None:
        raise Impossible(f"min {min_node.tag!r} is not a root")
    if best is not None and arena[best].key < min_node.key:
        raise Impossible(f"min {min_node.tag!r} is not the smallest key")


def _check_chain(
    st: HeapState, chain: Chain, parent: Optional[NodeId], seen: Set[NodeId]
) -> None:
    arena = st.arena
    length = 0
    prev: Optional[NodeId] = None
    for nid in arena.walk(chain):
        node = arena[nid]
        if nid in seen:
            raise Impossible(f"node {node.tag!r} reachable twice")
        seen.add(nid)
        length += 1
        if node.prev != prev:
            raise Impossible(f"broken back link at {node.tag!r}")
        if node.parent != parent:
            raise Impossible(f"wrong parent link at {node.tag!r}")
        if node.key == NEG_INF:
            raise Impossible(f"reserved key left on {node.tag!r}")
        if parent is not None and node.key < arena[parent].key:
            raise Impossible(f"heap order violated below {arena[parent].tag!r}")
        if node.degree != node.children.length:
            raise Impossible(
                f"degree of {node.tag!r} is {node.degree}, "
                f"has {node.children.length} children"
            )
        _check_chain(st, node.children, nid, seen)
        prev = nid
    if length != chain.length or chain.tail != prev:
        raise Impossible("chain length or tail out of sync")
