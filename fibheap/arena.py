"""Index-based node storage for the Fibonacci heap.

Nodes never hold references to each other. Parent, sibling and child links
are integer ids into an Arena, and both the root list and every children list
are intrusive doubly linked Chains threaded through the nodes' prev/next
fields. This keeps link, cut and removal O(1) without reference cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, NewType, Optional

from fibheap.common import Impossible, Key

__all__ = ["Arena", "Chain", "Node", "NodeId"]


NodeId = NewType("NodeId", int)


@dataclass
class Chain:
    """Head, tail and length of a doubly linked list of node ids.

    The links themselves live on the member nodes, so a node belongs to at
    most one chain at a time.
    """

    head: Optional[NodeId] = None
    tail: Optional[NodeId] = None
    length: int = 0

    def null(self) -> bool:
        return self.length == 0


@dataclass(eq=False)
class Node[T]:
    """One heap entry.

    Attributes:
        tag: Caller-supplied identity of the entry.
        key: Priority; smaller keys come out first.
        value: Optional payload carried with the entry.
        children: Chain of child node ids, in link order.
        parent: Id of the owning node, or None for a root.
        prev: Previous sibling in the chain holding this node.
        next: Next sibling in the chain holding this node.
        degree: Number of direct children.
        marked: Whether the node lost a child since it last became a child.
        position: Degree-table slot this node last occupied.
    """

    tag: T
    key: Key
    value: Any = None
    children: Chain = field(default_factory=Chain)
    parent: Optional[NodeId] = None
    prev: Optional[NodeId] = None
    next: Optional[NodeId] = None
    degree: int = 0
    marked: bool = False
    position: int = 0


class Arena[T]:
    """Slot storage for nodes with recycling of freed ids."""

    def __init__(self) -> None:
        self._slots: List[Optional[Node[T]]] = []
        self._free: List[NodeId] = []

    def alloc(self, tag: T, key: Key, value: Any = None) -> NodeId:
        """Store a fresh, unlinked node and return its id."""
        node = Node(tag=tag, key=key, value=value)
        if self._free:
            nid = self._free.pop()
            self._slots[nid] = node
        else:
            nid = NodeId(len(self._slots))
            self._slots.append(node)
        return nid

    def release(self, nid: NodeId) -> Node[T]:
        """Remove a node from the arena, returning it."""
        node = self[nid]
        self._slots[nid] = None
        self._free.append(nid)
        return node

    def live(self) -> int:
        return len(self._slots) - len(self._free)

    def __getitem__(self, nid: NodeId) -> Node[T]:
        node = self._slots[nid]
        if node is None:
            raise Impossible(f"dangling node id {nid}")
        return node

    def push_back(self, chain: Chain, nid: NodeId) -> None:
        """Append a node that is in no chain to the end of a chain."""
        node = self[nid]
        node.prev = chain.tail
        node.next = None
        if chain.tail is None:
            chain.head = nid
        else:
            self[chain.tail].next = nid
        chain.tail = nid
        chain.length += 1

    def unlink(self, chain: Chain, nid: NodeId) -> None:
        """Remove a node from the chain that holds it."""
        node = self[nid]
        if node.prev is None:
            chain.head = node.next
        else:
            self[node.prev].next = node.next
        if node.next is None:
            chain.tail = node.prev
        else:
            self[node.next].prev = node.prev
        node.prev = None
        node.next = None
        chain.length -= 1

    def walk(self, chain: Chain) -> Iterator[NodeId]:
        """Iterate over the ids of a chain from head to tail.

        The successor is read before each id is yielded, so the caller may
        unlink the yielded node (but no other) while iterating.
        """
        nid = chain.head
        while nid is not None:
            succ = self[nid].next
            yield nid
            nid = succ
