from __future__ import annotations

"""
Lazy Tree Index.

Bridges a pull-based data source with identity and ancestor bookkeeping.
Nodes never point at their parents: the index keeps an arena of entries
(NodeId -> name, parent NodeId) and a side table from node instances to
their NodeId. Identities are keyed by (parent id, name), so the fresh
instances a data source returns on every call keep the identity, and
therefore the expansion state, of their predecessors. Ids are never reused;
markers left over from a discarded epoch are inert.

An instance placed under several parents maps to the identity it was last
fetched under. Path-addressed lookups (find_ids, lookup_ids) walk the
(parent id, name) keys instead and always land on the node of that path.

Every fetch is a suspend point. Concurrent requests for the same parent share
one in-flight fetch, and a fetch that resolves after `reset()` is abandoned
instead of being applied.
"""

import asyncio
import inspect
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set, Tuple, Union

from dirtreestate.core.paths import path_of, segments_of
from dirtreestate.domain.errors import DetachedNode, FetchAbandoned, NotFound
from dirtreestate.domain.tree_models import FolderNode, Node, validate_name

logger = logging.getLogger(__name__)

NodeId = int
ParentKey = Optional[NodeId]  # None stands for the invisible root
DataSource = Callable[[Optional[Node]], Union[Sequence[Node], Awaitable[Sequence[Node]]]]


@dataclass
class _Entry:
    """Arena slot: the latest instance seen for an identity and its ParentLink."""
    node: Node
    name: str
    parent_id: ParentKey


class TreeIndex:
    """
    On-demand cache of materialised child lists and ParentLinks.

    Materialised children are cached per parent until `invalidate`, a
    `refresh=True` fetch, or `reset()` (which starts a new epoch).
    """

    def __init__(self, data_source: DataSource) -> None:
        self._source = data_source
        self._ids = itertools.count(1)
        self._epoch = 0
        self._entries: Dict[NodeId, _Entry] = {}
        self._by_key: Dict[Tuple[ParentKey, str], NodeId] = {}
        # id(instance) -> (instance, NodeId); holding the instance pins its id()
        self._by_obj: Dict[int, Tuple[Node, NodeId]] = {}
        self._children: Dict[ParentKey, Tuple[Node, ...]] = {}
        self._inflight: Dict[ParentKey, "asyncio.Future[Tuple[Node, ...]]"] = {}
        self._fetches = 0

    @property
    def epoch(self) -> int:
        return self._epoch

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------
    def node_id(self, node: Node) -> NodeId:
        """
        Resolve the identity assigned to a node instance.

        Raises:
            DetachedNode: The instance was never produced through children_of
                in the current epoch.
        """
        slot = self._by_obj.get(id(node))
        if slot is None or slot[0] is not node:
            raise DetachedNode(node)
        return slot[1]

    def is_attached(self, node: Node) -> bool:
        slot = self._by_obj.get(id(node))
        return slot is not None and slot[0] is node

    def parent_of(self, node: Node) -> Optional[Node]:
        """Latest instance of the node's parent, or None for root-level nodes."""
        parent_id = self._entry(self.node_id(node), node).parent_id
        if parent_id is None:
            return None
        return self._entry(parent_id, node).node

    def ancestor_ids_of(self, node: Node) -> List[NodeId]:
        """
        Walk ParentLinks from `node` up to the root.

        Returns:
            List[NodeId]: Proper-ancestor identities, nearest first.

        Raises:
            DetachedNode: The chain is broken anywhere along the way.
        """
        ids: List[NodeId] = []
        current = self._entry(self.node_id(node), node).parent_id
        while current is not None:
            if current in ids:
                raise DetachedNode(node)
            ids.append(current)
            current = self._entry(current, node).parent_id
        return ids

    def path_of(self, node: Node) -> str:
        """
        Reconstruct the path of a fetched node from its ParentLinks.

        Raises:
            DetachedNode: The node or one of its ancestors is not attached.
        """
        names = [node.name]
        for ancestor_id in self.ancestor_ids_of(node):
            names.append(self._entries[ancestor_id].name)
        names.reverse()
        return path_of(names[:-1], names[-1])

    def node_of(self, node_id: NodeId) -> Node:
        """Latest instance recorded for an identity."""
        entry = self._entries.get(node_id)
        if entry is None:
            raise DetachedNode(node_id)
        return entry.node

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------
    async def children_of(self, parent: Optional[Node] = None, *, refresh: bool = False) -> Tuple[Node, ...]:
        """
        Return the immediate children of `parent` (None for the root level).

        Cached lists are returned without calling the data source unless
        `refresh` is set. Files have no children.

        Raises:
            DetachedNode: `parent` is not attached to this index.
            FetchAbandoned: `reset()` ran while the fetch was in flight.
            InvalidName: The data source produced an unrepresentable name.
        """
        parent_id: ParentKey = None if parent is None else self.node_id(parent)
        return await self.children_by_id(parent_id, refresh=refresh)

    async def children_by_id(self, parent_id: ParentKey, *, refresh: bool = False) -> Tuple[Node, ...]:
        """Same as children_of, addressed by identity instead of instance."""
        parent = None if parent_id is None else self.node_of(parent_id)
        if parent is not None and not isinstance(parent, FolderNode):
            return ()

        if not refresh and parent_id in self._children:
            return self._children[parent_id]

        pending = self._inflight.get(parent_id)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch(parent, parent_id, self._epoch))
            self._inflight[parent_id] = pending
            pending.add_done_callback(lambda fut, key=parent_id: self._forget_inflight(key, fut))
        else:
            logger.debug(f"Joining in-flight fetch for parent id {parent_id}")

        return await asyncio.shield(pending)

    def cached_children(self, parent: Optional[Node] = None) -> Optional[Tuple[Node, ...]]:
        """Materialised children without fetching; None when never fetched."""
        parent_id: ParentKey = None if parent is None else self.node_id(parent)
        return self._children.get(parent_id)

    def cached_child_ids(self, parent_id: ParentKey) -> Optional[List[Tuple[Node, NodeId]]]:
        """Materialised children paired with their identities; None when never fetched."""
        children = self._children.get(parent_id)
        if children is None:
            return None
        return [(child, self._by_key[(parent_id, child.name)]) for child in children]

    @property
    def fetch_count(self) -> int:
        """Number of child lists applied so far, across epochs."""
        return self._fetches

    async def find_ids(self, path: str) -> List[NodeId]:
        """
        Descend segment by segment, fetching each level as needed.

        Identities are followed through (parent id, name) keys, so a node
        instance shared by several parents resolves to the one on `path`.

        Returns:
            List[NodeId]: One identity per segment, root level first.

        Raises:
            NotFound: A segment has no match or descends through a file.
        """
        if not path:
            raise NotFound(path)

        ids: List[NodeId] = []
        parent_id: ParentKey = None
        for part in segments_of(path):
            if parent_id is not None and not isinstance(self.node_of(parent_id), FolderNode):
                raise NotFound(path, part)
            await self.children_by_id(parent_id)
            node_id = self._child_id(parent_id, part)
            if node_id is None:
                raise NotFound(path, part)
            ids.append(node_id)
            parent_id = node_id
        return ids

    async def find_by_path(self, path: str) -> Node:
        """Fetch down to `path` and return the node found there."""
        ids = await self.find_ids(path)
        return self.node_of(ids[-1])

    def lookup_ids(self, path: str) -> List[NodeId]:
        """
        Identities along `path` using only materialised children. Never fetches.

        Raises:
            NotFound: A level was never fetched or has no matching child.
        """
        if not path:
            raise NotFound(path)

        ids: List[NodeId] = []
        parent_id: ParentKey = None
        for part in segments_of(path):
            node_id = self._child_id(parent_id, part)
            if node_id is None:
                raise NotFound(path, part)
            ids.append(node_id)
            parent_id = node_id
        return ids

    def lookup(self, path: str) -> Node:
        """Cache-only counterpart of find_by_path."""
        return self.node_of(self.lookup_ids(path)[-1])

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    def invalidate(self, parent: Optional[Node] = None) -> None:
        """Drop the cached children of one parent so the next call refetches."""
        parent_id: ParentKey = None if parent is None else self.node_id(parent)
        self._children.pop(parent_id, None)

    def reset(self, data_source: Optional[DataSource] = None) -> None:
        """
        Start a new epoch, optionally with a new data source.

        Every identity, ParentLink and cached list is dropped. Fetches still
        in flight raise FetchAbandoned to their awaiters when they resolve.
        """
        if data_source is not None:
            self._source = data_source
        self._epoch += 1
        self._entries.clear()
        self._by_key.clear()
        self._by_obj.clear()
        self._children.clear()
        self._inflight.clear()
        logger.debug(f"TreeIndex reset; epoch is now {self._epoch}")

    # -------------------------------------------------------------------------
    # Private helpers
    # -------------------------------------------------------------------------
    async def _fetch(self, parent: Optional[Node], parent_id: ParentKey, epoch: int) -> Tuple[Node, ...]:
        result: Any = self._source(parent)
        if inspect.isawaitable(result):
            result = await result

        if epoch != self._epoch:
            label = "<root>" if parent is None else parent.name
            logger.info(f"Discarding children of '{label}' fetched in stale epoch {epoch}")
            raise FetchAbandoned(f"Fetch for '{label}' outlived epoch {epoch}")

        children = tuple(result or ())
        for child in children:
            validate_name(child.name)

        # Duplicate sibling names share one identity; the first instance is recorded
        seen: Set[str] = set()
        for child in children:
            self._attach(child, parent_id, record=child.name not in seen)
            seen.add(child.name)
        self._children[parent_id] = children
        self._fetches += 1
        logger.debug(f"Materialised {len(children)} children for parent id {parent_id}")
        return children

    def _attach(self, child: Node, parent_id: ParentKey, record: bool = True) -> NodeId:
        key = (parent_id, child.name)
        node_id = self._by_key.get(key)
        if node_id is None:
            node_id = next(self._ids)
            self._by_key[key] = node_id
        if record:
            self._entries[node_id] = _Entry(node=child, name=child.name, parent_id=parent_id)
        self._by_obj[id(child)] = (child, node_id)
        return node_id

    def _child_id(self, parent_id: ParentKey, name: str) -> Optional[NodeId]:
        if not any(child.name == name for child in self._children.get(parent_id, ())):
            return None
        return self._by_key.get((parent_id, name))

    def _entry(self, node_id: NodeId, origin: Node) -> _Entry:
        entry = self._entries.get(node_id)
        if entry is None:
            raise DetachedNode(origin)
        return entry

    def _forget_inflight(self, key: ParentKey, fut: "asyncio.Future[Tuple[Node, ...]]") -> None:
        if self._inflight.get(key) is fut:
            del self._inflight[key]


def in_memory_source(roots: Sequence[Node]) -> DataSource:
    """Serve an already materialised tree through the lazy data-source contract."""
    top = tuple(roots)

    def _source(parent: Optional[Node]) -> Sequence[Node]:
        if parent is None:
            return top
        if isinstance(parent, FolderNode):
            return parent.children
        return ()

    return _source
