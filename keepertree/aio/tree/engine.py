"""Lazily expanded tree over a remote namespace.

The engine mirrors only the part of the namespace the user has opened.
Nodes live in an arena keyed by path; every operation builds a new
TreeSnapshot from the current one and swaps it in, so a reader holding
an older snapshot never sees it change and concurrent expansions of
unrelated subtrees cannot overwrite each other.

Nothing is polled or invalidated in the background. ``refresh()`` is the
only way stale subtrees are corrected.
"""

import asyncio
import logging
from collections import deque
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from ..._common import ROOT, ancestors, join_path, validate_path
from ...errors import UnknownPathError
from ..core import ChildState, NodeState, TreeNode

logger = logging.getLogger(__name__)


class TreeSnapshot:
    """Immutable view of the materialized tree.

    Attributes:
        epoch: Number of refreshes committed before this snapshot
    """

    def __init__(self, nodes: Mapping[str, TreeNode], epoch: int = 0):
        self._nodes = MappingProxyType(nodes)
        self.epoch = epoch

    @property
    def root(self) -> TreeNode:
        return self._nodes[ROOT]

    def get(self, path: str) -> Optional[TreeNode]:
        return self._nodes.get(path)

    def __getitem__(self, path: str) -> TreeNode:
        try:
            return self._nodes[path]
        except KeyError:
            raise UnknownPathError(path) from None

    def __contains__(self, path: object) -> bool:
        return path in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def paths(self) -> List[str]:
        return list(self._nodes)

    def children_of(self, path: str) -> List[TreeNode]:
        """Child nodes of ``path`` in listing order."""
        return [self._nodes[child] for child in self[path].children]

    def descendants(self, path: str) -> List[str]:
        """Paths below ``path`` (not including it)."""
        found = []
        stack = list(self[path].children)
        while stack:
            current = stack.pop()
            found.append(current)
            stack.extend(self._nodes[current].children)
        return found

    def visible_nodes(self) -> Iterator[Tuple[int, TreeNode]]:
        """Yield ``(depth, node)`` rows in display order.

        Depth-first, pre-order; children are only visited below expanded
        nodes, the way a sidebar renders the tree.
        """
        stack = deque([(0, ROOT)])
        while stack:
            depth, path = stack.pop()
            node = self._nodes[path]
            yield depth, node
            if node.expanded:
                stack.extend((depth + 1, child) for child in reversed(node.children))

    def to_dict(self, path: str = ROOT) -> Dict[str, Any]:
        """Nested plain-data form of the subtree at ``path``.

        ``hasChildren`` is None while unknown.
        """
        node = self[path]
        has_children = {
            ChildState.UNKNOWN: None,
            ChildState.PRESENT: True,
            ChildState.ABSENT: False,
        }[node.has_children]
        return {
            'path': node.path,
            'name': node.display_name,
            'expanded': node.expanded,
            'hasChildren': has_children,
            'children': [self.to_dict(child) for child in node.children],
        }

    def __repr__(self) -> str:
        return f"TreeSnapshot({len(self._nodes)} nodes, epoch={self.epoch})"


class TreeEngine:
    """Owns the lazily expanded tree and keeps it in step with user actions.

    Per node: COLLAPSED (not loaded) -> LOADING -> EXPANDED -> COLLAPSED
    (children kept) -> EXPANDED (no re-fetch). ``refresh()`` puts every
    node below the root back to COLLAPSED/not loaded.

    Example:
        engine = TreeEngine(create_access_adapter("localhost:12345"))
        await engine.refresh()
        await engine.expand("/app")
        for depth, node in engine.snapshot.visible_nodes():
            print("  " * depth + node.display_name)
    """

    def __init__(self, adapter: Any):
        """Initialize with an access adapter.

        Args:
            adapter: Anything implementing the access contract
                (usually an ErrorHandlingAdapter from create_access_adapter)
        """
        self._adapter = adapter
        self._snapshot = TreeSnapshot({ROOT: TreeNode(ROOT)})
        # In-flight listings keyed by (epoch, path); concurrent expands share them
        self._loading: Dict[Tuple[int, str], asyncio.Future] = {}

    @property
    def adapter(self) -> Any:
        return self._adapter

    @property
    def snapshot(self) -> TreeSnapshot:
        """The current tree. Snapshots never change once handed out."""
        return self._snapshot

    @property
    def root(self) -> TreeNode:
        return self._snapshot.root

    def get(self, path: str) -> TreeNode:
        return self._snapshot[path]

    def state_of(self, path: str) -> NodeState:
        node = self._snapshot[path]
        if (self._snapshot.epoch, path) in self._loading:
            return NodeState.LOADING
        return NodeState.EXPANDED if node.expanded else NodeState.COLLAPSED

    async def expand(self, path: str) -> Optional[TreeNode]:
        """Expand ``path``, or collapse it if it is already expanded.

        Only a node that was never loaded triggers a remote listing.
        On failure the error propagates and the tree is left as it was.

        Returns:
            The node as committed, or None if a refresh removed it while
            its listing was in flight
        """
        node = self._snapshot[path]
        if node.expanded:
            logger.debug("Collapsing %s", path)
            return self._replace(node.toggled(False))
        if node.loaded:
            logger.debug("Expanding %s from cached children", path)
            return self._replace(node.toggled(True))
        return await self._load(path, self._snapshot.epoch)

    async def collapse(self, path: str) -> TreeNode:
        """Collapse ``path`` keeping its children; no-op if already collapsed."""
        node = self._snapshot[path]
        if not node.expanded:
            return node
        logger.debug("Collapsing %s", path)
        return self._replace(node.toggled(False))

    async def refresh(self) -> TreeNode:
        """Rebuild the tree from the root.

        Lists the root unconditionally; on success the root is expanded
        and every other node is collapsed and unloaded. On failure the
        previous tree stays in place.
        """
        names = await self._adapter.list_children(ROOT)
        child_paths = self._child_paths(ROOT, names)

        nodes = {ROOT: TreeNode(ROOT).with_children(child_paths)}
        for child in child_paths:
            nodes[child] = TreeNode(child)

        epoch = self._snapshot.epoch + 1
        self._snapshot = TreeSnapshot(nodes, epoch)
        logger.info("Refreshed tree: %d top-level nodes (epoch %d)", len(child_paths), epoch)
        return self._snapshot.root

    async def reload(self, path: str) -> Optional[TreeNode]:
        """Re-list ``path`` even if cached, replacing its subtree.

        The rest of the tree is left untouched. Reloading the root is a
        full refresh.
        """
        if path == ROOT:
            return await self.refresh()
        if path not in self._snapshot:
            raise UnknownPathError(path)
        epoch = self._snapshot.epoch
        names = await self._adapter.list_children(path)
        return self._commit_children(path, names, epoch)

    async def reveal(self, path: str) -> TreeNode:
        """Expand every ancestor of ``path`` so that it becomes visible.

        Raises:
            UnknownPathError: If some ancestor's listing does not contain
                the next path segment
        """
        validate_path(path)
        for ancestor in ancestors(path):
            node = self._snapshot[ancestor]
            if not node.expanded:
                await self.expand(ancestor)
        return self._snapshot[path]

    async def _load(self, path: str, epoch: int) -> Optional[TreeNode]:
        key = (epoch, path)
        pending = self._loading.get(key)
        if pending is not None:
            logger.debug("Joining in-flight listing of %s", path)
            await pending
            return self._snapshot.get(path)

        future = asyncio.get_running_loop().create_future()
        self._loading[key] = future
        try:
            names = await self._adapter.list_children(path)
            node = self._commit_children(path, names, epoch)
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved: this caller re-raises the same error
            future.exception()
            raise
        else:
            future.set_result(node)
            return node
        finally:
            del self._loading[key]
            if not future.done():
                future.cancel()

    def _commit_children(self, path: str, names: List[str], epoch: int) -> Optional[TreeNode]:
        current = self._snapshot
        if current.epoch != epoch or path not in current:
            logger.warning("Discarding listing of %s: tree was refreshed meanwhile", path)
            return current.get(path)

        nodes = dict(current._nodes)
        for stale in current.descendants(path):
            del nodes[stale]

        child_paths = self._child_paths(path, names)
        for child in child_paths:
            nodes[child] = TreeNode(child)
        nodes[path] = current[path].with_children(child_paths)

        self._snapshot = TreeSnapshot(nodes, epoch)
        logger.debug("Expanded %s with %d children", path, len(child_paths))
        return nodes[path]

    def _replace(self, node: TreeNode) -> TreeNode:
        current = self._snapshot
        nodes = dict(current._nodes)
        nodes[node.path] = node
        self._snapshot = TreeSnapshot(nodes, current.epoch)
        return node

    @staticmethod
    def _child_paths(parent: str, names: List[str]) -> Tuple[str, ...]:
        # Siblings are unique; keep the remote's order
        return tuple(join_path(parent, name) for name in dict.fromkeys(names) if name)
