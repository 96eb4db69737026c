"""One object wiring the tree and the node detail flow together.

KeeperBrowser is what a front end drives: the sidebar reads
``browser.tree.snapshot``, the detail pane calls ``select``/``save``/
``delete``/``create_child``. Detail operations go straight to the access
layer and then refresh the tree; the tree is never patched locally.
"""

import logging
from typing import Any, List, Optional, Union

from .._common import ROOT, join_path, parent_path, validate_name, validate_path
from ..config import AccessConfig, ConnectionProfile, DEFAULT_HTTP_URL
from ..errors import TransportUnavailableError
from .connection import ConnectionManager
from .core import RemoteNode
from .tree import TreeEngine

logger = logging.getLogger(__name__)

Target = Union[AccessConfig, ConnectionProfile, str]


class KeeperBrowser:
    """Namespace browser: connection, lazily expanded tree, node details.

    Example:
        async with KeeperBrowser() as browser:
            await browser.open("localhost:12345")
            await browser.tree.expand("/app")
            node = await browser.select("/app")
            await browser.save("/app", node.data + "!")
    """

    def __init__(self, manager: Optional[ConnectionManager] = None):
        self.manager = manager if manager is not None else ConnectionManager()
        self._tree: Optional[TreeEngine] = None
        self.selected: str = ROOT

    @property
    def tree(self) -> TreeEngine:
        if self._tree is None:
            raise TransportUnavailableError("Browser is not connected")
        return self._tree

    @property
    def adapter(self) -> Any:
        return self.manager.adapter

    async def open(self, target: Optional[Target] = None) -> TreeEngine:
        """Connect to ``target`` (default: active profile) and load the root.

        Any previous connection is closed first. If loading the root
        fails, the connection stays open and the error propagates.
        """
        if target is None:
            target = self.manager.registry.active or DEFAULT_HTTP_URL
        adapter = await self.manager.switch(target)
        self._tree = TreeEngine(adapter)
        self.selected = ROOT
        await self._tree.refresh()
        return self._tree

    async def switch(self, target: Target) -> TreeEngine:
        return await self.open(target)

    async def close(self) -> None:
        self._tree = None
        await self.manager.close()

    async def list_children(self, path: str) -> List[str]:
        return await self.adapter.list_children(validate_path(path))

    async def select(self, path: str) -> RemoteNode:
        """Fetch the full node at ``path`` for the detail view."""
        node = await self.adapter.get_node(validate_path(path))
        self.selected = path
        return node

    async def save(self, path: str, data: str) -> RemoteNode:
        """Replace the payload of ``path`` and return the node re-read."""
        await self.adapter.set_data(validate_path(path), data)
        logger.info("Saved %d bytes to %s", len(data.encode("utf-8")), path)
        await self.tree.refresh()
        return await self.select(path)

    async def delete(self, path: str) -> None:
        """Delete a childless node and refresh the tree."""
        await self.adapter.delete_node(validate_path(path))
        logger.info("Deleted %s", path)
        if self.selected == path:
            self.selected = parent_path(path)
        await self.tree.refresh()

    async def create_child(self, parent: str, name: str, data: str = "",
                           ephemeral: bool = False) -> str:
        """Create ``parent/name`` and refresh the tree.

        Returns:
            The new node's path

        Raises:
            InvalidPathError: If ``name`` is blank or contains '/'
        """
        path = join_path(validate_path(parent), validate_name(name))
        await self.adapter.create_node(path, data, ephemeral)
        logger.info("Created %s%s", path, " (ephemeral)" if ephemeral else "")
        await self.tree.refresh()
        return path

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
