"""ZooKeeper session adapter.

Holds one persistent kazoo session, opened when the adapter is built and
torn down by ``close()``. kazoo is thread based, so each blocking call is
moved off the event loop with ``asyncio.to_thread``.
"""

import asyncio
import logging
from typing import Any, Callable, List, Optional, Set

from kazoo.client import KazooClient
from kazoo.exceptions import (
    ConnectionClosedError,
    ConnectionLoss,
    KazooException,
    NoNodeError,
    NodeExistsError,
    NotEmptyError as KazooNotEmptyError,
    SessionExpiredError,
)

from ...config import DEFAULT_TIMEOUT, hosts_from_url
from ...errors import (
    AlreadyExistsError,
    NotEmptyError,
    NotFoundError,
    RemoteFailureError,
    TransportUnavailableError,
)
from ..core import AsyncAccessAdapter, NodeStat, RemoteNode

logger = logging.getLogger(__name__)

_FAILURE_LABELS = {
    'list_children': "Failed to fetch children",
    'get_node': "Failed to fetch node data",
    'set_data': "Failed to save data",
    'create_node': "Failed to create node",
    'delete_node': "Failed to delete node",
}


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


class ZooKeeperSessionAdapter(AsyncAccessAdapter):
    """Access adapter backed by a single ZooKeeper session.

    The session handshake starts in the constructor without blocking.
    Operations issued before it completes fail with
    TransportUnavailableError; use ``wait_connected()`` to wait for it.

    Example:
        adapter = ZooKeeperSessionAdapter("zk1:2181,zk2:2181")
        async with adapter:
            await adapter.wait_connected()
            names = await adapter.list_children("/")
    """

    def __init__(self, hosts: str, timeout: Optional[float] = DEFAULT_TIMEOUT,
                 client: Optional[KazooClient] = None):
        """Initialize the adapter and start the session.

        Args:
            hosts: Connection string, optionally with a scheme prefix
            timeout: Session timeout in seconds
            client: Pre-built kazoo client (tests inject fakes here)
        """
        super().__init__()
        self.hosts = hosts_from_url(hosts)
        self.timeout = timeout or DEFAULT_TIMEOUT
        self._client = client if client is not None else KazooClient(
            hosts=self.hosts, timeout=self.timeout)
        self._connected_event = self._client.start_async()
        logger.info("Opening ZooKeeper session to %s", self.hosts)

    def _define_capabilities(self) -> Set[str]:
        return super()._define_capabilities() | {'session', 'ephemeral'}

    @property
    def connected(self) -> bool:
        return not self._closed and bool(self._client.connected)

    @property
    def session_id(self) -> Optional[int]:
        """Id of the current session; ephemeral nodes it creates carry it as owner."""
        client_id = getattr(self._client, 'client_id', None)
        return client_id[0] if client_id else None

    async def wait_connected(self, timeout: Optional[float] = None) -> None:
        """Wait for the session handshake.

        Raises:
            TransportUnavailableError: If the session is not up within ``timeout``
        """
        if self._closed:
            raise TransportUnavailableError("ZooKeeper session is closed")
        established = await asyncio.to_thread(
            self._connected_event.wait, timeout if timeout is not None else self.timeout)
        if not established or not self._client.connected:
            raise TransportUnavailableError(
                f"Could not establish ZooKeeper session to {self.hosts}")

    async def list_children(self, path: str) -> List[str]:
        return list(await self._call('list_children', path, self._client.get_children, path))

    async def get_node(self, path: str) -> RemoteNode:
        def fetch():
            data, stat = self._client.get(path)
            children = self._client.get_children(path)
            return data, stat, children

        data, stat, children = await self._call('get_node', path, fetch)
        return RemoteNode(
            path=path,
            data=_decode(data),
            children=list(children),
            stat=NodeStat.from_znode_stat(stat),
        )

    async def set_data(self, path: str, data: str) -> None:
        await self._call('set_data', path, self._client.set, path, data.encode("utf-8"))

    async def create_node(self, path: str, data: str = "", ephemeral: bool = False) -> None:
        await self._call('create_node', path, self._client.create, path,
                         data.encode("utf-8"), ephemeral=ephemeral)

    async def delete_node(self, path: str) -> None:
        await self._call('delete_node', path, self._client.delete, path, recursive=False)

    async def _close(self) -> None:
        await asyncio.to_thread(self._shutdown)
        logger.info("Closed ZooKeeper session to %s", self.hosts)

    def _shutdown(self) -> None:
        try:
            self._client.stop()
        finally:
            self._client.close()

    async def _call(self, operation: str, path: str, func: Callable[..., Any],
                    *args: Any, **kwargs: Any) -> Any:
        """Run one blocking kazoo call and translate its failures."""
        self._count(operation)
        label = _FAILURE_LABELS[operation]
        if self._closed:
            raise TransportUnavailableError(
                f"{label}: ZooKeeper session is closed", path=path, operation=operation)
        if not self._client.connected:
            raise TransportUnavailableError(
                f"{label}: ZooKeeper session not established", path=path, operation=operation)

        logger.debug("%s %s", operation, path)
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except NoNodeError as err:
            if operation == 'create_node':
                message = f"{label}: parent of {path} does not exist"
            else:
                message = f"{label}: {path} does not exist"
            raise NotFoundError(message, path=path, operation=operation) from err
        except NodeExistsError as err:
            raise AlreadyExistsError(
                f"{label}: {path} already exists", path=path, operation=operation) from err
        except KazooNotEmptyError as err:
            raise NotEmptyError(
                f"{label}: {path} has children", path=path, operation=operation) from err
        except (ConnectionLoss, ConnectionClosedError, SessionExpiredError) as err:
            raise TransportUnavailableError(
                f"{label}: ZooKeeper session unavailable ({err.__class__.__name__})",
                path=path, operation=operation) from err
        except KazooException as err:
            raise RemoteFailureError(
                f"{label}: {str(err) or err.__class__.__name__}",
                path=path, operation=operation) from err

    def __repr__(self) -> str:
        return f"ZooKeeperSessionAdapter({self.hosts!r})"
