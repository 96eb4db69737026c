"""
Tests for the ZooKeeper session adapter.

A FakeKazooClient backed by an in-memory namespace stands in for kazoo;
constructor wiring is checked by patching KazooClient itself.
"""

from unittest.mock import MagicMock, patch

import pytest
from kazoo.exceptions import ConnectionLoss, RuntimeInconsistency

from keepertree import (
    AlreadyExistsError,
    NotEmptyError,
    NotFoundError,
    RemoteFailureError,
    TransportUnavailableError,
)
from keepertree.aio import ZooKeeperSessionAdapter
from keepertree.testing import FakeKazooClient, InMemoryNamespace


def make_adapter(namespace=None, auto_connect=True):
    client = FakeKazooClient(namespace, auto_connect=auto_connect)
    return ZooKeeperSessionAdapter("localhost:2181", client=client), client


class TestSessionLifecycle:
    """Session opened at construction, closed once."""

    def test_constructor_starts_kazoo_session(self):
        with patch('keepertree.aio.adapters.session.KazooClient') as kazoo_class:
            adapter = ZooKeeperSessionAdapter("zk://zk1:2181,zk2:2181/", timeout=5.0)

        kazoo_class.assert_called_once_with(hosts="zk1:2181,zk2:2181", timeout=5.0)
        kazoo_class.return_value.start_async.assert_called_once_with()
        assert adapter.hosts == "zk1:2181,zk2:2181"

    @pytest.mark.asyncio
    async def test_operation_before_handshake_is_transport_unavailable(self):
        namespace = InMemoryNamespace().build("/app")
        adapter, client = make_adapter(namespace, auto_connect=False)

        with pytest.raises(TransportUnavailableError) as exc_info:
            await adapter.list_children("/app")
        assert not isinstance(exc_info.value, NotFoundError)
        assert "not established" in exc_info.value.message

        client.connect()
        assert await adapter.list_children("/app") == []
        await adapter.close()

    @pytest.mark.asyncio
    async def test_wait_connected(self):
        adapter, client = make_adapter(auto_connect=False)
        with pytest.raises(TransportUnavailableError):
            await adapter.wait_connected(timeout=0.01)

        client.connect()
        await adapter.wait_connected(timeout=0.01)
        assert adapter.connected
        await adapter.close()

    @pytest.mark.asyncio
    async def test_close_is_idempotent_and_stops_client_once(self):
        adapter, client = make_adapter()
        await adapter.close()
        await adapter.close()

        assert client.stop_calls == 1
        assert client.close_calls == 1
        assert not adapter.connected
        with pytest.raises(TransportUnavailableError):
            await adapter.list_children("/")

    @pytest.mark.asyncio
    async def test_close_without_handshake_is_safe(self):
        adapter, client = make_adapter(auto_connect=False)
        await adapter.close()
        assert client.close_calls == 1

    @pytest.mark.asyncio
    async def test_ephemeral_nodes_die_with_session(self):
        namespace = InMemoryNamespace()
        adapter, _ = make_adapter(namespace)

        await adapter.create_node("/lock", "me", ephemeral=True)
        node = await adapter.get_node("/lock")
        assert node.stat.is_ephemeral
        assert node.stat.ephemeral_owner == adapter.session_id

        await adapter.close()
        assert not namespace.exists("/lock")

    def test_capabilities(self):
        adapter, _ = make_adapter()
        assert adapter.supports_capability('session')
        assert adapter.supports_capability('ephemeral')


class TestSessionOperations:
    """Native calls mapped onto the access contract."""

    @pytest.mark.asyncio
    async def test_get_node_combines_data_children_and_stat(self):
        namespace = InMemoryNamespace().build("/app/db", "/app/cache")
        namespace.set("/app", "héllo")
        adapter, _ = make_adapter(namespace)

        node = await adapter.get_node("/app")

        assert node.data == "héllo"
        assert node.children == ["db", "cache"]
        assert node.stat.version == 1
        assert node.stat.num_children == 2
        assert adapter.call_counts['get_node'] == 1
        await adapter.close()

    @pytest.mark.asyncio
    async def test_set_data_encodes_text(self):
        namespace = InMemoryNamespace().build("/app")
        adapter, _ = make_adapter(namespace)

        await adapter.set_data("/app", "v2")

        assert namespace.get("/app").data == "v2"
        await adapter.close()

    @pytest.mark.asyncio
    async def test_native_errors_are_mapped(self):
        namespace = InMemoryNamespace().build("/app/db")
        adapter, _ = make_adapter(namespace)

        with pytest.raises(NotFoundError):
            await adapter.list_children("/nope")
        with pytest.raises(AlreadyExistsError):
            await adapter.create_node("/app")
        with pytest.raises(NotFoundError) as exc_info:
            await adapter.create_node("/missing/child")
        assert "parent" in exc_info.value.message
        with pytest.raises(NotEmptyError):
            await adapter.delete_node("/app")
        assert namespace.exists("/app/db")
        await adapter.close()

    @pytest.mark.asyncio
    async def test_connection_loss_is_transport_unavailable(self):
        client = MagicMock()
        client.connected = True
        client.get_children.side_effect = ConnectionLoss()
        adapter = ZooKeeperSessionAdapter("localhost:2181", client=client)

        with pytest.raises(TransportUnavailableError) as exc_info:
            await adapter.list_children("/")
        assert isinstance(exc_info.value.__cause__, ConnectionLoss)

    @pytest.mark.asyncio
    async def test_other_kazoo_errors_are_remote_failures(self):
        client = MagicMock()
        client.connected = True
        client.delete.side_effect = RuntimeInconsistency("odd")
        adapter = ZooKeeperSessionAdapter("localhost:2181", client=client)

        with pytest.raises(RemoteFailureError) as exc_info:
            await adapter.delete_node("/x")
        assert exc_info.value.message == "Failed to delete node: odd"
        client.delete.assert_called_once_with("/x", recursive=False)
