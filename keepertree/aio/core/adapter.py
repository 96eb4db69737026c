"""Async access adapter abstraction.

Defines the single contract every transport implements. The tree engine
and the node detail flow only ever talk to this interface, so they never
branch on how the namespace is reached.
"""

from abc import ABC, abstractmethod
from collections import Counter
from typing import List, Set

from .node import RemoteNode


class AsyncAccessAdapter(ABC):
    """Abstract base class for namespace access adapters.

    Every operation is a coroutine, goes to the remote on every call
    (nothing is cached) and raises an AccessError on failure. Adapters
    never retry.
    """

    def __init__(self):
        self._closed = False
        self._capabilities = self._define_capabilities()
        self.call_counts = Counter()

    @abstractmethod
    async def list_children(self, path: str) -> List[str]:
        """Names of the children of ``path``.

        An empty list means ``path`` is a leaf; a missing path raises
        NotFoundError instead.
        """
        pass

    @abstractmethod
    async def get_node(self, path: str) -> RemoteNode:
        """Payload, child names and stat of ``path`` in one round trip."""
        pass

    @abstractmethod
    async def set_data(self, path: str, data: str) -> None:
        """Replace the payload of an existing node.

        Raises:
            NotFoundError: If ``path`` does not exist
        """
        pass

    @abstractmethod
    async def create_node(self, path: str, data: str = "", ephemeral: bool = False) -> None:
        """Create ``path``.

        Raises:
            AlreadyExistsError: If ``path`` exists
            NotFoundError: If the parent does not exist
        """
        pass

    @abstractmethod
    async def delete_node(self, path: str) -> None:
        """Delete a childless node. Deletes are never recursive.

        Raises:
            NotFoundError: If ``path`` does not exist
            NotEmptyError: If ``path`` has children
        """
        pass

    async def close(self) -> None:
        """Release transport resources.

        Idempotent; override ``_close`` for transport-specific cleanup.
        """
        if self._closed:
            return
        self._closed = True
        await self._close()

    async def _close(self) -> None:
        pass

    @property
    def closed(self) -> bool:
        return self._closed

    def _count(self, operation: str) -> None:
        self.call_counts[operation] += 1

    def supports_capability(self, capability: str) -> bool:
        """Check if adapter supports a specific capability.

        Args:
            capability: Capability name

        Returns:
            True if capability is supported
        """
        return capability in self._capabilities

    def _define_capabilities(self) -> Set[str]:
        """Define adapter capabilities.

        Override in subclasses to declare supported features.
        """
        return {
            'list_children',
            'get_node',
            'set_data',
            'create_node',
            'delete_node',
        }

    async def get_stats(self) -> dict:
        """Per-operation call counts and lifecycle flags."""
        return {
            'calls': dict(self.call_counts),
            'closed': self._closed,
        }

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
