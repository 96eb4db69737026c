"""keepertree - browse and edit a ZooKeeper-style namespace.

keepertree lazily materializes a remote znode hierarchy into a finite,
navigable in-memory tree, over either a stateless HTTP proxy or a
persistent ZooKeeper session.

Usage:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    from keepertree.aio import KeeperBrowser

    async with KeeperBrowser() as browser:
        await browser.open("localhost:12345")
        await browser.tree.expand("/app")
━━━━━━━━━━━━━━━━━━━━━━━━━━
"""

__version__ = "0.1.0"

from . import aio
from .config import AccessConfig, ConnectionProfile, TransportMode, normalize_url
from .errors import (
    AccessError,
    AlreadyExistsError,
    ErrorKind,
    InvalidPathError,
    NotEmptyError,
    NotFoundError,
    RemoteFailureError,
    TransportUnavailableError,
    UnknownPathError,
)

__all__ = [
    "__version__",
    "aio",
    "AccessConfig",
    "ConnectionProfile",
    "TransportMode",
    "normalize_url",
    "AccessError",
    "AlreadyExistsError",
    "ErrorKind",
    "InvalidPathError",
    "NotEmptyError",
    "NotFoundError",
    "RemoteFailureError",
    "TransportUnavailableError",
    "UnknownPathError",
]
