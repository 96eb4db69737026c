"""Configuration for keepertree.

This module defines how users describe the backend they want to browse:
which transport to use, where it lives, and the named connection
profiles a front end switches between.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


DEFAULT_SCHEME = "http"
DEFAULT_HTTP_URL = "http://localhost:12345"
DEFAULT_TIMEOUT = 10.0


class TransportMode(Enum):
    """How the access layer talks to the coordination service."""
    HTTP = "http"          # Stateless REST proxy, one request per call
    SESSION = "session"    # Persistent ZooKeeper session


def normalize_url(url: str, default_scheme: str = DEFAULT_SCHEME) -> str:
    """Prepend ``default_scheme`` when ``url`` has no explicit scheme.

    ``urlparse`` reads ``localhost:9999`` as scheme ``localhost``, so the
    check looks for ``://`` instead.

    Args:
        url: Endpoint as typed by the user
        default_scheme: Scheme to use when none is present

    Returns:
        Endpoint with a scheme and without trailing slashes
    """
    url = url.strip()
    if not url:
        raise ValueError("Endpoint URL cannot be empty")
    if "://" not in url:
        url = f"{default_scheme}://{url}"
    return url.rstrip("/")


def hosts_from_url(url: str) -> str:
    """Turn a profile URL into a ZooKeeper connection string.

    ``zk://a:2181,b:2181/`` and ``a:2181,b:2181`` both become
    ``a:2181,b:2181``.
    """
    url = url.strip()
    if "://" in url:
        url = url.split("://", 1)[1]
    url = url.rstrip("/")
    if not url:
        raise ValueError("Connection string cannot be empty")
    return url


@dataclass
class AccessConfig:
    """Everything needed to build one access adapter.

    Attributes:
        url: Endpoint as configured (scheme optional)
        mode: Transport strategy
        timeout: Transport-level timeout in seconds (None disables it)
        default_scheme: Scheme prepended to scheme-less HTTP endpoints
    """
    url: str = DEFAULT_HTTP_URL
    mode: TransportMode = TransportMode.HTTP
    timeout: Optional[float] = DEFAULT_TIMEOUT
    default_scheme: str = DEFAULT_SCHEME

    def __post_init__(self):
        if isinstance(self.mode, str):
            self.mode = TransportMode(self.mode)

    @property
    def endpoint(self) -> str:
        """Normalized HTTP base URL."""
        return normalize_url(self.url, self.default_scheme)

    @property
    def hosts(self) -> str:
        """ZooKeeper connection string (``host:port`` list)."""
        return hosts_from_url(self.url)


@dataclass
class ConnectionProfile:
    """A named, user-managed endpoint.

    Persistence of profiles belongs to the front end; the core only
    turns the active profile into an AccessConfig.
    """
    id: str
    name: str
    url: str
    mode: TransportMode = TransportMode.HTTP
    extra: dict = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.mode, str):
            self.mode = TransportMode(self.mode)

    def to_config(self, timeout: Optional[float] = DEFAULT_TIMEOUT) -> AccessConfig:
        return AccessConfig(url=self.url, mode=self.mode, timeout=timeout)
