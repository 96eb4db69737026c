"""High-level API for building access adapters.

The transport is chosen once here, from the configuration, and every
adapter comes back wrapped in ErrorHandlingAdapter so callers only see
AccessError.
"""

import logging
from typing import Optional, Union

from ..config import AccessConfig, ConnectionProfile, TransportMode
from .adapters import HttpProxyAdapter, ZooKeeperSessionAdapter
from .core import AsyncAccessAdapter
from .error_handling import ErrorHandlingAdapter
from .error_policies import ErrorPolicy

logger = logging.getLogger(__name__)


def build_adapter(config: AccessConfig, **transport_options) -> AsyncAccessAdapter:
    """Build the bare adapter for ``config.mode``.

    Args:
        config: Access configuration
        **transport_options: Passed to the adapter constructor
            (``transport=`` for HTTP, ``client=`` for sessions)

    Returns:
        An unwrapped AsyncAccessAdapter
    """
    if config.mode is TransportMode.HTTP:
        return HttpProxyAdapter(
            config.url,
            timeout=config.timeout,
            default_scheme=config.default_scheme,
            **transport_options,
        )
    if config.mode is TransportMode.SESSION:
        return ZooKeeperSessionAdapter(config.hosts, timeout=config.timeout, **transport_options)
    raise ValueError(f"Unsupported transport mode: {config.mode!r}")


def create_access_adapter(
    config: Union[AccessConfig, ConnectionProfile, str],
    policy: Optional[ErrorPolicy] = None,
    **transport_options,
) -> ErrorHandlingAdapter:
    """Create an error-normalizing access adapter.

    Args:
        config: AccessConfig, ConnectionProfile, or a bare HTTP proxy URL
        policy: Error policy (defaults to FailFastPolicy)
        **transport_options: Passed through to the adapter constructor

    Returns:
        ErrorHandlingAdapter around the transport adapter

    Example:
        adapter = create_access_adapter("localhost:12345")
        async with adapter:
            print(await adapter.list_children("/"))
    """
    if isinstance(config, str):
        config = AccessConfig(url=config)
    elif isinstance(config, ConnectionProfile):
        config = config.to_config()

    adapter = build_adapter(config, **transport_options)
    logger.debug("Created %r for %s mode", adapter, config.mode.value)
    return ErrorHandlingAdapter(adapter, policy)
