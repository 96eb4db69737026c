"""Transport adapters for the access layer.

Each adapter implements AsyncAccessAdapter over one transport.
"""

from .http_proxy import HttpProxyAdapter
from .session import ZooKeeperSessionAdapter

__all__ = [
    'HttpProxyAdapter',
    'ZooKeeperSessionAdapter',
]
