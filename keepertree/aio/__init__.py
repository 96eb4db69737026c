"""Asynchronous implementation of keepertree.

All access goes through coroutine adapters; the tree engine and browser
build on them.
"""

# Core abstractions
from .core import (
    AsyncAccessAdapter,
    ChildState,
    NodeState,
    NodeStat,
    RemoteNode,
    TreeNode,
)

# Adapters
from .adapters import (
    HttpProxyAdapter,
    ZooKeeperSessionAdapter,
)

# Error handling
from .error_handling import ErrorHandlingAdapter, create_resilient_adapter
from .error_policies import ErrorPolicy, FailFastPolicy, CollectErrorsPolicy

# High-level API
from .api import build_adapter, create_access_adapter

# Tree state
from .tree import TreeEngine, TreeSnapshot

# Connections and the browser facade
from .connection import ConnectionManager, ProfileRegistry
from .browser import KeeperBrowser

__all__ = [
    # Core abstractions
    'AsyncAccessAdapter',
    'ChildState',
    'NodeState',
    'NodeStat',
    'RemoteNode',
    'TreeNode',
    # Adapters
    'HttpProxyAdapter',
    'ZooKeeperSessionAdapter',
    # Error handling
    'ErrorHandlingAdapter',
    'create_resilient_adapter',
    'ErrorPolicy',
    'FailFastPolicy',
    'CollectErrorsPolicy',
    # High-level API
    'build_adapter',
    'create_access_adapter',
    # Tree
    'TreeEngine',
    'TreeSnapshot',
    # Connections
    'ConnectionManager',
    'ProfileRegistry',
    'KeeperBrowser',
]
