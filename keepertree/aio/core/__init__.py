"""Core abstractions for async namespace access.

This module defines the node values and the adapter contract shared by
every transport and by the tree engine.
"""

from .node import ChildState, NodeState, NodeStat, RemoteNode, TreeNode
from .adapter import AsyncAccessAdapter

__all__ = [
    # Nodes
    'ChildState',
    'NodeState',
    'NodeStat',
    'RemoteNode',
    'TreeNode',
    # Adapter
    'AsyncAccessAdapter',
]
