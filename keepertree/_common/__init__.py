"""Common components with no I/O.

This internal package holds pure path computation used by adapters and
the tree engine. It should NOT be imported directly by users.

Important: This package must NEVER import from aio to avoid circular
dependencies.
"""

from .paths import (
    ROOT,
    validate_path,
    validate_name,
    join_path,
    parent_path,
    node_name,
    path_depth,
    is_ancestor,
    ancestors,
)

__all__ = [
    'ROOT',
    'validate_path',
    'validate_name',
    'join_path',
    'parent_path',
    'node_name',
    'path_depth',
    'is_ancestor',
    'ancestors',
]
