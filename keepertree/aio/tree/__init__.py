"""Lazily expanded tree state."""

from .engine import TreeEngine, TreeSnapshot

__all__ = ['TreeEngine', 'TreeSnapshot']
