"""
Error handling adapter for keepertree.

This module provides the ErrorHandlingAdapter that wraps an access
adapter and delegates every failure to a pluggable policy, so that
callers only ever see AccessError, whatever the transport raised.
"""

import inspect
import functools
from typing import Any, Optional

from .error_policies import CollectErrorsPolicy, ErrorPolicy, FailFastPolicy


class ErrorHandlingAdapter:
    """
    Adapter that wraps another adapter and handles errors through policies.

    This adapter uses the dynamic proxy pattern to wrap every coroutine
    method of the underlying adapter, catching exceptions and delegating
    them to a configurable error policy.
    """

    def __init__(self, base_adapter: Any, policy: Optional[ErrorPolicy] = None):
        """
        Initialize the error handling adapter.

        Args:
            base_adapter: The adapter to wrap (e.g., HttpProxyAdapter)
            policy: Error handling policy (defaults to FailFastPolicy)
        """
        self._base_adapter = base_adapter
        self._policy = policy or FailFastPolicy()

    async def __aenter__(self):
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context manager, closing the wrapped adapter."""
        await self.close()
        return None

    async def close(self) -> None:
        """Close the wrapped adapter; a failing close is normalized too."""
        try:
            await self._base_adapter.close()
        except Exception as e:
            await self._policy.handle(e, 'close', None)

    def __getattr__(self, name: str) -> Any:
        """
        Dynamic proxy that wraps all coroutine methods with error handling.

        Called only for attributes not defined on this class. Non-callable
        attributes (properties, counters) are returned as-is.

        Args:
            name: The attribute name being accessed

        Returns:
            The attribute from the base adapter, wrapped if it's a coroutine method
        """
        attr = getattr(self._base_adapter, name)

        # If it's not callable, return it as-is (properties, attributes)
        if not callable(attr):
            return attr

        @functools.wraps(attr)
        def wrapper(*args, **kwargs):
            """
            Call through; awaitable results get async error handling,
            synchronous results are returned directly.
            """
            result = attr(*args, **kwargs)
            if inspect.isawaitable(result):
                path = args[0] if args and isinstance(args[0], str) else kwargs.get('path')
                return self._handle_coroutine(result, name, path)
            return result

        return wrapper

    async def _handle_coroutine(self, awaitable, method_name: str, path: Optional[str]) -> Any:
        """
        Await an adapter call, handing any failure to the policy.

        Args:
            awaitable: The pending adapter call
            method_name: Name of the method being called
            path: Node path the call targeted, if known

        Returns:
            The result of the call (policies raise on failure)
        """
        try:
            return await awaitable
        except Exception as e:
            return await self._policy.handle(e, method_name, path)

    def get_policy(self) -> ErrorPolicy:
        """
        Get the current error policy.

        Returns:
            The configured ErrorPolicy instance
        """
        return self._policy

    def set_policy(self, policy: ErrorPolicy) -> None:
        """
        Change the error policy.

        Args:
            policy: The new ErrorPolicy to use
        """
        self._policy = policy

    def get_base_adapter(self) -> Any:
        """
        Get the wrapped base adapter.

        Returns:
            The underlying adapter being wrapped
        """
        return self._base_adapter

    def get_adapter_chain(self):
        """
        Return a list of adapter class names in the chain.

        Returns:
            List of class names from this adapter down through the chain
        """
        chain = []
        adapter = self
        while adapter is not None:
            chain.append(adapter.__class__.__name__)
            adapter = getattr(adapter, '_base_adapter', None)
        return chain

    def __repr__(self) -> str:
        """String representation."""
        return f"ErrorHandlingAdapter({self._base_adapter!r}, policy={self._policy.__class__.__name__})"


def create_resilient_adapter(base_adapter: Any, collect: bool = False,
                             verbose: bool = True) -> ErrorHandlingAdapter:
    """
    Convenience function to create an error-handling adapter.

    Args:
        base_adapter: The adapter to wrap
        collect: If True, keep an error history (CollectErrorsPolicy)
        verbose: If True, log a warning per error (only applies when collect=True)

    Returns:
        An ErrorHandlingAdapter configured appropriately
    """
    if collect:
        policy = CollectErrorsPolicy(verbose=verbose)
    else:
        policy = FailFastPolicy()

    return ErrorHandlingAdapter(base_adapter, policy)
