"""
Error handling policies for keepertree.

A policy decides what happens after an access operation fails. Every
policy here propagates the failure: the access layer never retries and
never hides an error from its caller. Policies differ in what they
record on the way.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..errors import AccessError, ErrorKind, normalize_error

logger = logging.getLogger(__name__)


class ErrorPolicy(ABC):
    """
    Base class for error handling policies.

    Subclasses receive every failure of a wrapped adapter, already
    normalized into an AccessError, and must raise.
    """

    async def handle(self, error: Exception, method_name: str, path: Optional[str]) -> Any:
        """
        Handle an error raised by an access operation.

        Args:
            error: The exception that was raised
            method_name: Name of the method that failed (e.g., 'list_children')
            path: Node path the call targeted, if known

        Raises:
            AccessError: Always
        """
        normalized = normalize_error(error, operation=method_name, path=path)
        self.on_error(normalized)
        raise normalized

    @abstractmethod
    def on_error(self, error: AccessError) -> None:
        """Observe a normalized error before it is raised."""
        pass


class FailFastPolicy(ErrorPolicy):
    """
    Policy that re-raises every error immediately.

    This is the default behavior.
    """

    def on_error(self, error: AccessError) -> None:
        logger.debug("%s failed for %s: %s", error.operation, error.path, error.message)


class CollectErrorsPolicy(ErrorPolicy):
    """
    Policy that keeps a history of errors, then re-raises them.

    A notification layer can read ``errors`` to show what failed.
    """

    def __init__(self, verbose: bool = True, max_errors: Optional[int] = None):
        """
        Initialize the policy.

        Args:
            verbose: If True, log a warning for every error
            max_errors: Keep at most this many records (oldest dropped first)
        """
        self.errors: List[Dict[str, Any]] = []
        self.verbose = verbose
        self.max_errors = max_errors

    def on_error(self, error: AccessError) -> None:
        self.errors.append({
            'path': error.path,
            'method': error.operation,
            'kind': error.kind,
            'error_type': type(error).__name__,
            'error_message': error.message,
        })
        if self.max_errors is not None and len(self.errors) > self.max_errors:
            del self.errors[:len(self.errors) - self.max_errors]

        if self.verbose:
            logger.warning("Error in %s for '%s': %s", error.operation, error.path, error.message)

    def clear(self) -> None:
        self.errors.clear()

    def get_statistics(self) -> dict:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts per kind and the full records
        """
        by_kind = {kind.value: 0 for kind in ErrorKind}
        for record in self.errors:
            by_kind[record['kind'].value] += 1
        return {
            'total_errors': len(self.errors),
            'by_kind': by_kind,
            'errors': list(self.errors),
        }
