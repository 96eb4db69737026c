"""Error taxonomy shared by every access adapter.

Transports fail in their own vocabulary (HTTP status text, kazoo
exception classes). Adapters translate those failures into the
AccessError family below so callers never branch on transport.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """What went wrong, independent of the transport that reported it."""
    NOT_FOUND = "not_found"                            # Path does not exist
    ALREADY_EXISTS = "already_exists"                  # Create on existing path
    NOT_EMPTY = "not_empty"                            # Delete on node with children
    TRANSPORT_UNAVAILABLE = "transport_unavailable"    # No session/connection
    REMOTE_FAILURE = "remote_failure"                  # Anything else


class AccessError(Exception):
    """Base class for failures reported by the access layer.

    Attributes:
        kind: ErrorKind of this failure
        message: Human-readable message, suitable for display
        path: Node path the operation targeted, if any
        operation: Access operation name (e.g. ``list_children``)
    """

    kind = ErrorKind.REMOTE_FAILURE

    def __init__(self, message: str, path: Optional[str] = None,
                 operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.operation = operation

    def to_dict(self) -> dict:
        return {
            'kind': self.kind.value,
            'message': self.message,
            'path': self.path,
            'operation': self.operation,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, path={self.path!r})"


class NotFoundError(AccessError):
    kind = ErrorKind.NOT_FOUND


class AlreadyExistsError(AccessError):
    kind = ErrorKind.ALREADY_EXISTS


class NotEmptyError(AccessError):
    kind = ErrorKind.NOT_EMPTY


class TransportUnavailableError(AccessError):
    kind = ErrorKind.TRANSPORT_UNAVAILABLE


class RemoteFailureError(AccessError):
    kind = ErrorKind.REMOTE_FAILURE


class InvalidPathError(ValueError):
    """Raised when a path or node name is malformed."""


_KIND_TO_CLASS = {
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.ALREADY_EXISTS: AlreadyExistsError,
    ErrorKind.NOT_EMPTY: NotEmptyError,
    ErrorKind.TRANSPORT_UNAVAILABLE: TransportUnavailableError,
    ErrorKind.REMOTE_FAILURE: RemoteFailureError,
}


def error_for_kind(kind: ErrorKind, message: str, path: Optional[str] = None,
                   operation: Optional[str] = None) -> AccessError:
    """Build the AccessError subclass matching ``kind``."""
    return _KIND_TO_CLASS[kind](message, path=path, operation=operation)


def normalize_error(error: Exception, operation: Optional[str] = None,
                    path: Optional[str] = None) -> AccessError:
    """Coerce any exception into an AccessError.

    AccessErrors pass through (missing path/operation are filled in).
    Anything else becomes a RemoteFailureError carrying the raw message,
    with the original exception chained as ``__cause__``.
    """
    if isinstance(error, AccessError):
        if error.path is None:
            error.path = path
        if error.operation is None:
            error.operation = operation
        return error

    message = str(error) or error.__class__.__name__
    wrapped = RemoteFailureError(message, path=path, operation=operation)
    wrapped.__cause__ = error
    return wrapped


class UnknownPathError(LookupError):
    """Raised when a path is not part of the locally loaded tree."""

    def __init__(self, path: str):
        super().__init__(f"Path {path!r} is not in the loaded tree")
        self.path = path
