"""Stateless HTTP proxy adapter.

Every operation is one request/response exchange against a REST proxy
that fronts the coordination service. There is no session, so closing
only releases the HTTP connection pool.
"""

import logging
from typing import Any, Dict, List, Optional, Set
from urllib.parse import quote

import httpx

from ...config import DEFAULT_SCHEME, DEFAULT_TIMEOUT, normalize_url
from ...errors import (
    AccessError,
    AlreadyExistsError,
    NotEmptyError,
    NotFoundError,
    RemoteFailureError,
    TransportUnavailableError,
)
from ..core import AsyncAccessAdapter, RemoteNode

logger = logging.getLogger(__name__)

# Message prefix per operation, shown to the user in front of the status text
_FAILURE_LABELS = {
    'list_children': "Failed to fetch children",
    'get_node': "Failed to fetch node data",
    'set_data': "Failed to save data",
    'create_node': "Failed to create node",
    'delete_node': "Failed to delete node",
}

# 409 Conflict means different things depending on the operation
_CONFLICT_ERRORS = {
    'create_node': AlreadyExistsError,
    'delete_node': NotEmptyError,
}


def _query(path: str) -> str:
    """Percent-encoded ``path`` query string."""
    return "path=" + quote(path, safe="")


class HttpProxyAdapter(AsyncAccessAdapter):
    """Access adapter for the HTTP proxy wire contract.

    Example:
        async with HttpProxyAdapter("localhost:12345") as adapter:
            names = await adapter.list_children("/")
    """

    def __init__(
        self,
        url: str,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        default_scheme: str = DEFAULT_SCHEME,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the adapter.

        Args:
            url: Proxy endpoint; a missing scheme gets ``default_scheme``
            timeout: Per-request timeout in seconds (None disables it)
            default_scheme: Scheme prepended to scheme-less URLs
            transport: Optional httpx transport (tests use MockTransport)
        """
        super().__init__()
        self.base_url = normalize_url(url, default_scheme)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def _define_capabilities(self) -> Set[str]:
        return super()._define_capabilities() | {'ephemeral'}

    async def list_children(self, path: str) -> List[str]:
        response = await self._request('list_children', "GET", f"/ls?{_query(path)}", path)
        payload = self._json(response, 'list_children', path)
        return list(payload.get('children') or [])

    async def get_node(self, path: str) -> RemoteNode:
        response = await self._request('get_node', "GET", f"/get?{_query(path)}", path)
        payload = self._json(response, 'get_node', path)
        return RemoteNode.from_dict(payload, path=path)

    async def set_data(self, path: str, data: str) -> None:
        await self._request('set_data', "POST", "/set", path,
                            json={'path': path, 'data': data})

    async def create_node(self, path: str, data: str = "", ephemeral: bool = False) -> None:
        await self._request('create_node', "POST", "/create", path,
                            json={'path': path, 'data': data, 'isEphemeral': ephemeral})

    async def delete_node(self, path: str) -> None:
        await self._request('delete_node', "DELETE", f"/delete?{_query(path)}", path)

    async def _close(self) -> None:
        await self._client.aclose()
        logger.debug("Closed HTTP client for %s", self.base_url)

    async def _request(self, operation: str, method: str, url: str, path: str,
                       **kwargs: Any) -> httpx.Response:
        """Send one request and translate transport failures.

        Returns:
            The 2xx response

        Raises:
            AccessError: For any failure, mapped to its ErrorKind
        """
        self._count(operation)
        label = _FAILURE_LABELS[operation]
        if self._closed:
            raise TransportUnavailableError(
                f"{label}: adapter is closed", path=path, operation=operation)

        logger.debug("%s %s%s", method, self.base_url, url)
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.ConnectError as err:
            raise TransportUnavailableError(
                f"{label}: cannot reach {self.base_url} ({err})",
                path=path, operation=operation) from err
        except httpx.TimeoutException as err:
            raise RemoteFailureError(
                f"{label}: request timed out", path=path, operation=operation) from err
        except httpx.HTTPError as err:
            raise RemoteFailureError(
                f"{label}: {err}", path=path, operation=operation) from err

        if response.is_success:
            return response
        raise self._status_error(operation, response, path)

    def _status_error(self, operation: str, response: httpx.Response, path: str) -> AccessError:
        status_text = response.reason_phrase or str(response.status_code)
        message = f"{_FAILURE_LABELS[operation]}: {status_text}"

        if response.status_code == 404:
            error_class = NotFoundError
        elif response.status_code == 409:
            error_class = _CONFLICT_ERRORS.get(operation, RemoteFailureError)
        else:
            error_class = RemoteFailureError

        logger.debug("%s %s -> %s", operation, path, response.status_code)
        return error_class(message, path=path, operation=operation)

    def _json(self, response: httpx.Response, operation: str, path: str) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as err:
            raise RemoteFailureError(
                f"{_FAILURE_LABELS[operation]}: invalid response format",
                path=path, operation=operation) from err
        if not isinstance(payload, dict):
            raise RemoteFailureError(
                f"{_FAILURE_LABELS[operation]}: invalid response format",
                path=path, operation=operation)
        return payload

    def __repr__(self) -> str:
        return f"HttpProxyAdapter({self.base_url!r})"
