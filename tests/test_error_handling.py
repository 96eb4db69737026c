"""
Tests for error policies, error normalization and the error handling adapter.
"""

import pytest
from unittest.mock import AsyncMock, Mock

from keepertree import (
    AccessError,
    ErrorKind,
    NotEmptyError,
    NotFoundError,
    RemoteFailureError,
)
from keepertree.aio import (
    CollectErrorsPolicy,
    ErrorHandlingAdapter,
    FailFastPolicy,
    create_resilient_adapter,
)
from keepertree.errors import error_for_kind, normalize_error
from keepertree.testing import InMemoryAccessAdapter, InMemoryNamespace


class TestNormalization:
    """Any exception becomes an AccessError."""

    def test_access_error_passes_through(self):
        error = NotFoundError("gone")
        result = normalize_error(error, operation="get_node", path="/a")
        assert result is error
        assert result.path == "/a"
        assert result.operation == "get_node"

    def test_existing_context_is_kept(self):
        error = NotFoundError("gone", path="/x", operation="set_data")
        normalize_error(error, operation="get_node", path="/a")
        assert error.path == "/x"
        assert error.operation == "set_data"

    def test_foreign_error_becomes_remote_failure(self):
        cause = ValueError("bad payload")
        result = normalize_error(cause, operation="list_children", path="/")
        assert isinstance(result, RemoteFailureError)
        assert result.kind is ErrorKind.REMOTE_FAILURE
        assert result.message == "bad payload"
        assert result.__cause__ is cause

    def test_empty_message_falls_back_to_class_name(self):
        assert normalize_error(RuntimeError()).message == "RuntimeError"

    def test_error_for_kind(self):
        error = error_for_kind(ErrorKind.NOT_EMPTY, "has kids", path="/a")
        assert isinstance(error, NotEmptyError)
        assert error.to_dict() == {
            'kind': 'not_empty', 'message': 'has kids', 'path': '/a', 'operation': None,
        }


class TestErrorPolicies:
    """Policies record differently but always raise."""

    @pytest.mark.asyncio
    async def test_fail_fast_policy_raises_normalized(self):
        policy = FailFastPolicy()
        with pytest.raises(RemoteFailureError):
            await policy.handle(OSError("disk"), "get_node", "/a")

    @pytest.mark.asyncio
    async def test_collect_errors_policy_records_then_raises(self):
        policy = CollectErrorsPolicy(verbose=False)

        with pytest.raises(NotFoundError):
            await policy.handle(NotFoundError("gone"), "get_node", "/a")
        with pytest.raises(RemoteFailureError):
            await policy.handle(OSError("disk"), "set_data", "/b")

        assert [e['path'] for e in policy.errors] == ["/a", "/b"]
        stats = policy.get_statistics()
        assert stats['total_errors'] == 2
        assert stats['by_kind']['not_found'] == 1
        assert stats['by_kind']['remote_failure'] == 1

    @pytest.mark.asyncio
    async def test_collect_errors_policy_caps_history(self):
        policy = CollectErrorsPolicy(verbose=False, max_errors=2)
        for i in range(3):
            with pytest.raises(AccessError):
                await policy.handle(NotFoundError(f"e{i}"), "get_node", f"/{i}")
        assert [e['error_message'] for e in policy.errors] == ["e1", "e2"]


class TestErrorHandlingAdapter:
    """Test the ErrorHandlingAdapter wrapper."""

    @pytest.mark.asyncio
    async def test_successful_operation(self):
        """Successful operations should pass through unchanged."""
        base_adapter = InMemoryAccessAdapter(InMemoryNamespace().build("/a", "/b"))
        adapter = ErrorHandlingAdapter(base_adapter)

        assert await adapter.list_children("/") == ["a", "b"]
        assert base_adapter.call_counts['list_children'] == 1

    @pytest.mark.asyncio
    async def test_foreign_exception_is_normalized(self):
        base_adapter = InMemoryAccessAdapter()
        base_adapter.fail_on['get_node'] = KeyError("stat")
        adapter = ErrorHandlingAdapter(base_adapter)

        with pytest.raises(RemoteFailureError) as exc_info:
            await adapter.get_node("/")

        assert exc_info.value.path == "/"
        assert exc_info.value.operation == "get_node"
        assert isinstance(exc_info.value.__cause__, KeyError)

    @pytest.mark.asyncio
    async def test_failures_are_not_retried(self):
        base_adapter = InMemoryAccessAdapter()
        base_adapter.fail_on['list_children'] = RemoteFailureError("flaky")
        adapter = ErrorHandlingAdapter(base_adapter, CollectErrorsPolicy(verbose=False))

        with pytest.raises(RemoteFailureError):
            await adapter.list_children("/")

        assert base_adapter.call_counts['list_children'] == 1
        assert len(adapter.get_policy().errors) == 1

    @pytest.mark.asyncio
    async def test_async_mock_base(self):
        """Awaitable results from any callable get error handling."""
        base_adapter = Mock()
        base_adapter.list_children = AsyncMock(side_effect=PermissionError("denied"))
        adapter = ErrorHandlingAdapter(base_adapter)

        with pytest.raises(RemoteFailureError) as exc_info:
            await adapter.list_children("/secret")
        assert exc_info.value.path == "/secret"

    def test_non_async_method_passthrough(self):
        base_adapter = InMemoryAccessAdapter()
        adapter = ErrorHandlingAdapter(base_adapter)
        assert adapter.supports_capability('session') is True

    def test_attribute_access(self):
        """Non-callable attributes should be accessible."""
        base_adapter = InMemoryAccessAdapter()
        adapter = ErrorHandlingAdapter(base_adapter)
        assert adapter.closed is False
        assert adapter.call_counts is base_adapter.call_counts

    @pytest.mark.asyncio
    async def test_context_manager_closes_base(self):
        base_adapter = InMemoryAccessAdapter()
        async with ErrorHandlingAdapter(base_adapter) as adapter:
            await adapter.list_children("/")
        assert base_adapter.closed

    @pytest.mark.asyncio
    async def test_failing_close_is_normalized(self):
        base_adapter = Mock()
        base_adapter.close = AsyncMock(side_effect=OSError("socket"))
        adapter = ErrorHandlingAdapter(base_adapter)

        with pytest.raises(RemoteFailureError) as exc_info:
            await adapter.close()
        assert exc_info.value.operation == "close"

    def test_policy_accessors(self):
        adapter = ErrorHandlingAdapter(InMemoryAccessAdapter())
        assert isinstance(adapter.get_policy(), FailFastPolicy)

        policy = CollectErrorsPolicy(verbose=False)
        adapter.set_policy(policy)
        assert adapter.get_policy() is policy
        assert adapter.get_adapter_chain() == ['ErrorHandlingAdapter', 'InMemoryAccessAdapter']

    def test_create_resilient_adapter(self):
        base = InMemoryAccessAdapter()
        assert isinstance(create_resilient_adapter(base).get_policy(), FailFastPolicy)
        collecting = create_resilient_adapter(base, collect=True, verbose=False)
        assert isinstance(collecting.get_policy(), CollectErrorsPolicy)
        assert collecting.get_base_adapter() is base
