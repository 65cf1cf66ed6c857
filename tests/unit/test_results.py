"""Unit tests for openapi_security/results.py."""

from __future__ import annotations

import asyncio

import pytest

from openapi_security.errors import SchemeCheckFailed
from openapi_security.results import (
    CheckResult,
    SecuringFunction,
    SecurityContext,
    invoke_check,
    lookup_securing_function,
)


def _context() -> SecurityContext:
    return SecurityContext(definition={}, request={"method": "GET"}, path="/pets", scopes=["read"])


class TestCheckResult:

    def test_success(self) -> None:
        result = CheckResult.success()
        assert result.ok
        assert result.error is None

    def test_failure(self) -> None:
        error = RuntimeError("x")
        result = CheckResult.failure(error)
        assert not result.ok
        assert result.error is error

    def test_failure_requires_error(self) -> None:
        with pytest.raises(ValueError):
            CheckResult.failure(None)  # type: ignore[arg-type]

    @pytest.mark.parametrize("outcome", [None, True])
    def test_from_outcome_success_values(self, outcome) -> None:
        assert CheckResult.from_outcome(outcome, "key").ok

    @pytest.mark.parametrize("outcome", ["", 0, [], {}, "token-ok", 1, object()])
    def test_from_outcome_other_values_fail(self, outcome) -> None:
        """Only None and True count as success; any other return value fails."""
        result = CheckResult.from_outcome(outcome, "key")
        assert not result.ok
        assert isinstance(result.error, SchemeCheckFailed)
        assert result.error.scheme == "key"
        assert result.error.outcome is outcome

    def test_from_outcome_exception(self) -> None:
        error = ValueError("bad")
        assert CheckResult.from_outcome(error, "key").error is error

    def test_from_outcome_false(self) -> None:
        result = CheckResult.from_outcome(False, "key")
        assert isinstance(result.error, SchemeCheckFailed)
        assert "key" in str(result.error)

    def test_from_outcome_passes_check_result_through(self) -> None:
        result = CheckResult.failure(RuntimeError("x"))
        assert CheckResult.from_outcome(result, "key") is result

    def test_from_outcome_reraises_cancellation(self) -> None:
        with pytest.raises(asyncio.CancelledError):
            CheckResult.from_outcome(asyncio.CancelledError(), "key")


class TestSecurityContext:

    def test_mapping_access(self) -> None:
        context = _context()
        assert context["scopes"] == ["read"]
        assert context["path"] == "/pets"

    def test_unknown_key(self) -> None:
        with pytest.raises(KeyError):
            _context()["headers"]


class TestLookup:

    def test_missing_registry(self) -> None:
        assert lookup_securing_function(None, "key") is None
        assert lookup_securing_function({}, "key") is None

    def test_callable_entry(self) -> None:
        async def check(context):
            return None

        assert lookup_securing_function({"key": check}, "key") is check

    def test_protocol_entry(self) -> None:
        class Checker:
            async def check(self, context):
                return None

        checker = Checker()
        assert isinstance(checker, SecuringFunction)
        found = lookup_securing_function({"key": checker}, "key")
        assert found == checker.check

    def test_unusable_entry(self) -> None:
        assert lookup_securing_function({"key": 42}, "key") is None

    def test_class_entry_counts_as_missing(self) -> None:
        """Registering the class instead of an instance is a configuration error."""

        class Checker:
            async def check(self, context):
                return None

        assert lookup_securing_function({"key": Checker}, "key") is None
        assert lookup_securing_function({"key": Checker()}, "key") is not None


class TestInvokeCheck:

    @pytest.mark.asyncio
    async def test_awaits_coroutines(self) -> None:
        async def check(context):
            return CheckResult.success()

        assert (await invoke_check(check, _context())).ok

    @pytest.mark.asyncio
    async def test_returns_sync_value(self) -> None:
        assert await invoke_check(lambda context: False, _context()) is False
