"""Unit tests for openapi_security/validation.py."""

from __future__ import annotations

import pytest

from openapi_security.errors import ErrorKind, EvaluationError
from openapi_security.validation import (
    MissingSecuringFunction,
    assert_securities_complete,
    find_missing_securing_functions,
)


async def _noop(context) -> None:
    return None


DEFINITION = {
    "paths": {
        "/pets": {
            "summary": "Pets",
            "parameters": [],
            "get": {"security": [{"apiKey": []}, {"oauth": ["pets:read"]}]},
            "post": {"security": [{"oauth": ["pets:write"], "mtls": []}]},
        },
        "/health": {"get": {}},
        "/owners": {"delete": {"security": [{"apiKey": []}]}},
        "/bad": None,
    }
}


class TestFindMissing:

    def test_complete_registry(self) -> None:
        securities = {"apiKey": _noop, "oauth": _noop, "mtls": _noop}
        assert find_missing_securing_functions(DEFINITION, securities) == []

    def test_reports_each_operation(self) -> None:
        missing = find_missing_securing_functions(DEFINITION, {"oauth": _noop})
        assert missing == [
            MissingSecuringFunction(scheme="apiKey", path="/owners", method="DELETE"),
            MissingSecuringFunction(scheme="apiKey", path="/pets", method="GET"),
            MissingSecuringFunction(scheme="mtls", path="/pets", method="POST"),
        ]

    def test_empty_registry(self) -> None:
        schemes = {entry.scheme for entry in find_missing_securing_functions(DEFINITION, None)}
        assert schemes == {"apiKey", "oauth", "mtls"}

    @pytest.mark.parametrize("definition", [None, {}, {"paths": None}, {"paths": []}])
    def test_no_paths(self, definition) -> None:
        assert find_missing_securing_functions(definition, {}) == []


class TestAssertComplete:

    def test_passes_when_complete(self) -> None:
        assert_securities_complete(DEFINITION, {"apiKey": _noop, "oauth": _noop, "mtls": _noop})

    def test_raises_for_first_missing(self) -> None:
        with pytest.raises(EvaluationError) as exc_info:
            assert_securities_complete(DEFINITION, {"oauth": _noop})
        exc = exc_info.value
        assert exc.kind is ErrorKind.SECURING_FUNCTION_NOT_FOUND
        assert exc.scheme == "apiKey"
        assert exc.method == "DELETE"
        assert exc.path == "/owners"
