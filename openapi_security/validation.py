"""Startup validation of a securities registry against a definition.

A scheme declared in the definition with no checking function only surfaces as
SECURING_FUNCTION_NOT_FOUND when a request for that operation arrives. Running
``assert_securities_complete()`` at startup surfaces it before any traffic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from openapi_security.constants import HTTP_METHODS
from openapi_security.errors import EvaluationError
from openapi_security.results import SecuritiesRegistry, lookup_securing_function
from openapi_security.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, order=True)
class MissingSecuringFunction:
    """A scheme declared by an operation with no usable checking function."""

    scheme: str
    path: str
    method: str


def find_missing_securing_functions(
    definition: Optional[Mapping[str, Any]],
    securities: Optional[SecuritiesRegistry],
) -> list[MissingSecuringFunction]:
    """Walk every operation and report schemes without a checking function.

    Path items that are not mappings and keys that are not HTTP methods
    (``parameters``, ``summary`` ...) are skipped.

    Returns:
        Sorted list of missing entries; empty when the registry is complete.
    """
    missing: set[MissingSecuringFunction] = set()
    paths = definition.get("paths") if isinstance(definition, Mapping) else None
    if not isinstance(paths, Mapping):
        return []

    for path, path_item in paths.items():
        if not isinstance(path_item, Mapping):
            continue
        for method, operation in path_item.items():
            if not isinstance(method, str) or method.lower() not in HTTP_METHODS:
                continue
            if not isinstance(operation, Mapping):
                continue
            for requirement in operation.get("security") or []:
                for scheme in requirement:
                    if lookup_securing_function(securities, scheme) is None:
                        missing.add(
                            MissingSecuringFunction(scheme=scheme, path=path, method=method.upper())
                        )
    return sorted(missing)


def assert_securities_complete(
    definition: Optional[Mapping[str, Any]],
    securities: Optional[SecuritiesRegistry],
) -> None:
    """Raise for the first declared scheme with no checking function.

    Raises:
        EvaluationError(SECURING_FUNCTION_NOT_FOUND): Naming the scheme and
            the first operation (by sort order) that declares it.
    """
    missing = find_missing_securing_functions(definition, securities)
    if not missing:
        return
    logger.error(
        "Securities registry incomplete",
        schemes=sorted({entry.scheme for entry in missing}),
        operations=len(missing),
    )
    first = missing[0]
    raise EvaluationError.securing_function_not_found(first.method, first.path, first.scheme)
