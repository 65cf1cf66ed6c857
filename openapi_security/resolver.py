"""Operation lookup for openapi-security.

``resolve_operation()`` maps an exact (path, method) pair to the Operation
object in an OpenAPI-style definition. Path templates are not expanded: the
caller passes the definition's key (``/pets/{petId}``), not the concrete URL.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from openapi_security.errors import EvaluationError


def request_method(request: Any) -> Optional[str]:
    """Return the HTTP method of ``request``.

    Accepts objects with a ``method`` attribute (Starlette requests) and
    mappings with a ``"method"`` key (plain dicts).
    """
    method = getattr(request, "method", None)
    if method is None and isinstance(request, Mapping):
        method = request.get("method")
    return method


def resolve_operation(
    definition: Optional[Mapping[str, Any]],
    path: str,
    method: Optional[str],
) -> Mapping[str, Any]:
    """Look up the Operation object for ``path`` and ``method``.

    Args:
        definition: ``{"paths": {path: {method: operation}}}`` or None.
        path:       Exact key under ``paths``.
        method:     HTTP method, any case. Normalised to lowercase.

    Returns:
        The operation mapping. An empty mapping is a valid operation.

    Raises:
        EvaluationError(OPERATION_NOT_FOUND): If the definition, the path
            entry or the method entry is missing or not a mapping.
    """
    paths = definition.get("paths") if isinstance(definition, Mapping) else None
    path_item = paths.get(path) if isinstance(paths, Mapping) else None
    operation = None
    if isinstance(path_item, Mapping) and isinstance(method, str):
        operation = path_item.get(method.lower())
    if not isinstance(operation, Mapping):
        raise EvaluationError.operation_not_found(method, path)
    return operation


def security_requirements(operation: Mapping[str, Any]) -> Sequence[Mapping[str, Sequence[str]]]:
    """Return the operation's security alternatives, ``[]`` when none are declared."""
    return operation.get("security") or []
