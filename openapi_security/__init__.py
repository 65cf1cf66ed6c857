"""openapi-security: evaluate requests against OpenAPI security requirements.

Public API:
  - openapi_request_security()         — build an evaluator for a definition + registry
  - RequestSecurity                    — the evaluator; ``await secure(request, path)``
  - resolve_operation()                — exact (path, method) → operation lookup
  - find_missing_securing_functions()  — startup check for schemes without a function
  - assert_securities_complete()       — same check, raising on the first gap
  - SecurityContext / CheckResult      — what checking functions receive and return
  - SecuringFunction                   — protocol for object-style checking functions
  - EvaluationError / ErrorKind        — the single error type and its kinds
  - SchemeFailure                      — one aggregated (scheme, error) pair
  - OpenAPISecurityMiddleware          — Starlette adapter (import from .middleware)
"""

from __future__ import annotations

from openapi_security.errors import (
    ErrorKind,
    EvaluationError,
    SchemeCheckFailed,
    SchemeFailure,
)
from openapi_security.evaluator import RequestSecurity, openapi_request_security
from openapi_security.resolver import resolve_operation
from openapi_security.results import CheckResult, SecuringFunction, SecurityContext
from openapi_security.validation import (
    MissingSecuringFunction,
    assert_securities_complete,
    find_missing_securing_functions,
)

__all__ = [
    "CheckResult",
    "ErrorKind",
    "EvaluationError",
    "MissingSecuringFunction",
    "RequestSecurity",
    "SchemeCheckFailed",
    "SchemeFailure",
    "SecuringFunction",
    "SecurityContext",
    "assert_securities_complete",
    "find_missing_securing_functions",
    "openapi_request_security",
    "resolve_operation",
]
