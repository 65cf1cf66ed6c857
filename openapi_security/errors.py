"""Evaluation errors for openapi-security.

All failures surface as a single exception type, ``EvaluationError``, tagged
with an ``ErrorKind``. Callers branch on ``exc.kind`` (never on message text)
to choose a transport-level response:

  ErrorKind.OPERATION_NOT_FOUND:
      Routing error. The (path, method) pair is not in the definition.
  ErrorKind.SECURING_FUNCTION_NOT_FOUND:
      Configuration error. An operation declares a scheme that has no
      checking function. Raised immediately, never aggregated.
  ErrorKind.REQUEST_NOT_SECURED:
      Authentication failure. Every alternative was attempted and failed.
      ``exc.errors`` holds one ``SchemeFailure`` per failing check.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional, Sequence


class ErrorKind(enum.Enum):
    """Kinds of evaluation failure. The value is the display name."""

    OPERATION_NOT_FOUND = "OperationNotFound"
    SECURING_FUNCTION_NOT_FOUND = "SecuringFunctionNotFound"
    REQUEST_NOT_SECURED = "RequestNotSecured"


@dataclass(frozen=True)
class SchemeFailure:
    """One failed checking-function invocation."""

    name: str
    """Scheme name as declared in the security requirement."""
    error: BaseException
    """The error the checking function raised or returned."""


def _log_route(method: Optional[str], path: str) -> str:
    return f"{method} {path}"


class EvaluationError(Exception):
    """Raised when a request cannot be shown to satisfy its operation's security.

    Build instances through the ``operation_not_found()``,
    ``securing_function_not_found()`` and ``request_not_secured()``
    constructors so the message and payload always agree with ``kind``.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        method: Optional[str],
        path: str,
        scheme: Optional[str] = None,
        errors: Sequence[SchemeFailure] = (),
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.method = method
        self.path = path
        self.scheme = scheme
        self.errors: tuple[SchemeFailure, ...] = tuple(errors)

    @property
    def name(self) -> str:
        return self.kind.value

    @classmethod
    def operation_not_found(cls, method: Optional[str], path: str) -> "EvaluationError":
        return cls(
            ErrorKind.OPERATION_NOT_FOUND,
            f"Could not find operation for request: {_log_route(method, path)}",
            method=method,
            path=path,
        )

    @classmethod
    def securing_function_not_found(
        cls, method: Optional[str], path: str, scheme: str
    ) -> "EvaluationError":
        return cls(
            ErrorKind.SECURING_FUNCTION_NOT_FOUND,
            f'Could not find "securities" function for "{scheme}": {_log_route(method, path)}',
            method=method,
            path=path,
            scheme=scheme,
        )

    @classmethod
    def request_not_secured(
        cls, method: Optional[str], path: str, errors: Sequence[SchemeFailure]
    ) -> "EvaluationError":
        return cls(
            ErrorKind.REQUEST_NOT_SECURED,
            f"Could not authenticate request: {_log_route(method, path)}",
            method=method,
            path=path,
            errors=errors,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialisable summary for logs and error responses.

        Underlying errors are reduced to their type name; their messages may
        carry credential details and are left out.
        """
        summary: dict[str, Any] = {
            "kind": self.name,
            "method": self.method,
            "path": self.path,
        }
        if self.scheme is not None:
            summary["scheme"] = self.scheme
        if self.errors:
            summary["errors"] = [
                {"name": failure.name, "error": type(failure.error).__name__}
                for failure in self.errors
            ]
        return summary

    def __repr__(self) -> str:
        return f"EvaluationError({self.name}, {self.message!r})"


class SchemeCheckFailed(Exception):
    """Failure recorded when a checking function returns anything other than
    ``None``, ``True`` or a ``CheckResult``.
    """

    def __init__(self, scheme: str, outcome: Any = False) -> None:
        super().__init__(
            f'Securing function for "{scheme}" rejected the request '
            f"(returned {type(outcome).__name__})"
        )
        self.scheme = scheme
        self.outcome = outcome
