"""Checking-function contracts: context, result type and invocation.

A checking function ("securing function") verifies one security scheme for one
request. Two shapes are accepted in a registry:

  - an async (or plain) callable taking a ``SecurityContext``;
  - an object implementing the ``SecuringFunction`` protocol, i.e. with an
    async ``check(context)`` method.

Outcomes are normalised to ``CheckResult`` by ``CheckResult.from_outcome()``:

  ===============================  =========================================
  checking function does            CheckResult
  ===============================  =========================================
  returns None / True               success
  returns CheckResult               as returned
  returns anything else             failure(SchemeCheckFailed)
  (False, "", 0, [], objects ...)
  raises Exception                  failure(the exception)
  raises other BaseException        re-raised (cancellation is never a result)
  ===============================  =========================================
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from openapi_security.errors import SchemeCheckFailed


@dataclass(frozen=True)
class SecurityContext:
    """Everything a checking function receives for one scheme.

    Supports ``ctx.scopes`` and ``ctx["scopes"]`` alike.
    """

    definition: Mapping[str, Any]
    request: Any
    path: str
    scopes: Sequence[str]

    def __getitem__(self, key: str) -> Any:
        if key not in self.__dataclass_fields__:
            raise KeyError(key)
        return getattr(self, key)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single checking-function call."""

    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls) -> "CheckResult":
        return cls()

    @classmethod
    def failure(cls, error: BaseException) -> "CheckResult":
        if error is None:
            raise ValueError("CheckResult.failure() requires an error")
        return cls(error=error)

    @classmethod
    def from_outcome(cls, outcome: Any, scheme: str) -> "CheckResult":
        """Normalise a settled value from ``asyncio.gather(..., return_exceptions=True)``.

        Args:
            outcome: The value returned, or the exception raised, by the check.
            scheme:  Scheme name, used in the ``SchemeCheckFailed`` message.

        Raises:
            BaseException: ``outcome`` itself when it is not an ``Exception``
                (e.g. ``asyncio.CancelledError``).
        """
        if isinstance(outcome, CheckResult):
            return outcome
        if isinstance(outcome, Exception):
            return cls.failure(outcome)
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None or outcome is True:
            return cls.success()
        return cls.failure(SchemeCheckFailed(scheme, outcome))


@runtime_checkable
class SecuringFunction(Protocol):
    """Object-style checking function.

    Implementations return ``CheckResult`` (or ``None`` for success) and may
    also raise to signal failure.
    """

    async def check(self, context: SecurityContext) -> Optional[CheckResult]:
        ...


CheckingCallable = Callable[[SecurityContext], Union[Awaitable[Any], Any]]
SecuringEntry = Union[SecuringFunction, CheckingCallable]
SecuritiesRegistry = Mapping[str, SecuringEntry]


def lookup_securing_function(
    securities: Optional[SecuritiesRegistry], scheme: str
) -> Optional[CheckingCallable]:
    """Return the callable to invoke for ``scheme``, or None if there is none.

    Callable entries are used as-is; otherwise the entry's ``check`` method is
    used. Classes count as missing: register an instance, not the class.
    Entries offering neither count as missing.
    """
    if not securities:
        return None
    entry = securities.get(scheme)
    if entry is None or inspect.isclass(entry):
        return None
    if callable(entry):
        return entry
    check = getattr(entry, "check", None)
    if callable(check):
        return check
    return None


async def invoke_check(func: CheckingCallable, context: SecurityContext) -> Any:
    """Call a checking function, awaiting it when it returns an awaitable."""
    outcome = func(context)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return outcome
