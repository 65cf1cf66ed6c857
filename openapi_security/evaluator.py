"""Security requirement evaluation for OpenAPI-style definitions.

Provides ``openapi_request_security()``: builds a ``RequestSecurity`` evaluator
bound to a definition and a registry of checking functions. Awaiting the
evaluator with a request and its (pre-resolved) path either returns the
request object unchanged or raises ``EvaluationError``.

Evaluation rules:
  - An operation's ``security`` list holds alternatives. The request passes
    when ANY alternative passes (OR), tried in declaration order.
  - An alternative passes when ALL of its schemes pass (AND). Its checking
    functions run concurrently and are all awaited, even after one fails.
  - The first fully passing alternative ends evaluation. Later alternatives
    are never started.
  - A scheme with no checking function aborts evaluation immediately with
    SECURING_FUNCTION_NOT_FOUND. This is never aggregated.
  - When every alternative fails, REQUEST_NOT_SECURED carries one
    ``SchemeFailure`` per failed check, across all attempted alternatives.
  - No ``security`` (or an empty list) means no security: the request passes.
    A list made only of empty requirement objects also passes.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Sequence

from openapi_security.errors import EvaluationError, SchemeFailure
from openapi_security.resolver import request_method, resolve_operation, security_requirements
from openapi_security.results import (
    CheckResult,
    CheckingCallable,
    SecuritiesRegistry,
    SecurityContext,
    invoke_check,
    lookup_securing_function,
)
from openapi_security.utils.logger import get_logger
from openapi_security.validation import assert_securities_complete

logger = get_logger(__name__)


class RequestSecurity:
    """Evaluates requests against the security declared in ``definition``.

    Holds no per-request state; one instance can serve concurrent
    evaluations. ``definition`` and ``securities`` are only read.
    """

    def __init__(
        self,
        definition: Optional[Mapping[str, Any]],
        securities: Optional[SecuritiesRegistry],
    ) -> None:
        self.definition = definition
        self.securities: SecuritiesRegistry = securities or {}

    async def __call__(self, request: Any, path: str) -> Any:
        return await self.evaluate(request, path)

    async def evaluate(self, request: Any, path: str) -> Any:
        """Check ``request`` against the operation found at ``path``.

        Args:
            request: Any object with a ``method`` attribute or ``"method"`` key.
            path:    The definition's exact path key for this request.

        Returns:
            ``request`` itself (identity) when security is satisfied.

        Raises:
            EvaluationError: OPERATION_NOT_FOUND, SECURING_FUNCTION_NOT_FOUND
                or REQUEST_NOT_SECURED.
        """
        method = request_method(request)
        operation = resolve_operation(self.definition, path, method)
        requirements = security_requirements(operation)

        if not requirements:
            logger.debug("No security declared", method=method, path=path)
            return request

        failures: list[SchemeFailure] = []
        for index, requirement in enumerate(requirements):
            if await self._evaluate_requirement(requirement, request, path, method, failures):
                logger.debug(
                    "Request secured",
                    method=method,
                    path=path,
                    alternative=index,
                    schemes=sorted(requirement),
                )
                return request

        if failures:
            logger.warning(
                "Request not secured",
                method=method,
                path=path,
                alternatives=len(requirements),
                failed_schemes=[failure.name for failure in failures],
            )
            raise EvaluationError.request_not_secured(method, path, failures)

        # No checking function ran, so there is nothing to report.
        return request

    async def _evaluate_requirement(
        self,
        requirement: Mapping[str, Sequence[str]],
        request: Any,
        path: str,
        method: Optional[str],
        failures: list[SchemeFailure],
    ) -> bool:
        """Run every scheme of one alternative concurrently.

        Appends failed schemes to ``failures`` in declaration order.

        Returns:
            True when every scheme in ``requirement`` succeeded.
        """
        checks: list[tuple[str, CheckingCallable, SecurityContext]] = []
        for scheme, scopes in requirement.items():
            func = lookup_securing_function(self.securities, scheme)
            if func is None:
                logger.error(
                    "Securing function not found",
                    method=method,
                    path=path,
                    scheme=scheme,
                )
                raise EvaluationError.securing_function_not_found(method, path, scheme)
            context = SecurityContext(
                definition=self.definition,
                request=request,
                path=path,
                scopes=scopes,
            )
            checks.append((scheme, func, context))

        outcomes = await asyncio.gather(
            *(invoke_check(func, context) for _, func, context in checks),
            return_exceptions=True,
        )

        successes = 0
        for (scheme, _, _), outcome in zip(checks, outcomes):
            result = CheckResult.from_outcome(outcome, scheme)
            if result.ok:
                successes += 1
            else:
                failures.append(SchemeFailure(name=scheme, error=result.error))
        return successes == len(requirement)


def openapi_request_security(
    definition: Optional[Mapping[str, Any]],
    securities: Optional[SecuritiesRegistry],
    validate: bool = False,
) -> RequestSecurity:
    """Build a request evaluator for ``definition``.

    Args:
        definition: ``{"paths": {path: {method: operation}}}``.
        securities: Scheme name → checking function.
        validate:   When True, fail now if any operation names a scheme
                    missing from ``securities`` instead of at request time.

    Raises:
        EvaluationError(SECURING_FUNCTION_NOT_FOUND): Only when ``validate``
            is set and a declared scheme has no checking function.
    """
    if validate:
        assert_securities_complete(definition, securities)
    return RequestSecurity(definition, securities)
