"""Starlette middleware running security evaluation on every request.

Maps evaluation failures to HTTP responses by ``EvaluationError.kind``:

  REQUEST_NOT_SECURED          → unauthorized_status (401), code "unauthorized"
  SECURING_FUNCTION_NOT_FOUND  → misconfigured_status (500), code "security_misconfigured"
  OPERATION_NOT_FOUND          → passed through ("pass", default) or
                                 not_found_status (404) when set to "reject"

Registration:
    security = openapi_request_security(definition, securities)
    application.add_middleware(OpenAPISecurityMiddleware, security=security)

The path handed to the evaluator defaults to ``request.url.path``. Apps with
templated paths (``/pets/{petId}``) pass ``path_resolver`` to map a request to
its definition key.
"""

from __future__ import annotations

from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from openapi_security.config import MiddlewareConfig
from openapi_security.errors import ErrorKind, EvaluationError
from openapi_security.evaluator import RequestSecurity
from openapi_security.utils.logger import get_logger, request_context

logger = get_logger(__name__)

PathResolver = Callable[[Request], str]


def _default_path_resolver(request: Request) -> str:
    return request.url.path


def _error_body(message: str, code: str, **extra: object) -> dict:
    error: dict = {"message": message, "code": code}
    error.update(extra)
    return {"error": error}


class OpenAPISecurityMiddleware(BaseHTTPMiddleware):
    """Reject requests that do not satisfy their operation's security.

    On success the downstream handler sees ``request.state.security_evaluated``
    set to True. Paths in ``MiddlewareConfig.exclude_paths`` skip evaluation
    and leave it unset.
    """

    def __init__(
        self,
        app: ASGIApp,
        security: RequestSecurity,
        config: Optional[MiddlewareConfig] = None,
        path_resolver: Optional[PathResolver] = None,
    ) -> None:
        super().__init__(app)
        self.security = security
        self.config = config or MiddlewareConfig()
        self.path_resolver = path_resolver or _default_path_resolver
        self._excluded: frozenset[str] = frozenset(self.config.exclude_paths)

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        path = self.path_resolver(request)
        if path in self._excluded:
            return await call_next(request)

        with request_context(method=request.method, path=path):
            try:
                await self.security.evaluate(request, path)
            except EvaluationError as exc:
                response = self._error_response(exc)
                if response is not None:
                    return response
                return await call_next(request)

        request.state.security_evaluated = True
        return await call_next(request)

    def _error_response(self, exc: EvaluationError) -> Optional[Response]:
        """Build the response for ``exc``; None means let the request through."""
        if exc.kind is ErrorKind.REQUEST_NOT_SECURED:
            return JSONResponse(
                status_code=self.config.unauthorized_status,
                content=_error_body(
                    "Request could not be authenticated",
                    "unauthorized",
                    schemes=sorted({failure.name for failure in exc.errors}),
                ),
            )

        if exc.kind is ErrorKind.SECURING_FUNCTION_NOT_FOUND:
            # Scheme name stays in the logs; clients only learn it is a server fault.
            return JSONResponse(
                status_code=self.config.misconfigured_status,
                content=_error_body(
                    "Security is misconfigured for this operation",
                    "security_misconfigured",
                ),
            )

        if self.config.operation_not_found == "reject":
            logger.warning("Operation not found", method=exc.method, path=exc.path)
            return JSONResponse(
                status_code=self.config.not_found_status,
                content=_error_body("Operation not found", "operation_not_found"),
            )
        return None
