"""Shared constants for openapi-security.

Status codes, environment variable names and the set of OpenAPI operation keys
used across modules are defined here. Import from here rather than repeating
literals in other modules.
"""

# ─── OpenAPI path item keys ──────────────────────────────────────────────────

# Keys of an OpenAPI Path Item object that hold Operation objects.
# Everything else under a path (``parameters``, ``summary``, ``servers`` ...)
# is not an operation and is skipped when walking a definition.
HTTP_METHODS: frozenset[str] = frozenset(
    {"get", "put", "post", "delete", "options", "head", "patch", "trace"}
)

# ─── Middleware response defaults ────────────────────────────────────────────

# Returned when every security alternative failed for a request.
DEFAULT_UNAUTHORIZED_STATUS: int = 401

# Returned when an operation names a scheme with no checking function.
# This is a deployment error, not a client error.
DEFAULT_MISCONFIGURED_STATUS: int = 500

# Returned for unmapped routes when operation_not_found is "reject".
DEFAULT_NOT_FOUND_STATUS: int = 404

# ─── Environment variables ───────────────────────────────────────────────────

ENV_CONFIG_PATH: str = "OPENAPI_SECURITY_CONFIG"
ENV_LOG_LEVEL: str = "OPENAPI_SECURITY_LOG_LEVEL"
