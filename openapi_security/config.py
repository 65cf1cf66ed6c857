"""Config loading for openapi-security.

Reads `.openapi-security/config.yaml` (or `~/.openapi-security/config.yaml`).
Raises SystemExit on parse errors or missing `version` field.
If no config file is found, returns default values (safe to run without config).

Config search order:
  1. `config_path` argument (if provided, for testing or explicit override)
  2. OPENAPI_SECURITY_CONFIG environment variable (if set)
  3. `.openapi-security/config.yaml` (working directory)
  4. `~/.openapi-security/config.yaml` (home directory)

Environment variable overrides:
  OPENAPI_SECURITY_LOG_LEVEL — overrides logging.level
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import NoReturn, Optional

import yaml

from openapi_security.constants import (
    DEFAULT_MISCONFIGURED_STATUS,
    DEFAULT_NOT_FOUND_STATUS,
    DEFAULT_UNAUTHORIZED_STATUS,
    ENV_CONFIG_PATH,
    ENV_LOG_LEVEL,
)
from openapi_security.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

# ─── Validation sets ─────────────────────────────────────────────────────────

VALID_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

# "pass": unmapped routes go to the next handler untouched.
# "reject": unmapped routes get not_found_status.
VALID_NOT_FOUND_POLICIES: frozenset[str] = frozenset({"pass", "reject"})

DEFAULT_CONFIG_PATHS = [
    ".openapi-security/config.yaml",
    os.path.expanduser("~/.openapi-security/config.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class LoggingConfig:
    """structlog output configuration."""

    level: str = "INFO"
    json: bool = True


@dataclass
class MiddlewareConfig:
    """HTTP mapping used by OpenAPISecurityMiddleware."""

    unauthorized_status: int = DEFAULT_UNAUTHORIZED_STATUS
    misconfigured_status: int = DEFAULT_MISCONFIGURED_STATUS
    operation_not_found: str = "pass"  # "pass" | "reject"
    not_found_status: int = DEFAULT_NOT_FOUND_STATUS
    exclude_paths: list[str] = field(default_factory=list)


@dataclass
class Config:
    """Root configuration object populated from config.yaml.

    All fields have safe defaults; the library works without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    middleware: MiddlewareConfig = field(default_factory=MiddlewareConfig)
    path: Optional[str] = None  # Path to the loaded config file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.

        Args:
            raw:  Parsed YAML dict (must already be validated for version field).
            path: Path to the config file.

        Raises:
            SystemExit(1): On an invalid logging.level, middleware status code
                           or middleware.operation_not_found value.
        """
        # ── Logging ───────────────────────────────────────────────────────────
        logging_raw = raw.get("logging") or {}
        level = str(logging_raw.get("level", "INFO")).upper()
        if level not in VALID_LOG_LEVELS:
            _fail(
                f"CONFIG ERROR: Invalid logging.level: '{level}'. "
                f"Supported values: {sorted(VALID_LOG_LEVELS)}."
            )
        logging_config = LoggingConfig(
            level=level,
            json=bool(logging_raw.get("json", True)),
        )

        # ── Middleware ────────────────────────────────────────────────────────
        middleware_raw = raw.get("middleware") or {}
        policy = middleware_raw.get("operation_not_found", "pass")
        if policy not in VALID_NOT_FOUND_POLICIES:
            _fail(
                f"CONFIG ERROR: Invalid middleware.operation_not_found: '{policy}'. "
                f"Supported values: {sorted(VALID_NOT_FOUND_POLICIES)}."
            )
        middleware = MiddlewareConfig(
            unauthorized_status=_status(middleware_raw, "unauthorized_status", DEFAULT_UNAUTHORIZED_STATUS),
            misconfigured_status=_status(middleware_raw, "misconfigured_status", DEFAULT_MISCONFIGURED_STATUS),
            operation_not_found=policy,
            not_found_status=_status(middleware_raw, "not_found_status", DEFAULT_NOT_FOUND_STATUS),
            exclude_paths=list(middleware_raw.get("exclude_paths") or []),
        )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            logging=logging_config,
            middleware=middleware,
            path=path,
        )


def _fail(msg: str) -> NoReturn:
    print(msg, file=sys.stderr)
    raise SystemExit(1)


def _status(section: dict, key: str, default: int) -> int:
    """Read an HTTP status code; SystemExit(1) unless it is an int in 100-599."""
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or not 100 <= value <= 599:
        _fail(f"CONFIG ERROR: middleware.{key} must be an HTTP status code, got '{value}'.")
    return value


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate openapi-security configuration.

    Search order:
      1. ``config_path`` argument
      2. ``OPENAPI_SECURITY_CONFIG`` environment variable
      3. ``.openapi-security/config.yaml`` (current working directory)
      4. ``~/.openapi-security/config.yaml`` (home directory)

    If no file is found at any of these paths, returns default Config (not an error).
    If a file is found but invalid, writes error to stderr and raises SystemExit(1).

    ``OPENAPI_SECURITY_LOG_LEVEL`` is applied afterwards whether or not a
    config file was found.

    Raises:
        SystemExit(1): On YAML parse error, missing ``version`` field, unsupported
                       version, or any invalid value.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get(ENV_CONFIG_PATH)
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.info("No config file found, using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    # ── Parse config file ─────────────────────────────────────────────────────
    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "Check the YAML syntax and try again."
        )
    except OSError as exc:
        _fail(f"CONFIG ERROR: Could not read {found_path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            _fail(
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        _fail(
            f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version")
    if version is None:
        _fail(
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
    if version not in SUPPORTED_VERSIONS:
        _fail(
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        log_level=config.logging.level,
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Raises:
        SystemExit(1): If OPENAPI_SECURITY_LOG_LEVEL is set to an unknown level.
    """
    env_level = os.environ.get(ENV_LOG_LEVEL)
    if env_level is not None:
        level = env_level.upper()
        if level not in VALID_LOG_LEVELS:
            _fail(
                f"CONFIG ERROR: {ENV_LOG_LEVEL} environment variable is not a valid "
                f"log level: '{env_level}'"
            )
        config.logging.level = level


def apply_logging_config(config: Config) -> None:
    """Reconfigure structlog from ``config.logging``."""
    configure_logging(log_level=config.logging.level, json_output=config.logging.json)
