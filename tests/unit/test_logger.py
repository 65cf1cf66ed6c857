"""Unit tests for openapi_security/utils/logger.py."""

from __future__ import annotations

import importlib

import pytest
import structlog

import openapi_security
import openapi_security.utils.logger as logger_module


@pytest.fixture
def restore_structlog():
    yield
    structlog.reset_defaults()


class TestImportSideEffects:

    def test_import_keeps_host_structlog_config(self, restore_structlog) -> None:
        """Loading the package must not replace the host's processors."""
        renderer = structlog.processors.KeyValueRenderer()
        structlog.configure(processors=[renderer])

        importlib.reload(logger_module)
        importlib.reload(openapi_security)

        assert structlog.get_config()["processors"] == [renderer]

    def test_configure_logging_is_explicit(self, restore_structlog) -> None:
        logger_module.configure_logging(log_level="WARNING", json_output=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_request_context_binds_and_unbinds(self) -> None:
        with logger_module.request_context(method="GET", path="/pets"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["method"] == "GET"
            assert bound["path"] == "/pets"
        assert "method" not in structlog.contextvars.get_contextvars()
