"""Root test configuration for openapi-security.

Clears the config env vars for every test so a developer's shell environment
cannot leak into config loading.
"""

import pytest


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove OPENAPI_SECURITY_* overrides for the duration of each test."""
    monkeypatch.delenv("OPENAPI_SECURITY_CONFIG", raising=False)
    monkeypatch.delenv("OPENAPI_SECURITY_LOG_LEVEL", raising=False)


@pytest.fixture
def pets_definition() -> dict:
    """Definition with GET /pets secured by thing1 OR (thing2 AND thing3)."""
    return {
        "paths": {
            "/pets": {
                "get": {
                    "security": [
                        {"thing1": ["scope1"]},
                        {"thing2": ["scope2"], "thing3": ["scope3"]},
                    ]
                }
            }
        }
    }
