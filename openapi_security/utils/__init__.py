"""Internal helpers for openapi-security."""
