"""
Shared utilities for the connector authentication layer.

This package aggregates common building blocks consumed by every part of
the library:

- config: Settings via pydantic-settings
- logging: Structured logging with trace correlation
- errors: Canonical error types and responses

Do not import from connector_auth into shared/.
"""
