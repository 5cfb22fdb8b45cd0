from __future__ import annotations


class ValidationError(ValueError):
    """Request input is missing or malformed. Nothing has been computed yet."""


class InternalInvariantViolation(RuntimeError):
    """The engine hit inconsistent data and must abort the whole request."""


class OracleFailure(Exception):
    """An optional suggestion source gave nothing usable. Always absorbed."""
