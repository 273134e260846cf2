from __future__ import annotations


class InstanceError(ValueError):
    """Raised when a knapsack instance violates its domain constraints."""


class OracleUnavailable(RuntimeError):
    """Raised when a solving oracle cannot be created or reports an invalid model."""
