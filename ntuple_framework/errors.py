"""NTuple Framework - Exceptions"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised for invalid model geometry, arguments or candidate shapes."""


class UnsupportedOperationError(NotImplementedError):
    """Raised when a model variant does not provide a capability."""


class DistributionError(RuntimeError):
    """Raised when a categorical distribution no longer covers [0, 1)."""
