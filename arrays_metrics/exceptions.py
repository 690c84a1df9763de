"""
Custom exceptions for arrays metrics collection.
Kept minimal - only what's needed for clear error handling.
"""

from typing import Any


class ArraysMetricsError(Exception):
    """Base exception for metrics collection errors."""
    pass


class ConfigurationError(ArraysMetricsError):
    """Raised for invalid settings (thresholds, worker counts, field policies)."""
    pass


class VcfFormatError(ArraysMetricsError):
    """Raised when the input VCF is missing required structure or header lines."""
    pass


class DataIntegrityError(ArraysMetricsError):
    """Raised when partial results cannot be combined safely.

    Attributes:
        field: Name of the offending field (or sample) if known
        left: Value held by the first partial
        right: Value held by the second partial
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        left: Any = None,
        right: Any = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.left = left
        self.right = right
