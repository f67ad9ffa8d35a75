"""Validation module for schema models."""

from edmx_to_types.validation.errors import (
    ErrorCodes,
    ValidationIssue,
    ValidationLocation,
    ValidationResult,
    ValidationSeverity,
)
from edmx_to_types.validation.validator import (
    SchemaValidator,
    ValidationError,
    raise_for_result,
)

__all__ = [
    "ErrorCodes",
    "SchemaValidator",
    "ValidationError",
    "ValidationIssue",
    "ValidationLocation",
    "ValidationResult",
    "ValidationSeverity",
    "raise_for_result",
]
