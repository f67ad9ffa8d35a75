"""Main validator combining all schema model checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from edmx_to_types.validation.base import ValidatorChain
from edmx_to_types.validation.errors import ValidationResult
from edmx_to_types.validation.reference_validators import (
    BaseTypeReferenceValidator,
    KeyPropertyValidator,
)

if TYPE_CHECKING:
    from edmx_to_types.ir.declarations import SchemaModel


class SchemaValidator:
    """Semantic checks on a normalized schema model.

    Only checks that matter for generating types are run: key properties
    and base type references. Unresolved property types, enum values and
    cycles are reported by the resolution steps themselves.
    """

    def __init__(self, strict: bool = False) -> None:
        """Initialize validator.

        Args:
        ----
            strict: If True, treat warnings as errors.

        """
        self.strict = strict
        self._chain = ValidatorChain(KeyPropertyValidator(), BaseTypeReferenceValidator())

    def validate(
        self,
        model: SchemaModel,
        result: ValidationResult | None = None,
    ) -> ValidationResult:
        """Validate a schema model.

        Args:
        ----
            model: The model to validate.
            result: Existing result to add issues to; a new one if omitted.

        Returns:
        -------
            ValidationResult with all issues found.

        """
        result = result if result is not None else ValidationResult()
        self._chain.validate(model, result)
        return result

    def validate_and_raise(self, model: SchemaModel) -> None:
        """Validate and raise exception if invalid.

        Raises
        ------
            ValidationError: If validation fails.

        """
        raise_for_result(self.validate(model), self.strict)


def raise_for_result(result: ValidationResult, strict: bool = False) -> None:
    """Raise ValidationError if result has errors (or warnings when strict)."""
    if not result.is_valid or (strict and result.warnings):
        raise ValidationError(result)


class ValidationError(Exception):
    """Raised when a resolution run ends with errors, or warnings in strict mode.

    The full result is kept on the exception so callers can print every issue.
    """

    def __init__(self, result: ValidationResult) -> None:
        self.result = result
        super().__init__(f"Validation failed: {result.summary()}")

    def format_issues(self) -> str:
        """Errors, then warnings, one per line."""
        lines = [f"ERROR: {issue}" for issue in self.result.errors]
        lines.extend(f"WARNING: {issue}" for issue in self.result.warnings)
        return "\n".join(lines)
