"""Declaration validator base classes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from edmx_to_types.ir.types import DeclarationKind

if TYPE_CHECKING:
    from edmx_to_types.ir.declarations import SchemaModel, TypeDeclaration
    from edmx_to_types.validation.errors import ValidationResult


class DeclarationValidator(ABC):
    """A check run once per entity or complex type.

    Subclasses narrow ``kinds`` to the declaration kinds they care about and
    implement :meth:`check`.
    """

    kinds: ClassVar[frozenset[DeclarationKind]] = frozenset(
        {DeclarationKind.ENTITY, DeclarationKind.COMPLEX}
    )

    def validate(self, model: SchemaModel, result: ValidationResult) -> None:
        """Run :meth:`check` on every matching declaration of the model."""
        for decl in model.declarations:
            if decl.kind in self.kinds:
                self.check(decl, model, result)

    @abstractmethod
    def check(
        self,
        decl: TypeDeclaration,
        model: SchemaModel,
        result: ValidationResult,
    ) -> None:
        """Add issues found on one declaration to result.

        Args:
        ----
            decl: The declaration being checked.
            model: The whole model, for looking up referenced declarations.
            result: The result object to add issues to.

        """


class ValidatorChain:
    """Runs declaration validators in registration order."""

    def __init__(self, *validators: DeclarationValidator) -> None:
        self.validators = list(validators)

    def validate(self, model: SchemaModel, result: ValidationResult) -> None:
        for validator in self.validators:
            validator.validate(model, result)
