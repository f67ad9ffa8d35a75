"""Validators for references between declarations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from edmx_to_types.ir.declarations import qualify, split_qualified
from edmx_to_types.ir.types import DeclarationKind
from edmx_to_types.validation.base import DeclarationValidator
from edmx_to_types.validation.errors import ErrorCodes, ValidationResult

if TYPE_CHECKING:
    from edmx_to_types.ir.declarations import SchemaModel, TypeDeclaration


def _base_name(decl: TypeDeclaration) -> str | None:
    if not decl.base_type:
        return None
    namespace, _ = split_qualified(decl.base_type)
    return decl.base_type if namespace else qualify(decl.namespace, decl.base_type)


def inherited_property_names(model: SchemaModel, decl: TypeDeclaration) -> set[str]:
    """Property names of a declaration and all of its known base types."""
    names: set[str] = set()
    visited: set[str] = set()
    current: TypeDeclaration | None = decl
    while current is not None and current.qualified_name not in visited:
        visited.add(current.qualified_name)
        names.update(current.property_names)
        base = _base_name(current)
        current = model.get_declaration(base) if base else None
    return names


class KeyPropertyValidator(DeclarationValidator):
    """Entity keys must name declared (or inherited) properties."""

    kinds = frozenset({DeclarationKind.ENTITY})

    def check(
        self,
        decl: TypeDeclaration,
        model: SchemaModel,
        result: ValidationResult,
    ) -> None:
        if not decl.keys:
            return
        available = inherited_property_names(model, decl)
        for key in decl.keys:
            if key in available:
                continue
            result.add_error(
                code=ErrorCodes.E002_UNDEFINED_KEY_PROPERTY,
                message=(
                    f"Entity '{decl.qualified_name}' declares key '{key}' "
                    f"but has no such property"
                ),
                path=f"{decl.qualified_name}.key.{key}",
                suggestion=f"Add a <Property Name=\"{key}\"> or fix the <PropertyRef>",
                key=key,
                available_properties=sorted(available),
            )


class BaseTypeReferenceValidator(DeclarationValidator):
    """Base types must point to a known entity or complex type."""

    def check(
        self,
        decl: TypeDeclaration,
        model: SchemaModel,
        result: ValidationResult,
    ) -> None:
        base = _base_name(decl)
        if base is None or model.get_declaration(base) is not None:
            return
        result.add_warning(
            code=ErrorCodes.W004_UNDEFINED_BASE_TYPE,
            message=(
                f"'{decl.qualified_name}' derives from '{decl.base_type}', "
                f"which is not declared"
            ),
            path=f"{decl.qualified_name}.base_type",
            suggestion="Declare the base type or load the schema that defines it",
            base_type=decl.base_type,
        )
