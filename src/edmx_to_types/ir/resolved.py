"""IR model for the fully resolved schema handed to renderers."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from edmx_to_types.validation.errors import ValidationResult

if TYPE_CHECKING:
    from edmx_to_types.ir.declarations import TypeDeclaration
    from edmx_to_types.ir.enums import EnumPlan
    from edmx_to_types.ir.types import LazyReference, TypeReferenceDescriptor
    from edmx_to_types.transform.context import ResolutionContext


@dataclass(frozen=True)
class DependencySet:
    """Declarations referenced directly by one declaration.

    Both tuples are sorted lexicographically and never contain the owning
    declaration itself.
    """

    type_names: tuple[str, ...] = ()
    enum_names: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Whether the declaration references nothing."""
        return not self.type_names and not self.enum_names

    def __iter__(self) -> Iterator[str]:
        """Iterate over all referenced qualified names, types first."""
        yield from self.type_names
        yield from self.enum_names


@dataclass(frozen=True)
class ResolvedField:
    """A property or navigation reference with its resolved type."""

    name: str
    descriptor: TypeReferenceDescriptor
    is_key: bool = False
    is_navigation: bool = False


@dataclass(frozen=True)
class ResolvedDeclaration:
    """An entity or complex type with everything a renderer needs.

    Attributes
    ----------
        declaration: The normalized declaration.
        rendered_name: Collision-free name for the target language.
        fields: Properties followed by navigation references.
        dependencies: Directly referenced declarations and enums.
        base: Deferred reference to a known base type, if any.

    """

    declaration: TypeDeclaration
    rendered_name: str
    fields: tuple[ResolvedField, ...]
    dependencies: DependencySet
    base: LazyReference | None = None

    @property
    def qualified_name(self) -> str:
        """``Namespace.Name`` of the declaration."""
        return self.declaration.qualified_name

    @property
    def key_fields(self) -> tuple[ResolvedField, ...]:
        """Fields that are part of the entity key."""
        return tuple(f for f in self.fields if f.is_key)


@dataclass
class ResolvedModel:
    """Output bundle of the resolution engine.

    Attributes
    ----------
        context: The resolution context used (config, aliases, names).
        declarations: Resolved entity and complex types.
        enums: Planned enumerations.
        result: Diagnostics collected during resolution.

    """

    context: ResolutionContext
    declarations: tuple[ResolvedDeclaration, ...] = ()
    enums: tuple[EnumPlan, ...] = ()
    result: ValidationResult = field(default_factory=ValidationResult)

    def get_declaration(self, qualified_name: str) -> ResolvedDeclaration | None:
        """Look up a resolved declaration by qualified name."""
        for decl in self.declarations:
            if decl.qualified_name == qualified_name:
                return decl
        return None

    def get_enum(self, qualified_name: str) -> EnumPlan | None:
        """Look up an enum plan by qualified name."""
        for plan in self.enums:
            if plan.qualified_name == qualified_name:
                return plan
        return None

    def dependency_graph(self) -> dict[str, DependencySet]:
        """Qualified name to dependency set, for every declaration."""
        return {d.qualified_name: d.dependencies for d in self.declarations}
