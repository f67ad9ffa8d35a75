"""Intermediate Representation (IR) for schema resolution.

The IR sits between the pydantic raw schema tree and the renderers:

1. Normalizes declarations into immutable dataclasses
2. Resolves type references to target-agnostic descriptors
3. Plans enum member values and their wire codec
4. Records per-declaration dependency sets for import generation
"""

from edmx_to_types.ir.declarations import (
    EnumMember,
    EnumType,
    NavigationReference,
    Property,
    SchemaModel,
    TypeDeclaration,
    qualify,
    split_qualified,
)
from edmx_to_types.ir.enums import EnumCodec, EnumPlan, InvalidEnumMemberError
from edmx_to_types.ir.resolved import (
    DependencySet,
    ResolvedDeclaration,
    ResolvedField,
    ResolvedModel,
)
from edmx_to_types.ir.types import (
    DeclarationKind,
    LazyReference,
    NullabilityStrategy,
    PrimitiveKind,
    TypeCategory,
    TypeReferenceDescriptor,
)

__all__ = [
    # Declarations
    "EnumMember",
    "EnumType",
    "NavigationReference",
    "Property",
    "SchemaModel",
    "TypeDeclaration",
    "qualify",
    "split_qualified",
    # Enums
    "EnumCodec",
    "EnumPlan",
    "InvalidEnumMemberError",
    # Resolved model
    "DependencySet",
    "ResolvedDeclaration",
    "ResolvedField",
    "ResolvedModel",
    # Type references
    "DeclarationKind",
    "LazyReference",
    "NullabilityStrategy",
    "PrimitiveKind",
    "TypeCategory",
    "TypeReferenceDescriptor",
]
