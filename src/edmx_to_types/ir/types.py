"""IR models for resolved type references.

A raw EDM type reference such as ``Collection(Sales.Item)`` or ``Edm.Int32``
is resolved into a ``TypeReferenceDescriptor``. Descriptors are independent of
the target language: renderers decide how each category and nullability
strategy is spelled.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PrimitiveKind(Enum):
    """EDM primitive kinds."""

    STRING = "string"
    BOOLEAN = "boolean"
    BYTE = "byte"  # unsigned 8-bit
    SBYTE = "sbyte"  # signed 8-bit
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    SINGLE = "single"
    DOUBLE = "double"
    DECIMAL = "decimal"
    GUID = "guid"
    DATE = "date"
    DATETIME = "datetime"
    DATETIME_OFFSET = "datetime_offset"
    TIME_OF_DAY = "time_of_day"
    DURATION = "duration"
    BINARY = "binary"

    @property
    def is_integer(self) -> bool:
        """Whether the kind is an integral number."""
        return self in _INTEGER_KINDS

    @property
    def is_empty_representable(self) -> bool:
        """Whether an empty value of this kind can stand for "absent".

        Text, binary and temporal kinds never need an optional wrapper.
        """
        return self in _EMPTY_REPRESENTABLE_KINDS


_INTEGER_KINDS = frozenset(
    {
        PrimitiveKind.BYTE,
        PrimitiveKind.SBYTE,
        PrimitiveKind.INT16,
        PrimitiveKind.INT32,
        PrimitiveKind.INT64,
    }
)

# Inclusive value range of each integer kind
INTEGER_RANGES: dict[PrimitiveKind, tuple[int, int]] = {
    PrimitiveKind.BYTE: (0, 2**8 - 1),
    PrimitiveKind.SBYTE: (-(2**7), 2**7 - 1),
    PrimitiveKind.INT16: (-(2**15), 2**15 - 1),
    PrimitiveKind.INT32: (-(2**31), 2**31 - 1),
    PrimitiveKind.INT64: (-(2**63), 2**63 - 1),
}

_EMPTY_REPRESENTABLE_KINDS = frozenset(
    {
        PrimitiveKind.STRING,
        PrimitiveKind.GUID,
        PrimitiveKind.BINARY,
        PrimitiveKind.DATE,
        PrimitiveKind.DATETIME,
        PrimitiveKind.DATETIME_OFFSET,
        PrimitiveKind.TIME_OF_DAY,
        PrimitiveKind.DURATION,
    }
)


class TypeCategory(Enum):
    """What a type reference resolved to."""

    PRIMITIVE = "primitive"
    ENUM = "enum"
    STRUCTURED = "structured"  # entity or complex type
    UNKNOWN = "unknown"


class NullabilityStrategy(Enum):
    """How a renderer represents absence of a value."""

    NONE = "no-pointer-needed"
    OPTIONAL_WRAPPER = "pointer-or-optional-wrapper"
    COLLECTION = "collection-implies-nullable"


class DeclarationKind(Enum):
    """Kind tag of a named declaration."""

    ENTITY = "entity"
    COMPLEX = "complex"
    ENUM = "enum"


@dataclass(frozen=True)
class LazyReference:
    """A deferred reference to a declaration.

    Renderers bind these by name instead of requiring declarations to be
    emitted in dependency order, so cyclic graphs need no sorting.

    Attributes
    ----------
        qualified_name: ``Namespace.Name`` of the target.
        kind: Kind of the target declaration.

    """

    qualified_name: str
    kind: DeclarationKind

    @property
    def namespace(self) -> str:
        """Namespace part of the qualified name."""
        return self.qualified_name.rpartition(".")[0]

    @property
    def name(self) -> str:
        """Local name part of the qualified name."""
        return self.qualified_name.rpartition(".")[2]


@dataclass(frozen=True)
class TypeReferenceDescriptor:
    """A fully resolved type reference.

    Attributes
    ----------
        category: Primitive, enum, structured or unknown.
        raw: The raw reference this descriptor was resolved from.
        primitive: Primitive kind, for PRIMITIVE descriptors.
        qualified_name: Target qualified name, for ENUM, STRUCTURED and
            UNKNOWN descriptors (unknown keeps the best-effort name).
        kind: Declaration kind of the target, for ENUM and STRUCTURED.
        collection: Whether the reference is ``Collection(...)``.
        nullability: How absence of a value is represented.

    """

    category: TypeCategory
    raw: str
    primitive: PrimitiveKind | None = None
    qualified_name: str | None = None
    kind: DeclarationKind | None = None
    collection: bool = False
    nullability: NullabilityStrategy = NullabilityStrategy.NONE

    @property
    def is_optional(self) -> bool:
        """Whether the renderer should wrap the value in an optional."""
        return self.nullability == NullabilityStrategy.OPTIONAL_WRAPPER

    @property
    def is_unknown(self) -> bool:
        """Whether the reference could not be resolved."""
        return self.category == TypeCategory.UNKNOWN

    @property
    def lazy_reference(self) -> LazyReference | None:
        """Deferred reference to the target declaration, if any."""
        if self.qualified_name is None or self.kind is None:
            return None
        return LazyReference(self.qualified_name, self.kind)

    def __str__(self) -> str:
        """Format the descriptor compactly, e.g. ``Collection(structured:NS.Item)``."""
        if self.category == TypeCategory.PRIMITIVE and self.primitive is not None:
            base = f"primitive:{self.primitive.value}"
        else:
            base = f"{self.category.value}:{self.qualified_name or self.raw or '?'}"
        if self.collection:
            return f"Collection({base})"
        if self.is_optional:
            return f"{base}?"
        return base
