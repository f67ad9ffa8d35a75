"""IR models for normalized schema declarations.

The normalized model is built once from the raw schema tree and is immutable
afterwards. Entity and complex types share one ``TypeDeclaration`` shape and
are told apart by their ``kind`` tag.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from edmx_to_types.ir.types import DeclarationKind


def qualify(namespace: str, name: str) -> str:
    """Join a namespace and a local name into a qualified name."""
    return f"{namespace}.{name}" if namespace else name


def split_qualified(qualified_name: str) -> tuple[str, str]:
    """Split ``Namespace.Name`` at the last dot.

    Returns ``("", name)`` for unqualified names.
    """
    namespace, _, name = qualified_name.rpartition(".")
    return namespace, name


@dataclass(frozen=True)
class Property:
    """A structural property.

    Attributes
    ----------
        name: Property name as declared.
        type: Raw type reference.
        nullable: True, False, or None when unspecified.

    """

    name: str
    type: str
    nullable: bool | None = None


@dataclass(frozen=True)
class NavigationReference:
    """A navigation property pointing at another entity.

    For v2/v3 schemas the raw ``type`` is derived from the association end
    during normalization; ``relationship`` and the roles are kept for
    diagnostics.
    """

    name: str
    type: str
    nullable: bool | None = None
    partner: str | None = None
    relationship: str | None = None
    to_role: str | None = None


@dataclass(frozen=True)
class TypeDeclaration:
    """An entity or complex type.

    Attributes
    ----------
        namespace: Owning namespace.
        name: Local name.
        kind: ENTITY or COMPLEX.
        base_type: Qualified base type reference, if any.
        properties: Structural properties in declaration order.
        navigation: Navigation references in declaration order.
        keys: Key property names (entities only).
        abstract: Abstract flag.
        open_type: Open type flag.

    """

    namespace: str
    name: str
    kind: DeclarationKind
    base_type: str | None = None
    properties: tuple[Property, ...] = ()
    navigation: tuple[NavigationReference, ...] = ()
    keys: tuple[str, ...] = ()
    abstract: bool = False
    open_type: bool = False

    @property
    def qualified_name(self) -> str:
        """``Namespace.Name`` of the declaration."""
        return qualify(self.namespace, self.name)

    @property
    def is_entity(self) -> bool:
        """Whether this is an entity type."""
        return self.kind == DeclarationKind.ENTITY

    @property
    def property_names(self) -> tuple[str, ...]:
        """Names of the structural properties."""
        return tuple(p.name for p in self.properties)


@dataclass(frozen=True)
class EnumMember:
    """An enum member with its explicit value text, if any."""

    name: str
    value: str | None = None


@dataclass(frozen=True)
class EnumType:
    """An enumeration declaration.

    Attributes
    ----------
        namespace: Owning namespace.
        name: Local name.
        underlying_type: Underlying EDM primitive, ``Edm.Int32`` by default.
        is_flags: Whether values combine as a bit union.
        members: Members in declaration order.

    """

    namespace: str
    name: str
    underlying_type: str = "Edm.Int32"
    is_flags: bool = False
    members: tuple[EnumMember, ...] = ()

    @property
    def qualified_name(self) -> str:
        """``Namespace.Name`` of the enum."""
        return qualify(self.namespace, self.name)


@dataclass(frozen=True)
class SchemaModel:
    """The normalized declaration inventory of one schema load.

    Attributes
    ----------
        namespaces: Distinct namespaces, sorted.
        declarations: Entity and complex types, sorted by qualified name.
        enums: Enum types, sorted by qualified name.
        schema_aliases: Schema ``Alias`` attribute to namespace.
        edmx_version: Version from the EDMX root, if known.

    """

    namespaces: tuple[str, ...]
    declarations: tuple[TypeDeclaration, ...]
    enums: tuple[EnumType, ...]
    schema_aliases: dict[str, str] = field(default_factory=dict)
    edmx_version: str | None = None

    _declarations_by_name: dict[str, TypeDeclaration] = field(
        init=False, repr=False, compare=False
    )
    _enums_by_name: dict[str, EnumType] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Index declarations by qualified name (first occurrence wins)."""
        by_name: dict[str, TypeDeclaration] = {}
        for decl in self.declarations:
            by_name.setdefault(decl.qualified_name, decl)
        enums: dict[str, EnumType] = {}
        for enum in self.enums:
            enums.setdefault(enum.qualified_name, enum)
        object.__setattr__(self, "_declarations_by_name", by_name)
        object.__setattr__(self, "_enums_by_name", enums)

    def expand_alias(self, qualified_name: str) -> str:
        """Replace a schema alias prefix with the namespace it stands for."""
        namespace, name = split_qualified(qualified_name)
        if namespace in self.schema_aliases:
            return qualify(self.schema_aliases[namespace], name)
        return qualified_name

    def get_declaration(self, qualified_name: str) -> TypeDeclaration | None:
        """Look up an entity or complex type (schema aliases accepted)."""
        return self._declarations_by_name.get(self.expand_alias(qualified_name))

    def get_enum(self, qualified_name: str) -> EnumType | None:
        """Look up an enum type (schema aliases accepted)."""
        return self._enums_by_name.get(self.expand_alias(qualified_name))

    @property
    def declaration_names(self) -> frozenset[str]:
        """Qualified names of all entity and complex types."""
        return frozenset(self._declarations_by_name)

    @property
    def enum_names(self) -> frozenset[str]:
        """Qualified names of all enum types."""
        return frozenset(self._enums_by_name)

    def name_inventory(self) -> list[tuple[str, str]]:
        """All (namespace, local name) pairs, one per declaration."""
        pairs = [(d.namespace, d.name) for d in self.declarations]
        pairs.extend((e.namespace, e.name) for e in self.enums)
        return pairs

    def local_name_counts(self) -> Counter[str]:
        """Number of distinct namespaces declaring each local name."""
        return Counter(name for _, name in set(self.name_inventory()))

    def __len__(self) -> int:
        """Total number of declarations, enums included."""
        return len(self.declarations) + len(self.enums)
