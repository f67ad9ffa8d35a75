"""Pydantic models for the raw EDMX schema tree.

These models are the input boundary of the resolution engine. They mirror the
CSDL elements closely (one model per element kind) and carry attribute values
as found in the document, without any resolution applied.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class RawProperty(BaseModel):
    """A structural ``<Property>`` of an entity or complex type.

    Example:
    -------
        ```xml
        <Property Name="Price" Type="Edm.Decimal" Nullable="false"/>
        ```

    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Property name")]
    type: Annotated[
        str,
        Field(description="Raw type reference, e.g. 'Edm.String' or 'Collection(NS.Item)'"),
    ]
    nullable: Annotated[
        bool | None,
        Field(default=None, description="Nullable facet; None when the attribute is absent"),
    ]


class RawNavigationProperty(BaseModel):
    """A ``<NavigationProperty>`` in either the v4 or the v2/v3 dialect.

    v4 navigation properties carry ``type`` directly. v2/v3 navigation
    properties carry ``relationship`` plus ``from_role``/``to_role`` and are
    resolved against the schema's associations during normalization.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1)]
    type: str | None = None
    nullable: bool | None = None
    partner: str | None = None
    relationship: str | None = None
    from_role: str | None = None
    to_role: str | None = None


class RawEntityType(BaseModel):
    """An ``<EntityType>`` element."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1)]
    base_type: str | None = None
    abstract: bool = False
    open_type: bool = False
    keys: list[str] = Field(default_factory=list)
    properties: list[RawProperty] = Field(default_factory=list)
    navigation_properties: list[RawNavigationProperty] = Field(default_factory=list)


class RawComplexType(BaseModel):
    """A ``<ComplexType>`` element."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1)]
    base_type: str | None = None
    abstract: bool = False
    open_type: bool = False
    properties: list[RawProperty] = Field(default_factory=list)
    navigation_properties: list[RawNavigationProperty] = Field(default_factory=list)


class RawEnumMember(BaseModel):
    """A ``<Member>`` of an enum type.

    The value is kept as text so that malformed values can be reported by the
    enum planner instead of failing the whole load.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1)]
    value: str | None = None


class RawEnumType(BaseModel):
    """An ``<EnumType>`` element.

    Example:
    -------
        ```xml
        <EnumType Name="Permissions" UnderlyingType="Edm.Int32" IsFlags="true">
          <Member Name="Read" Value="1"/>
          <Member Name="Write" Value="2"/>
        </EnumType>
        ```

    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1)]
    underlying_type: str | None = None
    is_flags: bool = False
    members: list[RawEnumMember] = Field(default_factory=list)


class RawAssociationEnd(BaseModel):
    """An ``<End>`` of a v2/v3 association."""

    model_config = ConfigDict(extra="forbid")

    role: str
    type: str
    multiplicity: str = "1"


class RawAssociation(BaseModel):
    """A v2/v3 ``<Association>`` element."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1)]
    ends: list[RawAssociationEnd] = Field(default_factory=list)


class RawSchema(BaseModel):
    """A ``<Schema>`` element and everything declared inside it."""

    model_config = ConfigDict(extra="forbid")

    namespace: str = ""
    alias: str | None = None
    entity_types: list[RawEntityType] = Field(default_factory=list)
    complex_types: list[RawComplexType] = Field(default_factory=list)
    enum_types: list[RawEnumType] = Field(default_factory=list)
    associations: list[RawAssociation] = Field(default_factory=list)

    @property
    def declaration_count(self) -> int:
        """Number of entity, complex and enum declarations in this schema."""
        return len(self.entity_types) + len(self.complex_types) + len(self.enum_types)


class SchemaDocument(BaseModel):
    """Root of the raw schema tree.

    Example:
    -------
        ```yaml
        edmx_version: "4.0"
        schemas:
          - namespace: Sales
            entity_types:
              - name: Order
                keys: [Id]
                properties:
                  - {name: Id, type: Edm.Int32, nullable: false}
        ```

    """

    model_config = ConfigDict(extra="forbid")

    edmx_version: str | None = None
    schemas: list[RawSchema] = Field(default_factory=list)

    @property
    def namespaces(self) -> list[str]:
        """Namespaces declared by the document, in document order."""
        return [schema.namespace for schema in self.schemas]
