"""Normalize the raw schema tree into an immutable SchemaModel."""

from __future__ import annotations

import logging

from edmx_to_types.ir.declarations import (
    EnumMember,
    EnumType,
    NavigationReference,
    Property,
    SchemaModel,
    TypeDeclaration,
    qualify,
)
from edmx_to_types.ir.types import DeclarationKind
from edmx_to_types.models.schema import (
    RawAssociation,
    RawComplexType,
    RawEntityType,
    RawNavigationProperty,
    RawSchema,
    SchemaDocument,
)
from edmx_to_types.validation.errors import ErrorCodes, ValidationResult

logger = logging.getLogger(__name__)

DEFAULT_ENUM_UNDERLYING_TYPE = "Edm.Int32"

# Association end multiplicities that denote a collection
COLLECTION_MULTIPLICITIES = frozenset({"*", "0..*"})


class EmptySchemaError(Exception):
    """Raised when a schema document declares nothing to generate."""

    def __init__(self, message: str, namespaces: list[str] | None = None) -> None:
        """Initialize EmptySchemaError.

        Args:
        ----
            message: What was expected and what was found.
            namespaces: Namespaces that were present, if any.

        """
        self.namespaces = namespaces or []
        super().__init__(message)


class SchemaNormalizer:
    """Turn a SchemaDocument into a SchemaModel.

    Normalization keeps the first of any duplicated declaration, resolves
    v2/v3 navigation properties through their associations, and fills in
    defaults (enum underlying type). Problems are reported to the given
    ValidationResult; only an empty document is fatal.

    Usage:
        result = ValidationResult()
        model = SchemaNormalizer(result).normalize(document)
    """

    def __init__(self, result: ValidationResult | None = None) -> None:
        """Initialize the normalizer.

        Args:
        ----
            result: Collector for diagnostics; a fresh one is used if omitted.

        """
        self.result = result if result is not None else ValidationResult()
        self._associations: dict[str, RawAssociation] = {}
        self._seen: set[str] = set()

    def normalize(self, document: SchemaDocument) -> SchemaModel:
        """Normalize a whole document.

        Args:
        ----
            document: The raw schema tree.

        Returns:
        -------
            The normalized SchemaModel.

        Raises:
        ------
            EmptySchemaError: If there is no schema or no declaration at all.

        """
        if not document.schemas:
            raise EmptySchemaError("Expected at least one <Schema>, found none")

        total = sum(schema.declaration_count for schema in document.schemas)
        if total == 0:
            namespaces = document.namespaces
            raise EmptySchemaError(
                f"Expected at least one EntityType, ComplexType or EnumType, "
                f"found none in {len(namespaces)} schema(s): {', '.join(namespaces) or '<empty>'}",
                namespaces,
            )

        aliases = {
            schema.alias: schema.namespace
            for schema in document.schemas
            if schema.alias and schema.alias != schema.namespace
        }
        self._associations = {}
        self._seen = set()
        for schema in document.schemas:
            for assoc in schema.associations:
                self._associations[qualify(schema.namespace, assoc.name)] = assoc
                if schema.alias:
                    self._associations[qualify(schema.alias, assoc.name)] = assoc

        declarations: list[TypeDeclaration] = []
        enums: list[EnumType] = []
        for schema in document.schemas:
            declarations.extend(self._normalize_structured(schema))
            enums.extend(self._normalize_enums(schema))

        declarations.sort(key=lambda d: d.qualified_name)
        enums.sort(key=lambda e: e.qualified_name)

        model = SchemaModel(
            namespaces=tuple(sorted({s.namespace for s in document.schemas})),
            declarations=tuple(declarations),
            enums=tuple(enums),
            schema_aliases=aliases,
            edmx_version=document.edmx_version,
        )
        logger.debug(
            "Normalized %d declaration(s) and %d enum(s) across %d namespace(s)",
            len(model.declarations),
            len(model.enums),
            len(model.namespaces),
        )
        return model

    def _claim(self, namespace: str, name: str, kind: str) -> bool:
        """Register a qualified name; report and refuse duplicates."""
        qualified_name = qualify(namespace, name)
        if qualified_name in self._seen:
            self.result.add_error(
                code=ErrorCodes.E100_DUPLICATE_DECLARATION,
                message=f"{kind} '{qualified_name}' is declared more than once",
                path=qualified_name,
                suggestion="Remove or rename the duplicate; the first declaration is kept",
            )
            return False
        self._seen.add(qualified_name)
        return True

    def _normalize_structured(self, schema: RawSchema) -> list[TypeDeclaration]:
        result: list[TypeDeclaration] = []
        for entity in schema.entity_types:
            if self._claim(schema.namespace, entity.name, "EntityType"):
                result.append(self._declaration(schema, entity, DeclarationKind.ENTITY))
        for complex_type in schema.complex_types:
            if self._claim(schema.namespace, complex_type.name, "ComplexType"):
                result.append(self._declaration(schema, complex_type, DeclarationKind.COMPLEX))
        return result

    def _declaration(
        self,
        schema: RawSchema,
        raw: RawEntityType | RawComplexType,
        kind: DeclarationKind,
    ) -> TypeDeclaration:
        path = qualify(schema.namespace, raw.name)
        keys = tuple(raw.keys) if isinstance(raw, RawEntityType) else ()
        return TypeDeclaration(
            namespace=schema.namespace,
            name=raw.name,
            kind=kind,
            base_type=raw.base_type or None,
            properties=tuple(Property(p.name, p.type, p.nullable) for p in raw.properties),
            navigation=tuple(
                self._navigation(nav, f"{path}.navigation.{nav.name}")
                for nav in raw.navigation_properties
            ),
            keys=keys,
            abstract=raw.abstract,
            open_type=raw.open_type,
        )

    def _navigation(self, nav: RawNavigationProperty, path: str) -> NavigationReference:
        if nav.type:
            return NavigationReference(
                name=nav.name,
                type=nav.type,
                nullable=nav.nullable,
                partner=nav.partner,
            )

        # v2/v3: the target type and multiplicity live on the association end
        type_ref = ""
        nullable = nav.nullable
        assoc = self._associations.get(nav.relationship or "")
        end = None
        if assoc is not None:
            end = next((e for e in assoc.ends if e.role == nav.to_role), None)

        if end is None or not end.type:
            self.result.add_warning(
                code=ErrorCodes.W005_UNDEFINED_ASSOCIATION,
                message=(
                    f"Navigation property '{nav.name}' references association "
                    f"'{nav.relationship}' role '{nav.to_role}', which is not defined"
                ),
                path=path,
                suggestion="Declare the <Association> and its <End> roles in the schema",
                relationship=nav.relationship,
                to_role=nav.to_role,
            )
            logger.warning("Unresolved association %s for %s", nav.relationship, path)
        elif end.multiplicity in COLLECTION_MULTIPLICITIES:
            type_ref = f"Collection({end.type})"
        else:
            type_ref = end.type
            if nullable is None:
                nullable = end.multiplicity != "1"

        return NavigationReference(
            name=nav.name,
            type=type_ref,
            nullable=nullable,
            partner=nav.partner,
            relationship=nav.relationship,
            to_role=nav.to_role,
        )

    def _normalize_enums(self, schema: RawSchema) -> list[EnumType]:
        result: list[EnumType] = []
        for raw in schema.enum_types:
            if not self._claim(schema.namespace, raw.name, "EnumType"):
                continue
            result.append(
                EnumType(
                    namespace=schema.namespace,
                    name=raw.name,
                    underlying_type=raw.underlying_type or DEFAULT_ENUM_UNDERLYING_TYPE,
                    is_flags=raw.is_flags,
                    members=tuple(EnumMember(m.name, m.value) for m in raw.members),
                )
            )
        return result


def normalize_document(
    document: SchemaDocument,
    result: ValidationResult | None = None,
) -> SchemaModel:
    """Normalize a raw schema document.

    Args:
    ----
        document: The raw schema tree.
        result: Optional collector for diagnostics.

    Returns:
    -------
        The normalized SchemaModel.

    """
    return SchemaNormalizer(result).normalize(document)
