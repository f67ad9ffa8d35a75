"""Tests for schema normalization."""

from collections.abc import Callable
from pathlib import Path

import pytest
from edmx_to_types.ir.declarations import SchemaModel
from edmx_to_types.ir.types import DeclarationKind
from edmx_to_types.models.loader import load_schema_document
from edmx_to_types.models.schema import RawSchema, SchemaDocument
from edmx_to_types.transform.normalizer import (
    EmptySchemaError,
    SchemaNormalizer,
    normalize_document,
)
from edmx_to_types.validation.errors import ErrorCodes, ValidationResult


class TestSchemaNormalizer:
    """Tests for SchemaNormalizer on well-formed documents."""

    def test_declarations_sorted_by_qualified_name(self, northwind_model: SchemaModel) -> None:
        """Should order declarations and enums by qualified name."""
        assert [d.qualified_name for d in northwind_model.declarations] == [
            "Catalog.Product",
            "Sales.Address",
            "Sales.Customer",
            "Sales.Order",
            "Sales.OrderLine",
            "Sales.SpecialOrder",
        ]
        assert [e.qualified_name for e in northwind_model.enums] == [
            "Sales.Permission",
            "Sales.Status",
        ]

    def test_namespaces_and_aliases(self, northwind_model: SchemaModel) -> None:
        """Should collect sorted namespaces and schema aliases."""
        assert northwind_model.namespaces == ("Catalog", "Sales")
        assert northwind_model.schema_aliases == {"S": "Sales"}
        assert northwind_model.edmx_version == "4.0"

    def test_kinds_and_flags(self, northwind_model: SchemaModel) -> None:
        """Should tag kinds and keep abstract/open flags."""
        product = northwind_model.get_declaration("Catalog.Product")
        address = northwind_model.get_declaration("Sales.Address")

        assert product is not None and address is not None
        assert product.kind == DeclarationKind.ENTITY
        assert product.open_type is True
        assert address.kind == DeclarationKind.COMPLEX
        assert address.keys == ()

    def test_enum_default_underlying_type(self, northwind_model: SchemaModel) -> None:
        """Should default the enum underlying type to Edm.Int32."""
        status = northwind_model.get_enum("Sales.Status")
        permission = northwind_model.get_enum("Sales.Permission")

        assert status is not None and permission is not None
        assert status.underlying_type == "Edm.Int32"
        assert permission.underlying_type == "Edm.Byte"

    def test_no_diagnostics_for_clean_document(self, northwind_v4: Path) -> None:
        """Should report nothing for a well-formed document."""
        result = ValidationResult()

        normalize_document(load_schema_document(northwind_v4), result)

        assert result.issues == []


class TestDuplicates:
    """Tests for duplicate declaration handling."""

    def test_duplicate_entity_keeps_first(
        self,
        make_edmx: Callable[..., str],
        make_schema: Callable[..., str],
        load_model: Callable[..., SchemaModel],
    ) -> None:
        """Should report E100 and keep the first declaration."""
        content = make_edmx(
            make_schema(
                "NS",
                '<EntityType Name="Order"><Property Name="First" Type="Edm.Int32"/></EntityType>'
                '<EntityType Name="Order"><Property Name="Second" Type="Edm.Int32"/></EntityType>',
            )
        )
        result = ValidationResult()

        model = load_model(content, result)

        assert result.has_code(ErrorCodes.E100_DUPLICATE_DECLARATION)
        assert len(model.declarations) == 1
        assert model.declarations[0].property_names == ("First",)

    def test_enum_name_clashing_with_entity(
        self,
        make_edmx: Callable[..., str],
        make_schema: Callable[..., str],
        load_model: Callable[..., SchemaModel],
    ) -> None:
        """Should treat an enum with an entity's name as a duplicate."""
        content = make_edmx(
            make_schema(
                "NS",
                '<EntityType Name="Kind"/><EnumType Name="Kind"><Member Name="A"/></EnumType>',
            )
        )
        result = ValidationResult()

        model = load_model(content, result)

        assert [i.location.path for i in result.errors] == ["NS.Kind"]
        assert model.enums == ()

    def test_same_name_in_two_namespaces_is_allowed(
        self,
        make_edmx: Callable[..., str],
        make_schema: Callable[..., str],
        load_model: Callable[..., SchemaModel],
    ) -> None:
        """Should keep equally named declarations of different namespaces."""
        content = make_edmx(
            make_schema("A", '<ComplexType Name="Item"/>'),
            make_schema("B", '<ComplexType Name="Item"/>'),
        )
        result = ValidationResult()

        model = load_model(content, result)

        assert result.is_valid
        assert model.declaration_names == {"A.Item", "B.Item"}


class TestAssociations:
    """Tests for v2/v3 navigation resolution through associations."""

    @pytest.fixture
    def legacy(self, legacy_v3: Path) -> tuple[SchemaModel, ValidationResult]:
        """Return the normalized v3 document and its diagnostics."""
        result = ValidationResult()
        return normalize_document(load_schema_document(legacy_v3), result), result

    def test_many_end_becomes_collection(
        self, legacy: tuple[SchemaModel, ValidationResult]
    ) -> None:
        """Should turn a '*' end into a collection reference."""
        model, _ = legacy
        supplier = model.get_declaration("Legacy.Supplier")

        assert supplier is not None
        nav = supplier.navigation[0]
        assert nav.type == "Collection(Legacy.Product)"
        assert nav.relationship == "Legacy.Supplier_Products"

    def test_optional_end_is_nullable(self, legacy: tuple[SchemaModel, ValidationResult]) -> None:
        """Should derive nullability from a '0..1' end."""
        model, _ = legacy
        product = model.get_declaration("Legacy.Product")

        assert product is not None
        nav = product.navigation[0]
        assert nav.type == "Legacy.Supplier"
        assert nav.nullable is True

    def test_undefined_association(self, legacy: tuple[SchemaModel, ValidationResult]) -> None:
        """Should report W005 and leave the navigation untyped."""
        model, result = legacy
        product = model.get_declaration("Legacy.Product")

        assert product is not None
        assert product.navigation[1].type == ""
        assert [w.code for w in result.warnings] == [ErrorCodes.W005_UNDEFINED_ASSOCIATION]
        assert result.warnings[0].location.path == "Legacy.Product.navigation.Category"

    def test_required_end_is_not_nullable(
        self,
        make_edmx: Callable[..., str],
        make_schema: Callable[..., str],
        load_model: Callable[..., SchemaModel],
    ) -> None:
        """Should mark a navigation to a '1' end as not nullable."""
        content = make_edmx(
            make_schema(
                "NS",
                '<EntityType Name="Line"><NavigationProperty Name="Head" '
                'Relationship="N.Line_Head" FromRole="Line" ToRole="Head"/></EntityType>'
                '<EntityType Name="Head"/>'
                '<Association Name="Line_Head"><End Role="Line" Type="NS.Line" Multiplicity="*"/>'
                '<End Role="Head" Type="NS.Head" Multiplicity="1"/></Association>',
                alias="N",
            ),
            version="1.0",
        )

        model = load_model(content)

        line = model.get_declaration("NS.Line")
        assert line is not None
        assert line.navigation[0].type == "NS.Head"
        assert line.navigation[0].nullable is False


class TestEmptySchema:
    """Tests for documents that declare nothing."""

    def test_no_schemas(self) -> None:
        """Should raise EmptySchemaError without any schema."""
        with pytest.raises(EmptySchemaError, match="at least one <Schema>"):
            SchemaNormalizer().normalize(SchemaDocument())

    def test_schemas_without_declarations(self) -> None:
        """Should name the empty namespaces."""
        document = SchemaDocument(schemas=[RawSchema(namespace="Empty")])

        with pytest.raises(EmptySchemaError, match="Empty") as exc_info:
            normalize_document(document)

        assert exc_info.value.namespaces == ["Empty"]
