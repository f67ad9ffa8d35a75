"""Tests for the schema resolution pipeline."""

from collections.abc import Callable
from pathlib import Path

import pytest
from edmx_to_types.ir.declarations import SchemaModel
from edmx_to_types.ir.resolved import ResolvedModel
from edmx_to_types.ir.types import DeclarationKind, LazyReference, NullabilityStrategy, TypeCategory
from edmx_to_types.models.config import GeneratorConfig, QualificationMode
from edmx_to_types.models.loader import load_schema_document, parse_edmx
from edmx_to_types.models.schema import SchemaDocument
from edmx_to_types.transform.resolver import SchemaResolver, resolve_schema
from edmx_to_types.validation.errors import ErrorCodes
from edmx_to_types.validation.validator import ValidationError


@pytest.fixture
def resolved(northwind_document: SchemaDocument) -> ResolvedModel:
    """Return the resolved v4 document."""
    return SchemaResolver().resolve(northwind_document)


class TestSchemaResolver:
    """Tests for SchemaResolver on the v4 document."""

    def test_clean_document_is_valid(self, resolved: ResolvedModel) -> None:
        """Should report only the reference cycle."""
        assert resolved.result.is_valid
        assert resolved.result.warnings == []
        assert [i.code for i in resolved.result.infos] == [ErrorCodes.I001_REFERENCE_CYCLE]

    def test_fields_in_declaration_order(self, resolved: ResolvedModel) -> None:
        """Should list properties first, then navigation references."""
        order = resolved.get_declaration("Sales.Order")

        assert order is not None
        assert [f.name for f in order.fields] == [
            "Id",
            "Number",
            "Total",
            "Status",
            "Lines",
            "ShipTo",
            "Created",
            "Customer",
        ]
        assert [f.name for f in order.key_fields] == ["Id"]
        assert order.fields[-1].is_navigation

    def test_field_descriptors(self, resolved: ResolvedModel) -> None:
        """Should resolve each field with its nullability strategy."""
        order = resolved.get_declaration("Sales.Order")
        assert order is not None
        fields = {f.name: f.descriptor for f in order.fields}

        assert fields["Id"].nullability == NullabilityStrategy.NONE
        assert fields["Total"].nullability == NullabilityStrategy.OPTIONAL_WRAPPER
        assert fields["Status"].category == TypeCategory.ENUM
        assert fields["Status"].qualified_name == "Sales.Status"
        assert fields["Lines"].nullability == NullabilityStrategy.COLLECTION
        assert fields["ShipTo"].kind == DeclarationKind.COMPLEX
        assert fields["ShipTo"].is_optional
        assert fields["Customer"].kind == DeclarationKind.ENTITY

    def test_base_reference(self, resolved: ResolvedModel) -> None:
        """Should attach a lazy reference to a known base type."""
        special = resolved.get_declaration("Sales.SpecialOrder")

        assert special is not None
        assert special.base == LazyReference("Sales.Order", DeclarationKind.ENTITY)

    def test_dependency_graph(self, resolved: ResolvedModel) -> None:
        """Should carry the dependency set of every declaration."""
        graph = resolved.dependency_graph()

        assert set(graph) == {d.qualified_name for d in resolved.declarations}
        assert graph["Sales.Customer"].type_names == ("Sales.Order",)
        assert graph["Sales.Customer"].enum_names == ("Sales.Permission",)

    def test_enums_planned(self, resolved: ResolvedModel) -> None:
        """Should plan every enum."""
        status = resolved.get_enum("Sales.Status")

        assert status is not None
        assert status.name_to_value["Cancelled"] == 6

    def test_accepts_normalized_model(self, northwind_model: SchemaModel) -> None:
        """Should resolve an already normalized model."""
        resolved = resolve_schema(northwind_model)

        assert len(resolved.declarations) == len(northwind_model.declarations)

    def test_resolution_is_deterministic(self, northwind_v4: Path) -> None:
        """Should produce identical output for repeated runs."""
        first = SchemaResolver().resolve(load_schema_document(northwind_v4))
        second = SchemaResolver().resolve(load_schema_document(northwind_v4))

        assert first.declarations == second.declarations
        assert first.enums == second.enums


class TestQualification:
    """Tests for rendered names under each qualification mode."""

    @pytest.fixture
    def shared(
        self, make_edmx: Callable[..., str], make_schema: Callable[..., str]
    ) -> SchemaDocument:
        """Return a document declaring Item in two namespaces."""
        return parse_edmx(
            make_edmx(
                make_schema("org.sales.Model", '<ComplexType Name="Item"/><ComplexType Name="Cart"/>'),
                make_schema("org.stock.Model", '<ComplexType Name="Item"/>'),
            )
        )

    def test_auto(self, shared: SchemaDocument) -> None:
        """Should prefix only the shared name, with collision-free aliases."""
        resolved = resolve_schema(shared)

        assert [d.rendered_name for d in resolved.declarations] == [
            "Cart",
            "ModelItem",
            "Model2Item",
        ]
        assert resolved.result.has_code(ErrorCodes.W003_ALIAS_COLLISION)

    def test_always(self, shared: SchemaDocument) -> None:
        """Should prefix every name."""
        resolved = resolve_schema(shared, GeneratorConfig(qualification_mode=QualificationMode.ALWAYS))

        assert resolved.declarations[0].rendered_name == "ModelCart"

    def test_never(self, shared: SchemaDocument) -> None:
        """Should not prefix even colliding names."""
        resolved = resolve_schema(shared, GeneratorConfig(qualification_mode=QualificationMode.NEVER))

        assert [d.rendered_name for d in resolved.declarations] == ["Cart", "Item", "Item"]
        collisions = [
            w for w in resolved.result.warnings if w.code == ErrorCodes.W006_RENDERED_NAME_COLLISION
        ]
        assert len(collisions) == 1
        assert collisions[0].context["declarations"] == [
            "org.sales.Model.Item",
            "org.stock.Model.Item",
        ]

    def test_auto_reports_no_collision(self, shared: SchemaDocument) -> None:
        """Should not warn when qualification keeps rendered names apart."""
        resolved = resolve_schema(shared)

        assert not resolved.result.has_code(ErrorCodes.W006_RENDERED_NAME_COLLISION)

    def test_qualified_name_meets_local_name(
        self, make_edmx: Callable[..., str], make_schema: Callable[..., str]
    ) -> None:
        """Should warn when a qualified name equals another declaration's local name."""
        document = parse_edmx(
            make_edmx(
                make_schema(
                    "A.Sales", '<ComplexType Name="Order"/><ComplexType Name="SalesOrder"/>'
                ),
                make_schema("B.Other", '<ComplexType Name="Order"/>'),
            )
        )

        resolved = resolve_schema(document)

        assert [d.rendered_name for d in resolved.declarations] == [
            "SalesOrder",
            "SalesOrder",
            "OtherOrder",
        ]
        warning = next(
            w for w in resolved.result.warnings if w.code == ErrorCodes.W006_RENDERED_NAME_COLLISION
        )
        assert warning.context["declarations"] == ["A.Sales.Order", "A.Sales.SalesOrder"]
        assert warning.location is not None
        assert warning.location.path == "A.Sales.SalesOrder"


class TestDiagnostics:
    """Tests for diagnostics collected during resolution."""

    def test_v3_document(self, legacy_v3: Path) -> None:
        """Should resolve association navigation and report the undefined one once."""
        resolved = SchemaResolver().resolve(load_schema_document(legacy_v3))
        product = resolved.get_declaration("Legacy.Product")
        assert product is not None
        fields = {f.name: f.descriptor for f in product.fields}

        assert fields["Supplier"].qualified_name == "Legacy.Supplier"
        assert fields["Supplier"].is_optional
        assert fields["Category"].is_unknown
        assert [w.code for w in resolved.result.warnings] == [
            ErrorCodes.W005_UNDEFINED_ASSOCIATION
        ]

    def test_collects_all_problems(
        self, make_edmx: Callable[..., str], make_schema: Callable[..., str]
    ) -> None:
        """Should report every problem instead of stopping at the first."""
        document = parse_edmx(
            make_edmx(
                make_schema(
                    "NS",
                    '<EntityType Name="Order" BaseType="NS.Missing"><Key><PropertyRef Name="No"/>'
                    '</Key><Property Name="Ref" Type="NS.Ghost"/></EntityType>'
                    '<EnumType Name="E"><Member Name="A" Value="x"/><Member Name="A"/></EnumType>',
                )
            )
        )

        result = SchemaResolver().resolve(document).result

        codes = {issue.code for issue in result.issues}
        assert codes == {
            ErrorCodes.E002_UNDEFINED_KEY_PROPERTY,
            ErrorCodes.E101_DUPLICATE_ENUM_MEMBER,
            ErrorCodes.W001_UNRESOLVED_TYPE,
            ErrorCodes.W002_MALFORMED_ENUM_VALUE,
            ErrorCodes.W004_UNDEFINED_BASE_TYPE,
        }

    def test_unknown_base_has_no_reference(
        self, make_edmx: Callable[..., str], make_schema: Callable[..., str]
    ) -> None:
        """Should leave the base unset when it cannot be resolved."""
        document = parse_edmx(
            make_edmx(make_schema("NS", '<ComplexType Name="Child" BaseType="NS.Missing"/>'))
        )

        resolved = SchemaResolver().resolve(document)

        assert resolved.declarations[0].base is None

    def test_resolve_and_raise_on_error(
        self, make_edmx: Callable[..., str], make_schema: Callable[..., str]
    ) -> None:
        """Should raise ValidationError when errors were found."""
        document = parse_edmx(
            make_edmx(make_schema("NS", '<EntityType Name="T"><Key><PropertyRef Name="Id"/></Key></EntityType>'))
        )

        with pytest.raises(ValidationError, match="1 error"):
            SchemaResolver().resolve_and_raise(document)

    def test_strict_raises_on_warning(
        self, make_edmx: Callable[..., str], make_schema: Callable[..., str]
    ) -> None:
        """Should treat warnings as errors in strict mode only."""
        document = parse_edmx(
            make_edmx(make_schema("NS", '<ComplexType Name="T"><Property Name="X" Type="NS.Nope"/></ComplexType>'))
        )

        assert SchemaResolver().resolve_and_raise(document).result.warnings
        with pytest.raises(ValidationError, match="1 warning"):
            SchemaResolver(strict=True).resolve_and_raise(document)
