"""Tests for EDMX loading."""

from collections.abc import Callable
from pathlib import Path

import pytest
import yaml
from edmx_to_types.models.loader import (
    LoaderError,
    load_schema_document,
    parse_edmx,
    validate_schema_file,
)
from edmx_to_types.models.schema import SchemaDocument
from pydantic import ValidationError


class TestParseEdmx:
    """Tests for parse_edmx."""

    def test_parse_v4_document(self, northwind_v4: Path) -> None:
        """Should collect every schema with its declarations."""
        document = parse_edmx(northwind_v4.read_bytes())

        assert document.edmx_version == "4.0"
        assert document.namespaces == ["Sales", "Catalog"]
        sales = document.schemas[0]
        assert sales.alias == "S"
        assert [e.name for e in sales.entity_types] == ["Order", "Customer", "SpecialOrder"]
        assert [c.name for c in sales.complex_types] == ["OrderLine", "Address"]
        assert [e.name for e in sales.enum_types] == ["Status", "Permission"]

    def test_parse_properties_and_keys(self, northwind_v4: Path) -> None:
        """Should keep raw type strings, keys and the three-valued Nullable facet."""
        document = parse_edmx(northwind_v4.read_bytes())
        order = document.schemas[0].entity_types[0]

        assert order.keys == ["Id"]
        by_name = {p.name: p for p in order.properties}
        assert by_name["Id"].nullable is False
        assert by_name["Number"].nullable is True
        assert by_name["Total"].nullable is None
        assert by_name["Lines"].type == "Collection(Sales.OrderLine)"
        assert order.navigation_properties[0].type == "Sales.Customer"
        assert order.navigation_properties[0].partner == "Orders"

    def test_parse_base_type_and_open_type(self, northwind_document: SchemaDocument) -> None:
        """Should read BaseType and OpenType attributes."""
        special = northwind_document.schemas[0].entity_types[2]
        product = northwind_document.schemas[1].entity_types[0]

        assert special.base_type == "Sales.Order"
        assert product.open_type is True
        assert special.open_type is False

    def test_parse_enum_attributes(self, northwind_document: SchemaDocument) -> None:
        """Should read IsFlags, UnderlyingType and member values."""
        status, permission = northwind_document.schemas[0].enum_types

        assert status.is_flags is False
        assert status.underlying_type is None
        assert [(m.name, m.value) for m in status.members] == [
            ("Open", None),
            ("Closed", "5"),
            ("Cancelled", None),
        ]
        assert permission.is_flags is True
        assert permission.underlying_type == "Edm.Byte"
        assert permission.members[-1].value == "0x4"

    def test_parse_flags_attribute_alias(
        self, make_edmx: Callable[..., str], make_schema: Callable[..., str]
    ) -> None:
        """Should accept Flags as a spelling of IsFlags."""
        content = make_edmx(
            make_schema("NS", '<EnumType Name="Mode" Flags="true"><Member Name="A"/></EnumType>')
        )

        document = parse_edmx(content)

        assert document.schemas[0].enum_types[0].is_flags is True

    def test_parse_v3_associations(self, legacy_v3: Path) -> None:
        """Should read associations and navigation roles."""
        document = parse_edmx(legacy_v3.read_bytes())
        legacy = document.schemas[0]

        assert document.edmx_version == "1.0"
        assert legacy.associations[0].name == "Supplier_Products"
        assert [(e.role, e.multiplicity) for e in legacy.associations[0].ends] == [
            ("Supplier", "0..1"),
            ("Products", "*"),
        ]
        nav = legacy.entity_types[0].navigation_properties[0]
        assert nav.type is None
        assert nav.relationship == "Legacy.Supplier_Products"
        assert nav.to_role == "Products"

    def test_parse_bare_csdl(self) -> None:
        """Should accept a Schema element without the EDMX envelope."""
        content = (
            '<Schema Namespace="Bare" xmlns="http://docs.oasis-open.org/odata/ns/edm">'
            '<ComplexType Name="Point"><Property Name="X" Type="Edm.Double"/></ComplexType>'
            "</Schema>"
        )

        document = parse_edmx(content)

        assert document.edmx_version is None
        assert document.schemas[0].complex_types[0].name == "Point"

    def test_malformed_xml(self) -> None:
        """Should raise LoaderError for malformed XML."""
        with pytest.raises(LoaderError, match="XML parsing error"):
            parse_edmx("<edmx:Edmx><unclosed>")

    def test_no_schema(self, make_edmx: Callable[..., str]) -> None:
        """Should raise LoaderError when no Schema element exists."""
        with pytest.raises(LoaderError, match="No <Schema> element"):
            parse_edmx(make_edmx())

    def test_unsafe_entity_declaration(self) -> None:
        """Should refuse XML entity expansion."""
        content = (
            '<?xml version="1.0"?>'
            '<!DOCTYPE lol [<!ENTITY lol "lol">]>'
            '<Schema Namespace="X">&lol;</Schema>'
        )

        with pytest.raises(LoaderError, match="unsafe"):
            parse_edmx(content)


class TestLoadSchemaDocument:
    """Tests for load_schema_document."""

    def test_load_edmx_file(self, northwind_v4: Path) -> None:
        """Should load an .xml file."""
        document = load_schema_document(northwind_v4)

        assert len(document.schemas) == 2

    def test_load_yaml_dump(self, tmp_path: Path) -> None:
        """Should load a YAML dump of the schema tree."""
        path = tmp_path / "schema.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "schemas": [
                        {
                            "namespace": "Sales",
                            "entity_types": [
                                {
                                    "name": "Order",
                                    "keys": ["Id"],
                                    "properties": [
                                        {"name": "Id", "type": "Edm.Int32", "nullable": False}
                                    ],
                                }
                            ],
                        }
                    ]
                }
            )
        )

        document = load_schema_document(path)

        assert document.schemas[0].entity_types[0].properties[0].nullable is False

    def test_yaml_dump_with_unknown_field(self, tmp_path: Path) -> None:
        """Should reject unknown fields in a dump."""
        path = tmp_path / "schema.yaml"
        path.write_text("schemas:\n  - namespace: Sales\n    widgets: []\n")

        with pytest.raises(ValidationError):
            load_schema_document(path)

    def test_file_not_found(self, tmp_path: Path) -> None:
        """Should raise LoaderError for missing file."""
        with pytest.raises(LoaderError, match="File not found"):
            load_schema_document(tmp_path / "nonexistent.xml")

    def test_directory_instead_of_file(self, tmp_path: Path) -> None:
        """Should raise LoaderError when given a directory."""
        with pytest.raises(LoaderError, match="Not a file"):
            load_schema_document(tmp_path)

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        """Should raise LoaderError for unsupported file extension."""
        path = tmp_path / "metadata.txt"
        path.write_text("<Schema/>")

        with pytest.raises(LoaderError, match="Unsupported file extension"):
            load_schema_document(path)

    def test_empty_xml_file(self, tmp_path: Path) -> None:
        """Should raise LoaderError for an empty metadata file."""
        path = tmp_path / "metadata.edmx"
        path.write_text("   \n")

        with pytest.raises(LoaderError, match="File is empty"):
            load_schema_document(path)

    def test_empty_yaml_file(self, tmp_path: Path) -> None:
        """Should raise LoaderError for an empty dump."""
        path = tmp_path / "schema.yml"
        path.write_text("")

        with pytest.raises(LoaderError, match="File is empty"):
            load_schema_document(path)

    def test_yaml_non_dict_root(self, tmp_path: Path) -> None:
        """Should raise LoaderError when the dump root is not a mapping."""
        path = tmp_path / "schema.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(LoaderError, match="Expected dictionary"):
            load_schema_document(path)

    def test_error_message_includes_path(self, tmp_path: Path) -> None:
        """Should prefix error messages with the file path."""
        path = tmp_path / "broken.xml"
        path.write_text("<oops")

        with pytest.raises(LoaderError) as exc_info:
            load_schema_document(path)

        assert exc_info.value.path == path
        assert str(path) in str(exc_info.value)


class TestValidateSchemaFile:
    """Tests for validate_schema_file."""

    def test_valid_file(self, northwind_v4: Path) -> None:
        """Should return no errors for a loadable file."""
        assert validate_schema_file(northwind_v4) == []

    def test_loader_error(self, tmp_path: Path) -> None:
        """Should return the loader error message."""
        path = tmp_path / "broken.xml"
        path.write_text("<oops")

        errors = validate_schema_file(path)

        assert len(errors) == 1
        assert "XML parsing error" in errors[0]

    def test_dump_validation_errors(self, tmp_path: Path) -> None:
        """Should return one message per pydantic error, with its location."""
        path = tmp_path / "schema.yaml"
        path.write_text("schemas:\n  - namespace: Sales\n    entity_types:\n      - keys: []\n")

        errors = validate_schema_file(path)

        assert errors
        assert errors[0].startswith("schemas.0.entity_types.0.name")
