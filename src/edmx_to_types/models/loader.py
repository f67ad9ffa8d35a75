"""EDMX/CSDL and YAML/JSON schema loading utilities."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from xml.etree.ElementTree import Element

import defusedxml.ElementTree as ET
import yaml
from defusedxml import DefusedXmlException
from pydantic import ValidationError

from edmx_to_types.models.schema import (
    RawAssociation,
    RawAssociationEnd,
    RawComplexType,
    RawEntityType,
    RawEnumMember,
    RawEnumType,
    RawNavigationProperty,
    RawProperty,
    RawSchema,
    SchemaDocument,
)

logger = logging.getLogger(__name__)

XML_SUFFIXES = {".xml", ".edmx", ".csdl"}
DUMP_SUFFIXES = {".yaml", ".yml", ".json"}


class LoaderError(Exception):
    """Error during schema file loading."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        """Initialize LoaderError.

        Args:
        ----
            message: Error message describing what went wrong.
            path: Optional path to the file that caused the error.

        """
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


def _local(tag: str) -> str:
    """Strip the XML namespace from an element tag."""
    return tag.rsplit("}", 1)[-1]


def _children(elem: Element, name: str) -> list[Element]:
    return [child for child in elem if _local(child.tag) == name]


def _attr(elem: Element, name: str) -> str | None:
    """Look up an attribute by local name, ignoring its XML namespace."""
    if name in elem.attrib:
        return elem.attrib[name]
    for key, value in elem.attrib.items():
        if _local(key) == name:
            return value
    return None


def _bool_attr(elem: Element, name: str) -> bool | None:
    value = _attr(elem, name)
    if value is None or value == "":
        return None
    return value.strip().lower() == "true"


def _parse_property(elem: Element) -> RawProperty:
    return RawProperty(
        name=_attr(elem, "Name") or "",
        type=_attr(elem, "Type") or "",
        nullable=_bool_attr(elem, "Nullable"),
    )


def _parse_navigation_property(elem: Element) -> RawNavigationProperty:
    return RawNavigationProperty(
        name=_attr(elem, "Name") or "",
        type=_attr(elem, "Type"),
        nullable=_bool_attr(elem, "Nullable"),
        partner=_attr(elem, "Partner"),
        relationship=_attr(elem, "Relationship"),
        from_role=_attr(elem, "FromRole"),
        to_role=_attr(elem, "ToRole"),
    )


def _parse_keys(elem: Element) -> list[str]:
    keys: list[str] = []
    for key in _children(elem, "Key"):
        for ref in _children(key, "PropertyRef"):
            name = _attr(ref, "Name")
            if name:
                keys.append(name)
    return keys


def _parse_entity_type(elem: Element) -> RawEntityType:
    return RawEntityType(
        name=_attr(elem, "Name") or "",
        base_type=_attr(elem, "BaseType") or None,
        abstract=bool(_bool_attr(elem, "Abstract")),
        open_type=bool(_bool_attr(elem, "OpenType")),
        keys=_parse_keys(elem),
        properties=[_parse_property(p) for p in _children(elem, "Property")],
        navigation_properties=[
            _parse_navigation_property(n) for n in _children(elem, "NavigationProperty")
        ],
    )


def _parse_complex_type(elem: Element) -> RawComplexType:
    return RawComplexType(
        name=_attr(elem, "Name") or "",
        base_type=_attr(elem, "BaseType") or None,
        abstract=bool(_bool_attr(elem, "Abstract")),
        open_type=bool(_bool_attr(elem, "OpenType")),
        properties=[_parse_property(p) for p in _children(elem, "Property")],
        navigation_properties=[
            _parse_navigation_property(n) for n in _children(elem, "NavigationProperty")
        ],
    )


def _parse_enum_type(elem: Element) -> RawEnumType:
    # Some producers emit "Flags" instead of "IsFlags"
    is_flags = _bool_attr(elem, "IsFlags")
    if is_flags is None:
        is_flags = _bool_attr(elem, "Flags")
    return RawEnumType(
        name=_attr(elem, "Name") or "",
        underlying_type=_attr(elem, "UnderlyingType") or None,
        is_flags=bool(is_flags),
        members=[
            RawEnumMember(name=_attr(m, "Name") or "", value=_attr(m, "Value"))
            for m in _children(elem, "Member")
        ],
    )


def _parse_association(elem: Element) -> RawAssociation:
    return RawAssociation(
        name=_attr(elem, "Name") or "",
        ends=[
            RawAssociationEnd(
                role=_attr(end, "Role") or "",
                type=_attr(end, "Type") or "",
                multiplicity=_attr(end, "Multiplicity") or "1",
            )
            for end in _children(elem, "End")
        ],
    )


def _parse_schema(elem: Element) -> RawSchema:
    return RawSchema(
        namespace=_attr(elem, "Namespace") or "",
        alias=_attr(elem, "Alias") or None,
        entity_types=[_parse_entity_type(e) for e in _children(elem, "EntityType")],
        complex_types=[_parse_complex_type(c) for c in _children(elem, "ComplexType")],
        enum_types=[_parse_enum_type(e) for e in _children(elem, "EnumType")],
        associations=[_parse_association(a) for a in _children(elem, "Association")],
    )


def parse_edmx(content: str | bytes, path: Path | None = None) -> SchemaDocument:
    """Parse EDMX/CSDL XML text into a raw schema document.

    Every ``<Schema>`` element is collected regardless of where it sits
    (``edmx:DataServices`` for EDMX, or the document root for bare CSDL).

    Args:
    ----
        content: The XML document.
        path: Source path, used in error messages only.

    Returns:
    -------
        The parsed SchemaDocument.

    Raises:
    ------
        LoaderError: If the XML is malformed, unsafe, or holds no schema.

    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise LoaderError(f"XML parsing error: {e}", path) from e
    except DefusedXmlException as e:
        raise LoaderError(f"Refusing unsafe XML construct: {e}", path) from e

    try:
        schemas = [_parse_schema(elem) for elem in root.iter() if _local(elem.tag) == "Schema"]
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(x) for x in first["loc"])
        raise LoaderError(f"Malformed schema element ({loc}: {first['msg']})", path) from e

    if not schemas:
        raise LoaderError("No <Schema> element found in metadata", path)

    version = _attr(root, "Version") if _local(root.tag) == "Edmx" else None
    logger.debug(
        "Parsed %d schema(s) from %s (EDMX version %s)",
        len(schemas),
        path or "<string>",
        version or "unknown",
    )
    return SchemaDocument(edmx_version=version, schemas=schemas)


def _load_dump(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise LoaderError(f"YAML parsing error: {e}", path) from e

    if data is None:
        raise LoaderError("File is empty", path)

    if not isinstance(data, dict):
        raise LoaderError(
            f"Expected dictionary at root level, got {type(data).__name__}",
            path,
        )

    return data


def load_schema_document(path: Path) -> SchemaDocument:
    """Load a raw schema document from an EDMX file or a YAML/JSON dump.

    Args:
    ----
        path: Path to a ``.xml``/``.edmx``/``.csdl`` file or a
            ``.yaml``/``.yml``/``.json`` dump of a SchemaDocument.

    Returns:
    -------
        The loaded SchemaDocument.

    Raises:
    ------
        LoaderError: If the file cannot be loaded or parsed.
        ValidationError: If a YAML/JSON dump does not match the schema tree.

    """
    if not path.exists():
        raise LoaderError(f"File not found: {path}", path)

    if not path.is_file():
        raise LoaderError(f"Not a file: {path}", path)

    suffix = path.suffix.lower()
    if suffix not in XML_SUFFIXES | DUMP_SUFFIXES:
        raise LoaderError(
            f"Unsupported file extension: {suffix}. "
            "Use .xml, .edmx, .csdl, .yaml, .yml, or .json",
            path,
        )

    if suffix in XML_SUFFIXES:
        try:
            content = path.read_bytes()
        except OSError as e:
            raise LoaderError(f"File read error: {e}", path) from e
        if not content.strip():
            raise LoaderError("File is empty", path)
        return parse_edmx(content, path)

    try:
        data = _load_dump(path)
    except OSError as e:
        raise LoaderError(f"File read error: {e}", path) from e
    return SchemaDocument.model_validate(data)


def validate_schema_file(path: Path) -> list[str]:
    """Load a schema file and return a list of errors instead of raising.

    Args:
    ----
        path: Path to the schema file.

    Returns:
    -------
        List of error messages (empty if the file loads).

    """
    try:
        load_schema_document(path)
    except LoaderError as e:
        return [str(e)]
    except ValidationError as e:
        errors: list[str] = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"{loc}: {error['msg']}")
        return errors
    return []
