"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest
from edmx_to_types.ir.declarations import SchemaModel
from edmx_to_types.models.loader import load_schema_document, parse_edmx
from edmx_to_types.models.schema import SchemaDocument
from edmx_to_types.transform.normalizer import normalize_document
from edmx_to_types.validation.errors import ValidationResult


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def northwind_v4(fixtures_dir: Path) -> Path:
    """Return path to the two-namespace v4 metadata document."""
    return fixtures_dir / "northwind_v4.xml"


@pytest.fixture
def legacy_v3(fixtures_dir: Path) -> Path:
    """Return path to the v3 metadata document with associations."""
    return fixtures_dir / "legacy_v3.xml"


@pytest.fixture
def northwind_document(northwind_v4: Path) -> SchemaDocument:
    """Return the raw schema tree of the v4 document."""
    return load_schema_document(northwind_v4)


@pytest.fixture
def northwind_model(northwind_document: SchemaDocument) -> SchemaModel:
    """Return the normalized v4 document."""
    return normalize_document(northwind_document)


def _edmx(*schemas: str, version: str = "4.0") -> str:
    body = "".join(schemas)
    return (
        f'<edmx:Edmx Version="{version}" xmlns:edmx="http://docs.oasis-open.org/odata/ns/edmx">'
        f"<edmx:DataServices>{body}</edmx:DataServices></edmx:Edmx>"
    )


def _schema(namespace: str, body: str, alias: str | None = None) -> str:
    alias_attr = f' Alias="{alias}"' if alias else ""
    return (
        f'<Schema Namespace="{namespace}"{alias_attr} '
        f'xmlns="http://docs.oasis-open.org/odata/ns/edm">{body}</Schema>'
    )


@pytest.fixture
def make_schema() -> Callable[..., str]:
    """Return a builder for ``<Schema>`` elements: (namespace, body, alias=None)."""
    return _schema


@pytest.fixture
def make_edmx() -> Callable[..., str]:
    """Return a builder wrapping schema elements in an EDMX envelope."""
    return _edmx


@pytest.fixture
def load_model() -> Callable[..., SchemaModel]:
    """Return a helper that parses and normalizes EDMX text.

    Diagnostics go to the optional ``result`` keyword argument.
    """

    def load(content: str, result: ValidationResult | None = None) -> SchemaModel:
        return normalize_document(parse_edmx(content), result)

    return load


@pytest.fixture
def write_edmx(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes EDMX text to a temporary file."""

    def write(content: str, name: str = "metadata.xml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return write
