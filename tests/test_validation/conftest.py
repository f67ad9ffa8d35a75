"""Shared test fixtures for validation tests."""

import pytest
from edmx_to_types.ir.declarations import Property, SchemaModel, TypeDeclaration
from edmx_to_types.ir.types import DeclarationKind


@pytest.fixture
def inheritance_model() -> SchemaModel:
    """Return a model whose derived entity inherits its key."""
    return SchemaModel(
        namespaces=("NS",),
        declarations=(
            TypeDeclaration(
                "NS",
                "Base",
                DeclarationKind.ENTITY,
                properties=(Property("Id", "Edm.Int32", False),),
                keys=("Id",),
            ),
            TypeDeclaration(
                "NS",
                "Derived",
                DeclarationKind.ENTITY,
                base_type="N.Base",
                properties=(Property("Extra", "Edm.String"),),
                keys=("Id",),
            ),
        ),
        enums=(),
        schema_aliases={"N": "NS"},
    )
