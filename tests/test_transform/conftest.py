"""Shared test fixtures for transform tests."""

from collections.abc import Callable

import pytest
from edmx_to_types.ir.declarations import EnumMember, EnumType, SchemaModel, TypeDeclaration
from edmx_to_types.ir.types import DeclarationKind
from edmx_to_types.models.config import GeneratorConfig
from edmx_to_types.transform.context import ResolutionContext, build_resolution_context


@pytest.fixture
def northwind_context(northwind_model: SchemaModel) -> ResolutionContext:
    """Return the resolution context of the v4 document with default config."""
    return build_resolution_context(northwind_model)


@pytest.fixture
def small_model() -> SchemaModel:
    """Return a hand-built model with an alias, an enum and a self reference."""
    return SchemaModel(
        namespaces=("NS",),
        declarations=(
            TypeDeclaration("NS", "Item", DeclarationKind.COMPLEX),
            TypeDeclaration("NS", "Node", DeclarationKind.ENTITY, keys=("Id",)),
        ),
        enums=(EnumType("NS", "Color", members=(EnumMember("Red"), EnumMember("Blue"))),),
        schema_aliases={"N": "NS"},
    )


@pytest.fixture
def context_for() -> Callable[..., ResolutionContext]:
    """Return a helper building a context for a model and optional config values."""

    def build(model: SchemaModel, **config: str) -> ResolutionContext:
        return build_resolution_context(model, GeneratorConfig.model_validate(config))

    return build
