"""Pydantic models for raw EDMX input and generator configuration."""

from edmx_to_types.models.config import (
    ConfigError,
    DecimalEncoding,
    GeneratorConfig,
    OutputFlavor,
    QualificationMode,
    RenderOptions,
    ToolConfig,
    load_config,
    parse_config,
)
from edmx_to_types.models.loader import (
    LoaderError,
    load_schema_document,
    parse_edmx,
    validate_schema_file,
)
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

__all__ = [
    # Configuration
    "ConfigError",
    "DecimalEncoding",
    "GeneratorConfig",
    "OutputFlavor",
    "QualificationMode",
    "RenderOptions",
    "ToolConfig",
    "load_config",
    "parse_config",
    # Loading
    "LoaderError",
    "load_schema_document",
    "parse_edmx",
    "validate_schema_file",
    # Raw schema tree
    "RawAssociation",
    "RawAssociationEnd",
    "RawComplexType",
    "RawEntityType",
    "RawEnumMember",
    "RawEnumType",
    "RawNavigationProperty",
    "RawProperty",
    "RawSchema",
    "SchemaDocument",
]
