"""Normalization and type resolution engine."""

from edmx_to_types.transform.context import ResolutionContext, build_resolution_context
from edmx_to_types.transform.dependency_graph import (
    build_dependency_graph,
    compute_dependencies,
    find_cycles,
)
from edmx_to_types.transform.enum_planner import EnumPlanner, parse_enum_value, plan_enum
from edmx_to_types.transform.namespace_resolver import (
    NamespacePlan,
    build_alias_table,
    exported_name,
    namespace_alias,
    resolve_namespaces,
)
from edmx_to_types.transform.normalizer import (
    EmptySchemaError,
    SchemaNormalizer,
    normalize_document,
)
from edmx_to_types.transform.resolver import SchemaResolver, resolve_schema
from edmx_to_types.transform.type_resolver import (
    EDM_PRIMITIVES,
    TypeReferenceResolver,
    resolve_type_reference,
)

__all__ = [
    "EDM_PRIMITIVES",
    "EmptySchemaError",
    "EnumPlanner",
    "NamespacePlan",
    "ResolutionContext",
    "SchemaNormalizer",
    "SchemaResolver",
    "TypeReferenceResolver",
    "build_alias_table",
    "build_dependency_graph",
    "build_resolution_context",
    "compute_dependencies",
    "exported_name",
    "find_cycles",
    "namespace_alias",
    "normalize_document",
    "parse_enum_value",
    "plan_enum",
    "resolve_namespaces",
    "resolve_schema",
    "resolve_type_reference",
]
