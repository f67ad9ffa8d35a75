"""Schema resolution pipeline: raw schema tree to ResolvedModel."""

from __future__ import annotations

import logging

from edmx_to_types.ir.declarations import SchemaModel, TypeDeclaration
from edmx_to_types.ir.resolved import (
    DependencySet,
    ResolvedDeclaration,
    ResolvedField,
    ResolvedModel,
)
from edmx_to_types.ir.types import LazyReference, TypeCategory
from edmx_to_types.models.config import GeneratorConfig
from edmx_to_types.models.schema import SchemaDocument
from edmx_to_types.transform.context import ResolutionContext, build_resolution_context
from edmx_to_types.transform.dependency_graph import build_dependency_graph, report_cycles
from edmx_to_types.transform.enum_planner import EnumPlanner
from edmx_to_types.transform.normalizer import SchemaNormalizer
from edmx_to_types.transform.type_resolver import TypeReferenceResolver
from edmx_to_types.validation.errors import ValidationResult
from edmx_to_types.validation.validator import SchemaValidator, raise_for_result

logger = logging.getLogger(__name__)


class SchemaResolver:
    """Resolve a schema document into a ResolvedModel.

    This is the main entry point of the engine. It normalizes the raw
    tree, builds the resolution context once, resolves every property and
    navigation reference, plans enums and computes dependency sets. All
    recoverable problems end up in ``ResolvedModel.result``.

    Usage:
        resolver = SchemaResolver(GeneratorConfig(qualification_mode="always"))
        resolved = resolver.resolve(document)
    """

    def __init__(self, config: GeneratorConfig | None = None, strict: bool = False) -> None:
        """Initialize the resolver.

        Args:
        ----
            config: Engine configuration; defaults apply if omitted.
            strict: If True, ``resolve_and_raise`` treats warnings as errors.

        """
        self.config = config or GeneratorConfig()
        self.strict = strict

    def resolve(self, source: SchemaDocument | SchemaModel) -> ResolvedModel:
        """Resolve a raw document or an already normalized model.

        Args:
        ----
            source: The raw schema tree or a SchemaModel.

        Returns:
        -------
            The ResolvedModel, diagnostics included.

        Raises:
        ------
            EmptySchemaError: If a raw document declares nothing.

        """
        result = ValidationResult()
        if isinstance(source, SchemaDocument):
            model = SchemaNormalizer(result).normalize(source)
        else:
            model = source

        context = build_resolution_context(model, self.config, result)
        SchemaValidator().validate(model, result)

        graph = build_dependency_graph(model, context)
        resolver = TypeReferenceResolver(context, result)
        declarations = tuple(
            self._resolve_declaration(decl, context, resolver, graph[decl.qualified_name])
            for decl in model.declarations
        )
        enums = EnumPlanner(context, result).plan_all(model)
        report_cycles(graph, result)

        logger.debug(
            "Resolved %d declaration(s), %d enum(s): %d error(s), %d warning(s)",
            len(declarations),
            len(enums),
            len(result.errors),
            len(result.warnings),
        )
        return ResolvedModel(
            context=context,
            declarations=declarations,
            enums=enums,
            result=result,
        )

    def resolve_and_raise(self, source: SchemaDocument | SchemaModel) -> ResolvedModel:
        """Resolve and raise if the diagnostics contain errors.

        Raises
        ------
            ValidationError: On errors, or on warnings in strict mode.

        """
        resolved = self.resolve(source)
        raise_for_result(resolved.result, self.strict)
        return resolved

    def _resolve_declaration(
        self,
        decl: TypeDeclaration,
        context: ResolutionContext,
        resolver: TypeReferenceResolver,
        dependencies: DependencySet,
    ) -> ResolvedDeclaration:
        qualified_name = decl.qualified_name
        keys = set(decl.keys)

        fields = [
            ResolvedField(
                name=prop.name,
                descriptor=resolver.resolve(
                    prop.type, prop.nullable, decl.namespace, f"{qualified_name}.{prop.name}"
                ),
                is_key=prop.name in keys,
            )
            for prop in decl.properties
        ]
        # Navigation without a type was already reported as an undefined association
        silent = TypeReferenceResolver(context)
        fields.extend(
            ResolvedField(
                name=nav.name,
                descriptor=(resolver if nav.type else silent).resolve(
                    nav.type, nav.nullable, decl.namespace, f"{qualified_name}.{nav.name}"
                ),
                is_navigation=True,
            )
            for nav in decl.navigation
        )

        return ResolvedDeclaration(
            declaration=decl,
            rendered_name=context.rendered_name(qualified_name),
            fields=tuple(fields),
            dependencies=dependencies,
            base=self._base_reference(decl, context),
        )

    @staticmethod
    def _base_reference(decl: TypeDeclaration, context: ResolutionContext) -> LazyReference | None:
        if not decl.base_type:
            return None
        # Unknown bases are reported by the base type validator
        descriptor = TypeReferenceResolver(context).resolve(decl.base_type, False, decl.namespace)
        if descriptor.category != TypeCategory.STRUCTURED:
            return None
        return descriptor.lazy_reference


def resolve_schema(
    source: SchemaDocument | SchemaModel,
    config: GeneratorConfig | None = None,
) -> ResolvedModel:
    """Resolve a schema with the given configuration.

    Args:
    ----
        source: Raw schema tree or normalized model.
        config: Engine configuration.

    Returns:
    -------
        The ResolvedModel.

    """
    return SchemaResolver(config).resolve(source)
