"""Immutable resolution context shared by every resolution step."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from edmx_to_types.ir.declarations import SchemaModel, qualify, split_qualified
from edmx_to_types.ir.types import DeclarationKind
from edmx_to_types.models.config import DecimalEncoding, GeneratorConfig
from edmx_to_types.transform.namespace_resolver import NamespacePlan, resolve_namespaces
from edmx_to_types.validation.errors import ErrorCodes, ValidationResult


@dataclass(frozen=True)
class ResolutionContext:
    """Everything a resolution call needs to know about the schema load.

    Built once after all declarations are loaded and passed explicitly to
    the type resolver, the enum planner and the dependency graph builder.

    Attributes
    ----------
        config: Engine configuration.
        namespaces: Plan with aliases and qualification decisions.
        kinds: Qualified name to declaration kind, for every declaration.
        schema_aliases: Schema ``Alias`` attribute to namespace.
        rendered_names: Qualified name to target-language name.

    """

    config: GeneratorConfig
    namespaces: NamespacePlan
    kinds: Mapping[str, DeclarationKind] = field(default_factory=dict)
    schema_aliases: Mapping[str, str] = field(default_factory=dict)
    rendered_names: Mapping[str, str] = field(default_factory=dict)

    @property
    def decimal_encoding(self) -> DecimalEncoding:
        """Configured decimal representation."""
        return self.config.decimal_encoding

    @property
    def aliases(self) -> Mapping[str, str]:
        """Namespace to short alias."""
        return self.namespaces.aliases

    def expand_alias(self, qualified_name: str) -> str:
        """Replace a schema alias prefix with its namespace."""
        namespace, name = split_qualified(qualified_name)
        if namespace in self.schema_aliases:
            return qualify(self.schema_aliases[namespace], name)
        return qualified_name

    def kind_of(self, qualified_name: str) -> DeclarationKind | None:
        """Kind of a known declaration, or None."""
        return self.kinds.get(qualified_name)

    def is_enum(self, qualified_name: str) -> bool:
        """Whether the name denotes a known enum."""
        return self.kinds.get(qualified_name) == DeclarationKind.ENUM

    def is_structured(self, qualified_name: str) -> bool:
        """Whether the name denotes a known entity or complex type."""
        return self.kinds.get(qualified_name) in (DeclarationKind.ENTITY, DeclarationKind.COMPLEX)

    def rendered_name(self, qualified_name: str) -> str:
        """Target-language name for a qualified name.

        Names outside the inventory are rendered with the same rules so
        renderers always get an identifier.
        """
        if qualified_name in self.rendered_names:
            return self.rendered_names[qualified_name]
        namespace, name = split_qualified(qualified_name)
        return self.namespaces.rendered_name(namespace, name)


def build_resolution_context(
    model: SchemaModel,
    config: GeneratorConfig | None = None,
    result: ValidationResult | None = None,
) -> ResolutionContext:
    """Build the resolution context for a normalized model.

    Args:
    ----
        model: The complete declaration inventory.
        config: Engine configuration; defaults apply if omitted.
        result: Optional collector for namespace and naming diagnostics.

    Returns:
    -------
        The immutable ResolutionContext.

    """
    config = config or GeneratorConfig()
    plan = resolve_namespaces(
        model.name_inventory(),
        config.qualification_mode,
        namespaces=model.namespaces,
        result=result,
    )

    kinds: dict[str, DeclarationKind] = {}
    rendered: dict[str, str] = {}
    for decl in model.declarations:
        kinds[decl.qualified_name] = decl.kind
        rendered[decl.qualified_name] = plan.rendered_name(decl.namespace, decl.name)
    for enum in model.enums:
        kinds[enum.qualified_name] = DeclarationKind.ENUM
        rendered[enum.qualified_name] = plan.rendered_name(enum.namespace, enum.name)
    if result is not None:
        report_name_collisions(rendered, result)

    return ResolutionContext(
        config=config,
        namespaces=NamespacePlan(
            mode=plan.mode,
            aliases=MappingProxyType(dict(plan.aliases)),
            shared_names=plan.shared_names,
        ),
        kinds=MappingProxyType(kinds),
        schema_aliases=MappingProxyType(dict(model.schema_aliases)),
        rendered_names=MappingProxyType(rendered),
    )


def report_name_collisions(rendered: Mapping[str, str], result: ValidationResult) -> None:
    """Warn about declarations that share a rendered name.

    Renderers emit one class per rendered name, so all but one of the
    colliding declarations would be lost.

    Args:
    ----
        rendered: Qualified name to rendered name.
        result: Collector for the warnings.

    """
    owners: dict[str, list[str]] = defaultdict(list)
    for qualified_name, name in rendered.items():
        owners[name].append(qualified_name)
    for name, names in sorted(owners.items()):
        if len(names) < 2:
            continue
        names.sort()
        result.add_warning(
            code=ErrorCodes.W006_RENDERED_NAME_COLLISION,
            message=f"{', '.join(names)} all render as '{name}'",
            path=names[-1],
            suggestion="Use qualification mode 'always' or rename one of the declarations",
            rendered_name=name,
            declarations=names,
        )
