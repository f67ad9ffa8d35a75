"""Resolve raw EDM type references into type reference descriptors."""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import TYPE_CHECKING

from edmx_to_types.ir.declarations import qualify, split_qualified
from edmx_to_types.ir.types import (
    DeclarationKind,
    NullabilityStrategy,
    PrimitiveKind,
    TypeCategory,
    TypeReferenceDescriptor,
)
from edmx_to_types.validation.errors import ErrorCodes, ValidationResult

if TYPE_CHECKING:
    from edmx_to_types.transform.context import ResolutionContext

logger = logging.getLogger(__name__)

EDM_NAMESPACE = "Edm"
EDM_PREFIX = EDM_NAMESPACE + "."

# Mapping from EDM primitive names to primitive kinds
EDM_PRIMITIVES: dict[str, PrimitiveKind] = {
    "Edm.String": PrimitiveKind.STRING,
    "Edm.Boolean": PrimitiveKind.BOOLEAN,
    "Edm.Byte": PrimitiveKind.BYTE,
    "Edm.SByte": PrimitiveKind.SBYTE,
    "Edm.Int16": PrimitiveKind.INT16,
    "Edm.Int32": PrimitiveKind.INT32,
    "Edm.Int64": PrimitiveKind.INT64,
    "Edm.Single": PrimitiveKind.SINGLE,
    "Edm.Double": PrimitiveKind.DOUBLE,
    "Edm.Decimal": PrimitiveKind.DECIMAL,
    "Edm.Guid": PrimitiveKind.GUID,
    "Edm.Date": PrimitiveKind.DATE,
    "Edm.DateTime": PrimitiveKind.DATETIME,  # v2/v3
    "Edm.DateTimeOffset": PrimitiveKind.DATETIME_OFFSET,
    "Edm.TimeOfDay": PrimitiveKind.TIME_OF_DAY,
    "Edm.Time": PrimitiveKind.TIME_OF_DAY,  # v2/v3
    "Edm.Duration": PrimitiveKind.DURATION,
    "Edm.Binary": PrimitiveKind.BINARY,
}

COLLECTION_RE = re.compile(r"^\s*Collection\((.+)\)\s*$")


def unwrap_collection(raw: str) -> tuple[str, bool]:
    """Strip a ``Collection(...)`` wrapper.

    Returns:
    -------
        The inner reference and whether a wrapper was present.

    """
    match = COLLECTION_RE.match(raw)
    if match:
        return match.group(1).strip(), True
    return raw.strip(), False


def lookup_primitive(qualified_name: str) -> PrimitiveKind | None:
    """Primitive kind of an ``Edm.*`` name, or None."""
    return EDM_PRIMITIVES.get(qualified_name)


def nullability_for(
    category: TypeCategory,
    primitive: PrimitiveKind | None,
    nullable: bool | None,
) -> NullabilityStrategy:
    """Nullability strategy of a non-collection reference.

    Empty-representable primitives never need a wrapper; everything else
    gets one unless ``nullable`` is explicitly False.
    """
    if category == TypeCategory.PRIMITIVE and primitive is not None:
        if primitive.is_empty_representable:
            return NullabilityStrategy.NONE
    if nullable is False:
        return NullabilityStrategy.NONE
    return NullabilityStrategy.OPTIONAL_WRAPPER


class TypeReferenceResolver:
    """Resolve raw type references against a ResolutionContext.

    Unresolvable references never raise: they produce an UNKNOWN
    descriptor and, when a result collector is given, a W001 warning.

    Usage:
        resolver = TypeReferenceResolver(context, result)
        descriptor = resolver.resolve("Collection(Sales.Item)", None, "Sales")
    """

    def __init__(
        self,
        context: ResolutionContext,
        result: ValidationResult | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
        ----
            context: The resolution context.
            result: Optional collector for unresolved reference warnings.

        """
        self.context = context
        self.result = result

    def qualified_target(self, raw: str, context_namespace: str) -> str:
        """Qualified name a non-collection reference points at."""
        namespace, _ = split_qualified(raw)
        qualified_name = raw if namespace else qualify(context_namespace, raw)
        return self.context.expand_alias(qualified_name)

    def resolve(
        self,
        raw: str,
        nullable: bool | None = None,
        context_namespace: str = "",
        path: str = "",
    ) -> TypeReferenceDescriptor:
        """Resolve one raw type reference.

        Args:
        ----
            raw: Raw reference, e.g. ``Edm.String`` or ``Collection(NS.Item)``.
            nullable: Nullable facet (None when unspecified).
            context_namespace: Namespace assumed for unqualified names.
            path: Location used in diagnostics.

        Returns:
        -------
            The resolved descriptor.

        """
        inner, is_collection = unwrap_collection(raw)
        if is_collection:
            element = self.resolve(inner, None, context_namespace, path)
            return replace(
                element,
                raw=raw,
                collection=True,
                nullability=NullabilityStrategy.COLLECTION,
            )

        if not inner:
            return self._unknown(raw, None, nullable, path)

        primitive = lookup_primitive(self.context.expand_alias(inner))
        if primitive is not None:
            return TypeReferenceDescriptor(
                category=TypeCategory.PRIMITIVE,
                raw=raw,
                primitive=primitive,
                nullability=nullability_for(TypeCategory.PRIMITIVE, primitive, nullable),
            )

        target = self.qualified_target(inner, context_namespace)
        kind = self.context.kind_of(target)
        if kind is None:
            return self._unknown(raw, target, nullable, path)

        category = TypeCategory.ENUM if kind == DeclarationKind.ENUM else TypeCategory.STRUCTURED
        return TypeReferenceDescriptor(
            category=category,
            raw=raw,
            qualified_name=target,
            kind=kind,
            nullability=nullability_for(category, None, nullable),
        )

    def _unknown(
        self,
        raw: str,
        target: str | None,
        nullable: bool | None,
        path: str,
    ) -> TypeReferenceDescriptor:
        if self.result is not None:
            self.result.add_warning(
                code=ErrorCodes.W001_UNRESOLVED_TYPE,
                message=f"Type reference '{raw}' does not resolve to a known type",
                path=path or raw,
                suggestion="Declare the type or check its namespace; an opaque type is generated",
                raw_type=raw,
            )
            logger.warning("Unresolved type reference %r at %s", raw, path or "<unknown>")
        return TypeReferenceDescriptor(
            category=TypeCategory.UNKNOWN,
            raw=raw,
            qualified_name=target,
            nullability=nullability_for(TypeCategory.UNKNOWN, None, nullable),
        )


def resolve_type_reference(
    raw: str,
    nullable: bool | None,
    context_namespace: str,
    context: ResolutionContext,
    result: ValidationResult | None = None,
) -> TypeReferenceDescriptor:
    """Resolve one raw type reference.

    Args:
    ----
        raw: Raw reference string.
        nullable: Nullable facet (None when unspecified).
        context_namespace: Namespace assumed for unqualified names.
        context: The resolution context.
        result: Optional collector for diagnostics.

    Returns:
    -------
        The resolved descriptor.

    """
    return TypeReferenceResolver(context, result).resolve(raw, nullable, context_namespace)
