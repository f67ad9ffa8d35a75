"""Python spelling of resolved type reference descriptors."""

from __future__ import annotations

import keyword
import re
from collections.abc import Callable
from dataclasses import dataclass

from edmx_to_types.ir.types import (
    NullabilityStrategy,
    PrimitiveKind,
    TypeCategory,
    TypeReferenceDescriptor,
)
from edmx_to_types.models.config import DecimalEncoding

# Annotation and the module it needs, per primitive kind
PRIMITIVE_ANNOTATIONS: dict[PrimitiveKind, tuple[str, str | None]] = {
    PrimitiveKind.STRING: ("str", None),
    PrimitiveKind.BOOLEAN: ("bool", None),
    PrimitiveKind.BYTE: ("int", None),
    PrimitiveKind.SBYTE: ("int", None),
    PrimitiveKind.INT16: ("int", None),
    PrimitiveKind.INT32: ("int", None),
    PrimitiveKind.INT64: ("int", None),
    PrimitiveKind.SINGLE: ("float", None),
    PrimitiveKind.DOUBLE: ("float", None),
    PrimitiveKind.DECIMAL: ("decimal.Decimal", "decimal"),
    PrimitiveKind.GUID: ("uuid.UUID", "uuid"),
    PrimitiveKind.DATE: ("datetime.date", "datetime"),
    PrimitiveKind.DATETIME: ("datetime.datetime", "datetime"),
    PrimitiveKind.DATETIME_OFFSET: ("datetime.datetime", "datetime"),
    PrimitiveKind.TIME_OF_DAY: ("datetime.time", "datetime"),
    PrimitiveKind.DURATION: ("datetime.timedelta", "datetime"),
    PrimitiveKind.BINARY: ("bytes", None),
}

UNKNOWN_ANNOTATION = "typing.Any"

# Empty values that stand for "absent" when no wrapper is used
EMPTY_DEFAULTS = {
    "str": '""',
    "bytes": 'b""',
}

# Attribute names owned by pydantic.BaseModel
PYDANTIC_RESERVED = frozenset(
    {
        "construct",
        "copy",
        "dict",
        "from_orm",
        "json",
        "parse_file",
        "parse_obj",
        "parse_raw",
        "schema",
        "schema_json",
        "update_forward_refs",
        "validate",
    }
)

# Builtins spelled in annotations; a field with one of these names would
# shadow the type inside the class body
BUILTIN_ANNOTATIONS = frozenset({"bool", "bytes", "float", "int", "list", "str"})

_INVALID_CHARS_RE = re.compile(r"\W")


def python_identifier(name: str, reserved: frozenset[str] = frozenset()) -> str:
    """Turn a schema name into a usable attribute name.

    Invalid characters become underscores, leading underscores are dropped
    (they mean "private" to pydantic and enum), leading digits get a ``v``
    prefix, and keywords or reserved names get a trailing underscore.

    Examples:
    --------
        >>> python_identifier("order-date")
        'order_date'
        >>> python_identifier("class")
        'class_'

    """
    ident = _INVALID_CHARS_RE.sub("_", name).lstrip("_") or "value"
    if ident[0].isdigit():
        ident = "v" + ident
    if keyword.iskeyword(ident) or ident in reserved or ident.startswith("model_"):
        ident += "_"
    return ident


def module_name(rendered_name: str) -> str:
    """snake_case module name for a rendered class name."""
    snake = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", rendered_name).lower()
    return python_identifier(snake)


@dataclass(frozen=True)
class FieldSpec:
    """How one field is spelled in generated code.

    Attributes
    ----------
        annotation: The type annotation.
        default: Default value expression, or None for a required field.
        factory: Default factory expression, or None.
        modules: Standard library modules the annotation needs.
        references: Qualified names of generated types the annotation uses.

    """

    annotation: str
    default: str | None = None
    factory: str | None = None
    modules: frozenset[str] = frozenset()
    references: frozenset[str] = frozenset()

    @property
    def is_required(self) -> bool:
        """Whether the field has neither a default nor a factory."""
        return self.default is None and self.factory is None


class TypeMapper:
    """Map descriptors to Python annotations.

    Usage:
        mapper = TypeMapper(resolved.context.rendered_name, DecimalEncoding.NATIVE)
        spec = mapper.field_spec(descriptor)
    """

    def __init__(
        self,
        rendered_name: Callable[[str], str],
        decimal_encoding: DecimalEncoding = DecimalEncoding.NATIVE,
    ) -> None:
        """Initialize the mapper.

        Args:
        ----
            rendered_name: Callable giving the class name of a qualified name.
            decimal_encoding: How ``Edm.Decimal`` values are represented.

        """
        self.rendered_name = rendered_name
        self.decimal_encoding = decimal_encoding

    def element_annotation(
        self, descriptor: TypeReferenceDescriptor
    ) -> tuple[str, frozenset[str], frozenset[str]]:
        """Annotation of the element type, ignoring collection and nullability.

        Returns:
        -------
            The annotation, the modules it needs and the generated types it uses.

        """
        if descriptor.category == TypeCategory.PRIMITIVE and descriptor.primitive is not None:
            if (
                descriptor.primitive == PrimitiveKind.DECIMAL
                and self.decimal_encoding == DecimalEncoding.STRING
            ):
                return "str", frozenset(), frozenset()
            annotation, module = PRIMITIVE_ANNOTATIONS[descriptor.primitive]
            return annotation, frozenset({module} if module else ()), frozenset()

        if descriptor.category in (TypeCategory.ENUM, TypeCategory.STRUCTURED):
            qualified_name = descriptor.qualified_name or ""
            return (
                self.rendered_name(qualified_name),
                frozenset(),
                frozenset({qualified_name}),
            )

        return UNKNOWN_ANNOTATION, frozenset({"typing"}), frozenset()

    def field_spec(self, descriptor: TypeReferenceDescriptor) -> FieldSpec:
        """Annotation and default of a field with the given descriptor."""
        element, modules, references = self.element_annotation(descriptor)

        if descriptor.nullability == NullabilityStrategy.COLLECTION:
            return FieldSpec(
                annotation=f"list[{element}]",
                factory="list",
                modules=modules,
                references=references,
            )

        if element == UNKNOWN_ANNOTATION:
            return FieldSpec(annotation=element, default="None", modules=modules)

        if descriptor.nullability == NullabilityStrategy.OPTIONAL_WRAPPER:
            return FieldSpec(
                annotation=f"{element} | None",
                default="None",
                modules=modules,
                references=references,
            )

        if descriptor.category == TypeCategory.PRIMITIVE and descriptor.primitive is not None:
            if descriptor.primitive.is_empty_representable:
                if element in EMPTY_DEFAULTS:
                    return FieldSpec(annotation=element, default=EMPTY_DEFAULTS[element])
                # guid and temporal values have no empty form in Python
                return FieldSpec(
                    annotation=f"{element} | None",
                    default="None",
                    modules=modules,
                )

        return FieldSpec(annotation=element, modules=modules, references=references)
