"""Assign integer values to enum members."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from edmx_to_types.ir.enums import EnumPlan
from edmx_to_types.ir.types import INTEGER_RANGES, PrimitiveKind
from edmx_to_types.transform.type_resolver import lookup_primitive
from edmx_to_types.validation.errors import ErrorCodes, ValidationResult

if TYPE_CHECKING:
    from edmx_to_types.ir.declarations import EnumType, SchemaModel
    from edmx_to_types.transform.context import ResolutionContext

logger = logging.getLogger(__name__)

_VALUE_RE = re.compile(r"^([+-]?)(0[xX][0-9a-fA-F]+|\d+)$")


def parse_enum_value(text: str) -> int | None:
    """Parse explicit member value text.

    Accepts decimal and ``0x`` hexadecimal, optionally signed.

    Examples:
    --------
        >>> parse_enum_value("5")
        5
        >>> parse_enum_value("0x10")
        16
        >>> parse_enum_value("five") is None
        True

    """
    match = _VALUE_RE.match(text.strip())
    if not match:
        return None
    sign, digits = match.groups()
    value = int(digits, 16) if digits[:2].lower() == "0x" else int(digits)
    return -value if sign == "-" else value


def underlying_kind(enum: EnumType, result: ValidationResult | None = None) -> PrimitiveKind:
    """Integer kind of an enum, ``Edm.Int32`` when the declared one is not integral.

    The fallback is recorded as a warning on ``result`` when one is given.
    """
    kind = lookup_primitive(enum.underlying_type)
    if kind is None or not kind.is_integer:
        logger.warning(
            "Enum %s has non-integer underlying type %r, using Edm.Int32",
            enum.qualified_name,
            enum.underlying_type,
        )
        if result is not None:
            result.add_warning(
                code=ErrorCodes.W007_NON_INTEGER_UNDERLYING_TYPE,
                message=(
                    f"Enum underlying type '{enum.underlying_type}' is not an integer type, "
                    "using Edm.Int32"
                ),
                path=enum.qualified_name,
                suggestion="Use Edm.Byte, Edm.SByte, Edm.Int16, Edm.Int32 or Edm.Int64",
                underlying_type=enum.underlying_type,
            )
        return PrimitiveKind.INT32
    return kind


class EnumPlanner:
    """Build EnumPlans for the enums of a schema model.

    Values follow a running counter that starts at 0 and continues at
    ``value + 1`` after every member. Explicit values override the counter;
    malformed or out-of-range ones are reported (W002) and replaced by it.
    Duplicate member names are reported (E101) and dropped, so the first
    occurrence wins. A non-integer underlying type is reported (W007) and
    replaced by ``Edm.Int32``.

    Usage:
        planner = EnumPlanner(context, result)
        plans = planner.plan_all(model)
    """

    def __init__(
        self,
        context: ResolutionContext,
        result: ValidationResult | None = None,
    ) -> None:
        """Initialize the planner.

        Args:
        ----
            context: The resolution context (for rendered names).
            result: Collector for diagnostics; a fresh one is used if omitted.

        """
        self.context = context
        self.result = result if result is not None else ValidationResult()

    def plan(self, enum: EnumType) -> EnumPlan:
        """Plan a single enum.

        Args:
        ----
            enum: The normalized enum declaration.

        Returns:
        -------
            The EnumPlan with members in declaration order.

        """
        kind = underlying_kind(enum, self.result)
        low, high = INTEGER_RANGES[kind]
        qualified_name = enum.qualified_name

        members: list[tuple[str, int]] = []
        seen: set[str] = set()
        counter = 0
        for member in enum.members:
            path = f"{qualified_name}.{member.name}"
            if member.name in seen:
                self.result.add_error(
                    code=ErrorCodes.E101_DUPLICATE_ENUM_MEMBER,
                    message=f"Enum member '{member.name}' is declared more than once",
                    path=path,
                    suggestion="Rename or remove the duplicate; the first member is kept",
                )
                continue
            seen.add(member.name)

            value = counter
            if member.value is not None:
                parsed = parse_enum_value(member.value)
                if parsed is None or not low <= parsed <= high:
                    self.result.add_warning(
                        code=ErrorCodes.W002_MALFORMED_ENUM_VALUE,
                        message=(
                            f"Enum member value '{member.value}' is not a valid "
                            f"{kind.value} value, using {counter}"
                        ),
                        path=path,
                        suggestion="Use a decimal or 0x-prefixed hexadecimal integer",
                        value=member.value,
                    )
                    logger.warning("Malformed enum value %r at %s", member.value, path)
                else:
                    value = parsed

            members.append((member.name, value))
            counter = value + 1

        return EnumPlan(
            qualified_name=qualified_name,
            rendered_name=self.context.rendered_name(qualified_name),
            underlying=kind,
            is_flags=enum.is_flags,
            members=tuple(members),
        )

    def plan_all(self, model: SchemaModel) -> tuple[EnumPlan, ...]:
        """Plan every enum of the model, in qualified name order."""
        return tuple(self.plan(enum) for enum in model.enums)


def plan_enum(
    enum: EnumType,
    context: ResolutionContext,
    result: ValidationResult | None = None,
) -> EnumPlan:
    """Plan one enum declaration.

    Args:
    ----
        enum: The normalized enum declaration.
        context: The resolution context.
        result: Optional collector for diagnostics.

    Returns:
    -------
        The EnumPlan.

    """
    return EnumPlanner(context, result).plan(enum)
