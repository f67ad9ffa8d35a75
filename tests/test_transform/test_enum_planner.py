"""Tests for enum value planning."""

import logging
from collections.abc import Callable

import pytest
from edmx_to_types.ir.declarations import EnumMember, EnumType, SchemaModel
from edmx_to_types.ir.types import PrimitiveKind
from edmx_to_types.transform.context import ResolutionContext
from edmx_to_types.transform.enum_planner import (
    EnumPlanner,
    parse_enum_value,
    plan_enum,
    underlying_kind,
)
from edmx_to_types.validation.errors import ErrorCodes, ValidationResult


def _enum(*members: tuple[str, str | None], **kwargs: object) -> EnumType:
    return EnumType(
        "NS",
        "E",
        members=tuple(EnumMember(name, value) for name, value in members),
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.fixture
def context(small_model: SchemaModel, context_for: Callable[..., ResolutionContext]) -> ResolutionContext:
    """Return a context for planning standalone enums."""
    return context_for(small_model)


class TestParseEnumValue:
    """Tests for parse_enum_value."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("0", 0),
            ("42", 42),
            ("-3", -3),
            ("+7", 7),
            ("0x10", 16),
            ("0XfF", 255),
            (" 5 ", 5),
            ("five", None),
            ("1.5", None),
            ("", None),
            ("0x", None),
        ],
    )
    def test_parse(self, text: str, expected: int | None) -> None:
        """Should accept decimal and hexadecimal integers only."""
        assert parse_enum_value(text) == expected


class TestUnderlyingKind:
    """Tests for underlying_kind."""

    def test_integer_kind(self) -> None:
        """Should keep integral underlying types."""
        assert underlying_kind(_enum(underlying_type="Edm.Int64")) == PrimitiveKind.INT64

    def test_non_integer_falls_back(self, caplog: pytest.LogCaptureFixture) -> None:
        """Should use Int32 for non-integral underlying types and log it."""
        with caplog.at_level(logging.WARNING, logger="edmx_to_types"):
            kind = underlying_kind(_enum(underlying_type="Edm.String"))

        assert kind == PrimitiveKind.INT32
        assert "Edm.String" in caplog.text

    def test_non_integer_is_reported(self) -> None:
        """Should record W007 on the result when one is given."""
        result = ValidationResult()

        kind = underlying_kind(_enum(underlying_type="Edm.Decimal"), result)

        assert kind == PrimitiveKind.INT32
        assert [w.code for w in result.warnings] == [ErrorCodes.W007_NON_INTEGER_UNDERLYING_TYPE]
        assert result.warnings[0].location is not None
        assert result.warnings[0].location.path == "NS.E"
        assert result.warnings[0].context == {"underlying_type": "Edm.Decimal"}

    def test_planner_reports_non_integer(self, context: ResolutionContext) -> None:
        """Should surface the fallback through the planner's result."""
        result = ValidationResult()

        plan = plan_enum(_enum(("A", None), underlying_type="Edm.String"), context, result)

        assert plan.underlying == PrimitiveKind.INT32
        assert result.has_code(ErrorCodes.W007_NON_INTEGER_UNDERLYING_TYPE)


class TestEnumPlanner:
    """Tests for EnumPlanner."""

    def test_implicit_values_continue_after_explicit(self, context: ResolutionContext) -> None:
        """Should number members from 0 and continue after explicit values."""
        plan = plan_enum(_enum(("Open", None), ("Closed", "5"), ("Cancelled", None)), context)

        assert plan.members == (("Open", 0), ("Closed", 5), ("Cancelled", 6))
        assert plan.qualified_name == "NS.E"
        assert plan.rendered_name == "E"
        assert plan.underlying == PrimitiveKind.INT32

    def test_hex_and_negative_values(self, context: ResolutionContext) -> None:
        """Should accept hexadecimal and negative values."""
        plan = plan_enum(_enum(("Low", "-1"), ("Zero", None), ("High", "0x100")), context)

        assert plan.members == (("Low", -1), ("Zero", 0), ("High", 256))

    def test_malformed_value(self, context: ResolutionContext) -> None:
        """Should report W002 and use the running counter."""
        result = ValidationResult()

        plan = plan_enum(_enum(("A", None), ("B", "two"), ("C", None)), context, result)

        assert plan.members == (("A", 0), ("B", 1), ("C", 2))
        assert [w.code for w in result.warnings] == [ErrorCodes.W002_MALFORMED_ENUM_VALUE]
        assert result.warnings[0].location is not None
        assert result.warnings[0].location.path == "NS.E.B"

    def test_out_of_range_value(self, context: ResolutionContext) -> None:
        """Should reject values outside the underlying type's range."""
        result = ValidationResult()

        plan = plan_enum(
            _enum(("Small", "255"), ("Big", "256"), underlying_type="Edm.Byte"), context, result
        )

        assert plan.members == (("Small", 255), ("Big", 256))
        assert plan.underlying == PrimitiveKind.BYTE
        assert result.has_code(ErrorCodes.W002_MALFORMED_ENUM_VALUE)

    def test_duplicate_member(self, context: ResolutionContext) -> None:
        """Should report E101, keep the first member and not advance the counter."""
        result = ValidationResult()

        plan = plan_enum(_enum(("A", None), ("A", "9"), ("B", None)), context, result)

        assert plan.members == (("A", 0), ("B", 1))
        assert [e.code for e in result.errors] == [ErrorCodes.E101_DUPLICATE_ENUM_MEMBER]

    def test_member_names_are_unique(self, context: ResolutionContext) -> None:
        """Should never emit the same member name twice."""
        plan = plan_enum(_enum(("A", None), ("B", None), ("A", None), ("B", None)), context)

        assert len(plan.member_names) == len(set(plan.member_names))

    def test_flags(self, context: ResolutionContext) -> None:
        """Should carry the flags marker."""
        plan = plan_enum(_enum(("Read", "1"), ("Write", "2"), is_flags=True), context)

        assert plan.is_flags
        assert plan.codec().decode("Read,Write") == 3

    def test_plan_all(self, northwind_model: SchemaModel, northwind_context: ResolutionContext) -> None:
        """Should plan every enum of the model in qualified name order."""
        plans = EnumPlanner(northwind_context).plan_all(northwind_model)

        assert [p.qualified_name for p in plans] == ["Sales.Permission", "Sales.Status"]
        assert plans[0].members == (("None", 0), ("Read", 1), ("Write", 2), ("Execute", 4))
        assert plans[1].members == (("Open", 0), ("Closed", 5), ("Cancelled", 6))
