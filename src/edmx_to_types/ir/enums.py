"""IR models for planned enumerations and their wire codec."""

from __future__ import annotations

import re
from dataclasses import dataclass

from edmx_to_types.ir.types import INTEGER_RANGES, PrimitiveKind

_NUMERIC_RE = re.compile(r"^[+-]?\d+$")


class InvalidEnumMemberError(ValueError):
    """Raised when a wire value names no member of the enum."""

    def __init__(self, enum_name: str, member: str) -> None:
        """Initialize with the enum and the offending member text.

        Args:
        ----
            enum_name: Qualified name of the enum.
            member: The unrecognized member name.

        """
        self.enum_name = enum_name
        self.member = member
        super().__init__(f"invalid enum member {member!r} for {enum_name}")


@dataclass(frozen=True)
class EnumPlan:
    """Member/value assignment for one enumeration.

    Attributes
    ----------
        qualified_name: ``Namespace.Name`` of the enum.
        rendered_name: Name used by renderers.
        underlying: Underlying integer kind.
        is_flags: Whether values combine as a bit union.
        members: ``(name, value)`` pairs in declaration order, names unique.

    """

    qualified_name: str
    rendered_name: str
    underlying: PrimitiveKind
    is_flags: bool
    members: tuple[tuple[str, int], ...]

    @property
    def name_to_value(self) -> dict[str, int]:
        """Member name to value."""
        return dict(self.members)

    @property
    def value_to_name(self) -> dict[int, str]:
        """Value to member name; the first member wins for shared values."""
        mapping: dict[int, str] = {}
        for name, value in self.members:
            mapping.setdefault(value, name)
        return mapping

    @property
    def bounds(self) -> tuple[int, int]:
        """Inclusive value range of the underlying kind."""
        return INTEGER_RANGES[self.underlying]

    @property
    def member_names(self) -> tuple[str, ...]:
        """Member names in declaration order."""
        return tuple(name for name, _ in self.members)

    def codec(self) -> EnumCodec:
        """Build the wire codec for this plan."""
        return EnumCodec(self)


class EnumCodec:
    """Decode and encode the textual wire form of an enum value.

    Single-valued enums use exactly one member name. Flags enums use a
    comma-separated list of member names combined with bitwise OR. Numeric
    text and plain integers are accepted by ``decode`` in both modes, as long
    as they fit the underlying integer kind.

    Usage:
        codec = plan.codec()
        codec.decode("Read,Write")  # -> 3
        codec.encode(3)             # -> "Read,Write"
    """

    def __init__(self, plan: EnumPlan) -> None:
        """Initialize the codec.

        Args:
        ----
            plan: The enum plan to encode against.

        """
        self.plan = plan
        self._by_name = plan.name_to_value
        self._by_value = plan.value_to_name

    def decode(self, wire: str | int) -> int:
        """Decode a wire value into its integer value.

        Args:
        ----
            wire: Member name(s), numeric text, or an integer.

        Returns:
        -------
            The integer value.

        Raises:
        ------
            InvalidEnumMemberError: If a name is not a member of the enum, or a
                number is out of range for the underlying kind.

        """
        if isinstance(wire, int) and not isinstance(wire, bool):
            return self._in_range(wire, str(wire))

        text = str(wire).strip()
        if text in self._by_name:
            return self._by_name[text]
        if _NUMERIC_RE.match(text):
            return self._in_range(int(text), text)

        if not self.plan.is_flags:
            raise InvalidEnumMemberError(self.plan.qualified_name, text)

        value = 0
        for part in text.split(","):
            part = part.strip()
            if not part:
                continue
            if part not in self._by_name:
                raise InvalidEnumMemberError(self.plan.qualified_name, part)
            value |= self._by_name[part]
        return value

    def _in_range(self, value: int, text: str) -> int:
        low, high = self.plan.bounds
        if not low <= value <= high:
            raise InvalidEnumMemberError(self.plan.qualified_name, text)
        return value

    def encode(self, value: int) -> str:
        """Encode an integer value into its wire text.

        Flags values that are not a single member are spelled as the
        comma-joined member names covering them, in declaration order. Values
        with no name representation fall back to numeric text.
        """
        if value in self._by_value:
            return self._by_value[value]

        if not self.plan.is_flags:
            return str(value)

        if value == 0:
            return ""

        names: list[str] = []
        covered = 0
        for name, member_value in self.plan.members:
            if member_value == 0 or member_value & value != member_value:
                continue
            if member_value & covered == member_value:
                continue
            names.append(name)
            covered |= member_value

        if covered != value:
            return str(value)
        return ",".join(names)
