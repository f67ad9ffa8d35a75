"""Diagnostic types collected while resolving a schema.

Recoverable problems found by the normalizer, the resolvers and the
validators are recorded as issues on a shared :class:`ValidationResult`
instead of being raised. Each issue carries a stable code from
:class:`ErrorCodes` and the dotted path of the declaration, property or
member it concerns.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class ValidationLocation:
    """Dotted path into the schema, e.g. ``Sales.Order.Status`` or ``Sales.Order.key.Id``."""

    path: str

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class ValidationIssue:
    """A single diagnostic.

    Attributes
    ----------
        code: Stable code from ErrorCodes.
        message: Human-readable description.
        severity: Error, warning or info.
        location: Where in the schema the issue was found.
        suggestion: How to fix it, when there is an obvious fix.
        context: Structured details (offending names, candidates) for tooling.

    """

    code: str
    message: str
    severity: ValidationSeverity
    location: ValidationLocation | None = None
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        text = f"[{self.code}] {self.severity.value.upper()} {self.message}"
        if self.location:
            text += f" at {self.location}"
        if self.suggestion:
            text += f" (hint: {self.suggestion})"
        return text


@dataclass
class ValidationResult:
    """Issues collected over one resolution run, in the order they were found."""

    issues: list[ValidationIssue] = field(default_factory=list)

    def _of(self, severity: ValidationSeverity) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == severity]

    @property
    def errors(self) -> list[ValidationIssue]:
        return self._of(ValidationSeverity.ERROR)

    @property
    def warnings(self) -> list[ValidationIssue]:
        return self._of(ValidationSeverity.WARNING)

    @property
    def infos(self) -> list[ValidationIssue]:
        return self._of(ValidationSeverity.INFO)

    @property
    def is_valid(self) -> bool:
        """True when there are no errors; warnings and infos do not count."""
        return not self.errors

    def add(self, issue: ValidationIssue) -> None:
        self.issues.append(issue)

    def add_error(
        self,
        code: str,
        message: str,
        path: str,
        suggestion: str | None = None,
        **context: Any,
    ) -> None:
        """Record an error at ``path``; extra keyword arguments become the issue context."""
        self._record(ValidationSeverity.ERROR, code, message, path, suggestion, context)

    def add_warning(
        self,
        code: str,
        message: str,
        path: str,
        suggestion: str | None = None,
        **context: Any,
    ) -> None:
        """Record a warning at ``path``; extra keyword arguments become the issue context."""
        self._record(ValidationSeverity.WARNING, code, message, path, suggestion, context)

    def add_info(self, code: str, message: str, path: str, **context: Any) -> None:
        """Record an informational note at ``path``."""
        self._record(ValidationSeverity.INFO, code, message, path, None, context)

    def has_code(self, code: str) -> bool:
        return any(issue.code == code for issue in self.issues)

    def by_code(self) -> dict[str, list[ValidationIssue]]:
        """Issues grouped by code, codes in sorted order."""
        groups: dict[str, list[ValidationIssue]] = defaultdict(list)
        for issue in self.issues:
            groups[issue.code].append(issue)
        return dict(sorted(groups.items()))

    def summary(self) -> str:
        """Counts such as ``"1 error(s), 2 warning(s)"``; infos are not counted."""
        parts = []
        if self.errors:
            parts.append(f"{len(self.errors)} error(s)")
        if self.warnings:
            parts.append(f"{len(self.warnings)} warning(s)")
        return ", ".join(parts) or "no problems"

    def merge(self, other: ValidationResult) -> None:
        """Append the other result's issues after this one's."""
        self.issues.extend(other.issues)

    def _record(
        self,
        severity: ValidationSeverity,
        code: str,
        message: str,
        path: str,
        suggestion: str | None,
        context: dict[str, Any],
    ) -> None:
        self.add(
            ValidationIssue(
                code=code,
                message=message,
                severity=severity,
                location=ValidationLocation(path),
                suggestion=suggestion,
                context=context,
            )
        )


class ErrorCodes:
    """Diagnostic codes.

    ``E`` codes are errors and block generation, ``W`` codes are warnings
    (errors under ``--strict``) and ``I`` codes are informational.
    """

    # E0xx - Reference errors
    E002_UNDEFINED_KEY_PROPERTY = "E002"

    # E1xx - Duplicate errors
    E100_DUPLICATE_DECLARATION = "E100"
    E101_DUPLICATE_ENUM_MEMBER = "E101"

    # W0xx - Recoverable problems
    W001_UNRESOLVED_TYPE = "W001"
    W002_MALFORMED_ENUM_VALUE = "W002"
    W003_ALIAS_COLLISION = "W003"
    W004_UNDEFINED_BASE_TYPE = "W004"
    W005_UNDEFINED_ASSOCIATION = "W005"
    W006_RENDERED_NAME_COLLISION = "W006"
    W007_NON_INTEGER_UNDERLYING_TYPE = "W007"

    # I0xx - Informational
    I001_REFERENCE_CYCLE = "I001"

    DESCRIPTIONS: dict[str, str] = {
        E002_UNDEFINED_KEY_PROPERTY: "key property not declared",
        E100_DUPLICATE_DECLARATION: "duplicate declaration",
        E101_DUPLICATE_ENUM_MEMBER: "duplicate enum member",
        W001_UNRESOLVED_TYPE: "unresolved type reference",
        W002_MALFORMED_ENUM_VALUE: "malformed enum value",
        W003_ALIAS_COLLISION: "namespace alias collision",
        W004_UNDEFINED_BASE_TYPE: "undefined base type",
        W005_UNDEFINED_ASSOCIATION: "undefined association or role",
        W006_RENDERED_NAME_COLLISION: "declarations share a rendered name",
        W007_NON_INTEGER_UNDERLYING_TYPE: "non-integer enum underlying type",
        I001_REFERENCE_CYCLE: "reference cycle",
    }

    @classmethod
    def describe(cls, code: str) -> str:
        """Short description of a code, or the code itself when unknown."""
        return cls.DESCRIPTIONS.get(code, code)
