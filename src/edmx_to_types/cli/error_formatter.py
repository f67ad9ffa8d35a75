"""Diagnostic formatting with Rich."""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from edmx_to_types.validation.errors import ErrorCodes, ValidationSeverity

if TYPE_CHECKING:
    from edmx_to_types.validation.errors import ValidationIssue, ValidationResult

SEVERITY_COLORS = {
    ValidationSeverity.ERROR: "red",
    ValidationSeverity.WARNING: "yellow",
    ValidationSeverity.INFO: "blue",
}

SEVERITY_NOUNS = {
    ValidationSeverity.ERROR: "error(s)",
    ValidationSeverity.WARNING: "warning(s)",
    ValidationSeverity.INFO: "note(s)",
}


def issue_text(issue: ValidationIssue) -> Text:
    """One-line rendering of an issue: severity, code and message.

    Messages are appended as plain text, so brackets in type references
    are never taken for console markup.
    """
    color = SEVERITY_COLORS[issue.severity]
    return Text.assemble(
        (issue.severity.value.upper(), f"{color} bold"),
        " ",
        (f"[{issue.code}]", color),
        " ",
        issue.message,
    )


class ErrorFormatter:
    """Prints a validation result as a summary panel followed by each issue."""

    def __init__(
        self,
        console: Console | None = None,
        show_info: bool = False,
    ) -> None:
        """Initialize formatter.

        Args:
        ----
            console: Rich Console for output.
            show_info: Whether informational issues (reference cycles) are printed.

        """
        self.console = console or Console(stderr=True)
        self.show_info = show_info

    def visible_issues(self, result: ValidationResult) -> list[ValidationIssue]:
        """Errors first, then warnings, then notes when enabled."""
        issues = result.errors + result.warnings
        if self.show_info:
            issues += result.infos
        return issues

    def format_validation_result(
        self,
        result: ValidationResult,
        source_path: Path | None = None,
    ) -> None:
        """Format and print validation result.

        Args:
        ----
            result: The validation result to format.
            source_path: Schema file the result belongs to (for display).

        """
        issues = self.visible_issues(result)
        if not issues:
            self.console.print(Text("✓ Validation passed", style="green"))
            return

        if result.errors or result.warnings:
            self.console.print(self._summary(result, source_path))
            self.console.print()

        for issue in issues:
            self.console.print(issue_text(issue))
            if issue.location:
                self.console.print(Text(f"  at {issue.location}", style="dim"))
            if issue.suggestion:
                self.console.print(Text(f"  💡 {issue.suggestion}", style="green"))
            self.console.print()

        self.console.print(self._counts(issues))

    def _summary(self, result: ValidationResult, source_path: Path | None) -> Panel:
        failed = not result.is_valid
        content = Text()
        if source_path:
            content.append(f"File: {source_path}\n", style="dim")
        content.append_text(self._counts(result.errors + result.warnings))
        return Panel(
            content,
            title="Validation Failed" if failed else "Validation Warnings",
            border_style="red" if failed else "yellow",
        )

    @staticmethod
    def _counts(issues: list[ValidationIssue]) -> Text:
        totals: dict[ValidationSeverity, int] = defaultdict(int)
        for issue in issues:
            totals[issue.severity] += 1

        text = Text()
        for severity in ValidationSeverity:
            if not totals[severity]:
                continue
            if text:
                text.append(", ")
            text.append(
                f"{totals[severity]} {SEVERITY_NOUNS[severity]}",
                style=SEVERITY_COLORS[severity],
            )
        return text


class ErrorTree:
    """Issues as a tree: one branch per code, one leaf per occurrence."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def print_result(self, result: ValidationResult) -> None:
        """Print validation result as tree."""
        tree = Tree(Text("Validation Issues", style="bold"))
        for code, issues in result.by_code().items():
            branch = tree.add(
                Text.assemble(
                    (code, SEVERITY_COLORS[issues[0].severity]),
                    f" ({len(issues)} issues): {ErrorCodes.describe(code)}",
                )
            )
            for issue in issues:
                leaf = Text(issue.message)
                if issue.location:
                    leaf.append(f" at {issue.location}", style="dim")
                branch.add(leaf)

        self.console.print(tree)


class ErrorTable:
    """Issues as a table with one row per occurrence."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def print_result(self, result: ValidationResult) -> None:
        """Print validation result as table."""
        table = Table(title="Validation Issues")
        table.add_column("Code", style="cyan", width=6)
        table.add_column("Severity", width=8)
        table.add_column("Location", style="dim")
        table.add_column("Message")

        for issue in result.issues:
            table.add_row(
                issue.code,
                Text(issue.severity.value.upper(), style=SEVERITY_COLORS[issue.severity]),
                str(issue.location) if issue.location else "-",
                Text(issue.message),
            )

        self.console.print(table)
