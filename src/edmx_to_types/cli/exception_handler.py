"""CLI exception handling."""

from __future__ import annotations

import traceback
from collections.abc import Callable
from functools import wraps
from typing import TypeVar

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from edmx_to_types.models.config import ConfigError
from edmx_to_types.models.loader import LoaderError
from edmx_to_types.render.writer import OutputExistsError
from edmx_to_types.transform.normalizer import EmptySchemaError
from edmx_to_types.validation.validator import ValidationError

T = TypeVar("T")

console = Console(stderr=True)

# Panel title and follow-up hint for each fatal input or output error
FATAL_ERRORS: dict[type[Exception], tuple[str, str | None]] = {
    ConfigError: ("Configuration Error", None),
    LoaderError: ("Load Error", None),
    EmptySchemaError: ("Empty Schema", "The document declares no entity, complex or enum types."),
    OutputExistsError: ("Output Exists", "Use --force to overwrite."),
}


def handle_exceptions(
    verbose: bool = False,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Handle exceptions in CLI commands with formatted output.

    Every handled exception ends the command with exit code 1.

    Args:
    ----
        verbose: Whether to show full tracebacks.

    Returns:
    -------
        Decorator function.

    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: object, **kwargs: object) -> T:
            try:
                return func(*args, **kwargs)
            except typer.Exit:
                raise
            except ValidationError as e:
                from edmx_to_types.cli.error_formatter import ErrorFormatter

                ErrorFormatter(console).format_validation_result(e.result)
            except PydanticValidationError as e:
                _print_pydantic_error(e, verbose)
            except tuple(FATAL_ERRORS) as e:
                title, hint = next(v for k, v in FATAL_ERRORS.items() if isinstance(e, k))
                _print_panel(title, str(e), hint)
            except OSError as e:
                reason = "File not found" if isinstance(e, FileNotFoundError) else e.strerror
                _print_panel("Error", f"{reason or e}: {e.filename or 'unknown'}", None)
            except Exception as e:
                _print_panel("Error", f"An unexpected error occurred:\n{e}", None)
                if verbose:
                    console.print(Text(traceback.format_exc(), style="dim"))
                else:
                    console.print(Text("Use --verbose for full traceback", style="dim"))
            raise typer.Exit(1)

        return wrapper

    return decorator


def _print_panel(title: str, message: str, hint: str | None) -> None:
    body = Text(message, style="red")
    if hint:
        body.append(f"\n\n{hint}", style="default")
    console.print(Panel(body, title=title, border_style="red"))


def _print_pydantic_error(error: PydanticValidationError, verbose: bool) -> None:
    """Print each pydantic error of a schema dump with its location and a hint."""
    from edmx_to_types.cli.pydantic_errors import (
        format_pydantic_location,
        get_suggestion_for_error,
        translate_pydantic_error,
    )

    console.print(Text("Schema Validation Failed", style="red bold"))
    console.print()

    for err in error.errors():
        console.print(Text.assemble(("✗ ", "red"), format_pydantic_location(err["loc"])))
        console.print(f"  {translate_pydantic_error(err)}", markup=False)
        console.print(Text(f"  ({err['type']})", style="dim"))
        suggestion = get_suggestion_for_error(err)
        if suggestion:
            console.print(Text(f"  💡 {suggestion}", style="green"))
        console.print()

    if verbose:
        console.print(Text("Full error:", style="dim"))
        console.print(str(error), markup=False)
