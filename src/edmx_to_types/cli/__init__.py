"""CLI module for edmx-to-types."""

from edmx_to_types.cli.error_formatter import ErrorFormatter, ErrorTable, ErrorTree
from edmx_to_types.cli.exception_handler import handle_exceptions
from edmx_to_types.cli.pydantic_errors import (
    format_pydantic_location,
    get_suggestion_for_error,
    translate_pydantic_error,
)
from edmx_to_types.cli_main import app

__all__ = [
    "app",
    "ErrorFormatter",
    "ErrorTable",
    "ErrorTree",
    "format_pydantic_location",
    "get_suggestion_for_error",
    "handle_exceptions",
    "translate_pydantic_error",
]
