"""Readable messages for pydantic errors raised by schema dumps and config files."""

from __future__ import annotations

from collections import defaultdict

from pydantic_core import ErrorDetails

# Message templates per pydantic error type; ``{name}`` is filled from the error context
ERROR_TRANSLATIONS: dict[str, str] = {
    "missing": "This field is required but was not provided",
    "extra_forbidden": "This field is not allowed in this context",
    "string_type": "Must be a string",
    "bool_type": "Must be true or false",
    "bool_parsing": "Must be true or false",
    "list_type": "Must be a list",
    "dict_type": "Must be an object/dictionary",
    "model_type": "Must be an object/dictionary",
    "enum": "Must be one of: {expected}",
    "string_pattern_mismatch": "Does not match pattern: {pattern}",
    "string_too_short": "Must be at least {min_length} characters",
}

SUGGESTIONS: dict[str, str] = {
    "missing": "Add the required field to the schema dump",
    "extra_forbidden": "Remove this field or check for typos",
    "enum": "Use one of the allowed values: {expected}",
    "string_too_short": "Names of declarations, properties and members cannot be empty",
}


def _fill(template: str, error: ErrorDetails) -> str:
    context: defaultdict[str, object] = defaultdict(lambda: "?")
    context.update(error.get("ctx") or {})
    return template.format_map(context)


def translate_pydantic_error(error: ErrorDetails) -> str:
    """Translate a pydantic error to a user-friendly message.

    Unknown error types keep pydantic's own message.
    """
    template = ERROR_TRANSLATIONS.get(error["type"])
    return _fill(template, error) if template else error["msg"]


def format_pydantic_location(loc: tuple[str | int, ...]) -> str:
    """Format a pydantic location tuple as a path into the schema tree.

    Examples:
    --------
        >>> format_pydantic_location(("schemas", 0, "entity_types", 2, "name"))
        'schemas[0].entity_types[2].name'

    """
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path


def get_suggestion_for_error(error: ErrorDetails) -> str | None:
    """Get a suggestion for how to fix the error, if there is one."""
    template = SUGGESTIONS.get(error["type"])
    return _fill(template, error) if template else None
