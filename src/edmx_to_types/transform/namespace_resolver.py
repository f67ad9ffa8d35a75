"""Namespace aliasing and type name qualification."""

from __future__ import annotations

import keyword
import logging
import re
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from edmx_to_types.models.config import QualificationMode
from edmx_to_types.validation.errors import ErrorCodes, ValidationResult

logger = logging.getLogger(__name__)

FALLBACK_ALIAS = "NS"
FALLBACK_NAME = "X"

_SEGMENT_SPLIT_RE = re.compile(r"[./]")


def _is_identifier_char(ch: str) -> bool:
    return ch == "_" or (ch.isalnum() and f"a{ch}".isidentifier())


def sanitize_identifier(text: str) -> str:
    """Keep only letters and digits."""
    return "".join(ch for ch in text if ch != "_" and _is_identifier_char(ch))


def exported_name(name: str) -> str:
    """Turn a schema name into a public identifier.

    The first letter is upper-cased, characters that cannot appear in an
    identifier are dropped, and a leading digit is prefixed with ``X``.
    Underscores are kept.

    Examples:
    --------
        >>> exported_name("orderLine")
        'OrderLine'
        >>> exported_name("2ndAddress")
        'X2ndAddress'

    """
    chars = [ch for ch in name if _is_identifier_char(ch)]
    if not chars:
        return FALLBACK_NAME
    if not (chars[0].isalpha() or chars[0] == "_"):
        chars.insert(0, FALLBACK_NAME)
    chars[0] = chars[0].upper()
    result = "".join(chars)
    if keyword.iskeyword(result):
        result += "_"
    return result


def namespace_alias(namespace: str) -> str:
    """Derive the short alias of a namespace.

    Uses the last ``.``- or ``/``-delimited segment, reduced to letters and
    digits with the first letter upper-cased. Degenerate namespaces get
    ``NS``.

    Examples:
    --------
        >>> namespace_alias("com.sap.gateway.srvd.Sales")
        'Sales'
        >>> namespace_alias("http://example.org/odata/v1")
        'V1'
        >>> namespace_alias("***")
        'NS'

    """
    segment = _SEGMENT_SPLIT_RE.split(namespace)[-1]
    alias = sanitize_identifier(segment)
    if not alias:
        return FALLBACK_ALIAS
    if alias[0].isdigit():
        alias = FALLBACK_ALIAS + alias
    return alias[0].upper() + alias[1:]


def build_alias_table(
    namespaces: Iterable[str],
    result: ValidationResult | None = None,
) -> dict[str, str]:
    """Assign an alias to every namespace.

    Distinct namespaces whose aliases collide are reported (W003) and, in
    sorted namespace order, all but the first get a numeric suffix.

    Args:
    ----
        namespaces: Namespaces present in the schema load.
        result: Optional collector for the collision warnings.

    Returns:
    -------
        Namespace to alias mapping.

    """
    ordered = sorted(set(namespaces))
    raw = {ns: namespace_alias(ns) for ns in ordered}
    by_alias: dict[str, list[str]] = {}
    for ns in ordered:
        by_alias.setdefault(raw[ns], []).append(ns)

    taken = set(raw.values())
    table: dict[str, str] = {}
    for alias, owners in by_alias.items():
        table[owners[0]] = alias
        if len(owners) == 1:
            continue

        if result is not None:
            result.add_warning(
                code=ErrorCodes.W003_ALIAS_COLLISION,
                message=(
                    f"Namespaces {', '.join(repr(o) for o in owners)} "
                    f"share the short alias '{alias}'"
                ),
                path=owners[1],
                suggestion="Rendered names use numbered aliases for the later namespaces",
                alias=alias,
                namespaces=owners,
            )
        logger.warning("Namespace alias collision on %r: %s", alias, owners)

        suffix = 2
        for ns in owners[1:]:
            while f"{alias}{suffix}" in taken:
                suffix += 1
            table[ns] = f"{alias}{suffix}"
            taken.add(table[ns])
            suffix += 1

    return table


@dataclass(frozen=True)
class NamespacePlan:
    """Alias and qualification decisions for one schema load.

    Attributes
    ----------
        mode: The qualification policy.
        aliases: Namespace to short alias.
        shared_names: Local names declared in two or more namespaces.

    """

    mode: QualificationMode
    aliases: Mapping[str, str] = field(default_factory=dict)
    shared_names: frozenset[str] = frozenset()

    def alias_for(self, namespace: str) -> str:
        """Alias of a namespace, derived on the fly for unknown ones."""
        return self.aliases.get(namespace) or namespace_alias(namespace)

    def needs_qualification(self, local_name: str) -> bool:
        """Whether rendered names for ``local_name`` carry the alias prefix."""
        if self.mode == QualificationMode.ALWAYS:
            return True
        if self.mode == QualificationMode.NEVER:
            return False
        return local_name in self.shared_names

    def rendered_name(self, namespace: str, local_name: str) -> str:
        """Target-language name of a declaration."""
        name = exported_name(local_name)
        if self.needs_qualification(local_name):
            return self.alias_for(namespace) + name
        return name


def resolve_namespaces(
    inventory: Iterable[tuple[str, str]],
    mode: QualificationMode,
    namespaces: Iterable[str] = (),
    result: ValidationResult | None = None,
) -> NamespacePlan:
    """Decide aliases and qualification for a declaration inventory.

    Args:
    ----
        inventory: ``(namespace, local name)`` pairs, one per declaration.
        mode: Qualification policy.
        namespaces: Additional namespaces that declare nothing.
        result: Optional collector for alias collision warnings.

    Returns:
    -------
        The NamespacePlan.

    """
    pairs = set(inventory)
    all_namespaces = {ns for ns, _ in pairs} | set(namespaces)
    counts = Counter(name for _, name in pairs)
    shared = frozenset(name for name, count in counts.items() if count > 1)
    if shared:
        logger.debug("Local names shared across namespaces: %s", sorted(shared))
    return NamespacePlan(
        mode=mode,
        aliases=build_alias_table(all_namespaces, result),
        shared_names=shared,
    )
