"""Per-declaration dependency sets and cycle detection."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from edmx_to_types.ir.resolved import DependencySet
from edmx_to_types.ir.types import TypeCategory
from edmx_to_types.transform.type_resolver import (
    EDM_PREFIX,
    TypeReferenceResolver,
    unwrap_collection,
)
from edmx_to_types.validation.errors import ErrorCodes, ValidationResult

if TYPE_CHECKING:
    from edmx_to_types.ir.declarations import SchemaModel, TypeDeclaration
    from edmx_to_types.transform.context import ResolutionContext

logger = logging.getLogger(__name__)


def _raw_references(decl: TypeDeclaration) -> Iterable[str]:
    if decl.base_type:
        yield decl.base_type
    for prop in decl.properties:
        yield prop.type
    for nav in decl.navigation:
        yield nav.type


def compute_dependencies(decl: TypeDeclaration, context: ResolutionContext) -> DependencySet:
    """Collect the declarations one declaration references directly.

    Primitives, empty references and the declaration itself are excluded.
    Unknown references are kept as type dependencies unless they name an
    ``Edm.*`` type.

    Args:
    ----
        decl: The declaration to scan.
        context: The resolution context.

    Returns:
    -------
        The sorted DependencySet.

    """
    resolver = TypeReferenceResolver(context)
    types: set[str] = set()
    enums: set[str] = set()

    for raw in _raw_references(decl):
        inner, _ = unwrap_collection(raw)
        if not inner:
            continue
        descriptor = resolver.resolve(inner, None, decl.namespace)
        target = descriptor.qualified_name
        if descriptor.category == TypeCategory.PRIMITIVE or target is None:
            continue
        if target == decl.qualified_name:
            continue
        if descriptor.category == TypeCategory.ENUM:
            enums.add(target)
        elif descriptor.category == TypeCategory.STRUCTURED:
            types.add(target)
        elif not target.startswith(EDM_PREFIX):
            types.add(target)

    return DependencySet(type_names=tuple(sorted(types)), enum_names=tuple(sorted(enums)))


def build_dependency_graph(
    model: SchemaModel,
    context: ResolutionContext,
) -> dict[str, DependencySet]:
    """Compute the dependency set of every entity and complex type.

    Args:
    ----
        model: The normalized declaration inventory.
        context: The resolution context.

    Returns:
    -------
        Qualified name to DependencySet.

    """
    return {decl.qualified_name: compute_dependencies(decl, context) for decl in model.declarations}


def find_cycles(graph: Mapping[str, DependencySet]) -> list[tuple[str, ...]]:
    """Find strongly connected groups of declarations.

    Only type dependencies between declarations of the graph are followed.
    Groups of a single declaration are not cycles, because dependency sets
    never contain their owner.

    Args:
    ----
        graph: Qualified name to DependencySet.

    Returns:
    -------
        Sorted tuples of qualified names, one per cycle, sorted.

    """
    edges = {
        name: [target for target in deps.type_names if target in graph]
        for name, deps in graph.items()
    }

    index_of: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    cycles: list[tuple[str, ...]] = []
    counter = 0

    # Iterative Tarjan: each work item is (node, position in its edge list)
    for root in sorted(edges):
        if root in index_of:
            continue
        work = [(root, 0)]
        while work:
            node, position = work.pop()
            if position == 0:
                index_of[node] = lowlink[node] = counter
                counter += 1
                stack.append(node)
                on_stack.add(node)

            targets = edges[node]
            if position < len(targets):
                work.append((node, position + 1))
                target = targets[position]
                if target not in index_of:
                    work.append((target, 0))
                elif target in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[target])
                continue

            if lowlink[node] == index_of[node]:
                group = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    group.append(member)
                    if member == node:
                        break
                if len(group) > 1:
                    cycles.append(tuple(sorted(group)))

            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])

    return sorted(cycles)


def report_cycles(
    graph: Mapping[str, DependencySet],
    result: ValidationResult,
) -> list[tuple[str, ...]]:
    """Record every reference cycle as an informational issue."""
    cycles = find_cycles(graph)
    for cycle in cycles:
        result.add_info(
            code=ErrorCodes.I001_REFERENCE_CYCLE,
            message=f"Declarations reference each other: {' -> '.join(cycle)}",
            path=cycle[0],
            members=list(cycle),
        )
    if cycles:
        logger.debug("Found %d reference cycle(s)", len(cycles))
    return cycles
