"""Shared test fixtures for render tests."""

import importlib
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from types import ModuleType

import pytest
from edmx_to_types.ir.resolved import ResolvedModel
from edmx_to_types.models.schema import SchemaDocument
from edmx_to_types.render.writer import SourceWriter
from edmx_to_types.transform.resolver import SchemaResolver


@pytest.fixture
def northwind_resolved(northwind_document: SchemaDocument) -> ResolvedModel:
    """Return the resolved v4 document."""
    return SchemaResolver().resolve(northwind_document)


@pytest.fixture
def import_generated(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Callable[[dict[str, str], str], ModuleType]]:
    """Return a helper that writes rendered files and imports the result.

    Imported modules are removed from ``sys.modules`` afterwards.
    """
    monkeypatch.syspath_prepend(str(tmp_path))
    imported: list[str] = []

    def load(files: dict[str, str], module: str) -> ModuleType:
        SourceWriter().write(files, tmp_path)
        importlib.invalidate_caches()
        imported.append(module)
        return importlib.import_module(module)

    yield load

    for name in list(sys.modules):
        if any(name == m or name.startswith(f"{m}.") for m in imported):
            del sys.modules[name]
