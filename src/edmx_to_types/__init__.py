"""edmx-to-types: Generate Python type declarations from EDMX/CSDL schemas.

This package provides tools for:
- Loading OData v2/v3/v4 metadata (EDMX, CSDL) or YAML/JSON dumps of it
- Normalizing declarations across namespaces and resolving type references
- Planning enum values and their textual wire codec
- Rendering dataclass or pydantic models, as one module or a package

Quick Start:
    >>> from pathlib import Path
    >>> from edmx_to_types.models import load_schema_document
    >>> from edmx_to_types.transform import SchemaResolver
    >>> from edmx_to_types.render import PythonRenderer, SourceWriter
    >>>
    >>> document = load_schema_document(Path("metadata.xml"))
    >>> resolved = SchemaResolver().resolve_and_raise(document)
    >>> SourceWriter().write(PythonRenderer().render(resolved), Path("generated"))

Modules:
    models: Pydantic models for raw schema input and configuration
    ir: Normalized declarations, descriptors and enum plans
    transform: Normalization and type resolution engine
    validation: Diagnostics and semantic checks
    render: Python source rendering and writing
    cli: Command-line interface
"""

__version__ = "0.1.0"
