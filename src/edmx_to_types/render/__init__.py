"""Python renderers for resolved schemas."""

from edmx_to_types.render.python_renderer import PythonRenderer, render_python
from edmx_to_types.render.type_mapping import FieldSpec, TypeMapper, python_identifier
from edmx_to_types.render.writer import OutputExistsError, SourceWriter

__all__ = [
    "FieldSpec",
    "OutputExistsError",
    "PythonRenderer",
    "SourceWriter",
    "TypeMapper",
    "python_identifier",
    "render_python",
]
