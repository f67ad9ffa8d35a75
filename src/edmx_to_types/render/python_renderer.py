"""Render a ResolvedModel as Python source.

Two flavors are supported: standard library dataclasses and pydantic models.
Output is either one module or a package with one module per declaration.
References between declarations are bound lazily (``from __future__ import
annotations`` and ``TYPE_CHECKING`` imports), so reference cycles need no
particular declaration order. Only base classes are imported eagerly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from edmx_to_types.ir.enums import EnumPlan
from edmx_to_types.ir.resolved import ResolvedDeclaration, ResolvedModel
from edmx_to_types.models.config import OutputFlavor, RenderOptions
from edmx_to_types.render.type_mapping import (
    BUILTIN_ANNOTATIONS,
    PYDANTIC_RESERVED,
    FieldSpec,
    TypeMapper,
    module_name,
    python_identifier,
)

logger = logging.getLogger(__name__)

INDENT = "    "

WIRE_MODULE = "_wire"

# Enum wire codec emitted into generated code; mirrors edmx_to_types.ir.enums.EnumCodec
WIRE_HELPERS = '''\
_NUMERIC_RE = re.compile(r"^[+-]?\\d+$")


def decode_enum(
    wire: str | int,
    members: tuple[tuple[str, int], ...],
    flags: bool,
    bounds: tuple[int, int],
    enum_name: str,
) -> int:
    """Decode member name(s), numeric text or an int into an enum value."""
    if isinstance(wire, int) and not isinstance(wire, bool):
        return _in_range(wire, str(wire), bounds, enum_name)
    by_name = dict(members)
    text = str(wire).strip()
    if text in by_name:
        return by_name[text]
    if _NUMERIC_RE.match(text):
        return _in_range(int(text), text, bounds, enum_name)
    if not flags:
        raise ValueError(f"invalid enum member {text!r} for {enum_name}")
    value = 0
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        if part not in by_name:
            raise ValueError(f"invalid enum member {part!r} for {enum_name}")
        value |= by_name[part]
    return value


def _in_range(value: int, text: str, bounds: tuple[int, int], enum_name: str) -> int:
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"invalid enum member {text!r} for {enum_name}")
    return value


def encode_enum(value: int, members: tuple[tuple[str, int], ...], flags: bool) -> str:
    """Encode an enum value as member name(s), or numeric text as a fallback."""
    for member_name, member_value in members:
        if member_value == value:
            return member_name
    if not flags:
        return str(value)
    if value == 0:
        return ""
    names = []
    covered = 0
    for member_name, member_value in members:
        if member_value == 0 or member_value & value != member_value:
            continue
        if member_value & covered == member_value:
            continue
        names.append(member_name)
        covered |= member_value
    if covered != value:
        return str(value)
    return ",".join(names)
'''

ENUM_RESERVED = frozenset({"from_wire", "to_wire", "name", "value"})

# Modules imported by generated code; field names must not shadow them
GENERATED_IMPORTS = frozenset(
    {"dataclasses", "datetime", "decimal", "enum", "pydantic", "re", "typing", "uuid"}
)


def wire_table_name(rendered_name: str) -> str:
    """Module-level constant holding an enum's wire names."""
    return "_" + module_name(rendered_name).upper().rstrip("_") + "_WIRE"


@dataclass
class RenderedUnit:
    """Source of one declaration plus what its module must import."""

    qualified_name: str
    class_name: str
    lines: list[str]
    modules: set[str] = field(default_factory=set)
    references: set[str] = field(default_factory=set)
    base: str | None = None
    uses_wire: bool = False
    is_model: bool = False


class PythonRenderer:
    """Render resolved declarations and enum plans as Python modules.

    Usage:
        renderer = PythonRenderer(RenderOptions(flavor="pydantic"))
        files = renderer.render(resolved)  # relative path -> source text
    """

    def __init__(
        self,
        options: RenderOptions | None = None,
        source_name: str | None = None,
    ) -> None:
        """Initialize the renderer.

        Args:
        ----
            options: Flavor, layout and package name.
            source_name: Name of the input file, quoted in module headers.

        """
        self.options = options or RenderOptions()
        self.source_name = source_name

    @property
    def is_pydantic(self) -> bool:
        """Whether pydantic models are generated."""
        return self.options.flavor == OutputFlavor.PYDANTIC

    def render(self, resolved: ResolvedModel) -> dict[str, str]:
        """Render the whole model.

        Args:
        ----
            resolved: The resolved schema.

        Returns:
        -------
            Relative file path to Python source.

        """
        mapper = TypeMapper(resolved.context.rendered_name, resolved.context.decimal_encoding)
        known = {d.qualified_name for d in resolved.declarations}
        known.update(e.qualified_name for e in resolved.enums)

        units = [self._render_enum(plan) for plan in resolved.enums]
        bases = self._resolve_bases(resolved)
        for decl in self._base_order(resolved, bases):
            base = bases.get(decl.qualified_name)
            units.append(self._render_declaration(decl, mapper, known, base, resolved))

        if self.options.split:
            return self._render_package(units)
        return {f"{self.options.package_name}.py": self._render_module(units)}

    def _header(self) -> list[str]:
        source = self.source_name or "an EDMX schema"
        return [
            f'"""Types generated by edmx-to-types from {source}.',
            "",
            "Do not edit by hand.",
            '"""',
            "",
            "from __future__ import annotations",
            "",
        ]

    def _imports(self, modules: set[str]) -> list[str]:
        stdlib = sorted(m for m in modules if m != "pydantic")
        lines = [f"import {m}" for m in stdlib]
        if "pydantic" in modules:
            if lines:
                lines.append("")
            lines.append("import pydantic")
        return lines

    def _render_module(self, units: list[RenderedUnit]) -> str:
        modules: set[str] = set()
        uses_wire = False
        for unit in units:
            modules |= unit.modules
            uses_wire = uses_wire or unit.uses_wire
        if uses_wire:
            modules.add("re")

        lines = self._header()
        lines.extend(self._imports(modules))
        if uses_wire:
            lines.extend(["", ""])
            lines.extend(WIRE_HELPERS.rstrip("\n").split("\n"))
        for unit in units:
            lines.extend(["", ""])
            lines.extend(unit.lines)

        rebuilds = [u.class_name for u in units if u.is_model]
        if rebuilds:
            lines.extend(["", ""])
            lines.extend(f"{name}.model_rebuild()" for name in rebuilds)
        return "\n".join(lines) + "\n"

    def _render_package(self, units: list[RenderedUnit]) -> dict[str, str]:
        package = self.options.package_name
        files: dict[str, str] = {}
        module_of: dict[str, str] = {}
        taken = {WIRE_MODULE}
        for unit in units:
            name = module_name(unit.class_name)
            candidate, suffix = name, 2
            while candidate in taken:
                candidate = f"{name}_{suffix}"
                suffix += 1
            taken.add(candidate)
            module_of[unit.qualified_name] = candidate

        if any(unit.uses_wire for unit in units):
            wire_lines = self._header()
            wire_lines[0] = '"""Enum wire codec shared by the generated enums.'
            wire_lines.extend(["import re", "", ""])
            wire_lines.extend(WIRE_HELPERS.rstrip("\n").split("\n"))
            files[f"{package}/{WIRE_MODULE}.py"] = "\n".join(wire_lines) + "\n"

        class_of = {unit.qualified_name: unit.class_name for unit in units}
        for unit in units:
            lines = self._header()
            lines.extend(self._imports(unit.modules | ({"typing"} if unit.references else set())))

            eager: list[str] = []
            if unit.uses_wire:
                eager.append(f"from .{WIRE_MODULE} import decode_enum, encode_enum")
            if unit.base is not None:
                eager.append(f"from .{module_of[unit.base]} import {class_of[unit.base]}")
            if eager:
                lines.append("")
                lines.extend(eager)

            if unit.references:
                lines.extend(["", "if typing.TYPE_CHECKING:"])
                lines.extend(
                    f"{INDENT}from .{module_of[qn]} import {class_of[qn]}"
                    for qn in sorted(unit.references, key=lambda q: module_of[q])
                )

            lines.extend(["", ""])
            lines.extend(unit.lines)
            files[f"{package}/{module_of[unit.qualified_name]}.py"] = "\n".join(lines) + "\n"

        init = [
            f'"""Types generated by edmx-to-types from {self.source_name or "an EDMX schema"}."""',
            "",
        ]
        init.extend(
            f"from .{module_of[unit.qualified_name]} import {unit.class_name}" for unit in units
        )
        init.extend(["", "__all__ = ["])
        init.extend(f'{INDENT}"{name}",' for name in sorted(class_of.values()))
        init.append("]")
        rebuilds = [u.class_name for u in units if u.is_model]
        if rebuilds:
            init.append("")
            init.extend(f"{name}.model_rebuild()" for name in rebuilds)
        files[f"{package}/__init__.py"] = "\n".join(init) + "\n"

        logger.debug("Rendered package %s with %d module(s)", package, len(files))
        return files

    def _render_enum(self, plan: EnumPlan) -> RenderedUnit:
        class_name = plan.rendered_name
        table = wire_table_name(class_name)
        base = "enum.IntFlag" if plan.is_flags else "enum.IntEnum"

        lines = [f"{table} = ("]
        lines.extend(f"{INDENT}({name!r}, {value})," for name, value in plan.members)
        lines.extend([")", "", ""])
        lines.append(f"class {class_name}({base}):")
        kind = "Flags enum" if plan.is_flags else "Enum"
        lines.extend([f'{INDENT}"""{kind} ``{plan.qualified_name}``."""', ""])

        used: set[str] = set()
        for name, value in plan.members:
            member = python_identifier(name, ENUM_RESERVED)
            candidate, suffix = member, 2
            while candidate in used:
                candidate = f"{member}_{suffix}"
                suffix += 1
            used.add(candidate)
            lines.append(f"{INDENT}{candidate} = {value}")
        if plan.members:
            lines.append("")

        flags = "True" if plan.is_flags else "False"
        decode = f"decode_enum(wire, {table}, {flags}, {plan.bounds!r}, {plan.qualified_name!r})"
        lines.extend(
            [
                f"{INDENT}@classmethod",
                f"{INDENT}def from_wire(cls, wire: str | int) -> {class_name}:",
                f'{INDENT * 2}"""Decode the wire form (member names or numeric text)."""',
                f"{INDENT * 2}return cls({decode})",
                "",
                f"{INDENT}@classmethod",
                f"{INDENT}def _missing_(cls, wire: object) -> {class_name} | None:",
                f'{INDENT * 2}"""Accept the wire form wherever a member is looked up by value."""',
                f"{INDENT * 2}if not isinstance(wire, str):",
                f"{INDENT * 3}return super()._missing_(wire)",
                f"{INDENT * 2}try:",
                f"{INDENT * 3}return cls({decode})",
                f"{INDENT * 2}except ValueError:",
                f"{INDENT * 3}return None",
                "",
                f"{INDENT}def to_wire(self) -> str:",
                f'{INDENT * 2}"""Encode as the wire form."""',
                f"{INDENT * 2}return encode_enum(int(self), {table}, {flags})",
            ]
        )
        return RenderedUnit(
            qualified_name=plan.qualified_name,
            class_name=class_name,
            lines=lines,
            modules={"enum"},
            uses_wire=True,
        )

    def _render_declaration(
        self,
        decl: ResolvedDeclaration,
        mapper: TypeMapper,
        known: set[str],
        base: str | None,
        resolved: ResolvedModel,
    ) -> RenderedUnit:
        source = decl.declaration
        class_name = decl.rendered_name
        modules: set[str] = {"pydantic"} if self.is_pydantic else {"dataclasses"}
        references: set[str] = set()

        if base is not None:
            parent = resolved.context.rendered_name(base)
        elif self.is_pydantic:
            parent = "pydantic.BaseModel"
        else:
            parent = None

        lines: list[str] = []
        if not self.is_pydantic:
            lines.append("@dataclasses.dataclass(kw_only=True)")
        lines.append(f"class {class_name}({parent}):" if parent else f"class {class_name}:")
        lines.extend(self._docstring(decl))

        if self.is_pydantic:
            extra = ', extra="allow"' if source.open_type else ""
            lines.extend(
                ["", f"{INDENT}model_config = pydantic.ConfigDict(populate_by_name=True{extra})"]
            )

        # Field names that equal a class, module or builtin name would shadow it in annotations
        class_names = frozenset(resolved.context.rendered_name(qn) for qn in known)
        reserved = GENERATED_IMPORTS | BUILTIN_ANNOTATIONS | class_names
        if self.is_pydantic:
            reserved |= PYDANTIC_RESERVED
        used: set[str] = set()
        field_lines: list[str] = []
        for resolved_field in decl.fields:
            spec = mapper.field_spec(resolved_field.descriptor)
            modules |= spec.modules
            references |= {qn for qn in spec.references if qn in known}
            name = python_identifier(resolved_field.name, reserved)
            candidate, suffix = name, 2
            while candidate in used:
                candidate = f"{name}_{suffix}"
                suffix += 1
            used.add(candidate)
            alias = resolved_field.name if candidate != resolved_field.name else None
            field_lines.append(f"{INDENT}{candidate}: {spec.annotation}{self._default(spec, alias)}")

        if field_lines:
            lines.append("")
            lines.extend(field_lines)

        references.discard(decl.qualified_name)
        if base is not None:
            references.discard(base)
        return RenderedUnit(
            qualified_name=decl.qualified_name,
            class_name=class_name,
            lines=lines,
            modules=modules,
            references=references,
            base=base,
            is_model=self.is_pydantic,
        )

    def _docstring(self, decl: ResolvedDeclaration) -> list[str]:
        source = decl.declaration
        kind = "Entity" if source.is_entity else "Complex type"
        summary = f"{kind} ``{decl.qualified_name}``."
        notes = []
        if source.abstract:
            notes.append("Abstract.")
        if source.keys:
            notes.append("Key: " + ", ".join(f"``{k}``" for k in source.keys) + ".")
        if not notes:
            return [f'{INDENT}"""{summary}"""']
        lines = [f'{INDENT}"""{summary}', ""]
        lines.extend(f"{INDENT}{note}" for note in notes)
        lines.append(f'{INDENT}"""')
        return lines

    def _default(self, spec: FieldSpec, alias: str | None) -> str:
        if self.is_pydantic:
            args = []
            if spec.factory is not None:
                args.append(f"default_factory={spec.factory}")
            elif spec.default is not None:
                args.append(f"default={spec.default}")
            if alias is not None:
                args.append(f"alias={alias!r}")
            if alias is None and spec.factory is None:
                return "" if spec.default is None else f" = {spec.default}"
            return f" = pydantic.Field({', '.join(args)})"

        args = []
        if spec.factory is not None:
            args.append(f"default_factory={spec.factory}")
        elif spec.default is not None:
            args.append(f"default={spec.default}")
        if alias is not None:
            args.append(f'metadata={{"wire_name": {alias!r}}}')
        if alias is None and spec.factory is None:
            return "" if spec.default is None else f" = {spec.default}"
        return f" = dataclasses.field({', '.join(args)})"

    @staticmethod
    def _resolve_bases(resolved: ResolvedModel) -> dict[str, str]:
        """Base class of each declaration, dropping links that would form a cycle."""
        links = {
            d.qualified_name: d.base.qualified_name
            for d in resolved.declarations
            if d.base is not None and resolved.get_declaration(d.base.qualified_name) is not None
        }
        bases: dict[str, str] = {}
        for name in sorted(links):
            seen = {name}
            current = links[name]
            while current in links and current not in seen:
                seen.add(current)
                current = links[current]
            if current in seen:
                logger.warning("Inheritance cycle through %s, base class dropped", name)
                continue
            bases[name] = links[name]
        return bases

    @staticmethod
    def _base_order(
        resolved: ResolvedModel, bases: dict[str, str]
    ) -> list[ResolvedDeclaration]:
        """Declarations with every base class before its subclasses."""
        ordered: list[ResolvedDeclaration] = []
        placed: set[str] = set()

        def place(decl: ResolvedDeclaration) -> None:
            if decl.qualified_name in placed:
                return
            placed.add(decl.qualified_name)
            base = bases.get(decl.qualified_name)
            if base is not None:
                base_decl = resolved.get_declaration(base)
                if base_decl is not None:
                    place(base_decl)
            ordered.append(decl)

        for decl in resolved.declarations:
            place(decl)
        return ordered


def render_python(
    resolved: ResolvedModel,
    options: RenderOptions | None = None,
    source_name: str | None = None,
) -> dict[str, str]:
    """Render a resolved model as Python source files.

    Args:
    ----
        resolved: The resolved schema.
        options: Flavor, layout and package name.
        source_name: Name of the input file, quoted in module headers.

    Returns:
    -------
        Relative file path to Python source.

    """
    return PythonRenderer(options, source_name).render(resolved)

