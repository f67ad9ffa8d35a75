"""Command-line interface for the edmx-to-types generator."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from edmx_to_types import __version__
from edmx_to_types.ir.resolved import ResolvedModel
from edmx_to_types.models import (
    DecimalEncoding,
    GeneratorConfig,
    OutputFlavor,
    QualificationMode,
    RenderOptions,
    ToolConfig,
    load_config,
    load_schema_document,
    validate_schema_file,
)
from edmx_to_types.transform.resolver import SchemaResolver

# Create Typer app
app = typer.Typer(
    name="edmx-to-types",
    help="Generate Python type declarations from EDMX/CSDL (OData) schemas.",
    add_completion=True,
    no_args_is_help=True,
)

# Rich consoles for output
console = Console()
error_console = Console(stderr=True, style="bold red")

InputFile = Annotated[
    Path,
    typer.Argument(
        help="Input EDMX/CSDL (.xml, .edmx, .csdl) or YAML/JSON dump.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
    ),
]

QualifyOption = Annotated[
    QualificationMode | None,
    typer.Option(
        "--qualify",
        "-q",
        help="Namespace prefixing of type names: auto, always or never.",
        case_sensitive=False,
    ),
]

VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-V",
        help="Show debug logging, informational issues and tracebacks.",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"edmx-to-types version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route library logging through Rich.

    Warnings are already shown as diagnostics, so only errors are logged
    unless ``verbose`` is set.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Generate Python type declarations from EDMX/CSDL schemas.

    Entities, complex types and enums from every namespace of the metadata
    document are resolved into dataclasses or pydantic models.
    """


def merge_config(
    config_file: Path | None,
    generator_overrides: dict[str, Any],
    render_overrides: dict[str, Any],
) -> ToolConfig:
    """Load the configuration file and apply command-line overrides.

    Options that were not given on the command line (None) keep the value
    from the file, or the default.
    """
    base = load_config(config_file) if config_file else ToolConfig()
    generator = {k: v for k, v in generator_overrides.items() if v is not None}
    render = {k: v for k, v in render_overrides.items() if v is not None}
    return ToolConfig(
        generator=GeneratorConfig.model_validate({**base.generator.model_dump(), **generator}),
        render=RenderOptions.model_validate({**base.render.model_dump(), **render}),
    )


@app.command()
def generate(
    input_file: InputFile,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory. Defaults to the input file's directory.",
            file_okay=False,
            resolve_path=True,
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="YAML configuration file (generator and render sections).",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    qualify: QualifyOption = None,
    decimal: Annotated[
        DecimalEncoding | None,
        typer.Option(
            "--decimal",
            "-d",
            help="Edm.Decimal as decimal.Decimal (native) or str (string).",
            case_sensitive=False,
        ),
    ] = None,
    flavor: Annotated[
        OutputFlavor | None,
        typer.Option(
            "--flavor",
            help="Generate dataclasses or pydantic models.",
            case_sensitive=False,
        ),
    ] = None,
    split: Annotated[
        bool | None,
        typer.Option(
            "--split/--single",
            help="One module per declaration, or a single module.",
        ),
    ] = None,
    package_name: Annotated[
        str | None,
        typer.Option(
            "--package",
            "-p",
            help="Module (single) or package (split) name. Defaults to 'models'.",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite output files if they exist.",
        ),
    ] = False,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Treat warnings as errors.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Resolve and render without writing files.",
        ),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Generate Python types from an EDMX schema.

    Examples
    --------
        edmx-to-types generate metadata.xml
        edmx-to-types generate metadata.xml -o generated --flavor pydantic
        edmx-to-types generate metadata.xml --split --package northwind --force
        edmx-to-types generate metadata.xml --qualify always --decimal string
        edmx-to-types generate metadata.xml --config edmx-to-types.yaml --dry-run

    """
    from edmx_to_types.cli.exception_handler import handle_exceptions

    configure_logging(verbose)
    handle_exceptions(verbose)(_generate)(
        input_file=input_file,
        output_dir=output or input_file.parent,
        config_file=config_file,
        generator_overrides={"qualification_mode": qualify, "decimal_encoding": decimal},
        render_overrides={"flavor": flavor, "split": split, "package_name": package_name},
        force=force,
        strict=strict,
        dry_run=dry_run,
        verbose=verbose,
    )


def _generate(
    input_file: Path,
    output_dir: Path,
    config_file: Path | None,
    generator_overrides: dict[str, Any],
    render_overrides: dict[str, Any],
    force: bool,
    strict: bool,
    dry_run: bool,
    verbose: bool,
) -> None:
    from edmx_to_types.cli.error_formatter import ErrorFormatter
    from edmx_to_types.render import PythonRenderer, SourceWriter

    config = merge_config(config_file, generator_overrides, render_overrides)

    document = load_schema_document(input_file)
    resolved = SchemaResolver(config.generator, strict=strict).resolve_and_raise(document)

    if resolved.result.warnings or (verbose and resolved.result.infos):
        ErrorFormatter(error_console, show_info=verbose).format_validation_result(
            resolved.result, input_file
        )

    files = PythonRenderer(config.render, source_name=input_file.name).render(resolved)

    if dry_run:
        table = Table(title="Would write", show_header=True)
        table.add_column("File", style="cyan")
        table.add_column("Size", justify="right")
        for relative, text in files.items():
            table.add_row(str(output_dir / relative), f"{len(text.encode()):,} bytes")
        console.print(table)
        return

    written = SourceWriter(force=force).write(files, output_dir)
    console.print(
        f"\n[bold green]✓ Wrote {len(written)} file(s) for "
        f"{len(resolved.declarations)} type(s) and {len(resolved.enums)} enum(s) "
        f"to {output_dir}[/bold green]\n"
    )
    if verbose:
        for path in written:
            console.print(f"  [dim]{path}[/dim]")


@app.command()
def validate(
    input_file: InputFile,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            help="Only output errors, no success messages.",
        ),
    ] = False,
    output_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Output format for validation results: text, table, tree.",
        ),
    ] = "text",
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Treat warnings as errors.",
        ),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Validate an EDMX schema without generating code.

    Loads the file, resolves every type reference and reports unresolved
    types, malformed enum values, duplicates, key and base type problems.

    Examples
    --------
        edmx-to-types validate metadata.xml
        edmx-to-types validate metadata.xml --strict
        edmx-to-types validate metadata.xml --format table

    """
    from edmx_to_types.cli.error_formatter import ErrorFormatter, ErrorTable, ErrorTree
    from edmx_to_types.cli.exception_handler import handle_exceptions

    configure_logging(verbose)

    # First check that the file loads at all
    errors = validate_schema_file(input_file)
    if errors:
        error_console.print(f"\n[bold red]✗ Failed to load {input_file.name}[/bold red]\n")

        table = Table(title="Load Errors", show_header=True)
        table.add_column("#", style="dim", width=4)
        table.add_column("Location", style="cyan")
        table.add_column("Error", style="red")

        for i, error in enumerate(errors, 1):
            if ": " in error:
                loc, msg = error.split(": ", 1)
            else:
                loc, msg = "", error
            table.add_row(str(i), loc, msg)

        console.print(table)
        raise typer.Exit(code=1)

    def run() -> ResolvedModel:
        return SchemaResolver().resolve(load_schema_document(input_file))

    resolved = handle_exceptions(verbose)(run)()
    result = resolved.result

    failed = not result.is_valid or (strict and bool(result.warnings))
    if result.errors or result.warnings or (verbose and result.infos):
        if output_format == "table":
            ErrorTable(error_console).print_result(result)
        elif output_format == "tree":
            ErrorTree(error_console).print_result(result)
        else:
            ErrorFormatter(error_console, show_info=verbose).format_validation_result(
                result, input_file
            )

    if failed:
        raise typer.Exit(code=1)

    if not quiet:
        if not result.warnings:
            console.print(f"\n[bold green]✓ {input_file.name} is valid[/bold green]\n")
        else:
            console.print(
                f"\n[bold yellow]⚠ {input_file.name} is valid with warnings[/bold yellow]\n"
            )


@app.command()
def inspect(
    input_file: InputFile,
    qualify: QualifyOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show namespaces, resolved declarations and enums of a schema.

    Examples
    --------
        edmx-to-types inspect metadata.xml
        edmx-to-types inspect metadata.xml --qualify always

    """
    from edmx_to_types.cli.error_formatter import ErrorTable
    from edmx_to_types.cli.exception_handler import handle_exceptions

    configure_logging(verbose)

    def run() -> ResolvedModel:
        config = GeneratorConfig(qualification_mode=qualify or QualificationMode.AUTO)
        return SchemaResolver(config).resolve(load_schema_document(input_file))

    resolved = handle_exceptions(verbose)(run)()

    console.print(
        Panel.fit(
            f"[bold]EDMX Schema[/bold]\nFile: {input_file}\n"
            f"Qualification: {resolved.context.namespaces.mode.value}",
            title="File Info",
        )
    )
    _print_namespaces(resolved)
    _print_declarations(resolved)
    _print_enums(resolved)

    if resolved.result.issues:
        ErrorTable(console).print_result(resolved.result)


def _print_namespaces(resolved: ResolvedModel) -> None:
    """Print namespaces with their aliases and declaration counts."""
    table = Table(title="Namespaces")
    table.add_column("Namespace", style="cyan")
    table.add_column("Alias")
    table.add_column("Types", justify="right")
    table.add_column("Enums", justify="right")

    for namespace, alias in sorted(resolved.context.aliases.items()):
        types = sum(1 for d in resolved.declarations if d.declaration.namespace == namespace)
        enums = sum(1 for e in resolved.enums if e.qualified_name.rpartition(".")[0] == namespace)
        table.add_row(namespace, alias, str(types), str(enums))

    console.print(table)


def _print_declarations(resolved: ResolvedModel) -> None:
    """Print resolved entity and complex types."""
    if not resolved.declarations:
        return

    table = Table(title="Types")
    table.add_column("Name", style="cyan")
    table.add_column("Kind")
    table.add_column("Qualified Name", style="dim")
    table.add_column("Fields", justify="right")
    table.add_column("Depends On")

    for decl in resolved.declarations:
        kind = decl.declaration.kind.value
        if decl.base is not None:
            kind += f" : {resolved.context.rendered_name(decl.base.qualified_name)}"
        deps = ", ".join(resolved.context.rendered_name(qn) for qn in decl.dependencies) or "-"
        table.add_row(
            decl.rendered_name,
            kind,
            decl.qualified_name,
            str(len(decl.fields)),
            deps,
        )

    console.print(table)


def _print_enums(resolved: ResolvedModel) -> None:
    """Print enum plans with their member values."""
    if not resolved.enums:
        return

    table = Table(title="Enums")
    table.add_column("Name", style="cyan")
    table.add_column("Underlying")
    table.add_column("Flags")
    table.add_column("Members")

    for plan in resolved.enums:
        members = ", ".join(f"{name}={value}" for name, value in plan.members)
        table.add_row(
            plan.rendered_name,
            plan.underlying.value,
            "yes" if plan.is_flags else "no",
            members or "-",
        )

    console.print(table)


if __name__ == "__main__":
    app()
