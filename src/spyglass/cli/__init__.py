"""Command-line interface for Spyglass."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import click

from spyglass.core.config import get_settings
from spyglass.core.errors import SpyglassError

if TYPE_CHECKING:
    from spyglass.core.config import Settings
    from spyglass.core.registry import TypeSystemRegistry


def _setup_observability(settings: Settings, command: str) -> None:
    from spyglass.observability import bind_context, clear_context, setup_logging, setup_tracing

    setup_logging(settings.general)
    setup_tracing(settings.tracing)
    clear_context()
    bind_context(command=command)


def _build_registry(
    settings: Settings,
    catalogs: tuple[Path, ...] = (),
    include_builtin: bool | None = None,
) -> TypeSystemRegistry:
    """Build a registry from the builtin catalog and any extra catalog files.

    Catalogs from the settings load before those given on the command line.
    """
    from spyglass.catalog import load_builtin_catalog, load_catalog
    from spyglass.core import TypeSystemRegistry, create_type_system

    if include_builtin is None:
        include_builtin = settings.report.include_builtin

    types = create_type_system()
    if include_builtin:
        load_builtin_catalog(types)
    for path in [*map(Path, settings.report.catalogs), *catalogs]:
        try:
            load_catalog(path, types)
        except FileNotFoundError as e:
            raise click.ClickException(f"Catalog not found: {path}") from e

    return TypeSystemRegistry(types)


@click.group()
@click.version_option(package_name="spyglass")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to config file.",
)
@click.pass_context
def main(ctx: click.Context, config: Path | None) -> None:
    """Spyglass: introspect an operation registry into a line-oriented report."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = str(config) if config else None


@main.command()
@click.option(
    "--catalog",
    "catalogs",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Extra catalog file to load. May be repeated.",
)
@click.option("--no-builtin", is_flag=True, help="Don't load the builtin catalog.")
@click.option("--root", "root_type", help="Root operation type to walk.")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the report to a file instead of stdout.",
)
@click.pass_context
def report(
    ctx: click.Context,
    catalogs: tuple[Path, ...],
    no_builtin: bool,
    root_type: str | None,
    output: Path | None,
) -> None:
    """Walk the operation registry and print the report.

    Example: spyglass report --catalog extra.toml -o operations.txt
    """
    from spyglass.introspect import RegistryWalker

    settings = get_settings(ctx.obj.get("config_path"))
    _setup_observability(settings, "report")

    try:
        registry = _build_registry(settings, catalogs, False if no_builtin else None)
        with registry:
            walker = RegistryWalker(registry, root_type=root_type or settings.report.root_type)
            text = walker.run().text()
    except SpyglassError as e:
        raise click.ClickException(str(e)) from e

    if output:
        output.write_text(text, encoding="utf-8")
        click.echo(f"Wrote report to {output}", err=True)
    else:
        click.echo(text, nl=False)


@main.command()
@click.argument("report_file", type=click.File("r"), default="-")
def parse(report_file: click.utils.LazyFile) -> None:
    """Parse a report and print it as JSON.

    Pass '-' as REPORT_FILE to read from stdin.
    """
    from spyglass.introspect import parse_report

    try:
        operations = parse_report(report_file.read())
    except SpyglassError as e:
        raise click.ClickException(f"Invalid report: {e}") from e

    click.echo(json.dumps([op.to_dict() for op in operations], indent=2))


@main.group()
def ops() -> None:
    """Inspect registered operation types."""


@ops.command("list")
@click.option("--all", "-a", "show_all", is_flag=True, help="Include abstract types.")
@click.pass_context
def ops_list(ctx: click.Context, show_all: bool) -> None:
    """List operation types in registry order."""
    from spyglass.core import OperationClass, OperationFlags

    settings = get_settings(ctx.obj.get("config_path"))
    _setup_observability(settings, "ops list")
    try:
        registry = _build_registry(settings)
        with registry:
            handles = list(registry.enumerate_types(settings.report.root_type))
    except SpyglassError as e:
        raise click.ClickException(str(e)) from e

    for handle in handles:
        if handle.abstract and not show_all:
            continue
        klass = handle.type_class
        nickname = getattr(klass, "nickname", "")
        markers = []
        if handle.abstract:
            markers.append(click.style("abstract", fg="yellow"))
        if isinstance(klass, OperationClass) and OperationFlags.DEPRECATED in klass.flags:
            markers.append(click.style("deprecated", fg="red"))
        suffix = f" [{', '.join(markers)}]" if markers else ""
        click.echo(f"{click.style(nickname or '-', fg='green', bold=True)} {handle.name}{suffix}")


@ops.command("show")
@click.argument("name")
@click.pass_context
def ops_show(ctx: click.Context, name: str) -> None:
    """Show the report block of one operation, by type name or nickname."""
    from spyglass.introspect import RegistryWalker

    settings = get_settings(ctx.obj.get("config_path"))
    _setup_observability(settings, "ops show")
    try:
        registry = _build_registry(settings)
        with registry:
            handle = registry.types.find(name)
            if handle is None:
                handle = next(
                    (
                        h
                        for h in registry.enumerate_types(settings.report.root_type)
                        if getattr(h.type_class, "nickname", "") == name
                    ),
                    None,
                )
            if handle is None or not handle.is_a(registry.types.operation_type):
                raise click.ClickException(f"Operation not found: {name}")
            record = RegistryWalker(registry).report_type(handle)
    except SpyglassError as e:
        raise click.ClickException(str(e)) from e

    if record is None:
        raise click.ClickException(f"{handle.name} is abstract or deprecated and is not reported")
    for line in record.lines():
        click.echo(line)


@main.group()
def config() -> None:
    """Configuration management."""


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the resolved configuration."""
    settings = get_settings(ctx.obj.get("config_path"))
    click.echo(json.dumps(settings.to_dict(), indent=2))


@config.command("path")
def config_path() -> None:
    """Show the config file search paths."""
    from spyglass.core.config import CONFIG_SEARCH_PATHS, _find_config_file

    click.echo("Config file search paths:")
    for i, path in enumerate(CONFIG_SEARCH_PATHS, 1):
        click.echo(f"  {i}. {path}")
    click.echo()

    found = _find_config_file()
    if found:
        click.echo(f"Found: {click.style(str(found), fg='green')}")
    else:
        click.echo("No config file found, using defaults.")


if __name__ == "__main__":
    main()
