"""
Command line interface for footplan.

Commands:
- render: Draw a plan from a YAML configuration and export it
- templates: List the available page templates
- store: Manage stored plan records (list, show, new, delete, import,
  export, render)

Usage:
    footplan render sauna.yaml --format pdf -o out/
    footplan templates
    footplan store import saunas.json
    footplan store render plan-3f2a9c1d0b7e --format svg
"""

import logging
from pathlib import Path

import click
import yaml

from .drawing_generator import compose_plan_document, export_plan, generate_plan, list_templates, load_templates
from .records import create_empty_record, next_revision, validate_record
from .settings import Settings
from .store import ConfigStore
from .structure import StructuralConfig

logger = logging.getLogger(__name__)

FORMAT_CHOICE = click.Choice(["pdf", "svg"], case_sensitive=False)


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--settings", "settings_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, settings_file: Path | None, verbose: bool):
    """footplan - foundation plans for barrel bodies on a row of feet."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    settings = Settings.from_yaml(settings_file)
    if settings.templates_file:
        load_templates(settings.templates_file)
    ctx.obj = settings


def _render(
    config: StructuralConfig,
    *,
    output_dir: Path,
    fmt: str,
    template_id: str | None,
    title: str | None,
    model_name: str | None,
    font_size: float | None,
    notes: tuple[str, ...],
    file_name: str,
) -> Path:
    """Generate, compose and export one plan."""
    plan = generate_plan(config, title=title, dim_font_size_px=font_size)
    page = compose_plan_document(
        template_id,
        plan,
        title=title,
        model_name=model_name,
        notes=list(notes) or None,
    )

    metrics = plan.metrics
    click.echo(f"Feet: {metrics.foot_count}")
    click.echo(f"Total foot span: {metrics.total_foot_span:g} cm")
    click.echo(f"First to last foot: {metrics.first_to_last:g} cm")
    click.echo(f"Template: {page.template_id} (scale {page.fit.scale:.4f})")

    try:
        path = export_plan(page, fmt, output_dir, file_name)
    except (ValueError, ImportError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Exported: {path}")
    return path


def _render_options(func):
    """Options shared by the render commands."""
    options = [
        click.option("--output-dir", "-o", type=click.Path(file_okay=False, path_type=Path), default=None,
                     help="Output directory (default: from settings)."),
        click.option("--format", "fmt", type=FORMAT_CHOICE, default=None,
                     help="Export format (default: from settings or record)."),
        click.option("--template", "template_id", default=None, help="Page template id."),
        click.option("--title", default=None, help="Page title."),
        click.option("--font-size", type=float, default=None, help="Dimension label size in px (minimum 9)."),
        click.option("--note", "notes", multiple=True, help="Legend line (repeatable, up to 4)."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@cli.command()
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_render_options
@click.option("--name", "model_name", default=None, help="Model name shown in the subtitle.")
@click.pass_obj
def render(
    settings: Settings,
    config_file: Path,
    output_dir: Path | None,
    fmt: str | None,
    template_id: str | None,
    title: str | None,
    font_size: float | None,
    notes: tuple[str, ...],
    model_name: str | None,
):
    """
    Render a plan from a YAML configuration file.

    \b
    The file holds the structural parameters in centimeters:
      main_body_length: 220
      main_body_width: 210
      foot_width: 200
      foot_thickness: 8
      foundation_width: 40
      foundation_depth: 80
      foot_gaps: [79, 100, 79]

    Example:
        footplan render sauna.yaml --format svg -o out/
    """
    try:
        config = StructuralConfig.from_yaml(config_file)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Cannot read {config_file}: {e}") from e

    _render(
        config,
        output_dir=output_dir or Path(settings.output_dir),
        fmt=(fmt or settings.export_format).lower(),
        template_id=template_id or settings.template_id,
        title=title,
        model_name=model_name or config_file.stem,
        font_size=font_size if font_size is not None else settings.dim_font_size,
        notes=notes,
        file_name=config_file.stem,
    )


@cli.command()
def templates():
    """List the available page templates."""
    for template in list_templates():
        click.echo(
            f"{template.id:<24} {template.label:<24} "
            f"{template.width_mm:g} x {template.height_mm:g} mm ({template.orientation})"
        )


# =============================================================================
# STORE
# =============================================================================

@cli.group()
@click.option("--store", "store_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Store file (default: from settings or FOOTPLAN_STORE).")
@click.pass_context
def store(ctx: click.Context, store_path: Path | None):
    """Manage stored plan records."""
    settings: Settings = ctx.obj
    try:
        ctx.obj = (settings, ConfigStore(store_path or settings.store_path))
    except (ValueError, yaml.YAMLError) as e:
        raise click.ClickException(str(e)) from e


def _get_record(config_store: ConfigStore, record_id: str):
    record = config_store.get(record_id)
    if record is None:
        raise click.ClickException(f"No record with id {record_id!r}")
    return record


@store.command("list")
@click.pass_obj
def store_list(obj):
    """List all records."""
    _, config_store = obj
    records = config_store.list()
    if not records:
        click.echo("No records.")
        return
    for record in records:
        click.echo(f"{record.id}  rev {record.revision:<3} {record.name}  ({record.config.foot_count} feet)")


@store.command("show")
@click.argument("record_id")
@click.pass_obj
def store_show(obj, record_id: str):
    """Show one record and its plausibility warnings."""
    _, config_store = obj
    record = _get_record(config_store, record_id)
    click.echo(yaml.safe_dump(record.to_dict(), default_flow_style=False, sort_keys=False))
    warnings = validate_record(record)
    if warnings:
        click.echo("Warnings:")
        for w in warnings:
            click.echo(f"  - {w}")


@store.command("new")
@click.option("--name", default=None, help="Record name.")
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="YAML configuration (default: the standard sauna model).")
@click.pass_obj
def store_new(obj, name: str | None, config_file: Path | None):
    """Create a record from the default model or a YAML configuration."""
    _, config_store = obj
    record = create_empty_record().to_dict()
    if name:
        record["name"] = name
    if config_file is not None:
        record["config"] = StructuralConfig.from_yaml(config_file).to_dict()
    saved = config_store.put(record)
    click.echo(f"Created {saved.id}")


@store.command("delete")
@click.argument("record_id")
@click.pass_obj
def store_delete(obj, record_id: str):
    """Delete a record."""
    _, config_store = obj
    if not config_store.delete(record_id):
        raise click.ClickException(f"No record with id {record_id!r}")
    click.echo(f"Deleted {record_id}")


@store.command("import")
@click.argument("json_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def store_import(obj, json_file: Path):
    """Replace all records with the contents of a JSON file."""
    _, config_store = obj
    try:
        records = config_store.import_json(json_file)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Imported {len(records)} record(s)")


@store.command("export")
@click.argument("json_file", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def store_export(obj, json_file: Path):
    """Write all records to a JSON file."""
    _, config_store = obj
    path = config_store.export_json(json_file)
    click.echo(f"Exported {len(config_store.list())} record(s) to {path}")


@store.command("render")
@click.argument("record_id")
@_render_options
@click.option("--save-settings", is_flag=True,
              help="Store the chosen template and format with the record (bumps the revision).")
@click.pass_obj
def store_render(
    obj,
    record_id: str,
    output_dir: Path | None,
    fmt: str | None,
    template_id: str | None,
    title: str | None,
    font_size: float | None,
    notes: tuple[str, ...],
    save_settings: bool,
):
    """Render a stored record with its export settings."""
    settings, config_store = obj
    record = _get_record(config_store, record_id)
    export_settings = record.export_settings

    fmt = (fmt or export_settings.format).lower()
    template_id = template_id or export_settings.template_id
    if font_size is None:
        font_size = export_settings.dim_font_size or settings.dim_font_size

    _render(
        record.config,
        output_dir=output_dir or Path(settings.output_dir),
        fmt=fmt,
        template_id=template_id,
        title=title or record.name,
        model_name=record.name,
        font_size=font_size,
        notes=notes,
        file_name=f"{record.name}_rev{record.revision}",
    )

    if save_settings:
        data = next_revision(record).to_dict()
        data["export_settings"] = {"template_id": template_id, "format": fmt, "dim_font_size": font_size}
        saved = config_store.put(data)
        click.echo(f"Saved export settings (revision {saved.revision})")


if __name__ == "__main__":
    cli()
