"""
Command line for the health log.

Each command is one user action: the `add` options are the form fields and
the other commands are the page's buttons.

Usage:
    healthlog add --systolic 135 --diastolic 85 --pulse 72 --trigger stress --stress-level 3
    healthlog list --limit 5
    healthlog chart --days 7
    healthlog remove 1736058600000
    healthlog export markdown --output-dir ~/exports
    healthlog import health-data.json
    healthlog analyze "slept badly, neck spasm in the evening"
"""

from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console

from healthlog.adapters.storage import FileStorage
from healthlog.config import AppConfig, configure_logging, get_config, print_config_summary
from healthlog.domain.models import MedicationKind, SymptomKind, TriggerKind
from healthlog.domain.zones import zone_emoji, zone_name
from healthlog.errors import HealthLogError
from healthlog.services import formatter
from healthlog.services.charts import TerminalChartRenderer
from healthlog.services.form_controller import FormController
from healthlog.services.notes_analysis import NotesAnalyzer
from healthlog.services.repository import EntryRepository

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_controller(config: AppConfig, console: Console) -> FormController:
    """Wire storage, repository and views for one session."""
    repository = EntryRepository(
        FileStorage(config.storage.data_dir),
        key=config.storage.key,
        tz=config.display.resolve_timezone(),
    )
    repository.load()
    return FormController(
        repository,
        console,
        display=config.display,
        chart_renderer=TerminalChartRenderer(console, repository.profile),
        analyzer=NotesAnalyzer(config.analysis),
    )


def get_controller(ctx: click.Context) -> FormController:
    if ctx.obj.get("controller") is None:
        ctx.obj["controller"] = build_controller(ctx.obj["config"], ctx.obj["console"])
    return ctx.obj["controller"]


def handle_cli_error(ctx: click.Context, error: Exception, action: str) -> None:
    ctx.obj["console"].print(f"❌ {action} failed: {error}", style="red")
    ctx.exit(1)


def confirmer(yes: bool):
    def confirm(prompt: str) -> bool:
        return yes or click.confirm(prompt, default=False)

    return confirm


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Override the storage directory.",
)
@click.option(
    "--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None
)
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, log_level: str | None) -> None:
    """Personal health log: blood pressure, pulse, sleep and symptoms."""
    ctx.ensure_object(dict)
    console = Console()
    try:
        config = get_config()
    except (PydanticValidationError, ValueError) as e:
        console.print(f"❌ Configuration invalid: {e}", style="red")
        ctx.exit(1)

    if data_dir is not None:
        config = config.model_copy(
            update={"storage": config.storage.model_copy(update={"data_dir": data_dir})}
        )
    if log_level is not None:
        config = config.model_copy(
            update={"logging": config.logging.model_copy(update={"level": log_level.upper()})}
        )

    configure_logging(config.logging)
    ctx.obj.update(config=config, console=console, controller=None)


@cli.command()
@click.option("--date", "entry_date", help="Reading time, YYYY-MM-DDTHH:MM (default: now).")
@click.option("--systolic", type=int, help="Systolic pressure, mmHg.")
@click.option("--diastolic", type=int, help="Diastolic pressure, mmHg.")
@click.option("--pulse", type=int, help="Pulse, bpm.")
@click.option("--sleep-start", help="Fell asleep, HH:MM.")
@click.option("--sleep-end", help="Woke up, HH:MM.")
@click.option("--sleep-quality", type=click.IntRange(1, 5))
@click.option("--wellness", type=click.IntRange(1, 5), default=3, show_default=True)
@click.option(
    "--trigger", "triggers", multiple=True, type=click.Choice([k.value for k in TriggerKind])
)
@click.option("--sleep-hours", type=float, help="Hours slept, for sleep_deprivation.")
@click.option("--head-tilt-minutes", type=int, help="Minutes of head-tilted work.")
@click.option("--neck-spasm", type=click.IntRange(1, 5), help="Neck spasm intensity.")
@click.option("--stress-level", type=click.IntRange(1, 5))
@click.option(
    "--symptom", "symptoms", multiple=True, type=click.Choice([k.value for k in SymptomKind])
)
@click.option("--occipital-pain", type=click.IntRange(1, 5), help="Occipital pain intensity.")
@click.option("--other-symptoms", help="Free-text symptoms.")
@click.option(
    "--medication",
    "medications",
    multiple=True,
    type=click.Choice([k.value for k in MedicationKind]),
)
@click.option("--aminalon-dose", type=float, help="Aminalon dose, mg.")
@click.option("--other-medications", help="Free-text medications.")
@click.option("--notes", default="")
@click.pass_context
def add(ctx: click.Context, **options: Any) -> None:
    """Record a new reading."""
    form = {
        "entry_date": options["entry_date"],
        "systolic": options["systolic"],
        "diastolic": options["diastolic"],
        "pulse": options["pulse"],
        "sleep_start": options["sleep_start"],
        "sleep_end": options["sleep_end"],
        "sleep_quality": options["sleep_quality"],
        "wellness": options["wellness"],
        "trigger": list(options["triggers"]),
        "sleep_hours": options["sleep_hours"],
        "head_tilt_duration": options["head_tilt_minutes"],
        "neck_spasm": options["neck_spasm"],
        "stress_level": options["stress_level"],
        "symptom": list(options["symptoms"]),
        "occipital_pain": options["occipital_pain"],
        "other_symptoms": options["other_symptoms"],
        "medication": list(options["medications"]),
        "aminalon_dose": options["aminalon_dose"],
        "other_medications": options["other_medications"],
        "notes": options["notes"],
    }
    try:
        entry = get_controller(ctx).submit(form)
    except HealthLogError as e:
        handle_cli_error(ctx, e, "Saving entry")
        return

    ctx.obj["console"].print(
        f"✅ Entry {entry.id} saved: {zone_emoji(entry.zone)} {zone_name(entry.zone)}",
        style="green",
    )


@cli.command("list")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Default: table limit.")
@click.pass_context
def list_entries(ctx: click.Context, limit: int | None) -> None:
    """Show the latest entries."""
    try:
        controller = get_controller(ctx)
    except HealthLogError as e:
        handle_cli_error(ctx, e, "Loading log")
        return

    entries = controller.repository.list(limit or controller.display.table_limit)
    console = ctx.obj["console"]
    if not entries:
        console.print("No entries yet. Add your first entry.", style="dim")
        return
    console.print(formatter.render_table(entries))


@cli.command()
@click.option("--days", type=click.IntRange(min=1), default=None, help="Default: chart window.")
@click.pass_context
def chart(ctx: click.Context, days: int | None) -> None:
    """Chart blood pressure and pulse for recent days."""
    try:
        controller = get_controller(ctx)
    except HealthLogError as e:
        handle_cli_error(ctx, e, "Loading log")
        return

    if not controller.render_charts(days):
        ctx.obj["console"].print("Charts unavailable, use `healthlog list`.", style="yellow")


@cli.command()
@click.argument("entry_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def remove(ctx: click.Context, entry_id: int, yes: bool) -> None:
    """Delete one entry by id."""
    console = ctx.obj["console"]
    try:
        removed = get_controller(ctx).delete_entry(entry_id, confirmer(yes))
    except HealthLogError as e:
        handle_cli_error(ctx, e, "Deleting entry")
        return

    if removed:
        console.print(f"🗑️  Entry {entry_id} deleted", style="green")
    else:
        console.print(f"Entry {entry_id} was not deleted", style="yellow")


@cli.command()
@click.argument("fmt", type=click.Choice(["markdown", "json"]))
@click.option("--output-dir", type=click.Path(file_okay=False, path_type=Path), default=None)
@click.pass_context
def export(ctx: click.Context, fmt: str, output_dir: Path | None) -> None:
    """Export the whole log to Markdown or JSON."""
    try:
        controller = get_controller(ctx)
        if fmt == "markdown":
            path = controller.export_markdown(output_dir)
        else:
            path = controller.export_json(output_dir)
    except (HealthLogError, OSError) as e:
        handle_cli_error(ctx, e, "Export")
        return

    ctx.obj["console"].print(f"📤 Exported {len(controller.repository)} entries to {path}")


@cli.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def import_log(ctx: click.Context, path: Path, yes: bool) -> None:
    """Replace the whole log with a JSON export."""
    try:
        controller = get_controller(ctx)
        imported = controller.import_file(path, confirmer(yes))
    except (HealthLogError, OSError) as e:
        handle_cli_error(ctx, e, "Import")
        return

    console = ctx.obj["console"]
    if imported:
        console.print(f"📥 Imported {len(controller.repository)} entries", style="green")
    else:
        console.print("Import cancelled, log unchanged", style="yellow")


@cli.command()
@click.argument("text")
@click.pass_context
def analyze(ctx: click.Context, text: str) -> None:
    """Look for likely triggers in free-text notes."""
    console = ctx.obj["console"]
    try:
        analysis = get_controller(ctx).analyze_notes(text)
    except HealthLogError as e:
        handle_cli_error(ctx, e, "Analysis")
        return

    console.print(f"Analysis ({analysis.source}):", style="bold")
    for finding in analysis.findings:
        console.print(f"- {finding}")


@cli.command()
@click.pass_context
def profile(ctx: click.Context) -> None:
    """Show the normal reference ranges."""
    try:
        controller = get_controller(ctx)
    except HealthLogError as e:
        handle_cli_error(ctx, e, "Loading log")
        return

    for line in formatter.reference_ranges(controller.repository.profile):
        ctx.obj["console"].print(line)


@cli.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Print the effective configuration."""
    print_config_summary(ctx.obj["config"])


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
