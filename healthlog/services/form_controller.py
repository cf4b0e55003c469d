"""
Form controller: turns raw form input into entries and drives the views.

The form is a mapping of field name to raw value, as a browser's FormData or
the CLI's options would provide it. Numbers may arrive as strings; empty
strings mean "not filled in". Checkbox groups (`trigger`, `symptom`,
`medication`) are sequences of kind values.

Destructive actions (delete, import) ask a `confirm` callback first and are
not abortable once confirmed.
"""

from collections.abc import Callable, Mapping
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import structlog
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console

from healthlog.config import AnalysisConfig, DisplayConfig
from healthlog.domain.models import (
    Entry,
    EntryDraft,
    Medication,
    MedicationKind,
    SleepRecord,
    Symptom,
    SymptomKind,
    Trigger,
    TriggerKind,
)
from healthlog.errors import ValidationError
from healthlog.services import formatter
from healthlog.services.charts import ChartRenderer
from healthlog.services.notes_analysis import NotesAnalysis, NotesAnalyzer
from healthlog.services.repository import EntryRepository

logger = structlog.get_logger(__name__)

MARKDOWN_FILENAME = "daily-log.md"
JSON_FILENAME = "health-data.json"
REQUIRED_VITALS = ("systolic", "diastolic", "pulse")

Confirm = Callable[[str], bool]
KindT = TypeVar("KindT", bound=Enum)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _text(form: Mapping[str, Any], name: str) -> str | None:
    value = form.get(name)
    return None if _blank(value) else str(value).strip()


def _int(form: Mapping[str, Any], name: str) -> int | None:
    value = form.get(name)
    if _blank(value):
        return None
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise ValidationError(f"{name} must be a whole number, got {value!r}", [name]) from e


def _float(form: Mapping[str, Any], name: str) -> float | None:
    value = form.get(name)
    if _blank(value):
        return None
    try:
        return float(str(value).strip())
    except ValueError as e:
        raise ValidationError(f"{name} must be a number, got {value!r}", [name]) from e


def _checked(form: Mapping[str, Any], name: str) -> list[str]:
    value = form.get(name)
    if _blank(value):
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def _kind(enum_type: type[KindT], value: str, field: str) -> KindT:
    try:
        return enum_type(value)
    except ValueError as e:
        raise ValidationError(f"Unknown {field} {value!r}", [field]) from e


def _timestamp(form: Mapping[str, Any]) -> datetime | None:
    value = form.get("entry_date")
    if isinstance(value, datetime):
        return value
    if _blank(value):
        return None
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ValidationError(f"entry_date is not a date/time: {value!r}", ["entry_date"]) from e


def collect_triggers(form: Mapping[str, Any]) -> list[Trigger]:
    triggers = []
    for value in _checked(form, "trigger"):
        kind = _kind(TriggerKind, value, "trigger")
        detail: str | None = None
        if kind is TriggerKind.SLEEP_DEPRIVATION:
            hours = _float(form, "sleep_hours")
            detail = f"{hours:g} h" if hours is not None else None
        elif kind is TriggerKind.HEAD_TILT:
            minutes = _int(form, "head_tilt_duration")
            detail = f"{minutes} min" if minutes is not None else None
        elif kind is TriggerKind.NECK_SPASM:
            level = _int(form, "neck_spasm")
            detail = f"{level}/5" if level is not None else None
        elif kind is TriggerKind.STRESS:
            level = _int(form, "stress_level")
            detail = f"{level}/5" if level is not None else None
        triggers.append(Trigger.of(kind, detail))
    return triggers


def collect_symptoms(form: Mapping[str, Any]) -> list[Symptom]:
    symptoms = []
    for value in _checked(form, "symptom"):
        kind = _kind(SymptomKind, value, "symptom")
        intensity = _int(form, "occipital_pain") if kind is SymptomKind.OCCIPITAL_PAIN else None
        symptoms.append(Symptom.of(kind, intensity=intensity))

    other = _text(form, "other_symptoms")
    if other:
        symptoms.append(Symptom.of(SymptomKind.OTHER, detail=other))
    return symptoms


def collect_medications(form: Mapping[str, Any]) -> list[Medication]:
    medications = []
    for value in _checked(form, "medication"):
        kind = _kind(MedicationKind, value, "medication")
        dose = _float(form, "aminalon_dose") if kind is MedicationKind.AMINALON else None
        medications.append(Medication.of(kind, dose=dose))

    other = _text(form, "other_medications")
    if other:
        medications.append(Medication.of(MedicationKind.OTHER, detail=other))
    return medications


class FormController:
    """Glue between the form, the repository and the rendered views."""

    def __init__(
        self,
        repository: EntryRepository,
        console: Console,
        display: DisplayConfig | None = None,
        chart_renderer: ChartRenderer | None = None,
        analyzer: NotesAnalyzer | None = None,
    ) -> None:
        self.repository = repository
        self.console = console
        self.display = display or DisplayConfig()
        self.chart_renderer = chart_renderer
        self.analyzer = analyzer or NotesAnalyzer(AnalysisConfig())
        self.logger = logger.bind(component="form_controller")

    def build_draft(self, form: Mapping[str, Any]) -> EntryDraft:
        """Read the form into a draft. Raises ValidationError; nothing is stored."""
        vitals = {name: _int(form, name) for name in REQUIRED_VITALS}
        missing = [name for name, value in vitals.items() if value is None]
        if missing:
            raise ValidationError(f"Missing required vitals: {', '.join(missing)}", missing)

        wellness = _int(form, "wellness")
        try:
            return EntryDraft(
                timestamp=_timestamp(form),
                systolic=vitals["systolic"],
                diastolic=vitals["diastolic"],
                pulse=vitals["pulse"],
                sleep=SleepRecord(
                    start=_text(form, "sleep_start"),
                    end=_text(form, "sleep_end"),
                    quality=_int(form, "sleep_quality"),
                ),
                wellness=wellness if wellness is not None else 3,
                triggers=collect_triggers(form),
                symptoms=collect_symptoms(form),
                medications=collect_medications(form),
                notes=_text(form, "notes") or "",
            )
        except PydanticValidationError as e:
            fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
            raise ValidationError(f"Invalid form input: {', '.join(fields)}", fields) from e

    def submit(self, form: Mapping[str, Any]) -> Entry:
        """Validate, store and display a new entry."""
        try:
            draft = self.build_draft(form)
        except ValidationError as e:
            self.logger.warning("form_rejected", fields=e.fields, error=str(e))
            raise

        entry = self.repository.append(draft)
        self.refresh_views()
        return entry

    def refresh_views(self) -> None:
        """Charts for the recent window, then the latest entries table."""
        self.render_charts()

        entries = self.repository.list(self.display.table_limit)
        if not entries:
            self.console.print("No entries yet. Add your first entry.", style="dim")
            return
        self.console.print(formatter.render_table(entries))

    def render_charts(self, days: int | None = None) -> bool:
        """Chart the last `days` (default: chart window). Returns False if nothing was drawn."""
        if self.chart_renderer is None:
            self.logger.debug("chart_renderer_unavailable")
            return False

        entries = self.repository.recent(days or self.display.chart_days)
        try:
            self.chart_renderer.render(formatter.chart_series(entries))
        except Exception as e:
            # Table-only display is an acceptable outcome
            self.logger.warning("chart_render_failed", error=str(e))
            return False
        return True

    def delete_entry(self, entry_id: int, confirm: Confirm) -> bool:
        if not confirm(f"Delete entry {entry_id}?"):
            self.logger.info("delete_cancelled", entry_id=entry_id)
            return False
        removed = self.repository.remove(entry_id)
        if removed:
            self.refresh_views()
        return removed

    def export_markdown(self, output_dir: Path | None = None) -> Path:
        path = self._export_path(output_dir, MARKDOWN_FILENAME)
        path.write_text(formatter.to_markdown(self.repository.list()), encoding="utf-8")
        self.logger.info(
            "exported", format="markdown", path=str(path), entries=len(self.repository)
        )
        return path

    def export_json(self, output_dir: Path | None = None) -> Path:
        path = self._export_path(output_dir, JSON_FILENAME)
        path.write_text(formatter.to_json(self.repository.log), encoding="utf-8")
        self.logger.info(
            "exported", format="json", path=str(path), entries=len(self.repository)
        )
        return path

    def import_file(self, path: Path, confirm: Confirm) -> bool:
        """Replace the whole log with a JSON export. FormatError leaves the log as is."""
        payload = Path(path).read_bytes()
        incoming = self.repository.validate_payload(payload)
        prompt = (
            f"Replace all {len(self.repository)} entries with the {len(incoming.entries)} "
            f"entries in {path}?"
        )
        if not confirm(prompt):
            self.logger.info("import_cancelled", path=str(path))
            return False

        self.repository.deserialize(payload)
        self.refresh_views()
        return True

    def analyze_notes(self, text: str) -> NotesAnalysis:
        return self.analyzer.analyze(text)

    def _export_path(self, output_dir: Path | None, filename: str) -> Path:
        directory = Path(output_dir or self.display.export_dir).expanduser()
        directory.mkdir(parents=True, exist_ok=True)
        return directory / filename

