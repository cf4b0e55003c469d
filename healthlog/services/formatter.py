"""
View formatting for the health log.

Pure functions from entries to:
- table rows (and a rich Table built from them)
- label-aligned chart series
- a Markdown journal
- the pretty-printed JSON log

Nothing here touches storage; callers decide which entries to pass and in
which order.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from rich.table import Table
from rich.text import Text

from healthlog.domain.models import Entry, HealthLog, Profile, SleepRecord
from healthlog.domain.zones import Zone, zone_emoji, zone_name, zone_style

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"
CHART_LABEL_FORMAT = "%d.%m"
TABLE_COLUMNS = ("Date & time", "BP", "Pulse", "Zone", "Sleep", "Wellness")
NOT_SPECIFIED = "not specified"


@dataclass(frozen=True)
class TableRow:
    """One table line. Only `zone` stays typed so renderers can style it."""

    datetime: str
    blood_pressure: str
    pulse: str
    zone: Zone
    sleep: str
    wellness: str


@dataclass(frozen=True)
class ChartSeries:
    """Blood pressure pair and pulse, aligned to the same date labels."""

    labels: list[str] = field(default_factory=list)
    systolic: list[int] = field(default_factory=list)
    diastolic: list[int] = field(default_factory=list)
    pulse: list[int] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.labels


def format_hours(hours: float) -> str:
    whole, minutes = divmod(round(hours * 60), 60)
    return f"{whole}h {minutes:02d}m"


def format_sleep(sleep: SleepRecord | None) -> str:
    if sleep is None:
        return "-"
    parts = []
    if sleep.duration_hours is not None:
        parts.append(format_hours(sleep.duration_hours))
    if sleep.quality is not None:
        parts.append(f"{sleep.quality}/5")
    return ", ".join(parts) or "-"


def table_rows(entries: Sequence[Entry]) -> list[TableRow]:
    return [
        TableRow(
            datetime=entry.timestamp.strftime(TIMESTAMP_FORMAT),
            blood_pressure=f"{entry.systolic}/{entry.diastolic}",
            pulse=str(entry.pulse),
            zone=entry.zone,
            sleep=format_sleep(entry.sleep),
            wellness=f"{entry.wellness}/5",
        )
        for entry in entries
    ]


def render_table(entries: Sequence[Entry], title: str = "Recent entries") -> Table:
    table = Table(title=title)
    for column in TABLE_COLUMNS:
        table.add_column(column)

    for row in table_rows(entries):
        table.add_row(
            row.datetime,
            row.blood_pressure,
            row.pulse,
            Text(f"{zone_emoji(row.zone)} {row.zone.value}", style=zone_style(row.zone)),
            row.sleep,
            row.wellness,
        )
    return table


def chart_series(entries: Sequence[Entry]) -> ChartSeries:
    """Series in the order given; pass `EntryRepository.recent()` for a timeline."""
    return ChartSeries(
        labels=[e.timestamp.strftime(CHART_LABEL_FORMAT) for e in entries],
        systolic=[e.systolic for e in entries],
        diastolic=[e.diastolic for e in entries],
        pulse=[e.pulse for e in entries],
    )


def reference_ranges(profile: Profile) -> list[str]:
    return [
        f"Systolic: {profile.normal_systolic[0]}-{profile.normal_systolic[1]} mmHg",
        f"Diastolic: {profile.normal_diastolic[0]}-{profile.normal_diastolic[1]} mmHg",
        f"Pulse: {profile.normal_pulse[0]}-{profile.normal_pulse[1]} bpm",
    ]


def _entry_markdown(entry: Entry) -> list[str]:
    lines = [
        f"## {entry.timestamp.strftime(TIMESTAMP_FORMAT)}",
        "",
        f"**BP:** {entry.systolic}/{entry.diastolic} mmHg",
        f"**Pulse:** {entry.pulse} bpm",
        f"**Zone:** {zone_emoji(entry.zone)} {zone_name(entry.zone)}",
        "",
    ]

    if entry.sleep is not None:
        lines.append("**Sleep:**")
        lines.append(f"- Fell asleep: {entry.sleep.start or NOT_SPECIFIED}")
        lines.append(f"- Woke up: {entry.sleep.end or NOT_SPECIFIED}")
        if entry.sleep.duration_hours is not None:
            lines.append(f"- Duration: {format_hours(entry.sleep.duration_hours)}")
        if entry.sleep.quality is not None:
            lines.append(f"- Quality: {entry.sleep.quality}/5")
        lines.append("")

    lines.extend([f"**Wellness:** {entry.wellness}/5", ""])

    if entry.triggers:
        lines.append("**Triggers:**")
        for trigger in entry.triggers:
            suffix = f" ({trigger.detail})" if trigger.detail else ""
            lines.append(f"- {trigger.label}{suffix}")
        lines.append("")

    if entry.symptoms:
        lines.append("**Symptoms:**")
        for symptom in entry.symptoms:
            line = f"- {symptom.label}"
            if symptom.intensity is not None:
                line += f" (intensity: {symptom.intensity}/5)"
            if symptom.detail:
                line += f": {symptom.detail}"
            lines.append(line)
        lines.append("")

    if entry.medications:
        lines.append("**Medications:**")
        for medication in entry.medications:
            line = f"- {medication.label}"
            if medication.dose is not None:
                line += f" ({medication.dose:g} mg)"
            if medication.detail:
                line += f": {medication.detail}"
            lines.append(line)
        lines.append("")

    if entry.notes:
        lines.extend([f"**Notes:** {entry.notes}", ""])

    lines.extend(["---", ""])
    return lines


def to_markdown(entries: Sequence[Entry]) -> str:
    lines = ["# Health Log", ""]
    for entry in entries:
        lines.extend(_entry_markdown(entry))
    return "\n".join(lines)


def to_json(log: HealthLog) -> str:
    return log.model_dump_json(indent=2)
