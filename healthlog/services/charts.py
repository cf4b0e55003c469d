"""
Charting collaborators.

A renderer receives label-aligned series and draws them. The terminal
renderer draws horizontal bars on fixed axes (blood pressure 60-180 mmHg,
pulse 50-140 bpm) with the normal range highlighted.
"""

from typing import Protocol

from rich.console import Console
from rich.table import Table
from rich.text import Text

from healthlog.domain.models import Profile
from healthlog.services.formatter import ChartSeries

BP_AXIS = (60, 180)
PULSE_AXIS = (50, 140)
BAR_WIDTH = 40


class ChartRenderer(Protocol):
    """Anything that can draw a ChartSeries."""

    def render(self, series: ChartSeries) -> None: ...


def scale_bar(value: int, axis: tuple[int, int], width: int = BAR_WIDTH) -> int:
    """Bar length for `value` on `axis`, clamped to [0, width]."""
    low, high = axis
    clamped = min(max(value, low), high)
    return round((clamped - low) / (high - low) * width)


class TerminalChartRenderer:
    """Draws the BP and pulse series as rich bar tables."""

    def __init__(self, console: Console, profile: Profile | None = None) -> None:
        self.console = console
        self.profile = profile or Profile()

    def _bar(self, value: int, axis: tuple[int, int], normal: tuple[int, int], color: str) -> Text:
        style = color if normal[0] <= value <= normal[1] else f"bold {color}"
        return Text("█" * scale_bar(value, axis), style=style)

    def render(self, series: ChartSeries) -> None:
        if series.is_empty():
            self.console.print("No readings in the chart window.", style="dim")
            return

        bp_table = Table(title=f"Blood pressure, mmHg (axis {BP_AXIS[0]}-{BP_AXIS[1]})")
        bp_table.add_column("Date")
        bp_table.add_column("Systolic", justify="right")
        bp_table.add_column("")
        bp_table.add_column("Diastolic", justify="right")
        bp_table.add_column("")
        for label, systolic, diastolic in zip(
            series.labels, series.systolic, series.diastolic, strict=True
        ):
            bp_table.add_row(
                label,
                str(systolic),
                self._bar(systolic, BP_AXIS, self.profile.normal_systolic, "red"),
                str(diastolic),
                self._bar(diastolic, BP_AXIS, self.profile.normal_diastolic, "blue"),
            )

        pulse_table = Table(title=f"Pulse, bpm (axis {PULSE_AXIS[0]}-{PULSE_AXIS[1]})")
        pulse_table.add_column("Date")
        pulse_table.add_column("Pulse", justify="right")
        pulse_table.add_column("")
        for label, pulse in zip(series.labels, series.pulse, strict=True):
            pulse_table.add_row(
                label, str(pulse), self._bar(pulse, PULSE_AXIS, self.profile.normal_pulse, "green")
            )

        self.console.print(bp_table)
        self.console.print(pulse_table)
