from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st
from rich.console import Console

from healthlog.services.charts import (
    BAR_WIDTH,
    BP_AXIS,
    PULSE_AXIS,
    TerminalChartRenderer,
    scale_bar,
)
from healthlog.services.formatter import ChartSeries


def test_scale_bar_endpoints() -> None:
    assert scale_bar(BP_AXIS[0], BP_AXIS) == 0
    assert scale_bar(BP_AXIS[1], BP_AXIS) == BAR_WIDTH
    assert scale_bar(120, BP_AXIS) == BAR_WIDTH // 2


def test_scale_bar_clamps_outside_the_axis() -> None:
    assert scale_bar(20, PULSE_AXIS) == 0
    assert scale_bar(220, PULSE_AXIS) == BAR_WIDTH


@given(value=st.integers(min_value=-500, max_value=500))
def test_scale_bar_stays_within_width(value: int) -> None:
    assert 0 <= scale_bar(value, BP_AXIS) <= BAR_WIDTH


def test_empty_series_prints_placeholder(console: Console) -> None:
    TerminalChartRenderer(console).render(ChartSeries())
    assert "No readings in the chart window." in console.file.getvalue()


def test_renders_one_row_per_label(console: Console) -> None:
    series = ChartSeries(
        labels=["08.01", "09.01"], systolic=[130, 172], diastolic=[85, 101], pulse=[70, 95]
    )
    TerminalChartRenderer(console).render(series)

    output = console.file.getvalue()
    assert "Blood pressure" in output
    assert "Pulse" in output
    assert "08.01" in output and "09.01" in output
    assert "172" in output
    assert "█" in output
