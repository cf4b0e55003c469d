"""
Zone classification for blood pressure and pulse readings.

Tiers are checked from most to least severe. A tier matches when ANY of the
three vitals reaches its lower-inclusive minimum; the first match wins and
everything else is green.
"""

from dataclasses import dataclass
from enum import Enum


class Zone(str, Enum):
    """Severity tiers, least to most severe."""

    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"


@dataclass(frozen=True)
class ZoneThreshold:
    """Lower-inclusive minimums that put a reading into a zone."""

    zone: Zone
    systolic_min: int
    diastolic_min: int
    pulse_min: int

    def matches(self, systolic: int, diastolic: int, pulse: int) -> bool:
        return (
            systolic >= self.systolic_min
            or diastolic >= self.diastolic_min
            or pulse >= self.pulse_min
        )


# Most severe first
ZONE_THRESHOLDS: tuple[ZoneThreshold, ...] = (
    ZoneThreshold(Zone.RED, systolic_min=171, diastolic_min=106, pulse_min=131),
    ZoneThreshold(Zone.ORANGE, systolic_min=151, diastolic_min=101, pulse_min=101),
    ZoneThreshold(Zone.YELLOW, systolic_min=141, diastolic_min=91, pulse_min=86),
)

_ZONE_EMOJI: dict[Zone, str] = {
    Zone.GREEN: "🟢",
    Zone.YELLOW: "🟡",
    Zone.ORANGE: "🟠",
    Zone.RED: "🔴",
}

_ZONE_NAMES: dict[Zone, str] = {
    Zone.GREEN: "Green zone",
    Zone.YELLOW: "Yellow zone",
    Zone.ORANGE: "Orange zone",
    Zone.RED: "Red zone",
}

_ZONE_STYLES: dict[Zone, str] = {
    Zone.GREEN: "green",
    Zone.YELLOW: "yellow",
    Zone.ORANGE: "dark_orange",
    Zone.RED: "red",
}


def classify(systolic: int, diastolic: int, pulse: int) -> Zone:
    """Map a reading to its zone. Inputs are not validated."""
    for threshold in ZONE_THRESHOLDS:
        if threshold.matches(systolic, diastolic, pulse):
            return threshold.zone
    return Zone.GREEN


def zone_emoji(zone: Zone) -> str:
    return _ZONE_EMOJI[zone]


def zone_name(zone: Zone) -> str:
    return _ZONE_NAMES[zone]


def zone_style(zone: Zone) -> str:
    """rich style name used when rendering a zone."""
    return _ZONE_STYLES[zone]
