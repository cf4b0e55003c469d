"""
Domain models for the health log.

These models represent the core records and are framework-agnostic.
They use Pydantic for validation. Entries are immutable once created; the log
is only ever extended, trimmed by id, or replaced wholesale.

Validation aliases accept the key names written by the browser-based tracker
("datetime", "name", "value", "details", camelCase profile ranges), so its
JSON exports can be imported unchanged.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from healthlog.domain.zones import Zone, classify

CLOCK_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class TriggerKind(str, Enum):
    """Situations that tend to precede a pressure spike."""

    SLEEP_DEPRIVATION = "sleep_deprivation"
    HEAD_TILT = "head_tilt"
    NECK_SPASM = "neck_spasm"
    STRESS = "stress"
    WEATHER = "weather"
    TEMPERATURE = "temperature"


class SymptomKind(str, Enum):
    RHYTHM_DISRUPTION = "rhythm_disruption"
    TINNITUS = "tinnitus"
    OCCIPITAL_PAIN = "occipital_pain"
    INSTABILITY = "instability"
    OTHER = "other"


class MedicationKind(str, Enum):
    AMINALON = "aminalon"
    MAGNESIUM_B6 = "magnesium_b6"
    OTHER = "other"


TRIGGER_LABELS: dict[TriggerKind, str] = {
    TriggerKind.SLEEP_DEPRIVATION: "Sleep deprivation",
    TriggerKind.HEAD_TILT: "Work with head tilted",
    TriggerKind.NECK_SPASM: "Neck spasm",
    TriggerKind.STRESS: "Stress/anxiety",
    TriggerKind.WEATHER: "Weather change",
    TriggerKind.TEMPERATURE: "Temperature discomfort",
}

SYMPTOM_LABELS: dict[SymptomKind, str] = {
    SymptomKind.RHYTHM_DISRUPTION: "Rhythm disruption",
    SymptomKind.TINNITUS: "Tinnitus",
    SymptomKind.OCCIPITAL_PAIN: "Occipital pain",
    SymptomKind.INSTABILITY: "Instability",
    SymptomKind.OTHER: "Other",
}

MEDICATION_LABELS: dict[MedicationKind, str] = {
    MedicationKind.AMINALON: "Aminalon",
    MedicationKind.MAGNESIUM_B6: "Magnesium + B6",
    MedicationKind.OTHER: "Other",
}


class SleepRecord(BaseModel):
    """Sleep preceding the reading. `duration_hours` is derived from start/end."""

    model_config = ConfigDict(frozen=True)

    start: str | None = Field(default=None, pattern=CLOCK_PATTERN, description="Fell asleep, HH:MM")
    end: str | None = Field(default=None, pattern=CLOCK_PATTERN, description="Woke up, HH:MM")
    quality: int | None = Field(default=None, ge=1, le=5)
    duration_hours: float | None = Field(default=None, ge=0.0)

    def is_empty(self) -> bool:
        return self.start is None and self.end is None and self.quality is None


class Trigger(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: TriggerKind = Field(validation_alias=AliasChoices("kind", "value"))
    label: str = Field(validation_alias=AliasChoices("label", "name"))
    detail: str | None = Field(default=None, validation_alias=AliasChoices("detail", "details"))

    @classmethod
    def of(cls, kind: TriggerKind, detail: str | None = None) -> "Trigger":
        return cls(kind=kind, label=TRIGGER_LABELS[kind], detail=detail)


class Symptom(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: SymptomKind = Field(validation_alias=AliasChoices("kind", "value"))
    label: str = Field(validation_alias=AliasChoices("label", "name"))
    intensity: int | None = Field(default=None, ge=1, le=5)
    detail: str | None = Field(
        default=None,
        validation_alias=AliasChoices("detail", "details"),
        description="Free text of an 'other' symptom",
    )

    @classmethod
    def of(
        cls, kind: SymptomKind, intensity: int | None = None, detail: str | None = None
    ) -> "Symptom":
        return cls(kind=kind, label=SYMPTOM_LABELS[kind], intensity=intensity, detail=detail)


class Medication(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: MedicationKind = Field(validation_alias=AliasChoices("kind", "value"))
    label: str = Field(validation_alias=AliasChoices("label", "name"))
    dose: float | None = Field(default=None, ge=0.0, description="Dose in mg")
    detail: str | None = Field(
        default=None,
        validation_alias=AliasChoices("detail", "details"),
        description="Free text of an 'other' medication",
    )

    @classmethod
    def of(
        cls, kind: MedicationKind, dose: float | None = None, detail: str | None = None
    ) -> "Medication":
        return cls(kind=kind, label=MEDICATION_LABELS[kind], dose=dose, detail=detail)


class EntryDraft(BaseModel):
    """Everything the user submits; the repository turns it into an Entry."""

    timestamp: datetime | None = Field(default=None, description="Defaults to capture time")
    systolic: int = Field(gt=0, description="mmHg")
    diastolic: int = Field(gt=0, description="mmHg")
    pulse: int = Field(gt=0, description="bpm")
    sleep: SleepRecord | None = None
    wellness: int = Field(default=3, ge=1, le=5)
    triggers: list[Trigger] = Field(default_factory=list)
    symptoms: list[Symptom] = Field(default_factory=list)
    medications: list[Medication] = Field(default_factory=list)
    notes: str = ""


class Entry(BaseModel):
    """One logged observation with its zone fixed at creation."""

    model_config = ConfigDict(frozen=True)

    id: int
    timestamp: datetime = Field(validation_alias=AliasChoices("timestamp", "datetime"))
    systolic: int = Field(gt=0)
    diastolic: int = Field(gt=0)
    pulse: int = Field(gt=0)
    sleep: SleepRecord | None = None
    wellness: int = Field(ge=1, le=5)
    triggers: list[Trigger] = Field(default_factory=list)
    symptoms: list[Symptom] = Field(default_factory=list)
    medications: list[Medication] = Field(default_factory=list)
    notes: str = ""
    zone: Zone

    @model_validator(mode="before")
    @classmethod
    def classify_unzoned(cls, data: Any) -> Any:
        """Entries imported without a stored zone are classified once, here."""
        if not isinstance(data, dict) or data.get("zone") is not None:
            return data
        try:
            zone = classify(int(data["systolic"]), int(data["diastolic"]), int(data["pulse"]))
        except (KeyError, TypeError, ValueError):
            # Leave the missing fields for field validation to report
            return data
        return {**data, "zone": zone}


class Profile(BaseModel):
    """Static reference ranges, shown for information only."""

    model_config = ConfigDict(frozen=True)

    normal_systolic: tuple[int, int] = Field(
        default=(128, 140), validation_alias=AliasChoices("normal_systolic", "normalSystolic")
    )
    normal_diastolic: tuple[int, int] = Field(
        default=(78, 90), validation_alias=AliasChoices("normal_diastolic", "normalDiastolic")
    )
    normal_pulse: tuple[int, int] = Field(
        default=(65, 85), validation_alias=AliasChoices("normal_pulse", "normalPulse")
    )


class HealthLog(BaseModel):
    """The full collection of entries plus the reference profile."""

    entries: list[Entry] = Field(default_factory=list)
    profile: Profile = Field(default_factory=Profile)
