"""
Entry repository owning the persisted health log.

Key rules:
- New entries go to the head of the log, so stored order is newest-inserted first
- Every mutation persists the whole log; there are no partial writes
- A failed persist rolls the in-memory log back and propagates StorageUnavailable
- Zones are computed once, when an entry is created
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timedelta, tzinfo

import structlog
from pydantic import ValidationError as PydanticValidationError

from healthlog.adapters.storage import StorageBackend
from healthlog.domain.models import Entry, EntryDraft, HealthLog, Profile, SleepRecord
from healthlog.domain.sleep import duration
from healthlog.domain.zones import classify
from healthlog.errors import FormatError

logger = structlog.get_logger(__name__)

DEFAULT_STORAGE_KEY = "healthTrackerData"


def local_now() -> datetime:
    """Current time in the machine's local timezone."""
    return datetime.now().astimezone()


class EntryRepository:
    """
    The single log instance for a session.

    Constructed once and passed to whoever needs it (controller, CLI, tests).
    Call `load()` before use to pick up previously persisted entries.
    """

    def __init__(
        self,
        storage: StorageBackend,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], datetime] | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self.storage = storage
        self.key = key
        self.tz = tz
        self._clock = clock or (lambda: datetime.now(tz) if tz is not None else local_now())
        self._log = HealthLog()
        self._last_id = 0
        self.logger = logger.bind(component="entry_repository", key=key)

    def __len__(self) -> int:
        return len(self._log.entries)

    @property
    def profile(self) -> Profile:
        return self._log.profile

    @property
    def log(self) -> HealthLog:
        """The current log. Mutations replace it rather than editing it in place."""
        return self._log

    def load(self) -> None:
        """Read the persisted log. An absent key means an empty log."""
        blob = self.storage.get(self.key)
        if blob is None:
            self._log = HealthLog()
            self.logger.info("log_initialized_empty")
        else:
            self._log = self._parse(blob.encode("utf-8"))
            self.logger.info("log_loaded", entries=len(self._log.entries))
        self._last_id = max((e.id for e in self._log.entries), default=0)

    def append(self, draft: EntryDraft) -> Entry:
        """Classify the draft, store it at the head of the log and persist."""
        timestamp = self._localize(draft.timestamp) if draft.timestamp else self._clock()
        entry = Entry(
            id=self._next_id(),
            timestamp=timestamp,
            systolic=draft.systolic,
            diastolic=draft.diastolic,
            pulse=draft.pulse,
            sleep=self._complete_sleep(draft.sleep),
            wellness=draft.wellness,
            triggers=list(draft.triggers),
            symptoms=list(draft.symptoms),
            medications=list(draft.medications),
            notes=draft.notes,
            zone=classify(draft.systolic, draft.diastolic, draft.pulse),
        )

        previous = self._log
        self._log = self._log.model_copy(update={"entries": [entry, *previous.entries]})
        self._persist(previous)
        self._last_id = entry.id

        self.logger.info(
            "entry_appended",
            entry_id=entry.id,
            zone=entry.zone.value,
            systolic=entry.systolic,
            diastolic=entry.diastolic,
            pulse=entry.pulse,
        )
        return entry

    def list(self, limit: int | None = None) -> list[Entry]:
        """Entries in stored order, newest inserted first."""
        entries = list(self._log.entries)
        if limit is not None:
            return entries[:limit]
        return entries

    def recent(self, days: int) -> list[Entry]:
        """Entries from the last `days` days, oldest first, for charting."""
        cutoff = self._clock() - timedelta(days=days)
        return sorted(
            (e for e in self._log.entries if e.timestamp >= cutoff),
            key=lambda e: e.timestamp,
        )

    def remove(self, entry_id: int) -> bool:
        """Delete an entry by id. Returns False, touching nothing, if it is absent."""
        remaining = [e for e in self._log.entries if e.id != entry_id]
        if len(remaining) == len(self._log.entries):
            self.logger.info("entry_remove_missed", entry_id=entry_id)
            return False

        previous = self._log
        self._log = self._log.model_copy(update={"entries": remaining})
        self._persist(previous)
        self.logger.info("entry_removed", entry_id=entry_id, remaining=len(remaining))
        return True

    def serialize(self) -> bytes:
        """The full log as pretty-printed UTF-8 JSON."""
        return self._log.model_dump_json(indent=2).encode("utf-8")

    def validate_payload(self, payload: bytes) -> HealthLog:
        """Parse a payload without touching the current log. Raises FormatError."""
        return self._parse(payload)

    def deserialize(self, payload: bytes) -> None:
        """Replace the whole log. On FormatError the current log is kept."""
        new_log = self._parse(payload)

        previous = self._log
        self._log = new_log
        self._persist(previous)
        self._last_id = max((e.id for e in new_log.entries), default=0)
        self.logger.info(
            "log_imported", entries=len(new_log.entries), replaced=len(previous.entries)
        )

    def _parse(self, payload: bytes) -> HealthLog:
        try:
            data = json.loads(payload)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise FormatError(f"Payload is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
            raise FormatError("Payload has no 'entries' array")

        try:
            log = HealthLog.model_validate(data)
        except PydanticValidationError as e:
            raise FormatError(
                f"Payload holds invalid entries ({e.error_count()} errors): {e}"
            ) from e

        ids = [e.id for e in log.entries]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise FormatError(f"Payload holds duplicate entry ids: {duplicates}")

        entries = [
            e.model_copy(
                update={
                    "timestamp": self._localize(e.timestamp),
                    # Browser exports carry an all-null sleep group for "not filled in"
                    "sleep": None if e.sleep is None or e.sleep.is_empty() else e.sleep,
                }
            )
            for e in log.entries
        ]
        return log.model_copy(update={"entries": entries})

    def _persist(self, previous: HealthLog) -> None:
        try:
            self.storage.set(self.key, self._log.model_dump_json())
        except Exception:
            self._log = previous
            self.logger.error("log_persist_failed_rolled_back", entries=len(previous.entries))
            raise
        self.logger.debug("log_persisted", entries=len(self._log.entries))

    def _next_id(self) -> int:
        now_ms = int(self._clock().timestamp() * 1000)
        return max(now_ms, self._last_id + 1)

    def _localize(self, timestamp: datetime) -> datetime:
        """Attach the configured (or local) timezone to a naive timestamp."""
        if timestamp.tzinfo is not None:
            return timestamp
        if self.tz is not None:
            return timestamp.replace(tzinfo=self.tz)
        return timestamp.astimezone()

    @staticmethod
    def _complete_sleep(sleep: SleepRecord | None) -> SleepRecord | None:
        if sleep is None or sleep.is_empty():
            return None
        elapsed = duration(sleep.start, sleep.end)
        return sleep.model_copy(
            update={"duration_hours": round(elapsed.total_hours, 2) if elapsed else None}
        )
