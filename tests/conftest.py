"""Shared fixtures: a fixed clock, in-memory storage and a recording console."""

from __future__ import annotations

import io
from collections.abc import Callable
from datetime import UTC, datetime

import pytest
from rich.console import Console

from healthlog.adapters.storage import InMemoryStorage
from healthlog.domain.models import EntryDraft
from healthlog.services.repository import EntryRepository


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 1, 15, 9, 30, tzinfo=UTC)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def repository(storage: InMemoryStorage, now: datetime) -> EntryRepository:
    repo = EntryRepository(storage, clock=lambda: now, tz=UTC)
    repo.load()
    return repo


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=120, color_system=None)


@pytest.fixture
def make_draft() -> Callable[..., EntryDraft]:
    def _make(systolic: int = 130, diastolic: int = 85, pulse: int = 70, **kwargs) -> EntryDraft:
        return EntryDraft(systolic=systolic, diastolic=diastolic, pulse=pulse, **kwargs)

    return _make
