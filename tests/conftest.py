"""Shared fixtures for planner tests."""

import pytest

from planner.form_state import FormState
from planner.store.backends import MemoryBackend
from planner.store.milestone_store import MilestoneStore
from planner.types import MilestoneDraft


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    s = MilestoneStore(backend)
    s.load()
    return s


@pytest.fixture
def form(store):
    return FormState(store)


@pytest.fixture
def promotion_draft():
    return MilestoneDraft(timeline="Career", title="Promotion", start="2020-01-01", end="2020-06-01")
