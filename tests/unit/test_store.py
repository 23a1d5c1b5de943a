"""Unit tests for the milestone store.

Covers CRUD semantics, write-through persistence and fail-open loading.
"""

import json
from datetime import date

import pytest

from planner.store.backends import MemoryBackend
from planner.store.milestone_store import STORAGE_KEY, MilestoneStore, StorageError
from planner.types import MilestoneDraft, MilestoneValidationError


def persisted(backend, key=STORAGE_KEY):
    return json.loads(backend.get(key))


def as_rows(store):
    return [m.model_dump(mode="json") for m in store.list()]


class TestAdd:
    """Test cases for adding milestones."""

    def test_add_grows_list_by_one(self, store, promotion_draft):
        m = store.add(promotion_draft)

        assert len(store) == 1
        assert m.title == "Promotion"
        assert m.start == date(2020, 1, 1)
        assert m.end == date(2020, 6, 1)

    def test_ids_are_unique(self, store, promotion_draft):
        ids = {store.add(promotion_draft).id for _ in range(20)}
        assert len(ids) == 20

    def test_us_dates_normalized_to_iso(self, store, backend):
        store.add(MilestoneDraft(timeline="Health", title="Marathon", start="03/15/2024", end="03/16/2024"))

        row = persisted(backend)[0]
        assert row["start"] == "2024-03-15"
        assert row["end"] == "2024-03-16"

    def test_fields_are_trimmed(self, store):
        m = store.add(MilestoneDraft(timeline=" Career ", title=" Promotion ", start="2020-01-01", end="2020-06-01"))
        assert m.timeline == "Career"
        assert m.title == "Promotion"

    def test_end_before_start_is_allowed(self, store):
        m = store.add(MilestoneDraft(title="Backwards", start="2021-01-01", end="2020-01-01"))
        assert m.start > m.end

    @pytest.mark.parametrize("draft, bad_field", [
        (MilestoneDraft(title="", start="2020-01-01", end="2020-02-01"), "title"),
        (MilestoneDraft(title="   ", start="2020-01-01", end="2020-02-01"), "title"),
        (MilestoneDraft(timeline="", title="X", start="2020-01-01", end="2020-02-01"), "timeline"),
        (MilestoneDraft(title="X", start="not-a-date", end="2020-02-01"), "start"),
        (MilestoneDraft(title="X", start="2020-01-01", end=""), "end"),
    ])
    def test_invalid_draft_rejected_without_mutation(self, store, backend, draft, bad_field):
        """Test validation failure raises and leaves list and storage untouched."""
        with pytest.raises(MilestoneValidationError) as exc:
            store.add(draft)

        assert bad_field in exc.value.fields
        assert len(store) == 0
        assert backend.get(STORAGE_KEY) is None

    def test_validation_error_is_value_error(self, store):
        with pytest.raises(ValueError):
            store.add(MilestoneDraft())


class TestUpdate:
    """Test cases for updating milestones."""

    def test_update_preserves_id_and_length(self, store, promotion_draft):
        first = store.add(promotion_draft)
        second = store.add(MilestoneDraft(timeline="Health", title="Gym", start="2021-01-01", end="2021-12-31"))

        updated = store.update(first.id, MilestoneDraft(timeline="Career", title="Promotion 2",
                                                         start="02/01/2020", end="2020-07-01"))

        assert updated.id == first.id
        assert len(store) == 2
        assert [m.id for m in store.list()] == [first.id, second.id]
        assert store.get(first.id).title == "Promotion 2"
        assert store.get(first.id).start == date(2020, 2, 1)

    def test_update_unknown_id_is_noop(self, store, backend, promotion_draft):
        store.add(promotion_draft)
        before = backend.get(STORAGE_KEY)

        assert store.update("missing", promotion_draft) is None
        assert backend.get(STORAGE_KEY) == before

    def test_invalid_update_rejected(self, store, promotion_draft):
        m = store.add(promotion_draft)

        with pytest.raises(MilestoneValidationError):
            store.update(m.id, MilestoneDraft(title="Promotion 2", start="soon", end="2020-06-01"))

        assert store.get(m.id).title == "Promotion"


class TestDelete:
    """Test cases for deleting milestones."""

    def test_delete_removes_only_target(self, store, promotion_draft):
        a = store.add(promotion_draft)
        b = store.add(promotion_draft)

        assert store.delete(a.id) is True
        assert [m.id for m in store.list()] == [b.id]

    def test_delete_is_idempotent(self, store, promotion_draft):
        a = store.add(promotion_draft)

        assert store.delete(a.id) is True
        assert store.delete(a.id) is False
        assert len(store) == 0

    def test_delete_missing_does_not_write(self, store, backend):
        assert store.delete("missing") is False
        assert backend.get(STORAGE_KEY) is None


class TestPersistence:
    """Test cases for write-through and loading."""

    def test_blob_matches_memory_after_each_mutation(self, store, backend, promotion_draft):
        a = store.add(promotion_draft)
        assert persisted(backend) == as_rows(store)

        store.update(a.id, MilestoneDraft(timeline="Career", title="Lead", start="2020-01-01", end="2021-01-01"))
        assert persisted(backend) == as_rows(store)

        store.add(MilestoneDraft(timeline="Health", title="Run", start="2020-03-01", end="2020-03-02"))
        store.delete(a.id)
        assert persisted(backend) == as_rows(store)

    def test_reload_from_same_backend(self, store, backend, promotion_draft):
        store.add(promotion_draft)

        fresh = MilestoneStore(backend)
        loaded = fresh.load()

        assert [m.model_dump() for m in loaded] == [m.model_dump() for m in store.list()]

    def test_missing_key_starts_empty(self):
        assert MilestoneStore(MemoryBackend()).load() == []

    @pytest.mark.parametrize("raw", [
        "{not json",
        '{"id": "x"}',
        '[{"id": "x", "timeline": "Career", "title": "T", "start": "nope", "end": "2020-01-01"}]',
        '[{"timeline": "Career"}]',
        '[{"id": "a", "timeline": "", "title": "", "start": "2020-01-01", "end": "2020-02-01"}]',
        '[{"id": "a", "timeline": "Career", "title": "   ", "start": "2020-01-01", "end": "2020-02-01"}]',
    ])
    def test_corrupt_blob_starts_empty(self, raw):
        """Test unreadable storage falls back to an empty list."""
        backend = MemoryBackend()
        backend.set(STORAGE_KEY, raw)

        assert MilestoneStore(backend).load() == []

    def test_loads_legacy_us_dates(self):
        backend = MemoryBackend()
        backend.set(STORAGE_KEY, json.dumps([
            {"id": "a", "timeline": "Career", "title": "Job", "start": "01/02/2020", "end": "2020-03-04"},
        ]))

        (m,) = MilestoneStore(backend).load()
        assert m.start == date(2020, 1, 2)

    def test_duplicate_ids_dropped_on_load(self):
        row = {"id": "a", "timeline": "Career", "title": "Job", "start": "2020-01-01", "end": "2020-02-01"}
        backend = MemoryBackend()
        backend.set(STORAGE_KEY, json.dumps([row, dict(row, title="Dup")]))

        loaded = MilestoneStore(backend).load()
        assert [m.title for m in loaded] == ["Job"]

    def test_custom_key(self, promotion_draft):
        backend = MemoryBackend()
        store = MilestoneStore(backend, key="other")
        store.add(promotion_draft)

        assert backend.get("other") is not None
        assert backend.get(STORAGE_KEY) is None

    def test_reset_persists_empty_list(self, store, backend, promotion_draft):
        store.add(promotion_draft)
        store.reset()

        assert len(store) == 0
        assert persisted(backend) == []

    def test_list_returns_copies(self, store, promotion_draft):
        store.add(promotion_draft)
        store.list()[0].title = "Mutated"

        assert store.list()[0].title == "Promotion"


class FlakyBackend(MemoryBackend):
    """Accepts `allowed` writes, then raises OSError like a full disk would."""

    def __init__(self, allowed):
        super().__init__()
        self.allowed = allowed

    def set(self, key, value):
        if self.allowed <= 0:
            raise OSError("disk full")
        self.allowed -= 1
        super().set(key, value)


class TestFailedWrites:
    """Test cases for backends that refuse a write."""

    def test_failed_add_leaves_memory_matching_storage(self, promotion_draft):
        backend = FlakyBackend(allowed=1)
        store = MilestoneStore(backend)
        store.add(promotion_draft)

        with pytest.raises(StorageError):
            store.add(promotion_draft)

        assert len(store) == 1
        assert persisted(backend) == as_rows(store)

    def test_failed_update_keeps_old_record(self, promotion_draft):
        backend = FlakyBackend(allowed=1)
        store = MilestoneStore(backend)
        m = store.add(promotion_draft)

        with pytest.raises(StorageError):
            store.update(m.id, MilestoneDraft(timeline="Career", title="Lead", start="2020-01-01", end="2021-01-01"))

        assert store.get(m.id).title == "Promotion"
        assert persisted(backend) == as_rows(store)

    def test_failed_delete_keeps_record(self, promotion_draft):
        backend = FlakyBackend(allowed=1)
        store = MilestoneStore(backend)
        m = store.add(promotion_draft)

        with pytest.raises(StorageError):
            store.delete(m.id)
        with pytest.raises(StorageError):
            store.reset()

        assert [x.id for x in store.list()] == [m.id]
        assert persisted(backend) == as_rows(store)
