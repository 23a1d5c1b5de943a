import json
import logging
import uuid
from typing import List, Optional, Set

from pydantic import ValidationError

from planner.types import Milestone, MilestoneDraft, validate_draft

log = logging.getLogger("store")

STORAGE_KEY = "life-timeline-milestones"


class StorageError(RuntimeError):
    """The backend refused a write; the in-memory list was left unchanged."""


class MilestoneStore:
    """Owns the milestone list and writes it through to a key/value backend on every change."""

    def __init__(self, backend, key: str = STORAGE_KEY):
        self.backend = backend
        self.key = key
        self._items: List[Milestone] = []

    # -------- Persistence --------
    def load(self) -> List[Milestone]:
        """Read the stored blob. Absent or corrupt data starts an empty list."""
        self._items = []
        raw = self.backend.get(self.key)
        if raw is None:
            log.info("No saved milestones; starting empty.")
            return self.list()
        try:
            rows = json.loads(raw)
            if not isinstance(rows, list):
                raise ValueError("expected a JSON array")
            loaded = [Milestone.model_validate(r) for r in rows]
        except (ValueError, ValidationError) as e:
            log.warning(f"Saved milestones under {self.key!r} are unreadable ({e}); starting empty.")
            return self.list()

        seen: Set[str] = set()
        for m in loaded:
            if m.id in seen:
                log.warning(f"Dropping duplicate milestone id {m.id}")
                continue
            seen.add(m.id)
            self._items.append(m)
        log.info(f"Loaded {len(self._items)} milestones.")
        return self.list()

    def save(self, items: Optional[List[Milestone]] = None):
        """Persist `items` (default: the current list). Raises StorageError if the backend fails."""
        items = self._items if items is None else items
        blob = json.dumps([m.model_dump(mode="json") for m in items])
        try:
            self.backend.set(self.key, blob)
        except Exception as e:
            log.exception(f"Could not save milestones under {self.key!r}: {e}")
            raise StorageError(f"Could not save milestones: {e}") from e
        log.debug(f"Saved {len(items)} milestones.")

    def _replace(self, items: List[Milestone]):
        # memory only changes once the backend accepted the new list
        self.save(items)
        self._items = items

    # -------- Queries --------
    def list(self) -> List[Milestone]:
        return [m.model_copy() for m in self._items]

    def get(self, milestone_id: str) -> Optional[Milestone]:
        for m in self._items:
            if m.id == milestone_id:
                return m.model_copy()
        return None

    def __len__(self) -> int:
        return len(self._items)

    # -------- Mutations --------
    def add(self, draft: MilestoneDraft) -> Milestone:
        fields = validate_draft(draft)
        ids = {m.id for m in self._items}
        new_id = str(uuid.uuid4())
        while new_id in ids:
            new_id = str(uuid.uuid4())
        m = Milestone(id=new_id, **fields)
        self._replace(self._items + [m])
        log.info(f"Added milestone {m.id} ({m.timeline} / {m.title})")
        return m.model_copy()

    def update(self, milestone_id: str, draft: MilestoneDraft) -> Optional[Milestone]:
        fields = validate_draft(draft)
        for i, m in enumerate(self._items):
            if m.id == milestone_id:
                updated = Milestone(id=m.id, **fields)
                self._replace(self._items[:i] + [updated] + self._items[i + 1:])
                log.info(f"Updated milestone {m.id}")
                return updated.model_copy()
        log.warning(f"Update skipped: no milestone with id {milestone_id}")
        return None

    def delete(self, milestone_id: str) -> bool:
        kept = [m for m in self._items if m.id != milestone_id]
        if len(kept) == len(self._items):
            return False
        self._replace(kept)
        log.info(f"Deleted milestone {milestone_id}")
        return True

    # -------- Maintenance --------
    def reset(self):
        self._replace([])
        log.info("Cleared all milestones.")
