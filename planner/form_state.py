import logging
from typing import Optional

from planner.store.milestone_store import MilestoneStore
from planner.types import DEFAULT_TIMELINE, FIELDS, Milestone, MilestoneDraft

log = logging.getLogger("form")


class FormState:
    """Draft values plus the optional id being edited.

    Two modes: "adding" (no edit target) and "editing". Validation happens only on commit;
    a rejected commit raises MilestoneValidationError and leaves draft and mode untouched.
    """

    def __init__(self, store: MilestoneStore, default_timeline: str = DEFAULT_TIMELINE):
        self.store = store
        self.default_timeline = default_timeline
        self.draft = MilestoneDraft(timeline=default_timeline)
        self.editing_id: Optional[str] = None

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    @property
    def mode(self) -> str:
        return "editing" if self.is_editing else "adding"

    def set_field(self, name: str, value: str):
        if name not in FIELDS:
            raise ValueError(f"Unknown form field: {name}")
        setattr(self.draft, name, "" if value is None else str(value))

    def begin_edit(self, milestone: Milestone):
        # replaces any current edit target
        self.draft = MilestoneDraft(
            timeline=milestone.timeline,
            title=milestone.title,
            start=milestone.start.isoformat(),
            end=milestone.end.isoformat(),
        )
        self.editing_id = milestone.id

    def cancel_edit(self):
        self.editing_id = None
        self.draft = MilestoneDraft(timeline=self.default_timeline)

    def commit(self) -> Optional[Milestone]:
        if self.editing_id is not None:
            saved = self.store.update(self.editing_id, self.draft)
            self.editing_id = None
            if saved is None:
                log.warning("Edit target disappeared; switched back to adding.")
                return None
        else:
            saved = self.store.add(self.draft)

        self.draft = MilestoneDraft(timeline=self.draft.timeline)
        return saved

    def delete(self, milestone_id: str) -> bool:
        removed = self.store.delete(milestone_id)
        if self.editing_id == milestone_id:
            self.editing_id = None
        return removed
