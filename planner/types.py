from datetime import date
from typing import Dict, List

from pydantic import BaseModel, field_validator

from planner.parsers.dates import parse_date

DEFAULT_TIMELINE = "Career"
FIELDS = ("timeline", "title", "start", "end")


class MilestoneValidationError(ValueError):
    """Raised when a draft cannot be committed. `fields` lists the offending inputs."""

    def __init__(self, fields: List[str], message: str):
        super().__init__(message)
        self.fields = fields
        self.message = message


class MilestoneDraft(BaseModel):
    """Raw form values, staged until commit."""
    timeline: str = DEFAULT_TIMELINE
    title: str = ""
    start: str = ""   # YYYY-MM-DD or MM/DD/YYYY
    end: str = ""


class Milestone(BaseModel):
    id: str
    timeline: str
    title: str
    start: date
    end: date

    @field_validator("timeline", "title")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("start", "end", mode="before")
    @classmethod
    def _accept_both_formats(cls, v):
        # stored blobs may still carry raw MM/DD/YYYY strings
        if isinstance(v, str):
            parsed = parse_date(v)
            if parsed is None:
                raise ValueError(f"Invalid date: {v!r}")
            return parsed
        return v


def validate_draft(draft: MilestoneDraft) -> Dict:
    """Normalize a draft into Milestone field values or raise MilestoneValidationError."""
    errors: List[str] = []
    bad: List[str] = []

    timeline = (draft.timeline or "").strip()
    title = (draft.title or "").strip()
    if not timeline:
        bad.append("timeline"); errors.append("Timeline is required.")
    if not title:
        bad.append("title"); errors.append("Title is required.")

    start = parse_date(draft.start)
    end = parse_date(draft.end)
    if start is None:
        bad.append("start"); errors.append(f"Start date {draft.start!r} is not YYYY-MM-DD or MM/DD/YYYY.")
    if end is None:
        bad.append("end"); errors.append(f"End date {draft.end!r} is not YYYY-MM-DD or MM/DD/YYYY.")

    if bad:
        raise MilestoneValidationError(bad, " ".join(errors))
    return {"timeline": timeline, "title": title, "start": start, "end": end}
