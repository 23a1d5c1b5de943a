# planner/listing.py
from typing import List, Sequence, Tuple

import pandas as pd

from planner.types import Milestone

COLUMNS = ["id", "timeline", "title", "start", "end", "days"]


def format_milestone(m: Milestone) -> str:
    return f"**{m.timeline}** – {m.title} ({m.start.isoformat()} → {m.end.isoformat()})"


def format_list(milestones: Sequence[Milestone]) -> str:
    """Markdown bullet list for the page; placeholder text when empty."""
    if not milestones:
        return "_No milestones yet._"
    return "\n".join(f"- {format_milestone(m)}" for m in milestones)


def milestone_choices(milestones: Sequence[Milestone]) -> List[Tuple[str, str]]:
    """(label, id) pairs for the edit/delete picker."""
    return [(f"{m.timeline} – {m.title} ({m.start.isoformat()})", m.id) for m in milestones]


def milestones_frame(milestones: Sequence[Milestone]) -> pd.DataFrame:
    rows = [
        {
            "id": m.id,
            "timeline": m.timeline,
            "title": m.title,
            "start": m.start.isoformat(),
            "end": m.end.isoformat(),
            # negative when end precedes start; ordering is not enforced
            "days": (m.end - m.start).days,
        }
        for m in milestones
    ]
    return pd.DataFrame(rows, columns=COLUMNS)
