"""Chart projection: milestones -> categories and colored series for the Gantt view.

Pure functions of the milestone list; recomputed on every render.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from planner.parsers.dates import epoch_ms, format_display, from_epoch_ms
from planner.types import Milestone

PALETTE = ("#ff6384", "#36a2eb", "#4bc0c0", "#9966ff", "#ff9f40")


@dataclass
class ChartSegment:
    milestone_id: str
    start_ms: int
    end_ms: int
    label: str      # row label; always the timeline name so rows line up with categories
    title: str


@dataclass
class ChartSeries:
    label: str
    color: str
    segments: List[ChartSegment] = field(default_factory=list)


@dataclass
class ChartData:
    categories: List[str]
    series: List[ChartSeries]

    @property
    def is_empty(self) -> bool:
        return not self.series


def timeline_categories(milestones: Iterable[Milestone]) -> List[str]:
    """Distinct timelines in first-occurrence order."""
    seen: Dict[str, None] = {}
    for m in milestones:
        seen.setdefault(m.timeline, None)
    return list(seen)


def project_chart(milestones: Sequence[Milestone], palette: Sequence[str] = PALETTE) -> ChartData:
    palette = tuple(palette or ()) or PALETTE
    categories = timeline_categories(milestones)
    series: List[ChartSeries] = []
    for idx, tl in enumerate(categories):
        segs = [
            ChartSegment(m.id, epoch_ms(m.start), epoch_ms(m.end), tl, m.title)
            for m in milestones
            if m.timeline == tl
        ]
        series.append(ChartSeries(tl, palette[idx % len(palette)], segs))
    return ChartData(categories, series)


def format_range(seg: ChartSegment) -> str:
    """Tooltip text, e.g. 'Career: 01/01/2020 - 06/01/2020'."""
    start = format_display(from_epoch_ms(seg.start_ms))
    end = format_display(from_epoch_ms(seg.end_ms))
    return f"{seg.label}: {start} - {end}"
