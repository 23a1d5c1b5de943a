import plotly.graph_objects as go

from planner.chart import ChartData, format_range
from planner.parsers.dates import from_epoch_ms


def build_figure(chart: ChartData, height: int = 400) -> go.Figure:
    """Horizontal Gantt bars: one trace per timeline, rows ordered like chart.categories."""
    fig = go.Figure()
    for s in chart.series:
        fig.add_trace(go.Bar(
            orientation="h",
            name=s.label,
            y=[seg.label for seg in s.segments],
            # date axis: bars start at `base` and run for x milliseconds
            base=[from_epoch_ms(seg.start_ms).isoformat() for seg in s.segments],
            x=[seg.end_ms - seg.start_ms for seg in s.segments],
            customdata=[[seg.milestone_id, seg.title] for seg in s.segments],
            hovertext=[f"{seg.title}<br>{format_range(seg)}" for seg in s.segments],
            hoverinfo="text",
            marker=dict(color=s.color, line=dict(color="#333", width=1)),
        ))

    fig.update_layout(
        height=height,
        barmode="overlay",
        margin=dict(l=30, r=20, t=60, b=60),
        xaxis=dict(type="date", side="top", dtick="M12", tickformat="%Y", title="Date"),
        yaxis=dict(type="category", categoryorder="array", categoryarray=chart.categories,
                   title="Timelines"),
        legend=dict(orientation="h", yanchor="top", y=-0.1, xanchor="center", x=0.5),
        hovermode="closest",
    )
    return fig
