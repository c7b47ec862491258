"""Chart builders (Altair) for heatmaps, shifts and resolution times."""

from __future__ import annotations

from collections.abc import Iterable

import altair as alt
import pandas as pd

from ticket_app.analytics.aggregations.heatmap import heatmap_frame
from ticket_app.core.config import HEATMAP_TOOLTIP_SAMPLES
from ticket_app.core.models import EventKind, HeatmapCell, HeatmapSample


def _format_samples(samples: list[HeatmapSample]) -> str:
    items: list[str] = []
    for sample in samples[:HEATMAP_TOOLTIP_SAMPLES]:
        members = ", ".join(sample.member_names)
        title = sample.name or sample.card_id
        items.append(f"{title} ({members})" if members else title)
    hidden = len(samples) - HEATMAP_TOOLTIP_SAMPLES
    if hidden > 0:
        items.append(f"... and {hidden} more")
    return "\n".join(items)


def hour_heatmap(cells: Iterable[HeatmapCell], kind: EventKind | str, title: str) -> alt.Chart:
    """24-cell strip, one rect per local hour, coloured by count band."""
    frame = heatmap_frame(cells, kind)
    frame["cards"] = frame["samples"].apply(_format_samples)
    frame["label"] = frame["hour"].apply(lambda h: f"{h:02d}h")
    chart_df = frame.drop(columns=["samples"])

    base = alt.Chart(chart_df).encode(
        x=alt.X("label:O", title="Hour", sort=None),
    )
    rects = base.mark_rect(stroke="#ffffff").encode(
        color=alt.Color("color:N", scale=None),
        tooltip=[
            alt.Tooltip("label:N", title="Hour"),
            alt.Tooltip("shift:N", title="Shift"),
            alt.Tooltip("count:Q", title="Cards"),
            alt.Tooltip("cards:N", title="Sample"),
        ],
    )
    text = base.mark_text(fontSize=11).encode(
        text=alt.Text("count:Q"),
        color=alt.condition("datum.band >= 5", alt.value("#ffffff"), alt.value("#111827")),
    )
    return (rects + text).properties(title=title, height=60)


def shift_bar_chart(df: pd.DataFrame, title: str = "Cards per shift") -> alt.Chart | None:
    if df is None or df.empty:
        return None
    return (
        alt.Chart(df)
        .mark_bar(color="#1976d2")
        .encode(
            x=alt.X("shift:N", title="Shift", sort=None),
            y=alt.Y("count:Q", title="Cards"),
            tooltip=[alt.Tooltip("shift:N", title="Shift"), alt.Tooltip("count:Q", title="Cards")],
        )
        .properties(title=title, height=260)
    )


def member_pie_chart(df: pd.DataFrame, title: str = "Cards per member") -> alt.Chart | None:
    if df is None or df.empty:
        return None
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=40)
        .encode(
            theta=alt.Theta("cards:Q"),
            color=alt.Color("member:N", legend=alt.Legend(title="Member")),
            tooltip=[alt.Tooltip("member:N", title="Member"), alt.Tooltip("cards:Q", title="Cards")],
        )
        .properties(title=title, height=280)
    )


def horizontal_bar_chart(
    df: pd.DataFrame,
    category: str,
    value: str,
    *,
    title: str,
    color: str = "#2e7d32",
    value_title: str | None = None,
) -> alt.Chart | None:
    """Sorted horizontal bars; used for apps, removals and per-member time."""
    if df is None or df.empty or category not in df or value not in df:
        return None
    return (
        alt.Chart(df)
        .mark_bar(color=color)
        .encode(
            y=alt.Y(f"{category}:N", title=None, sort="-x"),
            x=alt.X(f"{value}:Q", title=value_title or value.replace("_", " ").title()),
            tooltip=[alt.Tooltip(f"{category}:N"), alt.Tooltip(f"{value}:Q")],
        )
        .properties(title=title, height=max(120, 24 * len(df)))
    )


def time_group_chart(df: pd.DataFrame, title: str) -> alt.Chart | None:
    if df is None or df.empty:
        return None
    return (
        alt.Chart(df)
        .mark_bar(color="#00897b")
        .encode(
            x=alt.X("name:N", title="Duration", sort=None),
            y=alt.Y("count:Q", title="Cards"),
            tooltip=[alt.Tooltip("name:N", title="Duration"), alt.Tooltip("count:Q", title="Cards")],
        )
        .properties(title=title, height=260)
    )


def daily_average_chart(df: pd.DataFrame, title: str) -> alt.Chart | None:
    if df is None or df.empty:
        return None
    chart_df = df.assign(date=pd.to_datetime(df["date"]))
    line = (
        alt.Chart(chart_df)
        .mark_line(color="#1f77b4", point=True)
        .encode(
            x=alt.X("date:T", title="Date"),
            y=alt.Y("average:Q", title="Average (min)"),
            tooltip=[alt.Tooltip("date:T", title="Date"), alt.Tooltip("average:Q", title="Minutes")],
        )
    )
    return line.properties(title=title, height=260)
