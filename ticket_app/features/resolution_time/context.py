"""Pure helpers to build the Resolution Time context for testing (no Streamlit)."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

import pandas as pd

from ticket_app.analytics.aggregations.members import agent_leaderboard, time_and_count_by
from ticket_app.analytics.metrics.binning import average_by_date, average_time, group_times
from ticket_app.core.config import TIMING_FIELDS
from ticket_app.core.models import Member


@dataclass(slots=True)
class ResolutionContext:
    frame: pd.DataFrame
    time_groups: dict[str, pd.DataFrame] = field(default_factory=dict)
    averages: dict[str, float | None] = field(default_factory=dict)
    daily_averages: dict[str, pd.DataFrame] = field(default_factory=dict)
    by_member: dict[str, pd.DataFrame] = field(default_factory=dict)
    by_app: dict[str, pd.DataFrame] = field(default_factory=dict)
    leaderboard: pd.DataFrame = field(default_factory=pd.DataFrame)


def _contains(values, wanted: str) -> bool:
    return isinstance(values, (list, tuple, set)) and wanted in values


def valid_timing_rows(df: pd.DataFrame, members: Iterable[Member]) -> pd.DataFrame:
    """Rows with a positive resolution time and at least one known member."""
    if df.empty or "resolution_time" not in df.columns:
        return df.iloc[0:0]
    known = {m.id for m in members}
    positive = pd.to_numeric(df["resolution_time"], errors="coerce").fillna(0) > 0
    has_member = df["member_ids"].apply(lambda ids: any(i in known for i in ids or ()))
    return df[positive & has_member]


def build_resolution_context(
    df: pd.DataFrame,
    members: Iterable[Member],
    *,
    app_label: str | None = None,
    member_id: str | None = None,
    team: str | None = None,
    group: str | None = None,
) -> ResolutionContext:
    """Build context for the Resolution Time page.

    Optional filters narrow the enriched frame before any roll-up: an app
    label, a member id, a product team or a TS group. A card resolving to
    several teams or groups matches each of them.
    """
    members = list(members)
    work = valid_timing_rows(df, members)
    if not work.empty:
        if app_label:
            work = work[work["apps"].apply(lambda v: _contains(v, app_label))]
        if member_id:
            work = work[work["member_ids"].apply(lambda v: _contains(v, member_id))]
        if team:
            work = work[work["teams"].apply(lambda v: _contains(v, team))]
        if group:
            work = work[work["ts_groups"].apply(lambda v: _contains(v, group))]
    if work.empty:
        return ResolutionContext(frame=work)

    return ResolutionContext(
        frame=work,
        time_groups={f: group_times(work, f) for f in TIMING_FIELDS},
        averages={f: average_time(work, f) for f in TIMING_FIELDS},
        daily_averages={f: average_by_date(work, f) for f in TIMING_FIELDS},
        by_member={f: time_and_count_by(work, f, by="member", members=members) for f in TIMING_FIELDS},
        by_app={f: time_and_count_by(work, f, by="app") for f in TIMING_FIELDS},
        leaderboard=agent_leaderboard(work, members),
    )
