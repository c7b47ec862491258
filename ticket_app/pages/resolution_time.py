"""Resolution time page: bucketed timings, averages and the agent leaderboard."""

from __future__ import annotations

from datetime import date, timedelta

import pandas as pd
import streamlit as st

from ticket_app.app import SERVICE_KEY, register_page
from ticket_app.core.config import DEFAULT_DATE_RANGE_DAYS, DEFAULT_TOP_N, TIMING_FIELDS
from ticket_app.core.models import TSGroup
from ticket_app.core.service import CardService
from ticket_app.features.resolution_time.context import build_resolution_context
from ticket_app.visual.charts import daily_average_chart, horizontal_bar_chart, time_group_chart
from ticket_app.visual.column_metadata import apply_column_metadata
from ticket_app.visual.progress import ProgressReporter

ALL = "All"

FIELD_TITLES = {
    "resolution_time": "Resolution time",
    "first_action_time": "First action time",
    "ts_resolution_time": "TS resolution time",
}


def _options(df: pd.DataFrame, column: str) -> list[str]:
    if df.empty or column not in df.columns:
        return []
    return sorted({value for values in df[column] for value in values or ()})


def _format_minutes(value: float | None) -> str:
    if value is None:
        return "-"
    hours, minutes = divmod(int(round(value)), 60)
    return f"{hours}h {minutes:02d}m"


@register_page("Resolution Time")
def resolution_time_page():
    st.title("Resolution Time")
    st.caption("How long support cards take from first action to the 'done issue' comment.")
    service: CardService | None = st.session_state.get(SERVICE_KEY)
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return

    today = date.today()
    picked = st.date_input(
        "Date range",
        value=(today - timedelta(days=DEFAULT_DATE_RANGE_DAYS), today),
    )
    if not isinstance(picked, (list, tuple)) or len(picked) != 2:
        st.info("Pick a start and end date.")
        return
    start, end = picked
    if st.button("Fetch Cards", type="primary"):
        reporter = ProgressReporter(f"Fetching cards active {start:%Y-%m-%d} - {end:%Y-%m-%d}")
        try:
            _, frame = service.fetch_and_enrich_range(start, end, progress=reporter.callback)
        except RuntimeError as exc:
            reporter.error(f"Failed to fetch cards: {exc}")
            return
        st.session_state["resolution_df"] = frame
        reporter.complete(f"Computed timings for {len(frame)} card(s).")

    frame = st.session_state.get("resolution_df", pd.DataFrame())
    if frame.empty:
        st.info("No cards loaded yet.")
        return

    members = service.reference.members
    member_names = {m.id: m.full_name for m in service.reference.ts_members}
    cols = st.columns(4)
    app_label = cols[0].selectbox("App", [ALL, *_options(frame, "apps")])
    member_id = cols[1].selectbox(
        "Member", [ALL, *member_names], format_func=lambda v: member_names.get(v, v)
    )
    team = cols[2].selectbox("Team", [ALL, *_options(frame, "teams")])
    group = cols[3].selectbox("TS group", [ALL, *(g.value for g in TSGroup)])

    ctx = build_resolution_context(
        frame,
        members,
        app_label=None if app_label == ALL else app_label,
        member_id=None if member_id == ALL else member_id,
        team=None if team == ALL else team,
        group=None if group == ALL else group,
    )
    if ctx.frame.empty:
        st.info("No resolved cards match the current filters.")
        return

    metric_cols = st.columns(len(TIMING_FIELDS))
    for col, field in zip(metric_cols, TIMING_FIELDS, strict=True):
        col.metric(f"Avg {FIELD_TITLES[field].lower()}", _format_minutes(ctx.averages.get(field)))

    for field in TIMING_FIELDS:
        st.markdown(f"### {FIELD_TITLES[field]}")
        left, right = st.columns(2)
        buckets = time_group_chart(ctx.time_groups.get(field), FIELD_TITLES[field])
        if buckets is not None:
            left.altair_chart(buckets, use_container_width=True)
        trend = daily_average_chart(ctx.daily_averages.get(field), "Daily average")
        if trend is not None:
            right.altair_chart(trend, use_container_width=True)
        left, right = st.columns(2)
        by_member = horizontal_bar_chart(
            ctx.by_member.get(field), "name", "time", title="Hours per member", value_title="Hours"
        )
        if by_member is not None:
            left.altair_chart(by_member, use_container_width=True)
        by_app = horizontal_bar_chart(
            ctx.by_app.get(field), "name", "time", title="Hours per app", value_title="Hours", color="#1976d2"
        )
        if by_app is not None:
            right.altair_chart(by_app, use_container_width=True)

    st.markdown("---")
    st.subheader("Agent leaderboard")
    board = ctx.leaderboard.head(DEFAULT_TOP_N).copy()
    for col in board.columns:
        if col.startswith(("avg_", "p90_")):
            board[col] = pd.to_numeric(board[col], errors="coerce").round(1)
    st.dataframe(board, hide_index=True, column_config=apply_column_metadata(board.columns))
