"""Cards detail page.

Fetches one day of board activity, then narrows the cards through the
selector cascade (member, list, shift, self-removal, app, heatmap hours) and
renders status boxes, shift / member / app charts and the hourly heatmaps.
"""

from __future__ import annotations

from datetime import date

import streamlit as st

from ticket_app.analytics.segments.attribution import app_labels_of
from ticket_app.analytics.segments.filters import Selectors
from ticket_app.app import SERVICE_KEY, register_page
from ticket_app.core.config import COARSE_SHIFT_LABELS, SPLIT_SHIFTS, STATUS_BOXES, STATUS_LISTS
from ticket_app.core.models import EventKind, TSGroup
from ticket_app.core.service import CardService
from ticket_app.features.cards_detail.context import build_cards_detail_context
from ticket_app.visual.charts import horizontal_bar_chart, hour_heatmap, member_pie_chart, shift_bar_chart
from ticket_app.visual.column_metadata import apply_column_metadata
from ticket_app.visual.progress import ProgressReporter
from ticket_app.visual.tables import render_card_table

ALL = "All"
HOUR_OPTIONS = [ALL, *range(24)]

HEATMAP_SELECTORS = {
    (EventKind.COMPLETED, None): "completed_hour",
    (EventKind.CREATED, None): "created_hour",
    (EventKind.COMPLETED, TSGroup.TS1): "ts1_completed_hour",
    (EventKind.CREATED, TSGroup.TS1): "ts1_created_hour",
    (EventKind.COMPLETED, TSGroup.TS2): "ts2_completed_hour",
    (EventKind.CREATED, TSGroup.TS2): "ts2_created_hour",
}


def _choice(value):
    return None if value == ALL else value


def _read_selectors(service: CardService, cards) -> Selectors:
    reference = service.reference
    ts_members = reference.ts_members
    app_labels = sorted({label for card in cards for label in app_labels_of(card)})

    cols = st.columns(5)
    member_names = {m.id: m.full_name for m in ts_members}
    member = cols[0].selectbox(
        "Member", [ALL, *member_names], format_func=lambda v: member_names.get(v, v)
    )
    status_titles = {STATUS_LISTS[key]: title for title, key, _ in STATUS_BOXES}
    list_id = cols[1].selectbox(
        "Status", [ALL, *status_titles], format_func=lambda v: status_titles.get(v, v)
    )
    shift = cols[2].selectbox("Shift", [ALL, *COARSE_SHIFT_LABELS, *SPLIT_SHIFTS])
    removal = cols[3].selectbox("Self-removal by", [ALL, *(m.full_name for m in ts_members)])
    app_label = cols[4].selectbox("App", [ALL, *app_labels])

    hour_cols = st.columns(len(HEATMAP_SELECTORS))
    hours = {}
    for col, ((kind, team), field) in zip(hour_cols, HEATMAP_SELECTORS.items(), strict=True):
        label = f"{team.value + ' ' if team else ''}{kind.value} hour"
        hours[field] = _choice(col.selectbox(label, HOUR_OPTIONS, key=f"hour_{field}"))

    return Selectors(
        member_id=_choice(member),
        list_id=_choice(list_id),
        shift=_choice(shift),
        removal_actor=_choice(removal),
        app_label=_choice(app_label),
        **hours,
    )


@register_page("Cards Detail")
def cards_detail_page():
    st.title("Cards Detail")
    st.caption("Daily view of support cards by member, status, shift and app.")
    service: CardService | None = st.session_state.get(SERVICE_KEY)
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return

    day = st.date_input("Day", value=st.session_state.get("cards_day") or date.today())
    if st.button("Fetch Cards", type="primary"):
        reporter = ProgressReporter(f"Fetching cards active on {day:%Y-%m-%d}")
        try:
            cards = service.fetch_day(day, progress=reporter.callback)
        except RuntimeError as exc:
            reporter.error(f"Failed to fetch cards: {exc}")
            return
        st.session_state["cards_day"] = day
        st.session_state["cards"] = cards
        reporter.complete(f"Loaded {len(cards)} card(s).")

    cards = st.session_state.get("cards")
    if not cards:
        st.info("No cards loaded yet.")
        return

    selectors = _read_selectors(service, cards)
    ctx = build_cards_detail_context(cards, selectors, service.reference)

    box_cols = st.columns(len(STATUS_BOXES))
    for col, (title, key, _) in zip(box_cols, STATUS_BOXES, strict=True):
        col.metric(title, ctx.status_counts.get(key, 0))

    left, right = st.columns(2)
    pie = member_pie_chart(ctx.member_counts)
    if pie is not None:
        left.altair_chart(pie, use_container_width=True)
    bars = shift_bar_chart(ctx.shift_counts)
    if bars is not None:
        right.altair_chart(bars, use_container_width=True)

    st.markdown("### Hourly heatmaps")
    totals = " · ".join(f"{label}: {ctx.shift_totals.get(label, 0)}" for label in COARSE_SHIFT_LABELS)
    st.caption(f"Created per shift: {totals}")
    for (kind, team), cells in ctx.heatmaps.items():
        title = f"{kind.value}{' - ' + team.value if team else ''}"
        st.altair_chart(hour_heatmap(cells, kind, title), use_container_width=True)

    left, right = st.columns(2)
    app_charts = ((left, ctx.ts1_apps, "TS1 issues by app"), (right, ctx.ts2_apps, "TS2 issues by app"))
    for col, frame, title in app_charts:
        chart = horizontal_bar_chart(frame, "app", "count", title=title, value_title="Cards")
        if chart is not None:
            col.altair_chart(chart, use_container_width=True)

    removal_chart = horizontal_bar_chart(
        ctx.removal_counts, "member", "removals", title="Self-removals", color="#9c27b0"
    )
    if removal_chart is not None:
        st.altair_chart(removal_chart, use_container_width=True)

    st.markdown("---")
    st.subheader(f"Cards ({len(ctx.cards)})")
    frame = service.enrich(ctx.cards)
    render_card_table(frame)

    if not ctx.overdue_confirmation.empty:
        st.subheader("Waiting on customer confirmation past SLA")
        overdue = ctx.overdue_confirmation.drop(columns=["card_id"])
        cfg = apply_column_metadata(overdue.columns)
        st.dataframe(overdue, hide_index=True, column_config=cfg)
    else:
        st.caption("No cards are past the customer confirmation SLA.")
