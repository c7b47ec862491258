"""Central column metadata and helpers for table rendering."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import streamlit as st

# Mapping of raw column keys to (label, help text, format key)
# format key: "int" -> integer, "float1" -> 1 decimal float, None -> default text column
COLUMN_METADATA: dict[str, tuple[str, str, str | None]] = {
    "name": ("Title", "Card title on the support board.", None),
    "list_name": ("List", "Status list the card currently sits in.", None),
    "members": ("Members", "Board members assigned to the card.", None),
    "apps": ("Apps", "App labels attached to the card.", None),
    "created": ("Created", "When the card was created (local time).", None),
    "completed": ("Completed", "When the card was last marked complete (local time).", None),
    "resolution_time": (
        "Resolution (min)",
        "Minutes from the first logged action to the 'done issue' comment.",
        "int",
    ),
    "first_action_time": (
        "First Action (min)",
        "Minutes from the first logged action until the card left New Issues.",
        "int",
    ),
    "ts_resolution_time": (
        "TS Resolution (min)",
        "Minutes from leaving New Issues to the 'done issue' comment.",
        "int",
    ),
    "agent": ("Agent", "Technical support agent.", None),
    "cards": ("Cards", "Cards counted for the agent.", "int"),
    "total_time": ("Total (min)", "Summed resolution minutes.", "int"),
    "avg_resolution_time": ("Avg Resolution (min)", "Mean resolution minutes.", "float1"),
    "avg_first_action_time": ("Avg First Action (min)", "Mean first action minutes.", "float1"),
    "avg_ts_resolution_time": ("Avg TS Resolution (min)", "Mean TS resolution minutes.", "float1"),
    "p90_resolution_time": (
        "P90 Resolution (min)",
        "90th percentile of resolution minutes.",
        "float1",
    ),
    "card_name": ("Card", "Card title on the support board.", None),
    "moved_at": ("Waiting Since", "When the card entered the confirmation list.", None),
    "days_overdue": ("Days Overdue", "Whole days past the confirmation SLA.", "int"),
}


def apply_column_metadata(
    columns: Iterable[str],
    existing: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return a column_config dictionary with human labels and hover help."""

    config: dict[str, Any] = dict(existing or {})
    for col in columns:
        if col in config:
            continue
        meta = COLUMN_METADATA.get(col)
        if not meta:
            continue
        label, help_text, fmt = meta
        if fmt == "int":
            config[col] = st.column_config.NumberColumn(label, help=help_text, format="%d")
        elif fmt == "float1":
            config[col] = st.column_config.NumberColumn(label, help=help_text, format="%.1f")
        else:
            config[col] = st.column_config.Column(label, help=help_text)
    return config
