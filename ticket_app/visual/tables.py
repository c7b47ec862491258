"""Reusable table helpers for Streamlit rendering."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from ticket_app.core.config import DISPLAY_ORDER_CARD_LIST, SETTINGS

from .column_metadata import apply_column_metadata


def add_card_link(df: pd.DataFrame, url_col: str = "url", label: str = "Card"):
    if df.empty or url_col not in df.columns:
        return df, {}
    out = df.copy()
    out[label] = out[url_col].fillna("").astype(str)
    cfg = {
        label: st.column_config.LinkColumn(
            label,
            display_text=r"/c/([^/]+)",
            help="Open on the board",
            width="small",
        )
    }
    return out, cfg


def _display_value(value):
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return value


def prepare_card_table(df: pd.DataFrame) -> tuple[pd.DataFrame, list[str], dict[str, object]]:
    if df.empty:
        return df, [], {}
    table, cfg = add_card_link(df)
    if "apps" in table.columns:
        table["apps"] = table["apps"].apply(_display_value)
    display_cols = [col for col in DISPLAY_ORDER_CARD_LIST if col in table.columns]
    return table, display_cols, apply_column_metadata(display_cols, cfg)


def render_card_table(df: pd.DataFrame, limit: int | None = None):
    table, cols, cfg = prepare_card_table(df)
    if not cols:
        st.caption("No cards to show.")
        return
    st.dataframe(
        table[cols].head(limit or SETTINGS.max_table_rows),
        hide_index=True,
        column_config=cfg,
    )
