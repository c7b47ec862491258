"""Resolution-time buckets and averages.

These work on the enriched card frame (see ``CardService.enrich``) where the
timing columns hold whole minutes and NaN for cards without a timing.
"""

from __future__ import annotations

import pandas as pd

from ticket_app.core.config import TIME_GROUPS


def time_group_label(minutes: float | None) -> str | None:
    """Bucket label for a duration in minutes; None for missing or negative values."""
    if minutes is None or pd.isna(minutes) or minutes < 0:
        return None
    for label, lower, upper in TIME_GROUPS:
        if lower <= minutes < upper:
            return label
    return None


def group_times(df: pd.DataFrame, field: str) -> pd.DataFrame:
    """Card counts per time bucket, every bucket present in display order.

    Parameters
    ----------
    df : pd.DataFrame
        Enriched card frame.
    field : str
        One of the timing columns (resolution_time, first_action_time,
        ts_resolution_time).

    Returns
    -------
    pd.DataFrame
        Columns ``name`` and ``count``.
    """
    labels = [label for label, _, _ in TIME_GROUPS]
    counts = dict.fromkeys(labels, 0)
    if not df.empty and field in df.columns:
        values = pd.to_numeric(df[field], errors="coerce").dropna()
        for label in values.apply(time_group_label).dropna():
            counts[label] += 1
    return pd.DataFrame({"name": labels, "count": [counts[label] for label in labels]})


def average_time(df: pd.DataFrame, field: str) -> float | None:
    """Mean of the positive values of `field`, or None when there are none."""
    if df.empty or field not in df.columns:
        return None
    values = pd.to_numeric(df[field], errors="coerce")
    values = values[values > 0]
    if values.empty:
        return None
    return float(values.mean())


def average_by_date(df: pd.DataFrame, field: str, date_col: str = "created") -> pd.DataFrame:
    """Rounded daily mean of positive `field` values keyed by the local creation date."""
    columns = ["date", "average"]
    if df.empty or field not in df.columns or date_col not in df.columns:
        return pd.DataFrame(columns=columns)
    work = pd.DataFrame(
        {
            "date": pd.to_datetime(df[date_col], errors="coerce"),
            "value": pd.to_numeric(df[field], errors="coerce"),
        }
    )
    work = work[(work["value"] > 0) & work["date"].notna()]
    if work.empty:
        return pd.DataFrame(columns=columns)
    work["date"] = work["date"].dt.strftime("%Y-%m-%d")
    out = work.groupby("date", sort=True)["value"].mean().round().astype(int)
    return out.reset_index().rename(columns={"value": "average"})
