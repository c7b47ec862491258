"""Per-member roll-ups: card counts, self-removals, time spent and the agent leaderboard."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
import pandas as pd

from ticket_app.core.models import Card, Member, MemberRemoveAction, MemberRole


def cards_per_member(cards: Iterable[Card] | None, members: Iterable[Member]) -> pd.DataFrame:
    """Cards carrying each TS / TS-Lead member; members with no cards are dropped."""
    cards = list(cards or [])
    rows = []
    for member in members:
        if not member.is_ts:
            continue
        count = sum(1 for card in cards if member.id in card.member_ids)
        if count > 0:
            rows.append({"member_id": member.id, "member": member.full_name, "cards": count})
    return pd.DataFrame(rows, columns=["member_id", "member", "cards"])


def self_removal_counts(cards: Iterable[Card] | None, members: Iterable[Member]) -> pd.DataFrame:
    """Removal actions performed by each TS member, keyed by the remover's full name."""
    names = [m.full_name for m in members if m.is_ts]
    counts = dict.fromkeys(names, 0)
    for card in cards or []:
        for action in card.actions:
            if isinstance(action, MemberRemoveAction) and action.actor_name in counts:
                counts[action.actor_name] += 1
    out = pd.DataFrame({"member": list(counts.keys()), "removals": list(counts.values())})
    out = out[out["removals"] > 0]
    return out.sort_values("removals", ascending=False, kind="stable").reset_index(drop=True)


def time_and_count_by(
    df: pd.DataFrame,
    field: str = "resolution_time",
    by: str = "member",
    members: Iterable[Member] | None = None,
) -> pd.DataFrame:
    """Hours of `field` and distinct cards per TS member or per app label.

    In member mode each card's minutes are split evenly across its TS
    members; in app mode every app label on the card gets the full value.
    Hours are rounded to one decimal.
    """
    empty = pd.DataFrame(columns=["name", "time", "count"])
    if df.empty or field not in df.columns:
        return empty
    work = df.copy()
    work["_value"] = pd.to_numeric(work[field], errors="coerce")
    work = work[work["_value"].notna()]
    if by == "member":
        ts_names = {m.id: m.full_name for m in members or () if m.is_ts}
        work["_keys"] = work["member_ids"].apply(
            lambda ids: [ts_names[i] for i in dict.fromkeys(ids or ()) if i in ts_names]
        )
        work["_share"] = work["_value"] / work["_keys"].apply(len).clip(lower=1)
    elif by == "app":
        work["_keys"] = work["apps"].apply(lambda labels: list(dict.fromkeys(labels or ())))
        work["_share"] = work["_value"]
    else:
        raise ValueError(f"Unsupported grouping: {by}")
    exploded = work.explode("_keys").dropna(subset=["_keys"])
    if exploded.empty:
        return empty
    agg = exploded.groupby("_keys").agg(time=("_share", "sum"), count=("id", "nunique"))
    agg["time"] = (agg["time"] / 60).round(1)
    agg = agg.reset_index().rename(columns={"_keys": "name"})
    return agg.sort_values("time", ascending=False, kind="stable").reset_index(drop=True)


def _p90(values: pd.Series) -> float:
    return float(np.percentile(values.to_numpy(dtype=float), 90))


def agent_leaderboard(df: pd.DataFrame, members: Iterable[Member]) -> pd.DataFrame:
    """Per TS agent: cards, total and average timings, p90 resolution.

    Only cards with a positive resolution time count. Sorted fastest first.
    """
    columns = [
        "agent",
        "cards",
        "total_time",
        "avg_resolution_time",
        "avg_first_action_time",
        "avg_ts_resolution_time",
        "p90_resolution_time",
    ]
    if df.empty or "resolution_time" not in df.columns:
        return pd.DataFrame(columns=columns)
    agents = {m.id: m.full_name for m in members if m.role == MemberRole.TS}
    work = df[["member_ids", "resolution_time", "first_action_time", "ts_resolution_time"]].copy()
    work["resolution_time"] = pd.to_numeric(work["resolution_time"], errors="coerce")
    work = work[work["resolution_time"].fillna(0) > 0]
    for col in ("first_action_time", "ts_resolution_time"):
        work[col] = pd.to_numeric(work[col], errors="coerce").fillna(0)
    work = work.explode("member_ids")
    work = work[work["member_ids"].isin(list(agents))]
    if work.empty:
        return pd.DataFrame(columns=columns)
    work["agent"] = work["member_ids"].map(agents)
    board = (
        work.groupby("agent")
        .agg(
            cards=("resolution_time", "count"),
            total_time=("resolution_time", "sum"),
            avg_resolution_time=("resolution_time", "mean"),
            avg_first_action_time=("first_action_time", "mean"),
            avg_ts_resolution_time=("ts_resolution_time", "mean"),
            p90_resolution_time=("resolution_time", _p90),
        )
        .sort_values("avg_resolution_time", kind="stable")
    )
    return board.reset_index()[columns]
