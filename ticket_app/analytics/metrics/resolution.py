"""Resolution-time metrics and event timestamps derived from a card's timeline."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence

import pandas as pd

from ticket_app.core.config import DEV_WAITING_LIST_NAME, DONE_ISSUE_MARKER, NEW_ISSUES_LIST_NAME
from ticket_app.core.models import (
    Action,
    Card,
    CommentAction,
    CreateAction,
    DevResolutionTiming,
    ListMoveAction,
    ResolutionTiming,
)

from .timeline import action_time, normalize, parse_timestamp


def _first(actions: Iterable[Action], predicate: Callable[[Action], bool]) -> Action | None:
    return next((a for a in actions if predicate(a)), None)


def _minutes_between(start: pd.Timestamp, end: pd.Timestamp) -> int:
    return math.floor((end - start).total_seconds() / 60)


def _leaves_new_issues(action: Action) -> bool:
    if not isinstance(action, ListMoveAction) or action.before is None:
        return False
    return str(action.before.name or "").strip().lower() == NEW_ISSUES_LIST_NAME


def _is_done_comment(action: Action) -> bool:
    return isinstance(action, CommentAction) and DONE_ISSUE_MARKER in str(action.text or "").lower()


def _enters_dev_waiting(action: Action) -> bool:
    return (
        isinstance(action, ListMoveAction)
        and action.after is not None
        and action.after.name == DEV_WAITING_LIST_NAME
    )


def _marks_complete(action: Action) -> bool:
    return (
        isinstance(action, ListMoveAction)
        and action.due_complete is not None
        and action.due_complete.is_complete is True
    )


def compute_timing(actions: Sequence[Action] | None) -> ResolutionTiming | None:
    """Resolution-time breakdown for one card, in whole minutes.

    The clock starts at the first action of the normalized timeline (usually,
    but not necessarily, the Create). First action time runs until the card
    first leaves "New Issues"; resolution time runs until the first comment
    containing "done issue". TS resolution time is the remainder, so
    ``ts_resolution + first_action == resolution`` always holds.

    Returns None when either landmark is missing or any landmark date is
    unparseable.
    """
    if not actions:
        return None
    timeline = normalize(actions)
    if not timeline:
        return None
    exit_new = _first(timeline, _leaves_new_issues)
    done = _first(timeline, _is_done_comment)
    if exit_new is None or done is None:
        return None
    first_ts = action_time(timeline[0])
    exit_ts = action_time(exit_new)
    done_ts = action_time(done)
    if first_ts is None or exit_ts is None or done_ts is None:
        return None
    resolution = _minutes_between(first_ts, done_ts)
    first_action = _minutes_between(first_ts, exit_ts)
    return ResolutionTiming(
        resolution_time_minutes=resolution,
        ts_resolution_time_minutes=resolution - first_action,
        first_action_time_minutes=first_action,
    )


def compute_dev_timing(actions: Sequence[Action] | None) -> DevResolutionTiming | None:
    """Developer-fix breakdown: Create -> handed to dev -> last marked complete."""
    if not actions:
        return None
    timeline = normalize(actions)
    created = _first(timeline, lambda a: isinstance(a, CreateAction))
    handed_over = _first(timeline, _enters_dev_waiting)
    completed = _first(reversed(timeline), _marks_complete)
    if created is None or handed_over is None or completed is None:
        return None
    created_ts = action_time(created)
    handed_ts = action_time(handed_over)
    completed_ts = action_time(completed)
    if created_ts is None or handed_ts is None or completed_ts is None:
        return None
    resolution = _minutes_between(created_ts, completed_ts)
    first_action = _minutes_between(created_ts, handed_ts)
    return DevResolutionTiming(
        resolution_time_minutes=resolution,
        dev_resolution_time_minutes=resolution - first_action,
        first_action_time_minutes=first_action,
    )


def completion_timestamp_of(card: Card, target_tz=None) -> pd.Timestamp | None:
    """When the card was last marked complete, or None for incomplete cards.

    Prefers the latest update that flipped due-complete from false to true,
    then the latest update that reports it true, then the card's own
    ``completed_at`` and ``due_at`` fields. Updates without a parseable date
    are skipped.
    """
    if not card.is_due_complete:
        return None
    fallback: pd.Timestamp | None = None
    for action in reversed(normalize(card.actions)):
        if not _marks_complete(action):
            continue
        ts = action_time(action, target_tz)
        if ts is None:
            continue
        if action.due_complete.was_complete is False:
            return ts
        if fallback is None:
            fallback = ts
    if fallback is not None:
        return fallback
    for value in (card.completed_at, card.due_at):
        ts = parse_timestamp(value, target_tz)
        if ts is not None:
            return ts
    return None


def created_timestamp_of(card: Card, target_tz=None) -> pd.Timestamp | None:
    """Timestamp of the card's earliest dated Create action."""
    for action in normalize(card.actions):
        if not isinstance(action, CreateAction):
            continue
        ts = action_time(action, target_tz)
        if ts is not None:
            return ts
    return None


def add_timing_metrics(df: pd.DataFrame) -> pd.DataFrame:
    """Add resolution_time / first_action_time / ts_resolution_time (minutes).

    Reads the ``actions`` column; cards without both landmarks get NaN.
    """
    if df.empty or "actions" not in df.columns:
        return df
    out = df.copy()
    timings = out["actions"].apply(compute_timing)

    def _pick(attr: str) -> pd.Series:
        values = timings.apply(lambda t: getattr(t, attr) if t is not None else None)
        return pd.to_numeric(values, errors="coerce")

    out["resolution_time"] = _pick("resolution_time_minutes")
    out["first_action_time"] = _pick("first_action_time_minutes")
    out["ts_resolution_time"] = _pick("ts_resolution_time_minutes")
    return out
