"""Timestamp parsing and chronological ordering of a card's audit log."""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd
import pytz

from ticket_app.core.config import TIMEZONE
from ticket_app.core.models import Action

LOCAL_TZ = pytz.timezone(TIMEZONE)


def parse_timestamp(value, target_tz=None) -> pd.Timestamp | None:
    """Parse a timestamp-like value into `target_tz` (dashboard timezone by default).

    Naive values are read as wall-clock time in `target_tz`. Returns None
    when the input is missing or cannot be parsed.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        ts = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError):
        return None
    if not isinstance(ts, pd.Timestamp) or pd.isna(ts):
        return None
    try:
        if ts.tzinfo is None:
            return ts.tz_localize(target_tz or LOCAL_TZ, ambiguous=False, nonexistent="shift_forward")
        return ts.tz_convert(target_tz or LOCAL_TZ)
    except (TypeError, ValueError):
        return None


def action_time(action: Action, target_tz=None) -> pd.Timestamp | None:
    return parse_timestamp(getattr(action, "date", None), target_tz)


def normalize(actions: Iterable[Action] | None) -> list[Action]:
    """Return `actions` in ascending date order.

    Dated actions are stably sorted among the positions dated actions occupied;
    actions with a missing or unparseable date stay in their input slot. Nothing
    is dropped and the input is left untouched, so the result is idempotent.
    """
    if actions is None or not isinstance(actions, Iterable):
        return []
    ordered = list(actions)
    slots: list[int] = []
    dated: list[tuple[pd.Timestamp, Action]] = []
    for idx, action in enumerate(ordered):
        ts = action_time(action)
        if ts is None:
            continue
        slots.append(idx)
        dated.append((ts, action))
    dated.sort(key=lambda pair: pair[0])
    for idx, (_, action) in zip(slots, dated, strict=True):
        ordered[idx] = action
    return ordered
