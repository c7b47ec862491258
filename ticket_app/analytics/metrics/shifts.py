"""Operational shift classification for local timestamps."""

from __future__ import annotations

from ticket_app.core.config import FINE_SHIFT_LABELS, SHIFT_TABLE, SPLIT_SHIFTS

from .timeline import parse_timestamp


def hour_of(timestamp, target_tz=None) -> int | None:
    """Local hour (0-23) of `timestamp`, or None when it cannot be parsed."""
    ts = parse_timestamp(timestamp, target_tz)
    if ts is None:
        return None
    return int(ts.hour)


def shift_for_hour(hour: int | None) -> str | None:
    if hour is None:
        return None
    for start, end, label in SHIFT_TABLE:
        if start <= hour < end:
            return label
    return None


def shift_of(timestamp, target_tz=None) -> str | None:
    """Fine shift label (Ca1..Ca6, with Ca5 split in two) for `timestamp`.

    Examples
    --------
    >>> shift_of("2025-06-02T16:30:00+07:00")
    'Ca5.1'
    >>> shift_of("not a date") is None
    True
    """
    return shift_for_hour(hour_of(timestamp, target_tz))


def coarse_shift(label: str | None) -> str | None:
    """Fold split shifts into their parent label ("Ca5.2" -> "Ca5")."""
    if label is None:
        return None
    return SPLIT_SHIFTS.get(label, label)


def coarse_shift_of(timestamp, target_tz=None) -> str | None:
    return coarse_shift(shift_of(timestamp, target_tz))


def shift_hours(label: str | None) -> list[int]:
    """Local hours covered by a fine or coarse shift label."""
    if not label:
        return []
    hours: list[int] = []
    for start, end, fine in SHIFT_TABLE:
        if fine == label or coarse_shift(fine) == label:
            hours.extend(range(start, end))
    return hours


def shift_matches(label: str | None, selected: str | None) -> bool:
    """True when fine `label` falls inside `selected`.

    A coarse selection ("Ca5") accepts both of its halves; a fine selection
    ("Ca5.1") accepts only itself.
    """
    if label is None or not selected:
        return False
    if label == selected:
        return True
    return selected not in FINE_SHIFT_LABELS and coarse_shift(label) == selected
