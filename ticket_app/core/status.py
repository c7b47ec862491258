"""Status list lookups and counts.

The board tracks ticket status by list membership. These helpers map list ids
to the well-known status keys in config.py (STATUS_LISTS, STATUS_BOXES) and
count cards per status box.
"""

from __future__ import annotations

from collections.abc import Iterable

from .config import STATUS_BOXES, STATUS_LISTS
from .models import Card

_KEY_BY_LIST_ID: dict[str, str] = {list_id: key for key, list_id in STATUS_LISTS.items()}


def status_key_for(list_id: str | None) -> str | None:
    """Status key ("TS_DONE", ...) for a list id, or None for other lists.

    Examples
    --------
    >>> status_key_for("66d7d254bdad4fb0a354495a")
    'TS_DONE'
    >>> status_key_for("unknown") is None
    True
    """
    if not list_id:
        return None
    return _KEY_BY_LIST_ID.get(list_id)


def cards_per_list(cards: Iterable[Card] | None, list_id: str | None) -> int:
    if not list_id:
        return 0
    return sum(1 for card in cards or [] if card.list_id == list_id)


def status_counts(cards: Iterable[Card] | None) -> dict[str, int]:
    """Card count for every status box, keyed by status key in box order.

    Parameters
    ----------
    cards : iterable of Card
        Working set to count.

    Returns
    -------
    dict[str, int]
        Zero-filled counts for every box in STATUS_BOXES.
    """
    counts = {key: 0 for _, key, _ in STATUS_BOXES}
    for card in cards or []:
        key = status_key_for(card.list_id)
        if key in counts:
            counts[key] += 1
    return counts
