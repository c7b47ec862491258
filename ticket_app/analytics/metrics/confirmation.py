"""Cards left waiting on customer confirmation longer than the SLA allows."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

import pandas as pd

from ticket_app.core.config import CONFIRMATION_SLA_DAYS, WAITING_CONFIRMATION_LIST_ID
from ticket_app.core.models import Card, ListMoveAction

from .timeline import LOCAL_TZ, action_time, normalize, parse_timestamp

logger = logging.getLogger(__name__)

OVERDUE_COLUMNS = ["card_id", "card_name", "moved_at", "days_overdue"]


def _moved_into(action, list_id: str) -> bool:
    return isinstance(action, ListMoveAction) and action.after is not None and action.after.id == list_id


def _moved_elsewhere(action, list_id: str) -> bool:
    return isinstance(action, ListMoveAction) and action.after is not None and action.after.id != list_id


def overdue_confirmation_cards(
    cards: Iterable[Card] | None,
    now=None,
    list_id: str = WAITING_CONFIRMATION_LIST_ID,
    sla_days: int = CONFIRMATION_SLA_DAYS,
) -> pd.DataFrame:
    """Cards whose latest move into `list_id` is more than `sla_days` old.

    A card that was later moved to any other list is not overdue.
    ``days_overdue`` is the whole number of elapsed days minus the SLA.
    """
    now_ts = parse_timestamp(now) if now is not None else pd.Timestamp.now(tz=LOCAL_TZ)
    rows = []
    for card in cards or []:
        timeline = normalize(card.actions)
        moved_at = None
        moved_idx = -1
        for idx, action in enumerate(timeline):
            if not _moved_into(action, list_id):
                continue
            ts = action_time(action)
            if ts is not None:
                moved_at, moved_idx = ts, idx
        if moved_at is None:
            continue
        if any(_moved_elsewhere(a, list_id) for a in timeline[moved_idx + 1 :]):
            continue
        elapsed_days = (now_ts - moved_at).total_seconds() / 86400
        if elapsed_days <= sla_days:
            continue
        rows.append(
            {
                "card_id": card.id,
                "card_name": card.name,
                "moved_at": moved_at,
                "days_overdue": math.floor(elapsed_days) - sla_days,
            }
        )
    out = pd.DataFrame(rows, columns=OVERDUE_COLUMNS)
    if not out.empty:
        out = out.sort_values("days_overdue", ascending=False, kind="stable").reset_index(drop=True)
    logger.debug("Found %d card(s) past the %d day confirmation SLA", len(out), sla_days)
    return out


def overdue_confirmation_summary(
    cards: Iterable[Card] | None,
    now=None,
    list_id: str = WAITING_CONFIRMATION_LIST_ID,
    sla_days: int = CONFIRMATION_SLA_DAYS,
) -> dict:
    overdue = overdue_confirmation_cards(cards, now=now, list_id=list_id, sla_days=sla_days)
    total = len(overdue)
    if total:
        message = f"{total} card(s) waiting on customer confirmation for more than {sla_days} days"
    else:
        message = "No cards are past the customer confirmation SLA"
    return {"total_overdue": total, "cards": overdue, "message": message}
