"""CardService: orchestrates fetching, mapping, and enrichment pipeline."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime, time, timedelta

import pandas as pd
import pytz

from ticket_app.analytics.metrics.resolution import (
    add_timing_metrics,
    completion_timestamp_of,
    created_timestamp_of,
)
from ticket_app.analytics.metrics.timeline import action_time
from ticket_app.analytics.segments.attribution import AttributionIndex, app_labels_of

from .board_client import BoardAPI
from .config import TIMEZONE
from .mappers import cards_to_dataframe, map_card
from .models import Card
from .reference import ReferenceData, load_reference

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int | None, int | None], None]


class CardService:
    def __init__(self, api: BoardAPI, reference: ReferenceData | None = None):
        self.api = api
        self.reference = reference or load_reference()
        self.index = AttributionIndex(self.reference.apps)
        self._tz = pytz.timezone(TIMEZONE)

    def _localize(self, value: datetime | date) -> datetime:
        if not isinstance(value, datetime):
            value = datetime.combine(value, time.min)
        return value.astimezone(self._tz) if value.tzinfo else self._tz.localize(value)

    # ------------------ Fetch Methods ------------------
    def fetch_cards_between(
        self,
        since: datetime | date,
        before: datetime | date,
        *,
        progress: ProgressCallback | None = None,
    ) -> list[Card]:
        """Cards with at least one audit-log action in ``[since, before)``.

        Each call clears the client cache so a fetch always reflects the board's
        current state. The returned cards carry their complete action tuples.
        """
        since_tz = self._localize(since)
        before_tz = self._localize(before)
        if hasattr(self.api, "clear_cache"):
            self.api.clear_cache()
        if progress:
            progress("Fetching cards and activity from the board", None, None)
        try:
            raw = self.api.search_cards(since_tz, before_tz)
        except RuntimeError:
            logger.warning("Card fetch failed for window %s - %s", since_tz, before_tz, exc_info=True)
            raise
        cards = [map_card(r) for r in raw if isinstance(r, dict) and r.get("id")]
        in_window = [c for c in cards if self._active_between(c, since_tz, before_tz)]
        logger.info(
            "Fetched %d card(s), %d with activity between %s and %s",
            len(cards),
            len(in_window),
            since_tz.isoformat(),
            before_tz.isoformat(),
        )
        if progress:
            progress(f"Loaded {len(in_window)} cards", len(in_window), len(in_window))
        return in_window

    def fetch_day(self, day: date, *, progress: ProgressCallback | None = None) -> list[Card]:
        start = datetime.combine(day, time.min)
        return self.fetch_cards_between(start, start + timedelta(days=1), progress=progress)

    def fetch_range(
        self,
        start: date,
        end: date,
        *,
        progress: ProgressCallback | None = None,
    ) -> list[Card]:
        """Cards active between two inclusive calendar dates."""
        since = datetime.combine(start, time.min)
        before = datetime.combine(end, time.min) + timedelta(days=1)
        return self.fetch_cards_between(since, before, progress=progress)

    # ------------------ Enrichment Pipeline ------------------
    def enrich(self, cards: Iterable[Card]) -> pd.DataFrame:
        """Flatten cards into a frame with names, attribution, event times and timings."""
        cards = list(cards)
        df = cards_to_dataframe(cards)
        if df.empty:
            return df
        ref = self.reference
        out = df.copy()
        out["list_name"] = out["list_id"].apply(ref.list_name)
        out["members"] = out["member_ids"].apply(lambda ids: ", ".join(ref.member_names(ids)))
        out["apps"] = [app_labels_of(c) for c in cards]
        out["teams"] = [sorted(self.index.teams_of(c)) for c in cards]
        out["ts_groups"] = [sorted(g.value for g in self.index.ts_groups_of(c)) for c in cards]
        out["created"] = self._timestamp_column([created_timestamp_of(c, self._tz) for c in cards], out.index)
        out["completed"] = self._timestamp_column(
            [completion_timestamp_of(c, self._tz) for c in cards], out.index
        )
        return add_timing_metrics(out)

    def fetch_and_enrich_range(
        self,
        start: date,
        end: date,
        *,
        progress: ProgressCallback | None = None,
    ) -> tuple[list[Card], pd.DataFrame]:
        cards = self.fetch_range(start, end, progress=progress)
        if progress:
            progress("Calculating resolution times", None, None)
        return cards, self.enrich(cards)

    def fetch_card_detail(self, card_id: str) -> Card | None:
        raw = self.api.fetch_card_raw(card_id)
        if not raw or not raw.get("id"):
            return None
        return map_card(raw)

    # ------------------ Internal Helpers ------------------
    def _active_between(self, card: Card, since: datetime, before: datetime) -> bool:
        for action in card.actions:
            ts = action_time(action, self._tz)
            if ts is not None and since <= ts < before:
                return True
        return False

    def _timestamp_column(self, values: list, index: pd.Index) -> pd.Series:
        series = pd.Series(values, index=index, dtype=object)
        return pd.to_datetime(series, utc=True, errors="coerce").dt.tz_convert(self._tz)
