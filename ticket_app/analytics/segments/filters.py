"""Cascading card filters driven by the dashboard selector state."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, fields, replace
from typing import Any

import pandas as pd

from ticket_app.analytics.metrics.resolution import completion_timestamp_of, created_timestamp_of
from ticket_app.analytics.metrics.shifts import shift_for_hour, shift_matches
from ticket_app.core.models import Card, MemberRemoveAction, TSGroup

from .attribution import AttributionIndex, app_labels_of, default_index

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Selectors:
    """Current selection on the cards detail page. Unset fields pass everything."""

    member_id: str | None = None
    list_id: str | None = None
    shift: str | None = None
    removal_actor: str | None = None
    app_label: str | None = None
    completed_hour: int | None = None
    created_hour: int | None = None
    ts1_completed_hour: int | None = None
    ts1_created_hour: int | None = None
    ts2_completed_hour: int | None = None
    ts2_created_hour: int | None = None

    def cleared(self, *names: str) -> Selectors:
        """Copy with the named fields unset (all fields when none are named)."""
        targets = names or tuple(f.name for f in fields(self))
        return replace(self, **{name: None for name in targets})

    def with_values(self, **changes: Any) -> Selectors:
        return replace(self, **changes)

    @property
    def is_empty(self) -> bool:
        return all(_is_unset(getattr(self, f.name)) for f in fields(self))


def _is_unset(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class CardFacts:
    """Per-run memo of derived per-card values shared by the stages."""

    def __init__(self, index: AttributionIndex, target_tz=None):
        self.index = index
        self._tz = target_tz
        self._created: dict[int, pd.Timestamp | None] = {}
        self._completed: dict[int, pd.Timestamp | None] = {}
        self._groups: dict[int, set[TSGroup]] = {}

    def created(self, card: Card) -> pd.Timestamp | None:
        key = id(card)
        if key not in self._created:
            self._created[key] = created_timestamp_of(card, self._tz)
        return self._created[key]

    def completed(self, card: Card) -> pd.Timestamp | None:
        key = id(card)
        if key not in self._completed:
            self._completed[key] = completion_timestamp_of(card, self._tz)
        return self._completed[key]

    def ts_groups(self, card: Card) -> set[TSGroup]:
        key = id(card)
        if key not in self._groups:
            self._groups[key] = self.index.ts_groups_of(card)
        return self._groups[key]

    def created_hour(self, card: Card) -> int | None:
        ts = self.created(card)
        return None if ts is None else int(ts.hour)

    def completed_hour(self, card: Card) -> int | None:
        ts = self.completed(card)
        return None if ts is None else int(ts.hour)


Predicate = Callable[[Card, Any, CardFacts], bool]


@dataclass(slots=True, frozen=True)
class FilterStage:
    name: str
    selector: str  # Selectors field feeding the stage
    predicate: Predicate


def _has_member(card: Card, member_id, facts: CardFacts) -> bool:
    return member_id in card.member_ids


def _in_list(card: Card, list_id, facts: CardFacts) -> bool:
    return card.list_id == list_id


def _created_in_shift(card: Card, shift, facts: CardFacts) -> bool:
    return shift_matches(shift_for_hour(facts.created_hour(card)), shift)


def _removal_by(card: Card, actor_name, facts: CardFacts) -> bool:
    # matches whoever performed the removal, not the member removed
    return any(
        isinstance(action, MemberRemoveAction) and action.actor_name == actor_name
        for action in card.actions
    )


def _has_app_label(card: Card, label, facts: CardFacts) -> bool:
    return label in app_labels_of(card)


def _completed_at_hour(card: Card, hour, facts: CardFacts) -> bool:
    return facts.completed_hour(card) == int(hour)


def _created_at_hour(card: Card, hour, facts: CardFacts) -> bool:
    return facts.created_hour(card) == int(hour)


def _in_group(group: TSGroup, hour_test: Predicate) -> Predicate:
    def predicate(card: Card, hour, facts: CardFacts) -> bool:
        return group in facts.ts_groups(card) and hour_test(card, hour, facts)

    return predicate


STAGES: tuple[FilterStage, ...] = (
    FilterStage("member", "member_id", _has_member),
    FilterStage("list", "list_id", _in_list),
    FilterStage("shift", "shift", _created_in_shift),
    FilterStage("self_removal", "removal_actor", _removal_by),
    FilterStage("app", "app_label", _has_app_label),
    FilterStage("completed_hour", "completed_hour", _completed_at_hour),
    FilterStage("created_hour", "created_hour", _created_at_hour),
    FilterStage("ts1_completed_hour", "ts1_completed_hour", _in_group(TSGroup.TS1, _completed_at_hour)),
    FilterStage("ts1_created_hour", "ts1_created_hour", _in_group(TSGroup.TS1, _created_at_hour)),
    FilterStage("ts2_completed_hour", "ts2_completed_hour", _in_group(TSGroup.TS2, _completed_at_hour)),
    FilterStage("ts2_created_hour", "ts2_created_hour", _in_group(TSGroup.TS2, _created_at_hour)),
)


def stages_through(name: str) -> tuple[FilterStage, ...]:
    """Leading stages up to and including the stage called `name`."""
    for idx, stage in enumerate(STAGES):
        if stage.name == name:
            return STAGES[: idx + 1]
    raise ValueError(f"Unknown filter stage: {name}")


def apply_filters(
    cards: Iterable[Card] | None,
    selectors: Selectors | None = None,
    *,
    index: AttributionIndex | None = None,
    target_tz=None,
    stages: tuple[FilterStage, ...] = STAGES,
    facts: CardFacts | None = None,
) -> list[Card]:
    """Narrow `cards` through each stage whose selector is set, in stage order.

    Always pass the full card set; every selector combination is evaluated
    from scratch.
    """
    working = list(cards or [])
    if selectors is None:
        return working
    facts = facts or CardFacts(index or default_index(), target_tz)
    for stage in stages:
        value = getattr(selectors, stage.selector)
        if _is_unset(value):
            continue
        working = [card for card in working if stage.predicate(card, value, facts)]
        logger.debug("Filter stage %s (%r) kept %d card(s)", stage.name, value, len(working))
    return working
