"""Pure helpers to build the Cards Detail context for testing (no Streamlit)."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

import pandas as pd

from ticket_app.analytics.aggregations.apps import issues_by_app
from ticket_app.analytics.aggregations.heatmap import build_heatmap, cards_per_shift, shift_totals
from ticket_app.analytics.aggregations.members import cards_per_member, self_removal_counts
from ticket_app.analytics.metrics.confirmation import overdue_confirmation_cards
from ticket_app.analytics.metrics.resolution import compute_timing
from ticket_app.analytics.segments.attribution import AttributionIndex
from ticket_app.analytics.segments.filters import CardFacts, Selectors, apply_filters, stages_through
from ticket_app.core.models import Card, EventKind, HeatmapCell, ResolutionTiming, TSGroup
from ticket_app.core.reference import ReferenceData, load_reference
from ticket_app.core.status import status_counts

HeatmapKey = tuple[EventKind, TSGroup | None]

HEATMAP_KEYS: tuple[HeatmapKey, ...] = (
    (EventKind.COMPLETED, None),
    (EventKind.CREATED, None),
    (EventKind.COMPLETED, TSGroup.TS1),
    (EventKind.CREATED, TSGroup.TS1),
    (EventKind.COMPLETED, TSGroup.TS2),
    (EventKind.CREATED, TSGroup.TS2),
)


@dataclass(slots=True)
class CardsDetailContext:
    """Context data for the Cards Detail page."""

    selectors: Selectors
    cards: list[Card]
    # Output of the member/list/shift/removal/app stages; charts and heatmaps read this
    app_filtered: list[Card] = field(default_factory=list)
    status_counts: dict[str, int] = field(default_factory=dict)
    member_counts: pd.DataFrame = field(default_factory=pd.DataFrame)
    shift_counts: pd.DataFrame = field(default_factory=pd.DataFrame)
    shift_totals: dict[str, int] = field(default_factory=dict)
    removal_counts: pd.DataFrame = field(default_factory=pd.DataFrame)
    ts1_apps: pd.DataFrame = field(default_factory=pd.DataFrame)
    ts2_apps: pd.DataFrame = field(default_factory=pd.DataFrame)
    heatmaps: dict[HeatmapKey, list[HeatmapCell]] = field(default_factory=dict)
    timings: dict[str, ResolutionTiming] = field(default_factory=dict)
    overdue_confirmation: pd.DataFrame = field(default_factory=pd.DataFrame)


def build_cards_detail_context(
    cards: Iterable[Card] | None,
    selectors: Selectors | None = None,
    reference: ReferenceData | None = None,
    *,
    target_tz=None,
    now=None,
) -> CardsDetailContext:
    """Build context for the Cards Detail page.

    Parameters
    ----------
    cards : iterable of Card
        The full card set for the fetched window. Never a previously filtered set.
    selectors : Selectors, optional
        Current selection; None means nothing selected.
    reference : ReferenceData, optional
        Members, lists and apps; defaults to the loaded reference.yaml.
    target_tz : timezone, optional
        Timezone for hour bucketing; defaults to the dashboard timezone.
    now : timestamp-like, optional
        Reference time for the confirmation SLA check.

    Returns
    -------
    CardsDetailContext
        Assembled context data for the page.
    """
    selectors = selectors or Selectors()
    reference = reference or load_reference()
    all_cards = list(cards or [])
    if not all_cards:
        return CardsDetailContext(selectors=selectors, cards=[])

    index = AttributionIndex(reference.apps)
    facts = CardFacts(index, target_tz)
    filtered = apply_filters(all_cards, selectors, target_tz=target_tz, facts=facts)
    app_filtered = apply_filters(
        all_cards, selectors, target_tz=target_tz, stages=stages_through("app"), facts=facts
    )

    names = reference.member_name_map()
    heatmaps = {
        (kind, team): build_heatmap(
            app_filtered, kind, team, index=index, member_names=names, target_tz=target_tz
        )
        for kind, team in HEATMAP_KEYS
    }

    timings: dict[str, ResolutionTiming] = {}
    for card in filtered:
        if not card.is_due_complete:
            continue
        timing = compute_timing(card.actions)
        if timing is not None:
            timings[card.id] = timing

    return CardsDetailContext(
        selectors=selectors,
        cards=filtered,
        app_filtered=app_filtered,
        status_counts=status_counts(app_filtered),
        member_counts=cards_per_member(app_filtered, reference.members),
        shift_counts=cards_per_shift(app_filtered, target_tz),
        shift_totals=shift_totals(heatmaps[(EventKind.CREATED, None)]),
        removal_counts=self_removal_counts(all_cards, reference.members),
        ts1_apps=issues_by_app(app_filtered, TSGroup.TS1, index),
        ts2_apps=issues_by_app(app_filtered, TSGroup.TS2, index),
        heatmaps=heatmaps,
        timings=timings,
        overdue_confirmation=overdue_confirmation_cards(all_cards, now=now),
    )
