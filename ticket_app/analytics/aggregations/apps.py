"""App-based aggregations."""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from ticket_app.analytics.segments.attribution import AttributionIndex, app_labels_of, default_index
from ticket_app.core.models import Card, TSGroup


def issues_by_app(
    cards: Iterable[Card] | None,
    group: TSGroup | str,
    index: AttributionIndex | None = None,
) -> pd.DataFrame:
    """Cards per app of one TS group, zero-filled and sorted by count descending."""
    group = TSGroup(group)
    index = index or default_index()
    counts = {m.app_name: 0 for m in index.apps_in_group(group)}
    for card in cards or []:
        matched: set[str] = set()
        for label in app_labels_of(card):
            for mapping in index.lookup(label):
                if mapping.ts_group == group:
                    matched.add(mapping.app_name)
        for app_name in matched:
            counts[app_name] = counts.get(app_name, 0) + 1
    out = pd.DataFrame({"app": list(counts.keys()), "count": list(counts.values())})
    return out.sort_values("count", ascending=False, kind="stable").reset_index(drop=True)
