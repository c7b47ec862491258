"""Hour-of-day heatmaps of card creation and completion, plus shift totals."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import pandas as pd

from ticket_app.analytics.metrics.resolution import completion_timestamp_of, created_timestamp_of
from ticket_app.analytics.metrics.shifts import shift_for_hour, shift_hours
from ticket_app.analytics.segments.attribution import AttributionIndex, default_index
from ticket_app.core.config import (
    COARSE_SHIFT_LABELS,
    COMPLETED_PALETTE,
    CREATED_PALETTE,
    FINE_SHIFT_LABELS,
    HEATMAP_BAND_UPPER_BOUNDS,
)
from ticket_app.core.models import Card, EventKind, HeatmapCell, HeatmapSample, TSGroup
from ticket_app.core.reference import load_reference


def event_timestamp(card: Card, kind: EventKind | str, target_tz=None) -> pd.Timestamp | None:
    if EventKind(kind) == EventKind.CREATED:
        return created_timestamp_of(card, target_tz)
    return completion_timestamp_of(card, target_tz)


def build_heatmap(
    cards: Iterable[Card] | None,
    kind: EventKind | str,
    team: TSGroup | str | None = None,
    *,
    index: AttributionIndex | None = None,
    member_names: Mapping[str, str] | None = None,
    target_tz=None,
) -> list[HeatmapCell]:
    """Bucket cards into 24 hourly cells by their Created or Completed time.

    Parameters
    ----------
    cards : iterable of Card
        Working set, usually the app-filtered output of the filter pipeline.
    kind : EventKind
        Which event places a card on the heatmap.
    team : TSGroup, optional
        Only cards whose app labels resolve to this TS group are counted.
    index : AttributionIndex, optional
        App lookup used for the team restriction.
    member_names : mapping, optional
        Member id to full name, used for the per-sample member list.

    Returns
    -------
    list[HeatmapCell]
        Exactly 24 cells, hour 0 first. Every counted card adds one sample.
    """
    kind = EventKind(kind)
    group = TSGroup(team) if team else None
    if group is not None:
        index = index or default_index()
    if member_names is None:
        member_names = load_reference().member_name_map()
    cells = [HeatmapCell(hour=hour) for hour in range(24)]
    for card in cards or []:
        if group is not None and group not in index.ts_groups_of(card):
            continue
        ts = event_timestamp(card, kind, target_tz)
        if ts is None:
            continue
        cell = cells[ts.hour]
        cell.count += 1
        cell.samples.append(
            HeatmapSample(
                card_id=card.id,
                name=card.name,
                timestamp=ts.to_pydatetime(),
                member_names=tuple(
                    member_names[mid] for mid in card.member_ids if mid in member_names
                ),
            )
        )
    return cells


def shift_totals(cells: Iterable[HeatmapCell], *, coarse: bool = True) -> dict[str, int]:
    """Sum cell counts over each shift's hours (Ca5 covers hours 16-19)."""
    counts = {cell.hour: cell.count for cell in cells}
    labels = COARSE_SHIFT_LABELS if coarse else FINE_SHIFT_LABELS
    return {label: sum(counts.get(hour, 0) for hour in shift_hours(label)) for label in labels}


def color_band(count: int) -> int:
    """Colour band 0..6 for a cell count: 0, 1-2, 3-5, 6-10, 11-15, 16-20, >20."""
    for band, upper in enumerate(HEATMAP_BAND_UPPER_BOUNDS):
        if count <= upper:
            return band
    return len(HEATMAP_BAND_UPPER_BOUNDS)


def cell_color(count: int, kind: EventKind | str) -> str:
    palette = CREATED_PALETTE if EventKind(kind) == EventKind.CREATED else COMPLETED_PALETTE
    return palette[color_band(count)]


def heatmap_frame(cells: Iterable[HeatmapCell], kind: EventKind | str) -> pd.DataFrame:
    """One row per hour with count, band, colour, shift and the cell samples."""
    rows = []
    for cell in cells:
        rows.append(
            {
                "hour": cell.hour,
                "count": cell.count,
                "band": color_band(cell.count),
                "color": cell_color(cell.count, kind),
                "shift": shift_for_hour(cell.hour),
                "samples": list(cell.samples),
            }
        )
    return pd.DataFrame(rows, columns=["hour", "count", "band", "color", "shift", "samples"])


def cards_per_shift(cards: Iterable[Card] | None, target_tz=None) -> pd.DataFrame:
    """Created cards per fine shift label; all seven labels present."""
    counts = dict.fromkeys(FINE_SHIFT_LABELS, 0)
    for card in cards or []:
        ts = created_timestamp_of(card, target_tz)
        if ts is None:
            continue
        label = shift_for_hour(int(ts.hour))
        if label in counts:
            counts[label] += 1
    return pd.DataFrame({"shift": list(counts.keys()), "count": list(counts.values())})
