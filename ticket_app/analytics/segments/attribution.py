"""Resolve cards to apps, product teams and TS groups through their "App:" labels."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from ticket_app.core.config import APP_LABEL_PREFIX
from ticket_app.core.models import AppMapping, Card, TSGroup
from ticket_app.core.reference import load_reference


def is_app_label(name: str | None) -> bool:
    return str(name or "").strip().startswith(APP_LABEL_PREFIX)


def strip_app_prefix(name: str | None) -> str:
    """Remove the "App:" prefix (and surrounding whitespace) from a label name."""
    text = str(name or "").strip()
    if text.startswith(APP_LABEL_PREFIX):
        text = text[len(APP_LABEL_PREFIX) :].strip()
    return text


def app_labels_of(card: Card) -> list[str]:
    """Names of the card's "App:" labels, in label order."""
    return [name for name in card.label_names if is_app_label(name)]


class AttributionIndex:
    """Lookup from stripped app label name to every mapping row that carries it.

    Mapping rows may store the label with or without the prefix; both sides are
    stripped before the exact comparison.
    """

    def __init__(self, mappings: Iterable[AppMapping] | None):
        self.mappings: tuple[AppMapping, ...] = tuple(mappings or ())
        self._by_key: dict[str, list[AppMapping]] = defaultdict(list)
        for mapping in self.mappings:
            key = strip_app_prefix(mapping.label_name)
            if key:
                self._by_key[key].append(mapping)

    def lookup(self, label_name: str | None) -> list[AppMapping]:
        key = strip_app_prefix(label_name)
        if not key:
            return []
        return list(self._by_key.get(key, ()))

    def apps_of(self, card: Card) -> list[AppMapping]:
        seen: set[AppMapping] = set()
        out: list[AppMapping] = []
        for label in app_labels_of(card):
            for mapping in self.lookup(label):
                if mapping in seen:
                    continue
                seen.add(mapping)
                out.append(mapping)
        return out

    def teams_of(self, card: Card) -> set[str]:
        return {m.product_team for m in self.apps_of(card) if m.product_team}

    def ts_groups_of(self, card: Card) -> set[TSGroup]:
        return {m.ts_group for m in self.apps_of(card) if m.ts_group is not None}

    def apps_in_group(self, group: TSGroup | str) -> list[AppMapping]:
        group = TSGroup(group)
        return [m for m in self.mappings if m.ts_group == group]


_DEFAULT_INDEX: AttributionIndex | None = None


def default_index() -> AttributionIndex:
    """Index over the reference app table, built once per process."""
    global _DEFAULT_INDEX
    if _DEFAULT_INDEX is None:
        _DEFAULT_INDEX = AttributionIndex(load_reference().apps)
    return _DEFAULT_INDEX


def reset_default_index() -> None:
    global _DEFAULT_INDEX
    _DEFAULT_INDEX = None


def apps_of(card: Card, index: AttributionIndex | None = None) -> list[AppMapping]:
    return (index or default_index()).apps_of(card)


def teams_of(card: Card, index: AttributionIndex | None = None) -> set[str]:
    """Product teams the card counts toward; empty when no label resolves."""
    return (index or default_index()).teams_of(card)


def ts_groups_of(card: Card, index: AttributionIndex | None = None) -> set[TSGroup]:
    return (index or default_index()).ts_groups_of(card)
