from ticket_app.analytics.segments.attribution import (
    AttributionIndex,
    app_labels_of,
    apps_of,
    reset_default_index,
    strip_app_prefix,
    teams_of,
    ts_groups_of,
)
from ticket_app.core.models import AppMapping, Card, Label, TSGroup
from ticket_app.core.reference import reset_reference_cache


def _index():
    return AttributionIndex(
        [
            AppMapping("App: Checkout", "Checkout", TSGroup.TS1, "Commerce"),
            AppMapping("Loyalty Points", "Loyalty Points", TSGroup.TS2, "Retention"),
            # same label listed for a second team
            AppMapping("App: Checkout", "Checkout (B2B)", TSGroup.TS2, "Wholesale"),
        ]
    )


def _card(*label_names):
    return Card(
        id="c1",
        name="Card",
        labels=tuple(Label(id=f"l{i}", name=n) for i, n in enumerate(label_names)),
    )


def test_strip_app_prefix():
    assert strip_app_prefix("App: Checkout") == "Checkout"
    assert strip_app_prefix("App:Checkout") == "Checkout"
    assert strip_app_prefix("Checkout") == "Checkout"
    assert strip_app_prefix(None) == ""


def test_app_labels_of_ignores_other_labels():
    card = _card("urgent", "App: Checkout", "Bug")
    assert app_labels_of(card) == ["App: Checkout"]


def test_mapping_rows_with_or_without_prefix_match():
    index = _index()
    assert [m.app_name for m in index.apps_of(_card("App: Loyalty Points"))] == ["Loyalty Points"]
    assert index.ts_groups_of(_card("App: Loyalty Points")) == {TSGroup.TS2}


def test_multiple_matches_count_toward_every_team():
    index = _index()
    card = _card("App: Checkout")
    assert teams_of(card, index) == {"Commerce", "Wholesale"}
    assert ts_groups_of(card, index) == {TSGroup.TS1, TSGroup.TS2}


def test_union_across_labels():
    index = _index()
    card = _card("App: Checkout", "App: Loyalty Points")
    assert teams_of(card, index) == {"Commerce", "Wholesale", "Retention"}
    assert len(apps_of(card, index)) == 3


def test_unresolved_labels_yield_empty_sets():
    index = _index()
    assert teams_of(_card("App: Unknown"), index) == set()
    assert ts_groups_of(_card("Checkout"), index) == set()
    assert apps_of(_card(), index) == []


def test_exact_match_after_stripping():
    index = _index()
    assert index.lookup("App: checkout") == []
    assert index.lookup("App: Checkout Extra") == []


def test_default_index_reads_reference_table():
    reset_reference_cache()
    reset_default_index()
    card = _card("App: Checkout")
    assert ts_groups_of(card) == {TSGroup.TS1}
    assert teams_of(card) == {"Commerce"}


def test_apps_in_group():
    index = _index()
    assert [m.app_name for m in index.apps_in_group("TS2")] == ["Loyalty Points", "Checkout (B2B)"]
