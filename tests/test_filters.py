import logging

import pytest

from ticket_app.analytics.segments.attribution import AttributionIndex
from ticket_app.analytics.segments.filters import STAGES, Selectors, apply_filters, stages_through
from ticket_app.core.models import (
    AppMapping,
    Card,
    CreateAction,
    DueCompleteTransition,
    Label,
    ListMoveAction,
    MemberRef,
    MemberRemoveAction,
    TSGroup,
)

INDEX = AttributionIndex(
    [
        AppMapping("App: Checkout", "Checkout", TSGroup.TS1, "Commerce"),
        AppMapping("App: Loyalty Points", "Loyalty Points", TSGroup.TS2, "Retention"),
    ]
)


def _card(card_id, *, created, members=(), list_id="new", labels=(), completed=None, actions=()):
    all_actions = [CreateAction(date=f"2025-06-02T{created}:00+07:00")]
    if completed:
        all_actions.append(
            ListMoveAction(
                date=f"2025-06-02T{completed}:00+07:00",
                due_complete=DueCompleteTransition(was_complete=False, is_complete=True),
            )
        )
    all_actions.extend(actions)
    return Card(
        id=card_id,
        name=f"Card {card_id}",
        list_id=list_id,
        member_ids=tuple(members),
        labels=tuple(Label(id=f"{card_id}-{i}", name=n) for i, n in enumerate(labels)),
        is_due_complete=completed is not None,
        actions=tuple(all_actions),
    )


def _removal(actor, removed):
    return MemberRemoveAction(
        date="2025-06-02T12:00:00+07:00",
        actor=MemberRef(actor.lower(), actor),
        member=MemberRef(removed.lower(), removed),
    )


def _sample_cards():
    return [
        _card("a", created="09:10", members=("m1",), labels=("App: Checkout",), completed="16:20"),
        _card("b", created="16:05", members=("m1", "m2"), list_id="done", labels=("App: Loyalty Points",)),
        _card("c", created="18:40", members=("m2",), labels=("App: Checkout",), completed="16:45"),
        _card("d", created="23:15", members=("m3",), actions=(_removal("Alice", "Bob"),)),
        _card("e", created="16:59", members=("m1",), labels=("urgent",), completed="09:00"),
    ]


def _ids(cards):
    return [c.id for c in cards]


def test_stage_order_is_fixed():
    assert [s.selector for s in STAGES] == [
        "member_id",
        "list_id",
        "shift",
        "removal_actor",
        "app_label",
        "completed_hour",
        "created_hour",
        "ts1_completed_hour",
        "ts1_created_hour",
        "ts2_completed_hour",
        "ts2_created_hour",
    ]


def test_no_selection_passes_everything():
    cards = _sample_cards()
    assert _ids(apply_filters(cards, Selectors(), index=INDEX)) == _ids(cards)
    assert _ids(apply_filters(cards, None, index=INDEX)) == _ids(cards)
    assert apply_filters(None, Selectors(), index=INDEX) == []


def test_member_and_list_stages():
    cards = _sample_cards()
    assert _ids(apply_filters(cards, Selectors(member_id="m1"), index=INDEX)) == ["a", "b", "e"]
    assert _ids(apply_filters(cards, Selectors(member_id="m1", list_id="done"), index=INDEX)) == ["b"]


def test_coarse_shift_includes_both_halves():
    cards = _sample_cards()
    assert _ids(apply_filters(cards, Selectors(shift="Ca5"), index=INDEX)) == ["b", "c", "e"]
    assert _ids(apply_filters(cards, Selectors(shift="Ca5.1"), index=INDEX)) == ["b", "e"]
    assert _ids(apply_filters(cards, Selectors(shift="Ca6"), index=INDEX)) == ["d"]


def test_removal_matches_the_actor_not_the_removed_member():
    cards = _sample_cards()
    assert _ids(apply_filters(cards, Selectors(removal_actor="Alice"), index=INDEX)) == ["d"]
    assert apply_filters(cards, Selectors(removal_actor="Bob"), index=INDEX) == []


def test_app_label_stage():
    cards = _sample_cards()
    assert _ids(apply_filters(cards, Selectors(app_label="App: Checkout"), index=INDEX)) == ["a", "c"]


def test_team_agnostic_hour_stages():
    cards = _sample_cards()
    assert _ids(apply_filters(cards, Selectors(completed_hour=16), index=INDEX)) == ["a", "c"]
    assert _ids(apply_filters(cards, Selectors(created_hour=16), index=INDEX)) == ["b", "e"]
    assert _ids(apply_filters(cards, Selectors(completed_hour=9), index=INDEX)) == ["e"]


def test_hour_zero_is_a_real_selection():
    cards = [_card("z", created="00:30"), _card("y", created="01:30")]
    assert _ids(apply_filters(cards, Selectors(created_hour=0), index=INDEX)) == ["z"]


def test_team_scoped_hour_stages_require_the_group():
    cards = _sample_cards()
    assert _ids(apply_filters(cards, Selectors(ts1_completed_hour=16), index=INDEX)) == ["a", "c"]
    assert apply_filters(cards, Selectors(ts2_completed_hour=16), index=INDEX) == []
    assert _ids(apply_filters(cards, Selectors(ts2_created_hour=16), index=INDEX)) == ["b"]
    # "e" was created at 16:59 but carries no app label
    assert apply_filters(cards, Selectors(ts1_created_hour=16), index=INDEX) == []


def test_clearing_a_selector_matches_starting_without_it():
    cards = _sample_cards()
    both = Selectors(member_id="m1", shift="Ca5")
    assert _ids(apply_filters(cards, both, index=INDEX)) == ["b", "e"]
    cleared = both.cleared("member_id")
    assert cleared == Selectors(shift="Ca5")
    assert apply_filters(cards, cleared, index=INDEX) == apply_filters(cards, Selectors(shift="Ca5"), index=INDEX)


def test_cleared_without_names_resets_everything():
    selectors = Selectors(member_id="m1", created_hour=3)
    assert selectors.cleared().is_empty
    assert not selectors.is_empty


def test_stages_through_prefix():
    names = [s.name for s in stages_through("app")]
    assert names == ["member", "list", "shift", "self_removal", "app"]
    with pytest.raises(ValueError):
        stages_through("nope")


def test_stage_counts_logged_at_debug(caplog):
    with caplog.at_level(logging.DEBUG, logger="ticket_app.analytics.segments.filters"):
        apply_filters(_sample_cards(), Selectors(member_id="m1"), index=INDEX)
    assert any("kept 3 card(s)" in r.getMessage() for r in caplog.records)
