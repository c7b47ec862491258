import pandas as pd

from ticket_app.analytics.metrics.resolution import (
    add_timing_metrics,
    completion_timestamp_of,
    compute_dev_timing,
    compute_timing,
    created_timestamp_of,
)
from ticket_app.core.models import (
    Card,
    CommentAction,
    CreateAction,
    DueCompleteTransition,
    ListMoveAction,
    ListRef,
    MemberAddAction,
    ResolutionTiming,
)

DAY = "2025-06-02"


def _at(hhmm: str) -> str:
    return f"{DAY}T{hhmm}:00+07:00"


def _scenario_actions():
    return [
        CreateAction(date=_at("08:00")),
        ListMoveAction(date=_at("09:30"), before=ListRef("l1", "New Issues"), after=ListRef("l2", "Doing")),
        CommentAction(date=_at("10:00"), text="please check"),
        CommentAction(date=_at("11:15"), text="Done issue, confirmed"),
    ]


def _completion(date, was, now):
    return ListMoveAction(date=date, due_complete=DueCompleteTransition(was_complete=was, is_complete=now))


def test_resolution_scenario():
    timing = compute_timing(_scenario_actions())
    assert timing == ResolutionTiming(
        resolution_time_minutes=195,
        ts_resolution_time_minutes=105,
        first_action_time_minutes=90,
    )


def test_create_only_has_no_timing():
    assert compute_timing([CreateAction(date=_at("08:00"))]) is None
    assert compute_timing([]) is None
    assert compute_timing(None) is None


def test_input_order_does_not_matter():
    shuffled = list(reversed(_scenario_actions()))
    assert compute_timing(shuffled) == compute_timing(_scenario_actions())


def test_timing_is_deterministic():
    actions = _scenario_actions()
    assert compute_timing(actions) == compute_timing(actions)


def test_missing_done_comment_returns_none():
    actions = _scenario_actions()[:3]
    assert compute_timing(actions) is None


def test_landmark_matching_is_case_insensitive():
    actions = [
        CreateAction(date=_at("08:00")),
        ListMoveAction(date=_at("08:20"), before=ListRef("l1", "NEW ISSUES")),
        CommentAction(date=_at("09:00"), text="DONE ISSUE"),
    ]
    timing = compute_timing(actions)
    assert timing.first_action_time_minutes == 20
    assert timing.resolution_time_minutes == 60


def test_earliest_action_starts_the_clock_even_if_not_create():
    actions = [
        MemberAddAction(date=_at("07:00")),
        CreateAction(date=_at("08:00")),
        ListMoveAction(date=_at("09:00"), before=ListRef("l1", "New Issues")),
        CommentAction(date=_at("10:00"), text="done issue"),
    ]
    timing = compute_timing(actions)
    assert timing.first_action_time_minutes == 120
    assert timing.resolution_time_minutes == 180


def test_unparseable_landmark_date_returns_none():
    actions = [
        CreateAction(date=_at("08:00")),
        ListMoveAction(date="garbage", before=ListRef("l1", "New Issues")),
        CommentAction(date=_at("10:00"), text="done issue"),
    ]
    assert compute_timing(actions) is None


def test_invariant_holds_with_sub_minute_offsets():
    actions = [
        CreateAction(date="2025-06-02T08:00:40+07:00"),
        ListMoveAction(date="2025-06-02T08:10:10+07:00", before=ListRef("l1", "New Issues")),
        CommentAction(date="2025-06-02T09:05:55+07:00", text="done issue"),
    ]
    timing = compute_timing(actions)
    assert timing.resolution_time_minutes == 65
    assert timing.first_action_time_minutes == 9
    assert (
        timing.ts_resolution_time_minutes + timing.first_action_time_minutes
        == timing.resolution_time_minutes
    )


def test_first_matching_landmarks_are_used():
    actions = [
        *_scenario_actions(),
        ListMoveAction(date=_at("12:00"), before=ListRef("l1", "New Issues")),
        CommentAction(date=_at("13:00"), text="done issue again"),
    ]
    assert compute_timing(actions).resolution_time_minutes == 195


def test_dev_timing():
    actions = [
        CreateAction(date=_at("08:00")),
        ListMoveAction(date=_at("09:00"), after=ListRef("d1", "Waiting to fix (from dev)")),
        _completion(_at("12:00"), False, True),
        _completion(_at("13:00"), False, False),
        _completion(_at("15:00"), False, True),
    ]
    timing = compute_dev_timing(actions)
    assert timing.first_action_time_minutes == 60
    assert timing.resolution_time_minutes == 420
    assert timing.dev_resolution_time_minutes == 360


def test_dev_timing_requires_all_landmarks():
    actions = [CreateAction(date=_at("08:00")), _completion(_at("12:00"), False, True)]
    assert compute_dev_timing(actions) is None


def test_completion_prefers_latest_strict_transition():
    card = Card(
        id="c1",
        name="Card",
        is_due_complete=True,
        actions=(
            _completion(_at("09:00"), False, True),
            _completion(_at("10:00"), True, False),
            _completion(_at("11:00"), False, True),
            _completion(_at("12:00"), None, True),
        ),
    )
    assert completion_timestamp_of(card).hour == 11


def test_completion_falls_back_to_loose_transition_then_card_fields():
    loose = Card(id="c1", name="Card", is_due_complete=True, actions=(_completion(_at("14:00"), None, True),))
    assert completion_timestamp_of(loose).hour == 14

    from_fields = Card(id="c2", name="Card", is_due_complete=True, completed_at=_at("15:30"), due_at=_at("18:00"))
    assert completion_timestamp_of(from_fields).hour == 15

    from_due = Card(id="c3", name="Card", is_due_complete=True, due_at=_at("18:00"))
    assert completion_timestamp_of(from_due).hour == 18


def test_completion_skips_undated_transitions():
    card = Card(
        id="c1",
        name="Card",
        is_due_complete=True,
        completed_at=_at("16:00"),
        actions=(_completion(None, False, True),),
    )
    assert completion_timestamp_of(card).hour == 16


def test_incomplete_card_has_no_completion():
    card = Card(id="c1", name="Card", is_due_complete=False, actions=(_completion(_at("09:00"), False, True),))
    assert completion_timestamp_of(card) is None


def test_created_timestamp_is_earliest_create():
    card = Card(
        id="c1",
        name="Card",
        actions=(CreateAction(date=_at("10:00")), CreateAction(date=_at("09:00")), CreateAction(date=None)),
    )
    assert created_timestamp_of(card).hour == 9
    assert created_timestamp_of(Card(id="c2", name="Empty")) is None


def test_add_timing_metrics_columns():
    df = pd.DataFrame(
        {
            "id": ["a", "b"],
            "actions": [tuple(_scenario_actions()), (CreateAction(date=_at("08:00")),)],
        }
    )
    out = add_timing_metrics(df)
    assert out.loc[0, "resolution_time"] == 195
    assert out.loc[0, "ts_resolution_time"] == 105
    assert out.loc[0, "first_action_time"] == 90
    assert pd.isna(out.loc[1, "resolution_time"])
