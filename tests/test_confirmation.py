from ticket_app.analytics.metrics.confirmation import (
    overdue_confirmation_cards,
    overdue_confirmation_summary,
)
from ticket_app.core.config import WAITING_CONFIRMATION_LIST_ID
from ticket_app.core.models import Card, ListMoveAction, ListRef

WAITING = ListRef(WAITING_CONFIRMATION_LIST_ID, "Waiting for Customer's Confirmation (SLA: 2 days)")
DONE = ListRef("done", "Done")
NOW = "2025-06-10T12:00:00+07:00"


def _move(date, after):
    return ListMoveAction(date=date, before=ListRef("x", "Doing"), after=after)


def _sample_cards():
    return [
        # waiting 5.5 days
        Card(id="late", name="Late card", actions=(_move("2025-06-05T00:00:00+07:00", WAITING),)),
        # waiting 1 day
        Card(id="fresh", name="Fresh card", actions=(_move("2025-06-09T12:00:00+07:00", WAITING),)),
        # moved on after waiting
        Card(
            id="closed",
            name="Closed card",
            actions=(
                _move("2025-06-01T00:00:00+07:00", WAITING),
                _move("2025-06-02T00:00:00+07:00", DONE),
            ),
        ),
        # back to waiting later; only the latest entry counts
        Card(
            id="again",
            name="Again card",
            actions=(
                _move("2025-06-01T00:00:00+07:00", WAITING),
                _move("2025-06-02T00:00:00+07:00", DONE),
                _move("2025-06-07T06:00:00+07:00", WAITING),
            ),
        ),
        Card(id="never", name="Never waited", actions=(_move("2025-06-01T00:00:00+07:00", DONE),)),
    ]


def test_overdue_cards():
    out = overdue_confirmation_cards(_sample_cards(), now=NOW)
    assert out["card_id"].tolist() == ["late", "again"]
    assert out["days_overdue"].tolist() == [3, 1]
    assert out.iloc[0]["card_name"] == "Late card"


def test_custom_sla():
    out = overdue_confirmation_cards(_sample_cards(), now=NOW, sla_days=4)
    assert out["card_id"].tolist() == ["late"]
    assert out["days_overdue"].tolist() == [1]


def test_summary():
    summary = overdue_confirmation_summary(_sample_cards(), now=NOW)
    assert summary["total_overdue"] == 2
    assert "2 card(s)" in summary["message"]
    empty = overdue_confirmation_summary([], now=NOW)
    assert empty["total_overdue"] == 0
    assert empty["cards"].empty


def test_card_just_past_sla_reports_zero_days():
    cards = [Card(id="edge", name="Edge card", actions=(_move("2025-06-08T00:00:00+07:00", WAITING),))]
    out = overdue_confirmation_cards(cards, now=NOW)
    assert out["card_id"].tolist() == ["edge"]
    assert out["days_overdue"].tolist() == [0]
