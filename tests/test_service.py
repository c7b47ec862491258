from datetime import date, datetime

import pytest

from ticket_app.core.board_client import BoardAPI
from ticket_app.core.models import MemberRole
from ticket_app.core.reference import parse_reference
from ticket_app.core.service import CardService

REFERENCE = parse_reference(
    {
        "members": [
            {"id": "m1", "full_name": "Minh Tran", "role": "TS"},
            {"id": "m2", "full_name": "Hoa Pham", "role": "TS"},
        ],
        "lists": [{"id": "new", "name": "New Issues"}],
        "apps": [{"label": "App: Checkout", "app_name": "Checkout", "ts_group": "TS1", "product_team": "Commerce"}],
    }
)


def _raw_card(card_id, day):
    return {
        "id": card_id,
        "name": f"Card {card_id}",
        "idList": "new",
        "idMembers": ["m1"],
        "labels": [{"id": "l1", "name": "App: Checkout"}],
        "dueComplete": True,
        "actions": [
            {"type": "createCard", "date": f"{day}T01:00:00.000Z"},
            {
                "type": "updateCard",
                "date": f"{day}T02:30:00.000Z",
                "data": {"listBefore": {"id": "new", "name": "New Issues"}, "listAfter": {"id": "x", "name": "Doing"}},
            },
            {"type": "commentCard", "date": f"{day}T04:15:00.000Z", "data": {"text": "done issue"}},
            {
                "type": "updateCard",
                "date": f"{day}T05:00:00.000Z",
                "data": {"card": {"dueComplete": True}, "old": {"dueComplete": False}},
            },
        ],
    }


class DummyAPI(BoardAPI):
    def __init__(self, raw=None, fail=False):
        self.board_id = "board"
        self.raw = raw if raw is not None else []
        self.fail = fail
        self.cleared = 0
        self.calls = []

    def clear_cache(self):
        self.cleared += 1

    def search_cards(self, since, before):
        self.calls.append((since, before))
        if self.fail:
            raise RuntimeError("Board request to boards/board/cards/all failed 401: unauthorized")
        return self.raw


class FakeResponse:
    def __init__(self, status_code, payload, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params))
        return self.response


def test_fetch_day_keeps_cards_active_in_window():
    api = DummyAPI([_raw_card("a", "2025-06-02"), _raw_card("b", "2025-05-20"), {"name": "no id"}])
    svc = CardService(api, REFERENCE)
    cards = svc.fetch_day(date(2025, 6, 2))
    assert [c.id for c in cards] == ["a"]
    assert api.cleared == 1
    since, before = api.calls[0]
    assert since.isoformat() == "2025-06-02T00:00:00+07:00"
    assert before.isoformat() == "2025-06-03T00:00:00+07:00"


def test_fetch_reports_progress():
    messages = []
    svc = CardService(DummyAPI([_raw_card("a", "2025-06-02")]), REFERENCE)
    svc.fetch_range(date(2025, 6, 1), date(2025, 6, 2), progress=lambda m, c, t: messages.append(m))
    assert messages[0].startswith("Fetching")
    assert messages[-1] == "Loaded 1 cards"


def test_fetch_failure_is_reraised():
    svc = CardService(DummyAPI(fail=True), REFERENCE)
    with pytest.raises(RuntimeError, match="401"):
        svc.fetch_cards_between(datetime(2025, 6, 2), datetime(2025, 6, 3))


def test_enrich_adds_names_attribution_and_timings():
    api = DummyAPI([_raw_card("a", "2025-06-02")])
    svc = CardService(api, REFERENCE)
    cards, df = svc.fetch_and_enrich_range(date(2025, 6, 2), date(2025, 6, 2))
    assert len(cards) == 1
    row = df.iloc[0]
    assert row["list_name"] == "New Issues"
    assert row["members"] == "Minh Tran"
    assert row["apps"] == ["App: Checkout"]
    assert row["teams"] == ["Commerce"]
    assert row["ts_groups"] == ["TS1"]
    assert row["created"].hour == 8
    assert row["completed"].hour == 12
    assert row["resolution_time"] == 195
    assert row["first_action_time"] == 90
    assert row["ts_resolution_time"] == 105
    assert svc.reference.member("m1").role == MemberRole.TS


def test_enrich_empty():
    svc = CardService(DummyAPI(), REFERENCE)
    assert svc.enrich([]).empty


def test_board_client_caches_and_clears():
    session = FakeSession(FakeResponse(200, [{"id": "a"}]))
    api = BoardAPI("key", "token", board_id="b1", session=session)
    since, before = datetime(2025, 6, 2), datetime(2025, 6, 3)
    assert api.search_cards(since, before) == [{"id": "a"}]
    assert api.search_cards(since, before) == [{"id": "a"}]
    assert len(session.requests) == 1
    url, params = session.requests[0]
    assert url == "https://api.trello.com/1/boards/b1/cards/all"
    assert params["key"] == "key" and params["token"] == "token"
    assert "removeMemberFromCard" in params["actions"]
    api.clear_cache()
    api.search_cards(since, before)
    assert len(session.requests) == 2


def test_board_client_raises_on_http_error():
    session = FakeSession(FakeResponse(401, {}, text="invalid token"))
    api = BoardAPI("key", "bad", session=session)
    with pytest.raises(RuntimeError, match="401: invalid token"):
        api.fetch_board()
