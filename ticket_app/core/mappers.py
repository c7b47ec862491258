"""Mapping raw board card / action JSON into Card and Action instances."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pandas as pd

from .models import (
    Action,
    Card,
    CommentAction,
    CreateAction,
    DueCompleteTransition,
    Label,
    ListMoveAction,
    ListRef,
    MemberAddAction,
    MemberRef,
    MemberRemoveAction,
    OtherAction,
)


def _member_ref(value: Any, fallback_id: Any = None) -> MemberRef | None:
    if isinstance(value, dict) and (value.get("id") or value.get("fullName")):
        return MemberRef(id=value.get("id") or fallback_id, full_name=value.get("fullName"))
    if fallback_id:
        return MemberRef(id=str(fallback_id))
    return None


def _list_ref(value: Any) -> ListRef | None:
    if not isinstance(value, dict):
        return None
    if not value.get("id") and not value.get("name"):
        return None
    return ListRef(id=value.get("id"), name=value.get("name"))


def _as_bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def _due_transition(data: dict[str, Any]) -> DueCompleteTransition | None:
    card = data.get("card") if isinstance(data.get("card"), dict) else {}
    old = data.get("old") if isinstance(data.get("old"), dict) else {}
    if "dueComplete" not in card and "dueComplete" not in old:
        return None
    return DueCompleteTransition(
        was_complete=_as_bool(old.get("dueComplete")),
        is_complete=_as_bool(card.get("dueComplete")),
    )


def map_action(raw: dict[str, Any]) -> Action:
    """Map one audit-log entry; unknown types become OtherAction."""
    data = raw.get("data") if isinstance(raw.get("data"), dict) else {}
    common = {
        "id": raw.get("id"),
        "date": raw.get("date"),
        "actor": _member_ref(raw.get("memberCreator"), raw.get("idMemberCreator")),
    }
    kind = raw.get("type")
    if kind == "createCard":
        return CreateAction(**common)
    if kind == "updateCard":
        return ListMoveAction(
            **common,
            before=_list_ref(data.get("listBefore")),
            after=_list_ref(data.get("listAfter")),
            due_complete=_due_transition(data),
        )
    if kind == "commentCard":
        return CommentAction(**common, text=data.get("text"))
    if kind == "addMemberToCard":
        return MemberAddAction(**common, member=_member_ref(raw.get("member"), data.get("idMember")))
    if kind == "removeMemberFromCard":
        return MemberRemoveAction(**common, member=_member_ref(raw.get("member"), data.get("idMember")))
    return OtherAction(**common, raw_type=kind)


def map_card(raw: dict[str, Any]) -> Card:
    labels = tuple(
        Label(id=label.get("id"), name=label.get("name") or "")
        for label in raw.get("labels") or []
        if isinstance(label, dict)
    )
    actions = tuple(map_action(a) for a in raw.get("actions") or [] if isinstance(a, dict))
    return Card(
        id=raw.get("id"),
        name=raw.get("name"),
        list_id=raw.get("idList"),
        member_ids=tuple(dict.fromkeys(raw.get("idMembers") or ())),
        labels=labels,
        is_due_complete=bool(raw.get("dueComplete")),
        completed_at=raw.get("dateCompleted"),
        due_at=raw.get("due"),
        actions=actions,
        url=raw.get("shortUrl") or raw.get("url"),
    )


def cards_to_dataframe(cards: Iterable[Card]) -> pd.DataFrame:
    rows = []
    for c in cards:
        rows.append(
            {
                "id": c.id,
                "name": c.name,
                "list_id": c.list_id,
                "member_ids": list(c.member_ids),
                "labels": c.label_names,
                "is_due_complete": c.is_due_complete,
                "due": c.due_at,
                "url": c.url,
                "actions": c.actions,
            }
        )
    return pd.DataFrame(rows)
