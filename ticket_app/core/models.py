"""Domain data models for board cards, audit-log actions, and reference tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import ClassVar

# Raw audit-log dates arrive as ISO strings; mapped or test data may carry datetimes.
TimestampLike = datetime | str | None


class ActionType(str, Enum):
    CREATE = "Create"
    LIST_MOVE = "ListMove"
    COMMENT = "Comment"
    MEMBER_ADD = "MemberAdd"
    MEMBER_REMOVE = "MemberRemove"
    OTHER = "Other"


class MemberRole(str, Enum):
    TS = "TS"
    TS_LEAD = "TS-Lead"
    CS = "CS"
    BA = "BA"
    PM = "PM"
    ADMIN = "Admin"

    @classmethod
    def parse(cls, value: str | None) -> MemberRole | None:
        """Case-insensitive lookup ("ts-lead" -> TS_LEAD); None when unknown."""
        if not value:
            return None
        text = str(value).strip().lower()
        for role in cls:
            if role.value.lower() == text:
                return role
        return None


class TSGroup(str, Enum):
    TS1 = "TS1"
    TS2 = "TS2"


class EventKind(str, Enum):
    CREATED = "Created"
    COMPLETED = "Completed"


@dataclass(slots=True, frozen=True)
class MemberRef:
    id: str | None
    full_name: str | None = None


@dataclass(slots=True, frozen=True)
class ListRef:
    id: str | None
    name: str | None = None


@dataclass(slots=True, frozen=True)
class Label:
    id: str | None
    name: str


@dataclass(slots=True, frozen=True)
class DueCompleteTransition:
    # None means the log did not record that side of the change
    was_complete: bool | None = None
    is_complete: bool | None = None


# ---------------------------------------------------------------------------
# Audit-log actions
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class Action:
    date: TimestampLike = None
    actor: MemberRef | None = None
    id: str | None = None

    kind: ClassVar[ActionType] = ActionType.OTHER

    @property
    def actor_id(self) -> str | None:
        return self.actor.id if self.actor else None

    @property
    def actor_name(self) -> str | None:
        return self.actor.full_name if self.actor else None


@dataclass(slots=True, frozen=True)
class CreateAction(Action):
    kind: ClassVar[ActionType] = ActionType.CREATE


@dataclass(slots=True, frozen=True)
class ListMoveAction(Action):
    """A card update: a list move, a due-complete toggle, or both."""

    before: ListRef | None = None
    after: ListRef | None = None
    due_complete: DueCompleteTransition | None = None

    kind: ClassVar[ActionType] = ActionType.LIST_MOVE


@dataclass(slots=True, frozen=True)
class CommentAction(Action):
    text: str | None = None

    kind: ClassVar[ActionType] = ActionType.COMMENT


@dataclass(slots=True, frozen=True)
class MemberAddAction(Action):
    member: MemberRef | None = None

    kind: ClassVar[ActionType] = ActionType.MEMBER_ADD


@dataclass(slots=True, frozen=True)
class MemberRemoveAction(Action):
    # `actor` removed `member`; the two may differ
    member: MemberRef | None = None

    kind: ClassVar[ActionType] = ActionType.MEMBER_REMOVE


@dataclass(slots=True, frozen=True)
class OtherAction(Action):
    raw_type: str | None = None


# ---------------------------------------------------------------------------
# Cards and reference tables
# ---------------------------------------------------------------------------
@dataclass(slots=True)
class Card:
    id: str
    name: str | None
    list_id: str | None = None
    member_ids: tuple[str, ...] = ()
    labels: tuple[Label, ...] = ()
    is_due_complete: bool = False
    completed_at: TimestampLike = None
    due_at: TimestampLike = None
    actions: tuple[Action, ...] = ()
    url: str | None = None

    @property
    def label_names(self) -> list[str]:
        return [label.name for label in self.labels if label.name]


@dataclass(slots=True, frozen=True)
class Member:
    id: str
    full_name: str
    role: MemberRole | None = None
    email: str | None = None

    @property
    def is_ts(self) -> bool:
        return self.role in (MemberRole.TS, MemberRole.TS_LEAD)


@dataclass(slots=True, frozen=True)
class AppMapping:
    label_name: str
    app_name: str
    ts_group: TSGroup | None = None
    product_team: str | None = None


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class ResolutionTiming:
    resolution_time_minutes: int
    ts_resolution_time_minutes: int
    first_action_time_minutes: int


@dataclass(slots=True, frozen=True)
class DevResolutionTiming:
    resolution_time_minutes: int
    dev_resolution_time_minutes: int
    first_action_time_minutes: int


@dataclass(slots=True, frozen=True)
class HeatmapSample:
    card_id: str
    name: str | None
    timestamp: datetime
    member_names: tuple[str, ...] = ()


@dataclass(slots=True)
class HeatmapCell:
    hour: int
    count: int = 0
    samples: list[HeatmapSample] = field(default_factory=list)
