"""Load the static reference tables (members, lists, apps) from YAML (with fallbacks)."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .config import DEFAULT_LISTS, UNKNOWN_LIST_NAME
from .models import AppMapping, Member, MemberRole, TSGroup

logger = logging.getLogger(__name__)

_CACHE: dict[Path, ReferenceData] = {}


@dataclass(frozen=True)
class ReferenceData:
    members: tuple[Member, ...] = ()
    lists: dict[str, str] = field(default_factory=dict)
    apps: tuple[AppMapping, ...] = ()
    _members_by_id: dict[str, Member] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_members_by_id", {m.id: m for m in self.members})

    def member(self, member_id: str | None) -> Member | None:
        if not member_id:
            return None
        return self._members_by_id.get(member_id)

    @property
    def ts_members(self) -> list[Member]:
        """Members counted as technical support (TS and TS-Lead)."""
        return [m for m in self.members if m.is_ts]

    def member_names(self, member_ids: Iterable[str] | None, *, ts_only: bool = False) -> list[str]:
        """Full names for the known ids in `member_ids`, in input order."""
        names: list[str] = []
        for member_id in member_ids or ():
            member = self.member(member_id)
            if member is None or (ts_only and not member.is_ts):
                continue
            names.append(member.full_name)
        return names

    def member_name_map(self) -> dict[str, str]:
        return {m.id: m.full_name for m in self.members}

    def list_name(self, list_id: str | None) -> str:
        if not list_id:
            return UNKNOWN_LIST_NAME
        return self.lists.get(list_id, UNKNOWN_LIST_NAME)


def _parse_members(rows) -> tuple[Member, ...]:
    members: list[Member] = []
    for row in rows or []:
        if not isinstance(row, dict):
            continue
        member_id = row.get("id")
        name = row.get("full_name") or row.get("fullName")
        if not member_id or not name:
            continue
        members.append(
            Member(
                id=str(member_id),
                full_name=str(name),
                role=MemberRole.parse(row.get("role")),
                email=row.get("email"),
            )
        )
    return tuple(members)


def _parse_lists(rows) -> dict[str, str]:
    lists: dict[str, str] = {}
    for row in rows or []:
        if isinstance(row, dict) and row.get("id") and row.get("name"):
            lists[str(row["id"])] = str(row["name"])
    return lists


def _parse_apps(rows) -> tuple[AppMapping, ...]:
    apps: list[AppMapping] = []
    for row in rows or []:
        if not isinstance(row, dict):
            continue
        label = row.get("label") or row.get("label_trello")
        app_name = row.get("app_name")
        if not label or not app_name:
            continue
        group = row.get("ts_group") or row.get("group_ts")
        try:
            ts_group = TSGroup(group) if group else None
        except ValueError:
            logger.warning("Unknown TS group %r for app %s", group, app_name)
            ts_group = None
        apps.append(
            AppMapping(
                label_name=str(label),
                app_name=str(app_name),
                ts_group=ts_group,
                product_team=row.get("product_team") or row.get("productTeam"),
            )
        )
    return tuple(apps)


def parse_reference(data: dict | None) -> ReferenceData:
    """Build ReferenceData from an already-loaded mapping."""
    data = data or {}
    lists = _parse_lists(data.get("lists")) or dict(DEFAULT_LISTS)
    return ReferenceData(
        members=_parse_members(data.get("members")),
        lists=lists,
        apps=_parse_apps(data.get("apps")),
    )


def load_reference(base_path: str | Path | None = None) -> ReferenceData:
    """Reference tables from `base_path`/reference.yaml, cached per resolved file."""
    base = Path(base_path or Path(__file__).resolve().parent.parent)
    yaml_path = (base / "reference.yaml").resolve()
    cached = _CACHE.get(yaml_path)
    if cached is not None:
        return cached
    if not yaml_path.exists():
        logger.warning("Reference file %s not found; using built-in list names only", yaml_path)
        _CACHE[yaml_path] = parse_reference(None)
        return _CACHE[yaml_path]
    try:
        data = yaml.safe_load(yaml_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Could not read %s (%s); using built-in list names only", yaml_path, exc)
        data = {}
    if not isinstance(data, dict):
        data = {}
    ref = parse_reference(data)
    _CACHE[yaml_path] = ref
    logger.debug(
        "Loaded reference data from %s: %d members, %d lists, %d apps",
        yaml_path,
        len(ref.members),
        len(ref.lists),
        len(ref.apps),
    )
    return ref


def reset_reference_cache() -> None:
    _CACHE.clear()
