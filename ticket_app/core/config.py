"""Central configuration, constants, feature flags, and shared column definitions."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

# =============================================================================
# Board Connection Settings
# =============================================================================
BOARD_API_URL = "https://api.trello.com/1"
DEFAULT_BOARD_ID = "638d769884c52b05235a2310"
TIMEZONE = "Asia/Ho_Chi_Minh"

# Audit-log action types requested with every card fetch
BOARD_ACTION_TYPES: Sequence[str] = (
    "createCard",
    "updateCard",
    "commentCard",
    "addMemberToCard",
    "removeMemberFromCard",
)
BOARD_ACTIONS_LIMIT = 1000
BOARD_CARD_FIELDS: Sequence[str] = (
    "name",
    "idList",
    "idMembers",
    "labels",
    "dueComplete",
    "due",
    "dateCompleted",
    "shortUrl",
)
BOARD_CACHE_TTL_SECONDS = 300.0

# =============================================================================
# Status Lists
# =============================================================================
# Well-known list ids on the support board
STATUS_LISTS: dict[str, str] = {
    "DEV_PENDING": "63c7b1a68e5576001577d65c",
    "TS_PENDING": "66262386cb856f894f7cdca2",
    "WAITING_PERMISSION": "63c7d18b4fe38a004885aadf",
    "WAITING_CONFIRMATION": "63f489b961f3a274163459a2",
    "TS_DONE": "66d7d254bdad4fb0a354495a",
    "DEV_DONE": "663ae7d6feac5f2f8d7a1c86",
}

# Fallback list table used when reference.yaml has no `lists` section
DEFAULT_LISTS: dict[str, str] = {
    STATUS_LISTS["DEV_PENDING"]: "Waiting to fix (from dev)",
    STATUS_LISTS["TS_PENDING"]: "New Issues",
    STATUS_LISTS["WAITING_PERMISSION"]: "Update workflow required or Waiting for access",
    STATUS_LISTS["WAITING_CONFIRMATION"]: "Waiting for Customer's Confirmation (SLA: 2 days)",
    STATUS_LISTS["TS_DONE"]: "Done",
    STATUS_LISTS["DEV_DONE"]: "Fix done from dev",
}

# Status boxes on the cards detail page, in display order: (title, list key, colour)
STATUS_BOXES: Sequence[tuple[str, str, str]] = (
    ("Dev Pending", "DEV_PENDING", "#ff9800"),
    ("TS Pending", "TS_PENDING", "#1976d2"),
    ("Waiting Permission", "WAITING_PERMISSION", "#9c27b0"),
    ("Waiting Confirmation", "WAITING_CONFIRMATION", "#00897b"),
    ("TS Done", "TS_DONE", "#2e7d32"),
    ("Dev Done", "DEV_DONE", "#5d4037"),
)

UNKNOWN_LIST_NAME = "Unknown List"

# =============================================================================
# Timeline Landmarks
# Literal strings matched against the audit log. Matching is case-insensitive.
# =============================================================================
NEW_ISSUES_LIST_NAME = "new issues"  # equality against the list a card leaves
DONE_ISSUE_MARKER = "done issue"  # substring of the closing comment
DEV_WAITING_LIST_NAME = "Waiting to fix (from dev)"  # exact list a card enters

APP_LABEL_PREFIX = "App:"

# =============================================================================
# Shifts
# Half-open local-hour ranges: [start, end)
# =============================================================================
SHIFT_TABLE: Sequence[tuple[int, int, str]] = (
    (0, 4, "Ca1"),
    (4, 8, "Ca2"),
    (8, 12, "Ca3"),
    (12, 16, "Ca4"),
    (16, 18, "Ca5.1"),
    (18, 20, "Ca5.2"),
    (20, 24, "Ca6"),
)
FINE_SHIFT_LABELS: Sequence[str] = tuple(label for _, _, label in SHIFT_TABLE)

# Fine labels folded together in the coarse presentation
SPLIT_SHIFTS: dict[str, str] = {
    "Ca5.1": "Ca5",
    "Ca5.2": "Ca5",
}
COARSE_SHIFT_LABELS: Sequence[str] = ("Ca1", "Ca2", "Ca3", "Ca4", "Ca5", "Ca6")

# =============================================================================
# Heatmap Colour Bands
# Upper bounds (inclusive) of bands 0..5; anything above the last is band 6.
# =============================================================================
HEATMAP_BAND_UPPER_BOUNDS: Sequence[int] = (0, 2, 5, 10, 15, 20)

COMPLETED_PALETTE: Sequence[str] = (
    "#f1f5f9",
    "#dcfce7",
    "#bbf7d0",
    "#86efac",
    "#4ade80",
    "#16a34a",
    "#14532d",
)
CREATED_PALETTE: Sequence[str] = (
    "#f1f5f9",
    "#dbeafe",
    "#bfdbfe",
    "#93c5fd",
    "#60a5fa",
    "#2563eb",
    "#1e3a8a",
)

# Samples listed per heatmap cell tooltip (aggregation itself keeps all samples)
HEATMAP_TOOLTIP_SAMPLES = 5

# =============================================================================
# Resolution Time Buckets (minutes, half-open)
# =============================================================================
TIME_GROUPS: Sequence[tuple[str, float, float]] = (
    ("<1h", 0, 60),
    ("1–4h", 60, 240),
    ("4–8h", 240, 480),
    ("8–12h", 480, 720),
    ("12–24h", 720, 1440),
    (">24h", 1440, float("inf")),
)

TIMING_FIELDS: Sequence[str] = (
    "resolution_time",
    "first_action_time",
    "ts_resolution_time",
)

# =============================================================================
# Customer Confirmation SLA
# =============================================================================
WAITING_CONFIRMATION_LIST_ID = STATUS_LISTS["WAITING_CONFIRMATION"]
CONFIRMATION_SLA_DAYS = 2

# =============================================================================
# UI Default Values
# =============================================================================
DEFAULT_DATE_RANGE_DAYS: int = 7  # Default lookback for the resolution-time page
DEFAULT_TOP_N: int = 15  # Default number of entries in leaderboards

CARD_CORE_COLUMNS: Sequence[str] = (
    "id",
    "name",
    "list_name",
    "members",
    "apps",
    "created",
    "completed",
    "is_due_complete",
    "resolution_time",
    "first_action_time",
    "ts_resolution_time",
)

DISPLAY_ORDER_CARD_LIST: Sequence[str] = (
    "Card",
    "name",
    "list_name",
    "members",
    "apps",
    "created",
    "completed",
    "resolution_time",
    "first_action_time",
    "ts_resolution_time",
)


@dataclass(slots=True)
class AppSettings:
    max_table_rows: int = 1000


SETTINGS = AppSettings()
