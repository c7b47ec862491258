"""Board REST API client (cards with embedded audit-log actions)."""

from __future__ import annotations

import hashlib
import json
import logging
import time
from datetime import datetime
from typing import Any

import requests

from .config import (
    BOARD_ACTION_TYPES,
    BOARD_ACTIONS_LIMIT,
    BOARD_API_URL,
    BOARD_CACHE_TTL_SECONDS,
    BOARD_CARD_FIELDS,
    DEFAULT_BOARD_ID,
)

logger = logging.getLogger(__name__)


class BoardAPI:
    def __init__(
        self,
        key: str,
        token: str,
        board_id: str = DEFAULT_BOARD_ID,
        base_url: str = BOARD_API_URL,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.board_id = board_id
        self.session = session or requests.Session()
        self.timeout = timeout
        self._auth = {"key": key, "token": token}
        # Simple in-memory cache: {(hash): (timestamp, data)}
        self._cache: dict[str, tuple[float, Any]] = {}
        self._cache_ttl = BOARD_CACHE_TTL_SECONDS

    def clear_cache(self) -> None:
        """Reset the in-memory request cache."""
        self._cache.clear()

    def _cache_key(self, path: str, params: dict[str, Any]) -> str:
        payload = {"path": path, "params": params}
        return hashlib.sha256(json.dumps(payload, sort_keys=True, default=str).encode()).hexdigest()

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        params = dict(params or {})
        key = self._cache_key(path, params)
        now = time.time()
        cached = self._cache.get(key)
        if cached and (now - cached[0]) < self._cache_ttl:
            return cached[1]
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self.session.get(url, params={**params, **self._auth}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RuntimeError(f"Board request to {path} failed: {exc}") from exc
        if resp.status_code >= 400:
            raise RuntimeError(f"Board request to {path} failed {resp.status_code}: {resp.text[:200]}")
        data = resp.json()
        self._cache[key] = (now, data)
        return data

    def fetch_board(self) -> dict[str, Any]:
        """Board name and URL; doubles as a credentials check."""
        data = self._get(f"boards/{self.board_id}", {"fields": "name,url"})
        if not isinstance(data, dict):
            raise RuntimeError(f"Unexpected board payload type: {type(data)!r}")
        return data

    def search_cards(self, since: datetime, before: datetime) -> list[dict[str, Any]]:
        """All board cards with their audit-log actions limited to [since, before)."""
        params = {
            "fields": ",".join(BOARD_CARD_FIELDS),
            "actions": ",".join(BOARD_ACTION_TYPES),
            "actions_limit": BOARD_ACTIONS_LIMIT,
            "action_memberCreator_fields": "fullName",
            "action_member_fields": "fullName",
            "actions_since": since.isoformat(),
            "actions_before": before.isoformat(),
        }
        data = self._get(f"boards/{self.board_id}/cards/all", params)
        if not isinstance(data, list):
            raise RuntimeError(f"Unexpected card payload type: {type(data)!r}")
        logger.debug("Board %s returned %d card(s)", self.board_id, len(data))
        return data

    def fetch_card_raw(self, card_id: str) -> dict[str, Any]:
        params = {
            "fields": ",".join(BOARD_CARD_FIELDS),
            "actions": ",".join(BOARD_ACTION_TYPES),
            "actions_limit": BOARD_ACTIONS_LIMIT,
            "action_memberCreator_fields": "fullName",
            "action_member_fields": "fullName",
        }
        data = self._get(f"cards/{card_id}", params)
        if not isinstance(data, dict):
            raise RuntimeError(f"Unexpected card payload type for {card_id}: {type(data)!r}")
        return data
