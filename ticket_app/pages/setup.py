"""Connection setup page: collect board credentials and initialize CardService."""

from __future__ import annotations

import streamlit as st

from ticket_app.app import SERVICE_KEY, SETUP_PAGE, register_page
from ticket_app.core.board_client import BoardAPI
from ticket_app.core.config import BOARD_CACHE_TTL_SECONDS, DEFAULT_BOARD_ID
from ticket_app.core.service import CardService


def board_secret(name: str) -> str | None:
    """Read a credential from the ``[board]`` secrets section, then the top level."""
    section = st.secrets.get("board", {})
    return section.get(name) or st.secrets.get(name)


@register_page(SETUP_PAGE)
def setup_page():
    st.title("Board Connection Setup")
    st.caption("Enter credentials (use secrets manager in production).")

    key = st.text_input("API Key", value=board_secret("BOARD_KEY") or "")
    token = st.text_input("API Token", type="password", value=board_secret("BOARD_TOKEN") or "")
    board_id = st.text_input(
        "Board ID",
        value=st.session_state.get("board_id") or board_secret("BOARD_ID") or DEFAULT_BOARD_ID,
    )
    ttl = st.number_input(
        "Client cache TTL (seconds)",
        min_value=60,
        max_value=3600,
        value=int(BOARD_CACHE_TTL_SECONDS),
    )
    init_btn = st.button("Initialize Connection", type="primary")

    if init_btn:
        if not (key and token and board_id):
            st.error("All fields required.")
            return
        api = BoardAPI(key, token, board_id=board_id)
        api._cache_ttl = float(ttl)
        try:
            board = api.fetch_board()
        except RuntimeError as exc:
            st.error(f"Failed to reach the board: {exc}")
            return
        st.session_state["board_id"] = board_id
        st.session_state[SERVICE_KEY] = CardService(api)
        st.success(f"Connected to board: {board.get('name') or board_id}")

    if SERVICE_KEY in st.session_state:
        st.info("CardService ready.")
