"""Convenience launcher for the Streamlit app.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``ticket_app/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

import logging
from importlib import import_module
from pathlib import Path

import streamlit as st

from ticket_app.app import SERVICE_KEY, main

st.set_page_config(layout="wide")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("run_dashboard")


def _auto_init_card_service():
    """Initialize the board service from Streamlit secrets if available."""
    if SERVICE_KEY in st.session_state:
        return

    from ticket_app.pages.setup import board_secret

    key = board_secret("BOARD_KEY")
    token = board_secret("BOARD_TOKEN")
    board_id = board_secret("BOARD_ID")

    if key and token:
        st.sidebar.info("Secrets found, attempting to connect to the board...")
        from ticket_app.core.board_client import BoardAPI
        from ticket_app.core.service import CardService

        api = BoardAPI(key, token, board_id=board_id) if board_id else BoardAPI(key, token)
        try:
            api.fetch_board()
        except RuntimeError as e:
            st.sidebar.error(f"Board connection failed: {e}")
            return
        st.session_state["board_id"] = api.board_id
        st.session_state[SERVICE_KEY] = CardService(api)
        st.sidebar.success("Board connection successful!")
    else:
        st.sidebar.warning("Board secrets not found. Please use the Setup page.")


PAGES_DIR = Path(__file__).parent / "ticket_app" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"ticket_app.pages.{py.stem}"
    try:
        import_module(mod_name)
    except ImportError:  # pragma: no cover
        logger.exception("Failed importing page %s", mod_name)

_auto_init_card_service()

if __name__ == "__main__":
    main()
