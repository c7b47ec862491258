"""Dashboard entry point: page registry and sidebar router."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import streamlit as st

SETUP_PAGE = "Setup / Connection"
SERVICE_KEY = "card_service"

PAGE_ORDER: tuple[str, ...] = (
    "Cards Detail",  # daily board view with filters and heatmaps
    "Resolution Time",  # timing roll-ups over a date range
    SETUP_PAGE,
)

PAGES: dict[str, Callable[[], None]] = {}


def register_page(label: str):
    def decorator(func):
        existing = PAGES.get(label)
        if existing is not None and existing.__qualname__ != func.__qualname__:
            raise ValueError(f"Page {label!r} already registered by {existing.__module__}")
        PAGES[label] = func
        return func

    return decorator


def page_order(labels: Iterable[str], connected: bool) -> tuple[list[str], int]:
    """Sidebar order of the registered pages and the index selected by default.

    Known pages come first in PAGE_ORDER, then any others alphabetically.
    Without a board connection the setup page is preselected.
    """
    labels = list(labels)
    ordered = [name for name in PAGE_ORDER if name in labels]
    ordered += sorted(name for name in labels if name not in PAGE_ORDER)
    if not connected and SETUP_PAGE in ordered:
        return ordered, ordered.index(SETUP_PAGE)
    return ordered, 0


def main():
    st.sidebar.title("Support Board Analytics")
    if not PAGES:
        st.write("No pages registered yet.")
        return
    connected = SERVICE_KEY in st.session_state
    pages, default = page_order(PAGES, connected)
    if connected:
        st.sidebar.caption(f"Board: {st.session_state.get('board_id') or 'connected'}")
    else:
        st.sidebar.caption("Not connected to a board")
    page = st.sidebar.selectbox("Page", pages, index=default)
    PAGES[page]()


if __name__ == "__main__":
    main()
