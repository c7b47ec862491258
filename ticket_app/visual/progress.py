"""Fetch progress banner for Streamlit pages."""

from __future__ import annotations

import streamlit as st


class ProgressReporter:
    """Info banner, status line and progress bar shown while cards are fetched.

    ``callback`` matches ``CardService`` progress callbacks. Once ``complete``
    or ``error`` has been called further updates are ignored.
    """

    def __init__(self, title: str):
        self._box = st.container()
        self._box.info(title)
        self._status = self._box.empty()
        self._bar = self._box.progress(0.0)
        self._done = False

    def callback(self, message: str, current: int | None = None, total: int | None = None) -> None:
        if self._done:
            return
        self._status.write(message)
        if total and current is not None:
            self._bar.progress(min(max(current / total, 0.0), 1.0))

    def complete(self, message: str) -> None:
        if self._done:
            return
        self._bar.progress(1.0)
        self._box.success(message)
        self._done = True

    def error(self, message: str) -> None:
        if self._done:
            return
        self._box.error(message)
        self._done = True
