"""
Activity Log UI Component

Keeps a per-session log of data refreshes and admin actions and renders it
in a collapsible panel.
"""

import streamlit as st
from typing import List, Dict
from datetime import datetime

LEVEL_MARKERS = {
    "success": "🟢",
    "warning": "🟡",
    "error": "🔴",
    "info": "🔵",
}


class LogCollector:
    """Session-scoped list of activity messages, newest appended last."""

    def __init__(self, session_key: str = "activity_log", max_entries: int = 200):
        self.session_key = session_key
        self.max_entries = max_entries
        if session_key not in st.session_state:
            st.session_state[session_key] = []

    def info(self, message: str):
        self._append("info", message)

    def success(self, message: str):
        self._append("success", message)

    def warning(self, message: str):
        self._append("warning", message)

    def error(self, message: str):
        self._append("error", message)

    def _append(self, level: str, message: str):
        entries = st.session_state[self.session_key]
        entries.append({
            "timestamp": datetime.now().strftime("%H:%M:%S"),
            "level": level,
            "message": message,
        })
        # Drop the oldest entries once over capacity
        if len(entries) > self.max_entries:
            del entries[:len(entries) - self.max_entries]

    def clear(self):
        st.session_state[self.session_key] = []

    def entries(self) -> List[Dict]:
        return st.session_state.get(self.session_key, [])


def render_activity_log(log_collector: LogCollector):
    """
    Render the activity log as a collapsible panel, newest first.

    Args:
        log_collector: LogCollector instance with messages
    """
    entries = log_collector.entries()
    if not entries:
        return

    with st.expander(f"📋 Activity log ({len(entries)} messages)", expanded=False):
        for entry in reversed(entries):
            marker = LEVEL_MARKERS.get(entry.get("level"), "⚪")
            st.markdown(f"{marker} `[{entry.get('timestamp', '')}]` {entry.get('message', '')}")

        if st.button("Clear log", key=f"{log_collector.session_key}_clear"):
            log_collector.clear()
            st.rerun()
