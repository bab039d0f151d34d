"""
Selection UI Components

Operator/date pickers for the operator timeline and the filter controls of
the machine board.
"""

import streamlit as st
import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

import pytz

from config import Config
from core.calculations.machines import STATUS_FILTER_ALL
from core.calculations.timeline import ALL_PROJECTS, valid_operators
from core.models import STATUS_PAUSED, STATUS_RUNNING, Operator

logger = logging.getLogger(__name__)


def local_today() -> date:
    """Today's date in the shop's time zone."""
    return datetime.now(pytz.timezone(Config.TIMEZONE)).date()


def render_operator_selector(
    operators: List[Operator],
    key_prefix: str = "operator"
) -> Tuple[Optional[Operator], Optional[date]]:
    """
    Render operator and date pickers.

    Operators with an empty code cannot be queried and are not offered; the
    first remaining operator is selected by default.

    Args:
        operators: All operators returned by the API
        key_prefix: Unique key prefix for Streamlit widgets

    Returns:
        Tuple of (selected operator or None, selected date or None)
    """
    choices = valid_operators(operators)

    col1, col2, col3 = st.columns([2, 2, 1])

    with col1:
        if not choices:
            st.info("No operators with a code are registered.")
            selected = None
        else:
            selected = st.selectbox(
                "👤 Operator",
                options=choices,
                format_func=lambda op: f"{op.code} · {op.name}",
                key=f"{key_prefix}_select",
            )

    date_key = f"{key_prefix}_date"
    if date_key not in st.session_state:
        st.session_state[date_key] = local_today()

    with col3:
        st.write("")
        if st.button("🔄 Today", key=f"{key_prefix}_today"):
            st.session_state[date_key] = local_today()

    with col2:
        selected_day = st.date_input("📅 Date", key=date_key, format="DD/MM/YYYY")

    return selected, selected_day


def render_project_filter(projects: List[str], key: str = "project_filter") -> str:
    """
    Render the project filter for the interval table.

    Returns:
        Selected project name, or ALL_PROJECTS
    """
    options = [ALL_PROJECTS] + projects
    return st.selectbox(
        "Project",
        options=options,
        format_func=lambda p: "All projects" if p == ALL_PROJECTS else p,
        key=key,
    )


def render_machine_filters(key_prefix: str = "machines") -> Tuple[str, str]:
    """
    Render the machine board search box and status filter.

    Returns:
        Tuple of (search term, status filter)
    """
    status_labels = {
        STATUS_FILTER_ALL: "All active",
        STATUS_RUNNING: "Running",
        STATUS_PAUSED: "Paused",
    }

    col1, col2 = st.columns([3, 1])
    with col1:
        term = st.text_input(
            "Search",
            placeholder="Search machine, piece or operator...",
            key=f"{key_prefix}_search",
        )
    with col2:
        status = st.selectbox(
            "Status",
            options=list(status_labels),
            format_func=status_labels.get,
            key=f"{key_prefix}_status",
        )
    return term, status
