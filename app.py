"""
Shop-Floor Tracking Dashboard - Main Application

Live views of the manufacturing shop backed by the tracking API:
- Operator timeline: one operator's recorded work for a day
- Machine board: machines with an active or paused process, colored by delay
- Project progress: completion and bottlenecks per project
- Administration: projects, users, machines, work orders, plant shutdown
"""

import streamlit as st
import logging
import io
from typing import Optional

from config import Config
from utils.config import load_config, validate_config
from core.api.client import GraphQLClient
from core.api.errors import DashboardError
from core.api.fetchers import (
    fetch_operators,
    fetch_operator_day,
    fetch_operation_processes,
    fetch_project_operations,
)
from core.api.sequencing import RequestSequencer
from core.calculations.machines import board_stats, build_machine_board, filter_machines
from core.calculations.progress import aggregate_progress, progress_to_dataframe
from core.calculations.timeline import (
    build_timeline,
    filter_by_project,
    intervals_to_dataframe,
    unique_projects,
)
from core.models import OperatorDay
from ui.admin_forms import render_admin_page
from ui.log_display import LogCollector, render_activity_log
from ui.login import current_auth, logout, render_login_form
from ui.metrics_display import (
    display_board_stats,
    display_interval_table,
    display_machine_board,
    display_operator_summary,
    display_project_progress,
    display_tier_legend,
    display_timeline_chart,
)
from ui.selectors import render_machine_filters, render_operator_selector, render_project_filter

# Configure logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

PAGE_OPERATOR = "👷 Operator timeline"
PAGE_MACHINES = "🛠️ Machine board"
PAGE_PROGRESS = "📦 Project progress"
PAGE_ADMIN = "🏭 Administration"


def open_client() -> GraphQLClient:
    """New GraphQL client carrying the session's auth context, if any."""
    return GraphQLClient(auth=current_auth())


def show_error_panel(message: str, log_collector: LogCollector):
    """Blocking error panel for failed queries; the user reloads to retry."""
    log_collector.error(message)
    st.error(f"❌ {message}")
    st.stop()


def to_csv(df) -> str:
    csv_buffer = io.StringIO()
    df.to_csv(csv_buffer, index=False)
    return csv_buffer.getvalue()


def render_operator_page(log_collector: LogCollector):
    st.header(PAGE_OPERATOR)
    st.caption("Recorded work and real times per operator.")

    with open_client() as client:
        try:
            with st.spinner("Loading operators..."):
                operators = fetch_operators(client)
        except DashboardError as e:
            logger.error(f"Error loading operators: {e}", exc_info=True)
            show_error_panel(f"Error loading operators: {e}", log_collector)

        selected, day = render_operator_selector(operators)
        if selected is None:
            return

        # Only the response to the latest selection may replace what is shown
        sequencer: RequestSequencer = st.session_state.setdefault("request_sequencer", RequestSequencer())
        ticket = sequencer.issue("operator_day")

        try:
            with st.spinner("Loading activities..."):
                operator_day: Optional[OperatorDay] = fetch_operator_day(client, selected.code, day)
        except (DashboardError, ValueError) as e:
            logger.error(f"Error loading processes: {e}", exc_info=True)
            show_error_panel(f"Error loading processes: {e}", log_collector)

    if sequencer.accept("operator_day", ticket):
        st.session_state["operator_day"] = operator_day
    else:
        operator_day = st.session_state.get("operator_day")

    assignments = operator_day.assignments if operator_day else []
    timeline = build_timeline(assignments)
    operator_name = operator_day.name if operator_day and operator_day.name else selected.name
    log_collector.info(
        f"Loaded {len(timeline.intervals)} intervals for {selected.code} on {day}"
    )

    display_operator_summary(selected.code, operator_name, day, timeline)
    st.divider()

    display_timeline_chart(timeline.intervals)

    st.subheader("🧾 Operation detail")
    project = render_project_filter(unique_projects(timeline.intervals))
    visible = filter_by_project(timeline.intervals, project)
    display_interval_table(visible)
    st.caption("Only processes with time records are shown.")

    if visible:
        st.download_button(
            label="📥 Download intervals (CSV)",
            data=to_csv(intervals_to_dataframe(visible)),
            file_name=f"timeline_{selected.code}_{day}.csv",
            mime="text/csv",
        )


@st.fragment(run_every=Config.MACHINE_REFRESH_SECONDS)
def machine_board_fragment():
    """Machine board, refetched on a fixed interval while the page is open."""
    log_collector = LogCollector()
    try:
        with open_client() as client:
            records = fetch_operation_processes(client)
    except DashboardError as e:
        logger.error(f"Error loading machine board: {e}", exc_info=True)
        log_collector.error(f"Error loading machine board: {e}")
        st.error(f"❌ Error loading machine board: {e}")
        return

    machines = build_machine_board(records, Config.DEFAULT_CYCLE_TARGET_MIN)
    display_board_stats(board_stats(machines))

    term, status = render_machine_filters()
    display_tier_legend()
    display_machine_board(filter_machines(machines, term, status))


def render_machine_page():
    st.header(PAGE_MACHINES)
    st.caption(f"Refreshes every {Config.MACHINE_REFRESH_SECONDS} s.")
    machine_board_fragment()


@st.fragment(run_every=Config.PROGRESS_REFRESH_SECONDS)
def project_progress_fragment():
    """Project progress accordion, refetched on a fixed interval."""
    log_collector = LogCollector()
    try:
        with open_client() as client:
            operations = fetch_project_operations(client)
    except DashboardError as e:
        logger.error(f"Error loading project progress: {e}", exc_info=True)
        log_collector.error(f"Error loading project progress: {e}")
        st.error(f"❌ Error loading project progress: {e}")
        return

    projects = aggregate_progress(operations)
    display_project_progress(projects)

    if projects:
        st.download_button(
            label="📥 Download progress (CSV)",
            data=to_csv(progress_to_dataframe(projects)),
            file_name="project_progress.csv",
            mime="text/csv",
        )


def render_progress_page():
    st.header(PAGE_PROGRESS)
    st.caption("Each process is shown in its current flow.")
    project_progress_fragment()


def render_admin(log_collector: LogCollector):
    if current_auth() is None:
        if render_login_form() is None:
            return
        st.rerun()

    with st.sidebar:
        if st.button("Sign out"):
            logout()
            st.rerun()

    with open_client() as client:
        render_admin_page(client, log_collector)


def main():
    # Streamlit page config
    st.set_page_config(
        page_title="Shop-Floor Tracking",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    # Load configuration
    load_config()

    # Validate configuration
    config_errors = validate_config()
    if config_errors:
        st.error("❌ Configuration errors detected:")
        for error in config_errors:
            st.error(error)
        st.stop()

    log_collector = LogCollector()

    with st.sidebar:
        st.title("🏭 Shop-Floor Tracking")
        page = st.radio(
            "View",
            [PAGE_OPERATOR, PAGE_MACHINES, PAGE_PROGRESS, PAGE_ADMIN],
            key="page",
        )

    if page == PAGE_OPERATOR:
        render_operator_page(log_collector)
    elif page == PAGE_MACHINES:
        render_machine_page()
    elif page == PAGE_PROGRESS:
        render_progress_page()
    else:
        render_admin(log_collector)

    st.divider()
    render_activity_log(log_collector)


main()
