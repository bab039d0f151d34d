"""
Plant Administration UI Components

Forms for creating and deleting projects, users, machines and work orders,
and for the plant-wide shutdown of active sessions.
"""

import streamlit as st
import logging
from typing import Callable

from core.api.client import GraphQLClient
from core.api.errors import DashboardError
from core.api import fetchers
from ui.log_display import LogCollector

logger = logging.getLogger(__name__)


def _run_action(log_collector: LogCollector, success_message: str, action: Callable[[], object]) -> bool:
    """
    Run an admin mutation and report the outcome as a toast and log entry.

    Validation problems (ValueError) and API failures (DashboardError) are
    shown to the user; nothing is retried.
    """
    try:
        action()
    except ValueError as e:
        st.warning(f"⚠️ {e}")
        return False
    except DashboardError as e:
        logger.error(f"Admin action failed: {e}", exc_info=True)
        log_collector.error(f"{success_message} failed: {e}")
        st.error(f"❌ {e}")
        return False

    log_collector.success(success_message)
    st.toast(f"✅ {success_message}")
    return True


def _confirmed(key: str, label: str) -> bool:
    return st.checkbox(label, key=key)


def render_work_order_tab(client: GraphQLClient, log_collector: LogCollector):
    st.subheader("🗂️ Delete work order")
    with st.form("delete_work_order", clear_on_submit=True):
        work_order = st.text_input("Work order")
        confirm = _confirmed("confirm_delete_work_order", "I understand this cannot be undone")
        if st.form_submit_button("Delete", type="primary"):
            if not confirm:
                st.warning("Please confirm the deletion.")
            else:
                _run_action(
                    log_collector,
                    f"Work order '{work_order.strip()}' deleted",
                    lambda: fetchers.delete_work_order(client, work_order),
                )


def render_project_tab(client: GraphQLClient, log_collector: LogCollector):
    st.subheader("📁 New project")
    with st.form("create_project", clear_on_submit=True):
        name = st.text_input("Project name")
        description = st.text_area("Description")
        if st.form_submit_button("Save", type="primary"):
            _run_action(
                log_collector,
                f"Project '{name.strip()}' created",
                lambda: fetchers.create_project(client, name, description),
            )

    st.divider()
    st.subheader("🗑️ Delete project")
    with st.form("delete_project", clear_on_submit=True):
        name = st.text_input("Project name", key="delete_project_name")
        confirm = _confirmed("confirm_delete_project", "I understand this cannot be undone")
        if st.form_submit_button("Delete"):
            if not confirm:
                st.warning("Please confirm the deletion.")
            else:
                _run_action(
                    log_collector,
                    f"Project '{name.strip()}' deleted",
                    lambda: fetchers.delete_project(client, name),
                )


def render_user_tab(client: GraphQLClient, log_collector: LogCollector):
    st.subheader("👤 New user")
    with st.form("create_user", clear_on_submit=True):
        code = st.text_input("Operator number")
        name = st.text_input("Full name")
        if st.form_submit_button("Save", type="primary"):
            _run_action(
                log_collector,
                f"User {code.strip()} created",
                lambda: fetchers.create_user(client, code, name),
            )

    st.divider()
    st.subheader("🗑️ Delete user")
    with st.form("delete_user", clear_on_submit=True):
        code = st.text_input("Operator number", key="delete_user_code")
        confirm = _confirmed("confirm_delete_user", "I understand this cannot be undone")
        if st.form_submit_button("Delete"):
            if not confirm:
                st.warning("Please confirm the deletion.")
            else:
                _run_action(
                    log_collector,
                    f"User {code.strip()} deleted",
                    lambda: fetchers.delete_user(client, code),
                )


def render_machine_tab(client: GraphQLClient, log_collector: LogCollector):
    st.subheader("🔧 New machine")
    with st.form("create_machine", clear_on_submit=True):
        name = st.text_input("Machine name")
        if st.form_submit_button("Save", type="primary"):
            _run_action(
                log_collector,
                f"Machine '{name.strip()}' created",
                lambda: fetchers.create_machine(client, name),
            )

    st.divider()
    st.subheader("🗑️ Delete machine")
    with st.form("delete_machine", clear_on_submit=True):
        name = st.text_input("Machine name", key="delete_machine_name")
        confirm = _confirmed("confirm_delete_machine", "I understand this cannot be undone")
        if st.form_submit_button("Delete"):
            if not confirm:
                st.warning("Please confirm the deletion.")
            else:
                _run_action(
                    log_collector,
                    f"Machine '{name.strip()}' deleted",
                    lambda: fetchers.delete_machine(client, name),
                )


def render_shutdown_tab(client: GraphQLClient, log_collector: LogCollector):
    st.subheader("⛔ Plant shutdown")
    st.caption("Ends every active work session on the plant.")
    confirm = _confirmed("confirm_shutdown", "Pause the whole plant")
    if st.button("Run shutdown", type="primary", disabled=not confirm):
        try:
            closed = fetchers.shutdown_active_sessions(client)
        except DashboardError as e:
            logger.error(f"Shutdown failed: {e}", exc_info=True)
            log_collector.error(f"Shutdown failed: {e}")
            st.error(f"❌ {e}")
            return
        log_collector.warning(f"Shutdown completed: {closed} active sessions ended")
        st.success(f"Shutdown completed. {closed} active sessions ended.")


def render_admin_page(client: GraphQLClient, log_collector: LogCollector):
    """Render the administration tabs."""
    st.header("🏭 Plant administration")
    tabs = st.tabs(["Work order", "Project", "User", "Machine", "Shutdown"])
    renderers = [
        render_work_order_tab,
        render_project_tab,
        render_user_tab,
        render_machine_tab,
        render_shutdown_tab,
    ]
    for tab, render in zip(tabs, renderers):
        with tab:
            render(client, log_collector)
