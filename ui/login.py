"""
Login UI Component

Username/password form that stores the resulting AuthContext in the
Streamlit session. The context is passed explicitly to the GraphQL client.
"""

import streamlit as st
import logging
from typing import Optional

from core.api.auth import AuthContext, obtain_token, refresh_access_token
from core.api.errors import AuthenticationError

logger = logging.getLogger(__name__)

AUTH_KEY = "auth_context"


def current_auth() -> Optional[AuthContext]:
    """
    Return a usable auth context, refreshing an expired access token once.

    Returns:
        AuthContext or None if the user must log in again
    """
    auth: Optional[AuthContext] = st.session_state.get(AUTH_KEY)
    if auth is None:
        return None

    if auth.is_expired(leeway_seconds=15):
        try:
            auth = refresh_access_token(auth)
        except AuthenticationError as e:
            logger.info(f"Session could not be refreshed: {e}")
            st.session_state.pop(AUTH_KEY, None)
            return None
        st.session_state[AUTH_KEY] = auth

    return auth


def logout():
    st.session_state.pop(AUTH_KEY, None)


def render_login_form() -> Optional[AuthContext]:
    """
    Render the login form.

    Returns:
        AuthContext after a successful login, otherwise None
    """
    st.subheader("🔐 Sign in")
    with st.form("login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if not submitted:
        return None

    if not username or not password:
        st.warning("Please enter username and password.")
        return None

    try:
        with st.spinner("Signing in..."):
            auth = obtain_token(username, password)
    except AuthenticationError as e:
        st.error(f"❌ {e}")
        return None

    st.session_state[AUTH_KEY] = auth
    return auth
