"""
Authentication Context

Obtains and refreshes JWT access tokens from the tracking API and carries
them as an explicit context object that is handed to the GraphQL client.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import httpx

from config import Config
from core.api.errors import AuthenticationError
from core.calculations.durations import now_utc

logger = logging.getLogger(__name__)

TOKEN_PATH = "/api/token/"
REFRESH_PATH = "/api/token/refresh/"


@dataclass
class AuthContext:
    """Access token, optional refresh token and the instant the access token expires."""
    access_token: str
    expires_at: datetime
    refresh_token: Optional[str] = None

    def is_expired(self, now: Optional[datetime] = None, leeway_seconds: float = 0.0) -> bool:
        """True once the access token is (or within leeway will be) expired."""
        now = now or now_utc()
        return now + timedelta(seconds=leeway_seconds) >= self.expires_at

    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    @classmethod
    def from_token_response(
        cls,
        data: Dict[str, Any],
        lifetime_minutes: Optional[float] = None,
        refresh_token: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> "AuthContext":
        """
        Build a context from a token endpoint response body.

        Args:
            data: JSON body with 'access' and optionally 'refresh'
            lifetime_minutes: Access token lifetime (defaults to Config)
            refresh_token: Refresh token to keep when the response has none
            now: Issue instant (defaults to current UTC time)

        Raises:
            AuthenticationError: If the response carries no access token
        """
        access = data.get("access")
        if not access:
            raise AuthenticationError("Token response did not include an access token.")

        if lifetime_minutes is None:
            lifetime_minutes = Config.ACCESS_TOKEN_LIFETIME_MINUTES
        now = now or now_utc()

        return cls(
            access_token=access,
            expires_at=now + timedelta(minutes=lifetime_minutes),
            refresh_token=data.get("refresh") or refresh_token,
        )


def _post_token_request(
    path: str,
    payload: Dict[str, Any],
    base_url: Optional[str],
    http_client: Optional[httpx.Client]
) -> Dict[str, Any]:
    url = f"{(base_url or Config.API_BASE_URL).rstrip('/')}{path}"
    owns_client = http_client is None
    client = http_client or httpx.Client(timeout=Config.API_TIMEOUT_SECONDS)

    try:
        response = client.post(url, json=payload)
    except httpx.HTTPError as e:
        logger.error(f"Token request to {url} failed: {e}")
        raise AuthenticationError("Could not reach the server. Please try again.") from e
    finally:
        if owns_client:
            client.close()

    try:
        data = response.json()
    except ValueError:
        data = {}

    if response.status_code >= 400:
        message = data.get("detail") if isinstance(data, dict) else None
        logger.warning(f"Token request rejected with HTTP {response.status_code}")
        raise AuthenticationError(message or "Incorrect username or password.")

    if not isinstance(data, dict):
        raise AuthenticationError("Unexpected response from the token endpoint.")
    return data


def obtain_token(
    username: str,
    password: str,
    base_url: Optional[str] = None,
    http_client: Optional[httpx.Client] = None,
    lifetime_minutes: Optional[float] = None
) -> AuthContext:
    """
    Log in with username and password.

    Raises:
        AuthenticationError: On rejected credentials or connection problems
    """
    data = _post_token_request(
        TOKEN_PATH, {"username": username, "password": password}, base_url, http_client
    )
    logger.info(f"Obtained access token for user '{username}'")
    return AuthContext.from_token_response(data, lifetime_minutes)


def refresh_access_token(
    auth: AuthContext,
    base_url: Optional[str] = None,
    http_client: Optional[httpx.Client] = None,
    lifetime_minutes: Optional[float] = None
) -> AuthContext:
    """
    Exchange the refresh token for a new access token.

    Raises:
        AuthenticationError: If there is no refresh token or it was rejected
    """
    if not auth.refresh_token:
        raise AuthenticationError("Session expired. Please log in again.")

    data = _post_token_request(
        REFRESH_PATH, {"refresh": auth.refresh_token}, base_url, http_client
    )
    logger.info("Refreshed access token")
    return AuthContext.from_token_response(data, lifetime_minutes, refresh_token=auth.refresh_token)
