"""
Tracking API Errors
"""

from typing import Any, Dict, List, Optional


class DashboardError(Exception):
    """Base class for errors surfaced to the dashboard."""


class QueryError(DashboardError):
    """A GraphQL request failed in transport, over HTTP, or in the response body."""

    def __init__(
        self,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message)
        self.errors = errors or []
        self.status_code = status_code


class AuthenticationError(DashboardError):
    """Login or token refresh was rejected or could not reach the server."""
