"""
GraphQL Client

Posts GraphQL documents to the tracking API over HTTP and unwraps the
`data` member of the response. Transport problems, HTTP errors and GraphQL
`errors` arrays are all raised as QueryError.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from config import Config
from core.api.auth import AuthContext
from core.api.errors import QueryError

logger = logging.getLogger(__name__)


class GraphQLClient:
    """Synchronous GraphQL client with an explicitly injected auth context."""

    def __init__(
        self,
        url: Optional[str] = None,
        auth: Optional[AuthContext] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Args:
            url: GraphQL endpoint (defaults to Config.GRAPHQL_URL)
            auth: Authentication context; requests are anonymous without it
            timeout: Request timeout in seconds (defaults to Config)
            transport: Optional httpx transport, mainly for tests
        """
        self.url = url or Config.GRAPHQL_URL
        self.auth = auth
        self._http = httpx.Client(
            timeout=timeout if timeout is not None else Config.API_TIMEOUT_SECONDS,
            transport=transport,
        )
        self.stats = {"requests": 0, "errors": 0}

    def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        operation_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Execute a query or mutation.

        Args:
            query: GraphQL document
            variables: Variables for the document
            operation_name: Operation to run when the document holds several

        Returns:
            The response's `data` object (empty dict if null)

        Raises:
            QueryError: On connection failures, HTTP errors or GraphQL errors
        """
        payload: Dict[str, Any] = {"query": query, "variables": variables or {}}
        if operation_name:
            payload["operationName"] = operation_name

        headers = {"Content-Type": "application/json"}
        if self.auth is not None:
            if self.auth.is_expired():
                logger.warning("Sending request with an expired access token")
            headers.update(self.auth.headers())

        self.stats["requests"] += 1
        label = operation_name or "anonymous operation"

        try:
            response = self._http.post(self.url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            self.stats["errors"] += 1
            logger.error(f"{label}: transport error: {e}")
            raise QueryError(f"Could not reach the tracking API: {e}") from e

        if response.status_code >= 400:
            self.stats["errors"] += 1
            logger.error(f"{label}: HTTP {response.status_code}")
            raise QueryError(
                f"Tracking API returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            self.stats["errors"] += 1
            raise QueryError("Tracking API returned a non-JSON response") from e

        if not isinstance(body, dict):
            self.stats["errors"] += 1
            raise QueryError("Tracking API returned an unexpected response shape")

        errors = body.get("errors")
        if errors:
            self.stats["errors"] += 1
            messages = "; ".join(
                err.get("message", str(err)) if isinstance(err, dict) else str(err)
                for err in errors
            )
            logger.error(f"{label}: GraphQL errors: {messages}")
            raise QueryError(messages, errors=errors, status_code=response.status_code)

        return body.get("data") or {}

    def close(self):
        self._http.close()

    def __enter__(self) -> "GraphQLClient":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
