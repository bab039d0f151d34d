"""
Request Sequencing

Guards against out-of-order responses: every request takes a ticket from a
per-channel monotonic counter, and a response is only applied if its ticket
is still the latest one issued on that channel.
"""

import logging
import threading
from typing import Dict

logger = logging.getLogger(__name__)


class RequestSequencer:
    """Thread-safe monotonic ticket issuer, one counter per channel."""

    def __init__(self):
        self._lock = threading.Lock()
        self._latest: Dict[str, int] = {}

    def issue(self, channel: str = "default") -> int:
        """Issue the next ticket for channel."""
        with self._lock:
            ticket = self._latest.get(channel, 0) + 1
            self._latest[channel] = ticket
            return ticket

    def is_current(self, channel: str, ticket: int) -> bool:
        """True if no newer ticket has been issued on channel."""
        with self._lock:
            return self._latest.get(channel, 0) == ticket

    def accept(self, channel: str, ticket: int) -> bool:
        """Like is_current, but logs discarded responses."""
        current = self.is_current(channel, ticket)
        if not current:
            logger.info(f"Discarding stale response on '{channel}' (ticket {ticket})")
        return current
