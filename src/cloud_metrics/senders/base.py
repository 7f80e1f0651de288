"""Base sender interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from random import Random, SystemRandom
from typing import TYPE_CHECKING, Any

from ..encoding import CONTENT_TYPE, GA_ENDPOINT_URL, USER_AGENT, build_post_body
from ..events import Event

if TYPE_CHECKING:
    from ..config import MetricsConfig


DEFAULT_TIMEOUT = 10.0

REQUEST_HEADERS = {
    "Content-Type": CONTENT_TYPE,
    "User-Agent": USER_AGENT,
}


class BaseSender(ABC):
    """
    Abstract base class for metrics senders.

    A sender holds a long-lived HTTP client and a random source, both
    shared by every send() call. Create one sender and reuse it rather
    than creating one per event.
    """

    def __init__(
        self,
        analytics_id: str,
        random: Random | None = None,
        *,
        endpoint_url: str = GA_ENDPOINT_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """
        Args:
            analytics_id: The Google Analytics ID to which reports are sent
            random: Random source for cache busting. Defaults to SystemRandom
            endpoint_url: Collection endpoint; only overridden for testing
            timeout: Request timeout in seconds
        """
        if analytics_id is None:
            raise TypeError("analytics_id must not be None")
        if not analytics_id:
            raise ValueError("analytics_id must not be empty")

        self.analytics_id = analytics_id
        self.random = random if random is not None else SystemRandom()
        self.endpoint_url = endpoint_url
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: MetricsConfig, **kwargs: Any):
        """Create a sender from a MetricsConfig."""
        return cls(
            config.analytics_id,
            endpoint_url=config.endpoint_url,
            timeout=config.timeout,
            **kwargs,
        )

    def build_body(self, event: Event) -> bytes:
        """Encode an event as a POST body for this sender's property."""
        return build_post_body(event, self.analytics_id, self.random)

    @abstractmethod
    def send(self, event: Event) -> None:
        """Report a single event."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the HTTP client."""
        ...

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
