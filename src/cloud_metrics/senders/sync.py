"""Blocking metrics sender."""

from __future__ import annotations

import logging
from random import Random

import httpx

from ..encoding import GA_ENDPOINT_URL, USER_AGENT
from ..errors import MetricsCommunicationError
from ..events import Event
from .base import DEFAULT_TIMEOUT, REQUEST_HEADERS, BaseSender


logger = logging.getLogger(__name__)


class MetricsSender(BaseSender):
    """
    Sends metric reports via the Google Analytics API, blocking until the
    request completes.

    Usage:
        with MetricsSender("UA-12345-1") as sender:
            sender.send(event)

    Failures raise MetricsCommunicationError. For fire-and-forget
    reporting use AsyncMetricsSender.
    """

    def __init__(
        self,
        analytics_id: str,
        client: httpx.Client | None = None,
        random: Random | None = None,
        *,
        endpoint_url: str = GA_ENDPOINT_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """
        Args:
            analytics_id: The Google Analytics ID to which reports are sent
            client: HTTP client to use. Most callers should let the sender
                create its own; an injected client is not closed by close()
            random: Random source for cache busting
        """
        super().__init__(analytics_id, random, endpoint_url=endpoint_url, timeout=timeout)
        self._owns_client = client is None
        if client is None:
            client = httpx.Client(timeout=timeout)
        client.headers["User-Agent"] = USER_AGENT
        self.client = client

    def send(self, event: Event) -> None:
        """
        Translate an event into a Google Analytics request and send it.

        Raises:
            MetricsCommunicationError: If the request fails or the server
                answers with a non-2xx status
        """
        body = self.build_body(event)
        logger.debug("Sending metrics hit to %s", self.endpoint_url)
        try:
            response = self.client.post(
                self.endpoint_url,
                content=body,
                headers=REQUEST_HEADERS,
            )
            # The body is irrelevant; only the status matters
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise MetricsCommunicationError("Problem sending request to server") from e

    def close(self) -> None:
        if self._owns_client:
            self.client.close()
