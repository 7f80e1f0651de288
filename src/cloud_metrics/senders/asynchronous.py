"""Non-blocking metrics sender."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from random import Random

import httpx

from ..encoding import GA_ENDPOINT_URL, USER_AGENT
from ..events import Event
from .base import DEFAULT_TIMEOUT, REQUEST_HEADERS, BaseSender


logger = logging.getLogger(__name__)


class AsyncMetricsSender(BaseSender):
    """
    Sends metric reports asynchronously via the Google Analytics API.

    The sender runs its own event loop on a background thread and starts
    it on construction. send() schedules the request and returns at once.

    Every request ends in exactly one of three outcomes:
    - completed: the response status is checked; a bad status counts as failed
    - failed: transport error or bad status
    - cancelled: the request was cancelled before finishing (e.g. by close())

    Outcomes are only logged; they never reach the caller of send(). Use
    MetricsSender when failures must be visible.

    The owner must call close() (or use the sender as a context manager)
    to release the client and stop the background thread.
    """

    def __init__(
        self,
        analytics_id: str,
        client: httpx.AsyncClient | None = None,
        random: Random | None = None,
        *,
        endpoint_url: str = GA_ENDPOINT_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """
        Args:
            analytics_id: The Google Analytics ID to which reports are sent
            client: Async HTTP client to use. An injected client is bound
                to the sender's private event loop; close() stops that loop
                without closing the client, so the client is unusable
                afterwards and should only be discarded
            random: Random source for cache busting
        """
        super().__init__(analytics_id, random, endpoint_url=endpoint_url, timeout=timeout)
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=timeout)
        client.headers["User-Agent"] = USER_AGENT
        self.client = client

        self._lock = threading.Lock()
        self._pending: set[concurrent.futures.Future] = set()
        self._closed = False

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="cloud-metrics-sender",
            daemon=True,
        )
        self._thread.start()
        logger.info("Async metrics sender started")

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def send(self, event: Event) -> None:
        """
        Translate an event into a Google Analytics request and send it in
        the background.

        Encoding errors are raised here; delivery errors are only logged.

        Raises:
            RuntimeError: If the sender has been closed
        """
        body = self.build_body(event)
        with self._lock:
            if self._closed:
                raise RuntimeError("AsyncMetricsSender is closed")
            future = asyncio.run_coroutine_threadsafe(self._post(body), self._loop)
            self._pending.add(future)
        future.add_done_callback(self._on_done)

    async def _post(self, body: bytes) -> None:
        logger.debug("Sending metrics hit to %s", self.endpoint_url)
        try:
            response = await self.client.post(
                self.endpoint_url,
                content=body,
                headers=REQUEST_HEADERS,
            )
        except httpx.HTTPError as e:
            self._failed(e)
            return
        self._completed(response)

    def _completed(self, response: httpx.Response) -> None:
        try:
            # The body is irrelevant; only the status matters
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self._failed(e)

    def _failed(self, exc: Exception) -> None:
        logger.warning("Problem sending request to server: %s", exc)

    def _cancelled(self) -> None:
        logger.warning("Metrics-reporting HTTP request was cancelled.")

    def _on_done(self, future: concurrent.futures.Future) -> None:
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            self._cancelled()
        elif future.exception() is not None:
            self._failed(future.exception())

    def flush(self, timeout: float | None = None) -> bool:
        """
        Wait for requests sent so far to reach their outcome.

        Returns True if all of them finished within the timeout.
        """
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = concurrent.futures.wait(pending, timeout=timeout)
        return not not_done

    @property
    def pending(self) -> int:
        """Number of requests still in flight."""
        with self._lock:
            return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    async def _shutdown(self) -> None:
        current = asyncio.current_task()
        tasks = [t for t in asyncio.all_tasks() if t is not current]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if self._owns_client:
            await self.client.aclose()

    def close(self) -> None:
        """
        Cancel requests still in flight and stop the background loop.

        Safe to call more than once.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True

        asyncio.run_coroutine_threadsafe(self._shutdown(), self._loop).result()
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self._loop.close()
        logger.info("Async metrics sender stopped")
