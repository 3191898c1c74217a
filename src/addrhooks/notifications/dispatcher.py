"""Callback delivery — bounded worker pool with retries and an outcome log.

Each qualifying (address, URL) pair becomes a delivery on a bounded queue.
A fixed set of workers POSTs deliveries, retrying transport failures with
exponential backoff. A destination that exhausts its retries is suspended for
a while; deliveries to it are dead-lettered without a network attempt.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from addrhooks.errors.hook_errors import DeliveryError

if TYPE_CHECKING:
    from collections.abc import Callable

    from addrhooks.config.settings import DispatcherConfig
    from addrhooks.listener.models import CallbackPayload
    from addrhooks.metrics.collector import EngineMetrics

logger = logging.getLogger(__name__)


class DeliveryStatus(enum.StrEnum):
    """Terminal outcome of a delivery."""

    DELIVERED = "delivered"
    FAILED = "failed"
    DROPPED = "dropped"


@dataclass(frozen=True)
class DeliveryRecord:
    """Outcome log entry for one delivery."""

    url: str
    payload: CallbackPayload
    status: DeliveryStatus
    attempts: int
    error: str = ""
    finished_at: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict."""
        return {
            "url": self.url,
            "payload": self.payload.to_dict(),
            "status": str(self.status),
            "attempts": self.attempts,
            "error": self.error,
            "finished_at": self.finished_at,
        }


@dataclass(frozen=True)
class _Delivery:
    url: str
    payload: CallbackPayload


class Dispatcher:
    """Delivers callback payloads to registered URLs.

    Usage::

        dispatcher = Dispatcher(config.dispatcher)
        await dispatcher.start()
        dispatcher.enqueue("https://example.com/hook", payload)
        ...
        await dispatcher.stop()
    """

    def __init__(
        self,
        config: DispatcherConfig,
        *,
        metrics: EngineMetrics | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._metrics = metrics
        self._transport = transport
        self._clock = clock
        self._queue: asyncio.Queue[_Delivery] = asyncio.Queue(maxsize=config.queue_size)
        self._workers: list[asyncio.Task[None]] = []
        self._client: httpx.AsyncClient | None = None
        self._running = False
        self._suspended_until: dict[str, float] = {}
        self._outcomes: deque[DeliveryRecord] = deque(maxlen=config.outcome_log_size)
        self._dead_letters: deque[DeliveryRecord] = deque(maxlen=config.outcome_log_size)

    @property
    def is_running(self) -> bool:
        """Whether the worker pool is running."""
        return self._running

    @property
    def pending(self) -> int:
        """Number of deliveries waiting for a worker."""
        return self._queue.qsize()

    async def start(self) -> None:
        """Create the HTTP client and spawn the workers."""
        if self._running:
            return
        self._running = True
        self._client = httpx.AsyncClient(
            timeout=self._config.timeout,
            verify=self._config.verify_tls,
            headers={
                "Content-Type": "application/json",
                "Referer": self._config.referer,
            },
            transport=self._transport,
        )
        self._workers = [
            asyncio.create_task(self._worker(), name=f"dispatch-worker-{i}")
            for i in range(self._config.workers)
        ]
        if not self._config.verify_tls:
            logger.warning("Callback TLS certificate verification is disabled")
        logger.info("Dispatcher started with %d workers", len(self._workers))

    async def stop(self) -> None:
        """Cancel the workers and close the HTTP client.

        Deliveries still queued are abandoned.
        """
        if not self._running:
            return
        self._running = False
        for task in self._workers:
            task.cancel()
        for task in self._workers:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._workers = []
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        logger.info("Dispatcher stopped")

    async def join(self) -> None:
        """Wait until every queued delivery has reached a terminal outcome."""
        await self._queue.join()

    def enqueue(self, url: str, payload: CallbackPayload) -> bool:
        """Queue a delivery without waiting (returns False if it was dropped)."""
        try:
            self._queue.put_nowait(_Delivery(url=url, payload=payload))
        except asyncio.QueueFull:
            logger.warning("Delivery queue full, dropping callback to %s", url)
            self._finish(url, payload, DeliveryStatus.DROPPED, 0, "delivery queue full")
            return False
        return True

    def is_suspended(self, url: str) -> bool:
        """Whether deliveries to *url* are currently suspended."""
        until = self._suspended_until.get(url)
        if until is None:
            return False
        if self._clock() >= until:
            del self._suspended_until[url]
            return False
        return True

    def outcomes(self) -> list[DeliveryRecord]:
        """Most recent delivery outcomes, oldest first."""
        return list(self._outcomes)

    def dead_letters(self) -> list[DeliveryRecord]:
        """Most recent failed or dropped deliveries, oldest first."""
        return list(self._dead_letters)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    async def post(self, url: str, payload: CallbackPayload) -> None:
        """POST *payload* to *url* once.

        Neither the response status nor the body is inspected.

        Raises:
            DeliveryError: On transport errors.
        """
        if self._client is None:
            msg = "dispatcher is not started"
            raise DeliveryError(msg, url=url)
        # Registered URLs may omit the scheme.
        target = url if "://" in url else f"http://{url}"
        try:
            response = await self._client.post(target, json=payload.to_dict())
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            msg = f"callback to {url} failed: {exc}"
            raise DeliveryError(msg, url=url) from exc
        if response.status_code >= 400:
            # Reached the endpoint; the status is informational only.
            logger.info("Callback to %s answered %d", url, response.status_code)

    async def deliver(self, url: str, payload: CallbackPayload) -> DeliveryRecord:
        """Deliver *payload* with retries and record the outcome."""
        if self.is_suspended(url):
            return self._finish(url, payload, DeliveryStatus.DROPPED, 0, "destination suspended")

        attempts = self._config.max_retries + 1
        last_error = ""
        for attempt in range(attempts):
            try:
                await self.post(url, payload)
            except DeliveryError as exc:
                last_error = exc.message
                logger.info(
                    "Address callback failed: %s (attempt %d/%d)", exc, attempt + 1, attempts
                )
                if attempt < attempts - 1:
                    await asyncio.sleep(self._config.retry_delay * 2**attempt)
                continue
            return self._finish(url, payload, DeliveryStatus.DELIVERED, attempt + 1)

        self._suspended_until[url] = self._clock() + self._config.suspend_seconds
        logger.warning(
            "Callback %s suspended for %d seconds after %d failed attempts",
            url,
            self._config.suspend_seconds,
            attempts,
        )
        return self._finish(url, payload, DeliveryStatus.FAILED, attempts, last_error)

    async def _worker(self) -> None:
        while True:
            delivery = await self._queue.get()
            try:
                await self.deliver(delivery.url, delivery.payload)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Dispatch worker error for %s", delivery.url)
            finally:
                self._queue.task_done()

    def _finish(
        self,
        url: str,
        payload: CallbackPayload,
        status: DeliveryStatus,
        attempts: int,
        error: str = "",
    ) -> DeliveryRecord:
        record = DeliveryRecord(
            url=url,
            payload=payload,
            status=status,
            attempts=attempts,
            error=error,
            finished_at=self._clock(),
        )
        self._outcomes.append(record)
        if status is not DeliveryStatus.DELIVERED:
            self._dead_letters.append(record)
            logger.warning(
                "Callback %s for tx %s %s: %s", url, payload.tx_id, status, error
            )
        else:
            logger.debug("Callback %s for tx %s delivered", url, payload.tx_id)
        if self._metrics is not None:
            self._metrics.record_dispatch(str(status))
        return record
