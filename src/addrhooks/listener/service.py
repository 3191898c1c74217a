"""TxListener — single-consumer pipeline from confirmed transactions to callbacks.

One consumer task takes transactions off a bounded queue in arrival order,
drops those already seen, and hands a payload per registered URL of every
genuinely paid address to the dispatcher. The loop never waits for delivery.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import TYPE_CHECKING, Any, Protocol

from addrhooks.config.settings import QueueFullPolicy
from addrhooks.listener.models import CallbackPayload

if TYPE_CHECKING:
    from collections.abc import Callable

    from addrhooks.callbacks.store import CallbackStore
    from addrhooks.listener.annotator import TxAnnotator
    from addrhooks.listener.seen import SeenTransactionStore
    from addrhooks.metrics.collector import EngineMetrics

logger = logging.getLogger(__name__)

MAX_TX_QUEUE = 10_000


class CallbackSink(Protocol):
    """Anything that accepts a payload for a URL without blocking."""

    def enqueue(self, url: str, payload: CallbackPayload) -> bool: ...


class TxListener:
    """Listens for confirmed transactions and notifies watching callbacks.

    Usage::

        listener = TxListener(callbacks, seen, annotator, dispatcher)
        await listener.start()
        await listener.submit(tx)
        ...
        await listener.stop()
    """

    def __init__(
        self,
        callbacks: CallbackStore,
        seen: SeenTransactionStore,
        annotator: TxAnnotator,
        sink: CallbackSink,
        *,
        queue_size: int = MAX_TX_QUEUE,
        full_policy: QueueFullPolicy = QueueFullPolicy.BLOCK,
        metrics: EngineMetrics | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._callbacks = callbacks
        self._seen = seen
        self._annotator = annotator
        self._sink = sink
        self._full_policy = QueueFullPolicy(full_policy)
        self._metrics = metrics
        self._clock = clock
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=queue_size)
        self._task: asyncio.Task[None] | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the consumer loop is running."""
        return self._running

    @property
    def pending(self) -> int:
        """Number of transactions waiting to be processed."""
        return self._queue.qsize()

    async def start(self) -> None:
        """Start the consumer loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._consume(), name="tx-listener")
        logger.info("TxListener started (queue=%d, full=%s)", self._queue.maxsize, self._full_policy)

    async def stop(self) -> None:
        """Stop the consumer loop; queued transactions are abandoned."""
        if not self._running:
            return
        self._running = False
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info("TxListener stopped")

    async def join(self) -> None:
        """Wait until every submitted transaction has been processed."""
        await self._queue.join()

    async def submit(self, tx: Any) -> bool:
        """Hand a confirmed transaction to the listener.

        With the ``block`` policy this waits for queue space and always
        returns True. With ``drop`` a full queue discards the transaction and
        returns False.
        """
        if self._full_policy is QueueFullPolicy.BLOCK:
            await self._queue.put(tx)
        else:
            try:
                self._queue.put_nowait(tx)
            except asyncio.QueueFull:
                logger.warning("Tx queue full, dropping transaction")
                self._record("dropped")
                return False
        self._update_depth()
        return True

    async def _consume(self) -> None:
        """Read transactions in arrival order and process them one at a time."""
        while True:
            tx = await self._queue.get()
            try:
                await self.process(tx)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Failed to process transaction")
                self._record("failed")
            finally:
                self._queue.task_done()
                self._update_depth()

    async def process(self, tx: Any) -> int:
        """Process one transaction; return the number of callbacks handed off.

        Dedup-store failures are logged and processing continues. An
        annotation failure skips the transaction.
        """
        tx_id = self._annotator.tx_id(tx)
        logger.info("Processing a new tx %s", tx_id)

        try:
            already_seen = await self._seen.contains(tx_id)
        except Exception:
            logger.exception("Seen-tx lookup failed for %s", tx_id)
            already_seen = False
        if already_seen:
            logger.debug("Tx %s already processed", tx_id)
            self._record("duplicate")
            return 0

        try:
            await self._seen.record(tx_id, int(self._clock()))
        except Exception:
            logger.exception("Could not record seen tx %s", tx_id)

        try:
            inputs, outputs = await self._annotator.annotate(tx)
        except Exception:
            logger.exception("Could not annotate tx %s, skipping", tx_id)
            self._record("failed")
            return 0

        for inp in inputs:
            logger.debug("Input %s: asset %s amount %d", inp.address, inp.asset_id, inp.amount)
        input_addresses = {inp.address for inp in inputs}

        dispatched = 0
        for out in outputs:
            logger.debug("Output %s: asset %s amount %d", out.address, out.asset_id, out.amount)
            # Change and self-transfers are not payments to the address.
            if out.address in input_addresses:
                continue
            try:
                urls = await self._callbacks.list(out.address)
            except Exception as exc:
                logger.debug("No callbacks for output %s: %s", out.address, exc)
                continue
            if not urls:
                continue
            payload = CallbackPayload(
                asset_id=out.asset_id,
                amount=out.amount,
                address=out.address,
                tx_id=tx_id,
            )
            for url in urls:
                self._sink.enqueue(url, payload)
                dispatched += 1

        self._record("processed")
        return dispatched

    def _record(self, result: str) -> None:
        if self._metrics is not None:
            self._metrics.record_transaction(result)

    def _update_depth(self) -> None:
        if self._metrics is not None:
            self._metrics.set_queue_depth(self._queue.qsize())
