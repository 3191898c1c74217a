"""HookEngine — central engine owning the stores, listener and dispatcher."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from addrhooks.callbacks.store import CallbackStore
    from addrhooks.config.settings import AppConfig
    from addrhooks.kvstore.client import KVClient
    from addrhooks.listener.annotator import TxAnnotator
    from addrhooks.listener.seen import SeenTransactionStore
    from addrhooks.listener.service import TxListener
    from addrhooks.metrics.collector import EngineMetrics
    from addrhooks.notifications.dispatcher import Dispatcher
    from addrhooks.taskmanager.manager import TaskManager

logger = logging.getLogger(__name__)

CALLBACK_NAMESPACE = "cb:"
SEEN_TX_NAMESPACE = "seen:"

_ERR_NOT_INITIALIZED = "Engine not initialized. Call initialize() first."


class HookEngine:
    """Central engine that owns all services and infrastructure.

    Provides lifecycle management: ``initialize()`` connects the store and
    starts the dispatcher, listener and reaper; ``close()`` stops them in
    reverse order.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        annotator: TxAnnotator | None = None,
        metrics: EngineMetrics | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize engine with configuration.

        Args:
            config: Application configuration.
            annotator: Transaction annotation collaborator. Defaults to
                :class:`PreAnnotatedAnnotator`.
            metrics: Metrics sink; a fresh registry is created if omitted.
            transport: Optional httpx transport for outbound callbacks.
        """
        self._config = config
        self._annotator = annotator
        self._metrics = metrics
        self._transport = transport
        self._initialized = False

        self._kv: KVClient | None = None
        self._callbacks: CallbackStore | None = None
        self._seen: SeenTransactionStore | None = None
        self._dispatcher: Dispatcher | None = None
        self._listener: TxListener | None = None
        self._task_manager: TaskManager | None = None

    async def initialize(self) -> None:
        """Connect the store and start background services.

        Raises:
            RuntimeError: If already initialized.
        """
        if self._initialized:
            msg = "Engine already initialized"
            raise RuntimeError(msg)

        from addrhooks.callbacks.store import CallbackStore
        from addrhooks.kvstore.client import KVClient
        from addrhooks.listener.annotator import PreAnnotatedAnnotator
        from addrhooks.listener.seen import SeenTransactionStore
        from addrhooks.listener.service import TxListener
        from addrhooks.metrics.collector import EngineMetrics
        from addrhooks.notifications.dispatcher import Dispatcher

        if self._metrics is None:
            self._metrics = EngineMetrics()

        self._kv = KVClient(self._config.store)
        await self._kv.connect()
        logger.info("Store connected (%s)", self._config.store.engine)

        self._callbacks = CallbackStore(self._kv.namespace(CALLBACK_NAMESPACE))
        self._seen = SeenTransactionStore(self._kv.namespace(SEEN_TX_NAMESPACE))

        self._dispatcher = Dispatcher(
            self._config.dispatcher,
            metrics=self._metrics,
            transport=self._transport,
        )
        await self._dispatcher.start()

        self._listener = TxListener(
            self._callbacks,
            self._seen,
            self._annotator or PreAnnotatedAnnotator(),
            self._dispatcher,
            queue_size=self._config.listener.queue_size,
            full_policy=self._config.listener.full_policy,
            metrics=self._metrics,
        )
        await self._listener.start()

        if self._config.reaper.enabled:
            from functools import partial

            from addrhooks.taskmanager.manager import CronJob, TaskManager
            from addrhooks.taskmanager.tasks import REAPER_JOB, task_purge_seen_transactions

            self._task_manager = TaskManager(metrics=self._metrics)
            self._task_manager.register(
                CronJob(
                    name=REAPER_JOB,
                    handler=partial(
                        task_purge_seen_transactions,
                        self._seen,
                        ttl=self._config.reaper.ttl_seconds,
                        metrics=self._metrics,
                    ),
                    period=self._config.reaper.period,
                )
            )
            await self._task_manager.start()

        self._initialized = True

    async def close(self) -> None:
        """Gracefully shut down all services and connections.

        Can be called multiple times (idempotent).
        """
        if not self._initialized:
            return

        if self._task_manager is not None:
            await self._task_manager.stop()
            self._task_manager = None

        if self._listener is not None:
            await self._listener.stop()
            self._listener = None

        if self._dispatcher is not None:
            await self._dispatcher.stop()
            self._dispatcher = None

        if self._kv is not None:
            await self._kv.close()
            self._kv = None

        self._callbacks = None
        self._seen = None
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        """Check if engine is initialized."""
        return self._initialized

    @property
    def config(self) -> AppConfig:
        """Return the application configuration."""
        return self._config

    @property
    def metrics(self) -> EngineMetrics | None:
        """Return the metrics sink (None before initialize)."""
        return self._metrics

    @property
    def callbacks(self) -> CallbackStore:
        """Return the callback registry."""
        self._ensure_initialized()
        assert self._callbacks is not None
        return self._callbacks

    @property
    def seen(self) -> SeenTransactionStore:
        """Return the seen-transaction store."""
        self._ensure_initialized()
        assert self._seen is not None
        return self._seen

    @property
    def dispatcher(self) -> Dispatcher:
        """Return the callback dispatcher."""
        self._ensure_initialized()
        assert self._dispatcher is not None
        return self._dispatcher

    @property
    def listener(self) -> TxListener:
        """Return the transaction listener."""
        self._ensure_initialized()
        assert self._listener is not None
        return self._listener

    @property
    def task_manager(self) -> TaskManager | None:
        """Return the task manager (None when the reaper is disabled)."""
        return self._task_manager

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
