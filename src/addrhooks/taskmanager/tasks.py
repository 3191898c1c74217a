"""Background task definitions — cron job handlers.

- ``seen_tx_reaper`` (hourly) — purge seen-transaction records past their TTL
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from addrhooks.listener.seen import SeenTransactionStore
    from addrhooks.metrics.collector import EngineMetrics

logger = logging.getLogger(__name__)

REAPER_JOB = "seen_tx_reaper"
REAPER_PERIOD = 60 * 60  # 1 hour
SEEN_TX_TTL = 48 * 60 * 60  # 48 hours


async def task_purge_seen_transactions(
    seen: SeenTransactionStore,
    *,
    ttl: int = SEEN_TX_TTL,
    metrics: EngineMetrics | None = None,
    now: float | None = None,
) -> int:
    """Delete seen-transaction records older than *ttl* seconds.

    Keeps the dedup store bounded; runs independently of the listener loop.
    Returns the number of records removed (0 if the scan failed).
    """
    logger.info("Cleaning up seen-transaction records")
    current = int(time.time() if now is None else now)
    try:
        purged = await seen.purge_expired(current, ttl)
    except Exception:
        logger.exception("seen_tx_reaper failed")
        return 0
    if purged:
        logger.info("Purged %d expired seen-transaction records", purged)
    if metrics is not None:
        metrics.record_purged(purged)
    return purged
