"""Task manager — background cron scheduling.

Provides ``TaskManager`` for periodic background tasks such as purging
expired seen-transaction records. Uses ``asyncio`` tasks for scheduling.
"""

from __future__ import annotations

from addrhooks.taskmanager.manager import CronJob, TaskManager

__all__ = ["CronJob", "TaskManager"]
