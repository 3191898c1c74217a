"""Notifications — callback delivery to registered URLs.

Provides:
- ``Dispatcher`` — bounded worker pool POSTing payloads with retries
- ``DeliveryRecord`` — outcome log entry (delivered / failed / dropped)
"""

from __future__ import annotations

from addrhooks.notifications.dispatcher import DeliveryRecord, DeliveryStatus, Dispatcher

__all__ = [
    "DeliveryRecord",
    "DeliveryStatus",
    "Dispatcher",
]
