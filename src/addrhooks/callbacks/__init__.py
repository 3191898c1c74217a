"""Callback registry — URL validation and the address → URL store."""

from __future__ import annotations

from addrhooks.callbacks.store import CallbackStore
from addrhooks.callbacks.validator import is_url

__all__ = ["CallbackStore", "is_url"]
