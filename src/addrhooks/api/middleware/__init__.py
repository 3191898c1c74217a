"""API middleware — CORS."""

from __future__ import annotations

from addrhooks.api.middleware.cors import setup_cors

__all__ = ["setup_cors"]
