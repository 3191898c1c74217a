"""CORS middleware configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

if TYPE_CHECKING:
    from fastapi import FastAPI


def setup_cors(app: FastAPI, origins: list[str] | None = None) -> None:
    """Add CORS middleware for the registration API.

    All origins are allowed unless *origins* narrows them.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
