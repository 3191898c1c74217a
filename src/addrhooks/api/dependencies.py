"""FastAPI dependency injection helpers.

Usage in a route::

    @router.post("/list-address-callbacks")
    async def list_callbacks(
        engine: Annotated[HookEngine, Depends(get_engine)],
    ) -> ...:
        ...
"""

from __future__ import annotations

from fastapi import Request

from addrhooks.engine.client import HookEngine  # noqa: TC001
from addrhooks.errors.definitions import ErrEngineUnavailable


def get_engine(request: Request) -> HookEngine:
    """Retrieve the engine from ``app.state``.

    The engine is stored on ``app.state.engine`` during lifespan startup.

    Raises:
        HookError: 503 if the engine is not initialized.
    """
    engine: HookEngine | None = getattr(request.app.state, "engine", None)
    if engine is None or not engine.is_initialized:
        raise ErrEngineUnavailable
    return engine
