"""V1 transaction intake and delivery log endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from addrhooks.api.dependencies import get_engine
from addrhooks.api.schemas import SuccessResponse, TransactionRequest
from addrhooks.engine.client import HookEngine  # noqa: TC001

router = APIRouter(tags=["transactions"])


@router.post("/transactions", status_code=202)
async def submit_transaction(
    body: TransactionRequest,
    engine: Annotated[HookEngine, Depends(get_engine)],
) -> SuccessResponse:
    """Queue a confirmed, annotated transaction for callback processing.

    ``accepted`` is False only when the listener runs with the ``drop``
    policy and its queue is full.
    """
    accepted = await engine.listener.submit(body.to_transaction())
    return SuccessResponse(data={"accepted": accepted})


@router.get("/deliveries")
async def list_deliveries(
    engine: Annotated[HookEngine, Depends(get_engine)],
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
) -> SuccessResponse:
    """Return the most recent delivery outcomes and dead letters, newest first."""
    dispatcher = engine.dispatcher
    outcomes = dispatcher.outcomes()[-limit:][::-1]
    dead = dispatcher.dead_letters()[-limit:][::-1]
    return SuccessResponse(
        data={
            "pending": dispatcher.pending,
            "outcomes": [r.to_dict() for r in outcomes],
            "dead_letters": [r.to_dict() for r in dead],
        }
    )
