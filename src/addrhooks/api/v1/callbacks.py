"""V1 address callback registration endpoints.

Map 1:1 onto ``CallbackStore`` operations; registry errors surface verbatim
through the app's ``HookError`` handler.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from addrhooks.api.dependencies import get_engine
from addrhooks.api.schemas import AddressCallbackRequest, AddressRequest, SuccessResponse
from addrhooks.engine.client import HookEngine  # noqa: TC001


router = APIRouter(tags=["address-callbacks"])


@router.post("/add-address-callback")
async def add_address_callback(
    body: AddressCallbackRequest,
    engine: Annotated[HookEngine, Depends(get_engine)],
) -> SuccessResponse:
    """Register a callback URL for an address."""
    added = await engine.callbacks.add(body.address, body.url)
    return SuccessResponse(data=added)


@router.post("/list-address-callbacks")
async def list_address_callbacks(
    body: AddressRequest,
    engine: Annotated[HookEngine, Depends(get_engine)],
) -> SuccessResponse:
    """List the callback URLs registered for an address."""
    urls = await engine.callbacks.list(body.address)
    return SuccessResponse(data=urls)


@router.post("/remove-address-callback")
async def remove_address_callback(
    body: AddressCallbackRequest,
    engine: Annotated[HookEngine, Depends(get_engine)],
) -> SuccessResponse:
    """Remove a callback URL from an address."""
    await engine.callbacks.delete(body.address, body.url)
    return SuccessResponse(data=True)
