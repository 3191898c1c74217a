"""API request/response Pydantic schemas.

These are the *API-layer* schemas — thin wrappers that define the HTTP
contract. Route code maps them onto the listener dataclasses.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from addrhooks.listener.models import AnnotatedInput, AnnotatedOutput, AnnotatedTransaction

_MAX_AMOUNT = 2**64 - 1


class SuccessResponse(BaseModel):
    """Standard success envelope."""

    status: str = "success"
    data: Any = None


class ErrorResponse(BaseModel):
    """Standard error body ``{"code": "...", "message": "..."}``."""

    code: str
    message: str


# ---------------------------------------------------------------------------
# Callback registration
# ---------------------------------------------------------------------------


class AddressCallbackRequest(BaseModel):
    """Body for add/remove address callback."""

    address: str
    url: str


class AddressRequest(BaseModel):
    """Body for listing the callbacks of an address."""

    address: str


# ---------------------------------------------------------------------------
# Transaction intake
# ---------------------------------------------------------------------------


class AnnotatedEntry(BaseModel):
    """One annotated input or output."""

    address: str
    asset_id: str
    amount: int = Field(ge=0, le=_MAX_AMOUNT)


class TransactionRequest(BaseModel):
    """A confirmed transaction with annotated inputs and outputs."""

    tx_id: str = Field(min_length=1)
    inputs: list[AnnotatedEntry] = Field(default_factory=list)
    outputs: list[AnnotatedEntry] = Field(default_factory=list)

    def to_transaction(self) -> AnnotatedTransaction:
        """Convert to the listener's transaction type."""
        return AnnotatedTransaction(
            tx_id=self.tx_id,
            inputs=tuple(
                AnnotatedInput(address=i.address, asset_id=i.asset_id, amount=i.amount)
                for i in self.inputs
            ),
            outputs=tuple(
                AnnotatedOutput(address=o.address, asset_id=o.asset_id, amount=o.amount)
                for o in self.outputs
            ),
        )
