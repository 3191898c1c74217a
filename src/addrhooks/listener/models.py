"""Listener data types.

- ``AnnotatedInput`` / ``AnnotatedOutput`` — transaction legs enriched with
  address, asset identifier and amount
- ``AnnotatedTransaction`` — a confirmed transaction carrying its legs
- ``CallbackPayload`` — body POSTed to a registered callback URL
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class AnnotatedInput:
    """A transaction input resolved to the address that funded it."""

    address: str
    asset_id: str
    amount: int


@dataclass(frozen=True)
class AnnotatedOutput:
    """A transaction output resolved to the address it pays."""

    address: str
    asset_id: str
    amount: int


@dataclass(frozen=True)
class AnnotatedTransaction:
    """A confirmed transaction whose inputs and outputs are already annotated."""

    tx_id: str
    inputs: tuple[AnnotatedInput, ...] = field(default_factory=tuple)
    outputs: tuple[AnnotatedOutput, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CallbackPayload:
    """Notification sent to each callback URL of a paid address."""

    asset_id: str
    amount: int
    address: str
    tx_id: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict in wire order."""
        return asdict(self)
