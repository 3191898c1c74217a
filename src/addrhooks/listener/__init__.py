"""Transaction listener — dedup, paid-address resolution and callback fan-out."""

from __future__ import annotations

from addrhooks.listener.annotator import PreAnnotatedAnnotator, TxAnnotator
from addrhooks.listener.models import (
    AnnotatedInput,
    AnnotatedOutput,
    AnnotatedTransaction,
    CallbackPayload,
)
from addrhooks.listener.seen import SeenTransactionStore
from addrhooks.listener.service import TxListener

__all__ = [
    "AnnotatedInput",
    "AnnotatedOutput",
    "AnnotatedTransaction",
    "CallbackPayload",
    "PreAnnotatedAnnotator",
    "SeenTransactionStore",
    "TxAnnotator",
    "TxListener",
]
