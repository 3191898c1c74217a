"""Transaction annotation collaborator.

The listener never inspects raw transactions itself; it asks a
``TxAnnotator`` for the address, asset and amount of every input and output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from addrhooks.listener.models import AnnotatedTransaction

if TYPE_CHECKING:
    from addrhooks.listener.models import AnnotatedInput, AnnotatedOutput


class TxAnnotator(Protocol):
    """Resolves a confirmed transaction into annotated inputs and outputs."""

    def tx_id(self, tx: Any) -> str: ...

    async def annotate(
        self, tx: Any
    ) -> tuple[list[AnnotatedInput], list[AnnotatedOutput]]: ...


class PreAnnotatedAnnotator:
    """Annotator for transactions that arrive already annotated."""

    def tx_id(self, tx: Any) -> str:
        """Return the id of an :class:`AnnotatedTransaction`."""
        return _expect(tx).tx_id

    async def annotate(  # noqa: ASYNC910
        self, tx: Any
    ) -> tuple[list[AnnotatedInput], list[AnnotatedOutput]]:
        """Return the inputs and outputs carried by the transaction."""
        annotated = _expect(tx)
        return list(annotated.inputs), list(annotated.outputs)


def _expect(tx: Any) -> AnnotatedTransaction:
    if not isinstance(tx, AnnotatedTransaction):
        msg = f"expected AnnotatedTransaction, got {type(tx).__name__}"
        raise TypeError(msg)
    return tx
