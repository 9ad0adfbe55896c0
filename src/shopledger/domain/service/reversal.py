"""Domain service: Reversal.

Undo a previous draw recorded as an allocation line.  The units go back
to the lot they came from; if that lot no longer exists a new RETURN
lot is created at the line's frozen cost so no stock value is lost.
Service lines carry no stock and restore nothing.
"""

from __future__ import annotations

from dataclasses import dataclass

from shopledger.domain.model.document import AllocationLine, DocumentRef
from shopledger.domain.model.stock_lot import LotProvenance, StockLot


@dataclass(frozen=True)
class ReversalPlan:
    restored_lot: StockLot | None = None
    new_lot: StockLot | None = None

    @property
    def is_noop(self) -> bool:
        return self.restored_lot is None and self.new_lot is None


def plan_reversal(
    line: AllocationLine, lot: StockLot | None, source: DocumentRef
) -> ReversalPlan:
    """Decide how to give ``line.quantity`` units back.

    ``lot`` is the current state of ``line.lot_id`` (None if deleted).
    The returned lots are already mutated; the caller stages the writes.
    """
    if line.is_service:
        return ReversalPlan()

    if lot is not None:
        lot.restore(line.quantity)
        return ReversalPlan(restored_lot=lot)

    replacement = StockLot.receive(
        item_id=line.item_id,
        quantity=line.quantity,
        cost_price=line.unit_cost,
        provenance=LotProvenance.RETURN,
        notes=f"Returned from {source}",
    )
    replacement.source_kind = source.kind.value
    replacement.source_id = source.id
    replacement.original_lot_id = line.lot_id
    return ReversalPlan(new_lot=replacement)
