"""Application service: Show Order/Sale use case (query)."""

from __future__ import annotations

from shopledger.application.dto import DocumentDTO, DocumentLineDTO
from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.exceptions import EntityNotFoundError
from shopledger.domain.model.document import DocumentRef, LedgerDocument, Sale


class ShowDocumentHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(self, ref: DocumentRef) -> DocumentDTO:
        document = self._coordinator.read(lambda session: session.get_document(ref))
        if document is None:
            raise EntityNotFoundError(f"{ref} not found")
        return self._to_dto(document)

    @staticmethod
    def _to_dto(document: LedgerDocument) -> DocumentDTO:
        problem = diagnosis = ""
        if isinstance(document, Sale):
            subtotal, tax_total, total = document.subtotal, document.tax_total, document.total
        else:
            subtotal = total = document.parts_total
            tax_total = None
            problem, diagnosis = document.problem_description, document.diagnosis
        return DocumentDTO(
            kind=document.kind.value,
            id=document.id,
            customer_name=document.customer_name,
            status=document.status.value,
            lines=[
                DocumentLineDTO(
                    item_id=line.item_id,
                    name=line.name,
                    quantity=line.quantity,
                    unit_price=str(line.unit_price),
                    unit_cost=str(line.unit_cost),
                    lot_id=line.lot_id,
                )
                for line in document.lines
            ],
            cost_total=str(document.cost_total),
            subtotal=str(subtotal),
            tax_total=str(tax_total) if tax_total is not None else "-",
            total=str(total),
            problem_description=problem,
            diagnosis=diagnosis,
        )
