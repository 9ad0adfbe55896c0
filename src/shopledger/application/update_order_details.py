"""Application service: Update Order Details use case."""

from __future__ import annotations

from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.exceptions import EntityNotFoundError
from shopledger.domain.model.document import DocumentKind, DocumentRef


class UpdateOrderDetailsHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(
        self,
        order_id: str,
        *,
        problem_description: str | None = None,
        diagnosis: str | None = None,
    ) -> None:
        ref = DocumentRef(DocumentKind.ORDER, order_id)

        def work(session):
            order = session.get_document(ref)
            if order is None:
                raise EntityNotFoundError(f"{ref} not found")
            order.update_details(
                problem_description=problem_description, diagnosis=diagnosis
            )
            session.save_document(order)

        self._coordinator.run(work, f"update details of {ref}")
