"""Application service: Update Order/Sale Status use case.

Closing an order or completing a sale freezes its lines.
"""

from __future__ import annotations

from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.exceptions import EntityNotFoundError, ValidationError
from shopledger.domain.model.document import (
    DocumentKind,
    DocumentRef,
    OrderStatus,
    SaleStatus,
)


class UpdateStatusHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(self, ref: DocumentRef, status: str) -> None:
        new_status = self._parse_status(ref.kind, status)

        def work(session):
            document = session.get_document(ref)
            if document is None:
                raise EntityNotFoundError(f"{ref} not found")
            document.change_status(new_status)
            session.save_document(document)

        self._coordinator.run(work, f"update status of {ref}")

    @staticmethod
    def _parse_status(kind: DocumentKind, status: str):
        enum = OrderStatus if kind is DocumentKind.ORDER else SaleStatus
        try:
            return enum(status.upper())
        except ValueError:
            allowed = ", ".join(s.value for s in enum)
            raise ValidationError(
                f"Unknown {kind.value.lower()} status '{status}' (expected one of {allowed})"
            ) from None
