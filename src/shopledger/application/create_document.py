"""Application services: Create Order and Create Sale use cases."""

from __future__ import annotations

from shopledger.application.transaction import TransactionCoordinator
from shopledger.domain.model.document import DocumentRef, Order, Sale


class CreateOrderHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(
        self,
        customer_id: str,
        customer_name: str,
        *,
        device_type: str = "",
        brand: str = "",
        device_model: str = "",
        serial_number: str = "",
        problem_description: str = "",
    ) -> DocumentRef:
        """Open a repair order with no parts."""
        order = Order.create(
            customer_id,
            customer_name,
            device_type=device_type,
            brand=brand,
            device_model=device_model,
            serial_number=serial_number,
            problem_description=problem_description,
        )
        saved = self._coordinator.run(
            lambda session: session.save_document(order), "create order"
        )
        return saved.ref


class CreateSaleHandler:

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    def handle(self, customer_id: str, customer_name: str, notes: str = "") -> DocumentRef:
        """Start a draft sale with no items."""
        sale = Sale.create(customer_id, customer_name, notes)
        saved = self._coordinator.run(
            lambda session: session.save_document(sale), "create sale"
        )
        return saved.ref
