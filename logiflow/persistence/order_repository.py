"""Order placement and listing through the document store."""

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from ..constants import ORDERS_COLLECTION
from ..exceptions import InvalidOrder
from ..models.order import Order, OrderDraft
from ..utils.clock import Clock, system_clock
from .document_store import DocumentStore

logger = logging.getLogger(__name__)


class OrderRepository:
    """Places orders into, and reads them back from, the ``orders`` collection."""

    def __init__(self, documents: DocumentStore, clock: Clock = system_clock):
        self.documents = documents
        self.clock = clock

    def create_order(self, payload: Dict[str, Any]) -> Order:
        """
        Validate and store an order payload.

        Args:
            payload: Order-shaped JSON (camelCase or snake_case) without id/createdAt

        Returns:
            The stored order with its new id and creation time

        Raises:
            InvalidOrder: If the payload does not validate
            StoreUnavailable: If the document store fails
        """
        try:
            draft = OrderDraft.model_validate(payload)
        except ValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            logger.warning(f"Rejected order payload: invalid fields {fields}")
            raise InvalidOrder("Invalid order payload", {"fields": ", ".join(fields)}) from e

        created_at = self.clock()
        record = draft.model_dump(mode="json", by_alias=True)
        record["createdAt"] = created_at.isoformat()

        order_id = self.documents.create(ORDERS_COLLECTION, record)
        logger.info(f"Placed order {order_id} for customer {draft.customer_id}")
        return Order(id=order_id, created_at=created_at, **draft.model_dump())

    def place_order(self, payload: Dict[str, Any]) -> str:
        """Validate and store an order payload; returns the new order id."""
        return self.create_order(payload).id

    def list_orders(self) -> List[Dict[str, Any]]:
        """Stored order records, newest first."""
        return self.documents.list(ORDERS_COLLECTION, order_by="createdAt", descending=True)

    def get_order(self, order_id: str) -> Order:
        """
        Load one stored order.

        Raises:
            InvalidOrder: If no such order exists
        """
        record = self.documents.get(ORDERS_COLLECTION, order_id)
        if record is None:
            raise InvalidOrder("Unknown order", {"order_id": order_id})
        return Order.model_validate(record)
