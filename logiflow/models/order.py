"""Customer order data models."""

from datetime import date as Date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..constants import PRIORITY_WEIGHTS
from .lifecycle import advance, is_behind


class OrderStatus(str, Enum):
    """Order lifecycle, in progression order."""
    PENDING = "pending"
    PROCESSING = "processing"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"


class OrderPriority(str, Enum):
    """Qualitative order priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class OrderItemStatus(str, Enum):
    """Order line lifecycle, in progression order."""
    PENDING = "pending"
    IN_PRODUCTION = "in-production"
    COMPLETED = "completed"


def priority_weight(priority: OrderPriority) -> int:
    """Sort weight for a priority: high=3, medium=2, low=1."""
    return PRIORITY_WEIGHTS[OrderPriority(priority).value]


class OrderItem(BaseModel):
    """
    A single product line on an order.

    Attributes:
        id: Line identifier
        product_id: Product ordered
        quantity: Units ordered
        status: Production status of this line
    """
    id: str = Field(..., description="Order item identifier")
    product_id: str = Field(..., description="Product ID")
    quantity: int = Field(..., description="Units ordered", gt=0)
    status: OrderItemStatus = Field(default=OrderItemStatus.PENDING, description="Item status")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderDraft(BaseModel):
    """
    Order as submitted by a customer, before the document store assigns an id.

    ``required_production_time`` is not range-checked here: the production
    scheduler rejects non-positive durations with InvalidOrder.

    Attributes:
        customer_id: Customer placing the order
        status: Lifecycle status
        delivery_address: Free-text delivery address
        scheduled_date: Requested delivery date
        assigned_vehicle_id: Vehicle bound by the delivery scheduler
        assigned_driver_id: Driver bound by the delivery scheduler
        priority: Qualitative priority
        items: Ordered product lines
        required_production_time: Production hours needed
        estimated_delivery_time: Customer-facing delivery estimate in hours
    """
    customer_id: str = Field(..., description="Customer ID")
    status: OrderStatus = Field(default=OrderStatus.PENDING, description="Order status")
    delivery_address: str = Field(..., description="Delivery address", min_length=1)
    scheduled_date: Optional[Date] = Field(None, description="Requested delivery date")
    assigned_vehicle_id: Optional[str] = Field(None, description="Assigned vehicle ID")
    assigned_driver_id: Optional[str] = Field(None, description="Assigned driver ID")
    priority: OrderPriority = Field(default=OrderPriority.MEDIUM, description="Order priority")
    items: List[OrderItem] = Field(default_factory=list, description="Order items")
    required_production_time: float = Field(..., description="Production time in hours")
    estimated_delivery_time: float = Field(default=0.0, description="Delivery estimate in hours", ge=0)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Order(OrderDraft):
    """
    A stored customer order.

    Attributes:
        id: Document identity
        created_at: When the order was placed
    """
    id: str = Field(..., description="Unique order identifier")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")

    @property
    def priority_weight(self) -> int:
        return priority_weight(self.priority)

    @property
    def total_units(self) -> int:
        """Units across all items (vehicle capacity check)."""
        return sum(item.quantity for item in self.items)

    def advance_status(self, new_status: OrderStatus) -> None:
        """Move the order forward; raises InvalidTransition on regression."""
        self.status = advance(self.id, self.status, new_status, OrderStatus)

    def promote_status(self, new_status: OrderStatus) -> bool:
        """Move forward to ``new_status`` if behind it; never moves backwards."""
        if not is_behind(self.status, new_status, OrderStatus):
            return False
        self.status = OrderStatus(new_status)
        return True

    def promote_items(self, new_status: OrderItemStatus) -> None:
        """Move every item that is behind ``new_status`` forward to it."""
        for item in self.items:
            if is_behind(item.status, new_status, OrderItemStatus):
                item.status = OrderItemStatus(new_status)

    def to_document(self) -> dict:
        """Camel-cased JSON record (without the id, which is the document key)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})

    def __str__(self) -> str:
        return (
            f"Order {self.id} for {self.customer_id} [{OrderPriority(self.priority).value}, "
            f"{self.required_production_time}h] -> {self.delivery_address}"
        )
