"""In-memory scheduling state passed explicitly into scheduler operations."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .distribution.fleet import DriverPool, VehiclePool
from .exceptions import InvalidOrder, InvalidSchedule
from .models.delivery_schedule import DeliverySchedule
from .models.order import Order
from .models.production_schedule import ProductionSchedule
from .production.line_pool import ProductionLinePool


@dataclass
class SchedulingState:
    """
    Everything the schedulers read and write.

    Attributes:
        orders: Registered orders by ID (insertion ordered)
        production_schedules: Production schedules in current sequence order
        delivery_schedules: Delivery schedules in current sequence order
        lines: Production line pool
        vehicles: Vehicle pool
        drivers: Driver pool
    """
    orders: Dict[str, Order] = field(default_factory=dict)
    production_schedules: List[ProductionSchedule] = field(default_factory=list)
    delivery_schedules: List[DeliverySchedule] = field(default_factory=list)
    lines: ProductionLinePool = field(default_factory=ProductionLinePool)
    vehicles: VehiclePool = field(default_factory=VehiclePool)
    drivers: DriverPool = field(default_factory=DriverPool)

    def get_order(self, order_id: str) -> Order:
        order = self.orders.get(order_id)
        if order is None:
            raise InvalidOrder("Unknown order", {"order_id": order_id})
        return order

    def get_production_schedule(self, schedule_id: str) -> ProductionSchedule:
        for schedule in self.production_schedules:
            if schedule.id == schedule_id:
                return schedule
        raise InvalidSchedule("Unknown production schedule", {"schedule_id": schedule_id})

    def get_delivery_schedule(self, schedule_id: str) -> DeliverySchedule:
        for schedule in self.delivery_schedules:
            if schedule.id == schedule_id:
                return schedule
        raise InvalidSchedule("Unknown delivery schedule", {"schedule_id": schedule_id})

    def production_for_order(self, order_id: str) -> Optional[ProductionSchedule]:
        """Most recently created production schedule for an order."""
        matches = [s for s in self.production_schedules if s.order_id == order_id]
        return max(matches, key=lambda s: s.sequence) if matches else None

    def deliveries_for_production(self, production_schedule_id: str) -> List[DeliverySchedule]:
        return [d for d in self.delivery_schedules if d.production_schedule_id == production_schedule_id]

    def next_production_sequence(self) -> int:
        return max((s.sequence for s in self.production_schedules), default=-1) + 1

    def next_delivery_sequence(self) -> int:
        return max((s.sequence for s in self.delivery_schedules), default=-1) + 1
