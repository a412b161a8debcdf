"""Data models for the scheduling engine."""

from .geo import GeoPoint
from .order import (
    Order,
    OrderDraft,
    OrderItem,
    OrderItemStatus,
    OrderPriority,
    OrderStatus,
    priority_weight,
)
from .production_line import ProductionLine
from .production_schedule import ProductionSchedule, ScheduleStatus
from .vehicle import Vehicle, VehicleStatus
from .driver import Driver
from .delivery_schedule import DeliveryRoute, DeliverySchedule

__all__ = [
    # Orders
    "Order",
    "OrderDraft",
    "OrderItem",
    "OrderItemStatus",
    "OrderPriority",
    "OrderStatus",
    "priority_weight",
    # Production
    "ProductionLine",
    "ProductionSchedule",
    "ScheduleStatus",
    # Distribution
    "GeoPoint",
    "Vehicle",
    "VehicleStatus",
    "Driver",
    "DeliveryRoute",
    "DeliverySchedule",
]
