"""Vehicle/driver allocation and delivery scheduling."""

from .fleet import DriverPool, VehiclePool
from .delivery_scheduler import DeliveryScheduler

__all__ = [
    'DriverPool',
    'VehiclePool',
    'DeliveryScheduler',
]
