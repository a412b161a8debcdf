"""Delivery vehicle data model."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .geo import GeoPoint


class VehicleStatus(str, Enum):
    """Vehicle operating status."""
    AVAILABLE = "available"
    IN_TRANSIT = "in-transit"
    MAINTENANCE = "maintenance"


class Vehicle(BaseModel):
    """
    A delivery vehicle.

    Attributes:
        id: Unique vehicle identifier
        plate_number: Registration plate
        type: Vehicle class (truck, van, ...)
        status: Operating status
        current_location: Last known position (None = at the depot)
        capacity: Maximum units per delivery (None = unlimited)
        assigned_schedule_id: Live delivery the vehicle is bound to
    """
    id: str = Field(..., description="Unique vehicle identifier")
    plate_number: str = Field(..., description="Registration plate")
    type: str = Field(..., description="Vehicle type")
    status: VehicleStatus = Field(default=VehicleStatus.AVAILABLE, description="Vehicle status")
    current_location: Optional[GeoPoint] = Field(None, description="Current location")
    capacity: Optional[float] = Field(None, description="Capacity in units", gt=0)
    assigned_schedule_id: Optional[str] = Field(None, description="Bound delivery schedule ID")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def is_available(self) -> bool:
        """Available status and not bound to a live delivery."""
        return self.status == VehicleStatus.AVAILABLE and self.assigned_schedule_id is None

    def can_carry(self, units: float) -> bool:
        return self.capacity is None or self.capacity >= units

    def __str__(self) -> str:
        return f"{self.type} {self.plate_number} ({self.id}) [{VehicleStatus(self.status).value}]"
