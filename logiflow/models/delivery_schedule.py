"""Delivery schedule and route data models."""

from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .geo import GeoPoint
from .lifecycle import advance
from .production_schedule import ScheduleStatus


class DeliveryRoute(BaseModel):
    """
    A computed delivery route.

    Attributes:
        distance: Road distance in kilometres
        duration: Driving (plus stop) time in hours
        waypoints: Ordered (lat, lng) pairs from the depot to the destination
    """
    distance: float = Field(..., description="Distance in km", ge=0)
    duration: float = Field(..., description="Duration in hours", ge=0)
    waypoints: List[Tuple[float, float]] = Field(default_factory=list, description="Waypoints")

    def __str__(self) -> str:
        return f"{self.distance:.1f} km, {self.duration:.2f} h, {len(self.waypoints)} waypoints"


class DeliverySchedule(BaseModel):
    """
    A delivery run for one order after its production completes.

    Attributes:
        id: Unique schedule identifier
        order_id: Order being delivered
        production_schedule_id: Production window this delivery follows
        vehicle_id: Assigned vehicle
        driver_id: Assigned driver
        start_time: Departure (production end_time)
        estimated_arrival: start_time + route duration
        status: Lifecycle status
        route: Route from depot to destination
        destination: Geocoded delivery address
        sequence: Creation order
        started_at: Actual departure
        actual_arrival: Actual arrival
    """
    id: str = Field(..., description="Unique schedule identifier")
    order_id: str = Field(..., description="Order ID")
    production_schedule_id: str = Field(..., description="Production schedule ID")
    vehicle_id: str = Field(..., description="Vehicle ID")
    driver_id: str = Field(..., description="Driver ID")
    start_time: datetime = Field(..., description="Departure time")
    estimated_arrival: datetime = Field(..., description="Estimated arrival")
    status: ScheduleStatus = Field(default=ScheduleStatus.SCHEDULED, description="Schedule status")
    route: DeliveryRoute = Field(..., description="Delivery route")
    destination: Optional[GeoPoint] = Field(None, description="Destination coordinates")
    sequence: int = Field(default=0, description="Creation order", ge=0)
    started_at: Optional[datetime] = Field(None, description="Actual departure")
    actual_arrival: Optional[datetime] = Field(None, description="Actual arrival")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="after")
    def _arrival_after_start(self):
        if self.estimated_arrival < self.start_time:
            raise ValueError(
                f"estimated_arrival ({self.estimated_arrival}) precedes start_time ({self.start_time})"
            )
        return self

    @property
    def is_live(self) -> bool:
        return self.status != ScheduleStatus.COMPLETED

    @property
    def is_pending(self) -> bool:
        return self.status == ScheduleStatus.SCHEDULED

    @property
    def estimated_duration_hours(self) -> float:
        return (self.estimated_arrival - self.start_time).total_seconds() / 3600.0

    @property
    def actual_duration_hours(self) -> Optional[float]:
        """Departure to arrival, None until completed."""
        if self.actual_arrival is None:
            return None
        departed = self.started_at or self.start_time
        return (self.actual_arrival - departed).total_seconds() / 3600.0

    def apply_route(self, route: DeliveryRoute) -> None:
        """Replace the route and recompute the ETA."""
        self.route = route
        self.estimated_arrival = self.start_time + timedelta(hours=route.duration)

    def reanchor(self, start_time: datetime) -> None:
        """Move departure to ``start_time`` keeping the route."""
        self.start_time = start_time
        self.estimated_arrival = start_time + timedelta(hours=self.route.duration)

    def advance_status(self, new_status: ScheduleStatus) -> None:
        self.status = advance(self.id, self.status, new_status, ScheduleStatus)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def __str__(self) -> str:
        return (
            f"Delivery {self.id}: order {self.order_id} by {self.vehicle_id}/{self.driver_id} "
            f"departs {self.start_time:%Y-%m-%d %H:%M}, ETA {self.estimated_arrival:%H:%M} ({self.route})"
        )
