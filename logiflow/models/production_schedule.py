"""Production schedule data model."""

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .lifecycle import advance


class ScheduleStatus(str, Enum):
    """Schedule lifecycle shared by production and delivery, in progression order."""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class ProductionSchedule(BaseModel):
    """
    A production window for one order on one line.

    Attributes:
        id: Unique schedule identifier
        order_id: Order being produced
        start_time: Window start
        end_time: Window end (start + duration_hours)
        status: Lifecycle status
        priority: Priority weight (high=3, medium=2, low=1)
        line_id: Production line hosting the window
        efficiency: Line efficiency at assignment time
        duration_hours: Order's required production time
        sequence: Creation order, used to break priority ties
    """
    id: str = Field(..., description="Unique schedule identifier")
    order_id: str = Field(..., description="Order ID")
    start_time: datetime = Field(..., description="Window start")
    end_time: datetime = Field(..., description="Window end")
    status: ScheduleStatus = Field(default=ScheduleStatus.SCHEDULED, description="Schedule status")
    priority: int = Field(..., description="Priority weight", ge=1, le=3)
    line_id: str = Field(..., description="Production line ID")
    efficiency: float = Field(..., description="Line efficiency snapshot", ge=0, le=1)
    duration_hours: float = Field(..., description="Production duration in hours", gt=0)
    sequence: int = Field(default=0, description="Creation order", ge=0)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_time <= self.start_time:
            raise ValueError(f"end_time ({self.end_time}) must be after start_time ({self.start_time})")
        return self

    @property
    def is_live(self) -> bool:
        """Not yet completed."""
        return self.status != ScheduleStatus.COMPLETED

    @property
    def is_pending(self) -> bool:
        """Scheduled but not started; only pending windows may move."""
        return self.status == ScheduleStatus.SCHEDULED

    def shift_to(self, start_time: datetime, duration_hours: float) -> None:
        """Move the window to ``start_time`` keeping it ``duration_hours`` long."""
        self.start_time = start_time
        self.end_time = start_time + timedelta(hours=duration_hours)
        self.duration_hours = duration_hours

    def advance_status(self, new_status: ScheduleStatus) -> None:
        self.status = advance(self.id, self.status, new_status, ScheduleStatus)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def __str__(self) -> str:
        return (
            f"Production {self.id}: order {self.order_id} on {self.line_id} "
            f"{self.start_time:%Y-%m-%d %H:%M} -> {self.end_time:%H:%M} (p{self.priority})"
        )
