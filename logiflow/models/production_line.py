"""Production line data model."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..constants import DEFAULT_LINE_EFFICIENCY


class ProductionLine(BaseModel):
    """
    A production line that runs one order at a time.

    Live schedules booked on the line are kept in window order; their windows
    never overlap.

    Attributes:
        id: Unique line identifier
        name: Human-readable name
        efficiency: Throughput efficiency (0.0 to 1.0)
        active: Inactive lines (maintenance, retired) take no new work
        assigned_schedule_ids: Live (non-completed) schedules booked on the line
        booked_until: End of the last live window, None if idle
    """
    id: str = Field(..., description="Unique line identifier")
    name: Optional[str] = Field(None, description="Line name")
    efficiency: float = Field(default=DEFAULT_LINE_EFFICIENCY, description="Line efficiency", ge=0, le=1)
    active: bool = Field(default=True, description="Accepts new schedules")
    assigned_schedule_ids: List[str] = Field(default_factory=list, description="Live schedule IDs")
    booked_until: Optional[datetime] = Field(None, description="End of last live window")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @property
    def current_schedule_id(self) -> Optional[str]:
        """Schedule occupying (or next to occupy) the line."""
        return self.assigned_schedule_ids[0] if self.assigned_schedule_ids else None

    @property
    def load(self) -> int:
        return len(self.assigned_schedule_ids)

    def is_free_at(self, at: datetime) -> bool:
        """True if nothing live is booked past ``at``."""
        return self.booked_until is None or self.booked_until <= at

    def __str__(self) -> str:
        state = "active" if self.active else "inactive"
        return f"Line {self.id} ({self.efficiency:.0%}, {state}, {self.load} booked)"
