"""Driver data model."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Driver(BaseModel):
    """
    A delivery driver.

    Attributes:
        id: Unique driver identifier
        name: Display name
        assigned_schedule_id: Live delivery the driver is bound to
        last_released_at: When the driver last finished a delivery
    """
    id: str = Field(..., description="Unique driver identifier")
    name: Optional[str] = Field(None, description="Driver name")
    assigned_schedule_id: Optional[str] = Field(None, description="Bound delivery schedule ID")
    last_released_at: Optional[datetime] = Field(None, description="Last release time")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def is_available(self) -> bool:
        return self.assigned_schedule_id is None
