"""Geographic point data model."""

from typing import Tuple
from pydantic import BaseModel, ConfigDict, Field


class GeoPoint(BaseModel):
    """
    A latitude/longitude pair in decimal degrees.

    Attributes:
        lat: Latitude
        lng: Longitude
    """
    lat: float = Field(..., description="Latitude", ge=-90, le=90)
    lng: float = Field(..., description="Longitude", ge=-180, le=180)

    model_config = ConfigDict(frozen=True)

    def as_tuple(self) -> Tuple[float, float]:
        """Waypoint form used in routes."""
        return (self.lat, self.lng)

    def __str__(self) -> str:
        return f"({self.lat:.5f}, {self.lng:.5f})"
