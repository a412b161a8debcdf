"""
Route computation for deliveries.

The core treats routing as a black box behind the Router interface. The
StraightLineRouter shipped here estimates road distance from great-circle
distance and a fixed average speed.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List

from ..exceptions import InvalidOrder
from ..models.delivery_schedule import DeliveryRoute
from ..models.geo import GeoPoint
from .distance import haversine_km

logger = logging.getLogger(__name__)


def normalize_address(address: str) -> str:
    """Case- and whitespace-insensitive address key."""
    return " ".join(address.lower().split())


class Router(ABC):
    """Routing collaborator interface."""

    @abstractmethod
    def locate(self, address: str) -> GeoPoint:
        """Resolve an address to coordinates.

        Raises:
            InvalidOrder: If the address cannot be resolved
        """

    @abstractmethod
    def route_through(self, stops: List[GeoPoint], service_hours: float = 0.0) -> DeliveryRoute:
        """Route visiting ``stops`` in order (first stop is the origin).

        Args:
            stops: Origin followed by each stop
            service_hours: Time spent at every intermediate stop
        """

    def route(self, origin: GeoPoint, address: str) -> DeliveryRoute:
        """Direct route from ``origin`` to ``address``."""
        return self.route_through([origin, self.locate(address)])


class StraightLineRouter(Router):
    """
    Straight-line route estimator.

    Distance is the haversine distance scaled by ``road_factor``; duration is
    distance over ``average_speed_kmh``. Waypoints are the stops themselves.

    Example:
        router = StraightLineRouter({"12 Dock Rd": GeoPoint(lat=51.5, lng=-0.1)})
        route = router.route(depot, "12 dock rd")
    """

    def __init__(
        self,
        address_book: Dict[str, GeoPoint],
        average_speed_kmh: float,
        road_factor: float = 1.0,
    ):
        """
        Initialize router.

        Args:
            address_book: Address -> coordinates
            average_speed_kmh: Average road speed
            road_factor: Great-circle to road distance multiplier
        """
        if average_speed_kmh <= 0:
            raise ValueError(f"average_speed_kmh must be positive, got {average_speed_kmh}")
        self.addresses = {normalize_address(addr): point for addr, point in address_book.items()}
        self.average_speed_kmh = average_speed_kmh
        self.road_factor = road_factor

    def register(self, address: str, point: GeoPoint) -> None:
        self.addresses[normalize_address(address)] = point

    def locate(self, address: str) -> GeoPoint:
        point = self.addresses.get(normalize_address(address))
        if point is None:
            logger.warning(f"Unknown delivery address: {address!r}")
            raise InvalidOrder("Unknown delivery address", {"address": address})
        return point

    def leg_distance_km(self, a: GeoPoint, b: GeoPoint) -> float:
        return haversine_km(a, b) * self.road_factor

    def route_through(self, stops: List[GeoPoint], service_hours: float = 0.0) -> DeliveryRoute:
        if not stops:
            raise ValueError("route_through requires at least an origin")

        distance = sum(self.leg_distance_km(a, b) for a, b in zip(stops, stops[1:]))
        intermediate_stops = max(len(stops) - 2, 0)
        duration = distance / self.average_speed_kmh + intermediate_stops * service_hours

        return DeliveryRoute(
            distance=distance,
            duration=duration,
            waypoints=[stop.as_tuple() for stop in stops],
        )
