"""Vehicle and driver pools with acquire-on-schedule / release-on-completion."""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..exceptions import NoDriverAvailable, NoVehicleAvailable
from ..models.driver import Driver
from ..models.geo import GeoPoint
from ..models.vehicle import Vehicle, VehicleStatus
from ..network.distance import haversine_km

logger = logging.getLogger(__name__)


class VehiclePool:
    """
    Vehicles available to the delivery scheduler.

    Selection is best fit: a vehicle that can carry the order, with the least
    spare capacity, closest to the destination, then registration order.
    Vehicles without a capacity are unlimited and rank after every sized one.
    """

    def __init__(self, vehicles: Optional[Iterable[Vehicle]] = None):
        self._vehicles: Dict[str, Vehicle] = {}
        for vehicle in vehicles or []:
            self.add(vehicle)

    def add(self, vehicle: Vehicle) -> Vehicle:
        if vehicle.id in self._vehicles:
            raise ValueError(f"Vehicle {vehicle.id} already registered")
        self._vehicles[vehicle.id] = vehicle
        logger.info(f"Registered vehicle {vehicle}")
        return vehicle

    def get(self, vehicle_id: str) -> Vehicle:
        try:
            return self._vehicles[vehicle_id]
        except KeyError:
            raise KeyError(f"Unknown vehicle: {vehicle_id}") from None

    @property
    def vehicles(self) -> List[Vehicle]:
        return list(self._vehicles.values())

    def __len__(self) -> int:
        return len(self._vehicles)

    def __contains__(self, vehicle_id: str) -> bool:
        return vehicle_id in self._vehicles

    def select(self, units: float, destination: GeoPoint, depot: GeoPoint) -> Vehicle:
        """
        Pick the best-fitting available vehicle.

        Args:
            units: Units the delivery carries
            destination: Delivery destination
            depot: Where vehicles without a known location are assumed to be

        Raises:
            NoVehicleAvailable: If no available vehicle can carry ``units``
        """
        candidates = []
        for index, vehicle in enumerate(self._vehicles.values()):
            if not vehicle.is_available() or not vehicle.can_carry(units):
                continue
            spare = float("inf") if vehicle.capacity is None else vehicle.capacity - units
            distance = haversine_km(vehicle.current_location or depot, destination)
            candidates.append(((spare, distance, index), vehicle))

        if not candidates:
            available = sum(1 for v in self._vehicles.values() if v.is_available())
            logger.warning(f"No vehicle for {units} units ({available}/{len(self._vehicles)} available)")
            raise NoVehicleAvailable(
                "No available vehicle can carry the order",
                {"units": units, "available_vehicles": available},
            )

        _, vehicle = min(candidates, key=lambda pair: pair[0])
        return vehicle

    def acquire(self, vehicle_id: str, schedule_id: str) -> None:
        self.get(vehicle_id).assigned_schedule_id = schedule_id

    def start(self, vehicle_id: str) -> None:
        """Vehicle leaves the depot."""
        self.get(vehicle_id).status = VehicleStatus.IN_TRANSIT

    def release(self, vehicle_id: str, schedule_id: str, location: Optional[GeoPoint] = None) -> None:
        """Free the vehicle from ``schedule_id``, leaving it at ``location``."""
        vehicle = self.get(vehicle_id)
        if vehicle.assigned_schedule_id != schedule_id:
            logger.warning(f"Vehicle {vehicle_id} is not bound to {schedule_id}; not released")
            return
        vehicle.assigned_schedule_id = None
        vehicle.status = VehicleStatus.AVAILABLE
        if location is not None:
            vehicle.current_location = location


class DriverPool:
    """
    Drivers available to the delivery scheduler.

    Selection is least recently used: drivers never released come first, then
    the one released longest ago, then registration order.
    """

    def __init__(self, drivers: Optional[Iterable[Driver]] = None):
        self._drivers: Dict[str, Driver] = {}
        for driver in drivers or []:
            self.add(driver)

    def add(self, driver: Driver) -> Driver:
        if driver.id in self._drivers:
            raise ValueError(f"Driver {driver.id} already registered")
        self._drivers[driver.id] = driver
        logger.info(f"Registered driver {driver.id}")
        return driver

    def get(self, driver_id: str) -> Driver:
        try:
            return self._drivers[driver_id]
        except KeyError:
            raise KeyError(f"Unknown driver: {driver_id}") from None

    @property
    def drivers(self) -> List[Driver]:
        return list(self._drivers.values())

    def __len__(self) -> int:
        return len(self._drivers)

    def __contains__(self, driver_id: str) -> bool:
        return driver_id in self._drivers

    def select(self) -> Driver:
        """
        Pick the least recently used free driver.

        Raises:
            NoDriverAvailable: If every driver is bound to a live delivery
        """
        free = [(index, d) for index, d in enumerate(self._drivers.values()) if d.is_available()]
        if not free:
            logger.warning(f"No driver available ({len(self._drivers)} registered)")
            raise NoDriverAvailable("No driver available", {"registered_drivers": len(self._drivers)})

        def lru_key(pair):
            index, driver = pair
            if driver.last_released_at is None:
                return (0, datetime.min, index)
            return (1, driver.last_released_at, index)

        _, driver = min(free, key=lru_key)
        return driver

    def acquire(self, driver_id: str, schedule_id: str) -> None:
        self.get(driver_id).assigned_schedule_id = schedule_id

    def release(self, driver_id: str, schedule_id: str, at: datetime) -> None:
        driver = self.get(driver_id)
        if driver.assigned_schedule_id != schedule_id:
            logger.warning(f"Driver {driver_id} is not bound to {schedule_id}; not released")
            return
        driver.assigned_schedule_id = None
        driver.last_released_at = at
