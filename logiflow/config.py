"""Configuration for the scheduling engine and the HTTP relay."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .constants import (
    DEFAULT_AVERAGE_SPEED_KMH,
    DEFAULT_CLUSTER_RADIUS_KM,
    DEFAULT_ROAD_FACTOR,
    DEFAULT_STOP_SERVICE_MINUTES,
)
from .models.geo import GeoPoint


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


@dataclass
class SchedulingConfig:
    """Configuration for production and delivery scheduling.

    Attributes:
        depot_latitude: Latitude of the plant/depot every delivery leaves from
        depot_longitude: Longitude of the plant/depot
        average_speed_kmh: Average road speed for route duration estimates
        road_factor: Multiplier from great-circle to road distance (>= 1)
        cluster_radius_km: Maximum distance between destinations grouped into one run
        stop_service_minutes: Time spent at each earlier stop of a grouped run
        max_queue_hours: Furthest a new job may be queued past now (None = unbounded)
        address_book: Delivery address -> coordinates used by the straight-line router
    """
    depot_latitude: float = 0.0
    depot_longitude: float = 0.0
    average_speed_kmh: float = DEFAULT_AVERAGE_SPEED_KMH
    road_factor: float = DEFAULT_ROAD_FACTOR
    cluster_radius_km: float = DEFAULT_CLUSTER_RADIUS_KM
    stop_service_minutes: float = DEFAULT_STOP_SERVICE_MINUTES
    max_queue_hours: Optional[float] = None
    address_book: Dict[str, GeoPoint] = field(default_factory=dict)

    def __post_init__(self):
        """Validate configuration."""
        if self.average_speed_kmh <= 0:
            raise ValueError(f"average_speed_kmh must be positive, got {self.average_speed_kmh}")
        if self.road_factor < 1:
            raise ValueError(f"road_factor must be >= 1, got {self.road_factor}")
        if self.cluster_radius_km < 0:
            raise ValueError(f"cluster_radius_km must be >= 0, got {self.cluster_radius_km}")
        if self.stop_service_minutes < 0:
            raise ValueError(f"stop_service_minutes must be >= 0, got {self.stop_service_minutes}")
        if self.max_queue_hours is not None and self.max_queue_hours < 0:
            raise ValueError(f"max_queue_hours must be >= 0, got {self.max_queue_hours}")
        # Validates the coordinate ranges
        self.depot = GeoPoint(lat=self.depot_latitude, lng=self.depot_longitude)

    @property
    def stop_service_hours(self) -> float:
        return self.stop_service_minutes / 60.0

    @classmethod
    def from_env(cls) -> "SchedulingConfig":
        """Build configuration from LOGIFLOW_* environment variables.

        LOGIFLOW_ADDRESS_BOOK may point at a JSON file mapping each address
        to a ``{"lat": ..., "lng": ...}`` object.
        """
        address_book: Dict[str, GeoPoint] = {}
        book_path = os.environ.get("LOGIFLOW_ADDRESS_BOOK")
        if book_path:
            with open(book_path, "r") as f:
                raw_book = json.load(f)
            address_book = {address: GeoPoint(**point) for address, point in raw_book.items()}

        return cls(
            depot_latitude=_env_float("LOGIFLOW_DEPOT_LAT", 0.0),
            depot_longitude=_env_float("LOGIFLOW_DEPOT_LNG", 0.0),
            average_speed_kmh=_env_float("LOGIFLOW_AVERAGE_SPEED_KMH", DEFAULT_AVERAGE_SPEED_KMH),
            road_factor=_env_float("LOGIFLOW_ROAD_FACTOR", DEFAULT_ROAD_FACTOR),
            cluster_radius_km=_env_float("LOGIFLOW_CLUSTER_RADIUS_KM", DEFAULT_CLUSTER_RADIUS_KM),
            stop_service_minutes=_env_float("LOGIFLOW_STOP_SERVICE_MINUTES", DEFAULT_STOP_SERVICE_MINUTES),
            max_queue_hours=_env_float("LOGIFLOW_MAX_QUEUE_HOURS", None),
            address_book=address_book,
        )


@dataclass
class RelayConfig:
    """Configuration for the HTTP relay.

    Attributes:
        host: Interface to bind
        port: Port to bind
        log_level: Root logger level name
        storage_dir: Directory for the JSON document store (None = in-memory)
        allowed_origins: CORS origins
        seed_default_resources: Register the default line, vehicle and driver on startup
    """
    host: str = "127.0.0.1"
    port: int = 5000
    log_level: str = "INFO"
    storage_dir: Optional[Path] = None
    allowed_origins: str = "*"
    seed_default_resources: bool = True

    def __post_init__(self):
        """Validate configuration."""
        if not 0 < self.port < 65536:
            raise ValueError(f"port must be in 1..65535, got {self.port}")
        if self.storage_dir is not None:
            self.storage_dir = Path(self.storage_dir)

    @classmethod
    def from_env(cls) -> "RelayConfig":
        """Build configuration from environment variables (call load_dotenv first)."""
        storage_dir = os.environ.get("LOGIFLOW_STORAGE_DIR")
        return cls(
            host=os.environ.get("HOST", "127.0.0.1"),
            port=int(os.environ.get("PORT", 5000)),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            storage_dir=Path(storage_dir) if storage_dir else None,
            allowed_origins=os.environ.get("ALLOWED_ORIGINS", "*"),
            seed_default_resources=os.environ.get("LOGIFLOW_SEED_DEFAULTS", "true").lower() == "true",
        )
