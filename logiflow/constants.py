"""Centralized constants for the scheduling engine.

This module contains the fixed weights, physical constants and defaults used
across production scheduling, delivery routing and analytics.
"""

# ============================================================================
# PRIORITY CONSTANTS
# ============================================================================

#: Sort weight per qualitative order priority (higher is scheduled first)
PRIORITY_WEIGHTS = {
    "high": 3,
    "medium": 2,
    "low": 1,
}


# ============================================================================
# PRODUCTION CONSTANTS
# ============================================================================

#: Efficiency assumed for a production line registered without one
DEFAULT_LINE_EFFICIENCY = 0.85

#: Identifier of the line seeded into a fresh relay
DEFAULT_LINE_ID = "line-1"


# ============================================================================
# ROUTING CONSTANTS
# ============================================================================

#: Mean Earth radius in kilometres (haversine)
EARTH_RADIUS_KM = 6371.0

#: Average road speed used by the straight-line route estimator
DEFAULT_AVERAGE_SPEED_KMH = 50.0

#: Multiplier from great-circle distance to road distance
DEFAULT_ROAD_FACTOR = 1.3

#: Destinations closer than this are grouped into one delivery run
DEFAULT_CLUSTER_RADIUS_KM = 5.0

#: Unloading time spent at each stop before the next leg of a grouped run
DEFAULT_STOP_SERVICE_MINUTES = 10.0


# ============================================================================
# FLEET CONSTANTS
# ============================================================================

#: Vehicle seeded into a fresh relay
DEFAULT_VEHICLE_ID = "vehicle-1"
DEFAULT_VEHICLE_PLATE = "ABC123"
DEFAULT_VEHICLE_TYPE = "truck"

#: Driver seeded into a fresh relay
DEFAULT_DRIVER_ID = "driver-1"


# ============================================================================
# DOCUMENT STORE COLLECTIONS
# ============================================================================

ORDERS_COLLECTION = "orders"
PRODUCTION_SCHEDULES_COLLECTION = "production_schedules"
DELIVERY_SCHEDULES_COLLECTION = "delivery_schedules"
