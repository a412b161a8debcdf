"""
Routing and geographic grouping for delivery scheduling.

This module provides distance calculation, the routing collaborator
interface, and proximity clustering of delivery destinations.
"""

from .distance import haversine_km
from .router import Router, StraightLineRouter, normalize_address
from .clustering import (
    build_proximity_graph,
    cluster_by_proximity,
    nearest_neighbor_order,
    tour_length,
)

__all__ = [
    'haversine_km',
    'Router',
    'StraightLineRouter',
    'normalize_address',
    'build_proximity_graph',
    'cluster_by_proximity',
    'nearest_neighbor_order',
    'tour_length',
]
