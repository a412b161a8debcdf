"""
Proximity grouping and stop ordering for delivery runs.

Destinations within a radius of each other (directly or through a chain of
neighbours) form one cluster: the connected components of a proximity graph.
"""

from typing import Callable, List, Sequence

import networkx as nx

from ..models.geo import GeoPoint
from .distance import haversine_km

DistanceFn = Callable[[GeoPoint, GeoPoint], float]


def build_proximity_graph(points: Sequence[GeoPoint], radius_km: float) -> nx.Graph:
    """
    Build an undirected graph with one node per point index.

    An edge joins two points whose great-circle distance is <= radius_km.
    """
    graph = nx.Graph()
    graph.add_nodes_from(range(len(points)))
    for i in range(len(points)):
        for j in range(i + 1, len(points)):
            distance = haversine_km(points[i], points[j])
            if distance <= radius_km:
                graph.add_edge(i, j, distance_km=distance)
    return graph


def cluster_by_proximity(points: Sequence[GeoPoint], radius_km: float) -> List[List[int]]:
    """
    Group point indices into proximity clusters.

    Returns:
        Clusters ordered by their smallest index; members in ascending index order
    """
    graph = build_proximity_graph(points, radius_km)
    clusters = [sorted(component) for component in nx.connected_components(graph)]
    clusters.sort(key=lambda members: members[0])
    return clusters


def nearest_neighbor_order(
    origin: GeoPoint,
    points: Sequence[GeoPoint],
    members: Sequence[int],
    distance_fn: DistanceFn = haversine_km,
) -> List[int]:
    """
    Order ``members`` as a nearest-neighbour tour starting from ``origin``.

    Ties on distance go to the smaller index, so the tour is deterministic.
    """
    remaining = list(members)
    tour: List[int] = []
    current = origin
    while remaining:
        nearest = min(remaining, key=lambda idx: (distance_fn(current, points[idx]), idx))
        tour.append(nearest)
        remaining.remove(nearest)
        current = points[nearest]
    return tour


def tour_length(origin: GeoPoint, points: Sequence[GeoPoint], tour: Sequence[int],
                distance_fn: DistanceFn = haversine_km) -> float:
    """Open-path length from ``origin`` through ``tour``."""
    total = 0.0
    current = origin
    for idx in tour:
        total += distance_fn(current, points[idx])
        current = points[idx]
    return total
