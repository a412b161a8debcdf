"""
Delivery scheduler for assigning vehicles, drivers and routes to orders.

Deliveries depart when their production window ends. Pending deliveries can
be re-optimized by grouping nearby destinations into shared runs.
"""

import logging
import uuid
from datetime import timedelta
from typing import TYPE_CHECKING, Callable, List

from ..config import SchedulingConfig
from ..exceptions import InvalidSchedule, InvalidTransition
from ..models.delivery_schedule import DeliverySchedule
from ..models.geo import GeoPoint
from ..models.order import Order, OrderStatus
from ..models.production_schedule import ProductionSchedule, ScheduleStatus
from ..network.clustering import cluster_by_proximity, nearest_neighbor_order, tour_length
from ..network.router import Router
from ..utils.clock import Clock, system_clock

if TYPE_CHECKING:
    from ..state import SchedulingState

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class DeliveryScheduler:
    """
    Delivery scheduler operating on an explicit SchedulingState.

    This scheduler:
    1. Checks the production schedule belongs to the order
    2. Geocodes the delivery address through the router
    3. Picks a vehicle (best fit) and a driver (least recently used)
    4. Routes from the depot and departs at production end
    5. Groups pending deliveries into proximity runs on demand
    """

    def __init__(
        self,
        config: SchedulingConfig,
        router: Router,
        clock: Clock = system_clock,
        id_factory: Callable[[], str] = _new_id,
    ):
        """
        Initialize delivery scheduler.

        Args:
            config: Scheduling configuration (depot, clustering, stop times)
            router: Routing collaborator
            clock: Current-time provider
            id_factory: Schedule ID generator
        """
        self.config = config
        self.router = router
        self.clock = clock
        self.id_factory = id_factory

    def plan_delivery(
        self,
        state: "SchedulingState",
        order: Order,
        production: ProductionSchedule,
    ) -> DeliverySchedule:
        """
        Build the delivery ``order`` would get, without changing state.

        Raises:
            InvalidSchedule: If ``production`` belongs to another order
            InvalidOrder: If the delivery address cannot be located
            NoVehicleAvailable: If no vehicle can carry the order
            NoDriverAvailable: If every driver is busy
        """
        if production.order_id != order.id:
            logger.warning(
                f"Rejected delivery for order {order.id}: production {production.id} "
                f"belongs to order {production.order_id}"
            )
            raise InvalidSchedule(
                "Production schedule does not belong to the order",
                {"order_id": order.id, "production_order_id": production.order_id},
            )

        destination = self.router.locate(order.delivery_address)
        vehicle = state.vehicles.select(order.total_units, destination, self.config.depot)
        driver = state.drivers.select()
        route = self.router.route(self.config.depot, order.delivery_address)

        start = production.end_time
        return DeliverySchedule(
            id=self.id_factory(),
            order_id=order.id,
            production_schedule_id=production.id,
            vehicle_id=vehicle.id,
            driver_id=driver.id,
            start_time=start,
            estimated_arrival=start + timedelta(hours=route.duration),
            status=ScheduleStatus.SCHEDULED,
            route=route,
            destination=destination,
            sequence=state.next_delivery_sequence(),
        )

    def commit_delivery(self, state: "SchedulingState", order: Order, schedule: DeliverySchedule) -> None:
        """Append a planned delivery and bind its vehicle and driver."""
        state.orders.setdefault(order.id, order)
        state.delivery_schedules.append(schedule)
        state.vehicles.acquire(schedule.vehicle_id, schedule.id)
        state.drivers.acquire(schedule.driver_id, schedule.id)
        order.assigned_vehicle_id = schedule.vehicle_id
        order.assigned_driver_id = schedule.driver_id
        logger.info(f"Scheduled {schedule}")

    def schedule_delivery(
        self,
        state: "SchedulingState",
        order: Order,
        production: ProductionSchedule,
    ) -> DeliverySchedule:
        """Plan and commit a delivery for ``order`` after ``production``."""
        schedule = self.plan_delivery(state, order, production)
        self.commit_delivery(state, order, schedule)
        return schedule

    def optimize_delivery_routes(self, state: "SchedulingState") -> List[DeliverySchedule]:
        """
        Group pending deliveries into proximity runs and re-route them.

        Destinations within ``cluster_radius_km`` of each other (directly or
        through a chain) share a run. Runs keep the order of their earliest
        member; stops within a run follow a nearest-neighbour tour from the
        depot. Each delivery's route is the tour prefix ending at its stop.
        Deliveries already on the road keep their routes and lead the list.

        Returns:
            The reordered delivery list
        """
        snapshot = list(state.delivery_schedules)
        pending = [d for d in snapshot if d.is_pending]
        if not pending:
            return snapshot

        depot = self.config.depot
        points = [self._destination_of(state, d) for d in pending]
        clusters = cluster_by_proximity(points, self.config.cluster_radius_km)

        reordered = [d for d in snapshot if not d.is_pending]
        for members in clusters:
            tour = nearest_neighbor_order(depot, points, members)
            logger.debug(f"Run of {len(tour)} stops covers {tour_length(depot, points, tour):.2f} km")
            for position, index in enumerate(tour):
                stops = [depot] + [points[i] for i in tour[:position + 1]]
                route = self.router.route_through(stops, self.config.stop_service_hours)
                pending[index].apply_route(route)
                reordered.append(pending[index])

        state.delivery_schedules[:] = reordered
        logger.info(f"Optimized delivery routes: {len(pending)} pending deliveries in {len(clusters)} runs")
        return list(reordered)

    def resync_with_production(self, state: "SchedulingState") -> int:
        """
        Re-anchor pending deliveries to their production window's end.

        Returns:
            Number of deliveries moved
        """
        moved = 0
        for delivery in state.delivery_schedules:
            if not delivery.is_pending:
                continue
            production = state.get_production_schedule(delivery.production_schedule_id)
            if delivery.start_time != production.end_time:
                delivery.reanchor(production.end_time)
                moved += 1
        if moved:
            logger.info(f"Re-anchored {moved} pending deliveries to production end")
        return moved

    def start_delivery(self, state: "SchedulingState", schedule_id: str) -> DeliverySchedule:
        """
        Vehicle departs: schedule in progress, order in transit.

        Raises:
            InvalidTransition: If the delivery already left, or its production
                is not completed yet
        """
        schedule = state.get_delivery_schedule(schedule_id)
        self._require_production_completed(state, schedule)
        schedule.advance_status(ScheduleStatus.IN_PROGRESS)
        schedule.started_at = self.clock()
        state.vehicles.start(schedule.vehicle_id)

        order = state.orders.get(schedule.order_id)
        if order is not None:
            order.promote_status(OrderStatus.IN_TRANSIT)

        logger.info(f"Delivery started: {schedule.id} by {schedule.vehicle_id}")
        return schedule

    def complete_delivery(self, state: "SchedulingState", schedule_id: str) -> DeliverySchedule:
        """
        Arrival: schedule completed, vehicle and driver released, order delivered.

        Raises:
            InvalidTransition: If the delivery is already completed, or its
                production is not completed yet
        """
        schedule = state.get_delivery_schedule(schedule_id)
        self._require_production_completed(state, schedule)
        schedule.advance_status(ScheduleStatus.COMPLETED)
        now = self.clock()
        schedule.actual_arrival = now
        state.vehicles.release(schedule.vehicle_id, schedule.id, schedule.destination)
        state.drivers.release(schedule.driver_id, schedule.id, now)

        order = state.orders.get(schedule.order_id)
        if order is not None:
            order.promote_status(OrderStatus.DELIVERED)

        logger.info(f"Delivery completed: {schedule.id} by {schedule.vehicle_id}")
        return schedule

    @staticmethod
    def _require_production_completed(state: "SchedulingState", schedule: DeliverySchedule) -> None:
        # Only pending deliveries follow their production window, so nothing
        # may leave the depot while that window can still move.
        production = state.get_production_schedule(schedule.production_schedule_id)
        if production.status != ScheduleStatus.COMPLETED:
            logger.warning(
                f"Rejected transition for delivery {schedule.id}: "
                f"production {production.id} is {production.status.value}"
            )
            raise InvalidTransition(
                "Delivery cannot leave before its production is completed",
                {
                    "id": schedule.id,
                    "production_schedule_id": production.id,
                    "production_status": production.status.value,
                },
            )

    def _destination_of(self, state: "SchedulingState", delivery: DeliverySchedule) -> GeoPoint:
        if delivery.destination is not None:
            return delivery.destination
        return self.router.locate(state.get_order(delivery.order_id).delivery_address)
