"""
Scheduling store: the single serialization point for scheduling state.

Every operation runs under one re-entrant lock. Scheduling operations plan
first, write the new schedule to the optional document store, then commit it
to the in-memory state, so a failure at any step leaves the state unchanged.
"""

import logging
import threading
from typing import Callable, List, Optional, Union

from .analysis.efficiency import (
    EfficiencyReport,
    delivery_efficiency,
    efficiency_report,
    production_efficiency,
)
from .config import SchedulingConfig
from .constants import (
    DEFAULT_DRIVER_ID,
    DEFAULT_LINE_ID,
    DEFAULT_VEHICLE_ID,
    DEFAULT_VEHICLE_PLATE,
    DEFAULT_VEHICLE_TYPE,
    DELIVERY_SCHEDULES_COLLECTION,
    PRODUCTION_SCHEDULES_COLLECTION,
)
from .distribution.delivery_scheduler import DeliveryScheduler
from .exceptions import InvalidSchedule, StoreUnavailable
from .models.delivery_schedule import DeliverySchedule
from .models.driver import Driver
from .models.order import Order
from .models.production_line import ProductionLine
from .models.production_schedule import ProductionSchedule
from .models.vehicle import Vehicle
from .network.router import Router, StraightLineRouter
from .persistence.document_store import DocumentStore
from .production.scheduler import ProductionScheduler
from .state import SchedulingState
from .utils.clock import Clock, system_clock

logger = logging.getLogger(__name__)

OrderRef = Union[Order, str]


class SchedulingStore:
    """
    Process-local scheduling state plus the operations that change it.

    The state starts empty and is populated only through this object:
    register orders and resources, schedule, optimize and transition.

    Example:
        store = SchedulingStore.with_default_resources(config)
        store.register_order(order)
        production = store.schedule_production(order.id)
        store.complete_production(production.id)
        delivery = store.schedule_delivery(order.id)
    """

    def __init__(
        self,
        config: Optional[SchedulingConfig] = None,
        router: Optional[Router] = None,
        documents: Optional[DocumentStore] = None,
        clock: Clock = system_clock,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        """
        Initialize the store.

        Args:
            config: Scheduling configuration (defaults apply when omitted)
            router: Routing collaborator (straight-line over the config address book when omitted)
            documents: Document store receiving each committed schedule
            clock: Current-time provider
            id_factory: Schedule ID generator (uuid4 when omitted)
        """
        self.config = config or SchedulingConfig()
        self.router = router or StraightLineRouter(
            self.config.address_book,
            self.config.average_speed_kmh,
            self.config.road_factor,
        )
        self.documents = documents
        self.clock = clock
        self.state = SchedulingState()
        self._lock = threading.RLock()

        scheduler_kwargs = {"clock": clock}
        if id_factory is not None:
            scheduler_kwargs["id_factory"] = id_factory
        self.production = ProductionScheduler(self.config, **scheduler_kwargs)
        self.delivery = DeliveryScheduler(self.config, self.router, **scheduler_kwargs)

    @classmethod
    def with_default_resources(cls, config: Optional[SchedulingConfig] = None, **kwargs) -> "SchedulingStore":
        """Store seeded with one production line, one vehicle and one driver."""
        store = cls(config, **kwargs)
        store.add_production_line(ProductionLine(id=DEFAULT_LINE_ID, name="Line 1"))
        store.add_vehicle(Vehicle(id=DEFAULT_VEHICLE_ID, plate_number=DEFAULT_VEHICLE_PLATE,
                                  type=DEFAULT_VEHICLE_TYPE))
        store.add_driver(Driver(id=DEFAULT_DRIVER_ID))
        return store

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_order(self, order: Order) -> Order:
        """Register an order; re-registering an id returns the existing order."""
        with self._lock:
            existing = self.state.orders.get(order.id)
            if existing is not None:
                return existing
            self.state.orders[order.id] = order
            logger.info(f"Registered {order}")
            return order

    def add_production_line(self, line: ProductionLine) -> ProductionLine:
        with self._lock:
            return self.state.lines.add(line)

    def add_vehicle(self, vehicle: Vehicle) -> Vehicle:
        with self._lock:
            return self.state.vehicles.add(vehicle)

    def add_driver(self, driver: Driver) -> Driver:
        with self._lock:
            return self.state.drivers.add(driver)

    # ------------------------------------------------------------------
    # Production
    # ------------------------------------------------------------------

    def schedule_production(self, order: OrderRef) -> ProductionSchedule:
        """
        Assign a registered order to a production line.

        Raises:
            InvalidOrder: Unknown order or non-positive production time
            NoCapacity: No line can take the order
            StoreUnavailable: The schedule could not be recorded
        """
        with self._lock:
            resolved = self._resolve_order(order)
            schedule = self.production.plan_production(self.state, resolved)
            self._record(PRODUCTION_SCHEDULES_COLLECTION, schedule.to_document())
            self.production.commit_production(self.state, resolved, schedule)
            return schedule

    def optimize_production_schedule(self) -> List[ProductionSchedule]:
        """Re-sequence production by priority, then re-anchor pending deliveries."""
        with self._lock:
            schedules = self.production.optimize_production_schedule(self.state)
            self.delivery.resync_with_production(self.state)
            return schedules

    def start_production(self, schedule_id: str) -> ProductionSchedule:
        with self._lock:
            return self.production.start_production(self.state, schedule_id)

    def complete_production(self, schedule_id: str) -> ProductionSchedule:
        with self._lock:
            return self.production.complete_production(self.state, schedule_id)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def schedule_delivery(self, order: OrderRef, production_schedule_id: Optional[str] = None) -> DeliverySchedule:
        """
        Assign a vehicle, driver and route to a registered order.

        Args:
            order: Order or order ID
            production_schedule_id: Production schedule to follow (defaults to
                the order's most recent one)

        Raises:
            InvalidOrder: Unknown order or delivery address
            InvalidSchedule: No production schedule, or one for another order
            NoVehicleAvailable: Vehicle pool exhausted
            NoDriverAvailable: Driver pool exhausted
            StoreUnavailable: The schedule could not be recorded
        """
        with self._lock:
            resolved = self._resolve_order(order)
            if production_schedule_id is None:
                production = self.state.production_for_order(resolved.id)
                if production is None:
                    raise InvalidSchedule("Order has no production schedule", {"order_id": resolved.id})
            else:
                production = self.state.get_production_schedule(production_schedule_id)

            schedule = self.delivery.plan_delivery(self.state, resolved, production)
            self._record(DELIVERY_SCHEDULES_COLLECTION, schedule.to_document())
            self.delivery.commit_delivery(self.state, resolved, schedule)
            return schedule

    def optimize_delivery_routes(self) -> List[DeliverySchedule]:
        with self._lock:
            return self.delivery.optimize_delivery_routes(self.state)

    def start_delivery(self, schedule_id: str) -> DeliverySchedule:
        with self._lock:
            return self.delivery.start_delivery(self.state, schedule_id)

    def complete_delivery(self, schedule_id: str) -> DeliverySchedule:
        with self._lock:
            return self.delivery.complete_delivery(self.state, schedule_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def orders(self) -> List[Order]:
        with self._lock:
            return list(self.state.orders.values())

    def find_order(self, order_id: str) -> Optional[Order]:
        with self._lock:
            return self.state.orders.get(order_id)

    def production_schedules(self) -> List[ProductionSchedule]:
        with self._lock:
            return list(self.state.production_schedules)

    def delivery_schedules(self) -> List[DeliverySchedule]:
        with self._lock:
            return list(self.state.delivery_schedules)

    def get_production_efficiency(self) -> float:
        with self._lock:
            return production_efficiency(self.state.production_schedules)

    def get_delivery_efficiency(self) -> float:
        with self._lock:
            return delivery_efficiency(self.state.delivery_schedules)

    def efficiency_report(self) -> EfficiencyReport:
        with self._lock:
            return efficiency_report(self.state.production_schedules, self.state.delivery_schedules)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_order(self, order: OrderRef) -> Order:
        order_id = order.id if isinstance(order, Order) else order
        return self.state.get_order(order_id)

    def _record(self, collection: str, record: dict) -> None:
        if self.documents is None:
            return
        try:
            self.documents.create(collection, record)
        except StoreUnavailable as e:
            logger.error(f"Could not record schedule in {collection}: {e}")
            raise
