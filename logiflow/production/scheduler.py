"""
Production scheduler for assigning orders to production lines.

This module handles line selection, window computation, priority-based
re-sequencing of the production queue, and production lifecycle transitions.
"""

import logging
import math
import uuid
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable, Dict, List

from ..config import SchedulingConfig
from ..exceptions import InvalidOrder, InvalidTransition
from ..models.order import Order, OrderItemStatus, OrderStatus
from ..models.production_schedule import ProductionSchedule, ScheduleStatus
from ..utils.clock import Clock, system_clock

if TYPE_CHECKING:
    from ..state import SchedulingState

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class ProductionScheduler:
    """
    Production scheduler operating on an explicit SchedulingState.

    This scheduler:
    1. Validates the order's production duration
    2. Selects a line from the pool (least loaded, else earliest free)
    3. Builds the window [start, start + required_production_time]
    4. Snapshots the line efficiency and priority weight
    5. Re-sequences pending windows by priority on demand

    Scheduling is split into plan_production (no side effects) and
    commit_production so callers can persist a schedule before committing it.
    """

    def __init__(
        self,
        config: SchedulingConfig,
        clock: Clock = system_clock,
        id_factory: Callable[[], str] = _new_id,
    ):
        """
        Initialize production scheduler.

        Args:
            config: Scheduling configuration (queue horizon)
            clock: Current-time provider
            id_factory: Schedule ID generator
        """
        self.config = config
        self.clock = clock
        self.id_factory = id_factory

    def plan_production(self, state: "SchedulingState", order: Order) -> ProductionSchedule:
        """
        Build the schedule ``order`` would get, without changing state.

        Raises:
            InvalidOrder: If required_production_time is not a positive number
            NoCapacity: If no line can take the order
        """
        duration = order.required_production_time
        if not (math.isfinite(duration) and duration > 0):
            logger.warning(f"Rejected order {order.id}: required_production_time={duration}")
            raise InvalidOrder(
                "required_production_time must be positive",
                {"order_id": order.id, "required_production_time": duration},
            )

        now = self.clock()
        line, start = state.lines.select(now, self.config.max_queue_hours)

        return ProductionSchedule(
            id=self.id_factory(),
            order_id=order.id,
            start_time=start,
            end_time=start + timedelta(hours=duration),
            status=ScheduleStatus.SCHEDULED,
            priority=order.priority_weight,
            line_id=line.id,
            efficiency=line.efficiency,
            duration_hours=duration,
            sequence=state.next_production_sequence(),
        )

    def commit_production(self, state: "SchedulingState", order: Order, schedule: ProductionSchedule) -> None:
        """Append a planned schedule and book it on its line."""
        state.orders.setdefault(order.id, order)
        state.production_schedules.append(schedule)
        state.lines.acquire(schedule)
        logger.info(f"Scheduled {schedule}")

    def schedule_production(self, state: "SchedulingState", order: Order) -> ProductionSchedule:
        """Plan and commit a production schedule for ``order``."""
        schedule = self.plan_production(state, order)
        self.commit_production(state, order, schedule)
        return schedule

    def optimize_production_schedule(self, state: "SchedulingState") -> List[ProductionSchedule]:
        """
        Re-sequence the production queue by priority and close idle gaps.

        Schedules are sorted by priority weight descending, then creation
        order. Pending windows on each line are packed back-to-back in that
        order, starting at the line's earliest pending start (or the end of
        an in-progress window, if later). In-progress and completed windows
        stay where they are; line and efficiency never change.

        Returns:
            The re-sequenced schedule list
        """
        snapshot = list(state.production_schedules)
        if not snapshot:
            return []

        ordered = sorted(snapshot, key=lambda s: (-s.priority, s.sequence))

        cursors: Dict[str, datetime] = {}
        for schedule in ordered:
            if not schedule.is_pending:
                continue
            if schedule.line_id not in cursors:
                cursors[schedule.line_id] = self._line_anchor(ordered, schedule.line_id)

        moved = 0
        for schedule in ordered:
            if not schedule.is_pending:
                continue
            start = cursors[schedule.line_id]
            duration = self._duration_of(state, schedule)
            if schedule.start_time != start or schedule.duration_hours != duration:
                moved += 1
            schedule.shift_to(start, duration)
            cursors[schedule.line_id] = schedule.end_time

        state.production_schedules[:] = ordered
        state.lines.sync(ordered)
        logger.info(f"Optimized production queue: {len(ordered)} schedules, {moved} windows moved")
        return list(ordered)

    def start_production(self, state: "SchedulingState", schedule_id: str) -> ProductionSchedule:
        """
        Mark a schedule in progress and the order processing.

        Raises:
            InvalidTransition: If the schedule already started, or another
                schedule is running on the same line
        """
        schedule = state.get_production_schedule(schedule_id)
        running = next(
            (
                s for s in state.production_schedules
                if s.line_id == schedule.line_id
                and s.id != schedule.id
                and s.status == ScheduleStatus.IN_PROGRESS
            ),
            None,
        )
        if running is not None:
            logger.warning(f"Rejected start of {schedule.id}: {running.id} is running on {schedule.line_id}")
            raise InvalidTransition(
                "Production line is already running another schedule",
                {"id": schedule.id, "line_id": schedule.line_id, "running_schedule_id": running.id},
            )
        schedule.advance_status(ScheduleStatus.IN_PROGRESS)

        order = state.orders.get(schedule.order_id)
        if order is not None:
            order.promote_status(OrderStatus.PROCESSING)
            order.promote_items(OrderItemStatus.IN_PRODUCTION)

        logger.info(f"Production started: {schedule.id} on {schedule.line_id}")
        return schedule

    def complete_production(self, state: "SchedulingState", schedule_id: str) -> ProductionSchedule:
        """Mark a schedule completed and release its line."""
        schedule = state.get_production_schedule(schedule_id)
        schedule.advance_status(ScheduleStatus.COMPLETED)

        order = state.orders.get(schedule.order_id)
        if order is not None:
            order.promote_status(OrderStatus.PROCESSING)
            order.promote_items(OrderItemStatus.COMPLETED)

        state.lines.sync(state.production_schedules)
        logger.info(f"Production completed: {schedule.id} on {schedule.line_id}")
        return schedule

    @staticmethod
    def _line_anchor(ordered: List[ProductionSchedule], line_id: str) -> datetime:
        on_line = [s for s in ordered if s.line_id == line_id]
        anchor = min(s.start_time for s in on_line if s.is_pending)
        running_end = max(
            (s.end_time for s in on_line if s.status == ScheduleStatus.IN_PROGRESS),
            default=None,
        )
        if running_end is not None and running_end > anchor:
            return running_end
        return anchor

    @staticmethod
    def _duration_of(state: "SchedulingState", schedule: ProductionSchedule) -> float:
        order = state.orders.get(schedule.order_id)
        if order is not None and math.isfinite(order.required_production_time) and order.required_production_time > 0:
            return order.required_production_time
        return schedule.duration_hours
