"""Tests for production scheduling and queue optimization."""

import math
from datetime import timedelta

import pytest

from logiflow.config import SchedulingConfig
from logiflow.exceptions import InvalidOrder, InvalidTransition, NoCapacity
from logiflow.models import (
    OrderItemStatus,
    OrderPriority,
    OrderStatus,
    ProductionLine,
    ScheduleStatus,
)
from logiflow.production import ProductionScheduler
from logiflow.state import SchedulingState
from logiflow.store import SchedulingStore

from conftest import NOW


def schedule_all(store, orders):
    schedules = []
    for order in orders:
        store.register_order(order)
        schedules.append(store.schedule_production(order.id))
    return schedules


def windows(schedules):
    return [(s.id, s.start_time, s.end_time) for s in schedules]


class TestScheduleProduction:
    """Tests for schedule_production."""

    def test_high_priority_two_hours(self, store, make_order):
        """Test a 2h high-priority order gets weight 3 and a 2h window."""
        order = store.register_order(make_order(priority=OrderPriority.HIGH, required_production_time=2))
        schedule = store.schedule_production(order.id)

        assert schedule.priority == 3
        assert schedule.start_time == NOW
        assert schedule.end_time == schedule.start_time + timedelta(hours=2)
        assert schedule.line_id == "line-1"
        assert schedule.efficiency == pytest.approx(0.85)
        assert schedule.status == ScheduleStatus.SCHEDULED

    @pytest.mark.parametrize("hours", [0.25, 1, 2.5, 8, 36])
    def test_window_matches_production_time(self, store, make_order, hours):
        """Test endTime - startTime equals requiredProductionTime."""
        order = store.register_order(make_order(required_production_time=hours))
        schedule = store.schedule_production(order)
        assert schedule.end_time - schedule.start_time == timedelta(hours=hours)

    def test_order_is_not_mutated(self, store, make_order):
        """Test scheduling production leaves the order untouched."""
        order = store.register_order(make_order())
        before = order.model_dump()
        store.schedule_production(order.id)
        assert order.model_dump() == before

    def test_second_order_queues_behind_first(self, store, make_order):
        """Test a busy single line queues the next window at the previous end."""
        first, second = schedule_all(store, [make_order(), make_order(required_production_time=3)])
        assert second.start_time == first.end_time
        assert second.end_time == first.end_time + timedelta(hours=3)

    def test_least_loaded_line_used(self, store, make_order):
        """Test a second free line takes the next order."""
        store.add_production_line(ProductionLine(id="line-2", efficiency=0.95))
        first, second = schedule_all(store, [make_order(), make_order()])
        assert first.line_id == "line-1"
        assert second.line_id == "line-2"
        assert second.start_time == NOW
        assert second.efficiency == pytest.approx(0.95)

    @pytest.mark.parametrize("hours", [0, -1.5, math.nan, math.inf])
    def test_invalid_production_time(self, store, make_order, hours):
        """Test non-positive or non-finite durations raise InvalidOrder."""
        order = store.register_order(make_order(required_production_time=hours))
        with pytest.raises(InvalidOrder):
            store.schedule_production(order.id)
        assert store.production_schedules() == []
        assert store.state.lines.get("line-1").load == 0

    def test_unregistered_order(self, store, make_order):
        """Test scheduling an unknown order raises InvalidOrder."""
        with pytest.raises(InvalidOrder):
            store.schedule_production(make_order())

    def test_no_active_line(self, scheduling_config, clock, make_order):
        """Test a store without lines raises NoCapacity."""
        store = SchedulingStore(scheduling_config, clock=clock)
        order = store.register_order(make_order())
        with pytest.raises(NoCapacity):
            store.schedule_production(order.id)

    def test_queue_horizon_exhausted(self, address_book, clock, make_order):
        """Test queueing beyond max_queue_hours raises NoCapacity and appends nothing."""
        config = SchedulingConfig(max_queue_hours=1, address_book=address_book)
        store = SchedulingStore.with_default_resources(config, clock=clock)
        schedule_all(store, [make_order(required_production_time=2)])
        order = store.register_order(make_order())
        with pytest.raises(NoCapacity):
            store.schedule_production(order.id)
        assert len(store.production_schedules()) == 1

    def test_plan_has_no_side_effects(self, scheduling_config, clock, make_order):
        """Test planning leaves the state untouched until committed."""
        state = SchedulingState()
        state.lines.add(ProductionLine(id="line-1"))
        scheduler = ProductionScheduler(scheduling_config, clock=clock, id_factory=lambda: "fixed")
        order = make_order()

        planned = scheduler.plan_production(state, order)
        assert planned.id == "fixed"
        assert state.production_schedules == []
        assert state.lines.get("line-1").load == 0

        scheduler.commit_production(state, order, planned)
        assert state.production_schedules == [planned]
        assert state.lines.get("line-1").assigned_schedule_ids == ["fixed"]


class TestOptimizeProductionSchedule:
    """Tests for optimize_production_schedule."""

    def test_empty_is_noop(self, store):
        """Test optimizing nothing returns nothing."""
        assert store.optimize_production_schedule() == []

    def test_priorities_sorted(self, store, make_order):
        """Test [low, high, medium] optimizes to [high, medium, low]."""
        schedule_all(store, [
            make_order(priority=OrderPriority.LOW),
            make_order(priority=OrderPriority.HIGH),
            make_order(priority=OrderPriority.MEDIUM),
        ])
        optimized = store.optimize_production_schedule()
        assert [s.priority for s in optimized] == [3, 2, 1]

    def test_high_starts_before_low(self, store, make_order):
        """Test a high order inserted after a low one is moved ahead of it."""
        low, high = schedule_all(store, [
            make_order(priority=OrderPriority.LOW),
            make_order(priority=OrderPriority.HIGH),
        ])
        assert low.start_time < high.start_time

        store.optimize_production_schedule()
        assert high.start_time < low.start_time
        assert high.start_time == NOW
        assert low.start_time == high.end_time

    def test_ties_keep_creation_order(self, store, make_order):
        """Test equal priorities keep their insertion order."""
        schedules = schedule_all(store, [make_order() for _ in range(4)])
        optimized = store.optimize_production_schedule()
        assert [s.id for s in optimized] == [s.id for s in schedules]

    def test_windows_packed_back_to_back(self, store, make_order):
        """Test every window on a line starts at its predecessor's end."""
        schedule_all(store, [
            make_order(priority=OrderPriority.LOW, required_production_time=1),
            make_order(priority=OrderPriority.HIGH, required_production_time=3),
            make_order(priority=OrderPriority.MEDIUM, required_production_time=2),
        ])
        optimized = store.optimize_production_schedule()
        for previous, current in zip(optimized, optimized[1:]):
            assert current.start_time == previous.end_time
        assert optimized[0].start_time == NOW
        assert optimized[-1].end_time == NOW + timedelta(hours=6)

    def test_idempotent(self, store, make_order):
        """Test running optimize twice produces identical output."""
        schedule_all(store, [
            make_order(priority=OrderPriority.MEDIUM),
            make_order(priority=OrderPriority.LOW),
            make_order(priority=OrderPriority.HIGH),
            make_order(priority=OrderPriority.HIGH),
        ])
        first = windows(store.optimize_production_schedule())
        second = windows(store.optimize_production_schedule())
        assert first == second

    def test_line_and_efficiency_untouched(self, store, make_order):
        """Test optimization never reassigns lines."""
        store.add_production_line(ProductionLine(id="line-2", efficiency=0.6))
        schedules = schedule_all(store, [
            make_order(priority=OrderPriority.LOW),
            make_order(priority=OrderPriority.LOW),
            make_order(priority=OrderPriority.HIGH),
        ])
        before = {s.id: (s.line_id, s.efficiency) for s in schedules}
        store.optimize_production_schedule()
        assert {s.id: (s.line_id, s.efficiency) for s in schedules} == before

    def test_lines_never_overlap(self, store, make_order):
        """Test live windows on one line stay disjoint after optimization."""
        store.add_production_line(ProductionLine(id="line-2"))
        schedule_all(store, [
            make_order(priority=priority, required_production_time=hours)
            for priority, hours in [
                (OrderPriority.LOW, 2), (OrderPriority.HIGH, 1), (OrderPriority.MEDIUM, 4),
                (OrderPriority.HIGH, 3), (OrderPriority.LOW, 1),
            ]
        ])
        optimized = store.optimize_production_schedule()
        for line_id in ("line-1", "line-2"):
            on_line = sorted((s for s in optimized if s.line_id == line_id), key=lambda s: s.start_time)
            for previous, current in zip(on_line, on_line[1:]):
                assert current.start_time >= previous.end_time

    def test_running_window_stays_put(self, store, make_order):
        """Test in-progress windows keep their place and pending work packs after them."""
        running, queued, urgent = schedule_all(store, [
            make_order(priority=OrderPriority.LOW, required_production_time=2),
            make_order(priority=OrderPriority.LOW, required_production_time=2),
            make_order(priority=OrderPriority.HIGH, required_production_time=1),
        ])
        store.start_production(running.id)
        running_window = (running.start_time, running.end_time)

        optimized = store.optimize_production_schedule()

        assert (running.start_time, running.end_time) == running_window
        assert urgent.start_time == running.end_time
        assert queued.start_time == urgent.end_time
        assert [s.id for s in optimized] == [urgent.id, running.id, queued.id]

    def test_pending_deliveries_reanchored(self, store, make_order):
        """Test deliveries follow their production window when it moves."""
        low, high = schedule_all(store, [
            make_order(priority=OrderPriority.LOW),
            make_order(priority=OrderPriority.HIGH, required_production_time=1),
        ])
        delivery = store.schedule_delivery(high.order_id)
        assert delivery.start_time == NOW + timedelta(hours=3)

        store.optimize_production_schedule()

        assert delivery.start_time == high.end_time == NOW + timedelta(hours=1)
        assert delivery.estimated_arrival == delivery.start_time + timedelta(hours=delivery.route.duration)


class TestProductionLifecycle:
    """Tests for start_production and complete_production."""

    def test_start_marks_order_processing(self, store, make_order):
        """Test starting production advances the order and its items."""
        order = store.register_order(make_order())
        schedule = store.schedule_production(order.id)
        store.start_production(schedule.id)

        assert schedule.status == ScheduleStatus.IN_PROGRESS
        assert order.status == OrderStatus.PROCESSING
        assert all(item.status == OrderItemStatus.IN_PRODUCTION for item in order.items)

    def test_complete_releases_line(self, store, make_order):
        """Test completing production frees the line and completes items."""
        order = store.register_order(make_order())
        schedule = store.schedule_production(order.id)
        store.start_production(schedule.id)
        store.complete_production(schedule.id)

        line = store.state.lines.get("line-1")
        assert schedule.status == ScheduleStatus.COMPLETED
        assert line.load == 0
        assert line.booked_until is None
        assert all(item.status == OrderItemStatus.COMPLETED for item in order.items)
        assert store.production_schedules() == [schedule]

    def test_restart_after_complete_rejected(self, store, make_order):
        """Test a completed schedule cannot move back to in-progress."""
        order = store.register_order(make_order())
        schedule = store.schedule_production(order.id)
        store.complete_production(schedule.id)
        with pytest.raises(InvalidTransition):
            store.start_production(schedule.id)

    def test_completed_window_not_moved(self, store, make_order):
        """Test optimize ignores completed windows."""
        done, pending = schedule_all(store, [
            make_order(priority=OrderPriority.LOW),
            make_order(priority=OrderPriority.HIGH),
        ])
        store.complete_production(done.id)
        done_window = (done.start_time, done.end_time)
        store.optimize_production_schedule()
        assert (done.start_time, done.end_time) == done_window
        assert pending.start_time == NOW + timedelta(hours=2)

    def test_repeated_transitions_rejected(self, store, make_order):
        """Test starting or completing a schedule twice raises InvalidTransition."""
        order = store.register_order(make_order())
        schedule = store.schedule_production(order.id)

        store.start_production(schedule.id)
        with pytest.raises(InvalidTransition):
            store.start_production(schedule.id)

        store.complete_production(schedule.id)
        with pytest.raises(InvalidTransition):
            store.complete_production(schedule.id)
        assert schedule.status == ScheduleStatus.COMPLETED

    def test_one_running_schedule_per_line(self, store, make_order):
        """Test a queued schedule cannot start while its line is busy."""
        first, second = schedule_all(store, [make_order(), make_order()])
        assert first.line_id == second.line_id

        store.start_production(first.id)
        with pytest.raises(InvalidTransition):
            store.start_production(second.id)
        assert second.status == ScheduleStatus.SCHEDULED

        store.complete_production(first.id)
        store.start_production(second.id)
        running = [s for s in store.production_schedules() if s.status == ScheduleStatus.IN_PROGRESS]
        assert running == [second]
