"""Bounded pool of production lines with least-loaded allocation."""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from ..exceptions import NoCapacity
from ..models.production_line import ProductionLine
from ..models.production_schedule import ProductionSchedule

logger = logging.getLogger(__name__)


class ProductionLinePool:
    """
    Production lines available to the scheduler.

    Allocation policy:
    1. Among active lines free at the requested time, pick the least loaded
       (fewest live schedules), ties broken by registration order.
    2. If every active line is busy, queue on the line that frees up first.
    3. If no line is active, or the queue start is beyond the horizon, fail
       with NoCapacity.
    """

    def __init__(self, lines: Optional[Iterable[ProductionLine]] = None):
        self._lines: Dict[str, ProductionLine] = {}
        for line in lines or []:
            self.add(line)

    def add(self, line: ProductionLine) -> ProductionLine:
        if line.id in self._lines:
            raise ValueError(f"Production line {line.id} already registered")
        self._lines[line.id] = line
        logger.info(f"Registered production line {line}")
        return line

    def get(self, line_id: str) -> ProductionLine:
        try:
            return self._lines[line_id]
        except KeyError:
            raise KeyError(f"Unknown production line: {line_id}") from None

    @property
    def lines(self) -> List[ProductionLine]:
        return list(self._lines.values())

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, line_id: str) -> bool:
        return line_id in self._lines

    def select(self, at: datetime, max_queue_hours: Optional[float] = None) -> Tuple[ProductionLine, datetime]:
        """
        Pick a line and the earliest start time on it.

        Args:
            at: Requested start (usually now)
            max_queue_hours: Furthest past ``at`` a queued start may be

        Returns:
            (line, start_time)

        Raises:
            NoCapacity: If no active line exists or the queue is over the horizon
        """
        ranked = [(index, line) for index, line in enumerate(self._lines.values()) if line.active]
        if not ranked:
            raise NoCapacity("No active production line", {"registered_lines": len(self._lines)})

        free = [(index, line) for index, line in ranked if line.is_free_at(at)]
        if free:
            _, line = min(free, key=lambda pair: (pair[1].load, pair[0]))
            return line, at

        _, line = min(ranked, key=lambda pair: (pair[1].booked_until, pair[0]))
        start = line.booked_until
        if max_queue_hours is not None and start - at > timedelta(hours=max_queue_hours):
            raise NoCapacity(
                "Production queue is full",
                {"earliest_start": start.isoformat(), "max_queue_hours": max_queue_hours},
            )
        return line, start

    def acquire(self, schedule: ProductionSchedule) -> None:
        """Book ``schedule`` on its line."""
        line = self.get(schedule.line_id)
        line.assigned_schedule_ids.append(schedule.id)
        if line.booked_until is None or schedule.end_time > line.booked_until:
            line.booked_until = schedule.end_time

    def sync(self, schedules: Iterable[ProductionSchedule]) -> None:
        """
        Rebuild every line's bookings from the live schedules.

        Called after windows move or schedules complete.
        """
        live_by_line: Dict[str, List[ProductionSchedule]] = defaultdict(list)
        for schedule in schedules:
            if schedule.is_live:
                live_by_line[schedule.line_id].append(schedule)

        for line_id, line in self._lines.items():
            live = sorted(live_by_line.get(line_id, []), key=lambda s: (s.start_time, s.sequence))
            line.assigned_schedule_ids = [s.id for s in live]
            line.booked_until = max((s.end_time for s in live), default=None)
