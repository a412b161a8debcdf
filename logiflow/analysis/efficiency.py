"""Efficiency metrics for production and delivery schedules.

Metrics never fail: empty inputs yield 0 (or an empty DataFrame).
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence

import pandas as pd

from ..models.delivery_schedule import DeliverySchedule
from ..models.production_schedule import ProductionSchedule, ScheduleStatus

LINE_UTILIZATION_COLUMNS = ['line_id', 'schedules', 'booked_hours', 'mean_efficiency']
DELIVERY_PERFORMANCE_COLUMNS = ['vehicle_id', 'deliveries', 'completed', 'total_distance_km', 'on_time_ratio']


def production_efficiency(schedules: Sequence[ProductionSchedule]) -> float:
    """Mean line-efficiency snapshot across all schedules; 0 when empty."""
    if not schedules:
        return 0.0
    return sum(s.efficiency for s in schedules) / len(schedules)


def delivery_score(schedule: DeliverySchedule) -> float:
    """
    On-time score of one completed delivery.

    Estimated over actual duration, clipped at 1. A non-positive actual
    duration counts as perfectly on time.
    """
    actual = schedule.actual_duration_hours
    if actual is None or actual <= 0:
        return 1.0
    return min(1.0, schedule.estimated_duration_hours / actual)


def _completed(schedules: Sequence[DeliverySchedule]) -> List[DeliverySchedule]:
    return [s for s in schedules if s.status == ScheduleStatus.COMPLETED]


def delivery_efficiency(schedules: Sequence[DeliverySchedule]) -> float:
    """Mean on-time score across completed deliveries; 0 when none completed."""
    completed = _completed(schedules)
    if not completed:
        return 0.0
    return sum(delivery_score(s) for s in completed) / len(completed)


def line_utilization(schedules: Sequence[ProductionSchedule]) -> pd.DataFrame:
    """Per-line schedule count, booked hours and mean efficiency."""
    if not schedules:
        return pd.DataFrame(columns=LINE_UTILIZATION_COLUMNS)

    df = pd.DataFrame([
        {'line_id': s.line_id, 'duration_hours': s.duration_hours, 'efficiency': s.efficiency}
        for s in schedules
    ])
    summary = df.groupby('line_id', sort=True).agg(
        schedules=('duration_hours', 'size'),
        booked_hours=('duration_hours', 'sum'),
        mean_efficiency=('efficiency', 'mean'),
    ).reset_index()
    return summary[LINE_UTILIZATION_COLUMNS]


def delivery_performance(schedules: Sequence[DeliverySchedule]) -> pd.DataFrame:
    """
    Per-vehicle delivery count, distance and on-time ratio.

    on_time_ratio is the share of completed deliveries that arrived no later
    than estimated (NaN for vehicles with nothing completed).
    """
    if not schedules:
        return pd.DataFrame(columns=DELIVERY_PERFORMANCE_COLUMNS)

    rows = []
    for s in schedules:
        completed = s.status == ScheduleStatus.COMPLETED
        rows.append({
            'vehicle_id': s.vehicle_id,
            'distance_km': s.route.distance,
            'completed': completed,
            'on_time': float(delivery_score(s) >= 1.0) if completed else None,
        })
    df = pd.DataFrame(rows)
    df['on_time'] = df['on_time'].astype(float)

    summary = df.groupby('vehicle_id', sort=True).agg(
        deliveries=('distance_km', 'size'),
        completed=('completed', 'sum'),
        total_distance_km=('distance_km', 'sum'),
        on_time_ratio=('on_time', 'mean'),
    ).reset_index()
    summary['completed'] = summary['completed'].astype(int)
    return summary[DELIVERY_PERFORMANCE_COLUMNS]


@dataclass
class EfficiencyReport:
    """Dashboard efficiency summary."""
    production_efficiency: float
    delivery_efficiency: float
    production_schedules: int
    delivery_schedules: int
    completed_deliveries: int
    line_utilization: pd.DataFrame
    delivery_performance: pd.DataFrame

    def to_dict(self) -> Dict:
        """JSON-ready representation (tables as lists of records)."""
        return {
            'productionEfficiency': self.production_efficiency,
            'deliveryEfficiency': self.delivery_efficiency,
            'productionSchedules': self.production_schedules,
            'deliverySchedules': self.delivery_schedules,
            'completedDeliveries': self.completed_deliveries,
            'lineUtilization': _records(self.line_utilization),
            'deliveryPerformance': _records(self.delivery_performance),
        }


def _records(df: pd.DataFrame) -> List[Dict]:
    # NaN is not valid JSON
    return df.astype(object).where(pd.notna(df), None).to_dict(orient='records')


def efficiency_report(
    production_schedules: Sequence[ProductionSchedule],
    delivery_schedules: Sequence[DeliverySchedule],
) -> EfficiencyReport:
    return EfficiencyReport(
        production_efficiency=production_efficiency(production_schedules),
        delivery_efficiency=delivery_efficiency(delivery_schedules),
        production_schedules=len(production_schedules),
        delivery_schedules=len(delivery_schedules),
        completed_deliveries=len(_completed(delivery_schedules)),
        line_utilization=line_utilization(production_schedules),
        delivery_performance=delivery_performance(delivery_schedules),
    )
