"""Analysis module for scheduling results.

This module provides efficiency metrics for dashboards, including:
- Production throughput efficiency
- Delivery on-time efficiency
- Per-line and per-vehicle summary tables
"""

from .efficiency import (
    EfficiencyReport,
    delivery_efficiency,
    delivery_performance,
    delivery_score,
    efficiency_report,
    line_utilization,
    production_efficiency,
)

__all__ = [
    "EfficiencyReport",
    "delivery_efficiency",
    "delivery_performance",
    "delivery_score",
    "efficiency_report",
    "line_utilization",
    "production_efficiency",
]
