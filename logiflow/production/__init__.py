"""Production line allocation and production queue scheduling."""

from .line_pool import ProductionLinePool
from .scheduler import ProductionScheduler

__all__ = [
    'ProductionLinePool',
    'ProductionScheduler',
]
