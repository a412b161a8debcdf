"""Error taxonomy for the scheduling engine.

Every scheduling failure is raised as a subclass of SchedulingError so callers
can surface the message and leave prior state unchanged.
"""

from typing import Any, Dict, Optional


class SchedulingError(Exception):
    """Base exception for scheduling errors with context."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with context."""
        msg = self.message
        if self.context:
            details = ", ".join(f"{key}={value}" for key, value in self.context.items())
            msg += f" ({details})"
        return msg


class InvalidOrder(SchedulingError):
    """Order is malformed (duration, priority, address) or unknown."""


class NoCapacity(SchedulingError):
    """No production line can take the order."""


class NoVehicleAvailable(SchedulingError):
    """Vehicle pool is exhausted."""


class NoDriverAvailable(SchedulingError):
    """Driver pool is exhausted."""


class InvalidSchedule(SchedulingError):
    """Schedule is unknown or does not belong to the given order."""


class InvalidTransition(SchedulingError):
    """Status change would move an entity backwards through its lifecycle."""


class StoreUnavailable(SchedulingError):
    """Document store collaborator failed."""
