"""Clock abstraction so scheduling never reads the wall clock directly."""

from datetime import datetime
from typing import Callable

#: Zero-argument callable returning the current time
Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current local time."""
    return datetime.now()
