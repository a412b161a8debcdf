"""Monotonic status progression shared by orders and schedules."""

from enum import Enum
from typing import Type, TypeVar

from ..exceptions import InvalidTransition

StatusT = TypeVar("StatusT", bound=Enum)


def advance(entity_id: str, current: StatusT, new: StatusT, status_type: Type[StatusT]) -> StatusT:
    """
    Validate a status change against the declaration order of ``status_type``.

    Moving forward (including skipping ahead) is allowed. Repeating the
    current status is rejected so each transition runs its effects once.

    Returns:
        The new status

    Raises:
        InvalidTransition: If ``new`` does not come after ``current``
    """
    order = list(status_type)
    current = status_type(current)
    new = status_type(new)
    if new == current:
        raise InvalidTransition(
            f"{status_type.__name__} is already {current.value}",
            {"id": entity_id, "from": current.value, "to": new.value},
        )
    if order.index(new) < order.index(current):
        raise InvalidTransition(
            f"{status_type.__name__} cannot move backwards",
            {"id": entity_id, "from": current.value, "to": new.value},
        )
    return new


def is_behind(current: StatusT, target: StatusT, status_type: Type[StatusT]) -> bool:
    """True if ``current`` comes strictly before ``target``."""
    order = list(status_type)
    return order.index(status_type(current)) < order.index(status_type(target))
