"""Shared helpers."""

from .clock import Clock, system_clock

__all__ = ["Clock", "system_clock"]
