"""HTTP relay for order placement and scheduling."""

from .app import create_app

__all__ = ['create_app']
