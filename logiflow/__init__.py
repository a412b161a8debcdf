"""LogiFlow scheduling engine.

Two-stage (production + delivery) scheduling for the LogiFlow logistics portal.
"""

__version__ = "0.1.0"
