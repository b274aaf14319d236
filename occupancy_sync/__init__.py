"""Unit occupancy reconciliation and snapshot sync."""

__version__ = "1.0.0"
