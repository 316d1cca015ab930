"""Slot computation and booking-concurrency engine."""

__version__ = "1.0.0"
