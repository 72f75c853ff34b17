"""SQLAlchemy models for the Encore counter service."""

from .counter import BookingCounter

__all__ = ["BookingCounter"]
