"""Structured logging package."""

from meal_tracker.logs.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
