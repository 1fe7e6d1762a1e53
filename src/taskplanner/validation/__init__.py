"""Validation module for verifying scheduling results."""

from taskplanner.validation.validator import ScheduleValidator, ValidationError

__all__ = [
    "ScheduleValidator",
    "ValidationError",
]
