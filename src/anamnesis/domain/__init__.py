# Domain Package
from .errors import ConfigError, InvalidInput, LessonNotFound, SchedulingError
from .models import (
    EaseBounds,
    ProgressItem,
    ReviewOutcome,
    ReviewQuality,
    SchedulingState,
)
from .ports import ProgressRepository

__all__ = [
    "EaseBounds",
    "ProgressItem",
    "ReviewOutcome",
    "ReviewQuality",
    "SchedulingState",
    "ProgressRepository",
    "SchedulingError",
    "InvalidInput",
    "LessonNotFound",
    "ConfigError",
]
