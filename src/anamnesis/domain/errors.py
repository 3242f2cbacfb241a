"""Exception hierarchy for anamnesis."""


class SchedulingError(Exception):
    """Base class for every error raised by anamnesis."""


class InvalidInput(SchedulingError, ValueError):
    """A caller-supplied argument has the wrong shape.

    Raised when a collection argument is not a sequence of items, and at the
    service and storage boundaries for out-of-range qualities or malformed
    review dates.
    """


class LessonNotFound(SchedulingError, KeyError):
    """No progress is stored for the requested lesson."""

    def __init__(self, lesson_id: str):
        super().__init__(lesson_id)
        self.lesson_id = lesson_id

    def __str__(self) -> str:
        return f"No progress recorded for lesson '{self.lesson_id}'"


class ConfigError(SchedulingError):
    """Scheduling configuration is inconsistent."""
