"""
Domain models for review scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import IntEnum
from typing import Any

from .constants import (
    DEFAULT_EASE_FACTOR,
    DEFAULT_INTERVAL,
    DEFAULT_MAX_EASE,
    DEFAULT_MIN_EASE,
    PASSING_QUALITY,
)
from .errors import ConfigError


class ReviewQuality(IntEnum):
    """Self-assessed recall grades. Anything below HARD counts as a lapse."""

    BLACKOUT = 0
    INCORRECT = 1
    INCORRECT_EASY = 2
    HARD = 3
    GOOD = 4
    PERFECT = 5


@dataclass(frozen=True)
class ReviewOutcome:
    """
    The result of a single review event.

    Attributes:
        quality: Recall quality 0-5. 0-2 are failures, 3-5 successes.
    """

    quality: int


@dataclass(frozen=True)
class EaseBounds:
    """Inclusive range the ease factor is clamped into."""

    min_ease: float = DEFAULT_MIN_EASE
    max_ease: float = DEFAULT_MAX_EASE

    def __post_init__(self):
        if self.min_ease > self.max_ease:
            raise ConfigError(
                f"min_ease ({self.min_ease}) must not exceed max_ease ({self.max_ease})"
            )

    def clamp(self, ease: float) -> float:
        return min(max(ease, self.min_ease), self.max_ease)


@dataclass(frozen=True)
class SchedulingState:
    """
    Per learner, per item scheduling state.

    Attributes:
        repetitions: Consecutive successful reviews since the last reset.
        interval: Days until the next scheduled review.
        ease_factor: Interval growth multiplier; higher means easier.
        next_review_date: When the item is due. None means due immediately.
    """

    repetitions: int = 0
    interval: int = DEFAULT_INTERVAL
    ease_factor: float = DEFAULT_EASE_FACTOR
    next_review_date: datetime | None = None


@dataclass(frozen=True)
class ProgressItem:
    """
    A learner's progress on one lesson, as consumed by the ranker.

    `repetition` has the same meaning as `SchedulingState.repetitions`;
    0 marks an item that was never successfully reviewed. `lapses` counts
    failed reviews over the item's lifetime and `review_history` keeps the
    most recent qualities, oldest first.
    """

    lesson_id: str
    next_review_date: datetime | None = None
    interval: int = DEFAULT_INTERVAL
    ease_factor: float = DEFAULT_EASE_FACTOR
    mastery_level: int = 0
    repetition: int = 0
    last_review_date: datetime | None = None
    lapses: int = 0
    review_history: tuple[int, ...] = ()

    @property
    def streak(self) -> int:
        """Passing reviews at the end of the history, counted back to the last failure."""
        count = 0
        for quality in reversed(self.review_history):
            if quality < PASSING_QUALITY:
                break
            count += 1
        return count

    def scheduling_state(self) -> SchedulingState:
        return SchedulingState(
            repetitions=self.repetition,
            interval=self.interval,
            ease_factor=self.ease_factor,
            next_review_date=self.next_review_date,
        )

    def with_state(
        self, state: SchedulingState, reviewed_at: datetime | None = None
    ) -> "ProgressItem":
        """Return a copy carrying `state`. Mastery is left to the caller."""
        changes: dict[str, Any] = {
            "repetition": state.repetitions,
            "interval": state.interval,
            "ease_factor": state.ease_factor,
            "next_review_date": state.next_review_date,
        }
        if reviewed_at is not None:
            changes["last_review_date"] = reviewed_at
        return replace(self, **changes)
