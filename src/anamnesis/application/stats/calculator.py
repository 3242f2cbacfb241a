"""
Statistics calculator for summarizing a learner's progress items.

This is a pure computation module with no I/O.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime

from anamnesis.application.scheduler import is_due
from anamnesis.application.utils.dates import align, local_now
from anamnesis.application.utils.items import ensure_items
from anamnesis.domain.constants import (
    DEFAULT_EASE_FACTOR,
    HIGH_EASE_THRESHOLD,
    LOW_EASE_THRESHOLD,
    MASTERED_LEVEL,
    MATURE_INTERVAL_DAYS,
    RETENTION_FACTOR,
)
from anamnesis.domain.models import ProgressItem


@dataclass(frozen=True)
class EaseDistribution:
    low: int = 0  # ease < 2.0
    medium: int = 0  # 2.0 <= ease < 3.0
    high: int = 0


@dataclass(frozen=True)
class DeckStats:
    """
    Aggregate view of a learner's progress.

    Attributes:
        total_items: Number of progress items.
        due: Items due now, including never scheduled ones.
        overdue: Items whose date is strictly in the past.
        new: Items never successfully reviewed.
        learning: Reviewed items below the mastered level.
        mastered: Items at or above the mastered level.
        average_ease: Mean ease factor (2 d.p.).
        average_interval: Mean interval in days (rounded).
        mature_ratio: Share of items with an interval beyond 21 days.
        retention: Rough recall estimate exp(-interval / (ease * 10)).
    """

    total_items: int = 0
    due: int = 0
    overdue: int = 0
    new: int = 0
    learning: int = 0
    mastered: int = 0
    average_ease: float = DEFAULT_EASE_FACTOR
    average_interval: int = 0
    mature_ratio: float = 0.0
    retention: float = 0.0
    ease_distribution: EaseDistribution = field(default_factory=EaseDistribution)


class StatsCalculator:
    """
    Computes DeckStats from raw ProgressItem objects.

    Stateless and side-effect free.
    """

    def summarize(self, items: list[ProgressItem], now: datetime | None = None) -> DeckStats:
        items = ensure_items(items)
        if not items:
            return DeckStats()

        now = now or local_now()
        total = len(items)

        due = sum(1 for item in items if is_due(item, now))
        overdue = sum(1 for item in items if self._is_overdue(item, now))

        new = learning = mastered = 0
        for item in items:
            if item.mastery_level >= MASTERED_LEVEL:
                mastered += 1
            elif item.repetition == 0:
                new += 1
            else:
                learning += 1

        avg_ease = sum(item.ease_factor for item in items) / total
        avg_interval = sum(item.interval for item in items) / total
        mature = sum(1 for item in items if item.interval > MATURE_INTERVAL_DAYS)

        return DeckStats(
            total_items=total,
            due=due,
            overdue=overdue,
            new=new,
            learning=learning,
            mastered=mastered,
            average_ease=round(avg_ease, 2),
            average_interval=round(avg_interval),
            mature_ratio=round(mature / total, 2),
            retention=self._estimate_retention(avg_interval, avg_ease),
            ease_distribution=self._ease_distribution(items),
        )

    def _is_overdue(self, item: ProgressItem, now: datetime) -> bool:
        if item.next_review_date is None:
            return False
        return align(item.next_review_date, now) < now

    def _estimate_retention(self, avg_interval: float, avg_ease: float) -> float:
        """
        Exponential forgetting curve over the deck averages.
        """
        if avg_ease <= 0:
            return 0.0
        return round(math.exp(-avg_interval / (avg_ease * RETENTION_FACTOR)), 3)

    def _ease_distribution(self, items: list[ProgressItem]) -> EaseDistribution:
        low = medium = high = 0
        for item in items:
            if item.ease_factor < LOW_EASE_THRESHOLD:
                low += 1
            elif item.ease_factor < HIGH_EASE_THRESHOLD:
                medium += 1
            else:
                high += 1
        return EaseDistribution(low=low, medium=medium, high=high)
