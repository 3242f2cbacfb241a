"""
Review Service: Application layer orchestrator.

Records graded reviews through the transition calculator and builds the
prioritized review queue from stored progress.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime

from anamnesis.application.scheduler import build_review_queue, count_due_within
from anamnesis.application.stats.calculator import DeckStats, StatsCalculator
from anamnesis.application.transition import reset_state, schedule_review
from anamnesis.application.utils.dates import local_now
from anamnesis.domain.constants import (
    DEFAULT_LOOKAHEAD_DAYS,
    DEFAULT_REVIEW_LIMIT,
    MAX_HISTORY_LENGTH,
    MAX_QUALITY,
    MIN_QUALITY,
    PASSING_QUALITY,
)
from anamnesis.domain.errors import InvalidInput, LessonNotFound
from anamnesis.domain.models import EaseBounds, ProgressItem, ReviewOutcome
from anamnesis.domain.ports import ProgressRepository

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Application service for recording reviews and listing due lessons.

    Depends on the ProgressRepository abstraction, not a concrete adapter.
    Reviews of the same lesson are serialized through a per-lesson lock
    owned by this instance; reviews of different lessons run concurrently.
    The lock table keeps one entry per lesson id seen for the lifetime of
    the service, so it grows with the number of distinct lessons reviewed.
    """

    def __init__(
        self,
        progress_repo: ProgressRepository,
        bounds: EaseBounds | None = None,
        calculator: StatsCalculator | None = None,
    ):
        """
        Args:
            progress_repo: The repository (port) for progress items.
            bounds: Ease factor bounds passed to the transition calculator.
            calculator: Optional custom stats calculator.
        """
        self._repo = progress_repo
        self._bounds = bounds or EaseBounds()
        self._calc = calculator or StatsCalculator()
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, lesson_id: str) -> asyncio.Lock:
        lock = self._locks.get(lesson_id)
        if lock is None:
            lock = self._locks[lesson_id] = asyncio.Lock()
        return lock

    async def record_review(
        self,
        lesson_id: str,
        quality: int,
        reviewed_at: datetime | None = None,
    ) -> ProgressItem:
        """
        Apply one graded review to a lesson and persist the result.

        Lessons without stored progress start from a fresh state. Mastery
        moves up one tier on success and down one tier on failure. A failure
        also counts as a lapse, and the quality is appended to the bounded
        review history.

        Raises:
            InvalidInput: If quality is outside 0-5.
        """
        if (
            not isinstance(quality, int)
            or isinstance(quality, bool)
            or not MIN_QUALITY <= quality <= MAX_QUALITY
        ):
            raise InvalidInput(
                f"quality must be an integer between {MIN_QUALITY} and {MAX_QUALITY}, got {quality!r}"
            )

        reviewed_at = reviewed_at or local_now()

        async with self._lock_for(lesson_id):
            current = await self._repo.get_progress(lesson_id)
            if current is None:
                logger.info(f"First review of lesson {lesson_id}")
                current = ProgressItem(lesson_id=lesson_id)

            state = schedule_review(
                ReviewOutcome(quality), current.scheduling_state(), reviewed_at, self._bounds
            )
            updated = current.with_state(state, reviewed_at=reviewed_at)

            passed = quality >= PASSING_QUALITY
            if passed:
                mastery = current.mastery_level + 1
            else:
                mastery = max(0, current.mastery_level - 1)
            updated = replace(
                updated,
                mastery_level=mastery,
                lapses=current.lapses + (0 if passed else 1),
                review_history=(*current.review_history, int(quality))[-MAX_HISTORY_LENGTH:],
            )

            await self._repo.save_progress(updated)

        logger.debug(
            f"Lesson {lesson_id}: q={quality} reps={state.repetitions} "
            f"interval={state.interval}d ease={state.ease_factor:.2f}"
        )
        return updated

    async def get_lesson(self, lesson_id: str) -> ProgressItem:
        """
        Raises:
            LessonNotFound: If no progress is stored for the lesson.
        """
        item = await self._repo.get_progress(lesson_id)
        if item is None:
            raise LessonNotFound(lesson_id)
        return item

    async def reset_lesson(self, lesson_id: str) -> ProgressItem:
        """Return a stored lesson to a fresh, immediately due state."""
        async with self._lock_for(lesson_id):
            current = await self.get_lesson(lesson_id)
            updated = replace(
                current.with_state(reset_state()), mastery_level=0, lapses=0, review_history=()
            )
            await self._repo.save_progress(updated)
        logger.info(f"Reset lesson {lesson_id}")
        return updated

    async def get_due_reviews(
        self,
        now: datetime | None = None,
        limit: int = DEFAULT_REVIEW_LIMIT,
        offset: int = 0,
    ) -> list[ProgressItem]:
        """
        Fetch stored progress and return the due lessons, most urgent first.
        """
        items = await self._repo.get_all_progress()
        if not items:
            return []
        queue = build_review_queue(items, now=now, limit=limit, offset=offset)
        logger.debug(f"{len(queue)} of {len(items)} lessons queued for review")
        return queue

    async def count_upcoming(
        self,
        days_ahead: int = DEFAULT_LOOKAHEAD_DAYS,
        now: datetime | None = None,
    ) -> int:
        """Number of lessons due now or within `days_ahead` days."""
        items = await self._repo.get_all_progress()
        return count_due_within(items, days_ahead=days_ahead, now=now)

    async def get_stats(self, now: datetime | None = None) -> DeckStats:
        items = await self._repo.get_all_progress()
        return self._calc.summarize(items, now=now)
