"""
Due-item selection and ranking.

Filters the progress items that are due and orders them by urgency. Pure
functions over caller-supplied values: nothing here reads storage or
mutates an item.
"""

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime, timedelta

from anamnesis.application.utils.dates import align, local_now
from anamnesis.application.utils.items import ensure_items
from anamnesis.domain.constants import (
    BASE_PRIORITY_SCORE,
    DEFAULT_LOOKAHEAD_DAYS,
    DEFAULT_REVIEW_LIMIT,
    LOW_EASE_BONUS,
    LOW_EASE_THRESHOLD,
    MASTERY_PENALTY,
    MASTERY_THRESHOLD,
    NEW_ITEM_BONUS,
    OVERDUE_BONUS_PER_DAY,
)
from anamnesis.domain.models import ProgressItem

SECONDS_PER_DAY = 86400.0


def _due_by(item: ProgressItem, threshold: datetime) -> bool:
    if item.next_review_date is None:
        return True
    return align(item.next_review_date, threshold) <= threshold


def is_due(item: ProgressItem, now: datetime | None = None) -> bool:
    """An item is due when it was never scheduled or its date has arrived."""
    return _due_by(item, now or local_now())


def filter_due(items: Iterable[ProgressItem], now: datetime | None = None) -> list[ProgressItem]:
    """
    Select the items that are due at `now`.

    Raises:
        InvalidInput: If `items` is not a sequence.
    """
    items = ensure_items(items)
    now = now or local_now()
    return [item for item in items if _due_by(item, now)]


def days_overdue(item: ProgressItem, now: datetime | None = None) -> float:
    """Fractional days past the due date; 0 when not yet due or never scheduled."""
    if item.next_review_date is None:
        return 0.0
    now = now or local_now()
    delta = now - align(item.next_review_date, now)
    return max(0.0, delta.total_seconds() / SECONDS_PER_DAY)


def priority_score(item: ProgressItem, now: datetime | None = None) -> float:
    """
    Urgency of an item; larger means review sooner. Never negative.

    Overdue days, a low ease factor and novelty raise the score. Mastery
    beyond level 3 lowers it.
    """
    score = BASE_PRIORITY_SCORE
    score += days_overdue(item, now) * OVERDUE_BONUS_PER_DAY

    if item.ease_factor < LOW_EASE_THRESHOLD:
        score += LOW_EASE_BONUS

    if item.mastery_level >= MASTERY_THRESHOLD:
        score -= MASTERY_PENALTY * (item.mastery_level - (MASTERY_THRESHOLD - 1))

    if item.repetition == 0:
        score += NEW_ITEM_BONUS

    return max(0.0, score)


def rank_by_priority(
    items: Iterable[ProgressItem], now: datetime | None = None
) -> list[ProgressItem]:
    """
    Order items by descending priority score.

    Equal scores fall back to ascending lesson_id so the order is fully
    deterministic. Returns copies; the caller's items are left alone.

    Raises:
        InvalidInput: If `items` is not a sequence.
    """
    items = ensure_items(items)
    now = now or local_now()
    scored = [(priority_score(item, now), replace(item)) for item in items]
    scored.sort(key=lambda pair: (-pair[0], str(pair[1].lesson_id)))
    return [item for _, item in scored]


def count_due_within(
    items: Iterable[ProgressItem],
    days_ahead: int = DEFAULT_LOOKAHEAD_DAYS,
    now: datetime | None = None,
) -> int:
    """
    Count items due now or within the next `days_ahead` calendar days.

    The upper bound is inclusive.

    Raises:
        InvalidInput: If `items` is not a sequence.
    """
    items = ensure_items(items)
    now = now or local_now()
    threshold = now + timedelta(days=days_ahead)
    return sum(1 for item in items if _due_by(item, threshold))


def build_review_queue(
    items: Iterable[ProgressItem],
    now: datetime | None = None,
    limit: int = DEFAULT_REVIEW_LIMIT,
    offset: int = 0,
) -> list[ProgressItem]:
    """Due items, most urgent first, paginated by `offset` and `limit`."""
    now = now or local_now()
    ranked = rank_by_priority(filter_due(items, now), now)
    return ranked[offset : offset + limit]
