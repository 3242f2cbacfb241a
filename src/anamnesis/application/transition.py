"""
Review-state transition calculator (SM-2 family).

This is a pure computation module with no I/O. Given the quality of one
review and the item's prior state it returns the next state:

1. quality < 3 resets repetitions and the interval, leaving ease untouched
2. otherwise the interval grows 1 -> 6 -> round(interval * ease)
3. ease moves by 0.1 - q * (0.08 + q * 0.02) where q = 5 - quality
"""

import math
from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone

from anamnesis.application.utils.dates import parse_datetime
from anamnesis.domain.constants import (
    DEFAULT_INTERVAL,
    FIRST_INTERVAL,
    MAX_QUALITY,
    PASSING_QUALITY,
    SECOND_INTERVAL,
)
from anamnesis.domain.models import EaseBounds, ReviewOutcome, SchedulingState

DEFAULT_BOUNDS = EaseBounds()


def _quality_of(outcome: ReviewOutcome | int) -> int:
    if isinstance(outcome, ReviewOutcome):
        return outcome.quality
    return int(outcome)


def _round_half_up(value: float) -> int:
    # Builtin round() is banker's rounding; intervals round .5 upwards.
    return int(math.floor(value + 0.5))


def ease_delta(quality: int) -> float:
    """
    Ease adjustment for a successful review.

    +0.1 at quality 5, roughly 0.0 at 4 and -0.14 at 3.
    """
    q = MAX_QUALITY - quality
    return 0.1 - q * (0.08 + q * 0.02)


def compute_next_state(
    outcome: ReviewOutcome | int,
    prior_state: SchedulingState | None = None,
    bounds: EaseBounds | None = None,
) -> SchedulingState:
    """
    Compute the scheduling state that follows one review.

    Args:
        outcome: The review outcome, or its bare quality (0-5). Values outside
            0-5 are a caller error and are not checked here.
        prior_state: State before the review; a fresh state when omitted.
        bounds: Ease factor bounds; 1.3-2.5 when omitted.

    Returns:
        The new state. next_review_date is left unset, see next_review_date().
    """
    quality = _quality_of(outcome)
    prior = prior_state or SchedulingState()
    bounds = bounds or DEFAULT_BOUNDS

    prior_interval = prior.interval if prior.interval is not None else DEFAULT_INTERVAL

    if quality < PASSING_QUALITY:
        return SchedulingState(
            repetitions=0,
            interval=FIRST_INTERVAL,
            ease_factor=bounds.clamp(prior.ease_factor),
        )

    repetitions = prior.repetitions + 1
    if repetitions == 1:
        interval = FIRST_INTERVAL
    elif repetitions == 2:
        interval = SECOND_INTERVAL
    else:
        # Growth uses the ease factor as it was before this review.
        interval = max(1, _round_half_up(prior_interval * prior.ease_factor))

    ease_factor = bounds.clamp(prior.ease_factor + ease_delta(quality))

    return SchedulingState(
        repetitions=repetitions,
        interval=interval,
        ease_factor=ease_factor,
    )


def _in_local_zone(moment: datetime) -> bool:
    """True for aware values produced by `datetime.astimezone()`, as local_now() returns."""
    if not isinstance(moment.tzinfo, timezone):
        return False
    local = moment.astimezone()
    return moment.utcoffset() == local.utcoffset() and moment.tzname() == local.tzname()


def next_review_date(last_review: datetime | date | str, interval: int) -> datetime:
    """
    Date of the next review: `interval` calendar days after `last_review`.

    Naive datetimes and zone-aware ones (ZoneInfo) step in wall-clock days.
    A fixed-offset value in the local zone, as returned by local_now(), is
    moved on the local calendar and re-localized, so it keeps its hour when
    the offset changes for DST. Any other fixed offset is kept as given.
    """
    moment = parse_datetime(last_review)
    if _in_local_zone(moment):
        wall = moment.astimezone().replace(tzinfo=None) + timedelta(days=interval)
        return wall.astimezone()
    return moment + timedelta(days=interval)


def schedule_review(
    outcome: ReviewOutcome | int,
    prior_state: SchedulingState | None,
    reviewed_at: datetime | date | str,
    bounds: EaseBounds | None = None,
) -> SchedulingState:
    """Compute the next state and stamp its next_review_date."""
    state = compute_next_state(outcome, prior_state, bounds)
    return SchedulingState(
        repetitions=state.repetitions,
        interval=state.interval,
        ease_factor=state.ease_factor,
        next_review_date=next_review_date(reviewed_at, state.interval),
    )


def compute_batch(
    reviews: Iterable[tuple[ReviewOutcome | int, SchedulingState | None]],
    bounds: EaseBounds | None = None,
) -> list[SchedulingState]:
    """Apply compute_next_state to each (outcome, prior_state) pair, in order."""
    return [compute_next_state(outcome, prior, bounds) for outcome, prior in reviews]


def reset_state() -> SchedulingState:
    """A brand new state: no repetitions, default ease, due immediately."""
    return SchedulingState()
