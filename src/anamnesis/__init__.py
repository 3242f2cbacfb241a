"""anamnesis: SM-2 review scheduling and due-queue ranking."""

from anamnesis.application.scheduler import (
    count_due_within,
    filter_due,
    priority_score,
    rank_by_priority,
)
from anamnesis.application.transition import compute_next_state, next_review_date
from anamnesis.consts import VERSION
from anamnesis.domain import (
    EaseBounds,
    InvalidInput,
    ProgressItem,
    ReviewOutcome,
    ReviewQuality,
    SchedulingState,
)

__version__ = VERSION

__all__ = [
    "compute_next_state",
    "next_review_date",
    "filter_due",
    "priority_score",
    "rank_by_priority",
    "count_due_within",
    "EaseBounds",
    "InvalidInput",
    "ProgressItem",
    "ReviewOutcome",
    "ReviewQuality",
    "SchedulingState",
]
