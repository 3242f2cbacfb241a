"""Centralized constants for anamnesis.

Scheduling defaults and ranking weights live here so every layer
imports from a single source of truth.
"""

# ---------- Review quality ----------
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3

# ---------- Ease factor ----------
DEFAULT_EASE_FACTOR = 2.5
DEFAULT_MIN_EASE = 1.3
DEFAULT_MAX_EASE = 2.5

# ---------- Intervals (days) ----------
DEFAULT_INTERVAL = 1
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6

# ---------- Priority scoring ----------
BASE_PRIORITY_SCORE = 100.0
OVERDUE_BONUS_PER_DAY = 5.0
LOW_EASE_THRESHOLD = 2.0
LOW_EASE_BONUS = 20.0
MASTERY_THRESHOLD = 4
MASTERY_PENALTY = 10.0
NEW_ITEM_BONUS = 50.0

# ---------- Review queue ----------
DEFAULT_REVIEW_LIMIT = 20
DEFAULT_LOOKAHEAD_DAYS = 1

# ---------- Deck statistics ----------
MATURE_INTERVAL_DAYS = 21
MASTERED_LEVEL = 5
RETENTION_FACTOR = 10.0
HIGH_EASE_THRESHOLD = 3.0

# ---------- Review history ----------
MAX_HISTORY_LENGTH = 20
