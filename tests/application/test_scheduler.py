"""Tests for due-item selection and priority ranking."""

from datetime import datetime, timedelta

import pytest

from anamnesis.application.scheduler import (
    build_review_queue,
    count_due_within,
    days_overdue,
    filter_due,
    is_due,
    priority_score,
    rank_by_priority,
)
from anamnesis.domain.errors import InvalidInput
from anamnesis.domain.models import ProgressItem


class TestFilterDue:
    def test_never_scheduled_is_due(self, now):
        items = [ProgressItem(lesson_id="a", next_review_date=None)]
        assert [i.lesson_id for i in filter_due(items, now)] == ["a"]

    def test_due_set_soundness(self, now, make_item):
        items = [
            make_item("past", -3),
            make_item("exact", 0),
            make_item("future", 2),
            make_item("new"),
        ]
        due = {i.lesson_id for i in filter_due(items, now)}
        assert due == {"past", "exact", "new"}

    def test_accepts_generators(self, now, make_item):
        due = filter_due((make_item(str(n), -1) for n in range(3)), now)
        assert len(due) == 3

    def test_returns_unmodified_items(self, now, make_item):
        items = [make_item("a", -1, ease_factor=1.7)]
        snapshot = list(items)
        due = filter_due(items, now)
        assert due[0] == snapshot[0]
        assert items == snapshot

    @pytest.mark.parametrize("bad", [None, 42, "abc", {"lesson_id": "a"}])
    def test_rejects_non_sequences(self, now, bad):
        with pytest.raises(InvalidInput):
            filter_due(bad, now)

    @pytest.mark.parametrize("entry", [None, {"lesson_id": "a"}, "a"])
    def test_rejects_non_item_entries(self, now, entry):
        items = [ProgressItem(lesson_id="ok"), entry]
        with pytest.raises(InvalidInput, match=r"items\[1\]"):
            filter_due(items, now)

    def test_naive_dates_compare_as_local_time(self):
        aware_now = datetime.now().astimezone()
        item = ProgressItem(lesson_id="a", next_review_date=datetime.now() - timedelta(hours=1))
        assert is_due(item, aware_now)


class TestPriorityScore:
    def test_new_hard_item_without_date(self, now):
        item = ProgressItem(lesson_id="x", repetition=0, ease_factor=1.5, mastery_level=0)
        assert priority_score(item, now) == 170

    def test_overdue_days_add_five_each(self, now, make_item):
        item = make_item("a", -4, repetition=2, ease_factor=2.5)
        assert priority_score(item, now) == pytest.approx(120)

    def test_fractional_overdue(self, now):
        item = ProgressItem(
            lesson_id="a", next_review_date=now - timedelta(hours=12), repetition=1
        )
        assert days_overdue(item, now) == pytest.approx(0.5)
        assert priority_score(item, now) == pytest.approx(102.5)

    def test_future_date_adds_nothing(self, now, make_item):
        assert priority_score(make_item("a", 3, repetition=1), now) == 100

    @pytest.mark.parametrize("mastery,expected", [(3, 100), (4, 90), (6, 70)])
    def test_mastery_penalty_starts_at_four(self, now, mastery, expected):
        item = ProgressItem(lesson_id="a", repetition=1, mastery_level=mastery)
        assert priority_score(item, now) == expected

    def test_floor_at_zero(self, now):
        item = ProgressItem(lesson_id="a", repetition=3, mastery_level=50)
        assert priority_score(item, now) == 0

    @pytest.mark.parametrize("mastery", [0, 4, 9, 20, 100])
    @pytest.mark.parametrize("repetition", [0, 1, 7])
    @pytest.mark.parametrize("ease", [1.3, 2.5])
    def test_never_negative(self, now, make_item, mastery, repetition, ease):
        item = make_item("a", 5, mastery_level=mastery, repetition=repetition, ease_factor=ease)
        assert priority_score(item, now) >= 0


class TestRankByPriority:
    def test_orders_by_descending_score(self, now, make_item):
        items = [
            make_item("mastered", -1, repetition=4, mastery_level=6),
            make_item("overdue", -10, repetition=3),
            make_item("new"),
            make_item("hard", 0, repetition=2, ease_factor=1.6),
        ]
        ranked = rank_by_priority(items, now)
        scores = [priority_score(i, now) for i in ranked]
        assert scores == sorted(scores, reverse=True)
        assert [i.lesson_id for i in ranked] == ["new", "overdue", "hard", "mastered"]

    def test_ties_break_on_lesson_id(self, now):
        items = [ProgressItem(lesson_id=name, repetition=1) for name in ("c", "a", "b")]
        assert [i.lesson_id for i in rank_by_priority(items, now)] == ["a", "b", "c"]

    def test_returns_copies(self, now, make_item):
        items = [make_item("a", -2), make_item("b")]
        ranked = rank_by_priority(items, now)
        assert ranked is not items
        assert all(r is not i for r in ranked for i in items)
        assert [i.lesson_id for i in items] == ["a", "b"]

    def test_rejects_non_sequences(self, now):
        with pytest.raises(InvalidInput):
            rank_by_priority(None, now)

    def test_rejects_none_entry(self, now):
        with pytest.raises(InvalidInput):
            rank_by_priority([None], now)


class TestCountDueWithin:
    def test_counts_today_and_next_day_inclusive(self, now, make_item):
        items = [
            make_item("overdue", -2),
            make_item("new"),
            make_item("tomorrow", 1),
            make_item("later", 2),
        ]
        assert count_due_within(items, 1, now) == 3

    def test_zero_days_matches_filter(self, now, make_item):
        items = [make_item("a", -1), make_item("b", 0.5), make_item("c")]
        assert count_due_within(items, 0, now) == len(filter_due(items, now))

    def test_rejects_non_sequences(self, now):
        with pytest.raises(InvalidInput):
            count_due_within(7, 1, now)


def test_build_review_queue_paginates(now, make_item):
    items = [make_item(f"l{n:02d}", -n, repetition=1) for n in range(1, 6)]
    items.append(make_item("future", 4))

    first = build_review_queue(items, now, limit=2)
    rest = build_review_queue(items, now, limit=10, offset=2)

    assert [i.lesson_id for i in first] == ["l05", "l04"]
    assert [i.lesson_id for i in rest] == ["l03", "l02", "l01"]
