"""
Tests for smart scoring and Eisenhower quadrant classification.
"""
from datetime import date, datetime, timedelta

import pytest

from focusboard.models.task import EisenhowerQuadrant, TaskPriority, TaskStatus
from focusboard.services.quadrant_calculator import (
    QuadrantCalculator,
    calculate_smart_score,
    fields_for_quadrant,
    get_eisenhower_quadrant,
)
from tests.helpers import TODAY, make_task

PRIORITIES = [TaskPriority.LOW, TaskPriority.MEDIUM, TaskPriority.HIGH]
WEIGHTS = {TaskPriority.LOW: 1, TaskPriority.MEDIUM: 2, TaskPriority.HIGH: 3}
DUE_OFFSETS = [None, -30, -9, -1, 0, 1, 3, 4, 7, 19, 20, 45]


def _due(offset):
    return None if offset is None else TODAY + timedelta(days=offset)


class TestSmartScore:

    @pytest.mark.parametrize("priority", PRIORITIES)
    @pytest.mark.parametrize("offset", DUE_OFFSETS)
    def test_completed_tasks_score_zero(self, priority, offset):
        task = make_task(priority=priority, due_date=_due(offset), status=TaskStatus.COMPLETED)
        assert calculate_smart_score(task, TODAY) == 0

    @pytest.mark.parametrize("priority", PRIORITIES)
    def test_no_due_date_scores_five_times_weight(self, priority):
        for status in (TaskStatus.TODO, TaskStatus.IN_PROGRESS):
            task = make_task(priority=priority, status=status)
            assert calculate_smart_score(task, TODAY) == WEIGHTS[priority] * 5

    @pytest.mark.parametrize("priority", PRIORITIES)
    @pytest.mark.parametrize("offset", [0, -1, -9, -365])
    def test_due_today_or_overdue_has_max_urgency(self, priority, offset):
        task = make_task(priority=priority, due_date=_due(offset))
        assert calculate_smart_score(task, TODAY) == 50 + WEIGHTS[priority] * 10

    @pytest.mark.parametrize("offset,urgency", [(1, 38), (5, 30), (19, 2), (20, 0), (45, 0)])
    def test_urgency_decays_linearly_to_zero(self, offset, urgency):
        task = make_task(priority=TaskPriority.LOW, due_date=_due(offset))
        assert calculate_smart_score(task, TODAY) == urgency + 10

    def test_overdue_high_priority_example(self):
        task = make_task(priority=TaskPriority.HIGH, due_date=date(2024, 1, 1))
        assert QuadrantCalculator.days_until_due(task.due_date, TODAY) == -9
        assert calculate_smart_score(task, TODAY) == 80

    def test_low_priority_without_due_date_example(self):
        task = make_task(priority=TaskPriority.LOW, due_date=None)
        assert calculate_smart_score(task, TODAY) == 5

    def test_accepts_plain_dicts_with_iso_strings(self):
        task = {"status": "todo", "priority": "high", "due_date": "2024-01-12T15:30:00Z"}
        # Two calendar days out: 40 - 4 = 36 urgency
        assert calculate_smart_score(task, TODAY) == 36 + 30

    def test_unparseable_due_date_counts_as_no_deadline(self):
        task = {"status": "todo", "priority": "medium", "due_date": "next tuesday"}
        assert calculate_smart_score(task, TODAY) == 10

    def test_defaults_to_real_today(self):
        task = make_task(priority=TaskPriority.HIGH, due_date=date.today())
        assert calculate_smart_score(task) == 80


class TestEisenhowerQuadrant:

    @pytest.mark.parametrize("priority", PRIORITIES)
    @pytest.mark.parametrize("offset", DUE_OFFSETS)
    def test_total_and_pure(self, priority, offset):
        task = make_task(priority=priority, due_date=_due(offset))
        first = get_eisenhower_quadrant(task, TODAY)
        assert first in set(EisenhowerQuadrant)
        assert get_eisenhower_quadrant(task, TODAY) == first

    @pytest.mark.parametrize("offset,expected", [
        (-9, EisenhowerQuadrant.Q1),
        (0, EisenhowerQuadrant.Q1),
        (3, EisenhowerQuadrant.Q1),
        (4, EisenhowerQuadrant.Q2),
        (None, EisenhowerQuadrant.Q2),
    ])
    def test_high_priority(self, offset, expected):
        task = make_task(priority=TaskPriority.HIGH, due_date=_due(offset))
        assert get_eisenhower_quadrant(task, TODAY) == expected

    @pytest.mark.parametrize("priority", [TaskPriority.LOW, TaskPriority.MEDIUM])
    @pytest.mark.parametrize("offset,expected", [
        (-1, EisenhowerQuadrant.Q3),
        (3, EisenhowerQuadrant.Q3),
        (4, EisenhowerQuadrant.Q4),
        (None, EisenhowerQuadrant.Q4),
    ])
    def test_not_important(self, priority, offset, expected):
        task = make_task(priority=priority, due_date=_due(offset))
        assert get_eisenhower_quadrant(task, TODAY) == expected

    def test_overdue_high_priority_example_is_q1(self):
        task = make_task(priority=TaskPriority.HIGH, due_date=date(2024, 1, 1))
        assert get_eisenhower_quadrant(task, TODAY) == EisenhowerQuadrant.Q1

    def test_low_priority_without_due_date_example_is_q4(self):
        task = make_task(priority=TaskPriority.LOW, due_date=None)
        assert get_eisenhower_quadrant(task, TODAY) == EisenhowerQuadrant.Q4

    def test_classification_ignores_status(self):
        task = make_task(priority=TaskPriority.HIGH, due_date=TODAY, status=TaskStatus.IN_PROGRESS)
        assert get_eisenhower_quadrant(task, TODAY) == EisenhowerQuadrant.Q1


class TestFieldsForQuadrant:

    def test_inverse_mapping_table(self):
        assert fields_for_quadrant(EisenhowerQuadrant.Q1, TODAY) == {"priority": TaskPriority.HIGH, "due_date": TODAY}
        assert fields_for_quadrant(EisenhowerQuadrant.Q2, TODAY) == {
            "priority": TaskPriority.HIGH,
            "due_date": date(2024, 1, 17),
        }
        assert fields_for_quadrant(EisenhowerQuadrant.Q3, TODAY) == {"priority": TaskPriority.LOW, "due_date": TODAY}
        assert fields_for_quadrant(EisenhowerQuadrant.Q4, TODAY) == {"priority": TaskPriority.LOW, "due_date": None}

    @pytest.mark.parametrize("quadrant", list(EisenhowerQuadrant))
    def test_round_trip_is_identity(self, quadrant):
        task = make_task(**fields_for_quadrant(quadrant, TODAY))
        assert get_eisenhower_quadrant(task, TODAY) == quadrant

    def test_accepts_raw_quadrant_values(self):
        assert fields_for_quadrant("q4", TODAY)["due_date"] is None


class TestRankingAndChanges:

    def test_rank_tasks_highest_first_and_stable(self):
        a = make_task("a", priority=TaskPriority.LOW)                      # 5
        b = make_task("b", priority=TaskPriority.HIGH, due_date=TODAY)     # 80
        c = make_task("c", priority=TaskPriority.LOW)                      # 5
        d = make_task("d", priority=TaskPriority.MEDIUM, due_date=_due(5))  # 50
        ranked = QuadrantCalculator.rank_tasks([a, b, c, d], TODAY)
        assert [t.id for t in ranked] == ["b", "d", "a", "c"]

    def test_should_recalculate(self):
        assert not QuadrantCalculator.should_recalculate("high", "high", None, None)
        assert not QuadrantCalculator.should_recalculate(
            "high", "high", TODAY, datetime(2024, 1, 10, 18, 0)
        )
        assert QuadrantCalculator.should_recalculate("high", "low", TODAY, TODAY)
        assert QuadrantCalculator.should_recalculate("low", "low", None, TODAY)

    def test_priority_weight_unknown_is_zero(self):
        assert QuadrantCalculator.priority_weight("urgent") == 0
        assert QuadrantCalculator.priority_weight("high") == 3
