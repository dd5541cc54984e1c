"""
Quadrant Calculator Service

Rule-based smart scoring and Eisenhower Matrix quadrant assignment using
priority and due date.
"""

from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from focusboard.models.task import EisenhowerQuadrant, TaskPriority, TaskStatus, parse_due_date


QUADRANT_LABELS = {
    EisenhowerQuadrant.Q1: "Urgent & Important (Do)",
    EisenhowerQuadrant.Q2: "Not Urgent & Important (Schedule)",
    EisenhowerQuadrant.Q3: "Urgent & Not Important (Delegate)",
    EisenhowerQuadrant.Q4: "Not Urgent & Not Important (Delete)",
}

QUADRANT_TITLES = {
    EisenhowerQuadrant.Q1: "Do (Urgent & Important)",
    EisenhowerQuadrant.Q2: "Schedule (Important, Not Urgent)",
    EisenhowerQuadrant.Q3: "Delegate (Urgent, Not Important)",
    EisenhowerQuadrant.Q4: "Delete (Neither)",
}


def _field(task: Any, name: str, default: Any = None) -> Any:
    """Read a field from a TaskRecord, ORM row or plain dict."""
    if isinstance(task, dict):
        return task.get(name, default)
    return getattr(task, name, default)


class QuadrantCalculator:
    """
    Calculate smart scores and Eisenhower Matrix quadrants based on priority and due date.

    A task is important when its priority is high and urgent when it is due
    within URGENCY_WINDOW_DAYS (overdue included). The quadrant is never
    stored; it is recomputed from the current fields on every call.
    """

    URGENCY_WINDOW_DAYS = 3
    SCHEDULE_OFFSET_DAYS = 7

    MAX_URGENCY = 50
    URGENCY_CEILING = 40
    URGENCY_DECAY_PER_DAY = 2
    PRIORITY_MULTIPLIER = 10
    NO_DUE_DATE_MULTIPLIER = 5

    PRIORITY_WEIGHTS = {
        TaskPriority.HIGH: 3,
        TaskPriority.MEDIUM: 2,
        TaskPriority.LOW: 1,
    }

    @staticmethod
    def priority_weight(priority: Optional[str]) -> int:
        """
        Map a priority to its weight.

        Args:
            priority: "high", "medium" or "low"

        Returns:
            int: 3, 2 or 1 (0 for anything else)
        """
        return QuadrantCalculator.PRIORITY_WEIGHTS.get(priority, 0)

    @staticmethod
    def days_until_due(due_date: Any, today: Optional[date] = None) -> Optional[int]:
        """
        Whole calendar days from today until the due date.

        Negative when overdue, None when there is no due date.
        """
        due = parse_due_date(due_date)
        if due is None:
            return None
        return (due - (today or date.today())).days

    @staticmethod
    def calculate_urgency(due_date: Any, today: Optional[date] = None) -> Optional[int]:
        """
        Calculate the urgency component of the smart score.

        Args:
            due_date: Task due date (date, datetime or ISO string)
            today: Reference date, defaults to date.today()

        Returns:
            int: 50 when due today or overdue, otherwise 40 - 2*days floored
            at 0; None when there is no due date
        """
        days = QuadrantCalculator.days_until_due(due_date, today)
        if days is None:
            return None
        if days <= 0:
            return QuadrantCalculator.MAX_URGENCY
        return max(0, QuadrantCalculator.URGENCY_CEILING - days * QuadrantCalculator.URGENCY_DECAY_PER_DAY)

    @staticmethod
    def calculate_smart_score(task: Any, today: Optional[date] = None) -> int:
        """
        Calculate the smart score used for ranking tasks (higher = do sooner).

        Score = urgency + priority_weight * 10, or priority_weight * 5 when
        the task has no due date. Completed tasks always score 0.

        Args:
            task: Anything exposing status, priority and due_date
            today: Reference date, defaults to date.today()

        Returns:
            int: Smart score
        """
        if _field(task, "status") == TaskStatus.COMPLETED:
            return 0

        weight = QuadrantCalculator.priority_weight(_field(task, "priority"))
        urgency = QuadrantCalculator.calculate_urgency(_field(task, "due_date"), today)

        if urgency is None:
            return weight * QuadrantCalculator.NO_DUE_DATE_MULTIPLIER

        return urgency + weight * QuadrantCalculator.PRIORITY_MULTIPLIER

    @staticmethod
    def is_important(priority: Optional[str]) -> bool:
        return priority == TaskPriority.HIGH

    @staticmethod
    def is_urgent(due_date: Any, today: Optional[date] = None) -> bool:
        days = QuadrantCalculator.days_until_due(due_date, today)
        return days is not None and days <= QuadrantCalculator.URGENCY_WINDOW_DAYS

    @staticmethod
    def calculate_quadrant(
        priority: Optional[str],
        due_date: Any = None,
        today: Optional[date] = None,
    ) -> EisenhowerQuadrant:
        """
        Calculate Eisenhower quadrant from priority and due date.

        Args:
            priority: "high", "medium" or "low"
            due_date: Task due date, None for no deadline
            today: Reference date, defaults to date.today()

        Returns:
            EisenhowerQuadrant: Q1, Q2, Q3 or Q4
        """
        urgent = QuadrantCalculator.is_urgent(due_date, today)
        important = QuadrantCalculator.is_important(priority)

        if urgent and important:
            return EisenhowerQuadrant.Q1  # Do
        elif not urgent and important:
            return EisenhowerQuadrant.Q2  # Schedule
        elif urgent and not important:
            return EisenhowerQuadrant.Q3  # Delegate
        else:
            return EisenhowerQuadrant.Q4  # Delete

    @staticmethod
    def get_eisenhower_quadrant(task: Any, today: Optional[date] = None) -> EisenhowerQuadrant:
        """Classify a task into its quadrant."""
        return QuadrantCalculator.calculate_quadrant(
            _field(task, "priority"), _field(task, "due_date"), today
        )

    @staticmethod
    def fields_for_quadrant(quadrant: EisenhowerQuadrant, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Priority and due date that place a task in the given quadrant.

        Q1: high, due today. Q2: high, due in a week.
        Q3: low, due today. Q4: low, no due date.

        Returns:
            dict: {"priority": TaskPriority, "due_date": Optional[date]}
        """
        today = today or date.today()
        quadrant = EisenhowerQuadrant(quadrant)

        if quadrant == EisenhowerQuadrant.Q1:
            return {"priority": TaskPriority.HIGH, "due_date": today}
        elif quadrant == EisenhowerQuadrant.Q2:
            return {
                "priority": TaskPriority.HIGH,
                "due_date": today + timedelta(days=QuadrantCalculator.SCHEDULE_OFFSET_DAYS),
            }
        elif quadrant == EisenhowerQuadrant.Q3:
            return {"priority": TaskPriority.LOW, "due_date": today}
        else:
            return {"priority": TaskPriority.LOW, "due_date": None}

    @staticmethod
    def rank_tasks(tasks: Iterable[Any], today: Optional[date] = None) -> List[Any]:
        """Sort tasks by smart score, highest first. Ties keep their input order."""
        today = today or date.today()
        return sorted(
            tasks,
            key=lambda task: QuadrantCalculator.calculate_smart_score(task, today),
            reverse=True,
        )

    @staticmethod
    def should_recalculate(
        old_priority: Optional[str],
        new_priority: Optional[str],
        old_due_date: Any,
        new_due_date: Any,
    ) -> bool:
        """
        Determine if the quadrant inputs changed.

        Args:
            old_priority: Previous priority
            new_priority: New priority
            old_due_date: Previous due date
            new_due_date: New due date

        Returns:
            bool: True if priority or due date changed
        """
        priority_changed = old_priority != new_priority
        date_changed = parse_due_date(old_due_date) != parse_due_date(new_due_date)
        return priority_changed or date_changed


calculate_smart_score = QuadrantCalculator.calculate_smart_score
get_eisenhower_quadrant = QuadrantCalculator.get_eisenhower_quadrant
fields_for_quadrant = QuadrantCalculator.fields_for_quadrant
