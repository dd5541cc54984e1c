# Database and view models
from focusboard.models.task import EisenhowerQuadrant, Task, TaskPriority, TaskRecord, TaskStatus
from focusboard.models.board import BoardCard, BoardView, QuadrantColumn, RankedTask, RankedTaskList

__all__ = [
    "Task",
    "TaskRecord",
    "TaskStatus",
    "TaskPriority",
    "EisenhowerQuadrant",
    "BoardCard",
    "BoardView",
    "QuadrantColumn",
    "RankedTask",
    "RankedTaskList",
]
