"""
Render-ready view models for the quadrant board.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, computed_field

from focusboard.models.task import EisenhowerQuadrant, TaskRecord


class BoardCard(BaseModel):
    """A task card placed in a quadrant."""
    task: TaskRecord
    draggable_id: str
    smart_score: int
    pending: bool = False  # Still carrying a temporary id


class QuadrantColumn(BaseModel):
    """One quadrant bucket, also the drop target for drags."""
    id: EisenhowerQuadrant
    label: str
    title: str
    droppable_id: str
    count: int
    cards: List[BoardCard]


class BoardView(BaseModel):
    """The four quadrant buckets in q1..q4 order."""
    user_id: str
    quadrants: List[QuadrantColumn]
    total: int
    active_drag_id: Optional[str] = None
    active_drag_title: Optional[str] = None

    def column(self, quadrant: EisenhowerQuadrant) -> QuadrantColumn:
        return next(c for c in self.quadrants if c.id == quadrant)

    @computed_field
    @property
    def counts(self) -> Dict[str, int]:
        return {column.id.value: column.count for column in self.quadrants}


class RankedTask(BaseModel):
    task: TaskRecord
    smart_score: int
    quadrant: EisenhowerQuadrant


class RankedTaskList(BaseModel):
    tasks: List[RankedTask]
    total: int
