"""
Drag-and-drop glue between the pointer library and the quadrant board.

The pointer library only reports which draggable was picked up and which
droppable it was released over. Task cards are draggables keyed by task id;
quadrant columns are droppables keyed by quadrant id.
"""
from dataclasses import dataclass
from typing import Any, Optional

from focusboard.models.task import EisenhowerQuadrant

DROPPABLE_PREFIX = "quadrant-"


def draggable_id(task_id: str) -> str:
    """Drag-source identity of a task card."""
    return str(task_id)


def droppable_id(quadrant: EisenhowerQuadrant) -> str:
    """Drop-target identity of a quadrant column."""
    return f"{DROPPABLE_PREFIX}{EisenhowerQuadrant(quadrant).value}"


def parse_drop_target(over_id: Any) -> Optional[EisenhowerQuadrant]:
    """
    Resolve whatever the pointer library reported as drop target to a quadrant.

    Accepts EisenhowerQuadrant members, bare quadrant ids ("q1", "Q2") and
    droppable ids ("quadrant-q3"). Returns None for anything else, including
    a missing target.
    """
    if over_id is None:
        return None
    if isinstance(over_id, EisenhowerQuadrant):
        return over_id
    value = str(over_id).strip().lower()
    if value.startswith(DROPPABLE_PREFIX):
        value = value[len(DROPPABLE_PREFIX):]
    try:
        return EisenhowerQuadrant(value)
    except ValueError:
        return None


@dataclass
class DragEndEvent:
    """What the pointer library reports when a drag ends."""
    active_id: str
    over_id: Optional[str] = None

    @property
    def target(self) -> Optional[EisenhowerQuadrant]:
        return parse_drop_target(self.over_id)


class DragTracker:
    """Tracks the card currently being dragged (used for the drag overlay)."""

    def __init__(self):
        self.active_id: Optional[str] = None

    def start(self, active_id: str) -> None:
        self.active_id = str(active_id)

    def end(self) -> Optional[str]:
        active_id, self.active_id = self.active_id, None
        return active_id

    @property
    def dragging(self) -> bool:
        return self.active_id is not None
