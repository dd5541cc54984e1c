"""
Quadrant board API endpoints: Eisenhower matrix view, quick-add and drag relocation.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field

from focusboard.models.board import BoardView, RankedTaskList
from focusboard.models.task import TaskRecord
from focusboard.services.board_registry import BoardRegistry, get_board_registry
from focusboard.services.drag import DragEndEvent
from focusboard.services.quadrant_board import QuadrantBoard
from focusboard.services.row_store import RowStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/board", tags=["board"])


# Pydantic schemas for request validation
class QuickAddRequest(BaseModel):
    """Request schema for adding a task straight into a quadrant."""
    user_id: str = Field(..., min_length=1)
    quadrant: Optional[str] = Field(None, description="Target quadrant: q1, q2, q3 or q4")
    title: str = ""

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "3f0c2a5e-8d1b-4c1e-9a55-0b6f1f2b7c11",
                "quadrant": "q2",
                "title": "Draft Q3 roadmap"
            }
        }


class DragStartRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    active_id: str


class DragEndRequest(BaseModel):
    """Request schema for the end of a drag: which card, dropped over what."""
    user_id: str = Field(..., min_length=1)
    active_id: str
    over_id: Optional[str] = Field(None, description="Drop target id, null when dropped outside any quadrant")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "3f0c2a5e-8d1b-4c1e-9a55-0b6f1f2b7c11",
                "active_id": "a1b2c3d4-0000-4000-8000-000000000001",
                "over_id": "quadrant-q1"
            }
        }


async def _board(registry: BoardRegistry, user_id: str, refresh: bool = False) -> QuadrantBoard:
    try:
        return await registry.get(user_id, refresh=refresh)
    except RowStoreError as e:
        logger.error(f"Failed to load board for user {user_id}: {e}")
        raise HTTPException(status_code=502, detail=f"Could not load tasks: {e}")


@router.get("", response_model=BoardView)
async def get_board(
    user_id: str = Query(..., min_length=1, description="Signed-in user's id"),
    refresh: bool = Query(False, description="Reload tasks from the store (e.g. after a date change)"),
    registry: BoardRegistry = Depends(get_board_registry),
):
    """
    Get the user's open tasks bucketed into the four Eisenhower quadrants.

    - **q1**: Urgent & Important (Do)
    - **q2**: Not Urgent & Important (Schedule)
    - **q3**: Urgent & Not Important (Delegate)
    - **q4**: Not Urgent & Not Important (Delete)
    """
    board = await _board(registry, user_id, refresh)
    return board.view()


@router.get("/ranked", response_model=RankedTaskList)
async def get_ranked_tasks(
    user_id: str = Query(..., min_length=1),
    registry: BoardRegistry = Depends(get_board_registry),
):
    """List the user's open tasks ordered by smart score."""
    board = await _board(registry, user_id)
    return board.ranked()


@router.post("/tasks", response_model=TaskRecord, status_code=201)
async def quick_add_task(
    payload: QuickAddRequest,
    registry: BoardRegistry = Depends(get_board_registry),
):
    """
    Quick-add a task into a quadrant.

    The quadrant picks the priority and due date. Returns 204 when the title
    is blank or no valid quadrant was given.
    """
    board = await _board(registry, payload.user_id)
    task = await board.add_task(payload.quadrant, payload.title)
    if task is None:
        return Response(status_code=204)
    return task


@router.post("/drag-start", status_code=204)
async def drag_start(
    payload: DragStartRequest,
    registry: BoardRegistry = Depends(get_board_registry),
):
    board = await _board(registry, payload.user_id)
    board.on_drag_start(payload.active_id)
    return Response(status_code=204)


@router.post("/drag-end", response_model=TaskRecord)
async def drag_end(
    payload: DragEndRequest,
    registry: BoardRegistry = Depends(get_board_registry),
):
    """
    Relocate the dragged task to the quadrant it was dropped on.

    Returns the updated task, or 204 when there was no drop target or the
    task is not on the board.
    """
    board = await _board(registry, payload.user_id)
    event = DragEndEvent(active_id=payload.active_id, over_id=payload.over_id)
    task = await board.on_drag_end(event.active_id, event.target)
    if task is None:
        return Response(status_code=204)
    return task


@router.post("/tasks/{task_id}/complete", response_model=TaskRecord)
async def complete_task(
    task_id: str,
    user_id: str = Query(..., min_length=1),
    registry: BoardRegistry = Depends(get_board_registry),
):
    """Mark a task completed and take it off the board."""
    board = await _board(registry, user_id)
    if board.find(task_id) is None:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not on board")

    task = await board.complete_task(task_id)
    if task is None:
        raise HTTPException(status_code=502, detail=f"Completing task {task_id} failed and was rolled back")
    return task


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    user_id: str = Query(..., min_length=1),
    registry: BoardRegistry = Depends(get_board_registry),
):
    """Delete a task from the board and the store."""
    board = await _board(registry, user_id)
    if board.find(task_id) is None:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not on board")

    if not await board.delete_task(task_id):
        raise HTTPException(status_code=502, detail=f"Deleting task {task_id} failed and was rolled back")
    return Response(status_code=204)
