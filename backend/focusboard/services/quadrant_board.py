"""
Quadrant board controller.

Holds one user's open tasks in memory, buckets them by Eisenhower quadrant
and applies the two board mutations (quick-add into a quadrant and drag
relocation between quadrants). Every mutation is applied to local state
first and persisted afterwards; the remote store catches up eventually.

Mutations never raise into the caller. Invalid input is a silent no-op and
persistence failures are logged, recorded in `failures` and then handled by
the board's PersistenceFailurePolicy.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from focusboard.models.board import BoardCard, BoardView, QuadrantColumn, RankedTask, RankedTaskList
from focusboard.models.task import EisenhowerQuadrant, TaskRecord, TaskStatus
from focusboard.services.drag import DragTracker, draggable_id, droppable_id, parse_drop_target
from focusboard.services.quadrant_calculator import QUADRANT_LABELS, QUADRANT_TITLES, QuadrantCalculator
from focusboard.services.row_store import RowFilter, RowStore

logger = logging.getLogger(__name__)


class PersistenceFailurePolicy(str, Enum):
    """What to do with optimistic local state when the store rejects a write."""
    KEEP = "keep"          # Leave local state as-is until the next load()
    ROLLBACK = "rollback"  # Undo the optimistic change


@dataclass
class PersistenceFailure:
    operation: str
    task_id: str
    error: str
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class QuadrantBoard:
    """Eisenhower matrix board for a single user."""

    TABLE = "tasks"

    def __init__(
        self,
        store: RowStore,
        user_id: str,
        failure_policy: PersistenceFailurePolicy = PersistenceFailurePolicy.KEEP,
        today: Optional[Callable[[], date]] = None,
        sort_by_score: bool = False,
    ):
        self.store = store
        self.user_id = str(user_id)
        self.failure_policy = PersistenceFailurePolicy(failure_policy)
        self.sort_by_score = sort_by_score
        self._today = today or date.today

        self.tasks: List[TaskRecord] = []
        self.loaded = False
        self.failures: List[PersistenceFailure] = []
        self.drag = DragTracker()

        self._temp_ids: Set[str] = set()
        # Changes made while a task still had its temp id, pushed after reconciliation
        self._deferred_updates: Dict[str, Dict[str, Any]] = {}
        self._deferred_removals: Dict[str, Tuple[str, Dict[str, Any]]] = {}
        self._last_temp_id = 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def today(self) -> date:
        return self._today()

    async def load(self) -> List[TaskRecord]:
        """
        Replace local state with the user's open tasks from the store.

        Called on mount and whenever the viewed date changes. Store errors
        propagate to the caller.
        """
        rows = await self.store.select(
            self.TABLE,
            [
                RowFilter.eq("user_id", self.user_id),
                RowFilter.neq("status", TaskStatus.COMPLETED.value),
            ],
        )
        self.tasks = [
            record for record in (TaskRecord.model_validate(row) for row in rows)
            if record.status != TaskStatus.COMPLETED
        ]
        self._temp_ids.clear()
        self._deferred_updates.clear()
        self._deferred_removals.clear()
        self.loaded = True
        logger.info(f"Loaded {len(self.tasks)} open tasks for user {self.user_id}")
        return self.tasks

    def find(self, task_id: Any) -> Optional[TaskRecord]:
        task_id = str(task_id)
        return next((t for t in self.tasks if t.id == task_id), None)

    def is_pending(self, task_id: str) -> bool:
        """True while the task still carries its temporary id."""
        return task_id in self._temp_ids

    def quadrant_of(self, task: TaskRecord) -> EisenhowerQuadrant:
        return QuadrantCalculator.get_eisenhower_quadrant(task, self.today)

    def quadrant_tasks(self, quadrant: EisenhowerQuadrant) -> List[TaskRecord]:
        today = self.today
        tasks = [t for t in self.tasks if QuadrantCalculator.get_eisenhower_quadrant(t, today) == quadrant]
        if self.sort_by_score:
            tasks = QuadrantCalculator.rank_tasks(tasks, today)
        return tasks

    def view(self) -> BoardView:
        """Render-ready board: four quadrant columns with their cards and counts."""
        today = self.today
        columns = []
        for quadrant in EisenhowerQuadrant:
            cards = [
                BoardCard(
                    task=task,
                    draggable_id=draggable_id(task.id),
                    smart_score=QuadrantCalculator.calculate_smart_score(task, today),
                    pending=self.is_pending(task.id),
                )
                for task in self.quadrant_tasks(quadrant)
            ]
            columns.append(
                QuadrantColumn(
                    id=quadrant,
                    label=QUADRANT_LABELS[quadrant],
                    title=QUADRANT_TITLES[quadrant],
                    droppable_id=droppable_id(quadrant),
                    count=len(cards),
                    cards=cards,
                )
            )

        active = self.find(self.drag.active_id) if self.drag.dragging else None
        return BoardView(
            user_id=self.user_id,
            quadrants=columns,
            total=len(self.tasks),
            active_drag_id=self.drag.active_id,
            active_drag_title=active.title if active else None,
        )

    def ranked(self) -> RankedTaskList:
        """All open tasks ordered by smart score."""
        today = self.today
        ranked = [
            RankedTask(
                task=task,
                smart_score=QuadrantCalculator.calculate_smart_score(task, today),
                quadrant=QuadrantCalculator.get_eisenhower_quadrant(task, today),
            )
            for task in QuadrantCalculator.rank_tasks(self.tasks, today)
        ]
        return RankedTaskList(tasks=ranked, total=len(ranked))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _new_temp_id(self) -> str:
        """Millisecond timestamp, bumped so ids minted in the same millisecond stay unique."""
        candidate = int(time.time() * 1000)
        if candidate <= self._last_temp_id:
            candidate = self._last_temp_id + 1
        while self.find(str(candidate)) is not None:
            candidate += 1
        self._last_temp_id = candidate
        return str(candidate)

    async def add_task(self, quadrant: Any, title: Optional[str]) -> Optional[TaskRecord]:
        """
        Quick-add a task into a quadrant.

        The quadrant decides the new task's priority and due date. The task is
        visible immediately under a temporary id, which is swapped for the
        store's id once the insert is acknowledged.

        Returns:
            The record now on the board (authoritative if the insert succeeded),
            or None when the title is blank or the quadrant is missing/unknown.
        """
        target = parse_drop_target(quadrant)
        title = (title or "").strip()
        if not title or target is None:
            logger.debug(f"Ignoring quick-add for user {self.user_id}: quadrant={quadrant!r}, title={title!r}")
            return None

        fields = QuadrantCalculator.fields_for_quadrant(target, self.today)
        temp = TaskRecord(
            id=self._new_temp_id(),
            user_id=self.user_id,
            title=title,
            status=TaskStatus.TODO,
            created_at=datetime.now(timezone.utc),
            **fields,
        )

        # Phase 1: optimistic insert
        self.tasks.append(temp)
        self._temp_ids.add(temp.id)

        # Phase 2: persist and reconcile the id
        try:
            row = await self.store.insert(self.TABLE, temp.to_row())
            stored = TaskRecord.model_validate(row)
        except Exception as e:
            self._temp_ids.discard(temp.id)
            self._deferred_updates.pop(temp.id, None)
            self._deferred_removals.pop(temp.id, None)
            self._record_failure("insert", temp.id, e)
            if self.failure_policy == PersistenceFailurePolicy.ROLLBACK:
                self._remove(temp.id)
                return None
            return self.find(temp.id)

        return await self._reconcile(temp.id, stored)

    async def _reconcile(self, temp_id: str, stored: TaskRecord) -> Optional[TaskRecord]:
        self._temp_ids.discard(temp_id)
        deferred = self._deferred_updates.pop(temp_id, None)
        removal = self._deferred_removals.pop(temp_id, None)

        if removal is not None:
            # Completed or deleted before the insert was acknowledged
            operation, fields = removal
            logger.info(f"Created task {stored.id} (temp id {temp_id}), applying deferred {operation}")
            if operation == "delete":
                await self._persist_removal("delete", stored)
            else:
                await self._persist_removal("complete", stored, fields)
            return None

        index = self._index_of(temp_id)
        if index is None:
            # Replaced by a load() or removed while the insert was in flight
            logger.debug(f"Temp task {temp_id} no longer on board, dropping reconciliation")
            return None

        if deferred:
            stored = stored.model_copy(update=deferred)
        self.tasks[index] = stored
        logger.info(f"Created task {stored.id} (temp id {temp_id}) for user {self.user_id}")

        if deferred:
            await self._persist_update(stored.id, deferred)
        return self.find(stored.id)

    async def on_drag_end(self, task_id: Any, target_quadrant_id: Any) -> Optional[TaskRecord]:
        """
        Relocate a task to the quadrant it was dropped on.

        Sets the target quadrant's priority and due date on the task (other
        fields untouched) and persists just those two fields.

        Returns:
            The updated record, or None when there was no valid drop target
            or the task is not on the board.
        """
        self.drag.end()

        target = parse_drop_target(target_quadrant_id)
        if target is None:
            logger.debug(f"Drag of {task_id} ended without a quadrant drop target ({target_quadrant_id!r})")
            return None

        task = self.find(task_id)
        if task is None:
            logger.debug(f"Drag of unknown task {task_id} ignored")
            return None

        fields = QuadrantCalculator.fields_for_quadrant(target, self.today)
        previous = {"priority": task.priority, "due_date": task.due_date}

        # Phase 1: optimistic update
        updated = task.model_copy(update=fields)
        self.tasks[self._index_of(task.id)] = updated

        if QuadrantCalculator.should_recalculate(
            previous["priority"], fields["priority"], previous["due_date"], fields["due_date"]
        ):
            logger.info(f"Moved task {task.id} to {target.value}")

        if self.is_pending(task.id):
            self._deferred_updates.setdefault(task.id, {}).update(fields)
            return updated

        # Phase 2: persist
        await self._persist_update(task.id, fields, previous)
        return self.find(task.id)

    def on_drag_start(self, task_id: Any) -> None:
        self.drag.start(task_id)

    async def complete_task(self, task_id: Any) -> Optional[TaskRecord]:
        """Mark a task completed, which takes it off the board."""
        task = self.find(task_id)
        if task is None:
            return None

        fields = {"status": TaskStatus.COMPLETED, "completed_at": datetime.now(timezone.utc)}
        completed = task.model_copy(update=fields)
        index = self._remove(task.id)

        if self.is_pending(task.id):
            self._deferred_removals[task.id] = ("complete", fields)
            return completed

        if not await self._persist_removal("complete", task, fields, index):
            return None
        return completed

    async def delete_task(self, task_id: Any) -> bool:
        """Remove a task from the board and the store."""
        task = self.find(task_id)
        if task is None:
            return False

        index = self._remove(task.id)

        if self.is_pending(task.id):
            self._deferred_removals[task.id] = ("delete", {})
            return True

        return await self._persist_removal("delete", task, index=index)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _persist_removal(
        self,
        operation: str,
        task: TaskRecord,
        fields: Optional[Dict[str, Any]] = None,
        index: Optional[int] = None,
    ) -> bool:
        """Persist a complete/delete. Returns False if it failed and was rolled back."""
        try:
            if operation == "delete":
                await self.store.delete(self.TABLE, task.id)
            else:
                await self.store.update(self.TABLE, task.id, fields)
        except Exception as e:
            self._record_failure(operation, task.id, e)
            if self.failure_policy == PersistenceFailurePolicy.ROLLBACK:
                position = len(self.tasks) if index is None else min(index, len(self.tasks))
                self.tasks.insert(position, task)
                return False
        return True

    async def _persist_update(
        self,
        task_id: str,
        fields: Dict[str, Any],
        previous: Optional[Dict[str, Any]] = None,
    ) -> None:
        try:
            await self.store.update(self.TABLE, task_id, fields)
        except Exception as e:
            self._record_failure("update", task_id, e)
            if self.failure_policy == PersistenceFailurePolicy.ROLLBACK and previous is not None:
                self._rollback_update(task_id, fields, previous)

    def _rollback_update(self, task_id: str, applied: Dict[str, Any], previous: Dict[str, Any]) -> None:
        index = self._index_of(task_id)
        if index is None:
            return
        current = self.tasks[index]
        # A later mutation already overwrote these fields; leave it alone
        if any(getattr(current, name) != value for name, value in applied.items()):
            return
        self.tasks[index] = current.model_copy(update=previous)
        logger.info(f"Rolled back update of task {task_id}")

    def _record_failure(self, operation: str, task_id: str, error: Exception) -> None:
        logger.warning(
            f"Persisting {operation} of task {task_id} for user {self.user_id} failed "
            f"(policy={self.failure_policy.value}): {error}",
            exc_info=error,
        )
        self.failures.append(PersistenceFailure(operation=operation, task_id=task_id, error=str(error)))

    def _index_of(self, task_id: str) -> Optional[int]:
        return next((i for i, t in enumerate(self.tasks) if t.id == task_id), None)

    def _remove(self, task_id: str) -> Optional[int]:
        index = self._index_of(task_id)
        if index is not None:
            del self.tasks[index]
        return index
