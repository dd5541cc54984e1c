from datetime import date

from focusboard.models.task import TaskPriority, TaskRecord, TaskStatus

TODAY = date(2024, 1, 10)
USER_ID = "user-1"


def make_task(task_id="t1", title="Task", priority=TaskPriority.MEDIUM, due_date=None, status=TaskStatus.TODO):
    return TaskRecord(
        id=task_id,
        user_id=USER_ID,
        title=title,
        priority=priority,
        due_date=due_date,
        status=status,
    )
