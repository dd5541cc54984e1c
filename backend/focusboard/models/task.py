"""
Task model: persisted row, in-memory board record and Eisenhower matrix enums.
"""
import logging
import uuid
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import Column, Date, DateTime, Enum as SQLEnum, String, Text
from sqlalchemy.sql import func

from focusboard.core.database import Base

logger = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    """Task status enum."""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Task priority enum."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EisenhowerQuadrant(str, Enum):
    """Eisenhower matrix quadrants."""
    Q1 = "q1"  # Urgent & Important (Do)
    Q2 = "q2"  # Not Urgent, Important (Schedule)
    Q3 = "q3"  # Urgent, Not Important (Delegate)
    Q4 = "q4"  # Neither (Delete)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


def parse_due_date(value: Any) -> Optional[date]:
    """
    Normalize a due date to a calendar date.

    Accepts None, empty strings, date/datetime objects and ISO 8601 date or
    datetime strings (a trailing 'Z' is allowed). Datetimes are truncated to
    their calendar date. Unparseable values are treated as "no deadline".
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        cleaned = value.strip().replace('Z', '+00:00')
        try:
            if len(cleaned) == 10:
                return date.fromisoformat(cleaned)
            return datetime.fromisoformat(cleaned).date()
        except ValueError as e:
            logger.warning(f"Failed to parse due date '{value}': {e}")
            return None
    logger.warning(f"Unsupported due date type {type(value).__name__}: {value!r}")
    return None


class Task(Base):
    """Persisted task row owned by a single user."""

    __tablename__ = "tasks"

    # Primary Key (opaque, generated by the store)
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Owner, as issued by the external auth provider
    user_id = Column(String(255), nullable=False, index=True)

    # Basic Task Info
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(
        SQLEnum(TaskPriority, values_callable=_enum_values, native_enum=False, length=16),
        default=TaskPriority.MEDIUM,
        nullable=False,
    )
    status = Column(
        SQLEnum(TaskStatus, values_callable=_enum_values, native_enum=False, length=16),
        default=TaskStatus.TODO,
        nullable=False,
        index=True,
    )
    due_date = Column(Date, nullable=True, index=True)

    # Timestamps
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title[:30]}...', priority={self.priority}, due={self.due_date})>"

    def to_row(self) -> Dict[str, Any]:
        """Column values as a plain dict."""
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}


class TaskRecord(BaseModel):
    """A task as held in a board's local state."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=False)

    id: str
    title: str = Field(..., min_length=1)
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None
    status: TaskStatus = TaskStatus.TODO
    user_id: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value) if value is not None else value

    @field_validator("due_date", mode="before")
    @classmethod
    def _coerce_due_date(cls, value):
        return parse_due_date(value)

    def to_row(self) -> Dict[str, Any]:
        """Fields sent to the row store on insert (the id is assigned by the store)."""
        return self.model_dump(exclude={"id", "completed_at"}, exclude_none=True)
