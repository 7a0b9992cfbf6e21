"""
Pydantic models for task-related requests and responses.

Request fields are optional at this layer; required-field rules are applied
by TaskRepository so they surface with the service's own error messages.
"""
from datetime import datetime, timezone
from typing import Any, Optional
from pydantic import BaseModel, Field, StrictInt, field_validator


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _deadline_to_iso(deadline: Optional[datetime]) -> Optional[str]:
    """ISO string in UTC; a deadline without an offset is taken as UTC."""
    if deadline is None:
        return None
    if deadline.tzinfo is None:
        deadline = deadline.replace(tzinfo=timezone.utc)
    return deadline.astimezone(timezone.utc).isoformat()


class TaskCreate(BaseModel):
    """Request model for creating a task."""
    title: Optional[str] = Field(None, description="Task title")
    description: Optional[str] = Field(None, description="Optional description")
    deadline: Optional[datetime] = Field(None, description="Optional deadline (ISO format timestamp)")
    group_id: Optional[StrictInt] = Field(None, description="Group ID owned by the caller")

    @field_validator('deadline', mode='before')
    @classmethod
    def validate_deadline(cls, v: Any) -> Any:
        """Treat an empty deadline as no deadline."""
        return _blank_to_none(v)

    def deadline_iso(self) -> Optional[str]:
        return _deadline_to_iso(self.deadline)


class TaskUpdate(BaseModel):
    """Request model for updating a task. Only fields sent are applied."""
    title: Optional[str] = None
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    group_id: Optional[StrictInt] = None
    completed: Optional[bool] = None

    @field_validator('deadline', mode='before')
    @classmethod
    def validate_deadline(cls, v: Any) -> Any:
        """Treat an empty deadline as clearing the deadline."""
        return _blank_to_none(v)

    def changes(self) -> dict:
        """Fields explicitly present in the request body."""
        changes = self.model_dump(exclude_unset=True)
        if changes.get("deadline") is not None:
            changes["deadline"] = _deadline_to_iso(changes["deadline"])
        if "completed" in changes and changes["completed"] is None:
            del changes["completed"]
        return changes


class CompleteTaskRequest(BaseModel):
    """Request model for PATCH /api/tasks/{id}/complete.

    ``completed`` is left untyped here; the repository rejects anything that
    is not a JSON boolean.
    """
    completed: Any = None


class TaskResponse(BaseModel):
    """Task response model."""
    id: int
    user_id: int
    group_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    deadline: Optional[str] = None
    completed: bool
    created_at: str
    updated_at: str
    group_name: Optional[str] = None
    group_color: Optional[str] = None
