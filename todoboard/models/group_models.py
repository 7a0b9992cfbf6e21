"""
Pydantic models for group-related requests and responses.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from .task_models import TaskResponse


class GroupCreate(BaseModel):
    """Request model for creating a group."""
    name: Optional[str] = Field(None, description="Group name")
    color: Optional[str] = Field(None, description="Display color, e.g. #3498db")


class GroupUpdate(BaseModel):
    """Request model for updating a group. Only fields sent are applied."""
    name: Optional[str] = None
    color: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class GroupResponse(BaseModel):
    """Group response model."""
    id: int
    user_id: int
    name: str
    color: Optional[str] = None
    created_at: str
    task_count: int = 0


class GroupDetailResponse(GroupResponse):
    """Group with its tasks."""
    tasks: List[TaskResponse] = []
