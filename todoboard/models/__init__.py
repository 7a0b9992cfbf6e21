"""
Pydantic models for request/response validation.
"""
from .group_models import GroupCreate, GroupUpdate, GroupResponse, GroupDetailResponse
from .task_models import TaskCreate, TaskUpdate, TaskResponse, CompleteTaskRequest

__all__ = [
    "GroupCreate",
    "GroupUpdate",
    "GroupResponse",
    "GroupDetailResponse",
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "CompleteTaskRequest",
]
