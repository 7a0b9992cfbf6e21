"""
Task API routes.
"""
from typing import List, Dict, Any, Optional

from todoboard.adapters.http_framework import HTTPFrameworkAdapter
from todoboard.auth.dependencies import require_user
from todoboard.dependencies.services import get_task_repository
from todoboard.exceptions import ValidationError
from todoboard.models.task_models import TaskCreate, TaskUpdate, TaskResponse, CompleteTaskRequest
from todoboard.storage.repositories import TaskRepository

# Initialize adapter
http_adapter = HTTPFrameworkAdapter()
Path = http_adapter.Path
Query = http_adapter.Query
Depends = http_adapter.Depends
Response = http_adapter.Response

router = http_adapter.create_router(prefix="/api/tasks", tags=["tasks"])

TRUE_VALUES = {"true", "1"}
FALSE_VALUES = {"false", "0"}


def _parse_group_filter(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError("group_id must be an integer")


def _parse_completed_filter(raw: Optional[str]) -> Optional[bool]:
    if raw is None or raw.strip() == "":
        return None
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ValidationError("completed must be true or false")


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    group_id: Optional[str] = Query(None, description="Only tasks in this group"),
    completed: Optional[str] = Query(None, description="Filter by completion (true/false)"),
    user: Dict[str, Any] = Depends(require_user),
    tasks: TaskRepository = Depends(get_task_repository),
):
    """List the caller's tasks, newest first."""
    return tasks.list(
        user["id"],
        group_id=_parse_group_filter(group_id),
        completed=_parse_completed_filter(completed),
    )


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int = Path(..., description="Task ID"),
    user: Dict[str, Any] = Depends(require_user),
    tasks: TaskRepository = Depends(get_task_repository),
):
    """Get a task by ID."""
    return tasks.get(user["id"], task_id)


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    task: TaskCreate,
    user: Dict[str, Any] = Depends(require_user),
    tasks: TaskRepository = Depends(get_task_repository),
):
    """Create a new task."""
    return tasks.create(
        user["id"],
        task.title,
        description=task.description,
        deadline=task.deadline_iso(),
        group_id=task.group_id,
    )


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task: TaskUpdate,
    task_id: int = Path(..., description="Task ID"),
    user: Dict[str, Any] = Depends(require_user),
    tasks: TaskRepository = Depends(get_task_repository),
):
    """Update the fields present in the body."""
    return tasks.update(user["id"], task_id, task.changes())


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: int = Path(..., description="Task ID"),
    user: Dict[str, Any] = Depends(require_user),
    tasks: TaskRepository = Depends(get_task_repository),
):
    """Delete a task."""
    tasks.delete(user["id"], task_id)
    return Response(status_code=204)


@router.patch("/{task_id}/complete", response_model=TaskResponse)
async def set_task_completed(
    body: CompleteTaskRequest,
    task_id: int = Path(..., description="Task ID"),
    user: Dict[str, Any] = Depends(require_user),
    tasks: TaskRepository = Depends(get_task_repository),
):
    """Mark a task completed or not completed."""
    return tasks.set_completed(user["id"], task_id, body.completed)
