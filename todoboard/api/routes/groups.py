"""
Group API routes.
"""
from typing import List, Dict, Any

from todoboard.adapters.http_framework import HTTPFrameworkAdapter
from todoboard.auth.dependencies import require_user
from todoboard.dependencies.services import get_group_repository
from todoboard.models.group_models import GroupCreate, GroupUpdate, GroupResponse, GroupDetailResponse
from todoboard.storage.repositories import GroupRepository

# Initialize adapter
http_adapter = HTTPFrameworkAdapter()
Path = http_adapter.Path
Depends = http_adapter.Depends
Response = http_adapter.Response

router = http_adapter.create_router(prefix="/api/groups", tags=["groups"])


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    user: Dict[str, Any] = Depends(require_user),
    groups: GroupRepository = Depends(get_group_repository),
):
    """List the caller's groups with task counts, newest first."""
    return groups.list(user["id"])


@router.get("/{group_id}", response_model=GroupDetailResponse)
async def get_group(
    group_id: int = Path(..., description="Group ID"),
    user: Dict[str, Any] = Depends(require_user),
    groups: GroupRepository = Depends(get_group_repository),
):
    """Get a group together with its tasks."""
    return groups.get(user["id"], group_id)


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(
    group: GroupCreate,
    user: Dict[str, Any] = Depends(require_user),
    groups: GroupRepository = Depends(get_group_repository),
):
    """Create a new group."""
    return groups.create(user["id"], group.name, group.color)


@router.put("/{group_id}", response_model=GroupResponse)
async def update_group(
    group: GroupUpdate,
    group_id: int = Path(..., description="Group ID"),
    user: Dict[str, Any] = Depends(require_user),
    groups: GroupRepository = Depends(get_group_repository),
):
    """Update a group's name and/or color."""
    return groups.update(user["id"], group_id, group.changes())


@router.delete("/{group_id}", status_code=204)
async def delete_group(
    group_id: int = Path(..., description="Group ID"),
    user: Dict[str, Any] = Depends(require_user),
    groups: GroupRepository = Depends(get_group_repository),
):
    """Delete a group; its tasks are kept without a group."""
    groups.delete(user["id"], group_id)
    return Response(status_code=204)
