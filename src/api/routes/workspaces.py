"""
Workspace endpoints.

A workspace groups recordings; members are owners, editors or viewers.
Access rules live in ``RecordingRepository``.
"""

from fastapi import APIRouter, Depends, Response

from src.api.deps import get_current_user_id, get_store
from src.core.models import (
    WorkspaceCreate,
    WorkspaceMemberResponse,
    WorkspaceMemberUpdate,
    WorkspaceResponse,
    WorkspaceRole,
    WorkspaceUpdate,
)
from src.services.storage.repository import RecordingStore

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


def to_member_response(member) -> WorkspaceMemberResponse:
    return WorkspaceMemberResponse(
        user_id=member.user_id,
        role=WorkspaceRole(member.role),
        created_at=member.created_at,
    )


def to_workspace_response(workspace) -> WorkspaceResponse:
    return WorkspaceResponse(
        id=workspace.id,
        name=workspace.name,
        slug=workspace.slug,
        description=workspace.description,
        created_by=workspace.created_by,
        created_at=workspace.created_at,
        updated_at=workspace.updated_at,
        members=[to_member_response(m) for m in workspace.members],
    )


@router.post("", response_model=WorkspaceResponse, status_code=201)
async def create_workspace(
    body: WorkspaceCreate,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    """Create a workspace owned by the caller."""
    async with store.unit() as repo:
        workspace = await repo.create_workspace(
            user_id, name=body.name, slug=body.slug, description=body.description
        )
        return to_workspace_response(workspace)


@router.get("", response_model=list[WorkspaceResponse])
async def list_workspaces(
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    async with store.unit() as repo:
        workspaces = await repo.list_workspaces(user_id)
        return [to_workspace_response(w) for w in workspaces]


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
async def get_workspace(
    workspace_id: str,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    async with store.unit() as repo:
        workspace = await repo.get_workspace(workspace_id, user_id)
        return to_workspace_response(workspace)


@router.patch("/{workspace_id}", response_model=WorkspaceResponse)
async def update_workspace(
    workspace_id: str,
    body: WorkspaceUpdate,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    fields = body.model_dump(exclude_unset=True)
    async with store.unit() as repo:
        workspace = await repo.update_workspace(workspace_id, user_id, **fields)
        return to_workspace_response(workspace)


@router.delete("/{workspace_id}", status_code=204)
async def delete_workspace(
    workspace_id: str,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    """Delete a workspace; its recordings are kept but unfiled."""
    async with store.unit() as repo:
        await repo.delete_workspace(workspace_id, user_id)
    return Response(status_code=204)


@router.put("/{workspace_id}/members/{member_id}", response_model=WorkspaceMemberResponse)
async def set_member(
    workspace_id: str,
    member_id: str,
    body: WorkspaceMemberUpdate,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    """Add a member or change their role."""
    async with store.unit() as repo:
        member = await repo.set_workspace_member(workspace_id, user_id, member_id, body.role)
        return to_member_response(member)


@router.delete("/{workspace_id}/members/{member_id}", status_code=204)
async def remove_member(
    workspace_id: str,
    member_id: str,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    async with store.unit() as repo:
        await repo.remove_workspace_member(workspace_id, user_id, member_id)
    return Response(status_code=204)
