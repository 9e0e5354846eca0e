"""Task API endpoints. Tasks are addressed by an ``id`` in the request body."""

from typing import Annotated

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from taskapi.api import responses
from taskapi.api.deps import CurrentIdentity, TaskServiceDep
from taskapi.models import ERROR_RESPONSES, MessageEnvelope
from taskapi.models.task import TaskCreate, TaskEnvelope, TaskListEnvelope, TaskListQuery, TaskRef, TaskUpdate

router = APIRouter(prefix="/api/tasks", tags=["Tasks"], responses=ERROR_RESPONSES)


@router.get("", response_model=TaskListEnvelope)
async def list_tasks_endpoint(
    identity: CurrentIdentity,
    service: TaskServiceDep,
    query: Annotated[TaskListQuery, Query()],
) -> JSONResponse:
    """List the authenticated user's tasks, newest first."""
    tasks, user_id = await service.list_tasks(identity.user_id, query.id_user)
    return JSONResponse(content=responses.task_list(tasks, user_id))


@router.post("", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
async def create_task_endpoint(
    identity: CurrentIdentity,
    service: TaskServiceDep,
    task_data: TaskCreate,
) -> JSONResponse:
    """Create a new task for the authenticated user."""
    task = await service.create_task(identity.user_id, task_data)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=responses.task_created(task, identity.user_id),
    )


@router.patch("", response_model=TaskEnvelope)
async def update_task_endpoint(
    identity: CurrentIdentity,
    service: TaskServiceDep,
    task_data: TaskUpdate,
) -> JSONResponse:
    """Update any of title, description, is_done and priority."""
    task = await service.update_task(task_data.id, identity.user_id, task_data.changes())
    return JSONResponse(content=responses.task_updated(task, identity.user_id))


@router.delete("", response_model=MessageEnvelope)
async def delete_task_endpoint(
    identity: CurrentIdentity,
    service: TaskServiceDep,
    task_ref: TaskRef,
) -> JSONResponse:
    """Delete a task permanently."""
    await service.delete_task(task_ref.id, identity.user_id)
    return JSONResponse(content=responses.task_deleted(task_ref.id, identity.user_id))


@router.post("/complete", response_model=TaskEnvelope)
async def complete_task_endpoint(
    identity: CurrentIdentity,
    service: TaskServiceDep,
    task_ref: TaskRef,
) -> JSONResponse:
    """Mark a pending task as completed (409 if it already is)."""
    task = await service.complete_task(task_ref.id, identity.user_id)
    return JSONResponse(
        content=responses.task_updated(task, identity.user_id, "Task marked as completed"),
    )


@router.post("/pending", response_model=TaskEnvelope)
async def reopen_task_endpoint(
    identity: CurrentIdentity,
    service: TaskServiceDep,
    task_ref: TaskRef,
) -> JSONResponse:
    """Mark a completed task as pending again (409 if it already is)."""
    task = await service.reopen_task(task_ref.id, identity.user_id)
    return JSONResponse(
        content=responses.task_updated(task, identity.user_id, "Task marked as pending"),
    )
