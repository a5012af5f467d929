from fastapi import APIRouter, Body, Depends, Query, Request, Response, status
from typing import List, Optional

from app.core.errors import ValidationError
from app.schemas.task import TaskCreate, TaskQuery, TaskResponse, TaskUpdate
from app.services.task_service import TaskService

# Monté sous /tasks et sous /.netlify/functions/tasks (voir app.main)
router = APIRouter(tags=["tasks"])


def get_task_service(request: Request) -> TaskService:
    return request.app.state.task_service


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    q: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    sort: Optional[str] = Query(None),
    service: TaskService = Depends(get_task_service)
):
    return service.list_tasks(TaskQuery(q=q, status=status_filter, sort=sort))


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: Optional[TaskCreate] = Body(None),
    service: TaskService = Depends(get_task_service)
):
    # corps absent -> traité comme {} ("title is required")
    return service.create_task(task_data or TaskCreate())


@router.put("")
def update_task_without_id():
    raise ValidationError("id required")


@router.delete("")
def delete_task_without_id():
    raise ValidationError("id required")


@router.get("/{task_id:path}", response_model=TaskResponse)
def get_task(
    task_id: str,
    service: TaskService = Depends(get_task_service)
):
    return service.get_task(task_id)


@router.put("/{task_id:path}", response_model=TaskResponse)
def update_task(
    task_id: str,
    task_data: Optional[TaskUpdate] = Body(None),
    service: TaskService = Depends(get_task_service)
):
    # corps absent -> "no fields to update"
    return service.update_task(task_id, task_data or TaskUpdate())


@router.delete("/{task_id:path}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: str,
    service: TaskService = Depends(get_task_service)
):
    service.delete_task(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
