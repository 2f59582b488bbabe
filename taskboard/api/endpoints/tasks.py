from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List

from taskboard.api.deps import get_current_user
from taskboard.db.session import get_session
from taskboard.models.user import User
from taskboard.schemas.task import TaskCreated, TaskRead, TaskWrite
from taskboard.schemas.user import MessageResponse
from taskboard.services import tasks as task_service

router = APIRouter()


@router.get("", response_model=List[TaskRead])
def list_user_tasks(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return task_service.list_tasks(session, current_user.id)


@router.post("", response_model=TaskCreated, status_code=status.HTTP_201_CREATED)
def create_task(
    task_create: TaskWrite,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    task_id = task_service.create_task(session, current_user.id, task_create)
    return TaskCreated(message="Task created", id=task_id)


# Declared before /{task_id} so "completed" is never read as an id
@router.delete("/completed", response_model=MessageResponse)
def clear_completed_tasks(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    task_service.clear_completed(session, current_user.id)
    return MessageResponse(message="Completed tasks cleared")


@router.put("/{task_id}", response_model=MessageResponse)
def update_task(
    task_id: int,
    task_update: TaskWrite,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    # Tasks the caller does not own are left alone without saying so
    task_service.update_task(session, current_user.id, task_id, task_update)
    return MessageResponse(message="Task updated")


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    task_service.delete_task(session, current_user.id, task_id)
    return MessageResponse(message="Task deleted")
