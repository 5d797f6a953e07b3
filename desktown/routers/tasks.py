"""Tasks router - API endpoints for task management."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from desktown.core.deps import get_current_session, get_db, require_csrf_header
from desktown.db.enums import TaskStatus
from desktown.schemas.auth import UserSession
from desktown.schemas.task import TaskCreate, TaskRead, TaskUpdate
from desktown.services import notification_service, task_service

router = APIRouter()


def _get_task_or_404(db: Session, task_id: int):
    task = task_service.get_task(db, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.get("/tasks", response_model=list[TaskRead])
def list_tasks(
    status: TaskStatus | None = None,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return task_service.list_tasks(db, status=status.value if status else None)


@router.get("/me/tasks", response_model=list[TaskRead])
def list_my_tasks(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Tasks assigned to the caller."""
    return task_service.list_tasks(db, assignee_id=session.user_id)


@router.get("/tasks/{task_id}", response_model=TaskRead)
def get_task(
    task_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return _get_task_or_404(db, task_id)


@router.post(
    "/tasks",
    response_model=TaskRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_task(
    data: TaskCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Create a task. Assigning it to someone else notifies them."""
    try:
        task = task_service.create_task(db, session.user_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if task.assignee_id and task.assignee_id != session.user_id:
        notification_service.notify_task_assigned(db, task, session.display_name)
    return task


@router.patch(
    "/tasks/{task_id}",
    response_model=TaskRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_task(
    task_id: int,
    data: TaskUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    task = _get_task_or_404(db, task_id)
    try:
        task, reassigned = task_service.update_task(db, task, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if reassigned and task.assignee_id != session.user_id:
        notification_service.notify_task_assigned(db, task, session.display_name)
    return task


@router.delete("/tasks/{task_id}", status_code=204, dependencies=[Depends(require_csrf_header)])
def delete_task(
    task_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    task = _get_task_or_404(db, task_id)
    task_service.delete_task(db, task)
    return Response(status_code=204)
