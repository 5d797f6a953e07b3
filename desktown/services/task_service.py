"""Task service - business logic for task operations."""

from uuid import UUID

from sqlalchemy.orm import Session

from desktown.db.models import Task, User
from desktown.schemas.task import TaskCreate, TaskUpdate


def _enum_value(value):
    return getattr(value, "value", value)


def list_tasks(
    db: Session,
    assignee_id: UUID | None = None,
    status: str | None = None,
) -> list[Task]:
    query = db.query(Task)
    if assignee_id:
        query = query.filter(Task.assignee_id == assignee_id)
    if status:
        query = query.filter(Task.status == status)
    return query.order_by(Task.created_at.desc(), Task.id.desc()).all()


def get_task(db: Session, task_id: int) -> Task | None:
    return db.query(Task).filter(Task.id == task_id).first()


def create_task(db: Session, creator_id: UUID, data: TaskCreate) -> Task:
    """
    Create a task owned by the caller.

    Raises:
        ValueError: assignee does not exist
    """
    if data.assignee_id and not db.query(User.id).filter(User.id == data.assignee_id).first():
        raise ValueError("Assignee not found")

    task = Task(
        title=data.title,
        description=data.description,
        assignee_id=data.assignee_id,
        creator_id=creator_id,
        priority=data.priority.value,
        status=data.status.value,
        due_date=data.due_date,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def update_task(db: Session, task: Task, data: TaskUpdate) -> tuple[Task, bool]:
    """
    Partial update.

    Returns (task, reassigned) where reassigned is True when the
    assignee changed to someone new.
    """
    updates = data.model_dump(exclude_unset=True)
    if updates.get("assignee_id") and not db.query(User.id).filter(
        User.id == updates["assignee_id"]
    ).first():
        raise ValueError("Assignee not found")

    previous_assignee = task.assignee_id
    for field, value in updates.items():
        if field in ("title", "priority", "status") and value is None:
            continue
        setattr(task, field, _enum_value(value))

    db.commit()
    db.refresh(task)
    reassigned = task.assignee_id is not None and task.assignee_id != previous_assignee
    return task, reassigned


def delete_task(db: Session, task: Task) -> None:
    db.delete(task)
    db.commit()
