"""Task access layer.

Every read and write is scoped to the calling user: a task that belongs to
somebody else behaves exactly like a task that does not exist, so callers
never learn about other users' rows. Category names and assignee usernames
arrive as free text and are resolved here into foreign keys.
"""

import logging
from datetime import date, datetime
from typing import List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from ..core.errors import ValidationError
from ..models.task import Category, Task, TaskAssignee, TaskStatus
from ..models.user import User
from ..schemas.task import TaskRead, TaskWrite

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> str:
    return value.strip() if value else ""


def parse_due_date(value: Optional[str]) -> Optional[date]:
    """Accept ``YYYY-MM-DD`` (or a full ISO timestamp); empty means no due date."""
    value = _clean(value)
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        raise ValidationError(f"Invalid due date: {value!r}, expected YYYY-MM-DD")


def parse_assignees(assignees: Union[List[str], str, None]) -> Optional[List[str]]:
    """Normalize assignee input to an ordered list of unique usernames.

    Returns None when nothing was supplied, which callers treat as
    "leave the current assignments alone".
    """
    if assignees is None:
        return None
    items = assignees if isinstance(assignees, list) else str(assignees).split(",")
    names = []
    for item in items:
        name = str(item).strip()
        if name and name not in names:
            names.append(name)
    return names


def get_or_create_category(session: Session, name: Optional[str], user_id: int) -> Optional[int]:
    name = _clean(name)
    if not name:
        return None

    statement = select(Category).where(Category.name == name, Category.user_id == user_id)
    category = session.exec(statement).first()
    if category is not None:
        return category.id

    try:
        with session.begin_nested():
            category = Category(name=name, user_id=user_id)
            session.add(category)
    except IntegrityError:
        # Another request created it between our select and insert
        category = session.exec(statement).one()
    return category.id


def replace_assignees(session: Session, task: Task, usernames: List[str]) -> None:
    """Drop every assignment of ``task`` and assign the usernames that resolve."""
    task.assignments.clear()
    session.flush()

    if not usernames:
        return
    users = session.exec(select(User).where(User.username.in_(usernames))).all()
    for user in users:
        task.assignments.append(TaskAssignee(user_id=user.id))
    unknown = set(usernames) - {user.username for user in users}
    if unknown:
        logger.debug("Task %s: ignoring unknown assignees %s", task.id, sorted(unknown))


def to_task_read(task: Task) -> TaskRead:
    assignees = {a.user.username for a in task.assignments if a.user is not None}
    return TaskRead(
        id=task.id,
        title=task.title,
        status=task.status,
        dueDate=task.due_date.isoformat() if task.due_date else None,
        category=task.category.name if task.category else None,
        category_id=task.category_id,
        owner_id=task.owner_id,
        ownerName=task.owner.username if task.owner else None,
        assignees=sorted(assignees),
    )


def list_tasks(session: Session, user_id: int) -> List[TaskRead]:
    statement = (
        select(Task)
        .where(Task.owner_id == user_id)
        .options(
            selectinload(Task.category),
            selectinload(Task.owner),
            selectinload(Task.assignments).selectinload(TaskAssignee.user),
        )
        .order_by(Task.id)
    )
    return [to_task_read(task) for task in session.exec(statement).all()]


def create_task(session: Session, user_id: int, data: TaskWrite) -> int:
    title = _clean(data.title)
    if not title:
        raise ValidationError("Task title is required")
    due_date = parse_due_date(data.dueDate)

    task = Task(
        title=title,
        status=_clean(data.status) or TaskStatus.pending,
        due_date=due_date,
        owner_id=user_id,
        category_id=get_or_create_category(session, data.category, user_id),
    )
    session.add(task)
    session.flush()

    usernames = parse_assignees(data.assignees)
    if usernames is not None:
        replace_assignees(session, task, usernames)

    task_id = task.id
    session.commit()
    logger.info("User %s created task %s", user_id, task_id)
    return task_id


def update_task(session: Session, user_id: int, task_id: int, data: TaskWrite) -> bool:
    """Apply the supplied fields to a task the caller owns.

    Returns False (and changes nothing) when the task is missing or owned by
    someone else.
    """
    fields = data.model_fields_set
    if "title" in fields and not _clean(data.title):
        raise ValidationError("Task title is required")
    due_date = parse_due_date(data.dueDate) if "dueDate" in fields else None

    task = session.exec(select(Task).where(Task.id == task_id, Task.owner_id == user_id)).first()
    if task is None:
        logger.debug("User %s: update of task %s ignored, not owned", user_id, task_id)
        return False

    if "title" in fields:
        task.title = _clean(data.title)
    if "status" in fields:
        task.status = _clean(data.status) or TaskStatus.pending
    if "dueDate" in fields:
        task.due_date = due_date
    if "category" in fields:
        task.category_id = get_or_create_category(session, data.category, user_id)
    session.add(task)

    usernames = parse_assignees(data.assignees)
    if usernames is not None:
        replace_assignees(session, task, usernames)

    session.commit()
    return True


def delete_task(session: Session, user_id: int, task_id: int) -> bool:
    task = session.exec(select(Task).where(Task.id == task_id, Task.owner_id == user_id)).first()
    if task is None:
        return False
    session.delete(task)
    session.commit()
    return True


def clear_completed(session: Session, user_id: int) -> int:
    statement = select(Task).where(Task.owner_id == user_id, Task.status == TaskStatus.completed)
    tasks = session.exec(statement).all()
    for task in tasks:
        session.delete(task)
    session.commit()
    logger.info("User %s cleared %d completed tasks", user_id, len(tasks))
    return len(tasks)
