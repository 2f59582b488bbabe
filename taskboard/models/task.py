from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import UniqueConstraint
from typing import Optional, List
from datetime import date


class TaskStatus:
    """Well-known status values. The column itself is an open string."""

    pending = "Pending"
    in_progress = "In Progress"
    completed = "Completed"


class Category(SQLModel, table=True):
    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("name", "user_id", name="uq_categories_name_user"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=255)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)

    owner: Optional["User"] = Relationship(back_populates="categories")


class TaskAssignee(SQLModel, table=True):
    __tablename__ = "task_assignees"

    task_id: int = Field(foreign_key="tasks.id", ondelete="CASCADE", primary_key=True)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", primary_key=True)

    task: Optional["Task"] = Relationship(back_populates="assignments")
    user: Optional["User"] = Relationship()


class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False, max_length=255)
    status: str = Field(default=TaskStatus.pending, max_length=50)
    due_date: Optional[date] = Field(default=None)
    category_id: Optional[int] = Field(
        default=None, foreign_key="categories.id", ondelete="SET NULL", nullable=True
    )
    owner_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)

    owner: Optional["User"] = Relationship(back_populates="tasks")
    category: Optional[Category] = Relationship()
    assignments: List[TaskAssignee] = Relationship(
        back_populates="task",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "passive_deletes": True},
    )
