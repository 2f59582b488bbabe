# This file ensures all models are loaded together to resolve circular references
from .user import User
from .task import Category, Task, TaskAssignee, TaskStatus

__all__ = ["User", "Category", "Task", "TaskAssignee", "TaskStatus"]
