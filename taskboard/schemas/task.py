from sqlmodel import SQLModel
from typing import List, Optional, Union


# Field names follow the JSON the frontend sends and reads (dueDate, ownerName).
class TaskWrite(SQLModel):
    """Body of POST /tasks and PUT /tasks/{id}.

    ``assignees`` may be a list of usernames or a comma separated string.
    Leaving it out keeps the current assignments; sending it (even empty)
    replaces them.
    """

    title: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    dueDate: Optional[str] = None
    assignees: Optional[Union[List[str], str]] = None


class TaskRead(SQLModel):
    id: int
    title: str
    status: str
    dueDate: Optional[str] = None
    category: Optional[str] = None
    category_id: Optional[int] = None
    owner_id: int
    ownerName: Optional[str] = None
    assignees: List[str] = []


class TaskCreated(SQLModel):
    message: str
    id: int
