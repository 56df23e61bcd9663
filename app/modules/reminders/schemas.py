from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from app.modules.tasks.schemas import TaskResponse


class TaskSummary(BaseModel):
    """What a reminder says about a task; handed to the notification sender."""
    task_id: str
    title: str
    due_date: Optional[datetime] = None
    user_id: str
    team_id: Optional[str] = None

    @classmethod
    def from_task(cls, task: TaskResponse) -> "TaskSummary":
        return cls(
            task_id=task.id,
            title=task.title,
            due_date=task.due_date,
            user_id=task.user_id,
            team_id=task.team_id,
        )

    def render(self) -> str:
        due = self.due_date.strftime("%Y-%m-%d %H:%M UTC") if self.due_date else "soon"
        return f"Reminder: task '{self.title}' is due {due}"


class ReminderTaskResult(BaseModel):
    id: str
    title: str
    email: str


class ReminderFailure(BaseModel):
    task_id: str
    stage: str  # parse | lookup | notify | mark
    error: str


class ReminderBatchResult(BaseModel):
    success: bool = True
    processed: int = 0
    selected: int = 0
    succeeded: List[ReminderTaskResult] = []
    failures: List[ReminderFailure] = []
    already_marked: List[str] = []  # delivered, but another run flipped the flag first
    skipped: List[str] = []
    timed_out: bool = False
    error: Optional[str] = None
    message: Optional[str] = None
