from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional
from datetime import datetime

from app.modules.profiles.schemas import ProfileProjection

TaskStatus = Literal["todo", "in_progress", "done"]
TaskPriority = Literal["low", "medium", "high", "urgent"]


class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    status: TaskStatus = "todo"
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None


class TaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus = "todo"
    priority: Optional[TaskPriority] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    due_date: Optional[datetime] = None
    reminder_sent: bool = False
    user_id: str
    team_id: Optional[str] = None
    assigned_to: Optional[str] = None

    @field_validator("reminder_sent", mode="before")
    @classmethod
    def _null_means_not_sent(cls, value):
        return bool(value)

    class Config:
        from_attributes = True


class EnrichedTask(TaskResponse):
    assignee_data: Optional[ProfileProjection] = None
