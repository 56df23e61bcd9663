from pydantic import BaseModel
from typing import Any, Optional
from datetime import datetime

from app.modules.profiles.schemas import ProfileProjection


class HistoryEntry(BaseModel):
    id: str
    task_id: str
    team_id: Optional[str] = None
    user_id: str
    action_type: str
    field_name: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    change_type: Optional[str] = None
    assigned_to: Optional[str] = None
    details: Optional[Any] = None
    created_at: datetime

    class Config:
        from_attributes = True


class EnrichedHistoryEntry(HistoryEntry):
    actor_data: Optional[ProfileProjection] = None
