from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.modules.profiles.schemas import ProfileProjection


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)


class CommentResponse(BaseModel):
    id: str
    task_id: str
    user_id: str
    content: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EnrichedComment(CommentResponse):
    author_data: Optional[ProfileProjection] = None
