from pydantic import AfterValidator, BaseModel, EmailStr, Field, model_validator
from typing import Annotated, List, Optional
from datetime import datetime

from app.config.permissions_config import DEFAULT_INVITE_ROLE, ROLES, is_valid_role
from app.modules.profiles.schemas import ProfileProjection


def _check_role(value: str) -> str:
    if not is_valid_role(value):
        raise ValueError(f"role must be one of: {', '.join(ROLES)}")
    return value


TeamRole = Annotated[str, AfterValidator(_check_role)]


class TeamCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None


class TeamUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class TeamResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TeamAccess(BaseModel):
    """A team the principal can act within, with the role actually applied."""
    team_id: str
    team_name: str
    effective_role: str
    is_owner: bool


class TeamMemberAdd(BaseModel):
    email: Optional[EmailStr] = None
    user_id: Optional[str] = None
    role: TeamRole = DEFAULT_INVITE_ROLE

    @model_validator(mode="after")
    def _needs_target(self):
        if not self.email and not self.user_id:
            raise ValueError("email or user_id is required")
        return self


class TeamMemberRoleUpdate(BaseModel):
    role: TeamRole


class TeamMemberResponse(BaseModel):
    id: str
    team_id: str
    user_id: str
    role: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EnrichedTeamMember(TeamMemberResponse):
    user_data: Optional[ProfileProjection] = None


class TeamDetail(TeamResponse):
    creator_data: Optional[ProfileProjection] = None
    members: List[EnrichedTeamMember] = []
    access: TeamAccess
