from pydantic import BaseModel
from typing import Dict, List

from app.config.permissions_config import CapabilitySet
from app.modules.teams.schemas import TeamAccess


class Principal(BaseModel):
    """Authenticated identity handed to the core. Never mutated."""
    id: str
    email: str


class TeamCapabilities(TeamAccess):
    capabilities: CapabilitySet


class CurrentUserResponse(Principal):
    teams: List[TeamCapabilities]


class PermissionMatrixResponse(BaseModel):
    roles: Dict[str, Dict[str, bool]]
