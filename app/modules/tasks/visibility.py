"""
Task visibility, kept apart from mutation capabilities.

Capabilities decide what a role may change; visibility decides which team
tasks a principal sees at all. With `viewer_sees_all` off, viewers only see
tasks they created or are assigned to.
"""

from app.config.permissions_config import VIEWER
from app.modules.tasks.schemas import TaskResponse
from app.modules.teams.schemas import TeamAccess


def can_see_task(access: TeamAccess, task: TaskResponse, principal_id: str, viewer_sees_all: bool = True) -> bool:
    if task.team_id != access.team_id:
        return False
    if viewer_sees_all or access.effective_role != VIEWER:
        return True
    return principal_id in (task.user_id, task.assigned_to)
