from fastapi import APIRouter, Depends
from app.config import settings
from app.core.dependencies import get_current_principal, get_membership_resolver, get_view_enricher
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import Principal
from app.modules.profiles.enrichment import ViewEnricher
from app.modules.tasks.schemas import TaskCreate, TaskUpdate, EnrichedTask, TaskStatus, TaskPriority
from app.modules.tasks.service import TaskService
from app.modules.teams.membership import MembershipResolver
from supabase import Client
from typing import List, Optional

router = APIRouter(tags=["tasks"])


def get_task_service(
    supabase: Client = Depends(get_supabase),
    resolver: MembershipResolver = Depends(get_membership_resolver),
    enricher: ViewEnricher = Depends(get_view_enricher)
) -> TaskService:
    return TaskService(supabase, resolver, enricher, viewer_sees_all=settings.viewer_sees_all_team_tasks)


# Team tasks
@router.get("/teams/{team_id}/tasks", response_model=List[EnrichedTask])
def list_team_tasks(
    team_id: str,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service)
):
    """List team tasks with assignee profiles (requires team membership)"""
    return service.list_team_tasks(principal.id, team_id, status=status, priority=priority)


@router.post("/teams/{team_id}/tasks", response_model=EnrichedTask, status_code=201)
def create_team_task(
    team_id: str,
    task_data: TaskCreate,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service)
):
    """Create a team task (requires can_create_tasks)"""
    return service.create_team_task(principal.id, team_id, task_data)


@router.get("/teams/{team_id}/tasks/{task_id}", response_model=EnrichedTask)
def get_team_task(
    team_id: str,
    task_id: str,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service)
):
    return service.get_team_task(principal.id, team_id, task_id)


@router.put("/teams/{team_id}/tasks/{task_id}", response_model=EnrichedTask)
def update_team_task(
    team_id: str,
    task_id: str,
    task_data: TaskUpdate,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service)
):
    """Update a team task (requires can_update_tasks)"""
    return service.update_team_task(principal.id, team_id, task_id, task_data)


@router.delete("/teams/{team_id}/tasks/{task_id}", status_code=204)
def delete_team_task(
    team_id: str,
    task_id: str,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service)
):
    """Delete a team task (requires can_delete_tasks)"""
    service.delete_team_task(principal.id, team_id, task_id)
    return None


# Personal tasks
@router.get("/tasks", response_model=List[EnrichedTask])
def list_personal_tasks(
    status: Optional[TaskStatus] = None,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service)
):
    """List the current user's personal (non-team) tasks"""
    return service.list_personal_tasks(principal.id, status=status)


@router.post("/tasks", response_model=EnrichedTask, status_code=201)
def create_personal_task(
    task_data: TaskCreate,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service)
):
    return service.create_personal_task(principal.id, task_data)


@router.get("/tasks/{task_id}", response_model=EnrichedTask)
def get_personal_task(
    task_id: str,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service)
):
    return service.get_personal_task(principal.id, task_id)


@router.put("/tasks/{task_id}", response_model=EnrichedTask)
def update_personal_task(
    task_id: str,
    task_data: TaskUpdate,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service)
):
    return service.update_personal_task(principal.id, task_id, task_data)


@router.delete("/tasks/{task_id}", status_code=204)
def delete_personal_task(
    task_id: str,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service)
):
    service.delete_personal_task(principal.id, task_id)
    return None
