from fastapi import APIRouter, Depends, Query
from app.config import settings
from app.core.dependencies import get_current_principal, get_membership_resolver, get_view_enricher
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import Principal
from app.modules.history.schemas import EnrichedHistoryEntry
from app.modules.history.service import HistoryService
from app.modules.profiles.enrichment import ViewEnricher
from app.modules.teams.membership import MembershipResolver
from supabase import Client
from typing import List

router = APIRouter(prefix="/teams/{team_id}", tags=["history"])


def get_history_service(
    supabase: Client = Depends(get_supabase),
    resolver: MembershipResolver = Depends(get_membership_resolver),
    enricher: ViewEnricher = Depends(get_view_enricher)
) -> HistoryService:
    return HistoryService(supabase, resolver, enricher, viewer_sees_all=settings.viewer_sees_all_team_tasks)


@router.get("/tasks/{task_id}/history", response_model=List[EnrichedHistoryEntry])
def list_task_history(
    team_id: str,
    task_id: str,
    principal: Principal = Depends(get_current_principal),
    service: HistoryService = Depends(get_history_service)
):
    """Change history of a team task, newest first"""
    return service.list_task_history(principal.id, team_id, task_id)


@router.get("/activity", response_model=List[EnrichedHistoryEntry])
def list_team_activity(
    team_id: str,
    limit: int = Query(default=10, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
    service: HistoryService = Depends(get_history_service)
):
    """Recent task activity in the team (requires can_view_tasks)"""
    return service.list_team_activity(principal.id, team_id, limit=limit)
