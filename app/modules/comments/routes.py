from fastapi import APIRouter, Depends
from app.core.dependencies import get_current_principal, get_membership_resolver, get_view_enricher
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import Principal
from app.modules.comments.schemas import CommentCreate, EnrichedComment
from app.modules.comments.service import CommentService
from app.modules.profiles.enrichment import ViewEnricher
from app.modules.teams.membership import MembershipResolver
from supabase import Client
from typing import List

router = APIRouter(prefix="/teams/{team_id}/tasks/{task_id}/comments", tags=["comments"])


def get_comment_service(
    supabase: Client = Depends(get_supabase),
    resolver: MembershipResolver = Depends(get_membership_resolver),
    enricher: ViewEnricher = Depends(get_view_enricher)
) -> CommentService:
    return CommentService(supabase, resolver, enricher)


@router.get("", response_model=List[EnrichedComment])
def list_comments(
    team_id: str,
    task_id: str,
    principal: Principal = Depends(get_current_principal),
    service: CommentService = Depends(get_comment_service)
):
    """List comments on a team task with author profiles"""
    return service.list_comments(principal.id, team_id, task_id)


@router.post("", response_model=EnrichedComment, status_code=201)
def add_comment(
    team_id: str,
    task_id: str,
    comment_data: CommentCreate,
    principal: Principal = Depends(get_current_principal),
    service: CommentService = Depends(get_comment_service)
):
    """Comment on a team task (requires can_update_tasks)"""
    return service.add_comment(principal.id, team_id, task_id, comment_data)
