from fastapi import APIRouter, Depends
from app.core.dependencies import (
    get_current_principal, get_membership_resolver, get_view_enricher, get_profile_lookup
)
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import Principal
from app.modules.profiles.enrichment import ViewEnricher
from app.modules.profiles.service import ProfileLookup
from app.modules.teams.membership import MembershipResolver
from app.modules.teams.schemas import (
    TeamCreate, TeamUpdate, TeamResponse, TeamAccess, TeamDetail,
    TeamMemberAdd, TeamMemberRoleUpdate, EnrichedTeamMember
)
from app.modules.teams.service import TeamService
from supabase import Client
from typing import List

router = APIRouter(prefix="/teams", tags=["teams"])


def get_team_service(
    supabase: Client = Depends(get_supabase),
    resolver: MembershipResolver = Depends(get_membership_resolver),
    enricher: ViewEnricher = Depends(get_view_enricher),
    profiles: ProfileLookup = Depends(get_profile_lookup)
) -> TeamService:
    return TeamService(supabase, resolver, enricher, profiles)


@router.post("", response_model=TeamResponse, status_code=201)
def create_team(
    team_data: TeamCreate,
    principal: Principal = Depends(get_current_principal),
    service: TeamService = Depends(get_team_service)
):
    """Create a new team owned by the current user"""
    return service.create_team(principal.id, team_data)


@router.get("", response_model=List[TeamAccess])
def list_teams(
    principal: Principal = Depends(get_current_principal),
    service: TeamService = Depends(get_team_service)
):
    """Teams the user owns or belongs to, each once, with the effective role"""
    return service.list_teams(principal.id)


@router.get("/{team_id}", response_model=TeamDetail)
def get_team(
    team_id: str,
    principal: Principal = Depends(get_current_principal),
    service: TeamService = Depends(get_team_service)
):
    """Get team with creator and members (only if user is owner or member)"""
    return service.get_team(principal.id, team_id)


@router.put("/{team_id}", response_model=TeamResponse)
def update_team(
    team_id: str,
    team_data: TeamUpdate,
    principal: Principal = Depends(get_current_principal),
    service: TeamService = Depends(get_team_service)
):
    """Update team (requires can_manage_team)"""
    return service.update_team(principal.id, team_id, team_data)


@router.delete("/{team_id}", status_code=204)
def delete_team(
    team_id: str,
    principal: Principal = Depends(get_current_principal),
    service: TeamService = Depends(get_team_service)
):
    """Delete team (requires can_manage_team)"""
    service.delete_team(principal.id, team_id)
    return None


@router.get("/{team_id}/members", response_model=List[EnrichedTeamMember])
def list_members(
    team_id: str,
    principal: Principal = Depends(get_current_principal),
    service: TeamService = Depends(get_team_service)
):
    """List team members with their profiles"""
    return service.list_members(principal.id, team_id)


@router.post("/{team_id}/members", response_model=EnrichedTeamMember, status_code=201)
def add_member(
    team_id: str,
    member_data: TeamMemberAdd,
    principal: Principal = Depends(get_current_principal),
    service: TeamService = Depends(get_team_service)
):
    """Invite a user to the team (requires can_invite_members)"""
    return service.add_member(principal.id, team_id, member_data)


@router.put("/{team_id}/members/{user_id}", response_model=EnrichedTeamMember)
def update_member_role(
    team_id: str,
    user_id: str,
    role_data: TeamMemberRoleUpdate,
    principal: Principal = Depends(get_current_principal),
    service: TeamService = Depends(get_team_service)
):
    """Change a member's role (requires can_assign_roles)"""
    return service.update_member_role(principal.id, team_id, user_id, role_data.role)


@router.delete("/{team_id}/members/{user_id}", status_code=204)
def remove_member(
    team_id: str,
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    service: TeamService = Depends(get_team_service)
):
    """Remove a member (requires can_manage_team, or removing yourself)"""
    service.remove_member(principal.id, team_id, user_id)
    return None
