from supabase import Client
from app.config.permissions_config import DEFAULT_INVITE_ROLE, has_capability
from app.core.errors import ConflictError, InsufficientCapabilityError, NotFoundError, StoreUnavailable
from app.database.query import first_row, run_query
from app.modules.profiles.enrichment import ViewEnricher
from app.modules.profiles.service import ProfileLookup
from app.modules.teams.membership import MembershipResolver, Owner
from app.modules.teams.schemas import (
    TeamCreate, TeamUpdate, TeamResponse, TeamAccess, TeamDetail,
    TeamMemberAdd, TeamMemberResponse, EnrichedTeamMember
)
from typing import List
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class TeamService:
    def __init__(
        self,
        supabase: Client,
        resolver: MembershipResolver,
        enricher: ViewEnricher,
        profiles: ProfileLookup
    ):
        self.supabase = supabase
        self.resolver = resolver
        self.enricher = enricher
        self.profiles = profiles

    def _get_team_row(self, team_id: str) -> TeamResponse:
        row = first_row(self.supabase.table("teams").select("*").eq("id", team_id), "load team")
        if row is None:
            raise NotFoundError("Team not found")
        return TeamResponse(**row)

    def _member_rows(self, team_id: str) -> List[TeamMemberResponse]:
        rows = run_query(
            self.supabase.table("team_members")
                .select("*")
                .eq("team_id", team_id)
                .order("created_at"),
            "list team members",
        )
        return [TeamMemberResponse(**row) for row in rows]

    def create_team(self, principal_id: str, team_data: TeamCreate) -> TeamResponse:
        """Create a team owned by the principal. No membership row is written for the owner."""
        rows = run_query(
            self.supabase.table("teams").insert({
                "name": team_data.name,
                "description": team_data.description,
                "created_by": principal_id
            }),
            "create team",
        )
        if not rows:
            raise StoreUnavailable("Failed to create team")
        logger.info(f"Team {rows[0]['id']} created by {principal_id}")
        return TeamResponse(**rows[0])

    def list_teams(self, principal_id: str) -> List[TeamAccess]:
        return self.resolver.resolve(principal_id)

    def get_team(self, principal_id: str, team_id: str) -> TeamDetail:
        """Team with its creator and enriched member list"""
        access = self.resolver.require_access(principal_id, team_id)
        team = self._get_team_row(team_id)
        members = self.enricher.enrich_members(self._member_rows(team_id))
        return TeamDetail(
            **team.model_dump(),
            creator_data=self.enricher.enrich_creator(team),
            members=members,
            access=access
        )

    def update_team(self, principal_id: str, team_id: str, team_data: TeamUpdate) -> TeamResponse:
        self.resolver.authorize(principal_id, team_id, "can_manage_team")
        update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
        if team_data.name:
            update_data["name"] = team_data.name
        if team_data.description is not None:
            update_data["description"] = team_data.description
        rows = run_query(
            self.supabase.table("teams").update(update_data).eq("id", team_id),
            "update team",
        )
        if not rows:
            raise NotFoundError("Team not found")
        return TeamResponse(**rows[0])

    def delete_team(self, principal_id: str, team_id: str) -> None:
        self.resolver.authorize(principal_id, team_id, "can_manage_team")
        # members, tasks and their comments and history go by FK cascade
        rows = run_query(self.supabase.table("teams").delete().eq("id", team_id), "delete team")
        if not rows:
            raise NotFoundError("Team not found")
        logger.info(f"Team {team_id} deleted by {principal_id}")

    def list_members(self, principal_id: str, team_id: str) -> List[EnrichedTeamMember]:
        self.resolver.require_access(principal_id, team_id)
        return self.enricher.enrich_members(self._member_rows(team_id))

    def add_member(self, principal_id: str, team_id: str, member_data: TeamMemberAdd) -> EnrichedTeamMember:
        """Invite a user by email or id. Inviting with a role other than the default
        also requires can_assign_roles."""
        access = self.resolver.authorize(principal_id, team_id, "can_invite_members")
        if member_data.role != DEFAULT_INVITE_ROLE and not has_capability(access.effective_role, "can_assign_roles"):
            raise InsufficientCapabilityError("can_assign_roles", access.effective_role)

        if member_data.user_id:
            profile = self.profiles.get(member_data.user_id)
        else:
            profile = self.profiles.find_by_email(str(member_data.email))
        if profile is None:
            raise NotFoundError("User not found")

        relationship = self.resolver.relationship(profile.id, team_id)
        if isinstance(relationship, Owner):
            raise ConflictError("User owns this team")
        if relationship is not None:
            raise ConflictError("User is already a member of this team")

        rows = run_query(
            self.supabase.table("team_members").insert({
                "team_id": team_id,
                "user_id": profile.id,
                "role": member_data.role
            }),
            "add team member",
        )
        if not rows:
            raise StoreUnavailable("Failed to add member")
        self.resolver.invalidate(profile.id, team_id)
        logger.info(f"User {profile.id} added to team {team_id} as {member_data.role} by {principal_id}")
        member = TeamMemberResponse(**rows[0])
        return EnrichedTeamMember(**member.model_dump(), user_data=profile)

    def update_member_role(self, principal_id: str, team_id: str, user_id: str, role: str) -> EnrichedTeamMember:
        self.resolver.authorize(principal_id, team_id, "can_assign_roles")
        relationship = self.resolver.relationship(user_id, team_id)
        if relationship is None:
            raise NotFoundError("Member not found")
        if isinstance(relationship, Owner):
            raise ConflictError("The team owner's role cannot be changed")
        rows = run_query(
            self.supabase.table("team_members")
                .update({"role": role, "updated_at": datetime.now(timezone.utc).isoformat()})
                .eq("team_id", team_id)
                .eq("user_id", user_id),
            "update member role",
        )
        if not rows:
            raise NotFoundError("Member not found")
        self.resolver.invalidate(user_id, team_id)
        return self.enricher.enrich_members([TeamMemberResponse(**rows[0])])[0]

    def remove_member(self, principal_id: str, team_id: str, user_id: str) -> None:
        """Remove a member; members may always remove themselves"""
        if user_id == principal_id:
            access = self.resolver.require_access(principal_id, team_id)
            if access.is_owner:
                raise ConflictError("The team owner cannot leave the team")
        else:
            self.resolver.authorize(principal_id, team_id, "can_manage_team")
            if isinstance(self.resolver.relationship(user_id, team_id), Owner):
                raise ConflictError("The team owner cannot be removed")
        rows = run_query(
            self.supabase.table("team_members")
                .delete()
                .eq("team_id", team_id)
                .eq("user_id", user_id),
            "remove team member",
        )
        if not rows:
            raise NotFoundError("Member not found")
        self.resolver.invalidate(user_id, team_id)
        logger.info(f"User {user_id} removed from team {team_id} by {principal_id}")
