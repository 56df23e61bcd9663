"""
Team membership resolution and the gate in front of every team-scoped operation.

A principal relates to a team in exactly one way:
- Owner: created the team; acts as `admin` whether or not a team_members row exists.
- MemberWithRole: has a team_members row; acts with that row's role.
- no relationship: no access.

Ownership takes precedence over any membership row for the same team.
"""

import logging
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel
from supabase import Client

from app.config.permissions_config import ADMIN, capabilities_for, has_capability
from app.core.errors import InsufficientCapabilityError, NotAMemberError
from app.database.query import first_row, run_query
from app.modules.teams.schemas import TeamAccess

logger = logging.getLogger(__name__)


class Owner(BaseModel):
    kind: Literal["owner"] = "owner"

    @property
    def effective_role(self) -> str:
        return ADMIN


class MemberWithRole(BaseModel):
    kind: Literal["member"] = "member"
    role: str

    @property
    def effective_role(self) -> str:
        return self.role


Relationship = Union[Owner, MemberWithRole]


def member_relationship(role: Any) -> MemberWithRole:
    """Build a MemberWithRole from a stored role, failing fast on corrupt roles."""
    capabilities_for(role)
    return MemberWithRole(role=role)


def _access(team_id: str, team_name: str, relationship: Relationship) -> TeamAccess:
    return TeamAccess(
        team_id=team_id,
        team_name=team_name,
        effective_role=relationship.effective_role,
        is_owner=isinstance(relationship, Owner),
    )


class MembershipResolver:
    def __init__(self, supabase: Client, cache: Optional[Dict[str, Any]] = None):
        self.supabase = supabase
        # Request-scoped; keyed by (principal_id, team_id)
        self._cache = cache.setdefault("team_access", {}) if cache is not None else {}

    def resolve(self, principal_id: str) -> List[TeamAccess]:
        """All teams the principal can act within: owned teams first, then member teams,
        at most one entry per team."""
        owned = run_query(
            self.supabase.table("teams")
                .select("id, name, created_at")
                .eq("created_by", principal_id)
                .order("created_at", desc=True),
            "list owned teams",
        )
        result: List[TeamAccess] = []
        seen = set()
        for team in owned:
            if team["id"] in seen:
                continue
            seen.add(team["id"])
            result.append(_access(team["id"], team["name"], Owner()))

        rows = run_query(
            self.supabase.table("team_members")
                .select("team_id, role")
                .eq("user_id", principal_id),
            "list team memberships",
        )
        roles: Dict[str, MemberWithRole] = {}
        for row in rows:
            team_id = row["team_id"]
            if team_id in seen or team_id in roles:
                # ownership is never downgraded by a membership row
                continue
            roles[team_id] = member_relationship(row.get("role"))
        if not roles:
            return result

        teams = run_query(
            self.supabase.table("teams")
                .select("id, name, created_at")
                .in_("id", list(roles))
                .order("created_at", desc=True),
            "load member teams",
        )
        for team in teams:
            if team["id"] in seen:
                continue
            seen.add(team["id"])
            result.append(_access(team["id"], team["name"], roles[team["id"]]))
        return result

    def _lookup(self, principal_id: str, team_id: str) -> Optional[TeamAccess]:
        key = (principal_id, team_id)
        if key in self._cache:
            return self._cache[key]
        access = None
        team = first_row(
            self.supabase.table("teams")
                .select("id, name, created_by")
                .eq("id", team_id),
            "load team",
        )
        if team is not None:
            if team.get("created_by") == principal_id:
                access = _access(team["id"], team["name"], Owner())
            else:
                row = first_row(
                    self.supabase.table("team_members")
                        .select("role")
                        .eq("team_id", team_id)
                        .eq("user_id", principal_id),
                    "load team membership",
                )
                if row is not None:
                    access = _access(team["id"], team["name"], member_relationship(row.get("role")))
        self._cache[key] = access
        return access

    def relationship(self, principal_id: str, team_id: str) -> Optional[Relationship]:
        access = self._lookup(principal_id, team_id)
        if access is None:
            return None
        if access.is_owner:
            return Owner()
        return MemberWithRole(role=access.effective_role)

    def role_of(self, principal_id: str, team_id: str) -> Optional[str]:
        access = self._lookup(principal_id, team_id)
        return access.effective_role if access else None

    def is_member(self, principal_id: str, team_id: str) -> bool:
        return self._lookup(principal_id, team_id) is not None

    def require_access(self, principal_id: str, team_id: str) -> TeamAccess:
        """Gate for team-scoped reads; raises NotAMemberError for missing teams too."""
        access = self._lookup(principal_id, team_id)
        if access is None:
            logger.info(f"Denied team access: user {principal_id} has no relationship to team {team_id}")
            raise NotAMemberError(team_id)
        return access

    def authorize(self, principal_id: str, team_id: str, capability: str) -> TeamAccess:
        access = self.require_access(principal_id, team_id)
        if not has_capability(access.effective_role, capability):
            logger.info(
                f"Denied {capability} on team {team_id} for user {principal_id} (role {access.effective_role})"
            )
            raise InsufficientCapabilityError(capability, access.effective_role)
        return access

    def invalidate(self, principal_id: str, team_id: str) -> None:
        self._cache.pop((principal_id, team_id), None)
