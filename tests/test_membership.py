"""Unit tests for MembershipResolver: owner precedence, de-duplication and gating."""

import pytest

from app.core.errors import (
    InsufficientCapabilityError,
    InvalidRoleError,
    NotAMemberError,
    StoreUnavailable,
)
from app.modules.teams.membership import MembershipResolver, MemberWithRole, Owner
from tests.fakes import make_member, make_team


@pytest.fixture
def resolver(db):
    return MembershipResolver(db)


class TestResolve:
    def test_owner_with_stray_viewer_row_appears_once_as_admin(self, db, resolver):
        db.seed("teams", make_team("t1", created_by="p"))
        db.seed("team_members", make_member("t1", "p", "viewer"))

        result = resolver.resolve("p")

        assert len(result) == 1
        assert result[0].team_id == "t1"
        assert result[0].effective_role == "admin"
        assert result[0].is_owner is True

    def test_owned_and_member_teams(self, db, resolver):
        db.seed(
            "teams",
            make_team("own", created_by="p", age_days=2),
            make_team("other", created_by="q", age_days=1),
        )
        db.seed("team_members", make_member("other", "p", "member"))

        result = resolver.resolve("p")

        assert [(a.team_id, a.effective_role, a.is_owner) for a in result] == [
            ("own", "admin", True),
            ("other", "member", False),
        ]

    def test_never_returns_duplicate_team_ids(self, db, resolver):
        db.seed(
            "teams",
            make_team("t1", created_by="p"),
            make_team("t2", created_by="q"),
            make_team("t3", created_by="r"),
        )
        db.seed(
            "team_members",
            make_member("t1", "p", "member"),
            make_member("t2", "p", "viewer"),
            make_member("t2", "p", "admin"),  # violates uniqueness; first row wins
            make_member("t3", "p", "viewer"),
        )

        team_ids = [a.team_id for a in resolver.resolve("p")]

        assert len(team_ids) == len(set(team_ids)) == 3

    def test_membership_of_deleted_team_is_dropped(self, db, resolver):
        db.seed("team_members", make_member("gone", "p", "member"))
        assert resolver.resolve("p") == []

    def test_no_relationship_returns_empty(self, db, resolver):
        db.seed("teams", make_team("t1", created_by="q"))
        assert resolver.resolve("p") == []

    def test_corrupt_role_fails_fast(self, db, resolver):
        db.seed("teams", make_team("t1", created_by="q"))
        db.seed("team_members", make_member("t1", "p", "superuser"))
        with pytest.raises(InvalidRoleError):
            resolver.resolve("p")

    def test_store_failure(self, db, resolver):
        db.fail("teams")
        with pytest.raises(StoreUnavailable):
            resolver.resolve("p")


class TestRoleOf:
    def test_owner_without_row_is_admin(self, db, resolver):
        db.seed("teams", make_team("t1", created_by="p"))
        assert resolver.role_of("p", "t1") == "admin"
        assert isinstance(resolver.relationship("p", "t1"), Owner)

    def test_owner_is_never_downgraded(self, db, resolver):
        db.seed("teams", make_team("t1", created_by="p"))
        db.seed("team_members", make_member("t1", "p", "viewer"))
        assert resolver.role_of("p", "t1") == "admin"

    def test_member_role(self, db, resolver):
        db.seed("teams", make_team("t1", created_by="q"))
        db.seed("team_members", make_member("t1", "p", "viewer"))
        assert resolver.role_of("p", "t1") == "viewer"
        assert resolver.relationship("p", "t1") == MemberWithRole(role="viewer")

    def test_none(self, db, resolver):
        db.seed("teams", make_team("t1", created_by="q"))
        assert resolver.role_of("p", "t1") is None
        assert resolver.is_member("p", "t1") is False
        assert resolver.role_of("p", "missing") is None

    def test_request_cache_avoids_repeat_queries(self, db):
        db.seed("teams", make_team("t1", created_by="q"))
        db.seed("team_members", make_member("t1", "p", "member"))
        resolver = MembershipResolver(db, cache={})

        resolver.role_of("p", "t1")
        queries = len(db.calls)
        resolver.is_member("p", "t1")
        resolver.authorize("p", "t1", "can_create_tasks")

        assert len(db.calls) == queries


class TestAuthorize:
    def test_not_a_member(self, db, resolver):
        db.seed("teams", make_team("t1", created_by="q"))
        with pytest.raises(NotAMemberError):
            resolver.authorize("p", "t1", "can_view_tasks")

    def test_missing_team_looks_the_same_as_no_access(self, db, resolver):
        with pytest.raises(NotAMemberError):
            resolver.require_access("p", "nope")

    def test_viewer_cannot_delete(self, db, resolver):
        db.seed("teams", make_team("t1", created_by="q"))
        db.seed("team_members", make_member("t1", "p", "viewer"))
        with pytest.raises(InsufficientCapabilityError) as exc:
            resolver.authorize("p", "t1", "can_delete_tasks")
        assert exc.value.capability == "can_delete_tasks"
        assert exc.value.role == "viewer"

    def test_member_can_invite(self, db, resolver):
        db.seed("teams", make_team("t1", created_by="q"))
        db.seed("team_members", make_member("t1", "p", "member"))
        access = resolver.authorize("p", "t1", "can_invite_members")
        assert access.effective_role == "member"

    def test_owner_can_do_everything(self, db, resolver):
        db.seed("teams", make_team("t1", created_by="p"))
        assert resolver.authorize("p", "t1", "can_assign_roles").is_owner

    def test_gate_touches_only_membership_tables(self, db, resolver):
        db.seed("teams", make_team("t1", created_by="q"))
        with pytest.raises(NotAMemberError):
            resolver.authorize("p", "t1", "can_view_tasks")
        assert {table for table, _ in db.calls} <= {"teams", "team_members"}
