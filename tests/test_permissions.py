"""Unit tests for the role -> capability matrix."""

import pytest

from app.config.permissions_config import (
    CAPABILITIES,
    ROLES,
    capabilities_for,
    get_permission_matrix,
    has_capability,
)
from app.core.errors import InvalidRoleError


class TestCapabilitiesFor:
    @pytest.mark.parametrize("role", ROLES)
    def test_every_role_can_view_tasks(self, role):
        assert capabilities_for(role).can_view_tasks is True

    def test_viewer_has_nothing_but_view(self):
        caps = capabilities_for("viewer").model_dump()
        assert caps.pop("can_view_tasks") is True
        assert not any(caps.values())

    def test_admin_has_everything(self):
        assert all(capabilities_for("admin").model_dump().values())

    def test_member_row(self):
        caps = capabilities_for("member")
        assert caps.can_create_tasks and caps.can_update_tasks and caps.can_invite_members
        assert not caps.can_delete_tasks
        assert not caps.can_manage_team
        assert not caps.can_assign_roles

    def test_member_and_viewer_are_not_ordered_by_a_level(self):
        # member may invite but not delete; no single threshold produces the table
        member = capabilities_for("member")
        assert member.can_invite_members and not member.can_delete_tasks

    @pytest.mark.parametrize("role", ["owner", "ADMIN", "", None, 3])
    def test_unknown_role_fails_fast(self, role):
        with pytest.raises(InvalidRoleError):
            capabilities_for(role)

    def test_capability_sets_are_immutable(self):
        caps = capabilities_for("viewer")
        with pytest.raises(Exception):
            caps.can_delete_tasks = True
        assert capabilities_for("viewer").can_delete_tasks is False


class TestHasCapability:
    def test_lookup(self):
        assert has_capability("admin", "can_assign_roles")
        assert not has_capability("member", "can_assign_roles")

    def test_unknown_capability(self):
        with pytest.raises(ValueError):
            has_capability("admin", "can_fly")

    def test_unknown_role(self):
        with pytest.raises(InvalidRoleError):
            has_capability("guest", "can_view_tasks")


def test_permission_matrix_is_plain_data():
    matrix = get_permission_matrix()
    assert set(matrix) == set(ROLES)
    for row in matrix.values():
        assert set(row) == set(CAPABILITIES)
