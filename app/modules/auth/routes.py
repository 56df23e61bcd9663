from fastapi import APIRouter, Depends
from app.config.permissions_config import capabilities_for, get_permission_matrix
from app.core.dependencies import get_current_principal, get_membership_resolver
from app.modules.auth.schemas import Principal, CurrentUserResponse, TeamCapabilities, PermissionMatrixResponse
from app.modules.teams.membership import MembershipResolver

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=CurrentUserResponse)
def get_current_user(
    principal: Principal = Depends(get_current_principal),
    resolver: MembershipResolver = Depends(get_membership_resolver)
):
    """Current principal with every team they can act within and the capabilities there (for frontend UI)."""
    teams = [
        TeamCapabilities(**access.model_dump(), capabilities=capabilities_for(access.effective_role))
        for access in resolver.resolve(principal.id)
    ]
    return CurrentUserResponse(id=principal.id, email=principal.email, teams=teams)


@router.get("/permissions", response_model=PermissionMatrixResponse)
def get_permissions(principal: Principal = Depends(get_current_principal)):
    """The fixed role -> capability matrix"""
    return PermissionMatrixResponse(roles=get_permission_matrix())
