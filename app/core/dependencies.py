"""
Core dependencies: principal extraction and per-request construction of
the authorization and enrichment components.
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.errors import Unauthenticated
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import Principal
from app.modules.auth.service import AuthService
from app.modules.profiles.enrichment import ViewEnricher
from app.modules.profiles.service import ProfileLookup
from app.modules.teams.membership import MembershipResolver
from supabase import Client
from typing import Any, Dict, Optional

security = HTTPBearer(auto_error=False)


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (team relationships)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_access_cache(request: Request) -> Dict[str, Any]:
    return _get_request_cache(request)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Principal:
    """Extract the current principal from the bearer token"""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    return auth_service.get_principal(credentials.credentials)


def get_membership_resolver(
    supabase: Client = Depends(get_supabase),
    cache: Dict[str, Any] = Depends(get_access_cache)
) -> MembershipResolver:
    return MembershipResolver(supabase, cache=cache)


def get_profile_lookup(supabase: Client = Depends(get_supabase)) -> ProfileLookup:
    return ProfileLookup(supabase)


def get_view_enricher(profiles: ProfileLookup = Depends(get_profile_lookup)) -> ViewEnricher:
    return ViewEnricher(profiles)
