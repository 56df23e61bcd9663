from supabase import Client
from app.core.errors import LookupFailure
from app.modules.profiles.schemas import ProfileProjection
from typing import Dict, Iterable, Optional
import logging

logger = logging.getLogger(__name__)


class ProfileLookup:
    """Batched reads of the users profile table."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def lookup(self, user_ids: Iterable[str]) -> Dict[str, ProfileProjection]:
        """One query for the whole id set. Ids without a profile are absent from the result."""
        ids = sorted({user_id for user_id in user_ids if user_id})
        if not ids:
            return {}
        try:
            result = self.supabase.table("users")\
                .select("*")\
                .in_("id", ids)\
                .execute()
        except Exception as e:
            raise LookupFailure(f"Profile lookup failed: {e}") from e
        rows = result.data if result is not None and result.data else []
        return {row["id"]: ProfileProjection.from_row(row) for row in rows}

    def get(self, user_id: str) -> Optional[ProfileProjection]:
        return self.lookup([user_id]).get(user_id)

    def find_by_email(self, email: str) -> Optional[ProfileProjection]:
        try:
            result = self.supabase.table("users")\
                .select("*")\
                .eq("email", email.strip().lower())\
                .limit(1)\
                .execute()
        except Exception as e:
            raise LookupFailure(f"Profile lookup by email failed: {e}") from e
        if result is None or not result.data:
            return None
        return ProfileProjection.from_row(result.data[0])
