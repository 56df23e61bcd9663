from supabase import Client
from app.core.errors import Unauthenticated
from app.modules.auth.schemas import Principal
import logging

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_principal(self, token: str) -> Principal:
        """Resolve a Supabase Auth JWT into a principal"""
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise Unauthenticated("Invalid or expired token")
            logger.warning(f"Authentication failed: {error_msg}")
            raise Unauthenticated("Authentication failed")
        if user_response is None or not user_response.user:
            raise Unauthenticated("Invalid or expired token")
        user = user_response.user
        return Principal(id=user.id, email=user.email or "")
