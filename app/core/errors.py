"""
Domain errors raised by the authorization and aggregation core.
Each carries the HTTP status the API layer answers with; the core itself
never builds framework responses.
"""

from typing import Optional


class TaskflowError(Exception):
    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(TaskflowError):
    status_code = 401
    default_detail = "Authentication required"


class NotAMemberError(TaskflowError):
    status_code = 403
    default_detail = "You are not a member of this team"

    def __init__(self, team_id: Optional[str] = None, detail: Optional[str] = None):
        self.team_id = team_id
        super().__init__(detail)


class InsufficientCapabilityError(TaskflowError):
    status_code = 403

    def __init__(self, capability: str, role: Optional[str] = None):
        self.capability = capability
        self.role = role
        super().__init__(f"Insufficient permissions. Required: {capability}")


class InvalidRoleError(TaskflowError):
    """Unrecognized role datum; points at corrupt membership data."""
    status_code = 500

    def __init__(self, role: object):
        self.role = role
        super().__init__(f"Unrecognized team role: {role!r}")


class LookupFailure(TaskflowError):
    status_code = 502
    default_detail = "Profile lookup failed"


class StoreUnavailable(TaskflowError):
    status_code = 503
    default_detail = "Data store unavailable"


class NotFoundError(TaskflowError):
    status_code = 404
    default_detail = "Not found"


class ConflictError(TaskflowError):
    status_code = 409
    default_detail = "Conflict"


class ValidationFailure(TaskflowError):
    status_code = 400
    default_detail = "Invalid request"
