from pydantic import BaseModel
from typing import Any, Dict, Optional


class ProfileProjection(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ProfileProjection":
        return cls(
            id=row["id"],
            email=row.get("email") or "",
            name=row.get("name") or row.get("full_name") or None,
            avatar_url=row.get("avatar_url") or None,
        )
