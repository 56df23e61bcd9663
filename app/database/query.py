import logging
from typing import Any, Dict, List, Optional

from app.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)


def run_query(query, action: str) -> List[Dict[str, Any]]:
    """Execute a Supabase query builder and return its rows. Any client or
    transport error becomes StoreUnavailable."""
    try:
        result = query.execute()
    except Exception as e:
        logger.error(f"Store query failed ({action}): {e}")
        raise StoreUnavailable(f"Failed to {action}") from e
    if result is None or not result.data:
        return []
    return result.data


def first_row(query, action: str) -> Optional[Dict[str, Any]]:
    rows = run_query(query.limit(1), action)
    return rows[0] if rows else None
