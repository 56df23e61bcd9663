"""
View enrichment: rebuilds joined views (task -> assignee, member -> user,
team -> creator, comment -> author, history entry -> actor) that the store
cannot join because profile rows live in a separate namespace.

Every enrichment runs in two passes over the batch:
1. collect the distinct non-null user ids and issue one profile lookup,
2. stream over the input in order, attaching the projection or None.
A failed lookup or a missing profile degrades to None; it never fails the view.
Input records are not modified; new models are returned.
"""

import logging
from typing import Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from app.core.errors import LookupFailure
from app.modules.comments.schemas import CommentResponse, EnrichedComment
from app.modules.history.schemas import EnrichedHistoryEntry, HistoryEntry
from app.modules.profiles.schemas import ProfileProjection
from app.modules.profiles.service import ProfileLookup
from app.modules.tasks.schemas import EnrichedTask, TaskResponse
from app.modules.teams.schemas import EnrichedTeamMember, TeamMemberResponse, TeamResponse

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


def distinct_user_ids(records: Sequence[BaseModel], key: str) -> List[str]:
    """Distinct non-null values of `key`, in first-seen order."""
    seen = set()
    ids = []
    for record in records:
        user_id = getattr(record, key, None)
        if user_id and user_id not in seen:
            seen.add(user_id)
            ids.append(user_id)
    return ids


class ViewEnricher:
    def __init__(self, profiles: ProfileLookup):
        self.profiles = profiles

    def _profiles_for(self, records: Sequence[BaseModel], key: str) -> Dict[str, ProfileProjection]:
        ids = distinct_user_ids(records, key)
        if not ids:
            return {}
        try:
            return self.profiles.lookup(ids)
        except LookupFailure as e:
            logger.warning(f"Enrichment degraded, {len(ids)} profile(s) unresolved: {e}")
            return {}

    def _attach(self, records: Sequence[BaseModel], key: str, target: str, model: Type[R]) -> List[R]:
        if not records:
            return []
        profiles = self._profiles_for(records, key)
        enriched = []
        for record in records:
            user_id = getattr(record, key, None)
            data = record.model_dump()
            data[target] = profiles.get(user_id) if user_id else None
            enriched.append(model(**data))
        return enriched

    def enrich_tasks(self, tasks: Sequence[TaskResponse]) -> List[EnrichedTask]:
        return self._attach(tasks, "assigned_to", "assignee_data", EnrichedTask)

    def enrich_members(self, members: Sequence[TeamMemberResponse]) -> List[EnrichedTeamMember]:
        return self._attach(members, "user_id", "user_data", EnrichedTeamMember)

    def enrich_comments(self, comments: Sequence[CommentResponse]) -> List[EnrichedComment]:
        return self._attach(comments, "user_id", "author_data", EnrichedComment)

    def enrich_history(self, entries: Sequence[HistoryEntry]) -> List[EnrichedHistoryEntry]:
        return self._attach(entries, "user_id", "actor_data", EnrichedHistoryEntry)

    def enrich_creator(self, team: TeamResponse) -> Optional[ProfileProjection]:
        return self._profiles_for([team], "created_by").get(team.created_by)
