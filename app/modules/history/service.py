from supabase import Client
from app.config.permissions_config import VIEWER
from app.core.errors import NotFoundError
from app.database.query import first_row, run_query
from app.modules.history.schemas import HistoryEntry, EnrichedHistoryEntry
from app.modules.profiles.enrichment import ViewEnricher
from app.modules.tasks.schemas import TaskResponse
from app.modules.tasks.visibility import can_see_task
from app.modules.teams.membership import MembershipResolver
from app.modules.teams.schemas import TeamAccess
from typing import List


class HistoryService:
    """Read-only change history of team tasks, newest first, with the acting user attached."""

    def __init__(
        self,
        supabase: Client,
        resolver: MembershipResolver,
        enricher: ViewEnricher,
        viewer_sees_all: bool = True
    ):
        self.supabase = supabase
        self.resolver = resolver
        self.enricher = enricher
        self.viewer_sees_all = viewer_sees_all

    def _restricted(self, access: TeamAccess) -> bool:
        return not self.viewer_sees_all and access.effective_role == VIEWER

    def list_task_history(self, principal_id: str, team_id: str, task_id: str) -> List[EnrichedHistoryEntry]:
        access = self.resolver.authorize(principal_id, team_id, "can_view_tasks")
        row = first_row(
            self.supabase.table("tasks")
                .select("*")
                .eq("id", task_id)
                .eq("team_id", team_id),
            "load task",
        )
        if row is None or not can_see_task(access, TaskResponse(**row), principal_id, self.viewer_sees_all):
            raise NotFoundError("Task not found")
        rows = run_query(
            self.supabase.table("task_history")
                .select("*")
                .eq("task_id", task_id)
                .order("created_at", desc=True),
            "list task history",
        )
        return self.enricher.enrich_history([HistoryEntry(**r) for r in rows])

    def list_team_activity(self, principal_id: str, team_id: str, limit: int = 10) -> List[EnrichedHistoryEntry]:
        """Latest changes across a team's tasks"""
        access = self.resolver.authorize(principal_id, team_id, "can_view_tasks")
        rows = run_query(
            self.supabase.table("task_history")
                .select("*")
                .eq("team_id", team_id)
                .order("created_at", desc=True)
                .limit(limit),
            "list team activity",
        )
        entries = [HistoryEntry(**r) for r in rows]
        if entries and self._restricted(access):
            task_rows = run_query(
                self.supabase.table("tasks")
                    .select("*")
                    .eq("team_id", team_id)
                    .in_("id", list({e.task_id for e in entries})),
                "load activity tasks",
            )
            visible = {
                t.id for t in (TaskResponse(**r) for r in task_rows)
                if can_see_task(access, t, principal_id, self.viewer_sees_all)
            }
            entries = [e for e in entries if e.task_id in visible]
        return self.enricher.enrich_history(entries)
