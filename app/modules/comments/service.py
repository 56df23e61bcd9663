from supabase import Client
from app.core.errors import NotFoundError, StoreUnavailable
from app.database.query import first_row, run_query
from app.modules.comments.schemas import CommentCreate, CommentResponse, EnrichedComment
from app.modules.profiles.enrichment import ViewEnricher
from app.modules.teams.membership import MembershipResolver
from typing import List


class CommentService:
    def __init__(self, supabase: Client, resolver: MembershipResolver, enricher: ViewEnricher):
        self.supabase = supabase
        self.resolver = resolver
        self.enricher = enricher

    def _ensure_team_task(self, team_id: str, task_id: str) -> None:
        row = first_row(
            self.supabase.table("tasks")
                .select("id")
                .eq("id", task_id)
                .eq("team_id", team_id),
            "load task",
        )
        if row is None:
            raise NotFoundError("Task not found")

    def list_comments(self, principal_id: str, team_id: str, task_id: str) -> List[EnrichedComment]:
        """Comments on a team task, oldest first, with author profiles"""
        self.resolver.authorize(principal_id, team_id, "can_view_tasks")
        self._ensure_team_task(team_id, task_id)
        rows = run_query(
            self.supabase.table("comments")
                .select("*")
                .eq("task_id", task_id)
                .order("created_at"),
            "list comments",
        )
        return self.enricher.enrich_comments([CommentResponse(**row) for row in rows])

    def add_comment(self, principal_id: str, team_id: str, task_id: str, comment_data: CommentCreate) -> EnrichedComment:
        self.resolver.authorize(principal_id, team_id, "can_update_tasks")
        self._ensure_team_task(team_id, task_id)
        rows = run_query(
            self.supabase.table("comments").insert({
                "task_id": task_id,
                "user_id": principal_id,
                "content": comment_data.content,
            }),
            "create comment",
        )
        if not rows:
            raise StoreUnavailable("Failed to create comment")
        return self.enricher.enrich_comments([CommentResponse(**rows[0])])[0]
