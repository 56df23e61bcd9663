from supabase import Client
from app.core.errors import NotFoundError, StoreUnavailable, ValidationFailure
from app.database.query import first_row, run_query
from app.modules.profiles.enrichment import ViewEnricher
from app.modules.tasks.schemas import TaskCreate, TaskUpdate, TaskResponse, EnrichedTask
from app.modules.tasks.visibility import can_see_task
from app.modules.teams.membership import MembershipResolver
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def _serialize(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value.isoformat() if isinstance(value, datetime) else value for key, value in data.items()}


class TaskService:
    """Team and personal tasks. Team operations pass the membership gate
    before the tasks table is queried."""

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

    def _enrich_one(self, task: TaskResponse) -> EnrichedTask:
        return self.enricher.enrich_tasks([task])[0]

    def _check_team_assignee(self, team_id: str, assigned_to: Optional[str]) -> None:
        if assigned_to and not self.resolver.is_member(assigned_to, team_id):
            raise ValidationFailure("Assignee must be a member of the team")

    def _get_team_task_row(self, team_id: str, task_id: str) -> TaskResponse:
        row = first_row(
            self.supabase.table("tasks")
                .select("*")
                .eq("id", task_id)
                .eq("team_id", team_id),
            "load task",
        )
        if row is None:
            raise NotFoundError("Task not found")
        return TaskResponse(**row)

    # Team tasks

    def list_team_tasks(
        self,
        principal_id: str,
        team_id: str,
        status: Optional[str] = None,
        priority: Optional[str] = None
    ) -> List[EnrichedTask]:
        """List a team's tasks, newest first, filtered by what the principal may see"""
        access = self.resolver.authorize(principal_id, team_id, "can_view_tasks")
        query = self.supabase.table("tasks").select("*").eq("team_id", team_id)
        if status:
            query = query.eq("status", status)
        if priority:
            query = query.eq("priority", priority)
        rows = run_query(query.order("created_at", desc=True), "list team tasks")
        tasks = [TaskResponse(**row) for row in rows]
        visible = [t for t in tasks if can_see_task(access, t, principal_id, self.viewer_sees_all)]
        return self.enricher.enrich_tasks(visible)

    def get_team_task(self, principal_id: str, team_id: str, task_id: str) -> EnrichedTask:
        access = self.resolver.authorize(principal_id, team_id, "can_view_tasks")
        task = self._get_team_task_row(team_id, task_id)
        if not can_see_task(access, task, principal_id, self.viewer_sees_all):
            raise NotFoundError("Task not found")
        return self._enrich_one(task)

    def create_team_task(self, principal_id: str, team_id: str, task_data: TaskCreate) -> EnrichedTask:
        self.resolver.authorize(principal_id, team_id, "can_create_tasks")
        self._check_team_assignee(team_id, task_data.assigned_to)
        payload = _serialize(task_data.model_dump())
        payload.update({"user_id": principal_id, "team_id": team_id, "reminder_sent": False})
        rows = run_query(self.supabase.table("tasks").insert(payload), "create task")
        if not rows:
            raise StoreUnavailable("Failed to create task")
        logger.info(f"Task {rows[0]['id']} created in team {team_id} by {principal_id}")
        return self._enrich_one(TaskResponse(**rows[0]))

    def update_team_task(self, principal_id: str, team_id: str, task_id: str, task_data: TaskUpdate) -> EnrichedTask:
        self.resolver.authorize(principal_id, team_id, "can_update_tasks")
        self._get_team_task_row(team_id, task_id)
        update_data = task_data.model_dump(exclude_unset=True)
        if "assigned_to" in update_data:
            self._check_team_assignee(team_id, update_data["assigned_to"])
        update_data["updated_at"] = datetime.now(timezone.utc)
        rows = run_query(
            self.supabase.table("tasks")
                .update(_serialize(update_data))
                .eq("id", task_id)
                .eq("team_id", team_id),
            "update task",
        )
        if not rows:
            raise NotFoundError("Task not found")
        return self._enrich_one(TaskResponse(**rows[0]))

    def delete_team_task(self, principal_id: str, team_id: str, task_id: str) -> None:
        self.resolver.authorize(principal_id, team_id, "can_delete_tasks")
        rows = run_query(
            self.supabase.table("tasks")
                .delete()
                .eq("id", task_id)
                .eq("team_id", team_id),
            "delete task",
        )
        if not rows:
            raise NotFoundError("Task not found")
        logger.info(f"Task {task_id} deleted from team {team_id} by {principal_id}")

    # Personal tasks (team_id is null, visible to the creator only)

    def _personal_query(self, query, principal_id: str):
        return query.eq("user_id", principal_id).is_("team_id", "null")

    def _check_personal_assignee(self, principal_id: str, assigned_to: Optional[str]) -> None:
        if assigned_to and assigned_to != principal_id:
            raise ValidationFailure("Personal tasks can only be assigned to their creator")

    def list_personal_tasks(self, principal_id: str, status: Optional[str] = None) -> List[EnrichedTask]:
        query = self._personal_query(self.supabase.table("tasks").select("*"), principal_id)
        if status:
            query = query.eq("status", status)
        rows = run_query(query.order("created_at", desc=True), "list personal tasks")
        return self.enricher.enrich_tasks([TaskResponse(**row) for row in rows])

    def get_personal_task(self, principal_id: str, task_id: str) -> EnrichedTask:
        row = first_row(
            self._personal_query(self.supabase.table("tasks").select("*").eq("id", task_id), principal_id),
            "load task",
        )
        if row is None:
            raise NotFoundError("Task not found")
        return self._enrich_one(TaskResponse(**row))

    def create_personal_task(self, principal_id: str, task_data: TaskCreate) -> EnrichedTask:
        self._check_personal_assignee(principal_id, task_data.assigned_to)
        payload = _serialize(task_data.model_dump())
        payload.update({"user_id": principal_id, "team_id": None, "reminder_sent": False})
        rows = run_query(self.supabase.table("tasks").insert(payload), "create task")
        if not rows:
            raise StoreUnavailable("Failed to create task")
        return self._enrich_one(TaskResponse(**rows[0]))

    def update_personal_task(self, principal_id: str, task_id: str, task_data: TaskUpdate) -> EnrichedTask:
        update_data = task_data.model_dump(exclude_unset=True)
        if "assigned_to" in update_data:
            self._check_personal_assignee(principal_id, update_data["assigned_to"])
        update_data["updated_at"] = datetime.now(timezone.utc)
        rows = run_query(
            self._personal_query(
                self.supabase.table("tasks").update(_serialize(update_data)).eq("id", task_id),
                principal_id,
            ),
            "update task",
        )
        if not rows:
            raise NotFoundError("Task not found")
        return self._enrich_one(TaskResponse(**rows[0]))

    def delete_personal_task(self, principal_id: str, task_id: str) -> None:
        rows = run_query(
            self._personal_query(self.supabase.table("tasks").delete().eq("id", task_id), principal_id),
            "delete task",
        )
        if not rows:
            raise NotFoundError("Task not found")
