"""
Due-date reminder batch.

Selects tasks with reminder_sent = false and a due_date inside
[now, now + window], then for each task, independently and on a bounded
worker pool: look up the creator, send the reminder, flip reminder_sent.
A task that fails at any step stays pending and is picked up by the next run;
a task that succeeded is never selected again. A malformed row fails only its
own task (stage "parse"). A task whose flag another run flipped between
selection and marking is listed in `already_marked`, not in `failures`.

Runs with the service-role client; there is no caller authorization step.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Set, Tuple

from supabase import Client

from app.config import Settings, settings as app_settings
from app.core.errors import StoreUnavailable
from app.database.query import run_query
from app.modules.profiles.service import ProfileLookup
from app.modules.reminders.notifier import NotificationSender, build_sender
from app.modules.reminders.schemas import (
    ReminderBatchResult, ReminderFailure, ReminderTaskResult, TaskSummary
)
from app.modules.tasks.schemas import TaskResponse

logger = logging.getLogger(__name__)

TaskOutcome = Tuple[Optional[ReminderTaskResult], Optional[ReminderFailure]]


class ReminderDispatcher:
    def __init__(
        self,
        supabase: Optional[Client],
        sender: NotificationSender,
        profiles: ProfileLookup,
        window_hours: int = 24,
        max_workers: int = 8,
        timeout_sec: Optional[float] = None
    ):
        self.supabase = supabase
        self.sender = sender
        self.profiles = profiles
        self.window = timedelta(hours=window_hours)
        self.max_workers = max(1, max_workers)
        self.timeout_sec = timeout_sec
        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()

    def select_due_tasks(self, now: datetime) -> List[Dict[str, Any]]:
        """Raw task rows; each is parsed inside its own task's failure boundary."""
        if self.supabase is None:
            raise StoreUnavailable("Task store is not configured")
        return run_query(
            self.supabase.table("tasks")
                .select("*")
                .eq("reminder_sent", False)
                .not_.is_("due_date", "null")
                .gte("due_date", now.isoformat())
                .lte("due_date", (now + self.window).isoformat())
                .order("due_date"),
            "select tasks due for reminders",
        )

    @contextmanager
    def _claim(self, task_id: str):
        """Mark a task as in flight for the duration of its processing."""
        with self._lock:
            self._in_flight.add(task_id)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(task_id)

    def in_flight(self) -> Set[str]:
        with self._lock:
            return set(self._in_flight)

    def _mark_sent(self, task_id: str) -> bool:
        # Conditional flip: a task already marked by another run is left alone
        result = self.supabase.table("tasks")\
            .update({"reminder_sent": True})\
            .eq("id", task_id)\
            .eq("reminder_sent", False)\
            .execute()
        return bool(result.data)

    def process_task(self, row: Dict[str, Any]) -> TaskOutcome:
        """Remind one task. Every error is caught here and returned as a failure.
        A task another run already marked yields neither a result nor a failure."""
        task_id = str(row.get("id"))
        with self._claim(task_id):
            stage = "parse"
            try:
                task = TaskResponse(**row)

                stage = "lookup"
                profile = self.profiles.get(task.user_id)
                if profile is None or not profile.email:
                    logger.error(f"No email found for creator {task.user_id} of task {task.id}")
                    return None, ReminderFailure(task_id=task.id, stage=stage, error="Creator email not found")

                stage = "notify"
                if not self.sender.send(profile.email, TaskSummary.from_task(task)):
                    logger.error(f"Reminder delivery failed for task {task.id}")
                    return None, ReminderFailure(task_id=task.id, stage=stage, error="Notification was not delivered")

                stage = "mark"
                if not self._mark_sent(task.id):
                    logger.warning(f"Reminder for task {task.id} was already marked as sent by another run")
                    return None, None

                return ReminderTaskResult(id=task.id, title=task.title, email=profile.email), None
            except Exception as e:
                logger.error(f"Error processing reminder for task {task_id} ({stage}): {str(e)}")
                return None, ReminderFailure(task_id=task_id, stage=stage, error=str(e))

    def _acquire_slot(self, slots: threading.BoundedSemaphore, deadline: Optional[float]) -> bool:
        if deadline is None:
            return slots.acquire()
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        return slots.acquire(timeout=remaining)

    def run_once(self, now: Optional[datetime] = None) -> ReminderBatchResult:
        """Run one reminder batch. Never raises; an unreachable store is reported
        with success=False."""
        started = time.monotonic()
        now = now or datetime.now(timezone.utc)
        try:
            tasks = self.select_due_tasks(now)
        except StoreUnavailable as e:
            logger.error(f"Reminder batch aborted: {e.detail}")
            return ReminderBatchResult(success=False, error=e.detail)

        if not tasks:
            logger.debug("No tasks due for reminders")
            return ReminderBatchResult(message="No tasks due for reminders")

        logger.info(f"Found {len(tasks)} task(s) due for reminders")
        deadline = started + self.timeout_sec if self.timeout_sec is not None else None
        slots = threading.BoundedSemaphore(self.max_workers)
        futures = []
        skipped: List[str] = []

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="reminder") as pool:
            for index, row in enumerate(tasks):
                if not self._acquire_slot(slots, deadline):
                    skipped = [str(t.get("id")) for t in tasks[index:]]
                    logger.warning(f"Reminder batch timed out; {len(skipped)} task(s) left for the next run")
                    break
                future = pool.submit(self.process_task, row)
                future.add_done_callback(lambda _: slots.release())
                futures.append((str(row.get("id")), future))
        # leaving the executor waits for in-flight tasks

        succeeded: List[ReminderTaskResult] = []
        failures: List[ReminderFailure] = []
        already_marked: List[str] = []
        for task_id, future in futures:
            result, failure = future.result()
            if result is not None:
                succeeded.append(result)
            elif failure is not None:
                failures.append(failure)
            else:
                already_marked.append(task_id)

        logger.info(
            f"Reminder batch done: {len(succeeded)} sent, {len(failures)} failed, "
            f"{len(already_marked)} already marked, {len(skipped)} skipped"
        )
        return ReminderBatchResult(
            processed=len(succeeded),
            selected=len(tasks),
            succeeded=succeeded,
            failures=failures,
            already_marked=already_marked,
            skipped=skipped,
            timed_out=bool(skipped),
        )


def run_reminder_batch(
    supabase: Optional[Client],
    now: Optional[datetime] = None,
    settings: Settings = app_settings,
    sender: Optional[NotificationSender] = None
) -> ReminderBatchResult:
    """Build a dispatcher from settings and run a single batch."""
    dispatcher = ReminderDispatcher(
        supabase,
        sender or build_sender(settings.reminder_channel, supabase),
        ProfileLookup(supabase),
        window_hours=settings.reminder_window_hours,
        max_workers=settings.reminder_max_workers,
        timeout_sec=settings.reminder_timeout_sec,
    )
    return dispatcher.run_once(now)
