"""
Reminder notification senders. The dispatcher only needs `send`; the
transport behind it is swappable through the REMINDER_CHANNEL setting.
"""

import logging
from abc import ABC, abstractmethod

from supabase import Client

from app.modules.reminders.schemas import TaskSummary

logger = logging.getLogger(__name__)


class NotificationSender(ABC):
    @abstractmethod
    def send(self, recipient_email: str, summary: TaskSummary) -> bool:
        """Deliver a reminder. Returns False (or raises) when delivery failed."""


class LogNotificationSender(NotificationSender):
    """Writes the reminder to the application log instead of delivering it."""

    def send(self, recipient_email: str, summary: TaskSummary) -> bool:
        logger.info(f"Reminder for {recipient_email}: {summary.render()} (task {summary.task_id})")
        return True


class InboxNotificationSender(NotificationSender):
    """Drops the reminder into the task creator's in-app notification inbox."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def send(self, recipient_email: str, summary: TaskSummary) -> bool:
        result = self.supabase.table("notifications").insert({
            "user_id": summary.user_id,
            "content": summary.render(),
            "type": "task_update",
            "is_read": False,
            "related_task_id": summary.task_id,
            "related_team_id": summary.team_id,
        }).execute()
        return bool(result.data)


def build_sender(channel: str, supabase: Client) -> NotificationSender:
    if channel == "log":
        return LogNotificationSender()
    if channel == "inbox":
        return InboxNotificationSender(supabase)
    raise ValueError(f"Unknown reminder channel: {channel}")
