import asyncio
import logging
from typing import Optional

from supabase import Client

from app.config import settings
from app.core.errors import StoreUnavailable
from app.database.supabase_client import get_service_supabase
from app.modules.reminders.dispatcher import run_reminder_batch
from app.modules.reminders.schemas import ReminderBatchResult

logger = logging.getLogger(__name__)


def get_reminder_client() -> Optional[Client]:
    """Service-role client for the batch, or None when the store is not configured."""
    try:
        return get_service_supabase()
    except StoreUnavailable as e:
        logger.error(f"Reminder batch has no task store: {e.detail}")
        return None


async def run_due_reminders() -> ReminderBatchResult:
    """Run one reminder batch off the event loop"""
    return await asyncio.to_thread(run_reminder_batch, get_reminder_client())


async def reminder_scheduler_loop(interval_sec: Optional[int] = None):
    """Background task that periodically sends due-date reminders"""
    interval = interval_sec or settings.reminder_interval_sec
    while True:
        try:
            result = await run_due_reminders()
            if not result.success:
                logger.error(f"Reminder batch failed: {result.error}")
        except Exception as e:
            logger.error(f"Error in reminder scheduler loop: {str(e)}")

        await asyncio.sleep(interval)
