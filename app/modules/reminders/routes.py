from fastapi import APIRouter, Depends, Header
from app.config import settings
from app.core.errors import Unauthenticated
from app.modules.reminders.dispatcher import run_reminder_batch
from app.modules.reminders.scheduler import get_reminder_client
from app.modules.reminders.schemas import ReminderBatchResult
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/reminders", tags=["reminders"])


def verify_cron_secret(x_cron_secret: Optional[str] = Header(default=None)) -> None:
    """Only enforced when REMINDER_CRON_SECRET is configured"""
    if settings.reminder_cron_secret and x_cron_secret != settings.reminder_cron_secret:
        raise Unauthenticated("Invalid cron secret")


@router.api_route("/run", methods=["GET", "POST"], response_model=ReminderBatchResult,
                  dependencies=[Depends(verify_cron_secret)])
def run_reminders(supabase: Optional[Client] = Depends(get_reminder_client)):
    """Send due-date reminders now. Always answers 200; check `success` and `failures`."""
    return run_reminder_batch(supabase)
