"""
Run Reminders Script
Sends due-date reminders once and prints the batch result as JSON.
Meant for cron or a platform scheduler; exits non-zero only when the task
store could not be queried at all.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.config import settings
from app.modules.reminders.dispatcher import run_reminder_batch
from app.modules.reminders.scheduler import get_reminder_client
import logging

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> int:
    logger.info("Running reminder batch...")
    result = run_reminder_batch(get_reminder_client())
    print(result.model_dump_json(indent=2))
    if not result.success:
        logger.error(f"Reminder batch failed: {result.error}")
        return 1
    logger.info(f"Reminder batch complete: {result.processed} sent, {len(result.failures)} failed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
