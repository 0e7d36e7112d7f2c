# /callscript/jobs/auto_logout.py

"""
Daily auto-logout.

At a fixed wall-clock time every operator session is reset and dropped, so no
call guide stays open overnight. The job only calls the registry's reset
entry point and an optional logout collaborator; it holds no navigation logic.
"""

import inspect
import logging
from typing import Any, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from callscript.config.settings import settings
from callscript.services.session_service import OperatorSessionRegistry
from callscript.utils.metrics import auto_logout_counter

logger = logging.getLogger(__name__)

AUTO_LOGOUT_JOB_ID = "daily_auto_logout_job"

LogoutCallback = Callable[[], Any]


async def run_auto_logout(
    registry: OperatorSessionRegistry,
    on_logout: Optional[LogoutCallback] = None,
) -> int:
    """Reset every operator session, then notify the logout collaborator."""
    logger.info("Starting scheduled auto-logout...")
    count = registry.reset_all()
    auto_logout_counter.inc()

    if on_logout is not None:
        try:
            result = on_logout()
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.error("Logout callback failed during auto-logout.", exc_info=True)

    logger.info(f"Auto-logout finished: {count} operator sessions ended.")
    return count


def build_scheduler(
    registry: OperatorSessionRegistry,
    on_logout: Optional[LogoutCallback] = None,
) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone=settings.timezone)
    scheduler.add_job(
        run_auto_logout,
        'cron',
        hour=settings.auto_logout_hour,
        minute=settings.auto_logout_minute,
        args=[registry],
        kwargs={"on_logout": on_logout},
        id=AUTO_LOGOUT_JOB_ID,
        replace_existing=True,
    )
    logger.info(
        f"Scheduled job: run_auto_logout (daily at "
        f"{settings.auto_logout_hour:02d}:{settings.auto_logout_minute:02d} {settings.timezone})."
    )
    return scheduler
