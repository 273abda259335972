"""APScheduler wiring for the periodic refresh cycles."""

import logging
import re

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from stock_insights.config import settings
from stock_insights.services.refresh_service import StockRefresher

logger = logging.getLogger(__name__)


# crontab numbers weekdays from Sunday (0 and 7), APScheduler from Monday
_CRON_WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat", "sun")


def _cron_day_of_week(field: str) -> str:
    def to_name(match: re.Match) -> str:
        day = int(match.group())
        if day >= len(_CRON_WEEKDAYS):
            raise ValueError(f"Invalid day of week {day} in {field!r}")
        return _CRON_WEEKDAYS[day]

    # Step values ("*/2") are counts, not weekdays
    return re.sub(r"(?<!/)\d+", to_name, field)


def cron_trigger(expression: str, timezone: str | None = None) -> CronTrigger:
    """Parse a 5-field crontab expression (minute hour day month dow)."""
    parts = expression.split()
    if len(parts) != 5:
        raise ValueError(f"Invalid cron expression {expression!r}: expected 5 fields")
    return CronTrigger(
        minute=parts[0], hour=parts[1], day=parts[2],
        month=parts[3], day_of_week=_cron_day_of_week(parts[4]),
        timezone=timezone,
    )


def build_scheduler(refresher: StockRefresher) -> AsyncIOScheduler:
    """Register the refresh jobs on a new (not yet started) scheduler.

    Two cadences overlap: a frequent one during US market hours and an
    hourly fallback. Overlapping triggers are harmless since the refresher
    skips a cycle while another is running. With ``run_on_startup`` a
    one-off job fires as soon as the scheduler starts.
    """
    scheduler = AsyncIOScheduler(timezone=settings.scheduler_timezone)

    scheduler.add_job(
        refresher.run_cycle,
        cron_trigger(settings.market_hours_cron, settings.scheduler_timezone),
        id="market_hours_refresh",
        coalesce=True,
        max_instances=1,
    )
    scheduler.add_job(
        refresher.run_cycle,
        cron_trigger(settings.off_hours_cron, settings.scheduler_timezone),
        id="off_hours_refresh",
        coalesce=True,
        max_instances=1,
    )

    if settings.run_on_startup:
        # No trigger: a date job that runs once, immediately on start
        scheduler.add_job(refresher.run_cycle, id="startup_refresh")

    logger.info(
        "Refresh scheduled: %r and %r (%s)",
        settings.market_hours_cron, settings.off_hours_cron, settings.scheduler_timezone,
    )
    return scheduler
