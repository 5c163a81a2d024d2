"""
Report API Endpoints

Trigger a report run on demand and inspect the schedule.
"""

import logging
from fastapi import APIRouter, HTTPException

from market_digest.core.schedule import get_local_now, is_report_day
from market_digest.schemas.report import RunResult, RunTrigger
from market_digest.services.base import RunInProgressError
from market_digest.services.scheduler import get_report_scheduler

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/run", response_model=RunResult)
async def run_report():
    """
    Run the daily report now.

    Blocks until the run finishes and returns its outcome. Returns 409
    when another run is in progress.
    """
    scheduler = get_report_scheduler()

    try:
        return await scheduler.run_now(RunTrigger.MANUAL)

    except RunInProgressError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except Exception as e:
        logger.error(f"Error running report: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to run report: {e}")


@router.get("/next-run")
async def get_next_run():
    """Get the next scheduled slot and the last run outcome."""
    scheduler = get_report_scheduler()
    settings = scheduler.settings
    last = scheduler.last_result

    return {
        "next_run": scheduler.next_run().isoformat(),
        "timezone": settings.report_timezone,
        "report_day_today": is_report_day(
            get_local_now(settings.report_timezone), settings.weekday_set
        ),
        "scheduler_enabled": settings.enable_scheduler,
        "run_in_progress": scheduler.run_in_progress,
        "last_status": last.status.value if last else None,
    }
