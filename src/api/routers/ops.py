import os
import logging
from datetime import date, timedelta

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api.dependencies import get_default_settings
from scheduling.calendar_window import resolve_window
from study_planner.errors import ConfigurationError
from study_planner.models import UserSettings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(
    default_settings: UserSettings = Depends(get_default_settings),
) -> dict:
    """Health check endpoint for container orchestration."""
    health = {
        "status": "healthy",
        "profile": os.getenv("DEPLOYMENT_PROFILE", "unknown"),
        "default_window": {
            "start_hour": default_settings.study_window_start_hour,
            "end_hour": default_settings.study_window_end_hour,
        },
    }

    # a broken default window blocks every request that omits settings
    try:
        for weekday in range(7):
            resolve_window(_any_date_for_weekday(weekday), default_settings)
    except ConfigurationError as e:
        logger.error(f"Default settings are invalid: {e}")
        health["status"] = "degraded"
        health["error"] = str(e)

    return health


def _any_date_for_weekday(weekday: int) -> date:
    # 2024-01-01 was a Monday
    return date(2024, 1, 1) + timedelta(days=weekday)


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
