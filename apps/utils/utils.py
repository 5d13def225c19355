# utils/utils.py

from django.conf import settings
from django.utils import timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

logger = logging.getLogger(__name__)

DEFAULT_SCHOOL_TIME_ZONE = 'Asia/Kathmandu'


# =============================================================================
# TIMEZONE UTILITY FUNCTIONS
# =============================================================================

def get_school_timezone():
    """
    Get the school's operational timezone.

    Returns:
        ZoneInfo: settings.SCHOOL_TIME_ZONE, or Asia/Kathmandu when unset/invalid
    """
    name = getattr(settings, 'SCHOOL_TIME_ZONE', None) or DEFAULT_SCHOOL_TIME_ZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.error(f"Unknown school timezone '{name}', using {DEFAULT_SCHOOL_TIME_ZONE}")
        return ZoneInfo(DEFAULT_SCHOOL_TIME_ZONE)


def get_school_current_time():
    """Current datetime in the school's timezone"""
    return timezone.now().astimezone(get_school_timezone())


def get_school_today():
    """
    Today's date in the school's timezone.

    Use this instead of date.today() for promotion dates and any other
    business date, so a promotion run late in the evening is not dated
    the next day.
    """
    return get_school_current_time().date()
