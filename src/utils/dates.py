"""Date helpers."""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import pytz

logger = logging.getLogger(__name__)


def format_date(timezone: Optional[str] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Break the current moment into display parts in ``timezone``.

    Falls back to server local time when no timezone is given or the name is
    unknown.

    Returns:
        {"dayOfWeek": "Monday", "date": 3, "month": "March", "year": 2025}
    """
    moment = now or datetime.now(pytz.utc)
    if moment.tzinfo is None:
        moment = pytz.utc.localize(moment)

    if timezone:
        try:
            local = moment.astimezone(pytz.timezone(timezone))
        except pytz.UnknownTimeZoneError:
            logger.error(f"Invalid timezone '{timezone}', falling back to server time.")
            local = moment.astimezone()
    else:
        local = moment.astimezone()

    return {
        "dayOfWeek": local.strftime("%A"),
        "date": local.day,
        "month": local.strftime("%B"),
        "year": local.year,
    }
