from datetime import datetime
import pytz
from flask import current_app


def now():
    """Current wall-clock time in the configured timezone, as a naive datetime.

    Schedules are stored as naive local date/time values, so comparisons are
    done in the same local frame.
    """
    tz = pytz.timezone(current_app.config.get('TIMEZONE', 'UTC'))
    return datetime.now(tz).replace(tzinfo=None)
