# freightbid/services/date_utils.py
import re
import logging
from datetime import datetime

import pytz

logger = logging.getLogger(__name__)

DATE_ONLY_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def get_timezone(name=None):
    """Resolve a timezone name, falling back to UTC for unknown zones."""
    if not name:
        return pytz.utc
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone '{name}', falling back to UTC")
        return pytz.utc


def parse_datetime(value, tz_name=None):
    """
    Parse a validity timestamp from an API payload.

    Accepts ISO 8601 strings with or without an offset ("Z" included) and
    plain YYYY-MM-DD dates, which are read as midnight. Values without an
    offset are interpreted in ``tz_name``. The result is a naive datetime
    in UTC, which is how every DateTime column is stored.

    Args:
        value (str or datetime): Value to parse
        tz_name (str, optional): Zone for values without an offset

    Returns:
        datetime: Naive UTC datetime

    Raises:
        ValueError: If the value is empty, not a recognizable timestamp,
            or falls outside the datetime range once converted to UTC
    """
    if value is None or value == '':
        raise ValueError("Timestamp is required")

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        date_str = value.strip()
        if date_str.endswith('Z'):
            date_str = date_str[:-1] + '+00:00'
        try:
            if DATE_ONLY_PATTERN.match(date_str):
                dt = datetime.strptime(date_str, '%Y-%m-%d')
            else:
                dt = datetime.fromisoformat(date_str)
        except ValueError as e:
            logger.debug(f"Could not parse timestamp '{value}': {e}")
            raise ValueError(f"Invalid date format: {value}")
    else:
        raise ValueError(f"Invalid date format: {value!r}")

    try:
        if dt.tzinfo is None:
            dt = get_timezone(tz_name).localize(dt)
        return dt.astimezone(pytz.utc).replace(tzinfo=None)
    except OverflowError as e:
        # Shifting to UTC leaves the datetime range near year 1 or 9999
        logger.debug(f"Timestamp '{value}' out of range: {e}")
        raise ValueError(f"Invalid date format: {value}")


def format_datetime_for_response(dt):
    """Render a stored naive UTC datetime as an ISO 8601 string with offset."""
    if not dt:
        return None
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.isoformat()
