"""
Input cleaning and validation shared by the entity modules.

Request bodies arrive as loosely typed JSON (numbers may be strings, text
may be missing). These helpers normalise them and raise ValidationError
with the message shown to the user.
"""

import re
from datetime import datetime

from errors import ValidationError

VALID_STATUSES = ('in_progress', 'completed', 'archived', 'cancelled')

SQLITE_INT_MIN = -2**63
SQLITE_INT_MAX = 2**63 - 1

# Date and time forms SQLite's date functions understand
TIMESTAMP_RE = re.compile(
    r'^(\d{4})-(\d{2})-(\d{2})'
    r'(?:[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?\s*(Z|z|[+-]\d{2}:\d{2})?)?$'
)


def clean_text(value):
    """Return ``value`` as trimmed text; None becomes an empty string."""
    if value is None:
        return ''
    return str(value).strip()


def require_text(data, key, message):
    value = clean_text(data.get(key))
    if not value:
        raise ValidationError(message)
    return value


def parse_int(value):
    """Parse an integer from an int or an integer string, else None.

    Values outside SQLite's 64-bit INTEGER range count as unparseable.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        parsed = int(value)
    else:
        try:
            parsed = int(str(value).strip())
        except ValueError:
            return None
    if not SQLITE_INT_MIN <= parsed <= SQLITE_INT_MAX:
        return None
    return parsed


def parse_id(value, message):
    parsed = parse_int(value)
    if parsed is None:
        raise ValidationError(message)
    return parsed


def parse_station_count(value):
    count = parse_int(value)
    if count is None or count <= 0:
        raise ValidationError('Station count must be a positive number.')
    return count


def parse_status(value):
    status = clean_text(value)
    if status not in VALID_STATUSES:
        raise ValidationError('Invalid inspection status.')
    return status


def parse_timestamp(value, label):
    """Validate an ISO-8601 timestamp string.

    Accepts ``YYYY-MM-DD`` or ``YYYY-MM-DD[T ]HH:MM[:SS[.fff]]`` with an
    optional ``Z`` or ``+HH:MM`` offset, the forms SQLite's ``datetime()``
    reads. An empty value is returned as "" and means "not supplied". The
    trimmed input is returned unchanged so the caller's precision and offset
    survive.
    """
    text = clean_text(value)
    if not text:
        return ''
    message = f'{label} must be an ISO-8601 date or timestamp.'
    match = TIMESTAMP_RE.match(text)
    if match is None:
        raise ValidationError(message)

    year, month, day, hour, minute, second, offset = match.groups()
    try:
        datetime(int(year), int(month), int(day),
                 int(hour or 0), int(minute or 0), int(second or 0))
    except ValueError:
        raise ValidationError(message)
    if offset and offset not in ('Z', 'z'):
        hours, minutes = offset[1:].split(':')
        if int(hours) > 14 or int(minutes) > 59:
            raise ValidationError(message)
    return text
