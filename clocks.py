"""
Irrigation clock (controller) management for Clockbook.

Each clock is installed at one property and keeps its own inspection
history.
"""

import logging

from errors import NotFoundError, ValidationError
from properties import fetch_property
from queries import clock_query
from validation import clean_text, parse_id, parse_int, parse_station_count, require_text

logger = logging.getLogger(__name__)

MISSING_PROPERTY = 'Selected property does not exist.'


def parse_clock_id(value):
    return parse_id(value, 'Invalid clock id.')


def fetch_clock(conn, clock_id):
    return clock_query().where('id', clock_id).fetch_one(conn)


def _clock_fields(conn, data):
    property_id = parse_id(data.get('propertyId'), 'A valid property is required for each clock.')
    if fetch_property(conn, property_id) is None:
        raise ValidationError(MISSING_PROPERTY)

    label = require_text(data, 'label', 'Clock label is required.')
    station_count = parse_station_count(data.get('stationCount'))
    return (
        property_id,
        label,
        clean_text(data.get('manufacturer')),
        clean_text(data.get('model')),
        station_count,
        clean_text(data.get('location')),
        clean_text(data.get('notes')),
    )


def list_clocks(db, property_id=None):
    """Clocks ordered by label, optionally only those at one property."""
    if property_id is not None:
        property_id = parse_int(property_id)
        if property_id is None:
            raise ValidationError('Invalid property id.')
    with db.get_db() as conn:
        return clock_query().where('property_id', property_id).fetch_all(conn)


def get_clock(db, clock_id):
    clock_id = parse_clock_id(clock_id)
    with db.get_db() as conn:
        clock = fetch_clock(conn, clock_id)
    if clock is None:
        raise NotFoundError('Clock not found.')
    return clock


def add_clock(db, data):
    """Add a clock to an existing property.

    Args:
        db: Database handle.
        data: dict with propertyId, label, stationCount (required) and
              manufacturer, model, location, notes.

    Returns:
        The new clock dict.
    """
    with db.transaction() as conn:
        fields = _clock_fields(conn, data)
        cursor = conn.execute('''
            INSERT INTO clocks (property_id, label, manufacturer, model, station_count, location, notes)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        ''', fields)
        clock = fetch_clock(conn, cursor.lastrowid)

    logger.info(f"Clock created: {clock['id']} ('{clock['label']}') at property {clock['property_id']}")
    return clock


def update_clock(db, clock_id, data):
    clock_id = parse_clock_id(clock_id)
    with db.transaction() as conn:
        if fetch_clock(conn, clock_id) is None:
            raise NotFoundError('Clock not found.')
        fields = _clock_fields(conn, data)
        conn.execute('''
            UPDATE clocks
            SET property_id = ?, label = ?, manufacturer = ?, model = ?,
                station_count = ?, location = ?, notes = ?, updated_at = datetime('now')
            WHERE id = ?
        ''', (*fields, clock_id))
        clock = fetch_clock(conn, clock_id)

    logger.info(f"Clock {clock_id} updated")
    return clock


def delete_clock(db, clock_id):
    """Delete a clock and its whole inspection history."""
    clock_id = parse_clock_id(clock_id)
    with db.transaction() as conn:
        cursor = conn.execute('DELETE FROM clocks WHERE id = ?', (clock_id,))
        if cursor.rowcount == 0:
            raise NotFoundError('Clock not found.')

    logger.info(f"Clock {clock_id} deleted")
