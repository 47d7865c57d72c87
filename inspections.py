"""
Inspection lifecycle for Clockbook.

An inspection is started on a clock in the ``in_progress`` state and is
finished by moving it to ``completed``, ``archived`` or ``cancelled``.
A clock has at most one ``in_progress`` inspection at a time: the check
below runs inside a write transaction, and the partial unique index
``ux_inspections_active_clock`` rejects anything that slips past it.

PATCH may set any status and timestamps; it does not require
``completed_at`` to match the status. The ``complete``/``archive``/``cancel``
actions are the guarded path and only apply to an in-progress inspection.
"""

import sqlite3
import logging

from clocks import fetch_clock, parse_clock_id
from db import integrity_conflict
from errors import ConflictError, NotFoundError, ValidationError
from queries import inspection_query
from validation import (
    VALID_STATUSES, clean_text, parse_id, parse_int, parse_status, parse_timestamp,
)

logger = logging.getLogger(__name__)

IN_PROGRESS = 'in_progress'
COMPLETED = 'completed'
ARCHIVED = 'archived'
CANCELLED = 'cancelled'

ACTIVE_CONFLICT = 'An inspection is already in progress for this clock.'

# PATCH body key -> column. Timestamps keep their old value when sent as "".
PATCHABLE_FIELDS = {
    'status': 'status',
    'summary': 'summary',
    'notes': 'notes',
    'startedAt': 'started_at',
    'completedAt': 'completed_at',
}


def parse_inspection_id(value):
    return parse_id(value, 'Invalid inspection id.')


def fetch_inspection(conn, inspection_id):
    return inspection_query().where('id', inspection_id).fetch_one(conn)


def _fetch_active(conn, clock_id):
    return inspection_query().where('clock_id', clock_id).where('status', IN_PROGRESS).fetch_one(conn)


def _raise_for_integrity(error):
    kind = integrity_conflict(error)
    if kind == 'unique':
        raise ConflictError(ACTIVE_CONFLICT) from error
    if kind == 'foreign_key':
        raise ValidationError('Selected clock does not exist.') from error
    raise error


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def list_inspections(db, clock_id=None, status=None):
    """Inspections newest first, optionally filtered by clock and/or status."""
    if clock_id is not None:
        clock_id = parse_int(clock_id)
        if clock_id is None:
            raise ValidationError('Invalid clock id.')
    if status is not None and status not in VALID_STATUSES:
        raise ValidationError('Invalid inspection status.')

    query = inspection_query().where('clock_id', clock_id).where('status', status)
    with db.get_db() as conn:
        return query.fetch_all(conn)


def get_inspection(db, inspection_id):
    inspection_id = parse_inspection_id(inspection_id)
    with db.get_db() as conn:
        inspection = fetch_inspection(conn, inspection_id)
    if inspection is None:
        raise NotFoundError('Inspection not found.')
    return inspection


def get_active_inspection(db, clock_id):
    """Return the clock's in-progress inspection, or None if it has none."""
    clock_id = parse_clock_id(clock_id)
    with db.get_db() as conn:
        if fetch_clock(conn, clock_id) is None:
            raise NotFoundError('Clock not found.')
        return _fetch_active(conn, clock_id)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def start_inspection(db, data):
    """Start a new inspection on a clock.

    Args:
        db: Database handle.
        data: dict with clockId (required), startedAt (ISO, defaults to now),
              summary, notes.

    Raises:
        ValidationError: bad clockId, unknown clock or malformed startedAt.
        ConflictError: the clock already has an in-progress inspection.
    """
    clock_id = parse_id(data.get('clockId'), 'A valid clock is required for each inspection.')
    started_at = parse_timestamp(data.get('startedAt'), 'startedAt')
    summary = clean_text(data.get('summary'))
    notes = clean_text(data.get('notes'))

    with db.transaction() as conn:
        if fetch_clock(conn, clock_id) is None:
            raise ValidationError('Selected clock does not exist.')
        if _fetch_active(conn, clock_id) is not None:
            raise ConflictError(ACTIVE_CONFLICT)
        try:
            cursor = conn.execute('''
                INSERT INTO inspections (clock_id, status, started_at, summary, notes)
                VALUES (?, ?, COALESCE(NULLIF(?, ''), datetime('now')), ?, ?)
            ''', (clock_id, IN_PROGRESS, started_at, summary, notes))
        except sqlite3.IntegrityError as e:
            _raise_for_integrity(e)
        inspection = fetch_inspection(conn, cursor.lastrowid)

    logger.info(f"Inspection started: {inspection['id']} on clock {clock_id}")
    return inspection


def _patch_assignments(data):
    """Build SET clauses for the keys present in a PATCH body."""
    assignments = []
    params = []
    for key, column in PATCHABLE_FIELDS.items():
        if key not in data:
            continue
        value = data[key]
        if key == 'status':
            assignments.append('status = ?')
            params.append(parse_status(value))
        elif column in ('started_at', 'completed_at'):
            assignments.append(f"{column} = COALESCE(NULLIF(?, ''), {column})")
            params.append(parse_timestamp(value, key))
        else:
            assignments.append(f'{column} = ?')
            params.append(clean_text(value))
    return assignments, params


def patch_inspection(db, inspection_id, data):
    """Change any subset of status, summary, notes, startedAt, completedAt.

    Empty ``startedAt``/``completedAt`` values leave the stored timestamp as
    it is. Moving an inspection back to ``in_progress`` while the clock has
    another active one raises ConflictError.
    """
    inspection_id = parse_inspection_id(inspection_id)
    with db.transaction() as conn:
        if fetch_inspection(conn, inspection_id) is None:
            raise NotFoundError('Inspection not found.')

        assignments, params = _patch_assignments(data)
        if not assignments:
            raise ValidationError('No changes provided for the inspection.')
        assignments.append("updated_at = datetime('now')")
        params.append(inspection_id)

        try:
            conn.execute(
                f"UPDATE inspections SET {', '.join(assignments)} WHERE id = ?",
                params
            )
        except sqlite3.IntegrityError as e:
            _raise_for_integrity(e)
        inspection = fetch_inspection(conn, inspection_id)

    logger.info(f"Inspection {inspection_id} updated (status={inspection['status']})")
    return inspection


def _close_inspection(db, inspection_id, status, verb, completed_at=None):
    inspection_id = parse_inspection_id(inspection_id)
    completed_at = parse_timestamp(completed_at, 'completedAt')
    with db.transaction() as conn:
        inspection = fetch_inspection(conn, inspection_id)
        if inspection is None:
            raise NotFoundError('Inspection not found.')
        if inspection['status'] != IN_PROGRESS:
            raise ConflictError(f'Only an in-progress inspection can be {verb}.')

        if status == COMPLETED:
            conn.execute('''
                UPDATE inspections
                SET status = ?, completed_at = COALESCE(NULLIF(?, ''), datetime('now')),
                    updated_at = datetime('now')
                WHERE id = ?
            ''', (status, completed_at, inspection_id))
        else:
            conn.execute(
                "UPDATE inspections SET status = ?, updated_at = datetime('now') WHERE id = ?",
                (status, inspection_id)
            )
        inspection = fetch_inspection(conn, inspection_id)

    logger.info(f"Inspection {inspection_id} {verb}")
    return inspection


def complete_inspection(db, inspection_id, completed_at=None):
    """Mark an in-progress inspection completed; completed_at defaults to now."""
    return _close_inspection(db, inspection_id, COMPLETED, 'completed', completed_at)


def archive_inspection(db, inspection_id):
    return _close_inspection(db, inspection_id, ARCHIVED, 'archived')


def cancel_inspection(db, inspection_id):
    return _close_inspection(db, inspection_id, CANCELLED, 'cancelled')


def delete_inspection(db, inspection_id):
    inspection_id = parse_inspection_id(inspection_id)
    with db.transaction() as conn:
        cursor = conn.execute('DELETE FROM inspections WHERE id = ?', (inspection_id,))
        if cursor.rowcount == 0:
            raise NotFoundError('Inspection not found.')

    logger.info(f"Inspection {inspection_id} deleted")
