"""
Contact management for Clockbook.

A contact is the person or organization that owns properties. Deleting a
contact removes its properties, their clocks and those clocks' inspections
(ON DELETE CASCADE).
"""

import logging

from errors import NotFoundError
from queries import contact_query
from validation import clean_text, parse_id, require_text

logger = logging.getLogger(__name__)


def _contact_fields(data):
    return (
        require_text(data, 'name', 'Contact name is required.'),
        clean_text(data.get('phone')),
        clean_text(data.get('email')),
        clean_text(data.get('organization')),
    )


def parse_contact_id(value):
    return parse_id(value, 'Invalid contact id.')


def fetch_contact(conn, contact_id):
    return contact_query().where('id', contact_id).fetch_one(conn)


def list_contacts(db):
    """All contacts ordered by name (case-insensitive)."""
    with db.get_db() as conn:
        return contact_query().fetch_all(conn)


def get_contact(db, contact_id):
    contact_id = parse_contact_id(contact_id)
    with db.get_db() as conn:
        contact = fetch_contact(conn, contact_id)
    if contact is None:
        raise NotFoundError('Contact not found.')
    return contact


def add_contact(db, data):
    """Create a contact.

    Args:
        db: Database handle.
        data: dict with name (required), phone, email, organization.

    Returns:
        The new contact dict.
    """
    fields = _contact_fields(data)
    with db.transaction() as conn:
        cursor = conn.execute(
            'INSERT INTO contacts (name, phone, email, organization) VALUES (?, ?, ?, ?)',
            fields
        )
        contact = fetch_contact(conn, cursor.lastrowid)

    logger.info(f"Contact created: {contact['id']} ('{contact['name']}')")
    return contact


def update_contact(db, contact_id, data):
    """Replace every editable field of a contact."""
    contact_id = parse_contact_id(contact_id)
    with db.transaction() as conn:
        if fetch_contact(conn, contact_id) is None:
            raise NotFoundError('Contact not found.')
        conn.execute('''
            UPDATE contacts
            SET name = ?, phone = ?, email = ?, organization = ?,
                updated_at = datetime('now')
            WHERE id = ?
        ''', (*_contact_fields(data), contact_id))
        contact = fetch_contact(conn, contact_id)

    logger.info(f"Contact {contact_id} updated")
    return contact


def delete_contact(db, contact_id):
    """Delete a contact and, through cascading keys, everything it owns."""
    contact_id = parse_contact_id(contact_id)
    with db.transaction() as conn:
        cursor = conn.execute('DELETE FROM contacts WHERE id = ?', (contact_id,))
        if cursor.rowcount == 0:
            raise NotFoundError('Contact not found.')

    logger.info(f"Contact {contact_id} deleted")
