"""
Property management for Clockbook.

A property is a site owned by one contact. Addresses are unique across all
properties.
"""

import sqlite3
import logging

from contacts import fetch_contact
from db import integrity_conflict
from errors import ConflictError, NotFoundError, ValidationError
from queries import property_query
from validation import clean_text, parse_id, parse_int, require_text

logger = logging.getLogger(__name__)

DUPLICATE_ADDRESS = 'Another property already uses that address.'
MISSING_CONTACT = 'Selected contact does not exist.'


def parse_property_id(value):
    return parse_id(value, 'Invalid property id.')


def fetch_property(conn, property_id):
    return property_query().where('id', property_id).fetch_one(conn)


def _property_fields(conn, data):
    """Validate a property payload and return column values in insert order."""
    contact_id = parse_id(data.get('contactId'), 'A valid contact is required for each property.')
    if fetch_contact(conn, contact_id) is None:
        raise ValidationError(MISSING_CONTACT)

    name = require_text(data, 'name', 'Property name is required.')
    address = require_text(data, 'address', 'Property address is required.')
    return (
        contact_id,
        name,
        address,
        clean_text(data.get('city')),
        clean_text(data.get('state')),
        clean_text(data.get('postalCode')),
        clean_text(data.get('notes')),
    )


def _raise_for_integrity(error):
    kind = integrity_conflict(error)
    if kind == 'unique':
        raise ConflictError(DUPLICATE_ADDRESS) from error
    if kind == 'foreign_key':
        raise ValidationError(MISSING_CONTACT) from error
    raise error


def list_properties(db, contact_id=None):
    """Properties ordered by name, optionally only those of one contact."""
    if contact_id is not None:
        contact_id = parse_int(contact_id)
        if contact_id is None:
            raise ValidationError('Invalid contact id.')
    with db.get_db() as conn:
        return property_query().where('contact_id', contact_id).fetch_all(conn)


def get_property(db, property_id):
    property_id = parse_property_id(property_id)
    with db.get_db() as conn:
        prop = fetch_property(conn, property_id)
    if prop is None:
        raise NotFoundError('Property not found.')
    return prop


def add_property(db, data):
    """Create a property for an existing contact.

    Raises:
        ValidationError: bad contactId, unknown contact, blank name/address.
        ConflictError: the address is already used by another property.
    """
    with db.transaction() as conn:
        fields = _property_fields(conn, data)
        try:
            cursor = conn.execute('''
                INSERT INTO properties (contact_id, name, address, city, state, postal_code, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            ''', fields)
        except sqlite3.IntegrityError as e:
            _raise_for_integrity(e)
        prop = fetch_property(conn, cursor.lastrowid)

    logger.info(f"Property created: {prop['id']} ('{prop['address']}') for contact {prop['contact_id']}")
    return prop


def update_property(db, property_id, data):
    """Replace every editable field of a property, including its owner."""
    property_id = parse_property_id(property_id)
    with db.transaction() as conn:
        if fetch_property(conn, property_id) is None:
            raise NotFoundError('Property not found.')
        fields = _property_fields(conn, data)
        try:
            conn.execute('''
                UPDATE properties
                SET contact_id = ?, name = ?, address = ?, city = ?, state = ?,
                    postal_code = ?, notes = ?, updated_at = datetime('now')
                WHERE id = ?
            ''', (*fields, property_id))
        except sqlite3.IntegrityError as e:
            _raise_for_integrity(e)
        prop = fetch_property(conn, property_id)

    logger.info(f"Property {property_id} updated")
    return prop


def delete_property(db, property_id):
    """Delete a property together with its clocks and their inspections."""
    property_id = parse_property_id(property_id)
    with db.transaction() as conn:
        cursor = conn.execute('DELETE FROM properties WHERE id = ?', (property_id,))
        if cursor.rowcount == 0:
            raise NotFoundError('Property not found.')

    logger.info(f"Property {property_id} deleted")
