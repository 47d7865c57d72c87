"""
REST API Blueprint for Clockbook.

One resource group per entity:
- /api/contacts
- /api/properties   (?contactId=)
- /api/clocks       (?propertyId=)
- /api/inspections  (?clockId=&status=)

Creates return 201, updates 200, deletes 204 with an empty body. Errors
are raised as ClockbookError subclasses and rendered by errors.py.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

import clocks
import contacts
import inspections
import properties
from errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

api_bp = Blueprint('api_bp', __name__, url_prefix='/api')

DB_EXTENSION = 'clockbook.db'


# ====================================================================
# Helpers
# ====================================================================

def _db():
    """Return the Database attached to the running app."""
    return current_app.extensions[DB_EXTENSION]


def _body():
    """The request's JSON object; an absent body counts as empty."""
    if not request.get_data():
        return {}
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object.')
    return data


def _no_content():
    return '', 204


# ====================================================================
# Health
# ====================================================================

@api_bp.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok', 'schemaVersion': _db().schema_version()})


# ====================================================================
# Contacts
# ====================================================================

@api_bp.route('/contacts', methods=['GET'])
def list_contacts():
    return jsonify(contacts.list_contacts(_db()))


@api_bp.route('/contacts', methods=['POST'])
def create_contact():
    return jsonify(contacts.add_contact(_db(), _body())), 201


@api_bp.route('/contacts/<contact_id>', methods=['GET'])
def get_contact(contact_id):
    return jsonify(contacts.get_contact(_db(), contact_id))


@api_bp.route('/contacts/<contact_id>', methods=['PUT'])
def update_contact(contact_id):
    return jsonify(contacts.update_contact(_db(), contact_id, _body()))


@api_bp.route('/contacts/<contact_id>', methods=['DELETE'])
def delete_contact(contact_id):
    contacts.delete_contact(_db(), contact_id)
    return _no_content()


# ====================================================================
# Properties
# ====================================================================

@api_bp.route('/properties', methods=['GET'])
def list_properties():
    contact_id = request.args.get('contactId') or None
    return jsonify(properties.list_properties(_db(), contact_id=contact_id))


@api_bp.route('/properties', methods=['POST'])
def create_property():
    return jsonify(properties.add_property(_db(), _body())), 201


@api_bp.route('/properties/<property_id>', methods=['GET'])
def get_property(property_id):
    return jsonify(properties.get_property(_db(), property_id))


@api_bp.route('/properties/<property_id>', methods=['PUT'])
def update_property(property_id):
    return jsonify(properties.update_property(_db(), property_id, _body()))


@api_bp.route('/properties/<property_id>', methods=['DELETE'])
def delete_property(property_id):
    properties.delete_property(_db(), property_id)
    return _no_content()


# ====================================================================
# Clocks
# ====================================================================

@api_bp.route('/clocks', methods=['GET'])
def list_clocks():
    property_id = request.args.get('propertyId') or None
    return jsonify(clocks.list_clocks(_db(), property_id=property_id))


@api_bp.route('/clocks', methods=['POST'])
def create_clock():
    return jsonify(clocks.add_clock(_db(), _body())), 201


@api_bp.route('/clocks/<clock_id>', methods=['GET'])
def get_clock(clock_id):
    return jsonify(clocks.get_clock(_db(), clock_id))


@api_bp.route('/clocks/<clock_id>', methods=['PUT'])
def update_clock(clock_id):
    return jsonify(clocks.update_clock(_db(), clock_id, _body()))


@api_bp.route('/clocks/<clock_id>', methods=['DELETE'])
def delete_clock(clock_id):
    clocks.delete_clock(_db(), clock_id)
    return _no_content()


@api_bp.route('/clocks/<clock_id>/active-inspection', methods=['GET'])
def get_active_inspection(clock_id):
    inspection = inspections.get_active_inspection(_db(), clock_id)
    if inspection is None:
        raise NotFoundError('No inspection is in progress for this clock.')
    return jsonify(inspection)


# ====================================================================
# Inspections
# ====================================================================

@api_bp.route('/inspections', methods=['GET'])
def list_inspections():
    clock_id = request.args.get('clockId') or None
    status = request.args.get('status') or None
    return jsonify(inspections.list_inspections(_db(), clock_id=clock_id, status=status))


@api_bp.route('/inspections', methods=['POST'])
def start_inspection():
    return jsonify(inspections.start_inspection(_db(), _body())), 201


@api_bp.route('/inspections/<inspection_id>', methods=['GET'])
def get_inspection(inspection_id):
    return jsonify(inspections.get_inspection(_db(), inspection_id))


@api_bp.route('/inspections/<inspection_id>', methods=['PATCH'])
def patch_inspection(inspection_id):
    return jsonify(inspections.patch_inspection(_db(), inspection_id, _body()))


@api_bp.route('/inspections/<inspection_id>', methods=['DELETE'])
def delete_inspection(inspection_id):
    inspections.delete_inspection(_db(), inspection_id)
    return _no_content()


@api_bp.route('/inspections/<inspection_id>/complete', methods=['POST'])
def complete_inspection(inspection_id):
    completed_at = _body().get('completedAt')
    return jsonify(inspections.complete_inspection(_db(), inspection_id, completed_at))


@api_bp.route('/inspections/<inspection_id>/archive', methods=['POST'])
def archive_inspection(inspection_id):
    return jsonify(inspections.archive_inspection(_db(), inspection_id))


@api_bp.route('/inspections/<inspection_id>/cancel', methods=['POST'])
def cancel_inspection(inspection_id):
    return jsonify(inspections.cancel_inspection(_db(), inspection_id))
