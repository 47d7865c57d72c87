"""
Pytest configuration and shared fixtures for Clockbook tests.
"""

import os
import sys
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment variables before importing app
os.environ.setdefault("FLASK_SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_DIR", os.path.join(os.path.dirname(os.path.abspath(__file__)), ".logs"))

from app import create_app
from db import Database
import clocks
import contacts
import inspections
import properties


@pytest.fixture
def db(tmp_path):
    """A fresh database file migrated to the latest revision."""
    database = Database(str(tmp_path / "clockbook.db"))
    database.migrate()
    return database


@pytest.fixture
def app(db, tmp_path):
    app = create_app(
        {"TESTING": True, "LOG_DIR": str(tmp_path / "logs")},
        database=db,
    )
    return app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def contact(db):
    return contacts.add_contact(db, {"name": "Acme Landscaping", "phone": "555-0100"})


@pytest.fixture
def prop(db, contact):
    return properties.add_property(db, {
        "contactId": contact["id"],
        "name": "Site A",
        "address": "1 Main St",
        "city": "Springfield",
    })


@pytest.fixture
def clock(db, prop):
    return clocks.add_clock(db, {"propertyId": prop["id"], "label": "Zone A", "stationCount": 8})


@pytest.fixture
def inspection(db, clock):
    return inspections.start_inspection(db, {"clockId": clock["id"]})
