"""
Read projections for Clockbook.

Every list/detail response is a denormalized row: a record plus a few
columns of its parents (contact name on a property, property address on a
clock, and so on). Each projection is a ``ViewQuery`` with a fixed SELECT,
a whitelist of filterable columns and a fixed ORDER BY, so callers never
assemble SQL text themselves.
"""

from typing import Any, Dict, List, Optional, Tuple


class ViewQuery:
    """A SELECT over one projection with optional equality filters."""

    def __init__(self, select: str, filters: Dict[str, str], order_by: str):
        self.select = select
        self.filters = filters
        self.order_by = order_by
        self._clauses: List[str] = []
        self._params: List[Any] = []

    def where(self, name: str, value: Any) -> "ViewQuery":
        """Filter on a whitelisted column; ``None`` means no filter."""
        column = self.filters[name]
        if value is not None:
            self._clauses.append(f'{column} = ?')
            self._params.append(value)
        return self

    def build(self) -> Tuple[str, List[Any]]:
        sql = self.select
        if self._clauses:
            sql += '\nWHERE ' + ' AND '.join(self._clauses)
        sql += f'\nORDER BY {self.order_by}'
        return sql, list(self._params)

    def fetch_all(self, conn) -> List[dict]:
        sql, params = self.build()
        return [dict(row) for row in conn.execute(sql, params).fetchall()]

    def fetch_one(self, conn) -> Optional[dict]:
        sql, params = self.build()
        row = conn.execute(sql, params).fetchone()
        return dict(row) if row else None


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------

CONTACT_SELECT = '''
    SELECT id, name, phone, email, organization, created_at, updated_at
    FROM contacts
'''

PROPERTY_SELECT = '''
    SELECT p.id, p.name, p.address, p.city, p.state, p.postal_code, p.notes,
           p.contact_id, p.created_at, p.updated_at,
           c.name AS contactName, c.phone AS contactPhone,
           c.email AS contactEmail, c.organization AS contactOrganization
    FROM properties p
    LEFT JOIN contacts c ON c.id = p.contact_id
'''

CLOCK_SELECT = '''
    SELECT cl.id, cl.label, cl.manufacturer, cl.model, cl.station_count,
           cl.location, cl.notes, cl.property_id, cl.created_at, cl.updated_at,
           p.name AS propertyName, p.address AS propertyAddress,
           c.name AS contactName
    FROM clocks cl
    LEFT JOIN properties p ON p.id = cl.property_id
    LEFT JOIN contacts c ON c.id = p.contact_id
'''

INSPECTION_SELECT = '''
    SELECT i.id, i.clock_id, i.status, i.started_at, i.completed_at,
           i.summary, i.notes, i.created_at, i.updated_at,
           cl.label AS clockLabel, cl.property_id,
           p.name AS propertyName, p.address AS propertyAddress,
           c.name AS contactName
    FROM inspections i
    LEFT JOIN clocks cl ON cl.id = i.clock_id
    LEFT JOIN properties p ON p.id = cl.property_id
    LEFT JOIN contacts c ON c.id = p.contact_id
'''


def contact_query():
    return ViewQuery(
        CONTACT_SELECT,
        {'id': 'id'},
        'name COLLATE NOCASE, id',
    )


def property_query():
    return ViewQuery(
        PROPERTY_SELECT,
        {'id': 'p.id', 'contact_id': 'p.contact_id'},
        'p.name COLLATE NOCASE, p.id',
    )


def clock_query():
    return ViewQuery(
        CLOCK_SELECT,
        {'id': 'cl.id', 'property_id': 'cl.property_id'},
        'cl.label COLLATE NOCASE, cl.id',
    )


def inspection_query():
    # Newest first; id breaks ties between rows written in the same second
    return ViewQuery(
        INSPECTION_SELECT,
        {'id': 'i.id', 'clock_id': 'i.clock_id', 'status': 'i.status'},
        'datetime(i.started_at) DESC, datetime(i.updated_at) DESC, i.id DESC',
    )
