"""
Integration tests for the REST API.
Exercises the Flask app end-to-end against a temporary SQLite file.
"""

import pytest


def _create_tree(client):
    contact = client.post('/api/contacts', json={'name': 'Acme'}).get_json()
    prop = client.post('/api/properties', json={
        'contactId': contact['id'], 'name': 'Site A', 'address': '1 Main St',
    }).get_json()
    clock = client.post('/api/clocks', json={
        'propertyId': prop['id'], 'label': 'Zone A', 'stationCount': 8,
    }).get_json()
    return contact, prop, clock


class TestEndToEnd:
    def test_inspection_scenario(self, client):
        resp = client.post('/api/contacts', json={'name': 'Acme'})
        assert resp.status_code == 201
        assert resp.get_json()['id'] == 1

        resp = client.post('/api/properties', json={'contactId': 1, 'name': 'Site A', 'address': '1 Main St'})
        assert resp.status_code == 201

        resp = client.post('/api/clocks', json={'propertyId': 1, 'label': 'Zone A', 'stationCount': 8})
        assert resp.status_code == 201

        resp = client.post('/api/inspections', json={'clockId': 1})
        assert resp.status_code == 201
        first = resp.get_json()
        assert first['status'] == 'in_progress'

        resp = client.post('/api/inspections', json={'clockId': 1})
        assert resp.status_code == 409
        assert resp.get_json() == {'message': 'An inspection is already in progress for this clock.'}

        resp = client.patch(f"/api/inspections/{first['id']}", json={
            'status': 'completed', 'completedAt': '2024-01-01T00:00:00Z',
        })
        assert resp.status_code == 200
        assert resp.get_json()['status'] == 'completed'

        resp = client.post('/api/inspections', json={'clockId': 1})
        assert resp.status_code == 201


class TestErrors:
    def test_property_with_unknown_contact_is_400(self, client):
        resp = client.post('/api/properties', json={'contactId': 999, 'name': 'X', 'address': '1 Main St'})
        assert resp.status_code == 400
        assert resp.get_json() == {'message': 'Selected contact does not exist.'}

    def test_duplicate_address_is_409(self, client):
        contact, _, _ = _create_tree(client)
        resp = client.post('/api/properties', json={
            'contactId': contact['id'], 'name': 'Site B', 'address': '1 Main St',
        })
        assert resp.status_code == 409

    def test_missing_id_is_404(self, client):
        for path in ('/api/contacts/5', '/api/properties/5', '/api/clocks/5', '/api/inspections/5'):
            resp = client.get(path)
            assert resp.status_code == 404
            assert 'not found' in resp.get_json()['message']

    def test_non_integer_id_is_400(self, client):
        resp = client.get('/api/contacts/abc')
        assert resp.status_code == 400
        assert resp.get_json() == {'message': 'Invalid contact id.'}

    def test_oversized_id_is_400(self, client):
        resp = client.get('/api/contacts/99999999999999999999')
        assert resp.status_code == 400
        assert resp.get_json() == {'message': 'Invalid contact id.'}

        resp = client.delete('/api/inspections/9223372036854775808')
        assert resp.status_code == 400
        assert resp.get_json() == {'message': 'Invalid inspection id.'}

    def test_oversized_filter_is_400(self, client):
        resp = client.get('/api/clocks?propertyId=99999999999999999999')
        assert resp.status_code == 400
        assert resp.get_json() == {'message': 'Invalid property id.'}

    def test_oversized_station_count_is_400(self, client):
        _, prop, _ = _create_tree(client)
        resp = client.post('/api/clocks', json={
            'propertyId': prop['id'], 'label': 'Zone B', 'stationCount': 1e300,
        })
        assert resp.status_code == 400
        assert resp.get_json() == {'message': 'Station count must be a positive number.'}

    def test_unorderable_started_at_is_400(self, client):
        _, _, clock = _create_tree(client)
        resp = client.post('/api/inspections', json={'clockId': clock['id'], 'startedAt': '20250301T090000'})
        assert resp.status_code == 400
        assert resp.get_json() == {'message': 'startedAt must be an ISO-8601 date or timestamp.'}

    def test_non_object_body_is_400(self, client):
        resp = client.post('/api/contacts', data='[1, 2]', content_type='application/json')
        assert resp.status_code == 400

    def test_unknown_route_is_json_404(self, client):
        resp = client.get('/api/sprinklers')
        assert resp.status_code == 404
        assert resp.get_json() == {'message': 'Not found.'}

    def test_wrong_method_is_405(self, client):
        resp = client.put('/api/inspections/1', json={})
        assert resp.status_code == 405

    def test_unexpected_error_is_500(self, client, monkeypatch):
        import contacts

        def boom(db):
            raise RuntimeError('disk on fire')

        monkeypatch.setattr(contacts, 'list_contacts', boom)
        resp = client.get('/api/contacts')
        assert resp.status_code == 500
        assert resp.get_json() == {'message': 'Unexpected server error.'}


class TestCrud:
    def test_update_and_delete_contact(self, client):
        contact, _, _ = _create_tree(client)
        resp = client.put(f"/api/contacts/{contact['id']}", json={'name': 'Acme Irrigation', 'phone': '555'})
        assert resp.status_code == 200
        assert resp.get_json()['phone'] == '555'

        resp = client.delete(f"/api/contacts/{contact['id']}")
        assert resp.status_code == 204
        assert resp.data == b''
        assert client.get('/api/properties').get_json() == []
        assert client.get('/api/clocks').get_json() == []
        assert client.get('/api/inspections').get_json() == []

    def test_list_filters(self, client):
        _, prop, clock = _create_tree(client)
        client.post('/api/inspections', json={'clockId': clock['id']})
        assert len(client.get(f"/api/clocks?propertyId={prop['id']}").get_json()) == 1
        assert len(client.get(f"/api/inspections?clockId={clock['id']}&status=in_progress").get_json()) == 1
        assert client.get(f"/api/inspections?clockId={clock['id']}&status=completed").get_json() == []
        assert client.get('/api/inspections?status=bogus').status_code == 400

    def test_patch_empty_started_at(self, client):
        _, _, clock = _create_tree(client)
        created = client.post('/api/inspections', json={'clockId': clock['id']}).get_json()
        resp = client.patch(f"/api/inspections/{created['id']}", json={'startedAt': ''})
        assert resp.get_json()['started_at'] == created['started_at']
        resp = client.patch(f"/api/inspections/{created['id']}", json={'startedAt': '2024-02-03T04:05:06Z'})
        assert resp.get_json()['started_at'] == '2024-02-03T04:05:06Z'

    def test_denormalized_record_keys(self, client):
        _, _, clock = _create_tree(client)
        record = client.post('/api/inspections', json={'clockId': clock['id']}).get_json()
        assert set(record) == {
            'id', 'clock_id', 'status', 'started_at', 'completed_at', 'summary', 'notes',
            'created_at', 'updated_at', 'clockLabel', 'property_id', 'propertyName',
            'propertyAddress', 'contactName',
        }


class TestLifecycleActions:
    def test_active_inspection_endpoint(self, client):
        _, _, clock = _create_tree(client)
        assert client.get(f"/api/clocks/{clock['id']}/active-inspection").status_code == 404
        created = client.post('/api/inspections', json={'clockId': clock['id']}).get_json()
        resp = client.get(f"/api/clocks/{clock['id']}/active-inspection")
        assert resp.status_code == 200
        assert resp.get_json()['id'] == created['id']

    def test_complete_then_archive_conflicts(self, client):
        _, _, clock = _create_tree(client)
        created = client.post('/api/inspections', json={'clockId': clock['id']}).get_json()
        resp = client.post(f"/api/inspections/{created['id']}/complete")
        assert resp.status_code == 200
        assert resp.get_json()['completed_at']
        resp = client.post(f"/api/inspections/{created['id']}/archive")
        assert resp.status_code == 409

    def test_cancel(self, client):
        _, _, clock = _create_tree(client)
        created = client.post('/api/inspections', json={'clockId': clock['id']}).get_json()
        resp = client.post(f"/api/inspections/{created['id']}/cancel")
        assert resp.get_json()['status'] == 'cancelled'


class TestHealth:
    def test_reports_schema_version(self, client):
        resp = client.get('/api/health')
        assert resp.status_code == 200
        assert resp.get_json() == {'status': 'ok', 'schemaVersion': '0002'}
