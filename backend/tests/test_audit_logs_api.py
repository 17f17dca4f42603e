from couponops.models.audit import AuditLog
from couponops.services.audit import get_audit_recorder
from tests.test_utils_seed import ensure_admin, auth_headers


def _seed_rows(app_instance):
    with app_instance.app_context():
        rec = get_audit_recorder()
        rec.record('A1', AuditLog.ACTION_CREATE, 'Coupon', 'C1', after={'id': 'C1'})
        rec.record('A1', AuditLog.ACTION_UPDATE, 'Coupon', 'C1', before={'id': 'C1'}, after={'id': 'C1'})
        rec.record('A2', AuditLog.ACTION_DELETE, 'Merchant', 'M1', before={'id': 'M1'})


def test_filters(client, app_instance):
    _seed_rows(app_instance)
    headers = auth_headers(app_instance, ensure_admin('ops@example.com', role='OPS'))
    everything = client.get('/audit/logs', headers=headers).get_json()
    assert everything['pagination']['total'] == 3
    by_admin = client.get('/audit/logs?admin_id=A1', headers=headers).get_json()
    assert by_admin['pagination']['total'] == 2
    by_entity = client.get('/audit/logs?entity_type=Merchant&entity_id=M1', headers=headers).get_json()
    assert [r['action'] for r in by_entity['data']] == ['DELETE']
    by_action = client.get('/audit/logs?action=UPDATE', headers=headers).get_json()
    assert by_action['data'][0]['before'] == {'id': 'C1'}
    assert client.get('/audit/logs?action=ARCHIVE', headers=headers).status_code == 400


def test_date_range(client, app_instance):
    _seed_rows(app_instance)
    headers = auth_headers(app_instance, ensure_admin('ops2@example.com', role='OPS'))
    future = client.get('/audit/logs?start_date=2999-01-01T00:00:00Z', headers=headers).get_json()
    assert future['pagination']['total'] == 0
    past = client.get('/audit/logs?end_date=2000-01-01', headers=headers).get_json()
    assert past['pagination']['total'] == 0
    window = client.get('/audit/logs?start_date=2000-01-01&end_date=2999-01-01', headers=headers).get_json()
    assert window['pagination']['total'] == 3
    assert client.get('/audit/logs?start_date=yesterday', headers=headers).status_code == 400


def test_newest_first(client, app_instance):
    _seed_rows(app_instance)
    headers = auth_headers(app_instance, ensure_admin('ops3@example.com', role='OPS'))
    rows = client.get('/audit/logs', headers=headers).get_json()['data']
    stamps = [r['created_at'] for r in rows]
    assert stamps == sorted(stamps, reverse=True)
