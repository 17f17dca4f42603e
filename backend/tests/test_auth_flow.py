from couponops import get_db
from couponops.models.audit import AuditLog
from couponops.models.authz import Admin
from tests.test_utils_seed import ensure_admin, auth_headers


def _login(client, email, password='pw'):
    return client.post('/auth/login', json={'email': email, 'password': password})


def test_login_and_me(client):
    ensure_admin('t@example.com', role='OPS')
    resp = _login(client, 'T@Example.com')
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    assert body['admin']['email'] == 't@example.com'
    assert 'password_hash' not in body['admin']
    me = client.get('/auth/me', headers={'Authorization': f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.get_json()['role'] == 'OPS'
    assert get_db().get(Admin, body['admin']['id']).last_login_at is not None


def test_login_failures_are_uniform(client):
    ensure_admin('off@example.com', is_active=False)
    ensure_admin('on@example.com')
    for email, pw in [('off@example.com', 'pw'), ('on@example.com', 'wrong'), ('ghost@example.com', 'pw')]:
        resp = _login(client, email, pw)
        assert resp.status_code == 401
        assert resp.get_json()['error']['detail'] == 'Invalid email or password'


def test_login_requires_fields(client):
    resp = client.post('/auth/login', json={'email': 'x@example.com'})
    assert resp.status_code == 400


def test_me_without_token_is_401(client):
    resp = client.get('/auth/me')
    assert resp.status_code == 401
    assert resp.get_json()['error']['status'] == 401


def test_deactivated_admin_token_stops_working(client, app_instance):
    admin = ensure_admin('later-off@example.com')
    headers = auth_headers(app_instance, admin)
    assert client.get('/auth/me', headers=headers).status_code == 200
    session = get_db()
    session.get(Admin, admin.id).is_active = False
    session.commit()
    assert client.get('/auth/me', headers=headers).status_code == 401


def test_change_password_records_redacted_audit(client, app_instance):
    admin = ensure_admin('pw@example.com', password='old-pw')
    headers = auth_headers(app_instance, admin)
    bad = client.post('/auth/change-password', json={'current_password': 'nope', 'new_password': 'x'}, headers=headers)
    assert bad.status_code == 400
    ok = client.post('/auth/change-password', json={'current_password': 'old-pw', 'new_password': 'new-pw'}, headers=headers)
    assert ok.status_code == 200
    assert _login(client, 'pw@example.com', 'new-pw').status_code == 200
    row = get_db().query(AuditLog).filter_by(entity_type='Admin', entity_id=admin.id).one()
    assert row.action == 'UPDATE'
    assert row.admin_id == admin.id
    assert 'password_hash' not in row.before
    assert 'password_hash' not in row.after
