from couponops import get_db
from couponops.models.audit import AuditLog
from couponops.models.authz import Admin
from tests.test_utils_seed import ensure_admin, auth_headers

PAYLOAD = {'email': 'New.Ops@Example.com', 'password': 'pw1', 'first_name': 'New', 'last_name': 'Ops', 'role': 'OPS'}


def test_super_admin_creates_admin_without_leaking_hash(client, app_instance):
    boss = ensure_admin('boss@example.com')
    resp = client.post('/admins', json=PAYLOAD, headers=auth_headers(app_instance, boss))
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    assert body['email'] == 'new.ops@example.com'
    assert 'password_hash' not in body
    row = get_db().query(AuditLog).filter_by(entity_type='Admin', entity_id=body['id']).one()
    assert row.action == 'CREATE'
    assert row.after['role'] == 'OPS'
    assert 'password_hash' not in row.after


def test_duplicate_email_conflict(client, app_instance):
    boss = ensure_admin('boss2@example.com')
    ensure_admin('new.ops@example.com')
    resp = client.post('/admins', json=PAYLOAD, headers=auth_headers(app_instance, boss))
    assert resp.status_code == 409
    assert resp.get_json()['error']['detail'] == 'Email already exists'


def test_invalid_role_rejected(client, app_instance):
    boss = ensure_admin('boss3@example.com')
    resp = client.post('/admins', json={**PAYLOAD, 'role': 'GOD'}, headers=auth_headers(app_instance, boss))
    assert resp.status_code == 400
    assert get_db().query(Admin).count() == 1


def test_cannot_delete_self(client, app_instance):
    boss = ensure_admin('boss4@example.com')
    resp = client.delete(f'/admins/{boss.id}', headers=auth_headers(app_instance, boss))
    assert resp.status_code == 400
    assert get_db().get(Admin, boss.id) is not None
    assert get_db().query(AuditLog).count() == 0


def test_update_and_delete_other_admin(client, app_instance):
    boss = ensure_admin('boss5@example.com')
    other = ensure_admin('other@example.com', role='MARKETING')
    headers = auth_headers(app_instance, boss)
    upd = client.put(f'/admins/{other.id}', json={'role': 'FINANCE', 'is_active': False}, headers=headers)
    assert upd.status_code == 200
    assert upd.get_json()['role'] == 'FINANCE'
    assert client.delete(f'/admins/{other.id}', headers=headers).status_code == 200
    actions = [r.action for r in get_db().query(AuditLog).filter_by(entity_id=other.id).order_by(AuditLog.created_at)]
    assert actions == ['UPDATE', 'DELETE']


def test_tech_can_list_admins_but_not_edit(client, app_instance):
    tech = ensure_admin('tech@example.com', role='TECH')
    headers = auth_headers(app_instance, tech)
    listing = client.get('/admins', headers=headers)
    assert listing.status_code == 200
    assert listing.get_json()['pagination']['total'] == 1
    assert client.put(f'/admins/{tech.id}', json={'role': 'SUPER_ADMIN'}, headers=headers).status_code == 403
