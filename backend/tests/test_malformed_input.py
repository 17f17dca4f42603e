from tests.test_utils_seed import ensure_admin, auth_headers, ensure_merchant


def _headers(app):
    return auth_headers(app, ensure_admin('input@example.com'))


def test_wrongly_typed_field_is_rejected(app_context, client):
    headers = _headers(app_context)
    m = ensure_merchant('acme', merchant_id='M1')
    resp = client.put('/merchants/M1', json={'is_featured': 'yes'}, headers=headers)
    assert resp.status_code == 400
    assert 'is_featured' in resp.get_json()['error']['detail']
    resp = client.put('/merchants/M1', json={'priority': True}, headers=headers)
    assert resp.status_code == 400
    assert client.get(f'/merchants/{m.id}', headers=headers).get_json()['is_featured'] is False


def test_type_failure_leaves_entity_untouched(app_context, client):
    headers = _headers(app_context)
    ensure_merchant('acme', merchant_id='M1')
    resp = client.put('/merchants/M1', json={'name': 'Renamed', 'priority': 'high'}, headers=headers)
    assert resp.status_code == 400
    assert client.get('/merchants/M1', headers=headers).get_json()['name'] == 'Acme'


def test_non_object_body_is_rejected(app_context, client):
    headers = _headers(app_context)
    resp = client.post('/merchants', json=['x'], headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['error']['detail'] == 'JSON object body required'


def test_unparseable_body_is_rejected(app_context, client):
    headers = {**_headers(app_context), 'Content-Type': 'application/json'}
    resp = client.post('/merchants', data='{"name": ', headers=headers)
    assert resp.status_code == 400


def test_login_rejects_non_string_credentials(client):
    resp = client.post('/auth/login', json={'email': 123, 'password': 'pw'})
    assert resp.status_code == 400
    resp = client.post('/auth/login', json={'email': 'a@example.com', 'password': ['pw']})
    assert resp.status_code == 400


def test_required_field_must_be_string(app_context, client):
    headers = _headers(app_context)
    resp = client.post('/merchants', json={'name': 'Acme', 'slug': 7, 'website_url': 'https://acme.test'},
                       headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['error']['detail'] == 'slug must be a string'


def test_numeric_fields_accept_int_and_float(app_context, client):
    headers = _headers(app_context)
    m = ensure_merchant('acme')
    resp = client.post('/coupons', json={'merchant_id': m.id, 'code': 'X', 'title': 'X', 'discount_value': 12.5},
                       headers=headers)
    assert resp.status_code == 201
    coupon_id = resp.get_json()['id']
    resp = client.put(f'/coupons/{coupon_id}', json={'discount_value': '12'}, headers=headers)
    assert resp.status_code == 400
    resp = client.put(f'/coupons/{coupon_id}', json={'discount_value': None}, headers=headers)
    assert resp.status_code == 200
