from tests.test_utils_seed import (
    ensure_admin, auth_headers, ensure_merchant, create_coupon, create_conversion, ensure_user, create_click,
)


def test_users_listing_with_counts_and_search(app_context, client):
    headers = auth_headers(app_context, ensure_admin('fin@example.com', role='FINANCE'))
    m = ensure_merchant('acme')
    jane = ensure_user('jane@example.com', first_name='Jane', last_name='Doe')
    ensure_user('bob@example.com', first_name='Bob')
    create_click(m, user=jane)
    create_click(m, user=jane)
    create_conversion(m, user_id=jane.id)

    listing = client.get('/users', headers=headers).get_json()
    assert listing['pagination']['total'] == 2
    found = client.get('/users?search=doe', headers=headers).get_json()
    assert [u['email'] for u in found['data']] == ['jane@example.com']
    assert found['data'][0]['clicks_count'] == 2
    assert found['data'][0]['conversions_count'] == 1

    single = client.get(f'/users/{jane.id}', headers=headers).get_json()
    assert single['clicks_count'] == 2 and single['conversions_count'] == 1
    assert client.get('/users/missing', headers=headers).status_code == 404


def test_clicks_filters(app_context, client):
    headers = auth_headers(app_context, ensure_admin('mkt@example.com', role='MARKETING'))
    acme = ensure_merchant('acme')
    other = ensure_merchant('other')
    coupon = create_coupon(acme)
    shopper = ensure_user('s@example.com')
    create_click(acme, user=shopper, coupon=coupon, source='extension')
    create_click(acme)
    create_click(other)

    assert client.get('/clicks', headers=headers).get_json()['pagination']['total'] == 3
    assert client.get(f'/clicks?merchant_id={acme.id}', headers=headers).get_json()['pagination']['total'] == 2
    by_coupon = client.get(f'/clicks?coupon_id={coupon.id}', headers=headers).get_json()
    assert [c['source'] for c in by_coupon['data']] == ['extension']
    assert client.get(f'/clicks?user_id={shopper.id}', headers=headers).get_json()['pagination']['total'] == 1
    future = client.get('/clicks?start_date=2999-01-01', headers=headers).get_json()
    assert future['pagination']['total'] == 0
    assert client.get('/clicks?end_date=not-a-date', headers=headers).status_code == 400


def test_tracking_reads_require_their_capabilities(app_context, client):
    marketing = auth_headers(app_context, ensure_admin('mkt@example.com', role='MARKETING'))
    resp = client.get('/users', headers=marketing)
    assert resp.status_code == 403
    assert resp.get_json()['error']['capability'] == 'users:read'
    assert client.get('/clicks').status_code == 401
