"""Tests for the REST API, with the Supabase clients replaced by fakes."""

import asyncio
import random
import time

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from admin import AdminUserService
from api import create_app
from api import deps
from auth import get_jwt_secret
from catalog import CatalogSeeder
from fakes import storage_error

SECRET = "api-test-secret"
WALLET = "G" + "B" * 55

SETTINGS = {
    'store_assets_bucket': 'store-assets',
    'admin_logging': False,
    'min_password_length': 8,
    'auth_callback_redirect': '/dashboard',
    'password_reset_redirect': '/auth/reset-password',
}

def auth_header(user_id):
    token = jwt.encode(
        {'sub': user_id, 'aud': 'authenticated', 'exp': int(time.time()) + 600},
        SECRET,
        algorithm="HS256"
    )
    return {'Authorization': f'Bearer {token}'}

@pytest.fixture
def api(client):
    """A TestClient whose dependencies use the in-memory client."""
    app = create_app(use_lifespan=False)
    app.dependency_overrides[deps.data_client] = lambda: client
    app.dependency_overrides[deps.auth_client] = lambda: client
    app.dependency_overrides[deps.settings] = lambda: SETTINGS
    app.dependency_overrides[deps.admin_service] = lambda: AdminUserService(client)
    app.dependency_overrides[get_jwt_secret] = lambda: SECRET
    with TestClient(app) as test_client:
        yield test_client

@pytest.fixture
def admin_user(client):
    user_id = client.auth.add_user('admin@example.com', 'admin-password')
    client.db.tables.setdefault('user_roles', []).append({'id': 'r1', 'user_id': user_id, 'role': 'admin'})
    return user_id

def test_root(api):
    assert api.get('/').json()['status'] == 'running'

def test_signup_creates_profile(api, client):
    response = api.post('/auth/signup', json={
        'email': 'new@example.com',
        'password': 's3cret-pass',
        'display_name': 'New Seller',
        'user_type': 'seller'
    })

    assert response.status_code == 201
    body = response.json()
    assert body['profile']['user_type'] == 'seller'
    assert body['confirmation_pending'] is False
    assert len(client.rows('profiles')) == 1

def test_signup_duplicate_email(api, seller):
    response = api.post('/auth/signup', json={
        'email': 'seller@example.com',
        'password': 's3cret-pass',
        'display_name': 'Again'
    })
    assert response.status_code == 409

def test_login(api, seller):
    response = api.post('/auth/login', json={'email': 'seller@example.com', 'password': 'correct-horse-battery'})
    assert response.status_code == 200
    assert response.json()['user_id'] == seller

    response = api.post('/auth/login', json={'email': 'seller@example.com', 'password': 'nope'})
    assert response.status_code == 401

def test_auth_callback_redirects(api, client, seller):
    client.auth.codes['code-1'] = seller

    response = api.get('/api/auth/callback', params={'code': 'code-1'}, follow_redirects=False)
    assert response.status_code == 307
    assert response.headers['location'] == 'http://testserver/dashboard'
    assert 'code-1' not in client.auth.codes

def test_auth_callback_honours_local_redirect(api):
    response = api.get(
        '/api/auth/callback',
        params={'redirectTo': '/seller/dashboard'},
        follow_redirects=False
    )
    assert response.headers['location'] == 'http://testserver/seller/dashboard'

def test_auth_callback_ignores_foreign_redirect_and_bad_code(api):
    response = api.get(
        '/api/auth/callback',
        params={'code': 'unknown', 'redirectTo': 'https://evil.example.com/'},
        follow_redirects=False
    )
    assert response.status_code == 307
    assert response.headers['location'] == 'http://testserver/dashboard'

@pytest.fixture
def auth_api(client, monkeypatch):
    """A TestClient that builds a fresh auth client per request, like production."""
    auth_clients = []

    async def fresh_auth_client(config):
        auth_clients.append(client.fork())
        return auth_clients[-1]

    monkeypatch.setattr(deps, 'create_auth_client', fresh_auth_client)
    app = create_app(use_lifespan=False)
    app.dependency_overrides[deps.data_client] = lambda: client
    app.dependency_overrides[deps.settings] = lambda: SETTINGS
    with TestClient(app) as test_client:
        yield test_client, auth_clients

def test_login_leaves_shared_client_anonymous(auth_api, client, seller, buyer):
    api, auth_clients = auth_api

    response = api.post('/auth/login', json={'email': 'seller@example.com', 'password': 'correct-horse-battery'})
    assert response.status_code == 200
    response = api.post('/auth/login', json={'email': 'buyer@example.com', 'password': 'correct-horse-battery'})
    assert response.status_code == 200

    assert len(auth_clients) == 2
    assert auth_clients[0].headers['Authorization'] == f'Bearer access-{seller}'
    assert auth_clients[1].headers['Authorization'] == f'Bearer access-{buyer}'
    assert client.headers['Authorization'] == 'Bearer anon-key'

def test_signup_leaves_shared_client_anonymous(auth_api, client):
    api, auth_clients = auth_api

    response = api.post('/auth/signup', json={
        'email': 'new@example.com',
        'password': 's3cret-pass',
        'display_name': 'New Buyer'
    })

    assert response.status_code == 201
    assert auth_clients[0].headers['Authorization'].startswith('Bearer access-')
    assert client.headers['Authorization'] == 'Bearer anon-key'
    assert len(client.rows('profiles')) == 1

def test_auth_callback_hands_session_to_browser(auth_api, client, seller):
    api, auth_clients = auth_api
    client.auth.codes['code-2'] = seller

    response = api.get('/api/auth/callback', params={'code': 'code-2'}, follow_redirects=False)

    assert response.status_code == 307
    cookies = response.headers.get_list('set-cookie')
    assert any(c.startswith(f'sb-access-token=access-{seller};') and 'HttpOnly' in c for c in cookies)
    assert any(c.startswith(f'sb-refresh-token=refresh-{seller};') for c in cookies)
    assert client.headers['Authorization'] == 'Bearer anon-key'

def test_auth_callback_without_session_sets_no_cookies(api):
    response = api.get('/api/auth/callback', params={'code': 'unknown'}, follow_redirects=False)
    assert response.headers.get_list('set-cookie') == []

def test_reset_password(api, client):
    response = api.post('/api/auth/reset-password', json={'email': 'seller@example.com'})

    assert response.status_code == 200
    assert response.json() == {'message': 'Password reset email sent'}
    assert client.auth.reset_requests == [
        ('seller@example.com', {'redirect_to': 'http://testserver/auth/reset-password'})
    ]

def test_reset_password_errors(api, client):
    assert api.post('/api/auth/reset-password', json={}).status_code == 400

    client.auth.failures['reset_password_for_email'] = RuntimeError("rate limited")
    response = api.post('/api/auth/reset-password', json={'email': 'seller@example.com'})
    assert response.status_code == 400

def test_profile_requires_token(api):
    assert api.get('/profile/').status_code in (401, 403)
    assert api.get('/profile/', headers={'Authorization': 'Bearer junk'}).status_code == 401

def test_get_and_update_profile(api, seller):
    response = api.get('/profile/', headers=auth_header(seller))
    assert response.status_code == 200
    assert response.json()['display_name'] == 'Sam Seller'

    response = api.patch('/profile/', json={'bio': 'Rockets'}, headers=auth_header(seller))
    assert response.status_code == 200
    assert response.json()['bio'] == 'Rockets'

    response = api.patch('/profile/', json={'user_type': 'wizard'}, headers=auth_header(seller))
    assert response.status_code == 422

def test_profile_missing(api):
    assert api.get('/profile/', headers=auth_header('ghost')).status_code == 404

def test_navigation(api, buyer, seller):
    buyer_sections = {e['section'] for e in api.get('/profile/navigation', headers=auth_header(buyer)).json()}
    seller_sections = {e['section'] for e in api.get('/profile/navigation', headers=auth_header(seller)).json()}

    assert 'analytics' not in buyer_sections
    assert 'analytics' in seller_sections

    response = api.get('/profile/navigation/analytics', headers=auth_header(buyer))
    assert response.status_code == 403
    response = api.get('/profile/navigation/analytics', headers=auth_header(seller))
    assert response.json()['route'] == '/seller/analytics'
    response = api.get('/profile/navigation/casino', headers=auth_header(seller))
    assert response.status_code == 400

def test_create_store_with_logo(api, client, seller):
    response = api.post(
        '/stores/',
        data={'name': 'Rocket Goods', 'stellar_wallet_address': WALLET},
        files={'logo': ('logo.png', b'\x89PNG', 'image/png')},
        headers=auth_header(seller)
    )

    assert response.status_code == 201
    body = response.json()
    assert body['state'] == 'completed'
    assert body['logo_error'] is None
    assert body['store']['logo_url'].endswith(f"store-logos/{body['store']['id']}-logo.png")

def test_create_store_logo_failure_still_creates(api, client, seller):
    client.storage.failures['upload'] = storage_error()

    response = api.post(
        '/stores/',
        data={'name': 'Rocket Goods', 'stellar_wallet_address': WALLET},
        files={'logo': ('logo.png', b'\x89PNG', 'image/png')},
        headers=auth_header(seller)
    )

    assert response.status_code == 201
    assert response.json()['state'] == 'logo_failed'
    assert response.json()['logo_error']
    assert len(client.rows('stores')) == 1

def test_create_store_rejections(api, client, seller, buyer):
    response = api.post(
        '/stores/',
        data={'name': 'Rocket Goods', 'stellar_wallet_address': 'GBAD'},
        headers=auth_header(seller)
    )
    assert response.status_code == 400

    response = api.post(
        '/stores/',
        data={'name': 'Buyer Shop', 'stellar_wallet_address': WALLET},
        headers=auth_header(buyer)
    )
    assert response.status_code == 403

    response = api.post(
        '/stores/',
        data={'name': 'Rocket Goods', 'stellar_wallet_address': WALLET},
        files={'logo': ('logo.exe', b'MZ', 'application/x-msdownload')},
        headers=auth_header(seller)
    )
    assert response.status_code == 400
    assert client.rows('stores') == []

def test_get_stores(api, seller):
    created = api.post(
        '/stores/',
        data={'name': 'Rocket Goods', 'stellar_wallet_address': WALLET},
        headers=auth_header(seller)
    ).json()['store']

    mine = api.get('/stores/mine', headers=auth_header(seller)).json()
    assert [store['id'] for store in mine] == [created['id']]

    assert api.get(f"/stores/{created['id']}").json()['name'] == 'Rocket Goods'
    assert api.get('/stores/missing').status_code == 404

def test_catalog(api, client):
    asyncio.run(CatalogSeeder(client, rng=random.Random(5)).seed_database())

    response = api.get('/catalog/products', params={'category': 'audio', 'sort': 'price_asc'})
    assert response.status_code == 200
    body = response.json()
    assert body['total_count'] == 2
    assert [p['slug'] for p in body['products']] == [
        'portable-bluetooth-speaker-007', 'wireless-bluetooth-headphones-001'
    ]

    categories = api.get('/catalog/categories').json()
    assert len(categories) == 6

    assert api.get('/catalog/products', params={'page': 0}).status_code == 400
    assert api.get('/catalog/products', params={'sort': 'random'}).status_code == 422

def test_admin_requires_admin_role(api, seller):
    response = api.get(f'/admin/users/{seller}/roles', headers=auth_header(seller))
    assert response.status_code == 403

def test_admin_role_management(api, admin_user, seller):
    headers = auth_header(admin_user)

    response = api.post(f'/admin/users/{seller}/roles', json={'role': 'seller'}, headers=headers)
    assert response.status_code == 200
    response = api.post(f'/admin/users/{seller}/roles', json={'role': 'seller'}, headers=headers)
    assert response.status_code == 200

    assert api.get(f'/admin/users/{seller}/roles', headers=headers).json() == {
        'success': True, 'data': ['seller']
    }

    assert api.delete(f'/admin/users/{seller}/roles/seller', headers=headers).status_code == 200
    assert api.post(f'/admin/users/{seller}/roles', json={'role': 'owner'}, headers=headers).status_code == 400

def test_admin_password_and_delete(api, client, admin_user, seller):
    headers = auth_header(admin_user)

    response = api.post(f'/admin/users/{seller}/password', json={'new_password': 'short'}, headers=headers)
    assert response.status_code == 400
    response = api.post(f'/admin/users/{seller}/password', json={'new_password': 'long-enough'}, headers=headers)
    assert response.status_code == 200

    response = api.delete(f'/admin/users/{seller}', headers=headers)
    assert response.status_code == 200
    assert response.json()['data']['state'] == 'completed'
    assert 'seller@example.com' not in client.auth.users

def test_admin_delete_failure_reports_state(api, client, admin_user, seller):
    client.auth.admin.failures['delete_user'] = RuntimeError("auth down")

    response = api.delete(f'/admin/users/{seller}', headers=auth_header(admin_user))

    assert response.status_code == 502
    assert response.json()['detail']['state'] == 'data_purged'

def test_admin_finishes_interrupted_delete(api, client, admin_user, seller):
    headers = auth_header(admin_user)
    client.auth.admin.failures['delete_user'] = RuntimeError("auth down")
    assert api.delete(f'/admin/users/{seller}', headers=headers).status_code == 502
    assert 'seller@example.com' in client.auth.users

    response = api.delete(f'/admin/users/{seller}/identity', headers=headers)

    assert response.status_code == 200
    assert response.json() == {'success': True}
    assert 'seller@example.com' not in client.auth.users
    assert api.delete(f'/admin/users/{seller}/identity', headers=headers).status_code == 502
