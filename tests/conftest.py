"""Shared fixtures for the test suite."""

import pytest

from fakes import FakeSupabase

SELLER_EMAIL = "seller@example.com"
BUYER_EMAIL = "buyer@example.com"
PASSWORD = "correct-horse-battery"

@pytest.fixture
def client():
    """A fresh in-memory Supabase client."""
    return FakeSupabase()

@pytest.fixture
def seller(client):
    """A registered seller account with a profile."""
    user_id = client.auth.add_user(SELLER_EMAIL, PASSWORD)
    client.db.tables.setdefault('profiles', []).append({
        'id': user_id,
        'user_type': 'seller',
        'display_name': 'Sam Seller',
        'email': SELLER_EMAIL,
    })
    return user_id

@pytest.fixture
def buyer(client):
    """A registered buyer account with a profile."""
    user_id = client.auth.add_user(BUYER_EMAIL, PASSWORD)
    client.db.tables.setdefault('profiles', []).append({
        'id': user_id,
        'user_type': 'buyer',
        'display_name': 'Bea Buyer',
        'email': BUYER_EMAIL,
    })
    return user_id
