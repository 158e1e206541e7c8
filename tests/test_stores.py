"""Tests for the stores module."""

import pytest
import pytest_asyncio

from database.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from fakes import storage_error
from stores import (
    InvalidWalletAddressError, LogoFile, ProvisioningState, StoreManager,
    validate_wallet_address
)
from stores.storage import logo_key

WALLET = "G" + "A" * 55

STORE_DATA = {
    'name': 'Rocket Goods',
    'description': 'Things that go up',
    'stellar_wallet_address': WALLET
}

LOGO = LogoFile(filename='Logo.PNG', content=b'\x89PNG...', content_type='image/png')

@pytest_asyncio.fixture
async def store_manager(client):
    """Create and return a StoreManager instance."""
    return StoreManager(client, bucket='store-assets')

@pytest.mark.parametrize("address, valid", [
    (WALLET, True),
    ("G" + "7" * 55, True),
    ("G" + "A" * 54, False),
    ("G" + "A" * 56, False),
    ("S" + "A" * 55, False),
    ("g" + "a" * 55, False),
    ("", False),
    (None, False),
])
def test_validate_wallet_address(address, valid):
    assert validate_wallet_address(address) is valid

def test_logo_key_uses_extension():
    assert logo_key('store-1', LOGO) == 'store-logos/store-1-logo.png'
    assert logo_key('store-1', LogoFile('logo', b'')) == 'store-logos/store-1-logo.png'
    assert logo_key('store-1', LogoFile('a.jpeg', b'')) == 'store-logos/store-1-logo.jpeg'

@pytest.mark.asyncio
async def test_create_store_without_logo(store_manager, client, seller):
    """Test creating a store with no logo."""
    store = await store_manager.create_store(seller, STORE_DATA)

    assert store['owner_id'] == seller
    assert store['name'] == 'Rocket Goods'
    assert store['stellar_wallet_address'] == WALLET
    assert store.get('logo_url') is None
    assert client.storage.objects == {}

@pytest.mark.asyncio
async def test_create_store_with_logo(store_manager, client, seller):
    """Test that an uploaded logo is attached to the store."""
    provisioning = await store_manager.provision_store(seller, STORE_DATA, LOGO)
    store = provisioning.store

    assert provisioning.state is ProvisioningState.COMPLETED
    key = f"store-logos/{store['id']}-logo.png"
    assert store['logo_url'].endswith(f"/store-assets/{key}")
    content, options = client.storage.objects[('store-assets', key)]
    assert content == LOGO.content
    assert options['upsert'] == 'true'
    assert client.rows('stores')[0]['logo_url'] == store['logo_url']

@pytest.mark.asyncio
async def test_invalid_wallet_rejected_before_any_write(store_manager, client, seller):
    """Test that a malformed wallet address performs no writes."""
    with pytest.raises(InvalidWalletAddressError):
        await store_manager.create_store(seller, dict(STORE_DATA, stellar_wallet_address='GABC'), LOGO)

    assert client.rows('stores') == []
    assert client.storage.objects == {}
    assert not [call for call in client.db.calls if call[0] == 'stores']

@pytest.mark.asyncio
async def test_buyer_cannot_create_store(store_manager, client, buyer):
    """Test that buyers are rejected and no store is created."""
    with pytest.raises(PermissionDeniedError):
        await store_manager.create_store(buyer, STORE_DATA)

    assert client.rows('stores') == []

@pytest.mark.asyncio
async def test_both_can_create_store(store_manager, client):
    client.db.tables['profiles'] = [{'id': 'dual', 'user_type': 'both'}]

    store = await store_manager.create_store('dual', STORE_DATA)
    assert store['owner_id'] == 'dual'

@pytest.mark.asyncio
async def test_missing_profile(store_manager, client):
    with pytest.raises(NotFoundError, match="No user profile found"):
        await store_manager.create_store('ghost', STORE_DATA)
    assert client.rows('stores') == []

@pytest.mark.asyncio
async def test_store_name_required(store_manager, seller):
    with pytest.raises(ValidationError, match="Store name is required"):
        await store_manager.create_store(seller, dict(STORE_DATA, name='   '))

@pytest.mark.asyncio
async def test_logo_upload_failure_keeps_store(store_manager, client, seller):
    """Test that a failed logo upload does not fail store creation."""
    client.storage.failures['upload'] = storage_error("Bucket not found")

    provisioning = await store_manager.provision_store(seller, STORE_DATA, LOGO)

    assert provisioning.state is ProvisioningState.LOGO_FAILED
    assert provisioning.logo_error is not None
    assert provisioning.store.get('logo_url') is None
    assert len(client.rows('stores')) == 1
    assert client.rows('stores')[0].get('logo_url') is None

@pytest.mark.asyncio
async def test_logo_patch_failure_removes_upload(store_manager, client, seller):
    """Test that an uploaded logo that cannot be attached is removed."""
    client.fail('stores', 'update', RuntimeError("timeout"))

    provisioning = await store_manager.provision_store(seller, STORE_DATA, LOGO)

    assert provisioning.state is ProvisioningState.LOGO_FAILED
    key = logo_key(provisioning.store['id'], LOGO)
    assert provisioning.compensated == [key]
    assert client.storage.objects == {}
    assert len(client.rows('stores')) == 1

@pytest.mark.asyncio
async def test_get_stores_by_owner(store_manager, seller):
    first = await store_manager.create_store(seller, STORE_DATA)
    second = await store_manager.create_store(seller, dict(STORE_DATA, name='Second Shop'))

    stores = await store_manager.get_stores_by_owner(seller)
    assert [store['id'] for store in stores] == [first['id'], second['id']]
    assert await store_manager.get_stores_by_owner('nobody') == []

@pytest.mark.asyncio
async def test_get_store(store_manager, seller):
    store = await store_manager.create_store(seller, STORE_DATA)

    assert (await store_manager.get_store(store['id']))['name'] == 'Rocket Goods'
    assert await store_manager.get_store('missing') is None

@pytest.mark.asyncio
async def test_get_store_malformed_id(store_manager, client):
    assert await store_manager.get_store('not-a-uuid') is None
    assert await store_manager.get_store(None) is None
    assert client.db.calls == []

@pytest.mark.asyncio
async def test_update_store(store_manager, seller, buyer):
    store = await store_manager.create_store(seller, STORE_DATA)

    updated = await store_manager.update_store(store['id'], seller, {'description': 'New'})
    assert updated['description'] == 'New'

    with pytest.raises(PermissionDeniedError):
        await store_manager.update_store(store['id'], buyer, {'description': 'Mine now'})
    with pytest.raises(ValidationError):
        await store_manager.update_store(store['id'], seller, {'owner_id': buyer})
    with pytest.raises(InvalidWalletAddressError):
        await store_manager.update_store(store['id'], seller, {'stellar_wallet_address': 'nope'})
    with pytest.raises(NotFoundError):
        await store_manager.update_store('missing', seller, {'name': 'x'})

@pytest.mark.asyncio
async def test_attach_logo_replaces(store_manager, client, seller):
    store = await store_manager.create_store(seller, STORE_DATA)

    updated = await store_manager.attach_logo(store['id'], seller, LOGO)
    assert updated['logo_url'].endswith(logo_key(store['id'], LOGO))
    assert len(client.storage.objects) == 1
