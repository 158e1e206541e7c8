"""Stores module for provisioning seller shops.

Creating a store is a short saga:
1. Validate the Stellar wallet address
2. Load the owner's profile and check it may sell
3. Insert the store row
4. Optionally upload the logo and patch the row with its public URL

The store row is never rolled back. A failed logo step is logged and recorded
on the provisioning record, and an uploaded logo that could not be attached is
removed again.
"""

import logging
import re
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from database import execute_query
from database.exceptions import (
    MarketplaceError, NotFoundError, PermissionDeniedError, ValidationError
)
from profiles import NoProfileError, ProfileManager, parse_user_type
from .storage import LogoFile, logo_key, remove_store_logo, upload_store_logo

logger = logging.getLogger(__name__)

STORES_TABLE = 'stores'
DEFAULT_BUCKET = 'store-assets'

STELLAR_ADDRESS_PATTERN = re.compile(r'^G[A-Z0-9]{55}$')

# User-mutable fields for stores
MUTABLE_FIELDS = {
    'name',
    'description',
    'stellar_wallet_address'
}

class InvalidWalletAddressError(ValidationError):
    """Raised when a wallet address is not a Stellar public key."""
    pass

class ProvisioningState(str, Enum):
    """Progress of a store creation."""
    PENDING = 'pending'
    STORE_CREATED = 'store_created'
    LOGO_UPLOADED = 'logo_uploaded'
    COMPLETED = 'completed'
    LOGO_FAILED = 'logo_failed'

@dataclass
class StoreProvisioning:
    """Record of a store creation and how far it got."""
    owner_id: str
    state: ProvisioningState = ProvisioningState.PENDING
    store: Optional[Dict[str, Any]] = None
    logo_error: Optional[MarketplaceError] = None
    compensated: List[str] = field(default_factory=list)

    def advance(self, state: ProvisioningState) -> None:
        logger.debug(f"Store provisioning for {self.owner_id}: {self.state.value} -> {state.value}")
        self.state = state

def validate_wallet_address(address: Optional[str]) -> bool:
    """Check that an address looks like a Stellar public key."""
    return bool(address) and STELLAR_ADDRESS_PATTERN.match(address) is not None

def is_store_id(value: Optional[str]) -> bool:
    """Check that a value is a UUID, the type of stores.id."""
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True

class StoreManager:
    """Manager class for handling store operations."""

    def __init__(
        self,
        client,
        profiles: Optional[ProfileManager] = None,
        bucket: str = DEFAULT_BUCKET
    ):
        """Initialize the store manager.

        Args:
            client: Supabase async client
            profiles: Optional profile manager sharing the same client
            bucket: Storage bucket for store assets
        """
        self.client = client
        self.profiles = profiles or ProfileManager(client)
        self.bucket = bucket

    async def create_store(
        self,
        account_id: str,
        store_data: Dict[str, Any],
        logo: Optional[LogoFile] = None
    ) -> Dict[str, Any]:
        """Create a store for a seller.

        Args:
            account_id: The owner's account id
            store_data: Dict with name, stellar_wallet_address and optional description
            logo: Optional logo image

        Returns:
            The store row, with logo_url set only if the logo step succeeded

        Raises:
            InvalidWalletAddressError: If the wallet address is malformed
            NoProfileError: If the owner has no profile
            PermissionDeniedError: If the owner is a buyer
        """
        provisioning = await self.provision_store(account_id, store_data, logo)
        return provisioning.store

    async def provision_store(
        self,
        account_id: str,
        store_data: Dict[str, Any],
        logo: Optional[LogoFile] = None
    ) -> StoreProvisioning:
        """Create a store and return the full provisioning record.

        Same contract as create_store, but the caller also sees the final
        state and any logo error.
        """
        wallet = store_data.get('stellar_wallet_address')
        if not validate_wallet_address(wallet):
            raise InvalidWalletAddressError(
                "Invalid Stellar wallet address format",
                operation='create_store'
            )

        name = (store_data.get('name') or '').strip()
        if not name:
            raise ValidationError("Store name is required", operation='create_store')

        profile = await self.profiles.fetch_profile(account_id)
        if profile is None:
            raise NoProfileError("No user profile found", operation='create_store')

        if not parse_user_type(profile['user_type']).can_sell:
            raise PermissionDeniedError("Only sellers can create stores", operation='create_store')

        provisioning = StoreProvisioning(owner_id=account_id)

        response = await execute_query(
            self.client.table(STORES_TABLE).insert({
                'owner_id': account_id,
                'name': name,
                'description': store_data.get('description') or None,
                'stellar_wallet_address': wallet,
            }),
            'create_store'
        )
        provisioning.store = response.data[0]
        provisioning.advance(ProvisioningState.STORE_CREATED)
        logger.info(f"Created store {provisioning.store['id']} for {account_id}")

        if logo is None:
            provisioning.advance(ProvisioningState.COMPLETED)
            return provisioning

        await self._attach_logo(provisioning, logo)
        return provisioning

    async def _attach_logo(self, provisioning: StoreProvisioning, logo: LogoFile) -> None:
        """Upload a logo and patch the store row, compensating on failure."""
        store = provisioning.store
        store_id = store['id']

        try:
            logo_url = await upload_store_logo(self.client, self.bucket, store_id, logo)
        except MarketplaceError as e:
            logger.error(f"Logo upload failed for store {store_id}: {e}")
            provisioning.logo_error = e
            provisioning.advance(ProvisioningState.LOGO_FAILED)
            return

        provisioning.advance(ProvisioningState.LOGO_UPLOADED)

        try:
            response = await execute_query(
                self.client.table(STORES_TABLE)
                .update({'logo_url': logo_url})
                .eq('id', store_id),
                'attach_logo'
            )
        except MarketplaceError as e:
            logger.error(f"Error updating store logo for {store_id}: {e}")
            provisioning.logo_error = e
            await self._remove_orphaned_logo(provisioning, logo)
            provisioning.advance(ProvisioningState.LOGO_FAILED)
            return

        provisioning.store = response.data[0] if response.data else {**store, 'logo_url': logo_url}
        provisioning.advance(ProvisioningState.COMPLETED)

    async def _remove_orphaned_logo(self, provisioning: StoreProvisioning, logo: LogoFile) -> None:
        store_id = provisioning.store['id']
        try:
            await remove_store_logo(self.client, self.bucket, store_id, logo)
            provisioning.compensated.append(logo_key(store_id, logo))
        except MarketplaceError as e:
            logger.error(f"Could not remove orphaned logo for store {store_id}: {e}")

    async def attach_logo(self, store_id: str, owner_id: str, logo: LogoFile) -> Dict[str, Any]:
        """Replace the logo of an existing store.

        Unlike store creation, a failure here is raised to the caller.

        Raises:
            NotFoundError: If the store does not exist
            PermissionDeniedError: If owner_id does not own the store
        """
        store = await self._get_owned_store(store_id, owner_id, 'attach_logo')
        logo_url = await upload_store_logo(self.client, self.bucket, store['id'], logo)
        response = await execute_query(
            self.client.table(STORES_TABLE)
            .update({'logo_url': logo_url})
            .eq('id', store_id),
            'attach_logo'
        )
        return response.data[0]

    async def get_store(self, store_id: str) -> Optional[Dict[str, Any]]:
        """Get a store by id, or None if it doesn't exist.

        Ids that are not UUIDs cannot exist and return None without a query.
        """
        if not is_store_id(store_id):
            return None

        response = await execute_query(
            self.client.table(STORES_TABLE)
            .select('*')
            .eq('id', store_id)
            .limit(1),
            'get_store'
        )
        return response.data[0] if response.data else None

    async def get_stores_by_owner(self, owner_id: str) -> List[Dict[str, Any]]:
        """Get all stores owned by an account, oldest first."""
        response = await execute_query(
            self.client.table(STORES_TABLE)
            .select('*')
            .eq('owner_id', owner_id)
            .order('created_at'),
            'get_stores_by_owner'
        )
        return response.data or []

    async def update_store(
        self,
        store_id: str,
        owner_id: str,
        updates: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Update mutable store fields.

        Raises:
            ValidationError: If updates touch other fields
            InvalidWalletAddressError: If a new wallet address is malformed
            NotFoundError: If the store does not exist
            PermissionDeniedError: If owner_id does not own the store
        """
        invalid = set(updates) - MUTABLE_FIELDS
        if invalid:
            raise ValidationError(
                f"Cannot update fields: {', '.join(sorted(invalid))}",
                operation='update_store'
            )
        if 'stellar_wallet_address' in updates and not validate_wallet_address(updates['stellar_wallet_address']):
            raise InvalidWalletAddressError(
                "Invalid Stellar wallet address format",
                operation='update_store'
            )

        store = await self._get_owned_store(store_id, owner_id, 'update_store')
        if not updates:
            return store

        response = await execute_query(
            self.client.table(STORES_TABLE)
            .update(updates)
            .eq('id', store_id),
            'update_store'
        )
        return response.data[0]

    async def _get_owned_store(self, store_id: str, owner_id: str, operation: str) -> Dict[str, Any]:
        store = await self.get_store(store_id)
        if store is None:
            raise NotFoundError(f"Store {store_id} not found", operation=operation)
        if store['owner_id'] != owner_id:
            raise PermissionDeniedError("Only the store owner can change it", operation=operation)
        return store

__all__ = [
    'StoreManager',
    'StoreProvisioning',
    'ProvisioningState',
    'InvalidWalletAddressError',
    'LogoFile',
    'validate_wallet_address',
    'is_store_id'
]
