"""Profiles module for the application-level user records.

Every auth account has exactly one profile row keyed by the account id.
Profiles are created explicitly by the application with upsert semantics, so
a profile that already exists is returned untouched rather than duplicated.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

from database import execute_query
from database.exceptions import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

PROFILES_TABLE = 'profiles'

class UserType(str, Enum):
    """What a user does on the marketplace."""
    BUYER = 'buyer'
    SELLER = 'seller'
    BOTH = 'both'

    @property
    def can_sell(self) -> bool:
        return self is not UserType.BUYER

# User-mutable fields for profiles
MUTABLE_FIELDS = {
    'display_name',
    'user_type',
    'avatar_url',
    'bio'
}

# System-managed fields
SYSTEM_FIELDS = {
    'id',
    'email',
    'created_at',
    'updated_at'
}

class NoProfileError(NotFoundError):
    """Raised when an operation needs a profile that does not exist."""
    pass

def parse_user_type(value: Union[str, UserType]) -> UserType:
    """Convert a string into a UserType.

    Raises:
        ValidationError: If the value is not a known user type
    """
    try:
        return UserType(value)
    except ValueError:
        allowed = ', '.join(t.value for t in UserType)
        raise ValidationError(f"Invalid user type: {value}. Must be one of: {allowed}")

class ProfileManager:
    """Manager class for handling profile operations."""

    def __init__(self, client):
        """Initialize the profile manager.

        Args:
            client: Supabase async client used for all table access
        """
        self.client = client

    async def fetch_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get a profile by user id.

        Args:
            user_id: The auth account id

        Returns:
            The profile row, or None if the account has no profile

        Raises:
            ExternalServiceError: If the request itself fails
        """
        if not user_id:
            return None

        response = await execute_query(
            self.client.table(PROFILES_TABLE)
            .select('*')
            .eq('id', user_id)
            .limit(1),
            'fetch_profile'
        )
        return response.data[0] if response.data else None

    async def create_profile(
        self,
        user_id: str,
        user_type: Union[str, UserType],
        display_name: Optional[str] = None,
        email: Optional[str] = None,
        strict: bool = False
    ) -> Dict[str, Any]:
        """Create the profile for an account.

        The insert ignores an existing row for the same id, so repeated calls
        (or a row written by another path) leave exactly one profile.

        Args:
            user_id: The auth account id
            user_type: buyer, seller or both
            display_name: Optional display name
            email: Optional contact email
            strict: Raise ConflictError instead of returning an existing profile

        Returns:
            The profile row as stored

        Raises:
            ValidationError: If user_id is missing or user_type is unknown
            ConflictError: If strict and a profile already exists
        """
        if not user_id:
            raise ValidationError("User ID is required", operation='create_profile')
        user_type = parse_user_type(user_type)

        row = {
            'id': user_id,
            'user_type': user_type.value,
            'display_name': display_name or None,
            'email': email or None,
        }

        if strict:
            response = await execute_query(
                self.client.table(PROFILES_TABLE).insert(row),
                'create_profile'
            )
            return response.data[0]

        response = await execute_query(
            self.client.table(PROFILES_TABLE).upsert(
                row,
                on_conflict='id',
                ignore_duplicates=True
            ),
            'create_profile'
        )

        if response.data:
            logger.info(f"Created profile for {user_id} as {user_type.value}")
            return response.data[0]

        # Nothing returned means the row already existed
        existing = await self.fetch_profile(user_id)
        if existing is None:
            raise ConflictError(
                f"Profile for {user_id} was neither created nor found",
                operation='create_profile'
            )
        logger.info(f"Profile for {user_id} already exists, keeping it")
        return existing

    async def update_profile(self, user_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Update mutable profile fields.

        Args:
            user_id: The auth account id
            updates: Field values to change

        Returns:
            The updated profile row

        Raises:
            ValidationError: If updates touch non-mutable fields
            NoProfileError: If the account has no profile
        """
        invalid = set(updates) - MUTABLE_FIELDS
        if invalid:
            raise ValidationError(
                f"Cannot update fields: {', '.join(sorted(invalid))}",
                operation='update_profile'
            )
        if not updates:
            profile = await self.fetch_profile(user_id)
            if profile is None:
                raise NoProfileError(f"No profile for user {user_id}", operation='update_profile')
            return profile

        values = dict(updates)
        if 'user_type' in values:
            values['user_type'] = parse_user_type(values['user_type']).value
        values['updated_at'] = datetime.now(timezone.utc).isoformat()

        response = await execute_query(
            self.client.table(PROFILES_TABLE)
            .update(values)
            .eq('id', user_id),
            'update_profile'
        )
        if not response.data:
            raise NoProfileError(f"No profile for user {user_id}", operation='update_profile')
        return response.data[0]

    async def set_user_type(self, user_id: str, user_type: Union[str, UserType]) -> Dict[str, Any]:
        """Switch a user between buyer, seller and both."""
        return await self.update_profile(user_id, {'user_type': user_type})

    async def delete_profile(self, user_id: str) -> None:
        """Delete a profile row."""
        await execute_query(
            self.client.table(PROFILES_TABLE).delete().eq('id', user_id),
            'delete_profile'
        )

__all__ = [
    'ProfileManager',
    'UserType',
    'NoProfileError',
    'parse_user_type',
    'MUTABLE_FIELDS'
]
