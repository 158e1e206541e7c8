"""Admin operations that need the service-role client.

Every operation validates its arguments before touching Supabase, runs its
privileged calls, and wraps any failure in AdminOperationError carrying the
operation name. When logging is enabled each operation writes start,
completion and failure audit lines.
"""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar, Union

from database import call_service, execute_query
from database.exceptions import ConflictError, ExternalServiceError, MarketplaceError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar('T')

ROLES_TABLE = 'user_roles'
DEFAULT_MIN_PASSWORD_LENGTH = 8

class UserRole(str, Enum):
    """Coarse authorization tags, independent of the profile user type."""
    ADMIN = 'admin'
    SELLER = 'seller'
    USER = 'user'

class DeletionState(str, Enum):
    """Progress of a complete user deletion."""
    PENDING = 'pending'
    DATA_PURGED = 'data_purged'
    COMPLETED = 'completed'

class AdminOperationError(ExternalServiceError):
    """Raised when a privileged operation fails.

    Attributes:
        operation: Name of the failed operation
        state: For multi-step operations, the last step that completed
    """
    def __init__(self, operation: str, message: str, state: Optional[DeletionState] = None):
        self.state = state
        super().__init__(f"Admin operation failed: {operation} - {message}", operation=operation)

def parse_role(role: Union[str, UserRole]) -> UserRole:
    """Convert a string into a UserRole.

    Raises:
        ValidationError: If the role is not known
    """
    try:
        return UserRole(role)
    except ValueError:
        allowed = ', '.join(r.value for r in UserRole)
        raise ValidationError(f"Invalid role: {role}. Must be one of: {allowed}")

class AdminUserService:
    """Privileged user management over the service-role client."""

    def __init__(
        self,
        client,
        enable_logging: bool = False,
        min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH
    ):
        """Initialize the admin service.

        Args:
            client: Supabase client created with the service-role key
            enable_logging: Write audit lines for each operation
            min_password_length: Shortest password reset_password accepts
        """
        self.client = client
        self.enable_logging = enable_logging
        self.min_password_length = min_password_length

    def _audit(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        if self.enable_logging:
            logger.info(f"[ADMIN OPERATION] {message} {details or ''}".rstrip())

    async def _run(self, operation: str, callback: Callable[[], Awaitable[T]]) -> T:
        """Run an operation with audit logging and uniform error wrapping."""
        try:
            self._audit(f"Starting: {operation}")
            result = await callback()
            self._audit(f"Completed: {operation}")
            return result
        except AdminOperationError as e:
            self._audit(f"ERROR: {operation}", {'error': str(e)})
            raise
        except MarketplaceError as e:
            error = AdminOperationError(operation, e.message)
            self._audit(f"ERROR: {operation}", {'error': str(error)})
            raise error from e

    async def reset_password(self, user_id: str, new_password: str) -> Dict[str, Any]:
        """Set a new password for a user.

        Raises:
            ValidationError: If arguments are missing or the password is too short
            AdminOperationError: If the auth admin call fails
        """
        if not user_id or not new_password:
            raise ValidationError("User ID and new password are required", operation='reset_user_password')
        if len(new_password) < self.min_password_length:
            raise ValidationError(
                f"Password must be at least {self.min_password_length} characters long",
                operation='reset_user_password'
            )

        async def callback():
            await call_service(
                self.client.auth.admin.update_user_by_id(user_id, {'password': new_password}),
                'reset_user_password'
            )
            self._audit('Password reset', {'user_id': user_id})
            return {'success': True}

        return await self._run('reset_user_password', callback)

    async def delete_user_complete(self, user_id: str) -> Dict[str, Any]:
        """Purge a user's data, then delete the auth user.

        The purge cannot be undone. If the auth deletion fails afterwards,
        the raised AdminOperationError has state DATA_PURGED and
        delete_identity() finishes the job.

        Raises:
            ValidationError: If user_id is missing
            AdminOperationError: If either step fails
        """
        if not user_id:
            raise ValidationError("User ID is required", operation='delete_user_complete')

        operation = 'delete_user_complete'
        state = DeletionState.PENDING
        self._audit(f"Starting: {operation}")

        try:
            await execute_query(
                self.client.rpc('delete_user_data', {'user_id_param': user_id}),
                operation
            )
            state = DeletionState.DATA_PURGED
            self._audit('User data purged', {'user_id': user_id})

            await call_service(self.client.auth.admin.delete_user(user_id), operation)
            state = DeletionState.COMPLETED
        except MarketplaceError as e:
            step = 'delete user auth' if state is DeletionState.DATA_PURGED else 'delete user data'
            error = AdminOperationError(operation, f"Failed to {step}: {e.message}", state=state)
            if state is DeletionState.DATA_PURGED:
                logger.error(f"User {user_id} data was purged but the auth user remains")
            self._audit(f"ERROR: {operation}", {'error': str(error), 'state': state.value})
            raise error from e

        self._audit('User deleted completely', {'user_id': user_id})
        self._audit(f"Completed: {operation}")
        return {'success': True, 'data': {'state': state.value}}

    async def delete_identity(self, user_id: str) -> Dict[str, Any]:
        """Delete only the auth user, finishing an interrupted complete deletion."""
        if not user_id:
            raise ValidationError("User ID is required", operation='delete_user_identity')

        async def callback():
            await call_service(self.client.auth.admin.delete_user(user_id), 'delete_user_identity')
            return {'success': True}

        return await self._run('delete_user_identity', callback)

    async def _find_role(self, user_id: str, role: UserRole) -> Optional[Dict[str, Any]]:
        response = await execute_query(
            self.client.table(ROLES_TABLE)
            .select('*')
            .eq('user_id', user_id)
            .eq('role', role.value)
            .limit(1),
            'assign_user_role'
        )
        return response.data[0] if response.data else None

    async def assign_role(self, user_id: str, role: Union[str, UserRole]) -> Dict[str, Any]:
        """Grant a role. Granting a role the user already has succeeds.

        Raises:
            ValidationError: If arguments are missing or the role is unknown
            AdminOperationError: If the lookup or insert fails
        """
        if not user_id or not role:
            raise ValidationError("User ID and role are required", operation='assign_user_role')
        role = parse_role(role)

        async def callback():
            existing = await self._find_role(user_id, role)
            if existing:
                self._audit('Role already assigned', {'user_id': user_id, 'role': role.value})
                return {'success': True, 'data': existing}

            try:
                response = await execute_query(
                    self.client.table(ROLES_TABLE).insert({
                        'user_id': user_id,
                        'role': role.value
                    }),
                    'assign_user_role'
                )
            except ConflictError:
                # Another request inserted the same role first
                existing = await self._find_role(user_id, role)
                return {'success': True, 'data': existing}

            self._audit('Role assigned', {'user_id': user_id, 'role': role.value})
            return {'success': True, 'data': response.data[0]}

        return await self._run('assign_user_role', callback)

    async def remove_role(self, user_id: str, role: Union[str, UserRole]) -> Dict[str, Any]:
        """Revoke a role. Revoking a role the user does not have succeeds."""
        if not user_id or not role:
            raise ValidationError("User ID and role are required", operation='remove_user_role')
        role = parse_role(role)

        async def callback():
            await execute_query(
                self.client.table(ROLES_TABLE)
                .delete()
                .eq('user_id', user_id)
                .eq('role', role.value),
                'remove_user_role'
            )
            self._audit('Role removed', {'user_id': user_id, 'role': role.value})
            return {'success': True}

        return await self._run('remove_user_role', callback)

    async def get_user_roles(self, user_id: str) -> Dict[str, Any]:
        """List a user's roles.

        Returns:
            {'success': True, 'data': [UserRole, ...]}
        """
        if not user_id:
            raise ValidationError("User ID is required", operation='get_user_roles')

        async def callback():
            response = await execute_query(
                self.client.table(ROLES_TABLE)
                .select('role')
                .eq('user_id', user_id),
                'get_user_roles'
            )
            roles: List[UserRole] = [UserRole(item['role']) for item in response.data or []]
            return {'success': True, 'data': roles}

        return await self._run('get_user_roles', callback)

__all__ = [
    'AdminUserService',
    'AdminOperationError',
    'UserRole',
    'DeletionState',
    'parse_role'
]
