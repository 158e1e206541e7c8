"""Shared dependencies for the API routers."""

import logging
from typing import Any, Dict

from fastapi import Depends, HTTPException, status

from admin import AdminOperationError, AdminUserService, UserRole
from auth import AuthManager, get_current_user
from config import get_settings
from database import create_auth_client, get_admin_client, get_client
from database.exceptions import (
    ConflictError, ExternalServiceError, MarketplaceError, NotFoundError,
    PermissionDeniedError, ValidationError
)
from profiles import ProfileManager
from stores import StoreManager

logger = logging.getLogger(__name__)

def http_error(error: MarketplaceError) -> HTTPException:
    """Map a marketplace error onto an HTTP error response."""
    if isinstance(error, ValidationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, PermissionDeniedError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, ConflictError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, ExternalServiceError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=error.message)

def settings() -> Dict[str, Any]:
    return get_settings()

def data_client():
    """Client for table and storage access.

    Callers are authenticated by get_current_user before any data access,
    so the service-role client is preferred when it is configured.
    """
    try:
        return get_admin_client()
    except RuntimeError:
        return get_client()

async def auth_client(config: Dict[str, Any] = Depends(settings)):
    """Fresh anon-key client for one auth request.

    Signing in binds a client to the caller's session, so auth flows never
    run on the shared client. The client is dropped with the request.
    """
    return await create_auth_client(config)

def auth_manager(client=Depends(auth_client), data=Depends(data_client)) -> AuthManager:
    return AuthManager(client, profiles=ProfileManager(data))

def profile_manager(client=Depends(data_client)) -> ProfileManager:
    return ProfileManager(client)

def store_manager(
    client=Depends(data_client),
    config: Dict[str, Any] = Depends(settings)
) -> StoreManager:
    return StoreManager(client, bucket=config['store_assets_bucket'])

def admin_service(config: Dict[str, Any] = Depends(settings)) -> AdminUserService:
    try:
        client = get_admin_client()
    except RuntimeError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )
    return AdminUserService(
        client,
        enable_logging=config['admin_logging'],
        min_password_length=config['min_password_length']
    )

async def require_admin(
    user_id: str = Depends(get_current_user),
    service: AdminUserService = Depends(admin_service)
) -> str:
    """Dependency that only lets accounts holding the admin role through."""
    try:
        result = await service.get_user_roles(user_id)
    except AdminOperationError as e:
        raise http_error(e)

    if UserRole.ADMIN not in result['data']:
        logger.warning(f"Rejected admin request from {user_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required"
        )
    return user_id
