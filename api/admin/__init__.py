"""Admin API endpoints. Every route requires the admin role."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from admin import AdminOperationError, AdminUserService
from database.exceptions import MarketplaceError
from ..deps import admin_service, http_error, require_admin

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)]
)

class RoleRequest(BaseModel):
    role: str

class PasswordResetRequest(BaseModel):
    new_password: str

def _serialize_roles(result: Dict[str, Any]) -> Dict[str, Any]:
    return {'success': True, 'data': [role.value for role in result['data']]}

@router.get("/users/{user_id}/roles")
async def get_roles(
    user_id: str,
    service: AdminUserService = Depends(admin_service)
):
    """List a user's roles."""
    try:
        return _serialize_roles(await service.get_user_roles(user_id))
    except MarketplaceError as e:
        raise http_error(e)

@router.post("/users/{user_id}/roles")
async def assign_role(
    user_id: str,
    request: RoleRequest,
    service: AdminUserService = Depends(admin_service)
):
    """Grant a role. Granting a role the user already has succeeds."""
    try:
        return await service.assign_role(user_id, request.role)
    except MarketplaceError as e:
        raise http_error(e)

@router.delete("/users/{user_id}/roles/{role}")
async def remove_role(
    user_id: str,
    role: str,
    service: AdminUserService = Depends(admin_service)
):
    """Revoke a role."""
    try:
        return await service.remove_role(user_id, role)
    except MarketplaceError as e:
        raise http_error(e)

@router.post("/users/{user_id}/password")
async def reset_password(
    user_id: str,
    request: PasswordResetRequest,
    service: AdminUserService = Depends(admin_service)
):
    """Set a new password for a user."""
    try:
        return await service.reset_password(user_id, request.new_password)
    except MarketplaceError as e:
        raise http_error(e)

@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    service: AdminUserService = Depends(admin_service)
):
    """Delete a user's data and auth account."""
    try:
        return await service.delete_user_complete(user_id)
    except AdminOperationError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                'message': e.message,
                'state': e.state.value if e.state else None
            }
        )
    except MarketplaceError as e:
        raise http_error(e)

@router.delete("/users/{user_id}/identity")
async def delete_identity(
    user_id: str,
    service: AdminUserService = Depends(admin_service)
):
    """Delete only the auth account, finishing a deletion left in data_purged."""
    try:
        return await service.delete_identity(user_id)
    except MarketplaceError as e:
        raise http_error(e)

__all__ = ['router']
