"""Store API endpoints."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Security, UploadFile, status

from auth import get_current_user
from database.exceptions import MarketplaceError
from stores import LogoFile, StoreManager
from ..deps import http_error, store_manager

router = APIRouter(
    prefix="/stores",
    tags=["Stores"]
)

ALLOWED_LOGO_TYPES = {'image/png', 'image/jpeg', 'image/gif', 'image/webp', 'image/svg+xml'}

async def _read_logo(file: Optional[UploadFile]) -> Optional[LogoFile]:
    if file is None or not file.filename:
        return None
    if file.content_type not in ALLOWED_LOGO_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported logo type: {file.content_type}"
        )
    return LogoFile(
        filename=file.filename,
        content=await file.read(),
        content_type=file.content_type
    )

@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_store(
    name: str = Form(...),
    stellar_wallet_address: str = Form(...),
    description: Optional[str] = Form(None),
    logo: Optional[UploadFile] = File(None),
    user_id: str = Security(get_current_user),
    manager: StoreManager = Depends(store_manager)
):
    """Create a store for the authenticated seller.

    A failed logo upload does not fail the request; the response then
    reports the logo error and the store has no logo_url.
    """
    logo_file = await _read_logo(logo)
    try:
        provisioning = await manager.provision_store(
            user_id,
            {
                'name': name,
                'description': description,
                'stellar_wallet_address': stellar_wallet_address
            },
            logo_file
        )
    except MarketplaceError as e:
        raise http_error(e)

    return {
        "store": provisioning.store,
        "state": provisioning.state.value,
        "logo_error": provisioning.logo_error.message if provisioning.logo_error else None
    }

@router.get("/mine")
async def get_my_stores(
    user_id: str = Security(get_current_user),
    manager: StoreManager = Depends(store_manager)
) -> List[Dict[str, Any]]:
    """Get the stores owned by the authenticated user."""
    try:
        return await manager.get_stores_by_owner(user_id)
    except MarketplaceError as e:
        raise http_error(e)

@router.get("/{store_id}")
async def get_store(
    store_id: str,
    manager: StoreManager = Depends(store_manager)
) -> Dict[str, Any]:
    """Get a store by id."""
    try:
        store = await manager.get_store(store_id)
    except MarketplaceError as e:
        raise http_error(e)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Store {store_id} not found"
        )
    return store

@router.put("/{store_id}/logo")
async def replace_logo(
    store_id: str,
    logo: UploadFile = File(...),
    user_id: str = Security(get_current_user),
    manager: StoreManager = Depends(store_manager)
) -> Dict[str, Any]:
    """Replace the logo of a store owned by the authenticated user."""
    logo_file = await _read_logo(logo)
    if logo_file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Logo file is required"
        )
    try:
        return await manager.attach_logo(store_id, user_id, logo_file)
    except MarketplaceError as e:
        raise http_error(e)

__all__ = ['router']
