"""Profile management endpoints."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Security, status
from pydantic import BaseModel

from auth import get_current_user
from database.exceptions import MarketplaceError
from navigation import SECTION_ROUTES, resolve_section, sections_for
from profiles import ProfileManager, UserType, parse_user_type
from ..deps import http_error, profile_manager

router = APIRouter(
    prefix="/profile",
    tags=["Profile"]
)

class ProfileUpdate(BaseModel):
    """Model for profile updates."""
    display_name: Optional[str] = None
    user_type: Optional[UserType] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None

async def _load_profile(manager: ProfileManager, user_id: str) -> Dict[str, Any]:
    try:
        profile = await manager.fetch_profile(user_id)
    except MarketplaceError as e:
        raise http_error(e)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No user profile found"
        )
    return profile

@router.get("/")
async def get_profile(
    user_id: str = Security(get_current_user),
    manager: ProfileManager = Depends(profile_manager)
):
    """Get the authenticated user's profile."""
    return await _load_profile(manager, user_id)

@router.patch("/")
async def update_profile(
    update: ProfileUpdate,
    user_id: str = Security(get_current_user),
    manager: ProfileManager = Depends(profile_manager)
):
    """Update the authenticated user's profile."""
    updates = update.model_dump(exclude_unset=True)
    if 'user_type' in updates and updates['user_type'] is not None:
        updates['user_type'] = updates['user_type'].value
    try:
        return await manager.update_profile(user_id, updates)
    except MarketplaceError as e:
        raise http_error(e)

@router.get("/navigation")
async def get_navigation(
    user_id: str = Security(get_current_user),
    manager: ProfileManager = Depends(profile_manager)
) -> List[Dict[str, str]]:
    """Get the dashboard sidebar entries for the authenticated user."""
    profile = await _load_profile(manager, user_id)
    return sections_for(profile['user_type'])

@router.get("/navigation/{section}")
async def get_section(
    section: str,
    user_id: str = Security(get_current_user),
    manager: ProfileManager = Depends(profile_manager)
) -> Dict[str, str]:
    """Resolve a sidebar entry to its route."""
    try:
        target = SECTION_ROUTES[resolve_section(section)]
    except MarketplaceError as e:
        raise http_error(e)

    if target.seller_only:
        profile = await _load_profile(manager, user_id)
        if not parse_user_type(profile['user_type']).can_sell:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Section is only available to sellers"
            )
    return {'section': section, 'title': target.title, 'route': target.route}

__all__ = ['router']
