"""Authentication API endpoints."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from auth import AuthManager
from database.exceptions import (
    DUPLICATE_ACCOUNT_CODES, ExternalServiceError, MarketplaceError, ValidationError
)
from profiles import UserType
from ..deps import auth_manager, http_error, settings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)

# Routes the web frontend links to directly from auth emails
callback_router = APIRouter(
    prefix="/api/auth",
    tags=["Authentication"]
)

class SignUpRequest(BaseModel):
    """Request model for registering an account."""
    email: str
    password: str
    display_name: str
    user_type: UserType = UserType.BUYER

class LoginRequest(BaseModel):
    """Request model for password sign in."""
    email: str
    password: str

class ResetPasswordRequest(BaseModel):
    """Request model for a password reset email."""
    email: Optional[str] = None

# Cookies carrying the session exchanged at the auth callback
ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"

def safe_redirect_path(path: Optional[str], default: str) -> str:
    """Only allow redirects to paths on this site."""
    if not path or not path.startswith('/') or path.startswith('//'):
        return default
    return path

@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def sign_up(
    request: SignUpRequest,
    manager: AuthManager = Depends(auth_manager)
):
    """Register an account and create its profile."""
    try:
        profile = await manager.sign_up(
            request.email,
            request.password,
            request.display_name,
            request.user_type
        )
    except ExternalServiceError as e:
        if e.code in DUPLICATE_ACCOUNT_CODES:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=e.message
            )
        raise http_error(e)
    except MarketplaceError as e:
        raise http_error(e)
    return {
        "profile": profile,
        "confirmation_pending": profile is None
    }

@router.post("/login")
async def login(
    request: LoginRequest,
    manager: AuthManager = Depends(auth_manager)
) -> Dict[str, Any]:
    """Sign in with email and password."""
    try:
        return await manager.sign_in(request.email, request.password)
    except ValidationError as e:
        raise http_error(e)
    except ExternalServiceError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message
        )
    except MarketplaceError as e:
        raise http_error(e)

@callback_router.get("/callback")
async def auth_callback(
    request: Request,
    code: Optional[str] = Query(None),
    redirect_to: Optional[str] = Query(None, alias="redirectTo"),
    manager: AuthManager = Depends(auth_manager),
    config: Dict[str, Any] = Depends(settings)
):
    """Exchange an auth code for a session, then redirect.

    The session is handed to the browser as http-only cookies. The redirect
    happens whether or not the exchange succeeded.
    """
    session = None
    if code:
        try:
            session = await manager.exchange_code_for_session(code)
        except MarketplaceError as e:
            logger.warning(f"Auth code exchange failed: {e}")

    target = safe_redirect_path(redirect_to, config['auth_callback_redirect'])
    response = RedirectResponse(url=str(request.base_url).rstrip('/') + target)

    if session and session['access_token']:
        secure = request.url.scheme == 'https'
        response.set_cookie(
            ACCESS_TOKEN_COOKIE, session['access_token'],
            httponly=True, secure=secure, samesite="lax"
        )
        if session['refresh_token']:
            response.set_cookie(
                REFRESH_TOKEN_COOKIE, session['refresh_token'],
                httponly=True, secure=secure, samesite="lax"
            )
    return response

@callback_router.post("/reset-password")
async def reset_password(
    body: ResetPasswordRequest,
    request: Request,
    manager: AuthManager = Depends(auth_manager),
    config: Dict[str, Any] = Depends(settings)
):
    """Send a password reset email."""
    if not body.email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email is required"
        )

    redirect_to = str(request.base_url).rstrip('/') + config['password_reset_redirect']
    try:
        await manager.reset_password_for_email(body.email, redirect_to=redirect_to)
    except MarketplaceError as e:
        # Provider rejections are reported to the client as bad requests
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )
    return {"message": "Password reset email sent"}

__all__ = ['router', 'callback_router']
