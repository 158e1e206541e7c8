"""Authentication module backed by Supabase Auth.

This module provides:
1. Account sign up followed by profile creation
2. Password sign in, sign out and password reset requests
3. OAuth code exchange for the callback redirect
4. Access token verification and a FastAPI dependency for protecting routes
"""

import logging
from typing import Any, Dict, Optional, Union

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt

from database import call_service
from database.exceptions import MarketplaceError, ValidationError
from profiles import ProfileManager, UserType, parse_user_type

# Configure logging
logger = logging.getLogger(__name__)

# Constants
JWT_ALGORITHM = "HS256"
JWT_AUDIENCE = "authenticated"

class AuthError(MarketplaceError):
    """Raised when an access token cannot be verified."""
    pass

class SessionExpiredError(AuthError):
    """Raised when an access token has expired."""
    pass

class AuthManager:
    """Coordinates the auth provider with profile bootstrapping."""

    def __init__(self, client, profiles: Optional[ProfileManager] = None):
        """Initialize auth manager.

        Args:
            client: Supabase async client
            profiles: Optional profile manager sharing the same client
        """
        self.client = client
        self.profiles = profiles or ProfileManager(client)

    async def sign_up(
        self,
        email: str,
        password: str,
        display_name: str,
        user_type: Union[str, UserType]
    ) -> Optional[Dict[str, Any]]:
        """Register an account and create its profile.

        The provider validates the email format and password strength; its
        rejections surface as ValidationError or ExternalServiceError.

        Args:
            email: Account email
            password: Account password
            display_name: Name shown on the marketplace
            user_type: buyer, seller or both

        Returns:
            The profile row, or None when the provider created no user yet
            (for example while email confirmation is pending)

        Raises:
            ValidationError: If email or password is missing or rejected as malformed
            ExternalServiceError: If the provider rejects the request
        """
        if not email or not password:
            raise ValidationError("Email and password are required", operation='sign_up')
        user_type = parse_user_type(user_type)

        response = await call_service(
            self.client.auth.sign_up({
                'email': email,
                'password': password,
                'options': {
                    'data': {
                        'display_name': display_name,
                        'user_type': user_type.value,
                    }
                }
            }),
            'sign_up'
        )

        user = getattr(response, 'user', None)
        if user is None:
            logger.info(f"Sign up for {email} returned no user, profile deferred")
            return None

        logger.info(f"Registered account {user.id}")
        return await self.profiles.create_profile(
            user.id,
            user_type,
            display_name=display_name,
            email=email
        )

    async def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """Sign in with email and password.

        Returns:
            Dict containing:
                - user_id: The account id
                - access_token: Bearer token for API requests
                - refresh_token: Token for refreshing the session
                - expires_at: Unix timestamp when the access token expires
        """
        if not email or not password:
            raise ValidationError("Email and password are required", operation='sign_in')

        response = await call_service(
            self.client.auth.sign_in_with_password({
                'email': email,
                'password': password
            }),
            'sign_in'
        )
        session = response.session
        return {
            'user_id': response.user.id,
            'access_token': session.access_token,
            'refresh_token': session.refresh_token,
            'expires_at': session.expires_at
        }

    async def sign_out(self) -> None:
        """End the client's current session."""
        await call_service(self.client.auth.sign_out(), 'sign_out')

    async def reset_password_for_email(self, email: str, redirect_to: Optional[str] = None) -> None:
        """Send a password reset email.

        Args:
            email: Account email
            redirect_to: Absolute URL of the page that completes the reset
        """
        if not email:
            raise ValidationError("Email is required", operation='reset_password_for_email')

        options = {'redirect_to': redirect_to} if redirect_to else {}
        await call_service(
            self.client.auth.reset_password_for_email(email, options),
            'reset_password_for_email'
        )

    async def exchange_code_for_session(self, code: str) -> Dict[str, Any]:
        """Exchange an OAuth or magic link code for a session.

        Returns:
            Dict with user_id, access_token, refresh_token and expires_at.
            The token fields are None when the provider returned no session.
        """
        if not code:
            raise ValidationError("Code is required", operation='exchange_code_for_session')

        response = await call_service(
            self.client.auth.exchange_code_for_session({'auth_code': code}),
            'exchange_code_for_session'
        )
        session = response.session
        return {
            'user_id': response.user.id if response.user else None,
            'access_token': session.access_token if session else None,
            'refresh_token': session.refresh_token if session else None,
            'expires_at': session.expires_at if session else None
        }

    async def get_current_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get the profile of the signed in account, or None."""
        return await self.profiles.fetch_profile(user_id)

def verify_access_token(token: str, secret: str) -> str:
    """Verify a Supabase access token.

    Args:
        token: The bearer token
        secret: The project's JWT secret

    Returns:
        The account id from the token subject

    Raises:
        SessionExpiredError: If the token has expired
        AuthError: For any other verification failure
    """
    if not secret:
        raise AuthError("JWT secret is not configured")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            audience=JWT_AUDIENCE
        )
    except jwt.ExpiredSignatureError:
        raise SessionExpiredError("Session has expired")
    except jwt.JWTError as e:
        raise AuthError(f"Invalid token: {str(e)}")

    user_id = payload.get('sub')
    if not user_id:
        raise AuthError("Token has no subject")
    return user_id

def get_jwt_secret() -> str:
    """FastAPI dependency returning the configured JWT secret."""
    # Import here so importing auth does not require settings.conf
    from config import get_settings
    return get_settings().get('SUPABASE_JWT_SECRET', '')

# FastAPI security scheme
auth_scheme = HTTPBearer(
    auto_error=True,  # Return 401 automatically if token is missing
    description="Supabase access token required"
)

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(auth_scheme),
    secret: str = Depends(get_jwt_secret)
) -> str:
    """FastAPI dependency for getting the authenticated account id.

    Raises:
        HTTPException: If authentication fails
    """
    try:
        return verify_access_token(credentials.credentials, secret)
    except SessionExpiredError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session has expired"
        )
    except AuthError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e)
        )

# Export public interface
__all__ = [
    'AuthManager',
    'verify_access_token',
    'get_current_user',
    'get_jwt_secret',
    'auth_scheme',
    'AuthError',
    'SessionExpiredError'
]
