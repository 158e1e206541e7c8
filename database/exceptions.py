"""Error hierarchy shared by every module that talks to Supabase.

SDK failures are translated into these types right after each external call,
so callers never inspect raw PostgREST, auth or storage errors.
"""
from typing import Optional

from supabase import AuthError, PostgrestAPIError, StorageException

class MarketplaceError(Exception):
    """Base exception for marketplace operations"""
    def __init__(self, message: str, operation: Optional[str] = None, code: Optional[str] = None):
        self.message = message
        self.operation = operation
        self.code = code
        super().__init__(f"{operation}: {message}" if operation else message)

class ValidationError(MarketplaceError):
    """Raised when input has the wrong shape or fails a format check"""
    pass

class PermissionDeniedError(MarketplaceError):
    """Raised when the caller's role does not allow the operation"""
    pass

class NotFoundError(MarketplaceError):
    """Raised when a required row does not exist"""
    pass

class ConflictError(MarketplaceError):
    """Raised when a row already exists"""
    pass

class ExternalServiceError(MarketplaceError):
    """Raised when Supabase rejects or fails a request"""
    pass

class SeedDataError(MarketplaceError):
    """Raised when seed data references rows that do not exist"""
    pass

class DatabaseSchemaError(MarketplaceError):
    """Raised when schema files are invalid or migrations fail"""
    pass

# PostgREST / Postgres error codes with a specific meaning for callers
POSTGREST_ERRORS = {
    '23505': ConflictError,     # unique_violation
    '23503': ValidationError,   # foreign_key_violation
    '23514': ValidationError,   # check_violation
    '22P02': ValidationError,   # invalid_text_representation
    'PGRST116': NotFoundError,  # zero rows for a single-row request
    '42501': PermissionDeniedError,  # insufficient_privilege (RLS)
}

# Auth codes for an email that is already registered
DUPLICATE_ACCOUNT_CODES = {'user_already_exists', 'email_exists'}

# Supabase auth error codes that describe bad input
AUTH_VALIDATION_CODES = {
    'validation_failed',
    'weak_password',
    'email_address_invalid',
    'email_address_not_authorized',
}

def translate_error(exc: Exception, operation: str) -> MarketplaceError:
    """Convert an SDK exception into the marketplace hierarchy.

    Args:
        exc: The exception raised by the Supabase client
        operation: Name of the operation that failed

    Returns:
        The translated error, ready to be raised
    """
    if isinstance(exc, MarketplaceError):
        return exc

    if isinstance(exc, PostgrestAPIError):
        code = exc.code
        error_type = POSTGREST_ERRORS.get(code, ExternalServiceError)
        return error_type(exc.message or str(exc), operation=operation, code=code)

    if isinstance(exc, AuthError):
        code = getattr(exc, 'code', None)
        status = getattr(exc, 'status', None)
        message = getattr(exc, 'message', None) or str(exc)
        if code in DUPLICATE_ACCOUNT_CODES:
            # A provider rejection, not a local uniqueness conflict
            return ExternalServiceError(message, operation=operation, code=code)
        if code in AUTH_VALIDATION_CODES or status == 422:
            return ValidationError(message, operation=operation, code=code)
        if code == 'user_not_found':
            return NotFoundError(message, operation=operation, code=code)
        return ExternalServiceError(message, operation=operation, code=code)

    if isinstance(exc, StorageException):
        return ExternalServiceError(str(exc), operation=operation)

    return ExternalServiceError(str(exc), operation=operation)

__all__ = [
    'MarketplaceError',
    'ValidationError',
    'PermissionDeniedError',
    'NotFoundError',
    'ConflictError',
    'ExternalServiceError',
    'SeedDataError',
    'DatabaseSchemaError',
    'DUPLICATE_ACCOUNT_CODES',
    'translate_error'
]
