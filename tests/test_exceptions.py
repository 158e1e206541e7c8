"""Tests for SDK error translation."""

import pytest
from supabase import AuthApiError, PostgrestAPIError

from database import call_service, execute_query
from database.exceptions import (
    ConflictError, ExternalServiceError, MarketplaceError, NotFoundError,
    PermissionDeniedError, ValidationError, translate_error
)
from fakes import storage_error

def postgrest_error(code):
    return PostgrestAPIError({'code': code, 'message': f'error {code}', 'hint': None, 'details': None})

@pytest.mark.parametrize("code, expected", [
    ('23505', ConflictError),
    ('23503', ValidationError),
    ('22P02', ValidationError),
    ('PGRST116', NotFoundError),
    ('42501', PermissionDeniedError),
    ('08006', ExternalServiceError),
])
def test_postgrest_codes(code, expected):
    """Test that Postgres error codes map onto the hierarchy."""
    error = translate_error(postgrest_error(code), 'insert_row')

    assert type(error) is expected
    assert error.operation == 'insert_row'
    assert error.code == code
    assert str(error) == f"insert_row: error {code}"

@pytest.mark.parametrize("status, code, expected", [
    (422, 'user_already_exists', ExternalServiceError),
    (422, 'email_exists', ExternalServiceError),
    (422, 'weak_password', ValidationError),
    (400, 'email_address_invalid', ValidationError),
    (422, None, ValidationError),
    (404, 'user_not_found', NotFoundError),
    (400, 'invalid_credentials', ExternalServiceError),
    (500, 'unexpected_failure', ExternalServiceError),
])
def test_auth_codes(status, code, expected):
    """Test that auth provider errors map onto the hierarchy."""
    error = translate_error(AuthApiError("rejected", status, code), 'sign_up')

    assert type(error) is expected
    assert error.message == "rejected"

def test_storage_and_unknown_errors():
    assert isinstance(translate_error(storage_error(), 'upload'), ExternalServiceError)
    assert isinstance(translate_error(RuntimeError("boom"), 'upload'), ExternalServiceError)

def test_marketplace_errors_pass_through():
    original = NotFoundError("missing", operation='fetch')
    assert translate_error(original, 'other') is original

class FailingQuery:
    async def execute(self):
        raise postgrest_error('23505')

@pytest.mark.asyncio
async def test_execute_query_translates_and_chains():
    """Test that execute_query raises the translated error from the SDK error."""
    with pytest.raises(ConflictError) as exc_info:
        await execute_query(FailingQuery(), 'create_store')

    assert exc_info.value.operation == 'create_store'
    assert isinstance(exc_info.value.__cause__, PostgrestAPIError)

@pytest.mark.asyncio
async def test_call_service_translates():
    async def rejected():
        raise AuthApiError("User not found", 404, 'user_not_found')

    with pytest.raises(MarketplaceError) as exc_info:
        await call_service(rejected(), 'delete_user')

    assert isinstance(exc_info.value, NotFoundError)
