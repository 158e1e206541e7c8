"""Database module for managing Supabase clients and schema migrations.

This module handles:
- Public (anon key) and admin (service-role key) client construction
- Client lifecycle for the API process
- Schema migrations against the project's Postgres database

Services never reach for the module level clients directly; they receive a
client in their constructor. The module level clients exist for the API's
dependency providers.
"""

import logging
from typing import Optional, Dict, Any

import asyncpg
import backoff
from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from .exceptions import DatabaseSchemaError, translate_error
from .lib.schema_manager import SchemaManager

logger = logging.getLogger(__name__)

_client: Optional[AsyncClient] = None
_admin_client: Optional[AsyncClient] = None

async def create_public_client(settings: Dict[str, Any]) -> AsyncClient:
    """Create a client authenticated with the public anonymous key.

    The client keeps no session. Signing in rebinds a client's Authorization
    header to the signed in account, so sign in flows must use
    create_auth_client() instead of a shared client.

    Args:
        settings: Loaded settings containing the Supabase URL and anon key

    Returns:
        A new Supabase async client
    """
    return await acreate_client(
        settings['NEXT_PUBLIC_SUPABASE_URL'],
        settings['NEXT_PUBLIC_SUPABASE_ANON_KEY'],
        options=AsyncClientOptions(
            persist_session=False,
            auto_refresh_token=False
        )
    )

async def create_auth_client(settings: Dict[str, Any]) -> AsyncClient:
    """Create a short lived client for a single sign in, sign up or code exchange.

    The session it receives belongs to one caller and is discarded with the
    client.

    Args:
        settings: Loaded settings containing the Supabase URL and anon key

    Returns:
        A new Supabase async client
    """
    return await create_public_client(settings)

async def create_admin_client(settings: Dict[str, Any]) -> AsyncClient:
    """Create a client authenticated with the privileged service-role key.

    The service-role key bypasses row level security and must stay server side.

    Args:
        settings: Loaded settings containing the Supabase URL and service-role key

    Returns:
        A new Supabase async client

    Raises:
        ValueError: If the service-role key is not configured
    """
    service_key = settings.get('SUPABASE_SERVICE_ROLE_KEY')
    if not service_key:
        raise ValueError("SUPABASE_SERVICE_ROLE_KEY is required for admin operations")

    return await acreate_client(
        settings['NEXT_PUBLIC_SUPABASE_URL'],
        service_key,
        options=AsyncClientOptions(
            persist_session=False,
            auto_refresh_token=False
        )
    )

async def init_clients(settings: Optional[Dict[str, Any]] = None) -> None:
    """Initialize the process-wide clients used by the API.

    The admin client is only created when a service-role key is configured.

    Args:
        settings: Optional settings. If not provided, will load from config.
    """
    global _client, _admin_client

    if settings is None:
        # Import here to avoid circular imports
        from config import get_settings
        settings = get_settings()

    _client = await create_public_client(settings)
    logger.info("Initialized public Supabase client")

    if settings.get('SUPABASE_SERVICE_ROLE_KEY'):
        _admin_client = await create_admin_client(settings)
        logger.info("Initialized admin Supabase client")
    else:
        logger.warning("No service-role key configured, admin operations are disabled")

def get_client() -> AsyncClient:
    """Get the public client.

    Raises:
        RuntimeError: If clients haven't been initialized
    """
    if _client is None:
        raise RuntimeError("Supabase client not initialized, call init_clients() first")
    return _client

def get_admin_client() -> AsyncClient:
    """Get the admin client.

    Raises:
        RuntimeError: If no admin client is available
    """
    if _admin_client is None:
        raise RuntimeError("Admin client not initialized, a service-role key is required")
    return _admin_client

async def execute_query(query, operation: str):
    """Execute a PostgREST or RPC request builder and translate failures.

    Args:
        query: A request builder with an async execute() method
        operation: Name of the calling operation, carried by raised errors

    Returns:
        The API response

    Raises:
        MarketplaceError: The translated failure
    """
    try:
        return await query.execute()
    except Exception as e:
        error = translate_error(e, operation)
        logger.error(f"Error in {operation}: {error.message}")
        raise error from e

async def call_service(awaitable, operation: str):
    """Await an auth, storage or admin SDK call and translate failures.

    Args:
        awaitable: The pending SDK call
        operation: Name of the calling operation, carried by raised errors

    Returns:
        Whatever the SDK call returns

    Raises:
        MarketplaceError: The translated failure
    """
    try:
        return await awaitable
    except Exception as e:
        error = translate_error(e, operation)
        logger.error(f"Error in {operation}: {error.message}")
        raise error from e

async def close() -> None:
    """Sign out the public client and drop both clients."""
    global _client, _admin_client

    if _client is not None:
        try:
            await _client.auth.sign_out()
        except Exception as e:
            logger.warning(f"Error signing out public client: {e}")
    _client = None
    _admin_client = None

@backoff.on_exception(
    backoff.expo,
    (OSError, asyncpg.exceptions.PostgresConnectionError, asyncpg.exceptions.CannotConnectNowError),
    max_tries=5
)
async def _create_pool(db_url: str) -> asyncpg.Pool:
    """Create a small connection pool for running migrations."""
    return await asyncpg.create_pool(
        db_url,
        min_size=1,
        max_size=2,
        command_timeout=60.0,
        # Supabase's pooler does not support prepared statement caching
        statement_cache_size=0
    )

async def migrate(db_url: Optional[str] = None) -> int:
    """Apply pending schema migrations to the project's Postgres database.

    Args:
        db_url: Optional database URL. If not provided, will use settings.

    Returns:
        The schema version after migrating

    Raises:
        ValueError: If database URL is not provided
        DatabaseSchemaError: If a migration fails
    """
    if not db_url:
        from config import get_settings
        db_url = get_settings().get('db_url')
    if not db_url:
        raise ValueError("Database URL not provided, set db_url in settings.conf")

    pool = await _create_pool(db_url)
    try:
        manager = SchemaManager(pool)
        await manager.initialize()
        return manager.current_version
    except DatabaseSchemaError:
        raise
    except Exception as e:
        logger.error(f"Migration failed: {e}")
        raise DatabaseSchemaError(str(e), operation='migrate')
    finally:
        await pool.close()

# Export public interface
__all__ = [
    'create_public_client',
    'create_auth_client',
    'create_admin_client',
    'init_clients',
    'get_client',
    'get_admin_client',
    'close',
    'execute_query',
    'call_service',
    'migrate'
]
