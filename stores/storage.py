"""Object storage helpers for store assets."""

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath

from database import call_service

logger = logging.getLogger(__name__)

LOGO_PREFIX = 'store-logos'
DEFAULT_CONTENT_TYPE = 'application/octet-stream'

@dataclass
class LogoFile:
    """An uploaded logo image."""
    filename: str
    content: bytes
    content_type: str = DEFAULT_CONTENT_TYPE

    @property
    def extension(self) -> str:
        suffix = PurePosixPath(self.filename).suffix.lstrip('.').lower()
        return suffix or 'png'

def logo_key(store_id: str, logo: LogoFile) -> str:
    """Storage key for a store's logo, e.g. store-logos/<id>-logo.png"""
    return f"{LOGO_PREFIX}/{store_id}-logo.{logo.extension}"

async def upload_store_logo(client, bucket: str, store_id: str, logo: LogoFile) -> str:
    """Upload a logo and return its public URL.

    The key is deterministic per store, so uploading again replaces the
    previous logo.

    Raises:
        ExternalServiceError: If the upload or URL lookup fails
    """
    key = logo_key(store_id, logo)
    storage = client.storage.from_(bucket)

    await call_service(
        storage.upload(
            key,
            logo.content,
            {'content-type': logo.content_type, 'upsert': 'true'}
        ),
        'upload_store_logo'
    )
    logger.info(f"Uploaded logo for store {store_id} to {bucket}/{key}")

    return await call_service(storage.get_public_url(key), 'upload_store_logo')

async def remove_store_logo(client, bucket: str, store_id: str, logo: LogoFile) -> None:
    """Remove a store's logo object."""
    key = logo_key(store_id, logo)
    await call_service(
        client.storage.from_(bucket).remove([key]),
        'remove_store_logo'
    )
    logger.info(f"Removed logo {bucket}/{key}")
