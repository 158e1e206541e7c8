"""Script to populate the marketplace with the sample catalog.

This script creates, when their tables are still empty:
- Top level categories and their subcategories
- Sample products, optionally owned by a seller account
- Placeholder images for every product

Running it again only fills in stages that were not completed.
"""

import argparse
import asyncio
import logging

from catalog import seed_database
from config import get_settings
from database import create_admin_client

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

async def main(seller_id=None):
    """Seed the catalog using the service-role client."""
    settings = get_settings()
    client = await create_admin_client(settings)

    summary = await seed_database(
        client,
        batch_size=settings['seed_batch_size'],
        seller_id=seller_id
    )

    print("\nSummary:")
    print(f"Categories: {summary['categories']}")
    print(f"Products: {summary['products']}")
    print(f"Product images: {summary['product_images']}")

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the sample catalog")
    parser.add_argument('--seller-id', default=None, help="Account that owns the sample products")
    args = parser.parse_args()

    try:
        asyncio.run(main(args.seller_id))
    except KeyboardInterrupt:
        print("\nSeeding interrupted by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise
