"""Idempotent catalog seeding.

Each stage (categories, products, product images) checks its own table and
is skipped when the table already has rows, so a partially seeded database
can be completed by running the seeder again.
"""

import logging
import random
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from database import execute_query
from database.exceptions import SeedDataError
from .seed_data import CATEGORIES, IMAGE_COLORS, IMAGE_VIEWS, PRODUCTS, SUBCATEGORIES

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50
MAX_IMAGES_PER_PRODUCT = 4
PLACEHOLDER_URL = 'https://via.placeholder.com/600x600/{color}/FFFFFF?text={text}'

def batched(rows: List[Dict[str, Any]], size: int):
    """Yield consecutive slices of at most size rows."""
    for start in range(0, len(rows), size):
        yield rows[start:start + size]

class CatalogSeeder:
    """Populates categories, products and product images."""

    def __init__(
        self,
        client,
        batch_size: int = DEFAULT_BATCH_SIZE,
        rng: Optional[random.Random] = None,
        seller_id: Optional[str] = None,
        categories: Optional[List[Dict[str, Any]]] = None,
        subcategories: Optional[List[Dict[str, Any]]] = None,
        products: Optional[List[Dict[str, Any]]] = None
    ):
        """Initialize the seeder.

        Args:
            client: Supabase client using the service-role key
            batch_size: Maximum rows per insert request
            rng: Random source for image counts
            seller_id: Optional seller to own the sample products
            categories: Top level categories, defaults to the sample catalog
            subcategories: Subcategories with a 'parent' slug
            products: Products with a 'category' slug
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.client = client
        self.batch_size = batch_size
        self.rng = rng or random.Random()
        self.seller_id = seller_id
        self.categories = CATEGORIES if categories is None else categories
        self.subcategories = SUBCATEGORIES if subcategories is None else subcategories
        self.products = PRODUCTS if products is None else products

    async def seed_database(self) -> Dict[str, int]:
        """Seed every stage that is still empty.

        Returns:
            Dict with the number of categories, products and product images present

        Raises:
            SeedDataError: If seed data references a missing category
            MarketplaceError: If an insert fails
        """
        logger.info("Starting database seeding...")

        categories = await self.seed_categories()
        products = await self.seed_products(categories)
        image_count = await self.seed_product_images(products)

        summary = {
            'categories': len(categories),
            'products': len(products),
            'product_images': image_count
        }
        logger.info(
            f"Database seeding completed: {summary['categories']} categories, "
            f"{summary['products']} products, {summary['product_images']} images"
        )
        return summary

    async def _fetch_all(self, table: str) -> List[Dict[str, Any]]:
        response = await execute_query(
            self.client.table(table).select('*'),
            f'seed_{table}'
        )
        return response.data or []

    async def _has_rows(self, table: str) -> bool:
        response = await execute_query(
            self.client.table(table).select('id').limit(1),
            f'seed_{table}'
        )
        return bool(response.data)

    async def _insert_batches(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert rows in batches; the first failing batch stops the rest."""
        inserted = []
        for index, batch in enumerate(batched(rows, self.batch_size)):
            try:
                response = await execute_query(
                    self.client.table(table).insert(batch),
                    f'seed_{table}'
                )
            except Exception as e:
                logger.error(f"Batch {index + 1} of {table} failed, aborting remaining batches: {e}")
                raise
            inserted.extend(response.data or [])
        return inserted

    async def seed_categories(self) -> List[Dict[str, Any]]:
        """Insert parent categories, then subcategories linked by parent id.

        Returns:
            All category rows
        """
        if await self._has_rows('categories'):
            existing = await self._fetch_all('categories')
            logger.info(f"Categories already exist: {len(existing)}")
            return existing

        parent_slugs = {category['slug'] for category in self.categories}
        for subcategory in self.subcategories:
            if subcategory['parent'] not in parent_slugs:
                raise SeedDataError(
                    f"Parent category '{subcategory['parent']}' not found "
                    f"for subcategory '{subcategory['slug']}'",
                    operation='seed_categories'
                )

        logger.info("Creating categories...")
        parents = await self._insert_batches('categories', [
            {
                'name': category['name'],
                'slug': category['slug'],
                'description': category.get('description')
            }
            for category in self.categories
        ])
        parent_ids = {row['slug']: row['id'] for row in parents}

        children = []
        for subcategory in self.subcategories:
            children.append({
                'name': subcategory['name'],
                'slug': subcategory['slug'],
                'description': subcategory.get('description'),
                'parent_id': parent_ids[subcategory['parent']]
            })

        inserted = parents + await self._insert_batches('categories', children)
        logger.info(f"Categories ready: {len(inserted)}")
        return inserted

    async def seed_products(self, categories: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert sample products in batches.

        Args:
            categories: Category rows used to resolve category slugs

        Returns:
            All product rows
        """
        if await self._has_rows('products'):
            existing = await self._fetch_all('products')
            logger.info(f"Products already exist: {len(existing)}")
            return existing

        category_ids = {row['slug']: row['id'] for row in categories}

        rows = []
        for product in self.products:
            category_id = category_ids.get(product['category'])
            if category_id is None:
                raise SeedDataError(
                    f"Category '{product['category']}' not found for product '{product['slug']}'",
                    operation='seed_products'
                )
            rows.append({
                'title': product['title'],
                'description': product.get('description'),
                # Decimals are sent as strings to keep their precision
                'price': str(product['price']),
                'category': category_id,
                'seller_id': self.seller_id,
                'stock': product.get('stock', 0),
                'slug': product['slug'],
                'featured': product.get('featured', False),
                'rating': str(product.get('rating', 0)),
                'rating_count': product.get('rating_count', 0)
            })

        logger.info(f"Creating {len(rows)} sample products...")
        inserted = await self._insert_batches('products', rows)
        logger.info(f"Products ready: {len(inserted)}")
        return inserted

    def build_images(self, product: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Generate between one and four placeholder images for a product."""
        count = self.rng.randint(1, MAX_IMAGES_PER_PRODUCT)
        images = []
        for order in range(count):
            view = IMAGE_VIEWS[order % len(IMAGE_VIEWS)]
            images.append({
                'product_id': product['id'],
                'url': PLACEHOLDER_URL.format(
                    color=IMAGE_COLORS[order % len(IMAGE_COLORS)],
                    text=quote(f"{product['title']} {view}")
                ),
                'alt_text': f"{product['title']} - {view}",
                'display_order': order,
                'is_primary': order == 0
            })
        return images

    async def seed_product_images(self, products: List[Dict[str, Any]]) -> int:
        """Insert placeholder images for every product.

        Returns:
            Number of product image rows present
        """
        if await self._has_rows('product_images'):
            existing = await self._fetch_all('product_images')
            logger.info(f"Product images already exist: {len(existing)}")
            return len(existing)

        rows = [image for product in products for image in self.build_images(product)]
        logger.info(f"Creating {len(rows)} product images...")
        inserted = await self._insert_batches('product_images', rows)
        return len(inserted)

async def seed_database(client, batch_size: int = DEFAULT_BATCH_SIZE, **kwargs) -> Dict[str, int]:
    """Seed the catalog with a fresh CatalogSeeder."""
    return await CatalogSeeder(client, batch_size=batch_size, **kwargs).seed_database()
