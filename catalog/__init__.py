"""Catalog module for categories, products and product images.

This module provides functionality for:
- Idempotent seeding of the sample catalog
- Searching and filtering products
- Category trees and pagination for the marketplace
"""

from .seed import CatalogSeeder, seed_database
from .search import ProductFilters, SortOrder, list_categories, search_products
from .pagination import page_numbers, total_pages

__all__ = [
    'CatalogSeeder',
    'seed_database',
    'ProductFilters',
    'SortOrder',
    'list_categories',
    'search_products',
    'page_numbers',
    'total_pages'
]
