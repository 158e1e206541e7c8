""" Search products in the catalog """
import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from database import execute_query
from database.exceptions import ValidationError
from .pagination import page_numbers, total_pages

logger = logging.getLogger(__name__)

MAX_PER_PAGE = 100

class SortOrder(str, Enum):
    """Product orderings offered by the marketplace filters."""
    NEWEST = 'newest'
    PRICE_ASC = 'price_asc'
    PRICE_DESC = 'price_desc'
    RATING = 'rating'
    POPULAR = 'popular'

# column, descending
SORT_COLUMNS = {
    SortOrder.NEWEST: ('created_at', True),
    SortOrder.PRICE_ASC: ('price', False),
    SortOrder.PRICE_DESC: ('price', True),
    SortOrder.RATING: ('rating', True),
    SortOrder.POPULAR: ('rating_count', True),
}

@dataclass
class ProductFilters:
    """Filters from the marketplace sidebar."""
    search_term: Optional[str] = None
    category: Optional[str] = None  # category slug, includes its subcategories
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    min_rating: Optional[Decimal] = None
    featured: Optional[bool] = None
    in_stock: bool = False
    seller_id: Optional[str] = None
    sort: SortOrder = SortOrder.NEWEST

async def list_categories(client) -> List[Dict[str, Any]]:
    """Get the category tree.

    Returns:
        Top level categories sorted by name, each with a 'children' list
    """
    response = await execute_query(
        client.table('categories').select('*').order('name'),
        'list_categories'
    )
    rows = response.data or []

    tree = [dict(row, children=[]) for row in rows if not row.get('parent_id')]
    by_id = {node['id']: node for node in tree}
    for row in rows:
        parent = by_id.get(row.get('parent_id'))
        if parent is not None:
            parent['children'].append(row)
    return tree

async def _category_ids(client, slug: str) -> List[str]:
    """Ids of a category and its direct subcategories."""
    response = await execute_query(
        client.table('categories').select('id, slug, parent_id'),
        'search_products'
    )
    rows = response.data or []
    root = next((row for row in rows if row['slug'] == slug), None)
    if root is None:
        return []
    return [root['id']] + [row['id'] for row in rows if row.get('parent_id') == root['id']]

async def search_products(
    client,
    filters: Optional[ProductFilters] = None,
    page: int = 1,
    per_page: int = 20
) -> Dict[str, Any]:
    """Search products with various filters.

    Args:
        client: Supabase async client
        filters: Optional filters, defaults to everything newest first
        page: 1-based page number
        per_page: Products per page (at most 100)

    Returns:
        Dict containing:
            - products: The products on this page
            - total_count: Number of products matching the filters
            - total_pages: Total number of pages
            - current_page: Current page number
            - pages: Page links for the pager

    Raises:
        ValidationError: If the page parameters or price range are invalid
    """
    filters = filters or ProductFilters()

    if page < 1:
        raise ValidationError("page must be at least 1", operation='search_products')
    if not 1 <= per_page <= MAX_PER_PAGE:
        raise ValidationError(
            f"per_page must be between 1 and {MAX_PER_PAGE}",
            operation='search_products'
        )
    if (filters.min_price is not None and filters.max_price is not None
            and filters.min_price > filters.max_price):
        raise ValidationError("min_price cannot exceed max_price", operation='search_products')

    empty = {
        'products': [],
        'total_count': 0,
        'total_pages': 0,
        'current_page': page,
        'pages': []
    }

    query = client.table('products').select('*', count='exact')

    if filters.category:
        category_ids = await _category_ids(client, filters.category)
        if not category_ids:
            return empty
        query = query.in_('category', category_ids)

    if filters.search_term:
        # PostgREST or-filter syntax; commas and parentheses would break it
        term = filters.search_term.replace(',', ' ').replace('(', ' ').replace(')', ' ').strip()
        if term:
            query = query.or_(f"title.ilike.%{term}%,description.ilike.%{term}%")

    if filters.min_price is not None:
        query = query.gte('price', str(filters.min_price))
    if filters.max_price is not None:
        query = query.lte('price', str(filters.max_price))
    if filters.min_rating is not None:
        query = query.gte('rating', str(filters.min_rating))
    if filters.featured is not None:
        query = query.eq('featured', filters.featured)
    if filters.in_stock:
        query = query.gt('stock', 0)
    if filters.seller_id:
        query = query.eq('seller_id', filters.seller_id)

    column, descending = SORT_COLUMNS[filters.sort]
    offset = (page - 1) * per_page
    query = query.order(column, desc=descending).range(offset, offset + per_page - 1)

    logger.debug(f"Searching products with {filters} page={page} per_page={per_page}")
    response = await execute_query(query, 'search_products')

    total_count = response.count if response.count is not None else len(response.data or [])
    pages = total_pages(total_count, per_page)
    return {
        'products': response.data or [],
        'total_count': total_count,
        'total_pages': pages,
        'current_page': page,
        'pages': page_numbers(page, pages)
    }
