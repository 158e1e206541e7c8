"""Catalog API endpoints. These are public."""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from catalog import ProductFilters, SortOrder, list_categories, search_products
from database.exceptions import MarketplaceError
from ..deps import data_client, http_error

router = APIRouter(
    prefix="/catalog",
    tags=["Catalog"]
)

@router.get("/products")
async def get_products(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    min_price: Optional[Decimal] = Query(None),
    max_price: Optional[Decimal] = Query(None),
    min_rating: Optional[Decimal] = Query(None),
    featured: Optional[bool] = Query(None),
    in_stock: bool = Query(False),
    seller_id: Optional[str] = Query(None),
    sort: SortOrder = Query(SortOrder.NEWEST),
    page: int = Query(1),
    per_page: int = Query(20),
    client=Depends(data_client)
) -> Dict[str, Any]:
    """Search products with pagination metadata."""
    filters = ProductFilters(
        search_term=search,
        category=category,
        min_price=min_price,
        max_price=max_price,
        min_rating=min_rating,
        featured=featured,
        in_stock=in_stock,
        seller_id=seller_id,
        sort=sort
    )
    try:
        return await search_products(client, filters, page=page, per_page=per_page)
    except MarketplaceError as e:
        raise http_error(e)

@router.get("/categories")
async def get_categories(client=Depends(data_client)) -> List[Dict[str, Any]]:
    """Get the category tree."""
    try:
        return await list_categories(client)
    except MarketplaceError as e:
        raise http_error(e)

__all__ = ['router']
