import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from api_connector import ApiClient
from config import API_BASE_URL, RECENT_MOVEMENTS_LIMIT
from services.cache import cache
from services.formatting import format_brl, format_date, movement_type_label
from services.stock_models import (
    Product,
    StockMovement,
    StockPosition,
    as_categories,
    as_movements,
    as_products,
    identifier_key,
)
from services.stock_positions import compute_current_stock, recent_movements, summarize_stock

logger = logging.getLogger(__name__)

STOCK_COLUMNS = [
    'product_id', 'product_name', 'sku', 'category_id', 'category', 'price', 'price_label',
    'current_stock', 'min_stock', 'low_stock_flag',
]

MOVEMENT_COLUMNS = [
    'movement_id', 'created_at', 'date', 'product_id', 'product_name',
    'type', 'type_label', 'quantity', 'notes',
]

CATEGORY_COLUMNS = ['category_id', 'name', 'description', 'product_count']


@cache.memoize()
def fetch_inventory_snapshot(base_url: str, token: Optional[str]) -> Dict[str, List[Dict[str, Any]]]:
    """Raw categories, products and movements as returned by the API."""
    client = ApiClient(base_url, token=token)
    snapshot = {
        'categories': client.list_categories(),
        'products': client.list_products(),
        'movements': client.list_stock_movements(),
    }
    logger.info(
        f"Fetched inventory snapshot: {len(snapshot['categories'])} categories, "
        f"{len(snapshot['products'])} products, {len(snapshot['movements'])} movements"
    )
    return snapshot


def invalidate_inventory_snapshot(token: Optional[str], base_url: str = API_BASE_URL) -> None:
    cache.delete_memoized(fetch_inventory_snapshot, base_url, token)


def get_inventory_snapshot(token: Optional[str]) -> Dict[str, List[Dict[str, Any]]]:
    return fetch_inventory_snapshot(API_BASE_URL, token)


def _category_names(categories: Iterable[Any]) -> Dict[str, str]:
    return {
        identifier_key(category.id): category.name
        for category in as_categories(categories)
        if identifier_key(category.id) is not None
    }


def _product_category(product: Product, names: Dict[str, str]) -> str:
    if product.category_name:
        return product.category_name
    return names.get(identifier_key(product.category_id), 'Uncategorized')


def stock_positions_frame(positions: Iterable[StockPosition], categories: Optional[Iterable[Any]] = None) -> pd.DataFrame:
    names = _category_names(categories or [])
    rows = [
        {
            'product_id': position.product.id,
            'product_name': position.product.name or f'Product {position.product.id}',
            'sku': position.product.sku,
            'category_id': position.product.category_id,
            'category': _product_category(position.product, names),
            'price': position.product.price,
            'price_label': format_brl(position.product.price),
            'current_stock': position.current_stock,
            'min_stock': position.product.min_stock,
            'low_stock_flag': position.is_low_stock,
        }
        for position in positions
    ]
    if not rows:
        return pd.DataFrame(columns=STOCK_COLUMNS)
    return pd.DataFrame(rows, columns=STOCK_COLUMNS, dtype=object)


def movements_frame(movements: Iterable[Any], products: Optional[Iterable[Any]] = None) -> pd.DataFrame:
    """Movement rows for display; movements of deleted products are kept."""
    product_names = {
        identifier_key(product.id): product.name
        for product in as_products(products)
        if identifier_key(product.id) is not None
    }

    def _name(movement: StockMovement) -> str:
        name = product_names.get(identifier_key(movement.product_id))
        return name or movement.product_name or 'Unknown product'

    rows = [
        {
            'movement_id': movement.id,
            'created_at': movement.created_at.isoformat() if movement.created_at else None,
            'date': format_date(movement.created_at),
            'product_id': movement.product_id,
            'product_name': _name(movement),
            'type': movement.type,
            'type_label': movement_type_label(movement.type),
            'quantity': movement.quantity,
            'notes': movement.notes,
        }
        for movement in as_movements(movements)
    ]
    if not rows:
        return pd.DataFrame(columns=MOVEMENT_COLUMNS)
    return pd.DataFrame(rows, columns=MOVEMENT_COLUMNS, dtype=object)


def categories_frame(categories: Iterable[Any], products: Optional[Iterable[Any]] = None) -> pd.DataFrame:
    counts: Dict[str, int] = {}
    for product in as_products(products):
        key = identifier_key(product.category_id)
        if key is not None:
            counts[key] = counts.get(key, 0) + 1

    rows = [
        {
            'category_id': category.id,
            'name': category.name,
            'description': category.description,
            'product_count': counts.get(identifier_key(category.id), 0),
        }
        for category in as_categories(categories)
    ]
    if not rows:
        return pd.DataFrame(columns=CATEGORY_COLUMNS)
    return pd.DataFrame(rows, columns=CATEGORY_COLUMNS, dtype=object)


def build_stock_table(products, movements, categories=None) -> pd.DataFrame:
    """Product listing with stock derived from the movement ledger."""
    return stock_positions_frame(compute_current_stock(products, movements), categories)


def build_dashboard_data(snapshot: Dict[str, Any], today: Optional[date] = None) -> Dict[str, object]:
    products = snapshot.get('products') or []
    movements = snapshot.get('movements') or []
    categories = snapshot.get('categories') or []

    summary = summarize_stock(products, movements, categories, today)
    low_stock = stock_positions_frame(summary.low_stock, categories)
    recent = movements_frame(recent_movements(movements, RECENT_MOVEMENTS_LIMIT), products)

    return {
        'summary': summary,
        'low_stock': low_stock,
        'recent': recent,
        'movements': movements,
    }


def get_dashboard_data(token: Optional[str], today: Optional[date] = None) -> Dict[str, object]:
    return build_dashboard_data(get_inventory_snapshot(token), today)
