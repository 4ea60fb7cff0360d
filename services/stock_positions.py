"""
Current stock per product, derived from the movement ledger.

A product's stock is the quantity of its initial-stock movement (the first
one, by input order) plus every other IN movement minus every OUT movement.
Everything here is pure: inputs are never mutated and nothing is cached.
"""
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from config import RECENT_MOVEMENTS_LIMIT
from services.stock_models import (
    Product,
    StockMovement,
    StockPosition,
    as_categories,
    as_movements,
    as_products,
    identifier_key,
    local_date,
)


@dataclass(frozen=True)
class StockSummary:
    today: date
    total_products: int
    total_categories: int
    low_stock_count: int
    today_incoming: Any
    today_outgoing: Any
    today_incoming_value: float
    today_outgoing_value: float
    positions: Tuple[StockPosition, ...]
    low_stock: Tuple[StockPosition, ...]


def signed_quantity(movement: StockMovement):
    if movement.type == 'IN':
        return movement.quantity
    if movement.type == 'OUT':
        return -movement.quantity
    return 0


def group_movements(movements: Optional[Iterable[Any]]) -> Dict[str, List[StockMovement]]:
    """Movements per product key, input order preserved inside each group."""
    grouped: Dict[str, List[StockMovement]] = {}
    for movement in as_movements(movements):
        key = identifier_key(movement.product_id)
        if key is None:
            continue
        grouped.setdefault(key, []).append(movement)
    return grouped


def _fold_group(group: List[StockMovement]):
    initial_index = next(
        (index for index, movement in enumerate(group) if movement.is_initial_stock),
        None,
    )
    total = group[initial_index].quantity if initial_index is not None else 0
    for index, movement in enumerate(group):
        if index == initial_index:
            continue
        total += signed_quantity(movement)
    return total


def compute_current_stock(
    products: Optional[Iterable[Any]],
    movements: Optional[Iterable[Any]],
) -> List[StockPosition]:
    grouped = group_movements(movements)
    return [
        StockPosition(
            product=product,
            current_stock=_fold_group(grouped.get(identifier_key(product.id), [])),
        )
        for product in as_products(products)
    ]


def low_stock_products(positions: Iterable[StockPosition]) -> List[StockPosition]:
    return [position for position in positions if position.is_low_stock]


def today_movements(movements: Optional[Iterable[Any]], today: Optional[date] = None) -> List[StockMovement]:
    if today is None:
        today = date.today()
    return [m for m in as_movements(movements) if local_date(m.created_at) == today]


def _price_lookup(products: Iterable[Product]) -> Dict[str, float]:
    prices: Dict[str, float] = {}
    for product in products:
        key = identifier_key(product.id)
        if key is not None and key not in prices:
            prices[key] = product.price
    return prices


def today_totals(
    movements: Optional[Iterable[Any]],
    products: Optional[Iterable[Any]] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """IN/OUT quantities recorded today, plus their value at the current product price."""
    prices = _price_lookup(as_products(products))
    totals = {
        'incoming': 0,
        'outgoing': 0,
        'incoming_value': 0.0,
        'outgoing_value': 0.0,
    }
    for movement in today_movements(movements, today):
        value = movement.quantity * prices.get(identifier_key(movement.product_id), 0.0)
        if movement.type == 'IN':
            totals['incoming'] += movement.quantity
            totals['incoming_value'] += value
        elif movement.type == 'OUT':
            totals['outgoing'] += movement.quantity
            totals['outgoing_value'] += value
    return totals


def _sort_stamp(movement: StockMovement) -> Optional[float]:
    if movement.created_at is None:
        return None
    try:
        return movement.created_at.timestamp()
    except (OverflowError, OSError, ValueError):
        return None


def recent_movements(
    movements: Optional[Iterable[Any]],
    limit: int = RECENT_MOVEMENTS_LIMIT,
) -> List[StockMovement]:
    """Newest first; undated movements go last and ties keep input order."""
    stamped = [(movement, _sort_stamp(movement)) for movement in as_movements(movements)]
    stamped.sort(key=lambda pair: (pair[1] is None, -(pair[1] or 0.0)))
    return [movement for movement, _ in stamped[:max(0, limit)]]


def summarize_stock(
    products: Optional[Iterable[Any]],
    movements: Optional[Iterable[Any]],
    categories: Optional[Iterable[Any]] = None,
    today: Optional[date] = None,
) -> StockSummary:
    if today is None:
        today = date.today()

    catalog = as_products(products)
    ledger = as_movements(movements)
    positions = compute_current_stock(catalog, ledger)
    low_stock = low_stock_products(positions)
    totals = today_totals(ledger, catalog, today)

    return StockSummary(
        today=today,
        total_products=len(catalog),
        total_categories=len(as_categories(categories)),
        low_stock_count=len(low_stock),
        today_incoming=totals['incoming'],
        today_outgoing=totals['outgoing'],
        today_incoming_value=totals['incoming_value'],
        today_outgoing_value=totals['outgoing_value'],
        positions=tuple(positions),
        low_stock=tuple(low_stock),
    )
