"""Inventory records and tolerant parsing of API payloads."""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Tuple

from config import INITIAL_STOCK_NOTE


@dataclass(frozen=True)
class Category:
    id: Any
    name: str
    description: str = ''


@dataclass(frozen=True)
class Product:
    id: Any
    name: str
    sku: str = ''
    price: float = 0.0
    min_stock: Any = 0
    category_id: Any = None
    category_name: Optional[str] = None


@dataclass(frozen=True)
class StockMovement:
    id: Any
    product_id: Any
    type: str
    quantity: Any
    created_at: Optional[datetime] = None
    notes: str = ''
    is_initial_stock: bool = False
    product_name: Optional[str] = None


@dataclass(frozen=True)
class StockPosition:
    product: Product
    current_stock: Any

    @property
    def product_id(self):
        return self.product.id

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.product.min_stock


def safe_float(value: Any, default: float = 0.0) -> float:
    """Safely convert value to float."""
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def safe_quantity(value: Any) -> Any:
    """Numbers pass through untouched, numeric strings are parsed, anything else is 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return 0
    return 0


def identifier_key(value: Any) -> Optional[str]:
    """Grouping key for identifiers, so that 7 and "7" refer to the same record."""
    if value is None or value == '':
        return None
    return str(value)


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def local_date(value: Optional[datetime]) -> Optional[date]:
    """Calendar day of a timestamp in the local time zone; naive values are already local."""
    if value is None:
        return None
    if value.tzinfo is not None:
        try:
            value = value.astimezone()
        except (OverflowError, OSError, ValueError):
            return None
    return value.date()


def _reference(value: Any) -> Tuple[Any, Optional[str]]:
    """Split an embedded reference ({id, name}, [id, name] or a bare id) into (id, name)."""
    if isinstance(value, dict):
        return value.get('id'), value.get('name')
    if isinstance(value, (list, tuple)) and value:
        return value[0], (value[1] if len(value) >= 2 else None)
    if isinstance(value, (int, str)):
        return value, None
    return None, None


def _first(raw: dict, *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def parse_category(raw: Any) -> Optional[Category]:
    if isinstance(raw, Category):
        return raw
    if not isinstance(raw, dict):
        return None
    return Category(
        id=raw.get('id'),
        name=str(raw.get('name') or ''),
        description=str(raw.get('description') or ''),
    )


def parse_product(raw: Any) -> Optional[Product]:
    if isinstance(raw, Product):
        return raw
    if not isinstance(raw, dict):
        return None

    category_id, category_name = _reference(raw.get('category'))
    explicit_category = _first(raw, 'category_id', 'categoryId')
    if explicit_category is not None:
        category_id = explicit_category

    return Product(
        id=raw.get('id'),
        name=str(raw.get('name') or ''),
        sku=str(raw.get('sku') or ''),
        price=safe_float(raw.get('price')),
        min_stock=safe_quantity(_first(raw, 'minStock', 'min_stock')),
        category_id=category_id,
        category_name=category_name,
    )


def parse_movement(raw: Any, initial_note: str = INITIAL_STOCK_NOTE) -> Optional[StockMovement]:
    if isinstance(raw, StockMovement):
        return raw
    if not isinstance(raw, dict):
        return None

    product_id, product_name = _reference(raw.get('product'))
    explicit_product = _first(raw, 'product_id', 'productId')
    if explicit_product is not None:
        product_id = explicit_product

    notes = _first(raw, 'notes', 'note')
    notes = notes if isinstance(notes, str) else ''

    # An explicit flag from the API wins over the sentinel note
    flag = _first(raw, 'is_initial_stock', 'isInitialStock')
    is_initial_stock = bool(flag) if flag is not None else notes == initial_note

    return StockMovement(
        id=raw.get('id'),
        product_id=product_id,
        type=str(raw.get('type') or '').strip().upper(),
        quantity=safe_quantity(raw.get('quantity')),
        created_at=parse_timestamp(_first(raw, 'created_at', 'createdAt', 'date')),
        notes=notes,
        is_initial_stock=is_initial_stock,
        product_name=product_name,
    )


def as_categories(items: Optional[Iterable[Any]]) -> List[Category]:
    parsed = (parse_category(item) for item in (items or []))
    return [item for item in parsed if item is not None]


def as_products(items: Optional[Iterable[Any]]) -> List[Product]:
    parsed = (parse_product(item) for item in (items or []))
    return [item for item in parsed if item is not None]


def as_movements(items: Optional[Iterable[Any]]) -> List[StockMovement]:
    parsed = (parse_movement(item) for item in (items or []))
    return [item for item in parsed if item is not None]
