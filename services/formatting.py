from datetime import datetime
from typing import Iterable, Optional

import pandas as pd

from services.stock_models import local_date

MOVEMENT_TYPE_LABELS = {
    'IN': 'In',
    'OUT': 'Out',
}


def format_brl(value) -> str:
    """Brazilian currency, e.g. R$ 1.234,56."""
    try:
        amount = float(value or 0)
    except (TypeError, ValueError):
        amount = 0.0
    text = f'{abs(amount):,.2f}'.replace(',', '_').replace('.', ',').replace('_', '.')
    sign = '-' if amount < 0 else ''
    return f'{sign}R$ {text}'


def format_quantity(value) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int):
        return f'{value:,}'.replace(',', '.')
    return str(value)


def format_date(value: Optional[datetime]) -> str:
    day = local_date(value)
    return day.strftime('%d/%m/%Y') if day else '-'


def movement_type_label(movement_type: str) -> str:
    return MOVEMENT_TYPE_LABELS.get(movement_type, movement_type or '-')


def filter_frame(df: pd.DataFrame, term: Optional[str], columns: Iterable[str]) -> pd.DataFrame:
    """Case-insensitive substring search over the given columns."""
    term = (term or '').strip().lower()
    if df.empty or not term:
        return df
    mask = pd.Series(False, index=df.index)
    for column in columns:
        if column in df.columns:
            mask |= df[column].astype(str).str.lower().str.contains(term, regex=False, na=False)
    return df[mask]
