import logging

import dash
from dash import dcc, Output, Input, State, no_update
import dash_mantine_components as dmc
from pydantic import ValidationError

from api_connector import ApiError, AuthenticationError, get_api_client
from components import data_table, error_alert, session_expired_alert, success_alert
from services.formatting import filter_frame
from services.forms import MovementForm, form_errors
from services.inventory_metrics import get_inventory_snapshot, invalidate_inventory_snapshot, movements_frame
from services.stock_models import as_products
from services.stock_positions import recent_movements

logger = logging.getLogger(__name__)

dash.register_page(
    __name__,
    path='/stock',
    name='Stock',
    title='Stock Movements'
)

TABLE_COLUMNS = [
    ('Date', 'date'),
    ('Product', 'product_name'),
    ('Type', 'type_label'),
    ('Quantity', 'quantity'),
    ('Notes', 'notes'),
]


def layout(**kwargs):
    return dmc.Container(
        [
            dcc.Store(id='stock-refresh', data=0),
            dmc.Group(
                [
                    dmc.Title('Stock Movements', order=2),
                    dmc.Button('New movement', id='stock-new'),
                ],
                justify='space-between',
            ),
            dmc.TextInput(id='stock-search', placeholder='Search movements...', w=320, mt='md', debounce=300),
            dmc.Box(id='stock-alert', mt='md'),
            dmc.Paper(
                data_table('stock-table', TABLE_COLUMNS, page_size=20),
                p='md',
                radius='md',
                withBorder=True,
                mt='md',
            ),
            dmc.Modal(
                id='stock-modal',
                title='New movement',
                opened=False,
                centered=True,
                children=dmc.Stack(
                    [
                        dmc.Select(id='stock-product', label='Product', data=[], searchable=True, required=True),
                        dmc.SegmentedControl(
                            id='stock-type',
                            value='IN',
                            data=[
                                {'value': 'IN', 'label': 'In'},
                                {'value': 'OUT', 'label': 'Out'},
                            ],
                            fullWidth=True,
                        ),
                        dmc.NumberInput(id='stock-quantity', label='Quantity', min=1, allowDecimal=False, value=1),
                        dmc.Textarea(id='stock-notes', label='Notes', autosize=True, minRows=2),
                        dmc.Box(id='stock-form-alert'),
                        dmc.Group(dmc.Button('Save', id='stock-save'), justify='flex-end'),
                    ],
                    gap='sm',
                ),
            ),
        ],
        size='lg',
        py='lg'
    )


def _product_options(products):
    return [
        {'value': str(product.id), 'label': product.name or f'Product {product.id}'}
        for product in as_products(products)
        if product.id is not None
    ]


@dash.callback(
    Output('stock-table', 'data'),
    Output('stock-product', 'data'),
    Output('stock-alert', 'children'),
    Input('stock-refresh', 'data'),
    Input('stock-search', 'value'),
    State('auth-token', 'data'),
    prevent_initial_call=False,
)
def load_movements(refresh, search, token):
    try:
        snapshot = get_inventory_snapshot(token)
    except AuthenticationError:
        return [], [], session_expired_alert()
    except ApiError as e:
        logger.warning(f"Movement fetch failed: {e.message}")
        return [], [], error_alert(e.message, title='Could not load stock movements')

    movements = snapshot['movements']
    df = movements_frame(recent_movements(movements, len(movements)), snapshot['products'])
    df = filter_frame(df, search, ['product_name', 'type_label', 'notes', 'date'])
    return df.to_dict('records'), _product_options(snapshot['products']), no_update


@dash.callback(
    Output('stock-modal', 'opened'),
    Output('stock-product', 'value'),
    Output('stock-type', 'value'),
    Output('stock-quantity', 'value'),
    Output('stock-notes', 'value'),
    Output('stock-form-alert', 'children'),
    Input('stock-new', 'n_clicks'),
    prevent_initial_call=True,
)
def open_movement_form(n_clicks):
    return True, None, 'IN', 1, '', None


@dash.callback(
    Output('stock-modal', 'opened', allow_duplicate=True),
    Output('stock-refresh', 'data'),
    Output('stock-form-alert', 'children', allow_duplicate=True),
    Output('stock-alert', 'children', allow_duplicate=True),
    Input('stock-save', 'n_clicks'),
    State('stock-product', 'value'),
    State('stock-type', 'value'),
    State('stock-quantity', 'value'),
    State('stock-notes', 'value'),
    State('stock-refresh', 'data'),
    State('auth-token', 'data'),
    prevent_initial_call=True,
)
def save_movement(n_clicks, product_id, movement_type, quantity, notes, refresh, token):
    if not n_clicks:
        return no_update, no_update, no_update, no_update

    try:
        form = MovementForm(product_id=product_id, type=movement_type, quantity=quantity, notes=notes)
    except ValidationError as e:
        return no_update, no_update, error_alert(form_errors(e), title='Check the form'), no_update

    try:
        get_api_client(token).create_stock_movement(form.to_payload())
    except ApiError as e:
        logger.warning(f"Recording movement failed: {e.message}")
        return no_update, no_update, error_alert(e.message, title='Could not record the movement'), no_update

    logger.info(f"Recorded {form.type} of {form.quantity} for product {form.product_id}")
    invalidate_inventory_snapshot(token)
    return False, (refresh or 0) + 1, None, success_alert('Movement recorded.')
