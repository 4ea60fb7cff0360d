import logging

import dash
from dash import dcc, ctx, Output, Input, State, no_update
import dash_mantine_components as dmc
from pydantic import ValidationError

from api_connector import ApiError, AuthenticationError, InitialStockError, get_api_client
from components import data_table, error_alert, selected_record, session_expired_alert, success_alert
from services.formatting import filter_frame
from services.forms import ProductForm, form_errors
from services.inventory_metrics import build_stock_table, get_inventory_snapshot, invalidate_inventory_snapshot
from services.stock_models import as_categories

logger = logging.getLogger(__name__)

dash.register_page(
    __name__,
    path='/products',
    name='Products',
    title='Products'
)

TABLE_COLUMNS = [
    ('Name', 'product_name'),
    ('SKU', 'sku'),
    ('Category', 'category'),
    ('Price', 'price_label'),
    ('Stock', 'current_stock'),
    ('Minimum stock', 'min_stock'),
]


def layout(**kwargs):
    return dmc.Container(
        [
            dcc.Store(id='products-refresh', data=0),
            dcc.Store(id='products-editing'),
            dmc.Group(
                [
                    dmc.Title('Products', order=2),
                    dmc.Button('New product', id='products-new'),
                ],
                justify='space-between',
            ),
            dmc.Group(
                [
                    dmc.TextInput(id='products-search', placeholder='Search products...', w=320, debounce=300),
                    dmc.Group(
                        [
                            dmc.Button('Edit', id='products-edit', variant='light', disabled=True),
                            dcc.ConfirmDialogProvider(
                                dmc.Button('Delete', id='products-delete-btn', variant='light', color='red', disabled=True),
                                id='products-delete',
                                message='Delete the selected product?',
                            ),
                        ],
                        gap='xs',
                    ),
                ],
                justify='space-between',
                mt='md',
            ),
            dmc.Box(id='products-alert', mt='md'),
            dmc.Paper(
                data_table('products-table', TABLE_COLUMNS, selectable=True),
                p='md',
                radius='md',
                withBorder=True,
                mt='md',
            ),
            dmc.Modal(
                id='products-modal',
                title='Product',
                opened=False,
                centered=True,
                size='lg',
                children=dmc.Stack(
                    [
                        dmc.TextInput(id='products-name', label='Name', required=True),
                        dmc.Group(
                            [
                                dmc.TextInput(id='products-sku', label='SKU'),
                                dmc.Select(id='products-category', label='Category', data=[], clearable=True, searchable=True),
                            ],
                            grow=True,
                        ),
                        dmc.Group(
                            [
                                dmc.NumberInput(id='products-price', label='Price (R$)', min=0, decimalScale=2, fixedDecimalScale=True, value=0),
                                dmc.NumberInput(id='products-min-stock', label='Minimum stock', min=0, allowDecimal=False, value=0),
                                dmc.NumberInput(id='products-initial-stock', label='Initial stock', min=0, allowDecimal=False, value=0),
                            ],
                            grow=True,
                        ),
                        dmc.Box(id='products-form-alert'),
                        dmc.Group(dmc.Button('Save', id='products-save'), justify='flex-end'),
                    ],
                    gap='sm',
                ),
            ),
        ],
        size='lg',
        py='lg'
    )


def _category_options(categories):
    return [
        {'value': str(category.id), 'label': category.name or f'Category {category.id}'}
        for category in as_categories(categories)
        if category.id is not None
    ]


@dash.callback(
    Output('products-table', 'data'),
    Output('products-table', 'selected_rows'),
    Output('products-category', 'data'),
    Output('products-alert', 'children'),
    Input('products-refresh', 'data'),
    Input('products-search', 'value'),
    State('auth-token', 'data'),
    prevent_initial_call=False,
)
def load_products(refresh, search, token):
    try:
        snapshot = get_inventory_snapshot(token)
    except AuthenticationError:
        return [], [], [], session_expired_alert()
    except ApiError as e:
        logger.warning(f"Product fetch failed: {e.message}")
        return [], [], [], error_alert(e.message, title='Could not load products')

    df = build_stock_table(snapshot['products'], snapshot['movements'], snapshot['categories'])
    df = filter_frame(df, search, ['product_name', 'sku', 'category'])
    return df.to_dict('records'), [], _category_options(snapshot['categories']), no_update


@dash.callback(
    Output('products-edit', 'disabled'),
    Output('products-delete-btn', 'disabled'),
    Input('products-table', 'selected_rows'),
)
def toggle_row_actions(selected_rows):
    disabled = not selected_rows
    return disabled, disabled


@dash.callback(
    Output('products-modal', 'opened'),
    Output('products-modal', 'title'),
    Output('products-name', 'value'),
    Output('products-sku', 'value'),
    Output('products-category', 'value'),
    Output('products-price', 'value'),
    Output('products-min-stock', 'value'),
    Output('products-initial-stock', 'value'),
    Output('products-initial-stock', 'disabled'),
    Output('products-editing', 'data'),
    Output('products-form-alert', 'children'),
    Input('products-new', 'n_clicks'),
    Input('products-edit', 'n_clicks'),
    State('products-table', 'data'),
    State('products-table', 'selected_rows'),
    prevent_initial_call=True,
)
def open_product_form(new_clicks, edit_clicks, rows, selected_rows):
    if ctx.triggered_id != 'products-edit':
        return True, 'New product', '', '', None, 0, 0, 0, False, None, None

    record = selected_record(rows, selected_rows)
    if record is None:
        return (no_update,) * 11

    category_id = record.get('category_id')
    return (
        True,
        'Edit product',
        record.get('product_name'),
        record.get('sku'),
        None if category_id is None else str(category_id),
        record.get('price'),
        record.get('min_stock'),
        0,
        True,
        record.get('product_id'),
        None,
    )


@dash.callback(
    Output('products-modal', 'opened', allow_duplicate=True),
    Output('products-refresh', 'data'),
    Output('products-form-alert', 'children', allow_duplicate=True),
    Output('products-alert', 'children', allow_duplicate=True),
    Input('products-save', 'n_clicks'),
    State('products-name', 'value'),
    State('products-sku', 'value'),
    State('products-category', 'value'),
    State('products-price', 'value'),
    State('products-min-stock', 'value'),
    State('products-initial-stock', 'value'),
    State('products-editing', 'data'),
    State('products-refresh', 'data'),
    State('auth-token', 'data'),
    prevent_initial_call=True,
)
def save_product(n_clicks, name, sku, category_id, price, min_stock, initial_stock, editing_id, refresh, token):
    if not n_clicks:
        return no_update, no_update, no_update, no_update

    try:
        form = ProductForm(
            name=name,
            sku=sku,
            category_id=category_id,
            price=price,
            min_stock=min_stock,
            initial_stock=initial_stock,
        )
    except ValidationError as e:
        return no_update, no_update, error_alert(form_errors(e), title='Check the form'), no_update

    client = get_api_client(token)
    try:
        if editing_id is None:
            client.create_product_with_initial_stock(form.to_payload(), form.initial_stock)
            logger.info(f"Created product {form.name} with initial stock {form.initial_stock}")
        else:
            client.update_product(editing_id, form.to_payload())
            logger.info(f"Updated product {editing_id}")
    except InitialStockError as e:
        # Product already exists
        logger.warning(f"Product {form.name} created without initial stock: {e.message}")
        invalidate_inventory_snapshot(token)
        return False, (refresh or 0) + 1, None, error_alert(
            [e.message, 'Record it as an IN movement on the Stock page.'],
            title='Initial stock not recorded',
        )
    except ApiError as e:
        logger.warning(f"Saving product failed: {e.message}")
        return no_update, no_update, error_alert(e.message, title='Could not save the product'), no_update

    invalidate_inventory_snapshot(token)
    return False, (refresh or 0) + 1, None, no_update


@dash.callback(
    Output('products-refresh', 'data', allow_duplicate=True),
    Output('products-alert', 'children', allow_duplicate=True),
    Input('products-delete', 'submit_n_clicks'),
    State('products-table', 'data'),
    State('products-table', 'selected_rows'),
    State('products-refresh', 'data'),
    State('auth-token', 'data'),
    prevent_initial_call=True,
)
def delete_product(submit_n_clicks, rows, selected_rows, refresh, token):
    record = selected_record(rows, selected_rows)
    if not submit_n_clicks or record is None:
        return no_update, no_update

    try:
        get_api_client(token).delete_product(record['product_id'])
    except ApiError as e:
        logger.warning(f"Deleting product {record['product_id']} failed: {e.message}")
        return no_update, error_alert(e.message, title='Could not delete the product')

    logger.info(f"Deleted product {record['product_id']}")
    invalidate_inventory_snapshot(token)
    return (refresh or 0) + 1, success_alert(f"Product '{record['product_name']}' deleted.")
