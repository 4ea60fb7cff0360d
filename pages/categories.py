import logging

import dash
from dash import dcc, ctx, Output, Input, State, no_update
import dash_mantine_components as dmc
from pydantic import ValidationError

from api_connector import ApiError, AuthenticationError, get_api_client
from components import data_table, error_alert, selected_record, session_expired_alert, success_alert
from services.formatting import filter_frame
from services.forms import CategoryForm, form_errors
from services.inventory_metrics import categories_frame, get_inventory_snapshot, invalidate_inventory_snapshot

logger = logging.getLogger(__name__)

dash.register_page(
    __name__,
    path='/categories',
    name='Categories',
    title='Categories'
)

TABLE_COLUMNS = [
    ('Name', 'name'),
    ('Description', 'description'),
    ('Products', 'product_count'),
]


def layout(**kwargs):
    return dmc.Container(
        [
            dcc.Store(id='categories-refresh', data=0),
            dcc.Store(id='categories-editing'),
            dmc.Group(
                [
                    dmc.Title('Categories', order=2),
                    dmc.Button('New category', id='categories-new'),
                ],
                justify='space-between',
            ),
            dmc.Group(
                [
                    dmc.TextInput(id='categories-search', placeholder='Search categories...', w=320, debounce=300),
                    dmc.Group(
                        [
                            dmc.Button('Edit', id='categories-edit', variant='light', disabled=True),
                            dcc.ConfirmDialogProvider(
                                dmc.Button('Delete', id='categories-delete-btn', variant='light', color='red', disabled=True),
                                id='categories-delete',
                                message='Delete the selected category?',
                            ),
                        ],
                        gap='xs',
                    ),
                ],
                justify='space-between',
                mt='md',
            ),
            dmc.Box(id='categories-alert', mt='md'),
            dmc.Paper(
                data_table('categories-table', TABLE_COLUMNS, selectable=True),
                p='md',
                radius='md',
                withBorder=True,
                mt='md',
            ),
            dmc.Modal(
                id='categories-modal',
                title='Category',
                opened=False,
                centered=True,
                children=dmc.Stack(
                    [
                        dmc.TextInput(id='categories-name', label='Name', required=True),
                        dmc.Textarea(id='categories-description', label='Description', autosize=True, minRows=2),
                        dmc.Box(id='categories-form-alert'),
                        dmc.Group(dmc.Button('Save', id='categories-save'), justify='flex-end'),
                    ],
                    gap='sm',
                ),
            ),
        ],
        size='lg',
        py='lg'
    )


@dash.callback(
    Output('categories-table', 'data'),
    Output('categories-table', 'selected_rows'),
    Output('categories-alert', 'children'),
    Input('categories-refresh', 'data'),
    Input('categories-search', 'value'),
    State('auth-token', 'data'),
    prevent_initial_call=False,
)
def load_categories(refresh, search, token):
    try:
        snapshot = get_inventory_snapshot(token)
    except AuthenticationError:
        return [], [], session_expired_alert()
    except ApiError as e:
        logger.warning(f"Category fetch failed: {e.message}")
        return [], [], error_alert(e.message, title='Could not load categories')

    df = categories_frame(snapshot['categories'], snapshot['products'])
    df = filter_frame(df, search, ['name', 'description'])
    return df.to_dict('records'), [], no_update


@dash.callback(
    Output('categories-edit', 'disabled'),
    Output('categories-delete-btn', 'disabled'),
    Input('categories-table', 'selected_rows'),
)
def toggle_row_actions(selected_rows):
    disabled = not selected_rows
    return disabled, disabled


@dash.callback(
    Output('categories-modal', 'opened'),
    Output('categories-modal', 'title'),
    Output('categories-name', 'value'),
    Output('categories-description', 'value'),
    Output('categories-editing', 'data'),
    Output('categories-form-alert', 'children'),
    Input('categories-new', 'n_clicks'),
    Input('categories-edit', 'n_clicks'),
    State('categories-table', 'data'),
    State('categories-table', 'selected_rows'),
    prevent_initial_call=True,
)
def open_category_form(new_clicks, edit_clicks, rows, selected_rows):
    if ctx.triggered_id == 'categories-edit':
        record = selected_record(rows, selected_rows)
        if record is None:
            return no_update, no_update, no_update, no_update, no_update, no_update
        return True, 'Edit category', record.get('name'), record.get('description'), record.get('category_id'), None
    return True, 'New category', '', '', None, None


@dash.callback(
    Output('categories-modal', 'opened', allow_duplicate=True),
    Output('categories-refresh', 'data'),
    Output('categories-form-alert', 'children', allow_duplicate=True),
    Input('categories-save', 'n_clicks'),
    State('categories-name', 'value'),
    State('categories-description', 'value'),
    State('categories-editing', 'data'),
    State('categories-refresh', 'data'),
    State('auth-token', 'data'),
    prevent_initial_call=True,
)
def save_category(n_clicks, name, description, editing_id, refresh, token):
    if not n_clicks:
        return no_update, no_update, no_update

    try:
        form = CategoryForm(name=name, description=description)
    except ValidationError as e:
        return no_update, no_update, error_alert(form_errors(e), title='Check the form')

    client = get_api_client(token)
    try:
        if editing_id is None:
            client.create_category(form.to_payload())
            logger.info(f"Created category {form.name}")
        else:
            client.update_category(editing_id, form.to_payload())
            logger.info(f"Updated category {editing_id}")
    except ApiError as e:
        logger.warning(f"Saving category failed: {e.message}")
        return no_update, no_update, error_alert(e.message, title='Could not save the category')

    invalidate_inventory_snapshot(token)
    return False, (refresh or 0) + 1, None


@dash.callback(
    Output('categories-refresh', 'data', allow_duplicate=True),
    Output('categories-alert', 'children', allow_duplicate=True),
    Input('categories-delete', 'submit_n_clicks'),
    State('categories-table', 'data'),
    State('categories-table', 'selected_rows'),
    State('categories-refresh', 'data'),
    State('auth-token', 'data'),
    prevent_initial_call=True,
)
def delete_category(submit_n_clicks, rows, selected_rows, refresh, token):
    record = selected_record(rows, selected_rows)
    if not submit_n_clicks or record is None:
        return no_update, no_update

    try:
        get_api_client(token).delete_category(record['category_id'])
    except ApiError as e:
        logger.warning(f"Deleting category {record['category_id']} failed: {e.message}")
        return no_update, error_alert(e.message, title='Could not delete the category')

    logger.info(f"Deleted category {record['category_id']}")
    invalidate_inventory_snapshot(token)
    return (refresh or 0) + 1, success_alert(f"Category '{record['name']}' deleted.")
