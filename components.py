"""Mantine building blocks shared by the pages."""
from dash import dash_table, html
import dash_mantine_components as dmc


def kpi_card(title, value_id, note_id, color=None):
    return dmc.Paper(
        dmc.Stack([
            dmc.Text(title, size='sm', c='dimmed'),
            dmc.Text('0', size='xl', fw=600, c=color, id=value_id),
            dmc.Text('', size='xs', c='dimmed', id=note_id),
        ], gap=4),
        p='md',
        radius='md',
        withBorder=True,
    )


def section(title, children, description=None):
    header = [dmc.Text(title, fw=600)]
    if description:
        header.append(dmc.Text(description, size='sm', c='dimmed'))
    return dmc.Paper(
        dmc.Stack([dmc.Stack(header, gap=2), children], gap='md'),
        p='md',
        radius='md',
        withBorder=True,
        mt='lg',
    )


def data_table(table_id, columns, selectable=False, page_size=15):
    return dash_table.DataTable(
        id=table_id,
        columns=[{'name': name, 'id': column_id} for name, column_id in columns],
        data=[],
        page_size=page_size,
        sort_action='native',
        row_selectable='single' if selectable else False,
        selected_rows=[],
        style_as_list_view=True,
        style_table={'overflowX': 'auto'},
        style_header={'fontWeight': 600, 'backgroundColor': '#f8f9fa'},
        style_cell={
            'fontFamily': "'Inter', -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif",
            'fontSize': 14,
            'padding': '8px',
            'textAlign': 'left',
        },
    )


def error_alert(message, title='Something went wrong'):
    if isinstance(message, (list, tuple)):
        message = [html.Div(line) for line in message]
    return dmc.Alert(message, title=title, color='red', variant='light')


def success_alert(message, title=None):
    return dmc.Alert(message, title=title, color='green', variant='light')


def auth_card(title, subtitle, children):
    return dmc.Center(
        dmc.Paper(
            dmc.Stack(
                [
                    dmc.Stack(
                        [
                            dmc.Title(title, order=2, ta='center'),
                            dmc.Text(subtitle, c='dimmed', ta='center'),
                        ],
                        gap=4,
                    ),
                    *children,
                ],
                gap='md',
            ),
            p='xl',
            radius='md',
            shadow='md',
            withBorder=True,
            w=420,
        ),
        py=60,
    )


def selected_record(rows, selected_rows):
    """The row picked in a single-select DataTable, or None."""
    if not rows or not selected_rows:
        return None
    index = selected_rows[0]
    if index is None or index >= len(rows):
        return None
    return rows[index]


def session_expired_alert():
    return error_alert(
        dmc.Text(['Your session has expired. ', dmc.Anchor('Sign in again', href='/login'), '.'], size='sm'),
        title='Signed out',
    )
