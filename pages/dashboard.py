import logging

import dash
from dash import dcc, Output, Input, State
import dash_mantine_components as dmc

from api_connector import ApiError, AuthenticationError
from components import data_table, error_alert, kpi_card, section, session_expired_alert
from services.formatting import format_brl, format_quantity
from services.inventory_charts import build_movement_trend_chart, build_empty_figure
from services.inventory_metrics import get_dashboard_data, invalidate_inventory_snapshot

logger = logging.getLogger(__name__)

dash.register_page(
    __name__,
    path='/dashboard',
    name='Dashboard',
    title='Stock Dashboard'
)

LOW_STOCK_COLUMNS = [
    ('Product', 'product_name'),
    ('Current stock', 'current_stock'),
    ('Minimum stock', 'min_stock'),
]

RECENT_COLUMNS = [
    ('Date', 'date'),
    ('Product', 'product_name'),
    ('Type', 'type_label'),
    ('Quantity', 'quantity'),
]


def layout(**kwargs):
    return dmc.Container(
        [
            dmc.Group(
                [
                    dmc.Title('Dashboard', order=2),
                    dmc.Button('Refresh', id='dashboard-refresh', variant='light', size='sm'),
                ],
                justify='space-between',
            ),
            dmc.Box(id='dashboard-alert', mt='md'),

            # KPI Cards Row
            dmc.Grid(
                [
                    dmc.GridCol(kpi_card('Total products', 'dashboard-total-products', 'dashboard-total-categories'), span=3),
                    dmc.GridCol(kpi_card('Low stock products', 'dashboard-low-stock', 'dashboard-low-stock-note', color='red'), span=3),
                    dmc.GridCol(kpi_card('Incoming (today)', 'dashboard-today-in', 'dashboard-today-in-value', color='green'), span=3),
                    dmc.GridCol(kpi_card('Outgoing (today)', 'dashboard-today-out', 'dashboard-today-out-value', color='blue'), span=3),
                ],
                gutter='lg',
                mt='md',
            ),

            section(
                'Low stock products',
                data_table('dashboard-low-stock-table', LOW_STOCK_COLUMNS, page_size=10),
                description='Products that need restocking',
            ),
            dmc.Grid(
                [
                    dmc.GridCol(
                        section(
                            'Recent movements',
                            data_table('dashboard-recent-table', RECENT_COLUMNS, page_size=10),
                            description='Latest stock movements',
                        ),
                        span=6,
                    ),
                    dmc.GridCol(
                        section(
                            'Movement trend',
                            dcc.Graph(id='dashboard-trend', figure={}, config={'displayModeBar': False}),
                        ),
                        span=6,
                    ),
                ],
                gutter='lg',
            ),
        ],
        size='lg',
        py='lg'
    )


@dash.callback(
    Output('dashboard-total-products', 'children'),
    Output('dashboard-total-categories', 'children'),
    Output('dashboard-low-stock', 'children'),
    Output('dashboard-low-stock-note', 'children'),
    Output('dashboard-today-in', 'children'),
    Output('dashboard-today-in-value', 'children'),
    Output('dashboard-today-out', 'children'),
    Output('dashboard-today-out-value', 'children'),
    Output('dashboard-low-stock-table', 'data'),
    Output('dashboard-recent-table', 'data'),
    Output('dashboard-trend', 'figure'),
    Output('dashboard-alert', 'children'),
    Input('dashboard-refresh', 'n_clicks'),
    State('auth-token', 'data'),
    prevent_initial_call=False,
)
def update_dashboard(n_clicks, token):
    if n_clicks:
        invalidate_inventory_snapshot(token)
    try:
        data = get_dashboard_data(token)
    except AuthenticationError:
        return _empty_dashboard(session_expired_alert())
    except ApiError as e:
        logger.warning(f"Dashboard data fetch failed: {e.message}")
        return _empty_dashboard(error_alert(e.message, title='Could not load the dashboard'))

    summary = data['summary']
    return (
        format_quantity(summary.total_products),
        f'In {summary.total_categories} categories',
        format_quantity(summary.low_stock_count),
        'At or below minimum stock',
        format_quantity(summary.today_incoming),
        f'Total of {format_brl(summary.today_incoming_value)}',
        format_quantity(summary.today_outgoing),
        f'Total of {format_brl(summary.today_outgoing_value)}',
        data['low_stock'].to_dict('records'),
        data['recent'].to_dict('records'),
        build_movement_trend_chart(data['movements'], summary.today),
        None,
    )


def _empty_dashboard(alert):
    empty_fig = build_empty_figure('No data available.', 'Stock Movements')
    return ('0', '', '0', '', '0', '', '0', '', [], [], empty_fig, alert)
