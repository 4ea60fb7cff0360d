"""
Tests for the movement trend frame and chart.
"""
import datetime as dt
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.inventory_charts import build_movement_trend_chart, movement_trend_frame

TODAY = dt.date(2026, 10, 19)


def _movement(day, movement_type, quantity):
    return {'product_id': 1, 'type': movement_type, 'quantity': quantity, 'created_at': f'{day.isoformat()}T10:00:00'}


def test_trend_frame_has_every_day_zero_filled():
    trend = movement_trend_frame([], today=TODAY, days=7)

    assert trend.height == 7
    assert trend['date'].to_list()[0] == TODAY - dt.timedelta(days=6)
    assert trend['date'].to_list()[-1] == TODAY
    assert trend['incoming'].sum() == 0
    assert trend['outgoing'].sum() == 0


def test_trend_frame_sums_by_day_and_type():
    movements = [
        _movement(TODAY, 'IN', 4),
        _movement(TODAY, 'IN', 1),
        _movement(TODAY, 'OUT', 2),
        _movement(TODAY - dt.timedelta(days=2), 'OUT', 3),
        _movement(TODAY - dt.timedelta(days=30), 'IN', 100),
        _movement(TODAY, 'ADJUST', 9),
        {'product_id': 1, 'type': 'IN', 'quantity': 50},
    ]

    trend = movement_trend_frame(movements, today=TODAY, days=7)
    by_day = {row['date']: row for row in trend.to_dicts()}

    assert by_day[TODAY]['incoming'] == 5
    assert by_day[TODAY]['outgoing'] == 2
    assert by_day[TODAY - dt.timedelta(days=2)]['outgoing'] == 3
    assert by_day[TODAY - dt.timedelta(days=1)]['incoming'] == 0
    assert trend['incoming'].sum() == 5


def test_trend_chart_has_in_and_out_traces():
    fig = build_movement_trend_chart([_movement(TODAY, 'IN', 3)], today=TODAY, days=14)

    assert [trace.name for trace in fig.data] == ['In', 'Out']
    assert fig.layout.title.text == 'Stock Movements - Last 14 Days'
    assert sum(fig.data[0].y) == 3


def test_trend_chart_without_movements_is_empty_figure():
    fig = build_movement_trend_chart(None, today=TODAY, days=14)

    assert len(fig.data) == 0
    assert fig.layout.annotations[0].text == 'No stock movements in this period.'


def test_trend_frame_skips_out_of_range_timestamps():
    movements = [
        {'product_id': 1, 'type': 'IN', 'quantity': 3, 'created_at': '9999-12-31T23:59:59-12:00'},
        _movement(TODAY, 'OUT', 1),
    ]

    trend = movement_trend_frame(movements, today=TODAY, days=7)

    assert trend['incoming'].sum() == 0
    assert trend['outgoing'].sum() == 1
