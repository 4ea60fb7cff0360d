"""
Tests for shared page components.
"""
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from components import data_table, error_alert, selected_record


def test_selected_record():
    rows = [{'id': 1}, {'id': 2}]
    assert selected_record(rows, [1]) == {'id': 2}
    assert selected_record(rows, []) is None
    assert selected_record(rows, [5]) is None
    assert selected_record([], [0]) is None


def test_data_table_columns_and_selection():
    table = data_table('t', [('Name', 'name'), ('Stock', 'current_stock')], selectable=True)
    assert table.columns == [{'name': 'Name', 'id': 'name'}, {'name': 'Stock', 'id': 'current_stock'}]
    assert table.row_selectable == 'single'
    assert data_table('u', [('Name', 'name')]).row_selectable is False


def test_error_alert_renders_one_line_per_message():
    alert = error_alert(['Name: required', 'Price: too low'], title='Check the form')
    assert alert.title == 'Check the form'
    assert len(alert.children) == 2
    assert alert.color == 'red'
