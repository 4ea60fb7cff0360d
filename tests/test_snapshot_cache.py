"""
Tests for the cache configuration and the memoized inventory snapshot.
"""
from pathlib import Path
from unittest.mock import patch

import pytest
from flask import Flask

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.cache import cache_config, init_cache
from services.inventory_metrics import fetch_inventory_snapshot, invalidate_inventory_snapshot


def test_cache_config_without_redis():
    config = cache_config(redis_url=None, ttl_seconds=30)
    assert config['CACHE_TYPE'] == 'SimpleCache'
    assert config['CACHE_DEFAULT_TIMEOUT'] == 30
    assert 'CACHE_REDIS_URL' not in config


def test_cache_config_with_redis():
    config = cache_config(redis_url='redis://localhost:6379/0', ttl_seconds=60)
    assert config['CACHE_TYPE'] == 'RedisCache'
    assert config['CACHE_REDIS_URL'] == 'redis://localhost:6379/0'
    assert config['CACHE_KEY_PREFIX'] == 'stockdash:'


@pytest.fixture
def app_context():
    server = Flask(__name__)
    init_cache(server, cache_config(redis_url=None, ttl_seconds=60))
    with server.app_context():
        yield


@patch('services.inventory_metrics.ApiClient')
def test_snapshot_is_memoized_per_token(mock_client_cls, app_context):
    client = mock_client_cls.return_value
    client.list_categories.return_value = [{'id': 1, 'name': 'Groceries'}]
    client.list_products.return_value = [{'id': 10, 'name': 'Coffee'}]
    client.list_stock_movements.return_value = []

    first = fetch_inventory_snapshot('http://api.test', 'token-a')
    second = fetch_inventory_snapshot('http://api.test', 'token-a')
    fetch_inventory_snapshot('http://api.test', 'token-b')

    assert first == second
    assert first['products'] == [{'id': 10, 'name': 'Coffee'}]
    assert mock_client_cls.call_count == 2
    mock_client_cls.assert_any_call('http://api.test', token='token-a')
    mock_client_cls.assert_any_call('http://api.test', token='token-b')


@patch('services.inventory_metrics.ApiClient')
def test_invalidation_forces_a_new_fetch(mock_client_cls, app_context):
    client = mock_client_cls.return_value
    client.list_categories.return_value = []
    client.list_products.return_value = []
    client.list_stock_movements.return_value = []

    fetch_inventory_snapshot('http://api.test', 'token-c')
    invalidate_inventory_snapshot('token-c', base_url='http://api.test')
    fetch_inventory_snapshot('http://api.test', 'token-c')

    assert mock_client_cls.call_count == 2
