"""
Tests for the REST client: request shape, error mapping and retries.
"""
import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

import api_connector
from api_connector import ApiClient, ApiError, AuthenticationError, InitialStockError


def _response(status=200, body=None, text=None):
    response = requests.Response()
    response.status_code = status
    response.encoding = 'utf-8'
    if body is not None:
        response._content = json.dumps(body).encode('utf-8')
        response.headers['Content-Type'] = 'application/json'
    elif text is not None:
        response._content = text.encode('utf-8')
    else:
        response._content = b''
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return ApiClient('http://api.test/', token='abc123', session=session)


def test_get_sends_bearer_token(client, session):
    session.request.return_value = _response(200, [{'id': 1, 'name': 'Coffee'}])

    products = client.list_products()

    assert products == [{'id': 1, 'name': 'Coffee'}]
    args, kwargs = session.request.call_args
    assert args == ('GET', 'http://api.test/api/products')
    assert kwargs['headers']['Authorization'] == 'Bearer abc123'
    assert kwargs['timeout'] == client.timeout


def test_no_authorization_header_without_token(session):
    session.request.return_value = _response(200, [])
    ApiClient('http://api.test', session=session).list_categories()
    assert 'Authorization' not in session.request.call_args.kwargs['headers']


def test_list_endpoints_accept_envelopes(client, session):
    session.request.return_value = _response(200, {'data': [{'id': 1}]})
    assert client.list_stock_movements() == [{'id': 1}]

    session.request.return_value = _response(200, {'unexpected': True})
    assert client.list_categories() == []


def test_login_stores_token(session):
    session.request.return_value = _response(200, {'token': 'jwt-token', 'user': {'email': 'a@b.c'}})
    client = ApiClient('http://api.test', session=session)

    token = client.login('a@b.c', 'secret')

    assert token == 'jwt-token'
    assert client.token == 'jwt-token'
    args, kwargs = session.request.call_args
    assert args == ('POST', 'http://api.test/api/auth/login')
    assert kwargs['json'] == {'email': 'a@b.c', 'password': 'secret'}


def test_login_without_token_in_response(session):
    session.request.return_value = _response(200, {'user': {}})
    with pytest.raises(ApiError):
        ApiClient('http://api.test', session=session).login('a@b.c', 'secret')


def test_unauthorized_raises_authentication_error(client, session):
    session.request.return_value = _response(401, {'message': 'Invalid credentials'})
    with pytest.raises(AuthenticationError) as excinfo:
        client.list_products()
    assert excinfo.value.status_code == 401
    assert excinfo.value.message == 'Invalid credentials'


def test_error_message_falls_back_to_text_then_default(client, session):
    session.request.return_value = _response(500, text='Internal failure')
    with pytest.raises(ApiError) as excinfo:
        client.list_products()
    assert excinfo.value.message == 'Internal failure'

    session.request.return_value = _response(422)
    with pytest.raises(ApiError) as excinfo:
        client.create_category({'name': ''})
    assert excinfo.value.status_code == 422
    assert excinfo.value.message == 'Request failed with status 422'


def test_empty_body_returns_empty(client, session):
    session.request.return_value = _response(204)
    assert client.delete_product(3) is None
    args, _ = session.request.call_args
    assert args == ('DELETE', 'http://api.test/api/products/3')


def test_invalid_json_raises(client, session):
    session.request.return_value = _response(200, text='<html>')
    with pytest.raises(ApiError):
        client.list_products()


@patch('api_connector.time.sleep')
def test_reads_retry_on_connection_errors(mock_sleep, client, session):
    session.request.side_effect = [requests.ConnectionError('refused'), _response(200, [])]

    assert client.list_products() == []
    assert session.request.call_count == 2
    mock_sleep.assert_called_once_with(api_connector.RETRY_DELAY)


@patch('api_connector.time.sleep')
def test_reads_give_up_after_max_retries(mock_sleep, client, session):
    session.request.side_effect = requests.Timeout('slow')

    with pytest.raises(ApiError) as excinfo:
        client.list_categories()

    assert excinfo.value.status_code is None
    assert session.request.call_count == api_connector.MAX_RETRIES
    assert mock_sleep.call_count == api_connector.MAX_RETRIES - 1


@patch('api_connector.time.sleep')
def test_writes_are_not_retried(mock_sleep, client, session):
    session.request.side_effect = requests.ConnectionError('refused')

    with pytest.raises(ApiError):
        client.create_stock_movement({'product_id': 1, 'type': 'IN', 'quantity': 1})

    assert session.request.call_count == 1
    mock_sleep.assert_not_called()


def test_create_product_with_initial_stock_records_movement(client, session):
    session.request.side_effect = [_response(201, {'id': 42, 'name': 'Coffee'}), _response(201, {'id': 7})]

    product = client.create_product_with_initial_stock({'name': 'Coffee'}, 12)

    assert product['id'] == 42
    movement_call = session.request.call_args_list[1]
    assert movement_call.args == ('POST', 'http://api.test/api/stock-movements')
    assert movement_call.kwargs['json'] == {
        'product_id': 42,
        'type': 'IN',
        'quantity': 12,
        'notes': 'Initial stock',
        'is_initial_stock': True,
    }


def test_create_product_without_initial_stock_skips_movement(client, session):
    session.request.return_value = _response(201, {'id': 42})
    client.create_product_with_initial_stock({'name': 'Coffee'}, 0)
    assert session.request.call_count == 1


def test_create_product_with_initial_stock_needs_an_id(client, session):
    session.request.return_value = _response(201, {'name': 'Coffee'})
    with pytest.raises(InitialStockError) as excinfo:
        client.create_product_with_initial_stock({'name': 'Coffee'}, 3)
    assert excinfo.value.product == {'name': 'Coffee'}
    assert session.request.call_count == 1


def test_failed_initial_stock_reports_the_created_product(client, session):
    session.request.side_effect = [
        _response(201, {'id': 42, 'name': 'Coffee'}),
        _response(500, {'message': 'Movement rejected'}),
    ]

    with pytest.raises(InitialStockError) as excinfo:
        client.create_product_with_initial_stock({'name': 'Coffee'}, 5)

    assert excinfo.value.product['id'] == 42
    assert excinfo.value.status_code == 500
    assert 'Movement rejected' in excinfo.value.message
    assert session.request.call_count == 2


def test_google_helpers(client, session):
    assert client.google_login_url() == 'http://api.test/api/auth/google'

    session.request.return_value = _response(200, {'accessToken': 'google-jwt'})
    assert client.exchange_google_code('code-1') == 'google-jwt'
    assert session.request.call_args.kwargs['params'] == {'code': 'code-1'}


def test_register_and_reset_payloads(client, session):
    session.request.return_value = _response(201, {'ok': True})

    client.register('a@b.c', 'secret1', 'INVITE')
    assert session.request.call_args.kwargs['json'] == {
        'email': 'a@b.c',
        'password': 'secret1',
        'inviteCode': 'INVITE',
    }

    client.reset_password('reset-token', 'newpass')
    args, kwargs = session.request.call_args
    assert args == ('POST', 'http://api.test/api/auth/reset-password')
    assert kwargs['json'] == {'token': 'reset-token', 'password': 'newpass'}
