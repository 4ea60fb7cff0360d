import logging
import time
from functools import wraps
from typing import Any, Dict, List, Optional

import requests

from config import (
    API_BASE_URL,
    API_TIMEOUT,
    INITIAL_STOCK_NOTE,
    MAX_RETRIES,
    RETRY_DELAY,
)

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised when the inventory API rejects a request or cannot be reached."""

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class AuthenticationError(ApiError):
    """Raised on 401/403 responses."""


class InitialStockError(ApiError):
    """The product was created but its initial-stock movement was not recorded."""

    def __init__(self, product: Dict[str, Any], cause: ApiError):
        super().__init__(cause.status_code, f"Product created, but its initial stock was not recorded: {cause.message}")
        self.product = product


def retry_api(max_retries=MAX_RETRIES, delay=RETRY_DELAY):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except (requests.ConnectionError, requests.Timeout) as e:
                    if attempt == max_retries - 1:
                        raise ApiError(None, f"Could not reach the API: {e}") from e
                    logger.warning(f"API request failed (attempt {attempt + 1}/{max_retries}): {e}")
                    time.sleep(delay * (2 ** attempt))  # Exponential backoff
            return None
        return wrapper
    return decorator


def _error_message(response: requests.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get('message') or body.get('error')
        if message:
            return str(message)
    text = (response.text or '').strip()
    return text or default


def _as_list(data: Any) -> List[Dict[str, Any]]:
    """List endpoints answer either with a bare array or an envelope."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ('data', 'items', 'results'):
            if isinstance(data.get(key), list):
                return data[key]
    return []


def _extract_token(data: Any) -> str:
    if isinstance(data, dict):
        token = data.get('token') or data.get('access_token') or data.get('accessToken')
        if token:
            return str(token)
    raise ApiError(None, 'Login response did not include a token')


class ApiClient:
    """
    Thin REST client for the inventory API.

    The bearer token is handed in by the caller; the client never reads it
    from anywhere else.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        token: Optional[str] = None,
        timeout: float = API_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        headers = {'Accept': 'application/json', 'Content-Type': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def _request(self, method: str, path: str, params=None, payload=None) -> Any:
        try:
            response = self.session.request(
                method,
                self._url(path),
                params=params,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout):
            raise
        except requests.RequestException as e:
            raise ApiError(None, str(e)) from e

        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(status, _error_message(response, 'Authentication required'))
        if status >= 400:
            logger.error(f"{method} {path} failed with {status}")
            raise ApiError(status, _error_message(response, f'Request failed with status {status}'))

        if status == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(status, 'Invalid JSON in API response') from e

    @retry_api()
    def _get(self, path: str, params=None) -> Any:
        return self._request('GET', path, params=params)

    def _send(self, method: str, path: str, payload=None) -> Any:
        # Writes are not retried
        try:
            return self._request(method, path, payload=payload)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise ApiError(None, f"Could not reach the API: {e}") from e

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> str:
        data = self._send('POST', '/api/auth/login', {'email': email, 'password': password})
        token = _extract_token(data)
        self.token = token
        return token

    def register(self, email: str, password: str, invite_code: str) -> Any:
        return self._send('POST', '/api/auth/register', {
            'email': email,
            'password': password,
            'inviteCode': invite_code,
        })

    def forgot_password(self, email: str) -> Any:
        return self._send('POST', '/api/auth/forgot-password', {'email': email})

    def reset_password(self, reset_token: str, password: str) -> Any:
        return self._send('POST', '/api/auth/reset-password', {'token': reset_token, 'password': password})

    def exchange_google_code(self, code: str) -> str:
        token = _extract_token(self._get('/api/auth/google/callback', params={'code': code}))
        self.token = token
        return token

    def google_login_url(self) -> str:
        return self._url('/api/auth/google')

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def list_categories(self) -> List[Dict[str, Any]]:
        return _as_list(self._get('/api/categories'))

    def create_category(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._send('POST', '/api/categories', payload) or {}

    def update_category(self, category_id, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._send('PUT', f'/api/categories/{category_id}', payload) or {}

    def delete_category(self, category_id) -> None:
        self._send('DELETE', f'/api/categories/{category_id}')

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def list_products(self) -> List[Dict[str, Any]]:
        return _as_list(self._get('/api/products'))

    def create_product(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._send('POST', '/api/products', payload) or {}

    def update_product(self, product_id, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._send('PUT', f'/api/products/{product_id}', payload) or {}

    def delete_product(self, product_id) -> None:
        self._send('DELETE', f'/api/products/{product_id}')

    def create_product_with_initial_stock(self, payload: Dict[str, Any], initial_quantity: int = 0) -> Dict[str, Any]:
        """Create a product and record its opening quantity as an initial-stock movement."""
        product = self.create_product(payload)
        product_id = product.get('id')
        if initial_quantity and initial_quantity > 0:
            if product_id is None:
                raise InitialStockError(product, ApiError(None, 'the API returned no product id'))
            try:
                self.create_stock_movement({
                    'product_id': product_id,
                    'type': 'IN',
                    'quantity': initial_quantity,
                    'notes': INITIAL_STOCK_NOTE,
                    'is_initial_stock': True,
                })
            except ApiError as e:
                logger.error(f"Initial stock for product {product_id} failed: {e.message}")
                raise InitialStockError(product, e) from e
        return product

    # ------------------------------------------------------------------
    # Stock movements
    # ------------------------------------------------------------------

    def list_stock_movements(self) -> List[Dict[str, Any]]:
        return _as_list(self._get('/api/stock-movements'))

    def create_stock_movement(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._send('POST', '/api/stock-movements', payload) or {}


def get_api_client(token: Optional[str] = None) -> ApiClient:
    """Build a client for the configured API using the caller's token."""
    return ApiClient(API_BASE_URL, token=token)
