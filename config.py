"""Application configuration constants and environment parsing."""
import os

from dotenv import load_dotenv

# Ensure environment variables are loaded immediately upon import
load_dotenv()

# ============================================================================
# API
# ============================================================================

API_BASE_URL = os.environ.get('API_BASE_URL', 'http://localhost:3000').rstrip('/')
API_TIMEOUT = float(os.environ.get('API_TIMEOUT', '10'))
MAX_RETRIES = int(os.environ.get('API_MAX_RETRIES', '3'))
RETRY_DELAY = float(os.environ.get('API_RETRY_DELAY', '1'))

# ============================================================================
# STOCK
# ============================================================================

INITIAL_STOCK_NOTE = 'Initial stock'
MOVEMENT_TYPES = ('IN', 'OUT')
RECENT_MOVEMENTS_LIMIT = int(os.environ.get('RECENT_MOVEMENTS_LIMIT', '10'))
MOVEMENT_TREND_DAYS = int(os.environ.get('MOVEMENT_TREND_DAYS', '14'))

# ============================================================================
# CACHE
# ============================================================================

CACHE_TTL_SECONDS = int(os.environ.get('DASH_CACHE_TTL_SECONDS', '60'))
CACHE_KEY_PREFIX = 'stockdash:'
REDIS_URL = os.environ.get('REDIS_URL')

# ============================================================================
# APP
# ============================================================================

APP_TITLE = os.environ.get('APP_TITLE', 'Stock Control')
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

PROTECTED_PATHS = ('/dashboard', '/categories', '/products', '/stock')
AUTH_PATHS = ('/login', '/register', '/auth/google/callback')
