"""
Tests for route protection decisions.
"""
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.session import is_protected, resolve_redirect


@pytest.mark.parametrize('pathname', ['/dashboard', '/categories', '/products/', '/stock'])
def test_protected_pages_require_a_token(pathname):
    assert is_protected(pathname)
    assert resolve_redirect(pathname, None) == '/login'
    assert resolve_redirect(pathname, '') == '/login'
    assert resolve_redirect(pathname, 'token') is None


@pytest.mark.parametrize('pathname', ['/login', '/register', '/auth/google/callback'])
def test_signed_in_users_skip_auth_pages(pathname):
    assert resolve_redirect(pathname, 'token') == '/dashboard'
    assert resolve_redirect(pathname, None) is None


@pytest.mark.parametrize('pathname', ['/', None, '/forgot-password', '/reset-password'])
def test_public_pages_never_redirect(pathname):
    assert not is_protected(pathname)
    assert resolve_redirect(pathname, None) is None
    assert resolve_redirect(pathname, 'token') is None
