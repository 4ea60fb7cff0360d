from typing import Optional

from config import AUTH_PATHS, PROTECTED_PATHS


def is_protected(pathname: Optional[str]) -> bool:
    path = (pathname or '/').rstrip('/') or '/'
    return path in PROTECTED_PATHS


def resolve_redirect(pathname: Optional[str], token: Optional[str]) -> Optional[str]:
    """Where the browser should go for this path and session, or None to stay."""
    path = (pathname or '/').rstrip('/') or '/'
    if path in PROTECTED_PATHS and not token:
        return '/login'
    if path in AUTH_PATHS and token:
        return '/dashboard'
    return None
