"""
Authentication dependencies for FastAPI.
"""
import logging
from typing import Optional, Dict, Any

from todoboard.adapters.http_framework import HTTPFrameworkAdapter
from todoboard.dependencies.services import get_credential_store
from todoboard.exceptions import AuthError

# Initialize adapter
http_adapter = HTTPFrameworkAdapter()
Request = http_adapter.Request
Depends = http_adapter.Depends
HTTPBasicCredentials = http_adapter.HTTPBasicCredentials

# auto_error is off so missing credentials surface as AuthError with our realm.
basic_auth = http_adapter.HTTPBasic(auto_error=False)

logger = logging.getLogger(__name__)


def require_user(
    request: Request,
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
) -> Dict[str, Any]:
    """
    Verify HTTP Basic credentials and resolve the caller's identity.

    Runs in the threadpool because bcrypt is CPU-bound.

    Returns:
        Dictionary with 'id' and 'username' of the authenticated user
    Raises:
        AuthError if credentials are missing or invalid
    """
    if credentials is None:
        raise AuthError("Authentication required")

    store = get_credential_store(request)
    if not store.verify(credentials.username, credentials.password):
        logger.warning(f"Rejected credentials for username '{credentials.username}'")
        raise AuthError("Invalid credentials")

    identity = store.resolve_identity(credentials.username)
    if identity is None:
        raise AuthError("Invalid credentials")

    return identity
