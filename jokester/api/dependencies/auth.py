"""
Shared-secret guard for the /jokes routes.

The joke memory API binds to localhost for the desktop shell, so the guard
is off unless API_AUTH_ENABLED=true. When it is on, the shell must send
the configured API_KEY in an X-API-Key header. Both variables are read on
every request so a running server picks up a rotated key.
"""

import os
from typing import Optional

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

API_KEY_HEADER = "X-API-Key"

api_key_header = APIKeyHeader(
    name=API_KEY_HEADER,
    auto_error=False,
    description="Shared secret for the joke memory routes (only checked when API_AUTH_ENABLED=true)",
)


def is_auth_enabled() -> bool:
    return os.getenv("API_AUTH_ENABLED", "false").lower() == "true"


def _reject(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "ApiKey"},
    )


async def verify_api_key(
    api_key: Optional[str] = Security(api_key_header),
) -> Optional[str]:
    """
    Let a /jokes request through only if it carries the joke memory key.

    Returns the accepted key, or None while the guard is off.

    Raises:
        HTTPException: 401 when the guard is on and the header is absent
            or does not match API_KEY
    """
    if not is_auth_enabled():
        return None

    if not api_key:
        raise _reject(f"Joke memory API key required: send it in the {API_KEY_HEADER} header")

    if api_key != os.getenv("API_KEY", ""):
        raise _reject("Joke memory API key rejected")

    return api_key
