from fastapi import HTTPException, status, Request
from typing import Optional
import logging

# Identity comes from a trusted X-User-Id header set by the gateway in front
# of this service. Session handling and token validation live there.

async def get_current_user_id(request: Request) -> str:
    """
    Dependency returning the caller's user id from the ``X-User-Id`` header.
    Responds 401 when the header is missing.
    """
    user_id = request.headers.get("X-User-Id")

    if not user_id:
        logging.warning("Missing X-User-Id header for authentication.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated. Missing X-User-Id header.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logging.debug(f"Authenticated user via X-User-Id: {user_id}")
    return user_id

async def get_optional_user_id(request: Request) -> Optional[str]:
    """Like get_current_user_id, but returns None for anonymous callers."""
    user_id = request.headers.get("X-User-Id")
    if user_id:
        logging.debug(f"Optional user identified via X-User-Id: {user_id}")
    return user_id
