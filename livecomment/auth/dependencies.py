"""FastAPI dependencies for authentication.

Provides the verified caller identity as a typed user id.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError

from livecomment.auth.security import decode_access_token, user_id_from_payload
from livecomment.core.context import set_user_id


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_current_user_id(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> int:
    """Verify the session token and return the caller's user id.

    Raises:
        HTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="session not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = user_id_from_payload(decode_access_token(token))
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="session expired or invalid",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    set_user_id(user_id)
    return user_id


CurrentUserId = Annotated[int, Depends(get_current_user_id)]
