"""Session verification for incoming requests."""

from .dependencies import CurrentUserId, get_current_user_id
from .security import create_access_token, decode_access_token


__all__ = [
    "CurrentUserId",
    "create_access_token",
    "decode_access_token",
    "get_current_user_id",
]
