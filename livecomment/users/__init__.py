"""Read-only user and stream data used to hydrate responses."""

from .schemas import StreamResponse, TagResponse, ThemeResponse, UserResponse
from .service import HydrationError, Hydrator


__all__ = [
    "HydrationError",
    "Hydrator",
    "StreamResponse",
    "TagResponse",
    "ThemeResponse",
    "UserResponse",
]
