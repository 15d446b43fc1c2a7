"""Response schemas for hydrated users and streams."""

from pydantic import BaseModel, ConfigDict


class ThemeResponse(BaseModel):
    id: int
    dark_mode: bool


class UserResponse(BaseModel):
    """User snapshot embedded in comments, reports and streams."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str
    description: str
    theme: ThemeResponse
    icon_hash: str


class TagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class StreamResponse(BaseModel):
    """Stream snapshot with its hydrated owner and tags."""

    id: int
    owner: UserResponse
    title: str
    description: str
    playlist_url: str
    thumbnail_url: str
    tags: list[TagResponse]
    start_at: int
    end_at: int
