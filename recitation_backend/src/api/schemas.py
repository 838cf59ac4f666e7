"""
Pydantic models (request/response shapes) for API endpoints.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset of stored timestamps; they are written as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDateTime = Annotated[datetime, AfterValidator(_as_utc)]


class AuthRegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, description="Display name (min 2 chars).")
    email: EmailStr = Field(..., description="User email address (unique).")
    password: str = Field(..., min_length=6, description="User password (min 6 chars).")

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class AuthLoginRequest(BaseModel):
    email: str = Field(..., description="User email address.")
    password: str = Field(..., description="User password.")


class UserPublic(BaseModel):
    """Public projection of a user; never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="User id.")
    name: str = Field(..., description="Display name.")
    email: str = Field(..., description="Email address.")
    role: str = Field(..., description="Either 'user' or 'admin'.")
    avatar: Optional[str] = Field(None, description="Avatar image URL.")


class PlaylistOwner(BaseModel):
    """Owner shown on a playlist page; unlike UserPublic it carries no email."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    role: str
    avatar: Optional[str] = None


class AuthTokenResponse(BaseModel):
    token: str = Field(..., description="JWT access token.")
    user: UserPublic = Field(..., description="The authenticated user.")


class PlaylistCreateRequest(BaseModel):
    title: str = Field(..., min_length=3, description="Playlist title (min 3 chars).")
    description: Optional[str] = Field(None, description="Free-form description.")
    category: Optional[str] = Field(None, description="Category, e.g. Morning or Sleep.")
    visibility: Literal["public", "private"] = Field("public", description="Listing visibility.")
    cover_image: Optional[str] = Field(None, description="Cover image URL; a placeholder is used if omitted.")


class PlaylistResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    cover_image: Optional[str] = None
    category: Optional[str] = None
    visibility: str
    created_by: int
    created_at: UtcDateTime


class PlaylistSummary(PlaylistResponse):
    """Catalog row: playlist plus creator info and counters."""

    creator_name: str
    creator_avatar: Optional[str] = None
    likes_count: int = 0
    tracks_count: int = 0


class TrackCreateRequest(BaseModel):
    playlist_id: int = Field(..., description="Target playlist id.")
    surah_name: str = Field(..., min_length=1, description="Surah name.")
    reciter: str = Field(..., min_length=1, description="Reciter name.")
    audio_url: HttpUrl = Field(..., description="Public URL of the audio file.")
    duration: Optional[int] = Field(None, ge=0, description="Duration in seconds.")


class TrackResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    playlist_id: int
    surah_name: str
    reciter: str
    audio_url: str
    duration: Optional[int] = None
    order_index: int


class CommentCreateRequest(BaseModel):
    text: str = Field(..., description="Comment body (required, non-empty).")


class CommentResponse(BaseModel):
    id: int
    playlist_id: int
    user_id: int
    text: str
    created_at: UtcDateTime
    user_name: str
    user_avatar: Optional[str] = None


class PlaylistDetailResponse(PlaylistResponse):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    creator_name: str
    creator_avatar: Optional[str] = None
    creator: PlaylistOwner
    likes_count: int = 0
    tracks: List[TrackResponse] = []
    comments: List[CommentResponse] = []
    is_liked: bool = Field(False, alias="isLiked")


class LikeToggleResponse(BaseModel):
    success: bool = True
    liked: bool
    likes_count: int


class SuccessResponse(BaseModel):
    success: bool = True


class AdminStatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    users: int
    playlists: int
    pending_reports: int = Field(..., alias="pendingReports")
