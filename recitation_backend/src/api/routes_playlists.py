"""
Playlist endpoints:
- GET /api/playlists (public catalog; optional search, category, sort)
- GET /api/playlists/{id} (detail; auth optional, used for isLiked)
- POST /api/playlists
- DELETE /api/playlists/{id} (owner or admin)
- POST /api/playlists/{id}/like (toggle)
- POST /api/playlists/{id}/comments
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.api.auth import Identity, authorize, get_current_identity, get_optional_identity
from src.api.db import db_session_dep
from src.api.errors import InternalError, NotFound, ValidationError
from src.api.models import VISIBILITY_PUBLIC, Comment, Like, Playlist, Track, User
from src.api.schemas import (
    CommentCreateRequest,
    CommentResponse,
    LikeToggleResponse,
    PlaylistCreateRequest,
    PlaylistDetailResponse,
    PlaylistOwner,
    PlaylistResponse,
    PlaylistSummary,
    SuccessResponse,
    TrackResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/playlists", tags=["Playlists"])

DEFAULT_COVER_IMAGE = "https://picsum.photos/seed/quran/400/400"
SORT_BY_LIKES = "likes"


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _get_playlist_or_404(db: Session, playlist_id: int) -> Playlist:
    playlist = db.get(Playlist, playlist_id)
    if not playlist:
        raise NotFound("Playlist not found")
    return playlist


def _likes_count(db: Session, playlist_id: int) -> int:
    return db.execute(select(func.count()).select_from(Like).where(Like.playlist_id == playlist_id)).scalar_one()


def _comment_response(comment: Comment, user: User) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        playlist_id=comment.playlist_id,
        user_id=comment.user_id,
        text=comment.text,
        created_at=comment.created_at,
        user_name=user.name,
        user_avatar=user.avatar,
    )


@router.get(
    "",
    response_model=List[PlaylistSummary],
    summary="List public playlists",
    description=(
        "Returns every public playlist. `search` matches title or description "
        "case-insensitively, `category` must match exactly, `sort=likes` orders by "
        "like count; otherwise newest first."
    ),
    operation_id="list_playlists",
)
def list_playlists(
    search: Optional[str] = Query(None, description="Substring of title or description."),
    category: Optional[str] = Query(None, description="Exact category."),
    sort: Optional[str] = Query(None, description="'likes' or omitted for newest first."),
    db: Session = Depends(db_session_dep),
) -> List[PlaylistSummary]:
    likes_count = (
        select(func.count())
        .select_from(Like)
        .where(Like.playlist_id == Playlist.id)
        .correlate(Playlist)
        .scalar_subquery()
        .label("likes_count")
    )
    tracks_count = (
        select(func.count())
        .select_from(Track)
        .where(Track.playlist_id == Playlist.id)
        .correlate(Playlist)
        .scalar_subquery()
        .label("tracks_count")
    )

    stmt = (
        select(Playlist, User.name, User.avatar, likes_count, tracks_count)
        .join(User, Playlist.created_by == User.id)
        .where(Playlist.visibility == VISIBILITY_PUBLIC)
    )

    if search:
        pattern = _like_pattern(search)
        stmt = stmt.where(
            or_(
                Playlist.title.ilike(pattern, escape="\\"),
                Playlist.description.ilike(pattern, escape="\\"),
            )
        )

    if category:
        stmt = stmt.where(Playlist.category == category)

    if sort == SORT_BY_LIKES:
        stmt = stmt.order_by(likes_count.desc(), Playlist.created_at.desc(), Playlist.id.desc())
    else:
        stmt = stmt.order_by(Playlist.created_at.desc(), Playlist.id.desc())

    rows = db.execute(stmt).all()
    return [
        PlaylistSummary(
            **PlaylistResponse.model_validate(playlist).model_dump(),
            creator_name=creator_name,
            creator_avatar=creator_avatar,
            likes_count=likes,
            tracks_count=tracks,
        )
        for playlist, creator_name, creator_avatar, likes, tracks in rows
    ]


@router.get(
    "/{playlist_id}",
    response_model=PlaylistDetailResponse,
    summary="Playlist detail",
    description="Playlist with its owner, ordered tracks, newest-first comments, like count and isLiked.",
    operation_id="get_playlist",
)
def get_playlist(
    playlist_id: int,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(db_session_dep),
) -> PlaylistDetailResponse:
    playlist = _get_playlist_or_404(db, playlist_id)
    owner = playlist.owner

    comment_rows = db.execute(
        select(Comment, User)
        .join(User, Comment.user_id == User.id)
        .where(Comment.playlist_id == playlist_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    ).all()

    is_liked = False
    if identity is not None:
        is_liked = db.get(Like, {"user_id": identity.id, "playlist_id": playlist_id}) is not None

    return PlaylistDetailResponse(
        **PlaylistResponse.model_validate(playlist).model_dump(),
        creator_name=owner.name,
        creator_avatar=owner.avatar,
        creator=PlaylistOwner.model_validate(owner),
        likes_count=_likes_count(db, playlist_id),
        tracks=[TrackResponse.model_validate(t) for t in playlist.tracks],
        comments=[_comment_response(c, u) for c, u in comment_rows],
        is_liked=is_liked,
    )


@router.post(
    "",
    response_model=PlaylistResponse,
    summary="Create a playlist",
    operation_id="create_playlist",
)
def create_playlist(
    req: PlaylistCreateRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(db_session_dep),
) -> PlaylistResponse:
    playlist = Playlist(
        title=req.title,
        description=req.description,
        category=req.category,
        visibility=req.visibility,
        cover_image=req.cover_image or DEFAULT_COVER_IMAGE,
        created_by=identity.id,
    )
    db.add(playlist)
    db.commit()
    db.refresh(playlist)

    logger.info("playlist_created: playlist_id=%s user_id=%s", playlist.id, identity.id)
    return PlaylistResponse.model_validate(playlist)


@router.delete(
    "/{playlist_id}",
    response_model=SuccessResponse,
    summary="Delete a playlist",
    description="Owner or admin only. Removes the playlist's tracks, likes and comments too.",
    operation_id="delete_playlist",
)
def delete_playlist(
    playlist_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(db_session_dep),
) -> SuccessResponse:
    playlist = _get_playlist_or_404(db, playlist_id)
    authorize(identity, owner_id=playlist.created_by)

    db.delete(playlist)
    db.commit()

    logger.info("playlist_deleted: playlist_id=%s user_id=%s", playlist_id, identity.id)
    return SuccessResponse()


@router.post(
    "/{playlist_id}/like",
    response_model=LikeToggleResponse,
    summary="Like or unlike a playlist",
    description="Likes the playlist if the caller has not liked it yet, otherwise removes the like.",
    operation_id="toggle_like",
)
def toggle_like(
    playlist_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(db_session_dep),
) -> LikeToggleResponse:
    _get_playlist_or_404(db, playlist_id)

    existing = db.get(Like, {"user_id": identity.id, "playlist_id": playlist_id})
    if existing is not None:
        db.delete(existing)
        db.commit()
        liked = False
    else:
        db.add(Like(user_id=identity.id, playlist_id=playlist_id))
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            # Only a duplicate key (a concurrent like won the race) means "liked".
            if db.get(Like, {"user_id": identity.id, "playlist_id": playlist_id}) is None:
                logger.exception("like_insert_failed: playlist_id=%s user_id=%s", playlist_id, identity.id)
                raise InternalError()
        liked = True

    likes = _likes_count(db, playlist_id)
    logger.info("like_toggled: playlist_id=%s user_id=%s liked=%s", playlist_id, identity.id, liked)
    return LikeToggleResponse(liked=liked, likes_count=likes)


@router.post(
    "/{playlist_id}/comments",
    response_model=CommentResponse,
    summary="Comment on a playlist",
    operation_id="add_comment",
)
def add_comment(
    playlist_id: int,
    req: CommentCreateRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(db_session_dep),
) -> CommentResponse:
    text = req.text.strip()
    if not text:
        raise ValidationError("Text is required")

    _get_playlist_or_404(db, playlist_id)

    comment = Comment(playlist_id=playlist_id, user_id=identity.id, text=text)
    db.add(comment)
    db.commit()
    db.refresh(comment)

    user = db.get(User, identity.id)
    return _comment_response(comment, user)
