"""
Track endpoints (playlist owner only):
- POST /api/tracks
- DELETE /api/tracks/{id}

New tracks are appended after the playlist's current highest order_index.
Deleting a track never renumbers the remaining ones.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.api.auth import Identity, authorize, get_current_identity
from src.api.db import db_session_dep
from src.api.errors import NotFound
from src.api.models import Playlist, Track
from src.api.schemas import SuccessResponse, TrackCreateRequest, TrackResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tracks", tags=["Tracks"])


def next_order_index(db: Session, playlist_id: int) -> int:
    """Return one more than the playlist's highest order_index (1 for an empty playlist)."""
    current = db.execute(select(func.max(Track.order_index)).where(Track.playlist_id == playlist_id)).scalar()
    return (current or 0) + 1


@router.post(
    "",
    response_model=TrackResponse,
    summary="Add a track",
    description="Appends a recitation to a playlist owned by the caller.",
    operation_id="add_track",
)
def add_track(
    req: TrackCreateRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(db_session_dep),
) -> TrackResponse:
    playlist = db.get(Playlist, req.playlist_id)
    if not playlist:
        raise NotFound("Playlist not found")
    authorize(identity, owner_id=playlist.created_by, allow_admin=False)

    track = Track(
        playlist_id=playlist.id,
        surah_name=req.surah_name,
        reciter=req.reciter,
        audio_url=str(req.audio_url),
        duration=req.duration or 0,
        order_index=next_order_index(db, playlist.id),
    )
    db.add(track)
    db.commit()
    db.refresh(track)

    logger.info("track_added: track_id=%s playlist_id=%s order_index=%s", track.id, track.playlist_id, track.order_index)
    return TrackResponse.model_validate(track)


@router.delete(
    "/{track_id}",
    response_model=SuccessResponse,
    summary="Delete a track",
    operation_id="delete_track",
)
def delete_track(
    track_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(db_session_dep),
) -> SuccessResponse:
    track = db.get(Track, track_id)
    if not track:
        raise NotFound("Track not found")
    authorize(identity, owner_id=track.playlist.created_by, allow_admin=False)

    db.delete(track)
    db.commit()

    logger.info("track_deleted: track_id=%s user_id=%s", track_id, identity.id)
    return SuccessResponse()
