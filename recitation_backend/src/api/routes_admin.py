"""
Admin endpoints:
- GET /api/admin/stats
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.api.auth import Identity, authorize, get_current_identity
from src.api.db import db_session_dep
from src.api.models import REPORT_PENDING, ROLE_ADMIN, Playlist, Report, User
from src.api.schemas import AdminStatsResponse

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get(
    "/stats",
    response_model=AdminStatsResponse,
    summary="Aggregate statistics",
    description="Total users, total playlists and pending reports. Admin only.",
    operation_id="admin_stats",
)
def stats(identity: Identity = Depends(get_current_identity), db: Session = Depends(db_session_dep)) -> AdminStatsResponse:
    authorize(identity, role=ROLE_ADMIN)

    return AdminStatsResponse(
        users=db.execute(select(func.count()).select_from(User)).scalar_one(),
        playlists=db.execute(select(func.count()).select_from(Playlist)).scalar_one(),
        pending_reports=db.execute(
            select(func.count()).select_from(Report).where(Report.status == REPORT_PENDING)
        ).scalar_one(),
    )
