"""
FastAPI application entrypoint for the recitation playlists backend.

Routes:
- /api/auth/*       registration, login, current user
- /api/playlists/*  catalog, detail, create/delete, likes, comments
- /api/tracks/*     add/delete tracks (playlist owner)
- /api/admin/*      aggregate statistics (admin)

CORS is enabled for local development (http://localhost:3000) and can be extended
via environment variables.
"""

from __future__ import annotations

import logging
import os as _os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.db import get_db_session, get_engine
from src.api.errors import register_exception_handlers
from src.api.routes_admin import router as admin_router
from src.api.routes_auth import router as auth_router
from src.api.routes_playlists import router as playlists_router
from src.api.routes_tracks import router as tracks_router
from src.api.seed import create_schema, seed_database, seed_enabled

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    logging.basicConfig(
        level=_os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(_app: FastAPI):
    _configure_logging()
    create_schema(get_engine())
    if seed_enabled():
        with get_db_session() as db:
            seed_database(db)
    logger.info("Recitation playlists API started")
    yield
    logger.info("Recitation playlists API stopped")


openapi_tags = [
    {"name": "Auth", "description": "Register, login and inspect the current user."},
    {"name": "Playlists", "description": "Public catalog, playlist detail, likes and comments."},
    {"name": "Tracks", "description": "Add and remove recitations in your own playlists."},
    {"name": "Admin", "description": "Aggregate statistics for administrators."},
    {"name": "Health", "description": "Service health and basic runtime info."},
]

app = FastAPI(
    title="Recitation Playlists API",
    description=(
        "Social playlist sharing for audio recitations.\n\n"
        "Authentication: `Authorization: Bearer <token>` from /api/auth/login or /api/auth/register.\n\n"
        "Errors are always JSON objects of the form {\"error\": ...}."
    ),
    version="1.0.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# CORS: allow the SPA dev server + configurable origins via env.
# Note: credentials=true requires explicit origins (not '*') in browsers, so we include common local dev URLs.
# Add additional origins via CORS_ALLOW_ORIGINS or ALLOWED_ORIGINS, as comma-separated values.
cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

_allow_origins_raw = _os.getenv("CORS_ALLOW_ORIGINS") or _os.getenv("ALLOWED_ORIGINS", "")
extra_origins = [o.strip() for o in _allow_origins_raw.split(",") if o.strip()]
cors_origins.extend(extra_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins if cors_origins else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(playlists_router)
app.include_router(tracks_router)
app.include_router(admin_router)


@app.get(
    "/",
    summary="Health check",
    description="Simple health check endpoint.",
    tags=["Health"],
)
def health_check():
    """Return basic service health information."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(_os.getenv("PORT", "3000")))
