"""
Schema bootstrap and seed data.

Creates the tables, a default admin account and two sample playlists. Every step
is idempotent, so it is safe to run on each startup:

    python -m src.api.seed
"""

from __future__ import annotations

import logging
import os

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from src.api.auth import hash_password
from src.api.models import ROLE_ADMIN, VISIBILITY_PUBLIC, Base, Playlist, Track, User

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"
ADMIN_NAME = "Admin User"

SEED_PLAYLISTS = [
    {
        "title": "Morning Azkar & Surahs",
        "description": "Beautiful recitations to start your day with barakah.",
        "category": "Morning",
        "cover_image": "https://images.unsplash.com/photo-1564121211835-e88c852648ab?w=800&q=80",
        "tracks": [
            ("Surah Yasin", "Mishary Rashid Alafasy", "https://server8.mp3quran.net/afs/036.mp3"),
            ("Surah Ar-Rahman", "Abdul Basit", "https://server7.mp3quran.net/basit/055.mp3"),
        ],
    },
    {
        "title": "Sleep Protection",
        "description": "Surah Al-Mulk and soothing recitations for sleep.",
        "category": "Sleep",
        "cover_image": "https://images.unsplash.com/photo-1532274402911-5a369e4c4bb5?w=800&q=80",
        "tracks": [
            ("Surah Al-Mulk", "Saad Al-Ghamdi", "https://server7.mp3quran.net/s_gmd/067.mp3"),
        ],
    },
]


def seed_enabled() -> bool:
    return os.getenv("SEED_ON_STARTUP", "true").strip().lower() not in ("0", "false", "no", "off")


def create_schema(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


def ensure_admin(db: Session) -> User:
    admin = db.execute(select(User).where(User.email == ADMIN_EMAIL)).scalar_one_or_none()
    if admin:
        return admin

    admin = User(
        name=ADMIN_NAME,
        email=ADMIN_EMAIL,
        password_hash=hash_password(ADMIN_PASSWORD),
        role=ROLE_ADMIN,
        avatar="https://ui-avatars.com/api/?name=Admin+User",
    )
    db.add(admin)
    db.flush()
    logger.info("seed: default admin user created email=%s", ADMIN_EMAIL)
    return admin


def seed_playlists(db: Session, owner: User) -> int:
    """Insert the sample playlists when the catalog is empty. Returns how many were added."""
    if db.execute(select(func.count()).select_from(Playlist)).scalar_one() > 0:
        return 0

    for spec in SEED_PLAYLISTS:
        playlist = Playlist(
            title=spec["title"],
            description=spec["description"],
            category=spec["category"],
            visibility=VISIBILITY_PUBLIC,
            cover_image=spec["cover_image"],
            created_by=owner.id,
        )
        playlist.tracks = [
            Track(surah_name=surah, reciter=reciter, audio_url=url, duration=0, order_index=index)
            for index, (surah, reciter, url) in enumerate(spec["tracks"], start=1)
        ]
        db.add(playlist)

    db.flush()
    logger.info("seed: %s playlists created", len(SEED_PLAYLISTS))
    return len(SEED_PLAYLISTS)


# PUBLIC_INTERFACE
def seed_database(db: Session) -> None:
    """Ensure the admin account and sample playlists exist."""
    admin = ensure_admin(db)
    seed_playlists(db, admin)


if __name__ == "__main__":
    from src.api.db import get_db_session, get_engine

    logging.basicConfig(level=logging.INFO)
    create_schema(get_engine())
    with get_db_session() as session:
        seed_database(session)
