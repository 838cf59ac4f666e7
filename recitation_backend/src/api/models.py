"""
SQLAlchemy models for users, playlists, tracks, likes, comments and reports.

Deleting a playlist removes its tracks, likes and comments, both through the ORM
relationship cascades and through ON DELETE CASCADE foreign keys.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

ROLE_USER = "user"
ROLE_ADMIN = "admin"

VISIBILITY_PUBLIC = "public"
VISIBILITY_PRIVATE = "private"

REPORT_PENDING = "pending"
REPORT_RESOLVED = "resolved"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class User(Base):
    """User account row (name, email, password hash, role, avatar)."""

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_USER)
    avatar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    playlists: Mapped[list["Playlist"]] = relationship("Playlist", back_populates="owner")


class Playlist(Base):
    __tablename__ = "playlists"
    __table_args__ = (
        CheckConstraint("visibility IN ('public', 'private')", name="ck_playlists_visibility"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    visibility: Mapped[str] = mapped_column(String(16), nullable=False, default=VISIBILITY_PUBLIC)
    created_by: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    owner: Mapped[User] = relationship("User", back_populates="playlists")
    tracks: Mapped[list["Track"]] = relationship(
        "Track",
        back_populates="playlist",
        cascade="all, delete-orphan",
        order_by="Track.order_index",
    )
    likes: Mapped[list["Like"]] = relationship("Like", cascade="all, delete-orphan")
    comments: Mapped[list["Comment"]] = relationship("Comment", back_populates="playlist", cascade="all, delete-orphan")


class Track(Base):
    """One recitation within a playlist; order_index is assigned max + 1 on insert."""

    __tablename__ = "tracks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    playlist_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("playlists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    surah_name: Mapped[str] = mapped_column(String(255), nullable=False)
    reciter: Mapped[str] = mapped_column(String(255), nullable=False)
    audio_url: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=0)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)

    playlist: Mapped[Playlist] = relationship("Playlist", back_populates="tracks")


class Like(Base):
    __tablename__ = "likes"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    playlist_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("playlists.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class Comment(Base):
    """Comment row; there is no edit or delete route, so rows are immutable."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    playlist_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("playlists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    playlist: Mapped[Playlist] = relationship("Playlist", back_populates="comments")
    user: Mapped[User] = relationship("User")


class Report(Base):
    """Moderation report.

    Only counted by the admin stats endpoint; nothing creates or resolves reports yet.
    """

    __tablename__ = "reports"
    __table_args__ = (CheckConstraint("status IN ('pending', 'resolved')", name="ck_reports_status"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)  # playlist, comment, user
    reference_id: Mapped[int] = mapped_column(Integer, nullable=False)
    reported_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=REPORT_PENDING)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
