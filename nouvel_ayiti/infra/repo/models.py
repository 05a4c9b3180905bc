"""SQLAlchemy models for the relational content store."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase


def _now() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles SQLAlchemy."""

    metadata = MetaData()


class UserORM(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)


class ArticleORM(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=False)
    cover_image = Column(Text, nullable=True)
    category = Column(String(255), nullable=False, index=True)
    author = Column(String(255), nullable=False)
    published_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    view_count = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)
    language = Column(String(2), nullable=False, index=True)


class PollORM(Base):
    """Sondage; les compteurs vivent dans `poll_results` (une ligne par option)."""

    __tablename__ = "polls"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=False, default=list)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    language = Column(String(2), nullable=False, index=True)


class PollResultORM(Base):
    __tablename__ = "poll_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    poll_id = Column(Integer, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    option = Column(Text, nullable=False)
    votes = Column(Integer, nullable=False, default=0)

    __table_args__ = (UniqueConstraint("poll_id", "option", name="uq_poll_option"),)


class VideoORM(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    thumbnail_url = Column(Text, nullable=False)
    video_url = Column(Text, nullable=False)
    duration = Column(String(32), nullable=False)
    published_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    language = Column(String(2), nullable=False, index=True)
    category = Column(String(255), nullable=True)
    author = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)


class CategoryORM(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    label = Column(String(255), nullable=False)
    language = Column(String(2), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    __table_args__ = (UniqueConstraint("name", "language", name="uq_category_name_language"),)


class SubcategoryORM(Base):
    __tablename__ = "subcategories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False
    )
    name = Column(String(255), nullable=False)
    label = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
