"""SQLAlchemy models for users, posts and access tokens."""
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .capabilities import FileBearing, Searchable, SoftDeletes, Timestamps
from .session import Base

POST_STATUSES = ("draft", "published", "archived")


class User(Timestamps, SoftDeletes, Base):
    __tablename__ = "users"

    hidden_fields = ("password",)
    default_sort = "created_at"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password = Column(Text, nullable=False)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)


class Post(Timestamps, SoftDeletes, Searchable, FileBearing, Base):
    __tablename__ = "posts"

    searchable_fields = ("title", "content", "excerpt")
    file_fields = ("image",)
    storage_path = "posts"
    default_sort = "created_at"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(String(500), nullable=True)
    image = Column(String(255), nullable=True)
    status = Column(String(32), default="draft", nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", lazy="joined")


class AccessToken(Base):
    __tablename__ = "access_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    token_hash = Column(String(64), unique=True, nullable=False)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
