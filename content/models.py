# src/content/models.py
from sqlalchemy import Column, Integer, String, ForeignKey, Text, Boolean, DateTime, JSON
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime
from typing import Optional
from uuid import uuid4


def _uuid() -> str:
    return str(uuid4())


class Author(Base):
    """Represents a writer or artist whose works are published."""
    __tablename__ = "authors"

    id: str = Column(String(36), primary_key=True, default=_uuid)
    name: str = Column(String, unique=True, index=True, nullable=False)
    bio: Optional[str] = Column(Text, nullable=True)
    profile_image_url: Optional[str] = Column(String, nullable=True)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    contents = relationship("Content", back_populates="author")


class Content(Base):
    """Represents a published creative work in one of the fixed categories."""
    __tablename__ = "contents"

    id: str = Column(String(36), primary_key=True, default=_uuid)
    title: str = Column(String, nullable=False)
    content: str = Column(Text, nullable=False)
    category: str = Column(String, index=True, nullable=False)  # essay, poetry, photo, calligraphy, video
    author_name: str = Column(String, index=True, nullable=False)
    author_id: Optional[str] = Column(String(36), ForeignKey("authors.id", ondelete="SET NULL"), nullable=True)
    created_at: datetime = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    is_published: bool = Column(Boolean, nullable=False, default=True)
    featured: bool = Column(Boolean, nullable=False, default=False)
    view_count: int = Column(Integer, nullable=False, default=0)
    likes_count: int = Column(Integer, nullable=False, default=0)

    # poetry
    original_text: Optional[str] = Column(Text, nullable=True)
    translation: Optional[str] = Column(Text, nullable=True)
    # photo, calligraphy
    image_url: Optional[str] = Column(String, nullable=True)
    image_exif: Optional[dict] = Column(JSON, nullable=True)
    artwork_size: Optional[str] = Column(String, nullable=True)
    artwork_material: Optional[str] = Column(String, nullable=True)
    # video
    video_url: Optional[str] = Column(String, nullable=True)
    video_platform: Optional[str] = Column(String, nullable=True)  # youtube, vimeo, other
    performance_date: Optional[str] = Column(String, nullable=True)
    performance_venue: Optional[str] = Column(String, nullable=True)

    thumbnail_url: Optional[str] = Column(String, nullable=True)
    meta_description: Optional[str] = Column(String, nullable=True)

    # text-to-speech cache
    tts_url: Optional[str] = Column(Text, nullable=True)
    tts_duration: Optional[int] = Column(Integer, nullable=True)
    tts_status: str = Column(String, nullable=False, default="pending")  # pending, generating, completed, failed
    tts_generated_at: Optional[datetime] = Column(DateTime, nullable=True)
    tts_file_size: Optional[int] = Column(Integer, nullable=True)
    tts_chunks_count: Optional[int] = Column(Integer, nullable=True)

    author = relationship("Author", back_populates="contents")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan", passive_deletes=True)


class Comment(Base):
    """Represents a visitor comment on a content item."""
    __tablename__ = "comments"

    id: str = Column(String(36), primary_key=True, default=_uuid)
    content_id: str = Column(String(36), ForeignKey("contents.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id: str = Column(String, nullable=False)  # client address
    user_name: str = Column(String, nullable=False)
    body: str = Column(Text, nullable=False)
    password_hash: str = Column(String, nullable=False)
    is_reported: bool = Column(Boolean, nullable=False, default=False)
    is_deleted: bool = Column(Boolean, nullable=False, default=False)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    post = relationship("Content", back_populates="comments")
