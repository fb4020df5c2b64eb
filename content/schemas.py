# src/content/schemas.py
import math
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, Dict, List


class Pagination(BaseModel):
    """Page position of a listing."""
    current_page: int
    total_pages: int
    total_count: int
    page_size: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, page_size: int, total_count: int) -> "Pagination":
        total_pages = math.ceil(total_count / page_size) if total_count else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_count=total_count,
            page_size=page_size,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )

    @classmethod
    def empty(cls, page_size: int, page: int = 1) -> "Pagination":
        return cls.build(page, page_size, 0)


class ContentForm(BaseModel):
    """Values submitted from the admin content editor.

    Everything is optional so a rejected form can be shown again exactly as
    it was entered.
    """
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    author_name: Optional[str] = None
    author_id: Optional[str] = None
    is_published: bool = True
    featured: bool = False
    # poetry
    original_text: Optional[str] = None
    translation: Optional[str] = None
    # photo, calligraphy
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    artwork_size: Optional[str] = None
    artwork_material: Optional[str] = None
    # video
    video_url: Optional[str] = None
    video_platform: Optional[str] = None
    performance_date: Optional[str] = None
    performance_venue: Optional[str] = None

    @classmethod
    def from_form(cls, data) -> "ContentForm":
        """Build from multipart form data, treating blank fields as missing."""
        values = {}
        for name in cls.model_fields:
            raw = data.get(name)
            if isinstance(raw, str):
                values[name] = raw if raw.strip() else None
        values["is_published"] = data.get("is_published", "true") in ("true", "on", "1")
        values["featured"] = data.get("featured") in ("true", "on", "1")
        return cls(**values)


class CommentCreate(BaseModel):
    """Schema for creating a visitor comment."""
    author_name: str = ""
    password: str = ""
    content: str = ""


class LikeResponse(BaseModel):
    success: bool
    message: str
    likes_count: Optional[int] = None


class SearchResult(BaseModel):
    """Row of the instant search dropdown."""
    id: str
    title: str
    author_name: str
    category: str
    category_info: Dict[str, str] = Field(serialization_alias="categoryInfo")
    view_count: int
    likes_count: int
    created_at: datetime


class SearchResponse(BaseModel):
    results: List[SearchResult] = []
    error: Optional[str] = None


class CategoryCount(BaseModel):
    category: str
    name: str
    icon: str
    count: int
